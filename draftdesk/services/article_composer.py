"""Rule-table article composer.

Turns ranked facts into a short cited article: an opening, fact paragraphs
with `[n]` citation markers, an optional context paragraph, a closing, and a
reference list. Phrase choice comes from per-tone kits and an injectable
`random.Random`.
"""
from __future__ import annotations

import random
import re
from dataclasses import dataclass, field
from typing import Sequence

from draftdesk.models.pipeline import ArticleCitation, ArticleTone, ResearchFact, ResearchSource

FACTS_PER_PARAGRAPH = 2
CONTEXT_PARAGRAPH_RATIO = 0.7


@dataclass(frozen=True)
class ToneKit:
    openings: tuple[str, ...]
    transitions: tuple[str, ...]
    closings: tuple[str, ...]
    citation_leads: tuple[str, ...]
    titles: tuple[str, ...]


TONE_KITS: dict[str, ToneKit] = {
    "professional": ToneKit(
        openings=(
            "{Topic} continues to change how organizations and professionals approach their core challenges.",
            "As priorities shift across industries, {topic} has become an area that decision-makers cannot ignore.",
        ),
        transitions=(
            "Furthermore,",
            "Significantly,",
            "Building on this,",
            "It is also worth noting that",
            "In addition,",
        ),
        closings=(
            "As {topic} keeps evolving, staying informed will matter for anyone who wants to keep a competitive edge.",
            "The developments around {topic} point to a trajectory that calls for ongoing attention and planning.",
        ),
        citation_leads=(
            "According to {source},",
            "As reported by {source},",
            "Research from {source} indicates that",
            "Data from {source} shows that",
        ),
        titles=(
            "{Topic}: Key Developments and What They Mean",
            "The State of {Topic}: An Overview",
        ),
    ),
    "casual": ToneKit(
        openings=(
            "If you have been paying attention lately, you have probably noticed {topic} popping up everywhere.",
            "So what is the deal with {topic}? There is more going on than you might think.",
        ),
        transitions=(
            "Here's the thing:",
            "What's interesting is that",
            "On top of that,",
            "And get this:",
            "It doesn't stop there.",
        ),
        closings=(
            "Bottom line? {Topic} is not going anywhere, so it is worth keeping an eye on.",
            "All in all, {topic} is one of those things worth staying curious about.",
        ),
        citation_leads=(
            "According to {source},",
            "As {source} points out,",
            "{source} notes that",
            "The folks at {source} report that",
        ),
        titles=(
            "What You Need to Know About {Topic}",
            "{Topic}: Here's What's Going On",
        ),
    ),
    "academic": ToneKit(
        openings=(
            "The domain of {topic} has attracted considerable scholarly attention, prompting a re-examination of established assumptions.",
            "Contemporary discourse on {topic} reflects a growing body of evidence that challenges prior frameworks.",
        ),
        transitions=(
            "Moreover,",
            "Notably,",
            "Complementing this finding,",
            "Of particular significance,",
            "Corroborating this perspective,",
        ),
        closings=(
            "In summation, the trajectory of {topic} underscores the need for continued interdisciplinary inquiry.",
            "The evidence reviewed here suggests that {topic} warrants sustained scholarly attention.",
        ),
        citation_leads=(
            "As documented by {source},",
            "Findings from {source} indicate that",
            "{source} has established that",
            "According to {source},",
        ),
        titles=(
            "A Contemporary Analysis of {Topic}",
            "{Topic}: Current Findings and Implications",
        ),
    ),
    "journalistic": ToneKit(
        openings=(
            "New developments in {topic} are drawing attention from experts, industry leaders and the public.",
            "From boardrooms to research labs, {topic} is making headlines as new data sharpens the picture.",
        ),
        transitions=(
            "Meanwhile,",
            "In a related development,",
            "Adding to the picture,",
            "At the same time,",
            "Reports also suggest that",
        ),
        closings=(
            "As the story around {topic} develops, observers say the coming months will be pivotal.",
            "With {topic} firmly in the spotlight, the conversation is far from over.",
        ),
        citation_leads=(
            "According to {source},",
            "As reported by {source},",
            "{source} found that",
            "A report from {source} reveals that",
        ),
        titles=(
            "Inside {Topic}: What the Latest Data Reveals",
            "{Topic} in Focus: Facts, Figures and What's Next",
        ),
    ),
}


@dataclass
class ComposedArticle:
    title: str
    article: str
    word_count: int
    citations: list[ArticleCitation] = field(default_factory=list)


def upper_first(text: str) -> str:
    return text[:1].upper() + text[1:]


def lower_first(text: str) -> str:
    # Leave acronyms ("NASA", "AI") alone.
    if len(text) > 1 and text[1].isupper():
        return text
    return text[:1].lower() + text[1:]


def clean_fact(text: str) -> str:
    cleaned = re.sub(r"\s+", " ", text).strip()
    if not re.search(r"[.!?]$", cleaned):
        cleaned += "."
    return cleaned


def count_words(text: str) -> int:
    return len(text.split())


def _fill(template: str, topic: str) -> str:
    return template.format(topic=topic, Topic=upper_first(topic))


def build_citations(facts: Sequence[ResearchFact]) -> dict[str, ArticleCitation]:
    """Number each distinct source URL in first-seen fact order."""
    citations: dict[str, ArticleCitation] = {}
    for fact in facts:
        if fact.source_url not in citations:
            citations[fact.source_url] = ArticleCitation(
                index=len(citations) + 1,
                source_title=fact.source_title,
                source_url=fact.source_url,
            )
    return citations


def _context_paragraph(
    topic: str,
    sources: Sequence[ResearchSource],
    kit: ToneKit,
    rng: random.Random,
) -> str:
    snippets = [s.snippet for s in sources if len(s.snippet) > 40][:2]
    transition = rng.choice(kit.transitions)
    if not snippets:
        return (
            f"{transition} the broader context around {topic} reveals ongoing change "
            "and growing relevance across several sectors."
        )

    parts = [clean_fact(re.split(r"(?<=[.!?])\s+", s)[0]) for s in snippets]
    paragraph = f"{transition} a broader view of {topic} shows that {lower_first(parts[0])}"
    if len(parts) > 1:
        paragraph += f" Further, {lower_first(parts[1])}"
    return paragraph


def compose_article(
    topic: str,
    facts: Sequence[ResearchFact],
    sources: Sequence[ResearchSource],
    tone: ArticleTone,
    *,
    target_word_count: int = 300,
    rng: random.Random | None = None,
) -> ComposedArticle:
    rng = rng or random.Random()
    kit = TONE_KITS[tone]
    citation_map = build_citations(facts)

    title = _fill(rng.choice(kit.titles), topic)
    paragraphs: list[str] = [_fill(rng.choice(kit.openings), topic)]

    groups = [
        list(facts[i : i + FACTS_PER_PARAGRAPH])
        for i in range(0, len(facts), FACTS_PER_PARAGRAPH)
    ]
    for group_index, group in enumerate(groups):
        sentences: list[str] = []
        for position, fact in enumerate(group):
            marker = f"[{citation_map[fact.source_url].index}]"
            body = clean_fact(fact.fact)
            if position == 0:
                lead_template = rng.choice(kit.citation_leads)
                if group_index > 0:
                    transition = kit.transitions[group_index % len(kit.transitions)]
                    if not transition.endswith("."):
                        lead_template = lower_first(lead_template)
                    lead = lead_template.format(source=fact.source_title)
                    sentences.append(f"{transition} {lead} {lower_first(body)} {marker}")
                else:
                    lead = lead_template.format(source=fact.source_title)
                    sentences.append(f"{lead} {lower_first(body)} {marker}")
            else:
                sentences.append(f"{upper_first(body)} {marker}")
        paragraphs.append(" ".join(sentences))

    if count_words(" ".join(paragraphs)) < target_word_count * CONTEXT_PARAGRAPH_RATIO:
        paragraphs.append(_context_paragraph(topic, sources, kit, rng))

    paragraphs.append(_fill(rng.choice(kit.closings), topic))

    citations = list(citation_map.values())
    references = "\n".join(f"[{c.index}] {c.source_title} - {c.source_url}" for c in citations)
    article = "\n\n".join(paragraphs) + "\n\n---\nSources:\n" + references

    return ComposedArticle(
        title=title,
        article=article,
        word_count=count_words(article),
        citations=citations,
    )
