"""Rule-table article editor.

Applies grammar, clarity and redundancy rewrite tables, splits overlong
paragraphs, proposes tone-specific headlines and scores the result.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Callable

from draftdesk.models.pipeline import ArticleTone, EditChange, QualityScore

LONG_PARAGRAPH_WORDS = 120

Replacement = str | Callable[[re.Match[str]], str]


@dataclass(frozen=True)
class EditRule:
    pattern: re.Pattern[str]
    replacement: Replacement
    reason: str
    type: str


def _rule(pattern: str, replacement: Replacement, reason: str, change_type: str) -> EditRule:
    return EditRule(re.compile(pattern, re.IGNORECASE), replacement, reason, change_type)


def _its_contraction(match: re.Match[str]) -> str:
    lead = "It's" if match.group(1)[0].isupper() else "it's"
    return f"{lead} {match.group(2)}"


GRAMMAR_RULES: tuple[EditRule, ...] = (
    _rule(
        r"\b(its|it's)\s+(a|an|the|very|quite|not)\b",
        _its_contraction,
        "Corrected \"its\" to \"it's\" (contraction of \"it is\")",
        "grammar",
    ),
    _rule(r"\b(\w+)\s+\1\b", r"\1", "Removed accidental word duplication", "grammar"),
    _rule(r"[ \t]+,", ",", "Removed extra space before comma", "grammar"),
    _rule(r",[ \t]*,", ",", "Removed duplicate comma", "grammar"),
    _rule(r"\.[ \t]*\.", ".", "Removed duplicate period", "grammar"),
    _rule(r"[ \t]{2,}", " ", "Normalized extra whitespace", "grammar"),
)

CLARITY_RULES: tuple[EditRule, ...] = tuple(
    _rule(rf"\b{phrase}\b", replacement, reason, "clarity")
    for phrase, replacement, reason in (
        ("due to the fact that", "because", "Replaced wordy phrase with a concise alternative"),
        ("in order to", "to", "Simplified \"in order to\" to \"to\""),
        ("at this point in time", "now", "Simplified \"at this point in time\" to \"now\""),
        ("for the purpose of", "to", "Simplified \"for the purpose of\" to \"to\""),
        ("in the event that", "if", "Simplified \"in the event that\" to \"if\""),
        ("has the ability to", "can", "Simplified \"has the ability to\" to \"can\""),
        ("in light of the fact that", "because", "Simplified \"in light of the fact that\" to \"because\""),
        ("it is important to note that", "notably,", "Tightened filler phrase"),
        ("it is worth mentioning that", "notably,", "Tightened filler phrase"),
        ("a large number of", "many", "Simplified \"a large number of\" to \"many\""),
        ("the vast majority of", "most", "Simplified \"the vast majority of\" to \"most\""),
        ("in spite of", "despite", "Simplified \"in spite of\" to \"despite\""),
        ("with regard to", "regarding", "Simplified \"with regard to\" to \"regarding\""),
        ("on a daily basis", "daily", "Simplified \"on a daily basis\" to \"daily\""),
    )
)

REDUNDANCY_RULES: tuple[EditRule, ...] = tuple(
    _rule(rf"\b{phrase}\b", replacement, reason, "redundancy")
    for phrase, replacement, reason in (
        ("completely eliminate", "eliminate", "Removed redundant modifier before \"eliminate\""),
        ("past history", "history", "Removed redundant \"past\" before \"history\""),
        ("future plans", "plans", "Removed redundant \"future\" before \"plans\""),
        ("end result", "result", "Removed redundant \"end\" before \"result\""),
        ("free gift", "gift", "Removed redundant \"free\" before \"gift\""),
        ("each and every", "every", "Simplified \"each and every\" to \"every\""),
        ("first and foremost", "first", "Simplified \"first and foremost\" to \"first\""),
        ("basic fundamentals", "fundamentals", "Removed redundant \"basic\" before \"fundamentals\""),
        ("very unique", "unique", "Removed \"very\" before the absolute \"unique\""),
    )
)

HEADLINE_TEMPLATES: dict[str, tuple[str, ...]] = {
    "professional": (
        "Why {Topic} Matters More Than Ever",
        "{Topic}: The Trends Shaping What Comes Next",
        "What Leaders Need to Know About {Topic}",
    ),
    "casual": (
        "{Topic} Is Changing Fast: Here's the Scoop",
        "The Lowdown on {Topic}: What's Really Going On",
        "Everything You're Missing About {Topic}",
    ),
    "academic": (
        "Revisiting {Topic}: An Evidence-Based Perspective",
        "{Topic} Under the Microscope: Findings and Implications",
        "New Dimensions in {Topic} Research",
    ),
    "journalistic": (
        "{Topic}: The Numbers Behind the Headlines",
        "What the Data Reveals About {Topic}",
        "{Topic} at a Crossroads: Key Facts and What's Ahead",
    ),
}


@dataclass
class EditOutcome:
    edited_article: str
    edited_title: str
    headline_suggestions: list[str] = field(default_factory=list)
    changes: list[EditChange] = field(default_factory=list)
    quality_score: QualityScore | None = None


def _match_case(original: str, replacement: str) -> str:
    if original[:1].isupper() and replacement:
        return replacement[:1].upper() + replacement[1:]
    return replacement


def _expand(rule: EditRule, match: re.Match[str]) -> str:
    if callable(rule.replacement):
        return rule.replacement(match)
    return _match_case(match.group(0), match.expand(rule.replacement))


def apply_rules(text: str, rules: tuple[EditRule, ...]) -> tuple[str, list[EditChange]]:
    changes: list[EditChange] = []
    for rule in rules:
        def substitute(match: re.Match[str], rule: EditRule = rule) -> str:
            replaced = _expand(rule, match)
            if replaced != match.group(0):
                changes.append(
                    EditChange(
                        type=rule.type,
                        original=match.group(0),
                        replacement=replaced,
                        reason=rule.reason,
                    )
                )
            return replaced

        text = rule.pattern.sub(substitute, text)
    return text, changes


def split_sentences(text: str) -> list[str]:
    return re.split(r"(?<=[.!?])\s+", text)


def improve_structure(article: str) -> tuple[str, list[EditChange]]:
    """Split paragraphs longer than LONG_PARAGRAPH_WORDS at the middle sentence."""
    changes: list[EditChange] = []
    improved: list[str] = []

    for paragraph in re.split(r"\n\n+", article):
        words = paragraph.split()
        if len(words) <= LONG_PARAGRAPH_WORDS:
            improved.append(paragraph)
            continue

        sentences = split_sentences(paragraph)
        middle = (len(sentences) + 1) // 2
        first_half = " ".join(sentences[:middle])
        second_half = " ".join(sentences[middle:])
        if not second_half:
            improved.append(paragraph)
            continue

        improved.extend([first_half, second_half])
        changes.append(
            EditChange(
                type="structure",
                original=paragraph[:60] + "...",
                replacement=first_half[:40] + "... [paragraph split]",
                reason=f"Split long paragraph ({len(words)} words) into two for better readability",
            )
        )

    return "\n\n".join(improved), changes


def suggest_headlines(topic: str, tone: ArticleTone) -> list[str]:
    templates = HEADLINE_TEMPLATES.get(tone, HEADLINE_TEMPLATES["professional"])
    capitalized = topic[:1].upper() + topic[1:]
    return [template.format(Topic=capitalized) for template in templates]


def score_article(article: str, change_count: int) -> QualityScore:
    sentences = [s for s in split_sentences(article) if len(s) > 5]
    words = article.split()
    avg_sentence_len = len(words) / max(len(sentences), 1)

    grammar = max(60, 95 - change_count * 2)

    # Ideal average sentence length sits between 8 and 30 words.
    clarity = 90.0
    if avg_sentence_len > 30:
        clarity -= (avg_sentence_len - 30) * 2
    if avg_sentence_len < 8:
        clarity -= (8 - avg_sentence_len) * 3
    clarity = max(50.0, min(98.0, clarity))

    paragraph_count = len(re.split(r"\n\n+", article))
    ideal_paragraphs = max(3, round(len(words) / 75))
    structure = max(55, 95 - abs(paragraph_count - ideal_paragraphs) * 5)

    opening_sentences = sentences[:10]
    starters = {s.split()[0].lower() for s in opening_sentences if s.split()}
    variety = len(starters) / max(min(len(sentences), 10), 1)
    engagement = round(variety * 80)
    if any(s.strip().endswith("?") for s in sentences):
        engagement += 10
    engagement = max(50, min(98, engagement))

    overall = round(grammar * 0.25 + clarity * 0.3 + structure * 0.2 + engagement * 0.25)
    return QualityScore(
        overall=overall,
        grammar=grammar,
        clarity=round(clarity),
        structure=structure,
        engagement=engagement,
    )


def edit_article(article: str, title: str, topic: str, tone: ArticleTone) -> EditOutcome:
    edited = article
    changes: list[EditChange] = []

    for rules in (GRAMMAR_RULES, CLARITY_RULES, REDUNDANCY_RULES):
        edited, rule_changes = apply_rules(edited, rules)
        changes.extend(rule_changes)

    edited, structure_changes = improve_structure(edited)
    changes.extend(structure_changes)

    headlines = suggest_headlines(topic or title, tone)
    edited_title = headlines[0]
    if edited_title != title:
        changes.append(
            EditChange(
                type="headline",
                original=title,
                replacement=edited_title,
                reason="Suggested a more engaging headline",
            )
        )

    return EditOutcome(
        edited_article=edited,
        edited_title=edited_title,
        headline_suggestions=headlines,
        changes=changes,
        quality_score=score_article(edited, len(changes)),
    )
