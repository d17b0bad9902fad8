"""Heuristic fact extraction from search snippets and fetched page text.

Sentences are scored with purely lexical rules, sorted by score, and accepted
greedily while rejecting short fragments and near-duplicates of facts already
taken. The weights and thresholds below are hand-tuned.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Mapping, Sequence

from draftdesk.models.pipeline import ResearchFact
from draftdesk.tools.base_search import SearchResult

MIN_SENTENCE_CHARS = 15  # fragments this short or shorter are dropped
PAGE_SENTENCE_LIMIT = 20
PAGE_SCORE_MULTIPLIER = 0.8
MIN_FACT_CHARS = 30
DUPLICATE_OVERLAP_THRESHOLD = 0.6

MEDIUM_LENGTH_BONUS = 3
LONG_LENGTH_BONUS = 1
DIGIT_BONUS = 4
MONEY_PERCENT_BONUS = 3
FACTUAL_PHRASE_BONUS = 3
YEAR_BONUS = 2
QUESTION_PENALTY = -5
PROMOTIONAL_PENALTY = -10
BOILERPLATE_PENALTY = -10

SENTENCE_BOUNDARY = re.compile(r"(?<=[.!?])\s+")
DIGIT = re.compile(r"\d")
MONEY_OR_PERCENT = re.compile(r"[%$]")
FACTUAL_PHRASES = re.compile(
    r"according to|study|report|research|found that|data shows",
    re.IGNORECASE,
)
YEAR = re.compile(r"(?<!\d)20[0-2]\d(?!\d)")
PROMOTIONAL_PHRASES = re.compile(
    r"click here|sign up|subscribe|buy now|best ever",
    re.IGNORECASE,
)
BOILERPLATE_PHRASES = re.compile(r"cookie|privacy policy|consent", re.IGNORECASE)


@dataclass(slots=True)
class FactCandidate:
    sentence: str
    source_url: str
    source_title: str
    score: float


def split_sentences(text: str) -> list[str]:
    sentences = (s.strip() for s in SENTENCE_BOUNDARY.split(text))
    return [s for s in sentences if len(s) > MIN_SENTENCE_CHARS]


def score_sentence(sentence: str) -> int:
    """Score how factual and informative a sentence looks. Higher is better."""
    score = 0
    length = len(sentence)

    if 40 < length < 300:
        score += MEDIUM_LENGTH_BONUS
    elif length >= 300:
        score += LONG_LENGTH_BONUS

    if DIGIT.search(sentence):
        score += DIGIT_BONUS
    if MONEY_OR_PERCENT.search(sentence):
        score += MONEY_PERCENT_BONUS
    if FACTUAL_PHRASES.search(sentence):
        score += FACTUAL_PHRASE_BONUS
    if YEAR.search(sentence):
        score += YEAR_BONUS
    if sentence.endswith("?"):
        score += QUESTION_PENALTY
    if PROMOTIONAL_PHRASES.search(sentence):
        score += PROMOTIONAL_PENALTY
    if BOILERPLATE_PHRASES.search(sentence):
        score += BOILERPLATE_PENALTY

    return score


def normalize_sentence(sentence: str) -> str:
    return re.sub(r"\s+", " ", sentence.lower()).strip()


def word_overlap_ratio(a: str, b: str) -> float:
    """|A ∩ B| / min(|A|, |B|) over whitespace-separated word sets."""
    words_a = set(a.split())
    words_b = set(b.split())
    if not words_a or not words_b:
        return 0.0
    return len(words_a & words_b) / min(len(words_a), len(words_b))


def is_near_duplicate(normalized: str, accepted: Sequence[str]) -> bool:
    return any(
        word_overlap_ratio(normalized, existing) > DUPLICATE_OVERLAP_THRESHOLD
        for existing in accepted
    )


def build_candidates(
    results: Sequence[SearchResult],
    page_texts: Mapping[str, str],
) -> list[FactCandidate]:
    candidates: list[FactCandidate] = []
    for result in results:
        for sentence in split_sentences(result.snippet):
            candidates.append(
                FactCandidate(
                    sentence=sentence,
                    source_url=result.url,
                    source_title=result.title,
                    score=score_sentence(sentence),
                )
            )

        page_text = page_texts.get(result.url)
        if not page_text:
            continue
        # Page text is noisier than a curated snippet.
        for sentence in split_sentences(page_text)[:PAGE_SENTENCE_LIMIT]:
            candidates.append(
                FactCandidate(
                    sentence=sentence,
                    source_url=result.url,
                    source_title=result.title,
                    score=score_sentence(sentence) * PAGE_SCORE_MULTIPLIER,
                )
            )
    return candidates


def extract_facts(
    results: Sequence[SearchResult],
    page_texts: Mapping[str, str],
    target_count: int,
) -> list[ResearchFact]:
    """Pick up to `target_count` distinct, high-scoring facts, best first."""
    if target_count <= 0:
        return []

    candidates = sorted(
        build_candidates(results, page_texts),
        key=lambda c: c.score,
        reverse=True,
    )

    facts: list[ResearchFact] = []
    accepted: list[str] = []
    for candidate in candidates:
        if len(facts) >= target_count:
            break
        normalized = normalize_sentence(candidate.sentence)
        if len(normalized) < MIN_FACT_CHARS:
            continue
        if is_near_duplicate(normalized, accepted):
            continue
        accepted.append(normalized)
        facts.append(
            ResearchFact(
                fact=candidate.sentence,
                source_url=candidate.source_url,
                source_title=candidate.source_title,
            )
        )
    return facts
