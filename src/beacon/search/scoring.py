"""Multi-signal scorer.

Eight independent similarity components are computed for a (query, item)
pair and blended with a fixed weight table. Only components with a positive
value count towards the blend: a zero means "no evidence", not "irrelevant".
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Tuple

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from beacon.search.index import QueryFeatures, SearchIndex
from beacon.similarity import jaccard_similarity, levenshtein_distance

WEIGHTS: Mapping[str, float] = MappingProxyType(
    {
        "exact": 1.0,
        "prefix": 0.9,
        "word": 0.85,
        "substring": 0.75,
        "trigram": 0.6,
        "bigram": 0.4,
        "acronym": 0.7,
        "levenshtein": 0.5,
    }
)

FULL_PREFIX_SCORE = 0.9
PARTIAL_PREFIX_SCORE = 0.5
PARTIAL_PREFIX_LENGTH = 3
MIN_WORD_PREFIX_LENGTH = 3
ALL_WORDS_BONUS = 1.2
SUBSTRING_BASE = 0.7
SUBSTRING_LENGTH_SHARE = 0.3
ACRONYM_SCORE = 0.8
SHORT_QUERY_LENGTH = 10
WORD_SUBSTRING_BONUS = 1.1
WORD_SUBSTRING_MIN_WORD_MATCH = 0.8


class ScoreComponents(BaseModel):
    """Per-candidate similarity breakdown, serialized in camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    exact_match: float = 0.0
    prefix_match: float = 0.0
    word_match: float = 0.0
    substring_match: float = 0.0
    trigram_similarity: float = 0.0
    bigram_similarity: float = 0.0
    acronym_match: float = 0.0
    levenshtein_sim: float = 0.0
    final_score: float = 0.0


def _prefix_match(text: str, query: str) -> float:
    if text.startswith(query):
        return FULL_PREFIX_SCORE
    if len(query) >= PARTIAL_PREFIX_LENGTH and text.startswith(query[:PARTIAL_PREFIX_LENGTH]):
        return PARTIAL_PREFIX_SCORE
    return 0.0


def _word_match(candidate_words: Tuple[str, ...], query_words: Tuple[str, ...]) -> float:
    if not query_words:
        return 0.0
    matched = 0
    for q_word in query_words:
        for c_word in candidate_words:
            if c_word == q_word or (
                len(q_word) >= MIN_WORD_PREFIX_LENGTH and c_word.startswith(q_word)
            ):
                matched += 1
                break
    score = matched / len(query_words)
    if matched == len(query_words):
        score = min(score * ALL_WORDS_BONUS, 1.0)
    return score


def _substring_match(text: str, text_length: int, query: str) -> float:
    if text_length == 0 or query not in text:
        return 0.0
    return SUBSTRING_BASE + SUBSTRING_LENGTH_SHARE * (len(query) / text_length)


def _levenshtein_similarity(text: str, text_length: int, query: str) -> float:
    max_len = max(len(query), text_length)
    if max_len == 0:
        return 0.0
    return 1.0 - levenshtein_distance(query, text) / max_len


def calculate_score(entry: SearchIndex, query: QueryFeatures) -> ScoreComponents:
    """Score one candidate against precomputed query features."""
    text = entry.lowercase_text
    q = query.lowercase

    exact = 1.0 if text == q else 0.0
    prefix = _prefix_match(text, q)
    word = _word_match(entry.words, query.words)
    substring = _substring_match(text, entry.text_length, q)
    trigram = jaccard_similarity(query.trigrams, entry.trigrams)
    bigram = jaccard_similarity(query.bigrams, entry.bigrams)
    acronym = ACRONYM_SCORE if query.acronym and query.acronym == entry.acronym else 0.0
    levenshtein = _levenshtein_similarity(text, entry.text_length, q)

    weighted_sum = 0.0
    total_weight = 0.0
    for name, value in (
        ("exact", exact),
        ("prefix", prefix),
        ("word", word),
        ("substring", substring),
        ("trigram", trigram),
        ("bigram", bigram),
        ("acronym", acronym),
        ("levenshtein", levenshtein),
    ):
        if value > 0:
            weighted_sum += value * WEIGHTS[name]
            total_weight += WEIGHTS[name]

    final = 0.0
    if total_weight > 0:
        final = weighted_sum / total_weight
        if len(q) <= SHORT_QUERY_LENGTH and exact > 0:
            final = 1.0
        if word >= WORD_SUBSTRING_MIN_WORD_MATCH and substring > 0:
            final = min(final * WORD_SUBSTRING_BONUS, 1.0)

    return ScoreComponents(
        exact_match=exact,
        prefix_match=prefix,
        word_match=word,
        substring_match=substring,
        trigram_similarity=trigram,
        bigram_similarity=bigram,
        acronym_match=acronym,
        levenshtein_sim=levenshtein,
        final_score=min(final, 1.0),
    )
