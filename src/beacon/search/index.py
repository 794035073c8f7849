"""Per-item precomputed search features.

Each item is normalized, tokenized and broken into n-grams exactly once, when
the dataset is supplied. Queries go through the same pipeline per search.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import FrozenSet, Generic, Iterable, Tuple, TypeVar

from beacon.exceptions import SearchError
from beacon.search.base_search import Searchable
from beacon.text import (
    create_char_ngrams,
    create_word_set,
    extract_acronym,
    extract_first_letters,
    extract_words,
    normalize_text,
)

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=Searchable)


@dataclass(frozen=True, slots=True)
class SearchIndex(Generic[T]):
    """Immutable precomputed features for one item."""

    item: T
    normalized_text: str
    lowercase_text: str
    words: Tuple[str, ...]
    word_set: FrozenSet[str]
    trigrams: FrozenSet[str]
    bigrams: FrozenSet[str]
    first_letters: str
    acronym: str
    text_length: int

    @classmethod
    def from_item(cls, item: T) -> "SearchIndex[T]":
        if not isinstance(item, Searchable):
            raise SearchError(
                f"{type(item).__name__} does not implement get_search_text()/get_search_fields()"
            )
        search_text = item.get_search_text()
        normalized = normalize_text(search_text)
        lowercase = normalized.lower()
        words = tuple(extract_words(lowercase))
        return cls(
            item=item,
            normalized_text=normalized,
            lowercase_text=lowercase,
            words=words,
            word_set=create_word_set(words),
            trigrams=create_char_ngrams(lowercase, 3),
            bigrams=create_char_ngrams(lowercase, 2),
            first_letters=extract_first_letters(words),
            acronym=extract_acronym(search_text),
            text_length=len(lowercase),
        )


@dataclass(frozen=True, slots=True)
class QueryFeatures:
    """Query-side counterpart of `SearchIndex`, built once per search."""

    raw: str
    normalized: str
    lowercase: str
    words: Tuple[str, ...]
    word_set: FrozenSet[str]
    trigrams: FrozenSet[str]
    bigrams: FrozenSet[str]
    acronym: str

    @classmethod
    def from_text(cls, query: str) -> "QueryFeatures":
        normalized = normalize_text(query)
        lowercase = normalized.lower()
        words = tuple(extract_words(lowercase))
        return cls(
            raw=query,
            normalized=normalized,
            lowercase=lowercase,
            words=words,
            word_set=create_word_set(words),
            trigrams=create_char_ngrams(lowercase, 3),
            bigrams=create_char_ngrams(lowercase, 2),
            # Acronyms come from the original-case query, not the normalized one
            acronym=extract_acronym(query),
        )


def build_index(items: Iterable[T]) -> Tuple[SearchIndex[T], ...]:
    """Precompute a `SearchIndex` per item, preserving input order."""
    index = tuple(SearchIndex.from_item(item) for item in items)
    logger.info("Built search index for %d items", len(index))
    return index
