"""Text primitives shared by indexing and querying.

Everything here is pure: normalization, tokenization, padded character
n-grams and acronym extraction. The same functions run over item text at
index time and over the query at search time, so both sides are comparable.
"""

from __future__ import annotations

import re
import unicodedata
from typing import FrozenSet, Iterable, List

# Sentinel used to pad n-grams; never produced by normalized item text
NGRAM_PAD = "#"

# Words ignored when building acronyms (English and Spanish articles/conjunctions)
ACRONYM_STOPWORDS: FrozenSet[str] = frozenset(
    {"de", "del", "la", "el", "los", "las", "y", "e", "of", "the", "and", "or"}
)

_WORD_SEPARATORS = re.compile(r"[\s\-,.]+")


def normalize_text(text: str) -> str:
    """Return NFC-composed text with whitespace runs collapsed and trimmed.

    Letter case is preserved; callers lowercase separately when matching.
    """
    normalized = unicodedata.normalize("NFC", text or "")
    return " ".join(normalized.split())


def extract_words(text: str) -> List[str]:
    """Split text on whitespace and the `-`, `,` and `.` separators."""
    return [word for word in _WORD_SEPARATORS.split(text) if word]


def create_word_set(words: Iterable[str]) -> FrozenSet[str]:
    return frozenset(words)


def create_char_ngrams(text: str, n: int) -> FrozenSet[str]:
    """Build the set of padded character n-grams for `text`.

    Text shorter than `n` is its own single n-gram, so the result is never
    empty. Otherwise both ends are padded with `n - 1` sentinels so leading
    and trailing characters take part like interior ones.
    """
    if len(text) < n:
        return frozenset({text})
    padding = NGRAM_PAD * (n - 1)
    padded = f"{padding}{text}{padding}"
    return frozenset(padded[i : i + n] for i in range(len(padded) - n + 1))


def extract_first_letters(words: Iterable[str]) -> str:
    return "".join(word[0] for word in words if word)


def extract_acronym(text: str) -> str:
    """Derive a lowercase acronym from the capitalized words of `text`.

    `text` must be in its original case. Words are split on whitespace only
    and stopwords are skipped, so "The Lord of the Rings" gives "lr". An
    all-lowercase query has no capitals and therefore an empty acronym.
    """
    letters: List[str] = []
    for word in text.split():
        if word.lower() in ACRONYM_STOPWORDS:
            continue
        if word[0].isupper():
            letters.append(word[0])
    return "".join(letters).lower()
