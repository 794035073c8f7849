"""String and set similarity measures used by the scorer."""

from __future__ import annotations

from typing import AbstractSet, List


def jaccard_similarity(a: AbstractSet[str], b: AbstractSet[str]) -> float:
    """Return |a & b| / |a | b|.

    Two empty sets agree vacuously (1.0); a single empty set shares nothing (0.0).
    """
    if not a and not b:
        return 1.0
    if not a or not b:
        return 0.0
    intersection = len(a & b)
    union = len(a) + len(b) - intersection
    if union == 0:
        return 0.0
    return intersection / union


def levenshtein_distance(s1: str, s2: str) -> int:
    """Classic edit distance with unit insert, delete and substitute costs.

    Runs the full dynamic program over code points, keeping only the previous
    row of the matrix.
    """
    if s1 == s2:
        return 0
    if not s1:
        return len(s2)
    if not s2:
        return len(s1)

    previous: List[int] = list(range(len(s2) + 1))
    for i, c1 in enumerate(s1, start=1):
        current = [i] + [0] * len(s2)
        for j, c2 in enumerate(s2, start=1):
            cost = 0 if c1 == c2 else 1
            current[j] = min(
                previous[j] + 1,  # deletion
                current[j - 1] + 1,  # insertion
                previous[j - 1] + cost,  # substitution
            )
        previous = current
    return previous[-1]
