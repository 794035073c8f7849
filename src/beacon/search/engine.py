"""Hybrid in-memory searcher.

Combines exact, prefix, word, substring, n-gram, acronym and edit-distance
signals over a precomputed index. Each call walks the same pipeline:

    validate query -> filter -> score -> coarse threshold -> sort -> top-N

All "no result" conditions come back as `SearchFailure` values.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Generic, Iterable, List, Optional, Sequence, Tuple, TypeVar

from beacon.search.base_search import BaseSearch, Filter, Searchable
from beacon.search.index import QueryFeatures, SearchIndex, build_index
from beacon.search.models import (
    DebugInfo,
    MultiSearchResponse,
    SearchFailure,
    SearchOutcome,
    SearchRequest,
    SearchResponse,
)
from beacon.search.scoring import ScoreComponents, calculate_score

if TYPE_CHECKING:
    from beacon.config import Settings

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=Searchable)

DEFAULT_MIN_SIMILARITY = 0.3
# Candidates survive at half the configured minimum; ranking does the rest
COARSE_THRESHOLD_FACTOR = 0.5
MIN_TOP_N = 1
MAX_TOP_N = 10

EMPTY_QUERY_MESSAGE = "Query cannot be empty"
NO_CANDIDATES_MESSAGE = "No items found matching the filter criteria"


def clamp_top_n(value: Any, default: int = MIN_TOP_N) -> int:
    """Coerce a requested result count into [1, 10].

    Missing or unconvertible values fall back to `default`; nothing raises.
    """
    if value is None:
        n = default
    else:
        try:
            n = int(value)
        except (TypeError, ValueError, OverflowError):
            n = default
    return max(MIN_TOP_N, min(MAX_TOP_N, n))


@dataclass(slots=True)
class _Scored:
    entry: SearchIndex
    components: ScoreComponents

    @property
    def score(self) -> float:
        return self.components.final_score


class HybridSearcher(BaseSearch, Generic[T]):
    """Ranks items by a weighted blend of string-similarity signals.

    The index is an immutable tuple that `rebuild()` swaps wholesale, and a
    search reads the index, threshold and debug flag once on entry, so
    concurrent searches never see a half-built dataset.
    """

    def __init__(
        self,
        items: Iterable[T] = (),
        *,
        min_similarity: float = DEFAULT_MIN_SIMILARITY,
        debug_mode: bool = False,
        default_top_n: int = MIN_TOP_N,
    ) -> None:
        self._lock = threading.Lock()
        self._index: Tuple[SearchIndex[T], ...] = build_index(items)
        self._min_similarity = float(min_similarity)
        self._debug_mode = bool(debug_mode)
        self._default_top_n = clamp_top_n(default_top_n)

    @classmethod
    def from_settings(cls, items: Iterable[T], settings: "Settings") -> "HybridSearcher[T]":
        cfg = settings.search
        return cls(
            items,
            min_similarity=cfg.min_similarity,
            debug_mode=cfg.debug,
            default_top_n=cfg.default_top_n,
        )

    # ----- Dataset -----

    def rebuild(self, items: Iterable[T]) -> None:
        """Index a new dataset, then swap it in atomically."""
        index = build_index(items)
        with self._lock:
            self._index = index

    def item_count(self) -> int:
        return len(self._index)

    @property
    def items(self) -> List[T]:
        return [entry.item for entry in self._index]

    # ----- Settings -----

    def get_min_similarity(self) -> float:
        return self._min_similarity

    def set_min_similarity(self, min_similarity: float) -> None:
        # No range check: values outside [0, 1] just loosen or tighten the cut
        with self._lock:
            self._min_similarity = float(min_similarity)

    def set_debug_mode(self, debug: bool) -> None:
        with self._lock:
            self._debug_mode = bool(debug)

    # ----- Search -----

    def execute(self, request: SearchRequest) -> SearchOutcome:
        return self.search(
            request.query, request.filters, top_n=request.top_n, debug=request.debug
        )

    def search(
        self,
        query: str,
        filters: Optional[Filter] = None,
        *,
        top_n: Optional[int] = None,
        debug: Optional[bool] = None,
    ) -> SearchOutcome:
        """Rank the dataset against `query`.

        Parameters
        ----------
        query: str
            Free text; must contain something other than whitespace.
        filters: Filter | None
            Optional gate applied before scoring.
        top_n: int | None
            Results wanted, clamped to [1, 10] and to the survivor count.
            One result gives a `SearchResponse`, more a `MultiSearchResponse`.
        debug: bool | None
            Attach score breakdowns even when engine debug mode is off.
        """
        with self._lock:
            index = self._index
            min_similarity = self._min_similarity
            debug_enabled = self._debug_mode or bool(debug)

        if not query or not query.strip():
            logger.debug("Rejected empty query")
            return SearchFailure(error=EMPTY_QUERY_MESSAGE)

        features = QueryFeatures.from_text(query)
        candidates = self._filter_candidates(index, filters)
        if not candidates:
            message = NO_CANDIDATES_MESSAGE
            if filters is not None:
                message = f"No items found matching filter: {filters.description()}"
            logger.debug("No candidates for %r: %s", query, message)
            return SearchFailure(error=message)

        threshold = min_similarity * COARSE_THRESHOLD_FACTOR
        scored = self._score_candidates(candidates, features, threshold)
        count = min(clamp_top_n(top_n, self._default_top_n), len(scored))
        logger.debug(
            "Query %r: %d/%d candidates above %.3f",
            query,
            len(scored),
            len(candidates),
            threshold,
        )
        if count == 0:
            return SearchFailure(error=f"No matches found for '{query}'")

        def _debug_for(result: _Scored) -> Optional[DebugInfo]:
            if not debug_enabled:
                return None
            return DebugInfo(
                query_normalized=features.normalized,
                score_components=result.components,
                filtered_candidates=len(candidates),
                total_candidates=len(index),
            )

        if count == 1:
            best = scored[0]
            return SearchResponse(
                item=best.entry.item,
                similarity=best.score,
                message=f"Found item with {best.score * 100:.2f}% similarity",
                debug=_debug_for(best),
            )

        results = [
            SearchResponse(
                item=result.entry.item,
                similarity=result.score,
                message=f"Rank {rank} with {result.score * 100:.2f}% similarity",
                debug=_debug_for(result),
            )
            for rank, result in enumerate(scored[:count], start=1)
        ]
        filter_desc = filters.description() if filters is not None else None
        suffix = f" with filter: {filter_desc}" if filter_desc is not None else ""
        return MultiSearchResponse(
            results=results,
            query=query,
            total_found=len(candidates),
            filters=filter_desc,
            message=f"Found {len(candidates)} items{suffix} matching '{query}'",
        )

    @staticmethod
    def _filter_candidates(
        index: Sequence[SearchIndex[T]], filters: Optional[Filter]
    ) -> Sequence[SearchIndex[T]]:
        if filters is None:
            return index
        return [entry for entry in index if filters.matches(entry.item)]

    @staticmethod
    def _score_candidates(
        candidates: Sequence[SearchIndex[T]], features: QueryFeatures, threshold: float
    ) -> List[_Scored]:
        scored: List[_Scored] = []
        for entry in candidates:
            components = calculate_score(entry, features)
            if components.final_score >= threshold:
                scored.append(_Scored(entry, components))
        # Stable: equal scores keep dataset order
        scored.sort(key=lambda s: s.score, reverse=True)
        return scored
