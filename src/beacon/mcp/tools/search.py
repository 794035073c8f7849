"""Search tools for FastMCP.

Expose the hybrid searcher held in server state; responses use the
camelCase wire shape.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Optional

from fastmcp import FastMCP

from beacon.search.base_search import Filter
from beacon.search.engine import HybridSearcher
from beacon.search.filters import AllOf, FieldFilter


def _build_filter(fields: Optional[Dict[str, str]]) -> Optional[Filter]:
    if not fields:
        return None
    parts = [FieldFilter(field=str(k), value=str(v)) for k, v in fields.items()]
    if len(parts) == 1:
        return parts[0]
    return AllOf(*parts)


def register_search_tools(mcp: FastMCP, get_state: Callable[[], Any]) -> None:
    """Register search tools on the given FastMCP instance.

    The `get_state` callable should return an object with attribute
    `searcher` holding a `HybridSearcher`.
    """

    def _get_searcher() -> HybridSearcher:
        state = get_state()
        searcher = getattr(state, "searcher", None)
        if searcher is None:
            raise RuntimeError(
                "No dataset loaded. Set BEACON_DATASET__PATH to a JSON record file."
            )
        return searcher

    @mcp.tool
    def search_items(
        query: str,
        *,
        fields: Optional[Dict[str, str]] = None,
        top_n: Optional[int] = None,
        debug: Optional[bool] = None,
    ) -> Dict[str, Any]:
        """Fuzzy-search the loaded dataset.

        Parameters
        ----------
        query: str
            Free-text query.
        fields: dict[str, str] | None
            Exact (case-insensitive) field constraints, all of which must hold.
        top_n: int | None
            Number of results, clamped to 1-10 (default 1).
        debug: bool | None
            Include per-result score breakdowns.
        """
        outcome = _get_searcher().search(
            query, _build_filter(fields), top_n=top_n, debug=debug
        )
        return outcome.to_wire()

    @mcp.tool
    def item_count() -> int:
        """Number of indexed items."""
        return _get_searcher().item_count()

    @mcp.tool
    def set_min_similarity(value: float) -> float:
        """Update the minimum similarity threshold and return it."""
        searcher = _get_searcher()
        searcher.set_min_similarity(value)
        return searcher.get_min_similarity()
