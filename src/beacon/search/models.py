"""Response and request shapes for the hybrid searcher.

A search returns exactly one of `SearchResponse` (single best match),
`MultiSearchResponse` (ranked list) or `SearchFailure` (no results, with a
reason). `to_wire()` produces the camelCase JSON-ready payload.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, SerializerFunctionWrapHandler, field_serializer
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticSerializationError

from beacon.search.base_search import Filter, Searchable
from beacon.search.scoring import ScoreComponents


class _WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        arbitrary_types_allowed=True,
    )

    def to_wire(self) -> Dict[str, Any]:
        """Dump with camelCase keys, omitting unset optional fields."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class DebugInfo(_WireModel):
    """Insight into how a result was scored."""

    query_normalized: str
    score_components: Optional[ScoreComponents] = None
    filtered_candidates: int = 0
    total_candidates: int = 0


class SearchResponse(_WireModel):
    """A single ranked match."""

    item: Any
    similarity: float
    message: str
    error: Optional[str] = None
    debug: Optional[DebugInfo] = None

    @field_serializer("item", mode="wrap")
    def serialize_item(self, item: Any, handler: SerializerFunctionWrapHandler) -> Any:
        try:
            return handler(item)
        except PydanticSerializationError:
            # Plain caller classes: fall back to the searchable view
            if not isinstance(item, Searchable):
                raise
            return {
                "text": item.get_search_text(),
                "fields": dict(item.get_search_fields()),
            }


class MultiSearchResponse(_WireModel):
    """Up to ten ranked matches for one query."""

    results: List[SearchResponse]
    query: str
    total_found: int
    filters: Optional[str] = None
    message: str


class SearchFailure(_WireModel):
    """No results; `error` says why."""

    error: str


SearchOutcome = Union[SearchResponse, MultiSearchResponse, SearchFailure]


@dataclass(slots=True)
class SearchRequest:
    """Bundled search arguments, mirroring the wire request shape."""

    query: str
    filters: Optional[Filter] = None
    top_n: Optional[int] = None
    debug: Optional[bool] = None
