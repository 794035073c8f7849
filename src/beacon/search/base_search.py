"""Abstract search interface and the contracts callers implement.

Items expose their searchable text plus auxiliary fields; filters are
predicates over items with a human-readable description. `BaseSearch`
is the minimal surface a search backend offers.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Iterable, Mapping, Optional, Protocol, runtime_checkable


@runtime_checkable
class Searchable(Protocol):
    """Minimal protocol for searchable items."""

    def get_search_text(self) -> str:
        """Primary text the item is matched against."""
        ...

    def get_search_fields(self) -> Mapping[str, str]:
        """Auxiliary field name -> value pairs usable by filters."""
        ...


@runtime_checkable
class Filter(Protocol):
    """Pre-scoring gate over items."""

    def matches(self, item: Any) -> bool:
        ...

    def description(self) -> str:
        ...


class BaseSearch(ABC):
    """Abstract interface for in-memory search implementations."""

    @abstractmethod
    def rebuild(self, items: Iterable[Searchable]) -> None:
        """Replace the dataset and rebuild its index."""

    @abstractmethod
    def item_count(self) -> int:
        """Number of indexed items."""

    @abstractmethod
    def search(
        self,
        query: str,
        filters: Optional[Filter] = None,
        *,
        top_n: Optional[int] = None,
        debug: Optional[bool] = None,
    ) -> Any:
        """Execute a search query and return a response value."""
        raise NotImplementedError
