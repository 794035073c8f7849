"""Ready-made filters over `Searchable.get_search_fields()`."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Tuple

from beacon.search.base_search import Filter, Searchable


@dataclass(frozen=True, slots=True)
class FieldFilter:
    """Match items whose auxiliary field equals a value."""

    field: str
    value: str
    case_sensitive: bool = False

    def matches(self, item: Any) -> bool:
        if not isinstance(item, Searchable):
            return False
        actual = item.get_search_fields().get(self.field)
        if actual is None:
            return False
        if self.case_sensitive:
            return str(actual) == self.value
        return str(actual).casefold() == self.value.casefold()

    def description(self) -> str:
        return f"{self.field}={self.value}"


class AllOf:
    """Conjunction of filters; an empty conjunction matches everything."""

    def __init__(self, *filters: Filter) -> None:
        self._filters: Tuple[Filter, ...] = tuple(filters)

    @property
    def filters(self) -> Tuple[Filter, ...]:
        return self._filters

    def matches(self, item: Any) -> bool:
        return all(f.matches(item) for f in self._filters)

    def description(self) -> str:
        return " AND ".join(f.description() for f in self._filters)
