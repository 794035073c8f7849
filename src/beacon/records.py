"""Generic searchable records and a JSON loader for them.

A record file is a JSON list of objects::

    [{"id": "1", "text": "The Go Programming Language", "fields": {"kind": "book"}}]

`id` and `fields` are optional; field values are coerced to strings.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from beacon.exceptions import DatasetError

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class Record:
    """Plain searchable item: primary text plus string-valued fields."""

    text: str
    fields: Dict[str, str] = field(default_factory=dict)
    id: Optional[str] = None

    def get_search_text(self) -> str:
        return self.text

    def get_search_fields(self) -> Mapping[str, str]:
        return self.fields


def record_from_dict(raw: Mapping[str, Any]) -> Record:
    text = raw.get("text")
    if not isinstance(text, str):
        raise DatasetError(f"Record is missing a string 'text': {raw!r}")
    fields = raw.get("fields") or {}
    if not isinstance(fields, Mapping):
        raise DatasetError(f"Record 'fields' must be an object: {raw!r}")
    rid = raw.get("id")
    return Record(
        text=text,
        fields={str(k): str(v) for k, v in fields.items()},
        id=None if rid is None else str(rid),
    )


def load_records(path: Union[str, Path]) -> List[Record]:
    """Read a JSON record file.

    Raises `DatasetError` when the file is unreadable, not JSON, or not a
    list of record objects.
    """
    p = Path(path)
    try:
        payload = json.loads(p.read_text(encoding="utf-8"))
    except OSError as e:
        raise DatasetError(f"Cannot read dataset file {p}: {e}") from e
    except json.JSONDecodeError as e:
        raise DatasetError(f"Dataset file {p} is not valid JSON: {e}") from e
    if not isinstance(payload, list):
        raise DatasetError(f"Dataset file {p} must contain a JSON list")
    records: List[Record] = []
    for raw in payload:
        if not isinstance(raw, Mapping):
            raise DatasetError(f"Dataset entries must be objects, got {type(raw).__name__}")
        records.append(record_from_dict(raw))
    logger.info("Loaded %d records from %s", len(records), p)
    return records
