"""
Search/filter over the storage listing joined with the metadata snapshot.

- join_listing: one entry per directory name, metadata spread in when known
- filter_files: conjunction of the optional criteria, listing order kept

Policies:
- a size bound is read like parseInt: leading integer prefix, ignored if none
- a date bound that cannot be parsed fails every record that has a created time
- an orphan entry (no metadata) fails a type filter; size and date bounds
  skip it, so it stays in the results
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional

from filekeeper.services.metadata import FileMetadata

_INT_PREFIX = re.compile(r"\s*([+-]?\d+)")


@dataclass
class SearchCriteria:
    query: Optional[str] = None
    type: Optional[str] = None
    min_size: Optional[int] = None
    max_size: Optional[int] = None
    date_from: Optional[str] = None
    date_to: Optional[str] = None

    @classmethod
    def from_params(
        cls,
        query: Optional[str] = None,
        type: Optional[str] = None,
        min_size: Optional[str] = None,
        max_size: Optional[str] = None,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
    ) -> "SearchCriteria":
        # empty query-string values behave as if the parameter was absent
        return cls(
            query=query or None,
            type=type or None,
            min_size=_parse_size("minSize", min_size),
            max_size=_parse_size("maxSize", max_size),
            date_from=date_from or None,
            date_to=date_to or None,
        )


def _parse_size(label: str, raw: Optional[str]) -> Optional[int]:
    if not raw:
        return None
    m = _INT_PREFIX.match(raw)
    if m is None:
        logging.warning(f"Ignoring non-integer {label}={raw!r}")
        return None
    return int(m.group(1))


def parse_date(raw: str) -> Optional[datetime]:
    """ISO-8601 date or date-time; naive values are read as UTC."""
    try:
        value = datetime.fromisoformat(raw.strip())
    except ValueError:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def join_listing(names: Iterable[str], snapshot: Mapping[str, FileMetadata]) -> List[Dict[str, Any]]:
    out = []
    for name in names:
        record = snapshot.get(name)
        entry: Dict[str, Any] = {"filename": name}
        if record is not None:
            entry.update(record.to_json())
        out.append(entry)
    return out


def _compact_json(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def _matches(entry: Dict[str, Any], c: SearchCriteria,
             date_from: Optional[datetime], date_to: Optional[datetime]) -> bool:
    if c.query:
        needle = c.query.lower()
        in_name = needle in entry["filename"].lower()
        custom = entry.get("customMetadata")
        in_custom = custom is not None and needle in _compact_json(custom).lower()
        if not (in_name or in_custom):
            return False

    if c.type and entry.get("type") != c.type:
        return False

    # orphans carry no size or created time; bounds on them pass through
    size = entry.get("size")
    if size is not None:
        if c.min_size is not None and size < c.min_size:
            return False
        if c.max_size is not None and size > c.max_size:
            return False

    created = parse_date(entry["created"]) if entry.get("created") else None
    if created is not None and (c.date_from or c.date_to):
        if c.date_from and (date_from is None or created < date_from):
            return False
        if c.date_to and (date_to is None or created > date_to):
            return False

    return True


def filter_files(entries: Iterable[Dict[str, Any]], criteria: SearchCriteria) -> List[Dict[str, Any]]:
    date_from = parse_date(criteria.date_from) if criteria.date_from else None
    date_to = parse_date(criteria.date_to) if criteria.date_to else None
    if criteria.date_from and date_from is None:
        logging.warning(f"Unparseable dateFrom={criteria.date_from!r}; only orphans can match")
    if criteria.date_to and date_to is None:
        logging.warning(f"Unparseable dateTo={criteria.date_to!r}; only orphans can match")

    return [e for e in entries if _matches(e, criteria, date_from, date_to)]
