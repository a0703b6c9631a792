# =============================================================================
# core/serialization.py  —  Records → camelCase JSON-ready data
# =============================================================================
#
# The agent sees the same field names the Loom web app uses internally
# (thumbnailUrl, createdAt, nextCursor, ...).  This module is the one place
# where our snake_case dataclasses become those camelCase dicts.
#
# Fields that are None are dropped, so an absent optional field is simply
# missing from the tool output instead of showing up as null.
# =============================================================================

from dataclasses import fields, is_dataclass
from typing import Any

from core.models import PaginatedResult


def to_camel(name: str) -> str:
    """thumbnail_url -> thumbnailUrl"""
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def to_wire_dict(value: Any) -> Any:
    """Recursively convert dataclasses, dicts and lists for JSON output."""
    if isinstance(value, PaginatedResult):
        out = {"items": [to_wire_dict(item) for item in value.items]}
        if value.next_cursor:
            out["nextCursor"] = value.next_cursor
        out["hasMore"] = value.has_more
        return out

    if is_dataclass(value) and not isinstance(value, type):
        return {
            to_camel(f.name): to_wire_dict(getattr(value, f.name))
            for f in fields(value)
            if getattr(value, f.name) is not None
        }

    if isinstance(value, dict):
        return {
            to_camel(key) if isinstance(key, str) else key: to_wire_dict(item)
            for key, item in value.items()
            if item is not None
        }

    if isinstance(value, (list, tuple)):
        return [to_wire_dict(item) for item in value]

    return value
