"""Utility helpers shared across modules."""

from __future__ import annotations

import base64
import re
from datetime import UTC, datetime
from typing import Sequence

ICS_TIMESTAMP_FORMAT = "%Y%m%dT%H%M%SZ"


def ensure_utc(dt: datetime) -> datetime:
    """Force a datetime into UTC without altering instant."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def ics_timestamp(dt: datetime) -> str:
    """Render an instant in the basic UTC form calendars expect (20240615T120000Z)."""
    return ensure_utc(dt).strftime(ICS_TIMESTAMP_FORMAT)


def b64encode_text(text: str) -> str:
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


def b64encode_bytes(payload: bytes) -> str:
    return base64.b64encode(payload).decode("ascii")


def split_list(value: str | Sequence[str] | None, delimiters: str = ",") -> list[str]:
    """Turn delimiter-separated strings into cleaned lists, dropping blanks."""
    if value is None:
        return []
    if isinstance(value, str):
        items = re.split(f"[{re.escape(delimiters)}]", value)
    else:
        items = list(value)
    return [item.strip() for item in items if item and item.strip()]


def parse_key_values(value: str | None) -> dict[str, str]:
    """Parse ``key=value,key2=value2`` into an ordered mapping.

    Pairs are split on the first ``=`` only; pairs without one are skipped.
    """
    result: dict[str, str] = {}
    for pair in split_list(value):
        key, sep, val = pair.partition("=")
        if not sep or not key.strip():
            continue
        result[key.strip()] = val.strip()
    return result
