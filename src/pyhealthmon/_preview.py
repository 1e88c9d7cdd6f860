"""Helpers for safe diagnostic logging.

Rejected datagrams come from unauthenticated senders and may be arbitrarily
large or not text at all.  This module renders them into bounded, printable
previews before they are emitted in WARNING/DEBUG logs.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any


def preview_payload(payload: bytes, *, max_chars: int = 256) -> str:
    """Return a printable, truncated rendering of a raw datagram."""
    text = payload.decode("utf-8", errors="backslashreplace")
    if len(text) > max_chars:
        return f"{text[:max_chars]}…<truncated {len(payload)}b>"
    return text


def preview_for_log(value: Any, *, max_string: int = 256, _depth: int = 0) -> Any:
    """Return a bounded copy of *value* suitable for debug logs."""
    if _depth > 20:
        return "<max-depth>"

    if value is None:
        return None

    if isinstance(value, str):
        if len(value) > max_string:
            return f"{value[:max_string]}…<truncated>"
        return value

    if isinstance(value, (int, float, bool)):
        return value

    if isinstance(value, (bytes, bytearray)):
        return preview_payload(bytes(value), max_chars=max_string)

    if isinstance(value, Mapping):
        return {
            str(k): preview_for_log(v, max_string=max_string, _depth=_depth + 1) for k, v in value.items()
        }

    if isinstance(value, Sequence):
        return [preview_for_log(v, max_string=max_string, _depth=_depth + 1) for v in value]

    # Fallback: represent unknown objects without dumping internals.
    return repr(value)
