"""Base models for device packets and retained records.

Every packet model inherits from :class:`PacketModel` which provides:

* ``alias_generator=to_camel`` so the firmware's camelCase keys map
  automatically to snake_case fields.
* A ``model_validator(mode="before")`` that drops non-finite floats
  (``NaN``, ``Infinity``) so the field default is used.
* A ``raw`` dict that captures the original payload, keeping any
  free-form nested fields for logging and display.
"""

from __future__ import annotations

import math
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


def utc_isoformat(value: datetime) -> str:
    """Format *value* as ISO-8601 UTC with millisecond precision and a ``Z`` suffix."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class HealthModel(BaseModel):
    """Frozen camelCase model shared by packets, nested blocks and records."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    @staticmethod
    def _clean_dict(values: dict[str, Any]) -> dict[str, Any]:
        """Drop ``None`` and non-finite float values from *values*."""
        cleaned: dict[str, Any] = {}
        for key, value in values.items():
            if value is None:
                continue
            if isinstance(value, float) and not math.isfinite(value):
                continue
            cleaned[key] = value
        return cleaned

    @model_validator(mode="before")
    @classmethod
    def _clean_values(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        return HealthModel._clean_dict(values)


class PacketModel(HealthModel):
    """Base for decoded device packets."""

    raw: dict[str, Any] = Field(default_factory=dict)
    """Original packet object as received.

    Always the validated input itself.  A ``"raw"`` key sent by the device
    is ordinary payload and ends up inside this dict, never in its place.
    """

    @model_validator(mode="before")
    @classmethod
    def _clean_values(cls, values: Any) -> Any:
        """Drop non-finite values and stash the raw payload."""
        if not isinstance(values, dict):
            return values
        original = dict(values)
        cleaned = HealthModel._clean_dict(original)
        cleaned["raw"] = original
        return cleaned
