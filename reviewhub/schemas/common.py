"""Shared schema pieces — strict request base and timestamp rendering."""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict


class StrictRequest(BaseModel):
    """Request body base: unknown fields rejected, no type coercion, strings stripped."""
    model_config = ConfigDict(
        extra="forbid", strict=True, str_strip_whitespace=True,
    )


def format_timestamp(value: datetime) -> str:
    """RFC 3339 in UTC with second precision; naive values are taken as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
