"""Shared argument normalization for tool input models."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict


class ToolArguments(BaseModel):
    """Base model for tool arguments. Unknown keys are ignored."""

    model_config = ConfigDict(extra="ignore")


def coerce_text(value: Any) -> Optional[str]:
    """Normalize a scalar argument to text; None stays None."""
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "1" if value else ""
    if isinstance(value, (int, float)):
        return str(value)
    raise ValueError("expected a string")


def coerce_text_or_empty(value: Any) -> str:
    """Like ``coerce_text`` but maps None to the empty string."""
    return coerce_text(value) or ""
