# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Mirrowel

"""
Decoding of the session JSON the host writes to stdin on every render.
"""

import json
import math
from dataclasses import dataclass
from typing import Any, Optional


class SessionParseError(ValueError):
    """stdin did not contain a usable session document."""


@dataclass
class SessionInfo:
    """The fields of the session document the status line uses."""

    model_name: str = ""
    context_used_pct: Optional[float] = None

    @property
    def context_pct(self) -> float:
        """Context fill, with an absent reading counted as zero."""
        return self.context_used_pct if self.context_used_pct is not None else 0.0


def _section(data: dict, key: str) -> dict:
    value = data.get(key)
    return value if isinstance(value, dict) else {}


def _percentage(value: Any) -> Optional[float]:
    """A finite number, or None for anything else (inf, NaN, huge ints)."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        pct = float(value)
    except OverflowError:
        return None
    return pct if math.isfinite(pct) else None


def parse_session(raw: str) -> SessionInfo:
    """
    Parse the stdin document.

    Expected shape (other fields are ignored):
        {"model": {"display_name": "Opus"},
         "context_window": {"used_percentage": 42.5}}
    """
    try:
        data: Any = json.loads(raw)
    except ValueError as e:
        raise SessionParseError(f"parse stdin JSON: {e}") from e
    if not isinstance(data, dict):
        raise SessionParseError("parse stdin JSON: expected an object")

    name = _section(data, "model").get("display_name")
    pct = _section(data, "context_window").get("used_percentage")
    return SessionInfo(
        model_name=name if isinstance(name, str) else "",
        context_used_pct=_percentage(pct),
    )
