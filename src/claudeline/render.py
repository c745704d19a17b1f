# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Mirrowel

"""
Status line assembly.

Segments are built as Rich markup and printed through a Console pinned to
the standard 16-color palette, so the output is plain ANSI the host
terminal can show on one line.
"""

import io
import math
from datetime import datetime
from typing import List, Optional

from rich.console import Console
from rich.markup import escape
from rich.text import Text

from usage_quota.core.types import QuotaSnapshot


# =============================================================================
# DISPLAY CONFIGURATION
# =============================================================================

BAR_WIDTH = 5
BAR_FILLED = "█"
BAR_EMPTY = "░"
SEPARATOR = "[dim] │ [/dim]"
WARNING_ICON = "[yellow]⚠[/yellow]"

# Context bar turns yellow here, red at the compaction warning threshold
CONTEXT_CAUTION_PCT = 70

# Quota bar thresholds: (min percent, color), checked top-down
QUOTA_COLORS = (
    (90, "red"),
    (75, "bright_magenta"),
    (0, "bright_blue"),
)

FIVE_HOUR_RESET_FORMAT = "%H:%M"
SEVEN_DAY_RESET_FORMAT = "%a %H:%M"

ANSI_RESET = "\x1b[0m"
NBSP = "\u00a0"

# =============================================================================


def round_pct(value: float) -> int:
    """Round half up; the one rounding rule for every percentage shown."""
    return int(math.floor(value + 0.5))


def clamp_pct(pct: int) -> int:
    return max(0, min(100, pct))


def context_color(pct: int, warn_pct: int) -> str:
    if pct >= warn_pct:
        return "red"
    if pct >= CONTEXT_CAUTION_PCT:
        return "yellow"
    return "green"


def quota_color(pct: int) -> str:
    for threshold, color in QUOTA_COLORS:
        if pct >= threshold:
            return color
    return QUOTA_COLORS[-1][1]


def make_bar(pct: int, color: str) -> str:
    """Create a colored progress bar followed by the percentage."""
    pct = clamp_pct(pct)
    filled = pct * BAR_WIDTH // 100
    empty = BAR_WIDTH - filled
    return (
        f"[{color}]{BAR_FILLED * filled}[/{color}]"
        f"[dim]{BAR_EMPTY * empty}[/dim] {pct}%"
    )


def format_reset_time(resets_at: Optional[datetime], fmt: str) -> str:
    """Format a reset time in the local timezone; "" when unknown."""
    if resets_at is None:
        return ""
    try:
        return resets_at.astimezone().strftime(fmt)
    except (ValueError, OverflowError, OSError):
        return ""


def compact_name(name: str, max_len: int) -> str:
    """
    Shorten a name to max_len characters with a middle ellipsis.

    Examples:
        compact_name("main", 30) -> "main"
        compact_name("backup/feat-support-claudeline-progress-tracker", 30)
            -> "backup/feat-su…rogress-tracker"
    """
    if len(name) <= max_len:
        return name
    if max_len <= 0:
        return ""
    half = (max_len - 1) // 2
    tail = max_len - 1 - half
    return name[:half] + "…" + (name[-tail:] if tail else "")


def identity_segment(model: str, plan: str) -> str:
    if model and plan:
        return f"[cyan]{escape(f'[{model} | {plan}]')}[/cyan]"
    if model:
        return f"[cyan]{escape(f'[{model}]')}[/cyan]"
    return ""


def context_segment(used_pct: float, warn_pct: int) -> str:
    pct = clamp_pct(round_pct(used_pct))
    segment = make_bar(pct, context_color(pct, warn_pct))
    if pct >= warn_pct:
        segment += " " + WARNING_ICON
    return segment


def quota_segments(snapshot: QuotaSnapshot) -> List[str]:
    """5-hour and 7-day bars, each with its local reset time."""
    segments = []
    for window, fmt in (
        (snapshot.five_hour, FIVE_HOUR_RESET_FORMAT),
        (snapshot.seven_day, SEVEN_DAY_RESET_FORMAT),
    ):
        pct = clamp_pct(round_pct(window.utilization))
        segment = make_bar(pct, quota_color(pct))
        reset = format_reset_time(window.resets_at, fmt)
        if reset:
            segment += f" ({escape(reset)})"
        segments.append(segment)
    return segments


def build_line(
    model: str,
    plan: str,
    context_pct: float,
    warn_pct: int,
    snapshot: Optional[QuotaSnapshot] = None,
    branch: str = "",
    tag: str = "",
    branch_max_len: int = 30,
    tag_max_len: int = 30,
) -> str:
    """Join all non-empty segments into one markup string."""
    parts = []
    identity = identity_segment(model, plan)
    if identity:
        parts.append(identity)
    branch = compact_name(branch, branch_max_len)
    if branch:
        parts.append(f"[dim]{escape(branch)}[/dim]")
    tag = compact_name(tag, tag_max_len)
    if tag:
        parts.append(f"[yellow]{escape(tag)}[/yellow]")
    parts.append(context_segment(context_pct, warn_pct))
    if snapshot is not None:
        parts.extend(quota_segments(snapshot))
    return SEPARATOR.join(parts)


def plain_text(markup: str) -> str:
    """The visible characters of a markup string."""
    return Text.from_markup(markup, emoji=False).plain


def to_ansi(markup: str) -> str:
    """
    Render markup to a single ANSI line.

    The leading reset clears state left by a previous render; non-breaking
    spaces keep the terminal from collapsing whitespace.
    """
    buffer = io.StringIO()
    console = Console(
        file=buffer,
        force_terminal=True,
        color_system="standard",
        emoji=False,
        highlight=False,
        soft_wrap=True,
        legacy_windows=False,
    )
    console.print(markup, end="")
    return ANSI_RESET + buffer.getvalue().replace(" ", NBSP)
