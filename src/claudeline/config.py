# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Mirrowel

"""
Runtime settings for the status line.

Precedence (lowest to highest):
    defaults < <config-dir>/claudeline.env < process environment < CLI flags

The host runs the status-line command as a fixed string, so the env file is
the per-profile place to switch on the git tag or debug logging.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Mapping, Optional

from dotenv import dotenv_values

from usage_quota.core.types import Profile

logger = logging.getLogger("claudeline")

SETTINGS_FILENAME = "claudeline.env"

DEFAULT_GIT_TAG_MAX_LEN = 30
DEFAULT_COMPACT_PCT = 85
BRANCH_MAX_LEN = 30

_TRUTHY = {"1", "true", "yes", "on"}


def _env_bool(values: Mapping[str, Optional[str]], name: str, default: bool) -> bool:
    raw = values.get(name)
    if raw is None or raw == "":
        return default
    return raw.strip().lower() in _TRUTHY


def _env_int(
    values: Mapping[str, Optional[str]],
    name: str,
    default: int,
    log: logging.Logger = logger,
) -> int:
    """Parse an integer setting with fallback to default."""
    raw = values.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        log.warning(f"Invalid {name} value {raw!r}, using default {default}")
        return default


def compact_threshold(values: Mapping[str, Optional[str]]) -> int:
    """Auto-compaction percentage; overrides outside 1..100 are ignored."""
    raw = values.get("CLAUDE_AUTOCOMPACT_PCT_OVERRIDE")
    try:
        value = int(raw) if raw else 0
    except ValueError:
        value = 0
    if 0 < value <= 100:
        return value
    return DEFAULT_COMPACT_PCT


@dataclass
class Settings:
    """Resolved configuration for one render."""

    profile: Profile
    debug: bool = False
    show_git_tag: bool = False
    git_tag_max_len: int = DEFAULT_GIT_TAG_MAX_LEN
    compact_pct: int = DEFAULT_COMPACT_PCT

    @property
    def warn_pct(self) -> int:
        """Context fill at which the bar turns red and gains a warning."""
        return self.compact_pct - 5


def settings_file(profile: Profile, home: Optional[Path] = None) -> Path:
    return profile.resolved_config_dir(home) / SETTINGS_FILENAME


def load_settings(
    environ: Optional[Mapping[str, str]] = None,
    home: Optional[Path] = None,
    logger: logging.Logger = logger,
) -> Settings:
    """
    Resolve settings from the env file and the environment.

    CLI flags are applied on top by the caller.
    """
    env = os.environ if environ is None else environ
    profile = Profile.from_env(env)

    values: Dict[str, Optional[str]] = {}
    try:
        path = settings_file(profile, home)
    except RuntimeError:
        path = None
    if path is not None and path.is_file():
        values.update(dotenv_values(path))
    values.update(env)

    return Settings(
        profile=profile,
        debug=_env_bool(values, "CLAUDELINE_DEBUG", False),
        show_git_tag=_env_bool(values, "CLAUDELINE_GIT_TAG", False),
        git_tag_max_len=_env_int(
            values, "CLAUDELINE_GIT_TAG_MAX_LEN", DEFAULT_GIT_TAG_MAX_LEN, logger
        ),
        compact_pct=compact_threshold(values),
    )
