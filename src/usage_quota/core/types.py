# SPDX-License-Identifier: LGPL-3.0-only
# Copyright (c) 2026 Mirrowel

"""
Shared type definitions for the usage_quota package.

This module contains the dataclasses passed between the credential store,
the usage cache, the fetcher and the service facade.
"""

import hashlib
import math
import os
import tempfile
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from .constants import (
    CACHE_FILE_PREFIX,
    CONFIG_DIR_ENV,
    CREDENTIALS_FILENAME,
    DEFAULT_CONFIG_SUBDIR,
    KEYCHAIN_SERVICE_BASE,
)


# Subscription type substrings -> display plan, checked in order
PLAN_NAMES = (
    ("max", "Max"),
    ("pro", "Pro"),
    ("team", "Team"),
)


# =============================================================================
# PROFILE
# =============================================================================


@dataclass(frozen=True)
class Profile:
    """
    Credential/config scope selected by the config-directory override.

    Every profile-dependent name (keychain service, cache file) is derived
    from the override string alone, so two terminals using different
    profiles never share a cache file or a keychain entry.
    """

    config_dir: Optional[str] = None

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None) -> "Profile":
        """Build the profile from CLAUDE_CONFIG_DIR (empty means unset)."""
        env = os.environ if environ is None else environ
        return cls(env.get(CONFIG_DIR_ENV) or None)

    @property
    def fingerprint(self) -> Optional[str]:
        """First 4 bytes of SHA-256 of the override, as 8 hex chars."""
        if not self.config_dir:
            return None
        return hashlib.sha256(self.config_dir.encode("utf-8")).hexdigest()[:8]

    @property
    def keychain_service(self) -> str:
        fp = self.fingerprint
        return f"{KEYCHAIN_SERVICE_BASE}-{fp}" if fp else KEYCHAIN_SERVICE_BASE

    def cache_path(self, tmp_dir: Optional[str] = None) -> Path:
        base = Path(tmp_dir or tempfile.gettempdir())
        fp = self.fingerprint
        name = f"{CACHE_FILE_PREFIX}-{fp}.json" if fp else f"{CACHE_FILE_PREFIX}.json"
        return base / name

    def resolved_config_dir(self, home: Optional[Path] = None) -> Path:
        """The override if set, otherwise ~/.claude."""
        if self.config_dir:
            return Path(self.config_dir)
        return (home or Path.home()) / DEFAULT_CONFIG_SUBDIR

    def credentials_path(self, home: Optional[Path] = None) -> Path:
        return self.resolved_config_dir(home) / CREDENTIALS_FILENAME


# =============================================================================
# CREDENTIALS
# =============================================================================


@dataclass(frozen=True)
class Credentials:
    """OAuth access token and subscription type, resolved per invocation."""

    access_token: str = ""
    subscription_type: str = ""

    @classmethod
    def from_payload(cls, data: Any) -> "Credentials":
        """
        Build credentials from the stored JSON document.

        Expected shape: {"claudeAiOauth": {"accessToken": ..., "subscriptionType": ...}}
        Missing keys yield empty strings; a wrong shape raises ValueError.
        """
        if not isinstance(data, dict):
            raise ValueError("credentials payload is not a JSON object")
        oauth = data.get("claudeAiOauth") or {}
        if not isinstance(oauth, dict):
            raise ValueError("claudeAiOauth is not a JSON object")
        token = oauth.get("accessToken") or ""
        sub_type = oauth.get("subscriptionType") or ""
        if not isinstance(token, str) or not isinstance(sub_type, str):
            raise ValueError("accessToken and subscriptionType must be strings")
        return cls(access_token=token, subscription_type=sub_type)

    @property
    def plan_name(self) -> str:
        """Display name of the plan, or "" when the subscription is unknown."""
        lower = self.subscription_type.lower()
        for needle, name in PLAN_NAMES:
            if needle in lower:
                return name
        return ""


# =============================================================================
# QUOTA DATA
# =============================================================================


def parse_reset_time(value: Any) -> Optional[datetime]:
    """Parse an ISO 8601 reset timestamp; None for missing or unparsable values."""
    if not value or not isinstance(value, str):
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


@dataclass(frozen=True)
class QuotaWindow:
    """One rolling usage window: utilization percent and its reset time."""

    utilization: float = 0.0
    resets_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "utilization": self.utilization,
            "resets_at": self.resets_at.isoformat() if self.resets_at else None,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "QuotaWindow":
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ValueError("usage window is not a JSON object")
        raw = data.get("utilization")
        if raw is None:
            utilization = 0.0
        elif isinstance(raw, bool) or not isinstance(raw, (int, float)):
            raise ValueError(f"utilization is not a number: {raw!r}")
        else:
            try:
                utilization = float(raw)
            except OverflowError as e:
                raise ValueError("utilization out of range") from e
            if not math.isfinite(utilization):
                raise ValueError(f"utilization is not finite: {raw!r}")
        return cls(utilization=utilization, resets_at=parse_reset_time(data.get("resets_at")))


@dataclass(frozen=True)
class QuotaSnapshot:
    """Point-in-time read of the 5-hour and 7-day usage windows."""

    five_hour: QuotaWindow
    seven_day: QuotaWindow

    def to_dict(self) -> Dict[str, Any]:
        return {
            "five_hour": self.five_hour.to_dict(),
            "seven_day": self.seven_day.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Any) -> "QuotaSnapshot":
        """Decode the endpoint/cache shape; raises ValueError on a bad document."""
        if not isinstance(data, dict):
            raise ValueError("usage document is not a JSON object")
        return cls(
            five_hour=QuotaWindow.from_dict(data.get("five_hour")),
            seven_day=QuotaWindow.from_dict(data.get("seven_day")),
        )


# =============================================================================
# CACHE RECORD
# =============================================================================


@dataclass(frozen=True)
class CacheRecord:
    """
    Last fetch outcome for a profile.

    succeeded=True always carries a payload; succeeded=False never does.
    """

    payload: Optional[QuotaSnapshot]
    captured_at: float
    succeeded: bool

    def __post_init__(self):
        if self.succeeded != (self.payload is not None):
            raise ValueError("succeeded must be True exactly when payload is present")

    def age(self, now: float) -> float:
        return now - self.captured_at
