# SPDX-License-Identifier: LGPL-3.0-only
# Copyright (c) 2026 Mirrowel

from .types import CacheRecord, Credentials, Profile, QuotaSnapshot, QuotaWindow

__all__ = [
    "CacheRecord",
    "Credentials",
    "Profile",
    "QuotaSnapshot",
    "QuotaWindow",
]
