# SPDX-License-Identifier: LGPL-3.0-only
# Copyright (c) 2026 Mirrowel

"""
usage_quota: OAuth usage-quota lookup with a per-profile file cache.
"""

from .core.errors import (
    CredentialCorrupt,
    CredentialError,
    CredentialUnavailable,
    QuotaFetchError,
    UsageQuotaError,
)
from .core.types import Credentials, Profile, QuotaSnapshot, QuotaWindow
from .credential_store import CredentialStore, keychain_available
from .usage import QuotaCache, QuotaFetcher, QuotaService

__all__ = [
    "CredentialCorrupt",
    "CredentialError",
    "CredentialStore",
    "CredentialUnavailable",
    "Credentials",
    "Profile",
    "QuotaCache",
    "QuotaFetchError",
    "QuotaFetcher",
    "QuotaService",
    "QuotaSnapshot",
    "QuotaWindow",
    "UsageQuotaError",
    "keychain_available",
]
