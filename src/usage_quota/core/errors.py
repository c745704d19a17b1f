# SPDX-License-Identifier: LGPL-3.0-only
# Copyright (c) 2026 Mirrowel

"""
Error taxonomy for credential lookup, cache access and quota fetching.

None of these are fatal to a status-line render. Callers degrade to
"no usage data" and keep rendering the rest of the line.
"""

from typing import Optional


class UsageQuotaError(Exception):
    """Base class for all usage_quota errors."""


# =============================================================================
# CREDENTIALS
# =============================================================================


class CredentialError(UsageQuotaError):
    """Credentials could not be obtained."""


class CredentialUnavailable(CredentialError):
    """No resolver produced a credential payload."""


class CredentialCorrupt(CredentialError):
    """A credential payload was found but could not be parsed."""

    def __init__(self, source: str, detail: str):
        super().__init__(f"parse {source} credentials: {detail}")
        self.source = source


# =============================================================================
# CACHE (internal, always answered with a fresh fetch)
# =============================================================================


class CacheError(UsageQuotaError):
    """Cached usage data cannot be served."""


class CacheMiss(CacheError):
    """No record on disk, or the record outlived its TTL."""


class CacheCorrupt(CacheError):
    """The cache file exists but does not hold a valid record."""


# =============================================================================
# FETCH
# =============================================================================


class QuotaFetchError(UsageQuotaError):
    """The usage endpoint did not yield a snapshot."""


class QuotaNetworkError(QuotaFetchError):
    """Transport-level failure (DNS, connect, TLS, timeout)."""


class QuotaHTTPStatusError(QuotaFetchError):
    """The endpoint answered with a non-200 status."""

    def __init__(self, status_code: int, body: Optional[str] = None):
        super().__init__(f"unexpected status {status_code}")
        self.status_code = status_code
        self.body = body


class QuotaDecodeError(QuotaFetchError):
    """The response body is not a valid usage document."""


def mask_token(token: Optional[str]) -> str:
    """Mask an access token for logging, keeping only its last 4 characters."""
    if not token:
        return "<none>"
    if len(token) <= 8:
        return "****"
    return f"...{token[-4:]}"
