# SPDX-License-Identifier: LGPL-3.0-only
# Copyright (c) 2026 Mirrowel

"""
Usage endpoint client.

API Details:
- Endpoint: GET https://api.anthropic.com/api/oauth/usage
- Auth: Authorization: Bearer <oauth access token>
- Header: anthropic-beta: oauth-2025-04-20
- Response: {"five_hour": {"utilization": float, "resets_at": iso8601},
             "seven_day": {"utilization": float, "resets_at": iso8601}, ...}

One request per call, no retries. Back-off comes from the cache's short
failure TTL.
"""

import logging
from typing import Dict, Optional

import httpx

from ..core.constants import HTTP_TIMEOUT, USAGE_BETA_HEADER, USAGE_URL
from ..core.errors import (
    QuotaDecodeError,
    QuotaHTTPStatusError,
    QuotaNetworkError,
    mask_token,
)
from ..core.types import QuotaSnapshot

lib_logger = logging.getLogger("usage_quota")


class QuotaFetcher:
    """Fetches a QuotaSnapshot with an OAuth access token."""

    def __init__(
        self,
        client: Optional[httpx.Client] = None,
        url: str = USAGE_URL,
        timeout: float = HTTP_TIMEOUT,
        logger: Optional[logging.Logger] = None,
    ):
        self.client = client
        self.url = url
        self.timeout = timeout
        self.logger = logger or lib_logger

    def _headers(self, token: str) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {token}",
            "anthropic-beta": USAGE_BETA_HEADER,
            "Accept": "application/json",
        }

    def fetch(self, token: str) -> QuotaSnapshot:
        """
        Fetch current usage.

        Args:
            token: OAuth access token

        Returns:
            Decoded QuotaSnapshot

        Raises:
            QuotaNetworkError: Connection failed or timed out
            QuotaHTTPStatusError: Any status other than 200
            QuotaDecodeError: Body is not a valid usage document
        """
        self.logger.debug(f"Fetching usage with token {mask_token(token)}")
        try:
            if self.client is not None:
                response = self.client.get(
                    self.url, headers=self._headers(token), timeout=self.timeout
                )
            else:
                with httpx.Client(timeout=self.timeout) as client:
                    response = client.get(self.url, headers=self._headers(token))
        except httpx.TimeoutException as e:
            raise QuotaNetworkError(f"request timed out after {self.timeout}s") from e
        except httpx.HTTPError as e:
            raise QuotaNetworkError(f"execute request: {type(e).__name__}: {e}") from e

        if response.status_code != 200:
            if response.status_code in (401, 403):
                self.logger.warning(
                    f"Usage API rejected token {mask_token(token)} "
                    f"(HTTP {response.status_code})"
                )
            raise QuotaHTTPStatusError(response.status_code, response.text[:200])

        try:
            data = response.json()
        except ValueError as e:
            raise QuotaDecodeError(f"decode response: {e}") from e

        try:
            return QuotaSnapshot.from_dict(data)
        except ValueError as e:
            raise QuotaDecodeError(f"decode response: {e}") from e
