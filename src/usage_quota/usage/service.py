# SPDX-License-Identifier: LGPL-3.0-only
# Copyright (c) 2026 Mirrowel

"""
QuotaService facade.

This is the main public API of the usage_quota package: one call per
process run that serves usage from the cache or, at most once per TTL
window, from the network.
"""

import logging
import time
from typing import Callable, Optional

from ..core.errors import (
    CacheCorrupt,
    CacheMiss,
    QuotaFetchError,
    QuotaHTTPStatusError,
    mask_token,
)
from ..core.types import Profile, QuotaSnapshot
from .cache import QuotaCache
from .fetcher import QuotaFetcher

lib_logger = logging.getLogger("usage_quota")


class QuotaService:
    """
    Cache-first usage lookup.

    Usage:
        service = QuotaService(logger=sink)
        snapshot = service.get_quota(creds.access_token, Profile.from_env())
        if snapshot is None:
            ...  # omit usage bars for this render

    No exception escapes get_quota(); None is the failure signal.
    """

    def __init__(
        self,
        fetcher: Optional[QuotaFetcher] = None,
        tmp_dir: Optional[str] = None,
        clock: Callable[[], float] = time.time,
        logger: Optional[logging.Logger] = None,
    ):
        self.logger = logger or lib_logger
        self.fetcher = fetcher or QuotaFetcher(logger=self.logger)
        self.tmp_dir = tmp_dir
        self.clock = clock

    def cache_for(self, profile: Profile) -> QuotaCache:
        return QuotaCache.for_profile(
            profile, tmp_dir=self.tmp_dir, clock=self.clock, logger=self.logger
        )

    def get_quota(self, token: str, profile: Profile) -> Optional[QuotaSnapshot]:
        """
        Return current usage for the profile, or None when unavailable.

        Args:
            token: OAuth access token ("" means no credentials)
            profile: Scope selecting the cache file

        Returns:
            QuotaSnapshot, or None for no token, a cached failure or a
            failed fetch
        """
        if not token:
            self.logger.debug("No access token, skipping usage lookup")
            return None

        cache = self.cache_for(profile)
        try:
            record = cache.read()
        except CacheMiss as e:
            self.logger.debug(f"Usage cache miss: {e}")
        except CacheCorrupt as e:
            self.logger.debug(f"Usage cache corrupt, refetching: {e}")
        else:
            if not record.succeeded:
                self.logger.debug("Serving cached usage failure")
            return record.payload

        try:
            snapshot = self.fetcher.fetch(token)
        except QuotaFetchError as e:
            self.logger.warning(
                f"fetch usage API with token {mask_token(token)}: {e}"
            )
            if isinstance(e, QuotaHTTPStatusError) and e.body:
                self.logger.debug(f"Usage API response body: {e.body}")
            cache.write(None, succeeded=False)
            return None

        cache.write(snapshot, succeeded=True)
        return snapshot
