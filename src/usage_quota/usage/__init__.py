# SPDX-License-Identifier: LGPL-3.0-only
# Copyright (c) 2026 Mirrowel

"""
Usage quota acquisition: file cache, endpoint client and service facade.
"""

from .cache import QuotaCache
from .fetcher import QuotaFetcher
from .service import QuotaService

__all__ = ["QuotaCache", "QuotaFetcher", "QuotaService"]
