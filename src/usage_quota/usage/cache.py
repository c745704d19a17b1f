# SPDX-License-Identifier: LGPL-3.0-only
# Copyright (c) 2026 Mirrowel

"""
Single-entry, file-persisted cache of the last usage fetch outcome.

The status line is re-spawned on every render, often sub-second, so this
file is the only thing bounding the request rate. Successes are trusted
for CACHE_TTL_OK seconds; failures suppress retries for the shorter
CACHE_TTL_FAIL so a recovery shows up quickly.

File format (one per profile):
    {"data": {...snapshot...} | null, "timestamp": <unix seconds, float>, "ok": bool}

No locking: concurrent writers race and the last one wins. Every write
replaces the whole file, so a reader never sees mixed fields.
"""

import json
import logging
import math
import os
import tempfile
import time
from pathlib import Path
from typing import Callable, Optional

from ..core.constants import CACHE_TTL_FAIL, CACHE_TTL_OK
from ..core.errors import CacheCorrupt, CacheMiss
from ..core.types import CacheRecord, Profile, QuotaSnapshot

lib_logger = logging.getLogger("usage_quota")


def _unix_seconds(value) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        seconds = float(value)
    except OverflowError:
        return None
    return seconds if math.isfinite(seconds) else None


class QuotaCache:
    """Reads and writes the CacheRecord for one profile."""

    def __init__(
        self,
        path: Path,
        clock: Callable[[], float] = time.time,
        logger: Optional[logging.Logger] = None,
        ttl_ok: float = CACHE_TTL_OK,
        ttl_fail: float = CACHE_TTL_FAIL,
    ):
        self.path = Path(path)
        self.clock = clock
        self.logger = logger or lib_logger
        self.ttl_ok = ttl_ok
        self.ttl_fail = ttl_fail

    @classmethod
    def for_profile(
        cls,
        profile: Profile,
        tmp_dir: Optional[str] = None,
        **kwargs,
    ) -> "QuotaCache":
        return cls(profile.cache_path(tmp_dir), **kwargs)

    def ttl_for(self, record: CacheRecord) -> float:
        return self.ttl_ok if record.succeeded else self.ttl_fail

    # =========================================================================
    # READ
    # =========================================================================

    def load(self) -> CacheRecord:
        """
        Load the stored record regardless of age.

        Raises:
            CacheMiss: No cache file
            CacheCorrupt: The file does not hold a valid record
        """
        try:
            with open(self.path, "rb") as f:
                raw = f.read()
        except FileNotFoundError as e:
            raise CacheMiss(f"no cache file at {self.path}") from e
        except OSError as e:
            raise CacheCorrupt(f"read {self.path}: {e}") from e

        try:
            entry = json.loads(raw)
        except ValueError as e:
            raise CacheCorrupt(f"invalid JSON in {self.path}: {e}") from e
        if not isinstance(entry, dict):
            raise CacheCorrupt(f"cache entry in {self.path} is not an object")

        timestamp = entry.get("timestamp")
        ok = entry.get("ok", False)
        captured_at = _unix_seconds(timestamp)
        if captured_at is None:
            raise CacheCorrupt(f"bad timestamp in {self.path}")
        if not isinstance(ok, bool):
            raise CacheCorrupt(f"bad ok flag in {self.path}: {ok!r}")

        payload = None
        if ok:
            try:
                payload = QuotaSnapshot.from_dict(entry.get("data"))
            except ValueError as e:
                raise CacheCorrupt(f"bad cached usage data: {e}") from e

        return CacheRecord(payload=payload, captured_at=captured_at, succeeded=ok)

    def read(self) -> CacheRecord:
        """
        Return the stored record if it is still within its TTL.

        "Never fetched" and "fetched too long ago" both raise CacheMiss.
        """
        record = self.load()
        age = record.age(self.clock())
        if age < self.ttl_for(record):
            return record
        raise CacheMiss(f"cache expired ({age:.0f}s old, ok={record.succeeded})")

    # =========================================================================
    # WRITE
    # =========================================================================

    def write(self, snapshot: Optional[QuotaSnapshot], succeeded: bool) -> None:
        """Overwrite the record with this fetch outcome. Best-effort."""
        if succeeded and snapshot is None:
            self.logger.debug("Refusing to cache a success without usage data")
            return

        entry = {
            "data": snapshot.to_dict() if succeeded else None,
            "timestamp": self.clock(),
            "ok": succeeded,
        }
        try:
            data = json.dumps(entry)
        except (TypeError, ValueError) as e:
            self.logger.debug(f"Failed to encode usage cache entry: {e}")
            return

        tmp_path = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=str(self.path.parent), prefix=f".{self.path.name}.", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(data)
            os.chmod(tmp_path, 0o600)
            os.replace(tmp_path, self.path)
            tmp_path = None
        except OSError as e:
            self.logger.debug(f"Failed to write usage cache {self.path}: {e}")
        finally:
            if tmp_path:
                try:
                    os.unlink(tmp_path)
                except OSError:
                    pass
