"""Pytest configuration and shared fixtures for claudeline tests."""

import json
from datetime import datetime, timezone
from typing import List, Optional

import httpx
import pytest

from usage_quota.core.types import QuotaSnapshot, QuotaWindow


START_TIME = 1_700_000_000.0

USAGE_BODY = {
    "five_hour": {"utilization": 37.5, "resets_at": "2026-10-16T18:00:00+00:00"},
    "seven_day": {"utilization": 81.0, "resets_at": "2026-10-20T09:30:00+00:00"},
    "seven_day_opus": None,
}


class FakeClock:
    """Manually advanced replacement for time.time."""

    def __init__(self, now: float = START_TIME):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingTransport:
    """httpx.MockTransport handler that records requests and replays responses."""

    def __init__(self, status_code: int = 200, body: Optional[object] = None):
        self.status_code = status_code
        self.body = USAGE_BODY if body is None else body
        self.requests: List[httpx.Request] = []
        self.error: Optional[Exception] = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if isinstance(self.body, (dict, list)):
            return httpx.Response(self.status_code, content=json.dumps(self.body))
        return httpx.Response(self.status_code, content=str(self.body))

    @property
    def calls(self) -> int:
        return len(self.requests)

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self))


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
def snapshot() -> QuotaSnapshot:
    return QuotaSnapshot(
        five_hour=QuotaWindow(37.5, datetime(2026, 10, 16, 18, 0, tzinfo=timezone.utc)),
        seven_day=QuotaWindow(81.0, datetime(2026, 10, 20, 9, 30, tzinfo=timezone.utc)),
    )
