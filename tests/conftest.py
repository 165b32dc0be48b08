import warnings
from datetime import datetime, timedelta, timezone

import pytest

from livecast.domain.live.session.session_domain import SessionService
from livecast.shared.storage.memory import MemorySessionStore

warnings.filterwarnings("ignore", category=DeprecationWarning, module="livecast.shared.*")

T0 = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Controllable UTC clock for TTL arithmetic."""

    def __init__(self, start: datetime = T0):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(clock: FakeClock) -> MemorySessionStore:
    return MemorySessionStore(clock=clock)


@pytest.fixture
def service(store: MemorySessionStore, clock: FakeClock) -> SessionService:
    return SessionService(store=store, clock=clock)
