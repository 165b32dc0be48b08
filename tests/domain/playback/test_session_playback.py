"""Tests for SessionPlayback, the session-aware attach loop."""

from unittest.mock import AsyncMock

import pytest

from livecast.domain.live.session.session_models import DeliveryInfo
from livecast.domain.playback import ConnectionState, ManualScheduler, PlaybackController, SessionPlayback
from livecast.domain.playback.session_playback import SESSION_ENDED, SESSION_GONE
from livecast.schemas import SessionStatus
from livecast.utils.app_errors import NotFoundError, StoreUnavailableError

ADDRESS = "http://cdn/hls/st_1/index.m3u8"


class FakeSurface:
    def __init__(self):
        self.loads: list[str] = []

    def load(self, address: str) -> None:
        self.loads.append(address)


@pytest.fixture
def surface() -> FakeSurface:
    return FakeSurface()


@pytest.fixture
def controller(surface) -> PlaybackController:
    scheduler = ManualScheduler()
    return PlaybackController("st_1", surface, clock=scheduler.clock, scheduler=scheduler)


def _info(status: SessionStatus, address: str | None = None) -> DeliveryInfo:
    return DeliveryInfo(session_id="st_1", status=status, delivery_address=address)


class TestRefresh:
    async def test_no_attach_before_active(self, controller, surface):
        resolver = AsyncMock(return_value=_info(SessionStatus.PROCESSING))
        playback = SessionPlayback(controller, resolver)

        await playback.refresh()

        resolver.assert_awaited_once_with("st_1")
        assert surface.loads == []
        assert controller.state.connection_state == ConnectionState.DISCONNECTED

    async def test_attaches_once_active(self, controller, surface):
        resolver = AsyncMock(return_value=_info(SessionStatus.ACTIVE, ADDRESS))
        playback = SessionPlayback(controller, resolver)

        await playback.refresh()
        await playback.refresh()

        assert surface.loads == [ADDRESS]

    async def test_removed_session_closes_controller(self, controller):
        resolver = AsyncMock(side_effect=NotFoundError("Session not found: st_1"))
        playback = SessionPlayback(controller, resolver)

        assert await playback.refresh() is None

        assert controller.closed
        assert controller.state.last_error == SESSION_GONE

    @pytest.mark.parametrize("status", [SessionStatus.ERROR, SessionStatus.STOPPED])
    async def test_terminal_status_closes_controller(self, controller, status):
        playback = SessionPlayback(controller, AsyncMock(return_value=_info(status)))

        await playback.refresh()

        assert controller.closed
        assert controller.state.last_error == SESSION_ENDED

    async def test_transient_failure_keeps_controller_open(self, controller, surface):
        playback = SessionPlayback(controller, AsyncMock(side_effect=StoreUnavailableError()))

        assert await playback.refresh() is None

        assert not controller.closed
        assert controller.state.last_error is None
        assert surface.loads == []

    async def test_refresh_after_close_skips_resolver(self, controller):
        resolver = AsyncMock()
        controller.close()

        assert await SessionPlayback(controller, resolver).refresh() is None
        resolver.assert_not_awaited()


class TestRun:
    async def test_run_exits_when_session_disappears(self, controller, surface):
        resolver = AsyncMock(
            side_effect=[
                _info(SessionStatus.ACTIVE, ADDRESS),
                NotFoundError("Session not found: st_1"),
            ]
        )

        await SessionPlayback(controller, resolver).run(poll_interval=0)

        assert surface.loads == [ADDRESS]
        assert controller.closed
        assert resolver.await_count == 2

    async def test_run_survives_transient_failure(self, controller, surface):
        resolver = AsyncMock(
            side_effect=[
                _info(SessionStatus.PROCESSING),
                StoreUnavailableError(),
                _info(SessionStatus.ACTIVE, ADDRESS),
                _info(SessionStatus.STOPPED),
            ]
        )

        await SessionPlayback(controller, resolver).run(poll_interval=0)

        assert resolver.await_count == 4
        assert surface.loads == [ADDRESS]
        assert controller.closed
        assert controller.state.last_error == SESSION_ENDED
