"""Tests for the pure playback transition function."""

from dataclasses import replace

import pytest

from livecast.domain.playback.playback_models import (
    Attach,
    BufferState,
    CanPlay,
    Close,
    ConnectionState,
    ErrorKind,
    LoadStart,
    ManualRetry,
    PlaybackError,
    PlaybackState,
    Playing,
    RetryFired,
    RetryPolicy,
    Waiting,
    classify_error,
)
from livecast.domain.playback.playback_state_machine import can_auto_retry, transition

ADDRESS = "http://cdn/hls/st_1/index.m3u8"
POLICY = RetryPolicy()


def _attached(**overrides) -> PlaybackState:
    state = transition(PlaybackState(session_id="st_1"), Attach(ADDRESS), 0.0).state
    return replace(state, **overrides)


class TestSurfaceEvents:
    def test_attach_resets_and_loads(self):
        state = PlaybackState(
            session_id="st_1",
            retry_count=4,
            last_retry_at=10.0,
            last_error="network error, check upstream feed",
        )

        result = transition(state, Attach(ADDRESS), 20.0)

        assert result.load == ADDRESS
        assert result.state.retry_count == 0
        assert result.state.last_error is None
        assert result.state.connection_state == ConnectionState.RECONNECTING

    def test_load_start(self):
        state = transition(_attached(), LoadStart(), 1.0).state
        assert state.connection_state == ConnectionState.RECONNECTING
        assert state.buffer_state == BufferState.BUFFERING

    def test_can_play_clears_error(self):
        state = transition(_attached(last_error="x"), CanPlay(), 1.0).state
        assert state.connection_state == ConnectionState.CONNECTED
        assert state.buffer_state == BufferState.IDLE
        assert state.last_error is None

    def test_waiting_only_touches_buffer(self):
        connected = _attached(connection_state=ConnectionState.CONNECTED)

        state = transition(connected, Waiting(), 1.0).state

        assert state.buffer_state == BufferState.BUFFERING
        assert state.connection_state == ConnectionState.CONNECTED

    def test_playing_sets_buffer_idle(self):
        buffering = _attached(
            connection_state=ConnectionState.CONNECTED, buffer_state=BufferState.BUFFERING
        )

        state = transition(buffering, Playing(), 1.0).state

        assert state.buffer_state == BufferState.IDLE
        assert state.connection_state == ConnectionState.CONNECTED


class TestErrorClassification:
    @pytest.mark.parametrize(
        ("kind", "message"),
        [
            (ErrorKind.NETWORK, "network error, check upstream feed"),
            (ErrorKind.DECODE, "format/transcode not ready"),
            (ErrorKind.UNSUPPORTED, "output format unsupported"),
            (ErrorKind.OTHER, "generic playback failure"),
        ],
    )
    def test_messages(self, kind, message):
        assert classify_error(kind) == message

    def test_error_disconnects_and_records_message(self):
        result = transition(_attached(), PlaybackError(ErrorKind.UNSUPPORTED), 1.0)

        assert result.state.connection_state == ConnectionState.DISCONNECTED
        assert result.state.buffer_state == BufferState.IDLE
        assert result.state.last_error == "output format unsupported"


class TestAutoRetry:
    def test_first_error_schedules_one_retry(self):
        result = transition(_attached(), PlaybackError(ErrorKind.NETWORK), 1.0)

        assert result.schedule_retry is True
        assert result.load is None
        assert result.state.retry_pending is True

    def test_second_error_while_pending_does_not_schedule_again(self):
        pending = transition(_attached(), PlaybackError(), 1.0).state

        result = transition(pending, PlaybackError(), 1.5)

        assert result.schedule_retry is False

    def test_retry_fired_increments_and_reloads(self):
        pending = transition(_attached(), PlaybackError(), 1.0).state

        result = transition(pending, RetryFired(), 4.0)

        assert result.load == ADDRESS
        assert result.state.retry_count == 1
        assert result.state.last_retry_at == 4.0
        assert result.state.connection_state == ConnectionState.RECONNECTING
        assert result.state.retry_pending is False

    def test_stale_retry_fired_ignored(self):
        state = _attached()
        result = transition(state, RetryFired(), 4.0)

        assert result.state == state
        assert result.load is None

    def test_cooldown_blocks_retry(self):
        state = _attached(retry_count=1, last_retry_at=10.0)

        assert can_auto_retry(state, 15.0, POLICY) is False
        assert can_auto_retry(state, 15.01, POLICY) is True

    def test_cap_blocks_retry(self):
        state = _attached(retry_count=5, last_retry_at=0.0)

        result = transition(state, PlaybackError(), 100.0)

        assert result.schedule_retry is False
        assert result.state.connection_state == ConnectionState.DISCONNECTED

    def test_no_address_never_retries(self):
        state = PlaybackState(session_id="st_1")
        assert transition(state, PlaybackError(), 1.0).schedule_retry is False

    def test_custom_policy(self):
        policy = RetryPolicy(max_retries=1, cooldown=0.0, retry_delay=0.5)
        state = _attached(retry_count=1, last_retry_at=0.0)

        assert transition(state, PlaybackError(), 10.0, policy).schedule_retry is False


class TestManualRetry:
    def test_manual_retry_resets_exhausted_budget(self):
        exhausted = _attached(
            retry_count=5,
            last_retry_at=99.0,
            connection_state=ConnectionState.DISCONNECTED,
            last_error="generic playback failure",
        )

        result = transition(exhausted, ManualRetry(), 100.0)

        assert result.state.retry_count == 0
        assert result.state.last_retry_at is None
        assert result.state.connection_state == ConnectionState.RECONNECTING
        assert result.state.last_error is None
        assert result.load == ADDRESS

    def test_manual_retry_cancels_pending_flag(self):
        pending = transition(_attached(), PlaybackError(), 1.0).state

        result = transition(pending, ManualRetry(), 2.0)

        assert result.state.retry_pending is False


class TestClose:
    def test_close_is_terminal(self):
        closed = transition(_attached(), Close("bye"), 1.0).state

        assert closed.closed
        assert closed.last_error == "bye"
        for event in (Attach(ADDRESS), LoadStart(), CanPlay(), PlaybackError(), RetryFired(), ManualRetry()):
            assert transition(closed, event, 2.0).state == closed

    def test_unknown_event_raises(self):
        with pytest.raises(TypeError):
            transition(_attached(), object(), 1.0)  # type: ignore[arg-type]
