"""Client-side playback controller with bounded automatic reconnect."""

from typing import Protocol

from loguru import logger

from livecast.app_config import AppEnvironConfig

from .playback_models import (
    Attach,
    CanPlay,
    Close,
    ErrorKind,
    LoadStart,
    ManualRetry,
    PlaybackError,
    PlaybackEvent,
    PlaybackState,
    Playing,
    RetryFired,
    RetryPolicy,
    Waiting,
)
from .playback_state_machine import transition
from .scheduler import AsyncioScheduler, Cancellable, Clock, Scheduler, monotonic_clock


class PlaybackSurface(Protocol):
    """Media element the controller drives; it reports events back via the controller."""

    def load(self, address: str) -> None: ...


def retry_policy_from_config(config: AppEnvironConfig) -> RetryPolicy:
    return RetryPolicy(
        max_retries=config.PLAYBACK_MAX_RETRIES,
        cooldown=config.PLAYBACK_RETRY_COOLDOWN_SECONDS,
        retry_delay=config.PLAYBACK_RETRY_DELAY_SECONDS,
    )


class PlaybackController:
    """One instance per viewing attempt.

    Events are processed one at a time through ``transition``; the controller
    only performs the side effects it returns. At most one automatic retry is
    pending at any moment, and it is cancelled on attach, manual retry and
    close so a stale timer never reloads a replaced attachment.
    """

    def __init__(
        self,
        session_id: str,
        surface: PlaybackSurface,
        *,
        policy: RetryPolicy | None = None,
        clock: Clock = monotonic_clock,
        scheduler: Scheduler | None = None,
    ):
        self.surface = surface
        self.policy = policy or RetryPolicy()
        self.clock = clock
        self.scheduler = scheduler or AsyncioScheduler()

        self._state = PlaybackState(session_id=session_id)
        self._retry_handle: Cancellable | None = None

    @property
    def state(self) -> PlaybackState:
        return self._state

    @property
    def closed(self) -> bool:
        return self._state.closed

    # ==================== COMMANDS ====================

    def attach(self, address: str) -> None:
        """Bind to a delivery address, resetting the retry budget."""
        self._cancel_retry()
        self._dispatch(Attach(address))

    def manual_retry(self) -> None:
        """Operator retry: ignores retry count and cooldown. No-op until attached."""
        if self.closed:
            return
        if self._state.delivery_address is None:
            logger.debug("Playback {} has no delivery address, ignoring manual retry", self._state.session_id)
            return
        self._cancel_retry()
        self._dispatch(ManualRetry())

    def close(self, reason: str | None = None) -> None:
        """Tear down; later surface events and timers are ignored."""
        self._cancel_retry()
        self._dispatch(Close(reason))

    # ==================== SURFACE EVENTS ====================

    def on_load_start(self) -> None:
        self._dispatch(LoadStart())

    def on_can_play(self) -> None:
        self._dispatch(CanPlay())

    def on_waiting(self) -> None:
        self._dispatch(Waiting())

    def on_playing(self) -> None:
        self._dispatch(Playing())

    def on_error(self, kind: ErrorKind | str = ErrorKind.OTHER) -> None:
        try:
            kind = ErrorKind(kind)
        except ValueError:
            kind = ErrorKind.OTHER
        self._dispatch(PlaybackError(kind))

    # ==================== INTERNALS ====================

    def _dispatch(self, event: PlaybackEvent) -> None:
        if self._state.closed:
            logger.debug("Playback {} closed, ignoring {}", self._state.session_id, type(event).__name__)
            return

        result = transition(self._state, event, self.clock(), self.policy)
        self._state = result.state

        if isinstance(event, PlaybackError):
            logger.warning(
                "Playback {} error: {} (retry {}/{})",
                self._state.session_id,
                self._state.last_error,
                self._state.retry_count,
                self.policy.max_retries,
            )

        if result.schedule_retry:
            logger.info(
                "Playback {} retry scheduled in {}s",
                self._state.session_id,
                self.policy.retry_delay,
            )
            self._retry_handle = self.scheduler.call_later(self.policy.retry_delay, self._on_retry_due)

        if result.load is not None:
            self.surface.load(result.load)

    def _on_retry_due(self) -> None:
        self._retry_handle = None
        self._dispatch(RetryFired())

    def _cancel_retry(self) -> None:
        if self._retry_handle is not None:
            self._retry_handle.cancel()
            self._retry_handle = None
