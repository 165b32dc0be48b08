"""Pure transition function for the playback controller.

``transition(state, event, now, policy)`` returns the next state plus the side
effects the caller must perform (load the surface, schedule a retry). Nothing
here touches timers or I/O, so the reconnect policy is testable with plain
values for ``now``.

Connection and buffering are independent axes:

    connection: DISCONNECTED ⇄ RECONNECTING → CONNECTED → DISCONNECTED (on error)
    buffer:     IDLE ⇄ BUFFERING
"""

from dataclasses import dataclass, replace

from .playback_models import (
    Attach,
    BufferState,
    CanPlay,
    Close,
    ConnectionState,
    LoadStart,
    ManualRetry,
    PlaybackError,
    PlaybackEvent,
    PlaybackState,
    Playing,
    RetryFired,
    RetryPolicy,
    Waiting,
    classify_error,
)


@dataclass(frozen=True)
class TransitionResult:
    state: PlaybackState
    # address the surface must (re)load, if any
    load: str | None = None
    schedule_retry: bool = False


def can_auto_retry(state: PlaybackState, now: float, policy: RetryPolicy) -> bool:
    """Bounded retry with cooldown: under the cap and past the cooldown (or never retried)."""
    if state.retry_pending or state.delivery_address is None:
        return False
    if state.retry_count >= policy.max_retries:
        return False
    return state.last_retry_at is None or now - state.last_retry_at > policy.cooldown


def _reset_attachment(state: PlaybackState, address: str) -> TransitionResult:
    new_state = replace(
        state,
        delivery_address=address,
        connection_state=ConnectionState.RECONNECTING,
        retry_count=0,
        last_retry_at=None,
        last_error=None,
        retry_pending=False,
    )
    return TransitionResult(new_state, load=address)


def transition(
    state: PlaybackState,
    event: PlaybackEvent,
    now: float,
    policy: RetryPolicy = RetryPolicy(),
) -> TransitionResult:
    if state.closed:
        return TransitionResult(state)

    if isinstance(event, Attach):
        return _reset_attachment(state, event.address)

    if isinstance(event, ManualRetry):
        if state.delivery_address is None:
            return TransitionResult(state)
        return _reset_attachment(state, state.delivery_address)

    if isinstance(event, LoadStart):
        return TransitionResult(
            replace(
                state,
                connection_state=ConnectionState.RECONNECTING,
                buffer_state=BufferState.BUFFERING,
            )
        )

    if isinstance(event, CanPlay):
        return TransitionResult(
            replace(
                state,
                connection_state=ConnectionState.CONNECTED,
                buffer_state=BufferState.IDLE,
                last_error=None,
            )
        )

    if isinstance(event, Waiting):
        return TransitionResult(replace(state, buffer_state=BufferState.BUFFERING))

    if isinstance(event, Playing):
        return TransitionResult(replace(state, buffer_state=BufferState.IDLE))

    if isinstance(event, PlaybackError):
        failed = replace(
            state,
            connection_state=ConnectionState.DISCONNECTED,
            buffer_state=BufferState.IDLE,
            last_error=classify_error(event.kind),
        )
        if can_auto_retry(failed, now, policy):
            return TransitionResult(replace(failed, retry_pending=True), schedule_retry=True)
        return TransitionResult(failed)

    if isinstance(event, RetryFired):
        # Stale timer: superseded by an attach or manual retry
        if not state.retry_pending or state.delivery_address is None:
            return TransitionResult(state)
        return TransitionResult(
            replace(
                state,
                retry_count=state.retry_count + 1,
                last_retry_at=now,
                connection_state=ConnectionState.RECONNECTING,
                retry_pending=False,
            ),
            load=state.delivery_address,
        )

    if isinstance(event, Close):
        return TransitionResult(
            replace(
                state,
                connection_state=ConnectionState.DISCONNECTED,
                buffer_state=BufferState.IDLE,
                last_error=event.reason if event.reason is not None else state.last_error,
                retry_pending=False,
                closed=True,
            )
        )

    raise TypeError(f"Unsupported playback event: {event!r}")
