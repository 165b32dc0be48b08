"""
Client-side playback control.

A ``PlaybackController`` binds one playback surface to a delivery address and
reconnects on failure under a bounded retry policy; ``SessionPlayback`` ties it
to a session's delivery resolution.
"""

from .controller import PlaybackController, PlaybackSurface, retry_policy_from_config
from .playback_models import (
    BufferState,
    ConnectionState,
    ErrorKind,
    PlaybackState,
    RetryPolicy,
    classify_error,
)
from .playback_state_machine import TransitionResult, transition
from .scheduler import AsyncioScheduler, ManualClock, ManualScheduler
from .session_playback import SessionPlayback

__all__ = [
    "AsyncioScheduler",
    "BufferState",
    "ConnectionState",
    "ErrorKind",
    "ManualClock",
    "ManualScheduler",
    "PlaybackController",
    "PlaybackState",
    "PlaybackSurface",
    "RetryPolicy",
    "SessionPlayback",
    "TransitionResult",
    "classify_error",
    "retry_policy_from_config",
    "transition",
]
