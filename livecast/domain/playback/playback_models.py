"""Playback controller state and events."""

from dataclasses import dataclass
from enum import Enum


class ConnectionState(str, Enum):
    DISCONNECTED = "disconnected"
    RECONNECTING = "reconnecting"
    CONNECTED = "connected"

    def __str__(self) -> str:
        return self.value


class BufferState(str, Enum):
    IDLE = "idle"
    BUFFERING = "buffering"

    def __str__(self) -> str:
        return self.value


class ErrorKind(str, Enum):
    """Failure categories reported by a playback surface."""

    NETWORK = "network"
    DECODE = "decode"
    UNSUPPORTED = "unsupported"
    OTHER = "other"

    def __str__(self) -> str:
        return self.value


ERROR_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.NETWORK: "network error, check upstream feed",
    ErrorKind.DECODE: "format/transcode not ready",
    ErrorKind.UNSUPPORTED: "output format unsupported",
    ErrorKind.OTHER: "generic playback failure",
}


def classify_error(kind: ErrorKind) -> str:
    return ERROR_MESSAGES.get(kind, ERROR_MESSAGES[ErrorKind.OTHER])


@dataclass(frozen=True)
class RetryPolicy:
    max_retries: int = 5
    # seconds since the last automatic retry before another may be scheduled
    cooldown: float = 5.0
    # seconds between a failure and the retry it schedules
    retry_delay: float = 3.0


@dataclass(frozen=True)
class PlaybackState:
    session_id: str
    delivery_address: str | None = None
    connection_state: ConnectionState = ConnectionState.DISCONNECTED
    buffer_state: BufferState = BufferState.IDLE
    retry_count: int = 0
    last_retry_at: float | None = None
    last_error: str | None = None
    retry_pending: bool = False
    closed: bool = False


# ==================== EVENTS ====================


@dataclass(frozen=True)
class Attach:
    """Bind the surface to a (possibly new) delivery address."""

    address: str


@dataclass(frozen=True)
class ManualRetry:
    pass


@dataclass(frozen=True)
class LoadStart:
    pass


@dataclass(frozen=True)
class CanPlay:
    pass


@dataclass(frozen=True)
class Waiting:
    pass


@dataclass(frozen=True)
class Playing:
    pass


@dataclass(frozen=True)
class PlaybackError:
    kind: ErrorKind = ErrorKind.OTHER


@dataclass(frozen=True)
class RetryFired:
    """The delayed automatic retry came due."""


@dataclass(frozen=True)
class Close:
    reason: str | None = None


PlaybackEvent = Attach | ManualRetry | LoadStart | CanPlay | Waiting | Playing | PlaybackError | RetryFired | Close
