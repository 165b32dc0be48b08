"""Common enums used across schemas."""

from enum import Enum


class SessionStatus(str, Enum):
    """Stream session lifecycle states.

    State Transition Flow:

    PENDING → PROCESSING → ACTIVE → STOPPED
                  ↓           ↓
                ERROR       ERROR

    State Descriptions:
    - PENDING: Session created, no feed seen yet for its access key.
    - PROCESSING: Ingest detected a feed, waiting for the first playable segment.
    - ACTIVE: First segment produced, the delivery address is playable.
    - ERROR: Conversion failed, the feed never produced output, or dropped while active.
    - STOPPED: Owner stopped an active session.

    Any state is removed unconditionally once the session expires.
    Terminal states (no automatic progression): ERROR, STOPPED
    """

    PENDING = "pending"
    PROCESSING = "processing"
    ACTIVE = "active"
    ERROR = "error"
    STOPPED = "stopped"

    def __str__(self) -> str:
        return self.value


class QualityProfile(str, Enum):
    """Advisory output quality requested by the owner."""

    Q360P = "360p"
    Q480P = "480p"
    Q720P = "720p"
    Q1080P = "1080p"
    Q4K = "4k"

    def __str__(self) -> str:
        return self.value


__all__ = ["QualityProfile", "SessionStatus"]
