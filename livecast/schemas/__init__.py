"""Session schemas shared by the store, domain and API layers."""

from .session import SESSION_TTL, SessionView, StreamSession
from .session_state import QualityProfile, SessionStatus

__all__ = [
    "SESSION_TTL",
    "QualityProfile",
    "SessionStatus",
    "SessionView",
    "StreamSession",
]
