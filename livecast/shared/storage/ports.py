"""
Storage port for stream sessions.

Domain code depends only on this interface; adapters implement it. All
persistence APIs are async and every mutation is atomic per record: the value
a transition is validated against is read inside the same critical section
as the write.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from livecast.schemas import QualityProfile, SessionStatus, StreamSession


class SessionStore(ABC):
    """Storage interface for stream session lifecycle management."""

    @abstractmethod
    async def create(
        self,
        owner_id: str,
        title: str,
        description: str | None,
        quality_profile: QualityProfile,
    ) -> StreamSession:
        """
        Create a new pending session with a fresh id, access key and expiry.

        Raises:
            ValidationError: If title is empty
        """
        ...

    @abstractmethod
    async def get(self, session_id: str) -> StreamSession | None:
        """Get a live (non-expired) session by id."""
        ...

    @abstractmethod
    async def get_by_access_key(self, access_key: str) -> StreamSession | None:
        """Get a live (non-expired) session by its ingest access key."""
        ...

    @abstractmethod
    async def list(self, owner_id: str) -> list[StreamSession]:
        """List live sessions of an owner, newest first."""
        ...

    @abstractmethod
    async def list_by_status(self, status: SessionStatus) -> list[StreamSession]:
        """List live sessions across owners currently in ``status``."""
        ...

    @abstractmethod
    async def set_status(
        self,
        session_id: str,
        new_status: SessionStatus,
        *,
        expected: SessionStatus | None = None,
        delivery_address: str | None = None,
    ) -> StreamSession:
        """
        Transition a session to ``new_status``.

        Args:
            session_id: Session to update
            new_status: Target status
            expected: When set, the current status must equal it
            delivery_address: Stored only when ``new_status`` is ACTIVE

        Raises:
            NotFoundError: If the id is unknown
            InvalidTransitionError: If expired, or the transition is not permitted
        """
        ...

    @abstractmethod
    async def delete(self, session_id: str, requester_id: str) -> bool:
        """Delete a session owned by ``requester_id``. Returns whether a record was removed."""
        ...

    @abstractmethod
    async def delete_expired(self, now: datetime) -> list[str]:
        """Delete every session with ``expires_at <= now``. Returns the removed ids."""
        ...
