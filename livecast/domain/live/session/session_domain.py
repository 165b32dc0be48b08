"""Session domain service."""

from collections.abc import Callable
from datetime import datetime

from loguru import logger

from livecast.app_config import AppEnvironConfig
from livecast.schemas import SessionStatus, SessionView
from livecast.shared.storage.memory import MemorySessionStore
from livecast.shared.storage.ports import SessionStore
from livecast.shared.utils import utc_now

from ._lifecycle import LifecycleOperations
from ._sessions import SessionOperations
from .session_models import DeliveryInfo, IngestInfo, SessionCreateParams
from .session_state_machine import IngestEvent


class SessionService:
    """Facade over session, lifecycle and expiry operations sharing one store."""

    def __init__(
        self,
        store: SessionStore | None = None,
        config: AppEnvironConfig | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store or MemorySessionStore(clock=clock)
        self.clock = clock
        self._sessions = SessionOperations(self.store, config, clock)
        self._lifecycle = LifecycleOperations(self.store, config, clock)

    # ==================== SESSIONS ====================

    async def create_session(self, params: SessionCreateParams) -> SessionView:
        """Create a new session.

        Raises ValidationError if the title is empty.
        """
        return await self._sessions.create_session(params)

    async def get_session(self, session_id: str) -> SessionView:
        """Get a single session by session_id.

        Raises NotFoundError if session not found.
        """
        return await self._sessions.get_session(session_id)

    async def list_sessions(self, owner_id: str) -> list[SessionView]:
        """List the owner's sessions, newest first."""
        return await self._sessions.list_sessions(owner_id)

    async def update_status(
        self,
        session_id: str,
        new_status: SessionStatus,
        owner_id: str | None = None,
    ) -> SessionView:
        """Update session status.

        Raises NotFoundError or InvalidTransitionError.
        """
        return await self._sessions.update_status(session_id, new_status, owner_id)

    async def delete_session(self, session_id: str, owner_id: str) -> bool:
        """Delete a session; returns False when nothing was removed."""
        return await self._sessions.delete_session(session_id, owner_id)

    async def resolve_delivery(self, session_id: str) -> DeliveryInfo:
        """Resolve the delivery address (present only while ACTIVE)."""
        return await self._sessions.resolve_delivery(session_id)

    async def get_ingest_info(self, session_id: str, owner_id: str) -> IngestInfo:
        """Publish endpoint and access key, for the owner only."""
        return await self._sessions.get_ingest_info(session_id, owner_id)

    # ==================== LIFECYCLE ====================

    async def apply_ingest_event(self, access_key: str, event: IngestEvent) -> SessionView:
        """Apply an ingest signal to the session bound to access_key."""
        return await self._lifecycle.apply_ingest_event(access_key, event)

    async def stop_session(self, session_id: str, owner_id: str) -> SessionView:
        """Owner stop of an ACTIVE session."""
        return await self._lifecycle.stop_session(session_id, owner_id)

    async def fail_stalled_sessions(self, now: datetime | None = None) -> list[str]:
        """Fail PROCESSING sessions past the ingest grace window."""
        return await self._lifecycle.fail_stalled_sessions(now)

    # ==================== EXPIRY ====================

    async def sweep_expired(self, now: datetime | None = None) -> list[str]:
        """Delete every session whose expires_at <= now, across all owners."""
        now = now or self.clock()
        removed = await self.store.delete_expired(now)
        if removed:
            logger.info("Swept {} expired sessions", len(removed))
        else:
            logger.debug("Sweep found no expired sessions")
        return removed


session_service = SessionService()


def get_session_service() -> SessionService:
    """Get the singleton SessionService instance."""
    return session_service
