"""Base service for session operations."""

from collections.abc import Callable
from datetime import datetime

from livecast.app_config import AppEnvironConfig, get_app_environ_config
from livecast.schemas import StreamSession
from livecast.shared.storage.ports import SessionStore
from livecast.shared.utils import utc_now
from livecast.utils.app_errors import NotFoundError


class BaseService:
    """Base service with shared session operation methods."""

    def __init__(
        self,
        store: SessionStore,
        config: AppEnvironConfig | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.config = config or get_app_environ_config()
        self.clock = clock

    async def _get_session_or_raise(self, session_id: str) -> StreamSession:
        """
        Retrieve a live session by session_id.

        Raises:
            NotFoundError: If the session is unknown or expired
        """
        session = await self.store.get(session_id)
        if not session:
            raise NotFoundError(f"Session not found: {session_id}")
        return session

    async def _get_owned_session_or_raise(self, session_id: str, owner_id: str) -> StreamSession:
        # Another owner's session reads as missing
        session = await self._get_session_or_raise(session_id)
        if session.owner_id != owner_id:
            raise NotFoundError(f"Session not found: {session_id}")
        return session

    def _delivery_address(self, session_id: str) -> str:
        return f"{self.config.DELIVERY_BASE_URL}/hls/{session_id}/index.m3u8"
