"""
In-memory session store.

Sessions live in a dict keyed by session id with a secondary unique index on
access key. Both indexes are only touched while holding one ``asyncio.Lock``,
and callers always receive copies, so a reader never observes a partial write
and a record deleted concurrently reads as missing.

State is lost on restart; use for single-node deployments and tests.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from datetime import datetime

from loguru import logger

from livecast.domain.live.session.session_state_machine import SessionStateMachine
from livecast.domain.utils.idgen import new_access_key, new_session_id
from livecast.schemas import SESSION_TTL, QualityProfile, SessionStatus, StreamSession
from livecast.shared.utils import utc_now
from livecast.utils.app_errors import InvalidTransitionError, NotFoundError, ValidationError

from .ports import SessionStore


class MemorySessionStore(SessionStore):
    """Lock-guarded in-memory implementation of ``SessionStore``."""

    def __init__(
        self,
        clock: Callable[[], datetime] = utc_now,
        id_factory: Callable[[], str] = new_session_id,
        key_factory: Callable[[], str] = new_access_key,
    ):
        self._clock = clock
        self._id_factory = id_factory
        self._key_factory = key_factory

        self._sessions: dict[str, StreamSession] = {}
        # access_key -> session_id
        self._by_access_key: dict[str, str] = {}
        self._lock = asyncio.Lock()

    async def create(
        self,
        owner_id: str,
        title: str,
        description: str | None,
        quality_profile: QualityProfile,
    ) -> StreamSession:
        title = (title or "").strip()
        if not title:
            raise ValidationError("title must not be empty")

        async with self._lock:
            session_id = self._id_factory()
            while session_id in self._sessions:
                logger.warning("Session id collision on {}, regenerating", session_id)
                session_id = self._id_factory()

            access_key = self._key_factory()
            while access_key in self._by_access_key:
                logger.warning("Access key collision, regenerating")
                access_key = self._key_factory()

            now = self._clock()
            session = StreamSession(
                session_id=session_id,
                owner_id=owner_id,
                title=title,
                description=description,
                quality_profile=quality_profile,
                access_key=access_key,
                status=SessionStatus.PENDING,
                created_at=now,
                updated_at=now,
                expires_at=now + SESSION_TTL,
            )
            self._sessions[session_id] = session
            self._by_access_key[access_key] = session_id

            return session.model_copy(deep=True)

    async def get(self, session_id: str) -> StreamSession | None:
        async with self._lock:
            session = self._live(session_id)
            return session.model_copy(deep=True) if session else None

    async def get_by_access_key(self, access_key: str) -> StreamSession | None:
        async with self._lock:
            session_id = self._by_access_key.get(access_key)
            session = self._live(session_id) if session_id else None
            return session.model_copy(deep=True) if session else None

    async def list(self, owner_id: str) -> list[StreamSession]:
        async with self._lock:
            now = self._clock()
            sessions = [
                s.model_copy(deep=True)
                for s in self._sessions.values()
                if s.owner_id == owner_id and not s.is_expired(now)
            ]
        sessions.sort(key=lambda s: (s.created_at, s.session_id), reverse=True)
        return sessions

    async def list_by_status(self, status: SessionStatus) -> list[StreamSession]:
        async with self._lock:
            now = self._clock()
            return [
                s.model_copy(deep=True)
                for s in self._sessions.values()
                if s.status == status and not s.is_expired(now)
            ]

    async def set_status(
        self,
        session_id: str,
        new_status: SessionStatus,
        *,
        expected: SessionStatus | None = None,
        delivery_address: str | None = None,
    ) -> StreamSession:
        async with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                raise NotFoundError(f"Session not found: {session_id}")

            now = self._clock()
            if session.is_expired(now):
                raise InvalidTransitionError(
                    f"Session {session_id} expired at {session.expires_at.isoformat()}"
                )

            current = session.status
            if expected is not None and current != expected:
                raise InvalidTransitionError(
                    f"Invalid state transition: expected {expected}, session is {current}"
                )
            if not SessionStateMachine.can_transition(current, new_status):
                raise InvalidTransitionError(f"Invalid state transition: {current} -> {new_status}")

            updated = session.model_copy(
                update={
                    "status": new_status,
                    "updated_at": now,
                    "delivery_address": delivery_address if new_status == SessionStatus.ACTIVE else None,
                }
            )
            self._sessions[session_id] = updated

            return updated.model_copy(deep=True)

    async def delete(self, session_id: str, requester_id: str) -> bool:
        async with self._lock:
            session = self._sessions.get(session_id)
            if session is None or session.owner_id != requester_id:
                return False
            self._remove(session)
            return True

    async def delete_expired(self, now: datetime) -> list[str]:
        async with self._lock:
            expired = [s for s in self._sessions.values() if s.is_expired(now)]
            for session in expired:
                self._remove(session)
            return [s.session_id for s in expired]

    def _live(self, session_id: str) -> StreamSession | None:
        session = self._sessions.get(session_id)
        if session is None or session.is_expired(self._clock()):
            return None
        return session

    def _remove(self, session: StreamSession) -> None:
        self._sessions.pop(session.session_id, None)
        self._by_access_key.pop(session.access_key, None)
