"""Ingest-driven lifecycle operations.

The ingest collaborator reports ``(access_key, event)`` pairs; each event maps
to exactly one row of the session state machine. The owner may additionally
stop an active session. Nothing here touches storage mechanics beyond
``SessionStore.set_status``.
"""

from datetime import datetime, timedelta

from loguru import logger

from livecast.schemas import SessionStatus, SessionView
from livecast.utils.app_errors import AppError, NotFoundError

from ._base import BaseService
from .session_state_machine import IngestEvent, SessionStateMachine


class LifecycleOperations(BaseService):
    """Status transitions triggered by ingest signals and owner actions."""

    async def apply_ingest_event(self, access_key: str, event: IngestEvent) -> SessionView:
        """
        Apply an ingest signal to the session bound to ``access_key``.

        Raises:
            NotFoundError: If no live session uses the access key
            InvalidTransitionError: If the event does not apply to the current status
        """
        session = await self.store.get_by_access_key(access_key)
        if not session:
            raise NotFoundError("No live session for access key")

        target = SessionStateMachine.target_for_event(event)
        updated = await self.store.set_status(
            session.session_id,
            target,
            expected=SessionStateMachine.source_for_event(event),
            delivery_address=self._delivery_address(session.session_id),
        )

        logger.info(
            "Ingest event {} moved session {} {} -> {}",
            event,
            session.session_id,
            session.status,
            updated.status,
        )

        return SessionView.from_session(updated)

    async def stop_session(self, session_id: str, owner_id: str) -> SessionView:
        """
        Owner stop of an active session.

        Raises:
            NotFoundError: If the session is unknown, expired or owned by someone else
            InvalidTransitionError: If the session is not ACTIVE
        """
        await self._get_owned_session_or_raise(session_id, owner_id)

        updated = await self.store.set_status(
            session_id,
            SessionStatus.STOPPED,
            expected=SessionStatus.ACTIVE,
        )

        logger.info("Session {} stopped by owner {}", session_id, owner_id)

        return SessionView.from_session(updated)

    async def fail_stalled_sessions(self, now: datetime | None = None) -> list[str]:
        """
        Move PROCESSING sessions that produced no output within the grace window to ERROR.

        Returns the ids that were failed. Sessions that progressed or vanished in
        the meantime are skipped.
        """
        now = now or self.clock()
        grace = timedelta(seconds=self.config.INGEST_GRACE_SECONDS)

        failed: list[str] = []
        for session in await self.store.list_by_status(SessionStatus.PROCESSING):
            if now - session.updated_at < grace:
                continue
            try:
                await self.store.set_status(
                    session.session_id,
                    SessionStatus.ERROR,
                    expected=SessionStatus.PROCESSING,
                )
            except AppError as exc:
                logger.debug("Skip stalled session {}: {}", session.session_id, exc.errmesg)
                continue

            logger.warning(
                "Session {} produced no output within {}s of feed detection, marked error",
                session.session_id,
                self.config.INGEST_GRACE_SECONDS,
            )
            failed.append(session.session_id)

        return failed
