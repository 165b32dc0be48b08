"""Session operations."""

from loguru import logger

from livecast.schemas import SessionStatus, SessionView

from ._base import BaseService
from .session_models import DeliveryInfo, IngestInfo, SessionCreateParams


class SessionOperations(BaseService):
    """Owner-facing session operations."""

    async def create_session(self, params: SessionCreateParams) -> SessionView:
        """
        Create a new pending session.

        Raises ValidationError if the title is empty.
        """
        session = await self.store.create(
            owner_id=params.owner_id,
            title=params.title,
            description=params.description,
            quality_profile=params.quality_profile,
        )

        logger.info(
            "Created session {} for owner {} (quality={}, expires_at={})",
            session.session_id,
            session.owner_id,
            session.quality_profile,
            session.expires_at.isoformat(),
        )

        return SessionView.from_session(session)

    async def get_session(self, session_id: str) -> SessionView:
        """
        Get a single session by session_id.

        Raises NotFoundError if the session is unknown or expired.
        """
        session = await self._get_session_or_raise(session_id)
        return SessionView.from_session(session)

    async def list_sessions(self, owner_id: str) -> list[SessionView]:
        """List the owner's live sessions, newest first."""
        sessions = await self.store.list(owner_id)
        return [SessionView.from_session(s) for s in sessions]

    async def update_status(
        self,
        session_id: str,
        new_status: SessionStatus,
        owner_id: str | None = None,
    ) -> SessionView:
        """
        Update session status with transition validation.

        Re-applying the current status is rejected like any other unlisted transition.
        When owner_id is given, sessions of other owners read as missing.

        Raises:
            NotFoundError: If session is unknown (or foreign)
            InvalidTransitionError: If the transition is not permitted or the session expired
        """
        if owner_id is not None:
            await self._get_owned_session_or_raise(session_id, owner_id)

        updated = await self.store.set_status(
            session_id,
            new_status,
            delivery_address=self._delivery_address(session_id),
        )

        logger.info("Session {} status updated to {}", session_id, new_status)

        return SessionView.from_session(updated)

    async def delete_session(self, session_id: str, owner_id: str) -> bool:
        """Delete a session owned by owner_id. Returns False when nothing was removed."""
        deleted = await self.store.delete(session_id, owner_id)
        if deleted:
            logger.info("Session {} deleted by owner {}", session_id, owner_id)
        else:
            logger.debug("Delete of session {} by {} removed nothing", session_id, owner_id)
        return deleted

    async def resolve_delivery(self, session_id: str) -> DeliveryInfo:
        """
        Resolve where a viewer should attach.

        Raises NotFoundError if the session is unknown or expired.
        """
        session = await self._get_session_or_raise(session_id)
        address = session.delivery_address if session.status == SessionStatus.ACTIVE else None
        return DeliveryInfo(
            session_id=session.session_id,
            status=session.status,
            delivery_address=address,
        )

    async def get_ingest_info(self, session_id: str, owner_id: str) -> IngestInfo:
        """
        Return the publish endpoint and access key for the session owner.

        Raises NotFoundError for unknown, expired or foreign sessions.
        """
        session = await self._get_owned_session_or_raise(session_id, owner_id)
        return IngestInfo(
            session_id=session.session_id,
            ingest_url=self.config.INGEST_RTMP_URL,
            access_key=session.access_key,
        )
