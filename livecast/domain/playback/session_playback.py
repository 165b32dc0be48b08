"""Binds a playback controller to a session's delivery resolution."""

import asyncio
from collections.abc import Awaitable, Callable

from loguru import logger

from livecast.domain.live.session.session_models import DeliveryInfo
from livecast.schemas import SessionStatus
from livecast.utils.app_errors import AppError, NotFoundError

from .controller import PlaybackController

SESSION_GONE = "session expired or removed"
SESSION_ENDED = "stream is no longer live"

DeliveryResolver = Callable[[str], Awaitable[DeliveryInfo]]


class SessionPlayback:
    """Polls a session and attaches the controller once it is ACTIVE.

    Removal of the session (expiry sweep, owner delete) and the terminal
    ERROR/STOPPED statuses close the controller.
    """

    def __init__(self, controller: PlaybackController, resolver: DeliveryResolver):
        self.controller = controller
        self._resolver = resolver

    @property
    def session_id(self) -> str:
        return self.controller.state.session_id

    async def refresh(self) -> DeliveryInfo | None:
        """Resolve delivery once and update the attachment.

        Returns None once closed or when resolution failed transiently.
        """
        if self.controller.closed:
            return None

        try:
            info = await self._resolver(self.session_id)
        except NotFoundError:
            logger.info("Session {} no longer exists, closing playback", self.session_id)
            self.controller.close(SESSION_GONE)
            return None
        except AppError as exc:
            logger.warning("Resolving session {} failed, retrying next poll: {}", self.session_id, exc.errmesg)
            return None

        if info.status in {SessionStatus.ERROR, SessionStatus.STOPPED}:
            logger.info("Session {} is {}, closing playback", self.session_id, info.status)
            self.controller.close(SESSION_ENDED)
            return info

        address = info.delivery_address
        if address and address != self.controller.state.delivery_address:
            logger.info("Attaching playback {} to {}", self.session_id, address)
            self.controller.attach(address)

        return info

    async def run(self, poll_interval: float = 5.0) -> None:
        """Refresh until the controller is closed."""
        while not self.controller.closed:
            await self.refresh()
            if self.controller.closed:
                break
            await asyncio.sleep(poll_interval)
