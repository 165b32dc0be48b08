"""Background jobs reclaiming expired sessions and failing stalled ingests."""

from livecast.app_config import AppEnvironConfig, get_app_environ_config
from livecast.domain.live.session.session_domain import SessionService

from .base import PeriodicTask


class ExpirySweeper:
    """Owns the periodic sweep and stalled-ingest jobs for one SessionService."""

    def __init__(self, service: SessionService, config: AppEnvironConfig | None = None):
        config = config or get_app_environ_config()
        self.service = service
        self.sweep_task = PeriodicTask(
            "expiry-sweep",
            self.service.sweep_expired,
            config.SWEEP_INTERVAL_SECONDS,
            run_immediately=True,
        )
        self.stalled_task = PeriodicTask(
            "stalled-ingest",
            self.service.fail_stalled_sessions,
            config.STALLED_CHECK_INTERVAL_SECONDS,
        )

    def start(self) -> None:
        self.sweep_task.start()
        self.stalled_task.start()

    async def stop(self) -> None:
        await self.sweep_task.stop()
        await self.stalled_task.stop()

    async def sweep(self) -> list[str]:
        """Run one sweep pass now, outside the schedule."""
        return await self.sweep_task.run_once() or []
