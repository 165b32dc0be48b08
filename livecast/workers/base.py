"""Periodic background jobs running on the application event loop."""

import asyncio
import inspect
from collections.abc import Awaitable, Callable
from typing import Any

from loguru import logger


class PeriodicTask:
    """Run ``func`` every ``interval`` seconds until stopped.

    A failing tick is logged and the loop carries on with the next one, so a
    single failure never cancels later runs.
    """

    def __init__(
        self,
        name: str,
        func: Callable[[], Awaitable[Any] | Any],
        interval: float,
        *,
        run_immediately: bool = False,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")

        self.name = name
        self._func = func
        self._interval = interval
        self._run_immediately = run_immediately
        self._task: asyncio.Task | None = None

        self.run_count = 0
        self.failure_count = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._loop(), name=f"periodic:{self.name}")
        logger.info("Started periodic task {} (interval={}s)", self.name, self._interval)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Stopped periodic task {}", self.name)

    async def run_once(self) -> Any:
        """Execute one tick; exceptions are logged and swallowed."""
        self.run_count += 1
        try:
            result = self._func()
            if inspect.isawaitable(result):
                result = await result
            return result
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            self.failure_count += 1
            logger.exception("Periodic task {} failed, retrying next tick: {}", self.name, exc)
            return None

    async def _loop(self) -> None:
        if self._run_immediately:
            await self.run_once()
        while True:
            await asyncio.sleep(self._interval)
            await self.run_once()
