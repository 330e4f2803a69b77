# app/services/scheduler.py

import asyncio
import time
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, Optional

from loguru import logger

CleanupFn = Callable[[], Awaitable[Dict[str, Any]]]


class CleanupScheduler:
    """
    Runs ``cleanup`` every ``interval_seconds`` on a background task, and on
    demand through ``run_now``.

    Scheduled failures are logged and retried on the next tick. Manual runs
    raise so the caller can report the failure. Runs are not serialized:
    a manual trigger may overlap a scheduled pass.
    """

    def __init__(self, cleanup: CleanupFn, interval_seconds: float):
        self._cleanup = cleanup
        self.interval_seconds = interval_seconds
        self._task: Optional[asyncio.Task] = None

        self.last_run_at: Optional[datetime] = None
        self.last_result: Optional[Dict[str, Any]] = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.is_running:
            return
        self._task = asyncio.create_task(self._loop(), name="cleanup-scheduler")
        logger.info(f"⏰ Cleanup scheduler started (every {self.interval_seconds:.0f}s)")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Cleanup scheduler stopped")

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            await self.run_scheduled()

    async def run_scheduled(self) -> Optional[Dict[str, Any]]:
        try:
            return await self._execute("scheduled")
        except Exception:
            logger.exception("❌ Scheduled cleanup failed, retrying on next tick")
            return None

    async def run_now(self) -> Dict[str, Any]:
        logger.info("🧹 Manual cleanup triggered")
        return await self._execute("manual")

    async def _execute(self, trigger: str) -> Dict[str, Any]:
        started = time.monotonic()
        result = await self._cleanup()

        self.last_run_at = datetime.utcnow()
        self.last_result = result
        logger.success(f"Cleanup ({trigger}) completed in {time.monotonic() - started:.2f}s")
        return result
