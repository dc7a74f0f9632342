"""Cron-driven background rotation."""

from collections.abc import Awaitable, Callable
from typing import Any

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from msauth.core.errors import ConfigError, StorageError, SyncError
from msauth.core.logging import get_logger

ROTATION_JOB_ID = "msauth-rotate-keys"

logger = get_logger("msauth.scheduler")


def build_trigger(cron: str) -> CronTrigger:
    """Parse a five-field crontab expression, evaluated in UTC."""
    try:
        return CronTrigger.from_crontab(cron, timezone="UTC")
    except ValueError as exc:
        raise ConfigError(f"invalid rotation cron {cron!r}: {exc}") from exc


class RotationScheduler:
    """Runs ``rotate`` on every cron tick until shut down."""

    def __init__(self, rotate: Callable[[], Awaitable[Any]], cron: str) -> None:
        self._rotate = rotate
        self._trigger = build_trigger(cron)
        self._scheduler: AsyncIOScheduler | None = None

    @property
    def running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    async def tick(self) -> None:
        """One scheduled rotation; failures are logged, the schedule continues."""
        try:
            await self._rotate()
        except SyncError as exc:
            logger.warning(
                "scheduled rotation not delivered to all clients",
                failed=sorted(exc.failures),
            )
        except StorageError as exc:
            logger.error("scheduled rotation not persisted", error=str(exc))

    def start(self) -> None:
        """Start the scheduler on the running event loop."""
        if self.running:
            return
        scheduler = AsyncIOScheduler(timezone="UTC")
        scheduler.add_job(
            self.tick,
            self._trigger,
            id=ROTATION_JOB_ID,
            max_instances=1,
            coalesce=True,
        )
        scheduler.start()
        self._scheduler = scheduler
        logger.info("rotation scheduler started", trigger=str(self._trigger))

    def shutdown(self) -> None:
        if self._scheduler is None:
            return
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
        self._scheduler = None
        logger.info("rotation scheduler stopped")

    def next_run_time(self) -> Any:
        if self._scheduler is None:
            return None
        job = self._scheduler.get_job(ROTATION_JOB_ID)
        return job.next_run_time if job else None
