"""Registry of downstream consumers and snapshot fan-out."""

import asyncio
import inspect
import threading
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

import httpx

from msauth.authority.types import ClientMap, ClientRecord, Snapshot
from msauth.core.errors import SyncError, ValidationError
from msauth.core.logging import get_logger
from msauth.sync.transport import SyncTransport

FailureHandler = Callable[[str, Exception], Awaitable[None] | None]

logger = get_logger("msauth.registry")


@dataclass
class SyncReport:
    """Outcome of one fan-out."""

    delivered: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)


class FailureCollector:
    """Failure handler that records errors and escalates them afterwards."""

    def __init__(self) -> None:
        self.failures: dict[str, Exception] = {}

    def __call__(self, name: str, error: Exception) -> None:
        self.failures[name] = error

    def raise_if_failed(self) -> None:
        if self.failures:
            raise SyncError(dict(self.failures))


def log_failure(name: str, error: Exception) -> None:
    """Failure handler that logs and carries on."""
    logger.warning("client sync failed", client=name, error=str(error))


class ClientRegistry:
    """Tracks registered clients and pushes snapshots to them."""

    def __init__(self, clients: ClientMap | None = None) -> None:
        self._lock = threading.Lock()
        self._clients: ClientMap = dict(clients or {})

    def __len__(self) -> int:
        return len(self._clients)

    def register(self, name: str, url: str) -> ClientRecord:
        """Store or overwrite a client entry."""
        if not name or not url:
            raise ValidationError("client name and url are required")
        try:
            parsed = httpx.URL(url)
        except httpx.InvalidURL as exc:
            raise ValidationError(f"invalid client url {url!r}: {exc}") from exc
        if parsed.scheme not in ("http", "https") or not parsed.host:
            raise ValidationError(f"client url {url!r} must be absolute http(s)")
        record = ClientRecord(name=name, url=url)
        with self._lock:
            self._clients[name] = record
        logger.info("client registered", client=name, url=url)
        return record

    def replace(self, clients: ClientMap) -> None:
        with self._lock:
            self._clients = dict(clients)

    def clients(self) -> ClientMap:
        """Copy of the registered clients."""
        with self._lock:
            return {name: rec.model_copy() for name, rec in self._clients.items()}

    async def sync(
        self,
        snapshot: Snapshot,
        transport: SyncTransport,
        failure_handler: FailureHandler,
    ) -> SyncReport:
        """Push a snapshot to every client concurrently.

        Each client's failure goes to ``failure_handler`` alone and never
        stops delivery to the others.
        """
        report = SyncReport()

        async def _deliver(record: ClientRecord) -> None:
            try:
                await transport.push(record.url, snapshot)
            except (httpx.HTTPError, httpx.InvalidURL) as exc:
                report.failed.append(record.name)
                result = failure_handler(record.name, exc)
                if inspect.isawaitable(result):
                    await result
                return
            report.delivered.append(record.name)

        targets = list(self.clients().values())
        results = await asyncio.gather(
            *(_deliver(rec) for rec in targets), return_exceptions=True
        )
        for result in results:
            if isinstance(result, BaseException):
                raise result
        logger.debug(
            "snapshot synced", delivered=report.delivered, failed=report.failed
        )
        return report
