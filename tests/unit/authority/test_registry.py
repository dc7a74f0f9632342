"""Tests for client registration and snapshot fan-out."""

import json

import httpx
import pytest

from msauth.authority.registry import ClientRegistry, FailureCollector, log_failure
from msauth.authority.types import ClientRecord, RevocationEntry, Snapshot
from msauth.core.errors import SyncError, ValidationError
from msauth.sync.transport import SyncTransport

SNAPSHOT = Snapshot(
    keys=[],
    revocation_list=[RevocationEntry(jti="a", exp=2_000_000_000)],
)


def _transport(handler) -> SyncTransport:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return SyncTransport(client=client)


class TestRegister:
    """Tests for register."""

    def test_stores_client(self) -> None:
        registry = ClientRegistry()
        registry.register("svc1", "http://svc1/sync")
        assert registry.clients()["svc1"].url == "http://svc1/sync"

    def test_overwrites_existing(self) -> None:
        registry = ClientRegistry()
        registry.register("svc1", "http://old")
        registry.register("svc1", "http://new")
        assert len(registry) == 1
        assert registry.clients()["svc1"].url == "http://new"

    @pytest.mark.parametrize(("name", "url"), [("", "http://x"), ("svc", "")])
    def test_empty_fields_rejected(self, name: str, url: str) -> None:
        with pytest.raises(ValidationError):
            ClientRegistry().register(name, url)

    @pytest.mark.parametrize(
        "url", ["http://[::1/x", "svc1/sync", "ftp://svc1/sync", "http://"]
    )
    def test_malformed_url_rejected(self, url: str) -> None:
        registry = ClientRegistry()
        with pytest.raises(ValidationError):
            registry.register("svc1", url)
        assert len(registry) == 0

    def test_clients_returns_copy(self) -> None:
        registry = ClientRegistry()
        registry.register("svc1", "http://x")
        registry.clients().clear()
        assert len(registry) == 1


class TestSync:
    """Tests for sync."""

    async def test_pushes_snapshot_to_every_client(self) -> None:
        seen: dict[str, dict] = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen[request.url.host] = json.loads(request.content)
            return httpx.Response(204)

        registry = ClientRegistry()
        registry.register("svc1", "http://svc1/sync")
        registry.register("svc2", "http://svc2/sync")
        report = await registry.sync(SNAPSHOT, _transport(handler), log_failure)
        assert sorted(report.delivered) == ["svc1", "svc2"]
        assert seen["svc1"]["revocationList"][0]["jti"] == "a"
        assert seen["svc2"]["keys"] == []

    async def test_unreachable_client_isolated(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.host == "svc1":
                raise httpx.ConnectError("unreachable", request=request)
            return httpx.Response(200)

        calls: list[tuple[str, Exception]] = []
        registry = ClientRegistry()
        registry.register("svc1", "http://svc1/sync")
        registry.register("svc2", "http://svc2/sync")
        report = await registry.sync(
            SNAPSHOT, _transport(handler), lambda n, e: calls.append((n, e))
        )
        assert report.delivered == ["svc2"]
        assert report.failed == ["svc1"]
        assert calls[0][0] == "svc1"
        assert isinstance(calls[0][1], httpx.ConnectError)

    async def test_unparseable_stored_url_isolated(self) -> None:
        collector = FailureCollector()
        registry = ClientRegistry(
            {
                "bad": ClientRecord(name="bad", url="http://[::1/x"),
                "good": ClientRecord(name="good", url="http://good/sync"),
            }
        )
        report = await registry.sync(
            SNAPSHOT, _transport(lambda r: httpx.Response(200)), collector
        )
        assert report.delivered == ["good"]
        assert report.failed == ["bad"]
        assert isinstance(collector.failures["bad"], httpx.InvalidURL)

    async def test_non_2xx_is_failure(self) -> None:
        collector = FailureCollector()
        registry = ClientRegistry()
        registry.register("svc1", "http://svc1/sync")
        await registry.sync(
            SNAPSHOT, _transport(lambda r: httpx.Response(500)), collector
        )
        assert isinstance(collector.failures["svc1"], httpx.HTTPStatusError)
        with pytest.raises(SyncError) as exc_info:
            collector.raise_if_failed()
        assert list(exc_info.value.failures) == ["svc1"]

    async def test_async_failure_handler_awaited(self) -> None:
        names: list[str] = []

        async def handler(name: str, error: Exception) -> None:
            names.append(name)

        registry = ClientRegistry()
        registry.register("svc1", "http://svc1/sync")
        await registry.sync(
            SNAPSHOT, _transport(lambda r: httpx.Response(503)), handler
        )
        assert names == ["svc1"]

    async def test_no_clients(self) -> None:
        report = await ClientRegistry().sync(
            SNAPSHOT, _transport(lambda r: httpx.Response(200)), log_failure
        )
        assert report.delivered == []
        assert report.failed == []


class TestFailureCollector:
    """Tests for the escalating failure policy."""

    def test_quiet_without_failures(self) -> None:
        FailureCollector().raise_if_failed()
