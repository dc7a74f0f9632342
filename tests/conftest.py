"""Shared test fixtures for msauth."""

from collections.abc import AsyncIterator, Callable

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from msauth.authority.service import Authority
from msauth.core.app import create_app
from msauth.core.settings import AuthoritySettings
from msauth.storage.memory import MemoryStorage
from msauth.sync.transport import SyncTransport

ISSUER = "http://localhost:8000"
ADMIN_TOKEN = "test-admin-token"

Handler = Callable[[httpx.Request], httpx.Response]


@pytest.fixture(autouse=True)
def _set_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Set environment variables for test settings."""
    monkeypatch.setenv("MSAUTH_ISSUER", ISSUER)
    monkeypatch.setenv("MSAUTH_ADMIN_TOKEN", ADMIN_TOKEN)


@pytest.fixture
def settings() -> AuthoritySettings:
    return AuthoritySettings()


@pytest.fixture
def pushed() -> list[httpx.Request]:
    """Requests seen by the mock sync transport."""
    return []


@pytest.fixture
def sync_handler(pushed: list[httpx.Request]) -> Handler:
    """Accept every push; tests override this fixture to simulate failures."""

    def _handler(request: httpx.Request) -> httpx.Response:
        pushed.append(request)
        return httpx.Response(200)

    return _handler


@pytest.fixture
async def transport(sync_handler: Handler) -> AsyncIterator[SyncTransport]:
    """Sync transport backed by httpx.MockTransport."""
    async with httpx.AsyncClient(transport=httpx.MockTransport(sync_handler)) as ac:
        yield SyncTransport(client=ac)


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
async def authority(
    settings: AuthoritySettings,
    storage: MemoryStorage,
    transport: SyncTransport,
) -> AsyncIterator[Authority]:
    """Initialised authority without the background scheduler."""
    auth = Authority(settings, storage=storage, transport=transport)
    await auth.init(start_scheduler=False)
    yield auth
    await auth.shutdown()


@pytest.fixture
async def client(authority: Authority) -> AsyncIterator[AsyncClient]:
    """httpx test client for the admin API."""
    app = create_app(authority, start_scheduler=False)
    asgi = ASGITransport(app=app)
    async with AsyncClient(transport=asgi, base_url="http://test") as ac:
        yield ac
