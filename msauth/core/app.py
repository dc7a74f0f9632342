"""FastAPI application factory for the msauth authority."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from msauth.api.router_admin import router as admin_router
from msauth.api.routes_jwks import router as jwks_router
from msauth.authority.service import Authority
from msauth.core.logging import configure_logging
from msauth.core.settings import AuthoritySettings, StorageSettings
from msauth.storage.factory import build_storage


def create_app(
    authority: Authority | None = None, start_scheduler: bool = True
) -> FastAPI:
    """Build and configure the FastAPI application."""
    if authority is None:
        settings = AuthoritySettings()
        configure_logging("msauth", settings.log_level, settings.json_logs)
        authority = Authority(settings, storage=build_storage(StorageSettings()))

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        await authority.init(start_scheduler=start_scheduler)
        try:
            yield
        finally:
            await authority.shutdown()

    app = FastAPI(
        title="msauth credential authority",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.authority = authority

    app.include_router(jwks_router)
    app.include_router(admin_router)

    return app
