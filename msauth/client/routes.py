"""Endpoint a registered client mounts to receive snapshot pushes."""

from fastapi import APIRouter, Response

from msauth.authority.types import Snapshot
from msauth.client.verifier import SnapshotVerifier

SYNC_PATH_DEFAULT = "/auth/sync"


def create_sync_router(
    verifier: SnapshotVerifier, path: str = SYNC_PATH_DEFAULT
) -> APIRouter:
    """Build a router whose POST handler feeds pushed snapshots to ``verifier``."""
    router = APIRouter(tags=["msauth-sync"])

    @router.post(path, status_code=204)
    async def receive_snapshot(snapshot: Snapshot) -> Response:
        verifier.apply(snapshot)
        return Response(status_code=204)

    return router
