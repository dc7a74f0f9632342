"""Outbound HTTP delivery of snapshots to registered clients."""

import httpx

from msauth.authority.types import Snapshot
from msauth.core.settings import SYNC_TIMEOUT_DEFAULT


class SyncTransport:
    """POSTs snapshots as JSON; any non-2xx response counts as a failure."""

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        timeout: float = SYNC_TIMEOUT_DEFAULT,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def push(self, url: str, snapshot: Snapshot) -> None:
        """Deliver one snapshot; raises ``httpx.HTTPError`` on failure."""
        response = await self._client.post(
            url, json=snapshot.model_dump(mode="json", by_alias=True)
        )
        response.raise_for_status()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
