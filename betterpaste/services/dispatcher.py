"""Outbound delivery of blocks to the local BetterPaste backend."""

import logging
from typing import Optional

import httpx

from betterpaste.models.block import BlockRecord
from betterpaste.models.outcome import DispatchOutcome

logger = logging.getLogger(__name__)

DEFAULT_SERVER_URL = "http://127.0.0.1:3030/api/diff"
TIMEOUT = 10  # seconds


class SyncDispatcher:
    """POST blocks as JSON to a fixed local endpoint.

    :meth:`dispatch` never raises for network problems; every attempt ends
    in a :class:`DispatchOutcome`.  The dispatcher does not touch dedup
    state, that is the caller's job once the outcome is known.
    """

    def __init__(
        self,
        server_url: str = DEFAULT_SERVER_URL,
        *,
        timeout: float = TIMEOUT,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.server_url = server_url
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def dispatch(self, block: BlockRecord) -> DispatchOutcome:
        payload = block.to_payload().model_dump()
        try:
            response = await self._client.post(
                self.server_url,
                json=payload,
                headers={"Content-Type": "application/json"},
            )
        except httpx.TransportError as exc:
            logger.error("Could not reach %s for %s: %s", self.server_url, block.file_path, exc)
            return DispatchOutcome.failure("connect", detail=str(exc) or type(exc).__name__)

        if 200 <= response.status_code < 300:
            logger.info("Delivered block for %s (HTTP %s)", block.file_path, response.status_code)
            return DispatchOutcome.success(response.status_code)

        logger.error(
            "Backend rejected block for %s with HTTP %s", block.file_path, response.status_code
        )
        return DispatchOutcome.failure(
            "backend",
            detail=f"HTTP {response.status_code}",
            status_code=response.status_code,
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
