"""
Upstash Store - the ads array kept in Upstash Redis.

Serverless hosts wipe the local filesystem between cold starts, so this
backend keeps the whole ads array as one JSON string under a single
Redis key. It talks to Upstash over its REST API, which is
connectionless and needs no pool management.
"""

import httpx
import json
import logging
from typing import Any, Optional

from ..core.config import UpstashConfig
from ..core.exceptions import StorageError
from .base import AdStore

logger = logging.getLogger(__name__)


class UpstashAdStore(AdStore):
    """
    Stores the ads array under ``config.ads_key`` in Upstash Redis.

    Each call opens a short-lived ``httpx.AsyncClient``. Failures are
    raised as StorageError so the route can answer with a 500 instead
    of pretending the board is empty.
    """

    name = "upstash"

    def __init__(
        self,
        config: UpstashConfig,
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Args:
            config: Upstash connection settings
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport, used by tests
        """
        if not config.configured:
            raise StorageError(
                "Upstash store selected but UPSTASH_REDIS_REST_URL / "
                "UPSTASH_REDIS_REST_TOKEN are not set"
            )
        self.base_url = config.rest_url
        self.headers = config.headers
        self.key = config.ads_key
        self.timeout = timeout
        self.transport = transport

    async def _command(self, *args: str) -> Any:
        """
        Execute a single Redis command and return its ``result``.

        Raises:
            StorageError: On transport errors, non-200 responses or a
                Redis-level error reply
        """
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                transport=self.transport
            ) as client:
                response = await client.post(
                    self.base_url,
                    headers=self.headers,
                    json=list(args)
                )
        except httpx.TimeoutException as e:
            raise StorageError(f"Timeout running {args[0]} on Upstash") from e
        except httpx.HTTPError as e:
            raise StorageError(f"Upstash request failed: {e}") from e

        if response.status_code != 200:
            raise StorageError(
                f"Upstash {args[0]} failed: Status {response.status_code}, Body: {response.text}"
            )

        try:
            data = response.json()
        except ValueError as e:
            raise StorageError(f"Upstash returned a non-JSON body: {response.text}") from e

        if data.get("error"):
            raise StorageError(f"Upstash {args[0]} error: {data['error']}")
        return data.get("result")

    async def load_all(self) -> list[dict[str, Any]]:
        raw = await self._command("GET", self.key)
        if raw is None:
            return []

        try:
            ads = json.loads(raw)
        except (json.JSONDecodeError, TypeError) as e:
            raise StorageError(f"Corrupt ads document under '{self.key}': {e}") from e

        if not isinstance(ads, list):
            raise StorageError(
                f"Corrupt ads document under '{self.key}': expected a JSON array"
            )
        return ads

    async def save_all(self, ads: list[dict[str, Any]]) -> None:
        try:
            payload = json.dumps(ads, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise StorageError(f"Ads are not JSON serializable: {e}") from e

        await self._command("SET", self.key, payload)
        logger.debug(f"Stored {len(ads)} ads under '{self.key}'")

    async def health_check(self) -> bool:
        """
        Check if the Upstash Redis connection is healthy.

        Returns:
            True if PING answers PONG, False otherwise
        """
        try:
            return await self._command("PING") == "PONG"
        except StorageError as e:
            logger.warning(f"Upstash health check failed: {e}")
            return False
