"""Key-value backends for the content stores"""

import logging
import time
from typing import Any, Callable, Dict, List, Optional, Tuple

import httpx
import redis.asyncio as redis
from redis.exceptions import RedisError

from ideapage_api.core.config import StoreConfig
from ideapage_api.models.errors import StoreUnavailableError

logger = logging.getLogger(__name__)


class KVBackend:
    """Minimal string key-value contract used by ContentStore"""

    name = "kv"

    async def set(self, key: str, value: str, ex: int) -> None:
        raise NotImplementedError

    async def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    async def close(self) -> None:
        pass


class RestKVBackend(KVBackend):
    """
    Redis over HTTPS as spoken by Upstash and Vercel KV.

    Each command is POSTed as a JSON array, e.g. ["SET", key, value, "EX", 60],
    and answered with {"result": ...} or {"error": "..."}.
    """

    def __init__(
        self,
        url: str,
        token: str,
        name: str = "upstash",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url = url.rstrip("/")
        self.name = name
        self._client = httpx.AsyncClient(
            timeout=timeout,
            transport=transport,
            headers={"Authorization": f"Bearer {token}"},
        )

    async def _command(self, *args: Any) -> Any:
        try:
            response = await self._client.post(self.url, json=[str(a) for a in args])
        except httpx.HTTPError as e:
            logger.error(f"[KV] ✗ {self.name} unreachable | command={args[0]} | error={e!r}")
            raise StoreUnavailableError(f"{self.name} request failed: {e}") from e

        try:
            body = response.json()
        except ValueError:
            body = {}

        if response.status_code >= 400 or "error" in body:
            detail = body.get("error") or f"HTTP {response.status_code}"
            logger.error(f"[KV] ✗ {self.name} rejected {args[0]} | status={response.status_code} | error={detail}")
            raise StoreUnavailableError(f"{self.name} {args[0]} failed: {detail}")

        return body.get("result")

    async def set(self, key: str, value: str, ex: int) -> None:
        await self._command("SET", key, value, "EX", ex)

    async def get(self, key: str) -> Optional[str]:
        result = await self._command("GET", key)
        if result is None:
            return None
        return result if isinstance(result, str) else str(result)

    async def close(self) -> None:
        await self._client.aclose()


class RedisBackend(KVBackend):
    """Plain Redis connection (redis:// or rediss://)"""

    name = "redis"

    def __init__(self, url: str = "", client: Optional[redis.Redis] = None):
        self._client = client or redis.from_url(url, decode_responses=True)

    async def set(self, key: str, value: str, ex: int) -> None:
        try:
            await self._client.set(key, value, ex=ex)
        except RedisError as e:
            logger.error(f"[KV] ✗ redis SET failed | key={key} | error={e!r}")
            raise StoreUnavailableError(f"redis SET failed: {e}") from e

    async def get(self, key: str) -> Optional[str]:
        try:
            value = await self._client.get(key)
        except RedisError as e:
            logger.error(f"[KV] ✗ redis GET failed | key={key} | error={e!r}")
            raise StoreUnavailableError(f"redis GET failed: {e}") from e
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    async def close(self) -> None:
        await self._client.aclose()


class MemoryBackend(KVBackend):
    """Non-persistent placeholder: a dict with expiry timestamps"""

    name = "memory"

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._data: Dict[str, Tuple[str, float]] = {}
        self._clock = clock

    async def set(self, key: str, value: str, ex: int) -> None:
        now = self._clock()
        # Expired keys are swept on every write
        for stale in [k for k, (_, expires_at) in self._data.items() if expires_at <= now]:
            del self._data[stale]
        self._data[key] = (value, now + ex)

    async def get(self, key: str) -> Optional[str]:
        entry = self._data.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at <= self._clock():
            del self._data[key]
            return None
        return value

    def keys(self) -> List[str]:
        return list(self._data)


def create_kv_backend(config: StoreConfig) -> KVBackend:
    """Build the backend chosen by resolve_store_config"""
    if config.backend in ("vercel-kv", "upstash"):
        return RestKVBackend(config.url, config.token, name=config.backend)
    if config.backend == "redis":
        return RedisBackend(config.url)
    return MemoryBackend()
