from __future__ import annotations

"""Append-only key-value gateways used by the content-addressed store."""

import logging
import threading
import time
from typing import Dict, Optional, Protocol, Tuple, runtime_checkable

import httpx

from productlink.config import Settings
from productlink.errors import StoreNotConfiguredError, UpstreamStoreError

logger = logging.getLogger(__name__)


@runtime_checkable
class StorageGateway(Protocol):
    """Put/get access to an external key-value service.

    Keys are content ids, so ``put`` is idempotent. There is no update or
    delete. ``get`` returns ``None`` for unknown keys and ``close``
    releases any connection the gateway holds.
    """

    def put(self, key: str, text: str, ttl: Optional[int] = None) -> None:
        ...

    def get(self, key: str) -> Optional[str]:
        ...

    def close(self) -> None:
        ...


class InMemoryStore:
    """Process-local store for development and tests."""

    def __init__(self, clock=time.monotonic) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._values: Dict[str, Tuple[str, Optional[float]]] = {}

    def put(self, key: str, text: str, ttl: Optional[int] = None) -> None:
        expires_at = self._clock() + ttl if ttl else None
        with self._lock:
            self._values[key] = (text, expires_at)

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            entry = self._values.get(key)
            if entry is None:
                return None
            text, expires_at = entry
            if expires_at is not None and self._clock() >= expires_at:
                del self._values[key]
                return None
            return text

    def __len__(self) -> int:
        return len(self._values)

    def close(self) -> None:
        pass


class CloudflareKVStore:
    """Cloudflare Workers KV namespace accessed through the REST API."""

    def __init__(
        self,
        account_id: Optional[str],
        namespace_id: Optional[str],
        api_token: Optional[str],
        *,
        api_base: str = "https://api.cloudflare.com/client/v4",
        timeout: float = 10.0,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self.account_id = account_id
        self.namespace_id = namespace_id
        self.api_token = api_token
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> "CloudflareKVStore":
        return cls(
            settings.cloudflare_account_id,
            settings.cloudflare_namespace_id,
            settings.cloudflare_api_token,
            api_base=settings.cloudflare_api_base,
            timeout=settings.store_timeout_seconds,
        )

    @property
    def configured(self) -> bool:
        return bool(self.account_id and self.namespace_id and self.api_token)

    def _client_or_raise(self) -> httpx.Client:
        if not self.configured:
            raise StoreNotConfiguredError(
                "KV namespace not configured: set PRODUCTLINK_CLOUDFLARE_ACCOUNT_ID, "
                "PRODUCTLINK_CLOUDFLARE_NAMESPACE_ID and PRODUCTLINK_CLOUDFLARE_API_TOKEN"
            )
        if self._client is None:
            self._client = httpx.Client(
                timeout=self.timeout,
                headers={"Authorization": f"Bearer {self.api_token}"},
            )
        return self._client

    def _value_url(self, key: str) -> str:
        return (
            f"{self.api_base}/accounts/{self.account_id}"
            f"/storage/kv/namespaces/{self.namespace_id}/values/{key}"
        )

    def put(self, key: str, text: str, ttl: Optional[int] = None) -> None:
        client = self._client_or_raise()
        params = {"expiration_ttl": ttl} if ttl else None
        try:
            response = client.put(
                self._value_url(key),
                params=params,
                content=text.encode("utf-8"),
                headers={"Content-Type": "text/plain; charset=utf-8"},
            )
        except httpx.HTTPError as exc:
            raise UpstreamStoreError(f"KV write failed: {exc}") from exc

        if response.is_error:
            raise UpstreamStoreError(f"KV write failed: HTTP {response.status_code}")
        logger.debug("Stored payload", extra={"content_id": key})

    def get(self, key: str) -> Optional[str]:
        client = self._client_or_raise()
        try:
            response = client.get(self._value_url(key))
        except httpx.HTTPError as exc:
            raise UpstreamStoreError(f"KV read failed: {exc}") from exc

        if response.status_code == 404:
            return None
        if response.is_error:
            raise UpstreamStoreError(f"KV read failed: HTTP {response.status_code}")
        return response.content.decode("utf-8")

    def close(self) -> None:
        """Release the HTTP client if one was opened."""

        if self._client is not None:
            self._client.close()
            self._client = None


def build_store(settings: Settings) -> StorageGateway:
    """Instantiate the gateway selected by ``settings.storage_backend``."""

    if settings.storage_backend == "cloudflare":
        return CloudflareKVStore.from_settings(settings)
    return InMemoryStore()
