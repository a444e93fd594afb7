from __future__ import annotations

import httpx
import pytest

from productlink.config import Settings
from productlink.errors import StoreNotConfiguredError, UpstreamStoreError
from productlink.services.addressing import content_id
from productlink.services.storage import (
    CloudflareKVStore,
    InMemoryStore,
    StorageGateway,
    build_store,
)

KEY = content_id(b'[{"product":"Test"}]')


def _kv_store(handler) -> CloudflareKVStore:
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return CloudflareKVStore(
        "acct", "ns", "token", api_base="https://kv.example.com/v4", client=client
    )


def test_in_memory_put_is_idempotent() -> None:
    store = InMemoryStore()

    store.put(KEY, '[{"product":"Test"}]')
    store.put(KEY, '[{"product":"Test"}]')

    assert len(store) == 1
    assert store.get(KEY) == '[{"product":"Test"}]'


def test_in_memory_unknown_key_returns_none() -> None:
    assert InMemoryStore().get(KEY) is None


def test_in_memory_ttl_expires_entries() -> None:
    now = [1000.0]
    store = InMemoryStore(clock=lambda: now[0])

    store.put(KEY, "[]", ttl=60)
    assert store.get(KEY) == "[]"

    now[0] += 61
    assert store.get(KEY) is None


def test_gateways_satisfy_protocol() -> None:
    assert isinstance(InMemoryStore(), StorageGateway)
    assert isinstance(CloudflareKVStore(None, None, None), StorageGateway)


def test_cloudflare_put_sends_text_and_ttl() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"success": True})

    _kv_store(handler).put(KEY, '[{"product":"Café"}]', ttl=3600)

    request = seen[0]
    assert request.method == "PUT"
    assert request.url.path == f"/v4/accounts/acct/storage/kv/namespaces/ns/values/{KEY}"
    assert request.url.params["expiration_ttl"] == "3600"
    assert request.content == '[{"product":"Café"}]'.encode("utf-8")


def test_cloudflare_get_hit_and_miss() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith(KEY):
            return httpx.Response(200, content=b"[]")
        return httpx.Response(404, json={"success": False})

    store = _kv_store(handler)

    assert store.get(KEY) == "[]"
    assert store.get("0" * 64) is None


def test_cloudflare_server_error_raises_upstream_error() -> None:
    store = _kv_store(lambda request: httpx.Response(503))

    with pytest.raises(UpstreamStoreError) as excinfo:
        store.get(KEY)

    assert not isinstance(excinfo.value, StoreNotConfiguredError)


def test_cloudflare_transport_error_raises_upstream_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(UpstreamStoreError):
        _kv_store(handler).put(KEY, "[]")


def test_cloudflare_without_credentials_is_not_configured() -> None:
    store = CloudflareKVStore("acct", None, "token")

    with pytest.raises(StoreNotConfiguredError):
        store.put(KEY, "[]")
    with pytest.raises(StoreNotConfiguredError):
        store.get(KEY)


def test_build_store_selects_backend() -> None:
    assert isinstance(build_store(Settings(storage_backend="memory")), InMemoryStore)
    assert isinstance(build_store(Settings(storage_backend="cloudflare")), CloudflareKVStore)


def test_cloudflare_close_releases_client() -> None:
    store = _kv_store(lambda request: httpx.Response(404))
    client = store._client

    assert store.get(KEY) is None
    store.close()

    assert client.is_closed
    assert store._client is None
    store.close()


def test_cloudflare_close_without_client_is_a_no_op() -> None:
    store = CloudflareKVStore(None, None, None)

    store.close()

    assert store._client is None
