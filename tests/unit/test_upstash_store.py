"""Tests for the Upstash Redis store, using httpx.MockTransport."""
import asyncio
import json

import httpx
import pytest

from adwall.core.config import UpstashConfig
from adwall.core.exceptions import StorageError
from adwall.storage import UpstashAdStore, build_store


CONFIG = UpstashConfig(
    rest_url="https://example.upstash.io",
    rest_token="secret-token",
    ads_key="test:ads",
)


class FakeRedis:
    """Answers the handful of commands the store sends."""

    def __init__(self):
        self.data = {}
        self.commands = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        assert request.headers["Authorization"] == "Bearer secret-token"
        command = json.loads(request.content)
        self.commands.append(command)

        name = command[0]
        if name == "GET":
            return httpx.Response(200, json={"result": self.data.get(command[1])})
        if name == "SET":
            self.data[command[1]] = command[2]
            return httpx.Response(200, json={"result": "OK"})
        if name == "PING":
            return httpx.Response(200, json={"result": "PONG"})
        return httpx.Response(200, json={"error": f"ERR unknown command '{name}'"})


def make_store(handler):
    return UpstashAdStore(CONFIG, transport=httpx.MockTransport(handler))


def test_empty_key_is_empty_board():
    redis = FakeRedis()

    assert asyncio.run(make_store(redis).load_all()) == []
    assert redis.commands == [["GET", "test:ads"]]


def test_save_then_load():
    redis = FakeRedis()
    store = make_store(redis)
    ads = [{"id": "1", "title": "Piano", "clicked": 3, "videos": []}]

    asyncio.run(store.save_all(ads))

    assert json.loads(redis.data["test:ads"]) == ads
    assert asyncio.run(store.load_all()) == ads


def test_corrupt_document_raises():
    redis = FakeRedis()
    redis.data["test:ads"] = "not json"

    with pytest.raises(StorageError, match="Corrupt ads document"):
        asyncio.run(make_store(redis).load_all())


def test_non_array_document_raises():
    redis = FakeRedis()
    redis.data["test:ads"] = '{"id": "1"}'

    with pytest.raises(StorageError, match="expected a JSON array"):
        asyncio.run(make_store(redis).load_all())


def test_http_error_status_raises():
    store = make_store(lambda request: httpx.Response(401, text="Unauthorized"))

    with pytest.raises(StorageError, match="Status 401"):
        asyncio.run(store.load_all())


def test_redis_error_reply_raises():
    store = make_store(lambda request: httpx.Response(200, json={"error": "WRONGTYPE"}))

    with pytest.raises(StorageError, match="WRONGTYPE"):
        asyncio.run(store.save_all([]))


def test_transport_failure_raises():
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(StorageError, match="request failed"):
        asyncio.run(make_store(refuse).load_all())


def test_health_check():
    assert asyncio.run(make_store(FakeRedis()).health_check()) is True

    broken = make_store(lambda request: httpx.Response(500, text="boom"))
    assert asyncio.run(broken.health_check()) is False


def test_requires_credentials():
    with pytest.raises(StorageError, match="UPSTASH_REDIS_REST_URL"):
        UpstashAdStore(UpstashConfig())


@pytest.mark.parametrize("backend, expected", [
    ("memory", "memory"),
    ("file", "file"),
    ("async-file", "async-file"),
])
def test_build_store_selects_backend(make_settings, backend, expected):
    assert build_store(make_settings(ADWALL_STORE=backend)).name == expected


def test_build_store_upstash(make_settings):
    settings = make_settings(
        ADWALL_STORE="upstash",
        UPSTASH_REDIS_REST_URL="https://example.upstash.io/",
        UPSTASH_REDIS_REST_TOKEN="secret-token",
    )

    store = build_store(settings)

    assert store.name == "upstash"
    assert store.base_url == "https://example.upstash.io"
