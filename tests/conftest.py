"""Shared pytest fixtures."""
from __future__ import annotations

import json
from pathlib import Path

import httpx
import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from pizza_hunt.core.config import OfflineConfig, StoreConfig, UpstashConfig
from pizza_hunt.main import create_app
from pizza_hunt.offline.queue import LocalQueue
from pizza_hunt.storage.documents import DocumentStore


class FakeUpstash:
    """In-memory stand-in for the Upstash Redis REST API."""

    def __init__(self) -> None:
        self.strings: dict[str, str] = {}
        self.lists: dict[str, list[str]] = {}
        self.down = False

    def execute(self, command: list[str]):
        name, args = command[0].upper(), command[1:]
        if name == "PING":
            return "PONG"
        if name == "SET":
            self.strings[args[0]] = args[1]
            return "OK"
        if name == "GET":
            return self.strings.get(args[0])
        if name == "MGET":
            return [self.strings.get(key) for key in args]
        if name == "DEL":
            removed = 0
            for key in args:
                removed += int(self.strings.pop(key, None) is not None)
                removed += int(self.lists.pop(key, None) is not None)
            return removed
        if name == "LPUSH":
            items = self.lists.setdefault(args[0], [])
            for value in args[1:]:
                items.insert(0, value)
            return len(items)
        if name == "LRANGE":
            items = self.lists.get(args[0], [])
            start, stop = int(args[1]), int(args[2])
            stop = len(items) if stop == -1 else stop + 1
            return items[start:stop]
        if name == "LREM":
            items = self.lists.get(args[0], [])
            before = len(items)
            self.lists[args[0]] = [v for v in items if v != args[2]]
            return before - len(self.lists[args[0]])
        raise ValueError(f"ERR unknown command '{name}'")

    def handler(self, request: httpx.Request) -> httpx.Response:
        if self.down:
            raise httpx.ConnectError("connection refused", request=request)
        body = json.loads(request.content)
        if request.url.path.endswith("/pipeline"):
            return httpx.Response(200, json=[{"result": self.execute(c)} for c in body])
        try:
            return httpx.Response(200, json={"result": self.execute(body)})
        except ValueError as e:
            return httpx.Response(400, json={"error": str(e)})


@pytest.fixture
def upstash() -> FakeUpstash:
    return FakeUpstash()


@pytest.fixture
def store(upstash: FakeUpstash) -> DocumentStore:
    return DocumentStore(
        upstash=UpstashConfig(rest_url="http://upstash.test", rest_token="token"),
        store=StoreConfig(),
        transport=httpx.MockTransport(upstash.handler)
    )


@pytest.fixture
def app(store: DocumentStore):
    return create_app(store)


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture
def offline_config(tmp_path: Path) -> OfflineConfig:
    return OfflineConfig(
        data_dir=str(tmp_path / "offline"),
        api_base_url="http://pizza.test"
    )


@pytest_asyncio.fixture
async def queue(offline_config: OfflineConfig):
    local_queue = await LocalQueue(offline_config).open()
    yield local_queue
    await local_queue.close()


@pytest.fixture
def zesty() -> dict:
    return {"pizzaName": "Zesty", "createdBy": "Lernantino", "size": "Large", "toppings": ["Pepperoni"]}
