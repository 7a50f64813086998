"""Tests for the pizza and comment API."""
from __future__ import annotations

import httpx
import pytest
from fastapi.testclient import TestClient

from pizza_hunt.offline.queue import LocalQueue
from pizza_hunt.offline.sync import SyncEngine


def create(client: TestClient, **fields) -> dict:
    payload = {"pizzaName": "Zesty", "createdBy": "Lernantino", **fields}
    response = client.post("/api/pizzas", json=payload)
    assert response.status_code == 200
    return response.json()


class TestPizzas:

    def test_create_single_applies_defaults(self, client: TestClient):
        pizza = create(client)
        assert pizza["_id"]
        assert pizza["size"] == "Large"
        assert pizza["toppings"] == []
        assert pizza["comments"] == []
        assert pizza["commentCount"] == 0
        assert pizza["createdAt"]

    def test_create_array_returns_array(self, client: TestClient):
        batch = [
            {"pizzaName": "Zesty", "createdBy": "A", "size": "Large"},
            {"pizzaName": "Plain", "createdBy": "B", "size": "Small", "toppings": ["Cheese"]}
        ]
        response = client.post("/api/pizzas", json=batch)
        assert response.status_code == 200

        body = response.json()
        assert isinstance(body, list)
        assert [p["pizzaName"] for p in body] == ["Zesty", "Plain"]
        assert body[1]["toppings"] == ["Cheese"]

    def test_list_newest_first(self, client: TestClient):
        create(client, pizzaName="First")
        create(client, pizzaName="Second")

        names = [p["pizzaName"] for p in client.get("/api/pizzas").json()]
        assert names == ["Second", "First"]

    def test_get_missing_pizza(self, client: TestClient):
        response = client.get("/api/pizzas/doesnotexist")
        assert response.status_code == 404
        assert response.json() == {"message": "No pizza found with this id!"}

    def test_update_merges_fields(self, client: TestClient):
        pizza = create(client, toppings=["Pepperoni"])
        response = client.put(f"/api/pizzas/{pizza['_id']}", json={"size": "Small"})

        assert response.status_code == 200
        updated = response.json()
        assert updated["size"] == "Small"
        assert updated["toppings"] == ["Pepperoni"]
        assert updated["pizzaName"] == "Zesty"

    def test_update_missing_pizza(self, client: TestClient):
        response = client.put("/api/pizzas/nope", json={"size": "Small"})
        assert response.status_code == 404

    def test_delete(self, client: TestClient):
        pizza = create(client)
        response = client.delete(f"/api/pizzas/{pizza['_id']}")
        assert response.status_code == 200
        assert response.json()["_id"] == pizza["_id"]

        assert client.get(f"/api/pizzas/{pizza['_id']}").status_code == 404
        assert client.get("/api/pizzas").json() == []
        assert client.delete(f"/api/pizzas/{pizza['_id']}").status_code == 404

    def test_validation_error_carries_message(self, client: TestClient):
        response = client.post("/api/pizzas", json={"pizzaName": "Zesty", "toppings": "Pepperoni"})
        assert response.status_code == 422
        assert response.json()["message"] == "Validation failed"

    def test_store_down_returns_503(self, client: TestClient, upstash):
        upstash.down = True
        response = client.post("/api/pizzas", json={"pizzaName": "Zesty", "createdBy": "A"})
        assert response.status_code == 503
        assert "message" in response.json()


class TestComments:

    def test_comment_reply_and_remove(self, client: TestClient):
        pizza = create(client)

        response = client.post(
            f"/api/comments/{pizza['_id']}",
            json={"commentBody": "Looks great", "writtenBy": "Sam"}
        )
        assert response.status_code == 200
        pizza = response.json()
        assert pizza["commentCount"] == 1
        comment = pizza["comments"][0]
        assert comment["commentBody"] == "Looks great"

        response = client.put(
            f"/api/comments/{pizza['_id']}/{comment['_id']}",
            json={"replyBody": "Agreed", "writtenBy": "Alex"}
        )
        assert response.status_code == 200
        comment = response.json()
        assert comment["replyCount"] == 1
        reply_id = comment["replies"][0]["replyId"]

        response = client.delete(f"/api/comments/{pizza['_id']}/{comment['_id']}/{reply_id}")
        assert response.status_code == 200
        assert response.json()["replies"] == []

        response = client.delete(f"/api/comments/{pizza['_id']}/{comment['_id']}")
        assert response.status_code == 200
        assert response.json()["comments"] == []

    def test_comment_on_missing_pizza(self, client: TestClient):
        response = client.post("/api/comments/nope", json={"commentBody": "Hi", "writtenBy": "Sam"})
        assert response.status_code == 404
        assert response.json()["message"] == "No pizza found with this id!"

    def test_remove_missing_comment(self, client: TestClient):
        pizza = create(client)
        response = client.delete(f"/api/comments/{pizza['_id']}/nope")
        assert response.status_code == 404
        assert response.json()["message"] == "No comment with this id!"

    def test_reply_to_missing_comment(self, client: TestClient):
        response = client.put("/api/comments/p/nope", json={"replyBody": "Hi", "writtenBy": "Sam"})
        assert response.status_code == 404

    def test_pizza_listing_populates_comments(self, client: TestClient):
        pizza = create(client)
        client.post(f"/api/comments/{pizza['_id']}", json={"commentBody": "Yum", "writtenBy": "Sam"})

        listed = client.get("/api/pizzas").json()[0]
        assert listed["commentCount"] == 1
        assert listed["comments"][0]["writtenBy"] == "Sam"


def test_health(client: TestClient, upstash):
    assert client.get("/health").json()["store_connected"] is True

    upstash.down = True
    body = client.get("/health").json()
    assert body["status"] == "degraded"
    assert body["store_connected"] is False


@pytest.mark.asyncio
async def test_queued_pizzas_sync_into_api(app, queue: LocalQueue, offline_config, zesty: dict):
    """The sync engine's batch goes through the real batch-create route."""
    confirmations: list = []
    engine = SyncEngine(
        queue,
        offline_config,
        on_flushed=confirmations.append,
        transport=httpx.ASGITransport(app=app)
    )
    await queue.enqueue(zesty)
    await queue.enqueue({**zesty, "pizzaName": "Second"})

    assert await engine.flush() == 2
    assert await queue.drain() == []
    assert len(confirmations) == 1

    pizzas = await app.state.store.list_pizzas()
    assert sorted(p["pizzaName"] for p in pizzas) == ["Second", "Zesty"]


@pytest.mark.asyncio
async def test_invalid_queued_pizza_stays_queued(app, queue: LocalQueue, offline_config):
    engine = SyncEngine(
        queue,
        offline_config,
        on_flushed=lambda m: None,
        transport=httpx.ASGITransport(app=app)
    )
    bad = {"pizzaName": "Zesty", "toppings": "Pepperoni"}
    await queue.enqueue(bad)

    assert await engine.flush() == 0
    assert await queue.drain() == [bad]


@pytest.mark.asyncio
async def test_partial_queued_pizza_is_accepted(app, queue: LocalQueue, offline_config):
    """A record holding only some of the form fields still syncs."""
    confirmations: list = []
    engine = SyncEngine(
        queue,
        offline_config,
        on_flushed=confirmations.append,
        transport=httpx.ASGITransport(app=app)
    )
    await queue.enqueue({"pizzaName": "Zesty", "size": "Large"})
    await queue.enqueue({"pizzaName": "", "createdBy": "x"})

    assert await engine.flush() == 2
    assert await queue.drain() == []
    assert len(confirmations) == 1

    pizzas = await app.state.store.list_pizzas()
    zesty = next(p for p in pizzas if p["pizzaName"] == "Zesty")
    assert zesty["createdBy"] is None
    assert zesty["size"] == "Large"


def test_pizza_and_comment_fields_are_optional(client: TestClient):
    response = client.post("/api/pizzas", json={"size": "Small"})
    assert response.status_code == 200
    pizza = response.json()
    assert pizza["pizzaName"] is None
    assert pizza["toppings"] == []

    response = client.post(f"/api/comments/{pizza['_id']}", json={"commentBody": "No name"})
    assert response.status_code == 200
    comment = response.json()["comments"][0]
    assert comment["writtenBy"] is None

    response = client.put(f"/api/comments/{pizza['_id']}/{comment['_id']}", json={})
    assert response.status_code == 200
    assert response.json()["replyCount"] == 1
