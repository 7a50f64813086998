"""
Document Store - Pizza and comment documents in Upstash Redis.

Each pizza and each comment is one JSON document stored under its own
key. A Redis list keeps pizza ids newest first so the collection can be
listed without scanning. Commands go over the Upstash REST API, which
needs no connection pool and works the same from every process.
"""

import httpx
import json
import logging
from typing import Any, Optional

from ..core.config import settings, StoreConfig, UpstashConfig
from ..core.exceptions import DocumentStoreError
from ..core.utils import generate_id, get_timestamp, safe_json_loads

# Configure logging
logger = logging.getLogger(__name__)


class DocumentStore:
    """
    Stores pizzas and comments as JSON documents.

    Pizza documents hold the ids of their comments; reading a pizza
    populates those ids with the comment documents. Replies are embedded
    in their comment document.

    Writes that touch several keys are sent as one pipeline request.
    There are no cross-document transactions.
    """

    def __init__(
        self,
        upstash: UpstashConfig | None = None,
        store: StoreConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None
    ):
        """
        Initialize the store with Upstash configuration.

        Args:
            upstash: Connection settings, defaults to global settings
            store: Key layout, defaults to global settings
            transport: Optional httpx transport, used to stub the REST API
        """
        upstash = upstash or settings.upstash
        store = store or settings.store
        self.base_url = upstash.rest_url
        self.headers = upstash.headers
        self.pizza_prefix = store.pizza_prefix
        self.comment_prefix = store.comment_prefix
        self.index_key = store.pizza_index_key
        self.timeout = store.timeout
        self.transport = transport

    # ============================================================
    # REST plumbing
    # ============================================================

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self.transport)

    async def _command(self, *args: str) -> Any:
        """
        Run a single Redis command.

        Returns:
            The `result` field of the Upstash response

        Raises:
            DocumentStoreError: On transport failure or a rejected command
        """
        try:
            async with self._client() as client:
                response = await client.post(
                    f"{self.base_url}",
                    headers=self.headers,
                    json=list(args)
                )
        except httpx.HTTPError as e:
            logger.error(f"Document store unreachable running {args[0]}: {str(e)}")
            raise DocumentStoreError(f"Document store unreachable: {str(e)}") from e

        data = safe_json_loads(response.content, default={})
        if response.status_code != 200 or "error" in data:
            logger.error(
                f"{args[0]} failed: Status {response.status_code}, "
                f"Error: {data.get('error', response.text)}"
            )
            raise DocumentStoreError(f"{args[0]} failed: {data.get('error', response.status_code)}")
        return data.get("result")

    async def _pipeline(self, commands: list[list[str]]) -> list[Any]:
        """
        Run several Redis commands in one request.

        Returns:
            One result per command, in order

        Raises:
            DocumentStoreError: If the request or any command failed
        """
        try:
            async with self._client() as client:
                response = await client.post(
                    f"{self.base_url}/pipeline",
                    headers=self.headers,
                    json=commands
                )
        except httpx.HTTPError as e:
            logger.error(f"Document store unreachable running pipeline: {str(e)}")
            raise DocumentStoreError(f"Document store unreachable: {str(e)}") from e

        if response.status_code != 200:
            logger.error(f"Pipeline failed: Status {response.status_code}, Body: {response.text}")
            raise DocumentStoreError(f"Pipeline failed: {response.status_code}")

        results = safe_json_loads(response.content, default=[])
        errors = [r["error"] for r in results if isinstance(r, dict) and "error" in r]
        if errors:
            logger.error(f"Pipeline command failed: {errors[0]}")
            raise DocumentStoreError(f"Pipeline command failed: {errors[0]}")
        return [r.get("result") if isinstance(r, dict) else None for r in results]

    async def _get_document(self, key: str) -> Optional[dict[str, Any]]:
        raw = await self._command("GET", key)
        if raw is None:
            return None
        return safe_json_loads(raw, default=None)

    async def _get_documents(self, keys: list[str]) -> list[dict[str, Any]]:
        if not keys:
            return []
        raws = await self._command("MGET", *keys)
        docs = [safe_json_loads(raw, default=None) for raw in raws or []]
        return [doc for doc in docs if doc is not None]

    def _pizza_key(self, pizza_id: str) -> str:
        return f"{self.pizza_prefix}{pizza_id}"

    def _comment_key(self, comment_id: str) -> str:
        return f"{self.comment_prefix}{comment_id}"

    # ============================================================
    # Population
    # ============================================================

    @staticmethod
    def _with_reply_count(comment: dict[str, Any]) -> dict[str, Any]:
        return {**comment, "replyCount": len(comment.get("replies", []))}

    async def _populate(self, pizza: dict[str, Any]) -> dict[str, Any]:
        """Replace a pizza's comment ids with the comment documents."""
        comment_ids = pizza.get("comments", [])
        comments = await self._get_documents(
            [self._comment_key(comment_id) for comment_id in comment_ids]
        )
        return {
            **pizza,
            "comments": [self._with_reply_count(c) for c in comments],
            "commentCount": len(comments)
        }

    # ============================================================
    # Pizzas
    # ============================================================

    async def create_pizzas(self, payloads: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """
        Create one or more pizzas in a single pipeline.

        Args:
            payloads: Validated pizza fields

        Returns:
            The created documents, in the order given
        """
        docs = []
        commands = []
        for payload in payloads:
            doc = {
                "_id": generate_id(),
                "pizzaName": payload.get("pizzaName"),
                "createdBy": payload.get("createdBy"),
                "createdAt": get_timestamp(),
                "size": payload.get("size") or "Large",
                "toppings": list(payload.get("toppings") or []),
                "comments": []
            }
            docs.append(doc)
            commands.append(["SET", self._pizza_key(doc["_id"]), json.dumps(doc)])
            commands.append(["LPUSH", self.index_key, doc["_id"]])

        if commands:
            await self._pipeline(commands)
            logger.info(f"Created {len(docs)} pizza(s)")

        return [{**doc, "commentCount": 0} for doc in docs]

    async def list_pizzas(self) -> list[dict[str, Any]]:
        """Return all pizzas, newest first, with comments populated."""
        ids = await self._command("LRANGE", self.index_key, "0", "-1") or []
        pizzas = await self._get_documents([self._pizza_key(i) for i in ids])
        return [await self._populate(pizza) for pizza in pizzas]

    async def get_pizza(self, pizza_id: str) -> Optional[dict[str, Any]]:
        """Return one populated pizza, or None if it does not exist."""
        pizza = await self._get_document(self._pizza_key(pizza_id))
        if pizza is None:
            return None
        return await self._populate(pizza)

    async def update_pizza(
        self,
        pizza_id: str,
        changes: dict[str, Any]
    ) -> Optional[dict[str, Any]]:
        """
        Merge changes into a pizza.

        Returns:
            The updated, populated pizza, or None if it does not exist
        """
        pizza = await self._get_document(self._pizza_key(pizza_id))
        if pizza is None:
            return None

        pizza.update({k: v for k, v in changes.items() if v is not None})
        await self._command("SET", self._pizza_key(pizza_id), json.dumps(pizza))
        return await self._populate(pizza)

    async def delete_pizza(self, pizza_id: str) -> Optional[dict[str, Any]]:
        """
        Delete a pizza together with its comments.

        Returns:
            The deleted pizza as it was, or None if it did not exist
        """
        pizza = await self._get_document(self._pizza_key(pizza_id))
        if pizza is None:
            return None

        populated = await self._populate(pizza)
        commands = [
            ["DEL", self._pizza_key(pizza_id)],
            ["LREM", self.index_key, "0", pizza_id]
        ]
        for comment_id in pizza.get("comments", []):
            commands.append(["DEL", self._comment_key(comment_id)])
        await self._pipeline(commands)

        logger.info(f"Deleted pizza {pizza_id}")
        return populated

    # ============================================================
    # Comments and replies
    # ============================================================

    async def add_comment(
        self,
        pizza_id: str,
        payload: dict[str, Any]
    ) -> Optional[dict[str, Any]]:
        """
        Create a comment and attach it to a pizza.

        Returns:
            The populated pizza, or None if the pizza does not exist
        """
        pizza = await self._get_document(self._pizza_key(pizza_id))
        if pizza is None:
            return None

        comment = {
            "_id": generate_id(),
            "commentBody": payload.get("commentBody"),
            "writtenBy": payload.get("writtenBy"),
            "createdAt": get_timestamp(),
            "replies": []
        }
        pizza.setdefault("comments", []).append(comment["_id"])

        await self._pipeline([
            ["SET", self._comment_key(comment["_id"]), json.dumps(comment)],
            ["SET", self._pizza_key(pizza_id), json.dumps(pizza)]
        ])
        return await self._populate(pizza)

    async def delete_comment(self, comment_id: str) -> Optional[dict[str, Any]]:
        """Delete a comment document, returning it or None if missing."""
        comment = await self._get_document(self._comment_key(comment_id))
        if comment is None:
            return None
        await self._command("DEL", self._comment_key(comment_id))
        return comment

    async def pull_comment(
        self,
        pizza_id: str,
        comment_id: str
    ) -> Optional[dict[str, Any]]:
        """
        Detach a comment id from a pizza.

        Returns:
            The populated pizza, or None if the pizza does not exist
        """
        pizza = await self._get_document(self._pizza_key(pizza_id))
        if pizza is None:
            return None

        pizza["comments"] = [c for c in pizza.get("comments", []) if c != comment_id]
        await self._command("SET", self._pizza_key(pizza_id), json.dumps(pizza))
        return await self._populate(pizza)

    async def add_reply(
        self,
        comment_id: str,
        payload: dict[str, Any]
    ) -> Optional[dict[str, Any]]:
        """
        Append a reply to a comment.

        Returns:
            The updated comment, or None if the comment does not exist
        """
        comment = await self._get_document(self._comment_key(comment_id))
        if comment is None:
            return None

        comment.setdefault("replies", []).append({
            "replyId": generate_id(),
            "replyBody": payload.get("replyBody"),
            "writtenBy": payload.get("writtenBy"),
            "createdAt": get_timestamp()
        })
        await self._command("SET", self._comment_key(comment_id), json.dumps(comment))
        return self._with_reply_count(comment)

    async def remove_reply(
        self,
        comment_id: str,
        reply_id: str
    ) -> Optional[dict[str, Any]]:
        """
        Remove a reply from a comment.

        Returns:
            The updated comment, or None if the comment does not exist
        """
        comment = await self._get_document(self._comment_key(comment_id))
        if comment is None:
            return None

        comment["replies"] = [
            r for r in comment.get("replies", []) if r.get("replyId") != reply_id
        ]
        await self._command("SET", self._comment_key(comment_id), json.dumps(comment))
        return self._with_reply_count(comment)

    # ============================================================
    # Health
    # ============================================================

    async def health_check(self) -> bool:
        """
        Check if Upstash Redis is reachable.

        Returns:
            True if Redis responds to PING
        """
        try:
            return await self._command("PING") == "PONG"
        except DocumentStoreError:
            return False
