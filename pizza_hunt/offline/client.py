"""
Submission Client - What the UI calls to create a pizza.

create_pizza() posts straight to the API. If the request never reaches
the server, the payload is saved to the local queue instead and the
sync engine sends it on the next connectivity-restored event.
"""

import httpx
import logging
from typing import Any, Optional

from ..core.config import OfflineConfig, settings
from ..core.exceptions import OfflineQueueError, SubmissionError
from ..core.utils import safe_json_loads
from .queue import LocalQueue

logger = logging.getLogger(__name__)


class SubmissionClient:
    """
    Creates pizzas, falling back to the offline queue on network failure.
    """

    def __init__(
        self,
        queue: LocalQueue,
        config: OfflineConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None
    ):
        config = config or settings.offline
        self.queue = queue
        self.create_url = config.create_url
        self.timeout = config.timeout
        self.transport = transport

    async def save_record(self, record: Any) -> Optional[int]:
        """
        Queue a payload for the next sync. Never contacts the server.

        Args:
            record: The payload that could not be sent

        Returns:
            The local key, or None if the queue could not store it
        """
        try:
            key = await self.queue.enqueue(record)
        except OfflineQueueError as e:
            logger.error(f"Could not save pizza for later submission: {str(e)}")
            return None

        logger.info(f"Saved pizza locally as record {key}; it will be submitted when back online")
        return key

    async def create_pizza(self, payload: dict[str, Any]) -> dict[str, Any]:
        """
        Create a pizza, queueing it locally if the server is unreachable.

        Args:
            payload: Pizza fields collected by the form

        Returns:
            The created pizza, or `{"queued": True, "key": ...}` when the
            payload was saved for later

        Raises:
            SubmissionError: If the server answered with an error; such
                payloads are not queued
        """
        client_args: dict[str, Any] = {"transport": self.transport}
        if self.timeout is not None:
            client_args["timeout"] = self.timeout

        try:
            async with httpx.AsyncClient(**client_args) as client:
                response = await client.post(self.create_url, json=payload)
        except httpx.TransportError as e:
            logger.warning(f"Could not reach {self.create_url}: {str(e)}")
            key = await self.save_record(payload)
            return {"queued": key is not None, "key": key}

        body = safe_json_loads(response.content, default={})
        if not response.is_success or (isinstance(body, dict) and "message" in body):
            message = body.get("message", "") if isinstance(body, dict) else ""
            raise SubmissionError(response.status_code, message)

        return body
