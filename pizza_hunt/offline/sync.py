"""
Sync Engine - Flushes the offline queue to the Pizza Hunt API.

On every connectivity-restored event the engine reads everything the
local queue holds and posts it as one JSON array to the batch-create
endpoint. Only when the server accepts the batch are those records
removed from the queue. Failures are logged and the records stay where
they are until the next event; no retry is scheduled.
"""

import asyncio
import httpx
import logging
from typing import Any, Callable, Optional

from ..core.config import OfflineConfig, settings
from ..core.exceptions import OfflineQueueError, SyncError
from ..core.utils import safe_json_loads, truncate_string
from .connectivity import ConnectivityMonitor
from .queue import LocalQueue

logger = logging.getLogger(__name__)

CONFIRMATION = "All saved pizza has been submitted!"


def _log_confirmation(message: str) -> None:
    logger.info(message)


class SyncEngine:
    """
    Submits queued pizzas in a single batch request.

    Flushes never overlap: an event arriving while a flush is in flight
    waits for it, then finds only what was queued in the meantime.

    Records enqueued after the batch was read are never deleted by that
    batch's success, because only the submitted keys are removed.
    """

    def __init__(
        self,
        queue: LocalQueue,
        config: OfflineConfig | None = None,
        on_flushed: Callable[[str], None] = _log_confirmation,
        transport: httpx.AsyncBaseTransport | None = None
    ):
        """
        Args:
            queue: An opened local queue
            config: Offline settings, defaults to global settings
            on_flushed: Receives the confirmation message after a
                successful flush
            transport: Optional httpx transport, used to stub the API
        """
        config = config or settings.offline
        self.queue = queue
        self.create_url = config.create_url
        self.timeout = config.timeout
        self.on_flushed = on_flushed
        self.transport = transport
        self._lock = asyncio.Lock()
        self.batches_submitted = 0
        self.batches_failed = 0

    def attach(self, monitor: ConnectivityMonitor) -> Callable[[], None]:
        """
        Flush whenever the monitor reports connectivity is back.

        Returns:
            A function that detaches the engine again
        """
        return monitor.subscribe(self.flush)

    async def flush(self) -> int:
        """
        Submit everything queued and remove it once accepted.

        Returns:
            Number of records submitted, 0 if there was nothing to send
            or the attempt failed
        """
        async with self._lock:
            try:
                entries = await self.queue.drain_entries()
            except OfflineQueueError as e:
                logger.error(f"Could not read offline queue: {str(e)}")
                return 0

            if not entries:
                logger.debug("Offline queue empty, nothing to sync")
                return 0

            logger.info(f"Submitting {len(entries)} queued pizza(s) to {self.create_url}")

            try:
                await self._submit([entry.record for entry in entries])
            except SyncError as e:
                self.batches_failed += 1
                logger.error(f"Sync failed, keeping {len(entries)} record(s) queued: {str(e)}")
                return 0

            try:
                await self.queue.remove(entry.key for entry in entries)
            except OfflineQueueError as e:
                # The server has the batch; it will be resubmitted next time
                self.batches_failed += 1
                logger.error(f"Submitted batch but could not remove it locally: {str(e)}")
                return 0

            self.batches_submitted += 1
            self.on_flushed(CONFIRMATION)
            return len(entries)

    async def _submit(self, records: list[Any]) -> Any:
        """
        POST a batch and validate the response.

        Raises:
            SyncError: On network failure, a non-2xx status, an
                unreadable body, or a body carrying a `message` field
        """
        # Without a configured timeout, keep httpx's default
        client_args: dict[str, Any] = {"transport": self.transport}
        if self.timeout is not None:
            client_args["timeout"] = self.timeout

        try:
            async with httpx.AsyncClient(**client_args) as client:
                response = await client.post(
                    self.create_url,
                    json=records,
                    headers={"Accept": "application/json, text/plain, */*"}
                )
        except httpx.HTTPError as e:
            raise SyncError(f"Network error: {str(e)}") from e

        body: Optional[Any] = safe_json_loads(response.content, default=None)

        if not response.is_success:
            raise SyncError(
                f"Status {response.status_code}, Body: {truncate_string(response.text)}"
            )
        if body is None:
            raise SyncError(f"Unreadable response: {truncate_string(response.text)}")
        if isinstance(body, dict) and "message" in body:
            raise SyncError(f"Server reported: {body['message']}")

        return body
