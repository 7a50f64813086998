"""
Offline module: durable local queue and resync on reconnect.

start_offline_sync() wires the pieces together. The returned bundle owns
the queue; nothing here is a module-level singleton.
"""

import httpx
from dataclasses import dataclass
from typing import Callable, Optional

from ..core.config import OfflineConfig, settings
from .client import SubmissionClient
from .connectivity import ConnectivityMonitor
from .queue import LocalQueue, QueuedEntry
from .sync import CONFIRMATION, SyncEngine


@dataclass
class OfflineSync:
    """The wired-up offline subsystem."""
    queue: LocalQueue
    monitor: ConnectivityMonitor
    engine: SyncEngine
    client: SubmissionClient
    detach: Callable[[], None]

    async def aclose(self) -> None:
        """Wait for running flushes, detach the engine and close the queue."""
        await self.monitor.wait_idle()
        self.detach()
        await self.queue.close()


async def start_offline_sync(
    config: OfflineConfig | None = None,
    online: bool = True,
    on_flushed: Optional[Callable[[str], None]] = None,
    transport: httpx.AsyncBaseTransport | None = None,
    monitor: ConnectivityMonitor | None = None
) -> OfflineSync:
    """
    Open the local queue and start syncing it.

    The initial storage-ready event is fired before returning, so a
    client that starts online submits leftovers from earlier sessions
    right away.

    Args:
        config: Offline settings, defaults to global settings
        online: Connectivity at startup, ignored if monitor is given
        on_flushed: Receives the confirmation after each successful flush
        transport: Optional httpx transport for the API
        monitor: An existing connectivity monitor to attach to

    Returns:
        The OfflineSync bundle

    Raises:
        OfflineQueueError: If the local queue cannot be opened
    """
    config = config or settings.offline
    queue = await LocalQueue(config).open()
    monitor = monitor or ConnectivityMonitor(online=online)

    engine_args = {"transport": transport}
    if on_flushed is not None:
        engine_args["on_flushed"] = on_flushed
    engine = SyncEngine(queue, config, **engine_args)
    client = SubmissionClient(queue, config, transport=transport)

    detach = engine.attach(monitor)
    monitor.storage_ready()

    return OfflineSync(
        queue=queue,
        monitor=monitor,
        engine=engine,
        client=client,
        detach=detach
    )


__all__ = [
    "CONFIRMATION",
    "ConnectivityMonitor",
    "LocalQueue",
    "OfflineSync",
    "QueuedEntry",
    "SubmissionClient",
    "SyncEngine",
    "start_offline_sync",
]
