"""
Connectivity Monitor - Turns online/offline signals into "back online" events.

The host application reports connectivity through set_online(); the
monitor does no polling of its own. Listeners are notified once per
real offline -> online transition, and once more when the local queue
has been opened while the client is already online, so data left over
from a previous session is flushed at startup.
"""

import asyncio
import logging
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)

Listener = Callable[[], Awaitable[None]]


class ConnectivityMonitor:
    """
    Publishes connectivity-restored events to subscribed listeners.

    Listeners are coroutine functions; each event schedules them as
    tasks on the running loop and returns immediately.
    """

    def __init__(self, online: bool = True):
        """
        Args:
            online: Connectivity state at startup
        """
        self._online = online
        self._listeners: list[Listener] = []
        self._tasks: set[asyncio.Task] = set()
        self._ready_fired = False

    @property
    def online(self) -> bool:
        return self._online

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a listener for connectivity-restored events.

        Returns:
            A function that removes the listener again
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def set_online(self, online: bool) -> bool:
        """
        Report the platform's current connectivity.

        Args:
            online: True when the network is reachable

        Returns:
            True if this call fired a connectivity-restored event
        """
        was_online = self._online
        self._online = online

        if online and not was_online:
            logger.info("Connectivity restored")
            self._fire()
            return True
        if not online and was_online:
            logger.info("Connectivity lost")
        return False

    def storage_ready(self) -> bool:
        """
        Signal that local storage has been opened.

        Fires one event if the client is online; later calls do nothing.

        Returns:
            True if an event was fired
        """
        if self._ready_fired:
            return False
        self._ready_fired = True

        if not self._online:
            logger.info("Local storage ready while offline; waiting for connectivity")
            return False

        self._fire()
        return True

    def _fire(self) -> None:
        for listener in list(self._listeners):
            task = asyncio.create_task(self._notify(listener))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)

    async def _notify(self, listener: Listener) -> None:
        try:
            await listener()
        except Exception as e:
            # There is no caller to report to; log and keep the monitor alive
            logger.error(f"Connectivity listener failed: {str(e)}", exc_info=True)

    async def wait_idle(self) -> None:
        """Wait until every listener started so far has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))
