"""
Offline queue command line.

    python -m pizza_hunt.offline flush          submit queued pizzas now
    python -m pizza_hunt.offline save '<json>'  queue a pizza for later
    python -m pizza_hunt.offline status         show how many are queued
"""

import argparse
import asyncio
import json
import logging
import sys

from ..core.config import settings
from ..core.exceptions import OfflineQueueError
from . import start_offline_sync
from .client import SubmissionClient
from .queue import LocalQueue

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler(sys.stdout)]
)
logger = logging.getLogger("pizza_hunt.offline")


async def flush() -> int:
    """Start up as if online: the storage-ready event flushes the queue."""
    offline = await start_offline_sync(settings.offline, online=True, on_flushed=print)
    try:
        await offline.monitor.wait_idle()
        return 0 if await offline.queue.count() == 0 else 1
    finally:
        await offline.aclose()


async def save(raw: str) -> int:
    try:
        record = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.error(f"Not valid JSON: {str(e)}")
        return 2

    queue = await LocalQueue(settings.offline).open()
    try:
        key = await SubmissionClient(queue, settings.offline).save_record(record)
    finally:
        await queue.close()
    if key is None:
        return 1
    print(f"Queued as record {key}")
    return 0


async def status() -> int:
    queue = await LocalQueue(settings.offline).open()
    try:
        print(f"{await queue.count()} pizza(s) waiting in {queue.path}")
    finally:
        await queue.close()
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="python -m pizza_hunt.offline")
    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("flush", help="submit every queued pizza in one batch")
    save_parser = commands.add_parser("save", help="queue a pizza payload for the next sync")
    save_parser.add_argument("payload", help="pizza as a JSON object")
    commands.add_parser("status", help="count queued pizzas")
    args = parser.parse_args(argv)

    try:
        if args.command == "flush":
            return asyncio.run(flush())
        if args.command == "save":
            return asyncio.run(save(args.payload))
        return asyncio.run(status())
    except OfflineQueueError as e:
        logger.error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
