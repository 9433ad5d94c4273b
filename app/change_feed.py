# app/change_feed.py

import asyncio
import logging
import threading
from typing import Dict, List, Tuple

logger = logging.getLogger(__name__)

PROFILES = "profiles"


class ChangeFeed:
    """
    In-process row change notifications. Writers publish from any thread;
    each subscriber gets its own asyncio queue on the loop that subscribed.
    """

    def __init__(self):
        self._subscribers: Dict[str, List[Tuple[asyncio.AbstractEventLoop, asyncio.Queue]]] = {}
        self._lock = threading.Lock()

    def subscribe(self, table: str) -> asyncio.Queue:
        queue: asyncio.Queue = asyncio.Queue()
        loop = asyncio.get_running_loop()
        with self._lock:
            self._subscribers.setdefault(table, []).append((loop, queue))
        logger.info(f"Subscribed to {table} changes")
        return queue

    def unsubscribe(self, table: str, queue: asyncio.Queue) -> None:
        with self._lock:
            subs = self._subscribers.get(table, [])
            self._subscribers[table] = [(l, q) for l, q in subs if q is not queue]
        logger.info(f"Unsubscribed from {table} changes")

    def subscriber_count(self, table: str) -> int:
        with self._lock:
            return len(self._subscribers.get(table, []))

    def publish(self, table: str, event: str, row_id) -> int:
        payload = {"table": table, "event": event, "id": row_id}
        with self._lock:
            subs = list(self._subscribers.get(table, []))
        delivered = 0
        for loop, queue in subs:
            try:
                loop.call_soon_threadsafe(queue.put_nowait, payload)
                delivered += 1
            except RuntimeError:
                # loop already closed; the subscriber went away without unsubscribing
                logger.warning(f"Dropping dead {table} subscriber")
                self.unsubscribe(table, queue)
        return delivered


change_feed = ChangeFeed()
