"""
Event Emitter — pass-through events for simulating server pushes.

A real client emits ``"notification"`` when Postgres delivers a NOTIFY,
``"error"`` on a broken connection, and so on. The double never produces
these by itself; tests emit them by hand to drive the code under test.

Two ways to listen:
- Handlers: ``on`` / ``once`` / ``off``, invoked synchronously by ``emit``
- Queues:   ``subscribe`` returns an asyncio.Queue fed by ``emit``; iterate
            it with ``listen`` until ``end_stream`` is called

Usage:
    client.once("notification", lambda n: seen.append(n.payload))
    client.emit("notification", Notification("jobs", "42"))

    queue = client.subscribe("notification")
    client.notify("jobs", "42")
    client.end_stream("notification")
    async for note in client.listen(queue):
        ...
"""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from typing import Any, AsyncGenerator, Callable

logger = logging.getLogger(__name__)

# Sentinel to signal end of stream
_STREAM_END = object()

Handler = Callable[..., Any]


class EventEmitter:
    """
    Named-event registry with synchronous handler delivery.

    Delivery order is registration order; nothing is buffered for
    handlers registered after an emit.
    """

    def __init__(self) -> None:
        # event → list of (handler, fire_once)
        self._handlers: dict[str, list[tuple[Handler, bool]]] = defaultdict(list)
        # event → list of subscriber queues
        self._subscribers: dict[str, list[asyncio.Queue]] = defaultdict(list)

    # ── Handlers ──────────────────────────────────────────────────

    def on(self, event: str, handler: Handler) -> Handler:
        """Register ``handler`` for every future ``event``. Returns the handler."""
        self._handlers[event].append((handler, False))
        return handler

    def once(self, event: str, handler: Handler) -> Handler:
        """Register ``handler`` for the next ``event`` only."""
        self._handlers[event].append((handler, True))
        return handler

    def off(self, event: str, handler: Handler) -> None:
        """
        Remove the first registration of ``handler`` for ``event``.

        Safe to call even if the handler was never registered.
        """
        entries = self._handlers.get(event, [])
        for index, (registered, _) in enumerate(entries):
            if registered is handler:
                del entries[index]
                break
        if not entries:
            self._handlers.pop(event, None)

    def emit(self, event: str, *args: Any) -> bool:
        """
        Deliver ``args`` to every handler and subscriber queue for ``event``.

        Returns True if anything received the event.
        """
        entries = list(self._handlers.get(event, []))
        if entries:
            # Drop once-handlers before calling, so a handler that re-emits
            # does not see itself again
            self._handlers[event] = [entry for entry in entries if not entry[1]]
            if not self._handlers[event]:
                del self._handlers[event]

        for handler, _ in entries:
            handler(*args)

        delivered = self._publish(event, args[0] if len(args) == 1 else args)
        return bool(entries) or delivered > 0

    def listener_count(self, event: str) -> int:
        return len(self._handlers.get(event, [])) + len(self._subscribers.get(event, []))

    def remove_all_listeners(self, event: str | None = None) -> None:
        if event is None:
            self._handlers.clear()
            self._subscribers.clear()
        else:
            self._handlers.pop(event, None)
            self._subscribers.pop(event, None)

    # ── Queues ────────────────────────────────────────────────────

    def subscribe(self, event: str, maxsize: int = 1000) -> asyncio.Queue:
        """
        Subscribe to ``event``. Returns a Queue that receives emitted payloads.

        Single-argument emits are queued as-is; multi-argument emits as a tuple.
        """
        queue: asyncio.Queue = asyncio.Queue(maxsize=maxsize)
        self._subscribers[event].append(queue)
        logger.debug(
            "Subscribed to event: %s (total: %d)", event, len(self._subscribers[event])
        )
        return queue

    def unsubscribe(self, event: str, queue: asyncio.Queue) -> None:
        """Remove a subscriber queue. Safe to call twice."""
        queues = self._subscribers.get(event, [])
        if queue in queues:
            queues.remove(queue)
            if not queues:
                del self._subscribers[event]
            logger.debug("Unsubscribed from event: %s", event)

    def end_stream(self, event: str) -> None:
        """Signal end-of-stream to every subscriber queue of ``event``."""
        for queue in self._subscribers.get(event, []):
            try:
                queue.put_nowait(_STREAM_END)
            except asyncio.QueueFull:
                logger.warning("Subscriber queue full for %s, end marker dropped", event)

    async def listen(self, queue: asyncio.Queue) -> AsyncGenerator[Any, None]:
        """
        Async generator over a subscriber queue.

        Stops when ``end_stream`` is called for the queue's event.
        """
        while True:
            item = await queue.get()
            if item is _STREAM_END:
                break
            yield item

    def _publish(self, event: str, payload: Any) -> int:
        delivered = 0
        for queue in self._subscribers.get(event, []):
            try:
                queue.put_nowait(payload)
                delivered += 1
            except asyncio.QueueFull:
                logger.warning(
                    "Subscriber queue full for event %s, dropping payload", event
                )
        return delivered
