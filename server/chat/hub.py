"""
Broadcast hub module.

All outbound traffic goes through a single queue drained by a single worker
task, so every recipient sees broadcast events in the order they were
submitted.
"""

import asyncio
from typing import Optional

from common.constants import BROADCAST_QUEUE_SIZE, FANOUT_LOCKED, FANOUT_SNAPSHOT, FANOUT_POLICIES
from common.protocol_definitions import Message
from server.chat.registry import ConnectionRegistry
from server.utils.logger import logger


class BroadcastHub:
    """Single-consumer fan-out of Message events to registered connections.

    The queue is bounded (``queue_size`` events, 0 for unbounded). Producers
    calling ``submit`` wait while it is full, so nothing is ever dropped.

    With the ``locked`` fan-out policy the registry lock is held for the
    whole delivery of one event. A slow recipient therefore delays everyone
    else by up to its connection's write timeout. The ``snapshot`` policy
    copies the recipient list under the lock and writes after releasing it.

    Lines for a recipient whose send buffer is past its high-water mark are
    skipped and logged, not buffered.
    """

    def __init__(self, registry: ConnectionRegistry, queue_size: int = BROADCAST_QUEUE_SIZE,
                 fanout_policy: str = FANOUT_LOCKED):
        if fanout_policy not in FANOUT_POLICIES:
            raise ValueError(f"Unknown fan-out policy {fanout_policy!r}")
        self.registry = registry
        self.fanout_policy = fanout_policy
        self.queue: asyncio.Queue = asyncio.Queue(maxsize=queue_size)
        self.worker: Optional[asyncio.Task] = None

    @property
    def pending(self) -> int:
        """Number of events waiting to be fanned out."""
        return self.queue.qsize()

    def start(self) -> asyncio.Task:
        """Spawn the worker task. Must be called from a running event loop."""
        if self.worker is None or self.worker.done():
            self.worker = asyncio.create_task(self.run(), name='broadcast-hub')
        return self.worker

    async def stop(self):
        """Cancel the worker task. Events still queued are discarded."""
        if self.worker is None:
            return
        worker, self.worker = self.worker, None
        worker.cancel()
        # wait() never re-raises the worker's CancelledError, only our own
        await asyncio.wait({worker})

    async def submit(self, event: Message):
        """Enqueue an event, waiting while the queue is full."""
        await self.queue.put(event)

    async def publish(self, sender, content: str):
        """Enqueue ``content`` for every registered connection except ``sender``."""
        await self.submit(Message(sender=sender, content=content))

    async def flush(self):
        """Wait until every event submitted so far has been fanned out."""
        await self.queue.join()

    async def run(self):
        """Worker loop: dequeue one event at a time and fan it out."""
        while True:
            event = await self.queue.get()
            try:
                await self.fan_out(event)
            except Exception as e:
                logger.log_error("broadcast", e)
            finally:
                self.queue.task_done()

    async def fan_out(self, event: Message) -> int:
        """Deliver one event. Returns the number of successful writes."""
        delivered = 0

        async def deliver(conn, identifier: str):
            nonlocal delivered
            if conn is event.sender:
                return
            try:
                await conn.send_line(event.content)
                delivered += 1
            except Exception as e:
                # Removal is left to the recipient's own handler
                logger.log_delivery_failure(identifier, e)

        if self.fanout_policy == FANOUT_SNAPSHOT:
            for conn, identifier in await self.registry.snapshot():
                await deliver(conn, identifier)
        else:
            await self.registry.for_each(deliver)

        logger.log_broadcast(event.content, delivered)
        return delivered
