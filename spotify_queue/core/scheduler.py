"""
Staggered dispatch of YouTube lookups so the search API is never hit in a burst.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import List, Optional, Protocol

from spotify_queue.media.queue import QueueSink
from spotify_queue.models.dispatch import DispatchItem, ItemState
from spotify_queue.models.track import DispatchBatch, TrackDescriptor
from spotify_queue.utils.structured_logger import DispatchLogger, StructuredLogger

log = logging.getLogger(__name__)

SleepFunc = Callable[[float], Awaitable[None]]


class MediaLookup(Protocol):
    async def find_media(self, track: TrackDescriptor) -> str: ...


class DispatchScheduler:
    """
    Turns a batch into one independent task per track.

    Track i starts its lookup i * interval seconds after dispatch. Each task
    owns its own failure: a lookup or enqueue error is logged and absorbed and
    never touches the other tasks. Completion order is not guaranteed to match
    start order.
    """

    def __init__(
        self,
        lookup: MediaLookup,
        sink: QueueSink,
        dispatch_logger: Optional[DispatchLogger] = None,
        sleep: SleepFunc = asyncio.sleep,
    ):
        """
        Initializes the scheduler.

        Args:
            lookup: Resolves a track into a playable URL.
            sink: Receives each resolved URL.
            dispatch_logger: Structured logger for per-item events.
            sleep: Coroutine function used for the per-item delay.
        """
        self._lookup = lookup
        self._sink = sink
        self._events = dispatch_logger or DispatchLogger(StructuredLogger(__name__))
        self._sleep = sleep
        self._tasks: set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        """Number of dispatched items that have not reached a terminal state."""
        return len(self._tasks)

    def dispatch(self, batch: DispatchBatch) -> List[DispatchItem]:
        """
        Schedules every track of the batch and returns immediately.

        Must be called from within a running event loop.
        """
        items = []
        for index, track in enumerate(batch.tracks):
            item = DispatchItem(index=index, track=track, delay=index * batch.interval)
            task = asyncio.create_task(
                self._run_item(item), name=f"dispatch-{index}-{track.name}"
            )
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
            self._events.item_scheduled(index, str(track), item.delay)
            items.append(item)

        if items:
            self._events.batch_dispatched(len(items), batch.interval)
        return items

    async def _run_item(self, item: DispatchItem) -> None:
        await self._sleep(item.delay)
        item.advance(ItemState.LOOKING_UP)

        try:
            url = await self._lookup.find_media(item.track)
        except Exception as e:
            self._fail(item, "lookup", e)
            return

        try:
            await self._sink.enqueue(url)
        except Exception as e:
            self._fail(item, "enqueue", e)
            return

        item.url = url
        item.advance(ItemState.ENQUEUED)
        self._events.item_enqueued(item.index, str(item.track), url)

    def _fail(self, item: DispatchItem, stage: str, error: Exception) -> None:
        item.error = str(error)
        item.advance(ItemState.FAILED)
        self._events.item_failed(item.index, str(item.track), stage, str(error))

    async def drain(self) -> None:
        """Waits until every dispatched item, including ones added meanwhile, is done."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
