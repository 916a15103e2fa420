"""Bounded single-producer single-consumer channel of build status events."""

from __future__ import annotations

import asyncio

from .models import SolveStatus

DEFAULT_BUFFER_SIZE = 16


class ChannelClosedError(RuntimeError):
    """Raised when sending on a closed channel."""


class _Closed:
    pass


_CLOSED = _Closed()


class StatusChannel:
    """Hands status events from the solve call to the progress relay.

    Events are received in the order they were sent. ``send`` waits while
    the buffer is full. Closing is idempotent and wakes the receiver once
    every buffered event has been consumed.
    """

    def __init__(self, maxsize: int = DEFAULT_BUFFER_SIZE):
        if maxsize < 1:
            raise ValueError("maxsize must be at least 1")
        # One extra slot so that close() never waits behind a full buffer.
        self._queue: asyncio.Queue[SolveStatus | _Closed] = asyncio.Queue(maxsize + 1)
        self._maxsize = maxsize
        self._closed = False
        self._not_full = asyncio.Condition()

    @property
    def closed(self) -> bool:
        return self._closed

    async def send(self, status: SolveStatus) -> None:
        """Send one event, waiting for buffer space."""
        async with self._not_full:
            await self._not_full.wait_for(
                lambda: self._closed or self._queue.qsize() < self._maxsize
            )
            if self._closed:
                raise ChannelClosedError("send on closed status channel")
            self._queue.put_nowait(status)

    def close(self) -> None:
        """Close the channel. The receiver drains buffered events first."""
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(_CLOSED)

    async def receive(self) -> SolveStatus | None:
        """Return the next event, or None once the channel is closed and drained."""
        item = await self._queue.get()
        if isinstance(item, _Closed):
            # Leave the marker for any later receive() call.
            self._queue.put_nowait(item)
            async with self._not_full:
                self._not_full.notify_all()
            return None
        async with self._not_full:
            self._not_full.notify()
        return item

    def __aiter__(self):
        return self

    async def __anext__(self) -> SolveStatus:
        status = await self.receive()
        if status is None:
            raise StopAsyncIteration
        return status
