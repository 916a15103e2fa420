"""Background task relaying build status events to the user's terminal."""

from __future__ import annotations

import asyncio
import sys
from enum import Enum
from typing import TextIO

import structlog

from ..config import ProgressMode
from ..exceptions import RenderError
from .channel import DEFAULT_BUFFER_SIZE, StatusChannel
from .display import acquire_console, display_solve_status

logger = structlog.get_logger(module=__name__)


class RelayState(str, Enum):
    IDLE = "idle"
    STREAMING = "streaming"
    DRAINED = "drained"
    FAILED = "failed"


class ProgressRelay:
    """Owns the status channel and the single task rendering it.

    Lifecycle: ``start()`` before the solve call, ``channel.close()`` once
    the call returns, then ``wait()``. In ``none`` mode the relay is inert:
    ``start()`` returns no channel and ``wait()`` returns immediately.

    A rendering failure does not stop the task from consuming events, so
    the producer is never blocked by a broken output stream.
    """

    def __init__(
        self,
        mode: ProgressMode,
        out: TextIO | None = None,
        err: TextIO | None = None,
        buffer_size: int = DEFAULT_BUFFER_SIZE,
    ):
        self._mode = mode
        self._out = out if out is not None else sys.stdout
        self._err = err if err is not None else sys.stderr
        self._buffer_size = buffer_size
        self._state = RelayState.IDLE
        self._channel: StatusChannel | None = None
        self._task: asyncio.Task[None] | None = None
        self._error: RenderError | None = None

    @property
    def mode(self) -> ProgressMode:
        return self._mode

    @property
    def state(self) -> RelayState:
        return self._state

    @property
    def channel(self) -> StatusChannel | None:
        return self._channel

    @property
    def error(self) -> RenderError | None:
        return self._error

    def start(self) -> StatusChannel | None:
        """Start the rendering task and return the channel to feed it."""
        if self._state != RelayState.IDLE or self._task is not None:
            raise RuntimeError("progress relay already started")
        if self._mode == ProgressMode.NONE:
            return None

        console = None
        if self._mode.interactive:
            console = acquire_console(self._err)
            if console is None:
                logger.debug("no interactive terminal, using plain progress output")

        self._channel = StatusChannel(self._buffer_size)
        self._task = asyncio.create_task(self._run(self._channel, console))
        self._state = RelayState.STREAMING
        return self._channel

    async def wait(self) -> RenderError | None:
        """Wait for the rendering task to drain the closed channel.

        Returns the rendering error, if any, instead of raising it so that
        the caller can give precedence to the solve error.
        """
        if self._task is None:
            return None
        await self._task
        return self._error

    async def _run(self, channel: StatusChannel, console) -> None:
        try:
            await display_solve_status(channel, console, self._out)
        except Exception as e:  # pylint: disable=broad-except
            self._error = RenderError(e)
            self._state = RelayState.FAILED
            async for _ in channel:
                pass
            return
        self._state = RelayState.DRAINED
