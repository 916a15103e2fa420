"""Rendering of build status events to a terminal or a plain text stream."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import TextIO

import structlog
from rich.console import Console, Group
from rich.live import Live
from rich.text import Text

from .channel import StatusChannel
from .models import SolveStatus, Vertex, VertexLog, VertexStatus, VertexWarning

logger = structlog.get_logger(module=__name__)

# Number of trailing log lines shown under a running step in the console view.
_CONSOLE_LOG_TAIL = 6


@dataclass
class _VertexState:
    index: int
    digest: str
    name: str = ""
    vertex: Vertex | None = None
    cached_reported: bool = False
    done_reported: bool = False
    error_reported: bool = False
    statuses: dict[str, VertexStatus] = field(default_factory=dict)
    log_tail: list[str] = field(default_factory=list)

    @property
    def started(self):
        return self.vertex.started if self.vertex else None

    @property
    def completed(self):
        return self.vertex.completed if self.vertex else None

    @property
    def cached(self) -> bool:
        return bool(self.vertex and self.vertex.cached)

    @property
    def error(self) -> str:
        return self.vertex.error if self.vertex else ""

    def duration(self) -> float:
        if self.started is None or self.completed is None:
            return 0.0
        return max((self.completed - self.started).total_seconds(), 0.0)


class _Tracker:
    """Numbers vertexes in the order they are first seen."""

    def __init__(self):
        self._states: dict[str, _VertexState] = {}

    def get(self, digest: str) -> tuple[_VertexState, bool]:
        state = self._states.get(digest)
        if state is not None:
            return state, False
        state = _VertexState(index=len(self._states) + 1, digest=digest)
        self._states[digest] = state
        return state, True

    def values(self) -> list[_VertexState]:
        return list(self._states.values())


def _format_progress(status: VertexStatus) -> str:
    if status.total:
        progress = f"{status.current}/{status.total}"
    else:
        progress = str(status.current) if status.current else ""
    if status.completed is not None:
        progress = f"{progress} done".strip()
    return progress


class PlainDisplay:
    """Line oriented output, one line per change, in the order received."""

    def __init__(self, out: TextIO):
        self._out = out
        self._tracker = _Tracker()

    def update(self, status: SolveStatus) -> None:
        lines: list[str] = []
        for vertex in status.vertexes:
            lines.extend(self._vertex_lines(vertex))
        for vertex_status in status.statuses:
            lines.extend(self._status_lines(vertex_status))
        for log in status.logs:
            lines.extend(self._log_lines(log))
        for warning in status.warnings:
            lines.extend(self._warning_lines(warning))
        if lines:
            self._out.write("".join(f"{line}\n" for line in lines))
            self._out.flush()

    def finish(self) -> None:
        self._out.flush()

    def abort(self) -> None:
        pass

    def _vertex_lines(self, vertex: Vertex) -> list[str]:
        state, new = self._tracker.get(vertex.digest)
        state.vertex = vertex
        lines = []
        if new or (vertex.name and vertex.name != state.name):
            state.name = vertex.name
            lines.append(f"#{state.index} {vertex.name}")
        if vertex.cached and not state.cached_reported:
            state.cached_reported = True
            lines.append(f"#{state.index} CACHED")
        if vertex.error and not state.error_reported:
            state.error_reported = True
            lines.append(f"#{state.index} ERROR: {vertex.error}")
        elif vertex.completed is not None and not state.done_reported:
            state.done_reported = True
            if not vertex.cached:
                lines.append(f"#{state.index} DONE {state.duration():.1f}s")
        return lines

    def _status_lines(self, vertex_status: VertexStatus) -> list[str]:
        state, _ = self._tracker.get(vertex_status.vertex)
        previous = state.statuses.get(vertex_status.id)
        state.statuses[vertex_status.id] = vertex_status
        if (
            previous is not None
            and previous.completed is not None
            and vertex_status.completed is not None
        ):
            return []
        name = vertex_status.name or vertex_status.id
        progress = _format_progress(vertex_status)
        return [f"#{state.index} {name} {progress}".rstrip()]

    def _log_lines(self, log: VertexLog) -> list[str]:
        state, _ = self._tracker.get(log.vertex)
        prefix = f"#{state.index}"
        if log.timestamp is not None and state.started is not None:
            elapsed = (log.timestamp - state.started).total_seconds()
            prefix = f"{prefix} {elapsed:.3f}"
        return [f"{prefix} {line}" for line in log.data.splitlines()]

    def _warning_lines(self, warning: VertexWarning) -> list[str]:
        state, _ = self._tracker.get(warning.vertex)
        lines = [f"#{state.index} WARNING: {warning.short}"]
        lines.extend(f"#{state.index}   {detail}" for detail in warning.detail)
        return lines


class ConsoleDisplay:
    """Live redrawing view of all build steps on an interactive terminal."""

    def __init__(self, console: Console):
        self._console = console
        self._tracker = _Tracker()
        self._warnings: list[tuple[int, VertexWarning]] = []
        self._started_at = time.monotonic()
        self._live = Live(
            self._render(),
            console=console,
            auto_refresh=False,
            transient=False,
        )
        self._live.start()

    def update(self, status: SolveStatus) -> None:
        for vertex in status.vertexes:
            state, _ = self._tracker.get(vertex.digest)
            state.vertex = vertex
            state.name = vertex.name or state.name
        for vertex_status in status.statuses:
            state, _ = self._tracker.get(vertex_status.vertex)
            state.statuses[vertex_status.id] = vertex_status
        for log in status.logs:
            state, _ = self._tracker.get(log.vertex)
            state.log_tail.extend(log.data.splitlines())
            del state.log_tail[:-_CONSOLE_LOG_TAIL]
        for warning in status.warnings:
            state, _ = self._tracker.get(warning.vertex)
            self._warnings.append((state.index, warning))
        self._live.update(self._render(), refresh=True)

    def finish(self) -> None:
        self._live.update(self._render(), refresh=True)
        self._live.stop()
        for index, warning in self._warnings:
            self._console.print(
                Text(f"WARNING: #{index} {warning.short}", style="yellow")
            )

    def abort(self) -> None:
        self._live.stop()

    def _render(self) -> Group:
        states = [s for s in self._tracker.values() if s.vertex is not None]
        finished = sum(1 for s in states if s.completed is not None)
        elapsed = time.monotonic() - self._started_at
        lines = [
            Text(
                f"[+] Building {elapsed:.1f}s ({finished}/{len(states)})",
                style="bold blue" if finished == len(states) else "bold",
            )
        ]
        for state in states:
            lines.append(self._render_vertex(state))
            if state.completed is None and state.started is not None:
                lines.extend(Text(f"   {line}", style="dim") for line in state.log_tail)
        return Group(*lines)

    def _render_vertex(self, state: _VertexState) -> Text:
        line = Text(f" => {state.name}")
        if state.error:
            line.append(f"  ERROR: {state.error}", style="red")
            line.stylize("red")
        elif state.cached:
            line.append("  CACHED", style="blue")
        elif state.completed is not None:
            line.append(f"  {state.duration():.1f}s", style="blue")
            line.stylize("blue")
        else:
            running = [s for s in state.statuses.values() if s.completed is None]
            for vertex_status in running[-1:]:
                line.append(
                    f"  {vertex_status.name or vertex_status.id} {_format_progress(vertex_status)}",
                    style="dim",
                )
        return line


def acquire_console(stream: TextIO) -> Console | None:
    """Try to take control of the terminal behind ``stream`` for live redraws.

    Returns None when ``stream`` is not an interactive terminal.
    """
    try:
        console = Console(file=stream)
        if not console.is_terminal or console.is_dumb_terminal:
            return None
    except (OSError, ValueError) as e:
        logger.debug("terminal not available for progress display", error=str(e))
        return None
    return console


async def display_solve_status(
    channel: StatusChannel, console: Console | None, out: TextIO
) -> None:
    """Render every event from ``channel`` until it is closed.

    Uses the live console view when ``console`` is given, plain lines on
    ``out`` otherwise.
    """
    display = ConsoleDisplay(console) if console is not None else PlainDisplay(out)
    try:
        async for status in channel:
            display.update(status)
    except BaseException:
        # Keep the rendering error, not a follow-up failure of the dead terminal.
        try:
            display.abort()
        except Exception as e:  # pylint: disable=broad-except
            logger.debug("failed to stop progress display", error=str(e))
        raise
    display.finish()
