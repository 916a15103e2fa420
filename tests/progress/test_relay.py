"""Tests for the progress relay lifecycle."""

import io

import pytest
from structlog.testing import capture_logs

from imagebuild.config import ProgressMode
from imagebuild.exceptions import RenderError
from imagebuild.progress.models import SolveStatus, Vertex
from imagebuild.progress.relay import ProgressRelay, RelayState


class BrokenStream(io.StringIO):
    """An output stream whose every write fails."""

    def write(self, s):
        raise OSError("broken pipe")


def _events(count: int) -> list[SolveStatus]:
    return [
        SolveStatus(vertexes=[Vertex(digest=f"sha256:{i}", name=f"step {i}")])
        for i in range(count)
    ]


class TestProgressRelay:
    """Tests for ProgressRelay."""

    @pytest.mark.asyncio
    async def test_none_mode_is_inert(self):
        relay = ProgressRelay(ProgressMode.NONE)
        assert relay.start() is None
        assert relay.channel is None
        assert relay.state == RelayState.IDLE
        assert await relay.wait() is None

    @pytest.mark.asyncio
    async def test_plain_mode_drains_all_events_in_order(self):
        out = io.StringIO()
        relay = ProgressRelay(ProgressMode.PLAIN, out=out, buffer_size=2)
        channel = relay.start()
        assert relay.state == RelayState.STREAMING

        for status in _events(5):
            await channel.send(status)
        channel.close()

        assert await relay.wait() is None
        assert relay.state == RelayState.DRAINED
        assert out.getvalue().splitlines() == [f"#{i + 1} step {i}" for i in range(5)]

    @pytest.mark.asyncio
    async def test_start_twice_fails(self):
        relay = ProgressRelay(ProgressMode.PLAIN, out=io.StringIO())
        channel = relay.start()
        with pytest.raises(RuntimeError):
            relay.start()
        channel.close()
        await relay.wait()

    @pytest.mark.asyncio
    async def test_render_failure_keeps_draining(self):
        relay = ProgressRelay(ProgressMode.PLAIN, out=BrokenStream(), buffer_size=1)
        channel = relay.start()

        # More events than the buffer holds: the producer must never block.
        for status in _events(10):
            await channel.send(status)
        channel.close()

        error = await relay.wait()
        assert isinstance(error, RenderError)
        assert isinstance(error.original_error, OSError)
        assert relay.error is error
        assert relay.state == RelayState.FAILED

    @pytest.mark.asyncio
    async def test_auto_mode_falls_back_to_plain(self, monkeypatch):
        for name in ("FORCE_COLOR", "TTY_COMPATIBLE", "TTY_INTERACTIVE"):
            monkeypatch.delenv(name, raising=False)
        out = io.StringIO()

        with capture_logs() as logs:
            relay = ProgressRelay(ProgressMode.AUTO, out=out, err=io.StringIO())
            channel = relay.start()

        assert channel is not None
        assert "no interactive terminal, using plain progress output" in [
            log["event"] for log in logs
        ]

        await channel.send(_events(1)[0])
        channel.close()
        assert await relay.wait() is None
        assert relay.state == RelayState.DRAINED
        assert out.getvalue() == "#1 step 0\n"

    @pytest.mark.asyncio
    async def test_wait_without_events(self):
        relay = ProgressRelay(ProgressMode.PLAIN, out=io.StringIO())
        relay.start().close()
        assert await relay.wait() is None
        assert relay.state == RelayState.DRAINED
