"""Build orchestration: one solve call plus its progress relay."""

from __future__ import annotations

from typing import TextIO

import structlog

from .attributes import translate
from .backend.models import FRONTEND_DOCKERFILE, SolveOptions, SolveResponse
from .backend.protocol import BuildBackend
from .config import BuildConfiguration
from .exporter import default_exporter
from .progress.relay import ProgressRelay
from .session import Attachable, DockerAuthProvider

logger = structlog.get_logger(module=__name__)


def solve_options(
    config: BuildConfiguration, session: list[Attachable] | None = None
) -> SolveOptions:
    """Assemble the solve options for ``config``.

    Tags are normalized and session headers resolved here, so any log
    lines they produce are emitted before build progress is shown.
    """
    frontend_attrs, local_dirs = translate(config)
    exporter = default_exporter(config.tags)
    if session is None:
        session = [DockerAuthProvider()]
    session_headers: dict[str, str] = {}
    for attachable in session:
        session_headers.update(attachable.headers())
    return SolveOptions(
        frontend=FRONTEND_DOCKERFILE,
        frontend_attrs=frontend_attrs,
        local_dirs=local_dirs,
        exports=[exporter] if exporter is not None else [],
        session_headers=session_headers,
    )


async def run_build(
    backend: BuildBackend,
    config: BuildConfiguration,
    session: list[Attachable] | None = None,
    out: TextIO | None = None,
    err: TextIO | None = None,
) -> SolveResponse:
    """Build ``config`` on ``backend`` while rendering its progress.

    Returns only after both the solve call and the progress relay have
    finished. A solve error takes precedence over a rendering error; both
    are raised as the original exception objects.
    """
    options = solve_options(config, session=session)

    relay = ProgressRelay(config.progress, out=out, err=err)
    channel = relay.start()
    try:
        response = await backend.solve(None, options, channel)
    finally:
        if channel is not None:
            channel.close()
        render_error = await relay.wait()

    if render_error is not None:
        raise render_error

    logger.debug("build finished", exporter_response=response.exporter_response)
    return response
