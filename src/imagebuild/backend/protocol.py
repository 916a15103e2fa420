"""Protocol definition for the build backend connection."""

from __future__ import annotations

from typing import Protocol

from ..progress.channel import StatusChannel
from .models import SolveOptions, SolveResponse


class BuildBackend(Protocol):
    """The operations this client needs from a build backend."""

    async def solve(
        self,
        definition: bytes | None,
        options: SolveOptions,
        status_channel: StatusChannel | None,
    ) -> SolveResponse:
        """
        Run one build.

        Args:
            definition: Serialized build graph, None to let the frontend produce it
            options: Frontend, attributes, local directories, exports and session headers
            status_channel: Receives every status event in order, None to discard them

        Raises:
            BackendConnectionError: If the backend cannot be reached
            SolveError: If the backend rejects or fails the build
        """
        ...

    async def apply_tags(self, source: str, targets: list[str]) -> None:
        """Point every reference in ``targets`` at the image ``source``."""
        ...
