"""Build configuration supplied by the user for a single image build."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable

DEFAULT_DOCKERFILE_NAME = "Dockerfile"


class ProgressMode(str, Enum):
    """How build progress is rendered."""

    NONE = "none"
    PLAIN = "plain"
    AUTO = "auto"
    # Alias of AUTO kept for command line compatibility.
    TTY = "tty"

    @property
    def interactive(self) -> bool:
        return self in (ProgressMode.AUTO, ProgressMode.TTY)


@dataclass(frozen=True)
class BuildConfiguration:
    """Immutable description of one build invocation.

    ``build_args`` and ``labels`` hold raw ``key=value`` strings and
    ``add_hosts`` raw ``host:ip`` strings, in the order they were given.
    """

    context: str
    dockerfile: str | None = None
    target: str = ""
    build_args: tuple[str, ...] = field(default_factory=tuple)
    labels: tuple[str, ...] = field(default_factory=tuple)
    add_hosts: tuple[str, ...] = field(default_factory=tuple)
    tags: tuple[str, ...] = field(default_factory=tuple)
    pull: bool = False
    progress: ProgressMode = ProgressMode.AUTO

    def __post_init__(self):
        if not self.context:
            raise ValueError("context cannot be empty")

    @classmethod
    def from_options(
        cls,
        context: str,
        dockerfile: str | None = None,
        target: str | None = None,
        build_args: Iterable[str] = (),
        labels: Iterable[str] = (),
        add_hosts: Iterable[str] = (),
        tags: Iterable[str] = (),
        pull: bool = False,
        progress: ProgressMode | str = ProgressMode.AUTO,
    ) -> "BuildConfiguration":
        """Create a configuration from loosely typed command line values."""
        return cls(
            context=context,
            dockerfile=dockerfile or None,
            target=target or "",
            build_args=tuple(build_args),
            labels=tuple(labels),
            add_hosts=tuple(add_hosts),
            tags=tuple(tags),
            pull=pull,
            progress=ProgressMode(progress),
        )

    @property
    def dockerfile_path(self) -> str:
        """Path of the Dockerfile, defaulting to ``<context>/Dockerfile``."""
        if self.dockerfile is None:
            return os.path.join(self.context, DEFAULT_DOCKERFILE_NAME)
        return self.dockerfile
