"""Build status updates streamed by the build backend.

One :class:`SolveStatus` is one progress event. Each event carries the
vertexes (build steps) that changed, progress counters of running steps,
log output and warnings, all keyed by vertex digest.
"""

from datetime import datetime

from pydantic import BaseModel, Field


class Vertex(BaseModel):
    """A build step."""

    digest: str
    name: str = ""
    inputs: list[str] = Field(default_factory=list)
    cached: bool = False
    started: datetime | None = None
    completed: datetime | None = None
    error: str = ""


class VertexStatus(BaseModel):
    """Progress counter of a sub-task of a vertex, e.g. a layer download."""

    id: str
    vertex: str
    name: str = ""
    current: int = 0
    total: int = 0
    timestamp: datetime | None = None
    started: datetime | None = None
    completed: datetime | None = None


class VertexLog(BaseModel):
    """A chunk of output produced by a vertex."""

    vertex: str
    stream: int = 1
    data: str = ""
    timestamp: datetime | None = None


class VertexWarning(BaseModel):
    """A warning reported for a vertex, e.g. a Dockerfile lint finding."""

    vertex: str
    level: int = 0
    short: str = ""
    detail: list[str] = Field(default_factory=list)
    url: str = ""


class SolveStatus(BaseModel):
    vertexes: list[Vertex] = Field(default_factory=list)
    statuses: list[VertexStatus] = Field(default_factory=list)
    logs: list[VertexLog] = Field(default_factory=list)
    warnings: list[VertexWarning] = Field(default_factory=list)
