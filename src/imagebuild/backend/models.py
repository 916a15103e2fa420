"""Pydantic models describing a solve request and its response."""

from pydantic import BaseModel, Field

FRONTEND_DOCKERFILE = "dockerfile.v0"
EXPORTER_IMAGE = "image"


class ExportEntry(BaseModel):
    """What the backend should produce after a successful build."""

    type: str
    attrs: dict[str, str] = Field(default_factory=dict)


class SolveOptions(BaseModel):
    """Options of a single solve call."""

    frontend: str = FRONTEND_DOCKERFILE
    frontend_attrs: dict[str, str] = Field(default_factory=dict)
    local_dirs: dict[str, str] = Field(default_factory=dict)
    exports: list[ExportEntry] = Field(default_factory=list)
    # Request headers contributed by session attachables, e.g. registry auth.
    session_headers: dict[str, str] = Field(default_factory=dict, exclude=True)


class SolveResponse(BaseModel):
    """Result of a finished solve call."""

    exporter_response: dict[str, str] = Field(default_factory=dict)


class TagRequest(BaseModel):
    source: str
    targets: list[str]
