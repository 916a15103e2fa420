from .client import BuildBackendClient, connect
from .models import (
    EXPORTER_IMAGE,
    FRONTEND_DOCKERFILE,
    ExportEntry,
    SolveOptions,
    SolveResponse,
)
from .protocol import BuildBackend

__all__ = [
    "BuildBackend",
    "BuildBackendClient",
    "connect",
    "EXPORTER_IMAGE",
    "FRONTEND_DOCKERFILE",
    "ExportEntry",
    "SolveOptions",
    "SolveResponse",
]
