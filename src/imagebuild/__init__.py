"""Client for building container images on a remote build backend."""

from .backend import BuildBackend, BuildBackendClient, SolveOptions, SolveResponse, connect
from .build import run_build, solve_options
from .config import BuildConfiguration, ProgressMode
from .exceptions import (
    BackendConnectionError,
    ImageBuildError,
    InvalidReferenceError,
    RenderError,
    SolveError,
)
from .reference import normalize_reference

__all__ = [
    "BackendConnectionError",
    "BuildBackend",
    "BuildBackendClient",
    "BuildConfiguration",
    "ImageBuildError",
    "InvalidReferenceError",
    "ProgressMode",
    "RenderError",
    "SolveError",
    "SolveOptions",
    "SolveResponse",
    "connect",
    "normalize_reference",
    "run_build",
    "solve_options",
]
