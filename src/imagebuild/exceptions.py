"""Exception hierarchy for image builds."""

from __future__ import annotations


class ImageBuildError(Exception):
    """Base exception for all image build errors."""

    def __init__(self, message: str) -> None:
        """
        Initialize ImageBuildError.

        Args:
            message: Human-readable error message
        """
        self.message = message
        super().__init__(message)


class InvalidReferenceError(ImageBuildError, ValueError):
    """An image reference could not be parsed or normalized."""

    def __init__(self, reference: str, reason: str) -> None:
        self._reference = reference
        self._reason = reason
        super().__init__(f"invalid reference format: {reason}: {reference!r}")

    @property
    def reference(self) -> str:
        return self._reference

    @property
    def reason(self) -> str:
        return self._reason


class BackendConnectionError(ImageBuildError):
    """The build backend is unreachable or rejected the credentials."""

    def __init__(self, message: str, original_error: Exception | None = None):
        super().__init__(message)
        self.original_error = original_error


class SolveError(ImageBuildError):
    """The build backend rejected or failed the build.

    The message is the backend's own diagnostic, unmodified.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class RenderError(ImageBuildError):
    """Rendering build progress to the output stream failed."""

    def __init__(self, original_error: Exception) -> None:
        super().__init__(f"failed to render build progress: {original_error}")
        self.original_error = original_error
