"""HTTP client for the remote build backend."""

from __future__ import annotations

import asyncio
import io
import json
import logging
import os
import tarfile
from urllib.parse import urlparse

import httpx
from httpx_sse import aconnect_sse
from pydantic import ValidationError

from ..exceptions import BackendConnectionError, SolveError
from ..progress.channel import StatusChannel
from ..progress.models import SolveStatus
from .models import SolveOptions, SolveResponse, TagRequest

# Enable httpx debug logging if requested via environment variable
if os.getenv("IMAGEBUILD_HTTPX_DEBUG", "").lower() in ("1", "true", "yes"):
    for _name in ("httpx", "httpcore"):
        _logger = logging.getLogger(_name)
        _logger.setLevel(logging.DEBUG)
        if not _logger.handlers:
            _handler = logging.StreamHandler()
            _handler.setFormatter(
                logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
            )
            _logger.addHandler(_handler)

DEFAULT_CONNECT_TIMEOUT_SEC = 30.0
DEFAULT_REQUEST_TIMEOUT_SEC = 60.0

SOLVE_PART_NAME = "solve"
DEFINITION_PART_NAME = "definition"


def _archive_dir(path: str) -> bytes:
    """Return a gzip tar archive with the contents of directory ``path``."""
    if not os.path.isdir(path):
        raise NotADirectoryError(f"local directory does not exist: {path}")
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as tf:
        tf.add(path, arcname=".")
    return buffer.getvalue()


def _error_message(body: str) -> str:
    """Extract the backend's diagnostic from an error body."""
    try:
        data = json.loads(body)
    except ValueError:
        return body.strip()
    if isinstance(data, dict):
        message = data.get("message", data.get("error", ""))
        if message:
            return str(message)
    return str(data)


class BuildBackendClient:
    """Build backend reached over HTTP.

    A solve is a single multipart ``POST`` answered with a server-sent
    event stream: ``status`` events carry progress, a ``result`` event
    ends a successful build and an ``error`` event a failed one.
    """

    def __init__(
        self,
        endpoint: str,
        token: str | None = None,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT_SEC,
    ):
        self._endpoint = endpoint.rstrip("/") + "/"
        self._base_headers: dict[str, str] = {}
        if token:
            self._base_headers["Authorization"] = f"Bearer {token}"
        # Builds may run for a long time, only connecting is bounded.
        self._client = httpx.AsyncClient(
            base_url=self._endpoint,
            timeout=httpx.Timeout(DEFAULT_REQUEST_TIMEOUT_SEC, connect=connect_timeout, read=None),
        )

    @property
    def endpoint(self) -> str:
        return self._endpoint

    async def solve(
        self,
        definition: bytes | None,
        options: SolveOptions,
        status_channel: StatusChannel | None,
    ) -> SolveResponse:
        """Run one build, forwarding status events to ``status_channel`` in order."""
        files = await asyncio.to_thread(self._solve_files, definition, options)
        headers = {**self._base_headers, **options.session_headers}

        result: SolveResponse | None = None
        try:
            async with aconnect_sse(
                self._client, "POST", "v1/solve", files=files, headers=headers
            ) as event_source:
                response = event_source.response
                if not response.is_success:
                    await response.aread()
                    raise self._error_from_response(response)

                async for sse in event_source.aiter_sse():
                    match sse.event:
                        case "status":
                            status = SolveStatus.model_validate_json(sse.data)
                            if status_channel is not None:
                                await status_channel.send(status)
                        case "result":
                            result = SolveResponse.model_validate_json(sse.data)
                        case "error":
                            raise SolveError(_error_message(sse.data))
                        case _:
                            # Keepalives and events this client does not know.
                            pass
        except (httpx.ConnectError, httpx.ConnectTimeout) as e:
            raise BackendConnectionError(
                f"failed to connect to build backend at {self._endpoint}: {e}", e
            ) from e
        except httpx.HTTPError as e:
            raise SolveError(f"lost connection to build backend: {e}") from e
        except ValidationError as e:
            raise SolveError(f"invalid event from build backend: {e}") from e

        if result is None:
            raise SolveError("build backend closed the stream without a result")
        return result

    async def apply_tags(self, source: str, targets: list[str]) -> None:
        """Point every reference in ``targets`` at the image ``source``."""
        payload = TagRequest(source=source, targets=targets)
        try:
            response = await self._client.post(
                "v1/images/tag",
                content=payload.model_dump_json(),
                headers={**self._base_headers, "Content-Type": "application/json"},
            )
        except (httpx.ConnectError, httpx.ConnectTimeout) as e:
            raise BackendConnectionError(
                f"failed to connect to build backend at {self._endpoint}: {e}", e
            ) from e
        except httpx.HTTPError as e:
            raise SolveError(f"lost connection to build backend: {e}") from e

        if not response.is_success:
            raise self._error_from_response(response)

    def _solve_files(self, definition: bytes | None, options: SolveOptions) -> dict:
        files = {
            SOLVE_PART_NAME: (
                SOLVE_PART_NAME,
                options.model_dump_json().encode("utf-8"),
                "application/json",
            )
        }
        if definition is not None:
            files[DEFINITION_PART_NAME] = (
                DEFINITION_PART_NAME,
                definition,
                "application/octet-stream",
            )
        archives: dict[str, bytes] = {}
        for name, path in options.local_dirs.items():
            if path not in archives:
                archives[path] = _archive_dir(path)
            files[name] = (f"{name}.tar.gz", archives[path], "application/gzip")
        return files

    def _error_from_response(self, response: httpx.Response) -> Exception:
        message = _error_message(response.text) if response.text else ""
        if not message:
            message = f"HTTP {response.status_code} {response.reason_phrase}"

        if response.status_code in (401, 403):
            return BackendConnectionError(
                f"build backend rejected the credentials: {message}"
            )
        return SolveError(message, status_code=response.status_code)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "BuildBackendClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()


def connect(endpoint: str | None, token: str | None = None) -> BuildBackendClient:
    """Open a connection handle to the build backend at ``endpoint``.

    Raises:
        BackendConnectionError: If no endpoint is configured or it is not an HTTP URL.
    """
    if not endpoint:
        raise BackendConnectionError(
            "no build backend configured, use --endpoint or set IMAGEBUILD_ENDPOINT"
        )
    if urlparse(endpoint).scheme not in ("http", "https"):
        raise BackendConnectionError(
            f"build backend endpoint must be an http or https URL: {endpoint}"
        )
    return BuildBackendClient(endpoint=endpoint, token=token)
