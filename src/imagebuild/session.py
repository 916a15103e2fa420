"""Session attachables sent along with a solve call."""

from __future__ import annotations

import base64
import json
import os
from pathlib import Path
from typing import Any, Protocol

import structlog

logger = structlog.get_logger(module=__name__)

REGISTRY_CONFIG_HEADER = "X-Registry-Config"


class Attachable(Protocol):
    """Something the client exposes to the backend for the duration of a build."""

    def headers(self) -> dict[str, str]:
        """Request headers carrying this attachable to the backend."""
        ...


def docker_config_path() -> Path:
    """Location of the docker CLI config file, honoring DOCKER_CONFIG."""
    config_dir = os.environ.get("DOCKER_CONFIG")
    if config_dir:
        return Path(config_dir) / "config.json"
    return Path.home() / ".docker" / "config.json"


class DockerAuthProvider:
    """Registry credentials from the docker CLI config file.

    Lets the backend pull private base images and push the result with
    the same logins as ``docker login``.
    """

    def __init__(self, config_path: Path | None = None):
        self._config_path = config_path if config_path is not None else docker_config_path()
        self._auths: dict[str, dict[str, Any]] | None = None

    @property
    def auths(self) -> dict[str, dict[str, Any]]:
        if self._auths is None:
            self._auths = self._load()
        return self._auths

    def _load(self) -> dict[str, dict[str, Any]]:
        try:
            with open(self._config_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            logger.debug("no docker config found", path=str(self._config_path))
            return {}
        except (OSError, json.JSONDecodeError) as e:
            logger.debug(
                "could not read docker config", path=str(self._config_path), error=str(e)
            )
            return {}

        auths = data.get("auths") if isinstance(data, dict) else None
        if not isinstance(auths, dict):
            return {}
        return {host: entry for host, entry in auths.items() if isinstance(entry, dict)}

    def headers(self) -> dict[str, str]:
        if not self.auths:
            return {}
        encoded = base64.urlsafe_b64encode(json.dumps(self.auths).encode("utf-8"))
        return {REGISTRY_CONFIG_HEADER: encoded.decode("ascii")}
