"""Translation of a build configuration into frontend attributes and local directories."""

from __future__ import annotations

import os
from typing import Iterable

from .config import DEFAULT_DOCKERFILE_NAME, BuildConfiguration

BUILD_ARG_PREFIX = "build-arg:"
LABEL_PREFIX = "label:"

ATTR_TARGET = "target"
ATTR_FILENAME = "filename"
ATTR_ADD_HOSTS = "add-hosts"
ATTR_IMAGE_RESOLVE_MODE = "image-resolve-mode"
IMAGE_RESOLVE_MODE_PULL = "pull"

LOCAL_DIR_CONTEXT = "context"
LOCAL_DIR_DOCKERFILE = "dockerfile"


def _split_key_value(entry: str) -> tuple[str, str]:
    # A missing "=" yields an empty value instead of an error.
    key, _, value = entry.partition("=")
    return key, value


def _prefixed(prefix: str, entries: Iterable[str]) -> dict[str, str]:
    attrs: dict[str, str] = {}
    for entry in entries:
        key, value = _split_key_value(entry)
        attrs[f"{prefix}{key}"] = value
    return attrs


def _base_name(path: str) -> str:
    stripped = path.rstrip("/")
    return os.path.basename(stripped) if stripped else "/"


def _dir_name(path: str) -> str:
    # normpath("") is ".", so a bare file name resolves to the working directory.
    return os.path.normpath(os.path.dirname(path))


def frontend_attributes(config: BuildConfiguration) -> dict[str, str]:
    """Build the dockerfile frontend attributes for ``config``.

    Keys are only present when the matching option was supplied, except
    ``target`` (empty means the final stage) and ``filename``.
    """
    # --target
    attrs = {ATTR_TARGET: config.target}
    # --build-arg
    attrs.update(_prefixed(BUILD_ARG_PREFIX, config.build_args))
    # --label
    attrs.update(_prefixed(LABEL_PREFIX, config.labels))
    # --add-host
    if config.add_hosts:
        attrs[ATTR_ADD_HOSTS] = ",".join(config.add_hosts)
    # --file
    if config.dockerfile is None:
        attrs[ATTR_FILENAME] = DEFAULT_DOCKERFILE_NAME
    else:
        attrs[ATTR_FILENAME] = _base_name(config.dockerfile)
    # --pull
    if config.pull:
        attrs[ATTR_IMAGE_RESOLVE_MODE] = IMAGE_RESOLVE_MODE_PULL
    return attrs


def local_dirs(config: BuildConfiguration) -> dict[str, str]:
    """Map the local directory names the frontend reads from to host paths."""
    dirs = {LOCAL_DIR_CONTEXT: config.context}
    if config.dockerfile is None:
        dirs[LOCAL_DIR_DOCKERFILE] = config.context
    else:
        dirs[LOCAL_DIR_DOCKERFILE] = _dir_name(config.dockerfile)
    return dirs


def translate(config: BuildConfiguration) -> tuple[dict[str, str], dict[str, str]]:
    """Return ``(frontend_attributes, local_dirs)`` for ``config``."""
    return frontend_attributes(config), local_dirs(config)
