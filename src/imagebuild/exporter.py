"""Export descriptor for builds that produce tagged images."""

from __future__ import annotations

from typing import Iterable

import structlog

from .backend.models import EXPORTER_IMAGE, ExportEntry
from .exceptions import InvalidReferenceError
from .reference import normalize_reference

logger = structlog.get_logger(module=__name__)

ATTR_NAME = "name"
ATTR_NAME_CANONICAL = "name-canonical"


def normalize_tags(tags: Iterable[str]) -> list[str]:
    """Normalize ``tags`` in order, dropping the ones that fail with a warning."""
    normalized: list[str] = []
    for tag in tags:
        try:
            normalized.append(normalize_reference(tag))
        except InvalidReferenceError as e:
            logger.warning("failed to normalize tag", tag=tag, error=str(e))
    return normalized


def default_exporter(tags: Iterable[str]) -> ExportEntry | None:
    """Return the image export entry for ``tags``.

    Returns None when there is nothing to publish, either because no tags
    were requested or because none of them is a valid reference. The build
    itself still runs in that case.
    """
    tags = list(tags)
    if not tags:
        return None

    names = normalize_tags(tags)
    if not names:
        logger.warning("no valid tags, image will not be exported", tags=tags)
        return None

    return ExportEntry(
        type=EXPORTER_IMAGE,
        attrs={
            ATTR_NAME: ",".join(names),
            # Do not also publish a digest-qualified name.
            ATTR_NAME_CANONICAL: "",
        },
    )
