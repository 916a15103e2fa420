"""Retagging of existing images on the build backend."""

from __future__ import annotations

from typing import Sequence

import structlog

from .backend.protocol import BuildBackend
from .reference import normalize_reference

logger = structlog.get_logger(module=__name__)


async def apply_tags(backend: BuildBackend, source: str, targets: Sequence[str]) -> list[str]:
    """Point each of ``targets`` at image ``source`` and return the normalized targets.

    Unlike build tags, every reference must be valid here.

    Raises:
        ValueError: If no target is given.
        InvalidReferenceError: If any reference is invalid.
    """
    if not targets:
        raise ValueError("at least one target reference is required")

    normalized_source = normalize_reference(source)
    normalized_targets = [normalize_reference(target) for target in targets]
    await backend.apply_tags(normalized_source, normalized_targets)
    logger.debug("tags applied", source=normalized_source, targets=normalized_targets)
    return normalized_targets
