"""Image reference parsing and normalization.

Implements the reference grammar used by container registries::

    reference := name [ ":" tag ] [ "@" digest ]
    name      := [ domain "/" ] path-component [ "/" path-component ]*

Short names are expanded to fully-qualified references on the default
registry (``ubuntu`` becomes ``docker.io/library/ubuntu:latest``).
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from .exceptions import InvalidReferenceError

DEFAULT_DOMAIN = "docker.io"
LEGACY_DEFAULT_DOMAIN = "index.docker.io"
OFFICIAL_REPOSITORY_PREFIX = "library/"
DEFAULT_TAG = "latest"
NAME_TOTAL_LENGTH_MAX = 255

_ALPHANUMERIC = r"[a-z0-9]+"
_SEPARATOR = r"(?:[._]|__|[-]+)"
_PATH_COMPONENT = rf"{_ALPHANUMERIC}(?:{_SEPARATOR}{_ALPHANUMERIC})*"
_DOMAIN_COMPONENT = r"(?:[a-zA-Z0-9]|[a-zA-Z0-9][a-zA-Z0-9-]*[a-zA-Z0-9])"
_DOMAIN = rf"{_DOMAIN_COMPONENT}(?:\.{_DOMAIN_COMPONENT})*(?::[0-9]+)?"
_TAG = r"[\w][\w.-]{0,127}"
_DIGEST = r"[A-Za-z][A-Za-z0-9]*(?:[-_+.][A-Za-z][A-Za-z0-9]*)*:[0-9a-fA-F]{32,}"
_NAME = rf"(?:{_DOMAIN}/)?{_PATH_COMPONENT}(?:/{_PATH_COMPONENT})*"

_REFERENCE_RE = re.compile(
    rf"(?P<name>{_NAME})(?::(?P<tag>{_TAG}))?(?:@(?P<digest>{_DIGEST}))?", re.ASCII
)
_DOMAIN_RE = re.compile(_DOMAIN, re.ASCII)
_IDENTIFIER_RE = re.compile(r"[a-f0-9]{64}")


@dataclass(frozen=True)
class Reference:
    """A parsed, fully-qualified image reference."""

    domain: str
    path: str
    tag: str | None = None
    digest: str | None = None

    @property
    def name(self) -> str:
        return f"{self.domain}/{self.path}"

    def with_default_tag(self) -> "Reference":
        """Return this reference with the default tag if it has neither tag nor digest."""
        if self.tag is None and self.digest is None:
            return Reference(self.domain, self.path, DEFAULT_TAG, None)
        return self

    def __str__(self) -> str:
        ref = self.name
        if self.tag is not None:
            ref += f":{self.tag}"
        if self.digest is not None:
            ref += f"@{self.digest}"
        return ref


def _split_domain(name: str) -> tuple[str, str]:
    i = name.find("/")
    candidate = name[:i]
    if i == -1 or (
        not any(c in candidate for c in ".:")
        and candidate != "localhost"
        and candidate.lower() == candidate
    ):
        domain, remainder = DEFAULT_DOMAIN, name
    else:
        domain, remainder = candidate, name[i + 1 :]

    if domain == LEGACY_DEFAULT_DOMAIN:
        domain = DEFAULT_DOMAIN
    if domain == DEFAULT_DOMAIN and "/" not in remainder:
        remainder = OFFICIAL_REPOSITORY_PREFIX + remainder
    return domain, remainder


def parse(raw: str) -> Reference:
    """Parse a reference that must already be fully qualified with a domain."""
    match = _REFERENCE_RE.fullmatch(raw)
    if match is None:
        if not raw:
            raise InvalidReferenceError(raw, "repository name must have at least one component")
        if _REFERENCE_RE.fullmatch(raw.lower()) is not None:
            raise InvalidReferenceError(raw, "repository name must be lowercase")
        raise InvalidReferenceError(raw, "must match name[:tag][@digest]")

    name = match.group("name")
    if len(name) > NAME_TOTAL_LENGTH_MAX:
        raise InvalidReferenceError(
            raw, f"repository name must not be more than {NAME_TOTAL_LENGTH_MAX} characters"
        )

    domain, _, path = name.partition("/")
    if not path or _DOMAIN_RE.fullmatch(domain) is None:
        raise InvalidReferenceError(raw, "reference is not fully qualified")
    return Reference(
        domain=domain, path=path, tag=match.group("tag"), digest=match.group("digest")
    )


def parse_normalized_named(raw: str) -> Reference:
    """Parse a user-supplied reference, expanding it onto the default registry."""
    if _IDENTIFIER_RE.fullmatch(raw):
        raise InvalidReferenceError(
            raw, "cannot specify 64-byte hexadecimal strings as a repository name"
        )

    domain, remainder = _split_domain(raw)
    remote_name = remainder.split(":", 1)[0]
    if remote_name.lower() != remote_name:
        raise InvalidReferenceError(raw, "repository name must be lowercase")

    try:
        return parse(f"{domain}/{remainder}")
    except InvalidReferenceError as e:
        # Report against what the user typed, not the expanded form.
        raise InvalidReferenceError(raw, e.reason) from None


def normalize_reference(raw: str) -> str:
    """Return the canonical string form of ``raw``, tagged ``latest`` if untagged.

    Raises:
        InvalidReferenceError: if ``raw`` is not a valid image reference.
    """
    return str(parse_normalized_named(raw).with_default_tag())
