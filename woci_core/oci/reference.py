"""Parse ``[registry/]repository[:tag][@digest]`` strings into references."""

from __future__ import annotations

import re

from woci_core.errors import InvalidReferenceError

from .types import Reference

DEFAULT_REGISTRY = "docker.io"
NAME_TOTAL_LENGTH_MAX = 255

_ALPHA_NUMERIC = r"[a-z0-9]+"
_SEPARATOR = r"(?:[._]|__|[-]+)"
_PATH_COMPONENT = rf"{_ALPHA_NUMERIC}(?:{_SEPARATOR}{_ALPHA_NUMERIC})*"
_DOMAIN_COMPONENT = r"(?:[a-zA-Z0-9]|[a-zA-Z0-9][a-zA-Z0-9-]*[a-zA-Z0-9])"
_IPV6 = r"\[[a-fA-F0-9:]+\]"
_DOMAIN = rf"(?:{_DOMAIN_COMPONENT}(?:\.{_DOMAIN_COMPONENT})*|{_IPV6})(?::[0-9]+)?"
_TAG = r"[\w][\w.-]{0,127}"
_DIGEST = r"[A-Za-z][A-Za-z0-9]*(?:[-_+.][A-Za-z][A-Za-z0-9]*)*:[0-9a-fA-F]{32,}"

_REFERENCE_RE = re.compile(
    rf"^(?P<name>(?:{_DOMAIN}/)?{_PATH_COMPONENT}(?:/{_PATH_COMPONENT})*)"
    rf"(?::(?P<tag>{_TAG}))?"
    rf"(?:@(?P<digest>{_DIGEST}))?$"
)


def parse_reference(value: str) -> Reference:
    """Parse ``value`` the way container tooling does.

    A first path segment without ``.`` or ``:`` (and not ``localhost``)
    is a repository segment on the default registry.
    """

    text = value.strip()
    if not text:
        raise InvalidReferenceError("repository name must have at least one component")
    match = _REFERENCE_RE.match(text)
    if match is None:
        if _REFERENCE_RE.match(text.lower()):
            raise InvalidReferenceError(f"repository name must be lowercase: {value!r}")
        raise InvalidReferenceError(f"invalid reference format: {value!r}")
    name = match.group("name")
    if len(name) > NAME_TOTAL_LENGTH_MAX:
        raise InvalidReferenceError(
            f"repository name must not be more than {NAME_TOTAL_LENGTH_MAX} characters"
        )
    registry, repository = _split_domain(name)
    return Reference(
        registry=registry,
        repository=repository,
        tag=match.group("tag"),
        digest=match.group("digest"),
    )


def _split_domain(name: str) -> tuple[str, str]:
    first, sep, rest = name.partition("/")
    if not sep:
        return DEFAULT_REGISTRY, f"library/{name}"
    if "." in first or ":" in first or first == "localhost":
        return first, rest
    return DEFAULT_REGISTRY, name
