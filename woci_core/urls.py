"""URL parsing shared by the credential and registry layers."""

from __future__ import annotations

from urllib.parse import SplitResult, urlsplit

from .errors import InvalidURLError


def parse_url(value: str | SplitResult) -> SplitResult:
    if isinstance(value, SplitResult):
        return value
    text = (value or "").strip()
    try:
        parsed = urlsplit(text)
        # Accessing .port validates the port component.
        parsed.port
    except ValueError as exc:
        raise InvalidURLError(f"invalid url: {value!r}") from exc
    if not parsed.scheme or not parsed.netloc:
        raise InvalidURLError(f"invalid url: {value!r}")
    return parsed


def url_host(url: str | SplitResult) -> str:
    parsed = parse_url(url)
    if not parsed.hostname:
        raise InvalidURLError(f"url format incorrect: {parsed.geturl()!r}")
    return parsed.hostname


def registry_address(url: str | SplitResult) -> str:
    """``host[:port]`` of ``url`` without userinfo; IPv6 hosts keep their brackets."""

    parsed = parse_url(url)
    host = url_host(parsed)
    if ":" in host:
        host = f"[{host}]"
    return f"{host}:{parsed.port}" if parsed.port else host
