"""Redaction helpers so secrets never reach a log line."""

from __future__ import annotations

from urllib.parse import urlsplit, urlunsplit

_SENSITIVE_KEYS = ("password", "token", "authorization", "bearer")


def redact_url(url: str) -> str:
    """Drop the password from a URL's userinfo."""

    if "://" not in url:
        return url
    parsed = urlsplit(url)
    if parsed.password is None:
        return url
    userinfo, _, hostport = parsed.netloc.rpartition("@")
    username = userinfo.split(":", 1)[0]
    return urlunsplit(parsed._replace(netloc=f"{username}:***@{hostport}"))


def redact_headers(headers: dict[str, str]) -> dict[str, str]:
    redacted: dict[str, str] = {}
    for key, value in headers.items():
        if any(marker in key.lower() for marker in _SENSITIVE_KEYS):
            redacted[key] = "***"
        else:
            redacted[key] = value
    return redacted
