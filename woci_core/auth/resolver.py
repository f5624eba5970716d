"""Resolve registry credentials from a URL, the credential store or the GitHub CLI."""

from __future__ import annotations

import logging
from pathlib import Path
from urllib.parse import SplitResult, unquote

import yaml

from woci_core.errors import DeserializationError, MissingCredentialsError
from woci_core.urls import parse_url, url_host

from .store import CredentialStore

logger = logging.getLogger(__name__)

GH_HOSTS_FILE = Path(".config") / "gh" / "hosts.yml"
GH_DEFAULT_HOST = "github.com"


def credentials_from_url(url: str | SplitResult) -> tuple[str, str]:
    """Return the credentials embedded in ``url``; there is no store fallback."""

    parsed = parse_url(url)
    if not parsed.username:
        raise MissingCredentialsError(f"url {url_host(parsed)} carries no credentials")
    return unquote(parsed.username), unquote(parsed.password or "")


def resolve_credentials(url: str | SplitResult, store: CredentialStore) -> tuple[str, str]:
    """URL userinfo wins; otherwise look the host up in ``store``."""

    parsed = parse_url(url)
    if parsed.username:
        logger.debug("using credentials embedded in url for %s", parsed.hostname)
        return credentials_from_url(parsed)
    return store.resolve(url_host(parsed))


def resolve_credentials_with_path(url: str | SplitResult, path: Path | str) -> tuple[str, str]:
    """Like :func:`resolve_credentials` but only reads ``path`` when the URL has no userinfo."""

    parsed = parse_url(url)
    if parsed.username:
        return credentials_from_url(parsed)
    return CredentialStore.load(path).resolve(url_host(parsed))


def github_cli_credentials(path: Path | str | None = None, host: str = GH_DEFAULT_HOST) -> tuple[str, str]:
    """Read ``(user, oauth_token)`` for ``host`` from the GitHub CLI ``hosts.yml``."""

    hosts_path = Path(path) if path is not None else Path.home() / GH_HOSTS_FILE
    if not hosts_path.exists():
        raise MissingCredentialsError(f"could not find gh config at {hosts_path}")
    try:
        payload = yaml.safe_load(hosts_path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as exc:
        raise DeserializationError(f"failed to parse gh config {hosts_path}") from exc
    entry = payload.get(host) if isinstance(payload, dict) else None
    if not isinstance(entry, dict):
        raise MissingCredentialsError(f"gh config {hosts_path} has no entry for {host}")
    user = entry.get("user")
    token = entry.get("oauth_token")
    if not isinstance(user, str) or not isinstance(token, str):
        raise DeserializationError(f"gh config entry for {host} lacks user/oauth_token")
    return user, token
