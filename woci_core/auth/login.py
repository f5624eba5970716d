"""Log into a registry and remember the credentials on success."""

from __future__ import annotations

import logging
from pathlib import Path

from woci_core.config import Settings
from woci_core.oci.registry import ClientFactory, authenticate, get_client, login_reference
from woci_core.oci.types import RegistryOperation
from woci_core.urls import parse_url, registry_address, url_host

from .store import CredentialRecord, CredentialStore

logger = logging.getLogger(__name__)


def login(
    url: str,
    username: str,
    password: str,
    path: Path | str,
    *,
    settings: Settings | None = None,
    client_factory: ClientFactory | None = None,
) -> CredentialRecord:
    """Probe the registry with the credentials, then persist them to ``path``.

    The credential file is only written after the registry accepted the
    credentials.
    """

    parsed = parse_url(url)
    host = url_host(parsed)
    store = CredentialStore.load(path)
    record = CredentialRecord.new(host, username, password)

    verify_login(parsed.geturl(), record, settings=settings, client_factory=client_factory)
    store.set_login(record)
    store.save(path)
    logger.info("stored credentials for %s in %s", host, path)
    return record


def verify_login(
    url: str,
    record: CredentialRecord,
    *,
    settings: Settings | None = None,
    client_factory: ClientFactory | None = None,
) -> None:
    username, password = record.user_password()
    client = get_client(url, settings=settings, client_factory=client_factory)
    reference = login_reference(registry_address(url))
    logger.debug("probing %s as %s", reference.registry, username)
    authenticate(client, reference, username, password, RegistryOperation.PUSH)


def logout(host: str, path: Path | str) -> None:
    """Forget the credentials stored for ``host``."""

    store = CredentialStore.load(path)
    store.remove_login(host)
    store.save(path)
    logger.info("removed credentials for %s from %s", host, path)
