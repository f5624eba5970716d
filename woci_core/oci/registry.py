"""Registry client policy: transport selection, reference derivation and auth."""

from __future__ import annotations

import logging
from typing import Callable, Iterable, Protocol, Sequence
from urllib.parse import SplitResult

from woci_core.urls import parse_url
from woci_core.config import Settings
from woci_core.errors import (
    AuthenticationError,
    InvalidReferenceError,
    InvalidURLError,
    UnsupportedSchemeError,
    WociError,
)

from .client import ClientProtocol, OciClient
from .reference import parse_reference
from .types import (
    Config,
    ImageData,
    ImageLayer,
    OciImageManifest,
    PushResponse,
    Reference,
    RegistryAuth,
    RegistryOperation,
)

logger = logging.getLogger(__name__)

_SCHEME_PORTS = {"http": 80, "https": 443}


class RegistryCapability(Protocol):
    """What the transfer and login flows need from a registry client."""

    def auth(self, reference: Reference, auth: RegistryAuth, operation: RegistryOperation) -> None: ...

    def push(
        self,
        reference: Reference,
        layers: Sequence[ImageLayer],
        config: Config,
        auth: RegistryAuth,
        manifest: OciImageManifest | None = None,
    ) -> PushResponse: ...

    def pull(self, reference: Reference, auth: RegistryAuth, accepted_media_types: Iterable[str]) -> ImageData: ...


ClientFactory = Callable[[ClientProtocol], RegistryCapability]


def default_scheme_port(scheme: str) -> int:
    try:
        return _SCHEME_PORTS[scheme]
    except KeyError:
        raise UnsupportedSchemeError(f"unknown schema {scheme}") from None


def get_client(
    url: str | SplitResult,
    *,
    settings: Settings | None = None,
    client_factory: ClientFactory | None = None,
) -> RegistryCapability:
    """Create a client whose transport security follows the URL scheme."""

    parsed = parse_url(url)
    if parsed.scheme == "http":
        protocol = ClientProtocol.HTTP
    elif parsed.scheme == "https":
        protocol = ClientProtocol.HTTPS
    else:
        raise UnsupportedSchemeError(f"unsupported schema {parsed.scheme}")
    if client_factory is not None:
        return client_factory(protocol)
    settings = settings or Settings()
    return OciClient(protocol, timeout=settings.timeout_seconds, verify_tls=settings.verify_tls)


def parse_img_url(
    url: str | SplitResult,
    *,
    settings: Settings | None = None,
    client_factory: ClientFactory | None = None,
) -> tuple[RegistryCapability, Reference, str]:
    """Return ``(client, reference, repo_url)`` for an image URL.

    ``repo_url`` is ``host:port/path`` with any userinfo stripped; the port
    is the URL's own or the scheme default.
    """

    parsed = parse_url(url)
    client = get_client(parsed, settings=settings, client_factory=client_factory)
    host = parsed.hostname
    if not host:
        raise InvalidURLError(f"invalid url: {parsed.geturl()!r}")
    if ":" in host:
        host = f"[{host}]"
    port = parsed.port or default_scheme_port(parsed.scheme)
    if parsed.path in ("", "/"):
        raise InvalidReferenceError(f"url {host} names no repository")
    repo_url = f"{host}:{port}{parsed.path}"
    reference = parse_reference(repo_url)
    return client, reference, repo_url


def login_reference(host: str) -> Reference:
    """Reference to the registry root, used to probe credentials."""

    return Reference(registry=host, repository="")


def registry_auth(username: str, password: str) -> RegistryAuth:
    return RegistryAuth(username=username, password=password)


def authenticate(
    client: RegistryCapability,
    reference: Reference,
    username: str,
    password: str,
    operation: RegistryOperation,
) -> None:
    try:
        client.auth(reference, registry_auth(username, password), operation)
    except AuthenticationError:
        raise
    except WociError as exc:
        raise AuthenticationError(f"authentication against {reference.registry} failed: {exc}") from exc
