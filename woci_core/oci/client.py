"""OCI distribution v2 client built on top of requests."""

from __future__ import annotations

import enum
import json
import logging
import re
from typing import Any, Iterable, Sequence
from urllib.parse import urljoin

import requests
from requests import RequestException, Response

from woci_core.errors import AuthenticationError, RegistryError

from .security import redact_headers
from .types import (
    IMAGE_MANIFEST_MEDIA_TYPE,
    Config,
    OCI_IMAGE_MEDIA_TYPE,
    ImageData,
    ImageLayer,
    OciImageManifest,
    PushResponse,
    Reference,
    RegistryAuth,
    RegistryOperation,
    sha256_digest,
)

logger = logging.getLogger(__name__)

_CHALLENGE_PARAM_RE = re.compile(r'(\w+)="([^"]*)"')
_INDEX_MEDIA_TYPES = (
    "application/vnd.oci.image.index.v1+json",
    "application/vnd.docker.distribution.manifest.list.v2+json",
)


class ClientProtocol(str, enum.Enum):
    HTTP = "http"
    HTTPS = "https"


class OciClient:
    """Registry client speaking the OCI distribution API.

    Every request is attempted once; failures surface immediately.
    """

    def __init__(
        self,
        protocol: ClientProtocol = ClientProtocol.HTTPS,
        *,
        timeout: float = 30.0,
        verify_tls: bool = True,
        session: requests.Session | None = None,
    ) -> None:
        self.protocol = ClientProtocol(protocol)
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.verify = verify_tls
        self._auth_headers: dict[tuple[str, RegistryOperation], str | None] = {}

    def auth(self, reference: Reference, auth: RegistryAuth, operation: RegistryOperation) -> None:
        """Run the ``/v2/`` challenge and remember the resulting credentials."""

        url = f"{self._base_url(reference.registry)}/v2/"
        try:
            resp = self.session.get(url, timeout=self.timeout)
        except RequestException as exc:
            raise AuthenticationError(f"GET {url} failed: {exc}") from exc

        if resp.status_code < 300:
            logger.debug("registry %s requires no authentication", reference.registry)
            self._auth_headers[(reference.registry, operation)] = None
            return
        if resp.status_code != 401:
            raise AuthenticationError(f"GET {url} returned {resp.status_code}: {resp.text}")

        scheme, params = _parse_challenge(resp.headers.get("WWW-Authenticate", ""))
        if scheme == "basic":
            header = self._verify_basic(url, auth)
        elif scheme == "bearer":
            header = self._fetch_token(reference, auth, operation, params)
        else:
            raise AuthenticationError(f"unsupported auth challenge from {reference.registry}: {scheme or '<none>'}")
        self._auth_headers[(reference.registry, operation)] = header
        logger.debug("authenticated against %s for %s", reference.registry, operation.value)

    def push(
        self,
        reference: Reference,
        layers: Sequence[ImageLayer],
        config: Config,
        auth: RegistryAuth,
        manifest: OciImageManifest | None = None,
    ) -> PushResponse:
        self._ensure_auth(reference, auth, RegistryOperation.PUSH)
        image_manifest = manifest or OciImageManifest.build(list(layers), config)
        for layer in layers:
            self._push_blob(reference, layer.data, layer.sha256_digest())
        config_url = self._push_blob(reference, config.data, config.sha256_digest())
        manifest_url = self._push_manifest(reference, image_manifest)
        logger.info("pushed %s layer(s) to %s", len(layers), reference)
        return PushResponse(config_url=config_url, manifest_url=manifest_url)

    def pull(
        self,
        reference: Reference,
        auth: RegistryAuth,
        accepted_media_types: Iterable[str],
    ) -> ImageData:
        self._ensure_auth(reference, auth, RegistryOperation.PULL)
        accepted = set(accepted_media_types)
        manifest, digest = self._pull_manifest(reference)
        layers: list[ImageLayer] = []
        for descriptor in manifest.layers:
            media_type = str(descriptor.get("mediaType") or "")
            if media_type not in accepted:
                logger.debug("skipping layer %s with media type %s", descriptor.get("digest"), media_type)
                continue
            data = self._pull_blob(reference, str(descriptor.get("digest") or ""))
            layers.append(ImageLayer(data=data, media_type=media_type, annotations=descriptor.get("annotations")))
        return ImageData(layers=tuple(layers), digest=digest, manifest=manifest)

    def _ensure_auth(self, reference: Reference, auth: RegistryAuth, operation: RegistryOperation) -> None:
        key = (reference.registry, operation)
        if key in self._auth_headers:
            return
        if operation is RegistryOperation.PULL and (reference.registry, RegistryOperation.PUSH) in self._auth_headers:
            self._auth_headers[key] = self._auth_headers[(reference.registry, RegistryOperation.PUSH)]
            return
        self.auth(reference, auth, operation)

    def _verify_basic(self, url: str, auth: RegistryAuth) -> str:
        if auth.anonymous:
            raise AuthenticationError(f"{url} requires credentials")
        try:
            resp = self.session.get(url, auth=(auth.username, auth.password), timeout=self.timeout)
        except RequestException as exc:
            raise AuthenticationError(f"GET {url} failed: {exc}") from exc
        if resp.status_code >= 300:
            raise AuthenticationError(f"basic auth against {url} returned {resp.status_code}")
        # Reuse the header requests computed for the verified request.
        return str(resp.request.headers["Authorization"])

    def _fetch_token(
        self,
        reference: Reference,
        auth: RegistryAuth,
        operation: RegistryOperation,
        params: dict[str, str],
    ) -> str:
        realm = params.get("realm")
        if not realm:
            raise AuthenticationError(f"bearer challenge from {reference.registry} has no realm")
        query: dict[str, str] = {}
        if params.get("service"):
            query["service"] = params["service"]
        if reference.repository:
            query["scope"] = f"repository:{reference.repository}:{operation.scope_actions()}"
        basic = None if auth.anonymous else (auth.username, auth.password)
        try:
            resp = self.session.get(realm, params=query, auth=basic, timeout=self.timeout)
        except RequestException as exc:
            raise AuthenticationError(f"token request to {realm} failed: {exc}") from exc
        if resp.status_code != 200:
            raise AuthenticationError(f"token request to {realm} returned {resp.status_code}: {resp.text}")
        try:
            payload = resp.json()
        except ValueError as exc:
            raise AuthenticationError(f"token response from {realm} is not JSON") from exc
        if not isinstance(payload, dict):
            raise AuthenticationError(f"token response from {realm} is not a JSON object")
        token = payload.get("token") or payload.get("access_token")
        if not token:
            raise AuthenticationError(f"token response from {realm} carries no token")
        return f"Bearer {token}"

    def _push_blob(self, reference: Reference, data: bytes, digest: str) -> str:
        start = self._url(reference, "blobs/uploads/")
        resp = self._request("POST", start, reference, RegistryOperation.PUSH, ok_statuses=(202,))
        location = resp.headers.get("Location")
        if not location:
            raise RegistryError(f"POST {start} returned no upload location")
        upload_url = urljoin(start, location)
        resp = self._request(
            "PUT",
            upload_url,
            reference,
            RegistryOperation.PUSH,
            ok_statuses=(201,),
            params={"digest": digest},
            data=data,
            headers={"Content-Type": "application/octet-stream"},
        )
        return urljoin(upload_url, resp.headers.get("Location") or self._url(reference, f"blobs/{digest}"))

    def _push_manifest(self, reference: Reference, manifest: OciImageManifest) -> str:
        url = self._url(reference, f"manifests/{reference.manifest_ref()}")
        resp = self._request(
            "PUT",
            url,
            reference,
            RegistryOperation.PUSH,
            ok_statuses=(201,),
            data=manifest.to_bytes(),
            headers={"Content-Type": manifest.media_type},
        )
        location = resp.headers.get("Location")
        return urljoin(url, location) if location else url

    def _pull_manifest(self, reference: Reference) -> tuple[OciImageManifest, str]:
        url = self._url(reference, f"manifests/{reference.manifest_ref()}")
        resp = self._request(
            "GET",
            url,
            reference,
            RegistryOperation.PULL,
            headers={"Accept": f"{OCI_IMAGE_MEDIA_TYPE}, {IMAGE_MANIFEST_MEDIA_TYPE}"},
        )
        try:
            payload = json.loads(resp.content)
        except ValueError as exc:
            raise RegistryError(f"manifest at {url} is not valid JSON") from exc
        if not isinstance(payload, dict):
            raise RegistryError(f"manifest at {url} is not a JSON object")
        media_type = payload.get("mediaType") or resp.headers.get("Content-Type", "")
        if media_type in _INDEX_MEDIA_TYPES:
            raise RegistryError(f"{reference} resolves to an image index, expected a single manifest")
        digest = resp.headers.get("Docker-Content-Digest") or sha256_digest(resp.content)
        return OciImageManifest.from_dict(payload), digest

    def _pull_blob(self, reference: Reference, digest: str) -> bytes:
        url = self._url(reference, f"blobs/{digest}")
        resp = self._request("GET", url, reference, RegistryOperation.PULL)
        data = resp.content
        if digest.startswith("sha256:") and sha256_digest(data) != digest:
            raise RegistryError(f"digest mismatch for blob {digest} from {reference}")
        return data

    def _request(
        self,
        method: str,
        url: str,
        reference: Reference,
        operation: RegistryOperation,
        *,
        ok_statuses: Sequence[int] = tuple(range(200, 300)),
        headers: dict[str, str] | None = None,
        **kwargs: Any,
    ) -> Response:
        merged = dict(headers or {})
        auth_header = self._auth_headers.get((reference.registry, operation))
        if auth_header:
            merged["Authorization"] = auth_header
        logger.debug("%s %s headers=%s", method, url, redact_headers(merged))
        try:
            resp = self.session.request(method, url, headers=merged, timeout=self.timeout, **kwargs)
        except RequestException as exc:
            raise RegistryError(f"{method} {url} failed: {exc}") from exc
        if resp.status_code in (401, 403):
            raise AuthenticationError(f"{method} {url} returned {resp.status_code}: {resp.text}")
        if resp.status_code not in ok_statuses:
            raise RegistryError(f"{method} {url} returned {resp.status_code}: {resp.text}")
        return resp

    def _base_url(self, registry: str) -> str:
        return f"{self.protocol.value}://{registry}"

    def _url(self, reference: Reference, suffix: str) -> str:
        return f"{self._base_url(reference.registry)}/v2/{reference.repository}/{suffix}"


def _parse_challenge(header: str) -> tuple[str, dict[str, str]]:
    scheme, _, rest = header.strip().partition(" ")
    return scheme.lower(), dict(_CHALLENGE_PARAM_RE.findall(rest))
