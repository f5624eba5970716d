"""Shared fakes for the transfer and login tests."""

from __future__ import annotations

from typing import Iterable, Sequence

import pytest

from woci_core.errors import AuthenticationError
from woci_core.oci import (
    ClientProtocol,
    Config,
    ImageData,
    ImageLayer,
    OciImageManifest,
    PushResponse,
    Reference,
    RegistryAuth,
    RegistryOperation,
)

# Smallest valid module: magic number plus version 1.
WASM_MODULE = b"\x00asm\x01\x00\x00\x00"


class FakeRegistry:
    """In-memory stand-in for the registry capability."""

    def __init__(self) -> None:
        self.protocols: list[ClientProtocol] = []
        self.calls: list[tuple[str, Reference, object]] = []
        self.reject_auth = False
        self.pull_layers: tuple[ImageLayer, ...] = ()
        self.pushed: dict[str, object] = {}

    def factory(self, protocol: ClientProtocol) -> "FakeRegistry":
        self.protocols.append(protocol)
        return self

    def auth(self, reference: Reference, auth: RegistryAuth, operation: RegistryOperation) -> None:
        self.calls.append(("auth", reference, (auth, operation)))
        if self.reject_auth:
            raise AuthenticationError(f"{reference.registry} rejected {auth.username}")

    def push(
        self,
        reference: Reference,
        layers: Sequence[ImageLayer],
        config: Config,
        auth: RegistryAuth,
        manifest: OciImageManifest | None = None,
    ) -> PushResponse:
        self.calls.append(("push", reference, auth))
        self.pushed = {"layers": list(layers), "config": config, "manifest": manifest}
        base = f"http://{reference.registry}/v2/{reference.repository}"
        return PushResponse(
            config_url=f"{base}/blobs/{config.sha256_digest()}",
            manifest_url=f"{base}/manifests/{reference.resolved_tag()}",
        )

    def pull(self, reference: Reference, auth: RegistryAuth, accepted_media_types: Iterable[str]) -> ImageData:
        accepted = set(accepted_media_types)
        self.calls.append(("pull", reference, accepted))
        return ImageData(layers=tuple(layer for layer in self.pull_layers if layer.media_type in accepted))

    @property
    def auth_calls(self) -> list[tuple[str, Reference, object]]:
        return [call for call in self.calls if call[0] == "auth"]


@pytest.fixture
def fake_registry() -> FakeRegistry:
    return FakeRegistry()


@pytest.fixture
def wasm_file(tmp_path):
    path = tmp_path / "module.wasm"
    path.write_bytes(WASM_MODULE)
    return path
