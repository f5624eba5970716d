"""OCI datatypes shared by the registry client and the wasm transfer."""

from __future__ import annotations

import enum
import hashlib
import json
from dataclasses import dataclass, field
from typing import Any, Mapping

OCI_IMAGE_MEDIA_TYPE = "application/vnd.oci.image.manifest.v1+json"
IMAGE_MANIFEST_MEDIA_TYPE = "application/vnd.docker.distribution.manifest.v2+json"
WASM_CONFIG_MEDIA_TYPE = "application/vnd.wasm.config.v1+json"
WASM_LAYER_MEDIA_TYPE = "application/vnd.wasm.content.layer.v1+wasm"

DEFAULT_TAG = "latest"


def sha256_digest(data: bytes) -> str:
    return "sha256:" + hashlib.sha256(data).hexdigest()


class RegistryOperation(str, enum.Enum):
    PUSH = "push"
    PULL = "pull"

    def scope_actions(self) -> str:
        return "pull,push" if self is RegistryOperation.PUSH else "pull"


@dataclass(frozen=True)
class RegistryAuth:
    """Basic credentials; an empty username means anonymous access."""

    username: str = ""
    password: str = field(default="", repr=False)

    @property
    def anonymous(self) -> bool:
        return not self.username


@dataclass(frozen=True)
class Reference:
    registry: str
    repository: str
    tag: str | None = None
    digest: str | None = None

    def resolved_tag(self) -> str:
        return self.tag or DEFAULT_TAG

    def manifest_ref(self) -> str:
        """Digest if pinned, tag otherwise."""

        return self.digest or self.resolved_tag()

    def whole(self) -> str:
        value = f"{self.registry}/{self.repository}"
        if self.tag:
            value += f":{self.tag}"
        if self.digest:
            value += f"@{self.digest}"
        return value

    def __str__(self) -> str:
        return self.whole()


@dataclass(frozen=True)
class ImageLayer:
    data: bytes = field(repr=False)
    media_type: str
    annotations: Mapping[str, str] | None = None

    def sha256_digest(self) -> str:
        return sha256_digest(self.data)

    def descriptor(self) -> dict[str, Any]:
        return _descriptor(self.media_type, self.data, self.annotations)


@dataclass(frozen=True)
class Config:
    data: bytes = field(repr=False)
    media_type: str
    annotations: Mapping[str, str] | None = None

    def sha256_digest(self) -> str:
        return sha256_digest(self.data)

    def descriptor(self) -> dict[str, Any]:
        return _descriptor(self.media_type, self.data, self.annotations)


@dataclass(frozen=True)
class OciImageManifest:
    config: dict[str, Any]
    layers: tuple[dict[str, Any], ...]
    annotations: Mapping[str, str] | None = None
    schema_version: int = 2
    media_type: str = OCI_IMAGE_MEDIA_TYPE

    @classmethod
    def build(
        cls,
        layers: list[ImageLayer] | tuple[ImageLayer, ...],
        config: Config,
        annotations: Mapping[str, str] | None = None,
    ) -> "OciImageManifest":
        return cls(
            config=config.descriptor(),
            layers=tuple(layer.descriptor() for layer in layers),
            annotations=dict(annotations) if annotations else None,
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "OciImageManifest":
        layers = data.get("layers") or []
        return cls(
            config=dict(data.get("config") or {}),
            layers=tuple(dict(layer) for layer in layers if isinstance(layer, Mapping)),
            annotations=data.get("annotations") or None,
            schema_version=int(data.get("schemaVersion", 2)),
            media_type=str(data.get("mediaType") or OCI_IMAGE_MEDIA_TYPE),
        )

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "schemaVersion": self.schema_version,
            "mediaType": self.media_type,
            "config": self.config,
            "layers": list(self.layers),
        }
        if self.annotations:
            payload["annotations"] = dict(self.annotations)
        return payload

    def to_bytes(self) -> bytes:
        return json.dumps(self.to_dict(), separators=(",", ":")).encode("utf-8")


@dataclass(frozen=True)
class PushResponse:
    config_url: str
    manifest_url: str


@dataclass(frozen=True)
class ImageData:
    layers: tuple[ImageLayer, ...]
    digest: str | None = None
    manifest: OciImageManifest | None = None


def _descriptor(media_type: str, data: bytes, annotations: Mapping[str, str] | None) -> dict[str, Any]:
    descriptor: dict[str, Any] = {
        "mediaType": media_type,
        "digest": sha256_digest(data),
        "size": len(data),
    }
    if annotations:
        descriptor["annotations"] = dict(annotations)
    return descriptor
