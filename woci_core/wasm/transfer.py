"""Push and pull a single WebAssembly module as an OCI artifact."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

from woci_core.config import Settings
from woci_core.errors import EmptyArtifactError, InvalidInputError
from woci_core.oci.registry import (
    ClientFactory,
    RegistryCapability,
    authenticate,
    parse_img_url,
    registry_auth,
)
from woci_core.oci.security import redact_url
from woci_core.oci.types import (
    WASM_CONFIG_MEDIA_TYPE,
    WASM_LAYER_MEDIA_TYPE,
    Config,
    ImageLayer,
    OciImageManifest,
    Reference,
    RegistryAuth,
    RegistryOperation,
)

from .validate import Validator, run_validator, validate_module

logger = logging.getLogger(__name__)


@dataclass
class PushArgs:
    """Configuration for a pushing process."""

    file: str
    image_url: str
    username: str = ""
    password: str = field(default="", repr=False)
    annotations: Mapping[str, str] | None = None


@dataclass
class PullArgs:
    """Configuration for a pulling process."""

    write_file: str
    image_url: str
    username: str = ""
    password: str = field(default="", repr=False)


def wasm_push(
    file: str | Path,
    image_url: str,
    username: str,
    password: str,
    *,
    annotations: Mapping[str, str] | None = None,
    validator: Validator = validate_module,
    settings: Settings | None = None,
    client_factory: ClientFactory | None = None,
) -> str:
    """Validate ``file`` and push it to ``image_url``; return the manifest URL.

    Nothing touches the network until the module has passed validation.
    """

    path = Path(file)
    if not path.is_file():
        raise InvalidInputError(f"{file} is not a regular file")
    try:
        module = path.read_bytes()
    except OSError as exc:
        raise InvalidInputError(f"failed to read {file}") from exc
    run_validator(validator, module)

    client, reference, repo_url = parse_img_url(image_url, settings=settings, client_factory=client_factory)
    logger.info("pushing %s (%s bytes) to %s", path, len(module), repo_url)
    authenticate(client, reference, username, password, RegistryOperation.PUSH)
    manifest_url = push_wasm_to_registry(
        client,
        registry_auth(username, password),
        reference,
        module,
        annotations,
    )
    logger.info("pushed %s -> %s", path, redact_url(manifest_url))
    return manifest_url


def wasm_pull(
    image_url: str,
    username: str,
    password: str,
    *,
    validator: Validator = validate_module,
    settings: Settings | None = None,
    client_factory: ClientFactory | None = None,
) -> bytes:
    """Pull the module stored at ``image_url`` and return its validated bytes."""

    client, reference, repo_url = parse_img_url(image_url, settings=settings, client_factory=client_factory)
    logger.info("pulling from %s", repo_url)
    authenticate(client, reference, username, password, RegistryOperation.PULL)
    content = pull_wasm_from_registry(client, registry_auth(username, password), reference)
    logger.info("successful pull %s bytes from %s", len(content), repo_url)
    run_validator(validator, content)
    return content


def push_wasm_to_registry(
    client: RegistryCapability,
    auth: RegistryAuth,
    reference: Reference,
    module: bytes,
    annotations: Mapping[str, str] | None = None,
) -> str:
    layers = [ImageLayer(data=module, media_type=WASM_LAYER_MEDIA_TYPE)]
    config = Config(data=b"{}", media_type=WASM_CONFIG_MEDIA_TYPE)
    manifest = OciImageManifest.build(layers, config, annotations)
    response = client.push(reference, layers, config, auth, manifest)
    return response.manifest_url


def pull_wasm_from_registry(client: RegistryCapability, auth: RegistryAuth, reference: Reference) -> bytes:
    image = client.pull(reference, auth, [WASM_LAYER_MEDIA_TYPE])
    wasm_layers = [layer for layer in image.layers if layer.media_type == WASM_LAYER_MEDIA_TYPE]
    if wasm_layers:
        if len(wasm_layers) > 1:
            logger.warning("%s carries %s wasm layers; using the first", reference, len(wasm_layers))
        return wasm_layers[0].data
    raise EmptyArtifactError(f"{reference.registry}/{reference.repository}:{reference.resolved_tag()}")


def push(args: PushArgs, **kwargs: Any) -> str:
    return wasm_push(args.file, args.image_url, args.username, args.password, annotations=args.annotations, **kwargs)


def pull(args: PullArgs, **kwargs: Any) -> Path:
    """Pull ``args.image_url`` and write the module to ``args.write_file``."""

    data = wasm_pull(args.image_url, args.username, args.password, **kwargs)
    target = Path(args.write_file)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
    except OSError as exc:
        raise InvalidInputError(f"failed to write {target}") from exc
    return target
