"""OCI registry client package for woci."""

from .client import ClientProtocol, OciClient
from .reference import parse_reference
from .registry import (
    ClientFactory,
    RegistryCapability,
    authenticate,
    default_scheme_port,
    get_client,
    login_reference,
    parse_img_url,
    registry_auth,
)
from .types import (
    OCI_IMAGE_MEDIA_TYPE,
    WASM_CONFIG_MEDIA_TYPE,
    WASM_LAYER_MEDIA_TYPE,
    Config,
    ImageData,
    ImageLayer,
    OciImageManifest,
    PushResponse,
    Reference,
    RegistryAuth,
    RegistryOperation,
)

__all__ = [
    "OciClient",
    "ClientProtocol",
    "ClientFactory",
    "RegistryCapability",
    "parse_reference",
    "authenticate",
    "default_scheme_port",
    "get_client",
    "login_reference",
    "parse_img_url",
    "registry_auth",
    "OCI_IMAGE_MEDIA_TYPE",
    "WASM_CONFIG_MEDIA_TYPE",
    "WASM_LAYER_MEDIA_TYPE",
    "Config",
    "ImageData",
    "ImageLayer",
    "OciImageManifest",
    "PushResponse",
    "Reference",
    "RegistryAuth",
    "RegistryOperation",
]
