"""Store registry credentials and move WebAssembly modules through OCI registries."""

from .auth import (
    CredentialRecord,
    CredentialStore,
    credentials_from_url,
    github_cli_credentials,
    login,
    logout,
    resolve_credentials,
    resolve_credentials_with_path,
)
from .config import Settings, load_settings
from .errors import (
    AuthenticationError,
    CorruptCredentialError,
    DeserializationError,
    EmptyArtifactError,
    InvalidArtifactError,
    InvalidInputError,
    InvalidReferenceError,
    InvalidURLError,
    MissingCredentialsError,
    NotFoundError,
    RegistryError,
    SerializationError,
    UnsupportedSchemeError,
    WociError,
)
from .paths import UserDirs, default_auth_path
from .wasm import PullArgs, PushArgs, pull, push, wasm_pull, wasm_push

__all__ = [
    "CredentialRecord",
    "CredentialStore",
    "credentials_from_url",
    "github_cli_credentials",
    "login",
    "logout",
    "resolve_credentials",
    "resolve_credentials_with_path",
    "Settings",
    "load_settings",
    "UserDirs",
    "default_auth_path",
    "PushArgs",
    "PullArgs",
    "push",
    "pull",
    "wasm_push",
    "wasm_pull",
    "WociError",
    "InvalidInputError",
    "InvalidURLError",
    "UnsupportedSchemeError",
    "InvalidReferenceError",
    "AuthenticationError",
    "RegistryError",
    "NotFoundError",
    "MissingCredentialsError",
    "CorruptCredentialError",
    "InvalidArtifactError",
    "EmptyArtifactError",
    "DeserializationError",
    "SerializationError",
]
