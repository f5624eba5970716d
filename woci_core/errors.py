"""Typed errors raised by the woci core."""

from __future__ import annotations


class WociError(RuntimeError):
    """Base woci error."""


class InvalidInputError(WociError):
    """Bad local path or URL shape."""


class InvalidURLError(InvalidInputError):
    """URL could not be parsed or carries no host."""


class UnsupportedSchemeError(WociError):
    """URL scheme is neither http nor https."""


class InvalidReferenceError(WociError):
    """Repository reference string could not be parsed."""


class AuthenticationError(WociError):
    """Registry rejected the credentials or the handshake failed."""


class RegistryError(WociError):
    """Registry request failed outside of the auth handshake."""


class NotFoundError(WociError):
    """No credential record matches the host."""


class MissingCredentialsError(NotFoundError):
    """Credentials were required but none were supplied."""


class CorruptCredentialError(WociError):
    """Stored credential could not be decoded."""


class InvalidArtifactError(WociError):
    """Payload failed WebAssembly binary validation."""


class EmptyArtifactError(WociError):
    """Registry returned no layer of the expected media type."""

    def __init__(self, repo_url: str) -> None:
        super().__init__(f"no data found in url: {repo_url}")
        self.repo_url = repo_url


class DeserializationError(WociError):
    """Credential file content is malformed."""


class SerializationError(WociError):
    """Credential file could not be written."""
