"""Credential store, URL credential resolution and registry login."""

from .login import login, logout, verify_login
from .resolver import (
    credentials_from_url,
    github_cli_credentials,
    resolve_credentials,
    resolve_credentials_with_path,
)
from .store import CredentialRecord, CredentialStore

__all__ = [
    "CredentialRecord",
    "CredentialStore",
    "credentials_from_url",
    "github_cli_credentials",
    "resolve_credentials",
    "resolve_credentials_with_path",
    "login",
    "logout",
    "verify_login",
]
