"""Platform-independent helpers for woci paths."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from platformdirs import user_config_dir

_DEFAULT_APP_NAME = "woci"
_DEFAULT_APP_AUTHOR = "woci"
AUTH_FILE_NAME = "auth.json"
CONFIG_DIR_ENV = "WOCI_CONFIG_DIR"


@dataclass(frozen=True)
class UserDirs:
    """Expose the platform-configured config location."""

    app_name: str = _DEFAULT_APP_NAME
    app_author: str = _DEFAULT_APP_AUTHOR
    config_dir_override: Path | None = None

    @classmethod
    def from_env(cls) -> "UserDirs":
        override = os.environ.get(CONFIG_DIR_ENV, "").strip()
        return cls(config_dir_override=Path(override).expanduser() if override else None)

    def config_dir(self) -> Path:
        return (
            self.config_dir_override
            if self.config_dir_override
            else Path(user_config_dir(self.app_name, appauthor=self.app_author))
        )

    def auth_path(self) -> Path:
        return self.config_dir() / AUTH_FILE_NAME


def default_auth_path() -> Path:
    """Return the credential file used when the CLI is given no ``--auth-file``."""

    return UserDirs.from_env().auth_path()
