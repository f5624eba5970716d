"""Local credential store mapping registry hosts to login pairs."""

from __future__ import annotations

import base64
import binascii
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterator

from woci_core.errors import (
    CorruptCredentialError,
    DeserializationError,
    NotFoundError,
    SerializationError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CredentialRecord:
    """One registry host and its ``base64("username:password")`` auth string."""

    host: str
    encoded_auth: str

    @classmethod
    def new(cls, host: str, username: str, password: str) -> "CredentialRecord":
        raw = f"{username}:{password}".encode("utf-8")
        return cls(host=host, encoded_auth=base64.b64encode(raw).decode("ascii"))

    @classmethod
    def from_dict(cls, data: Any) -> "CredentialRecord":
        if not isinstance(data, dict):
            raise DeserializationError(f"expected object for credential entry, got {type(data).__name__}")
        host = data.get("url")
        auth = data.get("auth")
        if not isinstance(host, str) or not isinstance(auth, str):
            raise DeserializationError("credential entry requires string 'url' and 'auth' fields")
        return cls(host=host, encoded_auth=auth)

    def to_dict(self) -> dict[str, str]:
        return {"url": self.host, "auth": self.encoded_auth}

    def user_password(self) -> tuple[str, str]:
        """Decode the stored auth string.

        Bytes that are not valid UTF-8 are replaced rather than rejected so a
        hand-edited file still yields something usable.
        """

        try:
            decoded = base64.b64decode(self.encoded_auth, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise CorruptCredentialError(f"auth info of {self.host} is not valid base64") from exc
        idx = decoded.find(b":")
        if idx < 0:
            raise CorruptCredentialError(f"auth info of {self.host} has incorrect format")
        username = decoded[:idx].decode("utf-8", errors="replace")
        password = decoded[idx + 1 :].decode("utf-8", errors="replace")
        return username, password


@dataclass
class CredentialStore:
    """Ordered set of credential records, at most one per host.

    Mutations only touch memory; call :meth:`save` to persist them.
    """

    records: list[CredentialRecord] = field(default_factory=list)

    @classmethod
    def load(cls, path: Path | str) -> "CredentialStore":
        target = Path(path)
        if not target.exists():
            return cls()
        try:
            text = target.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise DeserializationError(f"failed to read auth config from {target}") from exc
        if not text:
            return cls()
        try:
            payload = json.loads(text)
        except json.JSONDecodeError as exc:
            raise DeserializationError(f"failed to deserialize auth config from {target}") from exc
        if not isinstance(payload, list):
            raise DeserializationError(f"auth config in {target} must be a JSON array")
        records = [CredentialRecord.from_dict(item) for item in payload]
        logger.debug("loaded %s credential record(s) from %s", len(records), target)
        return cls(records=records)

    def save(self, path: Path | str) -> None:
        target = Path(path)
        payload = [record.to_dict() for record in self.records]
        try:
            data = json.dumps(payload)
            target.parent.mkdir(parents=True, exist_ok=True)
            # Opening in "w" mode truncates before writing; a crash here can
            # leave a partial file.
            with target.open("w", encoding="utf-8") as handle:
                handle.write(data)
        except (OSError, TypeError, ValueError) as exc:
            raise SerializationError(f"failed to serialize auth config to {target}") from exc
        logger.debug("saved %s credential record(s) to %s", len(self.records), target)

    def set_login(self, record: CredentialRecord) -> None:
        for idx, existing in enumerate(self.records):
            if existing.host == record.host:
                self.records[idx] = record
                return
        self.records.append(record)

    def remove_login(self, host: str) -> None:
        for idx, existing in enumerate(self.records):
            if existing.host == host:
                del self.records[idx]
                return
        raise NotFoundError(f"auth info of url: {host} not found")

    def find(self, host: str) -> CredentialRecord | None:
        for record in self.records:
            if record.host == host:
                return record
        return None

    def resolve(self, host: str) -> tuple[str, str]:
        record = self.find(host)
        if record is None:
            raise NotFoundError(f"url {host} has no login info")
        return record.user_password()

    def hosts(self) -> list[str]:
        return [record.host for record in self.records]

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[CredentialRecord]:
        return iter(self.records)
