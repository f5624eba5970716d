"""WebAssembly binary validation backed by wasmtime."""

from __future__ import annotations

from functools import lru_cache
from typing import Callable

from wasmtime import Engine, Module, WasmtimeError

from woci_core.errors import InvalidArtifactError

Validator = Callable[[bytes], None]


@lru_cache(maxsize=1)
def _engine() -> Engine:
    return Engine()


def validate_module(data: bytes) -> None:
    """Raise :class:`InvalidArtifactError` unless ``data`` is a valid wasm binary."""

    if not data:
        raise InvalidArtifactError("invalid WebAssembly module: empty input")
    try:
        Module.validate(_engine(), data)
    except WasmtimeError as exc:
        raise InvalidArtifactError(f"invalid WebAssembly module: {exc}") from exc


def run_validator(validator: Validator, data: bytes) -> None:
    """Call ``validator`` and normalise whatever it raises to :class:`InvalidArtifactError`."""

    try:
        validator(data)
    except InvalidArtifactError:
        raise
    except Exception as exc:
        raise InvalidArtifactError(f"invalid WebAssembly module: {exc}") from exc
