"""WebAssembly artifact transfer."""

from .transfer import (
    PullArgs,
    PushArgs,
    pull,
    pull_wasm_from_registry,
    push,
    push_wasm_to_registry,
    wasm_pull,
    wasm_push,
)
from .validate import Validator, validate_module

__all__ = [
    "PushArgs",
    "PullArgs",
    "push",
    "pull",
    "wasm_push",
    "wasm_pull",
    "push_wasm_to_registry",
    "pull_wasm_from_registry",
    "Validator",
    "validate_module",
]
