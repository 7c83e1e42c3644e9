"""
Canonical JSON for persisted fee-controller state.

Two engines holding the same pools and params encode them to the same bytes:
keys sorted, no whitespace, UTF-8. Only ints, strings, bools, null, lists and
str-keyed dicts are accepted. Fixed-point values are ints, so a float anywhere
in a snapshot is a bug and is rejected with the path where it was found.
"""

from __future__ import annotations

import hashlib
import json
from typing import Any

from .units import is_int

DIGEST_PREFIX = b"adaptive-fee:"

_SCALARS = (str, int, bool, type(None))


def _check_encodable(value: Any, path: str = "$") -> None:
    if isinstance(value, float):
        raise TypeError(f"{path}: floats are not allowed in canonical encoding")
    if isinstance(value, dict):
        for k, v in value.items():
            if not isinstance(k, str):
                raise TypeError(f"{path}: dict keys must be str, got {k!r}")
            _check_encodable(v, f"{path}.{k}")
    elif isinstance(value, (list, tuple)):
        for i, item in enumerate(value):
            _check_encodable(item, f"{path}[{i}]")
    elif not isinstance(value, _SCALARS):
        raise TypeError(f"{path}: unsupported type {type(value).__name__}")


def canonical_json_bytes(value: Any) -> bytes:
    """Encode *value* as canonical JSON. Lone surrogates fail at UTF-8 encoding."""
    _check_encodable(value)
    text = json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
    return text.encode("utf-8")


def digest_prefix(label: str, version: int = 1) -> bytes:
    """``adaptive-fee:<label>:v<version>\\0``; the trailing NUL ends the prefix."""
    if not isinstance(label, str) or not label:
        raise TypeError("label must be a non-empty str")
    if not label.isascii() or not label.isprintable():
        raise ValueError(f"label must be printable ASCII: {label!r}")
    if not is_int(version) or version <= 0:
        raise ValueError(f"version must be a positive int: {version!r}")
    return DIGEST_PREFIX + f"{label}:v{version}".encode("ascii") + b"\x00"


def state_digest(value: Any, *, label: str, version: int = 1) -> str:
    """``0x``-prefixed sha256 of ``digest_prefix(label, version) || canonical_json(value)``."""
    h = hashlib.sha256(digest_prefix(label, version))
    h.update(canonical_json_bytes(value))
    return "0x" + h.hexdigest()
