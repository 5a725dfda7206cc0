"""
Byte-exact encodings for pool ids, custody addresses and snapshot commitments.

Everything hashed by the registry goes through this module, so two processes
holding the same pools derive the same ids and the same snapshot digest.
"""

from __future__ import annotations

import hashlib
import json
import string
from typing import Any


DOMAIN_PREFIX = b"pairpool:"
ADDRESS_NBYTES = 20

_HEXDIGITS = frozenset(string.hexdigits)


def _check_encodable(value: Any, path: str = "$") -> None:
    # Only ints, strings, bools, None, lists and str-keyed dicts have one JSON spelling.
    if isinstance(value, float):
        raise TypeError(f"{path}: floats have no canonical encoding")
    if isinstance(value, dict):
        for key, item in value.items():
            if not isinstance(key, str):
                raise TypeError(f"{path}: object keys must be str, got {type(key).__name__}")
            _check_encodable(item, f"{path}.{key}")
    elif isinstance(value, (list, tuple)):
        for i, item in enumerate(value):
            _check_encodable(item, f"{path}[{i}]")


def canonical_json_bytes(value: Any) -> bytes:
    """
    UTF-8 JSON with sorted keys and no whitespace.

    Integers of any size are written exactly. Floats are rejected.
    """
    _check_encodable(value)
    return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False, allow_nan=False).encode(
        "utf-8"
    )


def sha256_hex(data: bytes) -> str:
    """0x-prefixed SHA-256 digest."""
    return "0x" + hashlib.sha256(data).hexdigest()


def domain_sep_bytes(label: str, version: int = 1) -> bytes:
    """
    `pairpool:<label>:v<version>` followed by a NUL byte.

    Each hashed payload starts with its own separator, so a pool id can never
    collide with a snapshot commitment.
    """
    if not isinstance(label, str) or not label:
        raise TypeError("label must be a non-empty str")
    if not label.isascii() or "\x00" in label:
        raise ValueError(f"label must be ASCII without NUL: {label!r}")
    if not isinstance(version, int) or isinstance(version, bool) or version <= 0:
        raise ValueError("version must be a positive int")
    return DOMAIN_PREFIX + f"{label}:v{version}".encode("ascii") + b"\x00"


def canonical_address(hex_str: str, *, name: str = "address") -> str:
    """
    Normalize a 20-byte address to lowercase `0x` form.

    The `0x` prefix is optional on input, in either case.
    """
    if not isinstance(hex_str, str):
        raise TypeError(f"{name} must be a str")
    body = hex_str.strip()
    if body[:2] in ("0x", "0X"):
        body = body[2:]
    if len(body) != 2 * ADDRESS_NBYTES:
        raise ValueError(f"{name} must be {ADDRESS_NBYTES} bytes, got {len(body)} hex digits")
    if not _HEXDIGITS.issuperset(body):
        raise ValueError(f"{name} must be valid hex")
    return "0x" + body.lower()


def address_bytes(address: str, *, name: str = "address") -> bytes:
    """The 20 raw bytes of an address."""
    return bytes.fromhex(canonical_address(address, name=name)[2:])
