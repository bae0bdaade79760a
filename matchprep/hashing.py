"""SHA-256 hashing and transport encoding of identifier values.

Every function here is stateless: a fresh ``hashlib`` context is created per
call, so the module is safe to use from any number of threads.

Two encodings are supported, matching what the matching service accepts:

HEX     uppercase base-16, no separators
BASE64  standard alphabet with ``=`` padding, no line wrapping
"""
from __future__ import annotations

import base64
import binascii
import hashlib
from enum import StrEnum

from matchprep.core.errors import InvalidInput
from matchprep.core.text import trim


class Encoding(StrEnum):
    HEX = "HEX"
    BASE64 = "BASE64"


# ---------------------------------------------------------------------------
# Hashing
# ---------------------------------------------------------------------------

def hash_string(value: str | None) -> bytes:
    """Return the 32-byte SHA-256 digest of the UTF-8 bytes of *value*.

    Blank strings are rejected: a hash of an empty identifier would match
    every other empty identifier on the remote side.  So is text that has
    no UTF-8 form (lone surrogates).
    """
    if value is None:
        raise InvalidInput("Null string")
    if not trim(value):
        raise InvalidInput("Empty or blank string")
    try:
        data = value.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise InvalidInput("String is not valid UTF-8 text") from exc
    return hashlib.sha256(data).digest()


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------

def _check_bytes(data: bytes | None) -> bytes:
    if data is None:
        raise InvalidInput("Null byte array")
    if not data:
        raise InvalidInput("Empty byte array")
    return data


def hex_encode(data: bytes | None) -> str:
    """Return *data* as uppercase hex."""
    return _check_bytes(data).hex().upper()


def base64_encode(data: bytes | None) -> str:
    """Return *data* as standard, padded Base64."""
    return base64.b64encode(_check_bytes(data)).decode("ascii")


def encode(data: bytes | None, encoding: Encoding) -> str:
    """Encode *data* with *encoding*.

    An unrecognized *encoding* is a programming error and raises
    ``ValueError`` rather than :class:`InvalidInput`.
    """
    if encoding == Encoding.HEX:
        return hex_encode(data)
    if encoding == Encoding.BASE64:
        return base64_encode(data)
    raise ValueError(f"Unsupported encoding: {encoding!r}")


def decode(text: str | None, encoding: Encoding) -> bytes:
    """Inverse of :func:`encode`.  Hex input may be in either case."""
    if text is None or not text.strip():
        raise InvalidInput("Empty or blank encoded value")
    try:
        if encoding == Encoding.HEX:
            return bytes.fromhex(text)
        if encoding == Encoding.BASE64:
            return base64.b64decode(text, validate=True)
    except (ValueError, binascii.Error) as exc:
        raise InvalidInput(f"Malformed {encoding} value") from exc
    raise ValueError(f"Unsupported encoding: {encoding!r}")


def hash_and_encode(value: str | None, encoding: Encoding) -> str:
    """Hash an already-normalized *value* and encode the digest."""
    return encode(hash_string(value), encoding)
