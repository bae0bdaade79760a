"""Identifier processing pipeline.

Composes normalization, hashing, optional encryption and encoding into one
call per identifier type::

    unencrypted:  canonicalize -> sha256 -> encode(encoding)
    encrypted:    canonicalize -> sha256 -> encode(BASE64) -> encrypt -> encode(encoding)

When encrypting, the hash is always Base64-encoded before it is sealed,
whatever final encoding the caller asked for; *encoding* applies only to
the ciphertext.  Region and postal codes are never hashed or encrypted:
their processed form is their canonical form.

All functions are stateless and thread-safe.  Invalid input raises
:class:`~matchprep.core.errors.InvalidInput`; the message never contains
the value.
"""
from __future__ import annotations

from matchprep.core.settings import get_settings
from matchprep.crypto.encryptor import Encryptor
from matchprep.hashing import Encoding, encode, hash_and_encode, hash_string
from matchprep.normalization import (
    UNHASHED_TYPES,
    Identifier,
    IdentifierType,
    canonicalize,
)


def hash_encode_and_encrypt(canonical: str, encoding: Encoding, encryptor: Encryptor) -> str:
    """Hash *canonical*, Base64 it, encrypt, and encode the ciphertext with *encoding*."""
    hash_base64 = encode(hash_string(canonical), Encoding.BASE64)
    return encode(encryptor.encrypt(hash_base64), encoding)


def process_identifier(
    identifier: Identifier,
    encoding: Encoding | None = None,
    encryptor: Encryptor | None = None,
) -> str:
    """Return the submission-ready form of *identifier*.

    Parameters
    ----------
    identifier:
        Typed raw value.
    encoding:
        Encoding of the final hash (or ciphertext).  Defaults to
        ``settings.default_encoding``.  Ignored for region and postal codes.
    encryptor:
        When given, the hash is encrypted under the session DEK.  Ignored for
        region and postal codes.
    """
    canonical = canonicalize(identifier)
    if identifier.kind in UNHASHED_TYPES:
        return canonical
    if encoding is None:
        encoding = get_settings().default_encoding
    if encryptor is None:
        return hash_and_encode(canonical, encoding)
    return hash_encode_and_encrypt(canonical, encoding, encryptor)


def process_email_address(
    raw: str | None,
    encoding: Encoding | None = None,
    encryptor: Encryptor | None = None,
) -> str:
    return process_identifier(Identifier(IdentifierType.EMAIL_ADDRESS, raw), encoding, encryptor)


def process_phone_number(
    raw: str | None,
    encoding: Encoding | None = None,
    encryptor: Encryptor | None = None,
) -> str:
    return process_identifier(Identifier(IdentifierType.PHONE_NUMBER, raw), encoding, encryptor)


def process_given_name(
    raw: str | None,
    encoding: Encoding | None = None,
    encryptor: Encryptor | None = None,
) -> str:
    return process_identifier(Identifier(IdentifierType.GIVEN_NAME, raw), encoding, encryptor)


def process_family_name(
    raw: str | None,
    encoding: Encoding | None = None,
    encryptor: Encryptor | None = None,
) -> str:
    return process_identifier(Identifier(IdentifierType.FAMILY_NAME, raw), encoding, encryptor)


def process_region_code(raw: str | None) -> str:
    return process_identifier(Identifier(IdentifierType.REGION_CODE, raw))


def process_postal_code(raw: str | None) -> str:
    return process_identifier(Identifier(IdentifierType.POSTAL_CODE, raw))
