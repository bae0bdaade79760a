"""Normalization package.

One normalizer per identifier type.  Each normalizer takes a raw string
value and returns the canonical form that is hashed (or, for region and
postal codes, sent as-is)::

    def normalize_x(raw: str | None) -> str:
        ...

Every normalizer raises :class:`~matchprep.core.errors.InvalidInput` when
the value is missing, blank, or would be empty after normalization.

:func:`canonicalize` dispatches a typed :class:`Identifier` to the matching
normalizer.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Callable

from matchprep.normalization.address_normalizer import (
    normalize_postal_code,
    normalize_region_code,
)
from matchprep.normalization.email_normalizer import normalize_email
from matchprep.normalization.name_normalizer import (
    normalize_family_name,
    normalize_given_name,
)
from matchprep.normalization.phone_normalizer import normalize_phone


class IdentifierType(StrEnum):
    EMAIL_ADDRESS = "email_address"
    PHONE_NUMBER = "phone_number"
    GIVEN_NAME = "given_name"
    FAMILY_NAME = "family_name"
    REGION_CODE = "region_code"
    POSTAL_CODE = "postal_code"


# Region and postal codes are submitted in canonical form, never hashed.
UNHASHED_TYPES: frozenset[IdentifierType] = frozenset({
    IdentifierType.REGION_CODE,
    IdentifierType.POSTAL_CODE,
})

_NORMALIZERS: dict[IdentifierType, Callable[[str | None], str]] = {
    IdentifierType.EMAIL_ADDRESS: normalize_email,
    IdentifierType.PHONE_NUMBER: normalize_phone,
    IdentifierType.GIVEN_NAME: normalize_given_name,
    IdentifierType.FAMILY_NAME: normalize_family_name,
    IdentifierType.REGION_CODE: normalize_region_code,
    IdentifierType.POSTAL_CODE: normalize_postal_code,
}


@dataclass(frozen=True, slots=True)
class Identifier:
    """A raw identifier value tagged with its type."""

    kind: IdentifierType
    value: str | None

    def __repr__(self) -> str:
        # Keep raw PII out of tracebacks and log records.
        return f"Identifier(kind={self.kind.value!r}, value=<redacted>)"


def canonicalize(identifier: Identifier) -> str:
    """Return the canonical form of *identifier*.

    Raises
    ------
    InvalidInput
        If the value is invalid for its type.
    """
    return _NORMALIZERS[identifier.kind](identifier.value)


__all__ = [
    "Identifier",
    "IdentifierType",
    "UNHASHED_TYPES",
    "canonicalize",
    "normalize_email",
    "normalize_family_name",
    "normalize_given_name",
    "normalize_phone",
    "normalize_postal_code",
    "normalize_region_code",
]
