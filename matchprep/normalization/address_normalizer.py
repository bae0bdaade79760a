"""Address-part normalizers: region code and postal code.

Neither value is hashed before submission; the canonical form is sent as-is.

``region_code`` must be an ISO-3166-1 alpha-2 code, returned uppercased.
``postal_code`` is only stripped: postal formats vary too much by country
to restrict the character set (``"1229-076"`` is a valid Portuguese code).
"""
from __future__ import annotations

import re

from matchprep.core.errors import InvalidInput
from matchprep.core.text import trim

_REGION_CODE_RE = re.compile(r"[A-Z]+")


def normalize_region_code(raw: str | None) -> str:
    """Return *raw* as an uppercase two-letter region code.

    Raises
    ------
    InvalidInput
        If *raw* is ``None``, blank, not exactly two characters after
        stripping, or contains characters other than ``A``-``Z``.
    """
    if raw is None:
        raise InvalidInput("Null region code")
    code = trim(raw).upper()
    if not code:
        raise InvalidInput("Empty or blank region code")
    if len(code) != 2:
        raise InvalidInput(f"Region code length is {len(code)}, but length must be 2")
    if not _REGION_CODE_RE.fullmatch(code):
        raise InvalidInput("Region code contains characters other than A-Z")
    return code


def normalize_postal_code(raw: str | None) -> str:
    """Return *raw* with surrounding spaces and control characters trimmed.

    Raises
    ------
    InvalidInput
        If *raw* is ``None`` or blank.
    """
    if raw is None:
        raise InvalidInput("Null postal code")
    code = trim(raw)
    if not code:
        raise InvalidInput("Empty or blank postal code")
    return code
