"""Name normalizer.

Given and family names are lowercased and stripped of the honorifics and
generational/professional suffixes that the matching service ignores.

Rules applied in order
----------------------
Given name:

1. Trim leading / trailing spaces and control characters, reject blank input.
2. Lowercase.
3. Remove every ``mr.``, ``mrs.``, ``ms.`` or ``dr.`` token that is
   followed by whitespace or the end of the string.  A token without the
   period (``"Mralex"``) is part of the name and is kept.
4. Trim again; reject if nothing is left.

Family name:

1. Trim leading / trailing spaces and control characters, reject blank input.
2. Lowercase.
3. Remove a trailing suffix (``jr.``, ``sr.``, ``2nd``, ``iii``, ``phd`` …)
   separated by a comma or whitespace, repeating until none is left so
   compound suffixes like ``", Jr., DDS"`` are fully removed.
4. Reject if nothing is left.

Safety rule: raw values are never logged.
"""
from __future__ import annotations

import re

from matchprep.core.errors import InvalidInput
from matchprep.core.text import trim

# ---------------------------------------------------------------------------
# Patterns
# ---------------------------------------------------------------------------

# Applied to lowercased input, so no IGNORECASE.
_GIVEN_NAME_PREFIX_RE = re.compile(r"(?:mr|mrs|ms|dr)\.(?:\s|$)", re.ASCII)

_FAMILY_NAME_SUFFIX_RE = re.compile(
    r"(?:,\s*|\s+)"
    r"(?:jr\.|sr\.|2nd|3rd|ii|iii|iv|v|vi|cpa|dc|dds|vm|jd|md|phd)"
    r"\s?$",
    re.ASCII,
)


def _strip_and_check(raw: str | None, label: str) -> str:
    if raw is None:
        raise InvalidInput(f"Null {label}")
    stripped = trim(raw)
    if not stripped:
        raise InvalidInput(f"Empty or blank {label}")
    return stripped


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def normalize_given_name(raw: str | None) -> str:
    """Return the canonical given name (lowercase, honorifics removed).

    Raises
    ------
    InvalidInput
        If *raw* is ``None``, blank, or consists solely of a prefix such as
        ``"Mrs."``.
    """
    name = _strip_and_check(raw, "given name").lower()
    without_prefix = trim(_GIVEN_NAME_PREFIX_RE.sub("", name))
    if not without_prefix:
        raise InvalidInput("Given name consists solely of a prefix")
    return without_prefix


def normalize_family_name(raw: str | None) -> str:
    """Return the canonical family name (lowercase, suffixes removed).

    Raises
    ------
    InvalidInput
        If *raw* is ``None``, blank, or consists solely of suffixes such as
        ``", Jr."``.
    """
    name = _strip_and_check(raw, "family name").lower()

    # Each pass removes one suffix; compound suffixes need several.
    while _FAMILY_NAME_SUFFIX_RE.search(name):
        name = _FAMILY_NAME_SUFFIX_RE.sub("", name)

    if not name:
        raise InvalidInput("Family name consists solely of a suffix")
    return name
