"""Phone number normalizer.

Reduces a phone string to ``+`` followed by its decimal digits
(e.g. ``"1 800-555-0100"`` -> ``"+18005550100"``).  This is *not* an E.164
validator: country-code plausibility and length are left to the matching
service, so any input with at least one digit is accepted.

Safety rule: raw values are never logged.
"""
from __future__ import annotations

import re

from matchprep.core.errors import InvalidInput
from matchprep.core.text import trim

# ASCII flag keeps \D from treating non-ASCII digits (e.g. Arabic-Indic) as digits
_NON_DIGIT_RE = re.compile(r"\D", re.ASCII)


def normalize_phone(raw: str | None) -> str:
    """Return *raw* as ``+<digits>``.

    Any leading ``+`` in the input is discarded along with every other
    non-digit and then re-added, so ``"++++1"`` becomes ``"+1"``.

    Raises
    ------
    InvalidInput
        If *raw* is ``None``, blank, or contains no digits.
    """
    if raw is None:
        raise InvalidInput("Null phone number")
    stripped = trim(raw)
    if not stripped:
        raise InvalidInput("Empty or blank phone number")

    digits = _NON_DIGIT_RE.sub("", stripped)
    if not digits:
        raise InvalidInput("Phone number contains no digits")

    return f"+{digits}"
