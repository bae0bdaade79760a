"""Text helpers shared by the normalizers and the hasher."""
from __future__ import annotations

# Space and every C0 control character.  ``str.strip()`` would also remove
# Unicode spaces such as NBSP while keeping controls like U+001F, which
# changes the canonical form (and therefore the hash) of some values.
_TRIM_CHARS = "".join(chr(code) for code in range(0x21))


def trim(value: str) -> str:
    """Strip leading and trailing characters at or below U+0020."""
    return value.strip(_TRIM_CHARS)
