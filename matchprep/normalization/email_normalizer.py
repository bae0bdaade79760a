"""Email normalizer.

Converts a raw email address to the lowercase canonical form the matching
service hashes.  Gmail dot-normalization is applied: dots in the local
part of ``@gmail.com`` and ``@googlemail.com`` addresses are removed
because Gmail treats ``j.o.h.n@gmail.com`` and ``john@gmail.com`` as
identical mailboxes.

Sub-address tags (``user+tag@domain``) are preserved; stripping them
is a lossy transformation the matching service does not apply.

Safety rule: raw values are never logged.
"""
from __future__ import annotations

import logging
import re

from matchprep.core.errors import InvalidInput
from matchprep.core.text import trim

logger = logging.getLogger(__name__)

# Domains where dots in the local part are insignificant
_GMAIL_DOMAINS = frozenset({"gmail.com", "googlemail.com"})

_WHITESPACE_RE = re.compile(r"\s", re.ASCII)


def normalize_email(raw: str | None) -> str:
    """Return *raw* email address in canonical lowercase form.

    Parameters
    ----------
    raw:
        Raw email string from the input record.

    Returns
    -------
    str
        ``user@domain``, lowercased and stripped.  For Gmail/Googlemail
        addresses, dots are removed from the local part.

    Raises
    ------
    InvalidInput
        If *raw* is ``None``, blank, contains inner whitespace, is not of
        the form ``user@domain``, or has an empty user part after
        normalization.
    """
    if raw is None:
        raise InvalidInput("Null email address")
    stripped = trim(raw)
    if not stripped:
        raise InvalidInput("Empty or blank email address")
    if _WHITESPACE_RE.search(stripped):
        raise InvalidInput("Email address contains intermediate whitespace")

    user, sep, domain = stripped.lower().partition("@")
    if not sep:
        logger.debug("normalize_email: no '@' found (length=%d)", len(stripped))
        raise InvalidInput("Email address is not of the form user@domain")
    if not user:
        raise InvalidInput("User part of email address is empty")
    if not domain:
        raise InvalidInput("Domain of email address is empty")
    if "@" in domain:
        raise InvalidInput("Email address contains more than one '@'")

    if domain in _GMAIL_DOMAINS:
        user = user.replace(".", "")

    if not user:
        raise InvalidInput("User part of email address is empty after normalization")

    return f"{user}@{domain}"
