"""Exception types raised by matchprep.

Messages never carry the offending input: every value that reaches the
normalizers is user PII.
"""
from __future__ import annotations


class MatchPrepError(Exception):
    """Base class for all matchprep errors."""


class InvalidInput(MatchPrepError, ValueError):
    """Raised when a value is missing, blank or structurally invalid.

    Batch callers are expected to catch this per value and skip it.
    """


class KeyManagementFailure(MatchPrepError, RuntimeError):
    """Raised when the DEK cannot be created, serialized or wrapped by the KEK."""

    def __init__(self, message: str, *, kek_uri: str | None = None) -> None:
        self.kek_uri = kek_uri
        if kek_uri:
            message = f"{message} (kek_uri={kek_uri})"
        super().__init__(message)


class EncryptionFailure(MatchPrepError, RuntimeError):
    """Raised when the AEAD primitive fails.  Fatal for the value being sealed."""
