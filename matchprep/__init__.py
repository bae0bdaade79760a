"""matchprep: prepare user identifiers for privacy-safe audience matching.

Raw identifiers are canonicalized, SHA-256 hashed and encoded.  When an
:class:`~matchprep.crypto.encryptor.Encryptor` is supplied the hash is
additionally sealed with a locally generated data-encryption key whose
wrapped form is produced by a remote key-encryption key.

Safety rule: raw values are never logged.
"""
from __future__ import annotations

__version__ = "0.1.0"
