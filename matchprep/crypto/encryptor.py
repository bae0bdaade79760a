"""Seals hashed identifier values under the session DEK.

Every call draws a fresh nonce, so encrypting the same value twice gives two
different ciphertexts.  There is no decrypt here: the receiving side
recovers the DEK with its own KEK access.
"""
from __future__ import annotations

import tink

from matchprep.core.errors import EncryptionFailure, InvalidInput
from matchprep.core.settings import Settings
from matchprep.crypto.envelope import EMPTY_ASSOCIATED_DATA, EnvelopeKeyManager


class Encryptor:
    """Encrypts strings with the DEK of an :class:`EnvelopeKeyManager`.

    Holds no mutable state, so one instance may be shared across threads.
    """

    def __init__(self, key_manager: EnvelopeKeyManager) -> None:
        self._key_manager = key_manager
        self._aead = key_manager.aead

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> Encryptor:
        return cls(EnvelopeKeyManager.from_settings(settings))

    @property
    def key_manager(self) -> EnvelopeKeyManager:
        return self._key_manager

    @property
    def wrapped_key(self) -> bytes:
        return self._key_manager.wrapped_key

    def encrypt(self, data: str | None) -> bytes:
        """Return the AEAD ciphertext of the UTF-8 bytes of *data*.

        Raises
        ------
        InvalidInput
            If *data* is ``None`` or cannot be encoded as UTF-8.
        EncryptionFailure
            If the AEAD primitive fails.
        """
        if data is None:
            raise InvalidInput("Null data")
        try:
            plaintext = data.encode("utf-8")
        except UnicodeEncodeError as exc:
            raise InvalidInput("Data is not valid UTF-8 text") from exc
        try:
            return self._aead.encrypt(plaintext, EMPTY_ASSOCIATED_DATA)
        except tink.TinkError as exc:
            raise EncryptionFailure("Failed to encrypt data") from exc
