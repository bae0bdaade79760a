"""Envelope key manager.

Owns one data-encryption key (DEK) for the lifetime of a processing session
and the DEK's wrapped form.  Construction is all-or-nothing: either every
step below succeeds or :class:`KeyManagementFailure` is raised and no
instance exists.

1. Generate (or accept) a Tink XChaCha20-Poly1305 keyset.
2. Build the in-memory AEAD primitive from it.
3. Fetch the KEK AEAD for the URI from the KMS client.
4. Encrypt the binary ``Keyset`` protobuf with the KEK, with empty
   associated data, and keep the ``encrypted_keyset`` bytes.

The wrapped blob is exposed as raw bytes; callers Base64-encode it when they
attach it to an outbound payload.  Key material is never logged or included
in error messages.
"""
from __future__ import annotations

import logging

import tink
from tink import aead
from tink.proto import tink_pb2

from matchprep.core.errors import KeyManagementFailure
from matchprep.core.settings import Settings, get_settings
from matchprep.crypto.kms import get_kek_client

logger = logging.getLogger(__name__)

aead.register()

EMPTY_ASSOCIATED_DATA = b""
DEK_KEY_TEMPLATE = aead.aead_key_templates.XCHACHA20_POLY1305


def generate_dek() -> tink.KeysetHandle:
    """Return a new keyset holding one XChaCha20-Poly1305 key (Tink output prefix)."""
    return tink.new_keyset_handle(DEK_KEY_TEMPLATE)


def unwrap_dek(wrapped_key: bytes, kek_aead: aead.Aead) -> tink.KeysetHandle:
    """Recover the DEK keyset from its wrapped form.

    This is what the receiving side does with its own KEK access; it is
    used to check uploads end to end.
    """
    encrypted = tink_pb2.EncryptedKeyset(encrypted_keyset=wrapped_key).SerializeToString()
    try:
        return tink.proto_keyset_format.parse_encrypted(encrypted, kek_aead, EMPTY_ASSOCIATED_DATA)
    except tink.TinkError as exc:
        raise KeyManagementFailure("Failed to unwrap the DEK") from exc


class EnvelopeKeyManager:
    """Holds the DEK AEAD primitive and the KEK-wrapped DEK.

    Parameters
    ----------
    kms_client:
        Tink KMS client that can serve *kek_uri*.
    kek_uri:
        URI / resource name of the KEK.
    dek_handle:
        Keyset to use as the DEK.  A fresh one is generated when ``None``.
    """

    def __init__(
        self,
        kms_client: tink.KmsClient,
        kek_uri: str,
        dek_handle: tink.KeysetHandle | None = None,
    ) -> None:
        if kms_client is None:
            raise KeyManagementFailure("KMS client is required")
        if not kek_uri or not kek_uri.strip():
            raise KeyManagementFailure("KEK URI is required")

        try:
            handle = dek_handle if dek_handle is not None else generate_dek()
            dek_aead = handle.primitive(aead.Aead)
        except tink.TinkError as exc:
            raise KeyManagementFailure("Failed to create the DEK", kek_uri=kek_uri) from exc

        try:
            kek_aead = kms_client.get_aead(kek_uri)
        except Exception as exc:
            raise KeyManagementFailure("Failed to get the KEK", kek_uri=kek_uri) from exc

        # The KEK may be remote: any failure here (auth, network, API) is fatal.
        try:
            encrypted_keyset = tink.proto_keyset_format.serialize_encrypted(
                handle, kek_aead, EMPTY_ASSOCIATED_DATA
            )
            wrapped = tink_pb2.EncryptedKeyset.FromString(encrypted_keyset).encrypted_keyset
        except Exception as exc:
            raise KeyManagementFailure("Failed to wrap the DEK with the KEK", kek_uri=kek_uri) from exc
        if not wrapped:
            raise KeyManagementFailure("KEK returned an empty wrapped DEK", kek_uri=kek_uri)

        self._kek_uri = kek_uri
        self._aead = dek_aead
        self._wrapped_key = bytes(wrapped)
        logger.info(
            "DEK wrapped by KEK (kek_uri=%s, wrapped_length=%d)",
            kek_uri,
            len(self._wrapped_key),
        )

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> EnvelopeKeyManager:
        """Build a manager for ``settings.kek_uri`` with the matching KMS client."""
        settings = settings or get_settings()
        if not settings.kek_uri:
            raise KeyManagementFailure("KEK_URI is not configured")
        return cls(get_kek_client(settings.kek_uri, settings), settings.kek_uri)

    @property
    def kek_uri(self) -> str:
        return self._kek_uri

    @property
    def aead(self) -> aead.Aead:
        return self._aead

    @property
    def wrapped_key(self) -> bytes:
        return self._wrapped_key

    def get_wrapped_key(self) -> bytes:
        """Return the DEK encrypted by the KEK."""
        return self._wrapped_key

    def __repr__(self) -> str:
        return f"EnvelopeKeyManager(kek_uri={self._kek_uri!r})"
