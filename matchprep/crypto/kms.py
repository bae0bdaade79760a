"""Key-encryption-key (KEK) clients.

The envelope key manager needs one thing from a KMS: a Tink
:class:`tink.KmsClient` whose ``get_aead(kek_uri)`` returns the KEK as an
``aead.Aead``.  Two clients are provided, selected by URI scheme:

``gcp-kms://projects/.../cryptoKeys/...``
    Tink's Cloud KMS client.  Authenticates with a service account
    credentials file when ``GCP_CREDENTIALS_PATH`` is set, otherwise with
    Application Default Credentials.  No retry is applied; callers own their
    retry policy.
``local-kms://<name>``
    :class:`LocalKmsClient`: an AES-256-GCM KEK held in process, for
    development and tests.  Its AEAD can also decrypt, standing in for the
    downstream party that holds KEK access.

Key material is never logged; only KEK URIs are.
"""
from __future__ import annotations

import base64
import binascii
import logging
import os

import tink
from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from google.auth import exceptions as google_auth_exceptions
from tink import aead
from tink.integration import gcpkms

from matchprep.core.errors import KeyManagementFailure
from matchprep.core.settings import Settings, get_settings

logger = logging.getLogger(__name__)

GCP_KMS_PREFIX = "gcp-kms://"
LOCAL_KMS_PREFIX = "local-kms://"

_AESGCM_NONCE_SIZE = 12
_AESGCM_TAG_SIZE = 16


# ---------------------------------------------------------------------------
# In-process KEK
# ---------------------------------------------------------------------------


class LocalKekAead(aead.Aead):
    """AES-256-GCM with a random 96-bit nonce prepended to the ciphertext."""

    def __init__(self, aesgcm: AESGCM) -> None:
        self._aesgcm = aesgcm

    def encrypt(self, plaintext: bytes, associated_data: bytes) -> bytes:
        nonce = os.urandom(_AESGCM_NONCE_SIZE)
        return nonce + self._aesgcm.encrypt(nonce, plaintext, associated_data or None)

    def decrypt(self, ciphertext: bytes, associated_data: bytes) -> bytes:
        if len(ciphertext) < _AESGCM_NONCE_SIZE + _AESGCM_TAG_SIZE:
            raise tink.TinkError("Ciphertext is too short")
        nonce, sealed = ciphertext[:_AESGCM_NONCE_SIZE], ciphertext[_AESGCM_NONCE_SIZE:]
        try:
            return self._aesgcm.decrypt(nonce, sealed, associated_data or None)
        except InvalidTag as exc:
            raise tink.TinkError("Failed to decrypt with the local KEK") from exc


class LocalKmsClient(tink.KmsClient):
    """Serves one AES-256-GCM KEK for every ``local-kms://`` URI.

    Parameters
    ----------
    key:
        Raw AES key.  A fresh 256-bit key is generated when ``None``.
    """

    def __init__(self, key: bytes | None = None) -> None:
        self._aead = LocalKekAead(AESGCM(key if key is not None else AESGCM.generate_key(bit_length=256)))

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> LocalKmsClient:
        settings = settings or get_settings()
        if not settings.local_kek_key:
            raise KeyManagementFailure("LOCAL_KEK_KEY is not configured")
        try:
            key = base64.b64decode(settings.local_kek_key, validate=True)
            return cls(key)
        except (binascii.Error, ValueError) as exc:
            raise KeyManagementFailure("LOCAL_KEK_KEY must be a base64 AES key") from exc

    def does_support(self, key_uri: str) -> bool:
        return key_uri.startswith(LOCAL_KMS_PREFIX) and len(key_uri) > len(LOCAL_KMS_PREFIX)

    def get_aead(self, key_uri: str) -> aead.Aead:
        if not self.does_support(key_uri):
            raise tink.TinkError(f"Key URI not supported by the local KMS: {key_uri}")
        return self._aead


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


def get_kek_client(kek_uri: str, settings: Settings | None = None) -> tink.KmsClient:
    """Return the KMS client that serves *kek_uri*.

    Raises
    ------
    KeyManagementFailure
        If the scheme is unknown or the client cannot be created (for
        example, no usable Cloud credentials).
    """
    settings = settings or get_settings()
    if kek_uri.startswith(GCP_KMS_PREFIX):
        try:
            client = gcpkms.GcpKmsClient(kek_uri, settings.gcp_credentials_path)
        except (tink.TinkError, google_auth_exceptions.GoogleAuthError, OSError, ValueError) as exc:
            raise KeyManagementFailure("Failed to create the Cloud KMS client", kek_uri=kek_uri) from exc
        logger.debug(
            "Cloud KMS client created (credentials=%s)",
            "file" if settings.gcp_credentials_path else "application-default",
        )
        return client
    if kek_uri.startswith(LOCAL_KMS_PREFIX):
        return LocalKmsClient.from_settings(settings)
    raise KeyManagementFailure("Unsupported KEK URI scheme", kek_uri=kek_uri)
