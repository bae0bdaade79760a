import base64

import pytest
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from matchprep.crypto.encryptor import Encryptor
from matchprep.crypto.envelope import EnvelopeKeyManager
from matchprep.crypto.kms import LocalKmsClient

LOCAL_KEK_URI = "local-kms://test-kek"


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    from matchprep.core.settings import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def kek_key() -> bytes:
    return AESGCM.generate_key(bit_length=256)


@pytest.fixture
def kms_client(kek_key: bytes) -> LocalKmsClient:
    return LocalKmsClient(kek_key)


@pytest.fixture
def key_manager(kms_client: LocalKmsClient) -> EnvelopeKeyManager:
    return EnvelopeKeyManager(kms_client, LOCAL_KEK_URI)


@pytest.fixture
def encryptor(key_manager: EnvelopeKeyManager) -> Encryptor:
    return Encryptor(key_manager)


@pytest.fixture
def local_kms_env(monkeypatch: pytest.MonkeyPatch, kek_key: bytes) -> None:
    """Point settings at an in-process KEK."""
    monkeypatch.setenv("KEK_URI", LOCAL_KEK_URI)
    monkeypatch.setenv("LOCAL_KEK_KEY", base64.b64encode(kek_key).decode("ascii"))
    monkeypatch.setenv("WIP_PROVIDER", "projects/1/locations/global/workloadIdentityPools/p/providers/x")
