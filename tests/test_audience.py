"""Tests for matchprep.audience: member assembly, batching and encryption info."""
from __future__ import annotations

import base64
import logging

import pytest
from pydantic import ValidationError

from matchprep.audience import (
    AddressInfo,
    MemberRecord,
    UserIdentifier,
    batched,
    build_audience_members,
    build_batches,
    build_encryption_info,
    build_user_data,
)
from matchprep.core.errors import EncryptionFailure
from matchprep.crypto.encryptor import Encryptor
from matchprep.crypto.envelope import EnvelopeKeyManager
from matchprep.crypto.kms import LocalKmsClient
from matchprep.hashing import Encoding

EMAIL_HEX = "509E933019BB285A134A9334B8BB679DFF79D0CE023D529AF4BD744D47B4FD8A"
PHONE_HEX = "FB4F73A6EC5FDB7077D564CDD22C3554B43CE49168550C3B12C547B78C517B30"
WIP = "projects/1/locations/global/workloadIdentityPools/p/providers/x"


def _full_record() -> MemberRecord:
    return MemberRecord(
        emails=["alexz@example.com", "bad email@example.com"],
        phone_numbers=["+1 800-555-0100", "n/a"],
        given_name="Mr. Alex",
        family_name="Quinn, Jr.",
        region_code="us",
        postal_code=" 94045 ",
    )


# ---------------------------------------------------------------------------
# build_user_data
# ---------------------------------------------------------------------------


class TestBuildUserData:
    def test_invalid_values_are_skipped_individually(self) -> None:
        user_data = build_user_data(_full_record())
        assert user_data is not None
        identifiers = user_data.user_identifiers
        assert [i.email_address for i in identifiers if i.email_address] == [EMAIL_HEX]
        assert [i.phone_number for i in identifiers if i.phone_number] == [PHONE_HEX]

    def test_address_is_processed(self) -> None:
        user_data = build_user_data(_full_record())
        address = next(i.address for i in user_data.user_identifiers if i.address)
        assert address.region_code == "US"
        assert address.postal_code == "94045"
        assert len(address.given_name) == 64
        assert address.given_name == address.given_name.upper()

    def test_partial_address_is_dropped(self) -> None:
        record = MemberRecord(emails=["alexz@example.com"], given_name="Alex", region_code="usa")
        user_data = build_user_data(record)
        assert user_data is not None
        assert all(i.address is None for i in user_data.user_identifiers)

    def test_no_valid_values_returns_none(self) -> None:
        assert build_user_data(MemberRecord(emails=["@"], phone_numbers=["--"])) is None

    def test_empty_record_returns_none(self) -> None:
        assert build_user_data(MemberRecord()) is None

    def test_encrypted_values_are_fresh(self, encryptor: Encryptor) -> None:
        record = MemberRecord(emails=["alexz@example.com"])
        first = build_user_data(record, encryptor=encryptor)
        second = build_user_data(record, encryptor=encryptor)
        assert first.user_identifiers[0].email_address != second.user_identifiers[0].email_address

    def test_encryption_failure_propagates(self) -> None:
        class _BrokenEncryptor:
            def encrypt(self, data: str) -> bytes:
                raise EncryptionFailure("boom")

        with pytest.raises(EncryptionFailure):
            build_user_data(MemberRecord(emails=["alexz@example.com"]), encryptor=_BrokenEncryptor())


# ---------------------------------------------------------------------------
# build_audience_members
# ---------------------------------------------------------------------------


class TestBuildAudienceMembers:
    def test_members_without_identifiers_are_dropped(self) -> None:
        records = [
            MemberRecord(emails=["alexz@example.com"]),
            MemberRecord(emails=["not valid"]),
            MemberRecord(phone_numbers=["1 800 555 0100"]),
        ]
        members = build_audience_members(records)
        assert len(members) == 2

    def test_logs_counts_not_values(self, caplog: pytest.LogCaptureFixture) -> None:
        records = [MemberRecord(emails=["secret.person@"]), MemberRecord(emails=["alexz@example.com"])]
        with caplog.at_level(logging.DEBUG, logger="matchprep.audience.builder"):
            build_audience_members(records)
        assert "Dropped 1 member(s)" in caplog.text
        assert "secret.person" not in caplog.text
        assert "alexz@example.com" not in caplog.text

    def test_unencodable_record_is_skipped(self) -> None:
        records = [
            MemberRecord(emails=["a\ud800@example.com"]),
            MemberRecord(emails=["alexz@example.com"]),
        ]
        members = build_audience_members(records)
        assert len(members) == 1
        assert members[0].user_data.user_identifiers[0].email_address == EMAIL_HEX


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------


class TestUserIdentifierModel:
    def test_requires_exactly_one_identifier(self) -> None:
        with pytest.raises(ValidationError):
            UserIdentifier()
        with pytest.raises(ValidationError):
            UserIdentifier(email_address="A", phone_number="B")

    def test_address_identifier(self) -> None:
        address = AddressInfo(given_name="G", family_name="F", region_code="US", postal_code="1")
        assert UserIdentifier(address=address).address == address


# ---------------------------------------------------------------------------
# Encryption info and batching
# ---------------------------------------------------------------------------


class TestBuildEncryptionInfo:
    def test_carries_base64_wrapped_dek(self, key_manager: EnvelopeKeyManager) -> None:
        info = build_encryption_info(key_manager, wip_provider=WIP)
        wrapped = info.gcp_wrapped_key_info
        assert base64.b64decode(wrapped.encrypted_dek) == key_manager.get_wrapped_key()
        assert wrapped.kek_uri == key_manager.kek_uri
        assert wrapped.wip_provider == WIP
        assert wrapped.key_type == "XCHACHA20_POLY1305"


class TestBatched:
    def test_splits_into_chunks(self) -> None:
        assert list(batched(list(range(5)), 2)) == [[0, 1], [2, 3], [4]]

    def test_empty(self) -> None:
        assert list(batched([], 3)) == []

    def test_default_size_from_settings(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MAX_MEMBERS_PER_REQUEST", "4")
        assert [len(chunk) for chunk in batched(list(range(10)))] == [4, 4, 2]

    def test_non_positive_size_rejected(self) -> None:
        with pytest.raises(ValueError):
            list(batched([1], 0))


class TestBuildBatches:
    def test_unencrypted_batches(self) -> None:
        records = [MemberRecord(emails=["alexz@example.com"])] * 5
        batches = build_batches(records, encoding=Encoding.BASE64, batch_size=2)
        assert [len(b.audience_members) for b in batches] == [2, 2, 1]
        assert all(b.encryption_info is None for b in batches)
        assert all(b.encoding == Encoding.BASE64 for b in batches)

    def test_default_encoding_from_settings(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DEFAULT_ENCODING", "BASE64")
        batches = build_batches([MemberRecord(emails=["alexz@example.com"])])
        assert batches[0].encoding == Encoding.BASE64
        assert (
            batches[0].audience_members[0].user_data.user_identifiers[0].email_address
            == "UJ6TMBm7KFoTSpM0uLtnnf950M4CPVKa9L10TUe0/Yo="
        )

    @pytest.mark.usefixtures("local_kms_env")
    def test_encrypted_batches_share_encryption_info(self) -> None:
        encryptor = Encryptor.from_settings()
        records = [MemberRecord(emails=["alexz@example.com"])] * 3
        batches = build_batches(records, encryptor=encryptor, batch_size=2)
        assert len(batches) == 2
        infos = {b.encryption_info.gcp_wrapped_key_info.encrypted_dek for b in batches}
        assert infos == {base64.b64encode(encryptor.wrapped_key).decode("ascii")}

    def test_encrypting_requires_wip_provider(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("WIP_PROVIDER", raising=False)
        encryptor = Encryptor(EnvelopeKeyManager(LocalKmsClient(), "local-kms://k"))
        with pytest.raises(ValueError, match="wip_provider"):
            build_batches([MemberRecord(emails=["alexz@example.com"])], encryptor=encryptor)
