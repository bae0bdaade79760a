"""Audience member builder.

Turns parsed member records into :class:`AudienceMember` payloads.  Each
value is processed independently: an invalid email does not cost the member
its phone numbers.  ``InvalidInput`` is caught per value and the value is
skipped; key-management and encryption failures propagate, because they
invalidate the whole session.

Address info is attached only when all four parts (given name, family name,
region code, postal code) are valid.

Safety rule: raw values are never logged, only counts.
"""
from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field
from typing import TypeVar

from matchprep.audience.models import (
    AddressInfo,
    AudienceBatch,
    AudienceMember,
    EncryptionInfo,
    UserData,
    UserIdentifier,
    WrappedKeyInfo,
)
from matchprep.core.errors import InvalidInput
from matchprep.core.settings import get_settings
from matchprep.crypto.encryptor import Encryptor
from matchprep.crypto.envelope import EnvelopeKeyManager
from matchprep.hashing import Encoding, base64_encode
from matchprep.pipeline.processor import (
    process_email_address,
    process_family_name,
    process_given_name,
    process_phone_number,
    process_postal_code,
    process_region_code,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


# ---------------------------------------------------------------------------
# Input dataclass
# ---------------------------------------------------------------------------

@dataclass
class MemberRecord:
    """Raw identifiers for one audience member, as read from the source."""

    emails: list[str] = field(default_factory=list)
    phone_numbers: list[str] = field(default_factory=list)
    given_name: str | None = None
    family_name: str | None = None
    region_code: str | None = None
    postal_code: str | None = None

    def has_address(self) -> bool:
        return any(
            value is not None
            for value in (self.given_name, self.family_name, self.region_code, self.postal_code)
        )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _try_process(fn: Callable[..., str], *args) -> str | None:
    try:
        return fn(*args)
    except InvalidInput:
        return None


def _build_address(
    record: MemberRecord,
    encoding: Encoding | None,
    encryptor: Encryptor | None,
) -> AddressInfo | None:
    try:
        return AddressInfo(
            given_name=process_given_name(record.given_name, encoding, encryptor),
            family_name=process_family_name(record.family_name, encoding, encryptor),
            region_code=process_region_code(record.region_code),
            postal_code=process_postal_code(record.postal_code),
        )
    except InvalidInput:
        return None


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def build_user_data(
    record: MemberRecord,
    *,
    encoding: Encoding | None = None,
    encryptor: Encryptor | None = None,
) -> UserData | None:
    """Return the processed identifiers of *record*, or ``None`` if none are valid."""
    identifiers: list[UserIdentifier] = []
    skipped = 0

    for email in record.emails:
        processed = _try_process(process_email_address, email, encoding, encryptor)
        if processed is None:
            skipped += 1
            continue
        identifiers.append(UserIdentifier(email_address=processed))

    for phone in record.phone_numbers:
        processed = _try_process(process_phone_number, phone, encoding, encryptor)
        if processed is None:
            skipped += 1
            continue
        identifiers.append(UserIdentifier(phone_number=processed))

    if record.has_address():
        address = _build_address(record, encoding, encryptor)
        if address is None:
            skipped += 1
        else:
            identifiers.append(UserIdentifier(address=address))

    if skipped:
        logger.debug("build_user_data: skipped %d invalid value(s)", skipped)
    if not identifiers:
        return None
    return UserData(user_identifiers=identifiers)


def build_audience_members(
    records: Iterable[MemberRecord],
    *,
    encoding: Encoding | None = None,
    encryptor: Encryptor | None = None,
) -> list[AudienceMember]:
    """Process every record, dropping members with no valid identifier."""
    members: list[AudienceMember] = []
    dropped = 0
    for record in records:
        user_data = build_user_data(record, encoding=encoding, encryptor=encryptor)
        if user_data is None:
            dropped += 1
            continue
        members.append(AudienceMember(user_data=user_data))

    if dropped:
        logger.warning("Dropped %d member(s) with no valid identifiers", dropped)
    logger.info("Built %d audience member(s)", len(members))
    return members


def build_encryption_info(key_manager: EnvelopeKeyManager, *, wip_provider: str) -> EncryptionInfo:
    """Describe the wrapped DEK so the receiver can unwrap it with its KEK access."""
    return EncryptionInfo(
        gcp_wrapped_key_info=WrappedKeyInfo(
            kek_uri=key_manager.kek_uri,
            wip_provider=wip_provider,
            encrypted_dek=base64_encode(key_manager.get_wrapped_key()),
        )
    )


def batched(items: list[T], size: int | None = None) -> Iterator[list[T]]:
    """Yield consecutive chunks of at most *size* items.

    *size* defaults to ``settings.max_members_per_request``.
    """
    if size is None:
        size = get_settings().max_members_per_request
    if size <= 0:
        raise ValueError("Batch size must be positive")
    for start in range(0, len(items), size):
        yield items[start:start + size]


def build_batches(
    records: Iterable[MemberRecord],
    *,
    encoding: Encoding | None = None,
    encryptor: Encryptor | None = None,
    wip_provider: str | None = None,
    batch_size: int | None = None,
) -> list[AudienceBatch]:
    """Build request-sized batches of members.

    *encoding* defaults to ``settings.default_encoding``.  When *encryptor*
    is given, each batch carries the encryption info for the session DEK;
    *wip_provider* then defaults to ``settings.wip_provider`` and must be
    set.
    """
    encoding = encoding or get_settings().default_encoding
    encryption_info = None
    if encryptor is not None:
        wip_provider = wip_provider or get_settings().wip_provider
        if not wip_provider:
            raise ValueError("wip_provider is required when encrypting")
        encryption_info = build_encryption_info(encryptor.key_manager, wip_provider=wip_provider)

    members = build_audience_members(records, encoding=encoding, encryptor=encryptor)
    batches = [
        AudienceBatch(audience_members=chunk, encoding=encoding, encryption_info=encryption_info)
        for chunk in batched(members, batch_size)
    ]
    logger.info("Split %d member(s) into %d batch(es)", len(members), len(batches))
    return batches
