"""Audience package.

Assembles processed identifiers into upload payloads and attaches the
encryption info for the session DEK.
"""
from matchprep.audience.builder import (
    MemberRecord,
    batched,
    build_audience_members,
    build_batches,
    build_encryption_info,
    build_user_data,
)
from matchprep.audience.models import (
    AddressInfo,
    AudienceBatch,
    AudienceMember,
    EncryptionInfo,
    UserData,
    UserIdentifier,
    WrappedKeyInfo,
)

__all__ = [
    "AddressInfo",
    "AudienceBatch",
    "AudienceMember",
    "EncryptionInfo",
    "MemberRecord",
    "UserData",
    "UserIdentifier",
    "WrappedKeyInfo",
    "batched",
    "build_audience_members",
    "build_batches",
    "build_encryption_info",
    "build_user_data",
]
