"""Payload models for audience member uploads.

Field names follow the matching service's JSON schema.  Only the parts this
package fills in are modelled; destinations, consent and the request
envelope belong to the API client.
"""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, model_validator

from matchprep.hashing import Encoding

KEY_TYPE_XCHACHA20_POLY1305 = "XCHACHA20_POLY1305"


class AddressInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    given_name: str
    family_name: str
    region_code: str
    postal_code: str


class UserIdentifier(BaseModel):
    """Exactly one of ``email_address``, ``phone_number`` or ``address``."""

    model_config = ConfigDict(frozen=True)

    email_address: str | None = None
    phone_number: str | None = None
    address: AddressInfo | None = None

    @model_validator(mode="after")
    def check_exactly_one(self) -> UserIdentifier:
        populated = [
            value
            for value in (self.email_address, self.phone_number, self.address)
            if value is not None
        ]
        if len(populated) != 1:
            raise ValueError("UserIdentifier must set exactly one identifier")
        return self


class UserData(BaseModel):
    user_identifiers: list[UserIdentifier]


class AudienceMember(BaseModel):
    user_data: UserData


class WrappedKeyInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    key_type: str = KEY_TYPE_XCHACHA20_POLY1305
    kek_uri: str
    wip_provider: str
    encrypted_dek: str


class EncryptionInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    gcp_wrapped_key_info: WrappedKeyInfo


class AudienceBatch(BaseModel):
    """One request's worth of members plus the metadata needed to read them."""

    audience_members: list[AudienceMember]
    encoding: Encoding
    encryption_info: EncryptionInfo | None = None
