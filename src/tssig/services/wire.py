"""Versioned JSON wire format for SignedTimestamps.

There is exactly one accepted schema, identified by the "version" field:

    {
      "version": "tssig/v1",
      "issuer": {
        "root-key-url": "https://keys.example.com/root.der",
        "leaf-public-key": "<base64url>",
        "issuer-signature": "<base64url>"
      },
      "datetime": "2026-10-18T09:30:00.123456789Z",
      "digest": "<base64url>",
      "signature": "<base64url>"
    }

Binary fields are unpadded base64url (see tssig.core.encoding). Unknown or
missing fields and any other version are rejected rather than guessed at.
"""

from __future__ import annotations

import logging
from typing import Literal

import pydantic
from pydantic import BaseModel, ConfigDict, Field

from tssig.core.encoding import decode_b64, encode_b64
from tssig.core.errors import EncodingError, PreconditionError
from tssig.core.timefmt import format_rfc3339_nanos, parse_rfc3339_nanos
from tssig.services.issuer import Issuer
from tssig.services.stamp import SignedTimestamp

logger = logging.getLogger(__name__)

WIRE_FORMAT_VERSION = "tssig/v1"


class IssuerRecord(BaseModel):
    """Wire form of an Issuer. Never carries the leaf private key."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    root_key_url: str = Field(..., alias="root-key-url", min_length=1)
    leaf_public_key: str = Field(..., alias="leaf-public-key", min_length=1)
    issuer_signature: str = Field(..., alias="issuer-signature", min_length=1)


class SignedTimestampRecord(BaseModel):
    """Wire form of a signed SignedTimestamp."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    version: Literal["tssig/v1"]
    issuer: IssuerRecord
    signed_at: str = Field(..., alias="datetime")
    digest: str
    signature: str


def to_record(sts: SignedTimestamp) -> SignedTimestampRecord:
    """Build the wire record for a signed timestamp.

    Raises:
        PreconditionError: If the timestamp or its issuer is unsigned.
    """
    issuer = sts.issuer
    if issuer is None or sts.timestamp_ns is None or not sts.is_signed:
        raise PreconditionError("Only signed timestamps can be serialized")
    if not issuer.is_signed:
        raise PreconditionError("Only signed issuers can be serialized")

    return SignedTimestampRecord.model_validate(
        {
            "version": WIRE_FORMAT_VERSION,
            "issuer": {
                "root-key-url": issuer.root_key_url,
                "leaf-public-key": encode_b64(issuer.leaf_public_key),
                "issuer-signature": encode_b64(issuer.issuer_signature),
            },
            "datetime": format_rfc3339_nanos(sts.timestamp_ns),
            "digest": encode_b64(sts.digest),
            "signature": encode_b64(sts.signature),
        }
    )


def from_record(record: SignedTimestampRecord) -> SignedTimestamp:
    """Rebuild a SignedTimestamp (with a verify-only Issuer) from its record.

    Raises:
        EncodingError: If a byte field or the datetime is malformed.
        ValidationError: If the digest length is not supported.
    """
    issuer = Issuer(
        decode_b64(record.issuer.leaf_public_key),
        root_key_url=record.issuer.root_key_url,
        issuer_signature=decode_b64(record.issuer.issuer_signature),
    )
    return SignedTimestamp(
        digest=decode_b64(record.digest),
        issuer=issuer,
        timestamp_ns=parse_rfc3339_nanos(record.signed_at),
        signature=decode_b64(record.signature),
    )


def dump_signed_timestamp(sts: SignedTimestamp, *, indent: int | None = None) -> str:
    """Serialize a signed timestamp to JSON text."""
    return to_record(sts).model_dump_json(by_alias=True, indent=indent)


def load_signed_timestamp(data: str | bytes) -> SignedTimestamp:
    """Parse JSON text produced by dump_signed_timestamp().

    Raises:
        EncodingError: If the JSON does not match the tssig/v1 schema.
        ValidationError: If the digest length is not supported.
    """
    try:
        record = SignedTimestampRecord.model_validate_json(data)
    except pydantic.ValidationError as e:
        logger.debug("Rejected signed timestamp record: %d schema errors", e.error_count())
        raise EncodingError(f"Invalid signed timestamp record: {e}") from e
    return from_record(record)
