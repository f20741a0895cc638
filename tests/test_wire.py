"""Tests for the tssig/v1 JSON wire format."""

from __future__ import annotations

import json

import pytest

from tssig.core.encoding import encode_b64
from tssig.core.errors import EncodingError, PreconditionError, ValidationError
from tssig.services.stamp import SignedTimestamp
from tssig.services.wire import (
    WIRE_FORMAT_VERSION,
    dump_signed_timestamp,
    load_signed_timestamp,
    to_record,
)

# 2026-10-18T09:30:00.1234567Z
FIXED_NS = 1_792_315_800 * 1_000_000_000 + 123_456_700


@pytest.fixture
def sts(signed_issuer, digest) -> SignedTimestamp:
    return signed_issuer.timestamp(digest)


@pytest.fixture
def document(sts) -> dict:
    return json.loads(dump_signed_timestamp(sts))


def _load(document: dict) -> SignedTimestamp:
    return load_signed_timestamp(json.dumps(document))


class TestDump:
    """Tests for dump_signed_timestamp()."""

    def test_field_names(self, document):
        assert set(document) == {"version", "issuer", "datetime", "digest", "signature"}
        assert set(document["issuer"]) == {
            "root-key-url",
            "leaf-public-key",
            "issuer-signature",
        }
        assert document["version"] == WIRE_FORMAT_VERSION

    def test_values(self, sts, document):
        assert document["digest"] == encode_b64(sts.digest)
        assert document["signature"] == encode_b64(sts.signature)
        assert document["issuer"]["root-key-url"] == sts.issuer.root_key_url
        assert document["issuer"]["leaf-public-key"] == encode_b64(sts.issuer.leaf_public_key)

    def test_byte_fields_unpadded(self, document):
        values = [
            document["digest"],
            document["signature"],
            document["issuer"]["leaf-public-key"],
            document["issuer"]["issuer-signature"],
        ]
        for value in values:
            assert "=" not in value
            assert "+" not in value
            assert "/" not in value

    def test_datetime_nanosecond_text(self, signed_issuer, digest):
        sts = signed_issuer.timestamp(digest)
        sts.timestamp_ns = FIXED_NS
        document = json.loads(dump_signed_timestamp(sts))
        assert document["datetime"] == "2026-10-18T09:30:00.1234567Z"

    def test_private_key_never_serialized(self, signed_issuer, sts):
        text = dump_signed_timestamp(sts, indent=2).lower()
        assert "private" not in text
        assert signed_issuer.can_sign

    def test_unsigned_timestamp_rejected(self, digest):
        with pytest.raises(PreconditionError):
            dump_signed_timestamp(SignedTimestamp(digest=digest))

    def test_record_model(self, sts):
        record = to_record(sts)
        assert record.version == WIRE_FORMAT_VERSION
        assert record.issuer.root_key_url == sts.issuer.root_key_url


class TestLoad:
    """Tests for load_signed_timestamp()."""

    @pytest.mark.asyncio
    async def test_round_trip_verifies(self, sts, verifier):
        loaded = load_signed_timestamp(dump_signed_timestamp(sts))

        assert loaded.digest == sts.digest
        assert loaded.timestamp_ns == sts.timestamp_ns
        assert loaded.signature == sts.signature
        assert loaded.issuer == sts.issuer
        await verifier.verify_with_digest(loaded, sts.digest)

    def test_accepts_bytes(self, sts):
        loaded = load_signed_timestamp(dump_signed_timestamp(sts).encode())
        assert loaded.signature == sts.signature

    def test_loaded_issuer_is_verify_only(self, document, digest):
        loaded = _load(document)
        assert not loaded.issuer.can_sign
        with pytest.raises(PreconditionError):
            loaded.issuer.timestamp(digest)

    @pytest.mark.parametrize("field", ["version", "issuer", "datetime", "digest", "signature"])
    def test_missing_field(self, document, field):
        del document[field]
        with pytest.raises(EncodingError):
            _load(document)

    @pytest.mark.parametrize("field", ["root-key-url", "leaf-public-key", "issuer-signature"])
    def test_missing_issuer_field(self, document, field):
        del document["issuer"][field]
        with pytest.raises(EncodingError):
            _load(document)

    def test_empty_issuer_field(self, document):
        document["issuer"]["root-key-url"] = ""
        with pytest.raises(EncodingError):
            _load(document)

    def test_unknown_field(self, document):
        document["comment"] = "hello"
        with pytest.raises(EncodingError):
            _load(document)

    def test_unknown_issuer_field(self, document):
        document["issuer"]["leaf-private-key"] = "AAAA"
        with pytest.raises(EncodingError):
            _load(document)

    @pytest.mark.parametrize("version", ["tssig/v0", "tssig/v2", "", "TSSIG/V1"])
    def test_other_versions_rejected(self, document, version):
        document["version"] = version
        with pytest.raises(EncodingError):
            _load(document)

    def test_padded_base64_rejected(self, document):
        document["digest"] = document["digest"] + "="
        with pytest.raises(EncodingError):
            _load(document)

    def test_standard_alphabet_rejected(self, document):
        document["signature"] = "+" + document["signature"][1:]
        with pytest.raises(EncodingError):
            _load(document)

    @pytest.mark.parametrize(
        "text",
        [
            "2026-10-18T09:30:00+00:00",
            "2026-10-18T09:30:00.123+00:00",
            "2026-10-18 09:30:00Z",
            "2026-10-18T09:30:00.1234567890Z",
            "not a date",
        ],
    )
    def test_bad_datetime_rejected(self, document, text):
        document["datetime"] = text
        with pytest.raises(EncodingError):
            _load(document)

    def test_bad_digest_length(self, document):
        document["digest"] = encode_b64(b"\x00" * 33)
        with pytest.raises(ValidationError):
            _load(document)

    def test_invalid_json(self):
        with pytest.raises(EncodingError):
            load_signed_timestamp("{not json")

    def test_not_an_object(self):
        with pytest.raises(EncodingError):
            load_signed_timestamp("[]")
