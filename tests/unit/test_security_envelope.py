"""Unit tests for envelope serialization and parsing."""

import base64
import json
import pytest

from envseal.core.exceptions import EmptyInputError, InvalidEnvelopeFormatError
from envseal.security.envelope import Envelope, looks_like_envelope


@pytest.fixture
def envelope():
    return Envelope(salt=b"s" * 16, iv=b"i" * 16, cipher_text=b"c" * 32, mac=b"m" * 32)


def _b64(data):
    return base64.b64encode(data).decode("ascii")


def test_to_json_is_compact_with_named_fields(envelope):
    text = envelope.to_json()
    assert " " not in text
    assert json.loads(text) == {
        "salt": _b64(b"s" * 16),
        "iv": _b64(b"i" * 16),
        "cipherText": _b64(b"c" * 32),
        "mac": _b64(b"m" * 32),
    }


def test_from_json_inverts_to_json(envelope):
    assert Envelope.from_json(envelope.to_json()) == envelope


def test_authenticated_data_is_salt_iv_ciphertext(envelope):
    assert envelope.authenticated_data() == b"s" * 16 + b"i" * 16 + b"c" * 32


@pytest.mark.parametrize("text", ["", "   ", None])
def test_empty_input(text):
    with pytest.raises(EmptyInputError, match="Encrypted data is required"):
        Envelope.from_json(text)


@pytest.mark.parametrize("text", ["not json", "[1, 2]", '"a string"', "{}"])
def test_unparsable_or_wrong_shape(text):
    with pytest.raises(InvalidEnvelopeFormatError, match="salt:iv:cipherText:mac"):
        Envelope.from_json(text)


def test_missing_field_is_named(envelope):
    data = envelope.to_dict()
    del data["mac"]
    with pytest.raises(InvalidEnvelopeFormatError, match="mac"):
        Envelope.from_json(json.dumps(data))


def test_non_string_field(envelope):
    data = envelope.to_dict()
    data["iv"] = 123
    with pytest.raises(InvalidEnvelopeFormatError, match="iv"):
        Envelope.from_json(json.dumps(data))


def test_invalid_base64(envelope):
    data = envelope.to_dict()
    data["cipherText"] = "***not base64***"
    with pytest.raises(InvalidEnvelopeFormatError, match="cipherText"):
        Envelope.from_json(json.dumps(data))


def test_short_salt_rejected(envelope):
    data = envelope.to_dict()
    data["salt"] = _b64(b"abc")
    with pytest.raises(InvalidEnvelopeFormatError, match="salt"):
        Envelope.from_json(json.dumps(data))


def test_non_text_input():
    with pytest.raises(InvalidEnvelopeFormatError):
        Envelope.from_json(b'{"salt": "x"}')


def test_looks_like_envelope(envelope):
    assert looks_like_envelope(envelope.to_json())
    assert not looks_like_envelope("plain value")
    assert not looks_like_envelope("")


@pytest.mark.parametrize("text", ["[" * 200000, '{"a":' * 200000])
def test_deeply_nested_json_is_invalid_format(text):
    with pytest.raises(InvalidEnvelopeFormatError, match="Unable to parse JSON"):
        Envelope.from_json(text)
    assert not looks_like_envelope(text)
