"""Unit tests for single-value authenticated encryption."""

import base64
import hashlib
import hmac
import json
from dataclasses import replace
import pytest
from unittest.mock import patch

from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from envseal.core.exceptions import (
    DecryptionError,
    EmptyInputError,
    EmptyPlaintextError,
    InvalidEnvelopeFormatError,
    MacVerificationError,
    RandomnessUnavailableError,
)
from envseal.security import crypto
from envseal.security.crypto import decrypt, encrypt
from envseal.security.envelope import Envelope
from envseal.security.kdf import KdfParams, derive_key, split_key
from envseal.security.keygen import generate_key
from envseal.security.secret import SecretKey

FAST = KdfParams(time_cost=1, memory_cost=8, parallelism=1)


# ==============================================================================
# Fixtures
# ==============================================================================

@pytest.fixture
def secret():
    return generate_key()


@pytest.fixture
def envelope_text(secret):
    return encrypt("https://uat.example.com/portal", secret, FAST).to_json()


def _flip(b64_value: str, index: int = 0) -> str:
    raw = bytearray(base64.b64decode(b64_value))
    raw[index] ^= 0x01
    return base64.b64encode(bytes(raw)).decode("ascii")


# ==============================================================================
# Tests: Round trip and freshness
# ==============================================================================

@pytest.mark.parametrize("value", ["bar", "1", "p@ss=word==", "ünïcødé ✓", "x" * 1000])
def test_roundtrip(secret, value):
    assert decrypt(encrypt(value, secret, FAST).to_json(), secret, FAST) == value


def test_roundtrip_with_default_params(secret):
    assert decrypt(encrypt("secure123", secret).to_json(), secret) == "secure123"


def test_decrypt_accepts_parsed_envelope(secret):
    assert decrypt(encrypt("value", secret, FAST), secret, FAST) == "value"


def test_roundtrip_with_secret_handle(secret):
    with SecretKey(secret) as handle:
        text = encrypt("value", handle, FAST).to_json()
        assert decrypt(text, handle, FAST) == "value"
    assert handle.wiped


def test_encrypt_is_non_deterministic(secret):
    a = encrypt("same", secret, FAST)
    b = encrypt("same", secret, FAST)
    assert a.salt != b.salt
    assert a.iv != b.iv
    assert a.cipher_text != b.cipher_text
    assert a.mac != b.mac


def test_envelope_field_sizes(secret):
    env = encrypt("value", secret, FAST)
    assert len(env.salt) == 16
    assert len(env.iv) == 16
    assert len(env.cipher_text) % 16 == 0
    assert len(env.mac) == 32


def test_encrypt_rejects_empty_value(secret):
    with pytest.raises(EmptyInputError):
        encrypt("", secret, FAST)


def test_encrypt_rejects_non_str(secret):
    with pytest.raises(TypeError):
        encrypt(b"bytes", secret, FAST)


def test_encrypt_aborts_without_randomness(secret):
    with patch("envseal.security.keygen.os.urandom", side_effect=OSError("entropy pool gone")):
        with pytest.raises(RandomnessUnavailableError):
            encrypt("value", secret, FAST)


# ==============================================================================
# Tests: Tamper detection
# ==============================================================================

@pytest.mark.parametrize("field", ["salt", "iv", "cipherText", "mac"])
@pytest.mark.parametrize("index", [0, -1])
def test_tampered_field_fails_mac(secret, envelope_text, field, index):
    data = json.loads(envelope_text)
    data[field] = _flip(data[field], index)
    with pytest.raises(MacVerificationError, match="tampered"):
        decrypt(json.dumps(data), secret, FAST)


def test_spliced_mac_fails(secret):
    a = json.loads(encrypt("first", secret, FAST).to_json())
    b = json.loads(encrypt("second", secret, FAST).to_json())
    a["mac"] = b["mac"]
    with pytest.raises(MacVerificationError):
        decrypt(json.dumps(a), secret, FAST)


def test_wrong_key_fails_mac(envelope_text):
    with pytest.raises(MacVerificationError):
        decrypt(envelope_text, generate_key(), FAST)


def test_wrong_kdf_params_fail_mac(secret, envelope_text):
    with pytest.raises(MacVerificationError):
        decrypt(envelope_text, secret, KdfParams(time_cost=2, memory_cost=8, parallelism=1))


def test_mac_checked_before_decryption(secret, envelope_text):
    data = json.loads(envelope_text)
    data["cipherText"] = _flip(data["cipherText"])
    with patch.object(crypto, "Cipher") as cipher:
        with pytest.raises(MacVerificationError):
            decrypt(json.dumps(data), secret, FAST)
    cipher.assert_not_called()


# ==============================================================================
# Tests: Format and post-MAC failures
# ==============================================================================

@pytest.mark.parametrize("text", ["", None])
def test_decrypt_empty_input(secret, text):
    with pytest.raises(EmptyInputError):
        decrypt(text, secret, FAST)


def test_decrypt_not_an_envelope(secret):
    with pytest.raises(InvalidEnvelopeFormatError, match="salt:iv:cipherText:mac"):
        decrypt("plain-text-value", secret, FAST)


def test_decrypt_deeply_nested_text(secret):
    with pytest.raises(InvalidEnvelopeFormatError):
        decrypt("[" * 200000, secret, FAST)


def test_mac_covers_authenticated_data(secret):
    env = encrypt("value", secret, FAST)
    _, mac_key = split_key(derive_key(secret, env.salt, FAST))
    expected = hmac.new(mac_key, env.authenticated_data(), hashlib.sha256).digest()
    assert hmac.compare_digest(env.mac, expected)


def _signed(mac_key, salt, iv, cipher_text) -> Envelope:
    unsigned = Envelope(salt=salt, iv=iv, cipher_text=cipher_text, mac=b"")
    return replace(unsigned, mac=crypto._mac(mac_key, unsigned))


def _forge(secret, plaintext_block: bytes, iv: bytes = b"\x00" * 16) -> Envelope:
    """Build a MAC-valid envelope around arbitrary padded bytes."""
    salt = b"\x07" * 16
    enc_key, mac_key = split_key(derive_key(secret, salt, FAST))
    encryptor = Cipher(algorithms.AES(enc_key), modes.CBC(iv)).encryptor()
    ct = encryptor.update(plaintext_block) + encryptor.finalize()
    return _signed(mac_key, salt, iv, ct)


def test_bad_padding_after_valid_mac(secret):
    env = _forge(secret, b"A" * 15 + b"\x00")
    with pytest.raises(DecryptionError):
        decrypt(env, secret, FAST)


def test_non_utf8_after_valid_mac(secret):
    env = _forge(secret, b"\xff\xfe" + b"\x0e" * 14)
    with pytest.raises(DecryptionError):
        decrypt(env, secret, FAST)


def test_empty_plaintext_after_valid_mac(secret):
    env = _forge(secret, b"\x10" * 16)
    with pytest.raises(EmptyPlaintextError):
        decrypt(env, secret, FAST)


def test_bad_iv_length_after_valid_mac(secret):
    env = _forge(secret, b"A" * 15 + b"\x01")
    short_iv = env.iv[:8]
    _, mac_key = split_key(derive_key(secret, env.salt, FAST))
    forged = _signed(mac_key, env.salt, short_iv, env.cipher_text)
    with pytest.raises(DecryptionError, match="invalid length"):
        decrypt(forged, secret, FAST)
