"""Authenticated encryption of single configuration values.

Construction (encrypt-then-MAC):

- fresh 16-byte salt and 16-byte IV per call
- 32-byte DerivedKey = Argon2id(master secret, salt)
- DerivedKey split with HKDF-SHA256 into an encryption key and a MAC key
- AES-256-CBC with PKCS#7 padding over the UTF-8 plaintext
- HMAC-SHA256(mac key, salt || iv || cipherText)

Decryption checks the MAC before touching the ciphertext. Nothing here keeps
state between calls.
"""
import hashlib
import hmac
from dataclasses import replace
from typing import Union

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from envseal.core.exceptions import (
    DecryptionError,
    EmptyInputError,
    EmptyPlaintextError,
    MacVerificationError,
)

from .envelope import Envelope
from .kdf import DEFAULT_KDF_PARAMS, KdfParams, derive_key, split_key
from .keygen import IV_LENGTH, generate_iv, generate_salt
from .secret import SecretLike


BLOCK_SIZE_BITS = 128


def _mac(mac_key: bytes, envelope: Envelope) -> bytes:
    return hmac.new(mac_key, envelope.authenticated_data(), hashlib.sha256).digest()


def encrypt(value: str, secret: SecretLike, params: KdfParams = DEFAULT_KDF_PARAMS) -> Envelope:
    """Encrypt ``value`` under ``secret`` and return a fresh Envelope.

    Two calls with the same arguments never return the same envelope.
    """
    if not isinstance(value, str):
        raise TypeError("value must be str")
    if value == "":
        raise EmptyInputError("Value to encrypt is empty.")

    salt = generate_salt()
    iv = generate_iv()

    enc_key, mac_key = split_key(derive_key(secret, salt, params))

    padder = padding.PKCS7(BLOCK_SIZE_BITS).padder()
    padded = padder.update(value.encode("utf-8")) + padder.finalize()
    encryptor = Cipher(algorithms.AES(enc_key), modes.CBC(iv)).encryptor()
    cipher_text = encryptor.update(padded) + encryptor.finalize()

    unsigned = Envelope(salt=salt, iv=iv, cipher_text=cipher_text, mac=b"")
    return replace(unsigned, mac=_mac(mac_key, unsigned))


def decrypt(
    envelope: Union[str, Envelope],
    secret: SecretLike,
    params: KdfParams = DEFAULT_KDF_PARAMS,
) -> str:
    """Verify and decrypt an envelope (text or parsed) and return the plaintext."""
    if not isinstance(envelope, Envelope):
        envelope = Envelope.from_json(envelope)

    enc_key, mac_key = split_key(derive_key(secret, envelope.salt, params))

    expected = _mac(mac_key, envelope)
    if not hmac.compare_digest(expected, envelope.mac):
        raise MacVerificationError("MAC verification failed. The data may have been tampered with.")

    # the MAC only proves these came from someone holding the key
    if len(envelope.iv) != IV_LENGTH or not envelope.cipher_text or len(envelope.cipher_text) % (BLOCK_SIZE_BITS // 8):
        raise DecryptionError("Decryption failed. IV or ciphertext has an invalid length.")

    decryptor = Cipher(algorithms.AES(enc_key), modes.CBC(envelope.iv)).decryptor()
    padded = decryptor.update(envelope.cipher_text) + decryptor.finalize()
    unpadder = padding.PKCS7(BLOCK_SIZE_BITS).unpadder()
    try:
        raw = unpadder.update(padded) + unpadder.finalize()
        plaintext = raw.decode("utf-8")
    except (ValueError, UnicodeDecodeError) as e:
        raise DecryptionError("Decryption failed. The result is empty or malformed.") from e

    if not plaintext:
        raise EmptyPlaintextError("Decryption failed. The result is empty or malformed.")
    return plaintext
