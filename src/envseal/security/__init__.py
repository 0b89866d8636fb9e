"""Security helpers: key generation, KDF and the value envelope for envseal.

This package provides:
- secure random master keys, salts and IVs
- Argon2id per-envelope key derivation (HKDF-split into enc/MAC keys)
- AES-256-CBC + HMAC-SHA256 encryption of single values
- a scoped, wipeable master-secret handle
- optional OS keystore storage for master secrets
"""

from .keygen import generate_key, generate_salt, generate_iv
from .kdf import KdfParams, derive_key
from .envelope import Envelope, looks_like_envelope
from .crypto import encrypt, decrypt
from .secret import SecretKey
from .keystore import save_key, load_key, delete_key, assess_keyring_backend

__all__ = [
    "generate_key",
    "generate_salt",
    "generate_iv",
    "KdfParams",
    "derive_key",
    "Envelope",
    "looks_like_envelope",
    "encrypt",
    "decrypt",
    "SecretKey",
    "save_key",
    "load_key",
    "delete_key",
    "assess_keyring_backend",
]
