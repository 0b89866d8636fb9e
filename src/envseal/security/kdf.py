from dataclasses import dataclass
from typing import Tuple

from argon2.low_level import Type, hash_secret_raw
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

from .secret import SecretLike, as_secret_bytes


KEY_LENGTH = 32  # AES-256
MIN_SALT_LENGTH = 8  # argon2 refuses anything shorter

ENC_INFO = b"envseal-enc"
MAC_INFO = b"envseal-mac"


@dataclass(frozen=True)
class KdfParams:
    time_cost: int = 3
    memory_cost: int = 65536
    parallelism: int = 1


DEFAULT_KDF_PARAMS = KdfParams()


def derive_key(
    secret: SecretLike,
    salt: bytes,
    params: KdfParams = DEFAULT_KDF_PARAMS,
    key_len: int = KEY_LENGTH,
) -> bytes:
    """
    Derive a per-envelope key from the master secret and a salt using Argon2id.
    Same (secret, salt, params) always gives the same bytes.
    """
    if len(salt) < MIN_SALT_LENGTH:
        raise ValueError(f"salt must be at least {MIN_SALT_LENGTH} bytes")

    return hash_secret_raw(
        secret=as_secret_bytes(secret),
        salt=salt,
        time_cost=params.time_cost,
        memory_cost=params.memory_cost,
        parallelism=params.parallelism,
        hash_len=key_len,
        type=Type.ID,
    )


def _expand(derived_key: bytes, info: bytes) -> bytes:
    hkdf = HKDF(algorithm=hashes.SHA256(), length=KEY_LENGTH, salt=None, info=info)
    return hkdf.derive(derived_key)


def split_key(derived_key: bytes) -> Tuple[bytes, bytes]:
    """Return (encryption_key, mac_key), both bound to ``derived_key``."""
    return _expand(derived_key, ENC_INFO), _expand(derived_key, MAC_INFO)
