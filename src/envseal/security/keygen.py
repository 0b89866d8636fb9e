"""Secure random material: master keys, salts and IVs.

All randomness goes through the OS CSPRNG (``os.urandom``). If it cannot
deliver, :class:`RandomnessUnavailableError` is raised; there is no fallback.
"""
import base64
import os

from envseal.core.exceptions import RandomnessUnavailableError


DEFAULT_KEY_BITS = 256
SALT_LENGTH = 16
IV_LENGTH = 16  # AES block size


def random_bytes(length: int) -> bytes:
    """Return ``length`` bytes from the OS secure random source."""
    try:
        data = os.urandom(length)
    except (NotImplementedError, OSError) as e:
        raise RandomnessUnavailableError(f"secure random source unavailable: {e}") from e
    if len(data) != length:
        raise RandomnessUnavailableError(
            f"secure random source returned {len(data)} of {length} bytes"
        )
    return data


def generate_key(length_bits: int = DEFAULT_KEY_BITS) -> str:
    """Generate a new master secret and return it base64-encoded.

    ``length_bits`` must be a positive multiple of 8; the decoded key is
    ``length_bits // 8`` bytes long.
    """
    if isinstance(length_bits, bool) or not isinstance(length_bits, int):
        raise TypeError("length_bits must be an int")
    if length_bits <= 0 or length_bits % 8:
        raise ValueError(f"length_bits must be a positive multiple of 8, got {length_bits}")
    return base64.b64encode(random_bytes(length_bits // 8)).decode("ascii")


def generate_salt(length: int = SALT_LENGTH) -> bytes:
    return random_bytes(length)


def generate_iv() -> bytes:
    return random_bytes(IV_LENGTH)
