"""Scoped holder for the master secret.

The secret text is kept in a ``bytearray`` so it can be zeroed once the
operation that needed it is finished::

    with SecretKey(os.environ["SECRET_KEY_UAT"]) as secret:
        value = decrypt(envelope_text, secret)
    # buffer is wiped here

``repr``/``str`` never show the secret, so a handle that ends up in a log
line or traceback leaks nothing.
"""
from __future__ import annotations

from typing import Union

from envseal.core.exceptions import MissingSecretKeyError


class SecretKey:
    __slots__ = ("_buf",)

    def __init__(self, secret: Union[str, bytes, bytearray]):
        if isinstance(secret, str):
            secret = secret.encode("utf-8")
        if not isinstance(secret, (bytes, bytearray)):
            raise TypeError("secret must be str or bytes")
        if not secret:
            raise MissingSecretKeyError("Secret key is empty")
        self._buf = bytearray(secret)

    @property
    def wiped(self) -> bool:
        return not self._buf

    def reveal(self) -> bytes:
        """Return a copy of the secret bytes for handing to a KDF."""
        if not self._buf:
            raise MissingSecretKeyError("Secret key has been wiped")
        return bytes(self._buf)

    def wipe(self) -> None:
        """Zero the buffer (best-effort) and drop it."""
        for i in range(len(self._buf)):
            self._buf[i] = 0
        self._buf = bytearray()

    def __enter__(self) -> "SecretKey":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.wipe()

    def __repr__(self) -> str:
        return "SecretKey('**********')" if self._buf else "SecretKey(<wiped>)"

    __str__ = __repr__

    def __eq__(self, other):
        # identity only; comparing secrets by value is a timing side channel
        return self is other

    __hash__ = object.__hash__


SecretLike = Union[SecretKey, str, bytes, bytearray]


def as_secret_bytes(secret: SecretLike) -> bytes:
    """Normalize anything accepted as a master secret to raw bytes."""
    if isinstance(secret, SecretKey):
        return secret.reveal()
    if secret is None:
        raise MissingSecretKeyError("Secret key is required")
    return SecretKey(secret).reveal()
