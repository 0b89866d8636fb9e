"""Envelope: the at-rest form of one encrypted value.

Wire format is a compact JSON object, every field standard base64::

    {"salt":"...","iv":"...","cipherText":"...","mac":"..."}

The JSON keys keep the camelCase ``cipherText`` so envelopes written by other
tools in the same format stay readable.
"""
from __future__ import annotations

import base64
import binascii
import json
from dataclasses import dataclass
from typing import Optional

from envseal.core.exceptions import EmptyInputError, InvalidEnvelopeFormatError

from .kdf import MIN_SALT_LENGTH


FIELDS = ("salt", "iv", "cipherText", "mac")
EXPECTED_SHAPE = '{"salt": <b64>, "iv": <b64>, "cipherText": <b64>, "mac": <b64>} (salt:iv:cipherText:mac)'


@dataclass(frozen=True)
class Envelope:
    salt: bytes
    iv: bytes
    cipher_text: bytes
    mac: bytes

    def authenticated_data(self) -> bytes:
        """salt || iv || cipherText, the bytes covered by the MAC."""
        return self.salt + self.iv + self.cipher_text

    def to_dict(self) -> dict:
        return {
            "salt": _b64(self.salt),
            "iv": _b64(self.iv),
            "cipherText": _b64(self.cipher_text),
            "mac": _b64(self.mac),
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), separators=(",", ":"))

    @classmethod
    def from_json(cls, text: Optional[str]) -> "Envelope":
        """Parse envelope text.

        Raises EmptyInputError for empty/None input and
        InvalidEnvelopeFormatError for anything that is not the four-field shape.
        """
        if text is None or (isinstance(text, str) and not text.strip()):
            raise EmptyInputError("Encrypted data is required.")
        if not isinstance(text, str):
            raise InvalidEnvelopeFormatError(
                f"Invalid encrypted data format: expected text, got {type(text).__name__}. "
                f"Expected {EXPECTED_SHAPE}"
            )

        try:
            data = json.loads(text)
        except (ValueError, RecursionError) as e:
            raise InvalidEnvelopeFormatError(
                f"Invalid encrypted data format. Unable to parse JSON: {e}. Expected {EXPECTED_SHAPE}"
            ) from e

        if not isinstance(data, dict):
            raise InvalidEnvelopeFormatError(f"Invalid encrypted data format. Expected {EXPECTED_SHAPE}")

        missing = [f for f in FIELDS if not isinstance(data.get(f), str) or not data.get(f)]
        if missing:
            raise InvalidEnvelopeFormatError(
                f"Invalid encrypted data format: missing or empty field(s) {', '.join(missing)}. "
                f"Expected {EXPECTED_SHAPE}"
            )

        decoded = {}
        for field in FIELDS:
            try:
                decoded[field] = base64.b64decode(data[field], validate=True)
            except (binascii.Error, ValueError) as e:
                raise InvalidEnvelopeFormatError(
                    f"Invalid encrypted data format: field '{field}' is not valid base64. "
                    f"Expected {EXPECTED_SHAPE}"
                ) from e

        if len(decoded["salt"]) < MIN_SALT_LENGTH:
            raise InvalidEnvelopeFormatError(
                f"Invalid encrypted data format: salt shorter than {MIN_SALT_LENGTH} bytes"
            )

        return cls(
            salt=decoded["salt"],
            iv=decoded["iv"],
            cipher_text=decoded["cipherText"],
            mac=decoded["mac"],
        )


def looks_like_envelope(text: str) -> bool:
    try:
        Envelope.from_json(text)
    except (EmptyInputError, InvalidEnvelopeFormatError):
        return False
    return True


def _b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")
