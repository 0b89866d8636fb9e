"""Line codec: encrypt every value of a ``KEY=value`` configuration file.

Rules, applied per line in order:

- blank / whitespace-only: kept as-is
- no ``=``: reported as a :class:`MalformedLineError` and dropped from output
- ``KEY=`` (empty value): kept as-is
- ``KEY=value``: becomes ``KEY=<envelope json>``

Dropped lines collapse the output (no placeholder), so the output can be
shorter than the input. Malformed lines never abort the run; they are
collected and logged once at the end.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Sequence

from envseal.core.exceptions import EmptyFileError, InvalidInputError, MalformedLineError
from envseal.security.crypto import encrypt
from envseal.security.envelope import looks_like_envelope
from envseal.security.kdf import DEFAULT_KDF_PARAMS, KdfParams
from envseal.security.secret import SecretLike


logger = logging.getLogger(__name__)


@dataclass
class CodecResult:
    lines: List[str] = field(default_factory=list)
    errors: List[MalformedLineError] = field(default_factory=list)
    encrypted_count: int = 0

    @property
    def error_report(self) -> str:
        return "\n".join(str(e) for e in self.errors)


def _validate(lines: Sequence[str]) -> None:
    if isinstance(lines, (str, bytes)) or not isinstance(lines, Sequence):
        raise InvalidInputError("Input must be a sequence of strings.")
    if not all(isinstance(line, str) for line in lines):
        raise InvalidInputError("Input must be a sequence of strings.")
    if all(line.strip() == "" for line in lines):
        raise EmptyFileError("File is completely empty or contains only whitespace.")


def encode_lines(
    lines: Sequence[str],
    secret: SecretLike,
    params: KdfParams = DEFAULT_KDF_PARAMS,
    skip_encrypted: bool = False,
) -> CodecResult:
    """Encrypt ``lines`` and return the output lines plus collected line errors.

    With ``skip_encrypted`` a value that already parses as an envelope is left
    alone, so running the codec twice does not double-encrypt.
    """
    _validate(lines)
    result = CodecResult()

    for index, line in enumerate(lines):
        stripped = line.strip()

        if stripped == "":
            result.lines.append(line)
            continue

        if "=" not in stripped:
            result.errors.append(MalformedLineError(index + 1, line))
            continue

        key, _, value = stripped.partition("=")
        value = value.strip()
        if not value or (skip_encrypted and looks_like_envelope(value)):
            result.lines.append(line)
            continue

        envelope = encrypt(value, secret, params)
        result.lines.append(f"{key.strip()}={envelope.to_json()}")
        result.encrypted_count += 1

    return result


def encrypt_lines(
    lines: Sequence[str],
    secret: SecretLike,
    params: KdfParams = DEFAULT_KDF_PARAMS,
) -> List[str]:
    """Encrypt ``lines``; malformed lines are logged in one entry and dropped."""
    result = encode_lines(lines, secret, params)
    log_line_errors(result)
    return result.lines


def log_line_errors(result: CodecResult) -> None:
    if result.errors:
        logger.error(
            "[Method: encrypt_lines] Failed to encrypt some lines: %d malformed line(s)\n%s",
            len(result.errors),
            result.error_report,
        )
