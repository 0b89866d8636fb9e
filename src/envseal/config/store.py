"""File-backed storage for ``.env`` files and the master secrets they hold.

The codec and the crypto layer never touch the file system; they get text from
a :class:`SecretStore`. I/O errors are not caught here, they reach the caller
as ``OSError``.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import List, Optional, Protocol

from .environments import BASE_ENV_FILE, ensure_base_env_file


logger = logging.getLogger(__name__)


class SecretStore(Protocol):
    """What EncryptionManager needs from wherever env files live."""

    def read(self, name: str) -> str:
        ...

    def write(self, name: str, text: str) -> None:
        ...

    def read_lines(self, name: str) -> List[str]:
        ...

    def write_lines(self, name: str, lines: List[str]) -> None:
        ...

    def get_key_value(self, key_name: str, name: str = BASE_ENV_FILE) -> Optional[str]:
        ...

    def store_key(self, key_name: str, value: str, name: str = BASE_ENV_FILE) -> None:
        ...


class EnvFileStore:
    """
    Reads and writes named files inside one environment directory.

    The directory and an empty base ``.env`` are created on construction,
    so ``store_key`` always has a file to update.
    """

    def __init__(self, env_dir: Path | str):
        self.env_dir = Path(env_dir)
        ensure_base_env_file(self.env_dir)

    def path(self, name: str) -> Path:
        return self.env_dir / name

    # ------------------------------------------------------------------
    # Raw text
    # ------------------------------------------------------------------

    def read(self, name: str) -> str:
        return self.path(name).read_text(encoding="utf-8")

    def write(self, name: str, text: str) -> None:
        self.path(name).write_text(text, encoding="utf-8")

    def read_lines(self, name: str) -> List[str]:
        return self.read(name).split("\n")

    def write_lines(self, name: str, lines: List[str]) -> None:
        self.write(name, "\n".join(lines))

    # ------------------------------------------------------------------
    # KEY=value entries in the base .env
    # ------------------------------------------------------------------

    def get_key_value(self, key_name: str, name: str = BASE_ENV_FILE) -> Optional[str]:
        """Return the value of ``key_name`` in file ``name`` or None if absent."""
        match = re.search(rf"^{re.escape(key_name)}=(.*)$", self.read(name), re.MULTILINE)
        return match.group(1) if match else None

    def store_key(self, key_name: str, value: str, name: str = BASE_ENV_FILE) -> None:
        """Update ``key_name`` in place, or append it if the file does not have it."""
        content = self.read(name)
        pattern = re.compile(rf"^{re.escape(key_name)}=.*$", re.MULTILINE)
        entry = f"{key_name}={value}"

        if pattern.search(content):
            content = pattern.sub(lambda _: entry, content, count=1)
        else:
            if content and not content.endswith("\n"):
                content += "\n"
            content += entry + "\n"

        self.write(name, content)
        logger.info("%s written to %s file", key_name, name)
