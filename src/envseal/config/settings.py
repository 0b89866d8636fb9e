"""Runtime settings, read from the process environment."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional


DEFAULT_ENV_DIR = "envs"
DEFAULT_KEYRING_SERVICE = "envseal"


@dataclass
class Settings:
    """Where the env files live and which environment is targeted."""

    env_dir: Path = Path(DEFAULT_ENV_DIR)
    env: Optional[str] = None
    log_level: str = "INFO"
    keyring_service: str = DEFAULT_KEYRING_SERVICE

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Build settings from environment variables:

        - ``ENVSEAL_ENV_DIR``: directory holding ``.env`` files (default ``envs``)
        - ``ENV``: target environment (``dev``/``uat``/``prod``)
        - ``ENVSEAL_LOG_LEVEL``: logging level name (default ``INFO``)
        - ``ENVSEAL_KEYRING_SERVICE``: keyring service name (default ``envseal``)
        """
        environ = os.environ if environ is None else environ
        env = environ.get("ENV") or None
        return cls(
            env_dir=Path(environ.get("ENVSEAL_ENV_DIR") or DEFAULT_ENV_DIR),
            env=env.lower() if env else None,
            log_level=(environ.get("ENVSEAL_LOG_LEVEL") or "INFO").upper(),
            keyring_service=environ.get("ENVSEAL_KEYRING_SERVICE") or DEFAULT_KEYRING_SERVICE,
        )

    @property
    def log_level_value(self) -> int:
        level = logging.getLevelName(self.log_level)
        return level if isinstance(level, int) else logging.INFO
