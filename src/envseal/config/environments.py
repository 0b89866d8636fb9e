"""Environment names, their files, and loading them into ``os.environ``."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from envseal.core.exceptions import MissingVariableError, UnknownEnvironmentError
from envseal.security.crypto import decrypt
from envseal.security.kdf import DEFAULT_KDF_PARAMS, KdfParams
from envseal.security.secret import SecretLike

from .settings import Settings


logger = logging.getLogger(__name__)

BASE_ENV_FILE = ".env"

ENV_FILES = {
    "dev": ".env.dev",
    "uat": ".env.uat",
    "prod": ".env.prod",
}


def resolve_env(env: Optional[str]) -> str:
    """Validate an environment name and return it lower-cased."""
    name = (env or "").strip().lower()
    if name not in ENV_FILES:
        raise UnknownEnvironmentError(
            f"Invalid environment specified: {env}. Expected one of: {', '.join(ENV_FILES)}"
        )
    return name


def env_file_for(env: str) -> str:
    return ENV_FILES[resolve_env(env)]


def secret_key_name(env: str) -> str:
    # SECRET_KEY_DEV / SECRET_KEY_UAT / SECRET_KEY_PROD
    return f"SECRET_KEY_{resolve_env(env).upper()}"


def ensure_env_dir(env_dir: Path) -> Path:
    env_dir = Path(env_dir)
    if not env_dir.exists():
        env_dir.mkdir(parents=True)
        logger.info("Created environment directory: %s", env_dir)
    return env_dir


def ensure_base_env_file(env_dir: Path) -> Path:
    path = ensure_env_dir(env_dir) / BASE_ENV_FILE
    if not path.exists():
        path.touch()
        logger.info("Created base environment file: %s", path)
    return path


def init_env_configuration(settings: Optional[Settings] = None) -> str:
    """
    Load the base ``.env`` and the file of the selected environment.

    Both files are loaded with ``override=True`` so values on disk win over
    whatever the shell had. Missing files only produce a warning. Returns the
    resolved environment name.
    """
    settings = settings or Settings.from_env()
    env_dir = ensure_env_dir(settings.env_dir)

    base = env_dir / BASE_ENV_FILE
    if base.exists():
        load_dotenv(base, override=True)
        logger.info("Base environment file '.env' loaded successfully.")
    else:
        logger.warning("Base environment file not found. Skipping file load.")

    # ENV may have come from the base file
    env = resolve_env(settings.env or os.getenv("ENV"))
    logger.info("Successfully loaded variables for the '%s' environment.", env)

    env_path = env_dir / ENV_FILES[env]
    if env_path.exists():
        load_dotenv(env_path, override=True)
    else:
        logger.warning(
            "The environment-specific file was not found: %s. Ensure the file exists if "
            "decryption is required at runtime, or disregard this warning if the file is unnecessary.",
            env_path,
        )
    return env


def get_decrypted(name: str, secret: SecretLike, params: KdfParams = DEFAULT_KDF_PARAMS) -> str:
    """Decrypt the envelope held in environment variable ``name``."""
    value = os.environ.get(name)
    if value is None:
        raise MissingVariableError(f"Environment variable {name} is not set")
    return decrypt(value, secret, params)
