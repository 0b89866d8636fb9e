"""Configuration files: settings, environments, storage and the line codec."""

from .settings import Settings
from .environments import ENV_FILES, init_env_configuration, get_decrypted, resolve_env, secret_key_name
from .store import EnvFileStore, SecretStore
from .codec import CodecResult, encode_lines, encrypt_lines

__all__ = [
    "Settings",
    "ENV_FILES",
    "init_env_configuration",
    "get_decrypted",
    "resolve_env",
    "secret_key_name",
    "EnvFileStore",
    "SecretStore",
    "CodecResult",
    "encode_lines",
    "encrypt_lines",
]
