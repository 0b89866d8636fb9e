"""
EncryptionManager: the one place that ties keys, files and the codec together.

Everything below this layer raises and never logs failures; this layer logs
each failure once, with the operation name, and re-raises it unchanged.
"""

from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from typing import Iterator, Optional

from envseal.config.codec import CodecResult, encode_lines, log_line_errors
from envseal.config.environments import secret_key_name
from envseal.config.settings import Settings
from envseal.config.store import EnvFileStore, SecretStore
from envseal.core.exceptions import EnvSealError, KeystoreError, MissingSecretKeyError
from envseal.security import keystore
from envseal.security.crypto import decrypt
from envseal.security.kdf import DEFAULT_KDF_PARAMS, KdfParams
from envseal.security.keygen import DEFAULT_KEY_BITS, generate_key
from envseal.security.secret import SecretKey, SecretLike


logger = logging.getLogger(__name__)


@contextmanager
def _boundary(method: str, message: str) -> Iterator[None]:
    try:
        yield
    except (EnvSealError, OSError) as e:
        logger.error("[Method: %s] %s: %s: %s", method, message, type(e).__name__, e)
        raise


class EncryptionManager:
    """
    Key generation, file encryption and on-demand decryption over one store.

    The manager never keeps a master secret: every method that needs one takes
    it as an argument.
    """

    def __init__(self, store: Optional[SecretStore] = None, settings: Optional[Settings] = None):
        self.settings = settings or Settings.from_env()
        self.store: SecretStore = store or EnvFileStore(self.settings.env_dir)

    # ------------------------------------------------------------------
    # Keys
    # ------------------------------------------------------------------

    def generate_and_store_key(
        self,
        key_name: str,
        length_bits: int = DEFAULT_KEY_BITS,
        use_keyring: bool = False,
    ) -> str:
        """
        Generate a master secret and persist it under ``key_name``.

        By default it is written to the base ``.env``; with ``use_keyring``
        it goes to the OS keystore instead and never touches disk.
        """
        with _boundary("generate_and_store_key", "Failed to generate and store secret key"):
            secret = generate_key(length_bits)
            if use_keyring:
                keystore.save_key(self.settings.keyring_service, key_name, secret)
                logger.info("%s stored in OS keystore (service=%s)", key_name, self.settings.keyring_service)
            else:
                self.store.store_key(key_name, secret)
            return secret

    def resolve_secret(self, env: str) -> SecretKey:
        """
        Find the master secret for ``env``.

        Lookup order: process environment, base ``.env``, OS keystore.
        """
        key_name = secret_key_name(env)
        with _boundary("resolve_secret", f"Failed to get secret key {key_name}"):
            value = os.environ.get(key_name) or self.store.get_key_value(key_name)
            if not value:
                try:
                    value = keystore.load_key(self.settings.keyring_service, key_name)
                except KeystoreError as e:
                    logger.debug("keystore lookup for %s skipped: %s", key_name, e)
            if not value:
                raise MissingSecretKeyError(f"Key {key_name} not found in environment, .env file or keystore")
            return SecretKey(value)

    # ------------------------------------------------------------------
    # Files and values
    # ------------------------------------------------------------------

    def encrypt_environment_variables(
        self,
        env_file: str,
        secret: SecretLike,
        params: KdfParams = DEFAULT_KDF_PARAMS,
        skip_encrypted: bool = False,
    ) -> CodecResult:
        """Encrypt every value in ``env_file`` and write the result back."""
        with _boundary("encrypt_environment_variables", f"Failed to encrypt environment variables in {env_file}"):
            lines = self.store.read_lines(env_file)
            result = encode_lines(lines, secret, params, skip_encrypted=skip_encrypted)
            log_line_errors(result)
            self.store.write_lines(env_file, result.lines)
            logger.info(
                "Encryption complete. Successfully encrypted %d variable(s) in the %s file.",
                result.encrypted_count,
                env_file,
            )
            return result

    def decrypt_value(
        self,
        envelope_text: str,
        secret: SecretLike,
        params: KdfParams = DEFAULT_KDF_PARAMS,
    ) -> str:
        with _boundary("decrypt_value", "Failed to decrypt text"):
            return decrypt(envelope_text, secret, params)
