"""OS keystore integration using keyring for optional master-secret storage.

Master secrets produced by :func:`envseal.security.keygen.generate_key` are
already base64 text, so they are stored as-is under a service/account pair
(account = the secret's variable name, e.g. ``SECRET_KEY_UAT``). Use this only
for opt-in convenience storage; keyring does not promise hardware-backed
security on every platform.
"""
from typing import Optional

try:
    import keyring
    from keyring import errors as keyring_errors
except ImportError:
    keyring = None
    keyring_errors = None

from envseal.core.exceptions import KeystoreError


def _require_keyring():
    if keyring is None:
        raise KeystoreError("keyring package is not available; install keyring to use keystore features")


def assess_keyring_backend() -> tuple[bool, str]:
    """Return (is_secure, message) describing the current keyring backend.

    Heuristics are used because the `keyring` package exposes different backends
    across platforms. If `keyring` is not available this returns (False, reason).
    """
    if keyring is None:
        return False, "keyring package is not installed"

    try:
        backend = keyring.get_keyring()
    except keyring_errors.KeyringError as e:
        return False, f"failed to get keyring backend: {e}"

    name = backend.__class__.__name__
    priority = getattr(backend, "priority", None)

    insecure_indicators = ("Plaintext", "Uncrypted", "Simple", "File")
    if any(tok in name for tok in insecure_indicators):
        return False, f"insecure backend detected: {name}"

    if priority is not None and priority <= 0:
        return False, f"no suitable secure keyring backend available (priority={priority}, backend={name})"

    if "Win" in name or "Keychain" in name or "SecretService" in name or "KWallet" in name:
        return True, f"backend looks acceptable: {name} (priority={priority})"

    return True, f"unknown backend '{name}', treat with caution (priority={priority})"


def save_key(service: str, account: str, secret: str, force: bool = False) -> None:
    """Persist a master secret in the OS keystore under (service, account).

    Refuses backends that look insecure unless ``force`` is set.
    """
    _require_keyring()
    if not force:
        secure, msg = assess_keyring_backend()
        if not secure:
            raise KeystoreError(
                f"refusing to persist master key to OS keystore: {msg}; "
                "pass force=True to override if you understand the risk"
            )
    try:
        keyring.set_password(service, account, secret)
    except keyring_errors.KeyringError as e:
        raise KeystoreError(f"failed to store {account} in keystore: {e}") from e


def load_key(service: str, account: str) -> Optional[str]:
    """Load a master secret from the OS keystore; returns None when absent."""
    _require_keyring()
    try:
        return keyring.get_password(service, account)
    except keyring_errors.KeyringError as e:
        raise KeystoreError(f"failed to read {account} from keystore: {e}") from e


def delete_key(service: str, account: str) -> None:
    """Remove the secret from the OS keystore; a missing entry is not an error."""
    _require_keyring()
    try:
        keyring.delete_password(service, account)
    except keyring_errors.PasswordDeleteError:
        pass
    except keyring_errors.KeyringError as e:
        raise KeystoreError(f"failed to delete {account} from keystore: {e}") from e
