"""envseal command line.

    envseal generate-key --env uat          # SECRET_KEY_UAT into envs/.env
    envseal encrypt --env uat               # encrypt values in envs/.env.uat
    envseal decrypt PORTAL_URL --env uat    # print one decrypted value
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from envseal.config.environments import env_file_for, get_decrypted, init_env_configuration, secret_key_name
from envseal.config.settings import Settings
from envseal.core.exceptions import EnvSealError
from envseal.manager import EncryptionManager
from envseal.security.keygen import DEFAULT_KEY_BITS

from .logging_config import configure_logging


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="envseal",
        description="Generate master keys and encrypt/decrypt values in .env files.",
    )
    parser.add_argument(
        "--env-dir",
        default=None,
        help="Directory holding the .env files (default: $ENVSEAL_ENV_DIR or envs)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    gen = sub.add_parser("generate-key", help="Generate and store a master secret")
    gen.add_argument("--env", default=None, help="Target environment: dev, uat or prod (default: $ENV)")
    gen.add_argument(
        "--bits",
        type=int,
        default=DEFAULT_KEY_BITS,
        help=f"Key length in bits (default: {DEFAULT_KEY_BITS})",
    )
    gen.add_argument(
        "--keyring",
        action="store_true",
        help="Store the key in the OS keystore instead of envs/.env",
    )

    enc = sub.add_parser("encrypt", help="Encrypt every value of an environment file")
    enc.add_argument("--env", default=None, help="Target environment: dev, uat or prod (default: $ENV)")
    enc.add_argument(
        "--skip-encrypted",
        action="store_true",
        help="Leave values that are already encrypted untouched",
    )

    dec = sub.add_parser("decrypt", help="Print the decrypted value of one variable")
    dec.add_argument("name", help="Variable name, e.g. PORTAL_URL")
    dec.add_argument("--env", default=None, help="Target environment: dev, uat or prod (default: $ENV)")

    return parser


def _settings_from_args(args: argparse.Namespace) -> Settings:
    settings = Settings.from_env()
    if args.env_dir:
        settings.env_dir = Path(args.env_dir)
    if args.env:
        settings.env = args.env.lower()
    if args.verbose:
        settings.log_level = "DEBUG"
    return settings


def cmd_generate_key(manager: EncryptionManager, args: argparse.Namespace) -> None:
    key_name = secret_key_name(manager.settings.env)
    manager.generate_and_store_key(key_name, length_bits=args.bits, use_keyring=args.keyring)
    print(f"Secret key {key_name} generated and saved successfully.")


def cmd_encrypt(manager: EncryptionManager, args: argparse.Namespace) -> None:
    env_file = env_file_for(manager.settings.env)
    with manager.resolve_secret(manager.settings.env) as secret:
        result = manager.encrypt_environment_variables(env_file, secret, skip_encrypted=args.skip_encrypted)
    print(f"Encrypted {result.encrypted_count} variable(s) in {env_file}.")
    if result.errors:
        print(f"Skipped {len(result.errors)} malformed line(s); see log for details.")


def cmd_decrypt(manager: EncryptionManager, args: argparse.Namespace) -> None:
    env = init_env_configuration(manager.settings)
    with manager.resolve_secret(env) as secret:
        print(get_decrypted(args.name, secret))


COMMANDS = {
    "generate-key": cmd_generate_key,
    "encrypt": cmd_encrypt,
    "decrypt": cmd_decrypt,
}


def main(argv: Optional[List[str]] = None) -> int:
    parser = _build_arg_parser()
    args = parser.parse_args(argv)

    settings = _settings_from_args(args)
    configure_logging(settings.log_level_value)

    try:
        manager = EncryptionManager(settings=settings)
        COMMANDS[args.command](manager, args)
    except (EnvSealError, OSError) as e:
        print(f"envseal {args.command}: {type(e).__name__}: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry
    raise SystemExit(main())
