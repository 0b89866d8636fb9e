"""
Exceptions for envseal
Everything raised on purpose derives from EnvSealError so callers have one catch-all
"""


class EnvSealError(Exception):
    # general container for errors
    pass


class RandomnessUnavailableError(EnvSealError):
    # raised when the OS secure random source cannot supply bytes
    pass


class CryptoError(EnvSealError):
    # raised when a single encrypt/decrypt operation fails
    pass


class EmptyInputError(CryptoError):
    # raised when an envelope (or value to encrypt) is empty
    pass


class InvalidEnvelopeFormatError(CryptoError):
    # raised when envelope text cannot be parsed into salt:iv:cipherText:mac
    pass


class MacVerificationError(CryptoError):
    # raised on a MAC mismatch (tampered envelope or wrong key)
    pass


class DecryptionError(CryptoError):
    # raised on bad padding or non UTF-8 plaintext after a good MAC
    pass


class EmptyPlaintextError(CryptoError):
    # raised when a MAC-valid envelope decrypts to nothing
    pass


class ConfigError(EnvSealError):
    # raised for problems with configuration files or settings
    pass


class InvalidInputError(ConfigError, TypeError):
    # raised when the codec is handed something other than a sequence of str
    pass


class EmptyFileError(ConfigError):
    # raised when every line of a configuration file is blank
    pass


class MalformedLineError(ConfigError):
    """A configuration line without ``=``.

    The codec collects these instead of raising them.
    """

    def __init__(self, line_number: int, line: str):
        self.line_number = line_number
        self.line = line
        super().__init__(
            f"Line {line_number} doesn't contain any variables or has invalid format: {line}"
        )


class MissingSecretKeyError(ConfigError):
    # raised when no master secret is available
    pass


class UnknownEnvironmentError(ConfigError):
    # raised when ENV names an environment we have no file for
    pass


class KeystoreError(EnvSealError, RuntimeError):
    # raised when the OS keystore is unavailable or refuses the key
    pass


class MissingVariableError(ConfigError):
    # raised when a requested environment variable is not set
    pass
