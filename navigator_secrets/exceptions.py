"""Navigator Secrets exceptions.

Every error raised by the store, the key derivation helpers and the cipher
derives from :class:`SecretsError`, so callers can catch the whole family
at once or a single kind.
"""


class SecretsError(Exception):
    """Base class for all secret store errors."""


class NotFoundError(SecretsError, FileNotFoundError):
    """Referenced secrets file does not exist."""


class StoreIOError(SecretsError, OSError):
    """Open, read, write or permission failure on a secrets file."""


class ParseError(SecretsError, ValueError):
    """Malformed JSON, malformed base64 or an unexpected document shape."""


class CryptoError(SecretsError):
    """Authentication/decryption failure or unavailable random source.

    Decryption failures never say why verification failed (wrong key,
    wrong nonce or tampered data look the same).
    """


class InvalidKeyLength(SecretsError, ValueError):
    """Encryption key has the wrong size for the cipher."""


class InvalidNonceLength(SecretsError, ValueError):
    """Nonce has the wrong size for the cipher."""
