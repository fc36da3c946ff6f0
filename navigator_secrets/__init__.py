"""Navigator Secrets.

Thread-safe secret store with plaintext and encrypted-at-rest persistence.
"""
from .version import __version__
from .exceptions import (
    SecretsError,
    NotFoundError,
    StoreIOError,
    ParseError,
    CryptoError,
    InvalidKeyLength,
    InvalidNonceLength,
)
from .store import SecretStore
from .importer import import_files
from .vault import VaultConfig

__all__ = [
    "__version__",
    "SecretStore",
    "import_files",
    "VaultConfig",
    "SecretsError",
    "NotFoundError",
    "StoreIOError",
    "ParseError",
    "CryptoError",
    "InvalidKeyLength",
    "InvalidNonceLength",
]
