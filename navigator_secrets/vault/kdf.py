"""
Vault Key Derivation - Password stretching, salts and key encoding.

Turns a human password plus a salt into a fixed-length symmetric key using
PBKDF2 with HMAC-SHA256. The salt is not secret and must be stored by the
caller next to (never together with) the data it protects; the derived key
is never persisted.

Security Note:
    Never log passwords, salts or key bytes.
"""
import os
import base64
import binascii
import logging
from typing import Optional

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from ..exceptions import CryptoError, ParseError
from .config import VaultConfig, DEFAULT_KEY_LENGTH

logger = logging.getLogger("navigator.secrets")


def _random_bytes(length: int, purpose: str) -> bytes:
    """Read ``length`` bytes from the OS CSPRNG."""
    try:
        return os.urandom(length)
    except (NotImplementedError, OSError) as err:
        raise CryptoError(f"Failed to generate {purpose}: {err}") from err


def derive(password: str, salt: bytes, iterations: int, key_length: int) -> bytes:
    """Derive ``key_length`` bytes from a password using PBKDF2-HMAC-SHA256.

    Pure and deterministic: identical inputs always yield identical keys.

    Args:
        password: Human password (UTF-8 encoded before stretching).
        salt: Random salt bytes, usually from :func:`generate_salt`.
        iterations: Number of PBKDF2 rounds (>= 1).
        key_length: Length of the derived key in bytes.

    Returns:
        Derived key bytes.
    """
    logger.debug(
        "Deriving %d-byte key with %d PBKDF2 iteration(s)", key_length, iterations
    )
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=key_length,
        salt=salt,
        iterations=iterations,
    )
    return kdf.derive(password.encode("utf-8"))


def generate_salt(length: int) -> bytes:
    """Return ``length`` random bytes for use as a KDF salt.

    Raises:
        CryptoError: If the random source is unavailable.
    """
    return _random_bytes(length, "salt")


def generate_key(length: int = DEFAULT_KEY_LENGTH) -> bytes:
    """Generate a random raw encryption key (32 bytes for AES-256).

    For callers that manage a key directly instead of a password.

    Raises:
        CryptoError: If the random source is unavailable.
    """
    return _random_bytes(length, "encryption key")


def derive_with_defaults(
    password: str, config: Optional[VaultConfig] = None
) -> tuple[bytes, bytes]:
    """Generate a fresh salt and derive a key from ``password``.

    Args:
        password: Human password.
        config: Optional settings; defaults to ``VaultConfig()``.

    Returns:
        Tuple of (key, salt). Persist the salt to derive the key again.
    """
    config = config or VaultConfig()
    salt = generate_salt(config.salt_length)
    key = derive(password, salt, config.iterations, config.key_length)
    return key, salt


def derive_with_salt(
    password: str, salt: bytes, config: Optional[VaultConfig] = None
) -> bytes:
    """Derive a key using a previously generated and stored salt."""
    config = config or VaultConfig()
    return derive(password, salt, config.iterations, config.key_length)


def encode_key(key: bytes) -> str:
    """Encode raw key (or salt) bytes as standard base64 text."""
    return base64.b64encode(key).decode("ascii")


def decode_key(encoded: str) -> bytes:
    """Decode base64 text produced by :func:`encode_key`.

    Raises:
        ParseError: If ``encoded`` is not valid base64.
    """
    try:
        return base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as err:
        raise ParseError(f"Malformed base64 key: {err}") from err
