"""Secrets Vault - Key derivation and authenticated encryption.

Security Note (Threat Model):
    Derived keys and decrypted secrets live in process memory while in use.
    A memory dump of the application process could expose them.
    Callers should keep raw key bytes and passwords in narrow scopes; memory
    zeroing is not attempted here.
"""

from .config import VaultConfig
from .crypto import SecretEnvelope, decrypt, encrypt, generate_nonce
from .kdf import (
    decode_key,
    derive,
    derive_with_defaults,
    derive_with_salt,
    encode_key,
    generate_key,
    generate_salt,
)

__all__ = [
    "VaultConfig",
    "SecretEnvelope",
    "encrypt",
    "decrypt",
    "generate_nonce",
    "derive",
    "derive_with_defaults",
    "derive_with_salt",
    "generate_salt",
    "generate_key",
    "encode_key",
    "decode_key",
]
