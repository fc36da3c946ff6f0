"""
Vault Crypto Core - Authenticated encryption, envelopes and serialization.

Secrets at rest are protected with AES-256-GCM:
- ``encrypt(plaintext, key, nonce)`` → ciphertext with the 16-byte GCM tag appended
- ``SecretEnvelope`` → on-disk JSON ``{"nonce": <b64>, "secrets": <b64>}``

Security Note:
    Never log plaintext, ciphertext or key values.
    Nonces are random 96-bit and generated per encryption; a nonce must
    never be reused with the same key.
"""
import os
import base64
import binascii
import logging
from collections.abc import Mapping

import orjson
from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from pydantic import BaseModel, TypeAdapter, ValidationError

from ..exceptions import (
    CryptoError,
    InvalidKeyLength,
    InvalidNonceLength,
    ParseError,
)

logger = logging.getLogger("navigator.secrets")

NONCE_SIZE = 12  # 96-bit nonce
KEY_LENGTH = 32  # AES-256
TAG_SIZE = 16

_SECRET_MAP = TypeAdapter(dict[str, str])


# ---------------------------------------------------------------------------
# Authenticated encryption
# ---------------------------------------------------------------------------

def generate_nonce() -> bytes:
    """Return a fresh random 12-byte nonce.

    Raises:
        CryptoError: If the random source is unavailable.
    """
    try:
        return os.urandom(NONCE_SIZE)
    except (NotImplementedError, OSError) as err:
        raise CryptoError(f"Failed to generate nonce: {err}") from err


def encrypt(plaintext: bytes, key: bytes, nonce: bytes) -> bytes:
    """Encrypt ``plaintext`` with AES-256-GCM.

    Args:
        plaintext: Data to encrypt.
        key: 32-byte key.
        nonce: 12-byte nonce, unique for this key.

    Returns:
        Ciphertext with the authentication tag appended.

    Raises:
        InvalidKeyLength: If ``key`` is not 32 bytes.
        InvalidNonceLength: If ``nonce`` is not 12 bytes.
    """
    if len(key) != KEY_LENGTH:
        raise InvalidKeyLength(
            f"Encryption key must be {KEY_LENGTH} bytes, got {len(key)}"
        )
    if len(nonce) != NONCE_SIZE:
        raise InvalidNonceLength(
            f"Nonce must be {NONCE_SIZE} bytes, got {len(nonce)}"
        )
    return AESGCM(key).encrypt(nonce, plaintext, None)


def decrypt(ciphertext: bytes, key: bytes, nonce: bytes) -> bytes:
    """Decrypt and authenticate AES-256-GCM ciphertext.

    Every failure is reported the same way, whether the key, the nonce or
    the data is wrong.

    Raises:
        CryptoError: If the ciphertext does not authenticate.
    """
    if (
        len(key) != KEY_LENGTH
        or len(nonce) != NONCE_SIZE
        or len(ciphertext) < TAG_SIZE
    ):
        raise CryptoError("Failed to decrypt secrets: authentication failed")
    try:
        return AESGCM(key).decrypt(nonce, ciphertext, None)
    except InvalidTag as err:
        logger.debug(
            "AES-GCM authentication failed for %d-byte payload", len(ciphertext)
        )
        raise CryptoError(
            "Failed to decrypt secrets: authentication failed"
        ) from err


# ---------------------------------------------------------------------------
# Secret map serialization
# ---------------------------------------------------------------------------

def dump_secrets(secrets: Mapping[str, str], pretty: bool = False) -> bytes:
    """Serialize a flat name → value mapping to JSON bytes."""
    option = orjson.OPT_SORT_KEYS
    if pretty:
        option |= orjson.OPT_INDENT_2
    return orjson.dumps(dict(secrets), option=option)


def load_secrets(data: bytes) -> dict[str, str]:
    """Parse JSON bytes into a flat name → value mapping.

    Raises:
        ParseError: If ``data`` is not JSON, not a flat object of strings,
            or holds an empty name.
    """
    try:
        parsed = orjson.loads(data)
    except orjson.JSONDecodeError as err:
        raise ParseError(f"Invalid JSON: {err}") from err
    try:
        secrets = _SECRET_MAP.validate_python(parsed, strict=True)
    except ValidationError as err:
        raise ParseError(
            "Expected a flat JSON object of string values, "
            f"found {err.error_count()} invalid entries"
        ) from err
    if "" in secrets:
        raise ParseError("Secret names cannot be empty")
    return secrets


# ---------------------------------------------------------------------------
# On-disk envelope
# ---------------------------------------------------------------------------

def _b64decode(value: str, field: str) -> bytes:
    try:
        return base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError) as err:
        raise ParseError(f"Failed to decode {field}: {err}") from err


class SecretEnvelope(BaseModel):
    """Encrypted secrets file: base64 nonce and base64 ciphertext+tag."""

    nonce: str
    secrets: str

    model_config = {"strict": True}

    @classmethod
    def seal(cls, plaintext: bytes, key: bytes) -> "SecretEnvelope":
        """Encrypt ``plaintext`` under ``key`` with a fresh nonce."""
        nonce = generate_nonce()
        ciphertext = encrypt(plaintext, key, nonce)
        return cls(
            nonce=base64.b64encode(nonce).decode("ascii"),
            secrets=base64.b64encode(ciphertext).decode("ascii"),
        )

    def open(self, key: bytes) -> bytes:
        """Decode both fields and decrypt the payload.

        Raises:
            ParseError: If a field is not valid base64.
            CryptoError: If the payload does not authenticate.
        """
        nonce = _b64decode(self.nonce, "nonce")
        ciphertext = _b64decode(self.secrets, "encrypted data")
        return decrypt(ciphertext, key, nonce)

    def to_json(self) -> bytes:
        return orjson.dumps(self.model_dump(), option=orjson.OPT_INDENT_2)

    @classmethod
    def from_json(cls, data: bytes) -> "SecretEnvelope":
        """Parse the envelope document.

        Raises:
            ParseError: If the document is not JSON or misses a field.
        """
        try:
            return cls.model_validate(orjson.loads(data))
        except orjson.JSONDecodeError as err:
            raise ParseError(f"Invalid encrypted secrets file: {err}") from err
        except ValidationError as err:
            raise ParseError(
                f"Invalid encrypted secrets envelope: {err.error_count()} "
                "invalid field(s)"
            ) from err
