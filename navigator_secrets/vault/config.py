"""
Vault Configuration - Key derivation defaults and validated settings.

Reads optional overrides from environment variables:
    SECRETS_KDF_ITERATIONS = <integer, PBKDF2 rounds>
    SECRETS_SALT_LENGTH = <integer, bytes>
    SECRETS_KEY_LENGTH = <integer, bytes>
    SECRETS_ENV_PREFIX = <prefix used by SecretStore.load_from_env>

Security Note:
    Never log key material or passwords. Only log lengths and counts.
"""
import os
import logging

from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger("navigator.secrets")

DEFAULT_ITERATIONS = 10000
DEFAULT_SALT_LENGTH = 16
DEFAULT_KEY_LENGTH = 32  # AES-256
DEFAULT_FILE_MODE = 0o600  # owner read/write only

_ENV_FIELDS = {
    "iterations": "SECRETS_KDF_ITERATIONS",
    "salt_length": "SECRETS_SALT_LENGTH",
    "key_length": "SECRETS_KEY_LENGTH",
    "env_prefix": "SECRETS_ENV_PREFIX",
}


class VaultConfig(BaseModel):
    """Validated secret store configuration.

    ``iterations`` defaults to 10,000 PBKDF2 rounds so that files written by
    earlier releases keep decrypting with the same password; raise it for new
    deployments and keep the value stable for the lifetime of a file.
    """

    iterations: int = Field(default=DEFAULT_ITERATIONS, ge=1)
    salt_length: int = Field(default=DEFAULT_SALT_LENGTH, ge=1)
    key_length: int = Field(default=DEFAULT_KEY_LENGTH, ge=1)
    env_prefix: str = Field(default="")
    file_mode: int = Field(default=DEFAULT_FILE_MODE)

    @field_validator("file_mode")
    @classmethod
    def validate_file_mode(cls, v: int) -> int:
        """Secrets files must never be readable by group or others."""
        if v & 0o077:
            raise ValueError(
                f"file_mode {oct(v)} grants access beyond the owner"
            )
        return v

    @classmethod
    def from_env(cls) -> "VaultConfig":
        """Create VaultConfig from SECRETS_* environment variables.

        Unset variables keep their defaults.

        Returns:
            Populated VaultConfig instance.
        """
        values = {
            field: os.environ[name]
            for field, name in _ENV_FIELDS.items()
            if name in os.environ
        }
        if values:
            logger.debug(
                "Vault config overrides from environment: %s", sorted(values)
            )
        return cls(**values)
