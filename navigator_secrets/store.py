"""
SecretStore - Thread-safe, in-memory storage for named secrets.

Provides the public API of Navigator Secrets:
- ``set(name, value)`` / ``get(name)`` / ``get_or_default(name, default)``
- ``get_all()`` - an independent snapshot of every secret
- ``load_from_env(prefix)`` / ``load_from_env_var(name)`` - process environment
- ``load_from_dotenv_file(path)`` - ``KEY=VALUE`` files
- ``load_from_file(path)`` / ``save_to_file(path)`` - plaintext JSON
- ``load_encrypted_from_file(path, key)`` / ``save_encrypted_to_file(path, key)``
  - encrypted JSON envelope

Every load is all-or-nothing: the source is read and parsed outside the
lock, and only a fully parsed mapping is merged into the store.

Security Note:
    Never log secret values or key material. Only log names, counts and
    paths.
"""
import os
import logging
import tempfile
import threading
from collections.abc import Mapping
from pathlib import Path
from typing import Optional, Union

from .exceptions import NotFoundError, StoreIOError
from .vault.config import VaultConfig
from .vault.crypto import SecretEnvelope, dump_secrets, load_secrets

logger = logging.getLogger("navigator.secrets")

PathLike = Union[str, os.PathLike]

_QUOTES = ("'", "\"")


def _read_bytes(path: Path, what: str) -> bytes:
    """Read a whole file, mapping OS errors onto store errors."""
    try:
        return path.read_bytes()
    except FileNotFoundError as err:
        raise NotFoundError(f"{what} does not exist: {path}") from err
    except OSError as err:
        raise StoreIOError(f"Failed to read {what} {path}: {err}") from err


def _write_private(path: Path, data: bytes, mode: int) -> None:
    """Atomically write ``data`` to ``path`` readable by the owner only.

    Parent directories are created as needed. The content goes to a
    temporary file in the same directory which then replaces ``path``.
    """
    tmp_name = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=path.parent, prefix=f".{path.name}.", suffix=".tmp"
        )
        with os.fdopen(fd, "wb") as handle:
            os.chmod(tmp_name, mode)
            handle.write(data)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_name, path)
        tmp_name = None
    except OSError as err:
        raise StoreIOError(f"Failed to write secrets file {path}: {err}") from err
    finally:
        if tmp_name is not None:
            try:
                os.unlink(tmp_name)
            except OSError:
                logger.debug("Could not remove temporary file %s", tmp_name)


def parse_dotenv(text: str) -> dict[str, str]:
    """Parse ``KEY=VALUE`` lines.

    Each line is split on the first ``=`` only; key and value are trimmed and
    a value wrapped in the same quote character on both ends loses those
    quotes. Nothing else is interpreted: ``#`` inside a value, backslashes
    and unbalanced quotes are kept as written.
    """
    secrets: dict[str, str] = {}
    for line in text.split("\n"):
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        key = key.strip()
        if not sep or not key:
            continue
        value = value.strip()
        if len(value) > 1 and value[0] in _QUOTES and value[0] == value[-1]:
            value = value[1:-1]
        secrets[key] = value
    return secrets


class SecretStore:
    """Concurrency-safe mapping of secret name → secret value.

    Instances are created empty and passed explicitly to whatever needs
    them; there is no module-level store. All mutations and snapshots
    happen under one lock, so readers see either the state before or after
    any single ``set`` or load, never half of it.
    """

    def __init__(self, config: Optional[VaultConfig] = None):
        self._config = config or VaultConfig()
        self._secrets: dict[str, str] = {}
        self._lock = threading.RLock()

    @property
    def config(self) -> VaultConfig:
        return self._config

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def set(self, name: str, value: str) -> None:
        """Insert or overwrite a secret.

        Raises:
            ValueError: If ``name`` is empty.
        """
        if not name:
            raise ValueError("Secret name cannot be empty")
        with self._lock:
            self._secrets[name] = value

    def get(self, name: str) -> tuple[str, bool]:
        """Return ``(value, found)``; ``("", False)`` when absent."""
        with self._lock:
            if name in self._secrets:
                return self._secrets[name], True
        return "", False

    def get_or_default(self, name: str, default: str) -> str:
        """Return the secret or ``default`` when it is not set."""
        value, found = self.get(name)
        return value if found else default

    def get_all(self) -> dict[str, str]:
        """Return a copy of every secret; changing it never affects the store."""
        with self._lock:
            return dict(self._secrets)

    def names(self) -> list[str]:
        with self._lock:
            return list(self._secrets)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._secrets

    def __len__(self) -> int:
        with self._lock:
            return len(self._secrets)

    def __repr__(self) -> str:
        return f"<SecretStore secrets={len(self)}>"

    def _merge(self, secrets: Mapping[str, str]) -> int:
        with self._lock:
            self._secrets.update(secrets)
        return len(secrets)

    # ------------------------------------------------------------------
    # Environment
    # ------------------------------------------------------------------

    def load_from_env(self, prefix: Optional[str] = None) -> int:
        """Load every environment variable starting with ``prefix``.

        ``PREFIX_NAME=value`` becomes the secret ``NAME``. The match is a
        case-sensitive plain prefix test; a variable named exactly
        ``prefix`` is ignored. Defaults to ``config.env_prefix``.

        Returns:
            Number of secrets loaded (zero is not an error).
        """
        if prefix is None:
            prefix = self._config.env_prefix
        found = {
            name[len(prefix):]: value
            for name, value in os.environ.items()
            if name.startswith(prefix) and len(name) > len(prefix)
        }
        count = self._merge(found)
        logger.debug("Loaded %d secret(s) from environment prefix %r", count, prefix)
        return count

    def load_from_env_var(self, name: str) -> bool:
        """Load a single environment variable under its own name.

        Returns:
            False if the variable is not set.
        """
        value = os.environ.get(name)
        if value is None:
            return False
        self.set(name, value)
        return True

    # ------------------------------------------------------------------
    # Dotenv
    # ------------------------------------------------------------------

    def load_from_dotenv_file(self, path: PathLike) -> int:
        """Load ``KEY=VALUE`` lines from a dotenv file.

        Blank lines, ``#`` comments and lines without ``=`` are skipped;
        quotes matched on both ends of a value are removed.

        Raises:
            NotFoundError: If the file does not exist.
            StoreIOError: If the file cannot be read.
        """
        path = Path(path)
        data = _read_bytes(path, "env file")
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError as err:
            raise StoreIOError(f"Failed to read env file {path}: {err}") from err
        count = self._merge(parse_dotenv(text))
        logger.debug("Loaded %d secret(s) from env file %s", count, path)
        return count

    # ------------------------------------------------------------------
    # Plain JSON
    # ------------------------------------------------------------------

    def load_from_file(self, path: PathLike) -> int:
        """Merge secrets from a flat JSON object file.

        Raises:
            NotFoundError: If the file does not exist.
            ParseError: If it is not a flat JSON object of strings.
            StoreIOError: On any other read failure.
        """
        path = Path(path)
        secrets = load_secrets(_read_bytes(path, "secrets file"))
        count = self._merge(secrets)
        logger.debug("Loaded %d secret(s) from %s", count, path)
        return count

    def save_to_file(self, path: PathLike) -> None:
        """Write every secret as indented JSON, owner read/write only.

        Raises:
            StoreIOError: If the file or its directory cannot be written.
        """
        path = Path(path)
        snapshot = self.get_all()
        _write_private(path, dump_secrets(snapshot, pretty=True), self._config.file_mode)
        logger.debug("Saved %d secret(s) to %s", len(snapshot), path)

    # ------------------------------------------------------------------
    # Encrypted JSON
    # ------------------------------------------------------------------

    def load_encrypted_from_file(self, path: PathLike, key: bytes) -> int:
        """Decrypt an envelope file with ``key`` and merge its secrets.

        Raises:
            NotFoundError: If the file does not exist.
            ParseError: If the envelope or the decrypted JSON is malformed.
            CryptoError: If decryption fails (wrong key or tampered file).
            StoreIOError: On any other read failure.
        """
        path = Path(path)
        envelope = SecretEnvelope.from_json(
            _read_bytes(path, "encrypted secrets file")
        )
        secrets = load_secrets(envelope.open(key))
        count = self._merge(secrets)
        logger.debug("Loaded %d encrypted secret(s) from %s", count, path)
        return count

    def save_encrypted_to_file(self, path: PathLike, key: bytes) -> None:
        """Encrypt every secret with ``key`` and a fresh nonce, then write.

        Raises:
            InvalidKeyLength: If ``key`` is not 32 bytes.
            CryptoError: If no nonce can be generated.
            StoreIOError: If the file cannot be written.
        """
        path = Path(path)
        snapshot = self.get_all()
        envelope = SecretEnvelope.seal(dump_secrets(snapshot), key)
        _write_private(path, envelope.to_json(), self._config.file_mode)
        logger.debug("Saved %d encrypted secret(s) to %s", len(snapshot), path)
