"""
Secret Import - Best-effort loading of many secret files into one store.

Every ``SecretStore.load_*`` call is all-or-nothing and raises on failure.
``import_files`` is the batch counterpart for tooling that wants to pull in
whatever it can: each file is loaded on its own, and a file that fails is
logged and skipped instead of aborting the whole import.

Security Note:
    Only paths and error kinds are logged, never secret values.
"""
import os
import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Optional, Union

from .exceptions import NotFoundError, SecretsError
from .store import SecretStore

logger = logging.getLogger("navigator.secrets")


def is_dotenv_file(path: Path) -> bool:
    """``.env``, ``.env.local``, ``prod.env`` and friends."""
    return path.name.startswith(".env") or path.suffix == ".env"


def import_files(
    store: SecretStore,
    paths: Iterable[Union[str, os.PathLike]],
    *,
    key: Optional[bytes] = None,
) -> dict:
    """Load every file in ``paths`` into ``store``, skipping failures.

    Dotenv-style files go through ``load_from_dotenv_file``. Any other file
    is read as JSON: decrypted with ``key`` when one is given, plaintext
    otherwise. Files are applied in order, so later files overwrite
    same-named secrets from earlier ones.

    Args:
        store: Store receiving the secrets.
        paths: Files to import.
        key: Optional 32-byte key for encrypted JSON files.

    Returns:
        Stats dict with keys: total, loaded, errors, skipped (missing files).
    """
    stats = {"total": 0, "loaded": 0, "errors": 0, "skipped": 0}

    for item in paths:
        path = Path(item)
        stats["total"] += 1
        try:
            if is_dotenv_file(path):
                store.load_from_dotenv_file(path)
            elif key is not None:
                store.load_encrypted_from_file(path, key)
            else:
                store.load_from_file(path)
            stats["loaded"] += 1
        except NotFoundError:
            logger.warning("Skipping missing secrets file %s", path)
            stats["skipped"] += 1
        except SecretsError as err:
            logger.error(
                "Failed to import secrets file %s (%s): %s",
                path, type(err).__name__, err,
            )
            stats["errors"] += 1

    logger.info("Secret import complete: %s", stats)
    return stats
