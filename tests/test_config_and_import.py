"""
Tests for VaultConfig and the best-effort batch importer.
"""
import logging

import orjson
import pytest
from pydantic import ValidationError

from navigator_secrets import SecretStore, VaultConfig, import_files
from navigator_secrets.importer import is_dotenv_file
from navigator_secrets.vault import generate_key


# --- Test Fixtures ---

@pytest.fixture(autouse=True)
def clear_env(monkeypatch):
    """Ensure tests start without SECRETS_* overrides."""
    for name in (
        "SECRETS_KDF_ITERATIONS",
        "SECRETS_SALT_LENGTH",
        "SECRETS_KEY_LENGTH",
        "SECRETS_ENV_PREFIX",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def secret_files(tmp_path):
    """A plain JSON file, a dotenv file and a broken JSON file."""
    plain = tmp_path / "secret.json"
    plain.write_bytes(orjson.dumps({"API_KEY": "from-json", "SHARED": "json"}))
    dotenv = tmp_path / ".env"
    dotenv.write_text("TOKEN=from-env\nSHARED=dotenv\n", encoding="utf-8")
    broken = tmp_path / "broken.json"
    broken.write_text("{oops", encoding="utf-8")
    return plain, dotenv, broken


# --- Configuration ---

class TestVaultConfig:
    """Tests for validated settings."""

    def test_defaults(self):
        config = VaultConfig()
        assert config.iterations == 10000
        assert config.env_prefix == ""
        assert config.file_mode == 0o600

    def test_from_env_overrides(self, monkeypatch):
        """SECRETS_* variables override defaults with type coercion."""
        monkeypatch.setenv("SECRETS_KDF_ITERATIONS", "600000")
        monkeypatch.setenv("SECRETS_ENV_PREFIX", "APP_")
        config = VaultConfig.from_env()
        assert config.iterations == 600000
        assert config.env_prefix == "APP_"
        assert config.salt_length == 16

    def test_from_env_without_overrides(self):
        assert VaultConfig.from_env() == VaultConfig()

    @pytest.mark.parametrize("field", ["iterations", "salt_length", "key_length"])
    def test_rejects_non_positive(self, field):
        with pytest.raises(ValidationError):
            VaultConfig(**{field: 0})

    def test_rejects_invalid_env_value(self, monkeypatch):
        monkeypatch.setenv("SECRETS_KDF_ITERATIONS", "many")
        with pytest.raises(ValidationError):
            VaultConfig.from_env()

    @pytest.mark.parametrize("mode", [0o644, 0o640, 0o604, 0o666])
    def test_rejects_shared_file_modes(self, mode):
        """Secrets files may only be accessible to their owner."""
        with pytest.raises(ValidationError):
            VaultConfig(file_mode=mode)

    def test_accepts_owner_read_only(self):
        assert VaultConfig(file_mode=0o400).file_mode == 0o400


# --- Batch import ---

class TestImportFiles:
    """Tests for skip-and-log batch imports."""

    def test_detects_dotenv_names(self, tmp_path):
        assert is_dotenv_file(tmp_path / ".env")
        assert is_dotenv_file(tmp_path / ".env.local")
        assert is_dotenv_file(tmp_path / "prod.env")
        assert not is_dotenv_file(tmp_path / "secret.json")

    def test_loads_good_files_and_skips_bad(self, secret_files, tmp_path, caplog):
        """Broken and missing files are logged; the rest are merged in order."""
        plain, dotenv, broken = secret_files
        store = SecretStore()

        with caplog.at_level(logging.WARNING, logger="navigator.secrets"):
            stats = import_files(
                store, [plain, broken, tmp_path / "missing.json", dotenv]
            )

        assert stats == {"total": 4, "loaded": 2, "errors": 1, "skipped": 1}
        assert store.get_all() == {
            "API_KEY": "from-json",
            "TOKEN": "from-env",
            "SHARED": "dotenv",
        }
        assert "broken.json" in caplog.text
        assert "ParseError" in caplog.text
        assert "missing.json" in caplog.text

    def test_encrypted_import(self, tmp_path):
        """With a key, JSON files are decrypted; wrong keys count as errors."""
        key = generate_key()
        source = SecretStore()
        source.set("DB_PASSWORD", "s3cret")
        good = tmp_path / "good.enc.json"
        source.save_encrypted_to_file(good, key)
        other = tmp_path / "other.enc.json"
        source.save_encrypted_to_file(other, generate_key())

        store = SecretStore()
        stats = import_files(store, [good, other], key=key)

        assert stats["loaded"] == 1
        assert stats["errors"] == 1
        assert store.get_all() == {"DB_PASSWORD": "s3cret"}

    def test_secret_values_not_logged(self, secret_files, caplog):
        plain, dotenv, broken = secret_files
        with caplog.at_level(logging.DEBUG, logger="navigator.secrets"):
            import_files(SecretStore(), [plain, dotenv, broken])
        assert "from-json" not in caplog.text
        assert "from-env" not in caplog.text

    def test_empty_batch(self):
        assert import_files(SecretStore(), []) == {
            "total": 0, "loaded": 0, "errors": 0, "skipped": 0,
        }
