"""
Configuration tests - environment driven settings and store factory.
"""

import pytest

from profilebook.core import config
from profilebook.core.storage import InMemoryKeyValueStore, SqliteKeyValueStore


class TestConfig:
    """Test configuration accessors."""

    def test_defaults(self):
        assert config.PROFILE_KEY == "myProfile"
        assert config.CONNECTIONS_KEY == "savedConnections"

    def test_memory_backend(self, monkeypatch):
        monkeypatch.setenv("STORAGE_BACKEND", "memory")
        monkeypatch.setenv("STORAGE_QUOTA_BYTES", "1234")
        store = config.get_store()
        assert isinstance(store, InMemoryKeyValueStore)
        assert store.quota_bytes == 1234

    def test_sqlite_backend(self, monkeypatch, tmp_path):
        monkeypatch.setenv("STORAGE_BACKEND", "sqlite")
        monkeypatch.setenv("DB_PATH", str(tmp_path / "nested" / "p.db"))
        store = config.get_store()
        assert isinstance(store, SqliteKeyValueStore)
        assert (tmp_path / "nested" / "p.db").exists()

    def test_validate_config_clean(self, monkeypatch):
        monkeypatch.setenv("STORAGE_BACKEND", "sqlite")
        monkeypatch.setenv("EDIT_STRATEGY", "label")
        monkeypatch.setenv("STORAGE_QUOTA_BYTES", "100")
        assert config.validate_config() == []

    @pytest.mark.parametrize("name,value,message", [
        ("STORAGE_BACKEND", "redis", "Invalid STORAGE_BACKEND"),
        ("EDIT_STRATEGY", "guess", "Invalid EDIT_STRATEGY"),
        ("STORAGE_QUOTA_BYTES", "0", "STORAGE_QUOTA_BYTES must be >= 1"),
    ])
    def test_validate_config_issues(self, monkeypatch, name, value, message):
        monkeypatch.setenv(name, value)
        issues = config.validate_config()
        assert any(message in issue for issue in issues)
