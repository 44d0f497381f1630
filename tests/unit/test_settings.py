from __future__ import annotations

import pytest
import yaml
from pydantic import ValidationError

from pkgretire.config import Settings, SettingsModel, get_settings, load_validated_settings, reset_settings


def test_defaults():
    s = Settings()
    assert s.database.url == "sqlite:///data/pkgretire.db"
    assert s.retirement.owner_count_policy == "individuals_only"
    assert s.dispatcher.batch_size == 100
    assert s.storage.resolved_sparse_index_root().replace("\\", "/") == "data/storage/index"
    assert s.audit_enabled is True


def test_from_dict_overrides_sections():
    s = Settings.from_dict(
        {
            "database": {"url": "sqlite:///x.db", "timeout": 1.5},
            "retirement": {"owner_count_policy": "all_owners"},
            "storage": {"root": "/srv/blobs", "sparse_index_root": "/srv/index"},
            "audit_enabled": False,
        }
    )
    assert s.database.url == "sqlite:///x.db"
    assert s.database.timeout == 1.5
    assert s.retirement.owner_count_policy == "all_owners"
    assert s.storage.resolved_sparse_index_root() == "/srv/index"
    assert s.audit_enabled is False
    assert s.redis.port == 6379


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("PKGRETIRE_DB_URL", "sqlite:////tmp/env.db")
    monkeypatch.setenv("PKGRETIRE_REDIS_PORT", "6380")
    monkeypatch.setenv("PKGRETIRE_OWNER_COUNT_POLICY", "all_owners")
    monkeypatch.setenv("PKGRETIRE_RETIRE_TIMEOUT", "2.5")
    monkeypatch.setenv("PKGRETIRE_STORAGE_ROOT", "/srv/blobs")
    monkeypatch.setenv("PKGRETIRE_AUDIT_ENABLED", "false")

    s = Settings().load_environment_variables()
    assert s.database.url == "sqlite:////tmp/env.db"
    assert s.redis.port == 6380
    assert s.retirement.owner_count_policy == "all_owners"
    assert s.retirement.timeout_seconds == 2.5
    assert s.storage.root == "/srv/blobs"
    assert s.audit_enabled is False


def test_bad_numeric_env_is_ignored(monkeypatch):
    monkeypatch.setenv("PKGRETIRE_RETIRE_TIMEOUT", "soon")
    s = Settings().load_environment_variables()
    assert s.retirement.timeout_seconds == 10.0


def test_validated_settings_from_file(tmp_path):
    cfg = {
        "database": {"url": "sqlite:///file.db"},
        "dispatcher": {"batch_size": 5, "interval_seconds": 30},
        "unknown_section": {"ignored": True},
    }
    p = tmp_path / "config.yaml"
    p.write_text(yaml.safe_dump(cfg), encoding="utf-8")

    s = load_validated_settings(str(p))
    assert isinstance(s, Settings)
    assert s.database.url == "sqlite:///file.db"
    assert s.dispatcher.batch_size == 5
    assert s.dispatcher.interval_seconds == 30


def test_validated_settings_rejects_unknown_policy():
    with pytest.raises(ValidationError):
        SettingsModel(retirement={"owner_count_policy": "everyone"})


def test_validated_settings_rejects_non_positive_timeout():
    with pytest.raises(ValidationError):
        SettingsModel(database={"timeout": 0})


def test_get_settings_is_cached_and_reads_env(tmp_path, monkeypatch):
    p = tmp_path / "config.yaml"
    p.write_text(yaml.safe_dump({"redis": {"host": "redis.internal"}}), encoding="utf-8")
    monkeypatch.setenv("PKGRETIRE_CONFIG", str(p))
    monkeypatch.setenv("PKGRETIRE_LOG_LEVEL", "DEBUG")

    reset_settings()
    s = get_settings()
    assert s.redis.host == "redis.internal"
    assert s.logging.level == "DEBUG"
    assert get_settings() is s
