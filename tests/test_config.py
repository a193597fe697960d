"""Tests for coursecal.config."""

import pytest
import yaml

from coursecal.config import Config, EngineSettings, StoreSettings
from coursecal.exceptions import ValidationError
from coursecal.recurrence import OverlapPolicy


def test_config_missing_file(tmp_path):
    config = Config(tmp_path)
    assert config.get("engine.overlap_policy") is None
    assert config.get("engine.overlap_policy", "allow") == "allow"


def test_config_reads_nested_keys(tmp_path):
    (tmp_path / "config.yaml").write_text(
        yaml.dump({"engine": {"overlap_policy": "reject"}, "store": {"project_id": "demo"}})
    )
    config = Config(tmp_path)
    assert config.get("engine.overlap_policy") == "reject"
    assert config.get("store.project_id") == "demo"
    assert config.get("store.project_id.deeper") is None


def test_config_invalid_yaml(tmp_path):
    (tmp_path / "config.yaml").write_text("engine: [unclosed")
    assert Config(tmp_path).get("engine") is None


def test_config_set_persists(tmp_path):
    config_dir = tmp_path / "nested" / "coursecal"
    config = Config(config_dir)
    config.set("engine.default_duration_minutes", 45)

    saved = yaml.safe_load((config_dir / "config.yaml").read_text())
    assert saved == {"engine": {"default_duration_minutes": 45}}
    assert Config(config_dir).get("engine.default_duration_minutes") == 45


def test_config_dir_from_environment(tmp_path, monkeypatch):
    monkeypatch.setenv("COURSECAL_CONFIG_DIR", str(tmp_path))
    assert Config().config_file == tmp_path / "config.yaml"


def test_engine_settings_defaults(tmp_path):
    settings = EngineSettings.from_config(Config(tmp_path))
    assert settings == EngineSettings()
    assert settings.default_duration_minutes == 60
    assert settings.overlap_policy == "allow"
    assert settings.lecturer_cache_ttl is None
    assert settings.task_due_time == "23:59"


def test_engine_settings_from_file(tmp_path):
    (tmp_path / "config.yaml").write_text(
        yaml.dump(
            {
                "engine": {
                    "default_duration_minutes": "90",
                    "overlap_policy": "reject",
                    "lecturer_cache_ttl": 300,
                    "task_due_time": "17:00",
                }
            }
        )
    )
    settings = EngineSettings.from_config(Config(tmp_path))
    assert settings.default_duration_minutes == 90
    assert settings.overlap_policy == "reject"
    assert settings.lecturer_cache_ttl == 300.0
    assert settings.task_due_time == "17:00"


def test_store_settings_environment_wins(tmp_path, monkeypatch):
    (tmp_path / "config.yaml").write_text(
        yaml.dump({"store": {"project_id": "from-file", "database": "campus", "id_token": "file-token"}})
    )
    monkeypatch.setenv("COURSECAL_PROJECT_ID", "from-env")
    monkeypatch.delenv("COURSECAL_ID_TOKEN", raising=False)

    settings = StoreSettings.from_config(Config(tmp_path))

    assert settings.project_id == "from-env"
    assert settings.database == "campus"
    assert settings.id_token == "file-token"


def test_store_settings_unconfigured(tmp_path, monkeypatch):
    monkeypatch.delenv("COURSECAL_PROJECT_ID", raising=False)
    monkeypatch.delenv("COURSECAL_ID_TOKEN", raising=False)
    settings = StoreSettings.from_config(Config(tmp_path))
    assert settings.project_id is None
    assert settings.database == "(default)"


def test_engine_settings_overlap_policy_is_parsed(tmp_path):
    (tmp_path / "config.yaml").write_text(yaml.dump({"engine": {"overlap_policy": "reject"}}))
    settings = EngineSettings.from_config(Config(tmp_path))
    assert settings.overlap_policy is OverlapPolicy.REJECT


@pytest.mark.parametrize("value", ["deny", "Reject", "", 1])
def test_engine_settings_unknown_overlap_policy(tmp_path, value):
    (tmp_path / "config.yaml").write_text(yaml.dump({"engine": {"overlap_policy": value}}))
    with pytest.raises(ValidationError, match="engine.overlap_policy must be one of allow, reject"):
        EngineSettings.from_config(Config(tmp_path))


def test_engine_settings_rejects_unknown_policy_directly():
    with pytest.raises(ValidationError, match="'deny'"):
        EngineSettings(overlap_policy="deny")
