from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from stateslots.settings import EngineSettings, load_settings


def test_defaults_without_file():
    settings = load_settings()
    assert settings == EngineSettings()
    assert settings.app_name == "StateSlots"
    assert settings.serialize_slot_writes is True
    assert settings.data_dir is None


def test_missing_file_warns_and_uses_defaults(tmp_path, caplog):
    caplog.clear()
    settings = load_settings(tmp_path / "missing.yaml")
    assert settings == EngineSettings()
    assert any("not found" in rec.getMessage() for rec in caplog.records)


def test_yaml_file_is_loaded(tmp_path):
    path = tmp_path / "stateslots.yaml"
    path.write_text(
        yaml.safe_dump(
            {
                "app_name": "MyGame",
                "application_version": "1.4.0",
                "data_dir": str(tmp_path / "data"),
                "serialize_slot_writes": False,
                "log_level": "debug",
            }
        ),
        encoding="utf-8",
    )

    settings = load_settings(path)

    assert settings.app_name == "MyGame"
    assert settings.application_version == "1.4.0"
    assert settings.data_dir == Path(tmp_path / "data")
    assert settings.serialize_slot_writes is False
    assert settings.log_level == "DEBUG"


def test_environment_overrides_file(tmp_path, monkeypatch):
    path = tmp_path / "stateslots.yaml"
    path.write_text("application_version: '1.0'\n", encoding="utf-8")
    monkeypatch.setenv("STATESLOTS_APP_VERSION", "2.0")
    monkeypatch.setenv("STATESLOTS_DATA_DIR", str(tmp_path / "env"))
    monkeypatch.setenv("STATESLOTS_LOG_LEVEL", "warning")

    settings = load_settings(path)

    assert settings.application_version == "2.0"
    assert settings.data_dir == tmp_path / "env"
    assert settings.log_level == "WARNING"


@pytest.mark.parametrize("field, value", [("application_version", "  "), ("log_level", "LOUD")])
def test_invalid_values_are_rejected(field, value):
    with pytest.raises(ValidationError):
        EngineSettings(**{field: value})


def test_non_mapping_yaml_is_rejected(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_settings(path)
