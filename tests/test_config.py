import json
import logging

import pytest

from evidence_map import config
from evidence_map.simulation import SimulationSettings


def write_config(path, data):
    path.write_text(json.dumps(data), encoding="utf-8")


@pytest.fixture
def config_file(tmp_path, monkeypatch):
    path = tmp_path / "config.json"
    monkeypatch.setattr(config, "get_config_path", lambda: path)
    monkeypatch.delenv(config.DATA_ENV_VAR, raising=False)
    monkeypatch.delenv(config.SEED_ENV_VAR, raising=False)
    return path


def test_missing_config_gives_defaults(config_file):
    settings = config.get_map_settings()

    assert config.load_config() == {}
    assert settings.data_path.name == "system-map.json"
    assert settings.seed is None
    assert (settings.width, settings.height) == (800, 600)
    assert settings.warm_start_ticks == 300
    assert settings.edge_style == 'straight'
    assert config.get_simulation_settings() == SimulationSettings()


def test_corrupt_config_is_ignored(config_file):
    config_file.write_text("{not json", encoding="utf-8")

    assert config.load_config() == {}


def test_file_settings_are_applied(config_file):
    write_config(config_file, {"seed": 3, "edge_style": "arc"})

    assert config.load_config() == {"seed": 3, "edge_style": "arc"}
    settings = config.get_map_settings()
    assert settings.seed == 3
    assert settings.edge_style == "arc"


def test_environment_wins_over_file(config_file, monkeypatch, tmp_path):
    write_config(config_file, {"data_path": "from-file.json", "seed": 1})
    monkeypatch.setenv(config.DATA_ENV_VAR, str(tmp_path / "env.json"))
    monkeypatch.setenv(config.SEED_ENV_VAR, "42")

    settings = config.get_map_settings()

    assert settings.data_path == tmp_path / "env.json"
    assert settings.seed == 42


def test_invalid_map_settings_are_ignored(config_file, caplog):
    write_config(config_file, {
        "seed": "abc",
        "width": -5,
        "warm_start_ticks": "many",
        "edge_style": "zigzag",
        "height": 900,
    })

    with caplog.at_level(logging.WARNING):
        settings = config.get_map_settings()

    assert settings.seed is None
    assert settings.width == 800
    assert settings.height == 900
    assert settings.warm_start_ticks == 300
    assert settings.edge_style == 'straight'
    assert "zigzag" in caplog.text


def test_simulation_overrides(config_file, caplog):
    write_config(config_file, {"simulation": {
        "link_distance": 120,
        "charge_strength": -150.5,
        "gravity": 3,
        "velocity_decay": "fast",
    }})

    with caplog.at_level(logging.WARNING):
        settings = config.get_simulation_settings()

    assert settings.link_distance == 120
    assert settings.charge_strength == -150.5
    assert settings.velocity_decay == SimulationSettings().velocity_decay
    assert "gravity" in caplog.text


def test_simulation_section_must_be_object(config_file):
    assert config.get_simulation_settings({"simulation": [1, 2]}) == SimulationSettings()
