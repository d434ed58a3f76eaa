"""
Configuration management for the evidence map.

Handles persistent configuration including:
- which map export to load, viewport size and edge style
- the layout seed and warm start length
- overrides for the simulation constants ("simulation" object)

Config is stored in config.json next to the executable/project root.
Environment variables (EVIDENCE_MAP_DATA, EVIDENCE_MAP_SEED) win over the file.
"""

import json
import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional

from evidence_map import constants
from evidence_map.paths import get_config_path, get_default_map_path
from evidence_map.render import EDGE_STYLES
from evidence_map.simulation import SimulationSettings

logger = logging.getLogger(__name__)

DATA_ENV_VAR = "EVIDENCE_MAP_DATA"
SEED_ENV_VAR = "EVIDENCE_MAP_SEED"


@dataclass(frozen=True)
class MapSettings:
    data_path: Path
    width: float = constants.CHART_WIDTH
    height: float = constants.CHART_HEIGHT
    seed: Optional[int] = None
    warm_start_ticks: int = constants.WARM_START_TICKS
    edge_style: str = 'straight'
    tick_interval: float = constants.TICK_INTERVAL


def load_config() -> dict:
    """Load configuration from config.json."""
    config_path = get_config_path()
    if config_path.exists():
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            logger.warning(f"Ignoring unreadable config {config_path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}
    return {}


def _parse_seed(value) -> Optional[int]:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        logger.warning(f"Ignoring invalid seed {value!r}")
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.warning(f"Ignoring invalid seed {value!r}")
        return None


def get_map_settings(config: Optional[dict] = None) -> MapSettings:
    """
    Resolve the map settings.

    Priority:
    1. Environment variables EVIDENCE_MAP_DATA / EVIDENCE_MAP_SEED
    2. Stored in config.json
    3. Defaults (data/system-map.json, unseeded)
    """
    if config is None:
        config = load_config()

    data_path = os.environ.get(DATA_ENV_VAR) or config.get("data_path")
    seed = os.environ.get(SEED_ENV_VAR)
    if seed is None:
        seed = config.get("seed")

    settings = MapSettings(
        data_path=Path(data_path) if data_path else get_default_map_path(),
        seed=_parse_seed(seed),
    )

    for key in ("width", "height", "tick_interval"):
        value = config.get(key)
        if value is None:
            continue
        if isinstance(value, (int, float)) and not isinstance(value, bool) and value > 0:
            settings = replace(settings, **{key: float(value)})
        else:
            logger.warning(f"Ignoring invalid {key} {value!r}")

    ticks = config.get("warm_start_ticks")
    if ticks is not None:
        if isinstance(ticks, int) and not isinstance(ticks, bool) and ticks >= 0:
            settings = replace(settings, warm_start_ticks=ticks)
        else:
            logger.warning(f"Ignoring invalid warm_start_ticks {ticks!r}")

    edge_style = config.get("edge_style")
    if edge_style is not None:
        if edge_style in EDGE_STYLES:
            settings = replace(settings, edge_style=edge_style)
        else:
            logger.warning(f"Ignoring unknown edge_style {edge_style!r}")

    return settings


def get_simulation_settings(config: Optional[dict] = None) -> SimulationSettings:
    """Default simulation settings with the "simulation" overrides from config.json applied."""
    if config is None:
        config = load_config()
    overrides = config.get("simulation") or {}
    if not isinstance(overrides, dict):
        logger.warning(f"Ignoring non-object simulation config: {overrides!r}")
        return SimulationSettings()

    known = set(SimulationSettings.field_names())
    accepted = {}
    for key, value in overrides.items():
        if key not in known:
            logger.warning(f"Ignoring unknown simulation setting {key!r}")
            continue
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            logger.warning(f"Ignoring non-numeric simulation setting {key}={value!r}")
            continue
        accepted[key] = float(value)
    return SimulationSettings(**accepted)
