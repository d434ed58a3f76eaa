"""
Reading map exports from disk.

A map export is the JSON file produced by Kumu (or written by hand): an object
with "elements" and "connections" arrays plus anything else the tool adds.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Union

from evidence_map.graph_builder import GraphDataError

logger = logging.getLogger(__name__)


def load_map_file(path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load a map export (elements + connections) from a JSON file.

    Only the "elements" and "connections" arrays are returned; everything
    else in the export (maps, perspectives, ...) is ignored.

    Raises:
        GraphDataError: if the file cannot be read or is not valid JSON.
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise GraphDataError(f"Could not load map data from {path}: {e}") from e

    if not isinstance(data, dict):
        raise GraphDataError(f"Map data in {path} must be a JSON object")

    logger.info(f"Loaded map data from {path}")
    return {
        "elements": data.get("elements"),
        "connections": data.get("connections"),
    }
