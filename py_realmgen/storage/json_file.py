"""
JSON file persistence for world maps.

Maps are written in their wire form (camelCase keys, string ids) and are
always re-validated on load; a file is never trusted just because this
package wrote it.
"""

import json
from pathlib import Path
from typing import Union

import structlog

from ..core.validation import validate_world_map_data
from ..core.world_map import WorldMapData

logger = structlog.get_logger()

PathLike = Union[str, Path]


def save_world_map(path: PathLike, data: WorldMapData, indent: int = 2) -> Path:
    """
    Write a world map as indented JSON with a trailing newline.

    Parent directories are created as needed.

    Args:
        path: Output file
        data: Map to write
        indent: JSON indentation

    Returns:
        The resolved output path
    """
    output = Path(path)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(data.to_json(indent=indent) + "\n", encoding="utf-8")

    logger.info("World map saved", path=str(output), version=data.version, seed=data.grid.seed)
    return output


def load_world_map(path: PathLike) -> WorldMapData:
    """
    Read and validate a world map file.

    Raises:
        FileNotFoundError: If the file does not exist
        json.JSONDecodeError: If the file is not valid JSON
        MapValidationError: If the payload violates a map invariant
    """
    source = Path(path)
    with source.open("r", encoding="utf-8") as f:
        raw = json.load(f)

    data = validate_world_map_data(raw)
    logger.info("World map loaded", path=str(source), version=data.version, seed=data.grid.seed)
    return data
