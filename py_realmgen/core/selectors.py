"""
Read-only queries over a validated world map.

Tile and entity lookups used by renderers and tooling. None of these
functions mutate the map; out-of-range inputs resolve to None (or -1 inside
per-tile arrays) instead of raising.
"""

from typing import Optional, Sequence, Tuple

import numpy as np

from .world_map import (
    Character,
    GridSpec,
    Hierarchy,
    MapLevel,
    MapMode,
    Title,
    TitleKey,
    TitleRank,
    WorldMapData,
)

NO_ENTITY = -1


def get_tile_count(grid: GridSpec) -> int:
    return grid.tile_count


def _is_index(value) -> bool:
    """Python or numpy integer; bools are not indices."""
    return isinstance(value, (int, np.integer)) and not isinstance(value, bool)


def is_valid_tile_id(tile_id: int, grid: GridSpec) -> bool:
    return _is_index(tile_id) and 0 <= tile_id < grid.tile_count


def tile_id_to_coord(tile_id: int, grid: GridSpec) -> Tuple[int, int]:
    """Row-major tile id to (x, y)."""
    return tile_id % grid.width, tile_id // grid.width


def coord_to_tile_id(x: int, y: int, grid: GridSpec) -> Optional[int]:
    """(x, y) to row-major tile id, or None for non-integer or outside coordinates."""
    if not (_is_index(x) and _is_index(y)):
        return None
    if not (0 <= x < grid.width and 0 <= y < grid.height):
        return None
    return int(y) * grid.width + int(x)


def get_hierarchy_by_mode(data: WorldMapData, mode: MapMode) -> Hierarchy:
    return data.hierarchy(mode)


def _lookup(values: Sequence[int], index: int) -> Optional[int]:
    if 0 <= index < len(values):
        return values[index]
    return None


def get_entity_id_for_tile(hierarchy: Hierarchy, tile_id: int, level: MapLevel) -> Optional[int]:
    """Walk tile -> county -> duchy -> kingdom up to ``level``."""
    county_id = _lookup(hierarchy.tile_to_county, tile_id)
    if county_id is None or level is TitleRank.COUNTY:
        return county_id

    duchy_id = _lookup(hierarchy.county_to_duchy, county_id)
    if duchy_id is None or level is TitleRank.DUCHY:
        return duchy_id

    return _lookup(hierarchy.duchy_to_kingdom, duchy_id)


def resolve_entity_id(
    data: WorldMapData, mode: MapMode, level: MapLevel, tile_id: int
) -> Optional[int]:
    """
    Entity owning a tile at ``level`` under ``mode``.

    Args:
        data: Validated world map
        mode: Governance mode
        level: Display level
        tile_id: Row-major tile id

    Returns:
        Entity index, or None for an invalid tile id
    """
    if not is_valid_tile_id(tile_id, data.grid):
        return None
    return get_entity_id_for_tile(data.hierarchy(mode), int(tile_id), level)


def _chain(indices: np.ndarray, mapping: Sequence[int]) -> np.ndarray:
    """Map ``indices`` through ``mapping``, carrying -1 for unresolved entries."""
    table = np.append(np.asarray(mapping, dtype=np.int64), NO_ENTITY)
    valid = (indices >= 0) & (indices < len(mapping))
    return table[np.where(valid, indices, len(mapping))]


def build_active_entity_by_tile(data: WorldMapData, mode: MapMode, level: MapLevel) -> np.ndarray:
    """
    Entity index for every tile at ``level`` under ``mode``.

    Returns:
        Integer array of length tile count; -1 marks unresolved tiles
    """
    hierarchy = data.hierarchy(mode)
    entity_by_tile = np.asarray(hierarchy.tile_to_county, dtype=np.int64).copy()
    if level is TitleRank.COUNTY:
        return entity_by_tile

    entity_by_tile = _chain(entity_by_tile, hierarchy.county_to_duchy)
    if level is TitleRank.DUCHY:
        return entity_by_tile

    return _chain(entity_by_tile, hierarchy.duchy_to_kingdom)


def get_entity_name(hierarchy: Hierarchy, level: MapLevel, entity_id: Optional[int]) -> Optional[str]:
    """Display name of an entity, or None for a missing or out-of-range id."""
    if entity_id is None:
        return None
    names = hierarchy.names_for(level)
    if not 0 <= entity_id < len(names):
        return None
    return names[entity_id]


def get_title(data: WorldMapData, key: TitleKey) -> Optional[Title]:
    if data.titles is None:
        return None
    for title in data.titles:
        if title.key == key:
            return title
    return None


def get_character(data: WorldMapData, character_id: int) -> Optional[Character]:
    if data.characters is None:
        return None
    for character in data.characters:
        if character.id == character_id:
            return character
    return None


def get_holder(data: WorldMapData, key: TitleKey) -> Optional[Character]:
    """Character holding the title, or None for maps without titles."""
    title = get_title(data, key)
    if title is None:
        return None
    return get_character(data, title.holder_character_id)
