"""
Core world map generation functionality.
"""

from .errors import (
    EmptyHoldingsError,
    MapValidationError,
    PerturbationTargetError,
    PreconditionError,
    RealmGenError,
    RegionGrowthStuckError,
    ValidationErrorKind,
)
from .world_map import (
    Character,
    GridSpec,
    Hierarchy,
    MapLevel,
    MapMode,
    MapVariant,
    Title,
    TitleKey,
    TitleRank,
    WorldMapData,
)
from .xorshift_prng import XorShift32
from .world_builder import (
    WorldMapBuilder,
    WorldMapOptions,
    calculate_mode_difference_ratio,
    generate_world_map_data,
)
from .validation import validate_world_map_data
from .selectors import build_active_entity_by_tile, get_entity_name, resolve_entity_id

__all__ = ['EmptyHoldingsError', 'MapValidationError', 'PerturbationTargetError',
           'PreconditionError', 'RealmGenError', 'RegionGrowthStuckError', 'ValidationErrorKind',
           'Character', 'GridSpec', 'Hierarchy', 'MapLevel', 'MapMode', 'MapVariant',
           'Title', 'TitleKey', 'TitleRank', 'WorldMapData', 'XorShift32',
           'WorldMapBuilder', 'WorldMapOptions', 'calculate_mode_difference_ratio',
           'generate_world_map_data', 'validate_world_map_data',
           'build_active_entity_by_tile', 'get_entity_name', 'resolve_entity_id']
