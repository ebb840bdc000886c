"""
World map generation pipeline.

Orchestrates region growing, adjacency projection, perturbation and title
assignment into one deterministic WorldMapData for a seed and rank counts.

Process:
1. County base - tiles grown into counties, shared by both modes
2. De jure - counties grown into duchies, duchies into kingdoms
3. De facto - de jure assignments perturbed at a controlled ratio
4. Titles - holders assigned under the de facto hierarchy
"""

from typing import List, Optional, Sequence

import numpy as np
import structlog
from pydantic import BaseModel, Field, StrictInt, ValidationError

from ..utils.random import (
    CHARACTER_SALT,
    COUNTY_BASE_SALT,
    COUNTY_LEVEL_SALT,
    DE_FACTO_SALT,
    DE_JURE_SALT,
    DUCHY_LEVEL_SALT,
    KINGDOM_LEVEL_SALT,
    NAME_SALT,
)
from .errors import PreconditionError
from .grid_graph import (
    Adjacency,
    build_region_adjacency_from_tiles,
    build_tile_adjacency,
    project_adjacency,
)
from .name_generator import NameGenerator
from .perturbation import perturb_assignments, target_differences
from .region_growing import region_grow
from .titles import TitleAssignor
from .world_map import (
    DEFAULT_SEED,
    GridSpec,
    Hierarchy,
    MapVariant,
    TitleRank,
    WorldMapData,
)
from .xorshift_prng import salted_prng

logger = structlog.get_logger()

DEFAULT_COUNTY_COUNT = 320
DEFAULT_DUCHY_COUNT = 52
DEFAULT_KINGDOM_COUNT = 7

DEFACTO_COUNTY_DIFF_RATIO = 0.1
DEFACTO_DUCHY_DIFF_RATIO = 0.1


class WorldMapOptions(BaseModel):
    """World map generation options."""

    seed: StrictInt = Field(default=DEFAULT_SEED, description="Generation seed")
    county_count: StrictInt = Field(default=DEFAULT_COUNTY_COUNT, description="Number of counties")
    duchy_count: StrictInt = Field(default=DEFAULT_DUCHY_COUNT, description="Number of duchies")
    kingdom_count: StrictInt = Field(default=DEFAULT_KINGDOM_COUNT, description="Number of kingdoms")
    variant: MapVariant = Field(
        default=MapVariant.WITH_TITLES, description="Payload variant to produce"
    )
    county_diff_ratio: float = Field(
        default=DEFACTO_COUNTY_DIFF_RATIO,
        gt=0,
        le=1,
        description="Share of counties whose de facto duchy differs from de jure",
    )
    duchy_diff_ratio: float = Field(
        default=DEFACTO_DUCHY_DIFF_RATIO,
        gt=0,
        le=1,
        description="Share of duchies whose de facto kingdom differs from de jure",
    )


class CountyBase:
    """County layer shared by both governance modes."""

    def __init__(self, tile_to_county: List[int], county_adjacency: Adjacency, county_names: List[str]):
        self.tile_to_county = tile_to_county
        self.county_adjacency = county_adjacency
        self.county_names = county_names


class WorldMapBuilder:
    """Generates a complete world map from options."""

    def __init__(
        self, options: Optional[WorldMapOptions] = None, grid: Optional[GridSpec] = None
    ):
        """
        Initialize world map builder.

        Args:
            options: Generation options (seed, counts, variant, ratios)
            grid: Grid dimensions; the seed field is replaced by options.seed

        Raises:
            PreconditionError: If counts are non-positive or out of order
        """
        self.options = options or WorldMapOptions()
        base_grid = grid or GridSpec()
        self.grid = base_grid.model_copy(update={"seed": self.options.seed})
        self.names = NameGenerator()
        self._check_preconditions()

    def _check_preconditions(self) -> None:
        opts = self.options
        if opts.county_count <= 0 or opts.duchy_count <= 0 or opts.kingdom_count <= 0:
            raise PreconditionError("county/duchy/kingdom counts must be > 0")
        if opts.duchy_count > opts.county_count:
            raise PreconditionError("duchy_count must be <= county_count")
        if opts.kingdom_count > opts.duchy_count:
            raise PreconditionError("kingdom_count must be <= duchy_count")
        if opts.county_count > self.grid.tile_count:
            raise PreconditionError(
                f"county_count must be <= tile count ({self.grid.tile_count})"
            )

    def generate(self) -> WorldMapData:
        """
        Run the full generation pipeline.

        Returns:
            Generated WorldMapData
        """
        opts = self.options
        logger.info(
            "Starting world map generation",
            seed=opts.seed,
            counties=opts.county_count,
            duchies=opts.duchy_count,
            kingdoms=opts.kingdom_count,
            variant=opts.variant.value,
        )

        county_base = self._generate_county_base()
        de_jure = self._generate_de_jure(county_base)
        de_facto = self._generate_de_facto(county_base, de_jure)

        titles = None
        characters = None
        if opts.variant is MapVariant.WITH_TITLES:
            assignor = TitleAssignor(
                opts.seed,
                de_jure,
                de_facto,
                assignment_prng=salted_prng(opts.seed, CHARACTER_SALT),
                name_prng=salted_prng(opts.seed, NAME_SALT),
            )
            titles, characters = assignor.assign()

        data = WorldMapData(
            version=opts.variant.version,
            grid=self.grid,
            de_jure=de_jure,
            de_facto=de_facto,
            titles=titles,
            characters=characters,
        )

        logger.info(
            "World map generation complete",
            seed=opts.seed,
            county_diff_ratio=round(
                calculate_mode_difference_ratio(de_jure.county_to_duchy, de_facto.county_to_duchy), 4
            ),
        )
        return data

    def _generate_county_base(self) -> CountyBase:
        """Grow counties on the tile grid."""
        width, height = self.grid.width, self.grid.height
        tile_adjacency = build_tile_adjacency(width, height)

        prng = salted_prng(self.options.seed, COUNTY_BASE_SALT, COUNTY_LEVEL_SALT)
        tile_to_county = region_grow(
            self.grid.tile_count, self.options.county_count, prng, tile_adjacency
        )
        county_adjacency = build_region_adjacency_from_tiles(
            tile_to_county, self.options.county_count, width, height
        )

        logger.info("County base generated", tiles=self.grid.tile_count, counties=self.options.county_count)
        return CountyBase(
            tile_to_county,
            county_adjacency,
            self.names.entity_names(TitleRank.COUNTY, self.options.county_count),
        )

    def _generate_de_jure(self, county_base: CountyBase) -> Hierarchy:
        """Grow duchies on counties and kingdoms on duchies."""
        opts = self.options

        duchy_prng = salted_prng(opts.seed, DE_JURE_SALT, DUCHY_LEVEL_SALT)
        county_to_duchy = region_grow(
            opts.county_count, opts.duchy_count, duchy_prng, county_base.county_adjacency
        )
        duchy_adjacency = project_adjacency(
            county_base.county_adjacency, county_to_duchy, opts.duchy_count
        )

        kingdom_prng = salted_prng(opts.seed, DE_JURE_SALT, KINGDOM_LEVEL_SALT)
        duchy_to_kingdom = region_grow(
            opts.duchy_count, opts.kingdom_count, kingdom_prng, duchy_adjacency
        )

        logger.info("De jure hierarchy generated", duchies=opts.duchy_count, kingdoms=opts.kingdom_count)
        return Hierarchy(
            tile_to_county=list(county_base.tile_to_county),
            county_to_duchy=county_to_duchy,
            duchy_to_kingdom=duchy_to_kingdom,
            county_names=list(county_base.county_names),
            duchy_names=self.names.entity_names(TitleRank.DUCHY, opts.duchy_count),
            kingdom_names=self.names.entity_names(TitleRank.KINGDOM, opts.kingdom_count),
        )

    def _generate_de_facto(self, county_base: CountyBase, de_jure: Hierarchy) -> Hierarchy:
        """
        Perturb the de jure upper levels.

        Duchy adjacency is re-projected through the perturbed county mapping
        before the duchy -> kingdom perturbation, so kingdom moves follow the
        de facto duchy borders.
        """
        opts = self.options
        prng = salted_prng(opts.seed, DE_FACTO_SALT)

        county_to_duchy = perturb_assignments(
            de_jure.county_to_duchy,
            county_base.county_adjacency,
            opts.duchy_count,
            target_differences(opts.county_count, opts.county_diff_ratio),
            prng,
            label="countyToDuchy",
        )
        duchy_adjacency = project_adjacency(
            county_base.county_adjacency, county_to_duchy, opts.duchy_count
        )
        duchy_to_kingdom = perturb_assignments(
            de_jure.duchy_to_kingdom,
            duchy_adjacency,
            opts.kingdom_count,
            target_differences(opts.duchy_count, opts.duchy_diff_ratio),
            prng,
            label="duchyToKingdom",
        )

        logger.info("De facto hierarchy generated")
        return Hierarchy(
            tile_to_county=list(county_base.tile_to_county),
            county_to_duchy=county_to_duchy,
            duchy_to_kingdom=duchy_to_kingdom,
            county_names=list(county_base.county_names),
            duchy_names=list(de_jure.duchy_names),
            kingdom_names=list(de_jure.kingdom_names),
        )


def calculate_mode_difference_ratio(left: Sequence[int], right: Sequence[int]) -> float:
    """
    Fraction of positions at which two assignments differ.

    Raises:
        PreconditionError: If the arrays are empty or differ in length
    """
    if len(left) != len(right):
        raise PreconditionError("arrays must have the same length to compare")
    if len(left) == 0:
        raise PreconditionError("cannot compare empty arrays")
    return float(np.count_nonzero(np.asarray(left) != np.asarray(right))) / len(left)


def generate_world_map_data(
    seed: int = DEFAULT_SEED,
    county_count: int = DEFAULT_COUNTY_COUNT,
    duchy_count: int = DEFAULT_DUCHY_COUNT,
    kingdom_count: int = DEFAULT_KINGDOM_COUNT,
    variant: MapVariant = MapVariant.WITH_TITLES,
) -> WorldMapData:
    """
    Generate a world map.

    Args:
        seed: Integer generation seed
        county_count: Number of counties
        duchy_count: Number of duchies (<= county_count)
        kingdom_count: Number of kingdoms (<= duchy_count)
        variant: Whether to include titles and characters

    Returns:
        Generated WorldMapData

    Raises:
        PreconditionError: If the arguments are invalid
    """
    try:
        options = WorldMapOptions(
            seed=seed,
            county_count=county_count,
            duchy_count=duchy_count,
            kingdom_count=kingdom_count,
            variant=variant,
        )
    except ValidationError as exc:
        raise PreconditionError(f"invalid generation options: {exc}") from exc

    return WorldMapBuilder(options).generate()
