"""Tests for the world map generation pipeline."""

import numpy as np
import pytest

from py_realmgen.core.errors import PreconditionError
from py_realmgen.core.world_builder import (
    WorldMapBuilder,
    WorldMapOptions,
    calculate_mode_difference_ratio,
    generate_world_map_data,
)
from py_realmgen.core.world_map import (
    CHUNK_SIZE,
    DEFAULT_SEED,
    MAP_HEIGHT,
    MAP_WIDTH,
    TILE_SIZE_PX,
    GridSpec,
    MapVariant,
    TitleRank,
)


class TestDefaultWorld:
    """Test the default seed 9527 map."""

    def test_grid(self, default_world):
        """Test that the grid uses the fixed 80x80 configuration and the default seed."""
        grid = default_world.grid
        assert (grid.width, grid.height) == (MAP_WIDTH, MAP_HEIGHT)
        assert grid.tile_size_px == TILE_SIZE_PX
        assert grid.chunk_size == CHUNK_SIZE
        assert grid.seed == DEFAULT_SEED
        assert default_world.version == 2

    def test_counts(self, default_world):
        """Test that both modes carry 320 counties, 52 duchies and 7 kingdoms."""
        for hierarchy in (default_world.de_jure, default_world.de_facto):
            assert len(hierarchy.tile_to_county) == 6400
            assert hierarchy.count_for(TitleRank.COUNTY) == 320
            assert hierarchy.count_for(TitleRank.DUCHY) == 52
            assert hierarchy.count_for(TitleRank.KINGDOM) == 7
        assert len(default_world.titles) == 320 + 52 + 7
        assert len(default_world.characters) == 320

    def test_non_empty_regions(self, default_world):
        """Test that every county, duchy and kingdom owns at least one member."""
        for hierarchy in (default_world.de_jure, default_world.de_facto):
            assert set(hierarchy.tile_to_county) == set(range(320))
            assert set(hierarchy.county_to_duchy) == set(range(52))
            assert set(hierarchy.duchy_to_kingdom) == set(range(7))

    def test_shared_county_base(self, default_world):
        """Test that both modes share the tile to county assignment and county names."""
        assert default_world.de_jure.tile_to_county == default_world.de_facto.tile_to_county
        assert default_world.de_jure.county_names == default_world.de_facto.county_names

    def test_names_shared_between_modes(self, default_world):
        """Test that duchy and kingdom names are identical across modes."""
        assert default_world.de_jure.duchy_names == default_world.de_facto.duchy_names
        assert default_world.de_jure.kingdom_names == default_world.de_facto.kingdom_names
        assert default_world.de_jure.county_names[0] == "County 1"

    def test_controlled_divergence(self, default_world):
        """Test that de facto reassigns ten percent of counties to another duchy."""
        de_jure, de_facto = default_world.de_jure, default_world.de_facto
        assert de_jure.county_to_duchy != de_facto.county_to_duchy
        ratio = calculate_mode_difference_ratio(de_jure.county_to_duchy, de_facto.county_to_duchy)
        assert 0.08 <= ratio <= 0.12
        assert ratio == pytest.approx(32 / 320)

    def test_duchy_divergence(self, default_world):
        """Test that de facto reassigns five duchies to another kingdom."""
        changed = np.count_nonzero(
            np.asarray(default_world.de_jure.duchy_to_kingdom)
            != np.asarray(default_world.de_facto.duchy_to_kingdom)
        )
        assert changed == 5

    def test_deterministic(self, default_world):
        """Test that the same seed and counts give byte-identical output."""
        again = generate_world_map_data(seed=DEFAULT_SEED)
        assert again.to_json() == default_world.to_json()

    def test_titles_ordered(self, default_world):
        """Test that titles are listed counties first, then duchies, then kingdoms."""
        ranks = [title.rank for title in default_world.titles]
        assert ranks == [TitleRank.COUNTY] * 320 + [TitleRank.DUCHY] * 52 + [TitleRank.KINGDOM] * 7


class TestOptions:
    """Test generation options and preconditions."""

    def test_defaults(self):
        """Test that default options produce the bundled map configuration."""
        options = WorldMapOptions()
        assert options.seed == 9527
        assert (options.county_count, options.duchy_count, options.kingdom_count) == (320, 52, 7)
        assert options.variant is MapVariant.WITH_TITLES

    @pytest.mark.parametrize(
        "counts",
        [
            (0, 1, 1),
            (10, 0, 1),
            (10, 5, 0),
            (10, 11, 1),
            (10, 5, 6),
            (6401, 10, 5),
        ],
    )
    def test_invalid_counts(self, counts):
        """Test that inconsistent counts are rejected before generation."""
        county_count, duchy_count, kingdom_count = counts
        with pytest.raises(PreconditionError):
            generate_world_map_data(
                county_count=county_count, duchy_count=duchy_count, kingdom_count=kingdom_count
            )

    def test_non_integer_seed(self):
        """Test that a string seed is rejected."""
        with pytest.raises(PreconditionError):
            generate_world_map_data(seed="9527")

    def test_grid_seed_follows_options(self):
        """Test that the grid records the options seed, not its own."""
        builder = WorldMapBuilder(WorldMapOptions(seed=11), GridSpec(seed=99))
        assert builder.grid.seed == 11


class TestSmallWorld:
    """Test the pipeline on a reduced grid."""

    @pytest.fixture
    def small_world(self):
        options = WorldMapOptions(seed=42, county_count=40, duchy_count=8, kingdom_count=3)
        return WorldMapBuilder(options, GridSpec(width=20, height=20)).generate()

    def test_shapes(self, small_world):
        """Test that a 20x20 grid yields arrays and titles of matching size."""
        assert small_world.grid.tile_count == 400
        assert len(small_world.de_jure.tile_to_county) == 400
        assert len(small_world.titles) == 51
        assert len(small_world.characters) == 40

    def test_divergence(self, small_world):
        """Test that the divergence ratio holds on a small grid."""
        ratio = calculate_mode_difference_ratio(
            small_world.de_jure.county_to_duchy, small_world.de_facto.county_to_duchy
        )
        assert ratio == pytest.approx(4 / 40)

    def test_different_seed_differs(self, small_world):
        """Test that a different seed changes the county layout."""
        options = WorldMapOptions(seed=43, county_count=40, duchy_count=8, kingdom_count=3)
        other = WorldMapBuilder(options, GridSpec(width=20, height=20)).generate()
        assert other.de_jure.tile_to_county != small_world.de_jure.tile_to_county


class TestMinimalVariant:
    """Test the variant without titles."""

    def test_no_titles(self, minimal_world):
        """Test that the minimal variant omits titles and characters."""
        assert minimal_world.version == 1
        assert minimal_world.titles is None
        assert minimal_world.characters is None
        assert minimal_world.variant is MapVariant.MINIMAL
        assert "titles" not in minimal_world.to_payload()

    def test_same_hierarchies(self, minimal_world, default_world):
        """Test that dropping titles leaves both hierarchies unchanged."""
        assert minimal_world.de_jure == default_world.de_jure
        assert minimal_world.de_facto == default_world.de_facto


class TestModeDifferenceRatio:
    """Test the divergence metric."""

    def test_ratio(self):
        """Test that the ratio is the fraction of differing positions."""
        assert calculate_mode_difference_ratio([0, 1, 2, 3], [0, 1, 0, 0]) == 0.5
        assert calculate_mode_difference_ratio([1, 1], [1, 1]) == 0.0

    def test_invalid(self):
        """Test that mismatched or empty arrays are rejected."""
        with pytest.raises(PreconditionError):
            calculate_mode_difference_ratio([0, 1], [0])
        with pytest.raises(PreconditionError):
            calculate_mode_difference_ratio([], [])


class TestImmutability:
    """Test that a generated map cannot be changed in place."""

    def test_sequences_are_tuples(self, default_world):
        """Test that hierarchy, title and character sequences are tuples."""
        for hierarchy in (default_world.de_jure, default_world.de_facto):
            assert isinstance(hierarchy.tile_to_county, tuple)
            assert isinstance(hierarchy.county_to_duchy, tuple)
            assert isinstance(hierarchy.duchy_to_kingdom, tuple)
            assert isinstance(hierarchy.county_names, tuple)
        assert isinstance(default_world.titles, tuple)
        assert isinstance(default_world.characters, tuple)
        assert isinstance(default_world.characters[0].held_titles, tuple)

    def test_item_assignment_rejected(self, default_world):
        """Test that assigning into a hierarchy or title sequence raises."""
        with pytest.raises(TypeError):
            default_world.de_jure.tile_to_county[0] = 7
        with pytest.raises(TypeError):
            default_world.de_facto.county_names[0] = "Renamed"
        with pytest.raises(TypeError):
            default_world.titles[0] = default_world.titles[1]

    def test_payload_uses_lists(self, default_world):
        """Test that the persisted form still encodes sequences as JSON arrays."""
        payload = default_world.to_payload()
        assert isinstance(payload["modes"]["deJure"]["tileToCounty"], list)
        assert isinstance(payload["titles"], list)
        assert isinstance(payload["characters"][0]["heldTitleIds"], list)
