"""Tests for world map payload validation."""

import json

import pytest

from py_realmgen.core.errors import MapValidationError, ValidationErrorKind
from py_realmgen.core.validation import validate_world_map_data


class TestValidPayloads:
    """Test that generated maps pass validation unchanged."""

    def test_revalidation_is_identity(self, default_world, payload):
        """Test that validating a generated payload returns the same map."""
        assert validate_world_map_data(payload) == default_world

    def test_accepts_model(self, default_world):
        """Test that an already built model validates to itself."""
        assert validate_world_map_data(default_world) == default_world

    def test_minimal(self, minimal_world):
        """Test that the minimal payload validates."""
        payload = json.loads(minimal_world.to_json())
        assert validate_world_map_data(payload) == minimal_world

    def test_does_not_alias_input(self, payload):
        """Test that later edits to the payload do not reach the model."""
        data = validate_world_map_data(payload)
        payload["modes"]["deJure"]["tileToCounty"][0] = 999
        assert data.de_jure.tile_to_county[0] != 999


class TestRejections:
    """Test that violated invariants are reported."""

    def _assert_rejected(self, payload, kind=None, path=None):
        with pytest.raises(MapValidationError) as exc_info:
            validate_world_map_data(payload)
        error = exc_info.value
        assert str(error).startswith("[map validation]")
        if kind is not None:
            assert error.kind is kind
        if path is not None:
            assert error.path == path
        return error

    def test_unknown_holder(self, payload):
        """Test that a holder without a character is rejected."""
        payload["titles"][0]["holderCharacterId"] = "character:99999"
        self._assert_rejected(payload, ValidationErrorKind.REFERENCE, "titles[0].holderCharacterId")

    def test_parent_wrong_rank(self, payload):
        """Test that a county's parent must be a duchy."""
        assert payload["titles"][0]["rank"] == "county"
        payload["titles"][0]["deJureParentTitleId"] = "kingdom:0"
        self._assert_rejected(payload, ValidationErrorKind.REFERENCE, "titles[0].deJureParentTitleId")

    def test_duplicate_title_id(self, payload):
        """Test that duplicate title ids are rejected."""
        payload["titles"][1]["id"] = payload["titles"][0]["id"]
        self._assert_rejected(payload, ValidationErrorKind.REFERENCE, "titles[1].id")

    def test_primary_not_held(self, payload):
        """Test that a primary title must be held."""
        character = payload["characters"][0]
        held = set(character["heldTitleIds"])
        other = next(title["id"] for title in payload["titles"] if title["id"] not in held)
        character["primaryTitleId"] = other
        self._assert_rejected(payload, ValidationErrorKind.REFERENCE, "characters[0].primaryTitleId")

    def test_parent_disagrees_with_hierarchy(self, payload):
        """Test that parent pointers must mirror the hierarchy mapping."""
        title = payload["titles"][0]
        current = title["deFactoParentTitleId"]
        title["deFactoParentTitleId"] = "duchy:1" if current != "duchy:1" else "duchy:2"
        self._assert_rejected(payload, ValidationErrorKind.REFERENCE)

    def test_kingdom_with_parent(self, payload):
        """Test that kingdoms must not have a parent."""
        index = next(i for i, t in enumerate(payload["titles"]) if t["rank"] == "kingdom")
        payload["titles"][index]["deJureParentTitleId"] = "kingdom:0"
        self._assert_rejected(payload, ValidationErrorKind.REFERENCE)

    def test_held_title_claimed_twice(self, payload):
        """Test that a title held by two characters is rejected."""
        payload["characters"][1]["heldTitleIds"].append(payload["characters"][0]["heldTitleIds"][0])
        self._assert_rejected(payload, ValidationErrorKind.REFERENCE)

    def test_rank_id_mismatch(self, payload):
        """Test that the rank must match the title id prefix."""
        payload["titles"][0]["rank"] = "duchy"
        self._assert_rejected(payload, ValidationErrorKind.REFERENCE, "titles[0].rank")

    def test_bad_title_id_format(self, payload):
        """Test that unknown title id formats are rejected."""
        payload["titles"][0]["id"] = "barony:0"
        self._assert_rejected(payload, ValidationErrorKind.SHAPE, "titles[0].id")

    def test_boolean_is_not_a_color(self, payload):
        """Test that a boolean map color is rejected."""
        payload["titles"][0]["mapColor"] = True
        self._assert_rejected(payload, ValidationErrorKind.SHAPE, "titles[0].mapColor")

    def test_color_out_of_range(self, payload):
        """Test that colors beyond 24 bits are rejected."""
        payload["titles"][0]["mapColor"] = 0x1000000
        self._assert_rejected(payload, ValidationErrorKind.SHAPE, "titles[0].mapColor")

    def test_missing_title(self, payload):
        """Test that a missing title is a coverage error."""
        payload["titles"].pop()
        self._assert_rejected(payload, ValidationErrorKind.COVERAGE, "titles")

    def test_character_count(self, payload):
        """Test that a missing character is rejected."""
        payload["characters"].pop()
        self._assert_rejected(payload)

    def test_unknown_version(self, payload):
        """Test that unknown versions are rejected."""
        payload["version"] = 3
        self._assert_rejected(payload, ValidationErrorKind.SHAPE, "version")

    def test_grid_size_fixed(self, payload):
        """Test that the grid size must be 80x80."""
        payload["grid"]["width"] = 81
        self._assert_rejected(payload, ValidationErrorKind.SHAPE, "grid.width")

    def test_missing_mode(self, payload):
        """Test that both modes are required."""
        del payload["modes"]["deFacto"]
        self._assert_rejected(payload, ValidationErrorKind.SHAPE, "modes")

    def test_tile_to_county_length(self, payload):
        """Test that tileToCounty must cover every tile."""
        payload["modes"]["deJure"]["tileToCounty"].pop()
        self._assert_rejected(payload, ValidationErrorKind.SHAPE, "modes.deJure.tileToCounty")

    def test_index_out_of_bounds(self, payload):
        """Test that out-of-range indices are reported with their path."""
        payload["modes"]["deJure"]["countyToDuchy"][3] = 52
        self._assert_rejected(payload, ValidationErrorKind.BOUNDS, "modes.deJure.countyToDuchy[3]")

    def test_empty_county(self, payload):
        """Test that a county without tiles is reported by id."""
        for mode in ("deJure", "deFacto"):
            tiles = payload["modes"][mode]["tileToCounty"]
            payload["modes"][mode]["tileToCounty"] = [0 if c == 5 else c for c in tiles]
        error = self._assert_rejected(payload, ValidationErrorKind.COVERAGE, "modes.deJure.county")
        assert "id=5" in str(error)

    def test_county_base_must_match(self, payload):
        """Test that both modes must share county names."""
        names = payload["modes"]["deFacto"]["countyNames"]
        names[0] = "Elsewhere"
        self._assert_rejected(payload, ValidationErrorKind.CROSS_MODE)

    def test_modes_must_differ(self, payload):
        """Test that identical county to duchy mappings are rejected."""
        payload["modes"]["deFacto"]["countyToDuchy"] = list(payload["modes"]["deJure"]["countyToDuchy"])
        self._assert_rejected(payload, ValidationErrorKind.CROSS_MODE, "deJure/deFacto countyToDuchy")

    def test_minimal_with_titles(self, payload):
        """Test that version 1 payloads must not carry titles."""
        payload["version"] = 1
        self._assert_rejected(payload, ValidationErrorKind.SHAPE, "titles")

    def test_not_an_object(self):
        """Test that a non-object payload is rejected."""
        self._assert_rejected([], ValidationErrorKind.SHAPE)
