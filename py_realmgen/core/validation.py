"""
World map payload validation.

Re-checks a JSON-decoded payload against every invariant the generator
establishes and returns a typed WorldMapData. Validation never repairs data:
the first violation raises MapValidationError naming the offending field.

Checks run in this order:
1. Payload, grid and hierarchy shape (types, lengths)
2. Index bounds of every mapping entry
3. Non-empty coverage of every region at every rank
4. Cross-mode invariants (shared county base, perturbation took effect)
5. Title shape and id/rank/entityId self-consistency
6. Title parent ranks
7. Title parents against the hierarchy mappings
8. Character shape
9. Title <-> character holder consistency
"""

from collections.abc import Mapping
from typing import Any, Dict, List, Optional, Sequence

import structlog

from .errors import MapValidationError, ValidationErrorKind
from .world_map import (
    CHUNK_SIZE,
    MAP_HEIGHT,
    MAP_MODES,
    MAP_WIDTH,
    TILE_SIZE_PX,
    TITLE_RANKS,
    Character,
    GridSpec,
    Hierarchy,
    MapMode,
    MapVariant,
    Title,
    TitleKey,
    TitleRank,
    WorldMapData,
    parse_character_id,
)

logger = structlog.get_logger()

SHAPE = ValidationErrorKind.SHAPE
BOUNDS = ValidationErrorKind.BOUNDS
COVERAGE = ValidationErrorKind.COVERAGE
CROSS_MODE = ValidationErrorKind.CROSS_MODE
REFERENCE = ValidationErrorKind.REFERENCE

_HIERARCHY_INT_FIELDS = ("tileToCounty", "countyToDuchy", "duchyToKingdom")
_HIERARCHY_NAME_FIELDS = ("countyNames", "duchyNames", "kingdomNames")


def _require(condition: bool, kind: ValidationErrorKind, message: str, path: Optional[str] = None) -> None:
    if not condition:
        raise MapValidationError(kind, message, path)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_list(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def _is_int_list(value: Any) -> bool:
    return _is_list(value) and all(_is_int(item) for item in value)


def _is_str_list(value: Any) -> bool:
    return _is_list(value) and all(isinstance(item, str) for item in value)


def _is_non_empty_str(value: Any) -> bool:
    return isinstance(value, str) and len(value) > 0


def _validate_grid(raw: Any) -> GridSpec:
    _require(isinstance(raw, Mapping), SHAPE, "grid must be an object", "grid")
    expected = {
        "width": MAP_WIDTH,
        "height": MAP_HEIGHT,
        "tileSizePx": TILE_SIZE_PX,
        "chunkSize": CHUNK_SIZE,
    }
    for field, value in expected.items():
        actual = raw.get(field)
        _require(
            _is_int(actual) and actual == value,
            SHAPE,
            f"must be {value}, got {actual!r}",
            f"grid.{field}",
        )
    _require(_is_int(raw.get("seed")), SHAPE, "must be an integer", "grid.seed")

    return GridSpec(
        width=raw["width"],
        height=raw["height"],
        tile_size_px=raw["tileSizePx"],
        chunk_size=raw["chunkSize"],
        seed=raw["seed"],
    )


def _check_index_bounds(indices: Sequence[int], size: int, path: str) -> None:
    for i, value in enumerate(indices):
        _require(0 <= value < size, BOUNDS, f"out of bounds: {value}, size={size}", f"{path}[{i}]")


def _check_non_empty_distribution(indices: Sequence[int], size: int, path: str) -> None:
    counts = [0] * size
    for value in indices:
        counts[value] += 1
    for entity_id, count in enumerate(counts):
        _require(count > 0, COVERAGE, f"has empty entity at id={entity_id}", path)


def _validate_hierarchy(raw: Any, tile_count: int, mode: str) -> Hierarchy:
    prefix = f"modes.{mode}"
    _require(isinstance(raw, Mapping), SHAPE, "hierarchy must be an object", prefix)

    for field in _HIERARCHY_INT_FIELDS:
        _require(_is_int_list(raw.get(field)), SHAPE, "must be an integer array", f"{prefix}.{field}")
    for field in _HIERARCHY_NAME_FIELDS:
        _require(_is_str_list(raw.get(field)), SHAPE, "must be a string array", f"{prefix}.{field}")

    tile_to_county = list(raw["tileToCounty"])
    county_to_duchy = list(raw["countyToDuchy"])
    duchy_to_kingdom = list(raw["duchyToKingdom"])
    county_names = list(raw["countyNames"])
    duchy_names = list(raw["duchyNames"])
    kingdom_names = list(raw["kingdomNames"])

    _require(
        len(tile_to_county) == tile_count,
        SHAPE,
        f"length must be {tile_count}, got {len(tile_to_county)}",
        f"{prefix}.tileToCounty",
    )
    for field, names in zip(_HIERARCHY_NAME_FIELDS, (county_names, duchy_names, kingdom_names)):
        _require(len(names) > 0, SHAPE, "cannot be empty", f"{prefix}.{field}")
    _require(
        len(county_to_duchy) == len(county_names),
        SHAPE,
        "length must match countyNames",
        f"{prefix}.countyToDuchy",
    )
    _require(
        len(duchy_to_kingdom) == len(duchy_names),
        SHAPE,
        "length must match duchyNames",
        f"{prefix}.duchyToKingdom",
    )

    _check_index_bounds(tile_to_county, len(county_names), f"{prefix}.tileToCounty")
    _check_index_bounds(county_to_duchy, len(duchy_names), f"{prefix}.countyToDuchy")
    _check_index_bounds(duchy_to_kingdom, len(kingdom_names), f"{prefix}.duchyToKingdom")

    _check_non_empty_distribution(tile_to_county, len(county_names), f"{prefix}.county")
    _check_non_empty_distribution(county_to_duchy, len(duchy_names), f"{prefix}.duchy")
    _check_non_empty_distribution(duchy_to_kingdom, len(kingdom_names), f"{prefix}.kingdom")

    return Hierarchy(
        tile_to_county=tile_to_county,
        county_to_duchy=county_to_duchy,
        duchy_to_kingdom=duchy_to_kingdom,
        county_names=county_names,
        duchy_names=duchy_names,
        kingdom_names=kingdom_names,
    )


def _check_arrays_equal(left: Sequence[Any], right: Sequence[Any], label: str) -> None:
    _require(
        len(left) == len(right),
        CROSS_MODE,
        f"length mismatch: {len(left)} != {len(right)}",
        label,
    )
    for i, (left_value, right_value) in enumerate(zip(left, right)):
        _require(
            left_value == right_value,
            CROSS_MODE,
            f"differs: {left_value!r} != {right_value!r}",
            f"{label}[{i}]",
        )


def _validate_cross_mode(de_jure: Hierarchy, de_facto: Hierarchy) -> None:
    _check_arrays_equal(de_jure.tile_to_county, de_facto.tile_to_county, "deJure/deFacto tileToCounty")
    _check_arrays_equal(de_jure.county_names, de_facto.county_names, "deJure/deFacto countyNames")
    for rank in (TitleRank.DUCHY, TitleRank.KINGDOM):
        _require(
            de_jure.count_for(rank) == de_facto.count_for(rank),
            CROSS_MODE,
            f"{rank.value} count differs between modes",
            f"deJure/deFacto {rank.value}Names",
        )
    _require(
        de_jure.county_to_duchy != de_facto.county_to_duchy,
        CROSS_MODE,
        "must not be identical",
        "deJure/deFacto countyToDuchy",
    )


def _parse_title_id(raw: Any, path: str) -> TitleKey:
    _require(isinstance(raw, str), SHAPE, "must be a title id string", path)
    key = TitleKey.parse(raw)
    _require(key is not None, SHAPE, f"must match rank:id format, got {raw!r}", path)
    return key


def _parse_nullable_title_id(raw: Any, path: str) -> Optional[TitleKey]:
    if raw is None:
        return None
    return _parse_title_id(raw, path)


def _parse_character_ref(raw: Any, path: str) -> int:
    _require(isinstance(raw, str), SHAPE, "must be a character id string", path)
    number = parse_character_id(raw)
    _require(number is not None, SHAPE, f"must match character:id format, got {raw!r}", path)
    return number


def _validate_titles(raw: Any, de_jure: Hierarchy) -> List[Title]:
    _require(_is_list(raw), SHAPE, "must be an array", "titles")

    titles: List[Title] = []
    seen_keys = set()
    seen_entities: Dict[TitleRank, set] = {rank: set() for rank in TITLE_RANKS}

    for i, value in enumerate(raw):
        path = f"titles[{i}]"
        _require(isinstance(value, Mapping), SHAPE, "must be an object", path)

        key = _parse_title_id(value.get("id"), f"{path}.id")
        _require(key not in seen_keys, REFERENCE, f"duplicated: {key.encode()}", f"{path}.id")
        seen_keys.add(key)

        rank_raw = value.get("rank")
        _require(
            rank_raw in tuple(rank.value for rank in TITLE_RANKS),
            SHAPE,
            "must be county|duchy|kingdom",
            f"{path}.rank",
        )
        rank = TitleRank(rank_raw)
        _require(rank is key.rank, REFERENCE, f"id/rank mismatch: {key.encode()} vs {rank_raw}", f"{path}.rank")

        entity_id = value.get("entityId")
        _require(_is_int(entity_id), SHAPE, "must be an integer", f"{path}.entityId")
        _require(
            entity_id == key.entity_id,
            REFERENCE,
            f"id/entityId mismatch: {key.encode()} vs {entity_id}",
            f"{path}.entityId",
        )
        expected_count = de_jure.count_for(rank)
        _require(
            0 <= entity_id < expected_count,
            BOUNDS,
            f"out of bounds for {rank.value}: {entity_id}, size={expected_count}",
            f"{path}.entityId",
        )
        seen_entities[rank].add(entity_id)

        name = value.get("name")
        _require(_is_non_empty_str(name), SHAPE, "must be a non-empty string", f"{path}.name")

        map_color = value.get("mapColor")
        _require(
            _is_int(map_color) and 0 <= map_color <= 0xFFFFFF,
            SHAPE,
            "must be integer 0..16777215",
            f"{path}.mapColor",
        )

        coat_of_arms_seed = value.get("coatOfArmsSeed")
        _require(
            _is_non_empty_str(coat_of_arms_seed),
            SHAPE,
            "must be a non-empty string",
            f"{path}.coatOfArmsSeed",
        )

        holder = _parse_character_ref(value.get("holderCharacterId"), f"{path}.holderCharacterId")
        de_jure_parent = _parse_nullable_title_id(
            value.get("deJureParentTitleId"), f"{path}.deJureParentTitleId"
        )
        de_facto_parent = _parse_nullable_title_id(
            value.get("deFactoParentTitleId"), f"{path}.deFactoParentTitleId"
        )

        titles.append(
            Title(
                rank=rank,
                entity_id=entity_id,
                name=name,
                map_color=map_color,
                coat_of_arms_seed=coat_of_arms_seed,
                holder_character_id=holder,
                de_jure_parent=de_jure_parent,
                de_facto_parent=de_facto_parent,
            )
        )

    for rank in TITLE_RANKS:
        _require(
            len(seen_entities[rank]) == de_jure.count_for(rank),
            COVERAGE,
            f"missing {rank.value} entity ids",
            "titles",
        )

    return titles


def _validate_parent_ranks(titles: Sequence[Title], title_by_key: Dict[TitleKey, Title]) -> None:
    for i, title in enumerate(titles):
        for mode in MAP_MODES:
            field = "deJureParentTitleId" if mode is MapMode.DE_JURE else "deFactoParentTitleId"
            path = f"titles[{i}].{field}"
            parent = title.parent_for(mode)
            expected_rank = title.rank.parent

            if expected_rank is None:
                _require(parent is None, REFERENCE, f"{title.id} kingdom must have no parent", path)
                continue

            _require(parent is not None, REFERENCE, f"{title.id} must have a {mode.value} parent", path)
            _require(
                parent in title_by_key,
                REFERENCE,
                f"{title.id} {mode.value} parent not found: {parent.encode()}",
                path,
            )
            _require(
                parent.rank is expected_rank,
                REFERENCE,
                f"{title.id} {mode.value} parent must be {expected_rank.value}, got {parent.rank.value}",
                path,
            )


def _validate_parents_match_hierarchy(
    title_by_key: Dict[TitleKey, Title], modes: Dict[MapMode, Hierarchy]
) -> None:
    de_jure = modes[MapMode.DE_JURE]
    for rank in TITLE_RANKS:
        for entity_id in range(de_jure.count_for(rank)):
            key = TitleKey(rank, entity_id)
            title = title_by_key.get(key)
            _require(title is not None, REFERENCE, f"missing {rank.value} title {key.encode()}", "titles")

            for mode, hierarchy in modes.items():
                mapping = hierarchy.parent_mapping(rank)
                expected = None if mapping is None else TitleKey(rank.parent, mapping[entity_id])
                _require(
                    title.parent_for(mode) == expected,
                    REFERENCE,
                    f"{key.encode()} {mode.value} parent mismatch with hierarchy",
                    f"titles[{key.encode()}]",
                )


def _validate_characters(raw: Any) -> List[Character]:
    _require(_is_list(raw), SHAPE, "must be an array", "characters")

    characters: List[Character] = []
    seen_ids = set()

    for i, value in enumerate(raw):
        path = f"characters[{i}]"
        _require(isinstance(value, Mapping), SHAPE, "must be an object", path)

        number = _parse_character_ref(value.get("id"), f"{path}.id")
        _require(number not in seen_ids, REFERENCE, f"duplicated: character:{number}", f"{path}.id")
        seen_ids.add(number)

        name = value.get("name")
        _require(_is_non_empty_str(name), SHAPE, "must be a non-empty string", f"{path}.name")

        primary = _parse_title_id(value.get("primaryTitleId"), f"{path}.primaryTitleId")

        held_raw = value.get("heldTitleIds")
        _require(_is_list(held_raw), SHAPE, "must be an array", f"{path}.heldTitleIds")
        _require(len(held_raw) > 0, SHAPE, "cannot be empty", f"{path}.heldTitleIds")

        held: List[TitleKey] = []
        for j, held_id in enumerate(held_raw):
            key = _parse_title_id(held_id, f"{path}.heldTitleIds[{j}]")
            _require(key not in held, REFERENCE, f"duplicate title {key.encode()}", f"{path}.heldTitleIds[{j}]")
            held.append(key)

        _require(
            primary in held,
            REFERENCE,
            "must be included in heldTitleIds",
            f"{path}.primaryTitleId",
        )

        characters.append(Character(id=number, name=name, primary_title=primary, held_titles=held))

    return characters


def _validate_holder_consistency(
    titles: Sequence[Title],
    title_by_key: Dict[TitleKey, Title],
    characters: Sequence[Character],
) -> None:
    character_ids = {character.id for character in characters}
    for i, title in enumerate(titles):
        _require(
            title.holder_character_id in character_ids,
            REFERENCE,
            f"title {title.id} holder does not exist: character:{title.holder_character_id}",
            f"titles[{i}].holderCharacterId",
        )

    holder_from_characters: Dict[TitleKey, int] = {}
    for i, character in enumerate(characters):
        for j, key in enumerate(character.held_titles):
            path = f"characters[{i}].heldTitleIds[{j}]"
            title = title_by_key.get(key)
            _require(title is not None, REFERENCE, f"holds missing title {key.encode()}", path)
            _require(
                key not in holder_from_characters,
                REFERENCE,
                f"title {key.encode()} appears in multiple heldTitleIds",
                path,
            )
            holder_from_characters[key] = character.id
            _require(
                title.holder_character_id == character.id,
                REFERENCE,
                f"title {key.encode()} holder mismatch: title=character:{title.holder_character_id}, "
                f"character={character.character_id}",
                path,
            )

    for i, title in enumerate(titles):
        _require(
            title.key in holder_from_characters,
            REFERENCE,
            f"title {title.id} is not held by any character",
            f"titles[{i}]",
        )


def validate_world_map_data(raw: Any) -> WorldMapData:
    """
    Validate a world map payload.

    Args:
        raw: JSON-decoded payload, or a WorldMapData to re-validate

    Returns:
        Validated WorldMapData

    Raises:
        MapValidationError: On the first violated invariant
    """
    if isinstance(raw, WorldMapData):
        raw = raw.to_payload()

    _require(isinstance(raw, Mapping), SHAPE, "map payload must be an object")

    version = raw.get("version")
    variant = MapVariant.from_version(version) if _is_int(version) else None
    _require(
        variant is not None,
        SHAPE,
        f"must be one of {sorted(v.version for v in MapVariant)}, got {version!r}",
        "version",
    )

    grid = _validate_grid(raw.get("grid"))

    raw_modes = raw.get("modes")
    _require(isinstance(raw_modes, Mapping), SHAPE, "modes must be an object", "modes")
    for mode in MAP_MODES:
        _require(mode.value in raw_modes, SHAPE, f"missing mode {mode.value}", "modes")
    modes = {
        mode: _validate_hierarchy(raw_modes[mode.value], grid.tile_count, mode.value)
        for mode in MAP_MODES
    }
    de_jure = modes[MapMode.DE_JURE]
    de_facto = modes[MapMode.DE_FACTO]

    _validate_cross_mode(de_jure, de_facto)

    if variant is MapVariant.MINIMAL:
        _require("titles" not in raw, SHAPE, f"not allowed in version {version}", "titles")
        _require("characters" not in raw, SHAPE, f"not allowed in version {version}", "characters")
        logger.debug("Validated minimal world map", seed=grid.seed)
        return WorldMapData(
            version=version,
            grid=grid,
            de_jure=de_jure,
            de_facto=de_facto,
            titles=None,
            characters=None,
        )

    titles = _validate_titles(raw.get("titles"), de_jure)
    title_by_key = {title.key: title for title in titles}

    _validate_parent_ranks(titles, title_by_key)
    _validate_parents_match_hierarchy(title_by_key, modes)

    characters = _validate_characters(raw.get("characters"))
    _require(
        len(characters) == de_jure.count_for(TitleRank.COUNTY),
        REFERENCE,
        "character count must equal county count",
        "characters",
    )

    _validate_holder_consistency(titles, title_by_key, characters)

    logger.debug(
        "Validated world map",
        seed=grid.seed,
        titles=len(titles),
        characters=len(characters),
    )
    return WorldMapData(
        version=version,
        grid=grid,
        de_jure=de_jure,
        de_facto=de_facto,
        titles=titles,
        characters=characters,
    )
