"""
World map data structures.

The generated map is an immutable aggregate: a fixed tile grid, two parallel
governance hierarchies (de jure and de facto), and, for the titled variant,
the titles and characters that hold them.

Identifiers are structured internally (``TitleKey``, integer character
numbers) and only encoded to their ``rank:entityId`` / ``character:N`` string
forms by ``to_payload()``.
"""

from __future__ import annotations

import json
import re
from enum import Enum
from typing import Any, Dict, List, NamedTuple, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

MAP_WIDTH = 80
MAP_HEIGHT = 80
TILE_SIZE_PX = 10
CHUNK_SIZE = 20
DEFAULT_SEED = 9527

TITLE_ID_PATTERN = re.compile(r"^(county|duchy|kingdom):(\d+)$")
CHARACTER_ID_PATTERN = re.compile(r"^character:(\d+)$")


class TitleRank(str, Enum):
    """Rank of a title, also used as the map display level."""

    COUNTY = "county"
    DUCHY = "duchy"
    KINGDOM = "kingdom"

    @property
    def weight(self) -> int:
        """Precedence used to pick a character's primary title."""
        return _RANK_WEIGHTS[self]

    @property
    def parent(self) -> Optional[TitleRank]:
        """Rank one level up, or None for the apex rank."""
        if self is TitleRank.COUNTY:
            return TitleRank.DUCHY
        if self is TitleRank.DUCHY:
            return TitleRank.KINGDOM
        return None


_RANK_WEIGHTS = {TitleRank.COUNTY: 1, TitleRank.DUCHY: 2, TitleRank.KINGDOM: 3}

MapLevel = TitleRank
TITLE_RANKS = (TitleRank.COUNTY, TitleRank.DUCHY, TitleRank.KINGDOM)


class MapMode(str, Enum):
    """Governance view of the hierarchy."""

    DE_JURE = "deJure"
    DE_FACTO = "deFacto"


MAP_MODES = (MapMode.DE_JURE, MapMode.DE_FACTO)


class MapVariant(str, Enum):
    """Payload variant; each variant has its own wire format version."""

    MINIMAL = "minimal"
    WITH_TITLES = "with_titles"

    @property
    def version(self) -> int:
        return 1 if self is MapVariant.MINIMAL else 2

    @classmethod
    def from_version(cls, version: int) -> Optional[MapVariant]:
        for variant in cls:
            if variant.version == version:
                return variant
        return None


class TitleKey(NamedTuple):
    """Structured title identifier."""

    rank: TitleRank
    entity_id: int

    def encode(self) -> str:
        return f"{self.rank.value}:{self.entity_id}"

    @classmethod
    def parse(cls, value: str) -> Optional[TitleKey]:
        """Parse ``rank:entityId``; returns None when the format does not match."""
        match = TITLE_ID_PATTERN.match(value)
        if not match:
            return None
        return cls(TitleRank(match.group(1)), int(match.group(2)))


def encode_character_id(number: int) -> str:
    return f"character:{number}"


def parse_character_id(value: str) -> Optional[int]:
    """Parse ``character:N`` into N; returns None when the format does not match."""
    match = CHARACTER_ID_PATTERN.match(value)
    if not match:
        return None
    return int(match.group(1))


def character_number_for_index(index: int) -> int:
    """Characters are numbered from 1 in generation order."""
    return index + 1


class GridSpec(BaseModel):
    """Immutable tile grid configuration."""

    model_config = ConfigDict(frozen=True)

    width: int = Field(default=MAP_WIDTH, description="Grid width in tiles")
    height: int = Field(default=MAP_HEIGHT, description="Grid height in tiles")
    tile_size_px: int = Field(default=TILE_SIZE_PX, description="Rendered tile size")
    chunk_size: int = Field(default=CHUNK_SIZE, description="Render chunk size in tiles")
    seed: int = Field(default=DEFAULT_SEED, description="Generation seed")

    @property
    def tile_count(self) -> int:
        return self.width * self.height

    def to_payload(self) -> Dict[str, Any]:
        return {
            "width": self.width,
            "height": self.height,
            "tileSizePx": self.tile_size_px,
            "chunkSize": self.chunk_size,
            "seed": self.seed,
        }


class Hierarchy(BaseModel):
    """
    Tile -> county -> duchy -> kingdom mappings for one governance mode.

    Mappings and name lists are stored as tuples, so a frozen hierarchy cannot
    be changed in place.
    """

    model_config = ConfigDict(frozen=True)

    tile_to_county: Tuple[int, ...] = Field(description="County index for every tile")
    county_to_duchy: Tuple[int, ...] = Field(description="Duchy index for every county")
    duchy_to_kingdom: Tuple[int, ...] = Field(description="Kingdom index for every duchy")
    county_names: Tuple[str, ...] = Field(description="County names by index")
    duchy_names: Tuple[str, ...] = Field(description="Duchy names by index")
    kingdom_names: Tuple[str, ...] = Field(description="Kingdom names by index")

    def names_for(self, level: TitleRank) -> Tuple[str, ...]:
        if level is TitleRank.COUNTY:
            return self.county_names
        if level is TitleRank.DUCHY:
            return self.duchy_names
        return self.kingdom_names

    def count_for(self, level: TitleRank) -> int:
        return len(self.names_for(level))

    def parent_mapping(self, rank: TitleRank) -> Optional[Tuple[int, ...]]:
        """Mapping from ``rank`` entities to their parent rank, None for kingdoms."""
        if rank is TitleRank.COUNTY:
            return self.county_to_duchy
        if rank is TitleRank.DUCHY:
            return self.duchy_to_kingdom
        return None

    def to_payload(self) -> Dict[str, Any]:
        return {
            "tileToCounty": list(self.tile_to_county),
            "countyToDuchy": list(self.county_to_duchy),
            "duchyToKingdom": list(self.duchy_to_kingdom),
            "countyNames": list(self.county_names),
            "duchyNames": list(self.duchy_names),
            "kingdomNames": list(self.kingdom_names),
        }


class Title(BaseModel):
    """A ranked unit of territorial authority with exactly one holder."""

    model_config = ConfigDict(frozen=True)

    rank: TitleRank = Field(description="Title rank")
    entity_id: int = Field(description="Entity index at this rank")
    name: str = Field(description="Display name")
    map_color: int = Field(description="24-bit RGB map color")
    coat_of_arms_seed: str = Field(description="Seed for coat of arms rendering")
    holder_character_id: int = Field(description="Number of the holding character")
    de_jure_parent: Optional[TitleKey] = Field(
        default=None, description="De jure liege title, None for kingdoms"
    )
    de_facto_parent: Optional[TitleKey] = Field(
        default=None, description="De facto liege title, None for kingdoms"
    )

    @property
    def key(self) -> TitleKey:
        return TitleKey(self.rank, self.entity_id)

    @property
    def id(self) -> str:
        return self.key.encode()

    def parent_for(self, mode: MapMode) -> Optional[TitleKey]:
        return self.de_jure_parent if mode is MapMode.DE_JURE else self.de_facto_parent

    def to_payload(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "rank": self.rank.value,
            "entityId": self.entity_id,
            "name": self.name,
            "mapColor": self.map_color,
            "coatOfArmsSeed": self.coat_of_arms_seed,
            "holderCharacterId": encode_character_id(self.holder_character_id),
            "deJureParentTitleId": (
                self.de_jure_parent.encode() if self.de_jure_parent else None
            ),
            "deFactoParentTitleId": (
                self.de_facto_parent.encode() if self.de_facto_parent else None
            ),
        }


class Character(BaseModel):
    """A ruler holding one or more titles."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(description="Character number (encoded as character:N)")
    name: str = Field(description="Display name")
    primary_title: TitleKey = Field(description="Highest-ranked held title")
    held_titles: Tuple[TitleKey, ...] = Field(description="Held titles in acquisition order")

    @property
    def character_id(self) -> str:
        return encode_character_id(self.id)

    def to_payload(self) -> Dict[str, Any]:
        return {
            "id": self.character_id,
            "name": self.name,
            "primaryTitleId": self.primary_title.encode(),
            "heldTitleIds": [key.encode() for key in self.held_titles],
        }


class WorldMapData(BaseModel):
    """Complete generated world map."""

    model_config = ConfigDict(frozen=True)

    version: int = Field(description="Wire format version")
    grid: GridSpec = Field(description="Tile grid configuration")
    de_jure: Hierarchy = Field(description="Legal hierarchy")
    de_facto: Hierarchy = Field(description="Actual hierarchy")
    titles: Optional[Tuple[Title, ...]] = Field(
        default=None, description="Titles (counties, duchies, kingdoms in order)"
    )
    characters: Optional[Tuple[Character, ...]] = Field(
        default=None, description="Characters in generation order"
    )

    @property
    def variant(self) -> MapVariant:
        return MapVariant.MINIMAL if self.titles is None else MapVariant.WITH_TITLES

    def hierarchy(self, mode: MapMode) -> Hierarchy:
        return self.de_jure if mode is MapMode.DE_JURE else self.de_facto

    def to_payload(self) -> Dict[str, Any]:
        """Encode to the persisted JSON shape (camelCase keys, string ids)."""
        payload: Dict[str, Any] = {
            "version": self.version,
            "grid": self.grid.to_payload(),
            "modes": {
                MapMode.DE_JURE.value: self.de_jure.to_payload(),
                MapMode.DE_FACTO.value: self.de_facto.to_payload(),
            },
        }
        if self.titles is not None:
            payload["titles"] = [title.to_payload() for title in self.titles]
        if self.characters is not None:
            payload["characters"] = [character.to_payload() for character in self.characters]
        return payload

    def to_json(self, indent: Optional[int] = 2) -> str:
        return json.dumps(self.to_payload(), indent=indent)
