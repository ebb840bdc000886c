"""
Name generation for map entities and characters.

Territorial entities get sequential names ("County 1", "Duchy 1", ...).
Characters draw a first name and a house name from fixed pools, combined in
every pairing and shuffled by the name PRNG so assignments are seed-stable.
"""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from .world_map import TitleRank
from .xorshift_prng import XorShift32

FIRST_NAMES = [
    "Aldric", "Baldwin", "Cedric", "Darian", "Edric", "Falk",
    "Garin", "Hadrian", "Ivar", "Joran", "Kellan", "Leofric",
    "Merek", "Niall", "Osmund", "Perrin", "Quint", "Roderic",
    "Stefan", "Tristan", "Ulric", "Varric", "Wulfric", "Yorick",
]

HOUSE_NAMES = [
    "Ashford", "Blackmere", "Crownhill", "Dunwall", "Elden", "Frostmere",
    "Greywatch", "Highvale", "Ironwood", "Kingsley", "Longford", "Mornfield",
    "Northmarch", "Oakheart", "Ravencrest", "Stonehelm", "Thornwall", "Umber",
    "Valewood", "Westmere", "Yarborough", "Windmere", "Stormford", "Redwyne",
]


class EntityType(Enum):
    """Types of entities that can have generated names."""

    COUNTY = "County"
    DUCHY = "Duchy"
    KINGDOM = "Kingdom"
    RULER = "Ruler"

    @classmethod
    def for_rank(cls, rank: TitleRank) -> EntityType:
        return cls[rank.name]


class NameGenerator:
    """Deterministic name source for one generated map."""

    def __init__(self, prng: Optional[XorShift32] = None):
        """Initialize name generator with optional PRNG for deterministic generation."""
        self.prng = prng or XorShift32(1)

    @staticmethod
    def sequential_names(entity_type: EntityType, count: int) -> List[str]:
        """Names of the form "<Type> N", numbered from 1."""
        return [f"{entity_type.value} {i + 1}" for i in range(count)]

    def entity_names(self, rank: TitleRank, count: int) -> List[str]:
        return self.sequential_names(EntityType.for_rank(rank), count)

    def character_names(self, count: int) -> List[str]:
        """
        Generate ``count`` unique character names.

        The full first x house pool is shuffled once; characters past the
        pool size fall back to "Ruler N".

        Args:
            count: Number of characters

        Returns:
            List of names in character order
        """
        combos = [f"{first} {house}" for first in FIRST_NAMES for house in HOUSE_NAMES]
        order = self.prng.shuffled_indices(len(combos))

        names = []
        for i in range(count):
            if i < len(order):
                names.append(combos[order[i]])
            else:
                names.append(f"{EntityType.RULER.value} {i + 1}")
        return names
