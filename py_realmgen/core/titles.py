"""
Title and character assignment.

One ruling character is created per county. Higher titles are granted to one
of the characters already ruling beneath them under the de facto hierarchy,
so every title has exactly one holder and every character holds at least its
county.

Process:
1. Shuffle counties to pair each character with one county
2. Grant each duchy to a holder of one of its de facto counties
3. Grant each kingdom to a holder of one of its de facto duchies
4. Derive each character's primary title
"""

from typing import Dict, List, Optional, Sequence, Tuple

import structlog

from .errors import EmptyHoldingsError, PreconditionError
from .heraldry import coat_of_arms_seed, color_for_title
from .name_generator import NameGenerator
from .world_map import (
    Character,
    Hierarchy,
    Title,
    TitleKey,
    TitleRank,
    character_number_for_index,
)
from .xorshift_prng import XorShift32

logger = structlog.get_logger()


def primary_title(held: Sequence[TitleKey]) -> TitleKey:
    """
    Pick the highest-ranked held title, breaking ties by lowest entity id.

    Raises:
        EmptyHoldingsError: If ``held`` is empty
    """
    if not held:
        raise EmptyHoldingsError("cannot choose a primary title from no titles")
    return max(held, key=lambda key: (key.rank.weight, -key.entity_id))


class TitleAssignor:
    """Assigns holders to every title and builds the character roster."""

    def __init__(
        self,
        seed: int,
        de_jure: Hierarchy,
        de_facto: Hierarchy,
        assignment_prng: XorShift32,
        name_prng: Optional[XorShift32] = None,
    ):
        """
        Initialize title assignor.

        Args:
            seed: Map seed, used for coat of arms seeds
            de_jure: De jure hierarchy (title names and de jure parents)
            de_facto: De facto hierarchy (decides who rules what)
            assignment_prng: Random number generator for holder selection
            name_prng: Random number generator for character names
        """
        for rank in (TitleRank.COUNTY, TitleRank.DUCHY, TitleRank.KINGDOM):
            if de_jure.count_for(rank) != de_facto.count_for(rank):
                raise PreconditionError(
                    f"{rank.value} count differs between modes: "
                    f"{de_jure.count_for(rank)} != {de_facto.count_for(rank)}"
                )

        self.seed = seed
        self.de_jure = de_jure
        self.de_facto = de_facto
        self.prng = assignment_prng
        self.names = NameGenerator(name_prng)

        self.county_count = de_jure.count_for(TitleRank.COUNTY)
        self.duchy_count = de_jure.count_for(TitleRank.DUCHY)
        self.kingdom_count = de_jure.count_for(TitleRank.KINGDOM)

        self.held_by_character: List[List[TitleKey]] = [
            [] for _ in range(self.county_count)
        ]
        self.holder_by_title: Dict[TitleKey, int] = {}

    def assign(self) -> Tuple[List[Title], List[Character]]:
        """
        Run the full assignment.

        Returns:
            Tuple of (titles, characters); titles are ordered counties,
            duchies, kingdoms, each by entity id
        """
        logger.info(
            "Starting title assignment",
            counties=self.county_count,
            duchies=self.duchy_count,
            kingdoms=self.kingdom_count,
        )

        character_names = self.names.character_names(self.county_count)

        county_holders = self._assign_counties()
        duchy_holders = self._assign_upper_rank(
            TitleRank.DUCHY, self.de_facto.county_to_duchy, county_holders, self.duchy_count
        )
        self._assign_upper_rank(
            TitleRank.KINGDOM, self.de_facto.duchy_to_kingdom, duchy_holders, self.kingdom_count
        )

        titles = self._build_titles()
        characters = [
            Character(
                id=character_number_for_index(index),
                name=character_names[index],
                primary_title=primary_title(held),
                held_titles=list(held),
            )
            for index, held in enumerate(self.held_by_character)
        ]

        logger.info("Title assignment complete", titles=len(titles), characters=len(characters))
        return titles, characters

    def _grant(self, character_index: int, key: TitleKey) -> None:
        self.held_by_character[character_index].append(key)
        self.holder_by_title[key] = character_index

    def _assign_counties(self) -> List[int]:
        """Pair characters with counties through a shuffled county order."""
        county_order = self.prng.shuffled_indices(self.county_count)
        holders = [0] * self.county_count
        for character_index, county_id in enumerate(county_order):
            holders[county_id] = character_index
            self._grant(character_index, TitleKey(TitleRank.COUNTY, county_id))
        return holders

    def _assign_upper_rank(
        self,
        rank: TitleRank,
        child_to_parent: Sequence[int],
        child_holders: Sequence[int],
        parent_count: int,
    ) -> List[int]:
        """
        Grant every title of ``rank`` to one of the holders beneath it.

        Candidates keep first-seen order and are deduplicated, so a character
        holding several child titles is not weighted more heavily.
        """
        candidates: List[Dict[int, None]] = [{} for _ in range(parent_count)]
        for child_id, parent_id in enumerate(child_to_parent):
            candidates[parent_id][child_holders[child_id]] = None

        holders = []
        for parent_id in range(parent_count):
            pool = list(candidates[parent_id])
            if not pool:
                raise PreconditionError(
                    f"{rank.value}:{parent_id} has no de facto vassals to choose a holder from"
                )
            holder = self.prng.choice(pool)
            holders.append(holder)
            self._grant(holder, TitleKey(rank, parent_id))
        return holders

    def _parent_key(self, hierarchy: Hierarchy, key: TitleKey) -> Optional[TitleKey]:
        mapping = hierarchy.parent_mapping(key.rank)
        if mapping is None:
            return None
        return TitleKey(key.rank.parent, mapping[key.entity_id])

    def _build_titles(self) -> List[Title]:
        titles = []
        for rank in (TitleRank.COUNTY, TitleRank.DUCHY, TitleRank.KINGDOM):
            names = self.de_jure.names_for(rank)
            for entity_id, name in enumerate(names):
                key = TitleKey(rank, entity_id)
                titles.append(
                    Title(
                        rank=rank,
                        entity_id=entity_id,
                        name=name,
                        map_color=color_for_title(key),
                        coat_of_arms_seed=coat_of_arms_seed(self.seed, key),
                        holder_character_id=character_number_for_index(
                            self.holder_by_title[key]
                        ),
                        de_jure_parent=self._parent_key(self.de_jure, key),
                        de_facto_parent=self._parent_key(self.de_facto, key),
                    )
                )
        return titles
