"""
Tile grid connectivity and inter-region adjacency projection.

Tiles form a 4-connected square grid with ids ``y * width + x``. Region
adjacency at every level of the hierarchy is derived from the level below:
two regions touch when any pair of their members touch.
"""

from typing import List, Sequence, Set

import structlog

from .errors import PreconditionError

logger = structlog.get_logger()

Adjacency = List[List[int]]


def tile_neighbors(tile_id: int, width: int, height: int) -> List[int]:
    """
    List the axis neighbors of a tile that lie inside the grid.

    Neighbors are returned in west, east, north, south order.
    """
    x = tile_id % width
    y = tile_id // width
    out = []
    if x > 0:
        out.append(tile_id - 1)
    if x + 1 < width:
        out.append(tile_id + 1)
    if y > 0:
        out.append(tile_id - width)
    if y + 1 < height:
        out.append(tile_id + width)
    return out


def build_tile_adjacency(width: int, height: int) -> Adjacency:
    """
    Build neighbor lists for every tile of a width x height grid.

    Args:
        width: Grid width in tiles
        height: Grid height in tiles

    Returns:
        List indexed by tile id of neighbor tile ids (no diagonals)
    """
    if width <= 0 or height <= 0:
        raise PreconditionError(f"grid must be non-empty, got {width}x{height}")
    return [tile_neighbors(tile_id, width, height) for tile_id in range(width * height)]


def _sorted_lists(sets: List[Set[int]]) -> Adjacency:
    return [sorted(neighbors) for neighbors in sets]


def build_region_adjacency_from_tiles(
    tile_owner: Sequence[int], region_count: int, width: int, height: int
) -> Adjacency:
    """
    Derive region adjacency by scanning the tile grid directly.

    Only east and south edges are visited since grid adjacency is symmetric,
    which avoids materializing the full tile adjacency for this step.

    Args:
        tile_owner: Region id for every tile
        region_count: Number of regions
        width: Grid width in tiles
        height: Grid height in tiles

    Returns:
        Sorted, deduplicated neighbor lists indexed by region id
    """
    if len(tile_owner) != width * height:
        raise PreconditionError(
            f"tile_owner length {len(tile_owner)} does not match grid {width}x{height}"
        )

    sets: List[Set[int]] = [set() for _ in range(region_count)]

    for y in range(height):
        row = y * width
        for x in range(width):
            tile_id = row + x
            region = tile_owner[tile_id]

            if x + 1 < width:
                east_region = tile_owner[tile_id + 1]
                if east_region != region:
                    sets[region].add(east_region)
                    sets[east_region].add(region)

            if y + 1 < height:
                south_region = tile_owner[tile_id + width]
                if south_region != region:
                    sets[region].add(south_region)
                    sets[south_region].add(region)

    logger.debug("Region adjacency built from tiles", regions=region_count)
    return _sorted_lists(sets)


def project_adjacency(
    source_adjacency: Sequence[Sequence[int]],
    source_to_target: Sequence[int],
    target_count: int,
) -> Adjacency:
    """
    Lift adjacency from one hierarchy level to the next.

    Every source edge whose endpoints map to different targets becomes an
    undirected edge between those targets.

    Args:
        source_adjacency: Neighbor lists at the lower level
        source_to_target: Target id for every source node
        target_count: Number of target regions

    Returns:
        Sorted, deduplicated neighbor lists indexed by target id
    """
    if len(source_to_target) != len(source_adjacency):
        raise PreconditionError(
            f"source_to_target length {len(source_to_target)} does not match "
            f"adjacency length {len(source_adjacency)}"
        )
    for source_id, target in enumerate(source_to_target):
        if not 0 <= target < target_count:
            raise PreconditionError(
                f"source_to_target[{source_id}] out of bounds: {target}, size={target_count}"
            )

    sets: List[Set[int]] = [set() for _ in range(target_count)]

    for source_id, neighbors in enumerate(source_adjacency):
        target_a = source_to_target[source_id]
        for source_neighbor in neighbors:
            target_b = source_to_target[source_neighbor]
            if target_a == target_b:
                continue
            sets[target_a].add(target_b)
            sets[target_b].add(target_a)

    return _sorted_lists(sets)
