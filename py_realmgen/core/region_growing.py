"""
Seeded region growing.

Partitions the nodes of an adjacency graph into a fixed number of contiguous
regions. Each region starts from one random seed node and expands one node
at a time through its frontier, favouring regions that are still below a
randomized target size. Sizes are balanced approximately, not exactly:
irregular borders are desirable on a game map.

Process:
1. build_desired_sizes() - Randomized per-region target sizes summing to N
2. choose_unique_seeds() - One distinct seed node per region
3. region_grow() - Greedy frontier expansion until every node is claimed
"""

from typing import List, Sequence

import structlog

from .errors import PreconditionError, RegionGrowthStuckError
from .xorshift_prng import XorShift32

logger = structlog.get_logger()

SIZE_VARIANCE_RATIO = 0.35
UNCLAIMED = -1


def build_desired_sizes(total: int, bucket_count: int, prng: XorShift32) -> List[int]:
    """
    Draw a target size for every region.

    Each bucket gets ``base + uniform(-variance..variance)`` clamped to at
    least 1, then random buckets are nudged by one until the sizes sum to
    ``total`` exactly. A bucket is never reduced below 1.

    Args:
        total: Number of nodes to distribute
        bucket_count: Number of regions
        prng: Random number generator

    Returns:
        List of desired sizes, one per region
    """
    if not 0 < bucket_count <= total:
        raise PreconditionError(
            f"bucket_count({bucket_count}) must be in [1, total({total})]"
        )

    base = total // bucket_count
    variance = max(1, int(base * SIZE_VARIANCE_RATIO))

    desired = []
    for _ in range(bucket_count):
        offset = prng.next_int(variance * 2 + 1) - variance
        desired.append(max(1, base + offset))

    diff = total - sum(desired)
    while diff != 0:
        index = prng.next_int(bucket_count)
        if diff > 0:
            desired[index] += 1
            diff -= 1
        elif desired[index] > 1:
            desired[index] -= 1
            diff += 1

    return desired


def choose_unique_seeds(total_nodes: int, seed_count: int, prng: XorShift32) -> List[int]:
    """Pick ``seed_count`` distinct node ids by rejection sampling."""
    if seed_count > total_nodes:
        raise PreconditionError(
            f"seed_count({seed_count}) must be <= total_nodes({total_nodes})"
        )

    used = set()
    seeds = []
    while len(seeds) < seed_count:
        candidate = prng.next_int(total_nodes)
        if candidate not in used:
            used.add(candidate)
            seeds.append(candidate)
    return seeds


def _remove_at_swap(buffer: List[int], index: int) -> None:
    """Remove an element in O(1) by moving the last element into its slot."""
    buffer[index] = buffer[-1]
    buffer.pop()


def region_grow(
    total_nodes: int,
    seed_count: int,
    prng: XorShift32,
    adjacency: Sequence[Sequence[int]],
) -> List[int]:
    """
    Assign every node to exactly one of ``seed_count`` contiguous regions.

    Each turn picks a region uniformly among those with a non-empty frontier
    that are still under their desired size (falling back to any region with
    a frontier), then a random frontier node of that region. If the node has
    unclaimed neighbors one of them is claimed and appended to the frontier;
    otherwise the node is dropped from the frontier and another one is tried
    within the same turn.

    Args:
        total_nodes: Number of nodes in the graph
        seed_count: Number of regions to grow
        prng: Random number generator
        adjacency: Neighbor lists indexed by node id

    Returns:
        Region id for every node, each in [0, seed_count)

    Raises:
        PreconditionError: If the counts or adjacency size are inconsistent
        RegionGrowthStuckError: If all frontiers empty before every node is claimed
    """
    if seed_count <= 0:
        raise PreconditionError(f"seed_count must be > 0, got {seed_count}")
    if seed_count > total_nodes:
        raise PreconditionError(
            f"seed_count({seed_count}) must be <= total_nodes({total_nodes})"
        )
    if len(adjacency) != total_nodes:
        raise PreconditionError(
            f"adjacency has {len(adjacency)} entries for {total_nodes} nodes"
        )

    logger.debug("Starting region growth", nodes=total_nodes, regions=seed_count)

    owner = [UNCLAIMED] * total_nodes
    region_sizes = [0] * seed_count
    desired_sizes = build_desired_sizes(total_nodes, seed_count, prng)

    seeds = choose_unique_seeds(total_nodes, seed_count, prng)
    frontiers: List[List[int]] = []
    for region_id, seed in enumerate(seeds):
        owner[seed] = region_id
        region_sizes[region_id] = 1
        frontiers.append([seed])

    unassigned = total_nodes - seed_count
    while unassigned > 0:
        preferred = []
        fallback = []
        for region_id in range(seed_count):
            if not frontiers[region_id]:
                continue
            fallback.append(region_id)
            if region_sizes[region_id] < desired_sizes[region_id]:
                preferred.append(region_id)

        candidates = preferred or fallback
        if not candidates:
            raise RegionGrowthStuckError(
                f"region growth stuck: no expandable frontier while "
                f"{unassigned} nodes remain"
            )

        region_id = prng.choice(candidates)
        frontier = frontiers[region_id]

        while frontier:
            frontier_index = prng.next_int(len(frontier))
            node = frontier[frontier_index]
            unclaimed = [n for n in adjacency[node] if owner[n] == UNCLAIMED]

            if not unclaimed:
                _remove_at_swap(frontier, frontier_index)
                continue

            next_node = prng.choice(unclaimed)
            owner[next_node] = region_id
            region_sizes[region_id] += 1
            frontier.append(next_node)
            unassigned -= 1
            break

    logger.debug(
        "Region growth complete",
        nodes=total_nodes,
        regions=seed_count,
        min_size=min(region_sizes),
        max_size=max(region_sizes),
    )
    return owner
