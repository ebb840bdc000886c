"""
Controlled-difference perturbation of a region assignment.

Derives the de facto hierarchy from the de jure one: nodes are moved one at
a time into a bucket already held by one of their neighbors, so perturbed
regions stay spatially plausible, and no bucket is ever emptied.
"""

import math
from typing import List, Sequence

import structlog

from .errors import PerturbationTargetError, PreconditionError
from .xorshift_prng import XorShift32

logger = structlog.get_logger()

MIN_ATTEMPTS = 500
ATTEMPTS_PER_NODE = 120


def target_differences(count: int, ratio: float) -> int:
    """Number of positions to change for a ratio of ``count`` (rounded, at least 1)."""
    return max(1, math.floor(count * ratio + 0.5))


def perturb_assignments(
    base: Sequence[int],
    adjacency: Sequence[Sequence[int]],
    bucket_count: int,
    target: int,
    prng: XorShift32,
    label: str = "assignment",
) -> List[int]:
    """
    Produce an assignment differing from ``base`` at ``target`` positions.

    Differences are tracked against ``base`` rather than counted per move:
    a node moved back to its original bucket stops counting, so the result
    differs from ``base`` at exactly ``max(1, target)`` positions.

    Args:
        base: Bucket id for every node
        adjacency: Neighbor lists indexed by node id
        bucket_count: Number of buckets
        target: Desired number of differing positions (lower-bounded at 1)
        prng: Random number generator
        label: Name used in log and error messages

    Returns:
        New assignment list; ``base`` is not modified

    Raises:
        PerturbationTargetError: If the attempt budget runs out first
    """
    if len(adjacency) != len(base):
        raise PreconditionError(
            f"{label}: adjacency has {len(adjacency)} entries for {len(base)} nodes"
        )
    if not base:
        raise PreconditionError(f"{label}: cannot perturb an empty assignment")

    desired = max(1, target)
    out = list(base)
    counts = [0] * bucket_count
    for bucket_id in out:
        counts[bucket_id] += 1

    changed = set()
    max_attempts = max(MIN_ATTEMPTS, len(base) * ATTEMPTS_PER_NODE)
    attempts = 0

    while len(changed) < desired and attempts < max_attempts:
        attempts += 1
        node_id = prng.next_int(len(out))
        source_bucket = out[node_id]
        if counts[source_bucket] <= 1:
            continue

        # Insertion-ordered set keeps the candidate order deterministic
        candidate_buckets = dict.fromkeys(
            out[neighbor] for neighbor in adjacency[node_id]
            if out[neighbor] != source_bucket
        )
        if not candidate_buckets:
            continue

        target_bucket = prng.choice(list(candidate_buckets))
        out[node_id] = target_bucket
        counts[source_bucket] -= 1
        counts[target_bucket] += 1

        if target_bucket == base[node_id]:
            changed.discard(node_id)
        else:
            changed.add(node_id)

    if len(changed) < desired:
        raise PerturbationTargetError(label, len(changed), desired)

    logger.debug(
        "Perturbation complete",
        label=label,
        differences=len(changed),
        attempts=attempts,
    )
    return out
