"""
Random number generation utilities.

Every generation stage owns its own PRNG stream, seeded from the map seed
mixed with the salts below (see ``core.xorshift_prng.salted_prng``). There
is no module-level generator: stages never share state, so a run is
reproducible regardless of what else executes.
"""

from functools import reduce

# Stage salts
COUNTY_BASE_SALT = 0x3C6EF372
DE_JURE_SALT = 0xA5A5A5A5
DE_FACTO_SALT = 0x5A5A5A5A
CHARACTER_SALT = 0x7F4A7C15
NAME_SALT = 0x6D2B79F5

# Level salts, mixed into a stage seed before growing that level
COUNTY_LEVEL_SALT = 0x9E3779B9
DUCHY_LEVEL_SALT = 0x85EBCA6B
KINGDOM_LEVEL_SALT = 0xC2B2AE35


def mix_seed(seed: int, *salts: int) -> int:
    """
    XOR a seed with one or more salts, keeping the low 32 bits.

    Args:
        seed: Map seed (any integer; negative values use two's complement)
        *salts: Salts applied left to right

    Returns:
        Unsigned 32-bit stage seed
    """
    return reduce(lambda acc, salt: acc ^ salt, salts, seed) & 0xFFFFFFFF
