"""
Cosmetic title attributes: map colors and coat of arms seeds.

Both are pure functions of the title identity (and the map seed), so they
never consume generation randomness.
"""

import math

from .world_map import TitleKey, TitleRank

RANK_HUE_OFFSETS = {TitleRank.COUNTY: 17, TitleRank.DUCHY: 131, TitleRank.KINGDOM: 257}
GOLDEN_ANGLE_DEG = 137.508
TITLE_SATURATION = 45
TITLE_LIGHTNESS = 42

FNV_OFFSET_BASIS = 2166136261
FNV_PRIME = 16777619


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _hue_to_rgb(p: float, q: float, t: float) -> float:
    if t < 0:
        t += 1
    if t > 1:
        t -= 1
    if t < 1 / 6:
        return p + (q - p) * 6 * t
    if t < 1 / 2:
        return q
    if t < 2 / 3:
        return p + (q - p) * (2 / 3 - t) * 6
    return p


def hsl_to_rgb_int(h: float, s: float, l: float) -> int:
    """
    Convert HSL to a packed 0xRRGGBB integer.

    Args:
        h: Hue in degrees [0, 360)
        s: Saturation in percent
        l: Lightness in percent

    Returns:
        24-bit RGB integer
    """
    hue = h / 360
    sat = s / 100
    light = l / 100

    if sat == 0:
        r = g = b = light
    else:
        q = light * (1 + sat) if light < 0.5 else light + sat - light * sat
        p = 2 * light - q
        r = _hue_to_rgb(p, q, hue + 1 / 3)
        g = _hue_to_rgb(p, q, hue)
        b = _hue_to_rgb(p, q, hue - 1 / 3)

    return (
        ((_round_half_up(r * 255) & 0xFF) << 16)
        | ((_round_half_up(g * 255) & 0xFF) << 8)
        | (_round_half_up(b * 255) & 0xFF)
    )


def color_for_title(key: TitleKey) -> int:
    """Spread hues by the golden angle so neighbouring ids get distinct colors."""
    hue = (key.entity_id * GOLDEN_ANGLE_DEG + RANK_HUE_OFFSETS[key.rank]) % 360
    return hsl_to_rgb_int(hue, TITLE_SATURATION, TITLE_LIGHTNESS)


def fnv1a_32(text: str) -> int:
    """32-bit FNV-1a hash over the code points of ``text``."""
    value = FNV_OFFSET_BASIS
    for char in text:
        value ^= ord(char)
        value = (value * FNV_PRIME) & 0xFFFFFFFF
    return value


def coat_of_arms_seed(seed: int, key: TitleKey) -> str:
    return f"coa-{fnv1a_32(f'{seed}:{key.encode()}'):08x}"
