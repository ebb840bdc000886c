"""
Regenerate the bundled world map file.

Generates a map for the given seed and counts, self-checks it (full
validation plus de facto divergence and count checks), and writes the
payload as JSON.
"""

import sys
from typing import List, Optional

import structlog

from ..config import settings
from ..core.errors import RealmGenError
from ..core.validation import validate_world_map_data
from ..core.world_builder import (
    WorldMapBuilder,
    WorldMapOptions,
    calculate_mode_difference_ratio,
)
from ..core.world_map import WorldMapData
from ..storage import save_world_map
from ..utils.log_config import configure_logging

logger = structlog.get_logger()

MIN_COUNTY_DIFF_RATIO = 0.08
MAX_COUNTY_DIFF_RATIO = 0.12


def check_generated_map(data: WorldMapData, options: WorldMapOptions) -> float:
    """
    Self-check a freshly generated map.

    Args:
        data: Generated map
        options: Options it was generated with

    Returns:
        De facto county -> duchy difference ratio

    Raises:
        MapValidationError: If the payload fails validation
        RealmGenError: If divergence or counts are off
    """
    validate_world_map_data(data.to_payload())

    ratio = calculate_mode_difference_ratio(
        data.de_jure.county_to_duchy, data.de_facto.county_to_duchy
    )
    if not MIN_COUNTY_DIFF_RATIO <= ratio <= MAX_COUNTY_DIFF_RATIO:
        raise RealmGenError(
            f"county diff ratio {ratio:.4f} outside "
            f"[{MIN_COUNTY_DIFF_RATIO}, {MAX_COUNTY_DIFF_RATIO}]"
        )

    expected_titles = options.county_count + options.duchy_count + options.kingdom_count
    title_count = len(data.titles or [])
    if title_count != expected_titles:
        raise RealmGenError(f"title count mismatch: {title_count} != {expected_titles}")

    character_count = len(data.characters or [])
    if character_count != options.county_count:
        raise RealmGenError(
            f"character count mismatch: {character_count} != {options.county_count}"
        )

    return ratio


def build_parser():
    import argparse

    parser = argparse.ArgumentParser(description="Generate a deterministic world map JSON file")
    parser.add_argument("--seed", type=int, default=settings.default_seed, help="Generation seed")
    parser.add_argument("--counties", type=int, default=settings.county_count, help="Number of counties")
    parser.add_argument("--duchies", type=int, default=settings.duchy_count, help="Number of duchies")
    parser.add_argument("--kingdoms", type=int, default=settings.kingdom_count, help="Number of kingdoms")
    parser.add_argument("--output", default=settings.output_path, help="Output JSON path")
    parser.add_argument("--log-level", default=settings.log_level, help="Logging level")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Command-line entry point; returns the process exit status."""
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level, settings.log_format)

    try:
        options = WorldMapOptions(
            seed=args.seed,
            county_count=args.counties,
            duchy_count=args.duchies,
            kingdom_count=args.kingdoms,
            county_diff_ratio=settings.county_diff_ratio,
            duchy_diff_ratio=settings.duchy_diff_ratio,
        )
        data = WorldMapBuilder(options).generate()
        ratio = check_generated_map(data, options)
        output = save_world_map(args.output, data)
    except (RealmGenError, ValueError, OSError) as e:
        logger.error("Failed to generate world map", error=str(e), seed=args.seed)
        return 1

    logger.info(
        "Generated world map",
        path=str(output),
        seed=options.seed,
        counties=options.county_count,
        duchies=options.duchy_count,
        kingdoms=options.kingdom_count,
        titles=len(data.titles or []),
        characters=len(data.characters or []),
        county_diff_ratio=round(ratio, 4),
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
