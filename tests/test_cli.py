"""Tests for the map regeneration command and its settings."""

import pytest
import structlog

from py_realmgen.cli.generate_map import build_parser, check_generated_map, main
from py_realmgen.config import Settings
from py_realmgen.core.errors import RealmGenError
from py_realmgen.core.world_builder import WorldMapOptions
from py_realmgen.storage import load_world_map
from py_realmgen.utils.log_config import configure_logging


class TestSettings:
    """Test environment-driven configuration."""

    def test_defaults(self):
        """Test that settings default to the bundled map configuration."""
        settings = Settings(_env_file=None)
        assert settings.default_seed == 9527
        assert settings.county_count == 320
        assert settings.output_path == "data/maps/world.v2.json"

    def test_environment_override(self, monkeypatch):
        """Test that REALMGEN_ environment variables override defaults."""
        monkeypatch.setenv("REALMGEN_COUNTY_COUNT", "100")
        monkeypatch.setenv("REALMGEN_LOG_FORMAT", "console")
        settings = Settings(_env_file=None)
        assert settings.county_count == 100
        assert settings.log_format == "console"


class TestSelfCheck:
    """Test the post-generation self-check."""

    def test_default_world_passes(self, default_world):
        """Test that the default map passes the self-check with a 0.1 ratio."""
        assert check_generated_map(default_world, WorldMapOptions()) == pytest.approx(0.1)

    def test_count_mismatch(self, default_world):
        """Test that a title or character count mismatch fails the self-check."""
        with pytest.raises(RealmGenError):
            check_generated_map(default_world, WorldMapOptions(county_count=321))


class TestMain:
    """Test the command-line entry point."""

    def test_parser(self):
        """Test that command-line flags map to parsed arguments."""
        args = build_parser().parse_args(["--seed", "7", "--counties", "100", "--output", "x.json"])
        assert args.seed == 7
        assert args.counties == 100
        assert args.output == "x.json"

    def test_generate(self, default_world, tmp_path):
        """Test that the command writes a file that loads back to the default map."""
        output = tmp_path / "out" / "world.v2.json"
        code = main(
            [
                "--seed", "9527",
                "--counties", "320",
                "--duchies", "52",
                "--kingdoms", "7",
                "--output", str(output),
                "--log-level", "WARNING",
            ]
        )
        assert code == 0
        assert load_world_map(output) == default_world

    def test_invalid_counts(self, tmp_path):
        """Test that invalid counts exit with status 1 and write nothing."""
        output = tmp_path / "world.json"
        code = main(["--duchies", "400", "--output", str(output), "--log-level", "ERROR"])
        assert code == 1
        assert not output.exists()


class TestLogging:
    """Test logging setup."""

    @pytest.mark.parametrize("fmt", ["json", "console"])
    def test_configure(self, fmt):
        """Test that logging configures for both renderers."""
        configure_logging("DEBUG", fmt)
        assert structlog.is_configured()
        structlog.get_logger("test").debug("Configured", fmt=fmt)
