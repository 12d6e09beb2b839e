"""Tests for configuration layering."""

import logging
from pathlib import Path

import pytest

from minfo.config.builder import ConfigBuilder, layer_from_env, layer_from_file
from minfo.config.env import EnvReader


class TestConfigBuilder:
    """Tests for ConfigBuilder."""

    def test_defaults(self):
        """An empty builder produces the default configuration."""
        config = ConfigBuilder().build()

        assert config.timeouts.request == 600.0
        assert config.resolver.candidate_limit == 5
        assert config.server.port == 8080
        assert config.server.bind == "0.0.0.0"
        assert config.server.media_root == Path("/media")
        assert config.server.password is None
        assert config.logging.level == "info"
        assert config.tools.binary_for("mediainfo") == "mediainfo"

    def test_later_layers_override_earlier(self):
        """Non-None values from later layers win."""
        builder = ConfigBuilder()
        builder.apply(
            {("server", "port"): 9000, ("server", "bind"): "127.0.0.1"}, "file"
        )
        builder.apply({("server", "port"): 9100}, "env")
        builder.apply({("server", "port"): None}, "cli")

        config = builder.build()

        assert config.server.port == 9100
        assert config.server.bind == "127.0.0.1"
        assert builder.source_of("server", "port") == "env"
        assert builder.source_of("server", "bind") == "file"
        assert builder.source_of("timeouts", "request") == "default"

    def test_invalid_value_raises(self):
        """Section validation errors surface from build()."""
        builder = ConfigBuilder()
        builder.apply({("resolver", "candidate_limit"): 0})
        with pytest.raises(ValueError, match="candidate_limit"):
            builder.build()

    def test_unknown_field_raises_value_error(self):
        """A field the section does not define is a configuration error."""
        builder = ConfigBuilder()
        builder.apply({("server", "colour"): "blue"})
        with pytest.raises(ValueError, match=r"\[server\]"):
            builder.build()

    def test_unknown_section_rejected(self):
        """Layers may only name known sections."""
        with pytest.raises(KeyError):
            ConfigBuilder().apply({("database", "url"): "sqlite://"})


class TestLayerFromFile:
    """Tests for layer_from_file."""

    def test_reads_sections(self):
        """Values are taken from the matching TOML tables."""
        layer = layer_from_file(
            {
                "tools": {"ffmpeg": "/opt/ffmpeg/bin/ffmpeg"},
                "timeouts": {"request": "10m", "mount": 15},
                "resolver": {"candidate_limit": 3},
                "server": {"port": 9000, "media_root": "/srv/media"},
                "logging": {"level": "debug", "format": "json"},
            }
        )

        assert layer[("tools", "ffmpeg")] == "/opt/ffmpeg/bin/ffmpeg"
        assert layer[("timeouts", "request")] == 600.0
        assert layer[("timeouts", "mount")] == 15.0
        assert layer[("resolver", "candidate_limit")] == 3
        assert layer[("server", "port")] == 9000
        assert layer[("server", "media_root")] == Path("/srv/media")
        assert layer[("logging", "format")] == "json"
        assert ("tools", "umount") not in layer

    def test_unknown_keys_skipped(self, caplog):
        """Unknown tables and keys are ignored with a warning."""
        with caplog.at_level(logging.WARNING):
            layer = layer_from_file(
                {"database": {"url": "x"}, "server": {"port": 1, "colour": "blue"}}
            )

        assert layer == {("server", "port"): 1}
        assert "[database]" in caplog.text
        assert "server.colour" in caplog.text

    def test_bad_duration_raises(self):
        """Durations in the file are validated strictly."""
        with pytest.raises(ValueError):
            layer_from_file({"timeouts": {"request": "forever"}})

    def test_section_must_be_table(self):
        """A scalar where a table is expected is rejected."""
        with pytest.raises(ValueError, match="must be a table"):
            layer_from_file({"server": 8080})


class TestLayerFromEnv:
    """Tests for layer_from_env."""

    def test_reads_deployment_variables(self):
        """Container variable names map onto config keys."""
        reader = EnvReader(
            env={
                "MEDIAINFO_BIN": "/usr/local/bin/mediainfo",
                "REQUEST_TIMEOUT": "90s",
                "PORT": "8181",
                "WEB_PASSWORD": "secret",
                "MEDIA_ROOT": "/data",
                "MINFO_CANDIDATE_LIMIT": "2",
            }
        )

        layer = layer_from_env(reader)

        assert layer[("tools", "mediainfo")] == "/usr/local/bin/mediainfo"
        assert layer[("timeouts", "request")] == 90.0
        assert layer[("server", "port")] == 8181
        assert layer[("server", "password")] == "secret"
        assert layer[("server", "media_root")] == Path("/data")
        assert layer[("resolver", "candidate_limit")] == 2
        assert layer[("tools", "bdinfo")] is None

    def test_invalid_request_timeout_keeps_default(self):
        """An invalid REQUEST_TIMEOUT leaves the default in place."""
        builder = ConfigBuilder()
        builder.apply(layer_from_env(EnvReader(env={"REQUEST_TIMEOUT": "-1"})))
        assert builder.build().timeouts.request == 600.0
