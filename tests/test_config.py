"""
Tests for settings and physics configuration.
"""

import json
import os
import sys

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from snowdrift.config import (
    INTENSITY_ENV_VAR,
    SettlingConfig,
    SnowIntensity,
    SnowSettings,
    frame_interval,
    intensity_from_env,
    load_settings,
    save_settings,
)
from snowdrift.constants import Geometry, Settling, Slope, Timing
from snowdrift.exceptions import ConfigError


# ===========================================================================
# Intensity Tests
# ===========================================================================

class TestSnowIntensity:
    @pytest.mark.parametrize("name,expected", [
        ("light", SnowIntensity.LIGHT),
        ("MEDIUM", SnowIntensity.MEDIUM),
        (" heavy ", SnowIntensity.HEAVY),
    ])
    def test_from_name(self, name, expected):
        assert SnowIntensity.from_name(name) is expected

    def test_unknown_name(self):
        with pytest.raises(ConfigError):
            SnowIntensity.from_name("blizzard")

    def test_particle_counts(self):
        assert [i.particle_count for i in SnowIntensity] == [100, 250, 500]

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv(INTENSITY_ENV_VAR, "heavy")
        assert intensity_from_env() is SnowIntensity.HEAVY
        monkeypatch.delenv(INTENSITY_ENV_VAR)
        assert intensity_from_env(SnowIntensity.LIGHT) is SnowIntensity.LIGHT


# ===========================================================================
# SettlingConfig Tests
# ===========================================================================

class TestSettlingConfig:
    def test_defaults_follow_constants(self):
        config = SettlingConfig()
        assert config.column_width == Geometry.COLUMN_WIDTH
        assert config.max_height == Settling.MAX_HEIGHT
        assert config.base_slope == Slope.BASE_THRESHOLD
        assert config.validate() is config

    @pytest.mark.parametrize("overrides", [
        {"column_width": 0.0},
        {"max_height": -1.0},
        {"max_height": 0.05},
        {"aggressive_rate": 0.6},
        {"transfer_jitter": 1.0},
        {"min_slope": 0.0},
        {"min_compacted_height": 5.0},
        {"gentle_passes": 0},
        {"gentle_passes": 2.5},
        {"aggressive_passes": 3.0},
        {"base_slope": float('nan')},
        {"deposit_scale": True},
    ])
    def test_invalid(self, overrides):
        with pytest.raises(ConfigError):
            SettlingConfig(**overrides).validate()

    def test_deterministic(self):
        config = SettlingConfig().deterministic()
        assert config.aggressive_variation == 0.0
        assert config.gentle_variation == 0.0
        assert config.transfer_jitter == 0.0
        assert config.base_slope == Slope.BASE_THRESHOLD

    def test_from_dict(self):
        config = SettlingConfig.from_dict({"max_height": 60.0})
        assert config.max_height == 60.0
        assert SettlingConfig.from_dict(config.to_dict()) == config

    def test_from_dict_unknown_key(self):
        with pytest.raises(ConfigError):
            SettlingConfig.from_dict({"gravity": 9.8})


# ===========================================================================
# SnowSettings Tests
# ===========================================================================

class TestSnowSettings:
    def test_defaults(self):
        s = SnowSettings()
        assert s.intensity is SnowIntensity.MEDIUM
        assert s.wind_enabled and s.settling_enabled and s.sleigh_enabled

    def test_from_dict(self):
        s = SnowSettings.from_dict({"intensity": "light", "sleigh_enabled": False})
        assert s.intensity is SnowIntensity.LIGHT
        assert not s.sleigh_enabled
        assert s.to_dict()["intensity"] == "light"

    @pytest.mark.parametrize("data", [
        {"wind_enabled": "yes"},
        {"volume": 3},
        {"intensity": "extreme"},
    ])
    def test_from_dict_invalid(self, data):
        with pytest.raises(ConfigError):
            SnowSettings.from_dict(data)


# ===========================================================================
# Settings File Tests
# ===========================================================================

class TestSettingsFile:
    def test_none_path_gives_defaults(self):
        settings, physics = load_settings(None)
        assert settings == SnowSettings()
        assert physics == SettlingConfig()

    def test_missing_file_gives_defaults(self, tmp_path):
        settings, _ = load_settings(tmp_path / "nope.json")
        assert settings == SnowSettings()

    def test_save_and_load(self, tmp_path):
        path = tmp_path / "sub" / "settings.json"
        save_settings(SnowSettings(intensity=SnowIntensity.HEAVY, wind_enabled=False), path,
                      SettlingConfig(max_height=50.0))
        settings, physics = load_settings(path)
        assert settings.intensity is SnowIntensity.HEAVY
        assert not settings.wind_enabled
        assert physics.max_height == 50.0

    def test_sections_optional(self, tmp_path):
        path = tmp_path / "s.json"
        path.write_text(json.dumps({"physics": {"base_slope": 1.5}}))
        settings, physics = load_settings(path)
        assert settings == SnowSettings()
        assert physics.base_slope == 1.5

    @pytest.mark.parametrize("content", [
        "{not json",
        "[1, 2]",
        '{"physics": {"column_width": -1}}',
        '{"physics": {"gentle_passes": 2.5}}',
    ])
    def test_invalid_file(self, tmp_path, content):
        path = tmp_path / "bad.json"
        path.write_text(content)
        with pytest.raises(ConfigError):
            load_settings(path)


class TestFrameInterval:
    @pytest.mark.parametrize("fps,expected", [
        (30, 1 / 30),
        (60, 1 / 60),
        (0, Timing.FRAME_INTERVAL),
        (-5, Timing.FRAME_INTERVAL),
        (float('inf'), Timing.FRAME_INTERVAL),
    ])
    def test_values(self, fps, expected):
        assert frame_interval(fps) == pytest.approx(expected)
