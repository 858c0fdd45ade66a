"""Tests for inputplatform.config — file loading and env overrides."""

from __future__ import annotations

import json

import pytest

from inputplatform.config import PlatformConfig, load_config


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch, tmp_path):
    monkeypatch.delenv("INPUTPLATFORM_TABLET_DETECTION", raising=False)
    monkeypatch.delenv("INPUTPLATFORM_TABLET_ASPECT_RATIO", raising=False)
    monkeypatch.setenv("INPUTPLATFORM_CONFIG", str(tmp_path / "missing.json"))


class TestPlatformConfig:
    def test_defaults(self):
        config = PlatformConfig()
        assert config.tablet_detection_enabled is True
        assert config.tablet_aspect_ratio_threshold == 1.5
        assert config.square_glyph == "ButtonSquare"
        assert config.update_interval == 1.0
        assert config.ten_foot_check_interval == 2.0

    @pytest.mark.parametrize("threshold", [0, -1.5])
    def test_rejects_non_positive_threshold(self, threshold):
        with pytest.raises(ValueError, match="tablet_aspect_ratio_threshold"):
            PlatformConfig(tablet_aspect_ratio_threshold=threshold)

    def test_rejects_negative_interval(self):
        with pytest.raises(ValueError, match="update_interval"):
            PlatformConfig(update_interval=-1)

    def test_from_dict_ignores_unknown_keys(self):
        config = PlatformConfig.from_dict({"square_glyph": "Square", "colour": "red"})
        assert config.square_glyph == "Square"

    @pytest.mark.parametrize("value", ["false", "0", "off", " No "])
    def test_from_dict_string_false_disables_tablet(self, value):
        config = PlatformConfig.from_dict({"tablet_detection_enabled": value})
        assert config.tablet_detection_enabled is False

    def test_from_dict_string_true_keeps_tablet(self):
        assert PlatformConfig.from_dict({"tablet_detection_enabled": "true"}).tablet_detection_enabled is True

    def test_config_file_string_false(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"tablet_detection_enabled": "false"}))
        assert load_config(path).tablet_detection_enabled is False


class TestLoadConfig:
    def test_missing_file_gives_defaults(self):
        assert load_config() == PlatformConfig()

    def test_reads_explicit_path(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"tablet_aspect_ratio_threshold": 1.8}))
        assert load_config(path).tablet_aspect_ratio_threshold == 1.8

    def test_reads_env_path(self, monkeypatch, tmp_path):
        path = tmp_path / "env.json"
        path.write_text(json.dumps({"tablet_detection_enabled": False}))
        monkeypatch.setenv("INPUTPLATFORM_CONFIG", str(path))
        assert load_config().tablet_detection_enabled is False

    def test_invalid_json_gives_defaults(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("{not json")
        assert load_config(path) == PlatformConfig()

    def test_non_object_gives_defaults(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("[1, 2]")
        assert load_config(path) == PlatformConfig()

    @pytest.mark.parametrize("value", ["0", "false", "No", "off"])
    def test_env_disables_tablet_detection(self, monkeypatch, value):
        monkeypatch.setenv("INPUTPLATFORM_TABLET_DETECTION", value)
        assert load_config().tablet_detection_enabled is False

    def test_env_overrides_file(self, monkeypatch, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"tablet_aspect_ratio_threshold": 1.8}))
        monkeypatch.setenv("INPUTPLATFORM_TABLET_ASPECT_RATIO", "1.3")
        assert load_config(path).tablet_aspect_ratio_threshold == 1.3

    def test_invalid_env_ratio_ignored(self, monkeypatch):
        monkeypatch.setenv("INPUTPLATFORM_TABLET_ASPECT_RATIO", "wide")
        assert load_config().tablet_aspect_ratio_threshold == 1.5
