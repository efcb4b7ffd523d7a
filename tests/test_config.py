"""Tests for configuration loading."""

from __future__ import annotations

import pytest
import yaml

from brain_method.config import (
    DEFAULT_CONFIG,
    ConfigError,
    ThresholdConfig,
    get_config_template,
    load_config,
)


def test_threshold_defaults():
    assert ThresholdConfig() == ThresholdConfig(cyclo=4, maxnesting=3, noav=5, loc=65)
    assert ThresholdConfig.from_config(DEFAULT_CONFIG) == ThresholdConfig()


def test_thresholds_are_read_only():
    thresholds = ThresholdConfig()
    with pytest.raises(AttributeError):
        thresholds.loc = 10


def test_threshold_section_may_be_empty():
    assert ThresholdConfig.from_config({"thresholds": None}) == ThresholdConfig()
    assert ThresholdConfig.from_config({}) == ThresholdConfig()


@pytest.mark.parametrize("value", ["ten", 1.5, True])
def test_threshold_must_be_integer(value):
    with pytest.raises(ConfigError, match="thresholds.cyclo"):
        ThresholdConfig.from_config({"thresholds": {"cyclo": value}})


def test_load_config_merges_over_defaults(tmp_path):
    path = tmp_path / "brain-method.yaml"
    path.write_text("thresholds:\n  loc: 120\nexclude:\n  directories: [vendor]\n", encoding="utf-8")

    config = load_config(path)
    assert config["thresholds"] == {"cyclo": 4, "maxnesting": 3, "noav": 5, "loc": 120}
    assert config["exclude"]["directories"] == ["vendor"]
    assert config["exclude"]["extensions"] == []
    # defaults are left untouched
    assert DEFAULT_CONFIG["thresholds"]["loc"] == 65
    assert DEFAULT_CONFIG["exclude"]["directories"] == []


def test_load_empty_config(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")
    assert load_config(path) == DEFAULT_CONFIG


def test_load_config_rejects_bad_threshold(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("thresholds:\n  noav: lots\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(path)


def test_load_config_rejects_invalid_yaml(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("thresholds: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="Invalid YAML"):
        load_config(path)


def test_load_config_rejects_non_mapping(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- 1\n- 2\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="mapping"):
        load_config(path)


def test_load_config_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.yaml")


def test_template_is_valid_yaml_with_default_thresholds():
    data = yaml.safe_load(get_config_template())
    assert data["thresholds"] == DEFAULT_CONFIG["thresholds"]
    assert set(data["exclude"]) == {"directories", "extensions", "patterns"}


@pytest.mark.parametrize("text, message", [
    ("thresholds: 5\n", "thresholds must be a mapping"),
    ("exclude: [vendor]\n", "exclude must be a mapping"),
    ("exclude:\n  directories: vendor\n", "exclude.directories must be a list"),
])
def test_load_config_rejects_misshapen_sections(tmp_path, text, message):
    path = tmp_path / "shape.yaml"
    path.write_text(text, encoding="utf-8")
    with pytest.raises(ConfigError, match=message):
        load_config(path)


def test_threshold_section_must_be_mapping():
    with pytest.raises(ConfigError, match="thresholds must be a mapping"):
        ThresholdConfig.from_config({"thresholds": [1, 2]})
