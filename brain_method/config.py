"""
Configuration constants and loading utilities for brain_method.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

import yaml

if TYPE_CHECKING:
    from typing import Any


class ConfigError(ValueError):
    """Configuration file is unreadable or holds invalid values."""


# Brain method thresholds; every comparison against them is strict (>)
CYCLO_THRESHOLD = 4
MAXNESTING_THRESHOLD = 3
NOAV_THRESHOLD = 5
LOC_THRESHOLD = 65


@dataclass(frozen=True)
class ThresholdConfig:
    """The four limits a method must exceed at once to be a brain method."""

    cyclo: int = CYCLO_THRESHOLD
    maxnesting: int = MAXNESTING_THRESHOLD
    noav: int = NOAV_THRESHOLD
    loc: int = LOC_THRESHOLD

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> ThresholdConfig:
        """Build thresholds from the ``thresholds`` section of a config dict."""
        section = config.get("thresholds") or {}
        if not isinstance(section, dict):
            raise ConfigError(f"thresholds must be a mapping, got {section!r}")
        values = {}
        for key in ("cyclo", "maxnesting", "noav", "loc"):
            if section.get(key) is None:
                continue
            value = section[key]
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigError(f"thresholds.{key} must be an integer, got {value!r}")
            values[key] = value
        return cls(**values)


DEFAULT_EXCLUDE = [
    "node_modules",
    "__pycache__",
    ".git",
    ".venv",
    "venv",
    "dist",
    "build",
    ".tox",
    ".pytest_cache",
    ".mypy_cache",
    "*.pyc",
    "*.pyo",
    "*.egg-info",
]


DEFAULT_CONFIG: dict[str, Any] = {
    # Brain method thresholds (a method is flagged only if it exceeds all four)
    "thresholds": {
        "cyclo": CYCLO_THRESHOLD,
        "maxnesting": MAXNESTING_THRESHOLD,
        "noav": NOAV_THRESHOLD,
        "loc": LOC_THRESHOLD,
    },

    # Exclusion patterns (applied in addition to CLI exclusions)
    "exclude": {
        "directories": [],  # e.g., ["vendor", "generated"]
        "extensions": [],   # e.g., [".pyw"]
        "patterns": [],     # e.g., ["*_pb2.py"]
    },
}


def load_config(config_path: Path) -> dict[str, Any]:
    """
    Load configuration from YAML file, merged with defaults.

    Args:
        config_path: Path to the YAML configuration file.

    Returns:
        Configuration dictionary with user values merged over defaults.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ConfigError: If the file is not valid YAML or has bad threshold values.
    """
    with open(config_path, "r", encoding="utf-8") as f:
        try:
            user_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

    if not isinstance(user_config, dict):
        raise ConfigError(f"Config root must be a mapping: {config_path}")
    for key in ("thresholds", "exclude"):
        section = user_config.get(key)
        if section is not None and not isinstance(section, dict):
            raise ConfigError(f"{key} must be a mapping in {config_path}, got {section!r}")
    for key, value in (user_config.get("exclude") or {}).items():
        if value is not None and not isinstance(value, list):
            raise ConfigError(f"exclude.{key} must be a list in {config_path}, got {value!r}")

    # Deep merge with defaults
    config = copy.deepcopy(DEFAULT_CONFIG)
    for key, value in user_config.items():
        if isinstance(value, dict) and key in config and isinstance(config[key], dict):
            config[key] = {**config[key], **value}
        else:
            config[key] = value

    # Fail early on bad thresholds rather than at analysis time
    ThresholdConfig.from_config(config)
    return config


def get_config_template() -> str:
    """Generate a documented YAML config template."""
    return f'''# =============================================================================
# Brain Method Detector Configuration
# =============================================================================
# A method is reported as a brain method only when ALL of these hold:
#
#   LOC   > thresholds.loc          (end line - begin line of the method)
#   CYCLO > thresholds.cyclo        (decision points: if/for/while/do/catch,
#                                    ternaries, switch plus non-default cases)
#   MAXNESTING > thresholds.maxnesting
#                                   (enclosing if/while/for/switch/try around
#                                    any inner control construct)
#   NOAV  > thresholds.noav         (locally declared variables)
#
# Usage:
#   brain-method src/ --config this_file.yaml
# =============================================================================

thresholds:
  cyclo: {CYCLO_THRESHOLD}
  maxnesting: {MAXNESTING_THRESHOLD}
  noav: {NOAV_THRESHOLD}
  loc: {LOC_THRESHOLD}

# =============================================================================
# EXCLUSIONS
# =============================================================================
# Applied IN ADDITION to CLI --exclude and --exclude-ext flags.
# =============================================================================
exclude:
  # Directories to skip
  directories:
    # - vendor

  # File extensions to skip
  extensions:
    # - .pyw

  # Glob-like suffix patterns to skip
  patterns:
    # - "*_pb2.py"
'''
