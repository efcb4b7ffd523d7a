"""
Utility functions for brain_method.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typing import Iterable

logger = logging.getLogger(__name__)


def should_exclude(path: Path, exclude_patterns: list[str]) -> bool:
    """
    Check if path should be excluded based on patterns.

    Args:
        path: Path to check.
        exclude_patterns: List of patterns. Patterns starting with '*'
            match suffixes, others match directory names.

    Returns:
        True if the path should be excluded.
    """
    path_str = str(path)
    for pattern in exclude_patterns:
        if pattern.startswith("*"):
            # Suffix match (e.g., "*.pyc")
            if path_str.endswith(pattern[1:]):
                return True
        elif pattern in path_str.split(os.sep):
            # Directory name match
            return True
    return False


def normalize_extensions(extensions: Iterable[str] | None) -> set[str]:
    """
    Normalize file extensions to lowercase with a leading dot.

    Args:
        extensions: Extensions such as "py", ".PYW" or None.

    Returns:
        Set of normalized extensions.
    """
    result: set[str] = set()
    for ext in extensions or []:
        if not ext.startswith("."):
            ext = "." + ext
        result.add(ext.lower())
    return result
