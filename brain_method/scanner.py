"""
Main scanner orchestrator for brain_method.

Walks a file or directory, hands each supported file to its front-end
parser and runs the brain method analyzer over the resulting tree.
"""

from __future__ import annotations

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING

from brain_method import __version__ as VERSION
from brain_method.analyzers import BrainMethodAnalyzer
from brain_method.analyzers.metrics import compute_nesting_depth
from brain_method.config import DEFAULT_CONFIG, DEFAULT_EXCLUDE
from brain_method.nodes import MalformedTreeError, NodeKind
from brain_method.parsers import ParseError, ParserRegistry
from brain_method.utils import normalize_extensions, should_exclude

if TYPE_CHECKING:
    from typing import Any, Iterator

logger = logging.getLogger(__name__)

# Languages picked up when walking a directory; other registered
# front-ends are used only for files named explicitly.
DEFAULT_LANGUAGES = ("python",)


class BrainMethodScanner:
    """Scan files for brain methods and collect violations and diagnostics."""

    def __init__(
        self,
        root: Path,
        exclude: list[str] | None = None,
        exclude_extensions: set[str] | None = None,
        config: dict[str, Any] | None = None,
        languages: tuple[str, ...] | list[str] | None = None,
        workers: int = 1,
        include_metrics: bool = False,
    ):
        """
        Initialize the scanner.

        Args:
            root: File or directory to scan.
            exclude: Patterns to exclude (directories, file patterns).
            exclude_extensions: File extensions to exclude.
            config: Configuration dictionary (merged with defaults).
            languages: Front-end languages to use when walking directories.
            workers: Number of files analyzed concurrently.
            include_metrics: Whether to report metrics for every method.
        """
        self.root = root.resolve()
        self.exclude = exclude or DEFAULT_EXCLUDE.copy()
        self.exclude_extensions = normalize_extensions(exclude_extensions)
        self.config = config or DEFAULT_CONFIG
        self.languages = tuple(languages or DEFAULT_LANGUAGES)
        self.workers = max(1, workers)
        self.include_metrics = include_metrics

        self.analyzer = BrainMethodAnalyzer.from_config(self.config)

    def scan(self) -> dict[str, Any]:
        """
        Scan every selected file.

        Returns:
            Dictionary with meta, summary, violations and diagnostics, plus
            per-method metrics when include_metrics is set.
        """
        files = list(self._iter_files())
        logger.debug("Scanning %d file(s) under %s", len(files), self.root)

        if self.workers > 1 and len(files) > 1:
            # Files share nothing but the read-only analyzer thresholds
            with ThreadPoolExecutor(max_workers=self.workers) as executor:
                file_results = list(executor.map(self.scan_file, files))
        else:
            file_results = [self.scan_file(f) for f in files]

        result = self._init_result()
        for file_result in file_results:
            summary = result["summary"]
            summary["files_scanned"] += 1
            summary["methods_analyzed"] += file_result["method_count"]

            if "error" in file_result:
                summary["files_failed"] += 1
                result["diagnostics"].append({
                    "path": file_result["path"],
                    "error": file_result["error"],
                })
                continue

            result["violations"].extend(file_result["violations"])
            if self.include_metrics:
                result["methods"].extend(file_result["methods"])

        result["summary"]["violations"] = len(result["violations"])
        if not self.include_metrics:
            del result["methods"]
        return result

    def scan_file(self, filepath: Path) -> dict[str, Any]:
        """
        Parse and analyze a single file.

        Parse failures and malformed trees are returned under an "error"
        key rather than raised, so one bad file does not stop a scan.
        """
        rel_path = self._relative(filepath)
        file_result: dict[str, Any] = {
            "path": rel_path,
            "method_count": 0,
            "violations": [],
            "methods": [],
        }

        parser, language = ParserRegistry.get_parser(filepath)
        if not parser:
            file_result["error"] = "no parser registered for this file type"
            return file_result
        file_result["language"] = language

        try:
            unit = parser.parse(filepath)
            violations = self.analyzer.analyze(unit, path=rel_path)
            measured = self.analyzer.measure_methods(unit) if self.include_metrics else []
        except ParseError as e:
            logger.warning("Could not parse %s: %s", rel_path, e.reason)
            file_result["error"] = e.reason
            return file_result
        except MalformedTreeError as e:
            logger.warning("Malformed tree in %s: %s", rel_path, e)
            file_result["error"] = f"malformed tree: {e}"
            return file_result

        file_result["method_count"] = sum(
            1 for node in unit.iter_descendants() if node.kind == NodeKind.METHOD_DECLARATION
        )
        file_result["violations"] = [v.to_dict() for v in violations]
        file_result["methods"] = [
            {
                "path": rel_path,
                "method": method.name,
                "begin_line": method.begin_line,
                "end_line": method.end_line,
                "nesting_depth": compute_nesting_depth(method),
                **snapshot.to_dict(),
            }
            for method, snapshot in measured
        ]
        return file_result

    def _init_result(self) -> dict[str, Any]:
        """Initialize the result structure."""
        thresholds = self.analyzer.thresholds
        return {
            "meta": {
                "generated_at": datetime.now(timezone.utc).isoformat(),
                "tool_version": VERSION,
                "root": str(self.root),
                "thresholds": {
                    "loc": thresholds.loc,
                    "cyclo": thresholds.cyclo,
                    "maxnesting": thresholds.maxnesting,
                    "noav": thresholds.noav,
                },
            },
            "summary": {
                "files_scanned": 0,
                "files_failed": 0,
                "methods_analyzed": 0,
                "violations": 0,
            },
            "violations": [],
            "methods": [],
            "diagnostics": [],
        }

    def _iter_files(self) -> Iterator[Path]:
        """Yield files to scan, in a stable order."""
        if self.root.is_file():
            # A file named explicitly is scanned with whatever front-end fits it
            yield self.root
            return

        for root, dirs, files in os.walk(self.root):
            rel_root = Path(root).relative_to(self.root)
            # Filter out excluded directories
            dirs[:] = sorted(
                d for d in dirs
                if not should_exclude(rel_root / d, self.exclude)
            )

            for filename in sorted(files):
                filepath = Path(root) / filename
                if should_exclude(rel_root / filename, self.exclude):
                    continue
                if filepath.suffix.lower() in self.exclude_extensions:
                    continue
                _, language = ParserRegistry.get_parser(filepath)
                if language in self.languages:
                    yield filepath

    def _relative(self, filepath: Path) -> str:
        base = self.root.parent if self.root.is_file() else self.root
        try:
            return str(filepath.resolve().relative_to(base))
        except ValueError:
            return str(filepath)
