"""
CLI interface for brain_method.

Provides the command-line interface for scanning code for brain methods.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from brain_method import __version__
from brain_method.config import (
    DEFAULT_CONFIG,
    DEFAULT_EXCLUDE,
    ConfigError,
    get_config_template,
    load_config,
)
from brain_method.nodes import tree_to_dict
from brain_method.parsers import ParseError, ParserRegistry
from brain_method.scanner import DEFAULT_LANGUAGES, BrainMethodScanner

if TYPE_CHECKING:
    from typing import Any

logger = logging.getLogger(__name__)


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="brain-method",
        description="Find brain methods: long, complex, deeply nested methods with many variables",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
A method is reported only when ALL four metrics exceed their thresholds:

  LOC         end line - begin line           (default > 65)
  CYCLO       decision points                 (default > 4)
  MAXNESTING  enclosing control constructs    (default > 3)
  NOAV        locally declared variables      (default > 5)

Examples:
  brain-method src/                       # Scan a directory of Python files
  brain-method app.py --metrics           # Show metrics for every method
  brain-method tree.json                  # Analyze a serialized node tree
  brain-method src/ --format json -o report.json
  brain-method --init-config > brain-method.yaml
        """,
    )

    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="File or directory to scan (default: current directory)",
    )
    parser.add_argument(
        "-o", "--output",
        help="Output file (default: stdout)",
    )
    parser.add_argument(
        "--format",
        choices=["text", "json"],
        default="text",
        help="Report format (default: text)",
    )
    parser.add_argument(
        "--config",
        metavar="FILE",
        help="YAML config file with thresholds and exclusions",
    )
    parser.add_argument(
        "--init-config",
        action="store_true",
        help="Print a documented config template and exit",
    )
    parser.add_argument(
        "--metrics",
        action="store_true",
        help="Report metrics for every method, not only violations",
    )
    parser.add_argument(
        "--dump-tree",
        action="store_true",
        help="Print the node tree of a single file as JSON and exit",
    )

    thresholds = parser.add_argument_group("thresholds (override config)")
    thresholds.add_argument("--loc", type=int, metavar="N", help="LOC threshold")
    thresholds.add_argument("--cyclo", type=int, metavar="N", help="Cyclomatic complexity threshold")
    thresholds.add_argument("--maxnesting", type=int, metavar="N", help="Nesting threshold")
    thresholds.add_argument("--noav", type=int, metavar="N", help="Declared variables threshold")

    parser.add_argument(
        "--exclude",
        nargs="+",
        metavar="PATTERN",
        help="Additional directory names or *suffix patterns to exclude",
    )
    parser.add_argument(
        "--exclude-ext",
        nargs="+",
        metavar="EXT",
        help="File extensions to exclude (e.g., .pyw)",
    )
    parser.add_argument(
        "--lang",
        action="append",
        choices=sorted(ParserRegistry.list_languages()),
        help=f"Front-end to use when walking directories (default: {', '.join(DEFAULT_LANGUAGES)})",
    )
    parser.add_argument(
        "-j", "--workers",
        type=int,
        default=1,
        metavar="N",
        help="Analyze N files concurrently (default: 1)",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Exit with status 1 when any brain method is found",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose output (debug logging)",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    return parser


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
    )


def build_config(args: argparse.Namespace) -> dict[str, Any]:
    """Load the config file (if any) and apply threshold overrides from the CLI."""
    config: dict[str, Any] = {
        key: dict(value) if isinstance(value, dict) else value
        for key, value in DEFAULT_CONFIG.items()
    }
    if args.config:
        config_path = Path(args.config)
        if not config_path.exists():
            print(f"Error: Config file '{config_path}' does not exist", file=sys.stderr)
            sys.exit(1)
        try:
            config = load_config(config_path)
        except ConfigError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
        logger.debug("Loaded config: %s", config_path)

    overrides = {
        key: getattr(args, key)
        for key in ("loc", "cyclo", "maxnesting", "noav")
        if getattr(args, key) is not None
    }
    if overrides:
        config["thresholds"] = {**(config.get("thresholds") or {}), **overrides}
    return config


def scan(args: argparse.Namespace, config: dict[str, Any]) -> dict[str, Any]:
    """Scan the requested path and return the result."""
    root = Path(args.path).resolve()
    if not root.exists():
        print(f"Error: Path '{root}' does not exist", file=sys.stderr)
        sys.exit(1)

    exclude = DEFAULT_EXCLUDE.copy()
    if args.exclude:
        exclude.extend(args.exclude)

    # Add exclusions from config
    config_exclude = config.get("exclude") or {}
    exclude.extend(config_exclude.get("directories") or [])
    exclude.extend(config_exclude.get("patterns") or [])

    exclude_extensions = set(args.exclude_ext or [])
    exclude_extensions.update(config_exclude.get("extensions") or [])

    logger.debug("Scanning: %s", root)

    scanner = BrainMethodScanner(
        root=root,
        exclude=exclude,
        exclude_extensions=exclude_extensions,
        config=config,
        languages=args.lang,
        workers=args.workers,
        include_metrics=args.metrics,
    )
    return scanner.scan()


def dump_tree(path: str) -> dict[str, Any]:
    """Parse one file and return its node tree as a mapping."""
    filepath = Path(path)
    if not filepath.is_file():
        print(f"Error: --dump-tree needs a file, got '{path}'", file=sys.stderr)
        sys.exit(1)
    parser, _ = ParserRegistry.get_parser(filepath)
    if not parser:
        print(f"Error: No parser for '{filepath.suffix}' files", file=sys.stderr)
        sys.exit(1)
    try:
        return tree_to_dict(parser.parse(filepath))
    except ParseError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def format_text(result: dict[str, Any]) -> str:
    """Render a scan result as human-readable text."""
    lines: list[str] = []

    for violation in result["violations"]:
        location = f"{violation.get('path', '<unknown>')}:{violation['begin_line']}-{violation['end_line']}"
        lines.append(f"{location}: {violation['rule']} {violation['message']}")

    if "methods" in result:
        if lines:
            lines.append("")
        lines.append(f"{'LOC':>5} {'CYCLO':>5} {'NEST':>5} {'NOAV':>5}  METHOD")
        for method in result["methods"]:
            lines.append(
                f"{method['loc']:>5} {method['cyclo']:>5} {method['nesting_depth']:>5} "
                f"{method['noav']:>5}  {method['path']}:{method['begin_line']} {method['method']}"
            )

    summary = result["summary"]
    if lines:
        lines.append("")
    lines.append(
        f"{summary['violations']} brain method(s) in {summary['files_scanned']} file(s) "
        f"({summary['methods_analyzed']} methods analyzed, {summary['files_failed']} failed)"
    )
    return "\n".join(lines)


def write_output(text: str, output: str | None) -> None:
    """Write report text to a file or stdout."""
    if output:
        with open(output, "w", encoding="utf-8") as f:
            f.write(text)
            f.write("\n")
        logger.debug("Report written to %s", output)
    else:
        print(text)


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose)

    # Handle --init-config: just output the template and exit
    if args.init_config:
        print(get_config_template())
        return

    if args.dump_tree:
        write_output(json.dumps(dump_tree(args.path), indent=2), args.output)
        return

    config = build_config(args)
    result = scan(args, config)

    for diagnostic in result["diagnostics"]:
        print(f"{diagnostic['path']}: error: {diagnostic['error']}", file=sys.stderr)

    if args.format == "json":
        text = json.dumps(result, indent=2, default=str)
    else:
        text = format_text(result)
    write_output(text, args.output)

    if args.strict and result["violations"]:
        sys.exit(1)
