"""
Base parser class and registry for front-ends that build node trees.

To add support for a new input format:
1. Create a new parser class inheriting from BaseParser
2. Implement the `parse` method, returning a CompilationUnit
3. Register using the @ParserRegistry.register decorator or ParserRegistry.register_parser()

Example:
    @ParserRegistry.register("java", [".java"])
    class JavaParser(BaseParser):
        def parse(self, filepath: Path) -> CompilationUnit:
            # Build a node tree from a .java file
            ...
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from typing import Callable, Type

    from brain_method.nodes import CompilationUnit

logger = logging.getLogger(__name__)


class ParseError(ValueError):
    """Source file could not be read or turned into a node tree."""

    def __init__(self, filepath: Path | str, reason: str):
        super().__init__(f"{filepath}: {reason}")
        self.filepath = str(filepath)
        self.reason = reason


class ParserRegistry:
    """
    Registry for front-end parsers.

    Manages parser classes and their file extension mappings.
    """

    _parser_classes: ClassVar[dict[str, Type["BaseParser"]]] = {}
    _extension_map: ClassVar[dict[str, str]] = {}  # .ext -> language name
    _cached_parsers: ClassVar[dict[str, "BaseParser"]] = {}  # language -> instance

    @classmethod
    def register(
        cls,
        language: str,
        extensions: list[str],
    ) -> Callable[[Type["BaseParser"]], Type["BaseParser"]]:
        """
        Decorator to register a parser class.

        Args:
            language: Language name (e.g., "python", "tree").
            extensions: List of file extensions (e.g., [".py", ".pyw"]).

        Returns:
            Decorator function.
        """
        def decorator(parser_class: Type["BaseParser"]) -> Type["BaseParser"]:
            cls.register_parser(language, extensions, parser_class)
            return parser_class
        return decorator

    @classmethod
    def register_parser(
        cls,
        language: str,
        extensions: list[str],
        parser_class: Type["BaseParser"],
    ) -> None:
        """
        Register a parser class for a language.

        Args:
            language: Language name.
            extensions: List of file extensions.
            parser_class: Parser class (instantiated on first use).
        """
        cls._parser_classes[language] = parser_class
        cls._cached_parsers.pop(language, None)

        for ext in extensions:
            ext_lower = ext.lower()
            if not ext_lower.startswith("."):
                ext_lower = "." + ext_lower
            cls._extension_map[ext_lower] = language

        logger.debug("Registered parser for %s: %s", language, extensions)

    @classmethod
    def get_parser(cls, filepath: Path) -> tuple["BaseParser" | None, str | None]:
        """
        Get the appropriate parser for a file.

        Args:
            filepath: Path to the file.

        Returns:
            Tuple of (parser instance, language name), or (None, None) if no parser.
        """
        language = cls._extension_map.get(filepath.suffix.lower())
        if language:
            return cls.get_parser_for_language(language), language
        return None, None

    @classmethod
    def get_parser_for_language(cls, language: str) -> "BaseParser" | None:
        """Get parser by language name."""
        parser_class = cls._parser_classes.get(language)
        if not parser_class:
            return None
        if language not in cls._cached_parsers:
            cls._cached_parsers[language] = parser_class()
        return cls._cached_parsers[language]

    @classmethod
    def list_languages(cls) -> list[str]:
        """Get list of registered languages."""
        return list(cls._parser_classes.keys())

    @classmethod
    def list_extensions(cls) -> dict[str, str]:
        """Get mapping of extensions to languages."""
        return dict(cls._extension_map)


class BaseParser(ABC):
    """
    Abstract base class for front-end parsers.

    Parsers are stateless between files, so one instance may be shared by
    several scanning threads.
    """

    @abstractmethod
    def parse(self, filepath: Path) -> CompilationUnit:
        """
        Parse a file into a node tree.

        Args:
            filepath: Path to the source file.

        Returns:
            CompilationUnit root with parent references populated.

        Raises:
            ParseError: If the file can't be read or parsed.
        """
        ...

    def read_text(self, filepath: Path) -> str:
        """Read a source file as UTF-8, wrapping I/O errors in ParseError."""
        try:
            with open(filepath, "r", encoding="utf-8") as f:
                return f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise ParseError(filepath, f"could not read file: {e}") from e
