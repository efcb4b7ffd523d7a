"""
Front-end parsers for brain_method.

Each parser turns a source file into a node tree (a CompilationUnit).
Custom parsers can be added by inheriting from BaseParser.
"""

from brain_method.parsers.base import BaseParser, ParseError, ParserRegistry
from brain_method.parsers.python import PythonParser
from brain_method.parsers.tree import TreeParser

__all__ = [
    "BaseParser",
    "ParseError",
    "ParserRegistry",
    "PythonParser",
    "TreeParser",
]
