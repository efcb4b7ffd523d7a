"""
Serialized tree front-end for brain_method.

Reads node trees that another tool has already produced, as JSON or YAML
documents in the mapping format of brain_method.nodes.tree_from_dict:

    kind: CompilationUnit
    children:
      - kind: MethodDeclaration
        name: process
        begin_line: 10
        end_line: 90
        children: [...]
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

import yaml

from brain_method.nodes import CompilationUnit, MalformedTreeError, NodeKind, tree_from_dict
from brain_method.parsers.base import BaseParser, ParseError, ParserRegistry

logger = logging.getLogger(__name__)


@ParserRegistry.register("tree", [".json", ".yaml", ".yml"])
class TreeParser(BaseParser):
    """Load a serialized node tree using json or PyYAML."""

    def parse(self, filepath: Path) -> CompilationUnit:
        """
        Load a serialized tree.

        Args:
            filepath: Path to a .json, .yaml or .yml tree document.

        Returns:
            CompilationUnit root. A document whose root is some other kind
            is wrapped in a CompilationUnit.

        Raises:
            ParseError: If the document can't be read or isn't a node tree.
        """
        text = self.read_text(filepath)

        try:
            if filepath.suffix.lower() == ".json":
                data = json.loads(text)
            else:
                data = yaml.safe_load(text)
        except json.JSONDecodeError as e:
            raise ParseError(filepath, f"invalid JSON: {e}") from e
        except yaml.YAMLError as e:
            raise ParseError(filepath, f"invalid YAML: {e}") from e

        try:
            root = tree_from_dict(data)
        except (MalformedTreeError, TypeError) as e:
            raise ParseError(filepath, f"not a node tree: {e}") from e

        if root.kind == NodeKind.COMPILATION_UNIT:
            if root.path is None:
                root.path = str(filepath)
            return root

        logger.debug("Wrapping %s root of %s in a CompilationUnit", root.kind, filepath)
        unit = CompilationUnit(begin_line=root.begin_line, end_line=root.end_line, path=str(filepath))
        unit.add_child(root)
        return unit
