"""
Python front-end for brain_method.

Parses Python source with the ast module and maps it onto the node model:
every function becomes a method declaration, ``match`` statements become
switches, and the first binding of a local name is a variable declarator.
"""

from __future__ import annotations

import ast
import logging
import warnings
from pathlib import Path
from typing import TYPE_CHECKING

from brain_method.nodes import (
    AstNode,
    CompilationUnit,
    ConditionalExpr,
    MethodDeclaration,
    NodeKind,
    SwitchLabel,
    VariableDeclarator,
)
from brain_method.parsers.base import BaseParser, ParseError, ParserRegistry

if TYPE_CHECKING:
    from typing import Any

logger = logging.getLogger(__name__)


# ast node type -> node kind, for kinds that carry no extra fields
STATEMENT_KINDS: dict[type[ast.AST], str] = {
    ast.If: NodeKind.IF,
    ast.For: NodeKind.FOR,
    ast.AsyncFor: NodeKind.FOR,
    ast.While: NodeKind.WHILE,
    ast.Try: NodeKind.TRY,
    ast.TryStar: NodeKind.TRY,
    ast.ExceptHandler: NodeKind.CATCH,
}


def _span(node: ast.AST) -> dict[str, Any]:
    return {
        "begin_line": getattr(node, "lineno", None),
        "end_line": getattr(node, "end_lineno", None),
    }


def _parameter_names(args: ast.arguments) -> set[str]:
    params = [*args.posonlyargs, *args.args, *args.kwonlyargs]
    if args.vararg:
        params.append(args.vararg)
    if args.kwarg:
        params.append(args.kwarg)
    return {p.arg for p in params}


def _is_default_case(case: ast.match_case) -> bool:
    """A bare ``case _:`` or ``case name:`` without a guard matches anything."""
    pattern = case.pattern
    return case.guard is None and isinstance(pattern, ast.MatchAs) and pattern.pattern is None


class _TreeBuilder:
    """Converts one module; tracks bound names per function scope."""

    def __init__(self) -> None:
        self._scopes: list[set[str]] = []

    def build(self, module: ast.Module, path: str, line_count: int) -> CompilationUnit:
        unit = CompilationUnit(begin_line=1, end_line=line_count, path=path)
        self._scopes.append(set())
        for stmt in module.body:
            unit.add_child(self.convert(stmt))
        self._scopes.pop()
        return unit

    def convert(self, node: ast.AST) -> AstNode:
        if isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
            return self._convert_function(node)
        if isinstance(node, ast.ClassDef):
            return self._convert_scoped(node, AstNode(kind="ClassDef", **_span(node)), set())
        if isinstance(node, ast.Match):
            return self._convert_match(node)
        if isinstance(node, (ast.ListComp, ast.SetComp, ast.GeneratorExp, ast.DictComp)):
            return self._convert_comprehension(node)

        result = self._make_node(node)
        for child in ast.iter_child_nodes(node):
            result.add_child(self.convert(child))
        return result

    def _make_node(self, node: ast.AST) -> AstNode:
        kind = STATEMENT_KINDS.get(type(node))
        if kind:
            return AstNode(kind=kind, **_span(node))
        if isinstance(node, ast.IfExp):
            return ConditionalExpr(is_ternary=True, **_span(node))
        if isinstance(node, ast.BoolOp):
            return ConditionalExpr(is_ternary=False, **_span(node))
        if isinstance(node, ast.Name) and isinstance(node.ctx, ast.Store):
            scope = self._scopes[-1]
            if node.id not in scope:
                scope.add(node.id)
                return VariableDeclarator(name=node.id, **_span(node))
        return AstNode(kind=type(node).__name__, **_span(node))

    def _convert_function(self, node: ast.FunctionDef | ast.AsyncFunctionDef) -> AstNode:
        # Decorators, defaults and annotations run in the enclosing scope
        # and are left out of the method subtree.
        method = MethodDeclaration(name=node.name, **_span(node))
        return self._convert_scoped(node, method, _parameter_names(node.args), body_only=True)

    def _convert_scoped(
        self,
        node: ast.FunctionDef | ast.AsyncFunctionDef | ast.ClassDef,
        result: AstNode,
        bound: set[str],
        body_only: bool = False,
    ) -> AstNode:
        self._scopes.append(set(bound))
        try:
            children = node.body if body_only else list(ast.iter_child_nodes(node))
            for child in children:
                result.add_child(self.convert(child))
        finally:
            self._scopes.pop()
        return result

    def _convert_comprehension(
        self, node: ast.ListComp | ast.SetComp | ast.GeneratorExp | ast.DictComp
    ) -> AstNode:
        # Laid out like the equivalent statements: each generator is a For
        # nested in the previous one, each filter an If inside its For, and
        # the produced element sits innermost.
        result = self._make_node(node)
        innermost = result
        for generator in node.generators:
            loop = AstNode(kind=NodeKind.FOR, **_span(generator.target))
            loop.add_child(self.convert(generator.target))
            loop.add_child(self.convert(generator.iter))
            innermost.add_child(loop)
            innermost = loop
            for condition in generator.ifs:
                branch = AstNode(kind=NodeKind.IF, **_span(condition))
                branch.add_child(self.convert(condition))
                innermost.add_child(branch)
                innermost = branch
        elements = [node.key, node.value] if isinstance(node, ast.DictComp) else [node.elt]
        for element in elements:
            innermost.add_child(self.convert(element))
        return result

    def _convert_match(self, node: ast.Match) -> AstNode:
        # Children are laid out as subject, then label/body pairs, so the
        # final child is always a case body and never a label.
        switch = AstNode(kind=NodeKind.SWITCH, **_span(node))
        switch.add_child(self.convert(node.subject))
        for case in node.cases:
            label = switch.add_child(
                SwitchLabel(is_default=_is_default_case(case), **_span(case.pattern))
            )
            label.add_child(self.convert(case.pattern))
            if case.guard is not None:
                label.add_child(self.convert(case.guard))

            body = switch.add_child(AstNode(kind="CaseBody", **_span(case.body[0])))
            for stmt in case.body:
                body.add_child(self.convert(stmt))
            body.end_line = getattr(case.body[-1], "end_lineno", None)
        return switch


@ParserRegistry.register("python", [".py", ".pyw"])
class PythonParser(BaseParser):
    """Python parser using the ast module."""

    def parse(self, filepath: Path) -> CompilationUnit:
        """
        Parse a Python file into a node tree.

        Args:
            filepath: Path to the Python file.

        Returns:
            CompilationUnit whose method declarations are the file's functions.

        Raises:
            ParseError: If the file can't be read or has a syntax error.
        """
        source = self.read_text(filepath)
        return self.parse_source(source, str(filepath))

    def parse_source(self, source: str, path: str = "<string>") -> CompilationUnit:
        """Parse Python source text into a node tree."""
        try:
            # Suppress SyntaxWarnings from scanned files (e.g., invalid escape sequences)
            with warnings.catch_warnings():
                warnings.simplefilter("ignore", SyntaxWarning)
                module = ast.parse(source, filename=path)
        except SyntaxError as e:
            logger.debug("Syntax error in %s: %s", path, e)
            raise ParseError(path, f"syntax error at line {e.lineno}: {e.msg}") from e
        except (ValueError, RecursionError, MemoryError) as e:
            raise ParseError(path, f"could not parse: {e}") from e

        try:
            return _TreeBuilder().build(module, path, len(source.splitlines()))
        except RecursionError as e:
            raise ParseError(path, "source nested too deeply to convert") from e
