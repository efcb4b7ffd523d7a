"""
AST node model consumed by the brain method analyzers.

Front-ends (see brain_method.parsers) build these trees; the analyzers only
read them. Nodes own their children and keep a weak reference to their
parent, which is what ancestor queries walk.
"""

from __future__ import annotations

import logging
import weakref
from dataclasses import dataclass, field, fields
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typing import Any, Iterator, Mapping

logger = logging.getLogger(__name__)


class MalformedTreeError(ValueError):
    """A node does not carry the shape its kind promises."""


class NodeKind:
    """Node kinds the analyzers inspect. Any other kind string is inert."""

    COMPILATION_UNIT = "CompilationUnit"
    METHOD_DECLARATION = "MethodDeclaration"
    IF = "If"
    FOR = "For"
    WHILE = "While"
    DO = "Do"
    SWITCH = "Switch"
    SWITCH_LABEL = "SwitchLabel"
    TRY = "Try"
    CATCH = "Catch"
    CONDITIONAL_EXPR = "ConditionalExpr"
    VARIABLE_DECLARATOR = "VariableDeclarator"


@dataclass(eq=False)
class AstNode:
    """A tree node with a kind tag, a source line span and ordered children."""

    kind: str
    begin_line: int | None = None
    end_line: int | None = None
    children: list[AstNode] = field(default_factory=list, repr=False)
    _parent_ref: weakref.ref | None = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        for child in self.children:
            child._parent_ref = weakref.ref(self)

    @property
    def parent(self) -> AstNode | None:
        if self._parent_ref is None:
            return None
        return self._parent_ref()

    def add_child(self, child: AstNode) -> AstNode:
        """Append a child and point its parent reference at this node."""
        self.children.append(child)
        child._parent_ref = weakref.ref(self)
        return child

    def iter_descendants(self) -> Iterator[AstNode]:
        """Yield every node below this one in pre-order.

        Uses an explicit stack so very deep trees do not hit the recursion
        limit.
        """
        stack = list(reversed(self.children))
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def iter_ancestors(self, stop: AstNode | None = None) -> Iterator[AstNode]:
        """Yield parents from the nearest outward, ending before ``stop``."""
        current = self.parent
        while current is not None and current is not stop:
            yield current
            current = current.parent


@dataclass(eq=False)
class CompilationUnit(AstNode):
    kind: str = NodeKind.COMPILATION_UNIT
    path: str | None = None


@dataclass(eq=False)
class MethodDeclaration(AstNode):
    kind: str = NodeKind.METHOD_DECLARATION
    name: str | None = None


@dataclass(eq=False)
class ConditionalExpr(AstNode):
    """Conditional expression; only the ternary form is a decision point."""

    kind: str = NodeKind.CONDITIONAL_EXPR
    is_ternary: bool | None = None


@dataclass(eq=False)
class SwitchLabel(AstNode):
    kind: str = NodeKind.SWITCH_LABEL
    is_default: bool | None = None


@dataclass(eq=False)
class VariableDeclarator(AstNode):
    kind: str = NodeKind.VARIABLE_DECLARATOR
    name: str | None = None


# kind -> variant class carrying the fields relevant to that kind
VARIANTS: dict[str, type[AstNode]] = {
    NodeKind.COMPILATION_UNIT: CompilationUnit,
    NodeKind.METHOD_DECLARATION: MethodDeclaration,
    NodeKind.CONDITIONAL_EXPR: ConditionalExpr,
    NodeKind.SWITCH_LABEL: SwitchLabel,
    NodeKind.VARIABLE_DECLARATOR: VariableDeclarator,
}

_BASE_FIELDS = ("kind", "begin_line", "end_line", "children")


def make_node(kind: str, **attrs: Any) -> AstNode:
    """
    Create a node of the variant registered for ``kind``.

    Args:
        kind: Node kind tag.
        **attrs: Line span, children and variant-specific fields.

    Returns:
        A new node. Unknown kinds produce a plain AstNode.

    Raises:
        MalformedTreeError: If a field is not valid for the kind's variant,
            or a line number is not an integer.
    """
    node_class = VARIANTS.get(kind, AstNode)
    allowed = {f.name for f in fields(node_class) if f.init}
    unknown = set(attrs) - allowed
    if unknown:
        raise MalformedTreeError(
            f"{kind} node does not accept field(s): {', '.join(sorted(unknown))}"
        )
    for key in ("begin_line", "end_line"):
        value = attrs.get(key)
        if value is not None and (isinstance(value, bool) or not isinstance(value, int)):
            raise MalformedTreeError(f"{kind} node {key} must be an integer, got {value!r}")
    return node_class(kind=kind, **attrs)


def tree_from_dict(data: Mapping[str, Any]) -> AstNode:
    """
    Build a node tree from nested mappings.

    Each mapping needs a ``kind``; ``begin_line``, ``end_line`` and
    ``children`` are optional, and variant fields such as ``name``,
    ``is_ternary`` or ``is_default`` are passed through.

    Raises:
        MalformedTreeError: If a mapping has no kind or carries bad fields.
    """
    if not isinstance(data, dict) or "kind" not in data:
        raise MalformedTreeError(f"Tree node must be a mapping with a 'kind': {data!r:.80}")

    # Iterative build; serialized trees from other front-ends can be deep.
    root = _node_from_mapping(data)
    stack = [(root, data.get("children") or [])]
    while stack:
        parent, raw_children = stack.pop()
        for raw in raw_children:
            if not isinstance(raw, dict) or "kind" not in raw:
                raise MalformedTreeError(
                    f"Tree node must be a mapping with a 'kind': {raw!r:.80}"
                )
            child = parent.add_child(_node_from_mapping(raw))
            stack.append((child, raw.get("children") or []))
    return root


def _node_from_mapping(data: Mapping[str, Any]) -> AstNode:
    attrs = {k: v for k, v in data.items() if k not in ("kind", "children")}
    return make_node(str(data["kind"]), **attrs)


def tree_to_dict(node: AstNode) -> dict[str, Any]:
    """Serialize a tree into the mapping format read by tree_from_dict."""
    result = _node_to_mapping(node)
    stack = [(node, result)]
    while stack:
        current, mapping = stack.pop()
        if not current.children:
            continue
        mapping["children"] = []
        for child in current.children:
            child_mapping = _node_to_mapping(child)
            mapping["children"].append(child_mapping)
            stack.append((child, child_mapping))
    return result


def _node_to_mapping(node: AstNode) -> dict[str, Any]:
    mapping: dict[str, Any] = {"kind": node.kind}
    for f in fields(node):
        if not f.init or f.name in ("kind", "children"):
            continue
        value = getattr(node, f.name)
        if value is not None:
            mapping[f.name] = value
    return mapping
