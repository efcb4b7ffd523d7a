"""
Per-method structural metrics for brain method detection.

Each calculator takes a MethodUnit and returns a value; nothing is carried
between calls, so methods and files can be measured independently.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from brain_method.config import MAXNESTING_THRESHOLD, ThresholdConfig
from brain_method.nodes import (
    ConditionalExpr,
    MalformedTreeError,
    MethodDeclaration,
    NodeKind,
    SwitchLabel,
)

if TYPE_CHECKING:
    from brain_method.nodes import AstNode

logger = logging.getLogger(__name__)


# Kinds adding one decision point each (ternaries and switches handled apart)
CYCLO_KINDS = frozenset({
    NodeKind.FOR,
    NodeKind.IF,
    NodeKind.WHILE,
    NodeKind.CATCH,
    NodeKind.DO,
})

# Kinds that open a nesting level; excludes Do and Catch, includes Try
NESTING_KINDS = frozenset({
    NodeKind.FOR,
    NodeKind.IF,
    NodeKind.WHILE,
    NodeKind.TRY,
    NodeKind.SWITCH,
})


@dataclass(frozen=True)
class MethodUnit:
    """A method declaration and its subtree, identified during one pass."""

    name: str
    begin_line: int | None
    end_line: int | None
    body: AstNode

    @classmethod
    def from_node(cls, node: AstNode) -> MethodUnit:
        """
        Wrap a MethodDeclaration node.

        Raises:
            MalformedTreeError: If the node is not a named MethodDeclaration.
        """
        if not isinstance(node, MethodDeclaration) or node.name is None:
            raise MalformedTreeError(
                f"{node.kind} node at line {node.begin_line} is not a named method declaration"
            )
        return cls(
            name=node.name,
            begin_line=node.begin_line,
            end_line=node.end_line,
            body=node,
        )


@dataclass(frozen=True)
class MetricSnapshot:
    """The four metrics of one method."""

    loc: int
    cyclomatic_complexity: int
    nesting_exceeds: bool
    variable_count: int

    def to_dict(self) -> dict[str, int | bool]:
        return {
            "loc": self.loc,
            "cyclo": self.cyclomatic_complexity,
            "nesting_exceeds": self.nesting_exceeds,
            "noav": self.variable_count,
        }


def compute_loc(method: MethodUnit) -> int:
    """
    Line span of the method: end line minus begin line.

    Missing line metadata yields 0 instead of an error.
    """
    if method.begin_line is None or method.end_line is None:
        logger.warning(
            "Method %s has no line range; LOC treated as 0", method.name
        )
        return 0
    return method.end_line - method.begin_line


def compute_noav(method: MethodUnit) -> int:
    """Count variable declarators anywhere below the method."""
    return sum(
        1 for node in method.body.iter_descendants()
        if node.kind == NodeKind.VARIABLE_DECLARATOR
    )


def compute_cyclomatic_complexity(method: MethodUnit) -> int:
    """
    McCabe-style complexity of a method.

    Baseline 1 for a non-empty body, plus one per for/if/while/catch/do,
    one per ternary conditional expression, and for every switch one for
    the switch itself plus one per non-default label among its direct
    children (the last child is not a label and is skipped).

    Raises:
        MalformedTreeError: If a conditional expression or switch label
            node lacks its ternary/default flag.
    """
    complexity = 1 if method.body.children else 0

    for node in method.body.iter_descendants():
        kind = node.kind
        if kind in CYCLO_KINDS:
            complexity += 1
        elif kind == NodeKind.CONDITIONAL_EXPR:
            if _is_ternary(node):
                complexity += 1
        elif kind == NodeKind.SWITCH:
            complexity += 1 + _count_case_labels(node)

    return complexity


def _is_ternary(node: AstNode) -> bool:
    if not isinstance(node, ConditionalExpr) or node.is_ternary is None:
        raise MalformedTreeError(
            f"ConditionalExpr at line {node.begin_line} has no ternary flag"
        )
    return node.is_ternary


def _count_case_labels(switch: AstNode) -> int:
    """Non-default labels among a switch's direct children, last child excluded."""
    count = 0
    for child in switch.children[:-1]:
        if child.kind != NodeKind.SWITCH_LABEL:
            continue
        if not isinstance(child, SwitchLabel) or child.is_default is None:
            raise MalformedTreeError(
                f"SwitchLabel at line {child.begin_line} has no default flag"
            )
        if not child.is_default:
            count += 1
    return count


def _nesting_level(node: AstNode, root: AstNode) -> int:
    """Number of nesting-kind ancestors between node and root, in one upward walk."""
    return sum(1 for parent in node.iter_ancestors(stop=root) if parent.kind in NESTING_KINDS)


def compute_max_nesting(method: MethodUnit, threshold: int = MAXNESTING_THRESHOLD) -> bool:
    """
    Check whether any control construct is nested deeper than ``threshold``.

    Stops at the first for/if/while/try/switch whose count of enclosing
    if/while/for/switch/try constructs exceeds the threshold.
    """
    for node in method.body.iter_descendants():
        if node.kind in NESTING_KINDS and _nesting_level(node, method.body) > threshold:
            return True
    return False


def compute_nesting_depth(method: MethodUnit) -> int:
    """Largest enclosing-construct count over all control constructs (0 if none)."""
    return max(
        (
            _nesting_level(node, method.body)
            for node in method.body.iter_descendants()
            if node.kind in NESTING_KINDS
        ),
        default=0,
    )


def measure(method: MethodUnit, thresholds: ThresholdConfig | None = None) -> MetricSnapshot:
    """Compute a fresh MetricSnapshot for one method."""
    thresholds = thresholds or ThresholdConfig()
    return MetricSnapshot(
        loc=compute_loc(method),
        cyclomatic_complexity=compute_cyclomatic_complexity(method),
        nesting_exceeds=compute_max_nesting(method, thresholds.maxnesting),
        variable_count=compute_noav(method),
    )
