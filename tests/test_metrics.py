"""Tests for the per-method metric calculators."""

from __future__ import annotations

import logging

import pytest

from brain_method.analyzers.metrics import (
    MethodUnit,
    compute_cyclomatic_complexity,
    compute_loc,
    compute_max_nesting,
    compute_nesting_depth,
    compute_noav,
    measure,
)
from brain_method.config import ThresholdConfig
from brain_method.nodes import (
    AstNode,
    CompilationUnit,
    MalformedTreeError,
    MethodDeclaration,
    NodeKind,
    make_node,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _node(kind: str, *children: AstNode, **attrs) -> AstNode:
    return make_node(kind, children=list(children), **attrs)


def _nested(*kinds: str, inner: AstNode | None = None) -> AstNode:
    """Chain of nodes, first kind outermost."""
    current = inner
    for kind in reversed(kinds):
        current = _node(kind, *([current] if current is not None else []))
    return current


def _label(default: bool = False) -> AstNode:
    return _node(NodeKind.SWITCH_LABEL, is_default=default)


def _method(*children: AstNode, begin: int | None = 1, end: int | None = 70) -> MethodUnit:
    node = MethodDeclaration(name="work", begin_line=begin, end_line=end, children=list(children))
    return MethodUnit.from_node(node)


# ---------------------------------------------------------------------------
# MethodUnit
# ---------------------------------------------------------------------------

def test_method_unit_from_declaration():
    node = MethodDeclaration(name="run", begin_line=3, end_line=9)
    unit = MethodUnit.from_node(node)
    assert (unit.name, unit.begin_line, unit.end_line) == ("run", 3, 9)
    assert unit.body is node


@pytest.mark.parametrize("node", [
    AstNode(kind=NodeKind.METHOD_DECLARATION),
    MethodDeclaration(),
])
def test_method_unit_needs_named_declaration(node):
    with pytest.raises(MalformedTreeError):
        MethodUnit.from_node(node)


# ---------------------------------------------------------------------------
# LOC
# ---------------------------------------------------------------------------

def test_loc_is_end_minus_begin():
    assert compute_loc(_method(begin=10, end=76)) == 66


def test_loc_single_line_method_is_zero():
    assert compute_loc(_method(begin=5, end=5)) == 0


def test_loc_missing_lines_is_zero_and_logged(caplog):
    with caplog.at_level(logging.WARNING):
        assert compute_loc(_method(begin=None, end=None)) == 0
    assert "no line range" in caplog.text


# ---------------------------------------------------------------------------
# NOAV
# ---------------------------------------------------------------------------

def test_noav_counts_declarators_at_any_depth():
    method = _method(
        _node(NodeKind.VARIABLE_DECLARATOR, name="a"),
        _nested(NodeKind.IF, NodeKind.FOR, inner=_node(NodeKind.VARIABLE_DECLARATOR, name="b")),
        _node("Block", _node(NodeKind.VARIABLE_DECLARATOR, name="c")),
    )
    assert compute_noav(method) == 3


def test_noav_zero_without_declarations():
    assert compute_noav(_method(_node(NodeKind.IF))) == 0


# ---------------------------------------------------------------------------
# Cyclomatic complexity
# ---------------------------------------------------------------------------

def test_cyclo_empty_body_is_zero():
    assert compute_cyclomatic_complexity(_method()) == 0


def test_cyclo_non_empty_body_has_baseline():
    assert compute_cyclomatic_complexity(_method(_node("Return"))) == 1


def test_cyclo_if_and_for():
    assert compute_cyclomatic_complexity(_method(_node(NodeKind.IF), _node(NodeKind.FOR))) == 3


@pytest.mark.parametrize("kind", [
    NodeKind.FOR, NodeKind.IF, NodeKind.WHILE, NodeKind.CATCH, NodeKind.DO,
])
def test_cyclo_decision_kinds(kind):
    assert compute_cyclomatic_complexity(_method(_node(kind))) == 2


@pytest.mark.parametrize("kind", [NodeKind.TRY, "With", "Lambda", NodeKind.VARIABLE_DECLARATOR])
def test_cyclo_ignores_other_kinds(kind):
    assert compute_cyclomatic_complexity(_method(_node(kind))) == 1


def test_cyclo_counts_nested_decisions():
    method = _method(_nested(NodeKind.WHILE, NodeKind.IF, NodeKind.DO, NodeKind.CATCH))
    assert compute_cyclomatic_complexity(method) == 5


def test_cyclo_ternary_counts_only_when_ternary():
    ternary = _node(NodeKind.CONDITIONAL_EXPR, is_ternary=True)
    non_ternary = _node(NodeKind.CONDITIONAL_EXPR, is_ternary=False)
    assert compute_cyclomatic_complexity(_method(ternary)) == 2
    assert compute_cyclomatic_complexity(_method(non_ternary)) == 1


def test_cyclo_conditional_without_flag_fails_fast():
    untyped = AstNode(kind=NodeKind.CONDITIONAL_EXPR, begin_line=4)
    with pytest.raises(MalformedTreeError, match="line 4"):
        compute_cyclomatic_complexity(_method(untyped))


def test_cyclo_switch_counts_non_default_labels():
    switch = _node(
        NodeKind.SWITCH,
        _node("Expression"),
        _label(), _node("Block"),
        _label(), _node("Block"),
        _label(), _node("Block"),
        _node("Block"),
    )
    # baseline + switch + three labels
    assert compute_cyclomatic_complexity(_method(switch)) == 1 + 4


def test_cyclo_switch_default_label_adds_nothing():
    without_default = _node(NodeKind.SWITCH, _label(), _label(), _label(), _node("Block"))
    with_default = _node(NodeKind.SWITCH, _label(), _label(), _label(), _label(default=True), _node("Block"))
    assert compute_cyclomatic_complexity(_method(without_default)) == 5
    assert compute_cyclomatic_complexity(_method(with_default)) == 5


def test_cyclo_switch_skips_last_child():
    switch = _node(NodeKind.SWITCH, _label(), _label())
    # only the first label is scanned
    assert compute_cyclomatic_complexity(_method(switch)) == 1 + 1 + 1


def test_cyclo_nested_switches_counted_independently():
    inner = _node(NodeKind.SWITCH, _label(), _label(), _node("Block"))
    outer = _node(NodeKind.SWITCH, _label(), _node("Block", inner), _label(default=True), _node("Block"))
    # baseline + outer(1 + 1 label) + inner(1 + 2 labels)
    assert compute_cyclomatic_complexity(_method(outer)) == 1 + 2 + 3


def test_cyclo_switch_label_without_flag_fails_fast():
    switch = _node(NodeKind.SWITCH, AstNode(kind=NodeKind.SWITCH_LABEL), _node("Block"))
    with pytest.raises(MalformedTreeError):
        compute_cyclomatic_complexity(_method(switch))


# ---------------------------------------------------------------------------
# Max nesting
# ---------------------------------------------------------------------------

def test_nesting_empty_method_never_exceeds():
    assert compute_max_nesting(_method(), threshold=0) is False


def test_nesting_at_threshold_does_not_exceed():
    # innermost If has three enclosing constructs
    method = _method(_nested(NodeKind.WHILE, NodeKind.FOR, NodeKind.IF, NodeKind.IF))
    assert compute_max_nesting(method, threshold=3) is False
    assert compute_nesting_depth(method) == 3


def test_nesting_above_threshold_exceeds():
    method = _method(_nested(NodeKind.IF, NodeKind.WHILE, NodeKind.FOR, NodeKind.IF, NodeKind.IF))
    assert compute_max_nesting(method, threshold=3) is True
    assert compute_nesting_depth(method) == 4


def test_nesting_counts_try_and_switch():
    method = _method(_nested(NodeKind.TRY, NodeKind.SWITCH, NodeKind.TRY, NodeKind.SWITCH, NodeKind.TRY))
    assert compute_max_nesting(method, threshold=3) is True


def test_nesting_ignores_do_and_catch():
    method = _method(_nested(
        NodeKind.DO, NodeKind.CATCH, NodeKind.IF, NodeKind.DO, NodeKind.IF,
        NodeKind.CATCH, NodeKind.FOR, NodeKind.IF,
    ))
    # enclosing If, If, For around the last If; Do and Catch don't count
    assert compute_nesting_depth(method) == 3
    assert compute_max_nesting(method, threshold=3) is False


def test_nesting_only_examines_control_constructs():
    # a deeply buried non-control node is not itself a candidate
    method = _method(_nested(
        NodeKind.IF, NodeKind.IF, NodeKind.IF, NodeKind.IF, inner=_node("Call"),
    ))
    assert compute_max_nesting(method, threshold=3) is False


def test_nesting_stops_at_method_root():
    method_node = MethodDeclaration(
        name="inner", begin_line=1, end_line=2, children=[_nested(NodeKind.IF, NodeKind.IF)],
    )
    unit = CompilationUnit(children=[_nested(NodeKind.IF, NodeKind.IF, NodeKind.IF, inner=method_node)])
    method = MethodUnit.from_node(method_node)
    assert compute_nesting_depth(method) == 1
    assert compute_max_nesting(method, threshold=1) is False
    assert unit.children


class _UnreachableNode(AstNode):
    def iter_ancestors(self, stop=None):
        raise AssertionError("nesting scan continued past the first deep construct")


def test_nesting_short_circuits_on_first_deep_construct():
    deep = _nested(NodeKind.IF, NodeKind.IF, NodeKind.IF, NodeKind.IF, NodeKind.IF)
    method = _method(deep, _UnreachableNode(kind=NodeKind.IF))
    assert compute_max_nesting(method, threshold=3) is True


def test_nesting_handles_very_deep_trees():
    method = _method(_nested(*([NodeKind.IF] * 2000)))
    assert compute_max_nesting(method, threshold=3) is True
    assert compute_noav(method) == 0
    assert compute_cyclomatic_complexity(method) == 2001


# ---------------------------------------------------------------------------
# Snapshot
# ---------------------------------------------------------------------------

def test_measure_builds_snapshot():
    method = _method(
        _node(NodeKind.VARIABLE_DECLARATOR, name="x"),
        _nested(NodeKind.FOR, NodeKind.IF),
        begin=10,
        end=20,
    )
    snapshot = measure(method, ThresholdConfig(maxnesting=0))
    assert snapshot.loc == 10
    assert snapshot.cyclomatic_complexity == 3
    assert snapshot.nesting_exceeds is True
    assert snapshot.variable_count == 1
    assert snapshot.to_dict() == {"loc": 10, "cyclo": 3, "nesting_exceeds": True, "noav": 1}


def test_measure_uses_default_thresholds():
    method = _method(_nested(NodeKind.FOR, NodeKind.IF))
    assert measure(method).nesting_exceeds is False
