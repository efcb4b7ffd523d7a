"""
Brain method detection for brain_method.

Flags methods that are at once too long, too complex, too deeply nested and
declare too many variables.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from brain_method.analyzers.metrics import MethodUnit, MetricSnapshot, measure
from brain_method.config import (
    CYCLO_THRESHOLD,
    LOC_THRESHOLD,
    MAXNESTING_THRESHOLD,
    NOAV_THRESHOLD,
    ThresholdConfig,
)
from brain_method.nodes import NodeKind

if TYPE_CHECKING:
    from typing import Any

    from brain_method.nodes import AstNode

logger = logging.getLogger(__name__)

RULE_ID = "BrainMethod"


@dataclass(frozen=True)
class Violation:
    """A method that satisfied the brain method policy."""

    rule_id: str
    method_name: str
    begin_line: int | None
    end_line: int | None
    message: str
    path: str | None = None
    metrics: MetricSnapshot | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "rule": self.rule_id,
            "method": self.method_name,
            "begin_line": self.begin_line,
            "end_line": self.end_line,
            "message": self.message,
        }
        if self.path is not None:
            result["path"] = self.path
        if self.metrics is not None:
            result["metrics"] = self.metrics.to_dict()
        return result


def is_brain_method(snapshot: MetricSnapshot, thresholds: ThresholdConfig) -> bool:
    """All four metrics must strictly exceed their thresholds."""
    return (
        snapshot.loc > thresholds.loc
        and snapshot.cyclomatic_complexity > thresholds.cyclo
        and snapshot.nesting_exceeds
        and snapshot.variable_count > thresholds.noav
    )


class BrainMethodAnalyzer:
    """Walk a compilation unit and report every brain method in it."""

    def __init__(
        self,
        cyclo_threshold: int = CYCLO_THRESHOLD,
        maxnesting_threshold: int = MAXNESTING_THRESHOLD,
        noav_threshold: int = NOAV_THRESHOLD,
        loc_threshold: int = LOC_THRESHOLD,
    ):
        """
        Initialize the brain method analyzer.

        Args:
            cyclo_threshold: Cyclomatic complexity a method must exceed.
            maxnesting_threshold: Nesting level some construct must exceed.
            noav_threshold: Declared variable count a method must exceed.
            loc_threshold: Line span a method must exceed.
        """
        self.thresholds = ThresholdConfig(
            cyclo=cyclo_threshold,
            maxnesting=maxnesting_threshold,
            noav=noav_threshold,
            loc=loc_threshold,
        )

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> BrainMethodAnalyzer:
        """Create an analyzer from the ``thresholds`` section of a config dict."""
        thresholds = ThresholdConfig.from_config(config)
        return cls(
            cyclo_threshold=thresholds.cyclo,
            maxnesting_threshold=thresholds.maxnesting,
            noav_threshold=thresholds.noav,
            loc_threshold=thresholds.loc,
        )

    def analyze(self, root: AstNode, path: str | None = None) -> list[Violation]:
        """
        Analyze one compilation unit.

        Args:
            root: Root of the tree, normally a CompilationUnit.
            path: Source path to attach to violations.

        Returns:
            Violations in pre-order of their method declarations.

        Raises:
            MalformedTreeError: If a node lacks the shape its kind requires.
                The whole unit is abandoned.
        """
        violations: list[Violation] = []

        for method, snapshot in self._iter_measured(root):
            if not is_brain_method(snapshot, self.thresholds):
                continue
            logger.debug(
                "Brain method %s (lines %s-%s): %s",
                method.name, method.begin_line, method.end_line, snapshot,
            )
            violations.append(self._build_violation(method, snapshot, path))

        return violations

    def measure_methods(self, root: AstNode) -> list[tuple[MethodUnit, MetricSnapshot]]:
        """Metrics for every method in the unit, flagged or not."""
        return list(self._iter_measured(root))

    def _iter_measured(self, root: AstNode):
        # All per-pass state lives in this generator; nothing carries over
        # between units or between calls.
        if root.kind == NodeKind.COMPILATION_UNIT:
            logger.debug("Analyzing compilation unit %s", getattr(root, "path", None) or "<memory>")

        for node in itertools.chain([root], root.iter_descendants()):
            if node.kind != NodeKind.METHOD_DECLARATION:
                continue
            method = MethodUnit.from_node(node)
            yield method, measure(method, self.thresholds)

    def _build_violation(
        self,
        method: MethodUnit,
        snapshot: MetricSnapshot,
        path: str | None,
    ) -> Violation:
        message = (
            f"Method Name={method.name} "
            f"(LOC={snapshot.loc}, CYCLO={snapshot.cyclomatic_complexity}, "
            f"NOAV={snapshot.variable_count}, MAXNESTING>{self.thresholds.maxnesting})"
        )
        return Violation(
            rule_id=RULE_ID,
            method_name=method.name,
            begin_line=method.begin_line,
            end_line=method.end_line,
            message=message,
            path=path,
            metrics=snapshot,
        )
