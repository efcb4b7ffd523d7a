"""
Code analyzers for brain_method.

Metric calculators over a method subtree and the brain method analyzer
that combines them with the threshold policy.
"""

from brain_method.analyzers.metrics import (
    MethodUnit,
    MetricSnapshot,
    compute_cyclomatic_complexity,
    compute_loc,
    compute_max_nesting,
    compute_nesting_depth,
    compute_noav,
    measure,
)
from brain_method.analyzers.brain_method import (
    RULE_ID,
    BrainMethodAnalyzer,
    Violation,
    is_brain_method,
)

__all__ = [
    "MethodUnit",
    "MetricSnapshot",
    "compute_cyclomatic_complexity",
    "compute_loc",
    "compute_max_nesting",
    "compute_nesting_depth",
    "compute_noav",
    "measure",
    "RULE_ID",
    "BrainMethodAnalyzer",
    "Violation",
    "is_brain_method",
]
