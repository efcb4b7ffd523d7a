"""
Brain Method - detect methods that are long, complex, deeply nested and
declare many variables, all at once.

Works on a pre-built node tree; front-ends are provided for Python source
(AST) and for serialized trees (JSON/YAML) produced by other parsers.
"""

__version__ = "1.0.0"

from brain_method.analyzers import BrainMethodAnalyzer, Violation
from brain_method.config import DEFAULT_CONFIG, DEFAULT_EXCLUDE, ThresholdConfig
from brain_method.scanner import BrainMethodScanner

__all__ = [
    "BrainMethodAnalyzer",
    "BrainMethodScanner",
    "DEFAULT_CONFIG",
    "DEFAULT_EXCLUDE",
    "ThresholdConfig",
    "Violation",
    "__version__",
]
