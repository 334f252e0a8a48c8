"""srcexport Rules System.

This module provides the filter rules deciding which entries are exported:
- compile_pattern: Glob and regex pattern compilation
- FilterEngine: Include/exclude evaluation with include precedence
- GeneratedFileDetector: Naming and content heuristics for generated files
"""

from .engine import FilterEngine, Rule, RuleAction
from .generated import GeneratedFileDetector
from .patterns import PatternType, compile_pattern, glob_to_regex

__all__ = [
    # Pattern compilation
    "PatternType",
    "compile_pattern",
    "glob_to_regex",
    # Filter engine
    "RuleAction",
    "Rule",
    "FilterEngine",
    "GeneratedFileDetector",
]
