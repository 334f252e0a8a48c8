#!/usr/bin/env python3
"""Filter engine deciding which entries of a source tree are exported.

This module provides:
- Rule: a glob or regex pattern applied to entry names and/or relative paths
- FilterEngine: include/exclude evaluation over an ordered rule list

Precedence is not first-match-wins. Any enabled include rule that matches
keeps the entry, even when an exclude rule listed before it also matches.
Only when no include rule matches are the exclude rules consulted, and only
after both passes does the generated-file heuristic get a say.

Example:
    >>> engine = FilterEngine([
    ...     Rule("*.bak", RuleAction.EXCLUDE),
    ...     Rule("keep.bak", RuleAction.INCLUDE),
    ... ])
    >>> engine.is_excluded("/src/keep.bak", "keep.bak", "keep.bak")
    False
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional, Pattern

from srcexport.rules.patterns import PatternType, compile_pattern

# Assigning any of these drops the cached regex
_PATTERN_FIELDS = frozenset({"pattern", "pattern_type", "case_sensitive"})


class RuleAction(Enum):
    """Action to take when rule matches."""

    INCLUDE = "include"  # Keep entry
    EXCLUDE = "exclude"  # Skip entry


@dataclass(eq=False)
class Rule:
    """A filter rule for export evaluation."""

    pattern: Optional[str]
    action: RuleAction = RuleAction.EXCLUDE
    pattern_type: PatternType = PatternType.GLOB
    enabled: bool = True
    case_sensitive: bool = False
    apply_to_name: bool = True
    apply_to_path: bool = True
    apply_to_file: bool = True
    apply_to_directory: bool = True
    name: Optional[str] = None
    _regex: Optional[Pattern] = field(default=None, init=False, repr=False)

    def __setattr__(self, key, value):
        if key in _PATTERN_FIELDS and getattr(self, key, None) != value:
            object.__setattr__(self, "_regex", None)
        object.__setattr__(self, key, value)

    @property
    def active(self) -> bool:
        """Whether the rule takes part in evaluation."""
        return bool(self.pattern) and self.enabled

    @property
    def regex(self) -> Pattern:
        """Compiled pattern, built on first use."""
        if self._regex is None:
            regex = compile_pattern(self.pattern, self.pattern_type, self.case_sensitive)
            object.__setattr__(self, "_regex", regex)
        return self._regex

    def matches(self, absolute_path: str, relative_path: str, name: str) -> bool:
        """Check whether the rule applies to a filesystem entry.

        Args:
            absolute_path: Path used to inspect the entry on disk
            relative_path: Path relative to the export root
            name: Entry name

        Returns:
            True if the rule matches
        """
        is_file = os.path.isfile(absolute_path)
        is_dir = os.path.isdir(absolute_path)

        if not is_file and not is_dir:
            return False

        if self.apply_to_file and not is_file and not self.apply_to_directory:
            return False

        if self.apply_to_directory and not is_dir and not self.apply_to_file:
            return False

        if self.apply_to_name and self.regex.search(name):
            return True

        if self.apply_to_path and self.regex.search(relative_path):
            return True

        return False

    def describe(self) -> str:
        """One-line summary used in the configuration dump."""
        return (
            f"FilterType: {self.action.value.capitalize()}, Text: {self.pattern}, "
            f"CaseSensitive: {self.case_sensitive}"
        )


class FilterEngine:
    """Evaluates whether entries are excluded from an export.

    Features:
    - Include rules pre-empt exclude rules regardless of order
    - Rules restricted to names, relative paths, files or directories
    - Optional generated-file detection as a last resort
    """

    def __init__(self, rules: Optional[Iterable[Rule]] = None, generated_detector=None):
        """Initialize filter engine.

        Args:
            rules: Ordered rules
            generated_detector: Optional ``GeneratedFileDetector``; when given,
                files it classifies as generated are excluded
        """
        self._rules: List[Rule] = list(rules or [])
        self._generated_detector = generated_detector

    def add_rule(self, rule: Rule) -> None:
        """Append rule to the ordered rule list."""
        self._rules.append(rule)

    def get_rules(self) -> List[Rule]:
        """Get all rules (copy)."""
        return self._rules.copy()

    def is_excluded(self, absolute_path: str, relative_path: str, name: str) -> bool:
        """Decide whether an entry is excluded.

        Args:
            absolute_path: Entry path on disk
            relative_path: Path relative to the export root
            name: Entry name

        Returns:
            True if the entry must not be exported
        """
        active = [rule for rule in self._rules if rule.active]

        for rule in active:
            if rule.action != RuleAction.INCLUDE:
                continue
            if rule.matches(absolute_path, relative_path, name):
                return False

        for rule in active:
            if rule.action != RuleAction.EXCLUDE:
                continue
            if rule.matches(absolute_path, relative_path, name):
                return True

        if self._generated_detector is not None and self._generated_detector.is_generated(
            absolute_path, relative_path, name
        ):
            return True

        return False

    def get_matching_rules(self, absolute_path: str, relative_path: str, name: str) -> List[Rule]:
        """Get every active rule matching an entry, in configured order."""
        return [
            rule
            for rule in self._rules
            if rule.active and rule.matches(absolute_path, relative_path, name)
        ]

    def __len__(self) -> int:
        """Return number of rules."""
        return len(self._rules)
