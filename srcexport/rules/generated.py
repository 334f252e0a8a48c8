#!/usr/bin/env python3
"""Detection of tool-generated source files.

A file is considered generated when its name follows a designer/generator
naming convention (``*.designer.*``, ``*.g.*``) or when any of its lines
carries a well-known generator notice. Content detection reads the file line
by line until the first marker is found, so every line of a hand-written file
is read. Large trees pay for that when the heuristic is enabled.
"""

import os
from typing import Iterable, List, Optional

from srcexport.core.constants import GENERATED_FILE_MARKERS, GENERATED_NAME_PATTERNS
from srcexport.rules.engine import Rule, RuleAction


class GeneratedFileDetector:
    """Classifies files as generated by name or by content markers."""

    def __init__(
        self,
        name_patterns: Iterable[str] = GENERATED_NAME_PATTERNS,
        markers: Iterable[str] = GENERATED_FILE_MARKERS,
    ):
        """Initialize detector.

        Args:
            name_patterns: Glob patterns identifying generated file names
            markers: Case-insensitive text markers identifying generated content
        """
        # Matched against the file name only, never the directories above it
        self._rules: List[Rule] = [
            Rule(pattern, RuleAction.EXCLUDE, apply_to_path=False) for pattern in name_patterns
        ]
        self._markers = [marker.casefold() for marker in markers]

    def is_generated(self, absolute_path: str, relative_path: str, name: str) -> bool:
        """Check whether a file was produced by a tool.

        Args:
            absolute_path: File path on disk
            relative_path: Path relative to the export root
            name: File name

        Returns:
            True for generated files; directories are never generated
        """
        if not os.path.isfile(absolute_path):
            return False

        for rule in self._rules:
            if rule.matches(absolute_path, relative_path, name):
                return True

        return self.find_marker(absolute_path) is not None

    def find_marker(self, path: str) -> Optional[str]:
        """Return the first generator marker found in a file, if any."""
        with open(path, "r", encoding="utf-8", errors="replace") as f:
            for line in f:
                folded = line.casefold()
                for marker in self._markers:
                    if marker in folded:
                        return marker
        return None
