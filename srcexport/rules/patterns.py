#!/usr/bin/env python3
r"""Pattern compilation for filter rules.

Two expression types are supported:
- Glob patterns: ``*`` matches any sequence (including path separators),
  ``?`` any single character and ``|`` separates alternatives. The whole
  input must match.
- Regular expressions, used verbatim and searched anywhere in the input.

Matching is case-insensitive unless requested otherwise and ``.`` also
matches newlines.

Example:
    >>> regex = compile_pattern("*.bak|*.tmp", PatternType.GLOB)
    >>> bool(regex.search("notes.BAK"))
    True
"""

import re
from enum import Enum
from typing import Pattern

from srcexport.core.validators import ValidationError


class PatternType(Enum):
    """Pattern expression type."""

    GLOB = "glob"  # *.bak, Debug|Release
    REGEX = "regex"  # Regular expressions


def glob_to_regex(pattern: str) -> str:
    """Translate a glob pattern into an anchored regular expression.

    Args:
        pattern: Glob pattern

    Returns:
        Regular expression source matching the whole input
    """
    escaped = re.escape(pattern)
    escaped = escaped.replace(r"\*", ".*").replace(r"\|", "|").replace(r"\?", ".")
    return "^(?:" + escaped + ")$"


def compile_pattern(
    pattern: str, pattern_type: PatternType = PatternType.GLOB, case_sensitive: bool = False
) -> Pattern:
    """Compile a rule pattern.

    Args:
        pattern: Pattern text
        pattern_type: Glob or regex
        case_sensitive: Whether matching honours case

    Returns:
        Compiled regular expression

    Raises:
        ValidationError: If a regex pattern does not compile
    """
    flags = re.DOTALL
    if not case_sensitive:
        flags |= re.IGNORECASE

    if pattern_type == PatternType.REGEX:
        source = pattern
    else:
        source = glob_to_regex(pattern)

    try:
        return re.compile(source, flags)
    except re.error as e:
        raise ValidationError(f"Invalid {pattern_type.value} pattern {pattern!r}: {e}")
