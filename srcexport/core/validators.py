"""
srcexport Core: Input Validators.

This module provides validation functions for settings documents: flags,
filter rules, text replacements and excluded projects.
"""
import re
import uuid
from typing import Any, Dict

from srcexport.core.constants import BOOLEAN_KEYS, ConfigKey, ErrorCode, Limits

RULE_ACTIONS = ("include", "exclude")
EXPRESSION_TYPES = ("glob", "regex")
RULE_FLAGS = (
    ConfigKey.RULE_ENABLED,
    ConfigKey.RULE_CASE_SENSITIVE,
    ConfigKey.RULE_APPLY_TO_NAME,
    ConfigKey.RULE_APPLY_TO_PATH,
    ConfigKey.RULE_APPLY_TO_FILE,
    ConfigKey.RULE_APPLY_TO_DIRECTORY,
)


class ValidationError(Exception):
    """Base exception for validation errors."""

    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.INVALID_INPUT):
        """Initialize ValidationError.

        Args:
            message: Error message
            error_code: Associated error code
        """
        super().__init__(message)
        self.error_code = error_code


def validate_settings(config: Dict[str, Any]) -> bool:
    """Validate a settings document.

    Args:
        config: Settings dictionary

    Returns:
        True if valid

    Raises:
        ValidationError: If the settings are invalid
    """
    if not isinstance(config, dict):
        raise ValidationError("Settings must be a dictionary")

    for key in BOOLEAN_KEYS:
        if key in config and not isinstance(config[key], bool):
            raise ValidationError(f"Setting '{key}' must be boolean: {config[key]!r}")

    if ConfigKey.OUTPUT_READ_ONLY in config:
        value = config[ConfigKey.OUTPUT_READ_ONLY]
        if value is not None and not isinstance(value, bool):
            raise ValidationError(
                f"Setting '{ConfigKey.OUTPUT_READ_ONLY}' must be true, false or null: {value!r}"
            )

    sections = (
        (ConfigKey.RULES, validate_rule_config, "rule"),
        (ConfigKey.REPLACEMENTS, validate_replacement_config, "replacement"),
        (ConfigKey.EXCLUDED_PROJECTS, validate_excluded_project_config, "excluded project"),
    )
    for key, validator, label in sections:
        if key not in config or config[key] is None:
            continue

        items = config[key]
        if not isinstance(items, list):
            raise ValidationError(f"Setting '{key}' must be a list")

        for i, item in enumerate(items):
            try:
                validator(item)
            except ValidationError as e:
                raise ValidationError(f"Invalid {label} configuration at index {i}: {e}")

    return True


def validate_rule_config(rule: Dict[str, Any]) -> bool:
    """Validate a filter rule.

    Args:
        rule: Rule configuration dictionary

    Returns:
        True if valid

    Raises:
        ValidationError: If rule is invalid
    """
    if not isinstance(rule, dict):
        raise ValidationError("Rule must be a dictionary")

    if ConfigKey.RULE_PATTERN not in rule:
        raise ValidationError("Rule must have 'pattern' field")

    pattern = rule[ConfigKey.RULE_PATTERN]
    if pattern is not None and not isinstance(pattern, str):
        raise ValidationError(f"Rule pattern must be string, got {type(pattern).__name__}")

    action = rule.get(ConfigKey.RULE_ACTION, "exclude")
    if str(action).lower() not in RULE_ACTIONS:
        raise ValidationError(f"Invalid rule action: {action}. Must be one of {list(RULE_ACTIONS)}")

    expression_type = rule.get(ConfigKey.RULE_EXPRESSION_TYPE, "glob")
    if str(expression_type).lower() not in EXPRESSION_TYPES:
        raise ValidationError(
            f"Invalid expression type: {expression_type}. Must be one of {list(EXPRESSION_TYPES)}"
        )

    for flag in RULE_FLAGS:
        if flag in rule and not isinstance(rule[flag], bool):
            raise ValidationError(f"Rule '{flag}' must be boolean: {rule[flag]!r}")

    if pattern and str(expression_type).lower() == "regex":
        validate_regex(pattern)

    return True


def validate_replacement_config(replacement: Dict[str, Any]) -> bool:
    """Validate a text replacement.

    Args:
        replacement: Replacement configuration dictionary

    Returns:
        True if valid

    Raises:
        ValidationError: If replacement is invalid
    """
    if not isinstance(replacement, dict):
        raise ValidationError("Replacement must be a dictionary")

    for key in (ConfigKey.REPLACEMENT_SEARCH, ConfigKey.REPLACEMENT_REPLACEMENT):
        if key not in replacement:
            raise ValidationError(f"Replacement must have '{key}' field")
        if replacement[key] is not None and not isinstance(replacement[key], str):
            raise ValidationError(f"Replacement '{key}' must be string: {replacement[key]!r}")

    return True


def validate_excluded_project_config(project: Dict[str, Any]) -> bool:
    """Validate an excluded project reference.

    Args:
        project: Project configuration dictionary

    Returns:
        True if valid

    Raises:
        ValidationError: If the project reference is invalid
    """
    if not isinstance(project, dict):
        raise ValidationError("Excluded project must be a dictionary")

    if ConfigKey.PROJECT_ID not in project:
        raise ValidationError("Excluded project must have 'id' field")

    validate_uuid(project[ConfigKey.PROJECT_ID])

    name = project.get(ConfigKey.PROJECT_NAME)
    if name is not None and not isinstance(name, str):
        raise ValidationError(f"Excluded project name must be string: {name!r}")

    return True


def validate_uuid(value: Any) -> bool:
    """Validate a project identifier.

    Raises:
        ValidationError: If the value is not a UUID
    """
    if isinstance(value, uuid.UUID):
        return True

    try:
        uuid.UUID(str(value))
    except ValueError:
        raise ValidationError(f"Invalid project id: {value!r}")

    return True


def validate_regex(pattern: str) -> bool:
    """Validate that a regex compiles.

    Raises:
        ValidationError: If the pattern is too long or does not compile
    """
    if len(pattern) > Limits.MAX_PATH_LENGTH:
        raise ValidationError(f"Pattern exceeds maximum length ({Limits.MAX_PATH_LENGTH})")

    try:
        re.compile(pattern)
    except re.error as e:
        raise ValidationError(f"Invalid regex pattern: {pattern} ({e})")

    return True
