"""
srcexport Core: Constants and Type Definitions

This module provides system-wide constants, error codes, file-type tables
and configuration keys shared by the filter engine and the copy pipeline.
"""
from enum import Enum, IntEnum
from typing import TypeAlias

# Version information
SRCEXPORT_VERSION = "1.0.0"


# Error codes
class ErrorCode(IntEnum):
    """Standardized error codes for export operations."""

    SUCCESS = 0  # Operation completed successfully
    INVALID_INPUT = 1  # Bad path, invalid configuration
    NOT_FOUND = 2  # File or resource doesn't exist
    PERMISSION_DENIED = 3  # Insufficient permissions
    CONFLICT = 4  # Destination entry in the way
    INTEGRITY_FAILURE = 5  # Copied bytes never matched the source
    INTERNAL_ERROR = 6  # Bug in srcexport
    UNSUPPORTED = 7  # Platform lacks the capability


# Type aliases for clarity
FilePath: TypeAlias = str
RelativePath: TypeAlias = str


class Limits:
    """Export limits and default values."""

    # Consecutive hash mismatches tolerated before the export is aborted
    MAX_HASH_RETRIES = 5

    # Chunk size used when hashing and sniffing files
    HASH_CHUNK_SIZE = 1024 * 1024
    TEXT_SNIFF_BYTES = 8192

    MAX_PATH_LENGTH = 4096


class ReadOnlyPolicy(Enum):
    """What to do with the read-only attribute of written files."""

    FORCE_TRUE = "force_true"
    FORCE_FALSE = "force_false"
    UNCHANGED = "unchanged"


class LinkKind(Enum):
    """Kind of symbolic link to recreate."""

    FILE = "file"
    DIRECTORY = "directory"


# Visual Studio file families dispatched by extension
SOLUTION_EXTENSIONS = frozenset({".sln"})
SETUP_PROJECT_EXTENSIONS = frozenset({".vdproj"})
MSBUILD_PROJECT_EXTENSIONS = frozenset(
    {".csproj", ".vbproj", ".dbproj", ".vcxproj", ".cfxproj", ".wixproj"}
)
VC_PROJECT_EXTENSIONS = frozenset({".vcproj"})

MSBUILD_NAMESPACE = "http://schemas.microsoft.com/developer/msbuild/2003"

# Source-control binding properties shared by every project format
SCM_PROPERTIES = ("SccProjectName", "SccLocalPath", "SccAuxPath", "SccProvider")

SOLUTION_SCM_SECTIONS = (
    "GlobalSection(SourceCodeControl)",
    "GlobalSection(TeamFoundationVersionControl)",
)
SOLUTION_SECTION_END = "EndGlobalSection"

# Markers identifying tool-generated source files
GENERATED_FILE_MARKERS = (
    "This code was generated by a tool.",
    "<auto-generated",
    "<autogenerated",
    "// $ANTLR",
    "Ce code a été généré par un outil.",
)
GENERATED_NAME_PATTERNS = ("*.designer.*", "*.g.*")


class ConfigKey:
    """Settings document key constants."""

    REMOVE_SCM_BINDING = "remove_scm_binding"
    COMPUTE_HASH = "compute_hash"
    OVERWRITE_EXISTING = "overwrite_existing"
    UNPROTECT_FILE = "unprotect_file"
    OUTPUT_READ_ONLY = "output_read_only"
    EXCLUDE_GENERATED_FILES = "exclude_generated_files"
    KEEP_SYMBOLIC_LINKS = "keep_symbolic_links"
    REPLACE_LINK_FILES = "replace_link_files"
    CONVERT_RELATIVE_HINT_PATHS = "convert_relative_hint_paths"
    RULES = "rules"
    REPLACEMENTS = "replacements"
    EXCLUDED_PROJECTS = "excluded_projects"

    # Rule configuration
    RULE_NAME = "name"
    RULE_PATTERN = "pattern"
    RULE_ACTION = "action"
    RULE_EXPRESSION_TYPE = "expression_type"
    RULE_ENABLED = "enabled"
    RULE_CASE_SENSITIVE = "case_sensitive"
    RULE_APPLY_TO_NAME = "apply_to_name"
    RULE_APPLY_TO_PATH = "apply_to_path"
    RULE_APPLY_TO_FILE = "apply_to_file"
    RULE_APPLY_TO_DIRECTORY = "apply_to_directory"

    # Replacement configuration
    REPLACEMENT_SEARCH = "search"
    REPLACEMENT_REPLACEMENT = "replacement"

    # Excluded project configuration
    PROJECT_ID = "id"
    PROJECT_NAME = "name"


BOOLEAN_KEYS = (
    ConfigKey.REMOVE_SCM_BINDING,
    ConfigKey.COMPUTE_HASH,
    ConfigKey.OVERWRITE_EXISTING,
    ConfigKey.UNPROTECT_FILE,
    ConfigKey.EXCLUDE_GENERATED_FILES,
    ConfigKey.KEEP_SYMBOLIC_LINKS,
    ConfigKey.REPLACE_LINK_FILES,
    ConfigKey.CONVERT_RELATIVE_HINT_PATHS,
)
