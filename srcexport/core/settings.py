#!/usr/bin/env python3
"""Export settings.

``Settings`` is the immutable snapshot an export runs with. It is built once
(by ``Settings.default()``, by ``settings_from_dict`` or by hand) and never
mutated while an export is running.

Example:
    >>> settings = Settings.default()
    >>> settings = dataclasses.replace(settings, compute_hash=False)
"""

import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from srcexport.core.constants import ConfigKey, ReadOnlyPolicy
from srcexport.core.validators import validate_settings
from srcexport.rules.engine import Rule, RuleAction
from srcexport.rules.patterns import PatternType

DEFAULT_EXCLUDED_FILES = (
    "*.cache",
    "_cf_md.config",
    "*.build.xml",
    "*.pdb",
    "*.ilk",
    "*.ncb",
    "*.srb",
    "*.obj",
    "*.exe",
    "*.dll",
    "*.ocx",
    "*.suo",
    "*.bak",
    "*.tmp",
    "*.com",
    "*.swp",
    "*.so",
    "*.o",
    "*.DS_Store*",
    "*thumbs.db*",
    "Desktop.ini",
    "swum-cache.txt",
    "*.class",
    "*.Bindings",
    "*.*log",
    "*.temp",
    "*.orig",
    "*.user",
    "*.vspscc",
    "*.vssscc",
    "*.vshost.*",
    "*.CodeAnalysisLog.xml",
    "*.lastcodeanalysissucceeded",
    ".classpath",
    ".loadpath",
    "*.launch",
    ".buildpath",
    "*.sln.docstates",
    "*_i.c",
    "*_p.c",
    "*.meta",
    "*.pch",
    "*.pgc",
    "*.pgd",
    "*.rsp",
    "*.sbr",
    "*.tlb",
    "*.tli",
    "*.tlh",
    "*.tmp_proj",
    "*.pidb",
    "*.scc",
    "*.psess",
    "*.vsp",
    "*.vspx",
    "*.dotCover",
    "*~",
    "~$*",
    "*.dbmdl",
    "UpgradeLog*.XML",
    "UpgradeLog*.htm",
)

DEFAULT_EXCLUDED_DIRECTORIES = (
    "OBJ",
    "Debug",
    "Release",
    "BIN",
    "IPCH",
    "$tf",
    "publish",
    "$RECYCLE.BIN",
    "_UpgradeReport_Files",
    ".DS_Store",
)

DEFAULT_EXCLUDED_ENTRIES = ("*resharper*", "_TeamCity*")

# NuGet package folders are kept even though they hold *.dll files
NUGET_PACKAGES_PATTERN = r"^(.*[\\/]|)packages[\\/].*"


@dataclass(frozen=True)
class Replacement:
    """Literal text substitution applied to paths and text contents."""

    search: str
    replacement: str


@dataclass(frozen=True)
class ExcludedProject:
    """Project stripped from solution files."""

    id: uuid.UUID
    name: Optional[str] = None

    @property
    def braced_id(self) -> str:
        """Identifier as written in solution files: ``{xxxxxxxx-...}``."""
        return "{" + str(self.id) + "}"


@dataclass(frozen=True)
class Settings:
    """Immutable configuration of one export."""

    remove_scm_binding: bool = False
    compute_hash: bool = False
    overwrite_existing: bool = False
    unprotect_file: bool = False
    output_read_only: ReadOnlyPolicy = ReadOnlyPolicy.UNCHANGED
    exclude_generated_files: bool = False
    keep_symbolic_links: bool = False
    replace_link_files: bool = False
    convert_relative_hint_paths: bool = False
    rules: Tuple[Rule, ...] = field(default_factory=tuple)
    replacements: Tuple[Replacement, ...] = field(default_factory=tuple)
    excluded_projects: Tuple[ExcludedProject, ...] = field(default_factory=tuple)

    @classmethod
    def default(cls) -> "Settings":
        """Settings suited to exporting a Visual Studio source tree."""
        return cls(
            remove_scm_binding=True,
            compute_hash=True,
            overwrite_existing=True,
            unprotect_file=True,
            output_read_only=ReadOnlyPolicy.FORCE_FALSE,
            exclude_generated_files=False,
            keep_symbolic_links=True,
            replace_link_files=False,
            convert_relative_hint_paths=True,
            rules=tuple(default_rules()),
        )

    @property
    def rewrites_content(self) -> bool:
        """Whether any option may change file contents."""
        return bool(
            self.replacements
            or self.remove_scm_binding
            or self.convert_relative_hint_paths
            or self.replace_link_files
            or self.excluded_projects
        )

    def describe(self) -> List[str]:
        """Configuration dump logged at the start of an export."""
        read_only = {
            ReadOnlyPolicy.FORCE_TRUE: "True",
            ReadOnlyPolicy.FORCE_FALSE: "False",
            ReadOnlyPolicy.UNCHANGED: "Do not change",
        }[self.output_read_only]

        lines = [
            f"Remove SCM Binding: {self.remove_scm_binding}",
            f"Compute hash: {self.compute_hash}",
            f"Overwrite Existing Files: {self.overwrite_existing}",
            f"Unprotect Files: {self.unprotect_file}",
            f"Output Files Read Only: {read_only}",
            f"Exclude Generated Files: {self.exclude_generated_files}",
            f"Keep Symbolic Links: {self.keep_symbolic_links}",
            f"Replace Link Files: {self.replace_link_files}",
            f"Convert Relative Hint Paths: {self.convert_relative_hint_paths}",
        ]
        lines.extend(rule.describe() for rule in self.rules if rule.action == RuleAction.EXCLUDE)
        lines.extend(rule.describe() for rule in self.rules if rule.action == RuleAction.INCLUDE)
        lines.extend(f"Replace: {r.search!r} -> {r.replacement!r}" for r in self.replacements)
        lines.extend(
            f"Excluded Project: {p.braced_id} {p.name or ''}".rstrip()
            for p in self.excluded_projects
        )
        return lines


def default_rules() -> List[Rule]:
    """Rules excluding build output, IDE state and source-control leftovers."""
    rules = [
        Rule(
            NUGET_PACKAGES_PATTERN,
            RuleAction.INCLUDE,
            pattern_type=PatternType.REGEX,
            apply_to_name=False,
            apply_to_path=True,
            apply_to_file=False,
            apply_to_directory=False,
        )
    ]
    rules.extend(
        Rule(pattern, apply_to_path=False, apply_to_file=True, apply_to_directory=False)
        for pattern in DEFAULT_EXCLUDED_FILES
    )
    rules.extend(
        Rule(pattern, apply_to_path=False, apply_to_file=False, apply_to_directory=True)
        for pattern in DEFAULT_EXCLUDED_DIRECTORIES
    )
    rules.extend(
        Rule(pattern, apply_to_path=False, apply_to_file=True, apply_to_directory=True)
        for pattern in DEFAULT_EXCLUDED_ENTRIES
    )
    return rules


def _read_only_from_value(value: Optional[bool]) -> ReadOnlyPolicy:
    if value is None:
        return ReadOnlyPolicy.UNCHANGED
    return ReadOnlyPolicy.FORCE_TRUE if value else ReadOnlyPolicy.FORCE_FALSE


def _read_only_to_value(policy: ReadOnlyPolicy) -> Optional[bool]:
    if policy is ReadOnlyPolicy.UNCHANGED:
        return None
    return policy is ReadOnlyPolicy.FORCE_TRUE


def rule_from_dict(data: Dict[str, Any]) -> Rule:
    """Build a rule from its settings-document form."""
    return Rule(
        data.get(ConfigKey.RULE_PATTERN),
        RuleAction(str(data.get(ConfigKey.RULE_ACTION, "exclude")).lower()),
        pattern_type=PatternType(str(data.get(ConfigKey.RULE_EXPRESSION_TYPE, "glob")).lower()),
        enabled=data.get(ConfigKey.RULE_ENABLED, True),
        case_sensitive=data.get(ConfigKey.RULE_CASE_SENSITIVE, False),
        apply_to_name=data.get(ConfigKey.RULE_APPLY_TO_NAME, True),
        apply_to_path=data.get(ConfigKey.RULE_APPLY_TO_PATH, True),
        apply_to_file=data.get(ConfigKey.RULE_APPLY_TO_FILE, True),
        apply_to_directory=data.get(ConfigKey.RULE_APPLY_TO_DIRECTORY, True),
        name=data.get(ConfigKey.RULE_NAME),
    )


def rule_to_dict(rule: Rule) -> Dict[str, Any]:
    """Settings-document form of a rule."""
    data = {
        ConfigKey.RULE_PATTERN: rule.pattern,
        ConfigKey.RULE_ACTION: rule.action.value,
        ConfigKey.RULE_EXPRESSION_TYPE: rule.pattern_type.value,
        ConfigKey.RULE_ENABLED: rule.active,
        ConfigKey.RULE_CASE_SENSITIVE: rule.case_sensitive,
        ConfigKey.RULE_APPLY_TO_NAME: rule.apply_to_name,
        ConfigKey.RULE_APPLY_TO_PATH: rule.apply_to_path,
        ConfigKey.RULE_APPLY_TO_FILE: rule.apply_to_file,
        ConfigKey.RULE_APPLY_TO_DIRECTORY: rule.apply_to_directory,
    }
    if rule.name:
        data[ConfigKey.RULE_NAME] = rule.name
    return data


def settings_from_dict(data: Dict[str, Any]) -> Settings:
    """Build settings from a (validated) settings document.

    Keys missing from the document take the ``Settings`` field defaults.

    Raises:
        ValidationError: If the document is invalid
    """
    validate_settings(data)

    kwargs: Dict[str, Any] = {
        key: data[key]
        for key in (
            ConfigKey.REMOVE_SCM_BINDING,
            ConfigKey.COMPUTE_HASH,
            ConfigKey.OVERWRITE_EXISTING,
            ConfigKey.UNPROTECT_FILE,
            ConfigKey.EXCLUDE_GENERATED_FILES,
            ConfigKey.KEEP_SYMBOLIC_LINKS,
            ConfigKey.REPLACE_LINK_FILES,
            ConfigKey.CONVERT_RELATIVE_HINT_PATHS,
        )
        if key in data
    }

    if ConfigKey.OUTPUT_READ_ONLY in data:
        kwargs["output_read_only"] = _read_only_from_value(data[ConfigKey.OUTPUT_READ_ONLY])

    kwargs["rules"] = tuple(rule_from_dict(r) for r in data.get(ConfigKey.RULES) or [])
    kwargs["replacements"] = tuple(
        Replacement(
            r[ConfigKey.REPLACEMENT_SEARCH] or "",
            r[ConfigKey.REPLACEMENT_REPLACEMENT] or "",
        )
        for r in data.get(ConfigKey.REPLACEMENTS) or []
    )
    kwargs["excluded_projects"] = tuple(
        ExcludedProject(uuid.UUID(str(p[ConfigKey.PROJECT_ID])), p.get(ConfigKey.PROJECT_NAME))
        for p in data.get(ConfigKey.EXCLUDED_PROJECTS) or []
    )

    return Settings(**kwargs)


def settings_to_dict(settings: Settings) -> Dict[str, Any]:
    """Settings-document form of a ``Settings`` snapshot."""
    return {
        ConfigKey.REMOVE_SCM_BINDING: settings.remove_scm_binding,
        ConfigKey.COMPUTE_HASH: settings.compute_hash,
        ConfigKey.OVERWRITE_EXISTING: settings.overwrite_existing,
        ConfigKey.UNPROTECT_FILE: settings.unprotect_file,
        ConfigKey.OUTPUT_READ_ONLY: _read_only_to_value(settings.output_read_only),
        ConfigKey.EXCLUDE_GENERATED_FILES: settings.exclude_generated_files,
        ConfigKey.KEEP_SYMBOLIC_LINKS: settings.keep_symbolic_links,
        ConfigKey.REPLACE_LINK_FILES: settings.replace_link_files,
        ConfigKey.CONVERT_RELATIVE_HINT_PATHS: settings.convert_relative_hint_paths,
        ConfigKey.RULES: [rule_to_dict(rule) for rule in settings.rules],
        ConfigKey.REPLACEMENTS: [
            {
                ConfigKey.REPLACEMENT_SEARCH: r.search,
                ConfigKey.REPLACEMENT_REPLACEMENT: r.replacement,
            }
            for r in settings.replacements
        ],
        ConfigKey.EXCLUDED_PROJECTS: [
            {ConfigKey.PROJECT_ID: str(p.id), ConfigKey.PROJECT_NAME: p.name}
            for p in settings.excluded_projects
        ],
    }
