"""srcexport Transforms - Content rewriting during export.

This module provides the copy pipeline and the content strategies it uses:
- CopyPipeline: Per-entry copy with dispatch by file type
- Solution, setup project and MSBuild/VC project rewriters
- PathTranslator: Literal replacements over paths and text
"""

from .base import LineTransform, Transform, TransformError, TransformResult
from .msbuild import (
    HintPathOutcome,
    HintPathResolution,
    MSBuildProjectTransform,
    VCProjectTransform,
    resolve_hint_path,
)
from .pipeline import CopyPipeline, ExportResult
from .replacements import PathTranslator
from .setup_project import SetupProjectTransform
from .solution import SolutionTransform

__all__ = [
    # Pipeline
    "CopyPipeline",
    "ExportResult",
    # Base classes
    "Transform",
    "LineTransform",
    "TransformResult",
    "TransformError",
    # Project and solution files
    "SolutionTransform",
    "SetupProjectTransform",
    "MSBuildProjectTransform",
    "VCProjectTransform",
    "HintPathOutcome",
    "HintPathResolution",
    "resolve_hint_path",
    # Replacements
    "PathTranslator",
]
