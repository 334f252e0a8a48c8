#!/usr/bin/env python3
"""Setup project (.vdproj) rewriting.

Installer projects store their source-control binding as quoted property
lines (``"SccProjectName" = "8:..."``); those lines are dropped.
"""

from typing import Any, Dict, Iterable, Iterator

from srcexport.core.constants import SCM_PROPERTIES, SETUP_PROJECT_EXTENSIONS
from srcexport.transforms.base import LineTransform

QUOTED_SCM_PROPERTIES = tuple(f'"{name}"' for name in SCM_PROPERTIES)


class SetupProjectTransform(LineTransform):
    """Drops source-control property lines from setup projects."""

    extensions = tuple(SETUP_PROJECT_EXTENSIONS)

    def __init__(self, remove_scm_binding: bool = False, name: str = "setup_project"):
        super().__init__(name=name, enabled=remove_scm_binding)

    def filter_lines(self, lines: Iterator[str], metadata: Dict[str, Any]) -> Iterable[str]:
        for line in lines:
            if line.strip().startswith(QUOTED_SCM_PROPERTIES):
                continue
            yield line
