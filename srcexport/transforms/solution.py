#!/usr/bin/env python3
"""Solution (.sln) file rewriting.

Removes source-control bindings and excluded projects from Visual Studio
solution files:
- ``GlobalSection(SourceCodeControl)`` and
  ``GlobalSection(TeamFoundationVersionControl)`` blocks are dropped up to
  and including their ``EndGlobalSection`` line
- every line mentioning an excluded project's ``{GUID}`` is dropped

Example:
    >>> transform = SolutionTransform(remove_scm_binding=True)
    >>> result = transform.apply(sln_bytes, "App.sln")
"""

from typing import Any, Dict, Iterable, Iterator, List

from srcexport.core.constants import (
    SOLUTION_EXTENSIONS,
    SOLUTION_SCM_SECTIONS,
    SOLUTION_SECTION_END,
)
from srcexport.core.settings import ExcludedProject
from srcexport.transforms.base import LineTransform


class SolutionTransform(LineTransform):
    """Line filter for solution files."""

    extensions = tuple(SOLUTION_EXTENSIONS)

    def __init__(
        self,
        remove_scm_binding: bool = False,
        excluded_projects: Iterable[ExcludedProject] = (),
        name: str = "solution",
    ):
        """Initialize solution transform.

        Args:
            remove_scm_binding: Drop source-control global sections
            excluded_projects: Projects whose lines are dropped
            name: Transform name
        """
        super().__init__(name=name)
        self.remove_scm_binding = remove_scm_binding
        self._excluded_ids: List[str] = [
            project.braced_id.casefold() for project in excluded_projects if project is not None
        ]

    def filter_lines(self, lines: Iterator[str], metadata: Dict[str, Any]) -> Iterable[str]:
        for line in lines:
            trimmed = line.strip()

            if self.remove_scm_binding and trimmed.startswith(SOLUTION_SCM_SECTIONS):
                self._skip_section(lines)
                continue

            if self._mentions_excluded_project(line):
                continue

            yield line

    def _skip_section(self, lines: Iterator[str]) -> None:
        """Consume lines through the end of the current global section."""
        for line in lines:
            if line.strip().startswith(SOLUTION_SECTION_END):
                return

    def _mentions_excluded_project(self, line: str) -> bool:
        if not self._excluded_ids:
            return False
        folded = line.casefold()
        return any(project_id in folded for project_id in self._excluded_ids)
