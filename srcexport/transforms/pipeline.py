#!/usr/bin/env python3
"""Copy pipeline turning walked source entries into destination entries.

For every path produced by the tree walker the pipeline:
- computes the destination path (relative path run through the replacements)
- creates directories, or recreates symbolic links when links are kept
- copies files, dispatching project and solution files to their rewriters
  and running replacements over text files
- verifies opaque copies by hash, recopying on mismatch

The pipeline is created for a single export and is not thread-safe; the
consecutive hash-mismatch budget is shared by every file of that export.

Example:
    >>> pipeline = CopyPipeline(settings, "/src", log)
    >>> for path in walker:
    ...     pipeline.process(path, "/dst")
    >>> pipeline.result.files
"""

import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from srcexport.core import file_ops
from srcexport.core.constants import Limits, LinkKind, ReadOnlyPolicy
from srcexport.core.errors import IntegrityError
from srcexport.core.links import LinkPreserver, get_link_preserver
from srcexport.core.logging import ExportEvent, ExportLog
from srcexport.core.settings import Settings
from srcexport.transforms.base import Transform, decode_text
from srcexport.transforms.msbuild import MSBuildProjectTransform, VCProjectTransform
from srcexport.transforms.replacements import PathTranslator
from srcexport.transforms.setup_project import SetupProjectTransform
from srcexport.transforms.solution import SolutionTransform


@dataclass
class ExportResult:
    """Counts of exported entries."""

    files: int = 0
    directories: int = 0


class CopyPipeline:
    """Copies walked entries into the destination tree.

    Features:
    - Path renaming through literal replacements
    - Symbolic link recreation
    - Solution / project file rewriting with fallback to plain copies
    - Hash-verified binary copies with a bounded consecutive retry budget
    - Overwrite and read-only output policies
    """

    def __init__(
        self,
        settings: Settings,
        source_root: str,
        log: ExportLog,
        link_preserver: Optional[LinkPreserver] = None,
        allowed_folders: Optional[Sequence[str]] = None,
        max_hash_retries: int = Limits.MAX_HASH_RETRIES,
    ):
        """Initialize copy pipeline.

        Args:
            settings: Export settings
            source_root: Absolute source root
            log: Export event sink
            link_preserver: Link capability (defaults to the platform one)
            allowed_folders: Override of the shared folders hint paths may
                be absolutized into
            max_hash_retries: Consecutive mismatches tolerated before failing
        """
        self.settings = settings
        self.source_root = source_root
        self.log = log
        self.links = link_preserver if link_preserver is not None else get_link_preserver()
        self.translator = PathTranslator(settings.replacements)
        self.max_hash_retries = max_hash_retries
        self.result = ExportResult()
        self._mismatch_count = 0

        self._transforms: List[Transform] = [
            SolutionTransform(settings.remove_scm_binding, settings.excluded_projects),
            SetupProjectTransform(settings.remove_scm_binding),
            MSBuildProjectTransform(
                settings.remove_scm_binding,
                settings.convert_relative_hint_paths,
                settings.replace_link_files,
                allowed_folders=allowed_folders,
            ),
            VCProjectTransform(settings.remove_scm_binding),
        ]

    @property
    def mismatch_count(self) -> int:
        """Current number of consecutive hash mismatches."""
        return self._mismatch_count

    def destination_for(self, source_path: str, destination_root: str) -> str:
        """Compute the destination of a source entry.

        Args:
            source_path: Absolute source path
            destination_root: Destination root

        Returns:
            Destination path with replacements applied to the relative part
        """
        relative_path = os.path.relpath(source_path, self.source_root)
        relative_path = self.translator.translate(relative_path)
        return os.path.join(destination_root, relative_path)

    def process(self, source_path: str, destination_root: str) -> None:
        """Export one walked entry.

        Args:
            source_path: Absolute source path yielded by the walker
            destination_root: Destination root
        """
        destination = self.destination_for(source_path, destination_root)

        if os.path.isdir(source_path):
            self.result.directories += 1

            if self.settings.keep_symbolic_links and self.links.is_link(source_path):
                self._recreate_link(source_path, destination, LinkKind.DIRECTORY)
                return

            if not os.path.isdir(destination):
                os.makedirs(destination, exist_ok=True)
                self.log.emit(ExportEvent.DIRECTORY_CREATED, destination)
            return

        self.result.files += 1

        if self.settings.keep_symbolic_links and self.links.is_link(source_path):
            self._recreate_link(source_path, destination, LinkKind.FILE)
            return

        self.copy_file(source_path, destination)

    def _recreate_link(self, source_path: str, destination: str, kind: LinkKind) -> None:
        target = self.links.read_target(source_path)
        self.links.create_link(destination, target, kind)

    def copy_file(self, source: str, destination: str) -> None:
        """Copy one file, rewriting it when its type and the settings call for it.

        Args:
            source: Source file
            destination: Destination file
        """
        self.log.emit(ExportEvent.COPY, source)

        file_ops.ensure_parent_directory(destination)

        if self.settings.overwrite_existing:
            file_ops.delete_file(destination, self.settings.unprotect_file)

        if not self.settings.rewrites_content:
            self.copy_binary(source, destination)
        else:
            transform = self._select_transform(source)
            if transform is None or not transform.enabled:
                self._copy_plain(source, destination)
            else:
                self._copy_transformed(transform, source, destination)

        self._apply_read_only_policy(destination)

    def _select_transform(self, source: str) -> Optional[Transform]:
        for transform in self._transforms:
            if transform.supports(source):
                return transform
        return None

    def _copy_transformed(self, transform: Transform, source: str, destination: str) -> None:
        with open(source, "rb") as f:
            content = f.read()

        result = transform.apply(content, source, self._metadata(destination))
        if not result.success:
            self.log.emit(ExportEvent.DIAGNOSTIC, result.error)
            self._copy_plain(source, destination)
            return

        self.write_text(destination, decode_text(result.content))

    def _metadata(self, destination: str) -> Dict[str, Any]:
        return {
            "source_root": self.source_root,
            "destination": destination,
            "copy_file": self.copy_file,
            "log": self.log,
        }

    def _copy_plain(self, source: str, destination: str) -> None:
        if self.translator and file_ops.is_text_file(source):
            self.write_text(destination, file_ops.read_text(source))
        else:
            self.copy_binary(source, destination)

    def write_text(self, destination: str, text: str) -> None:
        """Write text output with replacements applied."""
        file_ops.write_text(destination, self.translator.translate(text))

    def copy_binary(self, source: str, destination: str) -> None:
        """Copy bytes, verifying the copy by hash when enabled.

        Raises:
            IntegrityError: If consecutive mismatches exceed the retry budget
        """
        while True:
            file_ops.copy_bytes(source, destination)

            if not self.settings.compute_hash:
                return

            if self._hashes_match(source, destination):
                self._mismatch_count = 0
                self.log.emit(ExportEvent.VERIFY, destination)
                return

            self._mismatch_count += 1
            self.log.emit(ExportEvent.VERIFY, f"Different hash ({self._mismatch_count})")
            if self._mismatch_count > self.max_hash_retries:
                raise IntegrityError(source, destination, self._mismatch_count)

    def _hashes_match(self, source: str, destination: str) -> bool:
        return file_ops.calculate_checksum(source) == file_ops.calculate_checksum(destination)

    def _apply_read_only_policy(self, destination: str) -> None:
        policy = self.settings.output_read_only
        if policy is ReadOnlyPolicy.UNCHANGED:
            return
        file_ops.set_read_only(destination, policy is ReadOnlyPolicy.FORCE_TRUE)
