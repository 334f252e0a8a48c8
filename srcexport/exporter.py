#!/usr/bin/env python3
"""Export orchestration.

``Exporter`` ties the pieces of an export together: it logs the settings,
creates the destination root, walks the filtered source tree and feeds every
entry to a fresh ``CopyPipeline``.

Example:
    >>> exporter = Exporter("/work/MyApp", Settings.default())
    >>> result = exporter.export("/release/MyApp")
    >>> print(result.files, result.directories)
"""

import os
from typing import Optional, Sequence

from srcexport.core.links import LinkPreserver, get_link_preserver
from srcexport.core.logging import ExportEvent, ExportLog, LoggerExportLog
from srcexport.core.settings import Settings
from srcexport.rules.engine import FilterEngine
from srcexport.rules.generated import GeneratedFileDetector
from srcexport.transforms.pipeline import CopyPipeline, ExportResult
from srcexport.walker import TreeWalker

__all__ = ["Exporter", "ExportResult"]


class Exporter:
    """Copies a source tree to a destination according to ``Settings``."""

    def __init__(
        self,
        source_path: str,
        settings: Optional[Settings] = None,
        log: Optional[ExportLog] = None,
        link_preserver: Optional[LinkPreserver] = None,
        allowed_folders: Optional[Sequence[str]] = None,
    ):
        """Initialize exporter.

        Args:
            source_path: Source directory; for any other path its parent
                directory is exported
            settings: Export settings (defaults to ``Settings.default()``)
            log: Event sink (defaults to a ``LoggerExportLog``)
            link_preserver: Link capability (defaults to the platform one)
            allowed_folders: Override of the shared folders hint paths may be
                absolutized into

        Raises:
            ValueError: If ``source_path`` is None
        """
        if source_path is None:
            raise ValueError("source_path must not be None")

        if os.path.isdir(source_path):
            self.source_root = os.path.abspath(source_path)
        else:
            self.source_root = os.path.dirname(os.path.abspath(source_path))

        self.settings = settings if settings is not None else Settings.default()
        self.log = log if log is not None else LoggerExportLog()
        self.links = link_preserver if link_preserver is not None else get_link_preserver()
        self.allowed_folders = allowed_folders

    def build_filter(self) -> FilterEngine:
        """Filter engine for the configured rules."""
        detector = GeneratedFileDetector() if self.settings.exclude_generated_files else None
        return FilterEngine(self.settings.rules, generated_detector=detector)

    def export(self, destination: str) -> ExportResult:
        """Export the source tree.

        Args:
            destination: Destination root, created when missing

        Returns:
            Number of files and directories exported

        Raises:
            ValueError: If ``destination`` is None
            IntegrityError: If a copy keeps failing hash verification
            OSError: On filesystem failures
        """
        if destination is None:
            raise ValueError("destination must not be None")

        destination = os.path.abspath(destination)

        self.log.emit(ExportEvent.CONFIGURATION, self.settings.describe())

        if not os.path.isdir(destination):
            self.log.emit(ExportEvent.DIRECTORY_CREATED, destination)
            os.makedirs(destination, exist_ok=True)

        pipeline = CopyPipeline(
            self.settings,
            self.source_root,
            self.log,
            link_preserver=self.links,
            allowed_folders=self.allowed_folders,
        )
        walker = TreeWalker(
            self.source_root,
            self.build_filter(),
            self.log,
            keep_symbolic_links=self.settings.keep_symbolic_links,
            link_preserver=self.links,
        )

        for path in walker:
            pipeline.process(path, destination)

        result = pipeline.result
        self.log.emit(ExportEvent.SUMMARY, f"Directories: {result.directories}")
        self.log.emit(ExportEvent.SUMMARY, f"Files: {result.files}")
        return result
