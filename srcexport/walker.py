#!/usr/bin/env python3
"""Filtered traversal of a source tree.

``TreeWalker`` yields the absolute paths that survive filtering, depth first:
in each directory the files come first, then every subdirectory followed
immediately by its own contents. Entries are sorted by name so repeated
exports visit the tree in the same order.

A linked directory is yielded but not descended into when symbolic links are
kept; the link itself is recreated at the destination instead.

Example:
    >>> walker = TreeWalker("/src", FilterEngine(rules), log)
    >>> for path in walker:
    ...     print(path)
"""

import os
from typing import Iterator, Optional

from srcexport.core.links import LinkPreserver, get_link_preserver
from srcexport.core.logging import ExportEvent, ExportLog
from srcexport.rules.engine import FilterEngine


class TreeWalker:
    """Lazily enumerates the entries of a source tree that are not excluded."""

    def __init__(
        self,
        source_root: str,
        filter_engine: FilterEngine,
        log: ExportLog,
        keep_symbolic_links: bool = False,
        link_preserver: Optional[LinkPreserver] = None,
    ):
        """Initialize tree walker.

        Args:
            source_root: Directory to enumerate
            filter_engine: Decides which entries are excluded
            log: Receives one INCLUDE or EXCLUDE event per visited entry
            keep_symbolic_links: Do not descend into linked directories
            link_preserver: Link capability (defaults to the platform one)
        """
        self.source_root = source_root
        self.filter_engine = filter_engine
        self.log = log
        self.keep_symbolic_links = keep_symbolic_links
        self.links = link_preserver if link_preserver is not None else get_link_preserver()

    def walk(self) -> Iterator[str]:
        """Yield the absolute path of every exported entry."""
        if not os.path.isdir(self.source_root):
            return
        yield from self._walk_directory(self.source_root)

    def __iter__(self) -> Iterator[str]:
        return self.walk()

    def _walk_directory(self, directory: str) -> Iterator[str]:
        names = sorted(os.listdir(directory))
        paths = [os.path.join(directory, name) for name in names]

        # Broken links are neither files nor directories; they travel with the files
        files = [path for path in paths if not os.path.isdir(path)]
        directories = [path for path in paths if os.path.isdir(path)]

        for path in files:
            if self._accept(path):
                yield path

        for path in directories:
            if not self._accept(path):
                continue

            yield path

            if self.keep_symbolic_links and self.links.is_link(path):
                continue

            yield from self._walk_directory(path)

    def _accept(self, path: str) -> bool:
        if self.filter_engine.is_excluded(path, self.relative_path(path), os.path.basename(path)):
            self.log.emit(ExportEvent.EXCLUDE, path)
            return False

        self.log.emit(ExportEvent.INCLUDE, path)
        return True

    def relative_path(self, path: str) -> str:
        """Path of an entry relative to the source root."""
        return os.path.relpath(path, self.source_root)
