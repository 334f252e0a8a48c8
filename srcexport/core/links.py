#!/usr/bin/env python3
"""Symbolic link detection and recreation.

The export engine only needs three things from the platform: whether an
entry is a link, where it points, and how to create an equivalent link at
the destination. ``SymlinkPreserver`` answers those through ``os`` (POSIX
symlinks, Windows symlinks and junctions); ``NullLinkPreserver`` is used
where the platform cannot create links and reports every entry as a regular
one.

Example:
    >>> links = get_link_preserver()
    >>> if links.is_link("/src/shared"):
    ...     links.create_link("/dst/shared", links.read_target("/src/shared"), LinkKind.DIRECTORY)
"""

import os
import stat
from abc import ABC, abstractmethod

from srcexport.core.constants import ErrorCode, LinkKind
from srcexport.core.errors import ExportError
from srcexport.core.file_ops import ensure_parent_directory

# Prefixes Windows prepends to reparse-point targets
NON_INTERPRETED_PREFIXES = ("\\??\\", "\\\\?\\")

FILE_ATTRIBUTE_REPARSE_POINT = getattr(stat, "FILE_ATTRIBUTE_REPARSE_POINT", 0x400)


class LinkPreserver(ABC):
    """Capability interface for link introspection."""

    @abstractmethod
    def is_link(self, path: str) -> bool:
        """Check whether a file or directory entry is a link."""

    @abstractmethod
    def read_target(self, path: str) -> str:
        """Return the link target, or an empty string if it cannot be read."""

    @abstractmethod
    def create_link(self, destination: str, target: str, kind: LinkKind) -> None:
        """Create a link at ``destination`` pointing at ``target``."""


class SymlinkPreserver(LinkPreserver):
    """Link preserver backed by ``os`` symlink support."""

    def is_link(self, path: str) -> bool:
        if os.path.islink(path):
            return True

        try:
            st = os.lstat(path)
        except OSError:
            return False

        # Junctions and other reparse points on Windows
        attributes = getattr(st, "st_file_attributes", 0)
        return bool(attributes & FILE_ATTRIBUTE_REPARSE_POINT)

    def read_target(self, path: str) -> str:
        try:
            target = os.readlink(path)
        except (OSError, ValueError):
            return ""

        for prefix in NON_INTERPRETED_PREFIXES:
            if target.startswith(prefix):
                return target[len(prefix):]
        return target

    def create_link(self, destination: str, target: str, kind: LinkKind) -> None:
        ensure_parent_directory(destination)

        if os.path.islink(destination) and os.name == "nt" and os.path.isdir(destination):
            os.rmdir(destination)
        elif os.path.islink(destination) or os.path.isfile(destination):
            os.remove(destination)
        elif os.path.isdir(destination):
            raise ExportError(
                f"Cannot create link over existing directory: {destination}",
                ErrorCode.CONFLICT,
                path=destination,
            )

        os.symlink(target, destination, target_is_directory=kind is LinkKind.DIRECTORY)


class NullLinkPreserver(LinkPreserver):
    """Link preserver for platforms without link support."""

    def is_link(self, path: str) -> bool:
        return False

    def read_target(self, path: str) -> str:
        return ""

    def create_link(self, destination: str, target: str, kind: LinkKind) -> None:
        raise ExportError(
            "Symbolic links are not supported on this platform",
            ErrorCode.UNSUPPORTED,
            path=destination,
        )


def get_link_preserver() -> LinkPreserver:
    """Pick the link preserver for the running platform."""
    if hasattr(os, "symlink") and hasattr(os, "readlink"):
        return SymlinkPreserver()
    return NullLinkPreserver()
