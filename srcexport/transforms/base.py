#!/usr/bin/env python3
"""Base classes for structured file rewriting.

This module provides the foundation for every content rewrite applied while
exporting:
- Transform abstract base class
- TransformResult for returning rewritten content
- TransformError for recoverable failures (malformed input)

A transform that cannot make sense of its input raises ``TransformError``;
``apply`` turns that into a failed result so the caller can fall back to a
plain copy. Any other exception propagates.

Example:
    >>> class UppercaseTransform(Transform):
    ...     extensions = (".txt",)
    ...     def transform(self, content, path, metadata=None):
    ...         return content.upper()
    ...
    >>> result = UppercaseTransform().apply(b"hello", "notes.txt")
"""

import io
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, Optional, Tuple


@dataclass
class TransformResult:
    """Outcome of rewriting one file."""

    content: bytes
    success: bool = True
    error: Optional[str] = None
    skipped: bool = False


class TransformError(Exception):
    """Input a transform cannot rewrite (malformed XML, truncated solution)."""

    def __init__(self, message: str, transform_name: Optional[str] = None):
        self.message = message
        self.transform_name = transform_name
        super().__init__(message)


class Transform(ABC):
    """Rewrites one family of Visual Studio files.

    Subclasses list the extensions they handle in ``extensions`` and
    implement ``transform()``. A transform built with every option off is
    ``enabled = False``; ``apply`` then passes the content through untouched.
    """

    extensions: Tuple[str, ...] = ()

    def __init__(self, name: Optional[str] = None, enabled: bool = True):
        self.name = name or self.__class__.__name__
        self.enabled = enabled

    @abstractmethod
    def transform(
        self, content: bytes, path: str, metadata: Optional[Dict[str, Any]] = None
    ) -> bytes:
        """Transform content.

        Args:
            content: Input content
            path: Source file path
            metadata: Export context (paths, callbacks)

        Returns:
            Transformed content

        Raises:
            TransformError: If the input cannot be processed
        """

    def supports(self, path: str, metadata: Optional[Dict[str, Any]] = None) -> bool:
        """Check whether this transform handles the given file."""
        return os.path.splitext(path)[1].lower() in self.extensions

    def apply(
        self, content: bytes, path: str, metadata: Optional[Dict[str, Any]] = None
    ) -> TransformResult:
        """Apply the transform, turning ``TransformError`` into a failed result.

        Returns:
            TransformResult; on failure it carries the unmodified content
        """
        if not self.enabled:
            return TransformResult(content=content, skipped=True)

        try:
            transformed = self.transform(content, path, metadata)
        except TransformError as e:
            return TransformResult(
                content=content, success=False, error=f"{self.name}: {e.message}"
            )

        return TransformResult(content=transformed)

    def __repr__(self) -> str:
        status = "enabled" if self.enabled else "disabled"
        return f"<{self.__class__.__name__} name={self.name} {status}>"


class LineTransform(Transform):
    """Transform working on the lines of a text file.

    Line endings are kept as found; bytes that are not valid UTF-8 survive
    the round trip unchanged.
    """

    def transform(
        self, content: bytes, path: str, metadata: Optional[Dict[str, Any]] = None
    ) -> bytes:
        text = decode_text(content)
        kept = self.filter_lines(iter_lines(text), metadata or {})
        return encode_text("".join(kept))

    @abstractmethod
    def filter_lines(self, lines: Iterator[str], metadata: Dict[str, Any]) -> Iterable[str]:
        """Yield the lines to keep (with their line endings)."""


def decode_text(content: bytes) -> str:
    """Decode file content as UTF-8, escaping undecodable bytes."""
    return content.decode("utf-8", errors="surrogateescape")


def encode_text(text: str) -> bytes:
    """Inverse of ``decode_text``."""
    return text.encode("utf-8", errors="surrogateescape")


def iter_lines(text: str) -> Iterator[str]:
    """Iterate over lines split on ``\\n``, ``\\r\\n`` or ``\\r``, endings kept."""
    return iter(io.StringIO(text, newline=""))
