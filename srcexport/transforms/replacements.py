#!/usr/bin/env python3
"""Literal text substitution for paths and file contents.

Replacements are applied in order, each one seeing the output of the
previous one. They are plain substring replacements, not regular
expressions.

Example:
    >>> translator = PathTranslator([Replacement("Acme", "Contoso")])
    >>> translator.translate("src/Acme.Core/Acme.Core.csproj")
    'src/Contoso.Core/Contoso.Core.csproj'
"""

from typing import Iterable, List, Optional

from srcexport.core.settings import Replacement


class PathTranslator:
    """Applies ordered literal replacements to text."""

    def __init__(self, replacements: Optional[Iterable[Replacement]] = None):
        """Initialize translator.

        Args:
            replacements: Ordered replacements; empty search strings are ignored
        """
        self._replacements: List[Replacement] = [
            r for r in (replacements or []) if r is not None and r.search
        ]

    def translate(self, text: Optional[str]) -> Optional[str]:
        """Apply every replacement in order.

        Args:
            text: Path or file content (``None`` passes through)

        Returns:
            Translated text
        """
        if text is None or not self._replacements:
            return text

        for item in self._replacements:
            text = text.replace(item.search, item.replacement or "")
        return text

    def get_replacements(self) -> List[Replacement]:
        """Get configured replacements (copy)."""
        return self._replacements.copy()

    def __len__(self) -> int:
        return len(self._replacements)

    def __bool__(self) -> bool:
        return bool(self._replacements)
