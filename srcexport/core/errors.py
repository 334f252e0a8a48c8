"""
srcexport Core: Export errors.

Errors raised while copying a tree. Every error carries an ``ErrorCode`` and,
where one is known, the path that was being processed when it failed.
"""
from typing import Optional

from srcexport.core.constants import ErrorCode, Limits


class ExportError(Exception):
    """Base exception for fatal export errors."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        path: Optional[str] = None,
    ):
        """Initialize ExportError.

        Args:
            message: Error message
            error_code: Associated error code
            path: Path being processed when the error occurred
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.path = path


class IntegrityError(ExportError):
    """Raised when a copied file keeps failing hash verification."""

    def __init__(self, source: str, destination: str, attempts: int = Limits.MAX_HASH_RETRIES):
        super().__init__(
            f'Error while copying file "{source}" to "{destination}": '
            f"hash mismatch after {attempts} consecutive retries",
            ErrorCode.INTEGRITY_FAILURE,
            path=source,
        )
        self.source = source
        self.destination = destination
        self.attempts = attempts
