"""
srcexport Core: File Operations.

Low-level helpers used by the copy pipeline: byte copies, checksums,
read-only attribute handling and text/binary sniffing.
"""
import hashlib
import os
import shutil
import stat
from pathlib import Path
from typing import Union

from srcexport.core.constants import Limits

PathLike = Union[str, Path]

_WRITE_BITS = stat.S_IWUSR | stat.S_IWGRP | stat.S_IWOTH


def ensure_parent_directory(path: PathLike) -> None:
    """Create the directory that will hold ``path`` if it is missing."""
    parent = os.path.dirname(os.fspath(path))
    if parent:
        os.makedirs(parent, exist_ok=True)


def copy_bytes(source: PathLike, destination: PathLike) -> None:
    """Copy file contents, replacing the destination."""
    ensure_parent_directory(destination)
    shutil.copyfile(source, destination)


def calculate_checksum(path: PathLike, algorithm: str = "md5") -> str:
    """Calculate the hex digest of a file.

    Args:
        path: File to hash
        algorithm: Any algorithm name accepted by ``hashlib.new``

    Returns:
        Hex digest
    """
    digest = hashlib.new(algorithm)
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(Limits.HASH_CHUNK_SIZE), b""):
            digest.update(chunk)
    return digest.hexdigest()


def is_read_only(path: PathLike) -> bool:
    """Check whether the owner lacks write permission on a file."""
    return not os.stat(path).st_mode & stat.S_IWUSR


def set_read_only(path: PathLike, read_only: bool) -> None:
    """Set or clear the read-only attribute of a file.

    Missing files are ignored. On Windows ``os.chmod`` maps the write bits
    onto the read-only attribute.
    """
    if not os.path.isfile(path):
        return

    mode = stat.S_IMODE(os.stat(path).st_mode)
    if read_only:
        mode &= ~_WRITE_BITS
    else:
        mode |= stat.S_IWUSR
    os.chmod(path, mode)


def delete_file(path: PathLike, unprotect: bool = False) -> bool:
    """Delete an existing file before it is rewritten.

    Args:
        path: File to delete
        unprotect: Clear the read-only attribute first

    Returns:
        True if a file was deleted

    Raises:
        PermissionError: If the file is read-only and ``unprotect`` is False
    """
    if not os.path.lexists(path) or (os.path.isdir(path) and not os.path.islink(path)):
        return False

    if not os.path.islink(path) and is_read_only(path):
        if not unprotect:
            raise PermissionError(f"Cannot overwrite read-only file: {path}")
        set_read_only(path, False)

    os.remove(path)
    return True


def is_text_file(path: PathLike, nbytes: int = Limits.TEXT_SNIFF_BYTES) -> bool:
    """Heuristically determine whether a file holds text.

    The first ``nbytes`` must contain no NUL byte and decode as UTF-8 (a
    multi-byte sequence cut by the sniff boundary is tolerated).
    """
    with open(path, "rb") as f:
        chunk = f.read(nbytes)

    if b"\x00" in chunk:
        return False

    try:
        chunk.decode("utf-8")
    except UnicodeDecodeError as e:
        # Sequence truncated by the read boundary
        return e.start >= len(chunk) - 3 and e.reason == "unexpected end of data"
    return True


def read_text(path: PathLike) -> str:
    """Read a whole text file, keeping its line endings."""
    with open(path, "r", encoding="utf-8", errors="surrogateescape", newline="") as f:
        return f.read()


def write_text(path: PathLike, text: str) -> None:
    """Write a whole text file as UTF-8 without translating line endings."""
    ensure_parent_directory(path)
    with open(path, "w", encoding="utf-8", errors="surrogateescape", newline="") as f:
        f.write(text)
