"""
File system utilities for blisbuild.

Staging, cleanup and output helpers used by the build driver and the
interface generator.
"""

import os
import shutil
import tempfile
from pathlib import Path
from typing import Union

from blisbuild.core.exceptions import FilesystemError

IS_WINDOWS = os.name == "nt"


def ensure_directory(path: Union[str, Path]) -> Path:
    """
    Ensure a directory exists (idempotent).

    Raises:
        FilesystemError: If the directory cannot be created
    """
    path = Path(path)
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FilesystemError(f"Failed to create directory '{path}': {e}")
    return path


def is_populated_directory(path: Union[str, Path]) -> bool:
    """Check that a path is a readable directory with at least one entry."""
    path = Path(path)
    try:
        return path.is_dir() and any(path.iterdir())
    except OSError:
        return False


def safe_rmtree(path: Union[str, Path]) -> None:
    """
    Remove a directory tree if it exists.

    Args:
        path: Directory to remove

    Raises:
        FilesystemError: If path is not a directory or deletion fails
    """
    path = Path(path)

    if not path.exists():
        return

    if not path.is_dir():
        raise FilesystemError(f"Path is not a directory: {path}")

    try:
        if IS_WINDOWS:

            def handle_remove_readonly(func, path, exc):
                """Error handler for Windows read-only files."""
                if not os.access(path, os.W_OK):
                    os.chmod(path, 0o777)
                    func(path)
                else:
                    raise

            shutil.rmtree(path, onerror=handle_remove_readonly)
        else:
            shutil.rmtree(path)
    except OSError as e:
        raise FilesystemError(f"Failed to remove directory '{path}': {e}")


def copy_tree(source: Union[str, Path], destination: Union[str, Path]) -> None:
    """
    Recursively copy a directory tree, keeping symlinks as symlinks.

    Raises:
        FilesystemError: If the copy fails
    """
    try:
        shutil.copytree(source, destination, symlinks=True)
    except (OSError, shutil.Error) as e:
        raise FilesystemError(f"Failed to copy '{source}' to '{destination}': {e}")


def atomic_write(
    file_path: Union[str, Path], content: str, encoding: str = "utf-8"
) -> None:
    """
    Write file atomically using temp file + rename.

    The file is never left partially written; if the write fails the
    previous contents remain.

    Raises:
        FilesystemError: If the file cannot be written
    """
    file_path = Path(file_path)
    ensure_directory(file_path.parent)

    try:
        temp_fd, temp_path_str = tempfile.mkstemp(
            dir=file_path.parent, prefix=f".{file_path.name}.", suffix=".tmp"
        )
    except OSError as e:
        raise FilesystemError(f"Failed to write '{file_path}': {e}")
    temp_path = Path(temp_path_str)

    try:
        with open(temp_fd, "w", encoding=encoding) as f:
            f.write(content)
        temp_path.replace(file_path)
    except OSError as e:
        temp_path.unlink(missing_ok=True)
        raise FilesystemError(f"Failed to write '{file_path}': {e}")
    except Exception:
        temp_path.unlink(missing_ok=True)
        raise
