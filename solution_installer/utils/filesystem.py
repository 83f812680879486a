"""Filesystem helpers that raise installer errors instead of bare OSError."""

import os
import shutil
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional, Union

from ..core.errors import AtomicWriteError, FilesystemError, PathError
from ..core.log import get_logger

logger = get_logger(__name__)


@contextmanager
def _filesystem_errors(action: str) -> Iterator[None]:
    """Translate OSError raised while performing ``action``."""
    try:
        yield
    except FileNotFoundError as e:
        raise PathError(f"Not found while {action}: {e.filename or e}") from e
    except PermissionError as e:
        raise FilesystemError(f"Permission denied while {action}") from e
    except OSError as e:
        raise FilesystemError(f"Error while {action}: {e}") from e


def atomic_write(path: Path, data: Union[str, bytes]) -> None:
    """Replace ``path`` with ``data`` via a temporary file in the same directory.

    Readers see either the old or the new content, never a partial write.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    binary = isinstance(data, bytes)
    encoding = None if binary else "utf-8"
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.")
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "wb" if binary else "w", encoding=encoding) as tmp_file:
            tmp_file.write(data)
            tmp_file.flush()
            os.fsync(tmp_file.fileno())
        tmp_path.replace(path)
    except OSError as e:
        tmp_path.unlink(missing_ok=True)
        raise AtomicWriteError(f"Failed to atomically write to {path}: {e}") from e
    logger.debug("Wrote %d %s to %s", len(data), "bytes" if binary else "chars", path)


def read_text(path: Path, encoding: str = "utf-8") -> str:
    with _filesystem_errors(f"reading {path}"):
        try:
            return Path(path).read_text(encoding=encoding)
        except UnicodeDecodeError as e:
            raise FilesystemError(f"Encoding error reading {path}: {e}") from e


def read_text_if_exists(path: Path, encoding: str = "utf-8") -> Optional[str]:
    """Read a text file, or return None when there is no such file."""
    if not Path(path).is_file():
        return None
    return read_text(path, encoding)


def copy_file(src: Path, dst: Path) -> None:
    """Copy the contents of ``src`` over ``dst``, creating parent directories."""
    src, dst = Path(src), Path(dst)
    with _filesystem_errors(f"copying {src} to {dst}"):
        dst.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(src, dst)
    logger.debug("Copied %s to %s", src, dst)


def _remove(path: Path) -> bool:
    if path.is_symlink() or path.is_file():
        path.unlink()
    elif path.is_dir():
        shutil.rmtree(path)
    else:
        return False
    return True


def force_remove(path: Path) -> None:
    """Remove a file or a whole directory tree. A missing path is fine."""
    path = Path(path)
    with _filesystem_errors(f"removing {path}"):
        if _remove(path):
            logger.debug("Removed %s", path)


def safe_remove(path: Path) -> bool:
    """Like force_remove, but logs failures and reports success as a bool."""
    try:
        return _remove(Path(path))
    except OSError as e:
        logger.warning("Failed to remove %s: %s", path, e)
        return False


def list_files(
    directory: Path, pattern: str = "*", recursive: bool = False
) -> List[Path]:
    """Regular files in ``directory`` matching ``pattern``, sorted."""
    directory = Path(directory)
    if not directory.is_dir():
        raise PathError(f"Directory not found: {directory}")
    with _filesystem_errors(f"listing {directory}"):
        matches = directory.rglob(pattern) if recursive else directory.glob(pattern)
        return sorted(p for p in matches if p.is_file())
