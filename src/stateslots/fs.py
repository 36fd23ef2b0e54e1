from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)


def ensure_dir(path: Path) -> Path:
    """Create ``path`` (and parents) if missing. Safe when another caller wins the race.

    Failures propagate unlogged; the caller decides how to report them.
    """
    path.mkdir(parents=True, exist_ok=True)
    return path


def ensure_file(path: Path) -> Path:
    """Create an empty file at ``path`` unless one already exists."""
    ensure_dir(path.parent)
    path.touch(exist_ok=True)
    return path


def _fsync_dir(directory: Path) -> None:
    # Persists the rename itself; not every platform can open a directory.
    try:
        fd = os.open(directory, os.O_RDONLY)
    except OSError:
        return
    try:
        os.fsync(fd)
    except OSError:
        logger.debug("Could not fsync directory %s", directory, exc_info=True)
    finally:
        os.close(fd)


def atomic_write_bytes(path: Path, data: bytes) -> None:
    """Replace ``path`` with ``data`` so readers never observe a partial file.

    The bytes go to a hidden ``.<name>.*.tmp`` sibling, which is flushed to
    disk and renamed over the target. A failed write leaves the previous file
    in place and removes the sibling.
    """
    directory = ensure_dir(path.parent)
    with tempfile.NamedTemporaryFile(
        "wb", dir=directory, prefix=f".{path.name}.", suffix=".tmp", delete=False
    ) as tmp:
        tmp_path = Path(tmp.name)
        try:
            tmp.write(data)
            tmp.flush()
            os.fsync(tmp.fileno())
        except OSError:
            tmp.close()
            tmp_path.unlink(missing_ok=True)
            raise
    try:
        os.replace(tmp_path, path)
    except OSError:
        tmp_path.unlink(missing_ok=True)
        raise
    _fsync_dir(directory)


def read_bytes(path: Path) -> bytes:
    with path.open("rb") as f:
        return f.read()
