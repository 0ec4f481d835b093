"""
Output path selection and the single, all-or-nothing write of the result.
"""
from __future__ import annotations

import os
import secrets
import tempfile
from pathlib import Path

from .config import get_output_directory
from .shared import OutputWriteError, get_logger

logger = get_logger(__name__)


def resolve_output_path(specified: str | Path | None = None) -> Path:
    """
    Pick the destination file.

    A given path is used as-is (parent directories are created). Otherwise a
    random `<hex>.html` is placed in the configured output directory.

    Raises:
        OutputWriteError: the directory cannot be created
    """
    if specified:
        path = Path(specified).expanduser()
        parent = path.parent
    else:
        parent = get_output_directory()
        path = parent / f"{secrets.token_hex(8)}.html"
    try:
        parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise OutputWriteError(f"failed to create output directory {parent}: {exc}") from exc
    return path.resolve()


def write_output_atomic(path: str | Path, text: str) -> Path:
    """
    Write `text` to `path` in one step.

    The content goes to a temporary file next to the destination and is moved
    into place with os.replace; on any failure the temporary file is removed and
    an existing destination is left untouched.

    Raises:
        OutputWriteError
    """
    dest = Path(path)
    tmp_name: str | None = None
    try:
        fd, tmp_name = tempfile.mkstemp(prefix=f".{dest.name}.", suffix=".tmp", dir=str(dest.parent))
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as fh:
            fh.write(text)
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp_name, dest)
        tmp_name = None
    except OSError as exc:
        raise OutputWriteError(f"failed to write {dest}: {exc}") from exc
    finally:
        if tmp_name is not None:
            try:
                os.unlink(tmp_name)
            except OSError:
                logger.debug("Could not remove temporary file %s", tmp_name, exc_info=True)
    return dest
