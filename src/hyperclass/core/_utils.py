"""
Shared file helpers for the vector, dataset and metrics persistence layers.

Every persisted artefact in HyperClass is a plain text file with one record
per line, so reading and (atomically) writing line files lives here.
"""

import os
import tempfile
from pathlib import Path
from typing import Iterable, List, Union

from .exceptions import VectorFileNotFoundError, wrap_storage_exception

PathLike = Union[str, Path]


def is_file(path: PathLike) -> bool:
    return Path(path).is_file()


def read_lines(path: PathLike) -> List[str]:
    """
    Read a newline-delimited text file, dropping blank lines.

    Raises:
        VectorFileNotFoundError: If the path does not lead to a file.
        StorageError: If the file exists but cannot be read.
    """
    path_obj = Path(path)
    if not path_obj.is_file():
        raise VectorFileNotFoundError(str(path_obj))
    try:
        text = path_obj.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise wrap_storage_exception("load", str(path_obj), e) from e
    return [line.strip() for line in text.splitlines() if line.strip()]


def atomic_write_lines(path: PathLike, lines: Iterable[str]) -> None:
    """
    Atomically write one record per line.

    Writes to a temporary file in the target directory first, then renames
    it over the target so readers never observe a partial file.

    Raises:
        StorageError: If the directory cannot be created or the write fails.
    """
    path_obj = Path(path)
    tmp_path = None
    try:
        path_obj.parent.mkdir(parents=True, exist_ok=True)
        # Create temp file in same directory for atomic rename
        fd, tmp_path = tempfile.mkstemp(dir=path_obj.parent, suffix=".tmp")
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            for line in lines:
                f.write(line)
                f.write("\n")
        os.replace(tmp_path, path_obj)
        tmp_path = None
    except OSError as e:
        raise wrap_storage_exception("save", str(path_obj), e) from e
    finally:
        # Clean up temp file on failure
        if tmp_path and os.path.exists(tmp_path):
            os.unlink(tmp_path)
