"""
File I/O helpers.

All writes are atomic: content goes to a temporary file in the target
directory, which then replaces the destination in a single rename.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any

from stocksplits.utils.logging import get_logger

log = get_logger(__name__)


def dumps_json(data: Any) -> str:
    """Serialize to the dataset's on-disk format (2-space indent, trailing newline)."""
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


def read_json(path: Path) -> Any:
    """
    Read and parse a JSON file.

    Raises:
        OSError: If the file cannot be read.
        json.JSONDecodeError: If the content is not valid JSON.
    """
    with path.open(encoding="utf-8") as f:
        return json.load(f)


def write_text_atomic(path: Path, text: str) -> None:
    """
    Atomically replace ``path`` with ``text``.

    Args:
        path: Destination file. Parent directories are created.
        text: Full file content.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{path.name}.", suffix=".tmp", dir=path.parent
    )
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise

    log.debug("Wrote file", path=str(path), bytes=len(text.encode("utf-8")))


def write_json_atomic(path: Path, data: Any) -> None:
    """Atomically write ``data`` as formatted JSON."""
    write_text_atomic(path, dumps_json(data))
