"""Filesystem helpers shared by the manifest, config and deploy code.

Missing files are an expected state for most subrelay files, so reads
report absence as None instead of raising. Every other OSError is left
to propagate.
"""

import os
import tempfile
from pathlib import Path


def read_text_if_exists(path: Path) -> str | None:
    """Read a UTF-8 text file, returning None when it does not exist.

    Args:
        path: File to read

    Returns:
        File content, or None if the file (or a parent directory) is missing

    Raises:
        OSError: For failures other than absence (e.g. permission denied)
        UnicodeDecodeError: If the file is not valid UTF-8
    """
    try:
        return path.read_text(encoding="utf-8")
    except (FileNotFoundError, NotADirectoryError):
        return None


def atomic_write_text(target_path: Path, content: str, mode: int | None = None) -> None:
    """Atomically replace a file with new text content.

    Writes to a temp file in the same directory and renames it over the
    target, so readers never observe a half-written file.

    Args:
        target_path: File to write
        content: Full new content
        mode: Optional permission bits applied before the rename
    """
    target_path.parent.mkdir(parents=True, exist_ok=True)

    fd, temp_path = tempfile.mkstemp(
        dir=target_path.parent,
        prefix=f".{target_path.name}-",
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)

        if mode is not None:
            os.chmod(temp_path, mode)

        Path(temp_path).replace(target_path)
    except Exception:
        # Clean up temp file on error
        try:
            os.unlink(temp_path)
        except OSError:
            pass
        raise


__all__ = [
    "read_text_if_exists",
    "atomic_write_text",
]
