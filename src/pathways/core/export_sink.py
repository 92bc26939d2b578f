"""Export sink module.

Writes serialized artifacts under an output directory. The target file is
replaced in one step, so readers see either the previous content or the
new content.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

import structlog

logger = structlog.get_logger(__name__)


def write_artifact(directory: Path, file_name: str, content: str) -> Path:
    """Write content to directory/file_name, overwriting any existing file.

    Args:
        directory: Output directory, created with parents if missing
        file_name: Artifact file name
        content: Text to write (UTF-8)

    Returns:
        Path to the written artifact

    Raises:
        OSError: If the directory cannot be created or the write fails
        UnicodeEncodeError: If content cannot be encoded as UTF-8
    """
    directory.mkdir(parents=True, exist_ok=True)
    target = directory / file_name

    fd, tmp_name = tempfile.mkstemp(dir=directory, prefix=f".{file_name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        # mkstemp creates 0600 files
        os.chmod(tmp_name, 0o644)
        os.replace(tmp_name, target)
    except BaseException as e:
        logger.error("artifact.write_failed", path=str(target), error=str(e))
        Path(tmp_name).unlink(missing_ok=True)
        raise

    logger.info("artifact.written", path=str(target), bytes=len(content.encode("utf-8")))
    return target
