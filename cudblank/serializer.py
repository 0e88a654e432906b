"""Render rewritten sources and write them back in place."""

import logging
import shutil
import subprocess
from pathlib import Path

from .errors import SerializeError, WriteError

logger = logging.getLogger(__name__)

FORMAT_TIMEOUT = 60


def formatter_available(formatter: str | None) -> bool:
    return bool(formatter) and shutil.which(formatter) is not None


def format_source(data: bytes, formatter: str | None, path: Path) -> bytes:
    """Pipe ``data`` through the formatter; unformatted if it is not installed."""
    if not formatter:
        return data
    if not formatter_available(formatter):
        logger.warning("%s not found on PATH, writing %s unformatted", formatter, path)
        return data

    try:
        result = subprocess.run(
            [formatter],
            input=data,
            capture_output=True,
            timeout=FORMAT_TIMEOUT,
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        raise SerializeError(f"rewriting failed: {e}", str(path)) from e

    if result.returncode != 0:
        detail = result.stderr.decode("utf-8", errors="replace").strip()
        raise SerializeError(f"rewriting failed: {formatter}: {detail}", str(path))
    return result.stdout


def write_file(path: Path, data: bytes) -> None:
    """Truncate and rewrite an existing file."""
    try:
        with open(path, "r+b") as f:
            f.truncate(0)
            f.write(data)
    except OSError as e:
        raise WriteError(f"opening for rewriting failed: {e.strerror or e}", str(path)) from e


def serialize(path: Path, data: bytes, formatter: str | None) -> bytes:
    """Format and write one rewritten file; returns the bytes written."""
    rendered = format_source(data, formatter, path)
    write_file(path, rendered)
    logger.debug("wrote %s (%d bytes)", path, len(rendered))
    return rendered
