"""Input validation utilities."""

import os
from pathlib import Path
from typing import Union

from ..core.video.errors import DecodeOpenError


def validate_source(path: Union[str, Path]) -> Path:
    """Validate that a video source or script exists and is readable.

    Args:
        path: Path to the source

    Returns:
        Path object for the source

    Raises:
        DecodeOpenError: If the source is missing, not a file or unreadable
    """
    if isinstance(path, str):
        path = Path(path)

    if not path.exists():
        raise DecodeOpenError(f"Source does not exist: {path}", path)

    if not path.is_file():
        raise DecodeOpenError(f"Source is not a file: {path}", path)

    if not os.access(path, os.R_OK):
        raise DecodeOpenError(f"Source is not readable: {path}", path)

    return path


def derived_path(path: Union[str, Path], suffix: str) -> Path:
    """Sibling of ``path`` sharing its stem, e.g. ``clip.mkv`` -> ``clip.ssimu2``.

    ``suffix`` may carry a stem extension such as ``_override.json``.
    """
    path = Path(path)
    return path.with_name(f"{path.stem}{suffix}")
