"""JSON file helpers."""

import fcntl
import json
import os
import tempfile
from pathlib import Path
from typing import Any, Union


def read_json(file_path: Union[str, Path]) -> Any:
    """Read a JSON file under a shared lock.

    Raises:
        FileNotFoundError: If the file does not exist
        json.JSONDecodeError: If the file is empty or not valid JSON
    """
    with open(file_path, 'r') as f:
        fcntl.flock(f.fileno(), fcntl.LOCK_SH)
        try:
            content = f.read()
        finally:
            fcntl.flock(f.fileno(), fcntl.LOCK_UN)
    if not content.strip():
        raise json.JSONDecodeError('Empty file', content, 0)
    return json.loads(content)


def write_json_safely(file_path: Union[str, Path], data: Any, create_dirs: bool = True) -> None:
    """Write JSON data safely using a temporary file and atomic rename.

    Args:
        file_path: Path to the target JSON file
        data: Data to write
        create_dirs: If True, create parent directories if they don't exist
    """
    dir_path = os.path.dirname(os.path.abspath(file_path))
    if create_dirs:
        os.makedirs(dir_path, exist_ok=True)

    # Temp file in the same directory so the rename stays on one filesystem
    temp_path = None
    try:
        with tempfile.NamedTemporaryFile(mode='w', dir=dir_path, prefix='.', suffix='.tmp',
                                         delete=False) as temp_file:
            temp_path = temp_file.name
            os.chmod(temp_path, 0o644)

            fcntl.flock(temp_file.fileno(), fcntl.LOCK_EX)
            try:
                json.dump(data, temp_file, indent=4)
                temp_file.flush()
                os.fsync(temp_file.fileno())
            finally:
                fcntl.flock(temp_file.fileno(), fcntl.LOCK_UN)

        os.replace(temp_path, file_path)

    except BaseException:
        if temp_path and os.path.exists(temp_path):
            os.unlink(temp_path)
        raise
