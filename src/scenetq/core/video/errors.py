"""Error types for quality targeting."""

from pathlib import Path
from typing import Optional, Union


class ScenetqError(Exception):
    """Base class for scenetq errors."""

    def __init__(self, message: str, details: Optional[str] = None):
        """Initialize error.

        Args:
            message: Error message
            details: Optional technical details
        """
        self.message = message
        self.details = details
        super().__init__(message)


class DecodeOpenError(ScenetqError):
    """Error opening a video source for decoding."""

    def __init__(self, message: str, path: Union[str, Path, None] = None,
                 details: Optional[str] = None):
        """Initialize error.

        Args:
            message: Error message
            path: Source that failed to open
            details: Optional decoder error output
        """
        super().__init__(message, details)
        self.path = path


class CacheParseError(ScenetqError):
    """Score cache exists but cannot be parsed."""

    def __init__(self, message: str, path: Union[str, Path, None] = None,
                 details: Optional[str] = None):
        super().__init__(message, details)
        self.path = path


class SceneFileError(ScenetqError):
    """Scenes file is missing or does not match the expected schema."""

    def __init__(self, message: str, path: Union[str, Path, None] = None,
                 details: Optional[str] = None):
        super().__init__(message, details)
        self.path = path


class UnsupportedEncoderError(ScenetqError):
    """Encoder identity is not known to the parameter builders."""

    def __init__(self, encoder: str):
        super().__init__(f"Encoder not supported: {encoder}")
        self.encoder = encoder


class EncoderRunError(ScenetqError):
    """Error running an external encoder command."""

    def __init__(self, message: str, cmd: Optional[str] = None,
                 returncode: Optional[int] = None):
        """Initialize error.

        Args:
            message: Error message
            cmd: Command that failed
            returncode: Exit status of the command
        """
        details = f"Command: {cmd}\nExit code: {returncode}" if cmd else None
        super().__init__(message, details)
        self.cmd = cmd
        self.returncode = returncode


class ScoringAborted(ScenetqError):
    """Scoring round was stopped by the stall recovery policy."""

    def __init__(self, collected: int, expected: int):
        super().__init__(
            f"Scoring aborted with {collected} of {expected} frames scored"
        )
        self.collected = collected
        self.expected = expected
