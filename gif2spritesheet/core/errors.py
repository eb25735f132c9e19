"""Domain-specific exceptions for the spritesheet generator."""

from pathlib import Path


class InvalidImageError(ValueError):
    """Raised when the selected animation file is missing or unreadable."""

    def __init__(self, path: Path, reason: str | None = None):
        message = f"Invalid image file: {path}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)
        self.path = path
        self.reason = reason


class ValidationError(ValueError):
    """Raised when user-provided settings fail validation."""


class InvalidConfigError(ValidationError):
    """Raised when a render setting is out of range before processing starts."""

    def __init__(self, field: str, message: str):
        super().__init__(f"{field}: {message}")
        self.field = field


class ProcessingError(RuntimeError):
    """Raised when the pipeline fails unexpectedly."""


class DecodeError(ProcessingError):
    """Raised when a frame cannot be decoded by the frame source."""

    def __init__(self, frame_index: int, reason: str):
        super().__init__(f"Failed to decode frame {frame_index}: {reason}")
        self.frame_index = frame_index


class EmptySelectionError(ProcessingError):
    """Raised when frame skipping leaves nothing to place on the sheet."""

    def __init__(self, frame_skip: int, frame_count: int):
        super().__init__(f"No frames after filtering (frame_skip={frame_skip}, frames={frame_count})")
        self.frame_skip = frame_skip
        self.frame_count = frame_count


class GenerationCancelled(ProcessingError):
    """Raised when a caller cancels a generation pass between frames."""
