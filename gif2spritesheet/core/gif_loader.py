"""Animated GIF loading and metadata discovery."""

from __future__ import annotations

import io
import logging
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from .errors import InvalidImageError
from .frame_source import PillowFrameSource
from .gif_blocks import GifFormatError
from ..utils import validators

logger = logging.getLogger(__name__)


def load_gif(path: Path) -> PillowFrameSource:
    """Read a GIF fully into memory and expose it as a frame source."""

    validated_path = validators.validate_gif_path(path)
    try:
        data = validated_path.read_bytes()
    except OSError as exc:
        raise InvalidImageError(validated_path, reason=f"Could not read file: {exc}") from exc
    return open_gif_bytes(data, validated_path)


def open_gif_bytes(data: bytes, name: Path | str = "<upload>") -> PillowFrameSource:
    """Open an in-memory GIF payload."""

    if not data:
        raise InvalidImageError(Path(str(name)), reason="File is empty")
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except Image.DecompressionBombError as exc:
        raise InvalidImageError(Path(str(name)), reason=f"Image too large: {exc}") from exc
    except (UnidentifiedImageError, OSError, EOFError, SyntaxError, ValueError) as exc:
        raise InvalidImageError(Path(str(name)), reason=f"Failed to parse GIF: {exc}") from exc
    if image.format != "GIF":
        image.close()
        raise InvalidImageError(Path(str(name)), reason=f"Expected GIF data, got {image.format}")

    try:
        source = PillowFrameSource(image, data)
    except GifFormatError as exc:
        image.close()
        raise InvalidImageError(Path(str(name)), reason=f"Failed to parse GIF: {exc}") from exc
    logger.info(
        "Loaded %s (%s frames, %sx%s)",
        name,
        source.frame_count(),
        source.canvas_width(),
        source.canvas_height(),
    )
    return source
