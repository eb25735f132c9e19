"""Validation helpers for user inputs."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from PIL import ImageColor

from ..core import TRANSPARENT
from ..core.errors import InvalidImageError, ValidationError


ALLOWED_IMAGE_EXTENSIONS = {".gif"}


def validate_gif_path(path: Path) -> Path:
    """Ensure the path exists and appears to be a GIF."""

    if not path:
        raise InvalidImageError(Path("<unset>"), reason="No path provided")
    if not path.exists():
        raise InvalidImageError(path, reason="File not found")
    if not is_gif_name(path.name):
        raise InvalidImageError(path, reason="Please upload a GIF file")
    return path


def is_gif_name(name: str | None) -> bool:
    return bool(name) and Path(name).suffix.lower() in ALLOWED_IMAGE_EXTENSIONS


def parse_optional_int(value: str | None, field: str) -> Optional[int]:
    """Parse a positive integer from a string value, if provided."""

    if value is None or value == "":
        return None
    try:
        parsed = int(value)
    except ValueError as exc:
        raise ValidationError(f"{field} must be an integer") from exc
    if parsed <= 0:
        raise ValidationError(f"{field} must be greater than zero")
    return parsed


def parse_optional_non_negative_int(value: str | None, field: str) -> Optional[int]:
    """Parse a non-negative integer (0 allowed) from a string value."""

    if value is None or value == "":
        return None
    try:
        parsed = int(value)
    except ValueError as exc:
        raise ValidationError(f"{field} must be an integer") from exc
    if parsed < 0:
        raise ValidationError(f"{field} must be zero or greater")
    return parsed


def parse_color_tuple(value: str | None) -> Optional[tuple[int, int, int, int]]:
    """Parse an RGBA color string like '255,0,0,255'."""

    if value is None or value.strip() == "":
        return None
    parts = [p.strip() for p in value.split(",")]
    if len(parts) not in (3, 4):
        raise ValidationError("Background color must be R,G,B[,A]")
    try:
        numbers = [int(p) for p in parts]
    except ValueError as exc:
        raise ValidationError("Background color must be numeric R,G,B[,A]") from exc
    if len(numbers) == 3:
        numbers.append(255)
    if any(n < 0 or n > 255 for n in numbers):
        raise ValidationError("Background color values must be between 0 and 255")
    return tuple(numbers)  # type: ignore


def parse_background(value: str | None) -> Optional[tuple[int, int, int, int]]:
    """Parse a background setting: 'transparent', a CSS color name/hex, or R,G,B[,A].

    Returns None for transparent.
    """

    if value is None or value.strip() == "" or value.strip().lower() == TRANSPARENT:
        return None
    if "," in value:
        return parse_color_tuple(value)
    try:
        return ImageColor.getcolor(value.strip(), "RGBA")  # type: ignore[return-value]
    except ValueError as exc:
        raise ValidationError(f"Unknown background color: {value}") from exc
