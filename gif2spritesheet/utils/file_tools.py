"""Filesystem helpers."""

from __future__ import annotations

import logging
from pathlib import Path

from ..core import DEFAULT_OUTPUT_NAME

logger = logging.getLogger(__name__)


def ensure_directory(path: Path) -> Path:
    """Create a directory if it does not exist."""

    path.mkdir(parents=True, exist_ok=True)
    logger.debug("Ensured directory exists: %s", path)
    return path


def default_output_path(source_path: Path) -> Path:
    """Return the default sprite sheet path next to the source file."""

    return source_path.parent / DEFAULT_OUTPUT_NAME
