"""Grid layout selection for the sprite sheet."""

from __future__ import annotations

import math

from . import GridLayout
from .errors import InvalidConfigError


def find_optimal_layout(frame_count: int, frame_aspect: float) -> GridLayout:
    """Search column counts for the grid whose rows/columns ratio is closest to *frame_aspect*.

    Ties keep the smallest column count.
    """

    best_columns = 1
    best_diff = math.inf
    for columns in range(1, frame_count + 1):
        rows = math.ceil(frame_count / columns)
        diff = abs(rows / columns - frame_aspect)
        if diff < best_diff:
            best_diff = diff
            best_columns = columns
    return GridLayout(columns=best_columns, rows=math.ceil(frame_count / best_columns))


def plan_layout(
    frame_count: int,
    frame_aspect: float,
    columns: int | None = None,
    preserve_aspect: bool = False,
) -> GridLayout:
    """Compute grid layout; prefer an explicit column count."""

    if columns is not None:
        if columns < 1:
            raise InvalidConfigError("columns", "must be greater than zero")
        return GridLayout(columns=columns, rows=math.ceil(frame_count / columns))
    if preserve_aspect:
        return find_optimal_layout(frame_count, frame_aspect)

    # Square-ish fallback
    columns = math.ceil(math.sqrt(frame_count))
    return GridLayout(columns=columns, rows=math.ceil(frame_count / columns))


def describe_layout(layout: GridLayout, frame_count: int, preserve_aspect: bool) -> str:
    """One-line summary of the chosen mode and grid."""

    mode = "Option 2 (Keep Aspect / Fill & Crop)" if preserve_aspect else "Option 1 (Default / Full Stretch)"
    return f"{mode} | Grid: {layout.columns} cols × {layout.rows} rows | Frames: {frame_count}"
