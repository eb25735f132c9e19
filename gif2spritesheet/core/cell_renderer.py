"""Placement of composited frames into sprite sheet cells."""

from __future__ import annotations

import logging
import math
from typing import List, Sequence, Tuple

from PIL import Image

from . import CellRect, CompositedFrame, GridLayout, RenderConfig

logger = logging.getLogger(__name__)


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values, like ``Math.round``."""

    return math.floor(value + 0.5)


def cell_boundaries(output_size: int, count: int) -> list[int]:
    """Shared cell edges along one axis; the last edge is always *output_size*."""

    step = output_size / count
    return [round_half_up(k * step) for k in range(count + 1)]


def cell_rect(index: int, layout: GridLayout, output_size: int) -> CellRect:
    """Rectangle of the cell holding the frame at *index*."""

    row, col = divmod(index, layout.columns)
    xs = cell_boundaries(output_size, layout.columns)
    ys = cell_boundaries(output_size, layout.rows)
    return CellRect(x=xs[col], y=ys[row], width=xs[col + 1] - xs[col], height=ys[row + 1] - ys[row])


def resample_filter(pixel_perfect: bool) -> Image.Resampling:
    return Image.Resampling.NEAREST if pixel_perfect else Image.Resampling.LANCZOS


def stretch_to_cell(frame: Image.Image, cell: CellRect, resample: Image.Resampling) -> Image.Image:
    """Scale non-uniformly to exactly the cell size."""

    return frame.resize((cell.width, cell.height), resample=resample)


def fill_and_crop(frame: Image.Image, cell: CellRect, resample: Image.Resampling) -> Image.Image:
    """Scale to cover the cell keeping the frame ratio, then center-crop to the cell."""

    frame_w, frame_h = frame.size
    frame_ratio = frame_w / frame_h
    cell_ratio = cell.width / cell.height

    if frame_ratio > cell_ratio:
        new_h = cell.height
        new_w = max(cell.width, round_half_up(new_h * frame_ratio))
    else:
        new_w = cell.width
        new_h = max(cell.height, round_half_up(new_w / frame_ratio))

    offset_x = (new_w - cell.width) // 2
    offset_y = (new_h - cell.height) // 2
    scaled = frame.resize((new_w, new_h), resample=resample)
    return scaled.crop((offset_x, offset_y, offset_x + cell.width, offset_y + cell.height))


def new_canvas(config: RenderConfig) -> Image.Image:
    """Output canvas filled with the configured background, or transparent."""

    background = config.background_color if config.background_color is not None else (0, 0, 0, 0)
    return Image.new("RGBA", (config.output_size, config.output_size), background)


def render_cells(
    frames: Sequence[CompositedFrame],
    layout: GridLayout,
    config: RenderConfig,
) -> Tuple[Image.Image, List[Tuple[CompositedFrame, CellRect]]]:
    """Draw every frame into its grid cell and return the sheet plus placements."""

    sheet = new_canvas(config)
    resample = resample_filter(config.pixel_perfect)
    placements: list[tuple[CompositedFrame, CellRect]] = []

    for idx, frame in enumerate(frames):
        cell = cell_rect(idx, layout, config.output_size)
        placements.append((frame, cell))
        if cell.width <= 0 or cell.height <= 0:
            logger.debug("Skipping empty cell %s for frame %s", idx, frame.meta.index)
            continue

        if config.preserve_aspect:
            tile = fill_and_crop(frame.pixels, cell, resample)
        else:
            tile = stretch_to_cell(frame.pixels, cell, resample)
        sheet.alpha_composite(tile, dest=(cell.x, cell.y))

    return sheet, placements
