"""Spritesheet composition using Pillow."""

from __future__ import annotations

import logging
import threading
from pathlib import Path

from PIL import Image

from . import RenderConfig, SpriteSheet
from .accumulator import composite_frames
from .cell_renderer import render_cells
from .errors import InvalidConfigError
from .frame_selector import select_frames
from .frame_source import FrameSource
from .layout_planner import describe_layout, plan_layout
from ..utils import file_tools

logger = logging.getLogger(__name__)


def validate_render_config(config: RenderConfig) -> None:
    """Reject out-of-range settings before any frame is touched."""

    if config.output_size is None or config.output_size <= 0:
        raise InvalidConfigError("output_size", "must be greater than zero")
    if config.columns is not None and config.columns <= 0:
        raise InvalidConfigError("columns", "must be greater than zero")
    if config.frame_skip is None or config.frame_skip < 0:
        raise InvalidConfigError("frame_skip", "must be zero or greater")


def compose_sprite_sheet(
    source: FrameSource,
    config: RenderConfig,
    cancel: threading.Event | None = None,
) -> SpriteSheet:
    """Composite, select, lay out and render every frame of *source*."""

    validate_render_config(config)
    frame_count = source.frame_count()
    if frame_count <= 0:
        raise InvalidConfigError("frame_count", "animation has no frames")

    # Fully materialised so a decode failure or cancel never yields a partial sheet.
    composited = list(composite_frames(source, cancel))
    frames = select_frames(composited, config.frame_skip)

    frame_aspect = source.canvas_width() / source.canvas_height()
    layout = plan_layout(len(frames), frame_aspect, config.columns, config.preserve_aspect)
    logger.info(describe_layout(layout, len(frames), config.preserve_aspect))

    image, placements = render_cells(frames, layout, config)
    return SpriteSheet(image=image, layout=layout, placements=placements)


def build_sprite_sheet(
    source: FrameSource,
    config: RenderConfig,
    cancel: threading.Event | None = None,
) -> Image.Image:
    """Render *source* into a single ``output_size`` square RGBA sprite sheet."""

    return compose_sprite_sheet(source, config, cancel).image


def save_spritesheet(sheet: SpriteSheet | Image.Image, output_path: Path) -> Path:
    """Persist the sheet as PNG."""

    image = sheet.image if isinstance(sheet, SpriteSheet) else sheet
    output_path = output_path.with_suffix(".png")
    file_tools.ensure_directory(output_path.parent)
    image.save(output_path, format="PNG")
    logger.info("Wrote spritesheet to %s", output_path)
    return output_path
