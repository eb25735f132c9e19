"""Core processing scaffolding for spritesheet generation."""

__all__ = [
    "DisposalMethod",
    "FrameMeta",
    "CompositedFrame",
    "GridLayout",
    "CellRect",
    "RenderConfig",
    "SpriteSheet",
    "TRANSPARENT",
    "DEFAULT_OUTPUT_NAME",
]

import enum
from dataclasses import dataclass, field
from typing import Optional

from PIL import Image

TRANSPARENT = "transparent"
DEFAULT_OUTPUT_NAME = "sprite-sheet.png"


class DisposalMethod(enum.Enum):
    """How the canvas is treated after a frame has been shown."""

    NONE = 0
    KEEP = 1
    RESTORE_BACKGROUND = 2
    RESTORE_PREVIOUS = 3

    @classmethod
    def from_code(cls, code: Optional[int]) -> "DisposalMethod":
        """Map a raw disposal field to a member; unknown values mean NONE."""

        try:
            return cls(code)
        except ValueError:
            return cls.NONE


@dataclass(frozen=True)
class FrameMeta:
    """Per-frame metadata read from the frame source."""

    index: int
    disposal: DisposalMethod = DisposalMethod.NONE
    duration_ms: int = 0


@dataclass
class CompositedFrame:
    """A fully composited canvas-sized frame."""

    pixels: Image.Image
    meta: FrameMeta


@dataclass(frozen=True)
class GridLayout:
    """Columns and rows of the sprite sheet grid."""

    columns: int
    rows: int

    @property
    def capacity(self) -> int:
        return self.columns * self.rows


@dataclass(frozen=True)
class CellRect:
    """Placement of one grid cell in output-canvas pixels."""

    x: int
    y: int
    width: int
    height: int


@dataclass
class RenderConfig:
    """User-configurable settings used for spritesheet generation.

    ``background_color`` of ``None`` leaves the sheet transparent.
    """

    output_size: int = 1024
    columns: Optional[int] = None
    frame_skip: int = 0
    preserve_aspect: bool = False
    pixel_perfect: bool = False
    background_color: Optional[tuple[int, int, int, int]] = None


@dataclass
class SpriteSheet:
    """Rendered sheet plus where every frame landed."""

    image: Image.Image
    layout: GridLayout
    placements: list[tuple[CompositedFrame, CellRect]] = field(default_factory=list)

    @property
    def frame_count(self) -> int:
        return len(self.placements)
