"""Frame sources feeding the compositing pass.

A frame source exposes the decoded animation one frame at a time: canvas
dimensions, per-frame disposal metadata, an optional background colour and
a canvas-sized RGBA buffer for each frame. Decoding of the container itself
is left to Pillow.
"""

from __future__ import annotations

import abc
import logging
from typing import Optional, Sequence, Union

import numpy as np
from PIL import Image

from . import DisposalMethod, FrameMeta, gif_blocks
from .errors import DecodeError

logger = logging.getLogger(__name__)

FrameData = Union[np.ndarray, Image.Image]


class FrameSource(abc.ABC):
    """Read-only view of a decoded animation."""

    @abc.abstractmethod
    def frame_count(self) -> int:
        """Number of frames in the animation."""

    @abc.abstractmethod
    def canvas_width(self) -> int:
        """Logical canvas width, constant for all frames."""

    @abc.abstractmethod
    def canvas_height(self) -> int:
        """Logical canvas height, constant for all frames."""

    @abc.abstractmethod
    def frame_meta(self, index: int) -> FrameMeta:
        """Disposal metadata for frame *index*."""

    @abc.abstractmethod
    def frame_rgba(self, index: int) -> Image.Image:
        """Canvas-sized RGBA pixels for frame *index*.

        Raises DecodeError if the frame cannot be decoded.
        """

    @abc.abstractmethod
    def background_color(self) -> Optional[tuple[int, int, int]]:
        """Background colour from the container, if it defines one."""

    @property
    def canvas_size(self) -> tuple[int, int]:
        return self.canvas_width(), self.canvas_height()

    def _check_index(self, index: int) -> None:
        if not 0 <= index < self.frame_count():
            raise DecodeError(index, f"frame index out of range (0..{self.frame_count() - 1})")


class ArrayFrameSource(FrameSource):
    """In-memory frames given as ``(height, width, 4)`` uint8 arrays or RGBA images."""

    def __init__(
        self,
        frames: Sequence[FrameData],
        disposals: Sequence[Union[int, DisposalMethod]] | None = None,
        background: Optional[tuple[int, int, int]] = None,
        durations: Sequence[int] | None = None,
        size: tuple[int, int] | None = None,
    ) -> None:
        self._frames = list(frames)
        if size is None:
            if not self._frames:
                raise ValueError("size is required when no frames are given")
            size = _frame_size(self._frames[0])
        self._width, self._height = size
        codes = list(disposals) if disposals is not None else [DisposalMethod.NONE] * len(self._frames)
        if len(codes) != len(self._frames):
            raise ValueError("disposals must have one entry per frame")
        self._metas = [
            FrameMeta(
                index=idx,
                disposal=code if isinstance(code, DisposalMethod) else DisposalMethod.from_code(code),
                duration_ms=int(durations[idx]) if durations is not None else 0,
            )
            for idx, code in enumerate(codes)
        ]
        self._background = background

    def frame_count(self) -> int:
        return len(self._frames)

    def canvas_width(self) -> int:
        return self._width

    def canvas_height(self) -> int:
        return self._height

    def frame_meta(self, index: int) -> FrameMeta:
        self._check_index(index)
        return self._metas[index]

    def background_color(self) -> Optional[tuple[int, int, int]]:
        return self._background

    def frame_rgba(self, index: int) -> Image.Image:
        self._check_index(index)
        data = self._frames[index]
        if isinstance(data, Image.Image):
            image = data.convert("RGBA")
        else:
            array = np.asarray(data)
            if array.ndim != 3 or array.shape[2] != 4:
                raise DecodeError(index, f"expected an (h, w, 4) RGBA array, got shape {array.shape}")
            image = Image.fromarray(np.ascontiguousarray(array, dtype=np.uint8))
        if image.size != self.canvas_size:
            raise DecodeError(index, f"frame is {image.size[0]}x{image.size[1]}, canvas is {self._width}x{self._height}")
        return image


class PillowFrameSource(FrameSource):
    """Frames of an animated GIF opened with Pillow.

    Pillow supplies the canvas size, frame count and per-frame metadata. The
    pixels of each frame are decoded from its own image block and placed on a
    transparent canvas-sized buffer, so nothing from earlier frames leaks in.
    """

    def __init__(self, image: Image.Image, data: bytes) -> None:
        self._image = image
        self._blocks = gif_blocks.read_blocks(data)
        self._count = int(getattr(image, "n_frames", 1))
        self._width, self._height = image.size
        self._background = _palette_background(image)

    def frame_count(self) -> int:
        return self._count

    def canvas_width(self) -> int:
        return self._width

    def canvas_height(self) -> int:
        return self._height

    def background_color(self) -> Optional[tuple[int, int, int]]:
        return self._background

    def frame_meta(self, index: int) -> FrameMeta:
        self._seek(index)
        return FrameMeta(
            index=index,
            disposal=DisposalMethod.from_code(getattr(self._image, "disposal_method", 0)),
            duration_ms=int(self._image.info.get("duration", 0) or 0),
        )

    def frame_rgba(self, index: int) -> Image.Image:
        self._check_index(index)
        if index >= len(self._blocks.frames):
            raise DecodeError(index, self._blocks.error or "image data missing")
        raw = self._blocks.frames[index]

        canvas = Image.new("RGBA", self.canvas_size, (0, 0, 0, 0))
        if raw.width == 0 or raw.height == 0:
            return canvas
        try:
            pixels = gif_blocks.decode_frame(raw, self._blocks.global_table)
        except (OSError, EOFError, SyntaxError, ValueError, Image.DecompressionBombError) as exc:
            raise DecodeError(index, str(exc)) from exc
        canvas.paste(pixels, (raw.left, raw.top))
        return canvas

    def close(self) -> None:
        self._image.close()

    def _seek(self, index: int) -> None:
        self._check_index(index)
        try:
            self._image.seek(index)
        except (OSError, EOFError, ValueError) as exc:
            raise DecodeError(index, str(exc)) from exc


def _frame_size(data: FrameData) -> tuple[int, int]:
    if isinstance(data, Image.Image):
        return data.size
    array = np.asarray(data)
    return int(array.shape[1]), int(array.shape[0])


def _palette_background(image: Image.Image) -> Optional[tuple[int, int, int]]:
    """Resolve the background index against the global colour table, if both exist."""

    palette = getattr(image, "global_palette", None)
    index = image.info.get("background")
    if palette is None or index is None:
        return None
    raw = palette.palette if getattr(palette, "rawmode", None) else palette.tobytes()
    start = int(index) * 3
    if start + 3 > len(raw):
        logger.debug("Background index %s outside global palette of %s entries", index, len(raw) // 3)
        return None
    r, g, b = raw[start : start + 3]
    return (r, g, b)
