"""Disposal-aware frame compositing.

Animated images store most frames as deltas against whatever the canvas
looked like before. The accumulator replays the disposal instructions in
order so every emitted frame is the picture a viewer would actually see.
"""

from __future__ import annotations

import logging
import threading
from typing import Iterator, Optional

from PIL import Image

from . import CompositedFrame, DisposalMethod, FrameMeta
from .errors import DecodeError, GenerationCancelled
from .frame_source import FrameSource

logger = logging.getLogger(__name__)

TRANSPARENT_PIXEL = (0, 0, 0, 0)


class FrameAccumulator:
    """Running canvas shared by consecutive frames of one compositing pass."""

    def __init__(self, width: int, height: int, background: Optional[tuple[int, int, int]] = None) -> None:
        self.size = (width, height)
        self.background = background
        self._canvas = Image.new("RGBA", self.size, TRANSPARENT_PIXEL)
        self._fill_background()
        # Stands in for a snapshot when frame 0 already asks to restore previous.
        self._previous = self._canvas.copy()
        self._pending: Optional[DisposalMethod] = None

    @property
    def canvas(self) -> Image.Image:
        """Copy of the current canvas state."""
        return self._canvas.copy()

    def add_frame(self, meta: FrameMeta, pixels: Image.Image) -> CompositedFrame:
        """Dispose the previous frame, draw *pixels* and return the composited result."""

        if pixels.size != self.size:
            raise DecodeError(meta.index, f"frame is {pixels.size[0]}x{pixels.size[1]}, canvas is {self.size[0]}x{self.size[1]}")

        self.dispose_previous()
        if meta.disposal is DisposalMethod.RESTORE_PREVIOUS:
            self._previous = self._canvas.copy()

        self._canvas.alpha_composite(pixels.convert("RGBA"))
        self._pending = meta.disposal
        return CompositedFrame(pixels=self._canvas.copy(), meta=meta)

    def dispose_previous(self) -> None:
        """Apply the disposal recorded by the last drawn frame, once."""

        disposal, self._pending = self._pending, None
        if disposal is None or disposal in (DisposalMethod.NONE, DisposalMethod.KEEP):
            return
        if disposal is DisposalMethod.RESTORE_BACKGROUND:
            self._canvas = Image.new("RGBA", self.size, TRANSPARENT_PIXEL)
            self._fill_background()
        elif disposal is DisposalMethod.RESTORE_PREVIOUS:
            self._canvas = self._previous.copy()

    def _fill_background(self) -> None:
        if self.background is not None:
            self._canvas.paste((*self.background[:3], 255), (0, 0, *self.size))


def composite_frames(source: FrameSource, cancel: threading.Event | None = None) -> Iterator[CompositedFrame]:
    """Yield one fully composited frame per source frame, in order."""

    accumulator = FrameAccumulator(source.canvas_width(), source.canvas_height(), source.background_color())
    total = source.frame_count()
    logger.debug("Compositing %s frames on a %sx%s canvas", total, *accumulator.size)
    for index in range(total):
        if cancel is not None and cancel.is_set():
            raise GenerationCancelled(f"Cancelled before frame {index} of {total}")
        meta = source.frame_meta(index)
        yield accumulator.add_frame(meta, source.frame_rgba(index))
