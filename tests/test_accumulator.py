"""
Tests for disposal-aware frame compositing.
"""

from __future__ import annotations

import threading

import numpy as np
import pytest
from PIL import Image

from gif2spritesheet.core import DisposalMethod, FrameMeta
from gif2spritesheet.core.accumulator import FrameAccumulator, composite_frames
from gif2spritesheet.core.errors import DecodeError, GenerationCancelled
from gif2spritesheet.core.frame_source import ArrayFrameSource

RED = (255, 0, 0, 255)
GREEN = (0, 255, 0, 255)
BLUE = (0, 0, 255, 255)
CLEAR = (0, 0, 0, 0)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _blank(w: int = 4, h: int = 4) -> np.ndarray:
    return np.zeros((h, w, 4), dtype=np.uint8)


def _solid(color, w: int = 4, h: int = 4) -> np.ndarray:
    frame = _blank(w, h)
    frame[:, :] = color
    return frame


def _patch(color, x0: int, y0: int, x1: int, y1: int, w: int = 4, h: int = 4) -> np.ndarray:
    """Transparent frame with a solid rectangle [x0, x1) x [y0, y1)."""
    frame = _blank(w, h)
    frame[y0:y1, x0:x1] = color
    return frame


def _to_image(array: np.ndarray) -> Image.Image:
    return Image.fromarray(array)


def _composite(frames, disposals, background=None):
    source = ArrayFrameSource(frames, disposals, background=background)
    return list(composite_frames(source))


# ---------------------------------------------------------------------------
# Output shape
# ---------------------------------------------------------------------------

class TestCompositeShape:
    def test_one_output_per_frame(self):
        out = _composite([_solid(RED), _solid(GREEN), _solid(BLUE)], [0, 1, 2])
        assert len(out) == 3
        assert [f.meta.index for f in out] == [0, 1, 2]

    def test_every_frame_is_canvas_sized(self):
        frames = [_solid(RED, 5, 3), _patch(BLUE, 0, 0, 1, 1, 5, 3)]
        out = _composite(frames, [0, 0])
        for frame in out:
            assert frame.pixels.size == (5, 3)
            assert frame.pixels.mode == "RGBA"

    def test_alpha_is_preserved(self):
        out = _composite([_patch(RED, 0, 0, 1, 1)], [0])
        assert out[0].pixels.getpixel((3, 3)) == CLEAR


# ---------------------------------------------------------------------------
# Disposal methods
# ---------------------------------------------------------------------------

class TestDisposal:
    def test_keep_leaves_previous_pixels(self):
        out = _composite([_solid(RED), _patch(BLUE, 0, 0, 1, 1)], [1, 1])
        assert out[1].pixels.getpixel((0, 0)) == BLUE
        assert out[1].pixels.getpixel((3, 3)) == RED

    def test_none_behaves_like_keep(self):
        out = _composite([_solid(RED), _blank()], [0, 0])
        assert out[1].pixels.tobytes() == out[0].pixels.tobytes()

    def test_restore_background_clears_to_transparent(self):
        frames = [_patch(RED, 0, 0, 2, 2), _patch(BLUE, 2, 2, 4, 4)]
        out = _composite(frames, [DisposalMethod.RESTORE_BACKGROUND, 0])
        second = out[1].pixels
        for x in range(2):
            for y in range(2):
                assert second.getpixel((x, y)) == CLEAR
        assert second.getpixel((3, 3)) == BLUE

    def test_restore_background_refills_background_color(self):
        frames = [_patch(RED, 0, 0, 2, 2), _patch(BLUE, 2, 2, 4, 4)]
        out = _composite(frames, [2, 0], background=(10, 20, 30))
        assert out[1].pixels.getpixel((0, 0)) == (10, 20, 30, 255)
        assert out[1].pixels.getpixel((3, 3)) == BLUE

    def test_initial_canvas_uses_background(self):
        out = _composite([_patch(RED, 0, 0, 1, 1)], [0], background=(1, 2, 3))
        assert out[0].pixels.getpixel((3, 3)) == (1, 2, 3, 255)
        assert out[0].pixels.getpixel((0, 0)) == RED

    def test_restore_previous_returns_to_pre_draw_state(self):
        frames = [_solid(GREEN), _patch(RED, 0, 0, 2, 2), _blank()]
        out = _composite(frames, [0, DisposalMethod.RESTORE_PREVIOUS, 0])
        assert out[1].pixels.getpixel((0, 0)) == RED
        assert out[2].pixels.tobytes() == out[0].pixels.tobytes()

    def test_restore_previous_pre_draw_canvas_matches_frame_zero(self):
        acc = FrameAccumulator(4, 4)
        first = acc.add_frame(FrameMeta(0, DisposalMethod.NONE), _to_image(_solid(GREEN)))
        acc.add_frame(FrameMeta(1, DisposalMethod.RESTORE_PREVIOUS), _to_image(_patch(RED, 0, 0, 4, 2)))
        acc.dispose_previous()
        assert acc.canvas.tobytes() == first.pixels.tobytes()

    def test_restore_previous_on_first_frame_uses_initial_canvas(self):
        frames = [_patch(RED, 0, 0, 2, 2), _blank()]
        out = _composite(frames, [3, 0], background=(9, 9, 9))
        assert out[1].pixels.getcolors() == [(16, (9, 9, 9, 255))]

    def test_disposal_applies_to_following_frame_only(self):
        # Frame 1's own RESTORE_BACKGROUND must not clear frame 0 before frame 1 draws.
        frames = [_solid(RED), _patch(BLUE, 0, 0, 1, 1), _blank()]
        out = _composite(frames, [1, 2, 0])
        assert out[1].pixels.getpixel((3, 3)) == RED
        assert out[2].pixels.getpixel((3, 3)) == CLEAR

    def test_unknown_disposal_code_is_none(self):
        assert DisposalMethod.from_code(7) is DisposalMethod.NONE
        assert DisposalMethod.from_code(None) is DisposalMethod.NONE
        out = _composite([_solid(RED), _blank()], [7, 0])
        assert out[1].pixels.getpixel((0, 0)) == RED


# ---------------------------------------------------------------------------
# Ownership and failure
# ---------------------------------------------------------------------------

class TestOwnership:
    def test_frames_are_independent_copies(self):
        acc = FrameAccumulator(4, 4)
        first = acc.add_frame(FrameMeta(0), _to_image(_solid(RED)))
        before = first.pixels.tobytes()
        acc.add_frame(FrameMeta(1), _to_image(_solid(BLUE)))
        assert first.pixels.tobytes() == before

    def test_canvas_property_is_a_copy(self):
        acc = FrameAccumulator(2, 2)
        snapshot = acc.canvas
        snapshot.putpixel((0, 0), RED)
        assert acc.canvas.getpixel((0, 0)) == CLEAR


class TestFailures:
    def test_bad_frame_shape_raises_decode_error(self):
        source = ArrayFrameSource([_solid(RED), _solid(RED, 3, 3)], [0, 0])
        with pytest.raises(DecodeError) as info:
            list(composite_frames(source))
        assert info.value.frame_index == 1

    def test_non_rgba_array_raises_decode_error(self):
        source = ArrayFrameSource([np.zeros((4, 4, 3), dtype=np.uint8)], [0], size=(4, 4))
        with pytest.raises(DecodeError):
            list(composite_frames(source))

    def test_cancel_between_frames(self):
        cancel = threading.Event()
        source = ArrayFrameSource([_solid(RED), _solid(BLUE)], [0, 0])
        frames = composite_frames(source, cancel)
        next(frames)
        cancel.set()
        with pytest.raises(GenerationCancelled):
            next(frames)