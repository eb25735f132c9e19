"""Frame skipping before layout."""

from __future__ import annotations

import logging
from typing import Iterable, List

from . import CompositedFrame
from .errors import EmptySelectionError, InvalidConfigError

logger = logging.getLogger(__name__)


def keeps_frame(position: int, frame_skip: int) -> bool:
    """True when the frame at *position* survives a skip stride of *frame_skip*."""

    return position % (frame_skip + 1) == 0


def select_frames(frames: Iterable[CompositedFrame], frame_skip: int = 0) -> List[CompositedFrame]:
    """Keep every ``frame_skip + 1``-th composited frame, starting with the first."""

    if frame_skip < 0:
        raise InvalidConfigError("frame_skip", "must be zero or greater")

    selected = []
    total = 0
    for position, frame in enumerate(frames):
        total += 1
        if keeps_frame(position, frame_skip):
            selected.append(frame)

    if not selected:
        raise EmptySelectionError(frame_skip, total)
    if frame_skip:
        logger.info("Kept %s of %s frames (skip=%s)", len(selected), total, frame_skip)
    return selected
