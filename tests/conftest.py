"""Shared fixtures for the gif2spritesheet test suite."""

from __future__ import annotations

from pathlib import Path

import pytest
from PIL import Image


def _write_gif(path: Path, colors: list[tuple[int, int, int]], size=(8, 6), disposal: int = 1) -> Path:
    frames = [Image.new("RGB", size, color) for color in colors]
    frames[0].save(
        path,
        save_all=True,
        append_images=frames[1:],
        duration=100,
        loop=0,
        disposal=disposal,
        optimize=False,
    )
    return path


@pytest.fixture
def gif_path(tmp_path) -> Path:
    """A 3-frame 8x6 GIF cycling red, green, blue."""
    return _write_gif(tmp_path / "anim.gif", [(255, 0, 0), (0, 255, 0), (0, 0, 255)])


@pytest.fixture
def write_gif(tmp_path):
    """Factory writing a GIF of solid frames into the test directory."""

    def _factory(name: str, colors, size=(8, 6), disposal: int = 1) -> Path:
        return _write_gif(tmp_path / name, list(colors), size=size, disposal=disposal)

    return _factory
