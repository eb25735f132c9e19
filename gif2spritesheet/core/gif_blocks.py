"""Low-level GIF block walking.

Pillow's ``seek`` returns each frame already drawn over its own copy of the
canvas. The compositing pass needs the pixels a frame supplies by itself, so
the image blocks are split out of the stream here and each one is decoded on
its own as a single-frame GIF.
"""

from __future__ import annotations

import io
import struct
from dataclasses import dataclass, field
from typing import List, Optional

from PIL import Image

TRAILER = 0x3B
EXTENSION = 0x21
IMAGE_DESCRIPTOR = 0x2C
GRAPHIC_CONTROL = 0xF9

# Used when neither a local nor a global colour table is present.
GRAYSCALE_TABLE = bytes(value for level in range(256) for value in (level, level, level))


class GifFormatError(ValueError):
    """Raised when the block structure is malformed or ends early."""


@dataclass(frozen=True)
class RawFrame:
    """One image block: its rectangle, colour table and LZW data."""

    left: int
    top: int
    width: int
    height: int
    color_table: Optional[bytes]
    transparent_index: Optional[int]
    interlaced: bool
    min_code_size: int
    data: bytes  # data sub-blocks, terminator included


@dataclass
class GifBlocks:
    global_table: Optional[bytes]
    frames: List[RawFrame] = field(default_factory=list)
    error: Optional[str] = None


class _Reader:
    def __init__(self, data: bytes) -> None:
        self._data = data
        self.pos = 0

    @property
    def exhausted(self) -> bool:
        return self.pos >= len(self._data)

    def read(self, count: int) -> bytes:
        chunk = self._data[self.pos : self.pos + count]
        if len(chunk) < count:
            raise GifFormatError(f"Unexpected end of data at byte {self.pos}")
        self.pos += count
        return chunk

    def u8(self) -> int:
        return self.read(1)[0]

    def sub_blocks(self) -> bytes:
        start = self.pos
        while True:
            size = self.u8()
            if size == 0:
                return self._data[start : self.pos]
            self.read(size)


def _table_length(packed: int) -> int:
    return 3 * (2 ** ((packed & 0x07) + 1))


def read_blocks(data: bytes) -> GifBlocks:
    """Split a GIF stream into its image blocks.

    A stream that breaks off part way keeps the frames read so far and
    records the reason in ``error``.
    """

    reader = _Reader(data)
    if reader.read(6) not in (b"GIF87a", b"GIF89a"):
        raise GifFormatError("Missing GIF87a/GIF89a header")
    _width, _height, packed, _background, _aspect = struct.unpack("<HHBBB", reader.read(7))
    blocks = GifBlocks(global_table=reader.read(_table_length(packed)) if packed & 0x80 else None)

    transparent_index: Optional[int] = None
    try:
        while not reader.exhausted:
            introducer = reader.u8()
            if introducer == TRAILER:
                break
            if introducer == EXTENSION:
                label = reader.u8()
                payload = reader.sub_blocks()
                # size byte, flags, delay (2), transparent index, terminator
                if label == GRAPHIC_CONTROL and len(payload) >= 5:
                    transparent_index = payload[4] if payload[1] & 0x01 else None
            elif introducer == IMAGE_DESCRIPTOR:
                left, top, width, height, flags = struct.unpack("<HHHHB", reader.read(9))
                table = reader.read(_table_length(flags)) if flags & 0x80 else None
                min_code_size = reader.u8()
                blocks.frames.append(
                    RawFrame(
                        left=left,
                        top=top,
                        width=width,
                        height=height,
                        color_table=table,
                        transparent_index=transparent_index,
                        interlaced=bool(flags & 0x40),
                        min_code_size=min_code_size,
                        data=reader.sub_blocks(),
                    )
                )
                # Graphic control applies to the next image only
                transparent_index = None
            # Stray bytes between blocks are skipped, as Pillow does
    except GifFormatError as exc:
        blocks.error = str(exc)
    return blocks


def decode_frame(frame: RawFrame, global_table: Optional[bytes]) -> Image.Image:
    """Decode one image block into an RGBA image the size of its rectangle.

    Pixels using the transparent index come out with zero alpha.
    """

    table = frame.color_table or global_table or GRAYSCALE_TABLE
    size_field = max((len(table) // 3).bit_length() - 2, 0)

    stream = bytearray(b"GIF89a")
    stream += struct.pack("<HHBBB", frame.width, frame.height, 0x80 | size_field, 0, 0)
    stream += table
    if frame.transparent_index is not None:
        stream += struct.pack("<BBBBHBB", EXTENSION, GRAPHIC_CONTROL, 4, 0x01, 0, frame.transparent_index, 0)
    stream += struct.pack(
        "<BHHHHB", IMAGE_DESCRIPTOR, 0, 0, frame.width, frame.height, 0x40 if frame.interlaced else 0
    )
    stream.append(frame.min_code_size)
    stream += frame.data
    stream.append(TRAILER)

    with Image.open(io.BytesIO(bytes(stream))) as image:
        return image.convert("RGBA")
