"""Manifest writing logic."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from . import SpriteSheet
from ..utils import file_tools

logger = logging.getLogger(__name__)


def build_manifest(sheet: SpriteSheet, spritesheet_path: Path, source_name: str) -> dict:
    """Describe where every source frame landed on the sheet."""

    frames_payload = {}
    for frame, cell in sheet.placements:
        frames_payload[f"frame_{frame.meta.index:04d}"] = {
            "x": cell.x,
            "y": cell.y,
            "width": cell.width,
            "height": cell.height,
            "duration_ms": frame.meta.duration_ms,
        }

    return {
        "source": source_name,
        "frames": frames_payload,
        "meta": {
            "columns": sheet.layout.columns,
            "rows": sheet.layout.rows,
            "size": list(sheet.image.size),
            "spritesheet": spritesheet_path.name,
        },
    }


def write_manifest(sheet: SpriteSheet, manifest_path: Path, spritesheet_path: Path, source_name: str) -> Path:
    """Create a JSON manifest describing frame coordinates."""

    manifest_path = manifest_path.with_suffix(".json")
    file_tools.ensure_directory(manifest_path.parent)
    manifest = build_manifest(sheet, spritesheet_path, source_name)
    manifest_path.write_text(json.dumps(manifest, indent=2), encoding="utf-8")
    logger.info("Wrote manifest to %s", manifest_path)
    return manifest_path
