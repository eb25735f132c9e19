"""Command-line entry point for GIF-to-sprite workflows."""

import argparse
import logging
import sys
from pathlib import Path

from gif2spritesheet.core import RenderConfig
from gif2spritesheet.core import gif_loader, manifest_writer, spritesheet_builder
from gif2spritesheet.core.errors import InvalidImageError, ProcessingError, ValidationError
from gif2spritesheet.core.frame_selector import keeps_frame
from gif2spritesheet.core.layout_planner import describe_layout, plan_layout
from gif2spritesheet.utils import file_tools, validators

logger = logging.getLogger(__name__)


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="[%(levelname)s] %(name)s: %(message)s",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gif2sprite",
        description="Convert an animated GIF into a square sprite sheet.",
    )
    parser.add_argument("input", type=Path, help="Path to source GIF")
    parser.add_argument(
        "output",
        type=Path,
        nargs="?",
        help="Destination sprite sheet path (PNG, default: sprite-sheet.png next to the input)",
    )
    parser.add_argument("--size", default="1024", help="Sprite sheet width and height in px (default: 1024)")
    parser.add_argument("--columns", help="Fixed number of columns (default: automatic)")
    parser.add_argument("--skip", default="0", help="Frames to skip between kept frames (default: 0)")
    parser.add_argument(
        "--keep-aspect",
        action="store_true",
        help="Preserve frame aspect ratio: pick a matching grid and fill & crop each cell",
    )
    parser.add_argument("--pixel-perfect", action="store_true", help="Nearest-neighbour scaling")
    parser.add_argument(
        "--background",
        default="transparent",
        help="Sheet background: 'transparent', a color name, #rrggbb or R,G,B[,A] (default: transparent)",
    )
    parser.add_argument("--manifest", type=Path, help="Optional JSON manifest output for frame positions")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Load the GIF and show the planned grid without rendering outputs",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def settings_from_args(args: argparse.Namespace) -> RenderConfig:
    """Translate parsed flags into a render configuration."""

    return RenderConfig(
        output_size=validators.parse_optional_int(args.size, "Size") or 1024,
        columns=validators.parse_optional_int(args.columns, "Columns"),
        frame_skip=validators.parse_optional_non_negative_int(args.skip, "Skip") or 0,
        preserve_aspect=args.keep_aspect,
        pixel_perfect=args.pixel_perfect,
        background_color=validators.parse_background(args.background),
    )


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    try:
        config = settings_from_args(args)
        spritesheet_builder.validate_render_config(config)
        source = gif_loader.load_gif(args.input)
    except (InvalidImageError, ValidationError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    try:
        if args.dry_run:
            total = source.frame_count()
            kept = sum(1 for i in range(total) if keeps_frame(i, config.frame_skip))
            if kept == 0:
                print("Error: No frames after filtering!", file=sys.stderr)
                return 1
            layout = plan_layout(
                kept,
                source.canvas_width() / source.canvas_height(),
                config.columns,
                config.preserve_aspect,
            )
            print(f"{args.input.name}: {total} frames, {source.canvas_width()}x{source.canvas_height()}")
            print(describe_layout(layout, kept, config.preserve_aspect))
            return 0

        sheet = spritesheet_builder.compose_sprite_sheet(source, config)
        output_path = args.output or file_tools.default_output_path(args.input)
        written = spritesheet_builder.save_spritesheet(sheet, output_path)
        if args.manifest:
            manifest_writer.write_manifest(sheet, args.manifest, written, args.input.name)
    except (ValidationError, ProcessingError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    finally:
        source.close()

    print(written)
    return 0


if __name__ == "__main__":
    sys.exit(main())
