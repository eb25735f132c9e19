"""Command-line interface for gif2spritesheet."""
