#!/usr/bin/env python3
"""
🖼️ termsprite - Terminal Image Viewer
=====================================
Copyright (c) 2023 ShaiyaJ

Draws an image file in the terminal using colored half-block characters,
two pixel rows per line.

Usage
=====
    termsprite <path> [-l]

    -l    Legacy mode: quantize colors to the 16-color palette for
          terminals without true-color support

Example Usage
=============
```python
from termsprite import render_image

stats = render_image("sprite.png", legacy=True)
print(stats['glyphs_written'])
```

Dependencies
============
- Pillow: Image decoding
- numpy: Pixel grid storage
- wcwidth: Glyph cell width check
"""

import sys
import logging
import argparse
from pathlib import Path
from typing import Any, Dict, List, Optional, TextIO, Union

from tsprite_config import configure_logging, mode_from_flag
from tsprite_grid import ImageReadError, open_grid
from tsprite_render import create_renderer

logger = logging.getLogger('termsprite.cli')

USAGE_TEXT = (
    "Invalid args\n"
    "USAGE: termsprite <path> OPTIONS...\n"
    "    OPTIONS:\n"
    "        -l\tLegacy mode (for old terminals)\n"
)


def render_image(path: Union[str, Path], legacy: bool = False,
                 stream: Optional[TextIO] = None) -> Dict[str, Any]:
    """
    Decode an image and draw it.

    Args:
        path: Image file path
        legacy: Quantize to the 16-color palette
        stream: Output stream (stdout if None)

    Returns:
        Renderer statistics

    Raises:
        ImageReadError: Image could not be decoded
    """
    grid = open_grid(path)
    renderer = create_renderer(mode_from_flag(legacy), stream)
    return renderer.render(grid)


HELP_FLAGS = ('-h', '--help')


def build_parser() -> argparse.ArgumentParser:
    """Parser for the options that follow the image path"""
    parser = argparse.ArgumentParser(
        prog='termsprite',
        usage='%(prog)s <path> [-l]',
        description='Draw an image in the terminal with colored half blocks',
        epilog='The first argument is always the image path, even if it starts with "-".',
    )
    parser.add_argument('-l', dest='legacy', action='store_true',
                        help='legacy mode (for old terminals)')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    configure_logging()

    argv = sys.argv[1:] if argv is None else list(argv)
    parser = build_parser()

    if not argv:
        sys.stdout.write(USAGE_TEXT)
        return 0
    if argv[0] in HELP_FLAGS:
        parser.parse_args(argv)

    path, options = argv[0], argv[1:]
    args, unknown = parser.parse_known_args(options)
    if unknown:
        logger.warning(f"Ignoring unrecognised arguments: {' '.join(unknown)}")

    try:
        stats = render_image(path, legacy=args.legacy)
    except ImageReadError as e:
        logger.error(f"Open file operation failed: {e.cause}")
        return 1

    if stats['write_errors']:
        logger.warning(f"{stats['write_errors']} terminal writes failed")
    return 0


if __name__ == "__main__":
    sys.exit(main())
