#!/usr/bin/env python3
"""
🖼️ termsprite - Configuration Module
====================================
Copyright (c) 2023 ShaiyaJ

Centralized Configuration System
=================================
Constants and value types shared by the grid builder, the palette quantizer
and the block renderer:
- Glyph and ANSI escape constants
- Pixel and PaletteEntry value types
- 16-color legacy palette (tags, RGB values, SGR codes)
- Render mode selection and render configuration
- Logging setup for the command line entry point

Color System
============
The legacy palette mirrors the classic 16-color terminal set. Each entry
carries an RGB triple used for quantization and a tag that knows its
standard ANSI index:
- Indices 0-7: normal colors (SGR 30-37 / 40-47)
- Indices 8-15: bright colors (SGR 90-97 / 100-107)

Palette order (not ANSI order) decides quantizer tie-breaks, so the table
below must not be reordered.
"""

import sys
import logging
from typing import Tuple, Union, Optional
from dataclasses import dataclass
from enum import Enum

from wcwidth import wcswidth

logger = logging.getLogger('termsprite.config')

# Type alias for RGB colors
RGBColor = Tuple[int, int, int]

# ============================================================================
# GLYPHS AND ESCAPE CODES
# ============================================================================

LOWER_HALF_BLOCK = "▄"   # Foreground paints the lower pixel, background the upper
LINE_BREAK = "\n"

LOG_FORMAT = "%(levelname)s: %(message)s"


class ANSI:
    RESET = "\033[0m"
    CSI = "\033["


# ============================================================================
# CONFIGURATION ENUMS
# ============================================================================

class RenderMode(Enum):
    """Color output modes"""
    TRUE_COLOR = "true-color"
    LEGACY = "legacy"


class LegacyColor(Enum):
    """
    Tags of the 16-color legacy palette.

    Values are the tag names; ``ansi_index`` is the color's position in the
    standard terminal 16-color table.
    """
    BLACK = "black"
    DARK_GREY = "dark-grey"
    RED = "red"
    DARK_RED = "dark-red"
    GREEN = "green"
    DARK_GREEN = "dark-green"
    YELLOW = "yellow"
    DARK_YELLOW = "dark-yellow"
    BLUE = "blue"
    DARK_BLUE = "dark-blue"
    MAGENTA = "magenta"
    DARK_MAGENTA = "dark-magenta"
    CYAN = "cyan"
    DARK_CYAN = "dark-cyan"
    WHITE = "white"
    GREY = "grey"

    @property
    def ansi_index(self) -> int:
        return _ANSI_INDEX[self]

    @property
    def foreground_code(self) -> int:
        """SGR parameter selecting this color as foreground"""
        index = self.ansi_index
        return 30 + index if index < 8 else 90 + (index - 8)

    @property
    def background_code(self) -> int:
        """SGR parameter selecting this color as background"""
        return self.foreground_code + 10


_ANSI_INDEX = {
    LegacyColor.BLACK: 0,
    LegacyColor.DARK_RED: 1,
    LegacyColor.DARK_GREEN: 2,
    LegacyColor.DARK_YELLOW: 3,
    LegacyColor.DARK_BLUE: 4,
    LegacyColor.DARK_MAGENTA: 5,
    LegacyColor.DARK_CYAN: 6,
    LegacyColor.GREY: 7,
    LegacyColor.DARK_GREY: 8,
    LegacyColor.RED: 9,
    LegacyColor.GREEN: 10,
    LegacyColor.YELLOW: 11,
    LegacyColor.BLUE: 12,
    LegacyColor.MAGENTA: 13,
    LegacyColor.CYAN: 14,
    LegacyColor.WHITE: 15,
}

# A rendered color is either a raw RGB triple or a palette tag
TerminalColor = Union[RGBColor, LegacyColor]


# ============================================================================
# PIXEL VALUE TYPES
# ============================================================================

@dataclass(frozen=True)
class Pixel:
    """
    One source-image sample.

    Attributes:
        r: Red channel (0-255)
        g: Green channel (0-255)
        b: Blue channel (0-255)
    """
    r: int
    g: int
    b: int

    def __post_init__(self):
        for name in ('r', 'g', 'b'):
            value = getattr(self, name)
            if not 0 <= value <= 255:
                raise ValueError(f"Channel {name}={value} outside 0-255")

    @property
    def rgb(self) -> RGBColor:
        return (self.r, self.g, self.b)

    @property
    def channel_sum(self) -> int:
        return self.r + self.g + self.b


@dataclass(frozen=True)
class PaletteEntry(Pixel):
    """Reference color of the legacy palette"""
    tag: LegacyColor


# ============================================================================
# LEGACY 16-COLOR PALETTE
# ============================================================================

LEGACY_PALETTE: Tuple[PaletteEntry, ...] = (
    PaletteEntry(0, 0, 0, LegacyColor.BLACK),
    PaletteEntry(128, 128, 128, LegacyColor.DARK_GREY),
    PaletteEntry(255, 0, 0, LegacyColor.RED),
    PaletteEntry(128, 0, 0, LegacyColor.DARK_RED),
    PaletteEntry(0, 255, 0, LegacyColor.GREEN),
    PaletteEntry(0, 128, 0, LegacyColor.DARK_GREEN),
    PaletteEntry(255, 255, 0, LegacyColor.YELLOW),
    PaletteEntry(128, 128, 0, LegacyColor.DARK_YELLOW),
    PaletteEntry(0, 0, 255, LegacyColor.BLUE),
    PaletteEntry(0, 0, 128, LegacyColor.DARK_BLUE),
    PaletteEntry(255, 0, 255, LegacyColor.MAGENTA),
    PaletteEntry(128, 0, 128, LegacyColor.DARK_MAGENTA),
    PaletteEntry(0, 255, 255, LegacyColor.CYAN),
    PaletteEntry(0, 128, 128, LegacyColor.DARK_CYAN),
    PaletteEntry(255, 255, 255, LegacyColor.WHITE),
    PaletteEntry(50, 50, 50, LegacyColor.GREY),
)


# ============================================================================
# SGR UTILITIES
# ============================================================================

def foreground_sgr(color: TerminalColor) -> str:
    """Convert a color to the escape sequence setting the foreground"""
    if isinstance(color, LegacyColor):
        return f"{ANSI.CSI}{color.foreground_code}m"
    r, g, b = color
    return f"{ANSI.CSI}38;2;{r};{g};{b}m"


def background_sgr(color: TerminalColor) -> str:
    """Convert a color to the escape sequence setting the background"""
    if isinstance(color, LegacyColor):
        return f"{ANSI.CSI}{color.background_code}m"
    r, g, b = color
    return f"{ANSI.CSI}48;2;{r};{g};{b}m"


# ============================================================================
# RENDER CONFIGURATION
# ============================================================================

@dataclass
class RenderConfig:
    """Rendering configuration for one run"""

    mode: RenderMode = RenderMode.TRUE_COLOR
    glyph: str = LOWER_HALF_BLOCK

    @property
    def legacy(self) -> bool:
        return self.mode is RenderMode.LEGACY

    def validate(self) -> bool:
        """Validate rendering configuration"""
        if not isinstance(self.mode, RenderMode):
            raise ValueError(f"Unknown render mode: {self.mode!r}")
        if wcswidth(self.glyph) != 1:
            raise ValueError(f"Glyph {self.glyph!r} must occupy exactly one terminal cell")
        return True


def mode_from_flag(legacy: bool) -> RenderMode:
    return RenderMode.LEGACY if legacy else RenderMode.TRUE_COLOR


# ============================================================================
# LOGGING
# ============================================================================

def configure_logging(level: int = logging.WARNING, stream: Optional[object] = None) -> logging.Handler:
    """
    Route termsprite diagnostics to stderr.

    Args:
        level: Minimum level emitted
        stream: Diagnostic stream (stderr if None)

    Returns:
        The installed handler
    """
    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    root = logging.getLogger('termsprite')
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level)
    logger.debug(f"Diagnostics routed to {handler.stream!r} at {logging.getLevelName(level)}")
    return handler
