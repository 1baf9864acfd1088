#!/usr/bin/env python3
"""
🖼️ termsprite - Palette Quantizer
=================================
Copyright (c) 2023 ShaiyaJ

Legacy Color Quantization
=========================
Maps an arbitrary 24-bit color to the closest tag of the 16-color legacy
palette, for terminals without true-color support.

Distance Metric
===============
Colors are compared by the sum of their channels only:

    cost = (palette_sum - pixel_sum) ** 2

Every color with the same channel sum gets the same answer, so hue is not
considered at all: (255, 0, 0) and (0, 255, 0) both come out as red. Output
compatibility depends on this metric, keep it as is.

Tie-break: palette entries are scanned in table order and a candidate only
replaces the current best when strictly cheaper, so the earliest entry wins.

Technical Implementation
========================
Since the cost depends on the channel sum alone, there are only 766
possible inputs (0-765). The answers are computed once at import into a
lookup table and every call is a single index operation.

Module Interface
================
- quantize(): RGB channels to legacy tag
- quantize_pixel(): Pixel to legacy tag
- quantize_rgb(): Unchecked RGB tuple to legacy tag, for render loops
- color_cost(): Cost of one palette entry for a channel sum
- nearest_entry(): Full scan returning the winning PaletteEntry
"""

import logging
from typing import List, Sequence

from tsprite_config import LEGACY_PALETTE, LegacyColor, PaletteEntry, Pixel, RGBColor

logger = logging.getLogger('termsprite.palette')

MAX_CHANNEL_SUM = 255 * 3


def color_cost(pixel_sum: int, entry: PaletteEntry) -> int:
    """Squared difference between the entry's channel sum and ``pixel_sum``"""
    return (entry.channel_sum - pixel_sum) ** 2


def nearest_entry(pixel_sum: int, palette: Sequence[PaletteEntry] = LEGACY_PALETTE) -> PaletteEntry:
    """
    Scan the palette for the cheapest entry.

    Args:
        pixel_sum: r + g + b of the color being matched
        palette: Entries in tie-break order

    Returns:
        First entry reaching the lowest cost
    """
    if not palette:
        raise ValueError("Palette must not be empty")

    best = None
    best_cost = None
    for entry in palette:
        cost = color_cost(pixel_sum, entry)
        if best_cost is None or cost < best_cost:
            best = entry
            best_cost = cost
    return best


def _build_sum_table() -> List[LegacyColor]:
    """
    Build the channel-sum lookup table.

    Returns:
        List indexed by channel sum (0-765) holding the winning tag
    """
    table = [nearest_entry(pixel_sum).tag for pixel_sum in range(MAX_CHANNEL_SUM + 1)]
    logger.debug(f"Built quantizer table with {len(table)} entries")
    return table


_SUM_TABLE = _build_sum_table()


def quantize(r: int, g: int, b: int) -> LegacyColor:
    """
    Get the legacy palette tag closest to an RGB color.

    Args:
        r: Red channel (0-255)
        g: Green channel (0-255)
        b: Blue channel (0-255)

    Returns:
        Palette tag

    Examples:
        >>> quantize(0, 0, 0)
        <LegacyColor.BLACK: 'black'>
        >>> quantize(0, 255, 0)
        <LegacyColor.RED: 'red'>
    """
    for value in (r, g, b):
        if not 0 <= value <= 255:
            raise ValueError(f"Channel value {value} outside 0-255")
    return _SUM_TABLE[r + g + b]


def quantize_pixel(pixel: Pixel) -> LegacyColor:
    return _SUM_TABLE[pixel.channel_sum]


def quantize_rgb(rgb: RGBColor) -> LegacyColor:
    """Tag for an (r, g, b) tuple already known to hold 8-bit channels"""
    r, g, b = rgb
    return _SUM_TABLE[r + g + b]
