#!/usr/bin/env python3
"""
🖼️ termsprite - Block Renderer
==============================
Copyright (c) 2023 ShaiyaJ

Half-Block Terminal Rendering
=============================
Draws a pixel grid in a terminal, two pixel rows per text line. Each cell
is a lower half block: the foreground paints the lower pixel and the
background paints the upper pixel.

Row Pairing
===========
Rows are consumed two at a time starting from the second row: (0, 1),
(2, 3), ... One glyph is emitted for every column of the lower row and a
line break closes each pair. An odd final row has no partner and is never
drawn, so a one-row image produces no output.

Color Modes
===========
- True color: pixel RGB passed through as 24-bit SGR codes
- Legacy: each pixel quantized to the 16-color palette

Error Handling
==============
Every glyph and every line break is a separate write. A failed write is
logged and counted, then rendering moves on to the next write. Nothing is
retried.

Module Interface
================
- TerminalWriter: ANSI output backend
- BlockRenderer: Row-pairing renderer
  - render(): Draw a grid
  - get_stats(): Counters from the last render
- create_renderer(): Factory function
"""

import sys
import time
import logging
from typing import Any, Dict, List, Optional, Sequence, TextIO

from tsprite_config import (
    ANSI,
    LINE_BREAK,
    Pixel,
    RenderConfig,
    RenderMode,
    TerminalColor,
    background_sgr,
    foreground_sgr,
)
from tsprite_grid import PixelGrid
from tsprite_palette import quantize_pixel, quantize_rgb

logger = logging.getLogger('termsprite.render')

INCOMPATIBLE_TERMINAL_MESSAGE = (
    "Failed to write to terminal, please check that your terminal "
    "supports ANSI escape sequences and UTF-8 output"
)


class TerminalWriteError(Exception):
    """A single write to the terminal failed"""


# ============================================================================
# TERMINAL BACKEND
# ============================================================================

class TerminalWriter:
    """
    Writes styled glyphs to a text stream as ANSI escape sequences.

    Styling is reset after every glyph so the terminal is left unstyled
    before the next glyph or line break. The stream is flushed after each
    write so failures surface on the write that caused them.
    """

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream if stream is not None else sys.stdout

    def write_glyph(self, foreground: TerminalColor, background: TerminalColor, glyph: str):
        self._write(f"{background_sgr(background)}{foreground_sgr(foreground)}{glyph}{ANSI.RESET}")

    def write_line_break(self):
        self._write(LINE_BREAK)

    def _write(self, text: str):
        try:
            self.stream.write(text)
            self.stream.flush()
        except (OSError, ValueError) as e:
            raise TerminalWriteError(str(e)) from e


# ============================================================================
# BLOCK RENDERER
# ============================================================================

class BlockRenderer:
    """
    Renders a pixel grid as lower half blocks.

    Accepts a PixelGrid or any sequence of rows of Pixel. Rows of unequal
    length are tolerated: columns missing from the upper row are skipped.
    """

    def __init__(self, writer: TerminalWriter, config: Optional[RenderConfig] = None):
        self.writer = writer
        self.config = config or RenderConfig()
        self.config.validate()
        self.stats = self._empty_stats()

    @staticmethod
    def _empty_stats() -> Dict[str, Any]:
        return {
            'row_pairs': 0,
            'glyphs_written': 0,
            'glyph_errors': 0,
            'line_breaks': 0,
            'line_break_errors': 0,
            'skipped_columns': 0,
            'render_time_ms': 0.0,
        }

    def resolve_color(self, pixel: Pixel) -> TerminalColor:
        """Quantized tag in legacy mode, raw RGB otherwise"""
        if self.config.legacy:
            return quantize_pixel(pixel)
        return pixel.rgb

    def row_colors(self, grid: Sequence[Sequence[Pixel]], index: int) -> List[TerminalColor]:
        """Resolve a whole row at once, reading PixelGrid rows straight from its buffer"""
        if isinstance(grid, PixelGrid):
            rgbs = grid.rgb_row(index)
        else:
            rgbs = [pixel.rgb for pixel in grid[index]]
        if self.config.legacy:
            return [quantize_rgb(rgb) for rgb in rgbs]
        return rgbs

    def render(self, grid: Sequence[Sequence[Pixel]]) -> Dict[str, Any]:
        """
        Draw the grid, one text line per row pair.

        Args:
            grid: Rows of pixels, top row first

        Returns:
            Render statistics
        """
        self.stats = self._empty_stats()
        start_time = time.time()
        glyph = self.config.glyph

        for lower_index in range(1, len(grid), 2):
            upper_row = self.row_colors(grid, lower_index - 1)
            lower_row = self.row_colors(grid, lower_index)
            self.stats['row_pairs'] += 1

            for x, foreground in enumerate(lower_row):
                if x >= len(upper_row):
                    self.stats['skipped_columns'] += 1
                    continue

                background = upper_row[x]
                try:
                    self.writer.write_glyph(foreground, background, glyph)
                    self.stats['glyphs_written'] += 1
                except TerminalWriteError as e:
                    self.stats['glyph_errors'] += 1
                    logger.error(f"Failed to write glyph at row {lower_index}, column {x}: {e}")

            if len(upper_row) < len(lower_row):
                logger.warning(f"Row {lower_index - 1} is shorter than row {lower_index}: "
                               f"{len(lower_row) - len(upper_row)} columns skipped")

            try:
                self.writer.write_line_break()
                self.stats['line_breaks'] += 1
            except TerminalWriteError as e:
                self.stats['line_break_errors'] += 1
                logger.error(f"{INCOMPATIBLE_TERMINAL_MESSAGE} ({e})")

        if len(grid) % 2:
            logger.debug(f"Final row {len(grid) - 1} has no partner and was not drawn")

        self.stats['render_time_ms'] = (time.time() - start_time) * 1000
        logger.info(f"Rendered {self.stats['row_pairs']} row pairs, "
                    f"{self.stats['glyphs_written']} glyphs")
        return self.get_stats()

    def get_stats(self) -> Dict[str, Any]:
        """Get statistics of the last render"""
        stats = self.stats.copy()
        stats['mode'] = self.config.mode.value
        stats['write_errors'] = stats['glyph_errors'] + stats['line_break_errors']
        return stats


# ============================================================================
# FACTORY FUNCTION
# ============================================================================

def create_renderer(mode: RenderMode = RenderMode.TRUE_COLOR,
                    stream: Optional[TextIO] = None) -> BlockRenderer:
    """Factory function for renderer creation"""
    return BlockRenderer(TerminalWriter(stream), RenderConfig(mode=mode))
