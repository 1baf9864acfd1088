import io
import logging

import pytest

from conftest import pixel_rows
from tsprite_config import LegacyColor, RenderConfig, RenderMode
from tsprite_grid import Sample, build_grid
from tsprite_render import BlockRenderer, TerminalWriteError, TerminalWriter, create_renderer


class FlakyStream(io.StringIO):
    """StringIO that fails chosen writes and records every attempt."""

    def __init__(self, fail_on=(), fail_text=None):
        super().__init__()
        self.fail_on = set(fail_on)
        self.fail_text = fail_text
        self.attempts = 0

    def write(self, text):
        self.attempts += 1
        if self.attempts in self.fail_on or text == self.fail_text:
            raise OSError("terminal went away")
        return super().write(text)


def _grid(width, height, rgb=(1, 2, 3)):
    return build_grid(width, height, [Sample(x, y, *rgb) for y in range(height) for x in range(width)])


def test_single_row_emits_nothing():
    stream = io.StringIO()
    stats = create_renderer(stream=stream).render(_grid(5, 1))

    assert stream.getvalue() == ""
    assert stats['glyphs_written'] == 0
    assert stats['line_breaks'] == 0


def test_four_by_three_emits_two_lines_of_three():
    stream = io.StringIO()
    stats = create_renderer(stream=stream).render(_grid(3, 4))

    output = stream.getvalue()
    assert output.count("\n") == 2
    assert output.count("▄") == 6
    assert stats['row_pairs'] == 2
    assert stats['glyphs_written'] == 6


@pytest.mark.parametrize("height,lines", [(0, 0), (2, 1), (3, 1), (5, 2), (8, 4)])
def test_line_breaks_are_half_the_rows(height, lines):
    stream = io.StringIO()
    create_renderer(stream=stream).render(_grid(2, height))

    assert stream.getvalue().count("\n") == lines


def test_true_color_passes_rgb_through():
    stream = io.StringIO()
    grid = pixel_rows([[(10, 20, 30)], [(40, 50, 60)]])

    create_renderer(RenderMode.TRUE_COLOR, stream).render(grid)

    assert stream.getvalue() == "\033[48;2;10;20;30m\033[38;2;40;50;60m▄\033[0m\n"


def test_legacy_mode_quantizes_both_pixels():
    stream = io.StringIO()
    grid = pixel_rows([[(10, 20, 30)], [(40, 50, 60)]])

    renderer = create_renderer(RenderMode.LEGACY, stream)
    renderer.render(grid)

    # background black (40), foreground grey (37)
    assert stream.getvalue() == "\033[40m\033[37m▄\033[0m\n"
    assert renderer.get_stats()['mode'] == "legacy"


def test_resolve_color():
    from tsprite_config import Pixel

    legacy = create_renderer(RenderMode.LEGACY, io.StringIO())
    true_color = create_renderer(RenderMode.TRUE_COLOR, io.StringIO())

    assert legacy.resolve_color(Pixel(255, 255, 255)) is LegacyColor.WHITE
    assert true_color.resolve_color(Pixel(255, 255, 255)) == (255, 255, 255)


def test_glyph_failure_does_not_stop_rendering(caplog):
    # writes: glyph, glyph, newline, glyph, glyph, newline
    stream = FlakyStream(fail_on={2})
    renderer = BlockRenderer(TerminalWriter(stream))

    with caplog.at_level(logging.ERROR, logger="termsprite.render"):
        stats = renderer.render(_grid(2, 4))

    assert stream.attempts == 6
    assert stats['glyph_errors'] == 1
    assert stats['glyphs_written'] == 3
    assert stats['line_breaks'] == 2
    assert stats['write_errors'] == 1
    assert "row 1, column 1" in caplog.text


def test_line_break_failure_is_reported_and_skipped(caplog):
    stream = FlakyStream(fail_text="\n")
    renderer = BlockRenderer(TerminalWriter(stream))

    with caplog.at_level(logging.ERROR, logger="termsprite.render"):
        stats = renderer.render(_grid(2, 4))

    assert stats['glyphs_written'] == 4
    assert stats['line_break_errors'] == 2
    assert stream.getvalue().count("▄") == 4
    assert "Failed to write to terminal" in caplog.text


def test_encoding_that_cannot_hold_glyph_is_a_write_error():
    raw = io.BytesIO()
    stream = io.TextIOWrapper(raw, encoding="ascii")
    stats = create_renderer(stream=stream).render(_grid(1, 2))

    assert stats['glyph_errors'] == 1
    assert stats['line_breaks'] == 1


def test_writer_wraps_stream_errors():
    stream = io.StringIO()
    stream.close()

    with pytest.raises(TerminalWriteError):
        TerminalWriter(stream).write_line_break()


def test_shorter_upper_row_is_guarded():
    stream = io.StringIO()
    grid = pixel_rows([[(0, 0, 0)], [(1, 1, 1), (2, 2, 2), (3, 3, 3)]])

    stats = create_renderer(stream=stream).render(grid)

    assert stats['glyphs_written'] == 1
    assert stats['skipped_columns'] == 2
    assert stream.getvalue().count("\n") == 1


def test_longer_upper_row_uses_lower_row_length():
    stream = io.StringIO()
    grid = pixel_rows([[(0, 0, 0)] * 4, [(1, 1, 1)] * 2])

    stats = create_renderer(stream=stream).render(grid)

    assert stats['glyphs_written'] == 2


def test_stats_reset_between_renders():
    renderer = create_renderer(stream=io.StringIO())
    renderer.render(_grid(2, 2))
    stats = renderer.render(_grid(1, 2))

    assert stats['glyphs_written'] == 1


@pytest.mark.parametrize("glyph", ["ab", "全", ""])
def test_glyph_must_be_one_cell(glyph):
    with pytest.raises(ValueError):
        RenderConfig(glyph=glyph).validate()


def test_row_colors_reads_grid_buffer_and_pixel_rows_alike():
    rows = [[(10, 20, 30), (200, 200, 200)], [(40, 50, 60), (0, 0, 0)]]
    grid = build_grid(2, 2, [Sample(x, y, *rgb) for y, row in enumerate(rows) for x, rgb in enumerate(row)])

    true_color = create_renderer(RenderMode.TRUE_COLOR, io.StringIO())
    legacy = create_renderer(RenderMode.LEGACY, io.StringIO())

    assert true_color.row_colors(grid, 0) == [(10, 20, 30), (200, 200, 200)]
    assert true_color.row_colors(pixel_rows(rows), 0) == true_color.row_colors(grid, 0)
    assert legacy.row_colors(grid, 1) == [LegacyColor.GREY, LegacyColor.BLACK]
    assert legacy.row_colors(pixel_rows(rows), 1) == legacy.row_colors(grid, 1)


def test_grid_and_pixel_rows_render_identically():
    rows = [[(x * 50, y * 60, 90) for x in range(4)] for y in range(4)]
    grid = build_grid(4, 4, [Sample(x, y, *rgb) for y, row in enumerate(rows) for x, rgb in enumerate(row)])

    for mode in RenderMode:
        from_grid, from_rows = io.StringIO(), io.StringIO()
        create_renderer(mode, from_grid).render(grid)
        create_renderer(mode, from_rows).render(pixel_rows(rows))

        assert from_grid.getvalue() == from_rows.getvalue()
