import logging
from pathlib import Path
import sys

import pytest
from PIL import Image

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from tsprite_config import Pixel


@pytest.fixture
def make_png(tmp_path):
    """Write a PNG from rows of RGB tuples and return its path."""

    def _make(rows, name="sprite.png", mode="RGB"):
        height = len(rows)
        width = len(rows[0]) if rows else 0
        img = Image.new("RGB", (width, height))
        for y, row in enumerate(rows):
            for x, rgb in enumerate(row):
                img.putpixel((x, y), rgb)
        if mode != "RGB":
            img = img.convert(mode)
        path = tmp_path / name
        img.save(path)
        return path

    return _make


def pixel_rows(rows):
    return [[Pixel(*rgb) for rgb in row] for row in rows]


@pytest.fixture(autouse=True)
def reset_termsprite_logging():
    """Drop handlers installed by main() so they never outlive capsys."""
    yield
    logger = logging.getLogger("termsprite")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
