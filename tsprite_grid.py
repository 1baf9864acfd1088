#!/usr/bin/env python3
"""
🖼️ termsprite - Pixel Grid Builder
==================================
Copyright (c) 2023 ShaiyaJ

Decoded Image Grid
==================
Turns a decoded image into a dense, row-major grid of RGB pixels that the
block renderer can address by (row, column).

Core Features:
- Grid pre-sized from the decoder's reported dimensions
- Samples assigned directly by coordinate, in any arrival order
- Out-of-range samples dropped and counted instead of raising
- Read-only once built

Technical Implementation:
- numpy uint8 buffer of shape (height, width, 3)
- Pillow for decoding, converted to RGB (alpha is discarded, not blended)
- 16-bit greyscale scaled to 8 bits
- File handle scoped to the decode, released on every exit path
- Only the first frame of multi-frame files is used

Module Interface:
- PixelGrid: Grid container
- build_grid(): Build a grid from a sample stream
- rgb_array(): RGB buffer of a Pillow image
- iter_samples(): Sample stream of a Pillow image
- open_grid(): Decode a file and build its grid
"""

import logging
from pathlib import Path
from typing import Iterable, Iterator, List, NamedTuple, Union

import numpy as np
from PIL import Image

from tsprite_config import Pixel, RGBColor

logger = logging.getLogger('termsprite.grid')

# Greyscale modes holding more than 8 bits per sample
WIDE_GREY_MODES = ('I', 'I;16', 'I;16B', 'I;16L', 'I;16N')


class Sample(NamedTuple):
    """One decoded pixel at image coordinate (x, y)"""
    x: int
    y: int
    r: int
    g: int
    b: int


class ImageReadError(Exception):
    """Image could not be opened or decoded"""

    def __init__(self, path: Union[str, Path], cause: BaseException):
        self.path = Path(path)
        self.cause = cause
        super().__init__(f"{path}: {cause}")


class PixelGrid:
    """
    Dense 2D grid of pixels, row 0 on top and column 0 on the left.

    Every row has exactly ``width`` cells. Cells never written stay black.

    Indexing:
    - grid[row] returns the row as a list of Pixel
    - grid[row, col] returns one Pixel
    """

    def __init__(self, width: int, height: int):
        if width < 0 or height < 0:
            raise ValueError(f"Grid dimensions must not be negative: {width}x{height}")
        self._data = np.zeros((height, width, 3), dtype=np.uint8)
        self.dropped = 0

    @classmethod
    def from_array(cls, data: np.ndarray) -> 'PixelGrid':
        """Wrap an existing (height, width, 3) array"""
        if data.ndim != 3 or data.shape[2] != 3:
            raise ValueError(f"Expected (height, width, 3) array, got shape {data.shape}")
        height, width = data.shape[:2]
        grid = cls(width, height)
        grid._data[:] = data
        return grid

    @property
    def width(self) -> int:
        return self._data.shape[1]

    @property
    def height(self) -> int:
        return self._data.shape[0]

    @property
    def frozen(self) -> bool:
        return not self._data.flags.writeable

    def set(self, x: int, y: int, r: int, g: int, b: int) -> bool:
        """
        Store one sample.

        Returns:
            False if (x, y) lies outside the grid and nothing was stored
        """
        if not (0 <= x < self.width and 0 <= y < self.height):
            return False
        self._data[y, x] = (r, g, b)
        return True

    def freeze(self):
        self._data.setflags(write=False)

    def row(self, index: int) -> List[Pixel]:
        return [Pixel(int(r), int(g), int(b)) for r, g, b in self._data[index]]

    def rgb_row(self, index: int) -> List[RGBColor]:
        """Row as plain (r, g, b) tuples, without building Pixel objects"""
        return [tuple(rgb) for rgb in self._data[index].tolist()]

    def rows(self) -> Iterator[List[Pixel]]:
        for index in range(self.height):
            yield self.row(index)

    def to_array(self) -> np.ndarray:
        return self._data.copy()

    def __getitem__(self, key):
        if isinstance(key, tuple):
            row, col = key
            r, g, b = self._data[row, col]
            return Pixel(int(r), int(g), int(b))
        return self.row(key)

    def __len__(self) -> int:
        return self.height

    def __iter__(self) -> Iterator[List[Pixel]]:
        return self.rows()

    def __repr__(self) -> str:
        return f"PixelGrid(width={self.width}, height={self.height})"


def build_grid(width: int, height: int, samples: Iterable[Sample]) -> PixelGrid:
    """
    Build a grid from samples arriving in any order.

    Args:
        width: Image width reported by the decoder
        height: Image height reported by the decoder
        samples: (x, y, r, g, b) samples

    Returns:
        Frozen PixelGrid
    """
    grid = PixelGrid(width, height)

    for x, y, r, g, b in samples:
        if not grid.set(x, y, r, g, b):
            grid.dropped += 1
            logger.debug(f"Dropping sample outside {width}x{height} grid at ({x}, {y})")

    if grid.dropped:
        logger.warning(f"Dropped {grid.dropped} samples outside the image bounds")

    grid.freeze()
    return grid


def rgb_array(image: Image.Image) -> np.ndarray:
    """
    Pixel data of a Pillow image as a (height, width, 3) uint8 array.

    16-bit greyscale modes are scaled down to 8 bits rather than clamped,
    so mid grey stays mid grey.

    Args:
        image: Decoded image in any mode

    Returns:
        RGB array, alpha discarded
    """
    if image.mode in WIDE_GREY_MODES:
        grey = np.asarray(image).astype(np.int64)
        grey = (np.clip(grey, 0, 0xFFFF) >> 8).astype(np.uint8)
        return np.repeat(grey[:, :, np.newaxis], 3, axis=2)

    if image.mode != 'RGB':
        image = image.convert('RGB')
    return np.asarray(image, dtype=np.uint8)


def iter_samples(image: Image.Image) -> Iterator[Sample]:
    """
    Yield the samples of a Pillow image in row-major order.

    Args:
        image: Decoded image in any mode

    Yields:
        Sample for every pixel
    """
    for y, row in enumerate(rgb_array(image).tolist()):
        for x, (r, g, b) in enumerate(row):
            yield Sample(x, y, r, g, b)


def open_grid(path: Union[str, Path]) -> PixelGrid:
    """
    Decode an image file into a grid.

    The decoded buffer already holds every pixel at its coordinate, so it
    is copied into the grid in one step instead of sample by sample.

    Args:
        path: Image file path

    Returns:
        Frozen PixelGrid sized to the image

    Raises:
        ImageReadError: File missing, unsupported or corrupt
    """
    try:
        with Image.open(path) as img:
            img.load()
            width, height = img.size
            logger.info(f"Decoded {path}: {width}x{height} {img.mode}")
            grid = PixelGrid.from_array(rgb_array(img))
    except (OSError, ValueError, Image.DecompressionBombError) as e:
        raise ImageReadError(path, e) from e

    grid.freeze()
    return grid
