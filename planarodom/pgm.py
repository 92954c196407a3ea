"""Writing a grid of values as a binary grey-level PGM image."""

from __future__ import annotations

from typing import BinaryIO, Sequence


def write_pgm(stream: BinaryIO, matrix: Sequence[Sequence[float]]) -> BinaryIO:
    """Write ``matrix[x][y]`` as a P5 image, top row first.

    A value of 0 is white and 1 is black.
    """
    xsize = len(matrix)
    ysize = len(matrix[0]) if xsize else 0
    stream.write(f"P5\n{xsize}\n{ysize}\n255\n".encode("ascii"))
    stream.write(
        bytes(
            int(255 * abs(1.0 - matrix[x][y])) % 256
            for y in range(ysize - 1, -1, -1)
            for x in range(xsize)
        )
    )
    return stream