"""
DisplayBuffer -- the 64x32 monochrome CHIP-8 screen.

The buffer holds one boolean per pixel in row-major order::

    cells[y * DISPLAY_WIDTH + x]

Cells are only ever changed by :meth:`clear` and :meth:`xor_pixel`,
which the CPU calls for the clear-display and draw-sprite instructions.
There is no double buffering: the host reads :attr:`cells` directly
after a step reports the display as dirty.
"""

from __future__ import annotations

from typing import List

from chip8.core.types import DISPLAY_CELLS, DISPLAY_HEIGHT, DISPLAY_WIDTH


class DisplayBuffer:
    """Monochrome frame buffer written with XOR sprite blits."""

    WIDTH: int = DISPLAY_WIDTH
    HEIGHT: int = DISPLAY_HEIGHT

    def __init__(self) -> None:
        self.cells: List[bool] = [False] * DISPLAY_CELLS

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def clear(self) -> None:
        """Turn every pixel off."""
        cells = self.cells
        for i in range(DISPLAY_CELLS):
            cells[i] = False

    def xor_pixel(self, x: int, y: int, bit: bool) -> bool:
        """XOR *bit* into the pixel at (*x*, *y*).

        Both coordinates wrap around the screen edges.

        Returns:
            ``True`` if the pixel was on and has been turned off.
        """
        offset = (y % self.HEIGHT) * self.WIDTH + (x % self.WIDTH)
        old = self.cells[offset]
        new = old != bit
        self.cells[offset] = new
        return old and not new

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    def get_pixel(self, x: int, y: int) -> bool:
        if not (0 <= x < self.WIDTH and 0 <= y < self.HEIGHT):
            raise IndexError(f"pixel ({x}, {y}) outside {self.WIDTH}x{self.HEIGHT}")
        return self.cells[y * self.WIDTH + x]

    @property
    def lit_count(self) -> int:
        """Number of pixels currently on."""
        return sum(self.cells)

    def __len__(self) -> int:
        return DISPLAY_CELLS

    def __repr__(self) -> str:
        return (
            f"DisplayBuffer("
            f"{self.WIDTH}x{self.HEIGHT}, "
            f"lit={self.lit_count})"
        )
