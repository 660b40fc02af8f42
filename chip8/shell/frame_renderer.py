"""
Frame renderer.
Converts the machine's boolean DisplayBuffer into an RGB pygame Surface.

The core produces one boolean per pixel.  This module maps every cell
through a two-entry colour table (background, foreground) with numpy and
blits the result into a 64x32 :class:`pygame.Surface` that the window
scales up for presentation.
"""

from __future__ import annotations

import logging

import numpy as np
import pygame

from chip8.core.types import DISPLAY_HEIGHT, DISPLAY_WIDTH

logger = logging.getLogger(__name__)

DEFAULT_FOREGROUND: int = 0xFFFFFF
DEFAULT_BACKGROUND: int = 0x000000


def _rgb(colour: int) -> tuple[int, int, int]:
    return ((colour >> 16) & 0xFF, (colour >> 8) & 0xFF, colour & 0xFF)


class FrameRenderer:
    """Render a machine's :class:`DisplayBuffer` to a :class:`pygame.Surface`.

    Parameters
    ----------
    machine:
        The emulated machine.  Expected attribute:

        * ``display`` -- a :class:`~chip8.core.display_buffer.DisplayBuffer`

    foreground, background:
        ``0xRRGGBB`` colours for lit and unlit pixels.
    """

    def __init__(
        self,
        machine: object,
        *,
        foreground: int = DEFAULT_FOREGROUND,
        background: int = DEFAULT_BACKGROUND,
    ) -> None:
        self._machine = machine
        self._lut = np.zeros((2, 3), dtype=np.uint8)
        self.set_colours(foreground, background)

        self._surface: pygame.Surface = pygame.Surface((DISPLAY_WIDTH, DISPLAY_HEIGHT))

        logger.info(
            "FrameRenderer: %dx%d (fg=#%06X, bg=#%06X)",
            DISPLAY_WIDTH,
            DISPLAY_HEIGHT,
            foreground,
            background,
        )

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    @property
    def width(self) -> int:
        return DISPLAY_WIDTH

    @property
    def height(self) -> int:
        return DISPLAY_HEIGHT

    @property
    def surface(self) -> pygame.Surface:
        """The internal pygame Surface (updated on each :meth:`render` call)."""
        return self._surface

    def set_colours(self, foreground: int, background: int) -> None:
        """Replace the lit / unlit colours."""
        self._lut[0] = _rgb(background)
        self._lut[1] = _rgb(foreground)

    def to_rgb(self) -> np.ndarray:
        """Return the current display as an ``(H, W, 3)`` uint8 array."""
        cells = self._machine.display.cells  # type: ignore[attr-defined]
        frame = np.asarray(cells, dtype=np.uint8).reshape((DISPLAY_HEIGHT, DISPLAY_WIDTH))
        return self._lut[frame]

    def render(self) -> pygame.Surface:
        """Render the current display and return the surface.

        The same :class:`pygame.Surface` object is reused each call.
        """
        rgb = self.to_rgb()
        # pygame surfarray expects (W, H, 3) -- transpose width and height.
        pygame.surfarray.blit_array(self._surface, rgb.transpose(1, 0, 2))
        return self._surface
