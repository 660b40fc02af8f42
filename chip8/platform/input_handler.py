"""
Input handler.
Maps keyboard keys to the sixteen-key CHIP-8 hex keypad.

Keyboard layout
---------------

The left-hand block of a QWERTY keyboard stands in for the keypad::

    Keyboard           Keypad
    1 2 3 4            1 2 3 C
    Q W E R     ->     4 5 6 D
    A S D F            7 8 9 E
    Z X C V            A 0 B F

===================  ============================
Key                  Action
===================  ============================
Escape               Quit
P                    Pause / resume
===================  ============================

Keys are matched by scancode so the physical layout stays the same on
non-QWERTY keyboards.  Key-repeat events are ignored.
"""

from __future__ import annotations

import logging

import pygame

from chip8.core.types import Key

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Scancode -> keypad mapping
# ---------------------------------------------------------------------------

_SCANCODE_MAP: dict[int, Key] = {
    pygame.KSCAN_1: Key.K1,
    pygame.KSCAN_2: Key.K2,
    pygame.KSCAN_3: Key.K3,
    pygame.KSCAN_4: Key.KC,
    pygame.KSCAN_Q: Key.K4,
    pygame.KSCAN_W: Key.K5,
    pygame.KSCAN_E: Key.K6,
    pygame.KSCAN_R: Key.KD,
    pygame.KSCAN_A: Key.K7,
    pygame.KSCAN_S: Key.K8,
    pygame.KSCAN_D: Key.K9,
    pygame.KSCAN_F: Key.KE,
    pygame.KSCAN_Z: Key.KA,
    pygame.KSCAN_X: Key.K0,
    pygame.KSCAN_C: Key.KB,
    pygame.KSCAN_V: Key.KF,
}


def keypad_key_for(scancode: int) -> Key | None:
    """Return the keypad key bound to *scancode*, if any."""
    return _SCANCODE_MAP.get(scancode)


class InputHandler:
    """Translates pygame keyboard events into keypad presses / releases.

    Parameters
    ----------
    machine:
        The emulated machine.  Expected interface:

        * ``press(key: int)``
        * ``release(key: int)``
    """

    def __init__(self, machine: object) -> None:
        self._machine = machine
        self._quit_requested: bool = False
        self._pause_toggled: bool = False
        self._held: set[Key] = set()

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    @property
    def quit_requested(self) -> bool:
        """``True`` if the user pressed Escape or closed the window."""
        return self._quit_requested

    def take_pause_toggle(self) -> bool:
        """Return ``True`` once per press of the pause key."""
        toggled = self._pause_toggled
        self._pause_toggled = False
        return toggled

    def poll(self) -> None:
        """Pump the pygame event queue and process all pending events.

        This should be called once at the top of each frame.
        """
        for event in pygame.event.get():
            self.handle_event(event)

    def handle_event(self, event: pygame.event.Event) -> None:
        """Process a single pygame event."""
        if event.type == pygame.QUIT:
            self._quit_requested = True
        elif event.type == pygame.KEYDOWN:
            self._on_key_down(event)
        elif event.type == pygame.KEYUP:
            self._on_key_up(event)
        elif event.type == pygame.WINDOWFOCUSLOST:
            self.clear_all()

    def clear_all(self) -> None:
        """Release every keypad key still held down."""
        for key in list(self._held):
            self._machine.release(key)  # type: ignore[attr-defined]
        self._held.clear()

    # ------------------------------------------------------------------
    # Keyboard handlers
    # ------------------------------------------------------------------

    def _on_key_down(self, event: pygame.event.Event) -> None:
        if event.key == pygame.K_ESCAPE:
            self._quit_requested = True
            return
        if event.key == pygame.K_p:
            self._pause_toggled = True
            return

        key = keypad_key_for(getattr(event, "scancode", -1))
        if key is None or key in self._held:
            # Unmapped, or an auto-repeat of a key already down.
            return
        self._held.add(key)
        logger.debug("keypad %X down", key)
        self._machine.press(key)  # type: ignore[attr-defined]

    def _on_key_up(self, event: pygame.event.Event) -> None:
        key = keypad_key_for(getattr(event, "scancode", -1))
        if key is None:
            return
        self._held.discard(key)
        logger.debug("keypad %X up", key)
        self._machine.release(key)  # type: ignore[attr-defined]
