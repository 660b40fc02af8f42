"""
InputState -- the sixteen-key hex keypad latch.

Host code calls :meth:`press` and :meth:`release` from its event loop.
Besides the level state of every key the latch remembers the most recent
release in :attr:`last_released_key`.  That slot is one-shot: the
machine clears it at the end of every step through
:meth:`consume_release`, so a release is visible to exactly one
instruction -- the one executed by the step immediately after the event.
"""

from __future__ import annotations

from typing import List, Optional

from chip8.core.types import KEY_COUNT


class InputState:
    """Pressed-state of the keypad plus the one-shot release slot."""

    def __init__(self) -> None:
        self.keys: List[bool] = [False] * KEY_COUNT
        self.last_released_key: Optional[int] = None

    # ------------------------------------------------------------------
    # Host-side event injection
    # ------------------------------------------------------------------

    def press(self, key: int) -> None:
        """Mark *key* as held down."""
        self._check(key)
        self.keys[key] = True

    def release(self, key: int) -> None:
        """Mark *key* as released and latch it as the last released key.

        A release that has not yet been observed by a step is overwritten.
        """
        self._check(key)
        self.keys[key] = False
        self.last_released_key = int(key)

    # ------------------------------------------------------------------
    # Sampling
    # ------------------------------------------------------------------

    def is_pressed(self, key: int) -> bool:
        return self.keys[key]

    def consume_release(self) -> Optional[int]:
        """Return and clear the latched release."""
        key = self.last_released_key
        self.last_released_key = None
        return key

    # ------------------------------------------------------------------
    # Bulk clear
    # ------------------------------------------------------------------

    def clear_all_input(self) -> None:
        """Release every key without latching a release event."""
        for i in range(KEY_COUNT):
            self.keys[i] = False
        self.last_released_key = None

    @staticmethod
    def _check(key: int) -> None:
        if not 0 <= key < KEY_COUNT:
            raise ValueError(f"key must be in 0..{KEY_COUNT - 1}, got {key}")
