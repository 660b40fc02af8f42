"""
Timers -- the delay and sound countdown registers.

The original hardware decrements both timers at 60 Hz regardless of how
fast instructions run.  Here the rate is derived from the configured
instruction speed: every step bumps :attr:`cycle_accumulator`, and once
it exceeds ``speed // 60`` both counters drop by one (never below zero)
and the accumulator starts over.  At the default 700 instructions per
second that is one decrement every 12 steps.
"""

from __future__ import annotations

from chip8.core.types import TIMER_HZ


class Timers:
    """Delay / sound timers driven by the step counter.

    Parameters
    ----------
    speed:
        Instructions per emulated second.  Must be a positive integer.
    """

    def __init__(self, speed: int) -> None:
        if isinstance(speed, bool) or not isinstance(speed, int) or speed <= 0:
            raise ValueError(f"speed must be a positive integer, got {speed!r}")
        self.speed: int = speed
        self.delay: int = 0
        self.sound: int = 0
        self.cycle_accumulator: int = 0

    @property
    def steps_per_tick(self) -> int:
        """Accumulator threshold; a tick fires once the count exceeds it."""
        return self.speed // TIMER_HZ

    @property
    def sound_active(self) -> bool:
        return self.sound > 0

    def tick(self) -> bool:
        """Account for one step.

        Returns:
            ``True`` if the timers were decremented on this step.
        """
        self.cycle_accumulator += 1
        if self.cycle_accumulator <= self.steps_per_tick:
            return False
        self.cycle_accumulator = 0
        if self.delay > 0:
            self.delay -= 1
        if self.sound > 0:
            self.sound -= 1
        return True

    def reset(self) -> None:
        self.delay = 0
        self.sound = 0
        self.cycle_accumulator = 0

    def __repr__(self) -> str:
        return (
            f"Timers(speed={self.speed}, delay={self.delay}, "
            f"sound={self.sound}, acc={self.cycle_accumulator})"
        )
