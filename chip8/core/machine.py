"""
Chip8 -- the CHIP-8 virtual machine.

The machine owns every piece of emulated state:

* **Memory** -- 4 KB address space with the font at 0x050 and the
  program at 0x200.
* **CPU** -- register file, index register, program counter, call stack
  and the instruction dispatcher.
* **Timers** -- delay and sound counters decremented at a rate derived
  from the configured instruction speed.
* **InputState** -- the sixteen-key keypad latch.
* **DisplayBuffer** -- the 64x32 monochrome screen.

It holds no external resources and no module-level state.  The host
creates one instance, keeps the reference, and drives it with
:meth:`step` (or :meth:`run_frame`), :meth:`press` and :meth:`release`.
Calls must not overlap: a host that delivers input from another thread
has to serialise access itself.
"""

from __future__ import annotations

import logging
import random
from typing import List, Optional

from chip8.core.cpu import CPU
from chip8.core.display_buffer import DisplayBuffer
from chip8.core.errors import ExecutionFault, ProgramTooLargeError
from chip8.core.font_tables import FONT
from chip8.core.input_state import InputState
from chip8.core.memory import Memory
from chip8.core.timers import Timers
from chip8.core.types import DEFAULT_SPEED, FONT_START, MAX_PROGRAM_SIZE, PROGRAM_START

logger = logging.getLogger(__name__)


class Chip8:
    """A complete CHIP-8 machine built from a program image.

    Parameters
    ----------
    program:
        Raw big-endian instruction bytes, loaded at 0x200.
    speed:
        Instructions per emulated second.  Controls how often the delay
        and sound timers tick (once every ``speed // 60 + 1`` steps).
    rng:
        Source for the random-AND instruction.  Defaults to a fresh
        :class:`random.Random`; pass a seeded instance for repeatable
        runs.

    Raises
    ------
    ProgramTooLargeError
        If *program* is longer than 3584 bytes.
    ValueError
        If *speed* is not a positive integer.
    TypeError
        If *program* is not a bytes-like object.
    """

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    def __init__(
        self,
        program: bytes,
        speed: int = DEFAULT_SPEED,
        *,
        rng: Optional[random.Random] = None,
    ) -> None:
        program = bytes(memoryview(program))
        if len(program) > MAX_PROGRAM_SIZE:
            raise ProgramTooLargeError(len(program), MAX_PROGRAM_SIZE)

        self._program: bytes = program
        self.rng: random.Random = rng if rng is not None else random.Random()

        self.mem: Memory = Memory()
        self.display: DisplayBuffer = DisplayBuffer()
        self.input: InputState = InputState()
        self.timers: Timers = Timers(speed)
        self.cpu: CPU = CPU(self)

        # Run-state.  Once a fault is raised it is kept here and re-raised
        # by every later step.
        self.fault: Optional[ExecutionFault] = None
        self.step_count: int = 0

        self._load()
        logger.info(
            "Chip8: loaded %d-byte program at 0x%03X (speed=%d)",
            len(program),
            PROGRAM_START,
            speed,
        )

    def _load(self) -> None:
        self.mem.load(FONT_START, FONT)
        self.mem.load(PROGRAM_START, self._program)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def reset(self) -> None:
        """Return to the post-construction state with the same program."""
        self.mem.reset()
        self._load()
        self.display.clear()
        self.input.clear_all_input()
        self.timers.reset()
        self.cpu.reset()
        self.fault = None
        self.step_count = 0

    @property
    def halted(self) -> bool:
        """``True`` once an execution fault has stopped the machine."""
        return self.fault is not None

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def step(self) -> bool:
        """Execute exactly one instruction.

        Order of work: timer tick, fetch/decode/execute, then the
        one-shot key-release latch is cleared whether or not the
        instruction looked at it.

        Returns:
            ``True`` if the display changed and should be re-presented.

        Raises:
            ExecutionFault: On a fatal fault.  The machine stays halted
                and every further call raises the same fault.
        """
        if self.fault is not None:
            raise self.fault

        self.timers.tick()
        try:
            dirty = self.cpu.step()
        except ExecutionFault as fault:
            self.fault = fault
            logger.error("Chip8: halted after %d steps: %s", self.step_count, fault)
            raise
        finally:
            self.input.consume_release()

        self.step_count += 1
        return dirty

    def run_frame(self, fps: int) -> bool:
        """Run one host frame worth of instructions.

        Executes ``speed // fps`` steps (at least one).

        Returns:
            ``True`` if any of those steps changed the display.
        """
        if fps <= 0:
            raise ValueError(f"fps must be positive, got {fps}")
        dirty = False
        for _ in range(max(1, self.timers.speed // fps)):
            if self.step():
                dirty = True
        return dirty

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def press(self, key: int) -> None:
        self.input.press(key)

    def release(self, key: int) -> None:
        self.input.release(key)

    # ------------------------------------------------------------------
    # Host-visible state
    # ------------------------------------------------------------------

    @property
    def sound_active(self) -> bool:
        """``True`` while the sound timer is non-zero."""
        return self.timers.sound_active

    @property
    def speed(self) -> int:
        return self.timers.speed

    @property
    def memory(self) -> Memory:
        return self.mem

    @property
    def registers(self) -> List[int]:
        return self.cpu.v

    @property
    def index(self) -> int:
        return self.cpu.i

    @property
    def pc(self) -> int:
        return self.cpu.pc

    @property
    def stack(self) -> List[int]:
        return self.cpu.stack

    @property
    def delay_timer(self) -> int:
        return self.timers.delay

    @property
    def sound_timer(self) -> int:
        return self.timers.sound

    @property
    def cycle_accumulator(self) -> int:
        return self.timers.cycle_accumulator

    @property
    def keys(self) -> List[bool]:
        return self.input.keys

    @property
    def last_released_key(self) -> Optional[int]:
        return self.input.last_released_key

    @property
    def program_size(self) -> int:
        return len(self._program)

    # ------------------------------------------------------------------
    # Dunder helpers
    # ------------------------------------------------------------------

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"program={len(self._program)} bytes, "
            f"speed={self.timers.speed}, "
            f"pc=0x{self.cpu.pc:03X}, "
            f"steps={self.step_count})"
        )
