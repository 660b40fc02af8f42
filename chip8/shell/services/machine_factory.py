"""
Machine creation factory.

Creates a ready-to-run :class:`~chip8.core.machine.Chip8` from a program
file path and the command-line options.

Typical usage::

    machine = MachineFactory.create("pong.ch8")
    machine = MachineFactory.create("pong.ch8", speed=1000, seed=42)
"""

from __future__ import annotations

import logging
import random
from typing import Optional

from chip8.core.machine import Chip8
from chip8.core.types import DEFAULT_SPEED
from chip8.shell.services.program_loader import ProgramLoader

logger = logging.getLogger(__name__)


class MachineFactory:
    """Create a CHIP-8 machine from a program file."""

    @staticmethod
    def create(
        program_path: str,
        speed: int = DEFAULT_SPEED,
        seed: Optional[int] = None,
    ) -> Chip8:
        """Build and return a machine ready to run.

        Parameters
        ----------
        program_path:
            Filesystem path to the program image.
        speed:
            Instructions per emulated second.
        seed:
            Seed for the random-AND instruction.  ``None`` seeds from the
            operating system.

        Raises
        ------
        FileNotFoundError
            If *program_path* does not exist.
        ProgramTooLargeError
            If the image does not fit in memory.
        ValueError
            If the image is empty or *speed* is not positive.
        """
        logger.info("Loading program: %s", program_path)
        if not ProgramLoader.has_known_extension(program_path):
            logger.warning("Unusual extension for a CHIP-8 program: %s", program_path)
        program = ProgramLoader.read(program_path)

        rng = random.Random(seed)
        if seed is not None:
            logger.info("Random seed: %d", seed)

        machine = Chip8(program, speed, rng=rng)
        logger.info("Program size: %d bytes", machine.program_size)
        logger.info("Machine created: %r", machine)
        return machine
