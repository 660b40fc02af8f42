# CHIP-8 virtual machine core
"""
The CHIP-8 virtual machine.

Use :class:`Chip8(program, speed) <machine.Chip8>` to build a machine and
drive it with :meth:`~machine.Chip8.step`.
"""

from chip8.core.errors import (
    Chip8Error,
    ExecutionFault,
    MemoryAccessError,
    ProgramTooLargeError,
    StackOverflowError,
    StackUnderflowError,
    UnimplementedOpcodeError,
)
from chip8.core.machine import Chip8
from chip8.core.types import Key

__all__ = [
    "Chip8",
    "Key",
    # errors
    "Chip8Error",
    "ExecutionFault",
    "MemoryAccessError",
    "ProgramTooLargeError",
    "StackOverflowError",
    "StackUnderflowError",
    "UnimplementedOpcodeError",
]
