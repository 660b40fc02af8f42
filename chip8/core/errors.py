"""
Exception types raised by the CHIP-8 core.

There are two families:

* :class:`ProgramTooLargeError` -- a *load* error, raised while the
  machine is being constructed and before any instruction executes.
* :class:`ExecutionFault` -- raised by :meth:`Chip8.step` when the
  emulated program does something the engine refuses to guess about.
  Every fault carries the raw instruction word and the address it was
  fetched from.
"""

from __future__ import annotations

from typing import Optional


class Chip8Error(Exception):
    """Base class for every error raised by the core."""


class ProgramTooLargeError(Chip8Error, ValueError):
    """The program does not fit between 0x200 and the end of memory."""

    def __init__(self, size: int, limit: int) -> None:
        self.size: int = size
        self.limit: int = limit
        super().__init__(
            f"program too large: {size} bytes (limit {limit} bytes)"
        )


class ExecutionFault(Chip8Error, RuntimeError):
    """Fatal fault raised while executing an instruction.

    Parameters
    ----------
    description:
        Short human-readable reason.
    instruction:
        The 16-bit instruction word, or ``None`` if the fault happened
        before a word could be fetched.
    pc:
        Address of the faulting instruction.
    """

    def __init__(self, description: str, instruction: Optional[int], pc: int) -> None:
        self.description: str = description
        self.instruction: Optional[int] = instruction
        self.pc: int = pc
        if instruction is None:
            message = f"{description} at pc=0x{pc:03X}"
        else:
            message = f"{description} 0x{instruction:04X} at pc=0x{pc:03X}"
        super().__init__(message)


class UnimplementedOpcodeError(ExecutionFault):
    def __init__(self, instruction: int, pc: int) -> None:
        super().__init__("unimplemented opcode", instruction, pc)


class StackUnderflowError(ExecutionFault):
    def __init__(self, instruction: int, pc: int) -> None:
        super().__init__("return with empty call stack", instruction, pc)


class StackOverflowError(ExecutionFault):
    def __init__(self, instruction: int, pc: int) -> None:
        super().__init__("call stack overflow", instruction, pc)


class MemoryAccessError(ExecutionFault):
    """Fetch or index-relative access outside the 4 KB address space."""

    def __init__(self, instruction: Optional[int], pc: int) -> None:
        super().__init__("memory access out of range", instruction, pc)
