"""
CHIP-8 CPU -- register file, instruction decoding and dispatch.

Every instruction is two bytes, fetched big-endian from ``pc``.  The
word is split into the usual fields::

    op   = word >> 12            (bits 12-15)
    x    = (word >> 8) & 0xF     (bits 8-11, register index)
    y    = (word >> 4) & 0xF     (bits 4-7, register index)
    n    = word & 0xF
    nn   = word & 0xFF
    nnn  = word & 0xFFF

Dialect
-------
Where historical interpreters disagree this CPU behaves as follows:

* ``8XY6`` / ``8XYE`` shift ``VY`` and store the result in ``VX``; the
  bit shifted out lands in VF.
* ``FX55`` / ``FX65`` leave ``I`` unchanged.
* ``8XY1`` / ``8XY2`` / ``8XY3`` leave VF unchanged.
* ``FX1E`` wraps ``I`` to 12 bits and sets VF to 1 only on overflow.
* The call stack holds at most 16 return addresses.

Any word that does not decode to a defined instruction raises
:class:`~chip8.core.errors.UnimplementedOpcodeError`; nothing is
silently skipped.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable, Dict, List, NamedTuple, Optional

from chip8.core.errors import (
    ExecutionFault,
    MemoryAccessError,
    StackOverflowError,
    StackUnderflowError,
    UnimplementedOpcodeError,
)
from chip8.core.font_tables import glyph_address
from chip8.core.types import (
    ADDRESS_MASK,
    FLAG_REGISTER,
    PROGRAM_START,
    REGISTER_COUNT,
    STACK_DEPTH,
)

if TYPE_CHECKING:
    from chip8.core.machine import Chip8

logger = logging.getLogger(__name__)

VF: int = FLAG_REGISTER


class Instruction(NamedTuple):
    """A decoded instruction word."""

    word: int
    op: int
    x: int
    y: int
    n: int
    nn: int
    nnn: int


def decode(word: int) -> Instruction:
    """Split a 16-bit instruction word into its fields."""
    return Instruction(
        word=word,
        op=(word & 0xF000) >> 12,
        x=(word & 0x0F00) >> 8,
        y=(word & 0x00F0) >> 4,
        n=word & 0x000F,
        nn=word & 0x00FF,
        nnn=word & 0x0FFF,
    )


Handler = Callable[[Instruction], Optional[bool]]


class CPU:
    """CHIP-8 interpreter core.

    Parameters
    ----------
    machine:
        Back-reference to the owning :class:`~chip8.core.machine.Chip8`.
        Memory, display, keypad, timers and the random source are all
        reached through it (``machine.mem``, ``machine.display`` ...).
    """

    def __init__(self, machine: Chip8) -> None:
        self.m = machine

        # Registers
        self.v: List[int] = [0] * REGISTER_COUNT
        self.i: int = 0
        self.pc: int = PROGRAM_START
        self.stack: List[int] = []

        # Address of the instruction currently executing (for faults).
        self.instruction_pc: int = PROGRAM_START

        self._opcode_table: List[Handler] = self._build_opcode_table()

    def reset(self) -> None:
        """Return the register file to its power-on state."""
        for r in range(REGISTER_COUNT):
            self.v[r] = 0
        self.i = 0
        self.pc = PROGRAM_START
        self.instruction_pc = PROGRAM_START
        self.stack.clear()

    # ------------------------------------------------------------------
    # Fetch / decode / execute
    # ------------------------------------------------------------------

    def step(self) -> bool:
        """Fetch, decode and execute exactly one instruction.

        Returns:
            ``True`` if the instruction changed the display.

        Raises:
            ExecutionFault: On an undefined opcode, stack misuse, or an
                access outside the address space.
        """
        pc = self.pc
        self.instruction_pc = pc
        try:
            word = self.m.mem.fetch_word(pc)
        except IndexError as exc:
            raise MemoryAccessError(None, pc) from exc
        self.pc = pc + 2

        ins = decode(word)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "pc=0x%03X op=0x%04X I=0x%03X V=%s",
                pc,
                word,
                self.i,
                " ".join(f"{r:02X}" for r in self.v),
            )

        try:
            return bool(self._opcode_table[ins.op](ins))
        except IndexError as exc:
            self.pc = pc
            raise MemoryAccessError(word, pc) from exc
        except ExecutionFault:
            # Leave pc on the faulting instruction.
            self.pc = pc
            raise

    def _unimplemented(self, ins: Instruction) -> None:
        raise UnimplementedOpcodeError(ins.word, self.instruction_pc)

    def _skip_if(self, condition: bool) -> None:
        if condition:
            self.pc += 2

    # ------------------------------------------------------------------
    # 0x0 -- system group
    # ------------------------------------------------------------------

    def i_cls(self, ins: Instruction) -> None:
        """00E0 -- clear the display."""
        self.m.display.clear()

    def i_ret(self, ins: Instruction) -> None:
        """00EE -- return from subroutine."""
        if not self.stack:
            raise StackUnderflowError(ins.word, self.instruction_pc)
        self.pc = self.stack.pop()

    # ------------------------------------------------------------------
    # Flow control
    # ------------------------------------------------------------------

    def i_jp(self, ins: Instruction) -> None:
        """1NNN -- jump."""
        self.pc = ins.nnn

    def i_call(self, ins: Instruction) -> None:
        """2NNN -- call subroutine."""
        if len(self.stack) >= STACK_DEPTH:
            raise StackOverflowError(ins.word, self.instruction_pc)
        self.stack.append(self.pc)
        self.pc = ins.nnn

    def i_se_imm(self, ins: Instruction) -> None:
        """3XNN -- skip if VX == NN."""
        self._skip_if(self.v[ins.x] == ins.nn)

    def i_sne_imm(self, ins: Instruction) -> None:
        """4XNN -- skip if VX != NN."""
        self._skip_if(self.v[ins.x] != ins.nn)

    def i_se_reg(self, ins: Instruction) -> None:
        """5XY0 -- skip if VX == VY."""
        if ins.n != 0:
            self._unimplemented(ins)
        self._skip_if(self.v[ins.x] == self.v[ins.y])

    def i_sne_reg(self, ins: Instruction) -> None:
        """9XY0 -- skip if VX != VY."""
        if ins.n != 0:
            self._unimplemented(ins)
        self._skip_if(self.v[ins.x] != self.v[ins.y])

    def i_jp_v0(self, ins: Instruction) -> None:
        """BNNN -- jump to NNN + V0."""
        self.pc = ins.nnn + self.v[0]

    # ------------------------------------------------------------------
    # Immediate loads
    # ------------------------------------------------------------------

    def i_ld_imm(self, ins: Instruction) -> None:
        """6XNN -- VX = NN."""
        self.v[ins.x] = ins.nn

    def i_add_imm(self, ins: Instruction) -> None:
        """7XNN -- VX += NN (no carry flag)."""
        self.v[ins.x] = (self.v[ins.x] + ins.nn) & 0xFF

    def i_ld_i(self, ins: Instruction) -> None:
        """ANNN -- I = NNN."""
        self.i = ins.nnn

    def i_rnd(self, ins: Instruction) -> None:
        """CXNN -- VX = random byte AND NN."""
        self.v[ins.x] = self.m.rng.getrandbits(8) & ins.nn

    # ------------------------------------------------------------------
    # 0x8 -- register ALU group
    # ------------------------------------------------------------------

    def i_alu(self, ins: Instruction) -> None:
        self._alu_table.get(ins.n, self._unimplemented)(ins)

    def i_ld_reg(self, ins: Instruction) -> None:
        """8XY0"""
        self.v[ins.x] = self.v[ins.y]

    def i_or(self, ins: Instruction) -> None:
        """8XY1"""
        self.v[ins.x] |= self.v[ins.y]

    def i_and(self, ins: Instruction) -> None:
        """8XY2"""
        self.v[ins.x] &= self.v[ins.y]

    def i_xor(self, ins: Instruction) -> None:
        """8XY3"""
        self.v[ins.x] ^= self.v[ins.y]

    def i_add_reg(self, ins: Instruction) -> None:
        """8XY4 -- VX += VY, VF = carry."""
        total = self.v[ins.x] + self.v[ins.y]
        self.v[ins.x] = total & 0xFF
        self.v[VF] = 1 if total > 0xFF else 0

    def i_sub(self, ins: Instruction) -> None:
        """8XY5 -- VX -= VY, VF = NOT borrow."""
        vx, vy = self.v[ins.x], self.v[ins.y]
        self.v[ins.x] = (vx - vy) & 0xFF
        self.v[VF] = 1 if vx >= vy else 0

    def i_shr(self, ins: Instruction) -> None:
        """8XY6 -- VX = VY >> 1, VF = bit shifted out."""
        src = self.v[ins.y]
        self.v[ins.x] = src >> 1
        self.v[VF] = src & 0x01

    def i_subn(self, ins: Instruction) -> None:
        """8XY7 -- VX = VY - VX, VF = NOT borrow."""
        vx, vy = self.v[ins.x], self.v[ins.y]
        self.v[ins.x] = (vy - vx) & 0xFF
        self.v[VF] = 1 if vy >= vx else 0

    def i_shl(self, ins: Instruction) -> None:
        """8XYE -- VX = VY << 1, VF = bit shifted out."""
        src = self.v[ins.y]
        self.v[ins.x] = (src << 1) & 0xFF
        self.v[VF] = (src & 0x80) >> 7

    # ------------------------------------------------------------------
    # Display
    # ------------------------------------------------------------------

    def i_drw(self, ins: Instruction) -> bool:
        """DXYN -- XOR an N-row sprite from memory[I] at (VX, VY).

        VF is set to 1 if any lit pixel is turned off, else 0.
        """
        x0 = self.v[ins.x]
        y0 = self.v[ins.y]
        sprite = self.m.mem.read_block(self.i, ins.n)
        display = self.m.display

        collision = False
        for row, byte in enumerate(sprite):
            for col in range(8):
                bit = (byte >> (7 - col)) & 1 == 1
                if display.xor_pixel(x0 + col, y0 + row, bit):
                    collision = True

        self.v[VF] = 1 if collision else 0
        return True

    # ------------------------------------------------------------------
    # 0xE -- keypad skips
    # ------------------------------------------------------------------

    def i_keys(self, ins: Instruction) -> None:
        self._key_table.get(ins.nn, self._unimplemented)(ins)

    def i_skp(self, ins: Instruction) -> None:
        """EX9E -- skip if key VX is pressed."""
        self._skip_if(self.m.input.is_pressed(self.v[ins.x] & 0xF))

    def i_sknp(self, ins: Instruction) -> None:
        """EXA1 -- skip if key VX is not pressed."""
        self._skip_if(not self.m.input.is_pressed(self.v[ins.x] & 0xF))

    # ------------------------------------------------------------------
    # 0xF -- timers, index and memory group
    # ------------------------------------------------------------------

    def i_misc(self, ins: Instruction) -> None:
        self._misc_table.get(ins.nn, self._unimplemented)(ins)

    def i_ld_vx_dt(self, ins: Instruction) -> None:
        """FX07"""
        self.v[ins.x] = self.m.timers.delay

    def i_wait_key(self, ins: Instruction) -> None:
        """FX0A -- wait for a key release.

        No release latched on this step: rewind ``pc`` so the same
        instruction is decoded again on the next step.
        """
        key = self.m.input.last_released_key
        if key is None:
            self.pc -= 2
        else:
            self.v[ins.x] = key

    def i_ld_dt(self, ins: Instruction) -> None:
        """FX15"""
        self.m.timers.delay = self.v[ins.x]

    def i_ld_st(self, ins: Instruction) -> None:
        """FX18"""
        self.m.timers.sound = self.v[ins.x]

    def i_add_i(self, ins: Instruction) -> None:
        """FX1E -- I += VX, VF = 1 when I leaves the 12-bit range."""
        total = self.i + self.v[ins.x]
        if total > ADDRESS_MASK:
            self.i = total & ADDRESS_MASK
            self.v[VF] = 1
        else:
            self.i = total

    def i_ld_f(self, ins: Instruction) -> None:
        """FX29 -- I = address of the font glyph for VX."""
        self.i = glyph_address(self.v[ins.x])

    def i_bcd(self, ins: Instruction) -> None:
        """FX33 -- store VX as three decimal digits at I, I+1, I+2."""
        value = self.v[ins.x]
        mem = self.m.mem
        mem.check_range(self.i, 3)
        mem[self.i] = value // 100
        mem[self.i + 1] = (value // 10) % 10
        mem[self.i + 2] = value % 10

    def i_store(self, ins: Instruction) -> None:
        """FX55 -- memory[I + r] = Vr for r in 0..X."""
        mem = self.m.mem
        mem.check_range(self.i, ins.x + 1)
        for r in range(ins.x + 1):
            mem[self.i + r] = self.v[r]

    def i_load(self, ins: Instruction) -> None:
        """FX65 -- Vr = memory[I + r] for r in 0..X."""
        mem = self.m.mem
        mem.check_range(self.i, ins.x + 1)
        for r in range(ins.x + 1):
            self.v[r] = mem[self.i + r]

    # ------------------------------------------------------------------
    # Dispatch tables
    # ------------------------------------------------------------------

    def i_sys(self, ins: Instruction) -> None:
        if ins.nnn == 0x0E0:
            self.i_cls(ins)
        elif ins.nnn == 0x0EE:
            self.i_ret(ins)
        else:
            self._unimplemented(ins)

    def _build_opcode_table(self) -> List[Handler]:
        """Construct the 16-entry table keyed by the top nibble.

        Groups 0x0, 0x8, 0xE and 0xF dispatch again on a sub-opcode.
        """
        self._alu_table: Dict[int, Handler] = {
            0x0: self.i_ld_reg,
            0x1: self.i_or,
            0x2: self.i_and,
            0x3: self.i_xor,
            0x4: self.i_add_reg,
            0x5: self.i_sub,
            0x6: self.i_shr,
            0x7: self.i_subn,
            0xE: self.i_shl,
        }
        self._key_table: Dict[int, Handler] = {
            0x9E: self.i_skp,
            0xA1: self.i_sknp,
        }
        self._misc_table: Dict[int, Handler] = {
            0x07: self.i_ld_vx_dt,
            0x0A: self.i_wait_key,
            0x15: self.i_ld_dt,
            0x18: self.i_ld_st,
            0x1E: self.i_add_i,
            0x29: self.i_ld_f,
            0x33: self.i_bcd,
            0x55: self.i_store,
            0x65: self.i_load,
        }
        return [
            self.i_sys,       # 0x0
            self.i_jp,        # 0x1
            self.i_call,      # 0x2
            self.i_se_imm,    # 0x3
            self.i_sne_imm,   # 0x4
            self.i_se_reg,    # 0x5
            self.i_ld_imm,    # 0x6
            self.i_add_imm,   # 0x7
            self.i_alu,       # 0x8
            self.i_sne_reg,   # 0x9
            self.i_ld_i,      # 0xA
            self.i_jp_v0,     # 0xB
            self.i_rnd,       # 0xC
            self.i_drw,       # 0xD
            self.i_keys,      # 0xE
            self.i_misc,      # 0xF
        ]

    def __repr__(self) -> str:
        return (
            f"CPU(pc=0x{self.pc:03X}, I=0x{self.i:03X}, "
            f"sp={len(self.stack)})"
        )
