"""
Memory -- the 4 KB CHIP-8 address space.

Layout
------

=============  ======================================
Range          Contents
=============  ======================================
0x000-0x04F    unused (historically the interpreter)
0x050-0x09F    hexadecimal font glyphs
0x0A0-0x1FF    unused
0x200-0xFFF    loaded program and working memory
=============  ======================================

Unlike a banked device, the address space is not masked: an access
outside ``0x000..0xFFF`` raises :class:`IndexError`.  The CPU turns that
into a :class:`~chip8.core.errors.MemoryAccessError` that names the
faulting instruction.
"""

from __future__ import annotations

from chip8.core.types import MEMORY_SIZE


class Memory:
    """Fixed-size byte-addressable RAM."""

    SIZE: int = MEMORY_SIZE

    def __init__(self) -> None:
        self._data: bytearray = bytearray(self.SIZE)

    def reset(self) -> None:
        """Clear the whole address space to zero."""
        self._data[:] = bytes(self.SIZE)

    def __len__(self) -> int:
        return self.SIZE

    def __getitem__(self, addr: int) -> int:
        self._check(addr)
        return self._data[addr]

    def __setitem__(self, addr: int, value: int) -> None:
        self._check(addr)
        self._data[addr] = value & 0xFF

    # ------------------------------------------------------------------
    # Block helpers
    # ------------------------------------------------------------------

    def load(self, offset: int, data: bytes) -> None:
        """Copy *data* into memory starting at *offset*.

        Raises:
            IndexError: If the block would run past the end of memory.
        """
        end = offset + len(data)
        if offset < 0 or end > self.SIZE:
            raise IndexError(
                f"block [0x{offset:03X}, 0x{end:03X}) outside address space"
            )
        self._data[offset:end] = data

    def check_range(self, addr: int, length: int) -> None:
        """Raise :class:`IndexError` unless *length* bytes at *addr* exist."""
        if length:
            self._check(addr)
            self._check(addr + length - 1)

    def read_block(self, addr: int, length: int) -> bytes:
        """Return *length* bytes starting at *addr*."""
        self.check_range(addr, length)
        return bytes(self._data[addr : addr + length])

    def fetch_word(self, addr: int) -> int:
        """Read a big-endian 16-bit word from *addr* and *addr + 1*."""
        self._check(addr)
        self._check(addr + 1)
        return (self._data[addr] << 8) | self._data[addr + 1]

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _check(self, addr: int) -> None:
        if not 0 <= addr < self.SIZE:
            raise IndexError(f"address 0x{addr:X} outside address space")

    def __repr__(self) -> str:
        return f"Memory(size={self.SIZE})"
