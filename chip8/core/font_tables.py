"""
Built-in hexadecimal font for the CHIP-8 address space.

Each glyph is 4 pixels wide and 5 rows tall.  Only the high nibble of
every row byte carries pixels, so a glyph drawn with the sprite
instruction occupies a 4x5 cell block.  The table is copied to
``FONT_START`` (0x050) when the machine is constructed.
"""

from __future__ import annotations

from chip8.core.types import FONT_START, GLYPH_SIZE

# fmt: off
FONT: bytes = bytes([
    0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
    0x20, 0x60, 0x20, 0x20, 0x70,  # 1
    0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
    0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
    0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
    0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
    0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
    0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
    0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
    0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
    0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
    0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
    0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
    0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
    0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
    0xF0, 0x80, 0xF0, 0x80, 0x80,  # F
])
# fmt: on

assert len(FONT) == 16 * GLYPH_SIZE, f"font must have 80 bytes, got {len(FONT)}"

FONT_END: int = FONT_START + len(FONT)


def glyph_address(digit: int) -> int:
    """Return the address of the glyph for *digit* in the address space.

    No range check is applied; the font-address instruction computes the
    address from a full register value and programs that pass a value
    above 0xF simply point past the font.
    """
    return FONT_START + GLYPH_SIZE * digit
