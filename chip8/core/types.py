"""
Core enumerations and architecture constants for the CHIP-8 virtual machine.
"""

from enum import IntEnum


# ---------------------------------------------------------------------------
# Address space
# ---------------------------------------------------------------------------

MEMORY_SIZE: int = 0x1000
PROGRAM_START: int = 0x200
MAX_PROGRAM_SIZE: int = MEMORY_SIZE - PROGRAM_START
ADDRESS_MASK: int = 0xFFF

FONT_START: int = 0x050
GLYPH_SIZE: int = 5

# ---------------------------------------------------------------------------
# Display
# ---------------------------------------------------------------------------

DISPLAY_WIDTH: int = 64
DISPLAY_HEIGHT: int = 32
DISPLAY_CELLS: int = DISPLAY_WIDTH * DISPLAY_HEIGHT

# ---------------------------------------------------------------------------
# Register file / stack
# ---------------------------------------------------------------------------

REGISTER_COUNT: int = 16
FLAG_REGISTER: int = 0xF
STACK_DEPTH: int = 16

# ---------------------------------------------------------------------------
# Timing
# ---------------------------------------------------------------------------

TIMER_HZ: int = 60
DEFAULT_SPEED: int = 700

KEY_COUNT: int = 16


class Key(IntEnum):
    K0 = 0x0
    K1 = 0x1
    K2 = 0x2
    K3 = 0x3
    K4 = 0x4
    K5 = 0x5
    K6 = 0x6
    K7 = 0x7
    K8 = 0x8
    K9 = 0x9
    KA = 0xA
    KB = 0xB
    KC = 0xC
    KD = 0xD
    KE = 0xE
    KF = 0xF
