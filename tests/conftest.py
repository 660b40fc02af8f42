"""
Shared fixtures for the CHIP-8 test suite.

SDL is pointed at its dummy drivers before pygame is imported anywhere so
the host-layer tests never open a real window or audio device.
"""

import os
import random
import sys

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")
os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")

_PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _PROJECT_ROOT not in sys.path:
    sys.path.insert(0, _PROJECT_ROOT)

import pytest

from chip8.core.machine import Chip8


def assemble(*words: int) -> bytes:
    """Pack 16-bit instruction words big-endian."""
    out = bytearray()
    for word in words:
        out.append((word >> 8) & 0xFF)
        out.append(word & 0xFF)
    return bytes(out)


@pytest.fixture
def make_vm():
    """Build a machine from instruction words.

    ``make_vm(0x600A, 0x7005, speed=700, seed=0)``
    """

    def _make(*words: int, speed: int = 700, seed: int = 0) -> Chip8:
        return Chip8(assemble(*words), speed, rng=random.Random(seed))

    return _make


def run(vm: Chip8, steps: int) -> None:
    for _ in range(steps):
        vm.step()
