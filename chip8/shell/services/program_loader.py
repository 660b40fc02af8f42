"""
Program loading service.

Responsibilities:
  - Read raw program images from disk (no header, no metadata).
  - Reject images that cannot fit at 0x200 before a machine is built.
  - Produce a short description of an image for ``--info``.
"""

from __future__ import annotations

import hashlib
import os

from chip8.core.errors import ProgramTooLargeError
from chip8.core.types import MAX_PROGRAM_SIZE, PROGRAM_START

# Conventional file extensions for CHIP-8 programs.
KNOWN_EXTENSIONS: frozenset[str] = frozenset({".ch8", ".c8", ".rom", ".bin"})


class ProgramLoader:
    """Static utility for loading program images."""

    @staticmethod
    def read(path: str) -> bytes:
        """Read a program image from *path*.

        Returns:
            The raw program bytes.

        Raises:
            FileNotFoundError: If *path* does not exist.
            ValueError: If the file is empty.
            ProgramTooLargeError: If the image exceeds 3584 bytes.
        """
        with open(path, "rb") as fh:
            data = fh.read()

        if not data:
            raise ValueError(f"program file is empty: {path}")
        if len(data) > MAX_PROGRAM_SIZE:
            raise ProgramTooLargeError(len(data), MAX_PROGRAM_SIZE)
        return data

    @staticmethod
    def describe(path: str) -> dict[str, str]:
        """Return a human-readable description of a program file.

        Returns a dict with keys: ``title``, ``size``, ``load_range``,
        ``free``, ``odd_length``, ``sha1``.
        """
        data = ProgramLoader.read(path)
        end = PROGRAM_START + len(data)
        return {
            "title": os.path.splitext(os.path.basename(path))[0],
            "size": f"{len(data)} bytes",
            "load_range": f"0x{PROGRAM_START:03X}-0x{end - 1:03X}",
            "free": f"{MAX_PROGRAM_SIZE - len(data)} bytes",
            "odd_length": "yes" if len(data) % 2 else "no",
            "sha1": hashlib.sha1(data).hexdigest(),
        }

    @staticmethod
    def has_known_extension(path: str) -> bool:
        return os.path.splitext(path)[1].lower() in KNOWN_EXTENSIONS
