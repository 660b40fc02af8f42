#!/usr/bin/env python3
"""
CHIP-8 -- virtual machine with a pygame front end.

Main entry point.  Parses command-line arguments, creates the emulated
machine from a program file, and launches the pygame display window.

Usage examples::

    # Run a program at the default 700 instructions per second
    python main.py roms/pong.ch8

    # Faster machine, larger window
    python main.py roms/pong.ch8 --speed 1200 --scale 16

    # Repeatable random numbers
    python main.py roms/pong.ch8 --seed 1234

    # Show program metadata without launching
    python main.py roms/pong.ch8 --info

    # Disable audio
    python main.py roms/pong.ch8 --no-audio
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import Optional

# ---------------------------------------------------------------------------
# Ensure the project root is on sys.path so that ``chip8`` can be imported
# regardless of how the script is invoked.
# ---------------------------------------------------------------------------
_PROJECT_ROOT = os.path.dirname(os.path.abspath(__file__))
if _PROJECT_ROOT not in sys.path:
    sys.path.insert(0, _PROJECT_ROOT)

from chip8.core.errors import Chip8Error
from chip8.core.types import DEFAULT_SPEED
from chip8.platform.window import Window
from chip8.shell.services.machine_factory import MachineFactory
from chip8.shell.services.program_loader import ProgramLoader


# ---------------------------------------------------------------------------
# CLI definition
# ---------------------------------------------------------------------------

def _positive_int(text: str) -> int:
    value = int(text)
    if value <= 0:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {value}")
    return value


def _build_parser() -> argparse.ArgumentParser:
    """Construct the argument parser."""
    parser = argparse.ArgumentParser(
        prog="chip8",
        description=(
            "CHIP-8 virtual machine.  "
            "Load a program image and run it in a pygame window."
        ),
    )

    parser.add_argument(
        "program",
        help="Path to the program image (.ch8, .c8, .rom)",
    )

    parser.add_argument(
        "--speed",
        type=_positive_int,
        default=DEFAULT_SPEED,
        help=f"Instructions per second.  Default: {DEFAULT_SPEED}.",
    )

    # Display
    parser.add_argument(
        "--scale", "-s",
        type=_positive_int,
        default=10,
        help="Display scale factor (1-32).  Default: 10.",
    )

    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for the random-number instruction.",
    )

    # Audio
    parser.add_argument(
        "--no-audio",
        action="store_true",
        default=False,
        help="Disable audio output.",
    )

    # Debugging / info
    parser.add_argument(
        "--info",
        action="store_true",
        default=False,
        help="Print program metadata and exit without launching the emulator.",
    )

    parser.add_argument(
        "--verbose", "-v",
        action="count",
        default=0,
        help="Increase log verbosity (-v for INFO, -vv for DEBUG).",
    )

    return parser


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------

def _configure_logging(verbosity: int) -> None:
    """Set up the root logger based on requested verbosity."""
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity >= 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


# ---------------------------------------------------------------------------
# Info mode
# ---------------------------------------------------------------------------

def _print_program_info(program_path: str) -> int:
    """Print human-readable metadata for a program."""
    try:
        info = ProgramLoader.describe(program_path)
    except (OSError, ValueError) as exc:
        print(f"Error reading program: {exc}", file=sys.stderr)
        return 1

    print("CHIP-8 Program Information")
    print("=" * 40)
    for key, value in info.items():
        label = key.replace("_", " ").title()
        print(f"  {label:20s}: {value}")
    print("=" * 40)
    return 0


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main(argv: Optional[list[str]] = None) -> int:
    """Application entry point.

    Parameters
    ----------
    argv:
        Command-line arguments.  ``None`` to use ``sys.argv``.

    Returns
    -------
    int
        Exit code (0 on success).
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.verbose)
    logger = logging.getLogger("chip8.main")

    # Validate the program path early.
    program_path: str = os.path.expanduser(args.program)
    if not os.path.isfile(program_path):
        print(f"Error: program file not found: {program_path}", file=sys.stderr)
        return 1

    # Info-only mode.
    if args.info:
        return _print_program_info(program_path)

    # Create the emulated machine.
    try:
        machine = MachineFactory.create(
            program_path,
            speed=args.speed,
            seed=args.seed,
        )
    except (OSError, ValueError) as exc:
        # ProgramTooLargeError is a ValueError.
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    logger.info("Starting emulation ...")
    window: Optional[Window] = None
    try:
        window = Window(
            machine,
            scale=args.scale,
            enable_audio=not args.no_audio,
            title=os.path.basename(program_path),
        )
        window.run()
    except KeyboardInterrupt:
        pass
    except Chip8Error as exc:
        print(f"Fatal error: {exc}", file=sys.stderr)
        return 1
    except Exception as exc:
        logger.exception("Fatal error during emulation")
        print(f"Fatal error: {exc}", file=sys.stderr)
        return 1

    if window is not None and window.fault is not None:
        print(f"Fatal error: {window.fault}", file=sys.stderr)
        return 1

    logger.info("Exited cleanly")
    return 0


if __name__ == "__main__":
    sys.exit(main())
