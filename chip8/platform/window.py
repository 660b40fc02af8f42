"""
Main application window.
Uses pygame to create a display, drive the emulation main loop, and
coordinate audio, video, and input subsystems.

Typical usage::

    from chip8.platform.window import Window

    machine = MachineFactory.create("pong.ch8")
    window = Window(machine, scale=10)
    window.run()
"""

from __future__ import annotations

import logging
import time
from typing import Optional

import pygame

from chip8.core.errors import ExecutionFault
from chip8.platform.audio import AudioDevice
from chip8.platform.input_handler import InputHandler
from chip8.shell.frame_renderer import FrameRenderer

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_WINDOW_TITLE: str = "CHIP-8"

# Minimum / maximum allowed display scale factors.
_MIN_SCALE: int = 1
_MAX_SCALE: int = 32

# Host frame rate.  The machine runs ``speed // FRAME_HZ`` instructions
# per frame.
FRAME_HZ: int = 60


class Window:
    """Pygame window that owns the emulation main loop.

    Parameters
    ----------
    machine:
        A :class:`~chip8.core.machine.Chip8` instance.
    scale:
        Integer scale factor applied to the native 64x32 resolution.
    enable_audio:
        Set to ``False`` to mute sound output entirely.
    title:
        Text shown in the title bar, usually the program name.
    """

    def __init__(
        self,
        machine: object,
        scale: int = 10,
        *,
        enable_audio: bool = True,
        title: Optional[str] = None,
    ) -> None:
        # ---- basic state -------------------------------------------------
        self._machine = machine
        self._scale: int = max(_MIN_SCALE, min(_MAX_SCALE, scale))
        self._running: bool = False
        self._paused: bool = False
        self._title: str = f"{_WINDOW_TITLE} - {title}" if title else _WINDOW_TITLE
        self._fault: Optional[ExecutionFault] = None

        # ---- init pygame display -----------------------------------------
        if not pygame.get_init():
            pygame.init()

        self._frame_renderer: FrameRenderer = FrameRenderer(machine)
        self._display_width: int = self._frame_renderer.width * self._scale
        self._display_height: int = self._frame_renderer.height * self._scale

        self._screen: pygame.Surface = pygame.display.set_mode(
            (self._display_width, self._display_height),
            pygame.RESIZABLE,
        )
        pygame.display.set_caption(self._title)

        self._clock: pygame.time.Clock = pygame.time.Clock()

        # ---- subsystems --------------------------------------------------
        self._audio: AudioDevice = AudioDevice(machine, enabled=enable_audio)
        self._input: InputHandler = InputHandler(machine)

        # ---- performance counters ----------------------------------------
        self._frame_count: int = 0
        self._fps_update_time: float = 0.0
        self._fps_display: float = 0.0

        logger.info(
            "Window: %dx%d display (scale=%d, %d Hz)",
            self._display_width,
            self._display_height,
            self._scale,
            FRAME_HZ,
        )

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def running(self) -> bool:
        return self._running

    @property
    def paused(self) -> bool:
        return self._paused

    @paused.setter
    def paused(self, value: bool) -> None:
        self._paused = value

    @property
    def scale(self) -> int:
        return self._scale

    @property
    def fps(self) -> float:
        """The measured frames-per-second (updated once per second)."""
        return self._fps_display

    @property
    def fault(self) -> Optional[ExecutionFault]:
        """The fault that stopped emulation, if any."""
        return self._fault

    # ------------------------------------------------------------------
    # Main loop
    # ------------------------------------------------------------------

    def run(self) -> None:
        """Enter the main emulation loop.

        This method blocks until the user closes the window, presses
        Escape, or the machine faults.  Each iteration:

        1. Polls input events and forwards them to the machine.
        2. Runs one frame worth of instructions.
        3. Starts or stops the buzzer.
        4. Presents the display if it changed.
        5. Throttles to the frame rate.
        """
        self._running = True
        self._fps_update_time = time.monotonic()
        self._frame_count = 0

        logger.info("Entering main loop (target %d fps)", FRAME_HZ)

        try:
            self._present()
            while self._running:
                self._tick()
        except KeyboardInterrupt:
            logger.info("Interrupted by user")
        finally:
            self._shutdown()

    # ------------------------------------------------------------------
    # Per-frame tick
    # ------------------------------------------------------------------

    def _tick(self) -> None:
        """Execute one iteration of the main loop."""
        # ---- input -------------------------------------------------------
        self._input.poll()
        if self._input.quit_requested:
            self._running = False
            return
        if self._input.take_pause_toggle():
            self._paused = not self._paused
            logger.info("Paused" if self._paused else "Resumed")

        # ---- emulation ---------------------------------------------------
        dirty = False
        if not self._paused:
            try:
                dirty = self._machine.run_frame(FRAME_HZ)  # type: ignore[attr-defined]
            except ExecutionFault as fault:
                logger.error("Emulation stopped: %s", fault)
                self._fault = fault
                self._running = False
                return

        # ---- audio -------------------------------------------------------
        self._audio.update(muted=self._paused)

        # ---- video -------------------------------------------------------
        if dirty or self._screen.get_size() != (self._display_width, self._display_height):
            self._present()

        # ---- timing ------------------------------------------------------
        self._clock.tick(FRAME_HZ)
        self._update_fps()

    def _present(self) -> None:
        """Render the display buffer and flip it to the screen."""
        surface = self._frame_renderer.render()

        # Scale to display size.  If the window has been resized, adjust to
        # the new dimensions.
        current_size = self._screen.get_size()
        self._display_width, self._display_height = current_size
        scaled = pygame.transform.scale(surface, current_size)
        self._screen.blit(scaled, (0, 0))
        pygame.display.flip()

    # ------------------------------------------------------------------
    # FPS tracking
    # ------------------------------------------------------------------

    def _update_fps(self) -> None:
        """Update the displayed FPS counter roughly once per second."""
        self._frame_count += 1
        now = time.monotonic()
        elapsed = now - self._fps_update_time
        if elapsed >= 1.0:
            self._fps_display = self._frame_count / elapsed
            self._frame_count = 0
            self._fps_update_time = now
            pygame.display.set_caption(f"{self._title}  [{self._fps_display:.1f} fps]")

    # ------------------------------------------------------------------
    # Shutdown
    # ------------------------------------------------------------------

    def _shutdown(self) -> None:
        """Clean up all subsystems."""
        logger.info("Shutting down")
        self._audio.shutdown()
        pygame.quit()
