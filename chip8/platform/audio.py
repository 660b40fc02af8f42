"""
Audio output device.
Uses pygame.mixer to play the CHIP-8 buzzer.

The machine has a single tone generator: it sounds while the sound timer
is non-zero and is silent otherwise.  This module synthesises one period
of a 440 Hz square wave with numpy, wraps it in a looping
``pygame.mixer.Sound``, and starts or stops playback whenever
:attr:`Chip8.sound_active` changes.
"""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np
import pygame

logger = logging.getLogger(__name__)

TONE_HZ: float = 440.0
VOLUME: float = 0.05
SAMPLE_RATE: int = 44100

# Minimum pygame mixer buffer size (in samples).
_MIXER_BUFFER_SAMPLES: int = 512


def square_wave(
    frequency: float = TONE_HZ,
    sample_rate: int = SAMPLE_RATE,
    volume: float = VOLUME,
    channels: int = 1,
) -> np.ndarray:
    """Return one whole number of square-wave periods as signed 16-bit samples.

    The buffer covers roughly 100 ms so that looping it is seamless.  The
    first half of each period is high, the second half low.

    Returns
    -------
    numpy.ndarray
        Shape ``(n,)`` for mono or ``(n, channels)`` otherwise.
    """
    period = sample_rate / frequency
    periods = max(1, round(0.1 * frequency))
    n = int(round(period * periods))
    phase = (np.arange(n) * frequency / sample_rate) % 1.0
    amplitude = int(32767 * max(0.0, min(1.0, volume)))
    wave = np.where(phase < 0.5, amplitude, -amplitude).astype(np.int16)
    if channels > 1:
        wave = np.repeat(wave[:, np.newaxis], channels, axis=1)
    return wave


class AudioDevice:
    """Drive the buzzer from the machine's sound timer.

    Parameters
    ----------
    machine:
        The emulated machine.  Expected attribute:

        * ``sound_active`` -- ``bool``

    enabled:
        Set to ``False`` to create the device in a silent / no-op mode.
    """

    def __init__(self, machine: object, *, enabled: bool = True) -> None:
        self._machine = machine
        self._enabled: bool = enabled
        self._tone: Optional[pygame.mixer.Sound] = None
        self._channel: Optional[pygame.mixer.Channel] = None
        self._playing: bool = False

        if not self._enabled:
            logger.info("AudioDevice: disabled (silent mode)")
            return

        self._init_mixer()

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def playing(self) -> bool:
        return self._playing

    def update(self, muted: bool = False) -> None:
        """Start or stop the tone to match the machine's sound timer.

        Call this once per frame, after the machine has run.  With
        *muted* set the tone stops regardless of the sound timer.
        """
        active = not muted and bool(getattr(self._machine, "sound_active", False))
        if active == self._playing:
            return
        self._playing = active
        if not self._enabled or self._tone is None:
            return
        if active:
            self._channel = self._tone.play(loops=-1)
        else:
            self._tone.stop()
            self._channel = None

    def shutdown(self) -> None:
        """Stop playback and release the mixer."""
        self._shutdown_mixer()

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _init_mixer(self) -> None:
        """Initialise the pygame mixer and build the tone."""
        try:
            pygame.mixer.init(
                frequency=SAMPLE_RATE,
                size=-16,       # signed 16-bit
                channels=1,     # mono
                buffer=_MIXER_BUFFER_SAMPLES,
            )
        except pygame.error as exc:
            logger.warning("AudioDevice: mixer init failed (%s); running silent", exc)
            self._enabled = False
            return

        actual_freq, actual_size, actual_channels = pygame.mixer.get_init()
        samples = square_wave(sample_rate=actual_freq, channels=actual_channels)
        self._tone = pygame.sndarray.make_sound(samples)

        logger.info(
            "AudioDevice: mixer ready at %d Hz, %d-bit, %d ch (tone=%.0f Hz)",
            actual_freq,
            abs(actual_size),
            actual_channels,
            TONE_HZ,
        )

    def _shutdown_mixer(self) -> None:
        if self._tone is not None:
            self._tone.stop()
            self._tone = None
        self._channel = None
        self._playing = False
        if pygame.mixer.get_init():
            pygame.mixer.quit()
