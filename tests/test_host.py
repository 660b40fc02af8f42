"""Tests for the host layer: loading, rendering, audio synthesis, input and CLI."""

import numpy as np
import pygame
import pytest

import main as cli
from chip8.core.errors import ProgramTooLargeError
from chip8.core.machine import Chip8
from chip8.core.types import Key
from chip8.platform.audio import AudioDevice, square_wave
from chip8.platform.input_handler import InputHandler, keypad_key_for
from chip8.platform.window import Window
from chip8.shell.frame_renderer import FrameRenderer
from chip8.shell.services.machine_factory import MachineFactory
from chip8.shell.services.program_loader import ProgramLoader
from conftest import assemble


@pytest.fixture
def program_file(tmp_path):
    path = tmp_path / "spin.ch8"
    path.write_bytes(assemble(0xC0FF, 0x1202))
    return path


class RecordingMachine:
    def __init__(self):
        self.events = []

    def press(self, key):
        self.events.append(("press", int(key)))

    def release(self, key):
        self.events.append(("release", int(key)))


def _key_event(kind, scancode, key=0):
    return pygame.event.Event(kind, key=key, scancode=scancode, mod=0)


class TestProgramLoader:
    def test_read(self, program_file):
        assert ProgramLoader.read(str(program_file)) == assemble(0xC0FF, 0x1202)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ProgramLoader.read(str(tmp_path / "nope.ch8"))

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.ch8"
        path.write_bytes(b"")
        with pytest.raises(ValueError):
            ProgramLoader.read(str(path))

    def test_too_large(self, tmp_path):
        path = tmp_path / "big.ch8"
        path.write_bytes(bytes(3585))
        with pytest.raises(ProgramTooLargeError):
            ProgramLoader.read(str(path))

    def test_describe(self, program_file):
        info = ProgramLoader.describe(str(program_file))
        assert info["title"] == "spin"
        assert info["size"] == "4 bytes"
        assert info["load_range"] == "0x200-0x203"
        assert info["free"] == "3580 bytes"
        assert info["odd_length"] == "no"


class TestMachineFactory:
    def test_create_is_repeatable_with_seed(self, program_file):
        a = MachineFactory.create(str(program_file), speed=500, seed=7)
        b = MachineFactory.create(str(program_file), speed=500, seed=7)
        a.step()
        b.step()
        assert a.speed == 500
        assert a.registers[0] == b.registers[0]


class TestInputHandler:
    def test_keypad_layout(self):
        assert keypad_key_for(pygame.KSCAN_1) == Key.K1
        assert keypad_key_for(pygame.KSCAN_4) == Key.KC
        assert keypad_key_for(pygame.KSCAN_Q) == Key.K4
        assert keypad_key_for(pygame.KSCAN_F) == Key.KE
        assert keypad_key_for(pygame.KSCAN_X) == Key.K0
        assert keypad_key_for(pygame.KSCAN_V) == Key.KF
        assert keypad_key_for(pygame.KSCAN_P) is None

    def test_press_release_and_repeat(self):
        machine = RecordingMachine()
        handler = InputHandler(machine)
        handler.handle_event(_key_event(pygame.KEYDOWN, pygame.KSCAN_W))
        handler.handle_event(_key_event(pygame.KEYDOWN, pygame.KSCAN_W))
        handler.handle_event(_key_event(pygame.KEYUP, pygame.KSCAN_W))
        assert machine.events == [("press", 5), ("release", 5)]

    def test_unmapped_keys_are_ignored(self):
        machine = RecordingMachine()
        handler = InputHandler(machine)
        handler.handle_event(_key_event(pygame.KEYDOWN, pygame.KSCAN_M))
        handler.handle_event(_key_event(pygame.KEYUP, pygame.KSCAN_M))
        assert machine.events == []

    def test_quit_and_pause(self):
        handler = InputHandler(RecordingMachine())
        handler.handle_event(_key_event(pygame.KEYDOWN, pygame.KSCAN_P, key=pygame.K_p))
        assert handler.take_pause_toggle() is True
        assert handler.take_pause_toggle() is False
        assert not handler.quit_requested
        handler.handle_event(_key_event(pygame.KEYDOWN, pygame.KSCAN_ESCAPE, key=pygame.K_ESCAPE))
        assert handler.quit_requested

    def test_window_close_requests_quit(self):
        handler = InputHandler(RecordingMachine())
        handler.handle_event(pygame.event.Event(pygame.QUIT))
        assert handler.quit_requested

    def test_clear_all_releases_held_keys(self):
        machine = RecordingMachine()
        handler = InputHandler(machine)
        handler.handle_event(_key_event(pygame.KEYDOWN, pygame.KSCAN_A))
        handler.clear_all()
        assert machine.events == [("press", 7), ("release", 7)]

    def test_drives_real_machine(self):
        vm = Chip8(assemble(0xF50A))
        handler = InputHandler(vm)
        handler.handle_event(_key_event(pygame.KEYDOWN, pygame.KSCAN_C))
        assert vm.keys[0xB]
        handler.handle_event(_key_event(pygame.KEYUP, pygame.KSCAN_C))
        vm.step()
        assert vm.registers[5] == 0xB


class TestFrameRenderer:
    def test_to_rgb(self):
        vm = Chip8(assemble(0x1200))
        vm.display.xor_pixel(3, 2, True)
        renderer = FrameRenderer(vm, foreground=0x33FF66, background=0x000010)
        rgb = renderer.to_rgb()
        assert rgb.shape == (32, 64, 3)
        assert rgb.dtype == np.uint8
        assert list(rgb[2, 3]) == [0x33, 0xFF, 0x66]
        assert list(rgb[0, 0]) == [0x00, 0x00, 0x10]

    def test_render_surface(self):
        vm = Chip8(assemble(0x1200))
        vm.display.xor_pixel(63, 31, True)
        renderer = FrameRenderer(vm)
        surface = renderer.render()
        assert surface.get_size() == (64, 32)
        assert tuple(surface.get_at((63, 31)))[:3] == (255, 255, 255)
        assert tuple(surface.get_at((0, 0)))[:3] == (0, 0, 0)


class TestAudio:
    def test_square_wave_shape(self):
        wave = square_wave(frequency=441.0, sample_rate=44100, volume=0.5)
        assert wave.dtype == np.int16
        assert wave.ndim == 1
        assert set(np.unique(wave).tolist()) == {-16383, 16383}
        # 44 whole periods of 100 samples each
        assert len(wave) == 4400
        assert wave[0] > 0
        assert wave[50] < 0

    def test_square_wave_stereo(self):
        wave = square_wave(channels=2)
        assert wave.shape[1] == 2
        assert (wave[:, 0] == wave[:, 1]).all()

    def test_silent_device_tracks_sound_timer(self):
        vm = Chip8(assemble(0x6002, 0xF018, 0x1204))
        device = AudioDevice(vm, enabled=False)
        device.update()
        assert not device.playing
        vm.step()
        vm.step()
        device.update()
        assert device.playing
        device.shutdown()

    def test_muted_update_stops_tone(self):
        vm = Chip8(assemble(0x6002, 0xF018, 0x1204))
        device = AudioDevice(vm, enabled=False)
        vm.step()
        vm.step()
        device.update()
        assert device.playing
        device.update(muted=True)
        assert not device.playing
        assert vm.sound_active
        device.update()
        assert device.playing


class TestWindow:
    def test_pause_silences_buzzer(self):
        vm = Chip8(assemble(0x6002, 0xF018, 0x1204))
        window = Window(vm, scale=2, enable_audio=False)
        try:
            window._tick()
            assert window._audio.playing
            window.paused = True
            window._tick()
            assert not window._audio.playing
            assert vm.sound_active
        finally:
            window._shutdown()


class TestCli:
    def test_missing_program(self, tmp_path, capsys):
        assert cli.main([str(tmp_path / "missing.ch8")]) == 1
        assert "not found" in capsys.readouterr().err

    def test_info(self, program_file, capsys):
        assert cli.main([str(program_file), "--info"]) == 0
        out = capsys.readouterr().out
        assert "Program Information" in out
        assert "0x200-0x203" in out

    def test_program_too_large(self, tmp_path, capsys):
        path = tmp_path / "big.ch8"
        path.write_bytes(bytes(4000))
        assert cli.main([str(path)]) == 1
        assert "program too large" in capsys.readouterr().err

    def test_rejects_non_positive_speed(self, program_file):
        with pytest.raises(SystemExit):
            cli.main([str(program_file), "--speed", "0"])
