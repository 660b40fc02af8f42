"""Unit tests for the leaf components of the core."""

import pytest

from chip8.core.display_buffer import DisplayBuffer
from chip8.core.font_tables import FONT, FONT_END, glyph_address
from chip8.core.input_state import InputState
from chip8.core.memory import Memory
from chip8.core.timers import Timers


class TestMemory:
    def test_writes_keep_low_byte(self):
        mem = Memory()
        mem[0x300] = 0x1FF
        assert mem[0x300] == 0xFF

    def test_fetch_word_is_big_endian(self):
        mem = Memory()
        mem.load(0x200, bytes([0xA2, 0xF0]))
        assert mem.fetch_word(0x200) == 0xA2F0

    @pytest.mark.parametrize("addr", [-1, 0x1000])
    def test_out_of_range_access(self, addr):
        mem = Memory()
        with pytest.raises(IndexError):
            mem[addr]
        with pytest.raises(IndexError):
            mem[addr] = 0

    def test_fetch_word_at_last_byte(self):
        with pytest.raises(IndexError):
            Memory().fetch_word(0xFFF)

    def test_load_past_end(self):
        with pytest.raises(IndexError):
            Memory().load(0xFFE, b"\x00\x00\x00")

    def test_check_range(self):
        mem = Memory()
        mem.check_range(0xFFD, 3)
        mem.check_range(0x1000, 0)
        with pytest.raises(IndexError):
            mem.check_range(0xFFE, 3)

    def test_read_block(self):
        mem = Memory()
        mem.load(0x400, b"abc")
        assert mem.read_block(0x400, 3) == b"abc"
        assert mem.read_block(0xFFF, 0) == b""
        with pytest.raises(IndexError):
            mem.read_block(0xFFF, 2)

    def test_reset(self):
        mem = Memory()
        mem.load(0, b"\x01" * 16)
        mem.reset()
        assert mem.read_block(0, 4096) == bytes(4096)


class TestDisplayBuffer:
    def test_xor_reports_turn_off_only(self):
        buf = DisplayBuffer()
        assert buf.xor_pixel(3, 4, True) is False
        assert buf.get_pixel(3, 4) is True
        assert buf.xor_pixel(3, 4, False) is False
        assert buf.get_pixel(3, 4) is True
        assert buf.xor_pixel(3, 4, True) is True
        assert buf.get_pixel(3, 4) is False

    def test_xor_wraps(self):
        buf = DisplayBuffer()
        buf.xor_pixel(64, 32, True)
        assert buf.get_pixel(0, 0)
        buf.xor_pixel(-1, -1, True)
        assert buf.get_pixel(63, 31)

    def test_row_major_layout(self):
        buf = DisplayBuffer()
        buf.xor_pixel(5, 2, True)
        assert buf.cells[2 * 64 + 5] is True

    def test_lit_count_and_clear(self):
        buf = DisplayBuffer()
        buf.xor_pixel(1, 31, True)
        assert buf.cells[31 * 64 + 1] is True
        assert buf.lit_count == 1
        buf.clear()
        assert buf.lit_count == 0

    def test_get_pixel_bounds(self):
        with pytest.raises(IndexError):
            DisplayBuffer().get_pixel(64, 0)


class TestInputState:
    def test_consume_release(self):
        state = InputState()
        state.release(6)
        assert state.consume_release() == 6
        assert state.consume_release() is None

    def test_clear_all_input(self):
        state = InputState()
        state.press(1)
        state.release(2)
        state.clear_all_input()
        assert state.keys == [False] * 16
        assert state.last_released_key is None


class TestTimers:
    def test_steps_per_tick_uses_integer_division(self):
        assert Timers(700).steps_per_tick == 11
        assert Timers(60).steps_per_tick == 1
        assert Timers(59).steps_per_tick == 0

    def test_tick_reports_decrement(self):
        timers = Timers(60)
        timers.delay = 2
        assert timers.tick() is False
        assert timers.tick() is True
        assert timers.delay == 1

    def test_never_negative(self):
        timers = Timers(1)
        for _ in range(10):
            timers.tick()
        assert timers.delay == 0
        assert timers.sound == 0


class TestFont:
    def test_table_layout(self):
        assert len(FONT) == 80
        assert FONT_END == 0x0A0
        assert glyph_address(0) == 0x050
        assert glyph_address(0xF) == 0x09B
        assert FONT[glyph_address(0xA) - 0x050] == 0xF0
