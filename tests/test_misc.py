"""Tests for miscellaneous instructions (Fxxx)."""

import jax.numpy as jnp
import pytest
from jaxchip import execute, error_code, ErrorCode, FONT_DATA


class TestTimers:
    """Test timer-related instructions."""

    def test_misc_timer_instructions(self, fresh_state):
        """Test timer set and get operations."""
        state = execute(fresh_state, 0x6030)  # V0 = 48
        state = execute(state, 0xF015)  # Set delay timer to V0
        assert state.delay_timer == 48

        state = execute(state, 0x6120)  # V1 = 32
        state = execute(state, 0xF118)  # Set sound timer to V1
        assert state.sound_timer == 32

        state = execute(state, 0xF207)  # V2 = delay timer
        assert state.V[2] == 48
        assert state.pc == 0x20A


class TestBCD:
    """Test BCD conversion."""

    @pytest.mark.parametrize("value, digits", [(234, (2, 3, 4)), (156, (1, 5, 6)), (0, (0, 0, 0)), (255, (2, 5, 5)), (7, (0, 0, 7))])
    def test_misc_bcd_conversion(self, fresh_state, value, digits):
        state = execute(fresh_state, 0x6000 | value)
        state = execute(state, 0xA300)
        state = execute(state, 0xF033)

        assert tuple(int(d) for d in state.memory[0x300:0x303]) == digits
        assert state.I == 0x300

    def test_bcd_at_end_of_memory(self, fresh_state):
        """The last three bytes are a valid BCD target."""
        state = execute(fresh_state, 0x60EA)  # 234
        state = execute(state, 0xAFFD)
        state = execute(state, 0xF033)

        assert state.running
        assert tuple(int(d) for d in state.memory[0xFFD:]) == (2, 3, 4)

    def test_bcd_out_of_range(self, fresh_state):
        """FX33 writing past 0xFFF is a memory fault."""
        state = execute(fresh_state, 0xAFFE)
        memory_before = state.memory

        state = execute(state, 0xF033)

        assert not state.running
        assert error_code(state) == ErrorCode.MEMORY
        assert (state.memory == memory_before).all()


class TestFont:
    """Test font character addressing."""

    def test_font_all_characters(self, fresh_state):
        """Glyphs are 5 bytes apart starting at 0x000."""
        state = fresh_state
        for digit in range(16):
            state = execute(state, 0x6000 | digit)
            state = execute(state, 0xF029)
            assert state.I == digit * 5, f"Font address wrong for digit {digit:X}"

    def test_font_uses_low_nibble(self, fresh_state):
        state = execute(fresh_state, 0x601A)
        state = execute(state, 0xF029)
        assert state.I == 0xA * 5

    def test_font_data_loaded(self, fresh_state):
        assert [int(b) for b in fresh_state.memory[0:5]] == [0xF0, 0x90, 0x90, 0x90, 0xF0]
        assert [int(b) for b in fresh_state.memory[75:80]] == [0xF0, 0x80, 0xF0, 0x80, 0x80]


class TestIndexArithmetic:
    """FX1E."""

    def test_add_to_index(self, fresh_state):
        state = execute(fresh_state, 0x6010)
        state = execute(state, 0xA300)
        state = execute(state, 0xF01E)

        assert state.I == 0x310
        assert state.V[15] == 0

    def test_add_to_index_overflow(self, fresh_state):
        """I is not wrapped; VF reports leaving the address space."""
        state = execute(fresh_state, 0x60FF)
        state = execute(state, 0xAF80)
        state = execute(state, 0xF01E)

        assert state.I == 0xF80 + 0xFF
        assert state.V[15] == 1
        assert state.running

    def test_overflowed_index_faults_on_use(self, fresh_state):
        state = execute(fresh_state, 0x60FF)
        state = execute(state, 0xAF80)
        state = execute(state, 0xF01E)

        state = execute(state, 0xF065)

        assert error_code(state) == ErrorCode.MEMORY

    def test_index_saturates_instead_of_wrapping(self, fresh_state):
        """An I already past 0xFFF stays out of range after FX1E."""
        state = fresh_state.replace(I=jnp.asarray(0xFFF0, dtype=jnp.uint16))
        state = execute(state, 0x60FF)

        state = execute(state, 0xF01E)

        assert state.I == 0xFFFF
        assert state.V[0xF] == 1

        state = execute(state, 0xF055)
        assert error_code(state) == ErrorCode.MEMORY


class TestMemoryOperations:
    """Test store/load register operations."""

    def test_store_load_round_trip(self, fresh_state):
        """FX55/FX65 with X=3 move V0..V3 and advance I by 4."""
        state = fresh_state
        for register, value in enumerate([0x11, 0x22, 0x33, 0x44, 0x55]):
            state = execute(state, 0x6000 | (register << 8) | value)
        state = execute(state, 0xA400)

        state = execute(state, 0xF355)
        assert state.I == 0x404
        assert [int(b) for b in state.memory[0x400:0x405]] == [0x11, 0x22, 0x33, 0x44, 0x00]

        state = state.replace(V=state.V.at[0:5].set(0))
        state = execute(state, 0xA400)
        state = execute(state, 0xF365)

        assert [int(v) for v in state.V[0:5]] == [0x11, 0x22, 0x33, 0x44, 0x00]
        assert state.I == 0x404

    def test_store_all_registers(self, fresh_state):
        """FX55 with X=F includes VF."""
        state = fresh_state.replace(V=fresh_state.V.at[15].set(0xAB))
        state = execute(state, 0xA500)

        state = execute(state, 0xFF55)

        assert state.memory[0x50F] == 0xAB
        assert state.I == 0x510

    def test_store_out_of_range(self, fresh_state):
        """FX55 running past 0xFFF faults without writing anything."""
        state = execute(fresh_state, 0xAFF8)
        memory_before = state.memory

        state = execute(state, 0xFF55)

        assert not state.running
        assert error_code(state) == ErrorCode.MEMORY
        assert state.I == 0xFF8
        assert (state.memory == memory_before).all()

    def test_load_out_of_range(self, fresh_state):
        state = execute(fresh_state, 0xAFFF)

        state = execute(state, 0xF165)

        assert error_code(state) == ErrorCode.MEMORY
        assert state.error_instruction == 0xF165


class TestWaitForKey:
    """FX0A only suspends; resumption is covered in test_emulator."""

    def test_wait_sets_suspended_state(self, fresh_state):
        state = execute(fresh_state, 0xF70A)

        assert state.waiting_for_key
        assert state.key_register == 7
        assert state.pc == 0x202


class TestMiscInstructionDispatch:
    """Test misc instruction dispatch logic."""

    @pytest.mark.parametrize("instruction", [0xF000, 0xF008, 0xF019, 0xF030, 0xF075, 0xF0FF])
    def test_unknown_misc_instruction(self, fresh_state, instruction):
        state = execute(fresh_state, instruction)

        assert not state.running
        assert error_code(state) == ErrorCode.DECODE
        assert state.error_instruction == instruction


class TestFontProtection:
    """Writes through I must not touch the built-in glyphs."""

    @pytest.mark.parametrize("address", [0x000, 0x010, 0x04D, 0x04F])
    def test_bcd_into_font_faults(self, fresh_state, address):
        state = execute(fresh_state, 0x60FF)
        state = execute(state, 0xA000 | address)

        state = execute(state, 0xF033)

        assert not state.running
        assert error_code(state) == ErrorCode.MEMORY
        assert (state.memory[:80] == FONT_DATA).all()

    @pytest.mark.parametrize("address", [0x000, 0x010, 0x04D])
    def test_store_into_font_faults(self, fresh_state, address):
        state = fresh_state.replace(V=fresh_state.V.at[:].set(0xAA))
        state = execute(state, 0xA000 | address)

        state = execute(state, 0xFF55)

        assert not state.running
        assert error_code(state) == ErrorCode.MEMORY
        assert state.I == address
        assert (state.memory[:80] == FONT_DATA).all()

    def test_store_ending_inside_font_faults(self, fresh_state):
        """The block start is below the font end even though it ends past it."""
        state = execute(fresh_state, 0xA04C)

        state = execute(state, 0xF755)

        assert error_code(state) == ErrorCode.MEMORY
        assert (state.memory[:80] == FONT_DATA).all()

    def test_writes_just_past_font_succeed(self, fresh_state):
        state = execute(fresh_state, 0x60FF)
        state = execute(state, 0xA050)
        state = execute(state, 0xF033)
        assert state.running
        assert [int(b) for b in state.memory[0x50:0x53]] == [2, 5, 5]

        state = execute(state, 0xA050)
        state = execute(state, 0xF055)
        assert state.running
        assert state.memory[0x50] == 0xFF
        assert state.I == 0x051
        assert (state.memory[:80] == FONT_DATA).all()

    def test_font_still_readable(self, fresh_state):
        state = execute(fresh_state, 0xA000)

        state = execute(state, 0xF465)

        assert state.running
        assert [int(v) for v in state.V[:5]] == [0xF0, 0x90, 0x90, 0x90, 0xF0]
