"""CHIP-8 miscellaneous instructions (Fxxx)."""

import jax
import jax.numpy as jnp
from jaxchip.state import EmulatorState, halt, in_bounds, writable, next_instruction
from jaxchip.decode import DecodedInstruction
from jaxchip.errors import ErrorCode
from jaxchip.constants import FONT_START, FONT_GLYPH_SIZE, MEMORY_SIZE, ADDRESS_MASK, FLAG_REGISTER, NUM_REGISTERS
from jaxchip.instructions.system import execute_unknown


def execute_get_delay_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX07 - Set VX to delay timer value."""
    return next_instruction(state.replace(V=state.V.at[instruction.x].set(state.delay_timer)))


def execute_wait_for_key(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX0A - Suspend until a key is pressed; the cycle driver stores it in VX."""
    state = state.replace(
        waiting_for_key=jnp.ones((), dtype=jnp.bool_),
        key_register=jnp.asarray(instruction.x, dtype=jnp.uint8),
    )
    return next_instruction(state)


def execute_set_delay_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX15 - Set delay timer to VX."""
    return next_instruction(state.replace(delay_timer=state.V[instruction.x]))


def execute_set_sound_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX18 - Set sound timer to VX."""
    return next_instruction(state.replace(sound_timer=state.V[instruction.x]))


def execute_add_to_index(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX1E - Add VX to I register, VF = 1 if the result leaves the address space.

    I saturates at 0xFFFF so an out-of-range address never wraps back into memory.
    """
    total = state.I.astype(jnp.int32) + state.V[instruction.x].astype(jnp.int32)
    overflow = (total > ADDRESS_MASK).astype(jnp.uint8)
    return next_instruction(state.replace(
        I=jnp.minimum(total, 0xFFFF).astype(jnp.uint16),
        V=state.V.at[FLAG_REGISTER].set(overflow)
    ))


def execute_font_character(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX29 - Set I to location of sprite for digit VX."""
    digit = state.V[instruction.x].astype(jnp.int32) & 0xF
    font_address = FONT_START + digit * FONT_GLYPH_SIZE
    return next_instruction(state.replace(I=font_address.astype(jnp.uint16)))


def execute_bcd_conversion(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX33 - Store BCD representation of VX at I, I+1, I+2.

    Faults if the three bytes fall outside memory or overlap the font.
    """
    def _store(state):
        value = state.V[instruction.x]
        digits = jnp.array([
            value // 100,
            (value // 10) % 10,
            value % 10
        ], dtype=jnp.uint8)

        indices = jnp.arange(3) + state.I.astype(jnp.int32)
        return next_instruction(state.replace(memory=state.memory.at[indices].set(digits)))

    return jax.lax.cond(
        writable(state.I, 3),
        _store,
        lambda state: halt(state, ErrorCode.MEMORY, instruction.raw),
        state
    )


def execute_store_registers(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX55 - Store V0 through VX in memory starting at I, then I += X + 1."""
    def _store(state):
        offsets = jnp.arange(MEMORY_SIZE) - state.I.astype(jnp.int32)
        in_block = (offsets >= 0) & (offsets <= instruction.x)
        values = state.V[jnp.clip(offsets, 0, NUM_REGISTERS - 1)]
        return next_instruction(state.replace(
            memory=jnp.where(in_block, values, state.memory),
            I=state.I + jnp.asarray(instruction.x + 1, dtype=jnp.uint16)
        ))

    return jax.lax.cond(
        writable(state.I, instruction.x + 1),
        _store,
        lambda state: halt(state, ErrorCode.MEMORY, instruction.raw),
        state
    )


def execute_load_registers(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX65 - Load V0 through VX from memory starting at I, then I += X + 1."""
    def _load(state):
        register_mask = jnp.arange(NUM_REGISTERS) <= instruction.x
        addresses = jnp.clip(state.I.astype(jnp.int32) + jnp.arange(NUM_REGISTERS), 0, MEMORY_SIZE - 1)
        return next_instruction(state.replace(
            V=jnp.where(register_mask, state.memory[addresses], state.V),
            I=state.I + jnp.asarray(instruction.x + 1, dtype=jnp.uint16)
        ))

    return jax.lax.cond(
        in_bounds(state.I, instruction.x + 1),
        _load,
        lambda state: halt(state, ErrorCode.MEMORY, instruction.raw),
        state
    )


MISC_BRANCHES = [
    execute_get_delay_timer,
    execute_wait_for_key,
    execute_set_delay_timer,
    execute_set_sound_timer,
    execute_add_to_index,
    execute_font_character,
    execute_bcd_conversion,
    execute_store_registers,
    execute_load_registers,
    execute_unknown,
]

# Full low byte -> position in MISC_BRANCHES; unmapped bytes hit execute_unknown.
MISC_INDEX = jnp.full(256, len(MISC_BRANCHES) - 1, dtype=jnp.int32)
for _index, _code in enumerate([0x07, 0x0A, 0x15, 0x18, 0x1E, 0x29, 0x33, 0x55, 0x65]):
    MISC_INDEX = MISC_INDEX.at[_code].set(_index)


def execute_misc_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """Dispatch misc instructions on the full low byte."""
    return jax.lax.switch(MISC_INDEX[instruction.nn], MISC_BRANCHES, state, instruction)
