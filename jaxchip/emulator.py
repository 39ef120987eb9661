"""Main CHIP-8 emulator execution engine."""

import os
from functools import partial
from typing import Union

import jax
import jax.lax
import jax.numpy as jnp
import numpy as np

from jaxchip.state import EmulatorState, halt, in_bounds
from jaxchip.decode import decode, fetch
from jaxchip.constants import PROGRAM_START, MAX_ROM_SIZE
from jaxchip.errors import ErrorCode, RomLoadError
from jaxchip.instructions.system import execute_system_instruction
from jaxchip.instructions.control_flow import (
    execute_jump, execute_call, execute_skip_if_equal_immediate,
    execute_skip_if_not_equal_immediate, execute_skip_if_equal_register,
    execute_skip_if_not_equal_register, execute_jump_with_offset, execute_key_instruction
)
from jaxchip.instructions.alu import execute_alu_operation
from jaxchip.instructions.memory import execute_set, execute_add, execute_set_index, execute_random
from jaxchip.instructions.display import execute_display
from jaxchip.instructions.misc import execute_misc_instruction

# Indexed by the first nibble.
INSTRUCTION_TABLE = [
    execute_system_instruction,
    execute_jump,
    execute_call,
    execute_skip_if_equal_immediate,
    execute_skip_if_not_equal_immediate,
    execute_skip_if_equal_register,
    execute_set,
    execute_add,
    execute_alu_operation,
    execute_skip_if_not_equal_register,
    execute_set_index,
    execute_jump_with_offset,
    execute_random,
    execute_display,
    execute_key_instruction,
    execute_misc_instruction,
]


def execute(state: EmulatorState, instruction: int) -> EmulatorState:
    """Execute single CHIP-8 instruction located at the current PC."""
    decoded_instruction = decode(instruction)
    return jax.lax.switch(decoded_instruction.opcode, INSTRUCTION_TABLE, state, decoded_instruction)


def run_instruction(state: EmulatorState) -> EmulatorState:
    """Fetch and execute one instruction, faulting if PC points outside memory."""
    return jax.lax.cond(
        in_bounds(state.pc, 2),
        lambda state: execute(state, fetch(state)),
        lambda state: halt(state, ErrorCode.MEMORY, 0),
        state
    )


def _resume_on_key(state: EmulatorState, newly_pressed: jnp.ndarray) -> EmulatorState:
    """Complete a pending FX0A once a key goes from released to pressed."""
    def store_key(state):
        key = jnp.argmax(newly_pressed).astype(jnp.uint8)
        return state.replace(
            V=state.V.at[state.key_register].set(key),
            waiting_for_key=jnp.zeros((), dtype=jnp.bool_),
        )

    return jax.lax.cond(jnp.any(newly_pressed), store_key, lambda state: state, state)


def tick_timers(state: EmulatorState) -> EmulatorState:
    """Decrement both timers towards zero."""
    return state.replace(
        delay_timer=jnp.where(state.delay_timer > 0, state.delay_timer - 1, 0).astype(jnp.uint8),
        sound_timer=jnp.where(state.sound_timer > 0, state.sound_timer - 1, 0).astype(jnp.uint8),
    )


def step(state: EmulatorState, keypad: jnp.ndarray) -> tuple[EmulatorState, jnp.ndarray]:
    """Run one cycle: sample keypad, execute one instruction, tick timers.

    Args:
        state: Current emulator state
        keypad: 16 booleans, the host keypad snapshot for this cycle

    Returns:
        Tuple of (next state, whether the tone should be playing)
    """
    keypad = jnp.asarray(keypad, dtype=jnp.bool_)

    def cycle(state):
        newly_pressed = keypad & ~state.keypad
        state = state.replace(keypad=keypad)
        state = jax.lax.cond(
            state.waiting_for_key,
            lambda state: _resume_on_key(state, newly_pressed),
            run_instruction,
            state
        )
        sound_on = state.running & (state.sound_timer > 0)
        state = jax.lax.cond(state.running, tick_timers, lambda state: state, state)
        return state, sound_on

    return jax.lax.cond(
        state.running,
        cycle,
        lambda state: (state, jnp.zeros((), dtype=jnp.bool_)),
        state
    )


@partial(jax.jit, static_argnums=2)
def run_cycles(state: EmulatorState, keypad: jnp.ndarray, n: int) -> EmulatorState:
    """Run ``n`` cycles with a constant keypad snapshot."""
    def body(state, _):
        state, _ = step(state, keypad)
        return state, None

    state, _ = jax.lax.scan(body, state, length=n)
    return state


def is_running(state: EmulatorState) -> bool:
    return bool(state.running)


def needs_redraw(state: EmulatorState) -> bool:
    return bool(state.draw_flag)


def clear_draw_flag(state: EmulatorState) -> EmulatorState:
    """Mark the framebuffer as consumed by the render sink."""
    return state.replace(draw_flag=jnp.zeros((), dtype=jnp.bool_))


def framebuffer(state: EmulatorState) -> np.ndarray:
    """Copy of the display as a (32, 64) row-major array of 0/1 values."""
    return np.array(state.display, dtype=np.uint8)


def shutdown(state: EmulatorState) -> EmulatorState:
    """External stop signal: no further cycles mutate the state."""
    return state.replace(running=jnp.zeros((), dtype=jnp.bool_))


def read_rom(filename: Union[str, os.PathLike]) -> bytes:
    """Read a ROM file in full."""
    try:
        with open(filename, 'rb') as f:
            expected_size = os.fstat(f.fileno()).st_size
            rom_data = f.read()
    except OSError as e:
        raise RomLoadError(f"Cannot read ROM '{filename}': {e}") from e
    if len(rom_data) != expected_size:
        raise RomLoadError(
            f"Short read on ROM '{filename}': got {len(rom_data)} of {expected_size} bytes"
        )
    return rom_data


def load_rom(state: EmulatorState, rom: bytes) -> EmulatorState:
    """Load ROM data into CHIP-8 memory starting at 0x200."""
    rom_data = bytes(rom)
    if len(rom_data) > MAX_ROM_SIZE:
        raise RomLoadError(f"ROM is {len(rom_data)} bytes, at most {MAX_ROM_SIZE} fit in memory")
    if not rom_data:
        return state
    rom_array = jnp.array(np.frombuffer(rom_data, dtype=np.uint8))
    new_memory = state.memory.at[PROGRAM_START:PROGRAM_START + len(rom_data)].set(rom_array)
    return state.replace(memory=new_memory)
