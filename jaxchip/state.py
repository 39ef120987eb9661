"""CHIP-8 emulator state structures."""

import jax
import jax.numpy as jnp
from flax.struct import dataclass, PyTreeNode, field

from jaxchip.constants import (
    PROGRAM_START, FONT_START, FONT_END, FONT_DATA, SCREEN_WIDTH, SCREEN_HEIGHT, STACK_SIZE,
    MEMORY_SIZE, NUM_REGISTERS, NUM_KEYS,
)
from jaxchip.errors import ErrorCode


@dataclass(frozen=True)
class StackState:
    """Stack state for subroutine calls."""
    data: jnp.ndarray
    pointer: jnp.ndarray


class EmulatorState(PyTreeNode):
    """Main CHIP-8 emulator state.

    The display is stored row-major, indexed ``display[y, x]``. ``running`` is
    cleared by fatal faults and by :func:`jaxchip.emulator.shutdown`; the fault
    itself is described by ``error``, ``error_pc`` and ``error_instruction``.
    """
    rng: jax.Array
    memory: jnp.ndarray
    pc: jnp.ndarray
    display: jnp.ndarray
    stack: StackState
    delay_timer: jnp.ndarray
    sound_timer: jnp.ndarray
    keypad: jnp.ndarray
    V: jnp.ndarray
    I: jnp.ndarray
    draw_flag: jnp.ndarray
    running: jnp.ndarray
    waiting_for_key: jnp.ndarray
    key_register: jnp.ndarray
    error: jnp.ndarray
    error_pc: jnp.ndarray
    error_instruction: jnp.ndarray
    wrap_sprites: bool = field(pytree_node=False, default=False)


def create_state(rng: jax.Array = jax.random.PRNGKey(0), wrap_sprites: bool = False) -> EmulatorState:
    """Create initial emulator state with font data loaded."""
    memory = jnp.zeros(MEMORY_SIZE, dtype=jnp.uint8)
    return EmulatorState(
        rng=rng,
        memory=memory.at[FONT_START:FONT_START + len(FONT_DATA)].set(FONT_DATA),
        pc=jnp.asarray(PROGRAM_START, dtype=jnp.uint16),
        display=jnp.zeros((SCREEN_HEIGHT, SCREEN_WIDTH), dtype=jnp.bool_),
        stack=StackState(
            data=jnp.zeros(STACK_SIZE, dtype=jnp.uint16),
            pointer=jnp.zeros((), dtype=jnp.int32),
        ),
        delay_timer=jnp.zeros((), dtype=jnp.uint8),
        sound_timer=jnp.zeros((), dtype=jnp.uint8),
        keypad=jnp.zeros(NUM_KEYS, dtype=jnp.bool_),
        V=jnp.zeros(NUM_REGISTERS, dtype=jnp.uint8),
        I=jnp.zeros((), dtype=jnp.uint16),
        draw_flag=jnp.zeros((), dtype=jnp.bool_),
        running=jnp.ones((), dtype=jnp.bool_),
        waiting_for_key=jnp.zeros((), dtype=jnp.bool_),
        key_register=jnp.zeros((), dtype=jnp.uint8),
        error=jnp.asarray(int(ErrorCode.NONE), dtype=jnp.uint8),
        error_pc=jnp.zeros((), dtype=jnp.uint16),
        error_instruction=jnp.zeros((), dtype=jnp.uint16),
        wrap_sprites=wrap_sprites,
    )


def next_instruction(state: EmulatorState) -> EmulatorState:
    """Advance PC past the current instruction."""
    return state.replace(pc=state.pc + 2)


def in_bounds(address: jnp.ndarray, length) -> jnp.ndarray:
    """True if ``length`` bytes starting at ``address`` lie inside memory."""
    return jnp.asarray(address, dtype=jnp.int32) + length <= MEMORY_SIZE


def writable(address: jnp.ndarray, length) -> jnp.ndarray:
    """True if ``length`` bytes starting at ``address`` may be written.

    The font glyphs below ``FONT_END`` are read-only.
    """
    start = jnp.asarray(address, dtype=jnp.int32)
    return (start >= FONT_END) & in_bounds(start, length)


def halt(state: EmulatorState, code: ErrorCode, instruction) -> EmulatorState:
    """Stop the machine and record a fatal fault at the current PC."""
    return state.replace(
        running=jnp.zeros((), dtype=jnp.bool_),
        error=jnp.asarray(int(code), dtype=jnp.uint8),
        error_pc=state.pc,
        error_instruction=jnp.asarray(instruction, dtype=jnp.uint16),
    )
