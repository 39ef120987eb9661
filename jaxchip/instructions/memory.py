"""CHIP-8 register and index operations."""

import jax
import jax.numpy as jnp
from jaxchip.state import EmulatorState, next_instruction
from jaxchip.decode import DecodedInstruction


def execute_set(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """6XNN - Set VX = NN."""
    value = jnp.asarray(instruction.nn, dtype=jnp.uint8)
    return next_instruction(state.replace(V=state.V.at[instruction.x].set(value)))


def execute_add(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """7XNN - Add NN to VX, wrapping without touching VF."""
    total = (state.V[instruction.x].astype(jnp.int32) + instruction.nn) & 0xFF
    return next_instruction(state.replace(V=state.V.at[instruction.x].set(total.astype(jnp.uint8))))


def execute_set_index(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """ANNN - Set I = NNN."""
    return next_instruction(state.replace(I=jnp.asarray(instruction.nnn, dtype=jnp.uint16)))


def execute_random(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """CXNN - Set VX = random & NN."""
    key, subkey = jax.random.split(state.rng)
    random_value = jax.random.randint(subkey, shape=(), minval=0, maxval=256, dtype=jnp.int32)
    masked = (random_value & instruction.nn).astype(jnp.uint8)
    return next_instruction(state.replace(V=state.V.at[instruction.x].set(masked), rng=key))
