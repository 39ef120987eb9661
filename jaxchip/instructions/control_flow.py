"""CHIP-8 control flow instructions."""

import jax
import jax.numpy as jnp
from jaxchip.state import EmulatorState, halt
from jaxchip.decode import DecodedInstruction
from jaxchip.errors import ErrorCode
from jaxchip.stack import push, is_full
from jaxchip.instructions.system import execute_unknown


def execute_jump(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """1NNN - Jump to address NNN."""
    return state.replace(pc=jnp.asarray(instruction.nnn, dtype=jnp.uint16))


def execute_call(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """2NNN - Call subroutine at NNN."""
    def _call(state):
        state = state.replace(stack=push(state.stack, state.pc))
        return execute_jump(state, instruction)

    return jax.lax.cond(
        is_full(state.stack),
        lambda state: halt(state, ErrorCode.STACK_OVERFLOW, instruction.raw),
        _call,
        state
    )


def make_skip_instruction(condition_fn):
    """Factory for skip instructions."""
    def skip_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
        condition = condition_fn(state, instruction)
        step = jnp.where(condition, 4, 2).astype(jnp.uint16)
        return state.replace(pc=state.pc + step)
    return skip_instruction


execute_skip_if_equal_immediate = make_skip_instruction(
    lambda state, inst: state.V[inst.x] == inst.nn
)

execute_skip_if_not_equal_immediate = make_skip_instruction(
    lambda state, inst: state.V[inst.x] != inst.nn
)

execute_skip_if_equal_register = make_skip_instruction(
    lambda state, inst: state.V[inst.x] == state.V[inst.y]
)

execute_skip_if_not_equal_register = make_skip_instruction(
    lambda state, inst: state.V[inst.x] != state.V[inst.y]
)


def execute_jump_with_offset(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """BNNN - Jump to address NNN + V0."""
    jump_address = jnp.asarray(instruction.nnn, dtype=jnp.uint16) + state.V[0].astype(jnp.uint16)
    return state.replace(pc=jump_address)


def _pressed(state: EmulatorState, instruction: DecodedInstruction) -> jnp.ndarray:
    return state.keypad[state.V[instruction.x] & 0xF]


execute_skip_if_key = make_skip_instruction(_pressed)

execute_skip_if_not_key = make_skip_instruction(
    lambda state, inst: ~_pressed(state, inst)
)

KEY_BRANCHES = [execute_skip_if_key, execute_skip_if_not_key, execute_unknown]
KEY_INDEX = jnp.full(256, len(KEY_BRANCHES) - 1, dtype=jnp.int32).at[0x9E].set(0).at[0xA1].set(1)


def execute_key_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """EX9E/EXA1 - Skip if key pressed/not pressed."""
    return jax.lax.switch(KEY_INDEX[instruction.nn], KEY_BRANCHES, state, instruction)
