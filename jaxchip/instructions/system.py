"""CHIP-8 system instructions (0x0xxx) and the decode-fault handler."""

import jax
import jax.numpy as jnp
from jaxchip.state import EmulatorState, halt, next_instruction
from jaxchip.decode import DecodedInstruction
from jaxchip.errors import ErrorCode
from jaxchip.stack import pop, is_empty


def execute_unknown(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """Instruction outside the documented set: stop with a decode fault."""
    return halt(state, ErrorCode.DECODE, instruction.raw)


def execute_clear_screen(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """00E0 - Clear display."""
    state = state.replace(
        display=jnp.zeros_like(state.display),
        draw_flag=jnp.ones((), dtype=jnp.bool_),
    )
    return next_instruction(state)


def execute_return(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """00EE - Return from subroutine."""
    def _return(state):
        stack, address = pop(state.stack)
        return next_instruction(state.replace(stack=stack, pc=address))

    return jax.lax.cond(
        is_empty(state.stack),
        lambda state: halt(state, ErrorCode.STACK_UNDERFLOW, instruction.raw),
        _return,
        state
    )


# Indexed by the low nibble.
SYSTEM_TABLE = [execute_clear_screen] + [execute_unknown] * 13 + [execute_return, execute_unknown]


def execute_system_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """Dispatch system instructions."""
    return jax.lax.switch(instruction.n, SYSTEM_TABLE, state, instruction)
