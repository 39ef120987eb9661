"""CHIP-8 ALU operations (8xxx).

Each operation maps ``(vx, vy)`` to ``(result, flag)``. A ``None`` flag leaves
VF alone; otherwise VF is written after VX, so the flag wins when X is F.
"""

import jax
import jax.numpy as jnp
from jaxchip.state import EmulatorState, next_instruction
from jaxchip.decode import DecodedInstruction
from jaxchip.constants import FLAG_REGISTER
from jaxchip.instructions.system import execute_unknown


def alu_set(vx, vy):
    """8XY0 - Set: VX = VY."""
    return vy, None


def alu_or(vx, vy):
    """8XY1 - Binary OR: VX |= VY, VF reset."""
    return vx | vy, jnp.zeros_like(vx)


def alu_and(vx, vy):
    """8XY2 - Binary AND: VX &= VY, VF reset."""
    return vx & vy, jnp.zeros_like(vx)


def alu_xor(vx, vy):
    """8XY3 - Logical XOR: VX ^= VY, VF reset."""
    return vx ^ vy, jnp.zeros_like(vx)


def alu_add(vx, vy):
    """8XY4 - Add: VX += VY, VF = carry."""
    result = vx + vy
    return result & 0xFF, (result > 0xFF).astype(jnp.int32)


def alu_sub_xy(vx, vy):
    """8XY5 - Subtract: VX -= VY, VF = not borrow."""
    return (vx - vy) & 0xFF, (vx >= vy).astype(jnp.int32)


def alu_shift_right(vx, vy):
    """8XY6 - Shift right: VX >>= 1, VF = bit shifted out."""
    return vx >> 1, vx & 1


def alu_sub_yx(vx, vy):
    """8XY7 - Subtract: VX = VY - VX, VF = not borrow."""
    return (vy - vx) & 0xFF, (vy >= vx).astype(jnp.int32)


def alu_shift_left(vx, vy):
    """8XYE - Shift left: VX <<= 1, VF = bit shifted out."""
    return (vx << 1) & 0xFF, (vx >> 7) & 1


def make_alu_instruction(operation):
    """Wrap an ALU operation into a state handler."""
    def alu_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
        vx = state.V[instruction.x].astype(jnp.int32)
        vy = state.V[instruction.y].astype(jnp.int32)
        result, flag = operation(vx, vy)

        new_V = state.V.at[instruction.x].set(result.astype(jnp.uint8))
        if flag is not None:
            new_V = new_V.at[FLAG_REGISTER].set(flag.astype(jnp.uint8))
        return next_instruction(state.replace(V=new_V))
    return alu_instruction


# Indexed by the low nibble.
ALU_TABLE = [
    make_alu_instruction(alu_set),
    make_alu_instruction(alu_or),
    make_alu_instruction(alu_and),
    make_alu_instruction(alu_xor),
    make_alu_instruction(alu_add),
    make_alu_instruction(alu_sub_xy),
    make_alu_instruction(alu_shift_right),
    make_alu_instruction(alu_sub_yx),
] + [execute_unknown] * 6 + [make_alu_instruction(alu_shift_left), execute_unknown]


def execute_alu_operation(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """8XYN - ALU operations dispatcher."""
    return jax.lax.switch(instruction.n, ALU_TABLE, state, instruction)
