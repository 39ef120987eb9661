"""CHIP-8 instruction fetch and field extraction.

Primary dispatch uses ``opcode``; the secondary tables key on ``n`` (families
0 and 8) or on the whole ``nn`` byte (families E and F).
"""

import jax.numpy as jnp
from chex import dataclass


@dataclass(frozen=True)
class DecodedInstruction:
    """Instruction word split into its operand fields."""
    raw: int
    opcode: int  # bits 15-12, selects the family
    x: int       # bits 11-8, VX register
    y: int       # bits 7-4, VY register
    n: int       # bits 3-0, sprite height / sub-operation
    nn: int      # bits 7-0, immediate byte / sub-operation
    nnn: int     # bits 11-0, address


def _pack_u16(high: jnp.ndarray, low: jnp.ndarray) -> jnp.ndarray:
    """Combine two bytes big-endian."""
    return (high.astype(jnp.uint16) << 8) | low.astype(jnp.uint16)


def fetch(state) -> jnp.ndarray:
    """Read the instruction word at PC. Does not advance PC."""
    pc = state.pc.astype(jnp.int32)
    return _pack_u16(state.memory[pc], state.memory[pc + 1])


def decode(instruction) -> DecodedInstruction:
    """Split a 16-bit word; works on Python ints and traced arrays alike."""
    return DecodedInstruction(
        raw=instruction,
        opcode=(instruction & 0xF000) >> 12,
        x=(instruction & 0x0F00) >> 8,
        y=(instruction & 0x00F0) >> 4,
        n=instruction & 0x000F,
        nn=instruction & 0x00FF,
        nnn=instruction & 0x0FFF,
    )
