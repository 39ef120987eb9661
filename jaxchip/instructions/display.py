"""CHIP-8 display operations."""

import jax
import jax.numpy as jnp
from jaxchip.state import EmulatorState, halt, in_bounds, next_instruction
from jaxchip.decode import DecodedInstruction
from jaxchip.errors import ErrorCode
from jaxchip.constants import SCREEN_WIDTH, SCREEN_HEIGHT, SPRITE_WIDTH, MEMORY_SIZE, FLAG_REGISTER

# Pre-computed coordinate grids for display operations, row-major
yy, xx = jnp.meshgrid(jnp.arange(SCREEN_HEIGHT), jnp.arange(SCREEN_WIDTH), indexing='ij')


def sprite_mask(state: EmulatorState, instruction: DecodedInstruction) -> jnp.ndarray:
    """Boolean screen-sized mask of the pixels a DXYN sprite toggles.

    The origin is reduced modulo the screen size. Pixels running past the
    right or bottom edge are clipped, or wrapped when ``state.wrap_sprites``.
    """
    sprite_x = state.V[instruction.x].astype(jnp.int32) % SCREEN_WIDTH
    sprite_y = state.V[instruction.y].astype(jnp.int32) % SCREEN_HEIGHT

    col_offset = xx - sprite_x
    row_offset = yy - sprite_y
    if state.wrap_sprites:
        col_offset = col_offset % SCREEN_WIDTH
        row_offset = row_offset % SCREEN_HEIGHT

    in_sprite = (
        (col_offset >= 0) & (col_offset < SPRITE_WIDTH)
        & (row_offset >= 0) & (row_offset < instruction.n)
    )

    addresses = jnp.clip(state.I.astype(jnp.int32) + jnp.clip(row_offset, 0, 15), 0, MEMORY_SIZE - 1)
    sprite_bytes = state.memory[addresses].astype(jnp.int32)
    bits = (sprite_bytes >> (7 - jnp.clip(col_offset, 0, SPRITE_WIDTH - 1))) & 1
    return (bits == 1) & in_sprite


def execute_display(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """DXYN - Draw sprite at (VX, VY) with height N."""
    def _draw(state):
        sprite = sprite_mask(state, instruction)
        collision = jnp.any(state.display & sprite)
        state = state.replace(
            display=state.display ^ sprite,
            V=state.V.at[FLAG_REGISTER].set(collision.astype(jnp.uint8)),
            draw_flag=jnp.ones((), dtype=jnp.bool_),
        )
        return next_instruction(state)

    return jax.lax.cond(
        in_bounds(state.I, instruction.n),
        _draw,
        lambda state: halt(state, ErrorCode.MEMORY, instruction.raw),
        state
    )
