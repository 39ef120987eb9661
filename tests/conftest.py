"""Test configuration and fixtures for CHIP-8 emulator tests."""

import pytest
import jax.numpy as jnp
from jaxchip import create_state, load_rom


@pytest.fixture
def fresh_state():
    """Provide a fresh emulator state for each test."""
    return create_state()


@pytest.fixture
def wrap_state():
    """Provide a fresh state that wraps sprites around the screen edges."""
    return create_state(wrap_sprites=True)


def setup_sprite_in_memory(state, address, sprite_bytes):
    """Helper to put sprite data in memory."""
    return state.replace(
        memory=state.memory.at[address:address+len(sprite_bytes)].set(
            jnp.array(sprite_bytes, dtype=jnp.uint8)
        )
    )


def program(state, *instructions):
    """Helper to load a list of instruction words at 0x200."""
    rom = b"".join(word.to_bytes(2, "big") for word in instructions)
    return load_rom(state, rom)


NO_KEYS = jnp.zeros(16, dtype=jnp.bool_)


def keys(*pressed):
    """Keypad snapshot with the given keys held."""
    keypad = NO_KEYS
    for key in pressed:
        keypad = keypad.at[key].set(True)
    return keypad
