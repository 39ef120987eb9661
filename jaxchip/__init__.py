"""CHIP-8 emulator package."""

from jaxchip.state import EmulatorState, StackState, create_state
from jaxchip.emulator import (
    execute, step, run_cycles, load_rom, read_rom,
    is_running, needs_redraw, clear_draw_flag, framebuffer, shutdown,
)
from jaxchip.decode import DecodedInstruction, decode, fetch
from jaxchip.errors import (
    ErrorCode, Chip8Error, RomLoadError, MachineFault, DecodeError,
    StackOverflowError, StackUnderflowError, MemoryAccessError,
    error_code, raise_for_error,
)
from jaxchip.constants import (
    MEMORY_SIZE, PROGRAM_START, MAX_ROM_SIZE, SCREEN_WIDTH, SCREEN_HEIGHT,
    FONT_START, FONT_END, FONT_DATA,
)

__all__ = [
    "EmulatorState",
    "StackState",
    "create_state",
    "fetch",
    "execute",
    "step",
    "run_cycles",
    "load_rom",
    "read_rom",
    "is_running",
    "needs_redraw",
    "clear_draw_flag",
    "framebuffer",
    "shutdown",
    "DecodedInstruction",
    "decode",
    "ErrorCode",
    "Chip8Error",
    "RomLoadError",
    "MachineFault",
    "DecodeError",
    "StackOverflowError",
    "StackUnderflowError",
    "MemoryAccessError",
    "error_code",
    "raise_for_error",
    "MEMORY_SIZE",
    "PROGRAM_START",
    "MAX_ROM_SIZE",
    "SCREEN_WIDTH",
    "SCREEN_HEIGHT",
    "FONT_START",
    "FONT_END",
    "FONT_DATA",
]
