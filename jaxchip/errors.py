"""Fault codes recorded in the emulator state and their host-side exceptions."""

from enum import IntEnum


class ErrorCode(IntEnum):
    """Fatal condition stored in ``EmulatorState.error``."""
    NONE = 0
    DECODE = 1
    STACK_OVERFLOW = 2
    STACK_UNDERFLOW = 3
    MEMORY = 4


class Chip8Error(Exception):
    """Base class for all emulator faults."""


class RomLoadError(Chip8Error):
    """ROM could not be loaded in full."""


class MachineFault(Chip8Error):
    """Fatal fault raised while executing an instruction."""

    code = ErrorCode.NONE
    description = "machine fault"

    def __init__(self, pc: int, instruction: int):
        self.pc = pc
        self.instruction = instruction
        super().__init__(f"{self.description} at PC=0x{pc:03X} (instruction 0x{instruction:04X})")


class DecodeError(MachineFault):
    code = ErrorCode.DECODE
    description = "unknown instruction"


class StackOverflowError(MachineFault):
    code = ErrorCode.STACK_OVERFLOW
    description = "call stack overflow"


class StackUnderflowError(MachineFault):
    code = ErrorCode.STACK_UNDERFLOW
    description = "return with empty call stack"


class MemoryAccessError(MachineFault):
    code = ErrorCode.MEMORY
    description = "memory access out of range"


_FAULTS = {cls.code: cls for cls in (DecodeError, StackOverflowError, StackUnderflowError, MemoryAccessError)}


def error_code(state) -> ErrorCode:
    """Return the fault code recorded in ``state``."""
    return ErrorCode(int(state.error))


def raise_for_error(state) -> None:
    """Raise the exception matching the fault recorded in ``state``, if any."""
    code = error_code(state)
    if code == ErrorCode.NONE:
        return
    raise _FAULTS[code](int(state.error_pc), int(state.error_instruction))
