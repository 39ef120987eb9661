"""Console logging utilities for the emulator host.

Levelled, optionally colourised output with a run-time timestamp and a name
prefix, plus a helper that reports a faulted machine state.
"""

import time
import sys

from jaxchip.errors import ErrorCode, error_code


class ConsoleLogger:
    """Flexible console logger with level filtering and colours."""

    def __init__(
        self,
        name: str = "jaxchip",
        log_level: str = "INFO",
        use_colors: bool = True,
        show_timestamps: bool = True,
        stream=None,
    ):
        """Create a logger writing to ``stream`` (stdout by default).

        Colours are only used when the stream is a terminal.
        """
        self.name = name
        self.log_level = log_level.upper()
        self.stream = stream if stream is not None else sys.stdout
        self.use_colors = (
            use_colors and hasattr(self.stream, "isatty") and self.stream.isatty()
        )
        self.show_timestamps = show_timestamps
        self.start_time = time.time()

        self.colors = (
            {
                "DEBUG": "\033[36m",
                "INFO": "\033[32m",
                "WARNING": "\033[33m",
                "ERROR": "\033[31m",
                "CRITICAL": "\033[35m",
                "RESET": "\033[0m"
            }
            if self.use_colors
            else {
                k: ""
                for k in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL", "RESET"]
            }
        )

        self.level_order = {
            "DEBUG": 0,
            "INFO": 1,
            "WARNING": 2,
            "ERROR": 3,
            "CRITICAL": 4,
        }

    def _should_log(self, level: str) -> bool:
        """Check if message should be logged based on current log level."""
        return self.level_order.get(level.upper(), 1) >= self.level_order.get(
            self.log_level, 1
        )

    def _format_message(self, level: str, message: str) -> str:
        """Format log message with timestamp, level, and colors."""
        timestamp = (
            f"[{time.time() - self.start_time:8.2f}s]" if self.show_timestamps else ""
        )
        level_str = f"[{level:>8s}]"
        name_str = f"[{self.name}]"

        if self.use_colors:
            color = self.colors.get(level.upper(), "")
            reset = self.colors["RESET"]
            level_str = f"{color}{level_str}{reset}"

        return f"{timestamp}{level_str}{name_str} {message}"

    def log(self, level: str, message: str):
        """Log a message at the specified level."""
        if self._should_log(level):
            formatted = self._format_message(level, message)
            print(formatted, file=self.stream, flush=True)

    def debug(self, message: str):
        """Log debug message."""
        self.log("DEBUG", message)

    def info(self, message: str):
        """Log info message."""
        self.log("INFO", message)

    def warning(self, message: str):
        """Log warning message."""
        self.log("WARNING", message)

    def error(self, message: str):
        """Log error message."""
        self.log("ERROR", message)

    def critical(self, message: str):
        """Log critical message."""
        self.log("CRITICAL", message)


def format_registers(state) -> str:
    """One-line dump of V0-VF, I, PC and SP."""
    registers = " ".join(f"V{i:X}={int(value):02X}" for i, value in enumerate(state.V))
    return (
        f"{registers} I={int(state.I):03X} PC={int(state.pc):03X} "
        f"SP={int(state.stack.pointer)}"
    )


def report_fault(logger: ConsoleLogger, state) -> bool:
    """Log the fault recorded in ``state``. Returns True if there was one."""
    code = error_code(state)
    if code == ErrorCode.NONE:
        return False
    logger.error(
        f"{code.name} fault at PC=0x{int(state.error_pc):03X} "
        f"(instruction 0x{int(state.error_instruction):04X})"
    )
    logger.debug(format_registers(state))
    return True
