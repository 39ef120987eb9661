"""
Run a CHIP-8 ROM in a pygame window.
"""

import argparse
import sys

from jaxchip.frontend import run_emulator
from jaxchip.logging import ConsoleLogger


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="CHIP-8 emulator")
    parser.add_argument("rom", help="Path to the ROM image")
    parser.add_argument("--scale", type=int, default=10, help="Window pixels per CHIP-8 pixel")
    parser.add_argument("--ipf", type=int, default=9, help="Cycles per 60 Hz frame")
    parser.add_argument("--seed", type=int, default=0, help="Seed for the random instruction")
    parser.add_argument("--wrap-sprites", action="store_true",
                        help="Wrap sprites around the screen edges instead of clipping")
    parser.add_argument("--color-scheme", default="classic",
                        choices=["classic", "amber", "white", "blue", "retro"])
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])
    return parser.parse_args(argv)


if __name__ == "__main__":
    args = parse_args()
    logger = ConsoleLogger(log_level=args.log_level)
    sys.exit(run_emulator(
        args.rom,
        scale=args.scale,
        ipf=args.ipf,
        seed=args.seed,
        wrap_sprites=args.wrap_sprites,
        color_scheme=args.color_scheme,
        logger=logger,
    ))
