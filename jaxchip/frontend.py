"""Pygame host for the emulator: window, keyboard, tone and cycle pacing."""

import jax
import numpy as np
import pygame

from jaxchip.constants import SCREEN_WIDTH, SCREEN_HEIGHT, NUM_KEYS
from jaxchip.emulator import (
    step, load_rom, read_rom, is_running, needs_redraw, clear_draw_flag, framebuffer, shutdown,
)
from jaxchip.errors import RomLoadError
from jaxchip.logging import ConsoleLogger, report_fault
from jaxchip.rendering import chip8_display_to_rgb, create_color_scheme
from jaxchip.state import create_state

# COSMAC VIP keypad laid over the left side of a QWERTY keyboard
KEY_MAP = {
    pygame.K_x: 0x0, pygame.K_1: 0x1, pygame.K_2: 0x2, pygame.K_3: 0x3,
    pygame.K_q: 0x4, pygame.K_w: 0x5, pygame.K_e: 0x6, pygame.K_a: 0x7,
    pygame.K_s: 0x8, pygame.K_d: 0x9, pygame.K_z: 0xA, pygame.K_c: 0xB,
    pygame.K_4: 0xC, pygame.K_r: 0xD, pygame.K_f: 0xE, pygame.K_v: 0xF,
}

SAMPLE_RATE = 44100
TONE_FREQUENCY = 440.0
FRAMES_PER_SECOND = 60


def keypad_from_pressed(pressed) -> np.ndarray:
    """Map a ``pygame.key.get_pressed()`` result to the 16-key snapshot."""
    keypad = np.zeros(NUM_KEYS, dtype=np.bool_)
    for key, index in KEY_MAP.items():
        keypad[index] = bool(pressed[key])
    return keypad


def make_tone_samples(
    frequency: float = TONE_FREQUENCY,
    sample_rate: int = SAMPLE_RATE,
    amplitude: int = 8000,
) -> np.ndarray:
    """One second of a sine tone as mono int16 samples, loopable without clicks."""
    t = np.arange(sample_rate) / sample_rate
    return (amplitude * np.sin(2 * np.pi * frequency * t)).astype(np.int16)


class ToneSink:
    """Loops a beep while the machine's sound timer is non-zero."""

    def __init__(self, logger: ConsoleLogger):
        self.sound = None
        self.playing = False
        try:
            pygame.mixer.init(frequency=SAMPLE_RATE, size=-16, channels=1)
            self.sound = pygame.sndarray.make_sound(make_tone_samples())
        except pygame.error as e:
            logger.warning(f"Audio disabled: {e}")

    def set_playing(self, on: bool):
        if self.sound is None or on == self.playing:
            return
        if on:
            self.sound.play(loops=-1)
        else:
            self.sound.stop()
        self.playing = on


def run_emulator(
    rom_filename: str,
    scale: int = 10,
    ipf: int = 9,
    seed: int = 0,
    wrap_sprites: bool = False,
    color_scheme: str = "classic",
    logger: ConsoleLogger = None,
) -> int:
    """Run a ROM in a window until it is closed or the machine faults.

    Args:
        rom_filename: Path to the ROM image
        scale: Window pixels per CHIP-8 pixel
        ipf: Cycles executed per 60 Hz frame
        seed: Seed for the random-number instruction
        wrap_sprites: Wrap sprites around the screen edges instead of clipping
        color_scheme: Name understood by :func:`create_color_scheme`
        logger: Logger for diagnostics

    Returns:
        Process exit code: 0 after a normal close, 1 on a load error or fault
    """
    logger = logger or ConsoleLogger()
    on_color, off_color = create_color_scheme(color_scheme)

    state = create_state(jax.random.PRNGKey(seed), wrap_sprites=wrap_sprites)
    try:
        state = load_rom(state, read_rom(rom_filename))
    except RomLoadError as e:
        logger.error(str(e))
        return 1
    logger.info(f"Loaded {rom_filename}")

    step_fn = jax.jit(step)

    pygame.init()
    screen = pygame.display.set_mode((SCREEN_WIDTH * scale, SCREEN_HEIGHT * scale))
    pygame.display.set_caption(f"jaxchip - {rom_filename}")
    clock = pygame.time.Clock()
    tone = ToneSink(logger)
    exit_code = 0

    try:
        while is_running(state):
            clock.tick(FRAMES_PER_SECOND)

            for event in pygame.event.get():
                if event.type == pygame.QUIT or (
                    event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE
                ):
                    state = shutdown(state)
            if not is_running(state):
                logger.info("Window closed")
                break

            keypad = keypad_from_pressed(pygame.key.get_pressed())
            sound_on = False
            for _ in range(ipf):
                state, sound_on = step_fn(state, keypad)
                if not is_running(state):
                    break
            tone.set_playing(bool(sound_on))

            if report_fault(logger, state):
                exit_code = 1

            if needs_redraw(state):
                rgb = chip8_display_to_rgb(framebuffer(state), scale, on_color, off_color)
                pygame.surfarray.blit_array(screen, rgb.swapaxes(0, 1))
                pygame.display.flip()
                state = clear_draw_flag(state)
    finally:
        tone.set_playing(False)
        pygame.quit()

    return exit_code
