"""
Synthetic ECG source used when no device is attached.
Produces one PQRST complex per beat at a fixed heart rate.
"""

import math
import random
from typing import Optional

from config import (BASELINE, FAULT_PROBABILITY, HEART_RATE_BPM, MAX_VALUE,
                    MIN_VALUE, NOISE_AMPLITUDE)

CYCLE_MS = 60000 / HEART_RATE_BPM

# (start phase, end phase, amplitude) for each deflection; flat segments omitted
WAVE_SEGMENTS = (
    (0.00, 0.10, 30.0),     # P wave
    (0.20, 0.22, -20.0),    # Q wave
    (0.22, 0.26, 250.0),    # R wave
    (0.26, 0.28, -40.0),    # S wave
    (0.40, 0.55, 50.0),     # T wave
)


def pqrst_offset(phase: float) -> float:
    """Deflection from baseline at a phase in [0, 1) of the cardiac cycle."""
    for start, end, amplitude in WAVE_SEGMENTS:
        if start <= phase < end:
            return amplitude * math.sin(math.pi * (phase - start) / (end - start))
    return 0.0


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class WaveformSynthesizer:
    """Deterministic PQRST generator with optional uniform noise."""

    def __init__(self, rng: Optional[random.Random] = None,
                 noise_amplitude: float = NOISE_AMPLITUDE,
                 fault_probability: float = FAULT_PROBABILITY):
        """
        Initialize the synthesizer.

        Args:
            rng: Random source for noise and fault injection
            noise_amplitude: Peak-to-peak noise, centred on zero (0 disables)
            fault_probability: Per-tick probability of a lead-off event
        """
        self.rng = rng or random.Random()
        self.noise_amplitude = noise_amplitude
        self.fault_probability = fault_probability

    @staticmethod
    def phase(t_elapsed_ms: float) -> float:
        return (t_elapsed_ms % CYCLE_MS) / CYCLE_MS

    def sample(self, t_elapsed_ms: float) -> int:
        """Value in [0, 1023] at the given elapsed time."""
        value = BASELINE + pqrst_offset(self.phase(t_elapsed_ms))
        if self.noise_amplitude:
            value += (self.rng.random() - 0.5) * self.noise_amplitude
        value = max(MIN_VALUE, min(MAX_VALUE, value))
        return round_half_up(value)

    def roll_fault(self) -> bool:
        """Independent per-tick draw for a synthetic lead-off."""
        return self.rng.random() < self.fault_probability
