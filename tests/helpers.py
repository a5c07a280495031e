"""Shared test helpers for signal generation and PCM packing.

Usage:
    from tests.helpers import SAMPLE_RATE, int16_pcm, make_sine, write_test_wav
"""

from __future__ import annotations

import wave
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from pathlib import Path

SAMPLE_RATE = 44100


def make_sine(
    frequency: float = 440.0,
    sample_rate: int = SAMPLE_RATE,
    n_samples: int = 8192,
    amplitude: float = 0.5,
) -> np.ndarray:
    """Creates a float64 sine wave."""
    t = np.arange(n_samples, dtype=np.float64) / sample_rate
    return amplitude * np.sin(2 * np.pi * frequency * t)


def make_noise(n_samples: int, std: float = 0.05, seed: int = 42) -> np.ndarray:
    """Deterministic white Gaussian noise."""
    rng = np.random.default_rng(seed=seed)
    return rng.normal(0.0, std, n_samples)


def int16_pcm(values: list[int] | np.ndarray) -> bytes:
    """Little-endian signed 16-bit PCM bytes for the given integer samples."""
    return np.asarray(values, dtype="<i2").tobytes()


def float_to_int16_pcm(samples: np.ndarray) -> bytes:
    """Quantize float samples in [-1, 1) to little-endian 16-bit PCM."""
    ints = np.clip(np.round(samples * 32768), -32768, 32767)
    return ints.astype("<i2").tobytes()


def write_test_wav(
    path: Path,
    data: bytes,
    channels: int = 1,
    sampwidth: int = 2,
    sample_rate: int = SAMPLE_RATE,
) -> Path:
    """Writes raw PCM bytes into a WAV container."""
    with wave.open(str(path), "wb") as wf:
        wf.setnchannels(channels)
        wf.setsampwidth(sampwidth)
        wf.setframerate(sample_rate)
        wf.writeframes(data)
    return path
