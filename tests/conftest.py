"""Shared fixtures for all tests."""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure repo root is on sys.path so tests can import the `pcmkit` package
# when running pytest from the repository root without an editable install.
ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

import pytest  # noqa: E402

from pcmkit._types import AudioFormat  # noqa: E402
from pcmkit.config.settings import get_settings  # noqa: E402
from tests.helpers import (  # noqa: E402
    SAMPLE_RATE,
    float_to_int16_pcm,
    make_noise,
    make_sine,
)


@pytest.fixture(autouse=True)
def _clear_settings_cache() -> None:
    """Settings are cached process-wide; start every test from the environment."""
    get_settings.cache_clear()


@pytest.fixture
def mono_16bit() -> AudioFormat:
    """PCM 16-bit, 44.1kHz, mono, little-endian."""
    return AudioFormat(sample_rate=SAMPLE_RATE, bit_depth=16)


@pytest.fixture
def stereo_16bit() -> AudioFormat:
    """PCM 16-bit, 44.1kHz, stereo, little-endian."""
    return AudioFormat(sample_rate=SAMPLE_RATE, bit_depth=16, channels=2)


@pytest.fixture
def noisy_sine_pcm() -> bytes:
    """Mono 16-bit 440 Hz sine at 0.25 plus white noise, 16384 samples."""
    signal = make_sine(amplitude=0.25, n_samples=16384) + make_noise(16384, std=0.02)
    return float_to_int16_pcm(signal)
