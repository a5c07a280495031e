"""Centralized audio constants for pcmkit.

Single source of truth for PCM scaling, spectral framing, dynamics
and default processing parameters shared by the codec, the stages,
the configuration models and the CLI.
"""

from __future__ import annotations

# --- PCM formats ---
SUPPORTED_BIT_DEPTHS: tuple[int, ...] = (8, 16, 24)

# 8-bit range. Unsigned storage adds half the full scale (128) as an offset.
PCM_INT8_SCALE: float = 128.0
PCM_INT8_MAX: int = 127
PCM_INT8_MIN: int = -128

# Signed 16-bit integer range: [-32768, 32767]
PCM_INT16_SCALE: float = 32768.0
PCM_INT16_MAX: int = 32767
PCM_INT16_MIN: int = -32768

# Signed 24-bit integer range: [-8388608, 8388607]
PCM_INT24_SCALE: float = 8388608.0
PCM_INT24_MAX: int = 8388607
PCM_INT24_MIN: int = -8388608

# --- Gain ---
# Factors closer than this to 1.0 return the input bytes untouched.
GAIN_IDENTITY_TOLERANCE: float = 0.001

# --- Spectral framing ---
FFT_SIZE: int = 2048
# 75% overlap. The overlap-add normalization assumes exactly this ratio.
OVERLAP_FACTOR: int = 4
HOP_SIZE: int = FFT_SIZE // OVERLAP_FACTOR
NOISE_PROFILE_EPSILON: float = 1e-6
AUTO_ESTIMATE_MAX_FRAMES: int = 10
# Noise-profile weight applied on top of the user reduction factor.
SUBTRACTION_STRENGTH: float = 5.0

# --- Dynamics ---
LOOK_AHEAD_MS: int = 5
MAX_DYNAMIC_RATIO: float = 20.0
SOFT_CLIP_DRIVE: float = 1.5

# --- Display ---
DISPLAY_MAX_POINTS: int = 10000

# --- Processing defaults (shared by config models and settings) ---
DEFAULT_AMPLIFICATION: float = 1.0
DEFAULT_THRESHOLD: float = 0.7
DEFAULT_RATIO: float = 4.0
DEFAULT_MAKEUP_GAIN: float = 1.0
DEFAULT_REDUCTION_FACTOR: float = 0.9
DEFAULT_NOISE_FLOOR: float = 0.05
DEFAULT_SMOOTHING_FACTOR: float = 0.7
