"""Processing chain configuration."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from pcmkit._audio_constants import (
    DEFAULT_AMPLIFICATION,
    DEFAULT_MAKEUP_GAIN,
    DEFAULT_NOISE_FLOOR,
    DEFAULT_RATIO,
    DEFAULT_REDUCTION_FACTOR,
    DEFAULT_SMOOTHING_FACTOR,
    DEFAULT_THRESHOLD,
)


class AntiDistortionConfig(BaseModel):
    """Look-ahead limiter and clipper parameters."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = False
    threshold: float = Field(default=DEFAULT_THRESHOLD, gt=0.0, le=1.0)
    ratio: float = Field(default=DEFAULT_RATIO, ge=1.0)
    makeup_gain: float = Field(default=DEFAULT_MAKEUP_GAIN, gt=0.0)
    use_soft_clip: bool = True


class NoiseReductionConfig(BaseModel):
    """Spectral subtraction parameters."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = False
    reduction_factor: float = Field(default=DEFAULT_REDUCTION_FACTOR, ge=0.0)
    noise_floor: float = Field(default=DEFAULT_NOISE_FLOOR, gt=0.0)
    smoothing_factor: float = Field(default=DEFAULT_SMOOTHING_FACTOR, ge=0.0, le=1.0)


class ProcessingConfig(BaseModel):
    """Full parameter set for one pass of the processing chain.

    Gain always runs (identity when ``amplification`` is ~1.0); the two
    float-domain stages are toggled by their ``enabled`` flags. Defaults
    come from ``_audio_constants`` (shared with ``ProcessingSettings``).
    """

    model_config = ConfigDict(frozen=True)

    amplification: float = Field(default=DEFAULT_AMPLIFICATION, ge=0.0, allow_inf_nan=False)
    noise_reduction: NoiseReductionConfig = Field(default_factory=NoiseReductionConfig)
    anti_distortion: AntiDistortionConfig = Field(default_factory=AntiDistortionConfig)
