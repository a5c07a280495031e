"""Environment-driven defaults for the processing chain.

Reads the ``PCMKIT_*`` processing and display variables. The logging
variables (``PCMKIT_LOG_FORMAT``, ``PCMKIT_LOG_LEVEL``) are read by
``pcmkit.logging`` itself, since loggers exist before settings are loaded.

Usage::

    from pcmkit.config.settings import get_settings

    settings = get_settings()
    config = settings.processing.to_config()

``.env`` files in the working directory are loaded automatically.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from pcmkit._audio_constants import (
    DEFAULT_AMPLIFICATION,
    DEFAULT_MAKEUP_GAIN,
    DEFAULT_NOISE_FLOOR,
    DEFAULT_RATIO,
    DEFAULT_REDUCTION_FACTOR,
    DEFAULT_SMOOTHING_FACTOR,
    DEFAULT_THRESHOLD,
    DISPLAY_MAX_POINTS,
)
from pcmkit.config.processing import (
    AntiDistortionConfig,
    NoiseReductionConfig,
    ProcessingConfig,
)


class ProcessingSettings(BaseSettings):
    """Default processing parameters, overridable per environment."""

    model_config = SettingsConfigDict(extra="ignore", populate_by_name=True)

    amplification: float = Field(
        default=DEFAULT_AMPLIFICATION,
        ge=0.0,
        allow_inf_nan=False,
        validation_alias="PCMKIT_AMPLIFICATION",
    )

    noise_reduction_enabled: bool = Field(default=False, validation_alias="PCMKIT_NR_ENABLED")
    reduction_factor: float = Field(
        default=DEFAULT_REDUCTION_FACTOR, ge=0.0, validation_alias="PCMKIT_NR_REDUCTION_FACTOR"
    )
    noise_floor: float = Field(
        default=DEFAULT_NOISE_FLOOR, gt=0.0, validation_alias="PCMKIT_NR_NOISE_FLOOR"
    )
    smoothing_factor: float = Field(
        default=DEFAULT_SMOOTHING_FACTOR,
        ge=0.0,
        le=1.0,
        validation_alias="PCMKIT_NR_SMOOTHING_FACTOR",
    )

    anti_distortion_enabled: bool = Field(default=False, validation_alias="PCMKIT_AD_ENABLED")
    threshold: float = Field(
        default=DEFAULT_THRESHOLD, gt=0.0, le=1.0, validation_alias="PCMKIT_AD_THRESHOLD"
    )
    ratio: float = Field(default=DEFAULT_RATIO, ge=1.0, validation_alias="PCMKIT_AD_RATIO")
    makeup_gain: float = Field(
        default=DEFAULT_MAKEUP_GAIN, gt=0.0, validation_alias="PCMKIT_AD_MAKEUP_GAIN"
    )
    use_soft_clip: bool = Field(default=True, validation_alias="PCMKIT_AD_SOFT_CLIP")

    def to_config(self) -> ProcessingConfig:
        """Build the ProcessingConfig these settings describe."""
        return ProcessingConfig(
            amplification=self.amplification,
            noise_reduction=NoiseReductionConfig(
                enabled=self.noise_reduction_enabled,
                reduction_factor=self.reduction_factor,
                noise_floor=self.noise_floor,
                smoothing_factor=self.smoothing_factor,
            ),
            anti_distortion=AntiDistortionConfig(
                enabled=self.anti_distortion_enabled,
                threshold=self.threshold,
                ratio=self.ratio,
                makeup_gain=self.makeup_gain,
                use_soft_clip=self.use_soft_clip,
            ),
        )


class DisplaySettings(BaseSettings):
    """Waveform preview settings."""

    model_config = SettingsConfigDict(extra="ignore", populate_by_name=True)

    max_points: int = Field(
        default=DISPLAY_MAX_POINTS,
        ge=100,
        le=1_000_000,
        validation_alias="PCMKIT_DISPLAY_MAX_POINTS",
    )


class PcmkitSettings(BaseSettings):
    """All pcmkit settings, grouped by subsystem.

    A ``.env`` file in the working directory is read when present.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    processing: ProcessingSettings = Field(default_factory=ProcessingSettings)
    display: DisplaySettings = Field(default_factory=DisplaySettings)


@lru_cache(maxsize=1)
def get_settings() -> PcmkitSettings:
    """Return the singleton ``PcmkitSettings`` instance.

    Environment changes are not seen until ``get_settings.cache_clear()``.
    """
    return PcmkitSettings()
