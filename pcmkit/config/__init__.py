"""Configuration models and environment settings."""

from __future__ import annotations

from pcmkit.config.processing import AntiDistortionConfig, NoiseReductionConfig, ProcessingConfig

__all__ = ["AntiDistortionConfig", "NoiseReductionConfig", "ProcessingConfig"]
