"""Audio Processing Chain.

Fixed chain over whole PCM buffers:
Source PCM -> [Gain] -> [Noise Reduction] -> [Anti-Distortion] -> Output PCM.
"""

from __future__ import annotations

from pcmkit.processing.anti_distortion import AntiDistortionStage
from pcmkit.processing.gain import apply_gain
from pcmkit.processing.noise_reduction import NoiseProfile, NoiseReductionStage
from pcmkit.processing.pipeline import AudioProcessingPipeline
from pcmkit.processing.stages import AudioStage

__all__ = [
    "AntiDistortionStage",
    "AudioProcessingPipeline",
    "AudioStage",
    "NoiseProfile",
    "NoiseReductionStage",
    "apply_gain",
]
