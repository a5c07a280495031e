"""AntiDistortionStage — look-ahead peak limiter followed by a clipper.

For every sample the stage looks at the peak absolute value over the next
5 ms (zero padded past the end of the buffer). Peaks above the threshold
are compressed with a ratio that grows with the overshoot, capped at 20:1:

    over  = peak - threshold
    ratio = min(20, base_ratio * (1 + 2 * over))
    gain  = (threshold + over / ratio) / peak

The compressed, makeup-scaled sample is then either hard clamped to
[-1, 1] or passed through a tanh soft clipper with a fixed drive of 1.5.
"""

from __future__ import annotations

import numpy as np
from scipy.ndimage import maximum_filter1d

from pcmkit._audio_constants import LOOK_AHEAD_MS, MAX_DYNAMIC_RATIO, SOFT_CLIP_DRIVE
from pcmkit.config.processing import AntiDistortionConfig
from pcmkit.logging import get_logger
from pcmkit.processing.stages import AudioStage

logger = get_logger("processing.anti_distortion")


def look_ahead_samples(sample_rate: float) -> int:
    """Length of the look-ahead window in samples (5 ms, truncated)."""
    return int(sample_rate * LOOK_AHEAD_MS / 1000)


def look_ahead_peaks(samples: np.ndarray, look_ahead: int) -> np.ndarray:
    """``peak[i] = max(|samples[i .. i + look_ahead]|)``, zero padded at the end."""
    magnitude = np.abs(samples.astype(np.float64))
    if look_ahead <= 0 or magnitude.size == 0:
        return magnitude
    size = look_ahead + 1
    # A negative origin shifts the window forward: it covers [i, i + size - 1].
    return maximum_filter1d(magnitude, size=size, origin=-(size // 2), mode="constant", cval=0.0)


def compression_gain(peaks: np.ndarray, threshold: float, ratio: float) -> np.ndarray:
    """Gain for each look-ahead peak; 1.0 at or below the threshold."""
    over = np.maximum(peaks - threshold, 0.0)
    dynamic_ratio = np.minimum(MAX_DYNAMIC_RATIO, ratio * (1.0 + over * 2.0))
    safe_peaks = np.where(peaks > threshold, peaks, 1.0)
    return np.where(peaks > threshold, (threshold + over / dynamic_ratio) / safe_peaks, 1.0)


def soft_clip(samples: np.ndarray) -> np.ndarray:
    """``tanh(x * drive) / drive`` with drive 1.5."""
    return np.tanh(samples * SOFT_CLIP_DRIVE) / SOFT_CLIP_DRIVE


def hard_clip(samples: np.ndarray) -> np.ndarray:
    return np.clip(samples, -1.0, 1.0)


class AntiDistortionStage(AudioStage):
    """Peak-following look-ahead compressor with hard or soft clipping.

    Channels are processed independently. The look-ahead buffer is built
    per call, so the stage carries no state between buffers.

    Args:
        config: Limiter parameters. Defaults to ``AntiDistortionConfig()``.
    """

    def __init__(self, config: AntiDistortionConfig | None = None) -> None:
        self._config = config if config is not None else AntiDistortionConfig()

    @property
    def name(self) -> str:
        """Identifier name for the stage."""
        return "anti_distortion"

    @property
    def config(self) -> AntiDistortionConfig:
        return self._config

    def configure(self, config: AntiDistortionConfig) -> None:
        """Replace limiter parameters."""
        self._config = config

    def process(self, audio: np.ndarray, sample_rate: float) -> np.ndarray:
        """Limit and clip every channel.

        Args:
            audio: Float32 samples, shape ``(channels, frames)``.
            sample_rate: Sample rate in Hz; sets the look-ahead length.

        Returns:
            Float32 samples within [-1, 1], same shape as *audio*.
        """
        audio = np.atleast_2d(audio)
        config = self._config
        look_ahead = look_ahead_samples(sample_rate)
        clipper = soft_clip if config.use_soft_clip else hard_clip

        result = np.empty(audio.shape, dtype=np.float32)
        for index, channel in enumerate(audio):
            peaks = look_ahead_peaks(channel, look_ahead)
            gain = compression_gain(peaks, config.threshold, config.ratio)
            shaped = channel.astype(np.float64) * gain * config.makeup_gain
            result[index] = clipper(shaped)

        logger.debug(
            "anti_distortion_applied",
            channels=int(audio.shape[0]),
            look_ahead=look_ahead,
            soft_clip=config.use_soft_clip,
        )
        return result
