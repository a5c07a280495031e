"""NoiseReductionStage — STFT spectral subtraction.

Analysis/synthesis with Hann-windowed frames of ``fft_size`` samples every
``fft_size / 4`` samples. Each bin's magnitude is attenuated in proportion
to a noise profile (average noise magnitude per bin), smoothed across
frames to suppress musical noise, recombined with the original phase and
overlap-added back.

The noise profile is either learned from a noise-only sample or, when
unset, estimated from the first frames of the processed signal itself.
Samples after the last full analysis frame come out silent; use
``covered_length()`` to know how much of a buffer is reconstructed.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from pcmkit._audio_constants import (
    AUTO_ESTIMATE_MAX_FRAMES,
    FFT_SIZE,
    NOISE_PROFILE_EPSILON,
    OVERLAP_FACTOR,
    SUBTRACTION_STRENGTH,
)
from pcmkit._dsp import SpectralEngine, hanning_window
from pcmkit._types import AudioFormat, NoiseProfileState
from pcmkit.codec.pcm import PcmCodec
from pcmkit.config.processing import NoiseReductionConfig
from pcmkit.exceptions import ConfigError, InvalidTransitionError
from pcmkit.logging import get_logger
from pcmkit.processing.stages import AudioStage

logger = get_logger("processing.noise_reduction")

_MAGNITUDE_EPSILON = 1e-6

# Valid transitions: {current_state: {allowed_target_states}}
_VALID_TRANSITIONS: dict[NoiseProfileState, frozenset[NoiseProfileState]] = {
    NoiseProfileState.UNSET: frozenset(
        {NoiseProfileState.UNSET, NoiseProfileState.AUTO_ESTIMATED, NoiseProfileState.LEARNED}
    ),
    NoiseProfileState.AUTO_ESTIMATED: frozenset(
        {NoiseProfileState.LEARNED, NoiseProfileState.UNSET}
    ),
    NoiseProfileState.LEARNED: frozenset({NoiseProfileState.LEARNED, NoiseProfileState.UNSET}),
}


def overlap_add_scale(fft_size: int, hop_size: int) -> float:
    """Overlap-add gain correction for Hann analysis + synthesis windows.

    Derived for 4x overlap only (``1 / (fft_size / hop_size / 2)``). Other
    hop sizes need a new derivation, so they are rejected.

    Raises:
        ConfigError: If ``fft_size != 4 * hop_size``.
    """
    if hop_size <= 0 or fft_size != hop_size * OVERLAP_FACTOR:
        msg = (
            f"overlap-add normalization is only defined for {OVERLAP_FACTOR}x overlap "
            f"(fft_size={fft_size}, hop_size={hop_size})"
        )
        raise ConfigError(msg)
    return 1.0 / (fft_size // hop_size // 2)


def suppression_gain(
    magnitude: np.ndarray,
    noise_profile: np.ndarray,
    reduction_factor: float,
    noise_floor: float,
) -> np.ndarray:
    """Per-bin spectral subtraction gain in [0, 1].

    ``max(0, 1 - 5 * reduction * noise / max(magnitude, noise_floor))``
    """
    denominator = np.maximum(magnitude, noise_floor)
    gain = 1.0 - (SUBTRACTION_STRENGTH * reduction_factor) * noise_profile / denominator
    return np.maximum(gain, 0.0)


def smooth_gain(
    gain: np.ndarray,
    previous_magnitude: np.ndarray,
    magnitude: np.ndarray,
    smoothing_factor: float,
) -> np.ndarray:
    """Blend the current gain with the previous frame's output level."""
    carried = previous_magnitude / np.maximum(magnitude, _MAGNITUDE_EPSILON)
    return smoothing_factor * gain + (1.0 - smoothing_factor) * carried


class NoiseProfile:
    """Average noise magnitude per frequency bin, with its lifecycle state.

    Args:
        n_bins: Profile length (``fft_size // 2 + 1``).
    """

    def __init__(self, n_bins: int) -> None:
        self._n_bins = n_bins
        self._state = NoiseProfileState.UNSET
        self._magnitudes: np.ndarray | None = None

    @property
    def state(self) -> NoiseProfileState:
        return self._state

    @property
    def n_bins(self) -> int:
        return self._n_bins

    @property
    def magnitudes(self) -> np.ndarray | None:
        """Read-only view of the profile, or None while UNSET."""
        if self._magnitudes is None:
            return None
        view = self._magnitudes.view()
        view.flags.writeable = False
        return view

    def _transition(self, target: NoiseProfileState) -> None:
        if target not in _VALID_TRANSITIONS[self._state]:
            raise InvalidTransitionError(self._state.value, target.value)
        self._state = target

    def _store(self, magnitudes: np.ndarray, target: NoiseProfileState) -> None:
        if magnitudes.shape != (self._n_bins,):
            msg = f"noise profile must have {self._n_bins} bins, got shape {magnitudes.shape}"
            raise ValueError(msg)
        self._transition(target)
        self._magnitudes = np.maximum(magnitudes.astype(np.float64), NOISE_PROFILE_EPSILON)

    def set_estimated(self, magnitudes: np.ndarray) -> None:
        """Store an automatic estimate. Only valid from UNSET."""
        self._store(magnitudes, NoiseProfileState.AUTO_ESTIMATED)

    def set_learned(self, magnitudes: np.ndarray) -> None:
        """Store an explicitly learned profile, replacing any previous one."""
        self._store(magnitudes, NoiseProfileState.LEARNED)

    def reset(self) -> None:
        self._transition(NoiseProfileState.UNSET)
        self._magnitudes = None


@dataclass(slots=True)
class _FrameContext:
    """Scratch state of one channel's STFT pass."""

    prev_magnitude: np.ndarray
    frame_index: int = 0
    output: np.ndarray = field(default_factory=lambda: np.zeros(0))


class NoiseReductionStage(AudioStage):
    """Spectral-subtraction noise reduction.

    Instances own a NoiseProfile, which persists across calls until
    ``reset()``. Calls into one instance must be serialized; per-call
    scratch buffers are built fresh for every channel.

    Args:
        config: Reduction parameters. Defaults to ``NoiseReductionConfig()``.
        fft_size: Analysis frame length (power of two). Hop is a quarter of it.
    """

    def __init__(
        self,
        config: NoiseReductionConfig | None = None,
        fft_size: int = FFT_SIZE,
    ) -> None:
        self._config = config if config is not None else NoiseReductionConfig()
        self._engine = SpectralEngine(fft_size)
        self._hop_size = fft_size // OVERLAP_FACTOR
        self._ola_scale = overlap_add_scale(fft_size, self._hop_size)
        self._window = hanning_window(fft_size).astype(np.float64)
        self._profile = NoiseProfile(self._engine.n_bins)

    @property
    def name(self) -> str:
        """Identifier name for the stage."""
        return "noise_reduction"

    @property
    def config(self) -> NoiseReductionConfig:
        return self._config

    def configure(self, config: NoiseReductionConfig) -> None:
        """Replace reduction parameters. The noise profile is kept."""
        self._config = config

    @property
    def fft_size(self) -> int:
        return self._engine.size

    @property
    def hop_size(self) -> int:
        return self._hop_size

    @property
    def profile(self) -> NoiseProfile:
        return self._profile

    @property
    def profile_state(self) -> NoiseProfileState:
        return self._profile.state

    def reset(self) -> None:
        """Forget the noise profile; the next call re-estimates it."""
        self._profile.reset()
        logger.debug("noise_profile_reset")

    # ------------------------------------------------------------------
    # Framing
    # ------------------------------------------------------------------

    def frame_count(self, n_samples: int) -> int:
        """Number of full hop-spaced analysis frames in *n_samples*."""
        if n_samples < self.fft_size:
            return 0
        return (n_samples - self.fft_size) // self._hop_size + 1

    def covered_length(self, n_samples: int) -> int:
        """Leading samples reconstructed by full frames; the rest come out silent."""
        n_frames = self.frame_count(n_samples)
        if n_frames == 0:
            return 0
        return (n_frames - 1) * self._hop_size + self.fft_size

    def _spectrum(self, frame: np.ndarray) -> tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
        real = frame.astype(np.float64) * self._window
        imag = np.zeros(self.fft_size, dtype=np.float64)
        self._engine.forward(real, imag)
        magnitude, phase = self._engine.magnitude_phase(real, imag)
        return real, imag, magnitude, phase

    def _average_magnitude(self, frames: list[np.ndarray]) -> np.ndarray:
        total = np.zeros(self._engine.n_bins, dtype=np.float64)
        for frame in frames:
            total += self._spectrum(frame)[2]
        if frames:
            total /= len(frames)
        return total

    # ------------------------------------------------------------------
    # Noise profile
    # ------------------------------------------------------------------

    def _estimate_profile(self, audio: np.ndarray) -> None:
        """Average the first non-overlapping frames of the input itself."""
        n_frames = min(AUTO_ESTIMATE_MAX_FRAMES, audio.shape[1] // self.fft_size)
        frames = [
            channel[k * self.fft_size : (k + 1) * self.fft_size]
            for channel in audio
            for k in range(n_frames)
        ]
        if not frames:
            logger.warning(
                "noise_profile_no_full_frames",
                samples=int(audio.shape[1]),
                fft_size=self.fft_size,
            )
        self._profile.set_estimated(self._average_magnitude(frames))
        logger.debug("noise_profile_estimated", frames=len(frames))

    def learn_profile(self, noise: np.ndarray) -> None:
        """Learn the profile from noise-only samples.

        Every full hop-spaced frame of every channel is averaged.

        Args:
            noise: Float samples, 1-D or shape ``(channels, frames)``.
        """
        noise = np.atleast_2d(np.asarray(noise))
        n_frames = self.frame_count(noise.shape[1])
        frames = [
            channel[k * self._hop_size : k * self._hop_size + self.fft_size]
            for channel in noise
            for k in range(n_frames)
        ]
        if not frames:
            logger.warning(
                "noise_sample_too_short",
                samples=int(noise.shape[1]),
                fft_size=self.fft_size,
            )
        self._profile.set_learned(self._average_magnitude(frames))
        logger.info("noise_profile_learned", frames=len(frames))

    def learn_profile_from_pcm(self, data: bytes, audio_format: AudioFormat) -> None:
        """Learn the profile from a noise-only PCM buffer."""
        self.learn_profile(PcmCodec(audio_format).decode(data))

    def learn_profile_from_range(
        self,
        data: bytes,
        audio_format: AudioFormat,
        start_sample: int,
        end_sample: int,
    ) -> bool:
        """Learn the profile from frames ``start_sample..end_sample`` (inclusive) of *data*.

        An empty or out-of-bounds range is a no-op; callers are expected to
        validate selections beforehand.

        Returns:
            True if the profile was learned, False if the range was rejected.
        """
        audio = PcmCodec(audio_format).decode(data)
        n_frames = audio.shape[1]
        if start_sample < 0 or end_sample >= n_frames or end_sample < start_sample:
            logger.warning(
                "invalid_selection_range",
                start=start_sample,
                end=end_sample,
                frames=n_frames,
            )
            return False
        self.learn_profile(audio[:, start_sample : end_sample + 1])
        return True

    # ------------------------------------------------------------------
    # Reduction
    # ------------------------------------------------------------------

    def process(self, audio: np.ndarray, sample_rate: float) -> np.ndarray:
        """Apply noise reduction to every channel independently.

        Estimates the noise profile from *audio* first if none is set.

        Args:
            audio: Float32 samples, shape ``(channels, frames)``.
            sample_rate: Sample rate in Hz (unused by the algorithm).

        Returns:
            Float32 samples, same shape as *audio*.
        """
        audio = np.atleast_2d(audio)
        if self._profile.state is NoiseProfileState.UNSET:
            self._estimate_profile(audio)

        n_samples = audio.shape[1]
        dropped = n_samples - self.covered_length(n_samples)
        if dropped:
            logger.debug("tail_samples_dropped", samples=dropped, fft_size=self.fft_size)

        result = np.empty(audio.shape, dtype=np.float32)
        for index, channel in enumerate(audio):
            result[index] = self._reduce_channel(channel)
        return result

    def _reduce_channel(self, samples: np.ndarray) -> np.ndarray:
        noise = self._profile.magnitudes
        assert noise is not None
        config = self._config
        fft_size = self.fft_size
        half = fft_size // 2

        ctx = _FrameContext(
            prev_magnitude=np.zeros(self._engine.n_bins, dtype=np.float64),
            output=np.zeros(len(samples), dtype=np.float64),
        )

        for k in range(self.frame_count(len(samples))):
            start = k * self._hop_size
            real, imag, magnitude, phase = self._spectrum(samples[start : start + fft_size])

            gain = suppression_gain(
                magnitude, noise, config.reduction_factor, config.noise_floor
            )
            if ctx.frame_index > 0:
                gain = smooth_gain(gain, ctx.prev_magnitude, magnitude, config.smoothing_factor)

            magnitude = magnitude * gain
            ctx.prev_magnitude = magnitude
            ctx.frame_index += 1

            real[: half + 1] = magnitude * np.cos(phase)
            imag[: half + 1] = magnitude * np.sin(phase)
            # Conjugate symmetry keeps the inverse transform real.
            real[half + 1 :] = real[1:half][::-1]
            imag[half + 1 :] = -imag[1:half][::-1]

            self._engine.inverse(real, imag)
            ctx.output[start : start + fft_size] += real * self._window * self._ola_scale

        return ctx.output.astype(np.float32)
