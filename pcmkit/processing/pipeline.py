"""Audio Processing Pipeline.

Orchestrates the fixed chain Gain -> Noise Reduction -> Anti-Distortion
over a whole PCM buffer. The order is part of the parameter semantics:
gain changes the level the noise estimator sees, and the limiter must
run last to bound the output.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pcmkit.codec.pcm import PcmCodec
from pcmkit.config.processing import ProcessingConfig
from pcmkit.logging import get_logger
from pcmkit.processing.anti_distortion import AntiDistortionStage
from pcmkit.processing.gain import apply_gain
from pcmkit.processing.noise_reduction import NoiseReductionStage

if TYPE_CHECKING:
    from pcmkit._types import AudioFormat, NoiseProfileState
    from pcmkit.processing.stages import AudioStage

logger = get_logger("processing.pipeline")


class AudioProcessingPipeline:
    """Batch processing chain over in-memory PCM buffers.

    Every call recomputes from the bytes it is given; nothing is carried
    over except the noise profile held by the noise reduction stage.
    Calls into one pipeline must be serialized; build one pipeline per
    loaded buffer to process several buffers concurrently.

    Args:
        noise_reduction: Noise reduction stage. A default one is created if None.
        anti_distortion: Anti-distortion stage. A default one is created if None.
    """

    def __init__(
        self,
        noise_reduction: NoiseReductionStage | None = None,
        anti_distortion: AntiDistortionStage | None = None,
    ) -> None:
        self._noise_reduction = noise_reduction or NoiseReductionStage()
        self._anti_distortion = anti_distortion or AntiDistortionStage()

    @property
    def noise_reduction(self) -> NoiseReductionStage:
        return self._noise_reduction

    @property
    def anti_distortion(self) -> AntiDistortionStage:
        return self._anti_distortion

    @property
    def noise_profile_state(self) -> NoiseProfileState:
        return self._noise_reduction.profile_state

    def _float_stages(self, config: ProcessingConfig) -> list[AudioStage]:
        stages: list[AudioStage] = []
        if config.noise_reduction.enabled:
            self._noise_reduction.configure(config.noise_reduction)
            stages.append(self._noise_reduction)
        if config.anti_distortion.enabled:
            self._anti_distortion.configure(config.anti_distortion)
            stages.append(self._anti_distortion)
        return stages

    def process(
        self,
        data: bytes,
        audio_format: AudioFormat,
        config: ProcessingConfig | None = None,
    ) -> bytes:
        """Run the full chain over a pristine source buffer.

        Gain always runs. The buffer is decoded to floats once, before the
        first enabled float stage, and encoded once after the last.

        Args:
            data: Source PCM bytes (never a previously processed buffer).
            audio_format: Layout of *data*.
            config: Chain parameters. Defaults to ``ProcessingConfig()``.

        Returns:
            Processed PCM bytes in the source format.

        Raises:
            UnsupportedBitDepthError: If the bit depth is not supported.
        """
        config = config if config is not None else ProcessingConfig()
        codec = PcmCodec(audio_format)

        logger.debug("stage_start", stage="gain", factor=config.amplification)
        processed = apply_gain(data, audio_format, config.amplification)

        stages = self._float_stages(config)
        if not stages:
            return processed

        audio = codec.decode(processed)
        for stage in stages:
            logger.debug("stage_start", stage=stage.name, sample_rate=audio_format.sample_rate)
            audio = stage.process(audio, audio_format.sample_rate)
            logger.debug("stage_complete", stage=stage.name, frames=int(audio.shape[1]))

        return codec.encode(audio)

    def learn_noise_profile(self, noise_data: bytes, audio_format: AudioFormat) -> None:
        """Learn the noise profile from a noise-only PCM buffer."""
        self._noise_reduction.learn_profile_from_pcm(noise_data, audio_format)

    def learn_noise_profile_from_range(
        self,
        data: bytes,
        audio_format: AudioFormat,
        start_sample: int,
        end_sample: int,
    ) -> bool:
        """Learn the noise profile from an inclusive frame range of *data*.

        Returns:
            False (and leaves the profile untouched) if the range is invalid.
        """
        return self._noise_reduction.learn_profile_from_range(
            data, audio_format, start_sample, end_sample
        )

    def reset_noise_profile(self) -> None:
        """Return the noise profile to UNSET."""
        self._noise_reduction.reset()
