"""EditSession — one loaded buffer, its parameters and its processing chain.

A session keeps the pristine source buffer and recomputes the whole chain
from it whenever a parameter changes. Results are returned to the caller
as ``RenderResult`` values; there are no listeners to register.

Calls are serialized with a lock, so at most one recomputation per session
is in flight. Use one session per loaded file to process files in parallel.
"""

from __future__ import annotations

import threading

from pcmkit._types import AudioFormat, NoiseProfileState, RenderResult
from pcmkit.codec.pcm import PcmCodec
from pcmkit.config.processing import ProcessingConfig
from pcmkit.config.settings import get_settings
from pcmkit.exceptions import AudioError
from pcmkit.logging import get_logger
from pcmkit.processing.pipeline import AudioProcessingPipeline

logger = get_logger("session")


def format_details(audio_format: AudioFormat) -> str:
    """Multi-line human-readable description of a PCM format."""
    lines = [
        f"Sample Rate: {audio_format.sample_rate:g} Hz",
        f"Sample Size: {audio_format.bit_depth} bits",
        f"Channels: {audio_format.channels}",
        f"Frame Size: {audio_format.frame_size} bytes",
        f"Frame Rate: {audio_format.sample_rate:g} frames/second",
        f"Encoding: PCM_{'SIGNED' if audio_format.signed else 'UNSIGNED'}",
        f"Endianness: {'Big Endian' if audio_format.big_endian else 'Little Endian'}",
    ]
    return "\n".join(lines)


class EditSession:
    """Interactive editing state for one source buffer.

    Args:
        config: Initial parameters. Defaults to the environment settings.
        pipeline: Processing chain. A fresh one is created if None.
        display_points: Size of the waveform preview. Defaults to settings.
    """

    def __init__(
        self,
        config: ProcessingConfig | None = None,
        pipeline: AudioProcessingPipeline | None = None,
        display_points: int | None = None,
    ) -> None:
        settings = get_settings()
        self._config = config if config is not None else settings.processing.to_config()
        self._pipeline = pipeline if pipeline is not None else AudioProcessingPipeline()
        self._display_points = (
            display_points if display_points is not None else settings.display.max_points
        )
        self._source: bytes | None = None
        self._format: AudioFormat | None = None
        self._lock = threading.Lock()

    @property
    def config(self) -> ProcessingConfig:
        return self._config

    @property
    def audio_format(self) -> AudioFormat | None:
        return self._format

    @property
    def has_audio(self) -> bool:
        return self._source is not None

    @property
    def noise_profile_state(self) -> NoiseProfileState:
        return self._pipeline.noise_profile_state

    def _require_audio(self) -> tuple[bytes, AudioFormat]:
        if self._source is None or self._format is None:
            msg = "No audio loaded in session"
            raise AudioError(msg)
        return self._source, self._format

    def _render_locked(self) -> RenderResult:
        source, audio_format = self._require_audio()
        pcm = self._pipeline.process(source, audio_format, self._config)
        display = PcmCodec(audio_format).decode_for_display(pcm, self._display_points)
        return RenderResult(
            pcm=pcm,
            display=display,
            noise_profile_state=self._pipeline.noise_profile_state,
        )

    def load(self, data: bytes, audio_format: AudioFormat) -> RenderResult:
        """Replace the source buffer and clear any noise profile.

        The format is validated before anything is replaced.

        Returns:
            The rendering of the new buffer with the current parameters.

        Raises:
            UnsupportedBitDepthError: If the bit depth is not supported.
        """
        PcmCodec(audio_format)
        with self._lock:
            self._source = bytes(data)
            self._format = audio_format
            self._pipeline.reset_noise_profile()
            logger.info(
                "audio_loaded",
                bytes=len(data),
                frames=audio_format.frame_count(len(data)),
                sample_rate=audio_format.sample_rate,
                bit_depth=audio_format.bit_depth,
                channels=audio_format.channels,
            )
            return self._render_locked()

    def update(self, config: ProcessingConfig) -> RenderResult:
        """Replace all parameters and recompute from the source buffer."""
        with self._lock:
            self._config = config
            return self._render_locked()

    def render(self) -> RenderResult:
        """Recompute the chain with the current parameters."""
        with self._lock:
            return self._render_locked()

    def _enable_noise_reduction(self) -> None:
        if not self._config.noise_reduction.enabled:
            noise_reduction = self._config.noise_reduction.model_copy(update={"enabled": True})
            self._config = self._config.model_copy(update={"noise_reduction": noise_reduction})

    def learn_noise_profile(self, noise_data: bytes, noise_format: AudioFormat) -> RenderResult:
        """Learn the profile from a separate noise recording and enable reduction."""
        with self._lock:
            self._require_audio()
            self._pipeline.learn_noise_profile(noise_data, noise_format)
            self._enable_noise_reduction()
            return self._render_locked()

    def learn_noise_from_selection(self, start_sample: int, end_sample: int) -> RenderResult | None:
        """Learn the profile from an inclusive frame range of the source buffer.

        Returns:
            The new rendering, or None if the range was rejected (the
            session is left unchanged).
        """
        with self._lock:
            source, audio_format = self._require_audio()
            learned = self._pipeline.learn_noise_profile_from_range(
                source, audio_format, start_sample, end_sample
            )
            if not learned:
                return None
            self._enable_noise_reduction()
            return self._render_locked()

    def reset_noise_profile(self) -> RenderResult:
        """Drop the profile; the next rendering re-estimates it."""
        with self._lock:
            self._require_audio()
            self._pipeline.reset_noise_profile()
            return self._render_locked()

    def format_details(self) -> str:
        _source, audio_format = self._require_audio()
        return format_details(audio_format)
