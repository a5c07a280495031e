"""Linear PCM codec (8, 16 and 24-bit, either endianness).

Converts raw interleaved PCM bytes to per-channel float32 samples in
[-1.0, 1.0] and back. The per-bit-depth layout is resolved once when the
codec is built; every conversion after that is vectorized numpy.

Rounding is canonical across the library: scaled values are rounded half
up (``floor(x + 0.5)``) and then clamped to the representable range.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from pcmkit._audio_constants import (
    DISPLAY_MAX_POINTS,
    PCM_INT8_MAX,
    PCM_INT8_MIN,
    PCM_INT8_SCALE,
    PCM_INT16_MAX,
    PCM_INT16_MIN,
    PCM_INT16_SCALE,
    PCM_INT24_MAX,
    PCM_INT24_MIN,
    PCM_INT24_SCALE,
    SUPPORTED_BIT_DEPTHS,
)
from pcmkit._types import AudioFormat
from pcmkit.exceptions import UnsupportedBitDepthError
from pcmkit.logging import get_logger

logger = get_logger("codec.pcm")


@dataclass(frozen=True, slots=True)
class _SampleLayout:
    """Integer layout of one PCM sample, centered around zero."""

    bits: int
    scale: float
    minimum: int
    maximum: int
    offset: int

    @property
    def width(self) -> int:
        return self.bits // 8


_LAYOUTS: dict[int, tuple[float, int, int]] = {
    8: (PCM_INT8_SCALE, PCM_INT8_MIN, PCM_INT8_MAX),
    16: (PCM_INT16_SCALE, PCM_INT16_MIN, PCM_INT16_MAX),
    24: (PCM_INT24_SCALE, PCM_INT24_MIN, PCM_INT24_MAX),
}


def _layout_for(audio_format: AudioFormat) -> _SampleLayout:
    if audio_format.bit_depth not in _LAYOUTS:
        raise UnsupportedBitDepthError(audio_format.bit_depth, SUPPORTED_BIT_DEPTHS)
    scale, minimum, maximum = _LAYOUTS[audio_format.bit_depth]
    # Unsigned storage shifts the centered range up by half the full scale.
    offset = 0 if audio_format.signed else int(scale)
    return _SampleLayout(
        bits=audio_format.bit_depth,
        scale=scale,
        minimum=minimum,
        maximum=maximum,
        offset=offset,
    )


def round_half_up(values: np.ndarray) -> np.ndarray:
    """Round to nearest integer, ties toward +infinity (63.5 -> 64, -63.5 -> -63)."""
    return np.floor(values + 0.5)


class PcmCodec:
    """Bit-depth-aware PCM codec bound to one AudioFormat.

    Args:
        audio_format: Layout of the buffers this codec converts.

    Raises:
        UnsupportedBitDepthError: If the bit depth is not 8, 16 or 24.
    """

    def __init__(self, audio_format: AudioFormat) -> None:
        self._format = audio_format
        self._layout = _layout_for(audio_format)
        byte_order = ">" if audio_format.big_endian else "<"
        kind = "i" if audio_format.signed else "u"
        # 24-bit has no native dtype; it is assembled from bytes.
        self._dtype: np.dtype | None = (
            np.dtype(f"{byte_order}{kind}{self._layout.width}") if self._layout.bits != 24 else None
        )

    @property
    def audio_format(self) -> AudioFormat:
        return self._format

    def _aligned(self, data: bytes) -> bytes:
        frame_size = self._format.frame_size
        usable = (len(data) // frame_size) * frame_size
        if usable != len(data):
            logger.debug(
                "trailing_bytes_dropped",
                dropped=len(data) - usable,
                frame_size=frame_size,
            )
        return data[:usable]

    # ------------------------------------------------------------------
    # Integer domain
    # ------------------------------------------------------------------

    def unpack_ints(self, data: bytes) -> np.ndarray:
        """Unpack whole frames into centered int64 samples (interleaved order).

        Trailing bytes that do not form a whole frame are ignored.
        """
        aligned = self._aligned(data)
        layout = self._layout

        if self._dtype is not None:
            raw = np.frombuffer(aligned, dtype=self._dtype).astype(np.int64)
        else:
            triplets = np.frombuffer(aligned, dtype=np.uint8).reshape(-1, 3).astype(np.int64)
            if self._format.big_endian:
                raw = (triplets[:, 0] << 16) | (triplets[:, 1] << 8) | triplets[:, 2]
            else:
                raw = triplets[:, 0] | (triplets[:, 1] << 8) | (triplets[:, 2] << 16)
            if self._format.signed:
                # Sign-extend from bit 23.
                raw = (raw ^ 0x800000) - 0x800000

        return raw - layout.offset

    def quantize(self, scaled: np.ndarray) -> np.ndarray:
        """Round scaled float samples half up and clamp them to the integer range.

        Clamping happens before the integer cast, so values beyond int64
        and infinities saturate to the nearest extreme. NaN becomes 0.
        """
        layout = self._layout
        rounded = np.nan_to_num(round_half_up(np.asarray(scaled, dtype=np.float64)), nan=0.0)
        return np.clip(rounded, layout.minimum, layout.maximum).astype(np.int64)

    def pack_ints(self, values: np.ndarray) -> bytes:
        """Clamp centered integer samples and pack them (interleaved order)."""
        layout = self._layout
        clamped = np.clip(values.astype(np.int64), layout.minimum, layout.maximum) + layout.offset

        if self._dtype is not None:
            return clamped.astype(self._dtype).tobytes()

        words = (clamped & 0xFFFFFF).astype(">u4" if self._format.big_endian else "<u4")
        as_bytes = words.view(np.uint8).reshape(-1, 4)
        triplets = as_bytes[:, 1:] if self._format.big_endian else as_bytes[:, :3]
        return np.ascontiguousarray(triplets).tobytes()

    # ------------------------------------------------------------------
    # Float domain
    # ------------------------------------------------------------------

    def decode(self, data: bytes) -> np.ndarray:
        """Decode PCM bytes to float32 samples of shape ``(channels, frames)``.

        No clamping is applied; source samples are in range by construction.
        """
        ints = self.unpack_ints(data)
        channels = self._format.channels
        samples = (ints.astype(np.float64) / self._layout.scale).astype(np.float32)
        return np.ascontiguousarray(samples.reshape(-1, channels).T)

    def encode(self, samples: np.ndarray) -> bytes:
        """Encode float samples of shape ``(channels, frames)`` to PCM bytes.

        Values are scaled, rounded half up and clamped to the exact range
        of the bit depth before packing.
        """
        samples = np.atleast_2d(np.asarray(samples))
        if samples.shape[0] != self._format.channels:
            msg = (
                f"expected {self._format.channels} channel(s), got array of shape {samples.shape}"
            )
            raise ValueError(msg)
        scaled = samples.T.reshape(-1).astype(np.float64) * self._layout.scale
        return self.pack_ints(self.quantize(scaled))

    def decode_for_display(self, data: bytes, max_points: int = DISPLAY_MAX_POINTS) -> np.ndarray:
        """Decimated interleaved samples for waveform rendering.

        Keeps every ``max(1, n // max_points)``-th sample, so the result holds
        roughly *max_points* values. Not meant for further processing.
        """
        ints = self.unpack_ints(data)
        step = max(1, len(ints) // max(1, max_points))
        return (ints[::step].astype(np.float64) / self._layout.scale).astype(np.float32)


def decode(data: bytes, audio_format: AudioFormat) -> np.ndarray:
    """Decode PCM bytes to ``(channels, frames)`` float32 samples."""
    return PcmCodec(audio_format).decode(data)


def encode(samples: np.ndarray, audio_format: AudioFormat) -> bytes:
    """Encode ``(channels, frames)`` float samples to PCM bytes."""
    return PcmCodec(audio_format).encode(samples)


def decode_for_display(
    data: bytes,
    audio_format: AudioFormat,
    max_points: int = DISPLAY_MAX_POINTS,
) -> np.ndarray:
    """Decimated float view of a PCM buffer for waveform rendering."""
    return PcmCodec(audio_format).decode_for_display(data, max_points=max_points)
