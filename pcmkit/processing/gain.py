"""Gain stage — linear amplification in the integer sample domain.

Operates directly on centered integer samples instead of routing through
the float codec, so unity-adjacent factors do not add quantization.
"""

from __future__ import annotations

import numpy as np

from pcmkit._audio_constants import GAIN_IDENTITY_TOLERANCE
from pcmkit._types import AudioFormat
from pcmkit.codec.pcm import PcmCodec
from pcmkit.logging import get_logger

logger = get_logger("processing.gain")


def is_identity_gain(factor: float) -> bool:
    """True when *factor* is within the identity tolerance of 1.0."""
    return abs(factor - 1.0) < GAIN_IDENTITY_TOLERANCE


def apply_gain(data: bytes, audio_format: AudioFormat, factor: float) -> bytes:
    """Scale every sample of a PCM buffer by *factor*.

    Order per sample: center, multiply, round half up, clamp to the signed
    range of the bit depth, re-offset, pack. Identity factors return an
    unmodified copy. Trailing bytes that do not form a whole frame are
    copied through unchanged so the output length matches the input.

    Args:
        data: Raw PCM bytes.
        audio_format: Layout of *data*.
        factor: Amplification factor.

    Returns:
        New PCM bytes in the same format.

    Raises:
        UnsupportedBitDepthError: If the bit depth is not supported.
    """
    codec = PcmCodec(audio_format)

    if is_identity_gain(factor):
        return bytes(data)

    usable = audio_format.frame_count(len(data)) * audio_format.frame_size
    samples = codec.unpack_ints(data)
    amplified = codec.quantize(samples.astype(np.float64) * factor)

    peak = int(np.max(np.abs(amplified))) if amplified.size else 0
    logger.debug(
        "gain_applied",
        factor=factor,
        samples=int(samples.size),
        peak=peak,
        bit_depth=audio_format.bit_depth,
    )

    return codec.pack_ints(amplified) + bytes(data[usable:])
