"""Audio file reading and writing.

Converts between audio files (WAV, FLAC, AIFF, ... via libsndfile) and raw
PCM bytes + AudioFormat. Samples are exchanged with libsndfile as
left-justified int32, which every integer PCM subtype converts to and from
losslessly; the PcmCodec does the byte packing.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
import soundfile as sf

from pcmkit._types import AudioFormat
from pcmkit.codec.pcm import PcmCodec
from pcmkit.exceptions import AudioFormatError
from pcmkit.logging import get_logger

if TYPE_CHECKING:
    from pathlib import Path

logger = get_logger("audio_io")

_SUBTYPE_BITS: dict[str, int] = {
    "PCM_U8": 8,
    "PCM_S8": 8,
    "PCM_16": 16,
    "PCM_24": 24,
}

# Preferred subtypes per bit depth; 8-bit WAV only stores unsigned samples.
_BITS_SUBTYPES: dict[int, tuple[str, ...]] = {
    8: ("PCM_U8", "PCM_S8"),
    16: ("PCM_16",),
    24: ("PCM_24",),
}

_INT32_BITS = 32


def read_audio(path: Path) -> tuple[bytes, AudioFormat]:
    """Read an integer PCM audio file.

    Args:
        path: Audio file path.

    Returns:
        Tuple (raw interleaved little-endian PCM bytes, format). 8-bit data
        is returned unsigned, 16 and 24-bit signed.

    Raises:
        AudioFormatError: If the file cannot be read or is not 8/16/24-bit PCM.
    """
    try:
        info = sf.info(str(path))
        if info.subtype not in _SUBTYPE_BITS:
            raise AudioFormatError(f"'{path}' has unsupported sample type {info.subtype}")
        data, sample_rate = sf.read(str(path), dtype="int32", always_2d=True)
    except sf.SoundFileError as err:
        raise AudioFormatError(f"Could not read audio file '{path}': {err}") from err

    bit_depth = _SUBTYPE_BITS[info.subtype]
    audio_format = AudioFormat(
        sample_rate=float(sample_rate),
        bit_depth=bit_depth,
        channels=int(data.shape[1]),
    )
    # (frames, channels) in C order is already the interleaved sequence.
    ints = data.reshape(-1).astype(np.int64) >> (_INT32_BITS - bit_depth)
    raw_data = PcmCodec(audio_format).pack_ints(ints)

    logger.debug(
        "audio_read",
        path=str(path),
        subtype=info.subtype,
        frames=int(data.shape[0]),
        sample_rate=sample_rate,
        channels=audio_format.channels,
    )
    return raw_data, audio_format


def write_audio(
    path: Path,
    data: bytes,
    audio_format: AudioFormat,
    container: str = "WAV",
) -> None:
    """Write raw PCM bytes as an audio file.

    The samples are stored at the same bit depth. Byte order and
    signedness follow the container's conventions, not *audio_format*.

    Args:
        path: Output path.
        data: Raw PCM bytes laid out as *audio_format*.
        audio_format: Layout of *data*.
        container: libsndfile major format name ("WAV", "FLAC", "AIFF", ...).

    Raises:
        UnsupportedBitDepthError: If the bit depth is not supported.
        AudioFormatError: If the container cannot store the bit depth.
    """
    codec = PcmCodec(audio_format)
    container = container.upper()
    subtype = next(
        (
            candidate
            for candidate in _BITS_SUBTYPES[audio_format.bit_depth]
            if sf.check_format(container, candidate)
        ),
        None,
    )
    if subtype is None:
        raise AudioFormatError(
            f"{container} cannot store {audio_format.bit_depth}-bit integer samples"
        )

    ints = codec.unpack_ints(data) << (_INT32_BITS - audio_format.bit_depth)
    frames = ints.astype(np.int32).reshape(-1, audio_format.channels)

    try:
        sf.write(
            str(path),
            frames,
            round(audio_format.sample_rate),
            subtype=subtype,
            format=container,
        )
    except sf.SoundFileError as err:
        raise AudioFormatError(f"Could not write audio file '{path}': {err}") from err

    logger.debug("audio_written", path=str(path), subtype=subtype, frames=int(frames.shape[0]))


def container_for(path: Path) -> str:
    """libsndfile major format matching *path*'s extension, WAV if unknown."""
    extension = path.suffix.lstrip(".").upper()
    return extension if extension in sf.available_formats() else "WAV"
