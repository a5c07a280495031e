"""Core types for pcmkit.

This module defines the enums and dataclasses shared by the codec, the
processing stages and the session layer.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

import numpy as np


class NoiseProfileState(Enum):
    """State of the noise profile held by the noise reduction stage.

    Valid transitions:
        UNSET -> AUTO_ESTIMATED (first processing call without a profile)
        UNSET -> LEARNED (explicit learning)
        AUTO_ESTIMATED -> LEARNED (explicit learning)
        LEARNED -> LEARNED (re-learning)
        Any -> UNSET (reset)
    """

    UNSET = "unset"
    AUTO_ESTIMATED = "auto_estimated"
    LEARNED = "learned"


@dataclass(frozen=True, slots=True)
class AudioFormat:
    """Layout of a raw PCM buffer.

    ``signed`` defaults to the WAV convention: unsigned for 8-bit,
    signed for 16 and 24-bit. The bit depth is validated by the codec,
    not here, so unsupported formats can still be described and reported.
    """

    sample_rate: float
    bit_depth: int
    channels: int = 1
    big_endian: bool = False
    signed: bool | None = None

    def __post_init__(self) -> None:
        if self.channels < 1:
            msg = f"channels must be >= 1, got {self.channels}"
            raise ValueError(msg)
        if self.sample_rate <= 0:
            msg = f"sample_rate must be > 0, got {self.sample_rate}"
            raise ValueError(msg)
        if self.signed is None:
            object.__setattr__(self, "signed", self.bit_depth != 8)

    @property
    def bytes_per_sample(self) -> int:
        return self.bit_depth // 8

    @property
    def frame_size(self) -> int:
        """Bytes per frame (one sample for every channel)."""
        return self.bytes_per_sample * self.channels

    def frame_count(self, n_bytes: int) -> int:
        """Number of whole frames in a buffer of *n_bytes*."""
        if self.frame_size == 0:
            return 0
        return n_bytes // self.frame_size


@dataclass(frozen=True, slots=True)
class RenderResult:
    """Output of one full recomputation of a session buffer.

    Attributes:
        pcm: Processed PCM bytes in the source format.
        display: Decimated float samples for waveform rendering.
        noise_profile_state: Profile state after the recomputation.
    """

    pcm: bytes
    display: np.ndarray
    noise_profile_state: NoiseProfileState
