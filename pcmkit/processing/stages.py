"""Base interface for float-domain processing stages."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import numpy as np


class AudioStage(ABC):
    """Individual float-domain stage of the processing chain.

    Each stage receives float32 samples of shape ``(channels, frames)``
    and returns a new array of the same shape. Stages keep no per-call
    scratch state on the instance; a fresh working context is built for
    every call, so a stage may be reused across buffers.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Identifier name for the stage (e.g. 'noise_reduction')."""
        ...

    @abstractmethod
    def process(self, audio: np.ndarray, sample_rate: float) -> np.ndarray:
        """Process a whole buffer.

        Args:
            audio: Float32 samples, shape ``(channels, frames)``.
            sample_rate: Sample rate in Hz.

        Returns:
            Processed float32 samples, same shape as *audio*.
        """
        ...

    def reset(self) -> None:  # noqa: B027
        """Drop state that outlives a single call (e.g. a learned noise profile).

        Default implementation is a no-op.
        """
