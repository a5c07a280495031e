"""Centralized DSP primitives for pcmkit.

Pure signal processing: window generation and an in-place iterative
radix-2 Cooley-Tukey FFT. Zero imports from pcmkit.processing or
pcmkit.session; this module sits at the bottom of the dependency graph
alongside _audio_constants.
"""

from __future__ import annotations

from functools import lru_cache

import numpy as np

from pcmkit._audio_constants import FFT_SIZE
from pcmkit.exceptions import InvalidTransformSizeError

__all__ = [
    "SpectralEngine",
    "hanning_window",
    "is_power_of_two",
]

# ---------------------------------------------------------------------------
# Window functions
# ---------------------------------------------------------------------------


@lru_cache(maxsize=8)
def _hanning_window_cached(size: int) -> tuple[float, ...]:
    return tuple(np.hanning(size).astype(np.float32).tolist())


def hanning_window(size: int) -> np.ndarray:
    """Symmetric Hann window ``0.5 * (1 - cos(2*pi*i / (size - 1)))`` (float32, cached)."""
    return np.array(_hanning_window_cached(size), dtype=np.float32)


# ---------------------------------------------------------------------------
# FFT
# ---------------------------------------------------------------------------


def is_power_of_two(n: int) -> bool:
    return n > 0 and (n & (n - 1)) == 0


@lru_cache(maxsize=8)
def _bit_reversal_permutation(size: int) -> tuple[int, ...]:
    bits = size.bit_length() - 1
    indices = np.arange(size)
    reversed_indices = np.zeros(size, dtype=np.int64)
    for _ in range(bits):
        reversed_indices = (reversed_indices << 1) | (indices & 1)
        indices = indices >> 1
    return tuple(reversed_indices.tolist())


@lru_cache(maxsize=32)
def _twiddles(span: int) -> tuple[tuple[float, ...], tuple[float, ...]]:
    """Real and imaginary parts of ``exp(-2*pi*i*k / span)`` for ``k < span / 2``."""
    angle = -2.0 * np.pi * np.arange(span // 2) / span
    return tuple(np.cos(angle).tolist()), tuple(np.sin(angle).tolist())


class SpectralEngine:
    """Radix-2 FFT/IFFT operating in place on separate real/imag arrays.

    The engine only holds immutable lookup tables (bit-reversal order and
    twiddle factors), so one instance can be shared between callers.

    Args:
        size: Transform length, a power of two.

    Raises:
        InvalidTransformSizeError: If *size* is not a power of two.
    """

    def __init__(self, size: int = FFT_SIZE) -> None:
        if not is_power_of_two(size):
            raise InvalidTransformSizeError(size)
        self._size = size
        self._permutation = np.array(_bit_reversal_permutation(size), dtype=np.int64)
        self._stages: list[tuple[int, np.ndarray, np.ndarray]] = []
        span = 2
        while span <= size:
            w_real, w_imag = _twiddles(span)
            self._stages.append((span, np.array(w_real), np.array(w_imag)))
            span *= 2

    @property
    def size(self) -> int:
        """Transform length."""
        return self._size

    @property
    def n_bins(self) -> int:
        """Number of non-redundant bins of a real signal (``size // 2 + 1``)."""
        return self._size // 2 + 1

    def _check(self, real: np.ndarray, imag: np.ndarray) -> None:
        for arr in (real, imag):
            if arr.shape != (self._size,):
                raise InvalidTransformSizeError(
                    arr.shape[0] if arr.ndim == 1 else arr.size,
                    f"engine expects 1-D arrays of length {self._size}",
                )
            if not np.issubdtype(arr.dtype, np.floating) or not arr.flags.c_contiguous:
                raise InvalidTransformSizeError(
                    self._size, "arrays must be contiguous floating-point buffers"
                )

    def forward(self, real: np.ndarray, imag: np.ndarray) -> None:
        """Forward transform in place.

        Bit-reversal permutation followed by log2(N) butterfly stages with
        twiddle factors ``exp(-2*pi*i*k / span)``.

        Args:
            real: Real parts, overwritten with the spectrum's real parts.
            imag: Imaginary parts, overwritten likewise.
        """
        self._check(real, imag)
        real[:] = real[self._permutation]
        imag[:] = imag[self._permutation]

        for span, w_real, w_imag in self._stages:
            half = span // 2
            # Contiguous 1-D input, so these reshapes are views.
            re = real.reshape(-1, span)
            im = imag.reshape(-1, span)

            top_re = re[:, :half].astype(np.float64)
            top_im = im[:, :half].astype(np.float64)
            bottom_re = re[:, half:] * w_real - im[:, half:] * w_imag
            bottom_im = re[:, half:] * w_imag + im[:, half:] * w_real

            re[:, :half] = top_re + bottom_re
            im[:, :half] = top_im + bottom_im
            re[:, half:] = top_re - bottom_re
            im[:, half:] = top_im - bottom_im

    def inverse(self, real: np.ndarray, imag: np.ndarray) -> None:
        """Inverse transform in place: conjugate, forward, conjugate, divide by N."""
        self._check(real, imag)
        np.negative(imag, out=imag)
        self.forward(real, imag)
        np.negative(imag, out=imag)
        real /= self._size
        imag /= self._size

    def magnitude_phase(self, real: np.ndarray, imag: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        """Magnitude and phase of bins ``0..size/2`` of a transformed frame."""
        n_bins = self.n_bins
        magnitude = np.hypot(real[:n_bins], imag[:n_bins])
        phase = np.arctan2(imag[:n_bins], real[:n_bins])
        return magnitude, phase
