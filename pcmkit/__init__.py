"""pcmkit — PCM buffer processing: gain, spectral noise reduction and look-ahead limiting."""

from __future__ import annotations

__version__ = "0.1.0"
