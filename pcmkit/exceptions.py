"""Typed exceptions for pcmkit.

Hierarchy:
    PcmkitError (base)
    +-- ConfigError
    +-- AudioError
    |   +-- AudioFormatError
    |   |   +-- UnsupportedBitDepthError
    |   +-- InvalidTransformSizeError
    +-- InvalidTransitionError
"""

from __future__ import annotations


class PcmkitError(Exception):
    """Base for all pcmkit exceptions."""


# --- Configuration ---


class ConfigError(PcmkitError):
    """Parameters that the processing chain cannot honour."""


# --- Audio ---


class AudioError(PcmkitError):
    """Error while decoding, transforming or storing audio."""


class AudioFormatError(AudioError):
    """Buffer or file layout that pcmkit cannot interpret."""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"Invalid audio format: {detail}")


class UnsupportedBitDepthError(AudioFormatError):
    """Bit depth outside the supported set; no stage will run."""

    def __init__(self, bit_depth: int, supported: tuple[int, ...]) -> None:
        self.bit_depth = bit_depth
        self.supported = supported
        expected = ", ".join(str(b) for b in supported)
        super().__init__(f"{bit_depth}-bit samples not supported (expected {expected})")


class InvalidTransformSizeError(AudioError):
    """FFT length is not a power of two or does not match the engine."""

    def __init__(self, size: int, reason: str = "length must be a power of two") -> None:
        self.size = size
        self.reason = reason
        super().__init__(f"Invalid transform size {size}: {reason}")


# --- State ---


class InvalidTransitionError(PcmkitError):
    """Invalid state transition in the noise profile state machine."""

    def __init__(self, from_state: str, to_state: str) -> None:
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(f"Invalid transition: {from_state} -> {to_state}")
