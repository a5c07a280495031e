"""PCM codec layer: raw bytes <-> normalized float samples."""

from __future__ import annotations

from pcmkit.codec.pcm import PcmCodec, decode, decode_for_display, encode, round_half_up

__all__ = ["PcmCodec", "decode", "decode_for_display", "encode", "round_half_up"]
