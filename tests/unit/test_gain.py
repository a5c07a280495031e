"""Tests for the integer-domain gain stage."""

from __future__ import annotations

import numpy as np
import pytest

from pcmkit._types import AudioFormat
from pcmkit.exceptions import UnsupportedBitDepthError
from pcmkit.processing.gain import apply_gain, is_identity_gain

from tests.helpers import int16_pcm


class TestIdentityGain:
    @pytest.mark.parametrize("factor", [1.0, 1.0005, 0.9995])
    def test_identity_returns_same_bytes(self, mono_16bit: AudioFormat, factor: float) -> None:
        data = int16_pcm([1, -1, 12345, -32768, 32767])

        result = apply_gain(data, mono_16bit, factor)

        assert result == data

    def test_tolerance_boundary(self) -> None:
        assert is_identity_gain(1.0009)
        assert not is_identity_gain(1.002)

    def test_unsupported_format_raises_even_for_identity(self) -> None:
        fmt = AudioFormat(sample_rate=44100, bit_depth=12)

        with pytest.raises(UnsupportedBitDepthError):
            apply_gain(b"\x00\x00", fmt, 1.0)


class TestApplyGain16Bit:
    def test_doubles_samples(self, mono_16bit: AudioFormat) -> None:
        result = apply_gain(int16_pcm([1000, -1000]), mono_16bit, 2.0)

        np.testing.assert_array_equal(np.frombuffer(result, dtype="<i2"), [2000, -2000])

    def test_clamps_instead_of_wrapping(self, mono_16bit: AudioFormat) -> None:
        result = apply_gain(int16_pcm([30000, -30000]), mono_16bit, 2.0)

        np.testing.assert_array_equal(np.frombuffer(result, dtype="<i2"), [32767, -32768])

    def test_huge_factor_saturates(self, mono_16bit: AudioFormat) -> None:
        result = apply_gain(int16_pcm([30000, -30000, 0]), mono_16bit, 1e15)

        np.testing.assert_array_equal(np.frombuffer(result, dtype="<i2"), [32767, -32768, 0])

    def test_zero_gain_silences(self, mono_16bit: AudioFormat) -> None:
        result = apply_gain(int16_pcm([500, -500, 7]), mono_16bit, 0.0)

        np.testing.assert_array_equal(np.frombuffer(result, dtype="<i2"), [0, 0, 0])

    def test_big_endian(self) -> None:
        fmt = AudioFormat(sample_rate=44100, bit_depth=16, big_endian=True)
        data = np.array([1000, -3], dtype=">i2").tobytes()

        result = apply_gain(data, fmt, 0.5)

        np.testing.assert_array_equal(np.frombuffer(result, dtype=">i2"), [500, -1])

    def test_trailing_partial_frame_copied_through(self, mono_16bit: AudioFormat) -> None:
        data = int16_pcm([100]) + b"\x07"

        result = apply_gain(data, mono_16bit, 2.0)

        assert result == int16_pcm([200]) + b"\x07"


class TestApplyGain8Bit:
    def test_tie_rounds_up(self) -> None:
        fmt = AudioFormat(sample_rate=8000, bit_depth=8)

        # 0xFF -> centered 127 -> 63.5 -> 64 -> 192
        result = apply_gain(bytes([0xFF]), fmt, 0.5)

        assert result == bytes([192])

    def test_negative_tie_rounds_toward_positive(self) -> None:
        fmt = AudioFormat(sample_rate=8000, bit_depth=8)

        # 0x01 -> centered -127 -> -63.5 -> -63 -> 65
        result = apply_gain(bytes([0x01]), fmt, 0.5)

        assert result == bytes([65])

    def test_zero_gain_returns_midpoint(self) -> None:
        fmt = AudioFormat(sample_rate=8000, bit_depth=8)

        result = apply_gain(bytes([0, 255, 17]), fmt, 0.0)

        assert result == bytes([128, 128, 128])

    def test_clamps_to_byte_range(self) -> None:
        fmt = AudioFormat(sample_rate=8000, bit_depth=8)

        result = apply_gain(bytes([10, 250]), fmt, 3.0)

        assert result == bytes([0, 255])


class TestApplyGain24Bit:
    def test_clamps_to_24bit_range(self) -> None:
        fmt = AudioFormat(sample_rate=48000, bit_depth=24)
        data = bytes([0x00, 0x00, 0x40, 0x00, 0x00, 0xC0])  # +0x400000, -0x400000

        result = apply_gain(data, fmt, 2.5)

        assert result == bytes([0xFF, 0xFF, 0x7F, 0x00, 0x00, 0x80])

    def test_preserves_sign(self) -> None:
        fmt = AudioFormat(sample_rate=48000, bit_depth=24)
        data = bytes([0xFE, 0xFF, 0xFF])  # -2

        result = apply_gain(data, fmt, 2.0)

        assert result == bytes([0xFC, 0xFF, 0xFF])  # -4
