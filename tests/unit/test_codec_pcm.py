"""Tests for the linear PCM codec.

Validates byte layouts for 8, 16 and 24-bit in both byte orders,
rounding and clamping on encode, lenient handling of partial frames,
and the decimated display view.
"""

from __future__ import annotations

import numpy as np
import pytest

from pcmkit._types import AudioFormat
from pcmkit.codec import PcmCodec, decode, decode_for_display, encode, round_half_up
from pcmkit.exceptions import AudioFormatError, UnsupportedBitDepthError


class TestRoundHalfUp:
    def test_positive_tie_rounds_up(self) -> None:
        assert round_half_up(np.array([63.5]))[0] == 64.0

    def test_negative_tie_rounds_toward_positive(self) -> None:
        assert round_half_up(np.array([-63.5]))[0] == -63.0

    def test_non_ties_round_to_nearest(self) -> None:
        result = round_half_up(np.array([1.4, 1.6, -1.4, -1.6]))
        np.testing.assert_array_equal(result, [1.0, 2.0, -1.0, -2.0])


class TestDecode:
    def test_decode_16bit_little_endian(self) -> None:
        fmt = AudioFormat(sample_rate=44100, bit_depth=16)
        data = np.array([0, 16384, -16384, 32767, -32768], dtype="<i2").tobytes()

        result = decode(data, fmt)

        assert result.shape == (1, 5)
        assert result.dtype == np.float32
        np.testing.assert_allclose(result[0], [0.0, 0.5, -0.5, 32767 / 32768, -1.0])

    def test_decode_16bit_big_endian(self) -> None:
        fmt = AudioFormat(sample_rate=44100, bit_depth=16, big_endian=True)
        data = np.array([16384, -8192], dtype=">i2").tobytes()

        result = decode(data, fmt)

        np.testing.assert_allclose(result[0], [0.5, -0.25])

    def test_decode_8bit_unsigned_offset(self) -> None:
        fmt = AudioFormat(sample_rate=8000, bit_depth=8)

        result = decode(bytes([0, 128, 255]), fmt)

        np.testing.assert_allclose(result[0], [-1.0, 0.0, 127 / 128])

    def test_decode_8bit_signed_when_flag_set(self) -> None:
        fmt = AudioFormat(sample_rate=8000, bit_depth=8, signed=True)

        result = decode(bytes([0x40, 0xC0]), fmt)

        np.testing.assert_allclose(result[0], [0.5, -0.5])

    def test_decode_24bit_sign_extension(self) -> None:
        fmt = AudioFormat(sample_rate=48000, bit_depth=24)
        data = bytes([0xFF, 0xFF, 0xFF, 0x00, 0x00, 0x80, 0xFF, 0xFF, 0x7F])

        result = decode(data, fmt)

        np.testing.assert_allclose(
            result[0], [-1 / 8388608, -1.0, 8388607 / 8388608], rtol=1e-7
        )

    def test_decode_24bit_big_endian(self) -> None:
        fmt = AudioFormat(sample_rate=48000, bit_depth=24, big_endian=True)
        data = bytes([0x80, 0x00, 0x00, 0x40, 0x00, 0x00])

        result = decode(data, fmt)

        np.testing.assert_allclose(result[0], [-1.0, 0.5])

    def test_decode_deinterleaves_channels(self) -> None:
        fmt = AudioFormat(sample_rate=44100, bit_depth=16, channels=2)
        data = np.array([1, 2, 3, 4], dtype="<i2").tobytes()

        result = decode(data, fmt)

        assert result.shape == (2, 2)
        np.testing.assert_allclose(result[0] * 32768, [1, 3])
        np.testing.assert_allclose(result[1] * 32768, [2, 4])

    def test_decode_drops_partial_trailing_frame(self) -> None:
        fmt = AudioFormat(sample_rate=44100, bit_depth=16, channels=2)
        data = np.array([100, 200, 300], dtype="<i2").tobytes() + b"\x01"

        result = decode(data, fmt)

        assert result.shape == (2, 1)

    def test_decode_empty_buffer(self) -> None:
        fmt = AudioFormat(sample_rate=44100, bit_depth=16)

        result = decode(b"", fmt)

        assert result.shape == (1, 0)


class TestEncode:
    def test_encode_clamps_instead_of_wrapping(self) -> None:
        fmt = AudioFormat(sample_rate=44100, bit_depth=16)

        data = encode(np.array([[1.0, 1.5, -1.5]]), fmt)

        np.testing.assert_array_equal(np.frombuffer(data, dtype="<i2"), [32767, 32767, -32768])

    def test_encode_rounds_half_up(self) -> None:
        fmt = AudioFormat(sample_rate=44100, bit_depth=16)

        data = encode(np.array([[0.5 / 32768, -0.5 / 32768, 1.5 / 32768]]), fmt)

        np.testing.assert_array_equal(np.frombuffer(data, dtype="<i2"), [1, 0, 2])

    def test_encode_8bit_clamps_to_byte_range(self) -> None:
        fmt = AudioFormat(sample_rate=8000, bit_depth=8)

        data = encode(np.array([[-2.0, 0.0, 2.0]]), fmt)

        assert data == bytes([0, 128, 255])

    def test_encode_24bit_little_endian_layout(self) -> None:
        fmt = AudioFormat(sample_rate=48000, bit_depth=24)

        data = encode(np.array([[0.5, -1.0, 2.0]]), fmt)

        assert data == bytes([0x00, 0x00, 0x40, 0x00, 0x00, 0x80, 0xFF, 0xFF, 0x7F])

    def test_encode_24bit_big_endian_layout(self) -> None:
        fmt = AudioFormat(sample_rate=48000, bit_depth=24, big_endian=True)

        data = encode(np.array([[0.5, -1.0]]), fmt)

        assert data == bytes([0x40, 0x00, 0x00, 0x80, 0x00, 0x00])

    def test_encode_interleaves_channels(self) -> None:
        fmt = AudioFormat(sample_rate=44100, bit_depth=16, channels=2)
        samples = np.array([[1, 3], [2, 4]], dtype=np.float64) / 32768

        data = encode(samples, fmt)

        np.testing.assert_array_equal(np.frombuffer(data, dtype="<i2"), [1, 2, 3, 4])

    def test_encode_channel_mismatch_raises(self) -> None:
        fmt = AudioFormat(sample_rate=44100, bit_depth=16, channels=2)

        with pytest.raises(ValueError, match="channel"):
            encode(np.zeros((1, 4)), fmt)

    def test_encode_24bit_saturates_infinite_and_huge_values(self) -> None:
        fmt = AudioFormat(sample_rate=48000, bit_depth=24)

        data = encode(np.array([[np.inf, 1e30, -np.inf, -1e30]]), fmt)

        assert data == bytes([0xFF, 0xFF, 0x7F] * 2 + [0x00, 0x00, 0x80] * 2)

    def test_encode_nan_becomes_silence(self) -> None:
        fmt = AudioFormat(sample_rate=8000, bit_depth=8)

        data = encode(np.array([[np.nan, 0.5]]), fmt)

        assert data == bytes([128, 192])


class TestQuantize:
    def test_clamps_in_float_domain(self) -> None:
        codec = PcmCodec(AudioFormat(sample_rate=44100, bit_depth=16))

        result = codec.quantize(np.array([1e19, -1e19, np.inf, -np.inf, np.nan, 2.5]))

        np.testing.assert_array_equal(result, [32767, -32768, 32767, -32768, 0, 3])
        assert result.dtype == np.int64


class TestRoundTrip:
    @pytest.mark.parametrize(
        ("bit_depth", "big_endian"),
        [(8, False), (16, False), (16, True), (24, False), (24, True)],
    )
    def test_round_trip_is_byte_exact(self, bit_depth: int, big_endian: bool) -> None:
        fmt = AudioFormat(sample_rate=44100, bit_depth=bit_depth, big_endian=big_endian)
        rng = np.random.default_rng(seed=7)
        data = rng.integers(0, 256, size=fmt.frame_size * 512, dtype=np.uint8).tobytes()
        codec = PcmCodec(fmt)

        assert codec.encode(codec.decode(data)) == data


class TestUnsupportedFormats:
    @pytest.mark.parametrize("bit_depth", [4, 12, 32])
    def test_unsupported_bit_depth_raises(self, bit_depth: int) -> None:
        fmt = AudioFormat(sample_rate=44100, bit_depth=bit_depth)

        with pytest.raises(UnsupportedBitDepthError) as exc_info:
            PcmCodec(fmt)

        assert exc_info.value.bit_depth == bit_depth
        assert isinstance(exc_info.value, AudioFormatError)
        assert "not supported" in str(exc_info.value)

    def test_invalid_channel_count_rejected(self) -> None:
        with pytest.raises(ValueError, match="channels"):
            AudioFormat(sample_rate=44100, bit_depth=16, channels=0)


class TestDecodeForDisplay:
    def test_decimates_to_max_points(self) -> None:
        fmt = AudioFormat(sample_rate=44100, bit_depth=16)
        values = np.arange(100, dtype="<i2")

        result = decode_for_display(values.tobytes(), fmt, max_points=10)

        assert len(result) == 10
        np.testing.assert_allclose(result * 32768, values[::10])

    def test_short_buffer_is_not_decimated(self) -> None:
        fmt = AudioFormat(sample_rate=44100, bit_depth=16)
        values = np.arange(50, dtype="<i2")

        result = decode_for_display(values.tobytes(), fmt, max_points=10_000)

        assert len(result) == 50

    def test_works_on_interleaved_stream(self) -> None:
        fmt = AudioFormat(sample_rate=44100, bit_depth=16, channels=2)
        values = np.arange(40, dtype="<i2")

        result = decode_for_display(values.tobytes(), fmt, max_points=20)

        np.testing.assert_allclose(result * 32768, values[::2])
