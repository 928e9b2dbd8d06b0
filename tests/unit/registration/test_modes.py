"""Unit tests for per-channel value transforms."""

from __future__ import annotations

import numpy as np
import pytest
from hypothesis import given
from hypothesis import strategies as st

from chromatile.exceptions import BitmaskRangeError
from chromatile.registration.modes import (
    MAX_BITMASK_LABEL,
    ChannelMode,
    apply_mode,
    bitmask,
)


class TestBitmask:
    @pytest.mark.parametrize(
        ("label", "flag"),
        [(0, 0), (1, 1), (2, 2), (3, 4), (4, 8), (5, 16), (8, 128)],
    )
    def test_label_to_flag(self, label: int, flag: int) -> None:
        assert bitmask(label) == flag

    @pytest.mark.parametrize("label", [-1, 9, 255])
    def test_out_of_range_label(self, label: int) -> None:
        with pytest.raises(BitmaskRangeError) as exc_info:
            bitmask(label)
        assert exc_info.value.value == label

    @given(st.integers(min_value=1, max_value=MAX_BITMASK_LABEL))
    def test_nonzero_labels_are_single_bits(self, label: int) -> None:
        flag = bitmask(label)
        assert flag > 0
        assert flag & (flag - 1) == 0

    def test_nonzero_labels_are_distinct(self) -> None:
        flags = [bitmask(label) for label in range(1, MAX_BITMASK_LABEL + 1)]
        assert len(set(flags)) == len(flags)


class TestChannelMode:
    def test_values(self) -> None:
        assert ChannelMode("bitmask") is ChannelMode.bitmask
        assert ChannelMode("pass-through") is ChannelMode.pass_through
        assert ChannelMode("skip") is ChannelMode.skip

    def test_heatmap_is_pass_through(self) -> None:
        assert ChannelMode("heatmap") is ChannelMode.pass_through

    def test_unknown_mode(self) -> None:
        with pytest.raises(ValueError):
            ChannelMode("sepia")


class TestApplyMode:
    @pytest.fixture
    def band(self) -> np.ndarray:
        return np.array([[0, 1, 2], [3, 4, 8]], dtype=np.uint8)

    def test_bitmask(self, band: np.ndarray) -> None:
        result = apply_mode(band, ChannelMode.bitmask)
        np.testing.assert_array_equal(result, [[0, 1, 2], [4, 8, 128]])
        assert result.dtype == np.uint8

    def test_pass_through_is_identity(self) -> None:
        values = np.arange(256, dtype=np.uint8).reshape(16, 16)
        np.testing.assert_array_equal(
            apply_mode(values, ChannelMode.pass_through), values
        )

    def test_skip_zeroes_band(self, band: np.ndarray) -> None:
        result = apply_mode(band, ChannelMode.skip)
        assert result.shape == band.shape
        assert not result.any()

    def test_input_is_not_modified(self, band: np.ndarray) -> None:
        original = band.copy()
        apply_mode(band, ChannelMode.bitmask)
        np.testing.assert_array_equal(band, original)

    def test_bitmask_rejects_large_label(self) -> None:
        band = np.array([[0, 9]], dtype=np.uint8)
        with pytest.raises(BitmaskRangeError, match="channel 'red'"):
            apply_mode(band, ChannelMode.bitmask, channel="red")

    def test_large_values_fine_for_other_modes(self) -> None:
        band = np.array([[200, 255]], dtype=np.uint8)
        np.testing.assert_array_equal(
            apply_mode(band, ChannelMode.pass_through), band
        )

    def test_empty_band(self) -> None:
        band = np.zeros((0, 0), dtype=np.uint8)
        assert apply_mode(band, ChannelMode.bitmask).shape == (0, 0)

