"""
Tests for autocorrelation and peak detection.
"""

import numpy as np
import pytest

from wavetempo.analysis.correlation import autocorrelate, detect_peak, lag_bounds, lag_to_bpm
from wavetempo.errors import DegenerateRangeError


class TestAutocorrelate:
    """Test cases for autocorrelate()."""

    @pytest.mark.parametrize("n", [1, 4, 33])
    def test_zeros(self, n):
        np.testing.assert_array_equal(autocorrelate(np.zeros(n)), np.zeros(n))

    def test_impulse(self):
        np.testing.assert_array_equal(autocorrelate([1, 0, 0, 0]), [1, 0, 0, 0])

    def test_matches_definition(self):
        """Test y[k] = sum x[i] * x[i + k] against a direct loop."""
        rng = np.random.default_rng(2)
        x = rng.standard_normal(50)
        expected = [sum(x[i] * x[i + k] for i in range(len(x) - k)) for k in range(len(x))]
        np.testing.assert_allclose(autocorrelate(x), expected)

    def test_small_example(self):
        np.testing.assert_allclose(autocorrelate([1, 2, 3]), [14, 8, 3])

    def test_output_length(self):
        assert len(autocorrelate(np.ones(17))) == 17

    def test_empty(self):
        assert len(autocorrelate([])) == 0


class TestDetectPeak:
    """Test cases for detect_peak()."""

    def test_positive_match_preferred(self):
        """Test that +5 at index 2 wins over -5 at index 1."""
        assert detect_peak([2, -5, 5, 1]) == 2

    def test_first_negative_match(self):
        """Test that without a positive peak the first -5 wins."""
        assert detect_peak([2, -5, -5, 1]) == 1

    def test_first_of_equal_positive_peaks(self):
        assert detect_peak([0, 3, 1, 3]) == 1

    def test_all_zero(self):
        assert detect_peak([0, 0, 0]) == 0

    def test_empty(self):
        assert detect_peak([]) is None


class TestLagBounds:
    """Test cases for the plausible tempo lag range."""

    def test_bounds_at_44100(self):
        # 44100 / 8 = 5512.5 envelope samples per second
        assert lag_bounds(44100) == (1503, 8268)

    def test_bounds_at_4000(self):
        assert lag_bounds(4000) == (136, 750)

    def test_low_rate_is_degenerate(self):
        """Test that min_lag < 1 is rejected."""
        with pytest.raises(DegenerateRangeError):
            lag_bounds(20)

    def test_lowest_usable_rate(self):
        min_lag, max_lag = lag_bounds(30)
        assert min_lag == 1
        assert max_lag > min_lag


class TestLagToBpm:
    """Test cases for lag_to_bpm()."""

    def test_conversion(self):
        assert lag_to_bpm(250, 4000) == pytest.approx(120.0)

    def test_range_ends(self):
        """Test that the lag range maps back into roughly 40-220 BPM."""
        min_lag, max_lag = lag_bounds(44100)
        assert lag_to_bpm(min_lag, 44100) <= 220.5
        assert lag_to_bpm(max_lag, 44100) >= 40

    def test_zero_lag_raises(self):
        with pytest.raises(DegenerateRangeError):
            lag_to_bpm(0, 44100)
