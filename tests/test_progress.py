"""
Tests for progress ratio clamping and color interpolation.
"""

import pytest
from numpy.testing import assert_allclose

from rotor_monitor.progress import END_COLOR, START_COLOR, progress_color, progress_ratio


class TestProgressRatio:
    def test_clamped_below(self):
        assert progress_ratio(0, 100) == 0.0
        assert progress_ratio(-5, 100) == 0.0

    def test_clamped_above(self):
        assert progress_ratio(100, 100) == 1.0
        assert progress_ratio(250, 100) == 1.0

    def test_midpoint(self):
        assert progress_ratio(50, 100) == 0.5

    def test_monotonic(self):
        ratios = [progress_ratio(n, 100) for n in range(-10, 130)]
        assert all(b >= a for a, b in zip(ratios, ratios[1:]))

    def test_non_positive_total_raises(self):
        with pytest.raises(ValueError, match="total_steps"):
            progress_ratio(1, 0)


class TestProgressColor:
    def test_start_is_blue(self):
        assert progress_color(0.0) == (0.0, 0.0, 1.0) == START_COLOR

    def test_end_is_red(self):
        assert progress_color(1.0) == (1.0, 0.0, 0.0) == END_COLOR

    def test_midpoint(self):
        assert progress_color(0.5) == (0.5, 0.0, 0.5)

    def test_linear(self):
        for ratio in (0.1, 0.25, 0.8):
            assert_allclose(progress_color(ratio), (ratio, 0.0, 1.0 - ratio))

    def test_out_of_range_is_clamped(self):
        assert progress_color(-1.0) == START_COLOR
        assert progress_color(2.0) == END_COLOR
