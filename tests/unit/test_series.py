import math
from datetime import timedelta

import pytest

from gpx_wind.models import TrackPoint
from gpx_wind.series import bin_series, chart_series


@pytest.fixture
def enriched_points(base_time):
    return [
        TrackPoint(
            lat=45.0,
            lon=7.0,
            elevation=100.0 + i,
            time=base_time + timedelta(minutes=30 * i),
            distance_km=2.0 * i,
            speed_kmh=20.0 + i,
            wind_faced_kmh=float(i) - 1,
        )
        for i in range(3)
    ]


class TestChartSeries:
    def test_time_axis_in_hours(self, enriched_points):
        xs, ys = chart_series(enriched_points, "speed_kmh", "time")
        assert xs == pytest.approx([0.0, 0.5, 1.0])
        assert ys == [20.0, 21.0, 22.0]

    def test_distance_axis(self, enriched_points):
        xs, ys = chart_series(enriched_points, "elevation", "distance")
        assert xs == [0.0, 2.0, 4.0]
        assert ys == [100.0, 101.0, 102.0]

    def test_unset_values_skipped(self, enriched_points):
        xs, ys = chart_series(enriched_points, "wind_speed_kmh", "distance")
        assert xs == []
        assert ys == []

    def test_unknown_field(self, enriched_points):
        with pytest.raises(ValueError):
            chart_series(enriched_points, "lat")

    def test_unknown_axis(self, enriched_points):
        with pytest.raises(ValueError):
            chart_series(enriched_points, "speed_kmh", "elevation")

    def test_empty(self):
        assert chart_series([], "speed_kmh") == ([], [])


class TestBinSeries:
    def test_equal_width_bins(self):
        xs = [0.0, 1.0, 2.0, 3.0]
        ys = [10.0, 20.0, 30.0, 50.0]
        bins = bin_series(xs, ys, bin_count=2)
        assert len(bins) == 2
        assert bins[0].x == pytest.approx(0.75)
        assert bins[0].mean == pytest.approx(15.0)
        assert bins[0].count == 2
        # Maximum x falls in the last bin
        assert bins[1].mean == pytest.approx(40.0)
        assert bins[1].count == 2

    def test_standard_error(self):
        bins = bin_series([0.0, 0.1, 1.0], [10.0, 20.0, 5.0], bin_count=1)
        values = [10.0, 20.0, 5.0]
        mean = sum(values) / 3
        std = math.sqrt(sum((v - mean) ** 2 for v in values) / 3)
        assert bins[0].sem == pytest.approx(std / math.sqrt(3))

    def test_empty_bins_omitted(self):
        bins = bin_series([0.0, 10.0], [1.0, 2.0], bin_count=5)
        assert [b.count for b in bins] == [1, 1]

    def test_constant_x(self):
        bins = bin_series([3.0, 3.0, 3.0], [1.0, 2.0, 3.0])
        assert len(bins) == 1
        assert bins[0].x == 3.0
        assert bins[0].mean == pytest.approx(2.0)

    def test_empty(self):
        assert bin_series([], []) == []

    def test_length_mismatch(self):
        with pytest.raises(ValueError):
            bin_series([1.0], [])

    def test_invalid_bin_count(self):
        with pytest.raises(ValueError):
            bin_series([1.0], [1.0], bin_count=0)
