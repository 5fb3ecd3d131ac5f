from datetime import datetime, timedelta, timezone

import pytest

from gpx_wind.models import AnalysisParams, RawPoint, TrackPoint

BASE_TIME = datetime(2024, 6, 15, 8, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def params():
    return AnalysisParams(request_delay_s=0.0)


@pytest.fixture
def base_time():
    return BASE_TIME


@pytest.fixture
def simple_track_points():
    """A short time-ordered track: heading north-east, ~140m apart every 20s."""
    return [
        TrackPoint(lat=37.7749, lon=-122.4194, elevation=10.0, time=BASE_TIME),
        TrackPoint(
            lat=37.7758,
            lon=-122.4183,
            elevation=10.0,
            time=BASE_TIME + timedelta(seconds=20),
        ),
        TrackPoint(
            lat=37.7767,
            lon=-122.4172,
            elevation=10.0,
            time=BASE_TIME + timedelta(seconds=40),
        ),
    ]


@pytest.fixture
def raw_records():
    """Raw records as a parser would deliver them, with string fields."""
    return [
        RawPoint(lat="37.7749", lon="-122.4194", elevation="10", time="2024-06-15T08:00:00Z"),
        RawPoint(lat="37.7758", lon="-122.4183", elevation="11", time="2024-06-15T08:00:20Z"),
        RawPoint(lat="37.7767", lon="-122.4172", elevation="12", time="2024-06-15T08:00:40Z"),
    ]


@pytest.fixture
def hour_long_track():
    """A track heading due north for one hour, one point per minute."""
    return [
        TrackPoint(
            lat=45.0 + i * 0.001,
            lon=7.0,
            elevation=200.0,
            time=BASE_TIME + timedelta(minutes=i),
        )
        for i in range(61)
    ]
