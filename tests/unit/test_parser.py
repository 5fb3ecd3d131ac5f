import os
import tempfile

import pytest

from gpx_wind.errors import EmptyTrackError, InvalidFormatError
from gpx_wind.ingest import build_track
from gpx_wind.parser import parse_gpx, parse_gpx_text

SAMPLE_GPX_PATH = os.path.join(
    os.path.dirname(__file__), "..", "functional", "data", "sample_ride.gpx"
)


def _gpx(body: str) -> str:
    return f"""<?xml version="1.0"?>
    <gpx version="1.1" xmlns="http://www.topografix.com/GPX/1/1">
      {body}
    </gpx>"""


class TestParseGpx:
    def test_parse_sample_file(self):
        points = parse_gpx(SAMPLE_GPX_PATH)
        assert len(points) == 20
        assert points[0].lat == pytest.approx(37.7749)
        assert points[0].lon == pytest.approx(-122.4194)
        assert points[0].elevation == pytest.approx(10.0)
        assert points[0].time is not None

    def test_file_not_found(self):
        with pytest.raises(FileNotFoundError):
            parse_gpx("/nonexistent/path/file.gpx")

    def test_parse_from_temp_file(self):
        content = _gpx("""
          <trk><trkseg>
            <trkpt lat="37.0" lon="-122.0"><time>2024-06-15T08:00:00Z</time></trkpt>
          </trkseg></trk>""")
        with tempfile.NamedTemporaryFile(mode="w", suffix=".gpx", delete=False) as f:
            f.write(content)
            f.flush()
            points = parse_gpx(f.name)
        os.unlink(f.name)
        assert len(points) == 1
        assert points[0].lat == pytest.approx(37.0)


class TestParseGpxText:
    def test_missing_elevation_and_time(self):
        points = parse_gpx_text(_gpx("""
          <trk><trkseg>
            <trkpt lat="37.0" lon="-122.0"></trkpt>
          </trkseg></trk>"""))
        assert len(points) == 1
        assert points[0].elevation is None
        assert points[0].time is None

    def test_track_points_preferred_over_waypoints(self):
        points = parse_gpx_text(_gpx("""
          <wpt lat="10.0" lon="10.0"></wpt>
          <trk><trkseg>
            <trkpt lat="37.0" lon="-122.0"></trkpt>
            <trkpt lat="37.1" lon="-122.1"></trkpt>
          </trkseg></trk>"""))
        assert [p.lat for p in points] == pytest.approx([37.0, 37.1])

    def test_route_points_used_without_track(self):
        points = parse_gpx_text(_gpx("""
          <rte>
            <rtept lat="45.0" lon="7.0"></rtept>
            <rtept lat="45.1" lon="7.1"></rtept>
          </rte>"""))
        assert len(points) == 2
        assert points[1].lon == pytest.approx(7.1)

    def test_waypoints_used_as_last_resort(self):
        points = parse_gpx_text(_gpx('<wpt lat="10.0" lon="20.0"></wpt>'))
        assert len(points) == 1
        assert points[0].lon == pytest.approx(20.0)

    def test_multiple_segments_concatenated(self):
        points = parse_gpx_text(_gpx("""
          <trk>
            <trkseg><trkpt lat="1.0" lon="1.0"></trkpt></trkseg>
            <trkseg><trkpt lat="2.0" lon="2.0"></trkpt></trkseg>
          </trk>"""))
        assert [p.lat for p in points] == pytest.approx([1.0, 2.0])

    def test_no_points_raises_empty_track(self):
        with pytest.raises(EmptyTrackError, match="No GPS points found"):
            parse_gpx_text(_gpx("<trk><trkseg></trkseg></trk>"))

    def test_malformed_xml_raises_invalid_format(self):
        with pytest.raises(InvalidFormatError):
            parse_gpx_text("<gpx><trk><trkseg><trkpt lat=")

    def test_not_xml_raises_invalid_format(self):
        with pytest.raises(InvalidFormatError):
            parse_gpx_text("this is not a gpx file")

    def test_non_gpx_root_raises_invalid_format(self):
        with pytest.raises(InvalidFormatError):
            parse_gpx_text('<?xml version="1.0"?><kml><trkpt lat="abc" lon="1"/></kml>')


class TestMalformedPointValues:
    def test_non_numeric_elevation_defaults_to_zero(self):
        records = parse_gpx_text(_gpx("""
          <trk><trkseg>
            <trkpt lat="45.000" lon="7.0"><ele>120</ele><time>2024-06-15T08:00:00Z</time></trkpt>
            <trkpt lat="45.001" lon="7.0"><ele>121</ele><time>2024-06-15T08:00:20Z</time></trkpt>
            <trkpt lat="45.002" lon="7.0"><ele>n/a</ele><time>2024-06-15T08:00:40Z</time></trkpt>
          </trkseg></trk>"""))
        assert len(records) == 3

        track = build_track(records)
        assert len(track) == 3
        assert track[0].elevation == pytest.approx(120.0)
        assert track[2].elevation == 0.0
        assert track[2].lat == pytest.approx(45.002)

    def test_non_numeric_latitude_drops_point(self):
        records = parse_gpx_text(_gpx("""
          <trk><trkseg>
            <trkpt lat="45.000" lon="7.0"><time>2024-06-15T08:00:00Z</time></trkpt>
            <trkpt lat="abc" lon="7.0"><time>2024-06-15T08:00:20Z</time></trkpt>
            <trkpt lat="45.002" lon="7.0"><time>2024-06-15T08:00:40Z</time></trkpt>
          </trkseg></trk>"""))

        track = build_track(records)
        assert [p.lat for p in track] == pytest.approx([45.0, 45.002])

    def test_raw_reading_keeps_point_kind_preference(self):
        records = parse_gpx_text(_gpx("""
          <wpt lat="10.0" lon="10.0"></wpt>
          <trk><trkseg>
            <trkpt lat="37.0" lon="-122.0"><ele>high</ele></trkpt>
          </trkseg></trk>"""))
        assert len(records) == 1
        assert records[0].lat == "37.0"
        assert records[0].elevation == "high"
        assert records[0].time is None
