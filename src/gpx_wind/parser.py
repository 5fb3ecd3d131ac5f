import logging

import gpxpy
import gpxpy.gpx
from defusedxml import DefusedXmlException
from defusedxml import ElementTree as ET

from gpx_wind.errors import EmptyTrackError, InvalidFormatError
from gpx_wind.models import RawPoint

logger = logging.getLogger(__name__)

POINT_KINDS = ("trkpt", "rtept", "wpt")


def parse_gpx(filepath: str) -> list[RawPoint]:
    """Parse a GPX file and return its point records.

    Raises:
        FileNotFoundError: If the file does not exist.
        InvalidFormatError: If the file is not a readable GPX document.
        EmptyTrackError: If the document holds no points at all.
    """
    with open(filepath, "r", encoding="utf-8") as f:
        return parse_gpx_text(f.read())


def parse_gpx_text(text: str) -> list[RawPoint]:
    """Parse GPX document text into point records.

    Track points are preferred; route points and then waypoints are used
    when a document has none.

    When gpxpy rejects a well-formed document over a bad point value (a
    non-numeric <ele> or lat, say), the points are read again as raw text
    so that ingestion can drop or default the bad fields per point.
    """
    try:
        gpx = gpxpy.parse(text)
    except gpxpy.gpx.GPXXMLSyntaxException as e:
        raise InvalidFormatError(f"Invalid GPX file format: {e}") from e
    except (gpxpy.gpx.GPXException, ValueError) as e:
        logger.warning("GPX contains malformed values, reading points as raw text: %s", e)
        candidates = _raw_candidates(text)
    else:
        candidates = _gpxpy_candidates(gpx)

    for kind, records in candidates:
        logger.debug("Found %s %s points", len(records), kind)
        if records:
            return records

    raise EmptyTrackError(
        "No GPS points found in GPX file. Please ensure your file contains "
        "track points, route points, or waypoints."
    )


def _gpxpy_candidates(gpx: gpxpy.gpx.GPX) -> list[tuple[str, list[RawPoint]]]:
    gpx_points = {
        "trkpt": [pt for track in gpx.tracks for segment in track.segments for pt in segment.points],
        "rtept": [pt for route in gpx.routes for pt in route.points],
        "wpt": list(gpx.waypoints),
    }
    return [
        (
            kind,
            [
                RawPoint(lat=pt.latitude, lon=pt.longitude, elevation=pt.elevation, time=pt.time)
                for pt in gpx_points[kind]
            ],
        )
        for kind in POINT_KINDS
    ]


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _child_text(element, name: str) -> str | None:
    for child in element:
        if _local_name(child.tag) == name:
            return (child.text or "").strip() or None
    return None


def _raw_candidates(text: str) -> list[tuple[str, list[RawPoint]]]:
    """Read point attributes and children as unvalidated strings."""
    try:
        root = ET.fromstring(text)
    except (ET.ParseError, DefusedXmlException) as e:
        raise InvalidFormatError(f"Invalid GPX file format: {e}") from e
    if _local_name(root.tag) != "gpx":
        raise InvalidFormatError(f"Invalid GPX file format: root element is <{_local_name(root.tag)}>, not <gpx>")

    elements = {kind: [] for kind in POINT_KINDS}
    for element in root.iter():
        name = _local_name(element.tag)
        if name in elements:
            elements[name].append(element)

    return [
        (
            kind,
            [
                RawPoint(
                    lat=el.get("lat"),
                    lon=el.get("lon"),
                    elevation=_child_text(el, "ele"),
                    time=_child_text(el, "time"),
                )
                for el in elements[kind]
            ],
        )
        for kind in POINT_KINDS
    ]
