import logging
from dataclasses import replace

from gpx_wind.distance import calculate_bearing, haversine_distance
from gpx_wind.models import AnalysisParams, SpeedSummary, TrackPoint

logger = logging.getLogger(__name__)

# Near-zero speed over a real displacement suggests a GPS glitch
_LOW_SPEED_KMH = 0.1
_LOW_SPEED_MIN_DISTANCE_M = 5.0


def calculate_speed(
    distance_m: float, elapsed_s: float, prev_speed: float, params: AnalysisParams
) -> float:
    """Calculate speed in km/h for one step of the track.

    Clock anomalies (elapsed <= 0) keep the previous speed. Readings above
    params.max_realistic_speed_kmh are treated as GPS jitter and replaced by
    the previous speed, or params.fallback_speed_kmh if there is none yet.
    """
    if elapsed_s <= 0:
        logger.debug("Invalid time difference: %ss", elapsed_s)
        return prev_speed

    if distance_m <= 0:
        return 0.0

    speed_kmh = distance_m / elapsed_s * 3.6

    if speed_kmh > params.max_realistic_speed_kmh:
        logger.debug("Unrealistic speed detected: %.1f km/h, using previous speed", speed_kmh)
        return prev_speed or params.fallback_speed_kmh

    if speed_kmh < _LOW_SPEED_KMH and distance_m > _LOW_SPEED_MIN_DISTANCE_M:
        logger.debug("Very low speed detected: %.2f km/h over %.1fm", speed_kmh, distance_m)

    return speed_kmh


def derive_kinematics(points: list[TrackPoint], params: AnalysisParams | None = None) -> list[TrackPoint]:
    """Compute cumulative distance, speed and bearing for a time-ordered track.

    Returns new TrackPoint instances; the input list is left untouched, so
    running this twice on the same input yields identical results.
    """
    if params is None:
        params = AnalysisParams()
    if not points:
        return []

    result = [replace(points[0], distance_km=0.0, speed_kmh=0.0, bearing_deg=0.0)]
    cumulative_m = 0.0

    for curr in points[1:]:
        prev = result[-1]
        dist = haversine_distance(prev.lat, prev.lon, curr.lat, curr.lon)
        cumulative_m += dist

        elapsed = (curr.time - prev.time).total_seconds()
        speed = calculate_speed(dist, elapsed, prev.speed_kmh, params)

        # Bearing from GPS jitter while stationary is noise
        if dist > params.min_movement_m:
            bearing = calculate_bearing(prev.lat, prev.lon, curr.lat, curr.lon)
        else:
            bearing = prev.bearing_deg

        result.append(
            replace(curr, distance_km=cumulative_m / 1000, speed_kmh=speed, bearing_deg=bearing)
        )

    return result


def summarize_speeds(points: list[TrackPoint]) -> SpeedSummary:
    """Summarize derived speeds; averages ignore stationary points."""
    speeds = [p.speed_kmh for p in points if p.speed_kmh > 0]
    return SpeedSummary(
        avg_speed_kmh=sum(speeds) / len(speeds) if speeds else 0.0,
        max_speed_kmh=max(speeds) if speeds else 0.0,
        total_distance_km=points[-1].distance_km if points else 0.0,
        zero_speed_points=sum(1 for p in points if p.speed_kmh == 0),
    )


def log_speed_summary(points: list[TrackPoint]) -> SpeedSummary:
    summary = summarize_speeds(points)
    logger.info(
        "Calculated speeds and bearings for %s points: %.2f km, avg %.1f km/h, max %.1f km/h, %s stationary",
        len(points),
        summary.total_distance_km,
        summary.avg_speed_kmh,
        summary.max_speed_kmh,
        summary.zero_speed_points,
    )
    return summary
