from dataclasses import dataclass, field
from datetime import datetime, timedelta

OPEN_METEO_ARCHIVE_URL = "https://archive-api.open-meteo.com/v1/archive"


@dataclass
class RawPoint:
    """One point record as delivered by a track-file parser, before validation."""
    lat: float | str | None
    lon: float | str | None
    elevation: float | str | None = None
    time: datetime | str | None = None


@dataclass
class TrackPoint:
    lat: float
    lon: float
    elevation: float  # meters, 0 when unknown
    time: datetime | None  # timezone-aware UTC
    distance_km: float = 0.0  # cumulative from the first point
    speed_kmh: float = 0.0
    bearing_deg: float = 0.0  # direction of travel into this point, 0=North
    wind_speed_kmh: float | None = None
    wind_direction_deg: float | None = None  # direction the wind blows from
    wind_faced_kmh: float | None = None  # positive = headwind, negative = tailwind

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "lat": self.lat,
            "lon": self.lon,
            "elevation": self.elevation,
            "time": self.time.isoformat() if self.time is not None else None,
            "distance_km": self.distance_km,
            "speed_kmh": self.speed_kmh,
            "bearing_deg": self.bearing_deg,
            "wind_speed_kmh": self.wind_speed_kmh,
            "wind_direction_deg": self.wind_direction_deg,
            "wind_faced_kmh": self.wind_faced_kmh,
        }


@dataclass(frozen=True)
class WindSample:
    time: datetime
    lat: float
    lon: float
    wind_speed_kmh: float
    wind_direction_deg: float
    is_default: bool = False  # True when substituted for a failed fetch

    def to_dict(self) -> dict:
        return {
            "time": self.time.isoformat(),
            "lat": self.lat,
            "lon": self.lon,
            "wind_speed_kmh": self.wind_speed_kmh,
            "wind_direction_deg": self.wind_direction_deg,
            "is_default": self.is_default,
        }


@dataclass(frozen=True)
class RouteStatistics:
    total_distance_km: float
    total_duration_hours: float
    avg_speed_kmh: float  # over moving points only
    avg_wind_speed_kmh: float
    avg_wind_faced_kmh: float  # signed
    max_headwind_kmh: float  # magnitude, >= 0
    max_tailwind_kmh: float  # magnitude, >= 0
    headwind_percentage: float  # share of points with wind_faced >= 0

    def to_dict(self) -> dict:
        return {
            "total_distance_km": self.total_distance_km,
            "total_duration_hours": self.total_duration_hours,
            "avg_speed_kmh": self.avg_speed_kmh,
            "avg_wind_speed_kmh": self.avg_wind_speed_kmh,
            "avg_wind_faced_kmh": self.avg_wind_faced_kmh,
            "max_headwind_kmh": self.max_headwind_kmh,
            "max_tailwind_kmh": self.max_tailwind_kmh,
            "headwind_percentage": self.headwind_percentage,
        }


@dataclass(frozen=True)
class SpeedSummary:
    avg_speed_kmh: float  # mean of non-zero speeds
    max_speed_kmh: float
    total_distance_km: float
    zero_speed_points: int


@dataclass
class AnalysisParams:
    max_realistic_speed_kmh: float = 100.0  # faster readings are treated as GPS jitter
    fallback_speed_kmh: float = 20.0  # used when jitter occurs before any speed is known
    min_movement_m: float = 1.0  # below this, bearing is carried forward
    wind_interval: timedelta = field(default_factory=lambda: timedelta(minutes=30))
    request_delay_s: float = 0.2  # pause between weather requests
    request_timeout_s: float = 30.0
    default_wind_speed_kmh: float = 10.0
    default_wind_direction_deg: float = 180.0
    # Logarithmic wind profile: adjust 10 m readings to rider height
    roughness_length_m: float = 0.1
    reference_height_m: float = 10.0
    effective_height_m: float = 1.5
    archive_url: str = OPEN_METEO_ARCHIVE_URL


@dataclass
class WindAnalysis:
    """Output of one analysis run: the enriched track, its wind series and summary."""
    points: list[TrackPoint]
    wind_samples: list[WindSample]
    statistics: RouteStatistics

    def to_dict(self) -> dict:
        return {
            "statistics": self.statistics.to_dict(),
            "wind_samples": [s.to_dict() for s in self.wind_samples],
            "points": [p.to_dict() for p in self.points],
        }
