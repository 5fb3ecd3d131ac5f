"""Error types raised by the wind analysis pipeline."""

from __future__ import annotations


class WindAnalysisError(RuntimeError):
    """Base error for failures that abort an analysis run."""


class TrackError(WindAnalysisError):
    """Base error for tracks that cannot be used for wind analysis."""


class InvalidFormatError(TrackError):
    """Raised when the input cannot be parsed as a GPS track at all."""


class EmptyTrackError(TrackError):
    """Raised when a track parses but holds no points with valid coordinates."""


MISSING_TIMESTAMPS_MESSAGE = """This GPX file does not contain valid timestamps.

Wind analysis requires GPS tracks with accurate time data to:
- Fetch historical weather data for the correct date and time
- Calculate riding speeds along the route
- Provide a meaningful wind impact analysis

Please use a GPX file that includes timestamp information for each GPS point. \
Most modern GPS devices and cycling computers record this automatically.

If this track was recorded without timestamps, you may need to re-record the \
route or export it again with time data included."""


class MissingTimestampsError(TrackError):
    """Raised when no point carries a usable timestamp (after the year 2000)."""

    def __init__(self, message: str = MISSING_TIMESTAMPS_MESSAGE):
        super().__init__(message)


class WeatherDataError(WindAnalysisError):
    """Raised when a weather response is missing or malformed."""


class AnalysisCancelledError(WindAnalysisError):
    """Raised when the caller cancels wind sampling."""


__all__ = [
    "WindAnalysisError",
    "TrackError",
    "InvalidFormatError",
    "EmptyTrackError",
    "MissingTimestampsError",
    "MISSING_TIMESTAMPS_MESSAGE",
    "WeatherDataError",
    "AnalysisCancelledError",
]
