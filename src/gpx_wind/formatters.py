"""Formatting utilities for display."""

from gpx_wind.models import RouteStatistics


def format_duration(hours: float) -> str:
    """Format hours as Xh Ym string."""
    total_minutes = int(round(hours * 60))
    h, m = divmod(total_minutes, 60)
    if h > 0:
        return f"{h}h {m:02d}m"
    return f"{m}m"


def format_signed(value: float, unit: str, decimals: int = 1) -> str:
    """Format a value with an explicit sign for non-negative numbers."""
    sign = "+" if value >= 0 else ""
    return f"{sign}{value:.{decimals}f} {unit}"


def format_statistics(stats: RouteStatistics) -> list[tuple[str, str]]:
    """Return (label, value) rows for the route summary."""
    return [
        ("Total Distance", f"{stats.total_distance_km:.1f} km"),
        ("Total Time", f"{stats.total_duration_hours:.1f} h ({format_duration(stats.total_duration_hours)})"),
        ("Average Speed", f"{stats.avg_speed_kmh:.1f} km/h"),
        ("Average Wind Speed", f"{stats.avg_wind_speed_kmh:.1f} km/h"),
        ("Average Wind Faced", format_signed(stats.avg_wind_faced_kmh, "km/h")),
        ("Max Headwind", f"{stats.max_headwind_kmh:.1f} km/h"),
        ("Max Tailwind", f"{stats.max_tailwind_kmh:.1f} km/h"),
        ("Time in Headwind", f"{stats.headwind_percentage:.1f}%"),
    ]
