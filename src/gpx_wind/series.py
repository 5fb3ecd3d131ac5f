"""Chart-ready series derived from an enriched track."""

from dataclasses import dataclass

import numpy as np

from gpx_wind.models import TrackPoint

SERIES_FIELDS = ("speed_kmh", "elevation", "wind_faced_kmh", "wind_speed_kmh", "wind_direction_deg")
X_AXES = ("time", "distance")


@dataclass(frozen=True)
class SeriesBin:
    x: float  # bin centre
    mean: float
    sem: float  # standard error of the mean
    count: int


def chart_series(points: list[TrackPoint], field: str, x_axis: str = "time") -> tuple[list[float], list[float]]:
    """Extract (x, y) values for plotting a point field.

    x is hours since the first point for "time", or cumulative kilometers
    for "distance". Points where the field is unset are skipped.
    """
    if field not in SERIES_FIELDS:
        raise ValueError(f"Unknown series field: {field}")
    if x_axis not in X_AXES:
        raise ValueError(f"Unknown x axis: {x_axis}")
    if not points:
        return [], []

    start = points[0].time
    xs, ys = [], []
    for p in points:
        value = getattr(p, field)
        if value is None:
            continue
        if x_axis == "time":
            xs.append((p.time - start).total_seconds() / 3600)
        else:
            xs.append(p.distance_km)
        ys.append(value)
    return xs, ys


def bin_series(xs: list[float], ys: list[float], bin_count: int = 20) -> list[SeriesBin]:
    """Group a series into equal-width x bins with mean and standard error.

    The last bin includes the maximum x value. Empty bins are omitted.
    """
    if len(xs) != len(ys):
        raise ValueError(f"x and y lengths differ: {len(xs)} != {len(ys)}")
    if bin_count < 1:
        raise ValueError(f"bin_count must be at least 1, got {bin_count}")
    if not xs:
        return []

    x = np.asarray(xs, dtype=float)
    y = np.asarray(ys, dtype=float)
    lo, hi = float(x.min()), float(x.max())
    width = (hi - lo) / bin_count

    if width == 0:
        indices = np.zeros(x.size, dtype=int)
        centres = [lo]
    else:
        indices = np.minimum(((x - lo) / width).astype(int), bin_count - 1)
        centres = [lo + (i + 0.5) * width for i in range(bin_count)]

    bins = []
    for i, centre in enumerate(centres):
        values = y[indices == i]
        if values.size == 0:
            continue
        bins.append(
            SeriesBin(
                x=centre,
                mean=float(values.mean()),
                sem=float(values.std() / np.sqrt(values.size)),
                count=int(values.size),
            )
        )
    return bins
