"""Serie de tendencia para gráficos: decimación LTTB y media móvil centrada."""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import replace
from datetime import datetime, timedelta, tzinfo
from typing import TypeVar

import numpy as np

from glucose_stability.config import LOCAL_TZ, TrendConfig, local_now, to_utc
from glucose_stability.model import ChartPoint, GlucoseReading
from glucose_stability.units import round_half_up

R = TypeVar("R", bound=GlucoseReading)


def to_chart_points(readings: Sequence[GlucoseReading]) -> list[ChartPoint]:
    """Attach chart coordinates (x = epoch ms, y = mg/dL) to each reading."""
    return [
        ChartPoint(
            timestamp=r.timestamp,
            value=r.value,
            source=r.source,
            tag=r.tag,
            x=r.epoch_ms,
            y=r.value,
        )
        for r in readings
    ]


def downsample_lttb(points: Sequence[ChartPoint], threshold: int) -> list[ChartPoint]:
    """Largest-Triangle-Three-Buckets down-sampling.

    Keeps the first and last point and, for each of the ``threshold - 2``
    buckets in between, the point forming the largest triangle with the
    previously kept point and the centroid of the next bucket.

    Args:
        points: Time-ordered chart points.
        threshold: Target number of points.

    Returns:
        The selected points, or ``points`` unchanged when
        ``threshold >= len(points)`` or ``threshold <= 2``.
    """
    n = len(points)
    if threshold >= n or threshold <= 2:
        return list(points)

    xs = np.fromiter((p.x for p in points), dtype=float, count=n)
    ys = np.fromiter((p.y for p in points), dtype=float, count=n)

    every = (n - 2) / (threshold - 2)
    a = 0
    sampled = [points[a]]

    for i in range(threshold - 2):
        # Centroide del bucket siguiente; (0, 0) si el rango queda vacío.
        avg_x = 0.0
        avg_y = 0.0
        avg_start = math.floor((i + 1) * every) + 1
        avg_end = min(math.floor((i + 2) * every) + 1, n)
        if avg_end - avg_start > 0:
            avg_x = float(xs[avg_start:avg_end].mean())
            avg_y = float(ys[avg_start:avg_end].mean())

        range_offs = math.floor(i * every) + 1
        range_to = math.floor((i + 1) * every) + 1
        cand_x = xs[range_offs:range_to]
        cand_y = ys[range_offs:range_to]

        point_ax = xs[a]
        point_ay = ys[a]
        areas = (
            np.abs(
                (point_ax - avg_x) * (cand_y - point_ay)
                - (point_ax - cand_x) * (avg_y - point_ay)
            )
            * 0.5
        )
        if areas.size == 0 or np.isnan(areas).all():
            continue

        next_a = range_offs + int(np.nanargmax(areas))
        sampled.append(points[next_a])
        a = next_a

    sampled.append(points[n - 1])
    return sampled


def moving_average(data: Sequence[R], window_size: int) -> list[R]:
    """Centered moving average over ``value``.

    The window for index ``i`` is ``[i - w // 2, i + ceil(w / 2))`` clipped
    to the sequence bounds. Each output element is a new object with the
    rounded average as ``value``; every other field is kept.
    """
    if window_size <= 1 or len(data) < window_size:
        return list(data)

    values = np.fromiter((p.value for p in data), dtype=float, count=len(data))
    lo = window_size // 2
    hi = math.ceil(window_size / 2)

    out: list[R] = []
    for i, point in enumerate(data):
        start = max(0, i - lo)
        end = min(len(data), i + hi)
        avg = float(values[start:end].mean())
        out.append(replace(point, value=round_half_up(avg)))
    return out


def prepare_trend_series(
    readings: Sequence[GlucoseReading],
    now: datetime | None = None,
    config: TrendConfig | None = None,
    zone: tzinfo = LOCAL_TZ,
) -> list[ChartPoint]:
    """Build the chart series for the last ``config.hours`` hours.

    Readings are windowed, decimated with LTTB down to ``max_points`` and
    then smoothed. Fewer than two readings in the window yields ``[]``.
    """
    cfg = config or TrendConfig()
    ref = to_utc(now if now is not None else local_now(zone), zone)
    since = ref - timedelta(hours=cfg.hours)

    window = sorted(
        (r for r in readings if to_utc(r.timestamp, zone) >= since),
        key=lambda r: to_utc(r.timestamp, zone),
    )
    if len(window) < 2:
        return []

    points = to_chart_points(window)
    if len(points) > cfg.max_points:
        points = downsample_lttb(points, cfg.max_points)
    return moving_average(points, cfg.smoothing_window)
