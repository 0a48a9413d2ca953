"""Configuración del motor de estabilidad y del pipeline de tendencia."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone, tzinfo

from dateutil import tz

LOCAL_TZ = tz.tzlocal()


def _default_typical() -> dict[str, float]:
    return {
        "post_meal_excursion": 45.0,  # mg/dL
        "day_var": 20.0,  # mg/dL MAD
        "overnight_var": 10.0,  # mg/dL MAD
        "late_meal_rate": 20.0,  # % de comidas
    }


def _default_stddev() -> dict[str, float]:
    return {
        "post_meal_excursion": 25.0,
        "day_var": 15.0,
        "overnight_var": 8.0,
        "late_meal_rate": 15.0,
    }


def _default_weights() -> dict[str, float]:
    # Deben sumar 1.0
    return {
        "post_meal_excursion": 0.35,
        "day_var": 0.25,
        "overnight_var": 0.15,
        "coverage": 0.15,
        "late_meal_rate": 0.10,
    }


@dataclass(frozen=True)
class StabilityConfig:
    """Tuning constants for the stability score.

    The defaults are the calibrated clinical values; changing them changes
    every score produced.
    """

    typical: dict[str, float] = field(default_factory=_default_typical)
    stddev: dict[str, float] = field(default_factory=_default_stddev)
    weights: dict[str, float] = field(default_factory=_default_weights)
    baseline_minutes: int = 30
    excursion_minutes: int = 120
    day_start_hour: int = 7
    day_end_hour: int = 23
    late_meal_hour: int = 21
    coverage_days: int = 7
    waking_hours_per_day: int = 16
    winsorize_percentile: float = 0.05
    zone: tzinfo = field(default_factory=lambda: LOCAL_TZ)


@dataclass(frozen=True)
class TrendConfig:
    """Chart pipeline parameters (visible window, decimation, smoothing)."""

    hours: int = 24
    max_points: int = 48
    smoothing_window: int = 3


def to_local(ts: datetime, zone: tzinfo = LOCAL_TZ) -> datetime:
    """Return ``ts`` as an aware datetime in ``zone``.

    Naive datetimes are taken to already be local wall-clock time.
    """
    if ts.tzinfo is None:
        return ts.replace(tzinfo=zone)
    return ts.astimezone(zone)


def local_now(zone: tzinfo = LOCAL_TZ) -> datetime:
    """Current instant in ``zone``."""
    return datetime.now(tz=zone)


def to_utc(ts: datetime, zone: tzinfo = LOCAL_TZ) -> datetime:
    """Return ``ts`` as an absolute UTC instant (window bounds and membership)."""
    return to_local(ts, zone).astimezone(timezone.utc)
