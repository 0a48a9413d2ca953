"""Clasificación de valores de glucosa por rango (bajo/normal/alto)."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta, tzinfo
from typing import Literal

from glucose_stability.config import LOCAL_TZ, local_now, to_utc
from glucose_stability.model import GlucoseReading
from glucose_stability.units import MMOL_L, GlucoseUnit, round_half_up

GlucoseCategory = Literal["low", "normal", "high"]

# Factor del formulario de carga de lecturas.
_ENTRY_FACTOR = 18.018

LOW_MG_DL = 70
HIGH_MG_DL = 180


@dataclass(frozen=True)
class TimeInRange:
    """Share of readings per band, whole percentages."""

    low: int = 0
    normal: int = 0
    elevated: int = 0
    high: int = 0


def _mmol_to_mgdl(value: float) -> float:
    return round_half_up(value * _ENTRY_FACTOR, 1)


def get_glucose_category(value: float, unit: GlucoseUnit) -> GlucoseCategory:
    """Classify a value: low below 70 mg/dL, high above 180 mg/dL."""
    mgdl = _mmol_to_mgdl(value) if unit == MMOL_L else value
    if mgdl < LOW_MG_DL:
        return "low"
    if mgdl > HIGH_MG_DL:
        return "high"
    return "normal"


def time_in_range(
    readings: Sequence[GlucoseReading],
    now: datetime | None = None,
    zone: tzinfo = LOCAL_TZ,
) -> TimeInRange:
    """Time-in-range breakdown for the last seven days.

    Bands (mg/dL): low < 80, normal 80-130, elevated (130, 160], high > 160.
    Percentages are rounded independently, so they may not add to 100.
    """
    ref = to_utc(now if now is not None else local_now(zone), zone)
    since = ref - timedelta(days=7)
    values = [r.value for r in readings if to_utc(r.timestamp, zone) >= since]
    if not values:
        return TimeInRange()

    total = len(values)

    def pct(count: int) -> int:
        return int(round_half_up(count / total * 100))

    return TimeInRange(
        low=pct(sum(1 for v in values if v < 80)),
        normal=pct(sum(1 for v in values if 80 <= v <= 130)),
        elevated=pct(sum(1 for v in values if 130 < v <= 160)),
        high=pct(sum(1 for v in values if v > 160)),
    )
