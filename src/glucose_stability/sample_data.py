"""Datos de ejemplo para usuarios nuevos (estado vacío)."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime, time, timedelta, tzinfo

import numpy as np

from glucose_stability.config import LOCAL_TZ, local_now, to_local
from glucose_stability.model import GlucoseReading, MealEvent
from glucose_stability.units import round_half_up

SAMPLE_SOURCE = "sample"


@dataclass(frozen=True)
class SampleSlot:
    """Time-of-day window and value band for one synthetic reading."""

    name: str
    start_hour: float
    span_hours: float
    low: float
    width: float

    @property
    def high(self) -> float:
        return self.low + self.width


# Patrón típico de prediabetes: ayuno, picos post comida y descenso nocturno.
SAMPLE_SLOTS: tuple[SampleSlot, ...] = (
    SampleSlot("morning", 6.5, 1.5, 95, 20),
    SampleSlot("breakfast", 9.0, 1.0, 120, 25),
    SampleSlot("mid-morning", 11.5, 0.5, 105, 15),
    SampleSlot("lunch", 13.5, 0.5, 130, 30),
    SampleSlot("afternoon", 15.5, 0.5, 110, 20),
    SampleSlot("dinner", 19.5, 0.5, 125, 25),
    SampleSlot("evening", 21.5, 0.5, 100, 20),
)

SAMPLE_DAYS = 7

_SAMPLE_MEALS: tuple[tuple[str, float], ...] = (
    ("breakfast", 7.5),
    ("lunch", 12.5),
    ("dinner", 18.5),
)


def _midnight(day_offset: int, ref: datetime, zone: tzinfo) -> datetime:
    day = (ref - timedelta(days=day_offset)).date()
    return datetime.combine(day, time.min).replace(tzinfo=zone)


def generate_sample_glucose_data(
    now: datetime | None = None,
    rng: np.random.Generator | None = None,
    zone: tzinfo = LOCAL_TZ,
) -> list[GlucoseReading]:
    """Generate a week of stylized readings, seven per day.

    Args:
        now: Reference instant; the last generated day is its local date.
        rng: Random generator (a fresh unseeded one by default).
        zone: Local zone for the time-of-day slots.

    Returns:
        Readings tagged ``source="sample"``, sorted by timestamp.
    """
    ref = to_local(now, zone) if now is not None else local_now(zone)
    gen = rng if rng is not None else np.random.default_rng()

    out: list[GlucoseReading] = []
    for day in range(SAMPLE_DAYS - 1, -1, -1):
        day_start = _midnight(day, ref, zone)
        for slot in SAMPLE_SLOTS:
            hours = slot.start_hour + gen.random() * slot.span_hours
            value = round_half_up(slot.low + gen.random() * slot.width)
            out.append(
                GlucoseReading(
                    timestamp=day_start + timedelta(hours=hours),
                    value=float(value),
                    source=SAMPLE_SOURCE,
                    tag=slot.name,
                )
            )
    out.sort(key=lambda r: r.timestamp)
    return out


def generate_sample_meals(
    now: datetime | None = None, zone: tzinfo = LOCAL_TZ
) -> list[MealEvent]:
    """Breakfast, lunch and dinner for the last three days."""
    ref = to_local(now, zone) if now is not None else local_now(zone)
    out = [
        MealEvent(
            timestamp=_midnight(day, ref, zone) + timedelta(hours=hour),
            meal_type=meal_type,
            source=SAMPLE_SOURCE,
        )
        for day in range(2, -1, -1)
        for meal_type, hour in _SAMPLE_MEALS
    ]
    out.sort(key=lambda m: m.timestamp)
    return out


def should_show_sample_data(
    readings: Sequence[GlucoseReading], meals: Sequence[MealEvent]
) -> bool:
    """True when the user has no readings and no real (non-sample) meals."""
    has_real_meals = any(m.source != SAMPLE_SOURCE for m in meals)
    return not readings and not has_real_meals
