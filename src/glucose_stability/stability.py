"""Motor del puntaje de estabilidad glucémica (0-100) y sus componentes."""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from datetime import date, datetime, time, timedelta, tzinfo

import numpy as np

from glucose_stability.config import StabilityConfig, local_now, to_local, to_utc
from glucose_stability.model import (
    GlucoseReading,
    MealEvent,
    StabilityComponents,
    StabilityScore,
)
from glucose_stability.units import round_half_up

logger = logging.getLogger(__name__)

_DEFAULT_CONFIG = StabilityConfig()

# Rango de ±3 desviaciones estándar sobre 0-100.
_Z_SCALE = 16.67


def winsorize(values: Sequence[float], percentile: float = 0.05) -> list[float]:
    """Clip values to the index-based lower/upper percentile bounds.

    Bounds are read straight from the sorted sample at
    ``floor(n * p)`` and ``floor(n * (1 - p))`` (no interpolation), so
    very small samples are clipped to their own min/max.
    """
    if len(values) == 0:
        return list(values)
    arr = np.asarray(values, dtype=float)
    ordered = np.sort(arr)
    n = len(ordered)
    lower = ordered[min(math.floor(n * percentile), n - 1)]
    upper = ordered[min(math.floor(n * (1 - percentile)), n - 1)]
    return [float(v) for v in np.clip(arr, lower, upper)]


def mean_absolute_deviation(values: Sequence[float]) -> float:
    """Mean of absolute deviations from the mean; 0 for no values."""
    if len(values) == 0:
        return 0.0
    arr = np.asarray(values, dtype=float)
    return float(np.abs(arr - arr.mean()).mean())


def normalize(value: float, typical: float, stddev: float) -> float:
    """Map ``value`` to 0-100 around ``typical`` (50) in z-score steps."""
    if stddev == 0:
        return 50.0
    z_score = (value - typical) / stddev
    return max(0.0, min(100.0, 50 + z_score * _Z_SCALE))


def score_label(value: float) -> str:
    """Qualitative label for a 0-100 score (lower bounds inclusive)."""
    if value >= 80:
        return "Very steady"
    if value >= 60:
        return "Mostly steady"
    if value >= 40:
        return "Some ups & downs"
    return "Wide swings"


def post_meal_excursion(
    readings: Sequence[GlucoseReading],
    meals: Sequence[MealEvent],
    config: StabilityConfig = _DEFAULT_CONFIG,
) -> float:
    """Average winsorized rise from pre-meal baseline to the post-meal peak.

    Baseline is the mean of readings within ``baseline_minutes`` either side
    of the meal; the peak is the maximum between ``baseline_minutes`` and
    ``excursion_minutes`` after it. Meals without both are skipped.
    """
    if not readings or not meals:
        return 0.0

    stamps = [to_utc(r.timestamp, config.zone) for r in readings]
    values = [r.value for r in readings]
    half = timedelta(minutes=config.baseline_minutes)
    post = timedelta(minutes=config.excursion_minutes)

    excursions: list[float] = []
    for meal in meals:
        meal_at = to_utc(meal.timestamp, config.zone)
        baseline = [
            v
            for ts, v in zip(stamps, values)
            if meal_at - half <= ts <= meal_at + half
        ]
        after = [
            v
            for ts, v in zip(stamps, values)
            if meal_at + half <= ts <= meal_at + post
        ]
        if baseline and after:
            excursions.append(max(0.0, max(after) - float(np.mean(baseline))))

    if not excursions:
        return 0.0
    return float(np.mean(winsorize(excursions, config.winsorize_percentile)))


def _is_daytime(hour: int, config: StabilityConfig) -> bool:
    return config.day_start_hour <= hour <= config.day_end_hour


def _is_overnight(hour: int, config: StabilityConfig) -> bool:
    # Las horas límite (7 y 23) cuentan también como diurnas.
    return hour >= config.day_end_hour or hour <= config.day_start_hour


def daytime_variability(
    readings: Sequence[GlucoseReading],
    config: StabilityConfig = _DEFAULT_CONFIG,
) -> float:
    """MAD of readings taken between 07:00 and 23:59 local time."""
    values = [
        r.value
        for r in readings
        if _is_daytime(to_local(r.timestamp, config.zone).hour, config)
    ]
    return mean_absolute_deviation(values)


def overnight_variability(
    readings: Sequence[GlucoseReading],
    config: StabilityConfig = _DEFAULT_CONFIG,
) -> float:
    """MAD of readings taken from 23:00 through 07:59 local time."""
    values = [
        r.value
        for r in readings
        if _is_overnight(to_local(r.timestamp, config.zone).hour, config)
    ]
    return mean_absolute_deviation(values)


def coverage(
    readings: Sequence[GlucoseReading],
    now: datetime | None = None,
    config: StabilityConfig = _DEFAULT_CONFIG,
) -> float:
    """Percentage of waking hours in the last week that have a reading.

    Each distinct (local date, waking hour) bucket counts once against a
    denominator of ``waking_hours_per_day * coverage_days``; capped at 100.
    """
    if not readings:
        return 0.0

    ref = to_utc(now if now is not None else local_now(config.zone), config.zone)
    since = ref - timedelta(days=config.coverage_days)

    buckets: set[tuple[date, int]] = set()
    for r in readings:
        ts = to_local(r.timestamp, config.zone)
        if since <= to_utc(ts) <= ref and _is_daytime(ts.hour, config):
            buckets.add((ts.date(), ts.hour))

    total = config.waking_hours_per_day * config.coverage_days
    return min(100.0, len(buckets) / total * 100)


def late_meal_rate(
    meals: Sequence[MealEvent],
    config: StabilityConfig = _DEFAULT_CONFIG,
) -> float:
    """Percentage of meals eaten at or after ``late_meal_hour`` local time."""
    if not meals:
        return 0.0
    late = sum(
        1
        for m in meals
        if to_local(m.timestamp, config.zone).hour >= config.late_meal_hour
    )
    return late / len(meals) * 100


def calculate_stability_score(
    readings: Sequence[GlucoseReading],
    meals: Sequence[MealEvent],
    now: datetime | None = None,
    config: StabilityConfig | None = None,
) -> StabilityScore:
    """Compute the composite stability score.

    Excursion, variability and late-meal components are inverted through
    :func:`normalize` (lower raw value, higher sub-score); coverage is used
    as-is. Empty inputs are valid and score as fully stable on the
    inverted components.

    Args:
        readings: Glucose readings in mg/dL.
        meals: Meal events.
        now: Reference instant for coverage (defaults to the current time).
        config: Scoring constants.

    Returns:
        Score in [0, 100] with label and raw components.
    """
    cfg = config or _DEFAULT_CONFIG
    components = StabilityComponents(
        post_meal_excursion=post_meal_excursion(readings, meals, cfg),
        day_var=daytime_variability(readings, cfg),
        overnight_var=overnight_variability(readings, cfg),
        coverage=coverage(readings, now, cfg),
        late_meal_rate=late_meal_rate(meals, cfg),
    )
    raw = components.to_dict()

    sub_scores: dict[str, float] = {"coverage": components.coverage}
    for key in ("post_meal_excursion", "day_var", "overnight_var", "late_meal_rate"):
        sub_scores[key] = 100 - normalize(raw[key], cfg.typical[key], cfg.stddev[key])

    weighted = sum(cfg.weights[key] * sub_scores[key] for key in cfg.weights)
    value = int(max(0, min(100, round_half_up(weighted))))

    logger.debug("stability components=%s sub_scores=%s", raw, sub_scores)
    return StabilityScore(value=value, label=score_label(value), components=components)


def get_stability_score_for_period(
    readings: Sequence[GlucoseReading],
    meals: Sequence[MealEvent],
    start: datetime,
    end: datetime,
    config: StabilityConfig | None = None,
    now: datetime | None = None,
) -> StabilityScore:
    """Score only the readings and meals within ``[start, end]``.

    Filters, then delegates to :func:`calculate_stability_score`; coverage
    is still measured over the week ending at ``now`` (the current time by
    default), so periods older than a week get zero coverage.
    """
    cfg = config or _DEFAULT_CONFIG
    lo = to_utc(start, cfg.zone)
    hi = to_utc(end, cfg.zone)

    def _inside(ts: datetime) -> bool:
        return lo <= to_utc(ts, cfg.zone) <= hi

    in_readings = [r for r in readings if _inside(r.timestamp)]
    in_meals = [m for m in meals if _inside(m.timestamp)]
    return calculate_stability_score(in_readings, in_meals, now=now, config=cfg)


def _day_bounds(day: date, zone: tzinfo) -> tuple[datetime, datetime]:
    start = datetime.combine(day, time.min).replace(tzinfo=zone)
    end = datetime.combine(day, time(23, 59, 59, 999000)).replace(tzinfo=zone)
    return start, end


def get_daily_stability_score(
    readings: Sequence[GlucoseReading],
    meals: Sequence[MealEvent],
    day: date | datetime | None = None,
    config: StabilityConfig | None = None,
    now: datetime | None = None,
) -> StabilityScore:
    """Score one local calendar day (today by default)."""
    cfg = config or _DEFAULT_CONFIG
    if day is None:
        ref = now if now is not None else local_now(cfg.zone)
        day = to_local(ref, cfg.zone).date()
    elif isinstance(day, datetime):
        day = to_local(day, cfg.zone).date()
    start, end = _day_bounds(day, cfg.zone)
    return get_stability_score_for_period(readings, meals, start, end, cfg, now)


def get_weekly_stability_score(
    readings: Sequence[GlucoseReading],
    meals: Sequence[MealEvent],
    end: datetime | None = None,
    config: StabilityConfig | None = None,
    now: datetime | None = None,
) -> StabilityScore:
    """Score the seven days ending at ``end`` (now by default)."""
    cfg = config or _DEFAULT_CONFIG
    if end is None:
        end = now if now is not None else local_now(cfg.zone)
    end_at = to_utc(end, cfg.zone)
    return get_stability_score_for_period(
        readings, meals, end_at - timedelta(days=7), end_at, cfg, now
    )
