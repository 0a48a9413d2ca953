"""Tablas pandas: lecturas por fila y resumen diario con puntaje de estabilidad."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date, datetime

import pandas as pd

from glucose_stability.config import StabilityConfig, to_local
from glucose_stability.model import ChartPoint, GlucoseReading, MealEvent
from glucose_stability.stability import get_daily_stability_score
from glucose_stability.units import mgdl_to_mmol_l

READING_COLUMNS = [
    "datetime",
    "date",
    "hour",
    "glucose_mg_dl",
    "glucose_mmol_l",
    "source",
    "tag",
]

SUMMARY_COLUMNS = [
    "date",
    "glucose_count",
    "glucose_min",
    "glucose_max",
    "glucose_avg",
    "meal_count",
    "stability_score",
    "stability_label",
    "post_meal_excursion",
    "day_var",
    "overnight_var",
    "coverage",
    "late_meal_rate",
]

TREND_COLUMNS = ["datetime", "glucose_mg_dl"]


def readings_to_frame(
    readings: Sequence[GlucoseReading], config: StabilityConfig | None = None
) -> pd.DataFrame:
    """Convert glucose readings to DataFrame with local date/hour columns."""
    cfg = config or StabilityConfig()
    rows = []
    for r in readings:
        ts = to_local(r.timestamp, cfg.zone)
        rows.append(
            {
                "datetime": ts,
                "date": ts.date(),
                "hour": ts.hour,
                "glucose_mg_dl": r.value,
                "glucose_mmol_l": mgdl_to_mmol_l(r.value),
                "source": r.source,
                "tag": r.tag,
            }
        )
    df = pd.DataFrame(rows, columns=READING_COLUMNS)
    if df.empty:
        return df
    return df.sort_values("datetime").reset_index(drop=True)


def daily_stability_summary(
    readings: Sequence[GlucoseReading],
    meals: Sequence[MealEvent],
    config: StabilityConfig | None = None,
    now: datetime | None = None,
) -> pd.DataFrame:
    """One row per local day with glucose stats and that day's stability score.

    Days with meals but no readings are included with NaN glucose stats.
    Coverage is measured over the week ending at ``now``.
    """
    cfg = config or StabilityConfig()
    events = readings_to_frame(readings, cfg)

    meal_days: dict[date, int] = {}
    for m in meals:
        day = to_local(m.timestamp, cfg.zone).date()
        meal_days[day] = meal_days.get(day, 0) + 1

    all_dates: set[date] = set(meal_days)
    if not events.empty:
        all_dates.update(events["date"].unique())
    if not all_dates:
        return pd.DataFrame(columns=SUMMARY_COLUMNS)

    rows: list[dict[str, object]] = []
    for day in sorted(all_dates):
        values = (
            events.loc[events["date"] == day, "glucose_mg_dl"]
            if not events.empty
            else pd.Series(dtype=float)
        )
        score = get_daily_stability_score(readings, meals, day, cfg, now)
        rows.append(
            {
                "date": day,
                "glucose_count": int(values.count()),
                "glucose_min": values.min() if not values.empty else pd.NA,
                "glucose_max": values.max() if not values.empty else pd.NA,
                "glucose_avg": round(values.mean(), 2) if not values.empty else pd.NA,
                "meal_count": meal_days.get(day, 0),
                "stability_score": score.value,
                "stability_label": score.label,
                **score.components.to_dict(),
            }
        )

    out = pd.DataFrame(rows, columns=SUMMARY_COLUMNS)
    component_cols = SUMMARY_COLUMNS[-5:]
    out[component_cols] = out[component_cols].astype(float).round(2)
    return out


def trend_to_frame(points: Sequence[ChartPoint]) -> pd.DataFrame:
    """Chart series as a two-column DataFrame (datetime, glucose_mg_dl)."""
    rows = [{"datetime": p.timestamp, "glucose_mg_dl": p.value} for p in points]
    return pd.DataFrame(rows, columns=TREND_COLUMNS)
