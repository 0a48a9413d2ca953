from __future__ import annotations

from datetime import date, datetime

import pandas as pd

from glucose_stability.frames import (
    READING_COLUMNS,
    SUMMARY_COLUMNS,
    TREND_COLUMNS,
    daily_stability_summary,
    readings_to_frame,
    trend_to_frame,
)
from glucose_stability.model import ChartPoint, GlucoseReading, MealEvent


def test_readings_to_frame_empty_keeps_columns() -> None:
    df = readings_to_frame([])
    assert df.empty
    assert list(df.columns) == READING_COLUMNS


def test_readings_to_frame_orders_and_converts() -> None:
    readings = [
        GlucoseReading(timestamp=datetime(2025, 6, 11, 8, 30), value=126.0),
        GlucoseReading(timestamp=datetime(2025, 6, 10, 22, 15), value=90.0),
    ]
    df = readings_to_frame(readings)
    assert list(df["date"]) == [date(2025, 6, 10), date(2025, 6, 11)]
    assert list(df["hour"]) == [22, 8]
    assert list(df["glucose_mmol_l"]) == [5.0, 7.0]


def test_daily_stability_summary_empty() -> None:
    out = daily_stability_summary([], [])
    assert out.empty
    assert list(out.columns) == SUMMARY_COLUMNS


def test_daily_stability_summary_one_row_per_day() -> None:
    readings = [
        GlucoseReading(timestamp=datetime(2025, 6, 10, 10), value=85.0),
        GlucoseReading(timestamp=datetime(2025, 6, 10, 14), value=120.0),
        GlucoseReading(timestamp=datetime(2025, 6, 11, 9), value=100.0),
    ]
    meals = [
        MealEvent(timestamp=datetime(2025, 6, 10, 13)),
        MealEvent(timestamp=datetime(2025, 6, 12, 22)),
    ]
    out = daily_stability_summary(readings, meals)

    assert list(out["date"]) == [
        date(2025, 6, 10),
        date(2025, 6, 11),
        date(2025, 6, 12),
    ]
    assert list(out["glucose_count"]) == [2, 1, 0]
    assert out.loc[0, "glucose_avg"] == 102.5
    assert out.loc[0, "meal_count"] == 1
    assert out.loc[0, "day_var"] == 17.5
    assert pd.isna(out.loc[2, "glucose_avg"])
    assert out.loc[2, "late_meal_rate"] == 100.0
    assert out["stability_score"].between(0, 100).all()


def test_trend_to_frame() -> None:
    ts = datetime(2025, 6, 10, 10)
    df = trend_to_frame([ChartPoint(timestamp=ts, value=101.0, x=1.0, y=100.0)])
    assert list(df.columns) == TREND_COLUMNS
    assert df.loc[0, "glucose_mg_dl"] == 101.0
    assert trend_to_frame([]).empty
