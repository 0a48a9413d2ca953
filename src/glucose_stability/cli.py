"""CLI: puntaje de estabilidad semanal + exportación del resumen a Excel."""

from __future__ import annotations

import argparse
import logging
from datetime import datetime, timedelta
from pathlib import Path

from glucose_stability.classify import time_in_range
from glucose_stability.config import LOCAL_TZ, TrendConfig, to_utc
from glucose_stability.excel_writer import ExcelLayout, write_stability_xlsx
from glucose_stability.frames import daily_stability_summary, trend_to_frame
from glucose_stability.sample_data import (
    generate_sample_glucose_data,
    generate_sample_meals,
    should_show_sample_data,
)
from glucose_stability.sources.logbook import LogbookPaths, LogbookSource
from glucose_stability.stability import get_weekly_stability_score
from glucose_stability.trend import prepare_trend_series
from glucose_stability.units import MG_DL, MMOL_L, format_glucose_value

logger = logging.getLogger(__name__)


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        Parsed argparse namespace.
    """
    parser = argparse.ArgumentParser(
        description="Puntaje de estabilidad glucémica a partir del diario exportado."
    )
    parser.add_argument(
        "--base-dir",
        default=str(Path.home() / "proyectos" / "glucosa"),
        help="Directorio base (default: ~/proyectos/glucosa).",
    )
    parser.add_argument(
        "--days",
        type=int,
        default=7,
        help="Días hacia atrás incluidos en el resumen diario.",
    )
    parser.add_argument(
        "--hours",
        type=int,
        default=24,
        help="Horas visibles en la serie de tendencia.",
    )
    parser.add_argument(
        "--unit",
        choices=[MG_DL, MMOL_L],
        default=MG_DL,
        help="Unidad para mostrar valores.",
    )
    parser.add_argument(
        "--sample",
        action="store_true",
        help="Usar datos de ejemplo en lugar del diario.",
    )
    parser.add_argument(
        "--no-export",
        action="store_true",
        help="No generar el Excel.",
    )
    parser.add_argument("--verbose", action="store_true", help="Logging detallado.")
    return parser.parse_args()


def main() -> int:
    """Run the stability CLI.

    Returns:
        Exit code (0 on success).
    """
    ns = parse_args()
    logging.basicConfig(
        level=logging.DEBUG if ns.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    base = Path(ns.base_dir).expanduser().resolve()
    now = datetime.now(tz=LOCAL_TZ)

    if ns.sample:
        readings = generate_sample_glucose_data(now)
        meals = generate_sample_meals(now)
        origin = "datos de ejemplo"
    else:
        src = LogbookSource(LogbookPaths(root=base / "datos"))
        src.validate()
        logbook_file = src.newest_json()
        logbook = src.load(logbook_file)
        readings, meals = logbook.readings, logbook.meals
        origin = str(logbook_file)
        if should_show_sample_data(readings, meals):
            logger.info("logbook %s is empty, using sample data", logbook_file)
            readings = generate_sample_glucose_data(now)
            meals = generate_sample_meals(now)
            origin = "datos de ejemplo (diario vacío)"

    score = get_weekly_stability_score(readings, meals, end=now, now=now)
    tir = time_in_range(readings, now)
    trend = prepare_trend_series(readings, now=now, config=TrendConfig(hours=ns.hours))

    print(f"OK: Fuente: {origin}")
    print(f"OK: Estabilidad semanal: {score.value} ({score.label})")
    for name, value in score.components.to_dict().items():
        print(f"    {name}: {value:.1f}")
    print(
        f"OK: Tiempo en rango: {tir.normal}% normal, {tir.elevated}% elevado, "
        f"{tir.high}% alto, {tir.low}% bajo"
    )
    if trend:
        print(f"OK: Última lectura: {format_glucose_value(trend[-1].value, ns.unit)}")

    if ns.no_export:
        return 0

    since = now - timedelta(days=ns.days)
    summary = daily_stability_summary(
        [r for r in readings if to_utc(r.timestamp) >= since],
        [m for m in meals if to_utc(m.timestamp) >= since],
        now=now,
    )
    ts = now.strftime("%Y-%m-%d_%H-%M-%S")
    out_path = base / "salidas" / f"estabilidad_{ts}.xlsx"
    write_stability_xlsx(summary, trend_to_frame(trend), out_path, ExcelLayout())
    print(f"OK: Output: {out_path}")
    return 0
