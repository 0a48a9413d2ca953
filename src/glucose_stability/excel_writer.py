"""Exportación a Excel del resumen diario de estabilidad y la serie de tendencia."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pandas as pd
from openpyxl.styles import Alignment, Border, Font, Side

logger = logging.getLogger(__name__)

_DIA_SEMANA: tuple[str, ...] = ("lun", "mar", "mie", "jue", "vie", "sab", "dom")

_HEADER_MAP: dict[str, str] = {
    "weekday": "Día",
    "date": "Fecha",
    "datetime": "Fecha / Hora",
    "glucose_count": "Lecturas",
    "glucose_min": "Mín (mg/dL)",
    "glucose_max": "Máx (mg/dL)",
    "glucose_avg": "Promedio (mg/dL)",
    "glucose_mg_dl": "Glucosa (mg/dL)",
    "meal_count": "Comidas",
    "stability_score": "Estabilidad",
    "stability_label": "Nivel",
    "post_meal_excursion": "Excursión\npost comida",
    "day_var": "Variab.\ndiurna",
    "overnight_var": "Variab.\nnocturna",
    "coverage": "Cobertura\n(%)",
    "late_meal_rate": "Comidas\ntardías (%)",
}

_COLUMN_WIDTHS: dict[str, int] = {
    "Día": 6,
    "Fecha": 12,
    "Fecha / Hora": 18,
    "Lecturas": 10,
    "Mín (mg/dL)": 12,
    "Máx (mg/dL)": 12,
    "Promedio (mg/dL)": 16,
    "Glucosa (mg/dL)": 14,
    "Comidas": 10,
    "Estabilidad": 12,
    "Nivel": 18,
    "Excursión\npost comida": 12,
    "Variab.\ndiurna": 10,
    "Variab.\nnocturna": 10,
    "Cobertura\n(%)": 10,
    "Comidas\ntardías (%)": 12,
}

_NUMBER_FORMATS: dict[str, str] = {
    "Fecha": "dd/mm/yyyy",
    "Fecha / Hora": "dd/mm/yyyy hh:mm",
    "Promedio (mg/dL)": "0.00",
    "Glucosa (mg/dL)": "0",
    "Estabilidad": "0",
    "Excursión\npost comida": "0.0",
    "Variab.\ndiurna": "0.0",
    "Variab.\nnocturna": "0.0",
    "Cobertura\n(%)": "0.0",
    "Comidas\ntardías (%)": "0.0",
}


@dataclass(frozen=True)
class ExcelLayout:
    """Sheet names for the stability workbook."""

    summary_sheet: str = "Resumen diario"
    trend_sheet: str = "Tendencia"


def _weekday_label(i: object) -> str:
    """Convierte índice 0-6 (lunes-domingo) a etiqueta de 3 letras."""
    try:
        if i is None or (isinstance(i, float) and pd.isna(i)):
            return ""
        if isinstance(i, int | float):
            idx = int(i)
            return _DIA_SEMANA[idx] if 0 <= idx < 7 else ""
        return ""
    except (ValueError, TypeError):
        return ""


def _add_weekday_column(export_df: pd.DataFrame) -> pd.DataFrame:
    """Añade columna weekday (Día) a partir de date."""
    if "date" not in export_df.columns or export_df.empty:
        return export_df
    weekday_series = pd.to_datetime(export_df["date"]).dt.weekday
    export_df = export_df.copy()
    export_df["weekday"] = weekday_series.map(_weekday_label)
    cols = ["weekday"] + [c for c in export_df.columns if c != "weekday"]
    return export_df[cols]


def _strip_timezone(export_df: pd.DataFrame) -> pd.DataFrame:
    """Quita timezone de datetime (Excel no la soporta)."""
    if "datetime" not in export_df.columns or export_df.empty:
        return export_df
    export_df = export_df.copy()
    stamps = pd.to_datetime(export_df["datetime"], errors="coerce")
    if stamps.dt.tz is not None:
        stamps = stamps.dt.tz_localize(None)
    export_df["datetime"] = stamps
    return export_df


def write_stability_xlsx(
    summary: pd.DataFrame,
    trend: pd.DataFrame,
    out_path: Path,
    layout: ExcelLayout,
) -> None:
    """Write the daily stability summary and trend series to one workbook.

    Args:
        summary: Output of ``daily_stability_summary``.
        trend: Output of ``trend_to_frame``.
        out_path: Output path for the XLSX file.
        layout: Sheet naming.
    """
    out_path.parent.mkdir(parents=True, exist_ok=True)

    summary_df = _add_weekday_column(summary).rename(columns=_HEADER_MAP)
    trend_df = _strip_timezone(trend).rename(columns=_HEADER_MAP)

    with pd.ExcelWriter(out_path, engine="openpyxl") as writer:
        summary_df.to_excel(writer, index=False, sheet_name=layout.summary_sheet)
        trend_df.to_excel(writer, index=False, sheet_name=layout.trend_sheet)
        _format_sheet(writer.book[layout.summary_sheet])
        _format_sheet(writer.book[layout.trend_sheet])

    logger.info(
        "wrote %s (%d days, %d trend points)", out_path, len(summary), len(trend)
    )


def _style_header_row(ws: Any) -> None:
    """Aplica fuente negrita, alineación y borde a la fila de cabecera."""
    thin = Side(style="thin")
    border = Border(left=thin, right=thin, top=thin, bottom=thin)
    header_font = Font(bold=True)
    center = Alignment(horizontal="center", vertical="center", wrap_text=True)
    for cell in ws[1]:
        cell.font = header_font
        cell.alignment = center
        cell.border = border


def _style_body_rows(ws: Any) -> None:
    """Aplica alineación y borde a las filas de datos."""
    thin = Side(style="thin")
    border = Border(left=thin, right=thin, top=thin, bottom=thin)
    center = Alignment(horizontal="center", vertical="center")
    for row in ws.iter_rows(min_row=2):
        for cell in row:
            cell.alignment = center
            cell.border = border


def _get_header_col_index(ws: Any) -> dict[str, int]:
    """Devuelve mapa nombre de cabecera -> índice de columna (1-based)."""
    headers = [str(cell.value) for cell in ws[1]]
    return {name: idx + 1 for idx, name in enumerate(headers)}


def _apply_column_widths(ws: Any, col_index: dict[str, int]) -> None:
    for header, width in _COLUMN_WIDTHS.items():
        idx = col_index.get(header)
        if idx is not None:
            letter = ws.cell(row=1, column=idx).column_letter
            ws.column_dimensions[letter].width = width


def _apply_number_formats(ws: Any, col_index: dict[str, int]) -> None:
    for row in ws.iter_rows(min_row=2):
        for header, fmt in _NUMBER_FORMATS.items():
            idx = col_index.get(header)
            if idx is not None:
                row[idx - 1].number_format = fmt


def _format_sheet(ws: Any) -> None:
    """Apply borders, widths and number formats to a worksheet.

    Args:
        ws: openpyxl worksheet.
    """
    _style_header_row(ws)
    _style_body_rows(ws)
    col_index = _get_header_col_index(ws)
    _apply_column_widths(ws, col_index)
    _apply_number_formats(ws, col_index)
