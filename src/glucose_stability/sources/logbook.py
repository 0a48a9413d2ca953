"""Lectura de exportaciones JSON del diario (lecturas de glucosa + comidas)."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, TypeVar

from dateutil import parser as date_parser

from glucose_stability.config import LOCAL_TZ
from glucose_stability.model import GlucoseReading, MealEvent
from glucose_stability.sources.base import DataSource, Logbook, SourcePaths
from glucose_stability.units import MG_DL, MMOL_L, convert_glucose_value

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class LogbookPaths(SourcePaths):
    """Paths for logbook JSON exports."""

    # root: carpeta con logbook_*.json


class LogbookSource(DataSource):
    """Logbook JSON export source.

    Expected shape::

        {"readings": [{"timestamp": ..., "value": 5.4, "unit": "mmol/L"}],
         "meals": [{"timestamp": ..., "meal_type": "lunch"}]}

    Timestamps are ISO strings (naive means local time) or epoch
    milliseconds. Values are stored in mg/dL.
    """

    pattern = "logbook_*.json"

    def newest_json(self) -> Path:
        """Return newest logbook_*.json by mtime."""
        return self.newest()

    def load(self, path: Path) -> Logbook:
        """Parse a logbook export into typed readings and meals.

        Args:
            path: Path to JSON file.

        Returns:
            Logbook with both lists sorted by timestamp.

        Raises:
            ValueError: If the JSON top level is not an object.
        """
        text = path.read_text(encoding="utf-8")
        raw = _extract_json_object(text)
        if not isinstance(raw, dict):
            raise ValueError("Logbook JSON must be an object")

        readings = _parse_items(raw.get("readings"), _item_to_reading)
        meals = _parse_items(raw.get("meals"), _item_to_meal)
        readings.sort(key=lambda r: r.timestamp)
        meals.sort(key=lambda m: m.timestamp)
        logger.debug(
            "loaded %d readings and %d meals from %s", len(readings), len(meals), path
        )
        return Logbook(readings=readings, meals=meals)


def _extract_json_object(text: str) -> Any:
    """Extrae el objeto JSON tolerando texto previo (p. ej. líneas de log)."""
    start = text.find("{")
    if start >= 0:
        return json.loads(text[start:])
    return json.loads(text)


def _parse_items(items: Any, convert: Callable[[Any], T | None]) -> list[T]:
    if items is None:
        return []
    if not isinstance(items, list):
        raise ValueError("Logbook 'readings' and 'meals' must be lists")
    out: list[T] = []
    for item in items:
        parsed = convert(item)
        if parsed is None:
            logger.debug("skipping invalid logbook item: %r", item)
            continue
        out.append(parsed)
    return out


def _parse_timestamp(value: Any) -> datetime | None:
    """Parsea ISO (naive = hora local) o epoch en milisegundos."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        try:
            return datetime.fromtimestamp(value / 1000, tz=LOCAL_TZ)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str) and value.strip():
        try:
            dt = date_parser.isoparse(value.strip())
        except ValueError:
            return None
        return dt if dt.tzinfo is not None else dt.replace(tzinfo=LOCAL_TZ)
    return None


def _optional_text(item: dict[str, Any], *keys: str) -> str | None:
    """Primer valor no vacío entre las claves dadas (vacío -> None)."""
    for key in keys:
        val = item.get(key)
        if val is not None and str(val).strip():
            return str(val).strip()
    return None


def _item_to_reading(item: Any) -> GlucoseReading | None:
    """Convierte un ítem dict en GlucoseReading; None si falta valor o fecha."""
    if not isinstance(item, dict):
        return None
    ts = _parse_timestamp(item.get("timestamp"))
    raw_value = item.get("value")
    if ts is None or raw_value is None:
        return None
    try:
        value = float(raw_value)
    except (TypeError, ValueError):
        return None
    unit = MMOL_L if item.get("unit") == MMOL_L else MG_DL
    return GlucoseReading(
        timestamp=ts,
        value=convert_glucose_value(value, unit, MG_DL),
        source=_optional_text(item, "source"),
        tag=_optional_text(item, "tag"),
    )


def _item_to_meal(item: Any) -> MealEvent | None:
    """Convierte un ítem dict en MealEvent; None si falta la fecha."""
    if not isinstance(item, dict):
        return None
    ts = _parse_timestamp(item.get("timestamp"))
    if ts is None:
        return None
    return MealEvent(
        timestamp=ts,
        meal_type=_optional_text(item, "meal_type", "mealType"),
        source=_optional_text(item, "source"),
    )
