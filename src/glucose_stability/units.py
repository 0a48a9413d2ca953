"""Conversión y formato de valores de glucosa entre mg/dL y mmol/L."""

from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Context, Decimal
from typing import Literal

GlucoseUnit = Literal["mg/dL", "mmol/L"]

# Precisión suficiente para cualquier float finito.
_DECIMAL_CTX = Context(prec=400)

MG_DL: GlucoseUnit = "mg/dL"
MMOL_L: GlucoseUnit = "mmol/L"

CONVERSION_FACTOR = 18.0


@dataclass(frozen=True)
class TargetRanges:
    """Clinical breakpoints expressed in one display unit."""

    low: float
    normal: float
    high: float
    critical: float


# Constantes precalculadas, no se convierten en vivo.
_RANGES_MG_DL = TargetRanges(low=70, normal=130, high=160, critical=200)
_RANGES_MMOL_L = TargetRanges(low=3.9, normal=7.2, high=8.9, critical=11.1)


def round_half_up(value: float, digits: int = 0) -> float:
    """Round ``value`` to ``digits`` decimals, halves away from zero.

    Works on the exact binary value of the float, so ``1.005`` rounds to
    ``1.0`` at two decimals just like a fixed-point string formatter would.
    Non-finite values are returned as they are.
    """
    if not math.isfinite(value):
        return value
    quantum = Decimal(1).scaleb(-digits)
    rounded = Decimal(value).quantize(
        quantum, rounding=ROUND_HALF_UP, context=_DECIMAL_CTX
    )
    return float(rounded)


def mgdl_to_mmol_l(value: float) -> float:
    """Convert mg/dL to mmol/L (one decimal)."""
    return round_half_up(value / CONVERSION_FACTOR, 1)


def mmol_l_to_mgdl(value: float) -> float:
    """Convert mmol/L to mg/dL (whole number)."""
    return round_half_up(value * CONVERSION_FACTOR, 0)


def convert_glucose_value(
    value: float, from_unit: GlucoseUnit, to_unit: GlucoseUnit
) -> float:
    """Convert a glucose value between units; identity for equal units."""
    if from_unit == to_unit:
        return value
    if from_unit == MG_DL and to_unit == MMOL_L:
        return mgdl_to_mmol_l(value)
    if from_unit == MMOL_L and to_unit == MG_DL:
        return mmol_l_to_mgdl(value)
    return value


def format_glucose_value(value: float, unit: GlucoseUnit) -> str:
    """Format an mg/dL value for display in ``unit``.

    Args:
        value: Glucose value in mg/dL.
        unit: Display unit.

    Returns:
        Text like ``"100 mg/dL"`` or ``"5.6 mmol/L"``.
    """
    if unit == MMOL_L:
        return f"{mgdl_to_mmol_l(value):.1f} {unit}"
    return f"{round_half_up(value, 0):.0f} {unit}"


def get_target_ranges(unit: GlucoseUnit) -> TargetRanges:
    """Return the fixed target ranges for ``unit``."""
    if unit == MMOL_L:
        return _RANGES_MMOL_L
    return _RANGES_MG_DL


def get_default_unit(locale: str | None = None) -> GlucoseUnit:
    """US locales use mg/dL; everything else defaults to mmol/L."""
    return MG_DL if (locale or "en-US").startswith("en-US") else MMOL_L
