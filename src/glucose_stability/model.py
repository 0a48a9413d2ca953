"""Modelos tipados para lecturas de glucosa, comidas y puntaje de estabilidad."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime


@dataclass(frozen=True)
class GlucoseReading:
    """One glucose measurement event (timestamped, value in mg/dL)."""

    timestamp: datetime
    value: float
    source: str | None = None
    tag: str | None = None

    @property
    def epoch_ms(self) -> float:
        """Milliseconds since epoch for the reading instant."""
        return self.timestamp.timestamp() * 1000.0


@dataclass(frozen=True)
class MealEvent:
    """One meal intake event; only the instant is used numerically."""

    timestamp: datetime
    meal_type: str | None = None
    source: str | None = None


@dataclass(frozen=True)
class ChartPoint(GlucoseReading):
    """Reading extended with chart coordinates (x = epoch ms, y = value)."""

    x: float = 0.0
    y: float = 0.0


@dataclass(frozen=True)
class StabilityComponents:
    """Raw (unweighted) sub-metrics behind a stability score."""

    post_meal_excursion: float
    day_var: float
    overnight_var: float
    coverage: float
    late_meal_rate: float

    def to_dict(self) -> dict[str, float]:
        """Convert to dictionary for serialization."""
        return asdict(self)


@dataclass(frozen=True)
class StabilityScore:
    """Composite 0-100 stability score with label and breakdown."""

    value: int
    label: str
    components: StabilityComponents

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for serialization."""
        return {
            "value": self.value,
            "label": self.label,
            "components": self.components.to_dict(),
        }
