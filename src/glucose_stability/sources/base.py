"""Clases base para fuentes de lecturas y comidas (almacén externo)."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path

from glucose_stability.model import GlucoseReading, MealEvent


@dataclass(frozen=True)
class SourcePaths:
    """Container for source directories."""

    root: Path


@dataclass(frozen=True)
class Logbook:
    """Readings and meals loaded from one export, each sorted by time."""

    readings: list[GlucoseReading] = field(default_factory=list)
    meals: list[MealEvent] = field(default_factory=list)


class DataSource(ABC):
    """Export-file data source; subclasses define the glob and the parser."""

    pattern = "*.json"

    def __init__(self, paths: SourcePaths) -> None:
        """Create a data source.

        Args:
            paths: Source paths configuration.
        """
        self._paths = paths

    def validate(self) -> None:
        """Validate that the export directory exists.

        Raises:
            FileNotFoundError: If the root folder is missing.
        """
        if not self._paths.root.exists():
            raise FileNotFoundError(str(self._paths.root))

    def newest(self) -> Path:
        """Return the newest export matching ``pattern`` by mtime."""
        files = sorted(
            self._paths.root.glob(self.pattern),
            key=lambda p: p.stat().st_mtime,
            reverse=True,
        )
        if not files:
            raise FileNotFoundError(f"No {self.pattern} in {self._paths.root}")
        return files[0]

    @abstractmethod
    def load(self, path: Path) -> Logbook:
        """Parse one export file.

        Raises:
            ValueError: If the file shape is invalid.
        """
