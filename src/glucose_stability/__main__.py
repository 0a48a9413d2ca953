"""Punto de entrada: python -m glucose_stability."""

from __future__ import annotations

from glucose_stability.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
