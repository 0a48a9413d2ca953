from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, cast

import pandas as pd
import pytest

import glucose_stability.cli as cli


@dataclass(frozen=True)
class _Args:
    base_dir: str
    days: int = 7
    hours: int = 24
    unit: str = "mg/dL"
    sample: bool = False
    no_export: bool = False
    verbose: bool = False


class _FixedDatetime(datetime):
    @classmethod
    def now(cls, tz: Any | None = None) -> _FixedDatetime:
        return cls(2025, 6, 10, 20, 0, tzinfo=tz)


def _write_logbook(base: Path) -> None:
    datos = base / "datos"
    datos.mkdir(parents=True)
    payload = {
        "readings": [
            {"timestamp": f"2025-06-10T{h:02d}:00:00", "value": 90 + h}
            for h in range(8, 20)
        ],
        "meals": [{"timestamp": "2025-06-10T12:00:00", "meal_type": "lunch"}],
    }
    (datos / "logbook_2025-06-10.json").write_text(
        json.dumps(payload), encoding="utf-8"
    )


def test_main_happy_path_writes_report(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    _write_logbook(tmp_path)
    captured: dict[str, object] = {}

    def _write_stability_xlsx(
        summary: pd.DataFrame, trend: pd.DataFrame, out_path: Path, _: Any
    ) -> None:
        captured["summary"] = summary
        captured["trend"] = trend
        captured["out_path"] = out_path

    monkeypatch.setattr(cli, "parse_args", lambda: _Args(str(tmp_path)))
    monkeypatch.setattr(cli, "datetime", _FixedDatetime)
    monkeypatch.setattr(cli, "write_stability_xlsx", _write_stability_xlsx)

    assert cli.main() == 0

    summary = cast(pd.DataFrame, captured["summary"])
    trend = cast(pd.DataFrame, captured["trend"])
    out_path = cast(Path, captured["out_path"])
    assert len(summary) == 1
    assert len(trend) == 12
    assert out_path.name == "estabilidad_2025-06-10_20-00-00.xlsx"
    assert out_path.parent.name == "salidas"

    out = capsys.readouterr().out
    assert "Estabilidad semanal:" in out
    assert "logbook_2025-06-10.json" in out


def test_main_sample_mode_without_export(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    def _fail(*_args: Any) -> None:
        raise AssertionError("export should be skipped")

    monkeypatch.setattr(
        cli,
        "parse_args",
        lambda: _Args(str(tmp_path), sample=True, no_export=True, unit="mmol/L"),
    )
    monkeypatch.setattr(cli, "datetime", _FixedDatetime)
    monkeypatch.setattr(cli, "write_stability_xlsx", _fail)

    assert cli.main() == 0
    out = capsys.readouterr().out
    assert "datos de ejemplo" in out
    assert "mmol/L" in out


def test_main_empty_logbook_falls_back_to_sample(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    datos = tmp_path / "datos"
    datos.mkdir()
    (datos / "logbook_empty.json").write_text("{}", encoding="utf-8")

    monkeypatch.setattr(
        cli, "parse_args", lambda: _Args(str(tmp_path), no_export=True)
    )
    monkeypatch.setattr(cli, "datetime", _FixedDatetime)

    assert cli.main() == 0
    assert "diario vacío" in capsys.readouterr().out


def test_main_propagates_validation_error(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.setattr(cli, "parse_args", lambda: _Args(str(tmp_path / "nada")))

    with pytest.raises(FileNotFoundError):
        cli.main()
