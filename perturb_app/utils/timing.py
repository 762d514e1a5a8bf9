from __future__ import annotations

import csv
import os
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from time import perf_counter

TIMING_COLUMNS = ("ts_utc", "phase", "secs", "kind", "nb_samples", "n_atoms", "notes")
_TRUTHY = frozenset({"1", "true", "on", "yes"})
_DEFAULT_CSV = "runs/timings.csv"


def _blank(value: object | None) -> object:
    return "" if value is None else value


@dataclass
class TimingLogger:
    """サンプリング/圧縮フェーズの所要時間を CSV に追記する。"""

    path: Path
    enabled: bool = True

    def __post_init__(self) -> None:
        if not self.enabled or self.path.exists():
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", newline="", encoding="utf-8") as f:
            csv.DictWriter(f, fieldnames=TIMING_COLUMNS).writeheader()

    def write(
        self,
        phase: str,
        secs: float,
        *,
        kind: str | None = None,
        nb_samples: int | None = None,
        n_atoms: int | None = None,
        notes: str = "",
    ) -> None:
        if not self.enabled:
            return
        row = {
            "ts_utc": datetime.now(UTC).strftime("%Y-%m-%dT%H:%M:%SZ"),
            "phase": phase,
            "secs": f"{secs:.6f}",
            "kind": kind or "",
            "nb_samples": _blank(nb_samples),
            "n_atoms": _blank(n_atoms),
            "notes": notes,
        }
        with self.path.open("a", newline="", encoding="utf-8") as f:
            csv.DictWriter(f, fieldnames=TIMING_COLUMNS).writerow(row)


@contextmanager
def time_phase(logger: TimingLogger, phase: str, **meta) -> Iterator[None]:
    if not logger.enabled:
        yield
        return
    started = perf_counter()
    try:
        yield
    finally:
        logger.write(phase, perf_counter() - started, **meta)


def build_logger() -> TimingLogger:
    """PERTURB_TIMINGS=1/true/on/yes で有効化（既定 OFF）。出力先は PERTURB_TIMINGS_CSV。"""
    enabled = os.getenv("PERTURB_TIMINGS", "0").strip().lower() in _TRUTHY
    out = os.getenv("PERTURB_TIMINGS_CSV", _DEFAULT_CSV) if enabled else _DEFAULT_CSV
    return TimingLogger(Path(out), enabled=enabled)
