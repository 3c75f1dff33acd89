"""Deterministic run summaries built from JSONL metric files."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable, List, Mapping

import numpy as np


def _read_records(path: Path) -> List[Mapping[str, object]]:
    records: List[Mapping[str, object]] = []
    if path.exists():
        for line in path.read_text().splitlines():
            line = line.strip()
            if line:
                records.append(json.loads(line))
    return records


def _series(records: Iterable[Mapping[str, object]]) -> Mapping[str, list[tuple[int, float]]]:
    series: dict[str, list[tuple[int, float]]] = {}
    for record in records:
        epoch = int(record.get("epoch", 0))  # type: ignore[arg-type]
        for key, value in record.items():
            if key in {"epoch", "seed"}:
                continue
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                series.setdefault(key, []).append((epoch, float(value)))
    return series


def summarise(records: List[Mapping[str, object]], tail: int) -> Mapping[str, object]:
    """Min, max, mean, last and tail mean of every numeric metric.

    ``best_epoch`` is the epoch with the lowest ``error`` when that metric is
    present.
    """

    tail_window = min(tail, len(records)) if records else 0
    metrics: dict[str, Mapping[str, float]] = {}
    for name, points in _series(records).items():
        epochs = np.asarray([p[0] for p in points], dtype=np.int64)
        values = np.asarray([p[1] for p in points], dtype=np.float64)
        tail_values = values[-tail_window:] if tail_window else values[:0]
        entry = {
            "min": float(np.min(values)),
            "max": float(np.max(values)),
            "mean": float(np.mean(values)),
            "last": float(values[-1]),
            "tail_mean": float(np.mean(tail_values)) if tail_values.size else 0.0,
        }
        if name == "error":
            entry["best_epoch"] = int(epochs[int(np.argmin(values))])
        metrics[name] = entry

    return {
        "version": 1,
        "records": len(records),
        "tail_window": tail_window,
        "metrics": metrics,
    }


def write_summary(
    metrics_jsonl: str | Path, out_summary_json: str | Path, *, tail: int = 32
) -> str:
    """Write a deterministic summary for ``metrics_jsonl``."""

    out_path = Path(out_summary_json)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    summary = summarise(_read_records(Path(metrics_jsonl)), tail)
    out_path.write_text(json.dumps(summary, sort_keys=True, indent=2))
    return str(out_path)


__all__ = ["summarise", "write_summary"]
