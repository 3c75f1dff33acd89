"""Per-epoch metric sinks for training runs.

Every sink is registered for one split (``"train"`` or ``"validation"``) and
receives ``on_epoch(epoch, metrics)`` calls from the trainer.  File sinks
truncate their target when created, so a run directory only ever holds the
latest run.
"""

from __future__ import annotations

import csv
import json
import sys
from pathlib import Path
from typing import Dict, List, Mapping, TextIO

from .artifacts import git_sha


class _EpochFileSink:
    def __init__(self, path: str | Path, *, split: str) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text("")
        self.split = split

    def _record(self, epoch: int, metrics: Mapping[str, object]) -> Dict[str, object]:
        record: Dict[str, object] = {"epoch": int(epoch), "split": self.split}
        record.update(
            {k: float(v) for k, v in metrics.items() if isinstance(v, (int, float))}
        )
        return record


class JsonlSink(_EpochFileSink):
    """One JSON object per epoch, tagged with the run seed and git revision."""

    def __init__(
        self,
        path: str | Path,
        *,
        split: str = "train",
        seed: int | None = None,
        sha: str | None = None,
    ) -> None:
        super().__init__(path, split=split)
        self.seed = seed
        self.sha = sha or git_sha()

    def on_epoch(self, epoch: int, metrics: Mapping[str, float]) -> None:
        record = self._record(epoch, metrics)
        record["seed"] = self.seed
        record["sha"] = self.sha
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(record) + "\n")

    __call__ = on_epoch


class CsvSink(_EpochFileSink):
    """CSV table whose columns are fixed by the first epoch written.

    Metrics missing from a later epoch are left empty; a metric that was not
    present in the first epoch raises ``ValueError``.
    """

    def __init__(self, path: str | Path, *, split: str = "train") -> None:
        super().__init__(path, split=split)
        self.columns: List[str] = []

    def on_epoch(self, epoch: int, metrics: Mapping[str, float]) -> None:
        record = self._record(epoch, metrics)
        if not self.columns:
            self.columns = list(record)
        unknown = [key for key in record if key not in self.columns]
        if unknown:
            raise ValueError(f"metrics {unknown} were not in the first {self.split} row")
        with self.path.open("a", encoding="utf-8", newline="") as handle:
            writer = csv.DictWriter(handle, fieldnames=self.columns, restval="")
            if handle.tell() == 0:
                writer.writeheader()
            writer.writerow(record)

    __call__ = on_epoch


class ConsoleSink:
    """Print epoch progress in the style of the interactive trainer."""

    def __init__(self, *, split: str = "validation", stream: TextIO | None = None) -> None:
        self.split = split
        self._stream = stream

    def on_epoch(self, epoch: int, metrics: Mapping[str, float]) -> None:
        stream = self._stream or sys.stdout
        error = float(metrics.get("error", 0.0))
        if self.split == "train":
            line = f"Training error after {epoch}. epoch is {error:f}"
        elif epoch == 0:
            line = f"Initial error is {error:f}"
        else:
            line = f"Error after {epoch}. epoch is {error:f}"
        if "accuracy" in metrics:
            line += f" (accuracy {float(metrics['accuracy']):.3f})"
        print(line, file=stream)


__all__ = ["JsonlSink", "CsvSink", "ConsoleSink"]
