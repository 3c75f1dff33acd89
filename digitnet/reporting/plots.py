"""Headless-safe plotting of the error curve."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Mapping, Tuple


class PlotAdapter:
    """Collect per-split errors and optionally emit a matplotlib figure."""

    def __init__(self, run_dir: str | Path, enable_plots: bool = False):
        self.enable_plots = enable_plots
        self.run_dir = Path(run_dir)
        self._history: Dict[str, List[Tuple[int, float]]] = {}
        if self.enable_plots:
            self.run_dir.mkdir(parents=True, exist_ok=True)

    def for_split(self, split: str) -> "_SplitView":
        return _SplitView(self, split)

    def record(self, split: str, epoch: int, metrics: Mapping[str, float]) -> None:
        if not self.enable_plots or "error" not in metrics:
            return
        self._history.setdefault(split, []).append((epoch, float(metrics["error"])))

    def close(self) -> Path | None:
        if not self.enable_plots or not self._history:
            return None
        import matplotlib

        matplotlib.use("Agg", force=True)
        import matplotlib.pyplot as plt  # imported lazily for headless safety

        fig, ax = plt.subplots()
        for split, points in sorted(self._history.items()):
            epochs, errors = zip(*points)
            ax.plot(epochs, errors, label=split)
        ax.set_xlabel("Epoch")
        ax.set_ylabel("Error")
        ax.set_title("Training Curve")
        ax.legend()
        plot_path = self.run_dir / "error.png"
        fig.savefig(plot_path)
        plt.close(fig)
        return plot_path


class _SplitView:
    def __init__(self, adapter: PlotAdapter, split: str) -> None:
        self._adapter = adapter
        self._split = split

    def on_epoch(self, epoch: int, metrics: Mapping[str, float]) -> None:
        self._adapter.record(self._split, epoch, metrics)


__all__ = ["PlotAdapter"]
