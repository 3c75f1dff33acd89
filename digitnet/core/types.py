"""Core typing contracts for DigitNet."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, List, Mapping

import numpy as np

if TYPE_CHECKING:  # pragma: no cover
    from .layer import Layer

Array = np.ndarray


def frozen_array(values, *, name: str = "array") -> Array:
    """Return a read-only 1-D float64 copy of ``values``."""

    arr = np.array(values, dtype=np.float64)
    if arr.ndim != 1:
        raise ValueError(f"{name} must be one-dimensional, got shape {arr.shape}")
    arr.flags.writeable = False
    return arr


@dataclass(frozen=True, eq=False)
class ForwardTrace:
    """Inputs and outputs captured by one :meth:`Layer.feed_forward` call."""

    layer: "Layer" = field(repr=False)
    version: int
    inputs: Array
    outputs: Array


@dataclass(frozen=True, eq=False)
class LayerGradient:
    """Local deltas produced by :meth:`Layer.back_propagate`.

    ``input_errors`` is the error attributed to each input of the layer and is
    what the preceding layer receives as its output errors.
    """

    layer: "Layer" = field(repr=False)
    version: int
    inputs: Array
    deltas: Array
    input_errors: Array


@dataclass(frozen=True)
class RunResult:
    """Summary returned by :func:`digitnet.training.pipelines.run_pipeline`."""

    epochs: int
    final_error: float
    metrics_path: str
    manifest_path: str
    summary_path: str = ""


@dataclass
class TrainingHistory:
    """Per-split epoch metrics recorded by :class:`digitnet.training.trainer.Trainer`."""

    train: List[Dict[str, float]] = field(default_factory=list)
    validation: List[Dict[str, float]] = field(default_factory=list)
    stopped_early: bool = False

    @property
    def epochs(self) -> int:
        return len(self.train)

    def record(self, split: str, metrics: Mapping[str, float]) -> None:
        getattr(self, split).append(dict(metrics))
