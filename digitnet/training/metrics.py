"""Metric helpers evaluated between training epochs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Sequence

import numpy as np

from ..core.network import Network
from ..core.types import Array
from ..core.vectors import LabeledVector


@dataclass(frozen=True)
class MetricResult:
    name: str
    value: float


def default_metrics() -> List[str]:
    return ["error", "accuracy"]


def confusion_matrix(network: Network, items: Sequence[LabeledVector]) -> Array:
    """Rows are true labels, columns are predicted labels."""

    num_classes = network.output.n_out
    matrix = np.zeros((num_classes, num_classes), dtype=np.int64)
    for item in items:
        matrix[item.label, network.classify(item)] += 1
    return matrix


def compute_metric(
    name: str, network: Network, items: Sequence[LabeledVector]
) -> MetricResult:
    key = name.lower()
    if key == "error":
        value = network.error(items)
    elif key == "mean_error":
        value = network.error(items) / len(items) if items else 0.0
    elif key == "accuracy":
        value = network.accuracy(items)
    elif key == "macro_f1":
        matrix = confusion_matrix(network, items)
        tp = np.diag(matrix).astype(np.float64)
        fp = matrix.sum(axis=0) - tp
        fn = matrix.sum(axis=1) - tp
        precision = tp / (tp + fp + 1e-9)
        recall = tp / (tp + fn + 1e-9)
        f1 = 2 * precision * recall / (precision + recall + 1e-9)
        value = float(np.mean(f1))
    else:
        raise KeyError(f"Unknown metric: {name}")
    return MetricResult(name=key, value=float(value))


def compute_metrics(
    names: Iterable[str], network: Network, items: Sequence[LabeledVector]
) -> Mapping[str, float]:
    results: Dict[str, float] = {}
    for name in names:
        metric = compute_metric(name, network, items)
        results[metric.name] = metric.value
    return results


__all__ = ["MetricResult", "default_metrics", "confusion_matrix", "compute_metrics"]
