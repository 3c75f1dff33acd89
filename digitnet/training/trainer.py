"""Epoch-by-epoch training loop for :class:`~digitnet.core.network.Network`."""

from __future__ import annotations

from typing import Callable, Mapping, Sequence

from ..core.network import Network
from ..core.types import TrainingHistory
from ..core.vectors import LabeledVector
from .metrics import compute_metrics, default_metrics

ContinueFn = Callable[[int, Mapping[str, float]], bool]


class Trainer:
    """Run sequential training epochs and report metrics to callbacks.

    Callbacks are objects with an ``on_epoch(epoch, metrics)`` method or plain
    callables.  ``callbacks`` receive every split, ``split_loggers`` only the
    split they are registered under (``"train"`` or ``"validation"``).
    """

    def __init__(
        self,
        network: Network,
        callbacks: Sequence[object] | None = None,
        metric_names: Sequence[str] | None = None,
    ) -> None:
        self.network = network
        self.callbacks = list(callbacks or [])
        self.metric_names = list(metric_names or default_metrics())

    def run(
        self,
        training_set: Sequence[LabeledVector],
        validation_set: Sequence[LabeledVector] | None = None,
        epochs: int | None = None,
        *,
        should_continue: ContinueFn | None = None,
        early_stopping_patience: int | None = None,
        split_loggers: Mapping[str, Sequence[object]] | None = None,
    ) -> TrainingHistory:
        if epochs is None and should_continue is None:
            raise ValueError("epochs is required when no should_continue callback is given")
        if epochs is not None and epochs < 0:
            raise ValueError(f"epochs must be non-negative, got {epochs}")
        if not training_set:
            raise ValueError("training set is empty")

        split_loggers = split_loggers or {}
        history = TrainingHistory()

        if validation_set:
            initial = self._evaluate(validation_set)
            history.record("validation", initial)
            self._emit_epoch("validation", 0, initial, split_loggers)

        best_error = float("inf")
        epochs_no_improve = 0
        epoch = 0
        while epochs is None or epoch < epochs:
            epoch += 1
            train_error = self.network.train_epoch(training_set)
            train_metrics = self._evaluate(training_set, error=train_error)
            history.record("train", train_metrics)
            self._emit_epoch("train", epoch, train_metrics, split_loggers)

            monitored = train_metrics
            if validation_set:
                monitored = self._evaluate(validation_set)
                history.record("validation", monitored)
                self._emit_epoch("validation", epoch, monitored, split_loggers)

            current = float(monitored["error"])
            if current < best_error - 1e-12:
                best_error = current
                epochs_no_improve = 0
            else:
                epochs_no_improve += 1
                if early_stopping_patience and epochs_no_improve >= early_stopping_patience:
                    history.stopped_early = True
                    break

            if should_continue is not None and not should_continue(epoch, monitored):
                break

        return history

    # ------------------------------------------------------------------
    # Internal helpers

    def _evaluate(
        self, items: Sequence[LabeledVector], error: float | None = None
    ) -> Mapping[str, float]:
        """Compute the configured metrics, always including ``error``.

        A given ``error`` (the summed pre-update error of a training pass) is
        reported as is instead of being recomputed on the updated weights.
        """

        names = [name for name in self.metric_names if name != "error"]
        if error is None:
            names.insert(0, "error")
        metrics = dict(compute_metrics(names, self.network, items))
        if error is not None:
            metrics = {"error": float(error), **metrics}
        return metrics

    def _emit_epoch(
        self,
        split: str,
        epoch: int,
        metrics: Mapping[str, float],
        loggers: Mapping[str, Sequence[object]],
    ) -> None:
        for callback in [*self.callbacks, *loggers.get(split, [])]:
            if hasattr(callback, "on_epoch"):
                callback.on_epoch(epoch, metrics)  # type: ignore[attr-defined]
            elif callable(callback):
                callback(epoch, metrics)


__all__ = ["Trainer"]
