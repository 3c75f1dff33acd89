"""Two-layer network trained by online back-propagation."""

from __future__ import annotations

from typing import Iterable, Tuple

import numpy as np

from .errors import require
from .layer import Layer
from .types import Array, ForwardTrace
from .vectors import FeatureVector, LabeledVector


class Network:
    """A hidden layer and an output layer of logistic neurons.

    ``epsilon`` is the learning rate used by every weight update.
    """

    def __init__(
        self,
        n_in: int,
        n_hidden: int,
        n_out: int,
        epsilon: float,
        *,
        rng: np.random.Generator | None = None,
    ) -> None:
        if epsilon <= 0:
            raise ValueError(f"epsilon must be positive, got {epsilon}")
        rng = rng if rng is not None else np.random.default_rng()
        self.epsilon = float(epsilon)
        self.hidden = Layer(n_in, n_hidden, rng)
        self.output = Layer(n_hidden, n_out, rng)

    @classmethod
    def from_layers(cls, hidden: Layer, output: Layer, epsilon: float) -> "Network":
        require(
            hidden.n_out == output.n_in,
            f"hidden layer has {hidden.n_out} outputs but output layer reads {output.n_in}",
        )
        if epsilon <= 0:
            raise ValueError(f"epsilon must be positive, got {epsilon}")
        network = cls.__new__(cls)
        network.epsilon = float(epsilon)
        network.hidden = hidden
        network.output = output
        return network

    @property
    def sizes(self) -> Tuple[int, int, int]:
        return self.hidden.n_in, self.hidden.n_out, self.output.n_out

    def parameter_count(self) -> int:
        return int(self.hidden.weights.size + self.output.weights.size)

    def _forward(self, item: FeatureVector | LabeledVector) -> Tuple[ForwardTrace, ForwardTrace]:
        hidden_trace = self.hidden.feed_forward(item.x)
        output_trace = self.output.feed_forward(hidden_trace.outputs)
        return hidden_trace, output_trace

    def think(self, item: FeatureVector | LabeledVector) -> Array:
        """Return the output vector of the network for ``item``."""

        return self._forward(item)[1].outputs

    def classify(self, item: FeatureVector | LabeledVector) -> int:
        """Index of the largest output; the first maximum wins ties."""

        return int(np.argmax(self.think(item)))

    def train(self, item: LabeledVector) -> float:
        """One training step on ``item``.

        Returns the error of the example measured before the weights move.
        """

        hidden_trace, output_trace = self._forward(item)
        outputs = output_trace.outputs

        output_grad = self.output.back_propagate(output_trace, item.differences(outputs))
        hidden_grad = self.hidden.back_propagate(hidden_trace, output_grad.input_errors)

        self.output.update_weights(output_grad, self.epsilon)
        self.hidden.update_weights(hidden_grad, self.epsilon)
        return item.error(outputs)

    def train_epoch(self, training_set: Iterable[LabeledVector]) -> float:
        """Train once on every item, in order; return the summed error seen."""

        total = 0.0
        for item in training_set:
            total += self.train(item)
        return total

    def error(self, validation_set: Iterable[LabeledVector]) -> float:
        """Total (not averaged) error over ``validation_set``."""

        total = 0.0
        for item in validation_set:
            total += item.error(self.think(item))
        return total

    def accuracy(self, labelled_set: Iterable[LabeledVector]) -> float:
        hits = 0
        count = 0
        for item in labelled_set:
            hits += int(self.classify(item) == item.label)
            count += 1
        return hits / count if count else 0.0


__all__ = ["Network"]
