"""Fully-connected layer of logistic neurons.

The weights of all neurons live in one ``(n_out, n_in + 1)`` matrix; row ``n``
holds the input weights of neuron ``n`` and its last column is the threshold,
the weight of a fictional constant input of 1.

One training example passes through three phases: :meth:`Layer.feed_forward`
returns a :class:`ForwardTrace`, :meth:`Layer.back_propagate` turns that trace
into a :class:`LayerGradient` and :meth:`Layer.update_weights` applies it.  Each
value carries the weight version it was computed against, so a trace cannot be
reused once the weights have moved on.
"""

from __future__ import annotations

import numpy as np

from .activations import sigmoid, sigmoid_deriv
from .errors import require
from .types import Array, ForwardTrace, LayerGradient

INIT_RANGE = 0.5


class Layer:
    """Layer of ``n_out`` logistic neurons reading ``n_in`` inputs."""

    def __init__(
        self, n_in: int, n_out: int, rng: np.random.Generator | None = None
    ) -> None:
        if n_in <= 0 or n_out <= 0:
            raise ValueError(f"Layer sizes must be positive, got {n_in}x{n_out}")
        rng = rng if rng is not None else np.random.default_rng()
        self.weights: Array = rng.uniform(
            -INIT_RANGE, INIT_RANGE, size=(n_out, n_in + 1)
        )
        self._version = 0

    @classmethod
    def from_weights(cls, weights) -> "Layer":
        """Build a layer around a copy of an explicit weight matrix."""

        matrix = np.array(weights, dtype=np.float64)
        require(
            matrix.ndim == 2 and matrix.shape[0] > 0 and matrix.shape[1] > 1,
            f"weights must be an (n_out, n_in + 1) matrix, got shape {matrix.shape}",
        )
        layer = cls.__new__(cls)
        layer.weights = matrix
        layer._version = 0
        return layer

    @property
    def n_in(self) -> int:
        return int(self.weights.shape[1]) - 1

    @property
    def n_out(self) -> int:
        return int(self.weights.shape[0])

    def __repr__(self) -> str:
        return f"Layer(n_in={self.n_in}, n_out={self.n_out})"

    def feed_forward(self, inputs) -> ForwardTrace:
        """Calculate the output of all neurons for ``inputs``."""

        x = np.asarray(inputs, dtype=np.float64)
        require(
            x.shape == (self.n_in,),
            f"layer expects {self.n_in} inputs, got shape {x.shape}",
        )
        pot = self.weights[:, :-1] @ x + self.weights[:, -1]
        return ForwardTrace(
            layer=self, version=self._version, inputs=x, outputs=sigmoid(pot)
        )

    def back_propagate(self, trace: ForwardTrace, output_errors) -> LayerGradient:
        """Propagate ``output_errors`` to the neuron potentials and the inputs."""

        self._check_owner(trace, "trace")
        errors = np.asarray(output_errors, dtype=np.float64)
        require(
            errors.shape == (self.n_out,),
            f"layer expects {self.n_out} output errors, got shape {errors.shape}",
        )
        deltas = errors * sigmoid_deriv(trace.outputs)
        input_errors = self.weights[:, :-1].T @ deltas
        return LayerGradient(
            layer=self,
            version=self._version,
            inputs=trace.inputs,
            deltas=deltas,
            input_errors=input_errors,
        )

    def update_weights(self, gradient: LayerGradient, epsilon: float) -> None:
        """Gradient step ``w(n, i) -= epsilon * x(i) * delta(n)``."""

        self._check_owner(gradient, "gradient")
        self.weights[:, :-1] -= epsilon * np.outer(gradient.deltas, gradient.inputs)
        self.weights[:, -1] -= epsilon * gradient.deltas
        self._version += 1

    def _check_owner(self, value, kind: str) -> None:
        require(value.layer is self, f"{kind} was produced by a different layer")
        require(
            value.version == self._version,
            f"{kind} is stale: weights were updated after it was computed",
        )


__all__ = ["Layer", "INIT_RANGE"]
