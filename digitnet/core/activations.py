"""Activation utilities for DigitNet."""

from __future__ import annotations

import numpy as np

from .types import Array


def sigmoid(x: Array) -> Array:
    """Return the logistic activation ``1 / (1 + exp(-x))``."""

    with np.errstate(over="ignore"):
        return 1.0 / (1.0 + np.exp(-x))


def sigmoid_deriv(y: Array) -> Array:
    """Derivative of the logistic function expressed through its output ``y``."""

    return y * (1.0 - y)
