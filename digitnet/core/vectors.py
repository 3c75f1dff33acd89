"""Input records consumed by the network.

Both records are parsed from comma-separated text lines.  A plain
:class:`FeatureVector` holds the network inputs only; a :class:`LabeledVector`
adds the one-hot target built from a trailing integer class label.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import List, Sequence

import numpy as np

from .errors import FormatError, require
from .types import Array, frozen_array

# Plain decimal notation only: no digit separators, no nan or inf spellings.
_NUMBER = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
_INTEGER = re.compile(r"[+-]?[0-9]+")


def _tokens(line: str) -> List[str]:
    parts = line.strip().split(",")
    while parts and not parts[-1].strip():
        parts.pop()
    return [part.strip() for part in parts]


def _parse_values(parts: Sequence[str], size: int) -> Array:
    values = np.empty(size, dtype=np.float64)
    for idx in range(size):
        token = parts[idx]
        if not _NUMBER.fullmatch(token):
            raise FormatError(f"value {idx} is not a number: {token!r}")
        value = float(token)
        if not math.isfinite(value):
            raise FormatError(f"value {idx} is not finite: {token!r}")
        values[idx] = value
    return values


@dataclass(frozen=True, eq=False)
class FeatureVector:
    """Immutable fixed-length input vector."""

    x: Array

    def __post_init__(self) -> None:
        object.__setattr__(self, "x", frozen_array(self.x, name="x"))

    @property
    def size(self) -> int:
        return int(self.x.shape[0])

    @classmethod
    def read(cls, line: str, size: int) -> "FeatureVector":
        """Parse the first ``size`` comma-separated numbers of ``line``."""

        parts = _tokens(line)
        if len(parts) < size:
            raise FormatError(f"{size} values required, {len(parts)} given")
        return cls(_parse_values(parts, size))


@dataclass(frozen=True, eq=False)
class LabeledVector:
    """A feature vector paired with the one-hot encoding of its class."""

    features: FeatureVector
    d: Array
    label: int

    def __post_init__(self) -> None:
        d = frozen_array(self.d, name="d")
        require(
            0 <= self.label < d.shape[0],
            f"label {self.label} outside [0, {d.shape[0]})",
        )
        expected = np.zeros_like(d)
        expected[self.label] = 1.0
        require(np.array_equal(d, expected), f"target is not one-hot for label {self.label}")
        object.__setattr__(self, "d", d)

    @property
    def x(self) -> Array:
        return self.features.x

    @property
    def output_size(self) -> int:
        return int(self.d.shape[0])

    @classmethod
    def from_label(cls, x, label: int, output_size: int) -> "LabeledVector":
        require(0 <= label < output_size, f"label {label} outside [0, {output_size})")
        d = np.zeros(output_size, dtype=np.float64)
        d[label] = 1.0
        return cls(FeatureVector(x), d, int(label))

    @classmethod
    def read(cls, line: str, input_size: int, output_size: int) -> "LabeledVector":
        """Parse ``input_size`` numbers followed by an integer class label."""

        parts = _tokens(line)
        if len(parts) < input_size + 1:
            raise FormatError(
                f"{input_size + 1} values required, {len(parts)} values given"
            )
        x = _parse_values(parts, input_size)

        token = parts[input_size]
        if not _INTEGER.fullmatch(token):
            raise FormatError(f"label is not an integer: {token!r}")
        label = int(token)
        if not 0 <= label < output_size:
            raise FormatError(
                f"Output must be between 0 and {output_size - 1}, {label} given"
            )
        return cls.from_label(x, label, output_size)

    def differences(self, actual_outputs) -> Array:
        """Return ``actual - target`` for every output."""

        actual = np.asarray(actual_outputs, dtype=np.float64)
        require(
            actual.shape == self.d.shape,
            f"expected {self.output_size} outputs, got shape {actual.shape}",
        )
        return actual - self.d

    def error(self, actual_outputs) -> float:
        """Half the sum of squared differences, ``E = 1/2 * sum((y - d)^2)``."""

        diff = self.differences(actual_outputs)
        return float(0.5 * np.dot(diff, diff))


__all__ = ["FeatureVector", "LabeledVector"]
