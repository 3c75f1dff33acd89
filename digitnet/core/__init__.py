"""Core numerical primitives for DigitNet."""

from . import activations, errors, layer, network, types, vectors
from .errors import ContractViolation, FormatError
from .layer import Layer
from .network import Network
from .vectors import FeatureVector, LabeledVector

__all__ = [
    "activations",
    "errors",
    "layer",
    "network",
    "types",
    "vectors",
    "ContractViolation",
    "FormatError",
    "FeatureVector",
    "LabeledVector",
    "Layer",
    "Network",
]
