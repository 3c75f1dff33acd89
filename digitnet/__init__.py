"""DigitNet public API."""

from .core import activations  # noqa: F401
from .core import types  # noqa: F401
from .core.errors import ContractViolation, FormatError
from .core.layer import Layer
from .core.network import Network
from .core.vectors import FeatureVector, LabeledVector
from .data.readers import read_item, read_labeled_set
from .training.pipelines import load_preset, presets, run_pipeline, train_pipeline
from .training.trainer import Trainer

__version__ = "0.1.0"

__all__ = [
    "ContractViolation",
    "FeatureVector",
    "FormatError",
    "LabeledVector",
    "Layer",
    "Network",
    "Trainer",
    "activations",
    "types",
    "load_preset",
    "presets",
    "read_item",
    "read_labeled_set",
    "run_pipeline",
    "train_pipeline",
]
