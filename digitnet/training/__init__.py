"""Training loops and pipelines for DigitNet."""

from .pipelines import load_preset, presets, run_pipeline, train_pipeline
from .trainer import Trainer

__all__ = ["Trainer", "load_preset", "presets", "run_pipeline", "train_pipeline"]
