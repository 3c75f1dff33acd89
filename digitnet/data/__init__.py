"""Data file readers for DigitNet."""

from .readers import (
    class_histogram,
    dataset_provenance,
    fixture_path,
    iter_labeled,
    read_item,
    read_labeled_set,
)

__all__ = [
    "class_histogram",
    "dataset_provenance",
    "fixture_path",
    "iter_labeled",
    "read_item",
    "read_labeled_set",
]
