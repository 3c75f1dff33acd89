"""Readers for comma-separated digit data files."""

from __future__ import annotations

import hashlib
from pathlib import Path
from typing import Iterable, Iterator, List, Mapping, Sequence

import numpy as np

from ..core.errors import FormatError
from ..core.vectors import FeatureVector, LabeledVector

FIXTURE_DIR = Path(__file__).resolve().parent / "_fixtures"


def iter_labeled(
    lines: Iterable[str],
    input_size: int,
    output_size: int,
    *,
    source: str = "<lines>",
) -> Iterator[LabeledVector]:
    """Parse labelled vectors from ``lines``, skipping blank ones."""

    for lineno, line in enumerate(lines, start=1):
        if not line.strip():
            continue
        try:
            yield LabeledVector.read(line, input_size, output_size)
        except FormatError as exc:
            raise FormatError(f"{source}:{lineno}: {exc}") from exc


def read_labeled_set(
    path: str | Path, input_size: int, output_size: int
) -> List[LabeledVector]:
    """Read a training or validation set, one labelled vector per line."""

    path = Path(path)
    with path.open("r", encoding="utf-8") as handle:
        return list(iter_labeled(handle, input_size, output_size, source=str(path)))


def read_item(path: str | Path, input_size: int) -> FeatureVector:
    """Read the single vector stored on the first line of ``path``."""

    path = Path(path)
    with path.open("r", encoding="utf-8") as handle:
        line = handle.readline()
    if not line.strip():
        raise FormatError(f"{path}: invalid file format, must contain one line")
    try:
        return FeatureVector.read(line, input_size)
    except FormatError as exc:
        raise FormatError(f"{path}:1: {exc}") from exc


def class_histogram(items: Sequence[LabeledVector], num_classes: int) -> List[int]:
    labels = np.fromiter((item.label for item in items), dtype=np.int64, count=len(items))
    return np.bincount(labels, minlength=num_classes).tolist()


def _sha256(path: Path) -> str:
    digest = hashlib.sha256()
    with path.open("rb") as handle:
        for chunk in iter(lambda: handle.read(1 << 16), b""):
            digest.update(chunk)
    return digest.hexdigest()


def dataset_provenance(
    path: str | Path, items: Sequence[LabeledVector], num_classes: int
) -> Mapping[str, object]:
    """Describe a data file for the run manifest."""

    path = Path(path)
    return {
        "path": str(path),
        "sha256": _sha256(path),
        "items": len(items),
        "classes": class_histogram(items, num_classes),
    }


def fixture_path(name: str) -> Path:
    return FIXTURE_DIR / name


__all__ = [
    "iter_labeled",
    "read_labeled_set",
    "read_item",
    "class_histogram",
    "dataset_provenance",
    "fixture_path",
]
