import numpy as np
import pytest

from digitnet.core.errors import FormatError
from digitnet.data.readers import (
    class_histogram,
    dataset_provenance,
    fixture_path,
    read_item,
    read_labeled_set,
)


def test_read_labeled_set_skips_blank_lines(tmp_path):
    path = tmp_path / "train.csv"
    path.write_text("1,0,0\n\n0,1,1\n")
    items = read_labeled_set(path, 2, 2)
    assert [item.label for item in items] == [0, 1]
    assert np.array_equal(items[1].x, [0.0, 1.0])


def test_read_labeled_set_reports_line_number(tmp_path):
    path = tmp_path / "train.csv"
    path.write_text("1,0,0\n0,1,7\n")
    with pytest.raises(FormatError, match=r"train\.csv:2:"):
        read_labeled_set(path, 2, 2)


def test_read_item_uses_first_line(tmp_path):
    path = tmp_path / "item.csv"
    path.write_text("0.5,0.25,9\nignored\n")
    item = read_item(path, 2)
    assert np.array_equal(item.x, [0.5, 0.25])


def test_read_item_empty_file(tmp_path):
    path = tmp_path / "empty.csv"
    path.write_text("")
    with pytest.raises(FormatError, match="must contain one line"):
        read_item(path, 2)


def test_bundled_fixtures_parse():
    train = read_labeled_set(fixture_path("bars_train.csv"), 9, 3)
    validation = read_labeled_set(fixture_path("bars_validation.csv"), 9, 3)
    assert len(train) == 14
    assert class_histogram(validation, 3) == [3, 3, 2]


def test_dataset_provenance_records_checksum(tmp_path):
    path = tmp_path / "train.csv"
    path.write_text("1,0,0\n0,1,1\n0,1,1\n")
    items = read_labeled_set(path, 2, 2)
    info = dataset_provenance(path, items, 2)
    assert info["items"] == 3
    assert info["classes"] == [1, 2]
    assert len(info["sha256"]) == 64
