import json
from pathlib import Path

import pytest

from digitnet.training import pipelines


def _bars_config(run_dir: Path, epochs: int = 5) -> dict:
    config = pipelines.load_preset("bars")
    config["train"]["epochs"] = epochs
    config["train"]["run_dir"] = str(run_dir)
    return config


def test_pipeline_produces_artifacts(tmp_path):
    config = _bars_config(tmp_path / "run")
    network, result = pipelines.train_pipeline(config, verbose=False)

    assert result.epochs == 5
    assert network.sizes == (9, 6, 3)
    manifest = json.loads(Path(result.manifest_path).read_text())
    assert manifest["config"]["train"]["seed"] == 7
    assert manifest["data"]["train"]["items"] == 14
    assert manifest["data"]["validation"]["classes"] == [3, 3, 2]
    assert manifest["training"]["epochs_run"] == 5
    assert manifest["training"]["validation"]["final_error"] == pytest.approx(result.final_error)
    assert manifest["network"]["layers"]["hidden"]["neurons"] == 6
    assert manifest["network"]["layers"]["output"]["inputs"] == 6
    assert manifest["network"]["sizes"] == [9, 6, 3]

    records = [
        json.loads(line)
        for line in Path(result.metrics_path).read_text().splitlines()
        if line
    ]
    assert [record["epoch"] for record in records] == list(range(6))
    assert all(record["split"] == "validation" for record in records)
    assert records[-1]["error"] == pytest.approx(result.final_error)

    run_dir = tmp_path / "run"
    assert (run_dir / "metrics_train.csv").exists()
    assert (run_dir / "metrics_validation.csv").exists()
    assert (run_dir / "config.json").exists()
    summary = json.loads(Path(result.summary_path).read_text())
    assert summary["records"] == 6
    assert "best_epoch" in summary["metrics"]["error"]


def test_pipeline_determinism(tmp_path):
    first = pipelines.run_pipeline(_bars_config(tmp_path / "run1"))
    second = pipelines.run_pipeline(_bars_config(tmp_path / "run2"))

    assert Path(first.metrics_path).read_text() == Path(second.metrics_path).read_text()
    assert first.final_error == second.final_error


def test_pipeline_requires_training_file(tmp_path):
    config = pipelines.load_preset("optdigits")
    config["train"]["run_dir"] = str(tmp_path)
    with pytest.raises(ValueError, match="train_path"):
        pipelines.run_pipeline(config)


def test_pipeline_without_validation_monitors_training(tmp_path):
    config = _bars_config(tmp_path / "run", epochs=3)
    config["data"]["validation_path"] = None
    result = pipelines.run_pipeline(config)
    records = Path(result.metrics_path).read_text().splitlines()
    assert len(records) == 3
    assert json.loads(records[0])["split"] == "train"


def test_file_presets_override_builtins(tmp_path, monkeypatch):
    preset_dir = tmp_path / "presets"
    preset_dir.mkdir()
    custom = pipelines.load_preset("toy-2class")
    custom["model"]["hidden"] = 3
    (preset_dir / "toy-wide.json").write_text(json.dumps(custom))
    monkeypatch.setattr(pipelines, "_PRESET_DIR", preset_dir)

    assert "toy-wide" in pipelines.presets()
    assert pipelines.load_preset("toy-wide")["model"]["hidden"] == 3


def test_unknown_preset():
    with pytest.raises(KeyError):
        pipelines.load_preset("does-not-exist")
