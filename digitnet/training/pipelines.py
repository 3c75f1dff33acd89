"""Pipeline assembly: presets, config resolution and complete training runs."""

from __future__ import annotations

import json
import time
from copy import deepcopy
from pathlib import Path
from typing import Dict, List, Mapping, Tuple

import numpy as np

from ..core.network import Network
from ..core.types import RunResult
from ..data.readers import dataset_provenance, fixture_path, read_labeled_set
from ..reporting.artifacts import write_manifest
from ..reporting.metrics import ConsoleSink, CsvSink, JsonlSink
from ..reporting.plots import PlotAdapter
from ..reporting.summary import write_summary
from .trainer import ContinueFn, Trainer

FIXTURE_PREFIX = "fixture:"

_PRESETS: Dict[str, Mapping[str, object]] = {
    "optdigits": {
        "data": {
            "name": "optdigits",
            "train_path": None,
            "validation_path": None,
            "input_size": 64,
            "output_size": 10,
        },
        "model": {"hidden": 65, "epsilon": 0.1},
        "train": {
            "epochs": 10,
            "seed": 0,
            "run_dir": "runs/optdigits",
            "enable_plots": False,
        },
    },
    "bars": {
        "data": {
            "name": "bars",
            "train_path": "fixture:bars_train.csv",
            "validation_path": "fixture:bars_validation.csv",
            "input_size": 9,
            "output_size": 3,
        },
        "model": {"hidden": 6, "epsilon": 0.5},
        "train": {
            "epochs": 200,
            "seed": 7,
            "run_dir": "runs/bars",
            "enable_plots": False,
        },
    },
    "toy-2class": {
        "data": {
            "name": "toy-2class",
            "train_path": "fixture:toy_train.csv",
            "validation_path": "fixture:toy_validation.csv",
            "input_size": 2,
            "output_size": 2,
        },
        "model": {"hidden": 2, "epsilon": 0.5},
        "train": {
            "epochs": 2000,
            "seed": 1,
            "run_dir": "runs/toy-2class",
            "enable_plots": False,
        },
    },
}

_PRESET_DIR = Path(__file__).resolve().parents[2] / "configs" / "presets"


def _read_preset_file(path: Path) -> Mapping[str, object]:
    text = path.read_text()
    suffix = path.suffix.lower()
    if suffix in {".yaml", ".yml"}:
        try:
            import yaml  # type: ignore
        except Exception as exc:  # pragma: no cover - optional dependency
            raise RuntimeError("PyYAML is required to load preset files in YAML format") from exc
        data = yaml.safe_load(text) or {}
    elif suffix == ".json":
        data = json.loads(text or "{}")
    else:
        raise ValueError(f"Unsupported preset file type: {path.suffix}")

    if not isinstance(data, Mapping):
        raise TypeError(f"Preset {path.name} must decode to a mapping")
    missing = {"data", "model", "train"} - set(data)
    if missing:
        raise KeyError(
            f"Preset {path.name} is missing required sections: {', '.join(sorted(missing))}"
        )
    return data


def _file_presets() -> Dict[str, Mapping[str, object]]:
    presets: Dict[str, Mapping[str, object]] = {}
    if _PRESET_DIR.exists():
        for file in sorted(_PRESET_DIR.iterdir()):
            if file.suffix.lower() in {".yaml", ".yml", ".json"}:
                presets[file.stem] = json.loads(json.dumps(_read_preset_file(file)))
    return presets


def presets() -> Mapping[str, Mapping[str, object]]:
    combined: Dict[str, Mapping[str, object]] = {}
    combined.update({name: deepcopy(cfg) for name, cfg in _PRESETS.items()})
    combined.update(_file_presets())
    return combined


def load_preset(name: str) -> Dict[str, object]:
    available = presets()
    try:
        return deepcopy(dict(available[name]))
    except KeyError as exc:
        raise KeyError(f"Unknown preset: {name}") from exc


def resolve_path(value: str | Path | None, *, field: str) -> Path:
    if value is None or str(value) == "":
        raise ValueError(f"data.{field} is required")
    text = str(value)
    if text.startswith(FIXTURE_PREFIX):
        return fixture_path(text[len(FIXTURE_PREFIX):])
    return Path(text)


def train_pipeline(
    config: Mapping[str, object],
    *,
    should_continue: ContinueFn | None = None,
    verbose: bool = True,
) -> Tuple[Network, RunResult]:
    """Read the data sets, train a network and write the run artifacts."""

    data_cfg = dict(config["data"])  # type: ignore[arg-type]
    model_cfg = dict(config["model"])  # type: ignore[arg-type]
    train_cfg = dict(config["train"])  # type: ignore[arg-type]

    input_size = int(data_cfg["input_size"])
    output_size = int(data_cfg["output_size"])
    train_path = resolve_path(data_cfg.get("train_path"), field="train_path")
    training_set = read_labeled_set(train_path, input_size, output_size)
    provenance: Dict[str, object] = {
        "name": data_cfg.get("name", "custom"),
        "train": dataset_provenance(train_path, training_set, output_size),
    }
    validation_set: List = []
    if data_cfg.get("validation_path"):
        validation_path = resolve_path(data_cfg["validation_path"], field="validation_path")
        validation_set = read_labeled_set(validation_path, input_size, output_size)
        provenance["validation"] = dataset_provenance(
            validation_path, validation_set, output_size
        )

    seed = int(train_cfg.get("seed", 0))
    epochs = train_cfg.get("epochs")
    epochs = int(epochs) if epochs is not None else None
    patience = train_cfg.get("early_stopping_patience")
    patience = int(patience) if patience is not None else None

    network = Network(
        input_size,
        int(model_cfg.get("hidden", input_size + 1)),
        output_size,
        float(model_cfg.get("epsilon", 0.1)),
        rng=np.random.default_rng(seed),
    )

    run_dir = _resolve_run_dir(train_cfg, str(provenance["name"]))
    run_dir.mkdir(parents=True, exist_ok=True)

    if verbose:
        _print_startup_summary(
            dataset_name=str(provenance["name"]),
            sizes=network.sizes,
            epsilon=network.epsilon,
            train_items=len(training_set),
            validation_items=len(validation_set),
            param_count=network.parameter_count(),
        )

    train_jsonl = JsonlSink(run_dir / "metrics_train.jsonl", split="train", seed=seed)
    val_jsonl = JsonlSink(run_dir / "metrics_validation.jsonl", split="validation", seed=seed)
    plots = PlotAdapter(run_dir, enable_plots=bool(train_cfg.get("enable_plots", False)))
    split_loggers: Dict[str, List[object]] = {
        "train": [
            train_jsonl,
            CsvSink(run_dir / "metrics_train.csv", split="train"),
            plots.for_split("train"),
        ],
        "validation": [
            val_jsonl,
            CsvSink(run_dir / "metrics_validation.csv", split="validation"),
            plots.for_split("validation"),
        ],
    }
    if verbose:
        split_loggers["validation"].append(ConsoleSink(split="validation"))
        if not validation_set:
            split_loggers["train"].append(ConsoleSink(split="train"))

    trainer = Trainer(network, metric_names=train_cfg.get("metrics"))  # type: ignore[arg-type]
    history = trainer.run(
        training_set,
        validation_set,
        epochs,
        should_continue=should_continue,
        early_stopping_patience=patience,
        split_loggers=split_loggers,
    )
    plots.close()

    monitored = history.validation or history.train
    final_error = float(monitored[-1]["error"]) if monitored else float("nan")
    metrics_path = val_jsonl.path if validation_set else train_jsonl.path

    safe_config = json.loads(json.dumps(config))
    manifest = write_manifest(
        run_dir / "manifest.json",
        config=safe_config,
        data_provenance=provenance,
        network=network,
        history=history,
    )
    summary_path = write_summary(
        metrics_path, run_dir / "summary.json", tail=int(train_cfg.get("summary_tail", 32))
    )
    (run_dir / "config.json").write_text(json.dumps(safe_config, indent=2))
    (run_dir / "metrics.jsonl").write_text(Path(metrics_path).read_text())

    return network, RunResult(
        epochs=history.epochs,
        final_error=final_error,
        metrics_path=str(metrics_path),
        manifest_path=manifest,
        summary_path=summary_path,
    )


def run_pipeline(config: Mapping[str, object]) -> RunResult:
    return train_pipeline(config)[1]


def _resolve_run_dir(train_cfg: Mapping[str, object], dataset: str) -> Path:
    if train_cfg.get("run_dir"):
        return Path(str(train_cfg["run_dir"]))
    timestamp = time.strftime("%Y%m%d-%H%M%S")
    return Path("runs") / timestamp / dataset


def _print_startup_summary(
    *,
    dataset_name: str,
    sizes: Tuple[int, int, int],
    epsilon: float,
    train_items: int,
    validation_items: int,
    param_count: int,
) -> None:
    print("=== DigitNet run ===")
    print(f"Dataset       : {dataset_name}")
    print(f"Dimensions    : {list(sizes)}")
    print(f"Epsilon       : {epsilon}")
    print(f"Training set  : {train_items}")
    print(f"Validation set: {validation_items}")
    print(f"Parameters    : {param_count}")
    print("====================")


__all__ = ["run_pipeline", "train_pipeline", "load_preset", "presets", "resolve_path"]
