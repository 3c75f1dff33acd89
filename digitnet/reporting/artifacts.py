"""Run manifest describing what was trained, on which data, and how it went."""

from __future__ import annotations

import json
import platform
import subprocess
import time
from pathlib import Path
from typing import Dict, Mapping

import numpy as np

from ..core.network import Network
from ..core.types import TrainingHistory


def git_sha() -> str:
    try:
        out = subprocess.check_output(["git", "rev-parse", "HEAD"], stderr=subprocess.DEVNULL)
        return out.decode().strip()
    except Exception:  # pragma: no cover - git may be unavailable in tests
        return "unknown"


def describe_network(network: Network) -> Dict[str, object]:
    """Shape and weight statistics of a trained network."""

    layers = {}
    for name, layer in (("hidden", network.hidden), ("output", network.output)):
        weights = layer.weights
        layers[name] = {
            "inputs": layer.n_in,
            "neurons": layer.n_out,
            "weight_norm": float(np.linalg.norm(weights[:, :-1])),
            "bias_mean": float(weights[:, -1].mean()),
        }
    return {
        "sizes": list(network.sizes),
        "epsilon": network.epsilon,
        "parameters": network.parameter_count(),
        "layers": layers,
    }


def describe_history(history: TrainingHistory) -> Dict[str, object]:
    """Epoch count, stop reason and final/best errors of a training run."""

    summary: Dict[str, object] = {
        "epochs_run": history.epochs,
        "stopped_early": history.stopped_early,
    }
    for split in ("train", "validation"):
        records = getattr(history, split)
        if not records:
            continue
        errors = [float(record["error"]) for record in records]
        # validation records start at epoch 0, train records at epoch 1
        first_epoch = 0 if split == "validation" else 1
        summary[split] = {
            "final_error": errors[-1],
            "best_error": min(errors),
            "best_epoch": first_epoch + int(np.argmin(errors)),
        }
    return summary


def write_manifest(
    path: str | Path,
    *,
    config: Mapping[str, object],
    data_provenance: Mapping[str, object],
    network: Network,
    history: TrainingHistory,
) -> str:
    """Write ``manifest.json`` for a finished run and return its path."""

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    manifest = {
        "git_sha": git_sha(),
        "generated_at": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
        "config": config,
        "data": dict(data_provenance),
        "network": describe_network(network),
        "training": describe_history(history),
        "environment": {
            "python": platform.python_version(),
            "numpy": np.__version__,
            "machine": platform.machine(),
        },
    }
    path.write_text(json.dumps(manifest, indent=2))
    return str(path)


__all__ = ["describe_history", "describe_network", "git_sha", "write_manifest"]
