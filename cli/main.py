"""Command line entry point for DigitNet training runs."""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Callable, Iterable, Mapping

from digitnet.core.errors import FormatError
from digitnet.data.readers import read_item
from digitnet.training import pipelines

PROMPT_NEXT_EPOCH = "Do you want to try next epoch? [Y/N] "
PROMPT_CLASSIFY = "Enter file name to classify: "

InputFn = Callable[[str], str]


def _format_result(result) -> str:
    payload = {
        "epochs": result.epochs,
        "final_error": result.final_error,
        "metrics": result.metrics_path,
        "manifest": result.manifest_path,
        "summary": result.summary_path,
    }
    return json.dumps(payload, sort_keys=True)


def build_parser() -> argparse.ArgumentParser:
    preset_names = sorted(pipelines.presets().keys())
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--preset",
        choices=preset_names,
        default="optdigits",
        help="Preset configuration to execute",
    )
    parser.add_argument("--train", type=Path, help="Training set file")
    parser.add_argument("--validation", type=Path, help="Validation set file")
    parser.add_argument("--hidden", type=int, help="Number of hidden neurons")
    parser.add_argument("--epsilon", type=float, help="Learning rate")
    parser.add_argument("--epochs", type=int, help="Number of training epochs")
    parser.add_argument("--seed", type=int, help="Seed for weight initialisation")
    parser.add_argument(
        "--patience",
        type=int,
        help="Stop after this many epochs without validation improvement",
    )
    parser.add_argument(
        "--interactive",
        action="store_true",
        help="Ask before every epoch and prompt for files to classify",
    )
    parser.add_argument(
        "--classify",
        type=Path,
        nargs="*",
        default=[],
        help="Files holding one vector each to classify after training",
    )
    parser.add_argument("--config", type=Path, help="Optional JSON/YAML config override")
    parser.add_argument("--run-dir", help="Directory for metrics and manifest")
    parser.add_argument(
        "--enable-plots", action="store_true", help="Write an error curve plot"
    )
    parser.add_argument(
        "--list-presets", action="store_true", help="List available presets and exit"
    )
    parser.add_argument(
        "--dump-config", type=Path, help="Dump the resolved config to a JSON file"
    )
    return parser


def parse_args(
    argv: Iterable[str] | None = None, parser: argparse.ArgumentParser | None = None
) -> argparse.Namespace:
    parser = parser or build_parser()
    args = parser.parse_args(argv)

    for name in ("train", "validation"):
        path = getattr(args, name)
        if path is not None and not path.exists():
            parser.error(f"{name} file does not exist: {path}")
    for path in args.classify:
        if not path.exists():
            parser.error(f"file to classify does not exist: {path}")
    if args.epochs is not None and args.epochs < 0:
        parser.error("--epochs must be non-negative")
    return args


def _load_override(path: Path) -> dict:
    text = path.read_text()
    if path.suffix in {".yml", ".yaml"}:
        try:
            import yaml  # type: ignore
        except Exception as exc:  # pragma: no cover - optional dependency
            raise RuntimeError("PyYAML is required to load YAML configs") from exc
        return yaml.safe_load(text)
    return json.loads(text)


def _merge(base: dict, override: dict) -> dict:
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            base[key] = _merge(dict(base[key]), value)
        else:
            base[key] = value
    return base


def resolve_config(args: argparse.Namespace) -> dict:
    config = json.loads(json.dumps(pipelines.load_preset(args.preset)))

    if args.config:
        override = _load_override(args.config)
        if {"data", "model", "train"} <= set(override.keys()):
            config = json.loads(json.dumps(override))
        else:
            config = _merge(config, override)

    data_cfg = config.setdefault("data", {})
    model_cfg = config.setdefault("model", {})
    train_cfg = config.setdefault("train", {})
    if args.train is not None:
        data_cfg["train_path"] = str(args.train)
    if args.validation is not None:
        data_cfg["validation_path"] = str(args.validation)
    if args.hidden is not None:
        model_cfg["hidden"] = int(args.hidden)
    if args.epsilon is not None:
        model_cfg["epsilon"] = float(args.epsilon)
    if args.epochs is not None:
        train_cfg["epochs"] = int(args.epochs)
    if args.seed is not None:
        train_cfg["seed"] = int(args.seed)
    if args.patience is not None:
        train_cfg["early_stopping_patience"] = int(args.patience)
    if args.run_dir:
        train_cfg["run_dir"] = args.run_dir
    if args.enable_plots:
        train_cfg["enable_plots"] = True
    if args.interactive:
        train_cfg["epochs"] = None
    return config


def _ask_next_epoch(input_fn: InputFn) -> Callable[[int, Mapping[str, float]], bool]:
    def should_continue(epoch: int, metrics: Mapping[str, float]) -> bool:
        try:
            answer = input_fn(PROMPT_NEXT_EPOCH)
        except EOFError:
            return False
        return answer.strip().lower().startswith("y")

    return should_continue


def _classify_file(network, path: Path, input_size: int) -> int | None:
    try:
        item = read_item(path, input_size)
    except FormatError as exc:
        print(f"Cannot classify {path}: {exc}")
        return None
    digit = network.classify(item)
    print(f"This seems like {digit}")
    return digit


def _classify_loop(network, input_size: int, input_fn: InputFn) -> None:
    while True:
        try:
            answer = input_fn(PROMPT_CLASSIFY).strip()
        except EOFError:
            break
        if not answer:
            break
        path = Path(answer)
        if not path.exists():
            print(f"No such file: {path}")
            continue
        _classify_file(network, path, input_size)


def main(argv: Iterable[str] | None = None, *, input_fn: InputFn = input) -> None:
    parser = build_parser()
    args = parse_args(argv, parser)

    if args.list_presets:
        for name in sorted(pipelines.presets().keys()):
            print(name)
        raise SystemExit(0)

    config = resolve_config(args)

    if args.dump_config:
        args.dump_config.parent.mkdir(parents=True, exist_ok=True)
        args.dump_config.write_text(json.dumps(config, indent=2))
    for key, flag in (("train_path", "--train"), ("validation_path", "--validation")):
        value = config["data"].get(key)
        if not value:
            parser.error(
                f"preset {args.preset!r} has no data.{key}; pass {flag} or --config"
            )
        if not pipelines.resolve_path(value, field=key).exists():
            parser.error(f"data.{key} does not exist: {value}")

    try:
        network, result = pipelines.train_pipeline(
            config,
            should_continue=_ask_next_epoch(input_fn) if args.interactive else None,
        )
    except (FormatError, ValueError) as exc:
        raise SystemExit(f"error: {exc}") from exc
    print(_format_result(result))

    input_size = int(config["data"]["input_size"])
    for path in args.classify:
        _classify_file(network, path, input_size)
    if args.interactive:
        _classify_loop(network, input_size, input_fn)


if __name__ == "__main__":
    main()
