from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from .config import PotabilityConfig, config_from_env
from .models import SAMPLE_FIELDS, DatasetUpload, InputMode, ManualEntry, ParseError, ScoreResult
from .publisher import build_payload, publish_result
from .report import write_excel_report
from .runner import score_input
from .scoring import available_scorers, get_scorer
from .tabular_io import default_dataset, discover_inputs, load_file, write_csv_export


EXIT_OK = 0
EXIT_INVALID = 2


def setup_logging(verbose: bool) -> None:
    level = logging.INFO if verbose else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Classify water potability from nine physicochemical parameters.")

    fields = parser.add_argument_group("manual entry")
    for name in SAMPLE_FIELDS:
        fields.add_argument(f"--{name.replace('_', '-')}", dest=name, type=str, default=None)

    source = parser.add_mutually_exclusive_group()
    source.add_argument("--input", type=str, help="CSV or JSON dataset file")
    source.add_argument("--input-dir", type=str, help="Folder with CSV/JSON files (each one is classified)")
    source.add_argument("--demo", action="store_true", help="Use the built-in two-row demo dataset")

    parser.add_argument(
        "--export-csv",
        nargs="?",
        const="",
        default=None,
        metavar="LABEL",
        help="Export the dataset as CSV (<label>_<timestamp>.csv)",
    )
    parser.add_argument("--report", type=str, default=None, help="Write an Excel report to this path")
    parser.add_argument("--output-dir", type=str, default=None, help="Folder for CSV exports (default: ./outputs)")
    parser.add_argument("--scorer", type=str, default=None, help=f"Scorer name (available: {available_scorers()})")
    parser.add_argument("--csv-parser", choices=["simple", "strict"], default=None, help="CSV reader to use")
    parser.add_argument("--json", action="store_true", help="Print the result payload as JSON")
    parser.add_argument("--verbose", action="store_true", help="Enable INFO logs")
    return parser


def _build_config(args: argparse.Namespace) -> PotabilityConfig:
    cfg = config_from_env()
    if args.csv_parser:
        cfg.csv_parser = args.csv_parser
    if args.scorer:
        cfg.scorer_name = args.scorer
    if args.output_dir:
        cfg.export_dir = Path(args.output_dir)
    return cfg


def _print_payload(payload_dict: dict, as_json: bool) -> None:
    if as_json:
        print(json.dumps(payload_dict, ensure_ascii=False, indent=2))
        return
    print(f"Prediction: {payload_dict['prediction']} (score {payload_dict['score']:g})")
    if payload_dict.get("tableData") is not None:
        print(f"Rows in dataset: {len(payload_dict['tableData'])} (classified from row 1)")


def _run_one(mode: InputMode, args: argparse.Namespace, cfg: PotabilityConfig, label: str) -> int:
    outcome = score_input(mode, cfg, get_scorer(cfg=cfg))
    if not isinstance(outcome, tuple):
        print(f"[{label}] Error: {outcome.message}")
        return EXIT_INVALID

    _sample, result = outcome
    payload = build_payload(mode, result)
    publish_result(payload, lambda d: _print_payload(d, args.json))

    if args.report:
        _write_report(args.report, label, payload, result, cfg)

    if args.export_csv is not None and isinstance(mode, DatasetUpload):
        out = write_csv_export(mode.records, args.export_csv or None, cfg=cfg)
        print(f"Dataset exported to: {out.resolve()}")
    return EXIT_OK


def _write_report(report_arg: str, label: str, payload, result: ScoreResult, cfg: PotabilityConfig) -> None:
    report_path = Path(report_arg)
    if label != "manual" and report_path.suffix.lower() != ".xlsx":
        # --input-dir: one report per file inside the given folder
        report_path = report_path / f"{Path(label).stem}_report.xlsx"
    write_excel_report(report_path, payload, result, cfg)
    print(f"Report saved to: {report_path.resolve()}")


def _modes_from_args(args: argparse.Namespace, cfg: PotabilityConfig) -> List[tuple]:
    """-> list of (label, InputMode | ParseError)"""
    if args.demo:
        return [("default", DatasetUpload(default_dataset(), "default"))]

    if args.input:
        parsed = load_file(args.input, cfg)
        return [(args.input, parsed if isinstance(parsed, ParseError) else DatasetUpload(parsed, args.input))]

    if args.input_dir:
        out = []
        for path in discover_inputs(args.input_dir):
            parsed = load_file(path, cfg)
            out.append((path.name, parsed if isinstance(parsed, ParseError) else DatasetUpload(parsed, path.name)))
        return out

    raw: Dict[str, Optional[str]] = {name: getattr(args, name) for name in SAMPLE_FIELDS}
    return [("manual", ManualEntry({k: ("" if v is None else v) for k, v in raw.items()}))]


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose)
    cfg = _build_config(args)

    exit_code = EXIT_OK
    for label, mode in _modes_from_args(args, cfg):
        if isinstance(mode, ParseError):
            print(f"[{label}] Error: {mode.message}")
            exit_code = EXIT_INVALID
            continue
        exit_code = max(exit_code, _run_one(mode, args, cfg, label))

    return exit_code


if __name__ == "__main__":
    raise SystemExit(main())
