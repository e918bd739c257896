# src/ranchgrowth/cli/model_cli.py
from __future__ import annotations
import argparse
import logging
import sys
from pathlib import Path

from ranchgrowth.io.export import export_report_bundle
from ranchgrowth.io.observations import ObservationParseError, observations_for_species, read_growth_csv
from ranchgrowth.modeling.report import perform_comprehensive_modeling
from ranchgrowth.modeling.types import InsufficientDataError, ModelingConfig


def _positive_int(value: str) -> int:
    n = int(value)
    if n < 1:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {value}")
    return n


def add_logging_argument(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--loglevel",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level.",
    )


def add_model_subcommand(subparsers: argparse._SubParsersAction) -> None:
    """
    Fit all growth models for one species and write the report bundle:
      predictions.csv, report.json, report.html and a zip of them.
    """
    defaults = ModelingConfig()
    p = subparsers.add_parser(
        "model",
        help="Fit linear/quadratic/exponential/logistic growth models for one species.",
    )
    p.add_argument("input", help="CSV with columns species_name,time_point,length")
    p.add_argument("--species", required=True, help="Species to model")
    p.add_argument("--outdir", required=True, help="Output directory")

    p.add_argument("--horizon", type=_positive_int, default=defaults.horizon, help="Number of future time steps to forecast")
    p.add_argument(
        "--sort-by-time",
        action="store_true",
        default=False,
        help="Sort observations by time_point before modeling (default keeps file order).",
    )
    p.add_argument(
        "--drop-bad-rows",
        action="store_true",
        default=False,
        help="Drop malformed CSV rows with a warning instead of failing.",
    )
    p.add_argument("--logistic-rate", type=float, default=defaults.logistic_growth_rate)
    p.add_argument("--capacity-multiplier", type=float, default=defaults.carrying_capacity_multiplier)
    add_logging_argument(p)

    p.set_defaults(_fn=_run_model)


def _run_model(args: argparse.Namespace) -> int:
    logging.basicConfig(level=getattr(logging, args.loglevel), format="%(levelname)s: %(message)s")

    cfg = ModelingConfig(
        horizon=int(args.horizon),
        sort_by_time=bool(args.sort_by_time),
        logistic_growth_rate=float(args.logistic_rate),
        carrying_capacity_multiplier=float(args.capacity_multiplier),
    )

    try:
        df = read_growth_csv(args.input, on_error="drop" if args.drop_bad_rows else "raise")
        observations = observations_for_species(df, args.species)
        report = perform_comprehensive_modeling(observations, cfg)
    except (ObservationParseError, InsufficientDataError) as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        return 1

    res = export_report_bundle(
        report=report,
        observations=observations,
        species_name=args.species,
        out_dir=Path(args.outdir),
        cfg=cfg,
    )

    best = report.best_model
    print(f"[OK] {args.species}: n={len(observations)} best={best.type} r2={best.r_squared:.4f}")
    print(f"     {best.equation}")
    for rec in report.recommendations:
        print(f"     - {rec}")
    print(f"     -> {res['zip_path']}")
    return 0
