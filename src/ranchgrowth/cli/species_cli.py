# src/ranchgrowth/cli/species_cli.py
from __future__ import annotations
import argparse
import logging
import sys

import pandas as pd

from ranchgrowth.cli.model_cli import add_logging_argument
from ranchgrowth.io.observations import (
    ObservationParseError, list_species, observations_for_species, read_growth_csv,
)
from ranchgrowth.modeling.report import assess_data_quality


def add_species_subcommand(subparsers: argparse._SubParsersAction) -> None:
    p = subparsers.add_parser(
        "species",
        help="List species in a growth CSV with per-species data quality.",
    )
    p.add_argument("input", help="CSV with columns species_name,time_point,length")
    p.add_argument("--out", default=None, help="Optional CSV path for the summary table")
    add_logging_argument(p)
    p.set_defaults(_fn=_run_species)


def summarize_species(df: pd.DataFrame) -> pd.DataFrame:
    rows = []
    for species in list_species(df)["species_name"]:
        q = assess_data_quality(observations_for_species(df, species))
        rows.append({
            "species_name": species,
            "n_points": q.sample_size,
            "time_span": q.time_span,
            "growth_rate": q.growth_rate,
            "variability": q.variability,
        })
    return pd.DataFrame(rows, columns=["species_name", "n_points", "time_span", "growth_rate", "variability"])


def _run_species(args: argparse.Namespace) -> int:
    logging.basicConfig(level=getattr(logging, args.loglevel), format="%(levelname)s: %(message)s")

    try:
        df = read_growth_csv(args.input)
    except ObservationParseError as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        return 1

    summary = summarize_species(df)
    if args.out:
        summary.to_csv(args.out, index=False)
        logging.info(f"Wrote species summary: {args.out}  rows={len(summary)}")
    print(summary.to_string(index=False))
    return 0
