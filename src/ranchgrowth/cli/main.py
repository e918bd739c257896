# src/ranchgrowth/cli/main.py
import argparse

from ranchgrowth.cli.model_cli import add_model_subcommand
from ranchgrowth.cli.species_cli import add_species_subcommand


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(prog="ranchgrowth", description="Fish growth-curve modeling and forecasting")
    sub = parser.add_subparsers(dest="command", required=True)

    add_model_subcommand(sub)
    add_species_subcommand(sub)

    args = parser.parse_args(argv)
    return args._fn(args)  # each subcommand sets a handler


if __name__ == "__main__":
    raise SystemExit(main())
