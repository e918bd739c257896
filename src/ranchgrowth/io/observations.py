# src/ranchgrowth/io/observations.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import IO, List, Literal, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from ranchgrowth.modeling.types import GrowthObservation

OnError = Literal["raise", "drop"]

# column names of every standardized frame
SPECIES_COL = "species_name"
TIME_COL = "time_point"
LENGTH_COL = "length"


class ObservationParseError(ValueError):
    """Raised when uploaded rows cannot be turned into observations."""

    def __init__(self, message: str, bad_rows: Sequence[int] = ()):
        super().__init__(message)
        self.bad_rows = list(bad_rows)


@dataclass(frozen=True)
class ObservationColumns:
    # accepted incoming headers, matched exactly first, then case-insensitively
    species_aliases: Tuple[str, ...] = ("species_name", "species", "Species", "species name")
    time_aliases: Tuple[str, ...] = ("time_point", "time", "Time", "day", "days", "t")
    length_aliases: Tuple[str, ...] = ("length", "Length", "length_cm", "body_length", "size")


def _first_existing_col(df: pd.DataFrame, candidates: Sequence[str]) -> Optional[str]:
    cols = list(df.columns)
    for c in candidates:
        if c in cols:
            return c
    lower_map = {str(c).strip().lower(): c for c in cols}
    for c in candidates:
        lc = str(c).lower()
        if lc in lower_map:
            return lower_map[lc]
    return None


def _to_float(s: pd.Series) -> pd.Series:
    if not pd.api.types.is_numeric_dtype(s):
        s = s.astype(object).map(lambda v: v.strip() if isinstance(v, str) else v)
    return pd.to_numeric(s, errors="coerce").astype(float)


def standardize_growth_frame(
    df: pd.DataFrame,
    on_error: OnError = "raise",
    cols: ObservationColumns = ObservationColumns(),
) -> pd.DataFrame:
    """
    Validate raw rows and return a frame with exactly:
      species_name (str), time_point (float), length (float)

    Row order is preserved. Rows with an empty species or a non-numeric /
    non-finite time or length are malformed: they raise ObservationParseError
    (on_error="raise") or are dropped with a warning (on_error="drop").
    """
    src = {
        SPECIES_COL: _first_existing_col(df, cols.species_aliases),
        TIME_COL: _first_existing_col(df, cols.time_aliases),
        LENGTH_COL: _first_existing_col(df, cols.length_aliases),
    }
    missing = [k for k, v in src.items() if v is None]
    if missing:
        raise ObservationParseError(
            f"Missing required columns {missing}. Got: {[str(c) for c in df.columns]}"
        )

    out = pd.DataFrame({
        SPECIES_COL: df[src[SPECIES_COL]].astype("string").str.strip(),
        TIME_COL: _to_float(df[src[TIME_COL]]),
        LENGTH_COL: _to_float(df[src[LENGTH_COL]]),
    })

    ok = (
        out[SPECIES_COL].notna()
        & (out[SPECIES_COL].fillna("") != "")
        & np.isfinite(out[TIME_COL])
        & np.isfinite(out[LENGTH_COL])
    ).fillna(False).astype(bool).to_numpy()
    bad_rows = [int(i) for i in out.index[~ok]]
    if bad_rows:
        if on_error == "raise":
            preview = ", ".join(str(i) for i in bad_rows[:10])
            raise ObservationParseError(
                f"{len(bad_rows)} malformed row(s) (species_name, time_point, length): {preview}",
                bad_rows=bad_rows,
            )
        logging.warning(f"Dropping {len(bad_rows)} malformed row(s): {bad_rows[:10]}")

    out = out[ok].copy()
    out[SPECIES_COL] = out[SPECIES_COL].astype(str)
    return out.reset_index(drop=True)


def read_growth_csv(
    path_or_buffer: Union[str, Path, IO],
    on_error: OnError = "raise",
    cols: ObservationColumns = ObservationColumns(),
) -> pd.DataFrame:
    """Read an uploaded species_name,time_point,length CSV (header row required)."""
    df = pd.read_csv(path_or_buffer, dtype=str, skipinitialspace=True, encoding="utf-8-sig")
    df.columns = [str(c).strip() for c in df.columns]
    # blank trailing lines are not data
    df = df.dropna(how="all")
    out = standardize_growth_frame(df, on_error=on_error, cols=cols)
    logging.info(f"Loaded {len(out)} observation rows for {out[SPECIES_COL].nunique()} species")
    return out


def list_species(df: pd.DataFrame) -> pd.DataFrame:
    """Species with their observation counts, in order of first appearance."""
    counts = df.groupby(SPECIES_COL, sort=False).size()
    return counts.rename("n_points").reset_index()


def observations_for_species(df: pd.DataFrame, species_name: str) -> List[GrowthObservation]:
    """Observations of one species in file order (not sorted by time)."""
    sub = df[df[SPECIES_COL] == species_name]
    return [
        GrowthObservation(time_point=float(t), length=float(y), species_name=str(s))
        for s, t, y in zip(sub[SPECIES_COL], sub[TIME_COL], sub[LENGTH_COL])
    ]
