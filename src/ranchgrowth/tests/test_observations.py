from __future__ import annotations

import io

import pandas as pd
import pytest

from ranchgrowth.io.observations import (
    ObservationColumns,
    ObservationParseError,
    list_species,
    observations_for_species,
    read_growth_csv,
    standardize_growth_frame,
)

CSV = """species_name,time_point,length
tilapia,0,5.2
tilapia,10,7.9
grouper,0,12.0
tilapia,20,10.4
grouper,15,13.1
"""


def test_read_and_filter_species_keeps_file_order():
    df = read_growth_csv(io.StringIO(CSV))
    assert list(df.columns) == ["species_name", "time_point", "length"]
    obs = observations_for_species(df, "tilapia")
    assert [(o.time_point, o.length) for o in obs] == [(0.0, 5.2), (10.0, 7.9), (20.0, 10.4)]
    assert all(o.species_name == "tilapia" for o in obs)


def test_list_species_counts_in_first_seen_order():
    df = read_growth_csv(io.StringIO(CSV))
    species = list_species(df)
    assert species["species_name"].tolist() == ["tilapia", "grouper"]
    assert species["n_points"].tolist() == [3, 2]


def test_malformed_rows_raise_with_row_numbers():
    bad = CSV + "tilapia,thirty,12.0\n,40,13.0\n"
    with pytest.raises(ObservationParseError) as exc:
        read_growth_csv(io.StringIO(bad))
    assert exc.value.bad_rows == [5, 6]


def test_malformed_rows_can_be_dropped():
    bad = CSV + "tilapia,thirty,12.0\n"
    df = read_growth_csv(io.StringIO(bad), on_error="drop")
    assert len(df) == 5


def test_non_finite_values_are_malformed():
    raw = pd.DataFrame({"species_name": ["a", "a"], "time_point": [0.0, float("inf")], "length": [1.0, 2.0]})
    with pytest.raises(ObservationParseError):
        standardize_growth_frame(raw)


def test_missing_column_raises():
    with pytest.raises(ObservationParseError):
        read_growth_csv(io.StringIO("species_name,time_point\ntilapia,0\n"))


def test_column_aliases_and_whitespace():
    df = read_growth_csv(io.StringIO("Species, Time, Length\n tilapia , 0 , 5.0\ntilapia,1,5.5\n"))
    obs = observations_for_species(df, "tilapia")
    assert [o.length for o in obs] == [5.0, 5.5]


def test_utf8_bom_header(tmp_path):
    p = tmp_path / "growth.csv"
    p.write_bytes(("\ufeff" + CSV).encode("utf-8"))
    df = read_growth_csv(p)
    assert df["species_name"].iloc[0] == "tilapia"


def test_custom_aliases_still_yield_standard_columns():
    cols = ObservationColumns(species_aliases=("fish",), time_aliases=("dag",), length_aliases=("cm",))
    text = "fish,dag,cm\ntilapia,0,5.0\ngrouper,0,12.0\ntilapia,7,6.1\n"
    df = read_growth_csv(io.StringIO(text), cols=cols)
    assert list(df.columns) == ["species_name", "time_point", "length"]
    assert list_species(df)["n_points"].tolist() == [2, 1]
    obs = observations_for_species(df, "tilapia")
    assert [(o.time_point, o.length) for o in obs] == [(0.0, 5.0), (7.0, 6.1)]
    with pytest.raises(ObservationParseError):
        read_growth_csv(io.StringIO(CSV), cols=cols)
