"""
aggregation.py
Incident counts per borough and day, and per borough and year.
"""

import pandas as pd


def _require_keys(df: pd.DataFrame, keys: list[str]):
    missing = df[keys].isna().any(axis=1)
    if missing.any():
        raise ValueError(
            f"{int(missing.sum()):,} rows have a missing grouping key in {keys}; "
            "clean the data before aggregating."
        )


def _count(df: pd.DataFrame, keys: list[str]) -> pd.DataFrame:
    _require_keys(df, keys)
    return (
        df.groupby(keys, sort=True)
        .size()
        .rename("incidents")
        .reset_index()
    )


def count_by_borough_date(df: pd.DataFrame) -> pd.DataFrame:
    """One row per (BORO, OCCUR_DATE) with the number of incidents that day."""
    return _count(df, ["BORO", "OCCUR_DATE"])


def count_by_borough_year(df: pd.DataFrame) -> pd.DataFrame:
    """One row per (BORO, year) with the number of incidents that year."""
    _require_keys(df, ["OCCUR_DATE"])
    dated = df.assign(year=pd.to_datetime(df["OCCUR_DATE"]).dt.year)
    return _count(dated, ["BORO", "year"])
