"""
data_collection.py
Loads the NYPD Shooting Incident dataset and projects it to the columns used
by the analysis.
"""

import logging
from pathlib import Path

import pandas as pd

log = logging.getLogger(__name__)


# ── Constants ─────────────────────────────────────────────────────────────────

# NYPD Shooting Incident Data (Historic), NYC Open Data dataset 833y-fsy8
DATA_URL = "https://data.cityofnewyork.us/api/views/833y-fsy8/rows.csv?accessType=DOWNLOAD"

SELECTED_COLUMNS = [
    "OCCUR_DATE",
    "BORO",
    "PRECINCT",
    "PERP_AGE_GROUP",
    "PERP_SEX",
    "PERP_RACE",
    "VIC_AGE_GROUP",
    "VIC_SEX",
    "VIC_RACE",
]


def _is_url(source) -> bool:
    return isinstance(source, str) and source.split("://", 1)[0].lower() in ("http", "https")


# ── Load ──────────────────────────────────────────────────────────────────────

def load_data(source=DATA_URL) -> pd.DataFrame:
    """
    Read the incident CSV from a URL or a local path.

    Network and parse errors are not caught: a failed load ends the run.
    """
    if not _is_url(source):
        path = Path(source)
        if not path.exists():
            raise FileNotFoundError(f"Data file not found: {source}")

    log.info(f"Loading: {source}")
    df = pd.read_csv(source, low_memory=False)
    log.info(f"Loaded {len(df):,} rows × {len(df.columns)} columns")
    return df


# ── Select ────────────────────────────────────────────────────────────────────

def select_columns(df: pd.DataFrame, columns=SELECTED_COLUMNS) -> pd.DataFrame:
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise ValueError(f"Dataset is missing expected columns: {missing}")

    selected = df.loc[:, list(columns)].copy()
    log.info(f"Selected {len(selected.columns)} of {len(df.columns)} columns")
    return selected
