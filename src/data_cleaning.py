"""
data_cleaning.py
Cleaning pipeline for the NYPD Shooting Incident data.

Design principles:
- Every transformation is logged with the number of rows it touched
- Unknown/invalid codes are collapsed through declarative tables, not inline ifs
- Values nobody has classified yet are surfaced, never silently accepted
- Functions are pure (input → output): each step returns a new DataFrame
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path

import numpy as np
import pandas as pd

from data_collection import DATA_URL, load_data, select_columns

# ── Logging Setup ─────────────────────────────────────────────────────────────
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)s | %(message)s",
    datefmt="%H:%M:%S",
)
log = logging.getLogger(__name__)


# ── Constants ─────────────────────────────────────────────────────────────────

DATE_FORMAT = "%m/%d/%Y"


@dataclass(frozen=True)
class UnknownRule:
    column: str
    values: frozenset
    canonical: str


# Empty string also stands for cells pandas read in as NaN
UNKNOWN_VALUES = (
    UnknownRule("PERP_AGE_GROUP", frozenset({"1020", "224", "940", "1028", "(null)", ""}), "UNKNOWN"),
    UnknownRule("PERP_SEX",       frozenset({"UNKNOWN", "(null)", ""}),                   "U"),
    UnknownRule("PERP_RACE",      frozenset({"(null)", ""}),                              "UNKNOWN"),
    UnknownRule("VIC_AGE_GROUP",  frozenset({"1022", ""}),                                "UNKNOWN"),
)

AGE_GROUPS = {"<18", "18-24", "25-44", "45-64", "65+"}
SEXES = {"M", "F"}
RACES = {
    "BLACK",
    "WHITE HISPANIC",
    "BLACK HISPANIC",
    "WHITE",
    "ASIAN / PACIFIC ISLANDER",
    "AMERICAN INDIAN/ALASKAN NATIVE",
}

LEGITIMATE_CATEGORIES = {
    "PERP_AGE_GROUP": AGE_GROUPS,
    "PERP_SEX":       SEXES,
    "PERP_RACE":      RACES,
    "VIC_AGE_GROUP":  AGE_GROUPS,
}

# A canonical label listed as known-bad would make normalization non-idempotent
for _rule in UNKNOWN_VALUES:
    if _rule.canonical in _rule.values:
        raise ValueError(f"{_rule.column}: canonical label {_rule.canonical!r} is also a known-bad value")


# ── Audit Trail ───────────────────────────────────────────────────────────────

class AuditTrail:
    """Tracks every cleaning decision with the number of rows it affected."""

    def __init__(self, total_rows: int):
        self.total_rows = total_rows
        self.steps: list[dict] = []

    def record(self, step: str, description: str, changed: int, detail: str = ""):
        pct = changed / self.total_rows * 100 if self.total_rows else 0.0
        self.steps.append({
            "step": step,
            "description": description,
            "rows_affected": changed,
            "pct_affected": round(pct, 2),
            "detail": detail,
        })
        log.info(f"[{step}] {description} → {changed:,} rows affected ({pct:.1f}%) {detail}")

    def save(self, path):
        class _NumpyEncoder(json.JSONEncoder):
            """Convert numpy int/float types to native Python before serialising."""
            def default(self, obj):
                if isinstance(obj, np.integer):
                    return int(obj)
                if isinstance(obj, np.floating):
                    return float(obj)
                if isinstance(obj, np.ndarray):
                    return obj.tolist()
                return super().default(obj)

        Path(path).parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump({"total_rows": self.total_rows, "steps": self.steps}, f,
                      indent=2, cls=_NumpyEncoder)
        log.info(f"Audit trail saved → {path}")

    def summary(self):
        print("\n" + "=" * 65)
        print("CLEANING AUDIT SUMMARY")
        print("=" * 65)
        print(f"{'Step':<26} {'Affected':>10} {'%':>7}  Description")
        print("-" * 65)
        for s in self.steps:
            print(f"{s['step']:<26} {s['rows_affected']:>10,} {s['pct_affected']:>6.1f}%  {s['description']}")
        print("=" * 65)


# ── Step 1: Parse Occurrence Dates ───────────────────────────────────────────

def parse_dates(df: pd.DataFrame, audit: AuditTrail | None = None) -> pd.DataFrame:
    """Convert OCCUR_DATE to datetimes and drop rows whose date cannot be parsed."""
    df = df.copy()
    df["OCCUR_DATE"] = pd.to_datetime(df["OCCUR_DATE"], format=DATE_FORMAT, errors="coerce")

    unparseable = int(df["OCCUR_DATE"].isna().sum())
    if unparseable:
        log.warning(f"{unparseable:,} rows have an unparseable OCCUR_DATE and are dropped")
        df = df.dropna(subset=["OCCUR_DATE"]).reset_index(drop=True)
    if audit is not None:
        audit.record("Date parse: OCCUR_DATE", "Unparseable dates dropped", unparseable)
    return df


# ── Step 2: Collapse Unknown Codes ───────────────────────────────────────────

def normalize_column(values: pd.Series, rule: UnknownRule) -> pd.Series:
    as_text = values.fillna("").astype(str)
    return as_text.mask(as_text.isin(rule.values), rule.canonical)


def normalize_categories(df: pd.DataFrame, audit: AuditTrail | None = None,
                         rules=UNKNOWN_VALUES) -> pd.DataFrame:
    """
    Replace every known-bad value with the column's canonical unknown label.

    Values outside the known-bad set are left alone; `check_categories`
    reports the ones that are not legitimate either.
    """
    df = df.copy()
    for rule in rules:
        before = df[rule.column].fillna("").astype(str)
        after = normalize_column(before, rule)
        replaced = int((after != before).sum())
        df[rule.column] = after
        if audit is not None:
            audit.record(f"Unknowns: {rule.column}",
                         f"Known-bad codes → {rule.canonical!r}", replaced)
    return df


# ── Step 3: Enumerability Check ──────────────────────────────────────────────

def find_unexpected_categories(df: pd.DataFrame, rules=UNKNOWN_VALUES,
                               legitimate=LEGITIMATE_CATEGORIES) -> dict:
    """Values that are neither a legitimate label nor the canonical unknown, per column."""
    unexpected = {}
    for rule in rules:
        allowed = set(legitimate.get(rule.column, ())) | {rule.canonical}
        present = df[rule.column].fillna("").astype(str)
        extra = sorted(set(present.unique()) - allowed)
        if extra:
            unexpected[rule.column] = extra
    return unexpected


def check_categories(df: pd.DataFrame, audit: AuditTrail | None = None,
                     strict: bool = False, rules=UNKNOWN_VALUES,
                     legitimate=LEGITIMATE_CATEGORIES) -> dict:
    unexpected = find_unexpected_categories(df, rules, legitimate)
    for column, values in unexpected.items():
        rows = int(df[column].fillna("").astype(str).isin(values).sum())
        log.warning(f"{column}: {rows:,} rows hold unclassified values {values}")
        if audit is not None:
            audit.record(f"Unclassified: {column}", "Values outside known categories",
                         rows, f"({values})")

    if strict and unexpected:
        raise ValueError(f"Unclassified categorical values survived normalization: {unexpected}")
    return unexpected


# ── Pipeline Orchestrator ─────────────────────────────────────────────────────

def run_pipeline(source=DATA_URL, audit_path=None, strict: bool = False):
    """
    End-to-end cleaning pipeline.

    Parameters
    ----------
    source     : CSV URL or local path of the incident data
    audit_path : where to write the JSON audit log; skipped when None
    strict     : raise instead of warning on unclassified categorical values

    Returns
    -------
    (cleaned DataFrame, AuditTrail)
    """
    log.info("=" * 60)
    log.info("NYPD SHOOTING INCIDENTS — CLEANING PIPELINE START")
    log.info("=" * 60)

    raw = load_data(source)
    df = select_columns(raw)
    audit = AuditTrail(total_rows=len(df))

    # ── Ordered cleaning steps ────────────────────────────────────────────────
    try:
        df = parse_dates(df, audit)
        df = normalize_categories(df, audit)
        check_categories(df, audit, strict=strict)
    finally:
        if audit_path is not None:
            audit.save(audit_path)

    log.info(f"Final shape: {df.shape[0]:,} rows × {df.shape[1]} columns")
    audit.summary()

    return df, audit
