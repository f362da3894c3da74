"""
trend_model.py
Linear trend of yearly shooting counts with a per-borough offset.

    incidents ~ year + C(BORO)

Fitted with ordinary least squares through statsmodels. One borough is the
reference level and its offset is folded into the intercept.
"""

import logging
from dataclasses import dataclass, field

import numpy as np
import pandas as pd
import statsmodels.formula.api as smf

log = logging.getLogger(__name__)


class TrendFitError(ValueError):
    """The yearly aggregate cannot support the borough + year model."""


@dataclass
class TrendFit:
    formula: str
    reference_borough: str
    intercept: float
    year_coef: float
    borough_offsets: dict
    std_errors: pd.Series
    rsquared: float
    predictions: pd.DataFrame
    result: object = field(repr=False)

    def summary(self) -> str:
        return self.result.summary().as_text()


def _validate(yearly: pd.DataFrame):
    if yearly.empty:
        raise TrendFitError("Yearly aggregate is empty.")

    n_years = yearly["year"].nunique()
    if n_years < 2:
        raise TrendFitError(f"Need at least two distinct years to fit a trend, got {n_years}.")

    duplicated = yearly.duplicated(["BORO", "year"])
    if duplicated.any():
        pairs = sorted(set(zip(yearly.loc[duplicated, "BORO"], yearly.loc[duplicated, "year"])))
        raise TrendFitError(f"Yearly aggregate repeats (BORO, year) pairs: {pairs}")

    years_per_borough = yearly.groupby("BORO")["year"].nunique()
    singletons = sorted(years_per_borough[years_per_borough < 2].index)
    if singletons:
        raise TrendFitError(
            f"Boroughs with a single yearly observation make the model rank deficient: {singletons}"
        )


def _borough_offsets(params: pd.Series, boroughs, reference: str) -> dict:
    offsets = {reference: 0.0}
    for borough in boroughs:
        if borough == reference:
            continue
        # statsmodels names treatment dummies "<term>[T.<level>]"
        matches = [name for name in params.index if name.endswith(f"[T.{borough}]")]
        offsets[borough] = float(params[matches[0]])
    return offsets


def fit_yearly_trend(yearly: pd.DataFrame, reference: str | None = None) -> TrendFit:
    """
    Fit incidents ~ year + borough offset on a (BORO, year, incidents) table.

    Returns a TrendFit whose `predictions` hold one row per input pair with
    predicted = intercept + year_coef * year + borough offset.
    """
    _validate(yearly)

    data = yearly[["BORO", "year", "incidents"]].reset_index(drop=True)
    boroughs = sorted(data["BORO"].unique())
    reference = reference or boroughs[0]
    if reference not in boroughs:
        raise TrendFitError(f"Reference borough {reference!r} not present in {boroughs}")

    formula = f"incidents ~ year + C(BORO, Treatment(reference={reference!r}))"
    model = smf.ols(formula, data=data)

    # unit-norm columns; raw year values would dominate the default tolerance
    rank = np.linalg.matrix_rank(model.exog / np.linalg.norm(model.exog, axis=0))
    if rank < model.exog.shape[1]:
        raise TrendFitError(
            f"Design matrix is rank deficient (rank {rank} < {model.exog.shape[1]} columns)."
        )

    result = model.fit()
    log.info(f"Fitted {formula} on {int(result.nobs)} observations, R² = {result.rsquared:.3f}")

    intercept = float(result.params["Intercept"])
    year_coef = float(result.params["year"])
    offsets = _borough_offsets(result.params, boroughs, reference)

    predictions = data.copy()
    predictions["predicted"] = (
        intercept + year_coef * predictions["year"] + predictions["BORO"].map(offsets)
    )
    if predictions["predicted"].isna().any():
        raise TrendFitError("Model produced undefined predictions.")

    return TrendFit(
        formula=formula,
        reference_borough=reference,
        intercept=intercept,
        year_coef=year_coef,
        borough_offsets=offsets,
        std_errors=result.bse,
        rsquared=float(result.rsquared),
        predictions=predictions,
        result=result,
    )
