import pandas as pd
import pytest

from trend_model import TrendFitError, fit_yearly_trend

BOROUGHS = ["BRONX", "BROOKLYN", "MANHATTAN", "QUEENS", "STATEN ISLAND"]

YEARS = range(2006, 2023)


def _yearly(offsets=None, boroughs=BOROUGHS, years=YEARS) -> pd.DataFrame:
    """Noise-free counts: 100 - 2 * (year - 2006) plus an optional borough offset."""
    offsets = offsets or {}
    rows = [
        {"BORO": b, "year": y, "incidents": 100 - 2 * (y - 2006) + offsets.get(b, 0)}
        for b in boroughs
        for y in years
    ]
    return pd.DataFrame(rows)


def test_perfect_linear_trend_is_reproduced():
    yearly = _yearly()

    fit = fit_yearly_trend(yearly)

    assert fit.year_coef == pytest.approx(-2.0, abs=1e-6)
    assert fit.rsquared == pytest.approx(1.0)
    preds = fit.predictions
    assert len(preds) == len(yearly)
    assert preds["predicted"].tolist() == pytest.approx(preds["incidents"].tolist(), abs=1e-6)
    assert all(v == pytest.approx(0.0, abs=1e-6) for v in fit.borough_offsets.values())


def test_borough_offsets_are_recovered():
    offsets = {"BROOKLYN": 40, "MANHATTAN": -10, "QUEENS": 15, "STATEN ISLAND": -60}

    fit = fit_yearly_trend(_yearly(offsets))

    assert fit.reference_borough == "BRONX"
    assert fit.borough_offsets["BRONX"] == 0.0
    for borough, offset in offsets.items():
        assert fit.borough_offsets[borough] == pytest.approx(offset, abs=1e-6)


def test_predictions_follow_intercept_slope_and_offset():
    yearly = _yearly({"QUEENS": 7}).sample(frac=1.0, random_state=3)
    yearly.loc[yearly.index[0], "incidents"] += 9

    fit = fit_yearly_trend(yearly)

    for row in fit.predictions.itertuples():
        expected = fit.intercept + fit.year_coef * row.year + fit.borough_offsets[row.BORO]
        assert row.predicted == pytest.approx(expected)
    assert set(zip(fit.predictions["BORO"], fit.predictions["year"])) == set(
        zip(yearly["BORO"], yearly["year"])
    )


def test_explicit_reference_borough():
    fit = fit_yearly_trend(_yearly({"QUEENS": 25}), reference="QUEENS")

    assert fit.borough_offsets["QUEENS"] == 0.0
    assert fit.borough_offsets["BRONX"] == pytest.approx(-25.0, abs=1e-6)


def test_unknown_reference_borough():
    with pytest.raises(TrendFitError, match="ATLANTIS"):
        fit_yearly_trend(_yearly(), reference="ATLANTIS")


def test_single_observation_borough_is_rejected():
    yearly = pd.concat(
        [
            _yearly(boroughs=["BRONX", "BROOKLYN"]),
            pd.DataFrame([{"BORO": "STATEN ISLAND", "year": 2010, "incidents": 12}]),
        ],
        ignore_index=True,
    )

    with pytest.raises(TrendFitError, match="STATEN ISLAND"):
        fit_yearly_trend(yearly)


def test_single_year_is_rejected():
    with pytest.raises(TrendFitError, match="two distinct years"):
        fit_yearly_trend(_yearly(years=[2010]))


def test_empty_aggregate_is_rejected():
    with pytest.raises(TrendFitError):
        fit_yearly_trend(pd.DataFrame(columns=["BORO", "year", "incidents"]))


def test_borough_observed_in_one_year_twice_is_rejected():
    yearly = pd.concat(
        [
            _yearly(boroughs=["BRONX", "QUEENS"], years=range(2006, 2012)),
            pd.DataFrame(
                [
                    {"BORO": "STATEN ISLAND", "year": 2010, "incidents": 12},
                    {"BORO": "STATEN ISLAND", "year": 2010, "incidents": 14},
                ]
            ),
        ],
        ignore_index=True,
    )

    with pytest.raises(TrendFitError, match="STATEN ISLAND"):
        fit_yearly_trend(yearly)


def test_repeated_borough_year_pairs_are_rejected():
    yearly = pd.DataFrame(
        {
            "BORO": ["BRONX", "BRONX", "QUEENS", "QUEENS"],
            "year": [2010, 2010, 2011, 2011],
            "incidents": [5, 6, 7, 8],
        }
    )

    with pytest.raises(TrendFitError, match="repeats"):
        fit_yearly_trend(yearly)


def test_fit_error_is_a_value_error():
    assert issubclass(TrendFitError, ValueError)


def test_summary_reports_coefficients():
    yearly = _yearly({"BROOKLYN": 30})
    yearly["incidents"] = yearly["incidents"] + [(-1) ** i * 3 for i in range(len(yearly))]

    text = fit_yearly_trend(yearly).summary()

    assert "R-squared" in text
    assert "year" in text
