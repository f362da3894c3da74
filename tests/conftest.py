import matplotlib

matplotlib.use("Agg")

import numpy as np  # noqa: E402
import pandas as pd  # noqa: E402
import pytest  # noqa: E402

BOROUGHS = ["BRONX", "BROOKLYN", "MANHATTAN", "QUEENS", "STATEN ISLAND"]


@pytest.fixture
def raw_incidents() -> pd.DataFrame:
    """A handful of rows shaped like the NYC Open Data export, extra columns included."""
    return pd.DataFrame(
        {
            "INCIDENT_KEY": [101, 102, 103, 104, 105, 106],
            "OCCUR_DATE": ["01/15/2020", "01/15/2020", "03/02/2020", "07/04/2021", "07/04/2021", "12/31/2021"],
            "OCCUR_TIME": ["23:10:00", "01:05:00", "12:00:00", "22:30:00", "22:45:00", "18:00:00"],
            "BORO": ["BRONX", "BRONX", "BROOKLYN", "BROOKLYN", "QUEENS", "BRONX"],
            "PRECINCT": [40, 44, 75, 73, 113, 46],
            "PERP_AGE_GROUP": ["25-44", "1020", np.nan, "(null)", "UNKNOWN", "18-24"],
            "PERP_SEX": ["M", "F", np.nan, "(null)", "UNKNOWN", "M"],
            "PERP_RACE": ["BLACK", "(null)", np.nan, "WHITE HISPANIC", "UNKNOWN", "BLACK HISPANIC"],
            "VIC_AGE_GROUP": ["18-24", "1022", "25-44", "<18", "UNKNOWN", "45-64"],
            "VIC_SEX": ["M", "M", "F", "M", "M", "F"],
            "VIC_RACE": ["BLACK", "BLACK", "WHITE", "BLACK", "ASIAN / PACIFIC ISLANDER", "BLACK"],
            "Latitude": [40.85, 40.83, 40.67, 40.66, 40.70, 40.84],
        }
    )


@pytest.fixture
def raw_csv(tmp_path, raw_incidents):
    path = tmp_path / "shootings.csv"
    raw_incidents.to_csv(path, index=False)
    return path


@pytest.fixture
def report_incidents() -> pd.DataFrame:
    """Several years of incidents across every borough, enough to fit the trend model."""
    rng = np.random.default_rng(7)
    rows = []
    for year in range(2018, 2022):
        for borough in BOROUGHS:
            for _ in range(int(rng.integers(3, 9))):
                month, day = int(rng.integers(1, 13)), int(rng.integers(1, 29))
                rows.append(
                    {
                        "INCIDENT_KEY": len(rows),
                        "OCCUR_DATE": f"{month:02d}/{day:02d}/{year}",
                        "BORO": borough,
                        "PRECINCT": 40,
                        "PERP_AGE_GROUP": rng.choice(["25-44", "18-24", "(null)", ""]),
                        "PERP_SEX": rng.choice(["M", "F", "(null)"]),
                        "PERP_RACE": rng.choice(["BLACK", "WHITE HISPANIC", "(null)"]),
                        "VIC_AGE_GROUP": rng.choice(["25-44", "<18", "1022"]),
                        "VIC_SEX": "M",
                        "VIC_RACE": "BLACK",
                    }
                )
    return pd.DataFrame(rows)
