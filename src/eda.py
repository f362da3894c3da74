"""
eda.py
Exploratory report for the NYPD Shooting Incident data.

Design principles:
- Every plot answers one question about where and when shootings happen
- Unknown demographics are drawn as their own highlighted bar, not hidden
- The trend model is shown next to the observed counts it summarises
- All outputs land in one report directory with descriptive names
"""

from pathlib import Path

import matplotlib.pyplot as plt
import matplotlib.ticker as mticker
import pandas as pd
import seaborn as sns

from aggregation import count_by_borough_date, count_by_borough_year
from data_cleaning import UNKNOWN_VALUES, run_pipeline
from data_collection import DATA_URL
from trend_model import TrendFit, fit_yearly_trend

# ── Style ─────────────────────────────────────────────────────────────────────
ACCENT   = "#D62728"   # red — unknown / highlighted values
NEUTRAL  = "#4C72B0"   # blue — standard bars
BG_GRAY  = "#F7F7F7"
REPORT_DIR = Path("reports/nypd_shootings")

SMOOTHING_WINDOW_DAYS = 30

plt.rcParams.update({
    "figure.facecolor": BG_GRAY,
    "axes.facecolor":   BG_GRAY,
    "axes.spines.top":  False,
    "axes.spines.right": False,
    "axes.labelsize":   11,
    "axes.titlesize":   13,
    "axes.titleweight": "bold",
    "xtick.labelsize":  9,
    "ytick.labelsize":  9,
    "font.family":      "sans-serif",
})


# ── Helpers ───────────────────────────────────────────────────────────────────

def _save(fig: plt.Figure, name: str, output_dir: Path) -> Path:
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / f"{name}.png"
    fig.savefig(path, dpi=150, bbox_inches="tight")
    plt.close(fig)
    print(f"  ✓ Saved → {path}")
    return path


def _source_note(ax, note="Source: NYPD Shooting Incident Data / data.cityofnewyork.us"):
    ax.annotate(note, xy=(0, -0.12), xycoords="axes fraction",
                fontsize=7, color="gray")


def fmt_thousands(ax, axis="y"):
    fmt = mticker.FuncFormatter(lambda x, _: f"{x:,.0f}")
    if axis == "y":
        ax.yaxis.set_major_formatter(fmt)
    else:
        ax.xaxis.set_major_formatter(fmt)


# ── Plot 1: Incidents by Borough ──────────────────────────────────────────────

def plot_incidents_by_borough(df: pd.DataFrame, output_dir: Path = REPORT_DIR) -> Path:
    """Q: Which boroughs account for the most shootings?"""
    counts = df["BORO"].value_counts()

    fig, ax = plt.subplots(figsize=(9, 5))
    colors = [ACCENT if i == 0 else NEUTRAL for i in range(len(counts))]
    ax.bar(counts.index, counts.values, color=colors)
    ax.set_title("Shooting Incidents by Borough")
    ax.set_ylabel("Number of Incidents")
    fmt_thousands(ax)
    for i, v in enumerate(counts.values):
        ax.text(i, v, f"{v:,}", ha="center", va="bottom", fontsize=8)
    _source_note(ax)

    plt.tight_layout()
    return _save(fig, "01_incidents_by_borough", output_dir)


# ── Plot 2: Perpetrator & Victim Demographics ─────────────────────────────────

def plot_demographics(df: pd.DataFrame, output_dir: Path = REPORT_DIR) -> Path:
    """
    Q: What do we know about perpetrators and victims?
    The canonical unknown label is drawn in red so the gaps stay visible.
    """
    fig, axes = plt.subplots(2, 2, figsize=(14, 10))
    fig.suptitle("Perpetrator & Victim Demographics (red = unknown)",
                 fontsize=14, fontweight="bold")

    for ax, rule in zip(axes.flat, UNKNOWN_VALUES):
        counts = df[rule.column].value_counts()
        colors = [ACCENT if v == rule.canonical else NEUTRAL for v in counts.index]
        ax.barh(counts.index[::-1], counts.values[::-1], color=colors[::-1])
        ax.set_title(rule.column.replace("_", " ").title())
        ax.set_xlabel("Number of Incidents")
        fmt_thousands(ax, axis="x")

    _source_note(axes[1, 1])
    plt.tight_layout()
    return _save(fig, "02_demographics", output_dir)


# ── Plot 3: Smoothed Daily Trend ──────────────────────────────────────────────

def smooth_daily_counts(daily: pd.DataFrame, window: int = SMOOTHING_WINDOW_DAYS) -> pd.DataFrame:
    """Rolling mean of daily counts per borough, with incident-free days filled as 0."""
    wide = (
        daily.pivot_table(index="OCCUR_DATE", columns="BORO", values="incidents",
                          aggfunc="sum", fill_value=0)
        .asfreq("D", fill_value=0)
    )
    return wide.rolling(window, min_periods=1).mean()


def plot_daily_trend(daily: pd.DataFrame, output_dir: Path = REPORT_DIR,
                     window: int = SMOOTHING_WINDOW_DAYS) -> Path:
    """Q: How has the daily shooting rate moved over time in each borough?"""
    smoothed = smooth_daily_counts(daily, window)
    palette = sns.color_palette("tab10", len(smoothed.columns))

    fig, ax = plt.subplots(figsize=(14, 6))
    for color, borough in zip(palette, smoothed.columns):
        ax.plot(smoothed.index, smoothed[borough], label=borough, color=color, linewidth=1.5)
    ax.set_title(f"Daily Shooting Incidents ({window}-day rolling mean)")
    ax.set_ylabel("Incidents per Day")
    ax.legend(title="Borough", fontsize=8)
    _source_note(ax)

    plt.tight_layout()
    return _save(fig, "03_daily_trend", output_dir)


# ── Plot 4: Observed vs Fitted Yearly Counts ──────────────────────────────────

def plot_yearly_fit(fit: TrendFit, output_dir: Path = REPORT_DIR) -> Path:
    """Q: How well does a shared linear trend plus borough offset describe each borough?"""
    predictions = fit.predictions.sort_values(["BORO", "year"])
    boroughs = sorted(predictions["BORO"].unique())
    palette = dict(zip(boroughs, sns.color_palette("tab10", len(boroughs))))

    fig, ax = plt.subplots(figsize=(12, 6))
    for borough, grp in predictions.groupby("BORO"):
        ax.scatter(grp["year"], grp["incidents"], color=palette[borough], label=f"{borough} (observed)")
        ax.plot(grp["year"], grp["predicted"], color=palette[borough], linestyle="--")
    ax.set_title(f"Yearly Incidents: Observed vs Fitted (R² = {fit.rsquared:.2f})")
    ax.set_xlabel("Year")
    ax.set_ylabel("Number of Incidents")
    ax.legend(fontsize=8, bbox_to_anchor=(1.01, 1), loc="upper left")
    fmt_thousands(ax)
    _source_note(ax)

    plt.tight_layout()
    return _save(fig, "04_yearly_fit", output_dir)


def write_model_summary(fit: TrendFit, output_dir: Path = REPORT_DIR) -> Path:
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / "model_summary.txt"
    lines = [
        fit.summary(),
        "",
        f"Reference borough: {fit.reference_borough}",
        f"Year coefficient:  {fit.year_coef:+.3f} incidents/year",
    ]
    for borough, offset in sorted(fit.borough_offsets.items()):
        lines.append(f"  {borough:<15} offset {offset:+.2f}")
    path.write_text("\n".join(lines) + "\n")
    print(f"  ✓ Saved → {path}")
    return path


# ── Report Orchestrator ───────────────────────────────────────────────────────

def run_report(source=DATA_URL, output_dir: Path = REPORT_DIR, strict: bool = False) -> TrendFit:
    """
    Clean, aggregate, fit and render the full report in one call.
    """
    output_dir = Path(output_dir)
    df, _ = run_pipeline(source, audit_path=output_dir / "cleaning_audit.json", strict=strict)

    daily = count_by_borough_date(df)
    yearly = count_by_borough_year(df)
    fit = fit_yearly_trend(yearly)

    print("\n" + "=" * 60)
    print("NYPD SHOOTING INCIDENTS | REPORT")
    print("=" * 60)
    plot_incidents_by_borough(df, output_dir)
    plot_demographics(df, output_dir)
    plot_daily_trend(daily, output_dir)
    plot_yearly_fit(fit, output_dir)
    write_model_summary(fit, output_dir)

    print(f"  Year coefficient: {fit.year_coef:+.2f} incidents/year (R² = {fit.rsquared:.3f})")
    print("\n" + "=" * 60)
    print(f"✓ REPORT COMPLETE — {len(list(output_dir.glob('*.png')))} figures saved to {output_dir}/")
    print("=" * 60)
    return fit


# ── Entry Point ───────────────────────────────────────────────────────────────

if __name__ == "__main__":
    run_report()
