from pathlib import Path
from typing import Dict, Iterable, Mapping

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
from loguru import logger

from suburban_realignment.analysis.config import SCATTER_SPECS, PartyColors, ScatterSpec

COLORS = PartyColors()


def winner_colors(margin: pd.Series, colors: PartyColors = COLORS) -> np.ndarray:
    # ties are shown as Democratic
    return np.where(margin >= 0, colors.dem, colors.gop)


def _fit_line(x: pd.Series, y: pd.Series):
    ok = x.notna() & y.notna()
    if ok.sum() < 2 or x[ok].nunique() < 2:
        return None
    slope, intercept = np.polyfit(x[ok].astype(float), y[ok].astype(float), 1)
    xs = np.linspace(x[ok].min(), x[ok].max(), 100)
    return xs, slope * xs + intercept


def margin_scatter(df: pd.DataFrame, spec: ScatterSpec):
    x = pd.to_numeric(df[spec.x], errors="coerce")
    y = pd.to_numeric(df[spec.y], errors="coerce")
    ok = x.notna() & y.notna()

    fig, ax = plt.subplots(figsize=(8, 6))
    ax.scatter(x[ok], y[ok], c=winner_colors(y[ok]), s=18, alpha=0.8)
    line = _fit_line(x, y)
    if line is not None:
        ax.plot(*line, color="black", linewidth=1.5)

    ax.set_xlabel(spec.x_label)
    ax.set_ylabel(spec.y_label)
    ax.set_title(spec.title)
    if spec.y_limits:
        ax.set_ylim(*spec.y_limits)
    if spec.x_limits:
        ax.set_xlim(*spec.x_limits)
    ax.scatter([], [], c=COLORS.dem, label="Democratic")
    ax.scatter([], [], c=COLORS.gop, label="Republican")
    ax.legend(title=f"{spec.y_label.split()[0]} party win")
    fig.tight_layout()
    return fig


def typology_bar(df: pd.DataFrame, typology: str, margin: str, title: str, x_label: str = "County Type"):
    means = df.groupby(typology)[margin].mean().dropna()

    fig, ax = plt.subplots(figsize=(9, 6))
    ax.bar(means.index.astype(str), means.values, color="steelblue", edgecolor="black")
    ax.set_xlabel(x_label)
    ax.set_ylabel("Mean Margin")
    ax.set_title(title)
    ax.tick_params(axis="x", labelrotation=45)
    fig.tight_layout()
    return fig


def typology_scatter(df: pd.DataFrame, typology: str, margin: str, title: str, y_label: str):
    rows = df[[typology, margin]].dropna()
    order = sorted(rows[typology].astype(str).unique())
    pos = rows[typology].astype(str).map({t: i for i, t in enumerate(order)})

    fig, ax = plt.subplots(figsize=(9, 6))
    ax.scatter(pos, rows[margin], c=np.where(rows[margin] < 0, COLORS.gop, COLORS.dem), s=24, alpha=0.7)
    line = _fit_line(pos, rows[margin])
    if line is not None:
        ax.plot(*line, color="black", linewidth=2)
    ax.set_xticks(range(len(order)))
    ax.set_xticklabels(order, rotation=45, ha="right")
    ax.set_xlabel("County Type")
    ax.set_ylabel(y_label)
    ax.set_title(title)
    fig.tight_layout()
    return fig


def save_figure(fig, path: Path, dpi: int = 150) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(path, dpi=dpi)
    plt.close(fig)
    return path


def _slug(spec: ScatterSpec) -> str:
    return f"{spec.y}_vs_{spec.x}"


def plot_all(views: Mapping[str, pd.DataFrame], out_dir: Path, specs: Iterable[ScatterSpec] = SCATTER_SPECS) -> Dict[str, Path]:
    written = {}
    for spec in specs:
        written[_slug(spec)] = save_figure(margin_scatter(views[spec.view], spec), out_dir / f"{_slug(spec)}.png")

    pres = views["presidential"]
    for year, typology in ((2020, "typology_2023"), (2016, "typology_2018")):
        margin = f"margin_{year}"
        title = f"{year} Presidential Elections by County Type"
        written[f"bar_{year}"] = save_figure(
            typology_bar(pres, typology, margin, title), out_dir / f"typology_bar_{year}.png"
        )
        written[f"typology_scatter_{year}"] = save_figure(
            typology_scatter(pres, typology, margin, title, f"{year} Margin"), out_dir / f"typology_scatter_{year}.png"
        )
    logger.info(f"[PLOT] wrote {len(written)} figures to {out_dir}")
    return written
