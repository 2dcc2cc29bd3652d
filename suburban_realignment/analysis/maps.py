from pathlib import Path
from typing import Dict

import geopandas as gpd
import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
from loguru import logger
from matplotlib.colors import TwoSlopeNorm

from suburban_realignment.analysis.config import (
    DENSITY_BINS,
    DENSITY_LABELS,
    URBANICITY_BINS,
    URBANICITY_LABELS,
    MapParams,
)
from suburban_realignment.analysis.plots import save_figure

PARAMS = MapParams()


# -----------------------------
# Categories
# -----------------------------
def density_category(s: pd.Series) -> pd.Series:
    return pd.cut(pd.to_numeric(s, errors="coerce"), bins=list(DENSITY_BINS), labels=list(DENSITY_LABELS))


def urbanicity_category(s: pd.Series) -> pd.Series:
    return pd.cut(pd.to_numeric(s, errors="coerce"), bins=list(URBANICITY_BINS), labels=list(URBANICITY_LABELS))


def election_result(margin: pd.Series) -> pd.Series:
    """Strong/Lean label from the 2020 margin; an undefined margin stays missing."""
    m = pd.to_numeric(margin, errors="coerce")
    out = np.select(
        [m > 10, m > 0, m > -10, m.notna()],
        ["Strong Biden", "Lean Biden", "Lean Trump", "Strong Trump"],
        default="",
    )
    return pd.Series(out, index=margin.index, dtype="string").replace("", pd.NA)


# -----------------------------
# Geometry
# -----------------------------
def load_county_shapes(path: Path, params: MapParams = PARAMS) -> gpd.GeoDataFrame:
    """Census cartographic county boundaries, lower 48 + DC, projected for area maps."""
    path = Path(path)
    src = f"zip://{path}" if path.suffix.lower() == ".zip" else path
    shapes = gpd.read_file(src)
    cols = {c.lower(): c for c in shapes.columns}
    if "geoid" not in cols or "statefp" not in cols:
        raise ValueError(f"{path}: expected GEOID and STATEFP columns, found {list(shapes.columns)}")
    shapes = shapes.rename(columns={cols["geoid"]: "GEOID", cols["statefp"]: "STATEFP"})
    shapes = shapes.loc[~shapes["STATEFP"].isin(params.excluded_states)].copy()
    if shapes.crs is None:
        raise ValueError("County shapes have no CRS; cannot project.")
    return shapes[["GEOID", "STATEFP", "geometry"]].to_crs(params.crs)


def attach_county_data(shapes: gpd.GeoDataFrame, counties: pd.DataFrame) -> gpd.GeoDataFrame:
    # polygons drive the join so counties without data still draw (as missing)
    data = counties.drop_duplicates("Fips").copy()
    data["Fips"] = data["Fips"].astype(str)
    out = shapes.merge(data, left_on="GEOID", right_on="Fips", how="left")
    out["density_category"] = density_category(out["avg_block_density_2020"])
    out["urbanicity_category"] = urbanicity_category(out["pct_urban"])
    out["election_result"] = election_result(out["margin_2020"])
    return out


# -----------------------------
# Maps
# -----------------------------
def _blank(ax, title: str, subtitle: str = "") -> None:
    ax.set_axis_off()
    ax.set_title(title + (f"\n{subtitle}" if subtitle else ""), fontsize=14, fontweight="bold")


def choropleth(
    gdf: gpd.GeoDataFrame,
    column: str,
    title: str,
    subtitle: str = "",
    cmap: str = "YlOrRd",
    vmin=None,
    vmax=None,
    diverging: bool = False,
    legend_label: str = "",
    ax=None,
    params: MapParams = PARAMS,
):
    fig = None
    if ax is None:
        fig, ax = plt.subplots(figsize=(12, 8))
    norm = None
    if diverging:
        lo = vmin if vmin is not None else float(np.nanmin(gdf[column]))
        hi = vmax if vmax is not None else float(np.nanmax(gdf[column]))
        norm = TwoSlopeNorm(vmin=min(lo, -1e-9), vcenter=0.0, vmax=max(hi, 1e-9))
    gdf.plot(
        column=column,
        ax=ax,
        cmap=cmap,
        norm=norm,
        vmin=None if diverging else vmin,
        vmax=None if diverging else vmax,
        linewidth=0.1,
        edgecolor=params.edge_color,
        legend=True,
        legend_kwds={"label": legend_label or column, "shrink": 0.6},
        missing_kwds={"color": params.missing_color},
    )
    _blank(ax, title, subtitle)
    return fig if fig is not None else ax.figure


def overlay_map(gdf: gpd.GeoDataFrame, params: MapParams = PARAMS):
    """Fill by 2020 block density, outline by 2020 margin."""
    fig, ax = plt.subplots(figsize=(14, 8))
    margin = gdf["margin_2020"]
    norm = TwoSlopeNorm(vmin=-100, vcenter=0, vmax=100)
    edges = plt.get_cmap("RdBu")(norm(margin.fillna(0).to_numpy()))
    edges[margin.isna().to_numpy()] = (0.7, 0.7, 0.7, 1.0)
    gdf.plot(
        column="avg_block_density_2020",
        ax=ax,
        cmap="YlOrRd",
        linewidth=0,
        legend=True,
        legend_kwds={"label": "Block Density (2020)", "shrink": 0.6},
        missing_kwds={"color": params.missing_color},
    )
    # outlines drawn separately: the fill layer skips rows with no density
    gdf.boundary.plot(ax=ax, color=edges, linewidth=0.3)
    _blank(
        ax,
        "Block Density with 2020 Election Results Overlay",
        "Fill = Block Density | Border = Election Result (Red=Trump, Blue=Biden)",
    )
    return fig


def faceted_margin_map(gdf: gpd.GeoDataFrame, category: str, title: str, subtitle: str):
    cats = [c for c in gdf[category].cat.categories if (gdf[category] == c).any()]
    ncols = 2
    nrows = max(1, int(np.ceil(len(cats) / ncols)))
    fig, axes = plt.subplots(nrows, ncols, figsize=(14, 5 * nrows), squeeze=False)
    norm = TwoSlopeNorm(vmin=-100, vcenter=0, vmax=100)
    for ax, cat in zip(axes.flat, cats):
        gdf.loc[gdf[category] == cat].plot(column="margin_2020", ax=ax, cmap="RdBu", norm=norm, linewidth=0.05, edgecolor="white")
        ax.set_axis_off()
        ax.set_title(str(cat), fontsize=12, fontweight="bold")
    for ax in list(axes.flat)[len(cats):]:
        ax.set_axis_off()
    fig.suptitle(f"{title}\n{subtitle}", fontsize=16, fontweight="bold")
    fig.colorbar(plt.cm.ScalarMappable(norm=norm, cmap="RdBu"), ax=axes, orientation="horizontal", shrink=0.5, label="2020 Margin")
    return fig


def combined_map(gdf: gpd.GeoDataFrame):
    fig, (left, right) = plt.subplots(1, 2, figsize=(16, 6))
    choropleth(gdf, "avg_block_density_2020", "Block Density (2020)", legend_label="Block Density", ax=left)
    choropleth(gdf, "margin_2020", "2020 Election Margins", cmap="RdBu", vmin=-100, vmax=100, diverging=True, legend_label="Margin", ax=right)
    return fig


def draw_all_maps(gdf: gpd.GeoDataFrame, out_dir: Path, params: MapParams = PARAMS) -> Dict[str, Path]:
    caption = "Grey areas indicate missing data"
    figures = {
        "block_density_map_2020": choropleth(
            gdf, "avg_block_density_2020", "Average Block Density by County (2020)",
            "Darker colors indicate higher block density", legend_label="Avg Block Density 2020",
        ),
        "election_margins_map_2020": choropleth(
            gdf, "margin_2020", "2020 Presidential Election Margins by County",
            "Blue = Biden won, Red = Trump won", cmap="RdBu", vmin=-100, vmax=100, diverging=True,
            legend_label="2020 Margin",
        ),
        "urbanicity_map": choropleth(
            gdf, "pct_urban", "Urbanicity by County",
            "Darker green indicates higher percentage of urban population", cmap="Greens", vmin=0, vmax=100,
            legend_label="% Urban",
        ),
        "connectivity_map": choropleth(
            gdf, "avg_con_node_ratio_2020", "Street Connectivity by County (2020)",
            "Higher values indicate more connected street networks", cmap="Oranges",
            legend_label="Connectivity Node Ratio (2020)",
        ),
        "population_change_map": choropleth(
            gdf, "pop_change_2010_2018", "Population Change by County (2010-2018)",
            "Blue = Population growth | Red = Population decline", cmap="RdBu", vmin=-0.4, vmax=0.4,
            diverging=True, legend_label="Population Change (2010-2018)",
        ),
        "overlay_map": overlay_map(gdf, params),
        "faceted_density_map": faceted_margin_map(
            gdf, "density_category", "2020 Election Results by Block Density Category",
            "How counties voted based on their average block density",
        ),
        "faceted_urbanicity_map": faceted_margin_map(
            gdf, "urbanicity_category", "2020 Election Results by Urbanicity Category",
            "How counties voted based on their urbanicity",
        ),
        "combined_comparison_map": combined_map(gdf),
    }
    written = {}
    for name, fig in figures.items():
        fig.text(0.99, 0.01, caption, ha="right", fontsize=8, color="grey")
        written[name] = save_figure(fig, out_dir / f"{name}.png", dpi=params.dpi)
    logger.info(f"[MAP] wrote {len(written)} maps to {out_dir}")
    return written
