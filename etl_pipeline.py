#!/usr/bin/env python3
# etl_pipeline.py

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Dict, Optional

import pandas as pd
from loguru import logger

from pipelines.data.connectivity import aggregate_connectivity, aggregate_urbanicity
from pipelines.data.context import PipelineContext, SourcePaths
from pipelines.data.elections import derive_county_variables
from pipelines.data.keys import malformed_fips
from pipelines.data.merge import merge_county_tables
from pipelines.data.publish import publish_views
from pipelines.data.schema import COLS
from pipelines.data.sources import (
    download_file,
    load_connectivity,
    load_county_baseline,
    load_survey,
    load_turnout,
    load_urbanicity,
    require_icpsr_file,
)
from pipelines.data.survey import survey_views
from pipelines.data.views import build_views
from suburban_realignment import config
from suburban_realignment.analysis.maps import attach_county_data, draw_all_maps, load_county_shapes
from suburban_realignment.analysis.plots import plot_all
from suburban_realignment.analysis.regression import coefficient_table, fit_models, render_summaries
from suburban_realignment.analysis.summary import describe_view, format_mapping_summary, mapping_summary


# ============================== STAGES ==============================
def load_sources(paths: SourcePaths) -> PipelineContext:
    ctx = PipelineContext(
        turnout=load_turnout(paths.turnout),
        connectivity_2010=load_connectivity(paths.connectivity_2010, 2010),
        connectivity_2020=load_connectivity(paths.connectivity_2020, 2020),
        county_baseline=load_county_baseline(paths.county_baseline),
    )
    if paths.urbanicity is not None:
        ctx.urbanicity = load_urbanicity(paths.urbanicity)
    if paths.survey is not None:
        ctx.survey = load_survey(paths.survey)

    for name in ("turnout", "urbanicity", "connectivity_2010", "connectivity_2020", "county_baseline"):
        df = getattr(ctx, name)
        if df is None:
            continue
        bad = df.loc[malformed_fips(df[COLS.fips]), COLS.fips]
        if not bad.empty:
            ctx.malformed_fips[name] = sorted(set(bad.astype("string").fillna("<NA>")))
    return ctx


def build_county_tables(ctx: PipelineContext) -> PipelineContext:
    """Aggregate -> merge -> derive -> project, filling in `ctx` as it goes."""
    ctx.connectivity_avg_2010 = aggregate_connectivity(ctx.connectivity_2010, 2010)
    ctx.connectivity_avg_2020 = aggregate_connectivity(ctx.connectivity_2020, 2020)
    if ctx.urbanicity is not None:
        ctx.urbanicity_avg = aggregate_urbanicity(ctx.urbanicity)

    ctx.merged = merge_county_tables(
        ctx.county_baseline,
        ctx.turnout,
        ctx.connectivity_avg_2010,
        ctx.connectivity_avg_2020,
        urbanicity=ctx.urbanicity_avg,
    )
    ctx.derived = derive_county_variables(ctx.merged)
    ctx.views = build_views(ctx.derived)
    if ctx.survey is not None:
        ctx.views.update(survey_views(ctx.survey))

    for name, df in ctx.views.items():
        logger.info(f"[VIEW] {name}: {len(df)} rows")
    return ctx


def run_pipeline(paths: SourcePaths) -> PipelineContext:
    logger.info("========== Load ==========")
    ctx = load_sources(paths)
    logger.info("========== Build county tables ==========")
    return build_county_tables(ctx)


# ============================== ANALYSIS ==============================
def run_analysis(ctx: PipelineContext, figures_dir: Optional[Path] = None) -> Dict[str, pd.DataFrame]:
    for name in ("urbanicity", "presidential"):
        logger.info(f"\n=== {name.upper()} STATISTICS ===\n{describe_view(ctx.view(name)).to_string()}")

    results = fit_models(ctx.views)
    logger.info(
        "\n=== 2020 REGRESSION SUMMARIES ===\n"
        + render_summaries(results, ["urbanicity_2020", "block_density_2020", "multivariate_urbanicity_2020"])
    )

    if figures_dir is not None:
        plot_all(ctx.views, figures_dir)
    return {"coefficients": coefficient_table(results)}


def run_maps(ctx: PipelineContext, shapes_path: Path, maps_dir: Path) -> None:
    gdf = attach_county_data(load_county_shapes(shapes_path), ctx.view("urbanicity"))
    draw_all_maps(gdf, maps_dir)
    logger.info("\nMAPPING SUMMARY STATISTICS\n" + format_mapping_summary(mapping_summary(ctx.view("urbanicity"))))


# ============================== CLI ==============================
def fetch_sources(raw_dir: Path, with_maps: bool = False) -> None:
    for path, study in (
        (config.TURNOUT_SAV, config.ICPSR_TURNOUT_STUDY),
        (config.URBANICITY_SAV, config.ICPSR_URBANICITY_STUDY),
        (config.CONNECTIVITY_2010_SAV, config.ICPSR_CONNECTIVITY_STUDY),
        (config.CONNECTIVITY_2020_SAV, config.ICPSR_CONNECTIVITY_STUDY),
    ):
        require_icpsr_file(raw_dir / path.relative_to(config.RAW_DATA_DIR), study)
    download_file(config.COUNTY_DATA_URL, config.COUNTY_DATA_XLSX, timeout=config.DOWNLOAD_TIMEOUT)
    download_file(config.ANES_URL, config.ANES_CSV, timeout=config.DOWNLOAD_TIMEOUT)
    if with_maps:
        download_file(config.COUNTY_SHAPES_URL, config.COUNTY_SHAPES_ZIP, timeout=config.DOWNLOAD_TIMEOUT)


def main():
    ap = argparse.ArgumentParser(description="County urbanicity / street connectivity vs. presidential margin pipeline")
    ap.add_argument("--raw-dir", type=Path, default=config.RAW_DATA_DIR)
    ap.add_argument("--county-data", type=Path, default=config.COUNTY_DATA_XLSX)
    ap.add_argument("--anes", type=Path, default=config.ANES_CSV)
    ap.add_argument("--no-anes", action="store_true", help="Skip the ANES survey projections.")
    ap.add_argument("--out", type=Path, default=config.TABULAR_DATA_DIR, help="Where processed views are written.")
    ap.add_argument("--sqlite", type=Path, default=None, help=f"Also write views to a SQLite file (e.g. {config.WAREHOUSE_SQLITE}).")
    ap.add_argument("--download", action="store_true", help="Fetch the workbook, ANES file and (with --maps) county shapes first.")
    ap.add_argument("--figures", action="store_true", help="Save scatter and bar figures.")
    ap.add_argument("--maps", action="store_true", help="Draw county choropleths.")
    ap.add_argument("--shapes", type=Path, default=config.COUNTY_SHAPES_ZIP)
    args = ap.parse_args()

    if args.download:
        fetch_sources(args.raw_dir, with_maps=args.maps)

    def rel(p: Path) -> Path:
        return args.raw_dir / p.relative_to(config.RAW_DATA_DIR)

    paths = SourcePaths(
        turnout=rel(config.TURNOUT_SAV),
        urbanicity=rel(config.URBANICITY_SAV),
        connectivity_2010=rel(config.CONNECTIVITY_2010_SAV),
        connectivity_2020=rel(config.CONNECTIVITY_2020_SAV),
        county_baseline=args.county_data,
        survey=None if args.no_anes else args.anes,
    )

    ctx = run_pipeline(paths)
    if ctx.malformed_fips:
        for name, keys in ctx.malformed_fips.items():
            logger.warning(f"{name}: {len(keys)} malformed FIPS value(s) kept, e.g. {keys[:5]}")

    outputs = dict(ctx.views)
    outputs.update(run_analysis(ctx, figures_dir=config.FIGURES_DIR if args.figures else None))
    if args.maps:
        run_maps(ctx, args.shapes, config.MAPS_DIR)

    publish_views(outputs, args.out, sqlite_path=args.sqlite)
    logger.success("Pipeline complete.")


if __name__ == "__main__":
    main()
