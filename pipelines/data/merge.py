from __future__ import annotations

from functools import reduce
from typing import Optional

import pandas as pd
from loguru import logger

from .schema import COLS, SchemaMismatch, require_columns


def _outer(left: pd.DataFrame, right: pd.DataFrame) -> pd.DataFrame:
    shared = (set(left.columns) & set(right.columns)) - {COLS.fips}
    if shared:
        raise SchemaMismatch("merge", shared, problem="column(s) present on both sides of the join")
    # sort=True gives the same row order on every run regardless of input order
    return left.merge(right, on=COLS.fips, how="outer", sort=True)


def merge_on_fips(*tables: pd.DataFrame) -> pd.DataFrame:
    """
    Full outer join of `tables` on Fips, left to right.

    The key set of the result is the union of the inputs' key sets; a county
    missing from one input carries NaN in that input's columns. Non-key column
    names must be unique across the inputs.
    """
    if not tables:
        raise ValueError("merge_on_fips needs at least one table.")

    prepared = []
    for i, t in enumerate(tables):
        require_columns(t, [COLS.fips], f"merge input #{i}")
        t = t.copy()
        t[COLS.fips] = t[COLS.fips].astype("string")
        prepared.append(t)
    return reduce(_outer, prepared).reset_index(drop=True)


def merge_county_tables(
    county_baseline: pd.DataFrame,
    turnout: pd.DataFrame,
    connectivity_2010: pd.DataFrame,
    connectivity_2020: pd.DataFrame,
    urbanicity: Optional[pd.DataFrame] = None,
) -> pd.DataFrame:
    connectivity = merge_on_fips(connectivity_2010, connectivity_2020)
    tables = [county_baseline, turnout, connectivity]
    if urbanicity is not None:
        tables.append(urbanicity)

    merged = merge_on_fips(*tables)
    logger.info(
        f"[MERGE] baseline={len(county_baseline)} turnout={len(turnout)} "
        f"connectivity={len(connectivity)}"
        + (f" urbanicity={len(urbanicity)}" if urbanicity is not None else "")
        + f" -> {len(merged)} rows, {merged[COLS.fips].nunique()} counties"
    )
    return merged
