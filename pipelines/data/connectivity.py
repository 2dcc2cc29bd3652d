from __future__ import annotations

from typing import Dict

import pandas as pd
from loguru import logger

from .schema import COLS, CONNECTIVITY_METRICS, URBANICITY, require_columns


def county_means(
    tracts: pd.DataFrame,
    columns: Dict[str, str],
    source: str = "tracts",
) -> pd.DataFrame:
    """
    Average tract values up to counties.

    `columns` maps source column -> output column. NaN is left out of both the
    sum and the count; a county whose tracts are all NaN for a column gets NaN.
    Every distinct Fips in the input (including a missing one) gets a row.
    """
    require_columns(tracts, [COLS.fips, *columns], source)

    values = tracts[[COLS.fips, *columns]].copy()
    for c in columns:
        values[c] = pd.to_numeric(values[c], errors="coerce")

    out = (
        values.groupby(COLS.fips, dropna=False, sort=True)[list(columns)]
        .mean()
        .rename(columns=columns)
        .reset_index()
    )
    out[COLS.fips] = out[COLS.fips].astype("string")
    return out


def aggregate_connectivity(tracts: pd.DataFrame, year: int) -> pd.DataFrame:
    columns = {raw: f"{stem}_{year}" for raw, stem in CONNECTIVITY_METRICS.items()}
    out = county_means(tracts, columns, source=f"connectivity_{year}")
    logger.info(f"[AGG] connectivity {year}: {len(tracts)} tracts -> {len(out)} counties")
    return out


def aggregate_urbanicity(tracts: pd.DataFrame) -> pd.DataFrame:
    """County means of the declared urbanicity measures."""
    out = county_means(tracts, URBANICITY.measures, source="urbanicity")
    logger.info(f"[AGG] urbanicity: {len(tracts)} tracts -> {len(out)} counties")
    return out
