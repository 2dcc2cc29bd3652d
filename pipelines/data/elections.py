from __future__ import annotations

from typing import Dict, Iterable, Optional

import numpy as np
import pandas as pd

from .schema import COLS, COUNTY_BASELINE, require_columns

TYPOLOGY_FIXES: Dict[str, str] = {"Urban Burbs": "Urban Suburbs"}

VOTE_INPUTS = [
    COLS.biden_2020, COLS.trump_2020, COLS.total_2020,
    COLS.clinton_2016, COLS.trump_2016, COLS.total_2016,
    COLS.obama_pct_2012, COLS.romney_pct_2012,
]


def apply_renames(
    df: pd.DataFrame,
    renames: Optional[Dict[str, str]] = None,
    drop: Optional[Iterable[str]] = None,
) -> pd.DataFrame:
    """Rename workbook headers to analysis names; anything unmapped passes through."""
    renames = COUNTY_BASELINE.renames if renames is None else renames
    drop = COUNTY_BASELINE.drop if drop is None else drop
    out = df.drop(columns=[c for c in drop if c in df.columns])
    return out.rename(columns=renames)


def coerce_numeric(df: pd.DataFrame, columns: Iterable[str]) -> pd.DataFrame:
    """Cast to float; text that does not parse becomes NaN."""
    out = df.copy()
    for c in columns:
        if c in out.columns:
            out[c] = pd.to_numeric(out[c], errors="coerce").astype("float64")
    return out


def vote_share(votes: pd.Series, total: pd.Series) -> pd.Series:
    """Percent of `total` (0-100). Zero or missing totals give NaN."""
    v = pd.to_numeric(votes, errors="coerce").astype("float64")
    den = pd.to_numeric(total, errors="coerce").astype("float64").replace({0: np.nan})
    return v * 100 / den


def fix_typology_labels(labels: pd.Series, fixes: Optional[Dict[str, str]] = None) -> pd.Series:
    # whole-value replacement; labels merely containing a key are untouched
    return labels.replace(TYPOLOGY_FIXES if fixes is None else fixes)


def derive_county_variables(merged: pd.DataFrame) -> pd.DataFrame:
    """
    Rename, coerce, and derive vote shares and margins on the merged county table.

    Margins are Democratic minus Republican share in points, so positive means
    a Democratic lead. The 2012 inputs are fractions and are scaled by 100 to
    match 2016 and 2020.
    """
    df = apply_renames(merged)
    require_columns(df, VOTE_INPUTS, "merged county table")
    df = coerce_numeric(df, VOTE_INPUTS)

    df[COLS.biden_share_2020] = vote_share(df[COLS.biden_2020], df[COLS.total_2020])
    df[COLS.trump_share_2020] = vote_share(df[COLS.trump_2020], df[COLS.total_2020])
    df[COLS.clinton_share_2016] = vote_share(df[COLS.clinton_2016], df[COLS.total_2016])
    df[COLS.trump_share_2016] = vote_share(df[COLS.trump_2016], df[COLS.total_2016])

    if COLS.typology_2023 in df.columns:
        df[COLS.typology_2023] = fix_typology_labels(df[COLS.typology_2023])

    df[COLS.margin_2020] = df[COLS.biden_share_2020] - df[COLS.trump_share_2020]
    df[COLS.margin_2016] = df[COLS.clinton_share_2016] - df[COLS.trump_share_2016]
    df[COLS.margin_2012] = (df[COLS.obama_pct_2012] - df[COLS.romney_pct_2012]) * 100
    return df
