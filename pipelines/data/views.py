from __future__ import annotations

from typing import Dict

import pandas as pd

from .schema import (
    COLS,
    PRESIDENTIAL_COLUMNS,
    RECLASSIFICATION_COLUMNS,
    URBANICITY_COLUMNS,
    require_columns,
)

URBAN_SUBURBS = "Urban Suburbs"
EXURBS = "Exurbs"


def _select(df: pd.DataFrame, columns, view: str) -> pd.DataFrame:
    require_columns(df, columns, f"{view} view")
    return df.loc[:, list(columns)]


def reclassified_mask(df: pd.DataFrame) -> pd.Series:
    """Both typology vintages present and different."""
    t18 = df[COLS.typology_2018]
    t23 = df[COLS.typology_2023]
    return (t18.notna() & t23.notna() & (t18 != t23)).astype(bool)


# -----------------------------
# Views
# -----------------------------
def presidential_view(derived: pd.DataFrame) -> pd.DataFrame:
    # turnout contributes one row per county-year; these columns do not vary by year
    return _select(derived, PRESIDENTIAL_COLUMNS, "presidential").drop_duplicates().reset_index(drop=True)


def urbanicity_view(derived: pd.DataFrame, year: int = 2016) -> pd.DataFrame:
    require_columns(derived, [COLS.year, COLS.reg_turnout], "urbanicity view")
    rows = derived.loc[pd.to_numeric(derived[COLS.year], errors="coerce") == year]
    rows = rows.rename(columns={COLS.reg_turnout: COLS.registered_turnout})
    return _select(rows, URBANICITY_COLUMNS, "urbanicity").reset_index(drop=True)


def reclassification_view(derived: pd.DataFrame) -> pd.DataFrame:
    rows = derived.loc[reclassified_mask(derived)]
    return _select(rows, RECLASSIFICATION_COLUMNS, "reclassification").reset_index(drop=True)


# -----------------------------
# Flip subsets
# -----------------------------
def triple_flip_mask(df: pd.DataFrame) -> pd.Series:
    """Sign alternates across 2012 -> 2016 -> 2020. NaN and 0 fail every comparison."""
    m12, m16, m20 = (df[c] for c in COLS.margins)
    return ((m12 < 0) & (m16 > 0) & (m20 < 0)) | ((m12 > 0) & (m16 < 0) & (m20 > 0))


def double_flip_mask(df: pd.DataFrame) -> pd.Series:
    """At least one sign change between adjacent elections."""
    m12, m16, m20 = (df[c] for c in COLS.margins)
    return (
        ((m12 < 0) & (m16 > 0))
        | ((m12 > 0) & (m16 < 0))
        | ((m16 < 0) & (m20 > 0))
        | ((m16 > 0) & (m20 < 0))
    )


def flip_subsets(presidential: pd.DataFrame) -> Dict[str, pd.DataFrame]:
    double = presidential.loc[double_flip_mask(presidential)].reset_index(drop=True)
    return {
        "triple_flip": presidential.loc[triple_flip_mask(presidential)].reset_index(drop=True),
        "double_flip": double,
        "double_flip_reclassified": double.loc[reclassified_mask(double)].reset_index(drop=True),
    }


def typology_subsets(derived: pd.DataFrame) -> Dict[str, pd.DataFrame]:
    t23 = derived[COLS.typology_2023]
    m20 = derived[COLS.margin_2020]

    def pick(mask: pd.Series) -> pd.DataFrame:
        return derived.loc[mask].reset_index(drop=True)

    return {
        "suburb_gop": pick((t23 == URBAN_SUBURBS) & (m20 < 0)),
        "suburb_dem": pick((t23 == URBAN_SUBURBS) & (m20 > 0)),
        "exurb_dem": pick((t23 == EXURBS) & (m20 > 0)),
        "exurb_gop": pick((t23 == EXURBS) & (m20 < 0)),
    }


def build_views(derived: pd.DataFrame) -> Dict[str, pd.DataFrame]:
    presidential = presidential_view(derived)
    views = {
        "presidential": presidential,
        "urbanicity": urbanicity_view(derived),
        "reclassification": reclassification_view(derived),
    }
    views.update(flip_subsets(presidential))
    views.update(typology_subsets(derived))
    return views
