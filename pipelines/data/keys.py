from __future__ import annotations
import pandas as pd

COUNTY_FIPS_WIDTH = 5
TRACT_FIPS_WIDTH = 11


def clean_key_text(raw: pd.Series) -> pd.Series:
    # numeric exports (SPSS/Excel) come through as 1001.0
    return raw.astype("string").str.strip().str.replace(r"\.0$", "", regex=True)


def is_county_fips(s: pd.Series) -> pd.Series:
    return s.astype("string").str.fullmatch(r"\d{5}", na=False).astype(bool)


def normalize_fips(raw: pd.Series, width: int = COUNTY_FIPS_WIDTH) -> pd.Series:
    """
    Zero-pad a FIPS-like key to `width` digits and cut it to the 5-digit county code.

    Tract codes (width 11) are padded before slicing so a state lost its leading
    zero still maps onto the right county. Values that do not yield five digits
    are returned as the cleaned original text rather than dropped.
    """
    s = clean_key_text(raw)
    padded = s.str.zfill(width)
    ok = padded.str.fullmatch(r"\d{" + str(width) + r"}", na=False).astype(bool) & (s.str.len() > 0).fillna(False).astype(bool)
    county = padded.str.slice(0, COUNTY_FIPS_WIDTH)
    return county.where(ok, s)


def malformed_fips(fips: pd.Series) -> pd.Series:
    return ~is_county_fips(fips)
