from __future__ import annotations

from pathlib import Path
from typing import Sequence

import pandas as pd
import requests
from loguru import logger
from tqdm import tqdm

from .io import mkdir_p, read_any
from .keys import malformed_fips, normalize_fips
from .schema import (
    ANES_CODES,
    COLS,
    COUNTY_BASELINE,
    CONNECTIVITY_2010,
    CONNECTIVITY_2020,
    TURNOUT,
    URBANICITY,
    SourceSchema,
    SchemaMismatch,
    require_columns,
)


# -----------------------------
# Download
# -----------------------------
def download_file(url: str, dest: Path, timeout: int = 120, chunk_size: int = 1024 * 1024) -> bool:
    """Stream `url` to `dest`. Returns False when the file is already on disk."""
    dest = Path(dest)
    if dest.exists():
        logger.info(f"Already downloaded ({dest.stat().st_size / 1e6:.1f} MB): {dest}")
        return False

    logger.info(f"Downloading {url}")
    resp = requests.get(url, stream=True, allow_redirects=True, timeout=timeout)
    resp.raise_for_status()

    total = int(resp.headers.get("content-length", 0)) or None
    mkdir_p(dest.parent)
    tmp = dest.with_name(dest.name + ".part")
    with tmp.open("wb") as f, tqdm(total=total, unit="B", unit_scale=True, desc=dest.name) as bar:
        for chunk in resp.iter_content(chunk_size=chunk_size):
            f.write(chunk)
            bar.update(len(chunk))
    tmp.replace(dest)
    logger.success(f"Saved {dest}")
    return True


def require_icpsr_file(path: Path, study: int) -> Path:
    if not Path(path).exists():
        raise FileNotFoundError(
            f"Missing ICPSR {study} data file: {path}. "
            f"Download study {study} from https://www.icpsr.umich.edu/ (login required) "
            f"and unzip it under {Path(path).parents[2]}."
        )
    return Path(path)


# -----------------------------
# Normalize
# -----------------------------
def normalize_source(
    df: pd.DataFrame,
    key_col: str,
    key_width: int = 5,
    min_year: int | None = None,
    source: str = "table",
) -> pd.DataFrame:
    """
    Rename `key_col` to `Fips` and reduce it to a zero-padded county code.

    With `min_year`, only rows whose YEAR is at least that value are kept.
    Malformed keys stay on their rows so outer joins still see them.
    """
    require_columns(df, [key_col], source)
    if COLS.fips in df.columns and key_col != COLS.fips:
        raise SchemaMismatch(source, [f"{key_col} (a '{COLS.fips}' column already exists)"])
    if min_year is not None:
        require_columns(df, [COLS.year], source)

    out = df.rename(columns={key_col: COLS.fips})
    out[COLS.fips] = normalize_fips(out[COLS.fips], width=key_width)

    bad = malformed_fips(out[COLS.fips])
    if bad.any():
        sample = out.loc[bad, COLS.fips].astype(str).unique().tolist()[:10]
        logger.warning(f"{source}: {int(bad.sum())} row(s) with malformed FIPS kept as-is, e.g. {sample}")

    if min_year is not None:
        year = pd.to_numeric(out[COLS.year], errors="coerce")
        out = out.loc[year >= min_year].copy()
        logger.info(f"{source}: kept {len(out)} row(s) with {COLS.year} >= {min_year}")

    return out.reset_index(drop=True)


def normalize_with_schema(df: pd.DataFrame, schema: SourceSchema) -> pd.DataFrame:
    require_columns(df, schema.required, schema.name)
    return normalize_source(
        df,
        key_col=schema.key_col,
        key_width=schema.key_width,
        min_year=schema.min_year,
        source=schema.name,
    )


# -----------------------------
# Loaders
# -----------------------------
def _load(path: Path, schema: SourceSchema, usecols: Sequence[str] | None = None) -> pd.DataFrame:
    logger.info(f"[LOAD] {schema.name} <- {path}")
    df = read_any(Path(path), usecols=usecols)
    logger.info(f"[LOAD] {schema.name}: {len(df)} rows x {df.shape[1]} cols")
    return normalize_with_schema(df, schema)


def load_turnout(path: Path) -> pd.DataFrame:
    return _load(path, TURNOUT)


def load_urbanicity(path: Path) -> pd.DataFrame:
    return _load(path, URBANICITY)


def load_connectivity(path: Path, year: int) -> pd.DataFrame:
    schema = {2010: CONNECTIVITY_2010, 2020: CONNECTIVITY_2020}.get(year)
    if schema is None:
        raise ValueError(f"No street connectivity release for {year}; expected 2010 or 2020.")
    return _load(path, schema)


def load_county_baseline(path: Path) -> pd.DataFrame:
    return _load(path, COUNTY_BASELINE)


def load_survey(path: Path, codes: Sequence[str] = ANES_CODES) -> pd.DataFrame:
    logger.info(f"[LOAD] anes <- {path}")
    df = read_any(Path(path), usecols=codes)
    require_columns(df, codes, "anes")
    logger.info(f"[LOAD] anes: {len(df)} respondent-years")
    return df
