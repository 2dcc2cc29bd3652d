#!/usr/bin/env python3
from __future__ import annotations
import csv
from pathlib import Path
from typing import Sequence

import pandas as pd


def mkdir_p(p: Path) -> None:
    p.mkdir(parents=True, exist_ok=True)


def _sniff_delimiter(path: Path) -> str:
    with path.open("r", encoding="utf-8", errors="replace") as f:
        sample = f.read(8192)
    candidates = ["|", "\t", ",", ";"]
    try:
        return csv.Sniffer().sniff(sample, delimiters="".join(candidates)).delimiter
    except csv.Error:
        counts = {d: sample.count(d) for d in candidates}
        return max(counts, key=counts.get)


def read_any(path: Path, usecols: Sequence[str] | None = None) -> pd.DataFrame:
    """
    Read a source table by extension.

    SPSS files keep their value codes (no label conversion) so numeric columns
    stay numeric. `usecols` is honoured where the reader supports it; for the
    ANES cumulative file that keeps memory reasonable.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Missing file: {path}")

    ext = path.suffix.lower()
    cols = list(usecols) if usecols is not None else None
    # callable selector: absent columns surface later as a SchemaMismatch
    pick = (lambda c: c in cols) if cols is not None else None
    if ext == ".sav":
        return pd.read_spss(path, usecols=cols, convert_categoricals=False)
    if ext in (".xlsx", ".xls"):
        return pd.read_excel(path, usecols=pick)
    if ext in (".parquet", ".pq"):
        return pd.read_parquet(path, columns=cols)
    if ext == ".csv":
        return pd.read_csv(path, usecols=pick, low_memory=False)
    if ext == ".tsv":
        return pd.read_csv(path, sep="\t", usecols=pick, low_memory=False)
    if ext == ".txt":
        return pd.read_csv(path, sep=_sniff_delimiter(path), usecols=pick, engine="python")
    raise ValueError(f"Unsupported input file type: {path}")


def write_parquet(df: pd.DataFrame, path: Path) -> None:
    mkdir_p(path.parent)
    df.to_parquet(path, engine="pyarrow", index=False)
