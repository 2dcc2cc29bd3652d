from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional

import pandas as pd
from loguru import logger
from sqlalchemy import create_engine

from .io import mkdir_p, write_parquet


def publish_views(
    views: Dict[str, pd.DataFrame],
    out_dir: Path,
    sqlite_path: Optional[Path] = None,
) -> Dict[str, Path]:
    """Write each view to <out_dir>/<name>.parquet and .csv, optionally to SQLite too."""
    mkdir_p(out_dir)
    written: Dict[str, Path] = {}
    for name, df in views.items():
        pq_path = out_dir / f"{name}.parquet"
        write_parquet(df, pq_path)
        df.to_csv(out_dir / f"{name}.csv", index=False)
        written[name] = pq_path
        logger.info(f"[PUBLISH] {name}: {len(df)} rows -> {pq_path}")

    if sqlite_path is not None:
        mkdir_p(sqlite_path.parent)
        eng = create_engine(f"sqlite:///{sqlite_path}")
        with eng.begin() as conn:
            for name, df in views.items():
                conn.exec_driver_sql(f'DROP TABLE IF EXISTS "{name}"')
                df.to_sql(name, conn, if_exists="append", index=False)
        eng.dispose()
        logger.info(f"[PUBLISH] {len(views)} tables -> {sqlite_path}")

    return written
