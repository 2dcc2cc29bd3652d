from typing import Dict, List

import numpy as np
import pandas as pd


def describe_view(df: pd.DataFrame) -> pd.DataFrame:
    """pandas describe over every column, numeric and categorical."""
    return df.describe(include="all").T


def variable_summary(s: pd.Series) -> Dict[str, float]:
    x = pd.to_numeric(s, errors="coerce")
    return {
        "min": float(x.min()) if x.notna().any() else np.nan,
        "max": float(x.max()) if x.notna().any() else np.nan,
        "mean": float(x.mean()) if x.notna().any() else np.nan,
        "median": float(x.median()) if x.notna().any() else np.nan,
        "n": int(x.notna().sum()),
    }


def block_density_counts(s: pd.Series) -> Dict[str, int]:
    x = pd.to_numeric(s, errors="coerce")
    return {
        "Low (< 10)": int((x < 10).sum()),
        "Medium (10-20)": int(((x >= 10) & (x < 20)).sum()),
        "High (20-30)": int(((x >= 20) & (x < 30)).sum()),
        "Very High (> 30)": int((x >= 30).sum()),
    }


def mapping_summary(urbanicity: pd.DataFrame) -> Dict[str, Dict[str, float]]:
    """Headline numbers for the mapped variables of the urbanicity view."""
    margin = pd.to_numeric(urbanicity["margin_2020"], errors="coerce")
    pop = pd.to_numeric(urbanicity["pop_change_2010_2018"], errors="coerce")
    return {
        "block_density_2020": {
            **variable_summary(urbanicity["avg_block_density_2020"]),
            **block_density_counts(urbanicity["avg_block_density_2020"]),
        },
        "margin_2020": {
            **variable_summary(margin),
            "biden_won": int((margin > 0).sum()),
            "trump_won": int((margin < 0).sum()),
        },
        "pct_urban": variable_summary(urbanicity["pct_urban"]),
        "con_node_ratio_2020": variable_summary(urbanicity["avg_con_node_ratio_2020"]),
        "pop_change_2010_2018": {
            **variable_summary(pop),
            "growing": int((pop > 0).sum()),
            "declining": int((pop < 0).sum()),
        },
    }


def format_mapping_summary(summary: Dict[str, Dict[str, float]]) -> str:
    lines: List[str] = []
    for variable, stats in summary.items():
        lines.append(f"{variable}:")
        for key, value in stats.items():
            if isinstance(value, float):
                lines.append(f"  {key:<18} {value:.3f}")
            else:
                lines.append(f"  {key:<18} {value}")
    return "\n".join(lines)
