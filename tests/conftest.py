"""Shared fixtures: synthetic county rows shaped like the merged source tables."""

from __future__ import annotations

import matplotlib

matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest


def merged_row(**overrides) -> dict:
    """One merged county-year row under the raw workbook/NaNDA headers."""
    row = {
        "Fips": "01001",
        "State": "AL",
        "County": "Autauga",
        "County name": "Autauga County",
        "Metro Area": "Montgomery",
        "Type of County": "Exurbs",
        "2023 Typology": "Exurbs",
        "Largest City/Town": "Prattville",
        "% Population increase since 2010": 0.02,
        "% Urban": 58.0,
        "% Rural": 42.0,
        "Biden ": "600",
        "Trump": "350",
        "Total ": "1000",
        "Obama % 2012": 0.55,
        "Romney % 2012": 0.45,
        "Clinton % 2016": 0.5,
        "Trump % 2016": 0.45,
        "Other % 2016": 0.05,
        "Clinton 2016": 400,
        "Trump 2016": 500,
        "Total 2016": 1000,
        "YEAR": 2016,
        "REG_VOTER_TURNOUT_PCT": 61.5,
    }
    for year in (2010, 2020):
        row.update({
            f"avg_real_nodes_{year}": 100.0,
            f"avg_network_density_{year}": 5.0,
            f"avg_con_node_ratio_{year}": 0.7,
            f"avg_block_density_{year}": 12.0,
        })
    row.update(overrides)
    return row


@pytest.fixture
def merged_rows():
    def build(*rows: dict) -> pd.DataFrame:
        return pd.DataFrame([merged_row(**r) for r in rows])

    return build


@pytest.fixture
def margins_frame():
    def build(*triples) -> pd.DataFrame:
        return pd.DataFrame(
            [
                {
                    "Fips": f"{i:05d}",
                    "typology_2018": "Exurbs",
                    "typology_2023": "Exurbs",
                    "margin_2012": m12,
                    "margin_2016": m16,
                    "margin_2020": m20,
                }
                for i, (m12, m16, m20) in enumerate(triples, start=1)
            ]
        ).astype({"margin_2012": float, "margin_2016": float, "margin_2020": float})

    return build


NAN = np.nan
