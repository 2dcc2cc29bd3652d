from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

import pandas as pd


class SchemaMismatch(ValueError):
    """A declared column is absent, or two joined tables both carry a column."""

    def __init__(self, source: str, missing: Iterable[str], problem: str = "missing required column(s)"):
        self.source = source
        self.missing = sorted(missing)
        super().__init__(f"{source}: {problem} {self.missing}")


def require_columns(df: pd.DataFrame, columns: Iterable[str], source: str) -> None:
    missing = set(columns) - set(df.columns)
    if missing:
        raise SchemaMismatch(source, missing)


@dataclass(frozen=True)
class Columns:
    fips: str = "Fips"
    state: str = "state"
    county: str = "county"
    typology_2018: str = "typology_2018"
    typology_2023: str = "typology_2023"
    largest_city: str = "largest_city"
    pop_change: str = "pop_change_2010_2018"
    pct_urban: str = "pct_urban"
    pct_rural: str = "pct_rural"

    # Raw vote counts / shares carried over from the county workbook
    biden_2020: str = "biden_2020"
    trump_2020: str = "trump_2020"
    total_2020: str = "total_2020"
    clinton_2016: str = "clinton_2016"
    trump_2016: str = "trump_2016"
    total_2016: str = "total_2016"
    obama_pct_2012: str = "obama_pct_2012"
    romney_pct_2012: str = "romney_pct_2012"
    clinton_pct_2016: str = "clinton_pct_2016"
    trump_pct_2016: str = "trump_pct_2016"
    other_pct_2016: str = "other_pct_2016"

    # Derived
    biden_share_2020: str = "biden_share_2020"
    trump_share_2020: str = "trump_share_2020"
    clinton_share_2016: str = "clinton_share_2016"
    trump_share_2016: str = "trump_share_2016"
    margin_2012: str = "margin_2012"
    margin_2016: str = "margin_2016"
    margin_2020: str = "margin_2020"

    # Turnout (kept under the NaNDA names)
    year: str = "YEAR"
    reg_turnout: str = "REG_VOTER_TURNOUT_PCT"
    registered_turnout: str = "registered_turnout_pct"

    @property
    def margins(self) -> List[str]:
        return [self.margin_2012, self.margin_2016, self.margin_2020]

    @property
    def identity(self) -> List[str]:
        return [
            self.fips,
            self.state,
            self.county,
            self.typology_2018,
            self.typology_2023,
            self.largest_city,
            self.pop_change,
        ]


COLS = Columns()

# Street connectivity: raw tract metric -> county average stem
CONNECTIVITY_METRICS: Dict[str, str] = {
    "N_REALNODES": "avg_real_nodes",
    "STRNETDENSITY": "avg_network_density",
    "CONNODERATIO": "avg_con_node_ratio",
    "BLOCKDENSITY": "avg_block_density",
}


def connectivity_columns(year: int) -> List[str]:
    return [f"{stem}_{year}" for stem in CONNECTIVITY_METRICS.values()]


@dataclass(frozen=True)
class SourceSchema:
    name: str
    key_col: str
    key_width: int = 5
    required: List[str] = field(default_factory=list)
    renames: Dict[str, str] = field(default_factory=dict)
    drop: List[str] = field(default_factory=list)
    min_year: Optional[int] = None
    # raw measure column -> county average column
    measures: Dict[str, str] = field(default_factory=dict)


TURNOUT = SourceSchema(
    name="turnout",
    key_col="STCOFIPS",
    required=["STCOFIPS", COLS.year, COLS.reg_turnout],
    min_year=2016,
)

# Tract urbanicity measures averaged to counties. Coded fields in the same
# file (RUCA codes, YEAR) are left out.
URBANICITY_MEASURES: Dict[str, str] = {
    "URBAN_PCT": "avg_urban_pct",
    "POPDEN": "avg_pop_density",
}

URBANICITY = SourceSchema(
    name="urbanicity",
    key_col="TRACT_FIPS10",
    key_width=11,
    required=["TRACT_FIPS10", *URBANICITY_MEASURES],
    measures=URBANICITY_MEASURES,
)

CONNECTIVITY_2010 = SourceSchema(
    name="connectivity_2010",
    key_col="TRACT_FIPS10",
    key_width=11,
    required=["TRACT_FIPS10", *CONNECTIVITY_METRICS],
)

CONNECTIVITY_2020 = SourceSchema(
    name="connectivity_2020",
    key_col="TRACT_FIPS20",
    key_width=11,
    required=["TRACT_FIPS20", *CONNECTIVITY_METRICS],
)

# Header names are copied verbatim from the workbook, trailing spaces included.
COUNTY_BASELINE_RENAMES: Dict[str, str] = {
    "State": COLS.state,
    "County": COLS.county,
    "Type of County": COLS.typology_2018,
    "2023 Typology": COLS.typology_2023,
    "Largest City/Town": COLS.largest_city,
    "% Population increase since 2010": COLS.pop_change,
    "% Urban": COLS.pct_urban,
    "% Rural": COLS.pct_rural,
    "Biden ": COLS.biden_2020,
    "Trump": COLS.trump_2020,
    "Total ": COLS.total_2020,
    "Obama % 2012": COLS.obama_pct_2012,
    "Romney % 2012": COLS.romney_pct_2012,
    "Clinton % 2016": COLS.clinton_pct_2016,
    "Trump % 2016": COLS.trump_pct_2016,
    "Other % 2016": COLS.other_pct_2016,
    "Clinton 2016": COLS.clinton_2016,
    "Trump 2016": COLS.trump_2016,
    "Total 2016": COLS.total_2016,
}

COUNTY_BASELINE = SourceSchema(
    name="county_baseline",
    key_col="FIPS",
    required=["FIPS", *COUNTY_BASELINE_RENAMES],
    renames=COUNTY_BASELINE_RENAMES,
    drop=["Metro Area", "County name"],
)

ANES_RESPONDENT_RENAMES: Dict[str, str] = {
    "VCF0004": "survey_year",
    "VCF0006": "respondent_id",
    "VCF0018a": "pre_lang",
    "VCF0018b": "post_lang",
    "VCF0101": "age",
    "VCF0102": "age_group",
    "VCF0104": "gender",
    "VCF0106": "race",
    "VCF0110": "education",
    "VCF0112": "region",
    "VCF0218": "religion",
    "VCF0303": "party_id",
    "VCF0342": "knowledge",
}

# VCF0202, VCF0211, VCF0212 and VCF0221 are kept under their codes.
ANES_IDEOLOGY_CODES: List[str] = [
    "VCF0004", "VCF0303", "VCF0106", "VCF0110", "VCF0731", "VCF0733",
    "VCF0616", "VCF0617", "VCF0618", "VCF0619", "VCF0620", "VCF0621",
    "VCF0803", "VCF0201", "VCF0202", "VCF0211", "VCF0212", "VCF0221",
    "VCF0218", "VCF0224", "VCF0222", "VCF0228",
]

ANES_IDEOLOGY_RENAMES: Dict[str, str] = {
    "VCF0004": "survey_year",
    "VCF0303": "party_id",
    "VCF0106": "race",
    "VCF0110": "education",
    "VCF0731": "discuss_pol",
    "VCF0733": "freq_discuss",
    "VCF0616": "care_outcome",
    "VCF0617": "party_cant_win",
    "VCF0618": "local_election",
    "VCF0619": "trust",
    "VCF0620": "helpful",
    "VCF0621": "fair",
    "VCF0803": "self_id",
    "VCF0201": "dem_therm",
    "VCF0218": "dem_party_therm",
    "VCF0224": "gop_party_therm",
    "VCF0222": "parties_therm",
    "VCF0228": "congress_therm",
}

ANES_CODES: List[str] = list(dict.fromkeys([*ANES_RESPONDENT_RENAMES, *ANES_IDEOLOGY_CODES]))

# Analysis view layouts
PRESIDENTIAL_COLUMNS: List[str] = [*COLS.identity, *COLS.margins]

URBANICITY_COLUMNS: List[str] = [
    *COLS.identity,
    COLS.pct_urban,
    COLS.pct_rural,
    "avg_real_nodes_2010",
    "avg_real_nodes_2020",
    "avg_con_node_ratio_2010",
    "avg_con_node_ratio_2020",
    "avg_block_density_2010",
    "avg_block_density_2020",
    "avg_network_density_2010",
    "avg_network_density_2020",
    COLS.registered_turnout,
    *COLS.margins,
]

RECLASSIFICATION_COLUMNS: List[str] = [
    *COLS.identity,
    *COLS.margins,
    COLS.pct_urban,
    COLS.pct_rural,
    COLS.year,
    COLS.reg_turnout,
]
