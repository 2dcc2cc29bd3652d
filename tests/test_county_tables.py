"""Tests for tract aggregation, the Fips merge, derived variables and views."""

from __future__ import annotations

from itertools import product

import numpy as np
import pandas as pd
import pytest

from pipelines.data.connectivity import aggregate_connectivity, aggregate_urbanicity, county_means
from pipelines.data.elections import (
    apply_renames,
    derive_county_variables,
    fix_typology_labels,
    vote_share,
)
from pipelines.data.merge import merge_county_tables, merge_on_fips
from pipelines.data.schema import CONNECTIVITY_2010, SchemaMismatch, connectivity_columns
from pipelines.data.sources import normalize_with_schema
from pipelines.data.survey import political_ideology, respondent_profile, survey_views
from pipelines.data.views import (
    build_views,
    double_flip_mask,
    flip_subsets,
    presidential_view,
    reclassification_view,
    triple_flip_mask,
    typology_subsets,
    urbanicity_view,
)


# -----------------------------
# Aggregation
# -----------------------------
def _tracts_2010() -> pd.DataFrame:
    raw = pd.DataFrame(
        {
            "TRACT_FIPS10": ["1001020100", "01001020200", "01001020300", "01003010100"],
            "N_REALNODES": [10, np.nan, 20, np.nan],
            "STRNETDENSITY": [1.0, 2.0, 3.0, 4.0],
            "CONNODERATIO": [0.5, 0.5, 0.8, np.nan],
            "BLOCKDENSITY": ["12", "x", "18", "30"],
        }
    )
    return normalize_with_schema(raw, CONNECTIVITY_2010)


def test_aggregate_connectivity_skips_nan_in_sum_and_count() -> None:
    out = aggregate_connectivity(_tracts_2010(), 2010).set_index("Fips")

    assert list(out.columns) == connectivity_columns(2010)
    assert out.loc["01001", "avg_real_nodes_2010"] == pytest.approx(15.0)
    assert out.loc["01001", "avg_network_density_2010"] == pytest.approx(2.0)
    assert out.loc["01001", "avg_con_node_ratio_2010"] == pytest.approx(0.6)
    # "x" coerces to NaN and drops out of the count
    assert out.loc["01001", "avg_block_density_2010"] == pytest.approx(15.0)
    assert np.isnan(out.loc["01003", "avg_real_nodes_2010"])
    assert np.isnan(out.loc["01003", "avg_con_node_ratio_2010"])


def test_aggregate_connectivity_keeps_every_county_once() -> None:
    tracts = _tracts_2010()

    out = aggregate_connectivity(tracts, 2010)

    assert sorted(out["Fips"]) == sorted(set(tracts["Fips"]))
    assert out["Fips"].is_unique


def test_county_means_missing_metric_is_schema_mismatch() -> None:
    tracts = pd.DataFrame({"Fips": ["01001"], "N_REALNODES": [1]})

    with pytest.raises(SchemaMismatch, match="BLOCKDENSITY"):
        county_means(tracts, {"N_REALNODES": "a", "BLOCKDENSITY": "b"})


def test_aggregate_urbanicity_averages_declared_measures_only() -> None:
    tracts = pd.DataFrame(
        {
            "Fips": ["01001", "01001", "01003"],
            "URBAN_PCT": [40.0, 60.0, 10.0],
            "POPDEN": [100.0, np.nan, 5.0],
            # coded fields come through SPSS as numbers and must not be averaged
            "RUCA1": [1, 10, 4],
            "YEAR": [2010, 2010, 2010],
        }
    )

    out = aggregate_urbanicity(tracts).set_index("Fips")

    assert list(out.columns) == ["avg_urban_pct", "avg_pop_density"]
    assert out.loc["01001", "avg_urban_pct"] == pytest.approx(50.0)
    assert out.loc["01001", "avg_pop_density"] == pytest.approx(100.0)


def test_aggregate_urbanicity_missing_measure_is_schema_mismatch() -> None:
    tracts = pd.DataFrame({"Fips": ["01001"], "URBAN_PCT": [40.0]})

    with pytest.raises(SchemaMismatch, match="POPDEN"):
        aggregate_urbanicity(tracts)


# -----------------------------
# Merge
# -----------------------------
def test_merge_on_fips_key_set_is_union_of_inputs() -> None:
    a = pd.DataFrame({"Fips": ["01001", "01003"], "a": [1, 2]})
    b = pd.DataFrame({"Fips": ["01003", "06037"], "b": [3, 4]})
    c = pd.DataFrame({"Fips": ["48201"], "c": [5]})

    out = merge_on_fips(a, b, c)

    assert set(out["Fips"]) == {"01001", "01003", "06037", "48201"}
    row = out.set_index("Fips").loc["06037"]
    assert pd.isna(row["a"]) and row["b"] == 4 and pd.isna(row["c"])


def test_merge_urbanicity_and_turnout_sources_gives_outer_rows() -> None:
    urbanicity = pd.DataFrame({"Fips": ["00001", "00002", "00003"], "URBAN_PCT": [10.0, 20.0, 30.0]})
    turnout = pd.DataFrame({"Fips": ["00001", "00004"], "YEAR": [2016, 2016], "REG_VOTER_TURNOUT_PCT": [50.0, 60.0]})
    empty = pd.DataFrame({"Fips": pd.Series([], dtype="string")})

    out = merge_county_tables(empty, turnout, empty, empty, urbanicity=urbanicity).set_index("Fips")

    assert len(out) == 4
    assert pd.isna(out.loc["00004", "URBAN_PCT"])
    assert pd.isna(out.loc["00002", "REG_VOTER_TURNOUT_PCT"])
    assert pd.isna(out.loc["00003", "YEAR"])
    assert out.loc["00001", "URBAN_PCT"] == 10.0


def test_merge_keeps_one_row_per_turnout_year() -> None:
    baseline = pd.DataFrame({"Fips": ["01001"], "State": ["AL"]})
    turnout = pd.DataFrame({"Fips": ["01001", "01001"], "YEAR": [2016, 2020]})

    out = merge_on_fips(baseline, turnout)

    assert len(out) == 2
    assert (out["State"] == "AL").all()


def test_merge_rejects_columns_carried_by_both_tables() -> None:
    turnout = pd.DataFrame(
        {"Fips": ["01001"], "YEAR": [2016], "REG_VOTER_TURNOUT_PCT": [55.0], "POPULATION": [58000]}
    )
    urbanicity = pd.DataFrame({"Fips": ["01001"], "POPULATION": [57000]})

    with pytest.raises(SchemaMismatch, match="POPULATION") as err:
        merge_on_fips(turnout, urbanicity)
    assert err.value.missing == ["POPULATION"]


def test_merge_county_tables_rejects_a_second_year_column() -> None:
    empty = pd.DataFrame({"Fips": pd.Series([], dtype="string")})
    turnout = pd.DataFrame({"Fips": ["01001"], "YEAR": [2016], "REG_VOTER_TURNOUT_PCT": [55.0]})
    urbanicity = pd.DataFrame({"Fips": ["01001"], "YEAR": [2010], "avg_urban_pct": [50.0]})

    with pytest.raises(SchemaMismatch, match="both sides.*YEAR"):
        merge_county_tables(empty, turnout, empty, empty, urbanicity=urbanicity)


def test_merge_requires_fips() -> None:
    with pytest.raises(SchemaMismatch, match="Fips"):
        merge_on_fips(pd.DataFrame({"Fips": ["01001"]}), pd.DataFrame({"FIPS": ["01001"]}))
    with pytest.raises(ValueError):
        merge_on_fips()


# -----------------------------
# Derived variables
# -----------------------------
def test_vote_share_is_percent_and_zero_total_is_nan() -> None:
    shares = vote_share(pd.Series([600, 5, 3]), pd.Series([1000, 0, np.nan]))

    assert shares.iloc[0] == 60.0
    assert np.isnan(shares.iloc[1])
    assert np.isnan(shares.iloc[2])


def test_derive_county_variables_shares_and_margins(merged_rows) -> None:
    merged = merged_rows(
        {},
        {"Fips": "01003", "Biden ": "n/a", "Total ": "0", "Obama % 2012": 0.40, "Romney % 2012": 0.58},
    )

    out = derive_county_variables(merged).set_index("Fips")

    first = out.loc["01001"]
    assert first["biden_share_2020"] == 60.0
    assert first["trump_share_2020"] == pytest.approx(35.0)
    assert first["margin_2020"] == pytest.approx(25.0)
    assert first["clinton_share_2016"] == pytest.approx(40.0)
    assert first["margin_2016"] == pytest.approx(-10.0)
    assert first["margin_2012"] == pytest.approx(10.0)

    second = out.loc["01003"]
    assert np.isnan(second["biden_2020"])
    assert np.isnan(second["biden_share_2020"])
    assert np.isnan(second["margin_2020"])
    assert second["margin_2012"] == pytest.approx(-18.0)
    assert out["biden_2020"].dtype == np.float64


def test_derive_county_variables_renames_and_drops_workbook_headers(merged_rows) -> None:
    out = derive_county_variables(merged_rows({}))

    assert "Metro Area" not in out.columns
    assert "County name" not in out.columns
    assert "Biden " not in out.columns
    for col in ("state", "county", "typology_2018", "typology_2023", "pop_change_2010_2018", "pct_urban"):
        assert col in out.columns
    # columns with no mapping pass through
    assert "YEAR" in out.columns and "REG_VOTER_TURNOUT_PCT" in out.columns


def test_derive_county_variables_missing_vote_column_is_schema_mismatch(merged_rows) -> None:
    merged = merged_rows({}).drop(columns=["Total 2016"])

    with pytest.raises(SchemaMismatch, match="total_2016"):
        derive_county_variables(merged)


def test_typology_fix_is_whole_value_only() -> None:
    labels = pd.Series(["Urban Burbs", "Urban Burbs District", "Exurbs", None], dtype=object)

    out = fix_typology_labels(labels)

    assert out.iloc[0] == "Urban Suburbs"
    assert out.iloc[1] == "Urban Burbs District"
    assert out.iloc[2] == "Exurbs"
    assert pd.isna(out.iloc[3])


def test_apply_renames_defaults_to_workbook_mapping() -> None:
    df = pd.DataFrame({"Type of County": ["Exurbs"], "Metro Area": ["x"], "Other": [1]})

    out = apply_renames(df)

    assert list(out.columns) == ["typology_2018", "Other"]


# -----------------------------
# Views
# -----------------------------
def test_flip_masks_follow_sign_pattern(margins_frame) -> None:
    df = margins_frame((-5, 5, -5), (-5, 5, 0), (5, -5, 5), (5, 5, 5), (np.nan, 5, -5), (-5, -5, 5))

    assert triple_flip_mask(df).tolist() == [True, False, True, False, False, False]
    assert double_flip_mask(df).tolist() == [True, True, True, False, True, True]


def test_double_flip_contains_every_triple_flip(margins_frame) -> None:
    values = [-5.0, 0.0, 5.0, np.nan]
    df = margins_frame(*product(values, repeat=3))

    triple = triple_flip_mask(df)
    double = double_flip_mask(df)

    assert triple.any()
    assert (~triple | double).all()


def test_flip_subsets_reclassified_is_subset_of_double(margins_frame) -> None:
    df = margins_frame((-5, 5, -5), (-5, 5, 10), (5, 5, 5))
    df.loc[1, "typology_2023"] = "Urban Suburbs"

    subsets = flip_subsets(df)

    assert subsets["triple_flip"]["Fips"].tolist() == ["00001"]
    assert subsets["double_flip"]["Fips"].tolist() == ["00001", "00002"]
    assert subsets["double_flip_reclassified"]["Fips"].tolist() == ["00002"]


def test_presidential_view_collapses_turnout_years(merged_rows) -> None:
    derived = derive_county_variables(merged_rows({"YEAR": 2016}, {"YEAR": 2020}, {"Fips": "01003"}))

    view = presidential_view(derived)

    assert view["Fips"].tolist() == ["01001", "01003"]
    assert list(view.columns) == [
        "Fips", "state", "county", "typology_2018", "typology_2023", "largest_city",
        "pop_change_2010_2018", "margin_2012", "margin_2016", "margin_2020",
    ]


def test_urbanicity_view_keeps_one_turnout_year(merged_rows) -> None:
    derived = derive_county_variables(
        merged_rows({"YEAR": 2016, "REG_VOTER_TURNOUT_PCT": 55.0}, {"YEAR": 2020, "REG_VOTER_TURNOUT_PCT": 70.0})
    )

    view = urbanicity_view(derived)

    assert len(view) == 1
    assert view.loc[0, "registered_turnout_pct"] == 55.0
    assert "YEAR" not in view.columns
    assert "avg_block_density_2020" in view.columns


def test_reclassification_view_needs_both_labels_to_differ(merged_rows) -> None:
    derived = derive_county_variables(
        merged_rows(
            {"Fips": "00001", "Type of County": "Exurbs", "2023 Typology": "Urban Burbs"},
            {"Fips": "00002", "Type of County": "Exurbs", "2023 Typology": "Exurbs"},
            {"Fips": "00003", "Type of County": None, "2023 Typology": "Exurbs"},
        )
    )

    view = reclassification_view(derived)

    assert view["Fips"].tolist() == ["00001"]
    assert view.loc[0, "typology_2023"] == "Urban Suburbs"
    assert "REG_VOTER_TURNOUT_PCT" in view.columns


def test_typology_subsets_split_on_label_and_winner(merged_rows) -> None:
    derived = derive_county_variables(
        merged_rows(
            {"Fips": "00001", "2023 Typology": "Urban Burbs", "Biden ": "300", "Trump": "600"},
            {"Fips": "00002", "2023 Typology": "Urban Suburbs"},
            {"Fips": "00003", "2023 Typology": "Exurbs"},
            {"Fips": "00004", "2023 Typology": "Exurbs", "Biden ": "100", "Trump": "800"},
            {"Fips": "00005", "2023 Typology": "Exurbs", "Biden ": "400", "Trump": "400"},
        )
    )

    subsets = typology_subsets(derived)

    assert subsets["suburb_gop"]["Fips"].tolist() == ["00001"]
    assert subsets["suburb_dem"]["Fips"].tolist() == ["00002"]
    assert subsets["exurb_dem"]["Fips"].tolist() == ["00003"]
    assert subsets["exurb_gop"]["Fips"].tolist() == ["00004"]


def test_build_views_names(merged_rows) -> None:
    views = build_views(derive_county_variables(merged_rows({})))

    assert set(views) == {
        "presidential", "urbanicity", "reclassification",
        "triple_flip", "double_flip", "double_flip_reclassified",
        "suburb_gop", "suburb_dem", "exurb_dem", "exurb_gop",
    }


# -----------------------------
# Survey
# -----------------------------
def _anes() -> pd.DataFrame:
    from pipelines.data.schema import ANES_CODES

    return pd.DataFrame({code: [i, i + 1] for i, code in enumerate(ANES_CODES)})


def test_respondent_profile_renames_codes() -> None:
    out = respondent_profile(_anes())

    assert list(out.columns)[:4] == ["survey_year", "respondent_id", "pre_lang", "post_lang"]
    assert "party_id" in out.columns and "knowledge" in out.columns


def test_political_ideology_keeps_unmapped_codes() -> None:
    out = political_ideology(_anes())

    assert len(out.columns) == 22
    for code in ("VCF0202", "VCF0211", "VCF0212", "VCF0221"):
        assert code in out.columns
    assert "congress_therm" in out.columns


def test_survey_views_require_codes() -> None:
    with pytest.raises(SchemaMismatch, match="VCF0342"):
        survey_views(_anes().drop(columns=["VCF0342"]))
