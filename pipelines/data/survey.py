from __future__ import annotations

from typing import Dict

import pandas as pd

from .schema import (
    ANES_IDEOLOGY_CODES,
    ANES_IDEOLOGY_RENAMES,
    ANES_RESPONDENT_RENAMES,
    require_columns,
)


def respondent_profile(anes: pd.DataFrame) -> pd.DataFrame:
    """Demographics per respondent-year under readable names."""
    codes = list(ANES_RESPONDENT_RENAMES)
    require_columns(anes, codes, "anes respondents")
    return anes[codes].rename(columns=ANES_RESPONDENT_RENAMES).reset_index(drop=True)


def political_ideology(anes: pd.DataFrame) -> pd.DataFrame:
    require_columns(anes, ANES_IDEOLOGY_CODES, "anes ideology")
    return anes[ANES_IDEOLOGY_CODES].rename(columns=ANES_IDEOLOGY_RENAMES).reset_index(drop=True)


def survey_views(anes: pd.DataFrame) -> Dict[str, pd.DataFrame]:
    return {
        "anes_respondents": respondent_profile(anes),
        "anes_ideology": political_ideology(anes),
    }
