from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

import pandas as pd


@dataclass(frozen=True)
class SourcePaths:
    turnout: Path
    connectivity_2010: Path
    connectivity_2020: Path
    county_baseline: Path
    urbanicity: Optional[Path] = None
    survey: Optional[Path] = None


@dataclass
class PipelineContext:
    """Every table one run produces, handed from stage to stage."""

    # normalized sources
    turnout: Optional[pd.DataFrame] = None
    urbanicity: Optional[pd.DataFrame] = None
    connectivity_2010: Optional[pd.DataFrame] = None
    connectivity_2020: Optional[pd.DataFrame] = None
    county_baseline: Optional[pd.DataFrame] = None
    survey: Optional[pd.DataFrame] = None

    # county aggregates
    connectivity_avg_2010: Optional[pd.DataFrame] = None
    connectivity_avg_2020: Optional[pd.DataFrame] = None
    urbanicity_avg: Optional[pd.DataFrame] = None

    merged: Optional[pd.DataFrame] = None
    derived: Optional[pd.DataFrame] = None

    views: Dict[str, pd.DataFrame] = field(default_factory=dict)
    malformed_fips: Dict[str, List[str]] = field(default_factory=dict)

    def view(self, name: str) -> pd.DataFrame:
        try:
            return self.views[name]
        except KeyError:
            raise KeyError(f"No view named {name!r}; available: {sorted(self.views)}") from None
