from typing import Dict, Iterable, Mapping

import pandas as pd
import statsmodels.formula.api as smf
from loguru import logger

from suburban_realignment.analysis.config import MODEL_SPECS, ModelSpec


def fit_models(views: Mapping[str, pd.DataFrame], specs: Iterable[ModelSpec] = MODEL_SPECS) -> Dict[str, object]:
    """
    Fit each registered OLS model against its named view.

    Rows with a missing outcome or regressor are dropped per model, so model
    sample sizes differ.
    """
    results = {}
    for spec in specs:
        if spec.view not in views:
            raise KeyError(f"Model {spec.name!r} needs view {spec.view!r}, which was not built.")
        df = views[spec.view]
        results[spec.name] = smf.ols(spec.formula, data=df, missing="drop").fit()
        logger.info(
            f"[OLS] {spec.name}: n={int(results[spec.name].nobs)} "
            f"r2={results[spec.name].rsquared:.3f}"
        )
    return results


def coefficient_table(results: Mapping[str, object]) -> pd.DataFrame:
    rows = []
    for name, res in results.items():
        for term in res.params.index:
            rows.append({
                "model": name,
                "term": term,
                "coef": float(res.params[term]),
                "std_err": float(res.bse[term]),
                "p_value": float(res.pvalues[term]),
                "r2": float(res.rsquared),
                "nobs": int(res.nobs),
            })
    return pd.DataFrame(rows, columns=["model", "term", "coef", "std_err", "p_value", "r2", "nobs"])


def render_summaries(results: Mapping[str, object], names: Iterable[str]) -> str:
    blocks = []
    for name in names:
        blocks.append(f"=== {name} ===\n{results[name].summary()}")
    return "\n\n".join(blocks)
