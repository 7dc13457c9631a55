"""
Risk Service Module

Risk assessment and scoring on top of the risk math primitives, plus the
reporting views of the risk register (top risks, risks grouped by owner or
process).
"""

from typing import Dict, Optional

import pandas as pd

from ..impact import calculate_impact
from ..models import ImpactFactors, ProbabilityFactors, ProbabilityWeights, RiskLevelRanges, clamp_level
from ..probability import calculate_probability
from ..risk_math import classify, combine_controls, inherent, residual_from_controls


def assess_risk(
    parameters: Dict,
    ranges: Optional[RiskLevelRanges] = None,
    weights: Optional[ProbabilityWeights] = None,
    precision: int = 0,
) -> Dict:
    """
    Assess risk based on the provided parameters.

    Args:
        parameters (dict): either ``probability_factors`` / ``impact_factors``
            (dicts of 1-5 ratings) or direct ``probability`` / ``impact``
            ratings, plus an optional ``control_effectiveness`` list.

    Returns:
        dict: probability, impact, inherent and residual scores with their
        bands, and the combined control effectiveness.
    """
    if parameters.get("probability_factors") is not None:
        probability = calculate_probability(ProbabilityFactors(**parameters["probability_factors"]), weights)
    else:
        probability = clamp_level(parameters.get("probability"))

    if parameters.get("impact_factors") is not None:
        impact = calculate_impact(ImpactFactors(**parameters["impact_factors"]))
    else:
        impact = clamp_level(parameters.get("impact"))

    inherent_score = inherent(probability, impact)
    combined = combine_controls(parameters.get("control_effectiveness"))
    residual = residual_from_controls(inherent_score, combined, precision)
    inherent_band = classify(inherent_score, ranges)
    residual_band = classify(residual, ranges)
    return {
        "probability": probability,
        "impact": impact,
        "inherent_risk": inherent_score,
        "combined_effectiveness": combined,
        "residual_risk": residual,
        "inherent_level": inherent_band.label,
        "inherent_color": inherent_band.color,
        "residual_level": residual_band.label,
        "residual_color": residual_band.color,
    }


def score_risk(risk_data: Dict) -> float:
    """
    Score the risk based on the provided risk data.

    Args:
        risk_data (dict): a record with ``probability``, ``impact`` and an
            optional ``control_effectiveness`` list.

    Returns:
        float: the residual risk score.
    """
    inherent_score = inherent(risk_data.get("probability"), risk_data.get("impact"))
    return residual_from_controls(inherent_score, combine_controls(risk_data.get("control_effectiveness")))


def top_risks(df: pd.DataFrame, n: int = 5, by: str = "residual_risk") -> pd.DataFrame:
    if df.empty:
        return df
    ordered = df.assign(_score=pd.to_numeric(df[by], errors="coerce")).sort_values(
        ["_score", "inherent_risk"], ascending=False, na_position="last"
    )
    return ordered.drop(columns="_score").head(n).reset_index(drop=True)


def risks_by(df: pd.DataFrame, column: str) -> pd.DataFrame:
    """Count and average residual risk per owner, process or any other column."""
    if df.empty:
        return pd.DataFrame(columns=[column, "count", "avg_residual_risk", "max_residual_risk"])
    residual = pd.to_numeric(df["residual_risk"], errors="coerce")
    grouped = (
        df.assign(residual_risk=residual, **{column: df[column].fillna("Sin asignar")})
        .groupby(column)["residual_risk"]
        .agg(count="count", avg_residual_risk="mean", max_residual_risk="max")
        .reset_index()
        .sort_values(["count", "avg_residual_risk"], ascending=False)
        .reset_index(drop=True)
    )
    return grouped
