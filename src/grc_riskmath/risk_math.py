"""
Risk Math Module

Inherent and residual risk scoring, control-effectiveness combination and
classification of scores into the Bajo / Medio / Alto / Crítico bands.

Every function here is pure. Out-of-range input is clamped instead of
raising, so a bad record never breaks a table or a chart.
"""

import math
from typing import Dict, Iterable, List, Optional, Sequence

from .models import Control, RiskBand, RiskLevelRanges, clamp_fraction, clamp_level

MAX_SCORE = 25
MIN_RESIDUAL_AXIS = 0.1

DEFAULT_RANGES = RiskLevelRanges()

BAND_LABELS = ("Bajo", "Medio", "Alto", "Crítico")
BAND_COLORS = ("#22c55e", "#eab308", "#f97316", "#ef4444")


def round_score(value: float, precision: int = 0) -> float:
    """Round half away from zero (for non-negative scores, half-up)."""
    factor = 10 ** max(0, int(precision))
    return math.floor(value * factor + 0.5) / factor


def _to_number(value, default: float = 0.0) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return default if math.isnan(number) else number


def get_bands(ranges: Optional[RiskLevelRanges] = None) -> List[RiskBand]:
    ranges = ranges or DEFAULT_RANGES
    bounds = [
        (1, ranges.low_max),
        (ranges.low_max + 1, ranges.medium_max),
        (ranges.medium_max + 1, ranges.high_max),
        (ranges.high_max + 1, max(MAX_SCORE, ranges.high_max + 1)),
    ]
    return [
        RiskBand(level=i + 1, label=BAND_LABELS[i], min=lo, max=hi, color=BAND_COLORS[i])
        for i, (lo, hi) in enumerate(bounds)
    ]


def risk_level(score, ranges: Optional[RiskLevelRanges] = None) -> int:
    """Ordinal level 1-4 of a score. Missing scores are level 1."""
    ranges = ranges or DEFAULT_RANGES
    value = _to_number(score)
    if value <= ranges.low_max:
        return 1
    if value <= ranges.medium_max:
        return 2
    if value <= ranges.high_max:
        return 3
    return 4


def classify(score, ranges: Optional[RiskLevelRanges] = None) -> RiskBand:
    """Map a score onto its band (label and color)."""
    return get_bands(ranges)[risk_level(score, ranges) - 1]


def risk_level_text(score, ranges: Optional[RiskLevelRanges] = None) -> str:
    return classify(score, ranges).label


def color_for(score, ranges: Optional[RiskLevelRanges] = None) -> str:
    return classify(score, ranges).color


def inherent(probability, impact) -> int:
    """Probability x impact, both kept on the 1-5 scale."""
    return clamp_level(probability, default=1) * clamp_level(impact, default=1)


def combine_controls(
    effectivenesses: Optional[Iterable] = None,
    mode: str = "compound",
    max_effectiveness: float = 1.0,
) -> float:
    """
    Combine the mitigation of several independent controls.

    ``compound`` mode gives 1 - prod(1 - e_i); ``sum`` mode adds the
    effectivenesses. Either result is capped at ``max_effectiveness``.

    Args:
        effectivenesses: fractions in [0, 1]. Values outside are clamped and
            non-numeric entries are ignored.
        mode: "compound" or "sum".
        max_effectiveness: upper cap on the combined value.

    Returns:
        float: combined mitigation fraction in [0, 1].
    """
    if effectivenesses is None:
        return 0.0
    normalized = []
    for value in effectivenesses:
        number = _to_number(value, default=float("nan"))
        if math.isnan(number):
            continue
        normalized.append(clamp_fraction(number))
    if not normalized:
        return 0.0

    if mode == "sum":
        combined = sum(normalized)
    else:
        combined = 1 - math.prod(1 - e for e in normalized)
    return clamp_fraction(min(combined, clamp_fraction(max_effectiveness)))


def residual_from_controls(inherent_score, combined_effectiveness, precision: Optional[int] = None) -> float:
    """Inherent score reduced by the combined control effectiveness, kept in [0, 25]."""
    score = max(0.0, min(float(MAX_SCORE), _to_number(inherent_score)))
    residual = score * (1 - clamp_fraction(combined_effectiveness))
    residual = max(0.0, min(float(MAX_SCORE), residual))
    if precision is None:
        return residual
    return round_score(residual, precision)


def _residual_axis(value, controls: Optional[Sequence[Control]], target: str) -> float:
    applicable = [c for c in (controls or []) if c.effect_target in (target, "both")]
    if not applicable:
        return float(value)
    residual = float(value)
    for control in applicable:
        residual *= 1 - control.effectiveness
    return max(MIN_RESIDUAL_AXIS, min(5.0, round_score(residual, 1)))


def residual_probability(probability, controls: Optional[Sequence[Control]]) -> float:
    """Probability after the controls that act on probability (or both)."""
    return _residual_axis(probability, controls, "probability")


def residual_impact(impact, controls: Optional[Sequence[Control]]) -> float:
    """Impact after the controls that act on impact (or both)."""
    return _residual_axis(impact, controls, "impact")


def residual_risk_from_controls(probability, impact, controls: Optional[Sequence[Control]]) -> float:
    rp = residual_probability(probability, controls)
    ri = residual_impact(impact, controls)
    return max(MIN_RESIDUAL_AXIS, round_score(rp * ri, 1))


def weighted_average(values: Sequence[float], weights: Sequence[float], precision: int = 0) -> float:
    if len(values) != len(weights):
        raise ValueError("values and weights must have the same length")
    total = sum(weights)
    if total == 0:
        return 0
    return round_score(sum(v * w for v, w in zip(values, weights)) / total, precision)


def calculate_residual(probability, impact, effectivenesses: Optional[Iterable] = None, precision: Optional[int] = None) -> Dict[str, float]:
    """Inherent score, residual score and the effectiveness reduction for one risk."""
    inherent_score = inherent(probability, impact)
    combined = combine_controls(effectivenesses)
    return {
        "inherent_score": inherent_score,
        "residual_score": residual_from_controls(inherent_score, combined, precision),
        "effectiveness_reduction": combined,
    }
