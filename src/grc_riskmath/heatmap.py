import numpy as np
import pandas as pd
from typing import Dict, Iterable, List, Optional, Tuple

from .models import HeatmapCell, RiskCellItem, RiskLevelRanges, clamp_level
from .risk_math import (
    classify,
    combine_controls,
    residual_from_controls,
    residual_impact,
    residual_probability,
    residual_risk_from_controls,
)

MODES = ("inherent", "residual")
TOP_CODES = 10


def residual_coordinates(risk: RiskCellItem) -> Tuple[float, float]:
    """Unrounded residual probability and impact of a risk."""
    if risk.residual_probability is not None and risk.residual_impact is not None:
        return risk.residual_probability, risk.residual_impact
    if risk.controls:
        return residual_probability(risk.probability, risk.controls), residual_impact(risk.impact, risk.controls)
    # Plain effectiveness lists act on probability.
    combined = combine_controls(risk.control_effectiveness)
    return risk.probability * (1 - combined), float(risk.impact)


def residual_score(risk: RiskCellItem) -> float:
    if risk.residual_probability is not None and risk.residual_impact is not None:
        return risk.residual_probability * risk.residual_impact
    if risk.controls:
        return residual_risk_from_controls(risk.probability, risk.impact, risk.controls)
    return residual_from_controls(risk.inherent_risk, combine_controls(risk.control_effectiveness))


def cell_coordinates(risk: RiskCellItem, mode: str = "inherent") -> Tuple[int, int]:
    if mode == "inherent":
        return risk.probability, risk.impact
    probability, impact = residual_coordinates(risk)
    return clamp_level(probability, default=1), clamp_level(impact, default=1)


def build_grid(
    risks: Iterable[RiskCellItem],
    mode: str = "inherent",
    ranges: Optional[RiskLevelRanges] = None,
) -> List[HeatmapCell]:
    """Group risks into the 25 cells of the 5x5 probability/impact grid."""
    if mode not in MODES:
        raise ValueError(f"unknown heatmap mode: {mode!r}")

    cells: Dict[Tuple[int, int], HeatmapCell] = {}
    for p in range(1, 6):
        for i in range(1, 6):
            band = classify(p * i, ranges)
            cells[(p, i)] = HeatmapCell(
                probability=p, impact=i, score=p * i, label=band.label, color=band.color
            )

    for risk in risks:
        cell = cells[cell_coordinates(risk, mode)]
        cell.count += 1
        cell.risks.append(risk)

    for cell in cells.values():
        cell.top_codes = [r.code for r in cell.risks[:TOP_CODES]]
        if mode == "residual" and cell.risks:
            score = sum(residual_score(r) for r in cell.risks) / len(cell.risks)
            band = classify(score, ranges)
            cell.score = score
            cell.label = band.label
            cell.color = band.color

    return list(cells.values())


def grid_matrix(cells: Iterable[HeatmapCell], value: str = "count") -> np.ndarray:
    """5x5 matrix of a cell attribute, impact 5 on the first row."""
    matrix = np.zeros((5, 5), dtype=int if value == "count" else float)
    for cell in cells:
        matrix[5 - cell.impact, cell.probability - 1] = getattr(cell, value)
    return matrix


def grid_frame(cells: Iterable[HeatmapCell]) -> pd.DataFrame:
    """Cells as a table, without the member lists."""
    columns = ["probability", "impact", "count", "score", "label", "color", "top_codes"]
    rows = [cell.model_dump(include=set(columns)) for cell in cells]
    return pd.DataFrame(rows, columns=columns)
