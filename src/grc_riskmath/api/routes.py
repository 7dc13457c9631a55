"""API routes for the GRC risk math service."""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import Field

from ..config import get_csv_file_path, get_probability_weights, get_risk_decimals, get_risk_level_ranges
from ..heatmap import build_grid
from ..helpers import build_record, df_to_cell_items, load_df, save_record
from ..impact import calculate_impact
from ..models import (
    CamelModel,
    HeatmapCell,
    HeatmapMode,
    ImpactFactors,
    ProbabilityFactors,
    ProbabilityWeights,
    RiskBand,
    RiskCellItem,
    RiskLevelRanges,
)
from ..probability import FACTOR_CATALOG, calculate_exposure_and_scope, calculate_probability
from ..risk_math import calculate_residual, classify
from ..services.risk_service import top_risks

router = APIRouter()


class RiskCreate(CamelModel):
    code: str
    name: str
    probability: int = Field(ge=1, le=5)
    impact: int = Field(ge=1, le=5)
    control_effectiveness: List[float] = Field(default_factory=list)
    description: str = ""
    owner: str = ""
    process: str = ""


class ScoreRequest(CamelModel):
    score: float


class ResidualRequest(CamelModel):
    probability: int
    impact: int
    control_effectiveness: List[float] = Field(default_factory=list)


class HeatmapRequest(CamelModel):
    risks: List[RiskCellItem] = Field(default_factory=list)
    mode: HeatmapMode = "inherent"


def _records(df) -> List[dict]:
    return df.astype(object).where(df.notna(), None).to_dict(orient="records")


@router.get("/risks")
async def get_risks(path: str = Depends(get_csv_file_path)):
    return _records(load_df(path))


@router.get("/risks/top")
async def get_top_risks(n: int = Query(5, ge=1, le=100), path: str = Depends(get_csv_file_path)):
    return _records(top_risks(load_df(path), n=n))


@router.get("/risks/{risk_id}")
async def get_risk(risk_id: str, path: str = Depends(get_csv_file_path)):
    df = load_df(path)
    match = df[df["risk_id"].astype(str) == risk_id]
    if match.empty:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Risk {risk_id} not found")
    return _records(match)[0]


@router.post("/risks", status_code=status.HTTP_201_CREATED)
async def create_risk(
    risk: RiskCreate,
    path: str = Depends(get_csv_file_path),
    ranges: RiskLevelRanges = Depends(get_risk_level_ranges),
    precision: int = Depends(get_risk_decimals),
):
    record = build_record(ranges=ranges, precision=precision, **risk.model_dump())
    save_record(record, path)
    return record


@router.get("/system-config/risk-level-ranges", response_model=RiskLevelRanges)
async def risk_level_ranges(ranges: RiskLevelRanges = Depends(get_risk_level_ranges)):
    return ranges


@router.post("/risk-math/classify", response_model=RiskBand)
async def classify_score(body: ScoreRequest, ranges: RiskLevelRanges = Depends(get_risk_level_ranges)):
    return classify(body.score, ranges)


@router.post("/risk-math/residual")
async def residual(
    body: ResidualRequest,
    ranges: RiskLevelRanges = Depends(get_risk_level_ranges),
    precision: int = Depends(get_risk_decimals),
):
    result = calculate_residual(body.probability, body.impact, body.control_effectiveness, precision)
    result["inherent_level"] = classify(result["inherent_score"], ranges).label
    result["residual_level"] = classify(result["residual_score"], ranges).label
    return result


@router.get("/probability/factors")
async def probability_factors():
    return FACTOR_CATALOG


@router.post("/probability/calculate")
async def probability(factors: ProbabilityFactors, weights: ProbabilityWeights = Depends(get_probability_weights)):
    return {
        "probability": calculate_probability(factors, weights),
        "exposure_and_scope": calculate_exposure_and_scope(
            factors.exposure_volume, factors.exposure_massivity, factors.exposure_critical_path
        ),
    }


@router.post("/impact/calculate")
async def impact(factors: ImpactFactors):
    return {"impact": calculate_impact(factors)}


@router.post("/heatmap", response_model=List[HeatmapCell])
async def heatmap(body: HeatmapRequest, ranges: RiskLevelRanges = Depends(get_risk_level_ranges)):
    return build_grid(body.risks, body.mode, ranges)


@router.get("/heatmap", response_model=List[HeatmapCell])
async def register_heatmap(
    mode: HeatmapMode = "inherent",
    path: str = Depends(get_csv_file_path),
    ranges: RiskLevelRanges = Depends(get_risk_level_ranges),
):
    return build_grid(df_to_cell_items(load_df(path)), mode, ranges)
