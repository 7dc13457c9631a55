"""
models.py

Data models for the GRC risk math package: risk level ranges and bands,
controls, heatmap items and cells, and the probability / impact factor
records captured by the factor wheels.

JSON field names are camelCase; snake_case attribute names are accepted too.
"""

import math
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator, model_validator
from pydantic.alias_generators import to_camel

EffectTarget = Literal["probability", "impact", "both"]
HeatmapMode = Literal["inherent", "residual"]


def clamp_level(value, default: int = 3) -> int:
    """Round a rating and keep it inside the 1-5 scale."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(number):
        return default
    return max(1, min(5, int(math.floor(number + 0.5))))


def clamp_fraction(value) -> float:
    """Keep an effectiveness value inside [0, 1]; bad input counts as 0."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number):
        return 0.0
    return max(0.0, min(1.0, number))


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RiskLevelRanges(CamelModel):
    """Upper bounds of the Bajo, Medio and Alto bands. Anything above is Crítico."""

    low_max: float = 6
    medium_max: float = 12
    high_max: float = 19

    @model_validator(mode="after")
    def check_order(self):
        if not (self.low_max < self.medium_max < self.high_max):
            raise ValueError("risk level ranges must satisfy low_max < medium_max < high_max")
        return self


class RiskBand(CamelModel):
    level: int
    label: str
    min: float
    max: float
    color: str


class Control(CamelModel):
    effectiveness: float = 0.0
    effect_target: EffectTarget = "both"

    @field_validator("effectiveness", mode="before")
    @classmethod
    def _clamp_effectiveness(cls, value):
        return clamp_fraction(value)


class RiskCellItem(CamelModel):
    """One risk as plotted on the heatmap."""

    id: str
    code: str
    name: str = ""
    probability: int = 1
    impact: int = 1
    control_effectiveness: List[float] = Field(default_factory=list)
    controls: Optional[List[Control]] = None
    residual_probability: Optional[float] = None
    residual_impact: Optional[float] = None

    @field_validator("probability", "impact", mode="before")
    @classmethod
    def _clamp_rating(cls, value):
        return clamp_level(value, default=1)

    @field_validator("control_effectiveness", mode="before")
    @classmethod
    def _clamp_effectivenesses(cls, value):
        if value is None:
            return []
        return [clamp_fraction(v) for v in value]

    @computed_field(alias="inherentRisk")
    @property
    def inherent_risk(self) -> int:
        return self.probability * self.impact


class ProbabilityFactors(CamelModel):
    """The seven qualitative ratings of the probability wheel."""

    frequency_occurrence: int = 3
    exposure_volume: int = 3
    exposure_massivity: int = 3
    exposure_critical_path: int = 3
    complexity: int = 3
    change_volatility: int = 3
    vulnerabilities: int = 3

    @field_validator("*", mode="before")
    @classmethod
    def _clamp(cls, value):
        return clamp_level(value)


class ProbabilityWeights(CamelModel):
    """Percentage weights of the five probability components."""

    frequency: float = 25
    exposure_and_scope: float = 25
    complexity: float = 20
    change_volatility: float = 15
    vulnerabilities: float = 15

    @field_validator("*", mode="before")
    @classmethod
    def _non_negative(cls, value):
        number = float(value)
        if not math.isfinite(number):
            raise ValueError("probability weights must be finite")
        return max(0.0, number)


class ProbabilityCriterion(CamelModel):
    id: str
    name: str
    field_name: str
    description: Optional[str] = None
    weight: float
    order: int = 0
    is_active: bool = True


class ImpactFactors(CamelModel):
    """The seven impact dimensions of the impact wheel."""

    infrastructure: int = 1
    reputation: int = 1
    economic: int = 1
    permits: int = 1
    knowhow: int = 1
    people: int = 1
    information: int = 1

    @field_validator("*", mode="before")
    @classmethod
    def _clamp(cls, value):
        return clamp_level(value, default=1)


class HeatmapCell(CamelModel):
    probability: int
    impact: int
    count: int = 0
    score: float
    label: str
    color: str
    risks: List[RiskCellItem] = Field(default_factory=list)
    top_codes: List[str] = Field(default_factory=list)


class WheelSegment(CamelModel):
    factor: str
    factor_index: int
    level: int
    path: str
    center_angle: float
    radius: float
    selected: bool = False
