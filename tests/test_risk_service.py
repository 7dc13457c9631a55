import pandas as pd
import pytest

from grc_riskmath.helpers import build_record
from grc_riskmath.models import RiskLevelRanges
from grc_riskmath.services.risk_service import assess_risk, risks_by, score_risk, top_risks


def test_assess_risk_from_factors():
    result = assess_risk({
        "probability_factors": {"frequency_occurrence": 5, "complexity": 5},
        "impact_factors": {"economic": 5, "people": 2},
        "control_effectiveness": [0.5],
    })
    assert result["probability"] == 4
    assert result["impact"] == 5
    assert result["inherent_risk"] == 20
    assert result["residual_risk"] == 10
    assert result["inherent_level"] == "Crítico"
    assert result["residual_level"] == "Medio"


def test_assess_risk_from_direct_ratings():
    result = assess_risk({"probability": 2, "impact": 3})
    assert result["inherent_risk"] == 6
    assert result["combined_effectiveness"] == 0
    assert result["residual_risk"] == 6
    assert result["residual_color"] == "#22c55e"


def test_assess_risk_custom_ranges():
    result = assess_risk({"probability": 2, "impact": 3}, ranges=RiskLevelRanges(low_max=4, medium_max=8, high_max=16))
    assert result["inherent_level"] == "Medio"


def test_score_risk():
    assert score_risk({"probability": 4, "impact": 5, "control_effectiveness": [0.5, 0.5]}) == pytest.approx(5)
    assert score_risk({"probability": 3, "impact": 3}) == 9


@pytest.fixture
def register():
    return pd.DataFrame([
        build_record("R-1", "Uno", 5, 5, [0.2], owner="Ana", process="Compras"),
        build_record("R-2", "Dos", 2, 2, owner="Luis", process="Compras"),
        build_record("R-3", "Tres", 4, 4, owner="Ana", process="Ventas"),
        build_record("R-4", "Cuatro", 3, 5, [0.9], owner=None, process="Ventas"),
    ])


def test_top_risks(register):
    top = top_risks(register, n=2)
    assert list(top["code"]) == ["R-1", "R-3"]
    assert "_score" not in top.columns


def test_top_risks_empty():
    assert top_risks(pd.DataFrame()).empty


def test_risks_by_owner(register):
    grouped = risks_by(register, "owner")
    ana = grouped[grouped["owner"] == "Ana"].iloc[0]
    assert ana["count"] == 2
    assert ana["max_residual_risk"] == 20
    assert "Sin asignar" in set(grouped["owner"])
    assert grouped.iloc[0]["owner"] == "Ana"


def test_risks_by_empty():
    assert list(risks_by(pd.DataFrame(), "process").columns) == [
        "process", "count", "avg_residual_risk", "max_residual_risk"
    ]
