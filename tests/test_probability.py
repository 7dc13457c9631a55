import logging

import pytest
from pydantic import ValidationError

from grc_riskmath.impact import IMPACT_CATALOG, calculate_impact, get_impact_description, impact_level_text
from grc_riskmath.models import ImpactFactors, ProbabilityCriterion, ProbabilityFactors, ProbabilityWeights
from grc_riskmath.probability import (
    FACTOR_CATALOG,
    FACTOR_KEYS,
    calculate_dynamic_probability,
    calculate_exposure_and_scope,
    calculate_probability,
    get_factor_description,
    probability_level_text,
)


def test_all_mid_factors_give_mid_probability():
    assert calculate_probability(ProbabilityFactors()) == 3


@pytest.mark.parametrize("key", FACTOR_KEYS)
def test_raising_one_factor_never_decreases(key):
    base = calculate_probability(ProbabilityFactors())
    raised = calculate_probability(ProbabilityFactors(**{key: 5}))
    assert raised >= base


@pytest.mark.parametrize("key", FACTOR_KEYS)
def test_lowering_one_factor_never_increases(key):
    base = calculate_probability(ProbabilityFactors())
    lowered = calculate_probability(ProbabilityFactors(**{key: 1}))
    assert lowered <= base


def test_extremes():
    assert calculate_probability(ProbabilityFactors(**{k: 1 for k in FACTOR_KEYS})) == 1
    assert calculate_probability(ProbabilityFactors(**{k: 5 for k in FACTOR_KEYS})) == 5


def test_weighted_result():
    factors = ProbabilityFactors(frequency_occurrence=5, complexity=5)
    # 5*25 + 3*25 + 5*20 + 3*15 + 3*15 = 390 -> 3.9
    assert calculate_probability(factors) == 4


def test_custom_weights_are_normalised():
    factors = ProbabilityFactors(frequency_occurrence=5, vulnerabilities=1)
    weights = ProbabilityWeights(frequency=1, exposure_and_scope=0, complexity=0, change_volatility=0, vulnerabilities=0)
    assert calculate_probability(factors, weights) == 5


def test_weights_must_be_finite():
    with pytest.raises(ValidationError):
        ProbabilityWeights(frequency=float("inf"))
    with pytest.raises(ValidationError):
        ProbabilityWeights(complexity=float("nan"))
    assert ProbabilityWeights(vulnerabilities=-5).vulnerabilities == 0


def test_zero_weights_fall_back(caplog):
    weights = ProbabilityWeights(frequency=0, exposure_and_scope=0, complexity=0, change_volatility=0, vulnerabilities=0)
    with caplog.at_level(logging.WARNING):
        assert calculate_probability(ProbabilityFactors(frequency_occurrence=5), weights) == 3
    assert "Probability weights" in caplog.text


def test_factors_are_clamped():
    factors = ProbabilityFactors(frequency_occurrence=9, complexity=-2)
    assert factors.frequency_occurrence == 5
    assert factors.complexity == 1


def test_factors_accept_camel_case():
    factors = ProbabilityFactors(**{"frequencyOccurrence": 5, "exposureCriticalPath": 4})
    assert factors.frequency_occurrence == 5
    assert factors.exposure_critical_path == 4


def test_exposure_and_scope():
    assert calculate_exposure_and_scope(1, 2, 2) == 2
    assert calculate_exposure_and_scope(3, 4, 4) == 4
    assert calculate_exposure_and_scope(5, 5, 4) == 5


def test_catalog_has_five_levels_per_factor():
    assert set(FACTOR_CATALOG) == set(FACTOR_KEYS)
    for entry in FACTOR_CATALOG.values():
        assert len(entry["descriptions"]) == 5


def test_descriptions():
    assert get_factor_description("frequency_occurrence", 1) == "Casi nunca (Anual o menos)"
    assert get_factor_description("frequency_occurrence", 6) == "Desconocido"
    assert get_factor_description("nope", 1) == "Desconocido"
    assert probability_level_text(5) == "Muy Alta"


class TestDynamicProbability:
    def criteria(self):
        return [
            ProbabilityCriterion(id="1", name="Frecuencia", field_name="frequency", weight=50, order=1),
            ProbabilityCriterion(id="2", name="Exposición", field_name="exposure", weight=30, order=2),
            ProbabilityCriterion(id="3", name="Complejidad", field_name="complexity", weight=20, order=3),
            ProbabilityCriterion(id="4", name="Inactivo", field_name="legacy", weight=40, order=4, is_active=False),
        ]

    def test_weighted(self):
        factors = {"frequency": 5, "exposure": 3, "complexity": 1}
        # 2.5 + 0.9 + 0.2 = 3.6
        assert calculate_dynamic_probability(factors, self.criteria()) == 4

    def test_no_criteria(self, caplog):
        with caplog.at_level(logging.WARNING):
            assert calculate_dynamic_probability({"frequency": 5}, []) == 3
        assert "No active criteria" in caplog.text

    def test_missing_factor_renormalises(self):
        factors = {"frequency": 5, "exposure": 5}
        assert calculate_dynamic_probability(factors, self.criteria()) == 5

    def test_unnormalised_weights(self, caplog):
        criteria = [
            ProbabilityCriterion(id="1", name="A", field_name="a", weight=1),
            ProbabilityCriterion(id="2", name="B", field_name="b", weight=1),
        ]
        with caplog.at_level(logging.WARNING):
            assert calculate_dynamic_probability({"a": 2, "b": 4}, criteria) == 3
        assert "Normalizing weights" in caplog.text


class TestImpact:
    def test_impact_is_maximum(self):
        assert calculate_impact(ImpactFactors()) == 1
        assert calculate_impact(ImpactFactors(economic=4, people=2)) == 4

    def test_impact_clamped(self):
        assert calculate_impact(ImpactFactors(reputation=11)) == 5

    def test_impact_catalog(self):
        assert len(IMPACT_CATALOG) == 7
        assert get_impact_description("people", 5) == "Fatalidad de una o más personas"
        assert get_impact_description("people", 0) == "Desconocido"
        assert impact_level_text(3) == "Medio"
