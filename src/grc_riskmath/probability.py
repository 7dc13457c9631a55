"""
Probability factor aggregation.

The probability wheel captures seven 1-5 ratings. The three exposure
ratings collapse into a single "exposure and scope" component, and the five
components are combined with percentage weights into a 1-5 probability.
"""

import logging
from typing import Dict, List, Mapping, Optional, Sequence

from .models import ProbabilityCriterion, ProbabilityFactors, ProbabilityWeights, clamp_level
from .risk_math import round_score

LOG = logging.getLogger("grc_riskmath.probability")

DEFAULT_PROBABILITY = 3

FACTOR_KEYS = (
    "frequency_occurrence",
    "exposure_volume",
    "exposure_massivity",
    "exposure_critical_path",
    "complexity",
    "change_volatility",
    "vulnerabilities",
)

FACTOR_CATALOG: Dict[str, Dict] = {
    "frequency_occurrence": {
        "name": "Frecuencia de ocurrencia",
        "short_name": "Frecuencia",
        "descriptions": [
            "Casi nunca (Anual o menos)",
            "Improbable (Mensual)",
            "Moderado (Semanal)",
            "Probable (Diario)",
            "Casi cierto (Varias veces al día)",
        ],
    },
    "exposure_volume": {
        "name": "Exposición volumen/valor",
        "short_name": "Exposición Vol.",
        "descriptions": ["Bajo", "Bajo/Moderado", "Moderado", "Moderado/Alto", "Alto"],
    },
    "exposure_massivity": {
        "name": "Masividad personas/áreas",
        "short_name": "Masividad",
        "descriptions": ["1 persona", "2-5 personas", "1 área", "2-3 áreas", "≥4 áreas/organización"],
    },
    "exposure_critical_path": {
        "name": "Ruta crítica Core/Soporte",
        "short_name": "Ruta Crítica",
        "descriptions": [
            "Soporte no crítico",
            "Soporte relevante",
            "Mixto (Soporte/Core)",
            "Core relevante",
            "Core crítico",
        ],
    },
    "complexity": {
        "name": "Complejidad e interdependencias",
        "short_name": "Complejidad",
        "descriptions": [
            "1 sistema, 0 integraciones, sin terceros, ≥80% automatizado",
            "2 sistemas, 1 integración, 1 tercero no crítico",
            "3-4 sistemas, 2-3 integraciones, 1-2 terceros, 40-60% manual",
            "≥5 sistemas, ≥4 integraciones, ≥2 terceros críticos, 60-80% manual",
            "≥7 sistemas, múltiples terceros críticos, alta manualidad",
        ],
    },
    "change_volatility": {
        "name": "Cambio/volatilidad y proximidad",
        "short_name": "Volatilidad",
        "descriptions": [
            "Entorno estable; ≤1 cambio/año; ocurrencia >24 meses",
            "2-3 cambios/año; 12-24 meses",
            "Cambios trimestrales; 3-12 meses",
            "Cambios mensuales; 1-3 meses",
            "Cambios semanales; <1 mes",
        ],
    },
    "vulnerabilities": {
        "name": "Vulnerabilidades/predisposiciones",
        "short_name": "Vulnerabilidades",
        "descriptions": [
            "Sin vulnerabilidades; tecnología al día; SoD completa; rotación <5%",
            "1 vulnerabilidad menor; rotación 5-10%",
            "2-3 vulnerabilidades moderadas; rotación 10-15%",
            "Vulnerabilidades graves; rotación 15-25%",
            "Críticas (obsolescencia severa, sin SoD, dependencia total)",
        ],
    },
}

PROBABILITY_LEVEL_TEXT = ("Muy Baja", "Baja", "Media", "Alta", "Muy Alta")


def get_factor_description(key: str, level: int) -> str:
    """Tooltip text for one level of one factor."""
    entry = FACTOR_CATALOG.get(key)
    if entry is None or level not in range(1, 6):
        return "Desconocido"
    return entry["descriptions"][level - 1]


def probability_level_text(level: int) -> str:
    if level not in range(1, 6):
        return "Media"
    return PROBABILITY_LEVEL_TEXT[level - 1]


def calculate_exposure_and_scope(exposure_volume, exposure_massivity, exposure_critical_path) -> int:
    """Rounded mean of the three exposure ratings."""
    total = clamp_level(exposure_volume) + clamp_level(exposure_massivity) + clamp_level(exposure_critical_path)
    return int(round_score(total / 3))


def calculate_probability(factors: ProbabilityFactors, weights: Optional[ProbabilityWeights] = None) -> int:
    """
    Weighted average of the probability components, banded back to 1-5.

    Args:
        factors: the seven factor ratings.
        weights: percentage weights. Defaults to 25/25/20/15/15. Weights that
            do not add up to 100 are normalised by their total.

    Returns:
        int: probability between 1 and 5.
    """
    weights = weights or ProbabilityWeights()
    exposure_and_scope = calculate_exposure_and_scope(
        factors.exposure_volume, factors.exposure_massivity, factors.exposure_critical_path
    )
    components = [
        (factors.frequency_occurrence, weights.frequency),
        (exposure_and_scope, weights.exposure_and_scope),
        (factors.complexity, weights.complexity),
        (factors.change_volatility, weights.change_volatility),
        (factors.vulnerabilities, weights.vulnerabilities),
    ]
    total_weight = sum(w for _, w in components)
    if total_weight <= 0:
        LOG.warning("Probability weights add up to %s; using default probability", total_weight)
        return DEFAULT_PROBABILITY

    weighted = sum(value * weight for value, weight in components) / total_weight
    return max(1, min(5, int(round_score(weighted))))


def calculate_dynamic_probability(factors: Mapping[str, int], criteria: Sequence[ProbabilityCriterion]) -> int:
    """Probability from a configurable list of weighted criteria."""
    active: List[ProbabilityCriterion] = sorted((c for c in criteria if c.is_active), key=lambda c: c.order)
    if not active:
        LOG.warning("No active criteria found for probability calculation")
        return DEFAULT_PROBABILITY

    total_weight = sum(c.weight for c in active)
    if total_weight <= 0:
        LOG.warning("Active criteria have no weight; using default probability")
        return DEFAULT_PROBABILITY
    if total_weight != 100:
        LOG.warning("Total weight is %s, expected 100. Normalizing weights.", total_weight)

    weighted_sum = 0.0
    used_weight = 0.0
    for criterion in active:
        value = factors.get(criterion.field_name)
        if value is None:
            LOG.warning("Missing factor value for criterion: %s", criterion.field_name)
            continue
        normalized = criterion.weight / total_weight * 100
        weighted_sum += clamp_level(value) * normalized / 100
        used_weight += normalized

    if used_weight == 0:
        return DEFAULT_PROBABILITY
    if used_weight != 100:
        weighted_sum = weighted_sum / used_weight * 100

    return max(1, min(5, int(round_score(weighted_sum))))
