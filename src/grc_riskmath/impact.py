"""Impact factor aggregation: the worst of the seven impact dimensions."""

from typing import Dict

from .models import ImpactFactors

IMPACT_KEYS = ("infrastructure", "reputation", "economic", "permits", "knowhow", "people", "information")

IMPACT_CATALOG: Dict[str, Dict] = {
    "infrastructure": {
        "name": "Infraestructura",
        "descriptions": [
            "Zona/oficina: menos de 1 día de interrupción",
            "Zona/oficina: 1 día a menos de 1 semana de interrupción",
            "Zona/oficina: 1 semana o más de interrupción",
            "Operaciones de la compañía: 1 día a menos de 1 semana de interrupción",
            "Operaciones de la compañía: 1 semana o más de interrupción",
        ],
    },
    "reputation": {
        "name": "Reputación",
        "descriptions": [
            "Difusión a nivel interno (proceso, equipo de trabajo)",
            "Cobertura adversa puntual en medios a nivel local",
            "Cobertura adversa de amplia difusión en medios a nivel regional/nacional",
            "Cobertura nacional con pérdida grave de credibilidad de grupos de interés",
            "Cobertura adversa de amplia difusión en medios a nivel internacional",
        ],
    },
    "economic": {
        "name": "Económico",
        "descriptions": [
            "Pérdidas económicas menores $10M USD",
            "Pérdidas económicas entre $10M-$100M USD",
            "Pérdidas económicas entre $100M-$250M USD",
            "Pérdidas económicas entre $250M-$500M USD",
            "Pérdidas mayores a $500M USD",
        ],
    },
    "permits": {
        "name": "Permisos",
        "descriptions": [
            "Incumplimiento regulatorio que no implica sanciones",
            "Sanciones menores por incumplimiento contractual. Demandas laborales",
            "Sanciones por incumplimientos provenientes del ente regulador. Inspección del trabajo",
            "Cierre definitivo de planta o terminal marítimo. Prohibición de celebrar contratos con organismos del Estado",
            "Disolución de la persona jurídica. Multas máximas del tribunal de libre competencia",
        ],
    },
    "knowhow": {
        "name": "Knowhow",
        "descriptions": [
            "Ineficiencia administrativa por no disponer de tecnología o conocimientos requeridos",
            "Pérdida de tecnología crítica interna (requiere rediseño/implementación)",
            "Divulgación no autorizada de conocimiento o tecnología operacional a terceros",
            "Divulgación no autorizada de conocimiento o tecnología estratégica a terceros",
            "Divulgación no autorizada de conocimiento o tecnología crítica a terceros",
        ],
    },
    "people": {
        "name": "Personas",
        "descriptions": [
            "Primeros auxilios (atención primaria)",
            "Daño reversible en la salud con incapacidad temporal por menos de 15 días",
            "Daño reversible en la salud con incapacidad temporal por sobre 15 días",
            "Daño irreversible en la salud que provoque incapacidad permanente",
            "Fatalidad de una o más personas",
        ],
    },
    "information": {
        "name": "Información",
        "descriptions": [
            "Error en operaciones internas de algunas transacciones",
            "Filtración de información interna no relevante",
            "Filtración de información confidencial sin publicidad",
            "Filtración de información confidencial con publicidad",
            "Filtración de información 'Confidencial Externa' con/sin publicidad negativa",
        ],
    },
}

IMPACT_LEVEL_TEXT = ("Muy Bajo", "Bajo", "Medio", "Alto", "Muy Alto")


def calculate_impact(factors: ImpactFactors) -> int:
    """Impact is the highest level among the dimensions."""
    return max(getattr(factors, key) for key in IMPACT_KEYS)


def get_impact_description(key: str, level: int) -> str:
    entry = IMPACT_CATALOG.get(key)
    if entry is None or level not in range(1, 6):
        return "Desconocido"
    return entry["descriptions"][level - 1]


def impact_level_text(level: int) -> str:
    if level not in range(1, 6):
        return "Medio"
    return IMPACT_LEVEL_TEXT[level - 1]
