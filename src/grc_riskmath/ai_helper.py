import json
import logging
import random
from typing import Dict, List, Optional

from openai import OpenAI, OpenAIError

from .config import get_openai_api_key, get_openai_model

LOG = logging.getLogger("grc_riskmath.ai_helper")

# --- Fallback suggestions (used if AI API fails or for offline mode) ---
RISK_MITIGATION_SUGGESTIONS: Dict[str, List[str]] = {
    "fraude": [
        "Segregar funciones de aprobación, registro y custodia.",
        "Conciliar diariamente las cuentas de alto movimiento.",
        "Implementar alertas automáticas sobre transacciones inusuales.",
    ],
    "regulatorio": [
        "Mantener una matriz de obligaciones regulatorias con responsables.",
        "Revisar trimestralmente los cambios normativos aplicables.",
        "Ejecutar pruebas de cumplimiento sobre los controles clave.",
    ],
    "proveedor": [
        "Evaluar la criticidad y solvencia de los proveedores clave.",
        "Incluir cláusulas de continuidad y auditoría en los contratos.",
        "Definir proveedores alternativos para servicios críticos.",
    ],
    "datos": [
        "Cifrar la información sensible en reposo y en tránsito.",
        "Revisar trimestralmente los accesos a datos confidenciales.",
        "Desplegar herramientas de prevención de fuga de datos (DLP).",
    ],
    "continuidad": [
        "Probar anualmente el plan de continuidad del negocio.",
        "Mantener respaldos fuera de línea de los sistemas críticos.",
        "Definir tiempos objetivo de recuperación por proceso.",
    ],
}

GENERIC_SUGGESTIONS = [
    "Realizar evaluaciones de riesgo periódicas.",
    "Asignar un dueño responsable para cada control.",
    "Documentar y probar los controles clave del proceso.",
    "Monitorear indicadores clave de riesgo de forma continua.",
]


def get_mitigation_suggestions(risk_description: str) -> List[str]:
    """Returns fallback mitigation suggestions based on risk keywords."""
    desc = (risk_description or "").lower()
    for keyword, suggestions in RISK_MITIGATION_SUGGESTIONS.items():
        if keyword in desc:
            return suggestions
    return random.sample(GENERIC_SUGGESTIONS, 3)


def _format(suggestions: List[str], header: str) -> str:
    return header + "\n- " + "\n- ".join(suggestions)


def suggest_mitigations(risk_name: str, description: str = "", band_label: str = "",
                        client: Optional[OpenAI] = None) -> str:
    """
    Uses OpenAI to suggest controls for a risk.
    Falls back to keyword-based suggestions if AI API is not configured.
    """
    context = f"{risk_name} {description}"
    if client is None:
        api_key = get_openai_api_key()
        if not api_key:
            return _format(get_mitigation_suggestions(context), "[Modo sin conexión]\nControles sugeridos:")
        client = OpenAI(api_key=api_key)

    prompt = f"""
    Eres un analista de riesgos GRC. Analiza el siguiente riesgo y propone controles.

    Riesgo: {risk_name}
    Descripción: {description}
    Nivel de riesgo: {band_label}

    Devuelve JSON como:
    {{
        "category": "<categoría del riesgo>",
        "mitigations": ["<control 1>", "<control 2>", "<control 3>"]
    }}
    """

    try:
        response = client.chat.completions.create(
            model=get_openai_model(),
            messages=[{"role": "user", "content": prompt}],
            temperature=0.4,
            max_tokens=250,
        )
        raw_output = response.choices[0].message.content or ""
    except OpenAIError as e:
        LOG.warning("AI suggestion failed for %r: %s", risk_name, e)
        return _format(get_mitigation_suggestions(context), f"Error de IA: {e}\nControles sugeridos:")

    try:
        parsed = json.loads(raw_output)
    except json.JSONDecodeError:
        parsed = None
    if not isinstance(parsed, dict):
        return f"Respuesta de IA:\n{raw_output}"
    category = parsed.get("category", "Sin categoría")
    mitigations = parsed.get("mitigations", [])
    return _format(mitigations, f"Categoría: **{category}**\n\nControles sugeridos:")
