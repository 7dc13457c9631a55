from types import SimpleNamespace
from unittest.mock import MagicMock

from openai import OpenAIError

from grc_riskmath.ai_helper import GENERIC_SUGGESTIONS, RISK_MITIGATION_SUGGESTIONS, get_mitigation_suggestions, suggest_mitigations


def fake_client(content=None, error=None):
    client = MagicMock()
    if error is not None:
        client.chat.completions.create.side_effect = error
    else:
        message = SimpleNamespace(content=content)
        client.chat.completions.create.return_value = SimpleNamespace(choices=[SimpleNamespace(message=message)])
    return client


def test_keyword_suggestions():
    assert get_mitigation_suggestions("Riesgo de FRAUDE interno") == RISK_MITIGATION_SUGGESTIONS["fraude"]


def test_generic_suggestions():
    suggestions = get_mitigation_suggestions("algo distinto")
    assert len(suggestions) == 3
    assert set(suggestions) <= set(GENERIC_SUGGESTIONS)


def test_offline_mode_without_api_key(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    text = suggest_mitigations("Incumplimiento regulatorio", "multas", "Alto")
    assert text.startswith("[Modo sin conexión]")
    assert RISK_MITIGATION_SUGGESTIONS["regulatorio"][0] in text


def test_parses_model_json():
    client = fake_client('{"category": "Fraude", "mitigations": ["Control A", "Control B"]}')
    text = suggest_mitigations("Pagos duplicados", "", "Crítico", client=client)
    assert "Categoría: **Fraude**" in text
    assert "- Control A" in text
    kwargs = client.chat.completions.create.call_args.kwargs
    assert "Crítico" in kwargs["messages"][0]["content"]


def test_non_json_response_is_shown_raw():
    text = suggest_mitigations("Riesgo", client=fake_client("texto libre"))
    assert text == "Respuesta de IA:\ntexto libre"


def test_api_error_falls_back():
    text = suggest_mitigations("Caída de proveedor", client=fake_client(error=OpenAIError("boom")))
    assert text.startswith("Error de IA: boom")
    assert RISK_MITIGATION_SUGGESTIONS["proveedor"][0] in text
