# tests/test_ai_gateway.py

import json
from types import SimpleNamespace

import pytest

from fitcoach.services.ai_gateway import (
    DEV_FALLBACK_ANALYSIS,
    NUTRITION_FALLBACK,
    AIGateway,
    _clamp_score,
    _extract_json_object,
)


class FakeCompletions:
    """Imita client.chat.completions.create y guarda las llamadas."""

    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def fake_client(content=None, error=None):
    completions = FakeCompletions(content, error)
    return SimpleNamespace(chat=SimpleNamespace(completions=completions)), completions


# ---------- helpers ----------
def test_extract_json_object_directo_y_embebido():
    assert _extract_json_object('{"a": 1}') == {"a": 1}
    assert _extract_json_object('Aquí tienes:\n{"a": {"b": 2}}\nSuerte') == {"a": {"b": 2}}
    with pytest.raises(ValueError):
        _extract_json_object("sin json")
    with pytest.raises(ValueError):
        _extract_json_object("")


@pytest.mark.parametrize("raw, expected", [
    (None, 50), ("", 50), (0, 50), ("abc", 50),
    (150, 100), (-10, 1), (87.6, 88), ("64", 64),
    (float("nan"), 50), (float("inf"), 50), ("-Infinity", 50),
])
def test_clamp_score(raw, expected):
    assert _clamp_score(raw) == expected


# ---------- análisis de técnica ----------
def test_analisis_con_respuesta_valida():
    client, calls = fake_client(json.dumps({
        "formScore": 120,
        "feedback": "Buena profundidad",
        "corrections": ["Mantén el pecho arriba", None],
        "strengths": ["Ritmo estable"],
    }))
    gw = AIGateway(client=client)

    result = gw.analyze_movement_form("Sentadilla", [{"keypoints": []}])

    assert result == {
        "formScore": 100,
        "feedback": "Buena profundidad",
        "corrections": ["Mantén el pecho arriba"],
        "strengths": ["Ritmo estable"],
    }
    call = calls.calls[0]
    assert call["response_format"] == {"type": "json_object"}
    assert call["model"] == "gpt-3.5-turbo"
    assert "Sentadilla" in call["messages"][1]["content"]


def test_analisis_json_invalido_devuelve_respaldo():
    client, _ = fake_client("esto no es JSON")
    result = AIGateway(client=client).analyze_movement_form("Zancada", [])
    assert result["formScore"] == 78
    assert "Zancada" in result["feedback"]
    assert len(result["corrections"]) == 3


def test_analisis_error_remoto_devuelve_respaldo():
    client, _ = fake_client(error=TimeoutError("timeout"))
    result = AIGateway(client=client).analyze_movement_form("Plancha", [])
    assert result["formScore"] == 78


def test_sin_api_key_devuelve_respaldo():
    # sin cliente ni clave: el cliente perezoso lanza y se usa el respaldo
    result = AIGateway().analyze_movement_form("Plancha", [])
    assert result["formScore"] == 78


def test_modo_desarrollo_no_llama_al_proveedor():
    client, calls = fake_client('{"formScore": 10}')
    gw = AIGateway(client=client)
    gw.dev_mode = True

    result = gw.analyze_movement_form("Burpee", [])

    assert calls.calls == []
    assert result["formScore"] == DEV_FALLBACK_ANALYSIS["formScore"]
    assert result["feedback"].endswith("(Ejercicio: Burpee)")
    # el respaldo compartido no se modifica
    assert "(Ejercicio:" not in DEV_FALLBACK_ANALYSIS["feedback"]


# ---------- planes ----------
def test_plan_valido_se_devuelve_tal_cual():
    plan = {"name": "Fuerza total", "difficulty": "advanced", "exercises": [{"name": "Dominadas"}]}
    client, calls = fake_client(json.dumps(plan))
    assert AIGateway(client=client).generate_workout_plan({"goals": ["fuerza"]}) == plan
    assert calls.calls[0]["max_tokens"] == 1500


def test_plan_sin_ejercicios_usa_respaldo():
    client, _ = fake_client('{"name": "Incompleto"}')
    plan = AIGateway(client=client).generate_workout_plan({"fitnessLevel": 4, "timeAvailable": 20})
    assert plan["difficulty"] == "advanced"
    assert plan["duration"] == 20
    assert [e["name"] for e in plan["exercises"]] == ["Flexiones", "Sentadillas"]


@pytest.mark.parametrize("level, difficulty", [(1, "beginner"), (2, "intermediate"), (5, "advanced"), ("avanzado", "advanced")])
def test_plan_respaldo_por_nivel(level, difficulty):
    gw = AIGateway()
    gw.dev_mode = True
    assert gw.generate_workout_plan({"fitnessLevel": level})["difficulty"] == difficulty


# ---------- nutrición ----------
def test_nutricion_con_respuesta_valida():
    client, calls = fake_client(json.dumps({
        "recommendations": ["Más proteína"],
        "mealSuggestions": ["Tortilla de claras"],
        "tips": ["Planifica la compra"],
    }))
    out = AIGateway(client=client).provide_nutrition_advice(["perder peso"], 80, 72)
    assert out["recommendations"] == ["Más proteína"]
    prompt = calls.calls[0]["messages"][1]["content"]
    assert "Peso actual: 80 kg" in prompt
    assert "Peso objetivo: 72 kg" in prompt


def test_nutricion_error_devuelve_respaldo():
    client, _ = fake_client(error=RuntimeError("cuota agotada"))
    assert AIGateway(client=client).provide_nutrition_advice(["fuerza"]) == NUTRITION_FALLBACK
