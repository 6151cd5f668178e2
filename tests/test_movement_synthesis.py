# tests/test_movement_synthesis.py

from types import SimpleNamespace

import pytest

from fitcoach import ai
from fitcoach.services import movement_analysis as ma


def _leg(score, feedback):
    def fn(exercise_name, frames):
        return {"score": score, "feedback": feedback}
    return fn


def _broken(exercise_name, frames):
    raise RuntimeError("servicio caído")


# ---------- puntuación ponderada ----------
def test_weighted_score_basico():
    # 0.33*75 + 0.33*70 + 0.34*80 = 75.05
    assert ma.weighted_score(75, 70, 80) == 75
    assert ma.weighted_score(100, 100, 100) == 100
    assert ma.weighted_score(0, 0, 0) == 0


def test_weighted_score_redondea_medio_hacia_arriba():
    # 16.5 + 16.5 + 8.5 = 41.5 -> 42
    assert ma.weighted_score(50, 50, 25) == 42


def test_weighted_score_acotado():
    assert ma.weighted_score(150, 150, 150) == 100
    assert ma.weighted_score(-20, -20, -20) == 0


# ---------- textos ----------
def test_feedback_por_bandas():
    assert ma.synthesized_feedback(95, []).startswith("¡Ejecución excelente!")
    assert ma.synthesized_feedback(85, ["corto"]) == "Buena ejecución general. ¡Sigue así!"
    assert ma.synthesized_feedback(82, ["Mantén el core firme", "Otro comentario largo"]) == (
        "Buena ejecución general. Mantén el core firme"
    )
    mid = ma.synthesized_feedback(72, ["Primer feedback largo", "Segundo feedback largo", "Tercero largo"])
    assert mid == "Técnica aceptable, pero mejorable. Primer feedback largo Segundo feedback largo"
    low = ma.synthesized_feedback(40, ["Uno bastante largo", "Dos bastante largo"])
    assert low == "La ejecución necesita mejorar. Uno bastante largo Dos bastante largo"


def test_correcciones_por_palabra_clave():
    feedbacks = [
        "MANTÉN la espalda neutra",
        "Buen ritmo en general",
        "Evita rebotar abajo",
        "Concéntrate en la respiración",
        "mantén los talones apoyados",
    ]
    out = ma.extract_corrections(feedbacks)
    assert out == ["MANTÉN la espalda neutra", "Evita rebotar abajo", "Concéntrate en la respiración"]


def test_correcciones_por_defecto():
    assert ma.extract_corrections(["Todo perfecto", "", None]) == ma.DEFAULT_CORRECTIONS


@pytest.mark.parametrize("score, expected", [
    (85, ["Buen control del movimiento", "Postura general correcta", "Comprensión básica del ejercicio"]),
    (72, ["Postura general correcta", "Comprensión básica del ejercicio"]),
    (61, ["Comprensión básica del ejercicio"]),
    (30, ["Constancia en el entrenamiento"]),
])
def test_puntos_fuertes(score, expected):
    assert ma.extract_strengths(score) == expected


# ---------- análisis triple ----------
def test_triple_todas_las_patas_fallan_usa_respaldos():
    legs = {"ai": _broken, "reference": _broken, "rules": _broken}
    result = ma.triple_analysis("Sentadilla", [], legs=legs)

    assert result["formScore"] == 75
    details = result["analysisDetails"]
    assert details["aiAnalysis"]["score"] == 75
    assert details["referenceComparison"]["score"] == 70
    assert details["biomechanicalRules"]["score"] == 80
    assert [d["weight"] for d in details.values()] == [33, 33, 34]
    # los respaldos de referencia y reglas llevan "Mantén"
    assert len(result["corrections"]) == 2
    assert result["feedback"].startswith("Técnica aceptable")


def test_triple_una_pata_falla():
    legs = {
        "ai": _leg(90, "Evita arquear la zona lumbar"),
        "reference": _broken,
        "rules": _leg(100, "Ejecución biomecánicamente correcta."),
    }
    result = ma.triple_analysis("Sentadilla", [], legs=legs)
    # 29.7 + 23.1 + 34 = 86.8
    assert result["formScore"] == 87
    assert result["corrections"][0] == "Evita arquear la zona lumbar"
    assert result["feedback"] == "Buena ejecución general. Evita arquear la zona lumbar"


def test_triple_normaliza_puntuaciones_de_patas():
    legs = {
        "ai": _leg(140, "Sobrado"),
        "reference": _leg("65.4", "Parecido a la referencia"),
        "rules": _leg(-5, "Reglas muy violadas"),
    }
    details = ma.triple_analysis("Plancha", [], legs=legs)["analysisDetails"]
    assert details["aiAnalysis"]["score"] == 100
    assert details["referenceComparison"]["score"] == 65
    assert details["biomechanicalRules"]["score"] == 0


# ---------- modo demo ----------
@pytest.mark.parametrize("name, score", [
    ("Squats", 78),
    ("Push-ups", 82),
    ("zancadas", 75),
    ("Plancha", 85),
    ("Burpees", 70),
    ("Yoga", 75),
])
def test_demo_por_ejercicio(name, score):
    result = ma.demo_analysis(name)
    assert result["formScore"] == score
    assert result["feedback"] == f"Análisis demo para {name}. Puntuación: {score}/100"
    assert len(result["corrections"]) == 2


def test_weighted_score_en_rango():
    for a in range(0, 101, 7):
        for b in range(0, 101, 11):
            for c in range(0, 101, 13):
                score = ma.weighted_score(a, b, c)
                assert 0 <= score <= 100
                assert abs(score - (0.33 * a + 0.33 * b + 0.34 * c)) <= 0.5 + 1e-9


def test_validate_exercise_form_en_modo_desarrollo(app):
    out = ma.validate_exercise_form("Sentadilla", [])
    assert out["isCorrectForm"] is True
    assert out["confidence"] == pytest.approx(0.78)
    assert len(out["issues"]) == 3


def test_validate_exercise_form_con_puntuacion_no_finita(app, monkeypatch):
    content = '{"formScore": NaN, "feedback": "Sin datos", "corrections": ["Evita rebotar abajo"]}'
    completions = SimpleNamespace(
        create=lambda **kw: SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])
    )
    monkeypatch.setattr(ai, "dev_mode", False)
    monkeypatch.setattr(ai, "_client", SimpleNamespace(chat=SimpleNamespace(completions=completions)))

    out = ma.validate_exercise_form("Sentadilla", [])
    assert out == {"isCorrectForm": False, "confidence": 0.5, "issues": ["Evita rebotar abajo"]}
