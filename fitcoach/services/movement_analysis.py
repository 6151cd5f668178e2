# fitcoach/services/movement_analysis.py
"""
Análisis de técnica "triple":

  1) juicio de la IA               (peso 0.33, respaldo 75)
  2) similitud con vídeo de ref.   (peso 0.33, respaldo 70)
  3) reglas biomecánicas           (peso 0.34, respaldo 80)

score final = round(0.33*s1 + 0.33*s2 + 0.34*s3), redondeo .5 hacia arriba.
Si una pata falla se usa su respaldo; el análisis nunca se aborta.
El texto (feedback, correcciones, puntos fuertes) sale de plantillas por
banda de puntuación y de palabras clave en el feedback de cada pata.
"""
from __future__ import annotations

import logging
import math
from typing import Any, Callable, Dict, List, Optional, Sequence

from fitcoach import ai
from fitcoach.services import reference_comparison, rules_engine
from fitcoach.services.reference_comparison import exercise_key
from fitcoach.utils.pose import movement_metrics, normalize_frames, simulate_keypoints

logger = logging.getLogger(__name__)

AI_WEIGHT = 0.33
REFERENCE_WEIGHT = 0.33
RULES_WEIGHT = 0.34

AI_FALLBACK = {"score": 75, "feedback": "Análisis de IA no disponible. Forma general buena."}
REFERENCE_FALLBACK = {"score": 70, "feedback": "Vídeo de referencia no disponible. Mantén la forma correcta."}
RULES_FALLBACK = {"score": 80, "feedback": "Análisis biomecánico completado. Mantén la forma."}

CORRECTION_KEYWORDS = ("mantén", "evita", "concéntrate")
DEFAULT_CORRECTIONS = [
    "Mantén la forma durante todo el movimiento",
    "Controla la velocidad de ejecución",
]
MAX_CORRECTIONS = 3
MIN_FEEDBACK_LEN = 10

DEMO_SCORES = {"squat": 78, "pushup": 82, "lunge": 75, "plank": 85, "burpee": 70}
DEMO_DEFAULT_SCORE = 75

Leg = Dict[str, Any]


# ----------------------------------------------------------------------------#
# Síntesis (funciones puras)
# ----------------------------------------------------------------------------#
def weighted_score(ai_score: float, reference_score: float, rules_score: float) -> int:
    raw = AI_WEIGHT * ai_score + REFERENCE_WEIGHT * reference_score + RULES_WEIGHT * rules_score
    # epsilon: 0.33 no es exacto en binario
    score = math.floor(raw + 0.5 + 1e-9)
    return int(max(0, min(100, score)))


def synthesized_feedback(score: int, feedbacks: Sequence[str]) -> str:
    valid = [f for f in feedbacks if f and len(f) > MIN_FEEDBACK_LEN]
    if score >= 90:
        return "¡Ejecución excelente! Los tres análisis confirman una técnica sobresaliente."
    if score >= 80:
        return "Buena ejecución general. " + (valid[0] if valid else "¡Sigue así!")
    if score >= 70:
        return "Técnica aceptable, pero mejorable. " + (" ".join(valid[:2]) or "Céntrate en la técnica.")
    return "La ejecución necesita mejorar. " + (" ".join(valid) or "Repasa la técnica básica.")


def extract_corrections(feedbacks: Sequence[str]) -> List[str]:
    corrections = [
        f for f in feedbacks
        if f and any(k in f.lower() for k in CORRECTION_KEYWORDS)
    ]
    if not corrections:
        corrections = list(DEFAULT_CORRECTIONS)
    return corrections[:MAX_CORRECTIONS]


def extract_strengths(score: int) -> List[str]:
    strengths = []
    if score >= 80:
        strengths.append("Buen control del movimiento")
    if score >= 70:
        strengths.append("Postura general correcta")
    if score >= 60:
        strengths.append("Comprensión básica del ejercicio")
    return strengths or ["Constancia en el entrenamiento"]


def synthesize(ai_leg: Leg, reference_leg: Leg, rules_leg: Leg) -> Dict[str, Any]:
    score = weighted_score(ai_leg["score"], reference_leg["score"], rules_leg["score"])
    feedbacks = [ai_leg["feedback"], reference_leg["feedback"], rules_leg["feedback"]]
    return {
        "formScore": score,
        "feedback": synthesized_feedback(score, feedbacks),
        "corrections": extract_corrections(feedbacks),
        "strengths": extract_strengths(score),
    }


# ----------------------------------------------------------------------------#
# Patas del análisis
# ----------------------------------------------------------------------------#
def ai_leg(exercise_name: str, frames) -> Leg:
    result = ai.analyze_movement_form(exercise_name, frames)
    return {"score": result["formScore"], "feedback": result["feedback"]}


def reference_leg(exercise_name: str, frames) -> Leg:
    result = reference_comparison.compare_with_reference(exercise_name, frames)
    return {"score": result["similarityScore"], "feedback": result["overallFeedback"]}


def rules_leg(exercise_name: str, frames) -> Leg:
    result = rules_engine.check_exercise(exercise_name, frames)
    feedback = "Ejecución biomecánicamente correcta."
    if result["triggersFired"]:
        critical = " ".join(result["criticalErrors"][:2])
        suggestion = "".join(result["suggestions"][:1])
        if critical:
            feedback = f"{critical} {suggestion}".strip()
        else:
            feedback = f"Reglas activadas: {', '.join(result['triggersFired'])}. {suggestion}".strip()
    return {"score": result["biomechanicalScore"], "feedback": feedback}


def _run_leg(name: str, fn: Callable, fallback: Leg, exercise_name: str, frames) -> Leg:
    try:
        leg = fn(exercise_name, frames)
        score = max(0, min(100, int(round(float(leg["score"])))))
        return {"score": score, "feedback": str(leg.get("feedback") or "")}
    except Exception as exc:
        logger.warning("[analysis] pata '%s' falló para %s, uso respaldo: %s", name, exercise_name, exc)
        return dict(fallback)


def triple_analysis(
    exercise_name: str,
    frames,
    legs: Optional[Dict[str, Callable]] = None,
) -> Dict[str, Any]:
    """
    Ejecuta las tres patas y sintetiza. `legs` permite sustituir alguna
    (claves "ai", "reference", "rules").
    """
    legs = legs or {}
    gpt = _run_leg("ai", legs.get("ai", ai_leg), AI_FALLBACK, exercise_name, frames)
    ref = _run_leg("reference", legs.get("reference", reference_leg), REFERENCE_FALLBACK, exercise_name, frames)
    bio = _run_leg("rules", legs.get("rules", rules_leg), RULES_FALLBACK, exercise_name, frames)

    result = synthesize(gpt, ref, bio)
    result["analysisDetails"] = _details(gpt, ref, bio)
    return result


def _details(gpt: Leg, ref: Leg, bio: Leg) -> Dict[str, Any]:
    return {
        "aiAnalysis": {"score": gpt["score"], "feedback": gpt["feedback"], "weight": 33},
        "referenceComparison": {"score": ref["score"], "feedback": ref["feedback"], "weight": 33},
        "biomechanicalRules": {"score": bio["score"], "feedback": bio["feedback"], "weight": 34},
    }


# ----------------------------------------------------------------------------#
# Modo demo
# ----------------------------------------------------------------------------#
def demo_analysis(exercise_name: str) -> Dict[str, Any]:
    score = DEMO_SCORES.get(exercise_key(exercise_name), DEMO_DEFAULT_SCORE)
    leg = {"score": score, "feedback": "Modo desarrollo"}
    return {
        "formScore": score,
        "feedback": f"Análisis demo para {exercise_name}. Puntuación: {score}/100",
        "corrections": ["Demo: mantén la forma correcta", "Demo: controla la velocidad"],
        "strengths": ["Demo: buena comprensión básica", "Demo: movimiento fluido"],
        "analysisDetails": _details(leg, leg, leg),
    }


# ----------------------------------------------------------------------------#
# API del servicio
# ----------------------------------------------------------------------------#
def analyze_movement(exercise_name: str, video_data: Optional[str], keypoints=None) -> Dict[str, Any]:
    """
    Punto de entrada del endpoint. Usa los keypoints del cliente si llegan;
    si no, genera frames de relleno deterministas a partir del vídeo.
    """
    frames = normalize_frames(keypoints) if keypoints else []
    if not frames:
        frames = simulate_keypoints(video_data)

    if ai.dev_mode:
        logger.info("[analysis] modo desarrollo: análisis demo para %s", exercise_name)
        result = demo_analysis(exercise_name)
    else:
        result = triple_analysis(exercise_name, frames)

    result["metrics"] = calculate_movement_metrics(frames)
    result["frameCount"] = len(frames)
    return result


def calculate_movement_metrics(frames) -> Dict[str, int]:
    return movement_metrics(frames)


def validate_exercise_form(exercise_name: str, frames) -> Dict[str, Any]:
    analysis = ai.analyze_movement_form(exercise_name, frames)
    return {
        "isCorrectForm": analysis["formScore"] >= 70,
        "confidence": analysis["formScore"] / 100,
        "issues": analysis["corrections"],
    }
