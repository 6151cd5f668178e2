# fitcoach/services/reference_comparison.py
"""
Comparación con el vídeo de referencia de un entrenador.

La plantilla (`ExerciseTemplate`) guarda una secuencia de frames "correcta".
Ambas secuencias se remuestrean al mismo número de frames y se mide la
distancia media entre landmarks homólogos (coordenadas normalizadas):

    similitud = 100 * (1 - distancia_media / 0.5), acotada a [0, 100]
"""
import re
import unicodedata

from fitcoach.models.analysis import ExerciseTemplate
from fitcoach.services.errors import ReferenceNotFound
from fitcoach.utils.pose import mean_landmark_distance, resample

MAX_DISTANCE = 0.5

_ALIASES = {
    "squats": "squat", "sentadilla": "squat", "sentadillas": "squat",
    "pushups": "pushup", "flexion": "pushup", "flexiones": "pushup",
    "lunges": "lunge", "zancada": "lunge", "zancadas": "lunge",
    "plancha": "plank", "planks": "plank",
    "burpees": "burpee",
}


def exercise_key(name) -> str:
    """
    Nombre de ejercicio -> clave canónica.
        "Squats" -> "squat", "Push-ups" -> "pushup", "Sentadillas" -> "squat"
    """
    text = unicodedata.normalize("NFKD", str(name or "")).encode("ascii", "ignore").decode()
    key = re.sub(r"[^a-z0-9]", "", text.lower())
    return _ALIASES.get(key, key)


def find_template(exercise_name):
    key = exercise_key(exercise_name)
    if not key:
        return None
    tpl = ExerciseTemplate.query.filter_by(name=key).first()
    if tpl is None:
        tpl = ExerciseTemplate.query.filter_by(category=key).first()
    return tpl


def _feedback_for(score: int) -> str:
    if score >= 85:
        return "Tu movimiento se parece mucho al patrón de referencia. Mantén esta ejecución."
    if score >= 70:
        return "Movimiento cercano a la referencia; concéntrate en controlar la bajada."
    if score >= 50:
        return "Hay diferencias claras con la referencia; evita compensar con la espalda."
    return "El patrón se aleja de la referencia; concéntrate en la técnica básica antes de añadir carga."


def compare_with_reference(exercise_name, frames) -> dict:
    """
    Devuelve {"similarityScore", "overallFeedback", "referenceExercise"}.
    Lanza ReferenceNotFound si no hay plantilla o frames con los que comparar.
    """
    tpl = find_template(exercise_name)
    if tpl is None:
        raise ReferenceNotFound(f"Sin referencia para '{exercise_name}'")

    reference = tpl.reference_frames()
    if not reference or not frames:
        raise ReferenceNotFound(f"Referencia vacía para '{exercise_name}'")

    count = max(len(frames), len(reference))
    distance = mean_landmark_distance(resample(frames, count), resample(reference, count))
    if distance is None:
        raise ReferenceNotFound("Sin landmarks comparables con la referencia")

    similarity = 100.0 * (1.0 - distance / MAX_DISTANCE)
    score = int(round(max(0.0, min(100.0, similarity))))
    return {
        "similarityScore": score,
        "overallFeedback": _feedback_for(score),
        "referenceExercise": tpl.name,
    }
