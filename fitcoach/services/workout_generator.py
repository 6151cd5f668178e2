# fitcoach/services/workout_generator.py
"""
Generación y adaptación de planes de entrenamiento.

- generate_personalized_plan: preferencias -> IA -> plan persistido
- adapt_plan_to_proficiency: controlador de tres bandas (>=85 sube, <=60 baja)
- generate_progression_plan: copia inactiva con más carga
- get_recommended_exercises: catálogo estático filtrado por dificultad
"""
import logging
import re

from fitcoach import ai, db
from fitcoach.models.workout import DIFFICULTY_LEVELS, Exercise, WorkoutPlan
from fitcoach.services.errors import PlanNotFound

logger = logging.getLogger(__name__)

DEFAULT_TIME_AVAILABLE = 45
DEFAULT_EQUIPMENT = ["bodyweight", "dumbbells"]
DEFAULT_GOALS = ["general_fitness"]

# Bandas de adaptación
HIGH_SCORE = 85
LOW_SCORE = 60
MAX_DIFFICULTY = 5
MAX_SETS = 6
MAX_REPS = 20
MIN_REPS = 5
MAX_DURATION = 60


# ----------------------------------------------------------------------------#
# Helpers
# ----------------------------------------------------------------------------#
def parse_reps(value):
    """'8-12' -> 8, 10 -> 10, 'AMRAP' -> None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return int(value)
    m = re.search(r"\d+", str(value))
    return int(m.group()) if m else None


def plan_difficulty(value) -> int:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return max(1, min(MAX_DIFFICULTY, int(value)))
    return DIFFICULTY_LEVELS.get(str(value or "").strip().lower(), 1)


def _int_or_none(value):
    try:
        return int(value) if value is not None else None
    except (TypeError, ValueError):
        return None


def merge_preferences(user, preferences):
    """Petición -> perfil del usuario -> valores por defecto."""
    preferences = preferences or {}
    return {
        "fitnessLevel": preferences.get("fitnessLevel") or user.fitness_level or 1,
        "goals": preferences.get("goals") or user.goals_list() or list(DEFAULT_GOALS),
        "timeAvailable": preferences.get("timeAvailable") or DEFAULT_TIME_AVAILABLE,
        "equipment": preferences.get("equipment") or list(DEFAULT_EQUIPMENT),
        "injuries": preferences.get("injuries") or [],
    }


def _get_plan(plan_id, user):
    plan = WorkoutPlan.query.filter_by(id=plan_id, user_id=user.id).first()
    if plan is None:
        raise PlanNotFound(plan_id)
    return plan


# ----------------------------------------------------------------------------#
# Generación
# ----------------------------------------------------------------------------#
def generate_personalized_plan(user, preferences=None):
    prefs = merge_preferences(user, preferences)
    ai_plan = ai.generate_workout_plan(prefs)

    difficulty = plan_difficulty(ai_plan.get("difficulty"))
    plan = WorkoutPlan(
        user_id=user.id,
        name=str(ai_plan.get("name") or "Plan personalizado")[:200],
        description=ai_plan.get("description"),
        difficulty=difficulty,
        is_active=True,
    )
    db.session.add(plan)

    for i, item in enumerate(ai_plan.get("exercises") or [], start=1):
        if not isinstance(item, dict) or not item.get("name"):
            continue
        muscles = item.get("targetMuscles") or []
        if isinstance(muscles, str):
            muscles = muscles.split(",")
        plan.exercises.append(Exercise(
            name=str(item["name"])[:200],
            description=item.get("description") or item.get("instructions"),
            type=item.get("type") or "strength",
            difficulty=plan_difficulty(item.get("difficulty") or difficulty),
            target_muscles=",".join(str(m).strip() for m in muscles if str(m).strip()),
            day=_int_or_none(item.get("day")) or 1,
            order=_int_or_none(item.get("order")) or i,
            sets=_int_or_none(item.get("sets")),
            reps=parse_reps(item.get("reps")),
            duration=_int_or_none(item.get("duration")),
        ))

    db.session.commit()
    logger.info("[plans] user=%s plan=%s ejercicios=%s", user.id, plan.id, len(plan.exercises))
    return plan


# ----------------------------------------------------------------------------#
# Adaptación
# ----------------------------------------------------------------------------#
def adapt_exercise(exercise, score):
    """Aplica la banda correspondiente a `score` sobre el ejercicio (in place)."""
    if score >= HIGH_SCORE:
        exercise.difficulty = min(MAX_DIFFICULTY, (exercise.difficulty or 1) + 1)
        if exercise.sets:
            exercise.sets = min(MAX_SETS, exercise.sets + 1)
        if exercise.reps:
            exercise.reps = min(MAX_REPS, int(exercise.reps * 1.2))
    elif score <= LOW_SCORE:
        exercise.difficulty = max(1, (exercise.difficulty or 1) - 1)
        if exercise.sets:
            exercise.sets = max(1, exercise.sets - 1)
        if exercise.reps:
            exercise.reps = max(MIN_REPS, int(exercise.reps * 0.8))
    return exercise


def adapt_plan_to_proficiency(plan_id, user, proficiency):
    plan = _get_plan(plan_id, user)
    scores = proficiency.get("exerciseScores") or {}
    overall = proficiency.get("overallPerformance")

    for ex in plan.exercises:
        score = scores.get(ex.name)
        if score is None:
            score = overall
        if score is None:
            continue
        adapt_exercise(ex, float(score))

    db.session.commit()
    return plan


def generate_progression_plan(plan_id, user):
    current = _get_plan(plan_id, user)
    plan = WorkoutPlan(
        user_id=user.id,
        name=f"{current.name} - Progresión"[:200],
        description=f"Versión avanzada de {current.name}",
        difficulty=min(MAX_DIFFICULTY, (current.difficulty or 1) + 1),
        is_active=False,  # el usuario la activa cuando quiera
    )
    for ex in current.exercises:
        plan.exercises.append(Exercise(
            name=ex.name,
            description=ex.description,
            type=ex.type,
            difficulty=min(MAX_DIFFICULTY, (ex.difficulty or 1) + 1),
            target_muscles=ex.target_muscles,
            day=ex.day,
            order=ex.order,
            sets=min(MAX_SETS, ex.sets + 1) if ex.sets else ex.sets,
            reps=min(MAX_REPS, int(ex.reps * 1.15)) if ex.reps else ex.reps,
            duration=min(MAX_DURATION, int(ex.duration * 1.1)) if ex.duration else ex.duration,
            weight=round(ex.weight * 1.1, 2) if ex.weight else ex.weight,
        ))
    db.session.add(plan)
    db.session.commit()
    return plan


# ----------------------------------------------------------------------------#
# Catálogo
# ----------------------------------------------------------------------------#
EXERCISE_CATALOGUE = {
    "chest": [
        {"name": "Flexiones", "type": "strength", "difficulty": 2, "description": "Clásico de pecho con peso corporal"},
        {"name": "Press de banca", "type": "strength", "difficulty": 3, "description": "Compuesto de pecho con barra"},
        {"name": "Aperturas", "type": "strength", "difficulty": 2, "description": "Aislamiento de pecho"},
    ],
    "back": [
        {"name": "Dominadas", "type": "strength", "difficulty": 4, "description": "Tirón vertical con peso corporal"},
        {"name": "Remo inclinado", "type": "strength", "difficulty": 3, "description": "Fortalece la espalda media"},
        {"name": "Jalón al pecho", "type": "strength", "difficulty": 2, "description": "Tirón vertical en polea"},
    ],
    "legs": [
        {"name": "Sentadillas", "type": "strength", "difficulty": 2, "description": "Básico de tren inferior"},
        {"name": "Zancadas", "type": "strength", "difficulty": 2, "description": "Trabajo unilateral de pierna"},
        {"name": "Peso muerto", "type": "strength", "difficulty": 4, "description": "Compuesto de cuerpo completo"},
    ],
    "core": [
        {"name": "Plancha", "type": "strength", "difficulty": 1, "description": "Isométrico de core"},
        {"name": "Crunch bicicleta", "type": "strength", "difficulty": 2, "description": "Core dinámico"},
        {"name": "Giros rusos", "type": "strength", "difficulty": 2, "description": "Rotación de tronco"},
    ],
    "cardio": [
        {"name": "Carrera", "type": "cardio", "difficulty": 2, "description": "Resistencia aeróbica"},
        {"name": "Comba", "type": "cardio", "difficulty": 3, "description": "Cardio de alta intensidad"},
        {"name": "Burpees", "type": "cardio", "difficulty": 4, "description": "Cardio de cuerpo completo"},
    ],
}
MAX_RECOMMENDED = 10


def get_recommended_exercises(target_muscles, difficulty):
    seen = set()
    out = []
    for muscle in target_muscles or []:
        for ex in EXERCISE_CATALOGUE.get(str(muscle).strip().lower(), []):
            if abs(ex["difficulty"] - difficulty) > 1 or ex["name"] in seen:
                continue
            seen.add(ex["name"])
            out.append(dict(ex))
    return out[:MAX_RECOMMENDED]
