# fitcoach/services/questionnaire.py
"""
Cuestionario de onboarding y derivación del perfil inicial.

Respuestas: [{"questionId": "goal", "answer": "..."}, ...]
(las de opción múltiple llevan una lista como answer).
"""
import json
import logging
import re

from fitcoach import db
from fitcoach.models.user import UserQuestionnaire
from fitcoach.services import workout_generator
from fitcoach.services.errors import OnboardingAlreadyCompleted, ValidationFailed

logger = logging.getLogger(__name__)

ONBOARDING_TYPE = "fitness_onboarding"

FITNESS_ONBOARDING = [
    {
        "id": "welcome_message",
        "type": "info",
        "text": "¡Bienvenido/a! Con unas pocas preguntas crearemos un plan a tu medida. Solo son 2 minutos.",
    },
    {
        "id": "goal",
        "type": "single_choice",
        "label": "¿Cuál es tu objetivo principal?",
        "options": ["Perder peso", "Ganar masa muscular", "Tonificar", "Mejorar la movilidad", "Mantenerme en forma"],
        "required": True,
    },
    {
        "id": "experience",
        "type": "single_choice",
        "label": "¿Tienes experiencia entrenando?",
        "options": ["Soy principiante", "Entreno desde hace un tiempo", "Soy experto/a"],
        "required": True,
    },
    {
        "id": "training_location",
        "type": "single_choice",
        "label": "¿Dónde sueles entrenar?",
        "options": ["En casa", "En el gimnasio", "Al aire libre"],
        "required": True,
    },
    {
        "id": "equipment",
        "type": "multi_choice",
        "label": "¿Qué material tienes disponible?",
        "options": ["Ninguno", "Mancuernas", "Bandas elásticas", "Banco", "Barra de dominadas", "Esterilla"],
        "required": True,
    },
    {
        "id": "availability",
        "type": "single_choice",
        "label": "¿Cuántos días a la semana puedes entrenar?",
        "options": ["1 día", "2-3 días", "4-5 días", "Todos los días"],
        "required": True,
    },
    {
        "id": "session_time",
        "type": "single_choice",
        "label": "¿Cuánto tiempo puedes dedicar a cada sesión?",
        "options": ["15 minutos", "30 minutos", "45 minutos", "1 hora o más"],
        "required": True,
    },
    {
        "id": "focus_area",
        "type": "multi_choice",
        "label": "¿Hay alguna zona en la que quieras centrarte?",
        "options": [
            "Cuerpo completo",
            "Tren superior (brazos/pecho/hombros)",
            "Tren inferior (piernas/glúteos)",
            "Abdomen y core",
            "Espalda",
            "Flexibilidad y movilidad",
        ],
        "required": True,
    },
    {
        "id": "limitations",
        "type": "multi_choice",
        "label": "¿Tienes limitaciones físicas o movimientos a evitar?",
        "options": ["No", "Rodillas", "Espalda", "Hombros", "Otra"],
        "required": True,
    },
    {
        "id": "plan_style",
        "type": "single_choice",
        "label": "Prefieres un plan...",
        "options": ["Estructurado día a día", "Flexible, elijo cada día", "No sé, recomendadme"],
        "required": True,
    },
    {
        "id": "end_message",
        "type": "info",
        "text": "¡Gracias! Tu plan personalizado está listo. Puedes cambiarlo cuando quieras desde tu perfil.",
    },
]

EXPERIENCE_LEVELS = {
    "Soy principiante": 1,
    "Entreno desde hace un tiempo": 2,
    "Soy experto/a": 3,
}


def get_questionnaire():
    return {"type": ONBOARDING_TYPE, "questions": FITNESS_ONBOARDING}


def _answers(responses):
    out = {}
    for r in responses or []:
        if isinstance(r, dict) and isinstance(r.get("questionId"), str):
            out[r["questionId"]] = r.get("answer")
    return out


def _as_list(value):
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value if v]
    return [str(value)] if str(value) else []


def _choice(answers, key):
    value = answers.get(key)
    return value if isinstance(value, str) else None


def _session_minutes(answer):
    if not answer:
        return None
    if "hora" in answer:
        return 60
    m = re.search(r"\d+", answer)
    return int(m.group()) if m else None


def validate_responses(responses):
    """Todas las preguntas obligatorias contestadas con una opción válida."""
    answers = _answers(responses)
    errors = {}
    for q in FITNESS_ONBOARDING:
        if not q.get("required"):
            continue
        answer = answers.get(q["id"])
        values = _as_list(answer)
        if not values:
            errors[q["id"]] = "Respuesta obligatoria"
        elif q["type"] == "single_choice" and (not isinstance(answer, str) or answer not in q["options"]):
            errors[q["id"]] = "Opción no válida"
        elif q["type"] == "multi_choice" and any(v not in q["options"] for v in values):
            errors[q["id"]] = "Opción no válida"
    if errors:
        raise ValidationFailed("Cuestionario incompleto", errors)
    return answers


def analyze_responses(responses):
    answers = _answers(responses)

    fitness_level = EXPERIENCE_LEVELS.get(_choice(answers, "experience"), 1)
    goals = [g for g in [_choice(answers, "goal"), *_as_list(answers.get("focus_area"))] if g]
    injuries = [x for x in _as_list(answers.get("limitations")) if x != "No"]
    equipment = _as_list(answers.get("equipment"))

    return {
        "fitnessLevel": fitness_level,
        "goals": goals,
        "preferences": {
            "location": _choice(answers, "training_location"),
            "equipment": equipment or ["Ninguno"],
            "availability": _choice(answers, "availability"),
            "sessionTime": _choice(answers, "session_time"),
            "sessionMinutes": _session_minutes(_choice(answers, "session_time")),
            "planStyle": _choice(answers, "plan_style"),
        },
        "injuries": injuries,
    }


def get_onboarding(user):
    return UserQuestionnaire.query.filter_by(user_id=user.id, questionnaire_type=ONBOARDING_TYPE).first()


def complete_onboarding(user, responses):
    """
    Guarda el cuestionario (una sola vez), actualiza el perfil y genera el
    primer plan. Devuelve (cuestionario, análisis, plan).
    """
    if get_onboarding(user) is not None:
        raise OnboardingAlreadyCompleted(user.id)

    validate_responses(responses)
    analysis = analyze_responses(responses)

    questionnaire = UserQuestionnaire(
        user_id=user.id,
        questionnaire_type=ONBOARDING_TYPE,
        responses=json.dumps(responses, ensure_ascii=False),
    )
    db.session.add(questionnaire)
    user.fitness_level = analysis["fitnessLevel"]
    user.set_goals(analysis["goals"])
    db.session.commit()

    prefs = analysis["preferences"]
    plan = workout_generator.generate_personalized_plan(user, {
        "fitnessLevel": analysis["fitnessLevel"],
        "goals": analysis["goals"],
        "timeAvailable": prefs["sessionMinutes"],
        "equipment": [e for e in prefs["equipment"] if e != "Ninguno"] or None,
        "injuries": analysis["injuries"],
    })
    logger.info("[onboarding] user=%s nivel=%s plan=%s", user.id, user.fitness_level, plan.id)
    return questionnaire, analysis, plan
