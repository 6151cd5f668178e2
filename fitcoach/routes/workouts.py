# fitcoach/routes/workouts.py
from flask import Blueprint, current_app, jsonify, request
from flask_login import current_user, login_required

from fitcoach import db
from fitcoach.models.workout import Exercise, WorkoutPlan, WorkoutSession
from fitcoach.services import gamification, workout_generator
from fitcoach.services.errors import PlanNotFound
from fitcoach.services.stats import record_workout_session
from fitcoach.utils.http import int_arg, json_body, validation_error

workouts_bp = Blueprint("workouts", __name__, url_prefix="/api")

EXERCISE_TYPES = {"strength", "cardio", "flexibility"}
INTENSITIES = {"low", "medium", "high"}


# -----------------------------------------------------------------------------#
# Validación
# -----------------------------------------------------------------------------#
def _opt_int(data, key, errors, minimum=0, maximum=None):
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)) or int(value) != value:
        errors[key] = "Debe ser un entero"
        return None
    value = int(value)
    if value < minimum or (maximum is not None and value > maximum):
        errors[key] = f"Fuera de rango ({minimum}-{maximum})" if maximum else f"Mínimo {minimum}"
        return None
    return value


def _parse_exercise(item, i, errors):
    prefix = f"exercises[{i}]"
    if not isinstance(item, dict):
        errors[prefix] = "Debe ser un objeto"
        return None
    sub = {}
    name = (item.get("name") or "").strip() if isinstance(item.get("name"), str) else ""
    if not name:
        sub["name"] = "Obligatorio"
    ex_type = item.get("type") or "strength"
    if ex_type not in EXERCISE_TYPES:
        sub["type"] = "strength | cardio | flexibility"
    muscles = item.get("targetMuscles") or []
    if isinstance(muscles, str):
        muscles = muscles.split(",")

    ex = Exercise(
        name=name,
        description=item.get("description"),
        type=ex_type,
        difficulty=_opt_int(item, "difficulty", sub, 1, 5) or 1,
        target_muscles=",".join(str(m).strip() for m in muscles if str(m).strip()),
        day=_opt_int(item, "day", sub, 1) or 1,
        order=_opt_int(item, "order", sub, 1) or i + 1,
        duration=_opt_int(item, "duration", sub),
        sets=_opt_int(item, "sets", sub),
        reps=workout_generator.parse_reps(item.get("reps")),
    )
    weight = item.get("weight")
    if weight is not None:
        if isinstance(weight, bool) or not isinstance(weight, (int, float)) or weight < 0:
            sub["weight"] = "Número positivo"
        else:
            ex.weight = float(weight)

    for k, v in sub.items():
        errors[f"{prefix}.{k}"] = v
    return ex


def _plan_or_404(plan_id):
    return WorkoutPlan.query.filter_by(id=plan_id, user_id=current_user.id).first()


# -----------------------------------------------------------------------------#
# Planes
# -----------------------------------------------------------------------------#
@workouts_bp.route("/workout-plans", methods=["GET"])
@login_required
def list_plans():
    plans = (
        WorkoutPlan.query.filter_by(user_id=current_user.id)
        .order_by(WorkoutPlan.created_at.desc(), WorkoutPlan.id.desc())
        .all()
    )
    return jsonify([p.to_dict() for p in plans])


@workouts_bp.route("/workout-plans", methods=["POST"])
@login_required
def create_plan():
    data = json_body()
    errors = {}

    name = data.get("name")
    if not isinstance(name, str) or not name.strip():
        errors["name"] = "Obligatorio"

    difficulty = data.get("difficulty", 1)
    if isinstance(difficulty, str):
        difficulty = workout_generator.plan_difficulty(difficulty)
    else:
        difficulty = _opt_int(data, "difficulty", errors, 1, 5) or 1

    raw_exercises = data.get("exercises") or []
    if not isinstance(raw_exercises, list):
        errors["exercises"] = "Debe ser una lista"
        raw_exercises = []
    exercises = [_parse_exercise(item, i, errors) for i, item in enumerate(raw_exercises)]

    if errors:
        return validation_error("Plan inválido", errors)

    plan = WorkoutPlan(
        user_id=current_user.id,
        name=name.strip()[:200],
        description=data.get("description"),
        difficulty=difficulty,
        is_active=bool(data.get("isActive", True)),
    )
    plan.exercises.extend(exercises)
    db.session.add(plan)
    db.session.commit()
    return jsonify(plan.to_dict()), 201


@workouts_bp.route("/workout-plans/<int:plan_id>", methods=["GET"])
@login_required
def get_plan(plan_id):
    plan = _plan_or_404(plan_id)
    if not plan:
        return jsonify(error="PlanNotFound"), 404
    return jsonify(plan.to_dict())


@workouts_bp.route("/workout-plans/<int:plan_id>", methods=["DELETE"])
@login_required
def delete_plan(plan_id):
    plan = _plan_or_404(plan_id)
    if not plan:
        return jsonify(error="PlanNotFound"), 404
    db.session.delete(plan)
    db.session.commit()
    return jsonify(ok=True)


@workouts_bp.route("/workout-plans/generate", methods=["POST"])
@login_required
def generate_plan():
    data = json_body()
    preferences = data.get("preferences") or {}
    if not isinstance(preferences, dict):
        return validation_error("Preferencias inválidas", {"preferences": "Debe ser un objeto"})
    plan = workout_generator.generate_personalized_plan(current_user, preferences)
    return jsonify(plan.to_dict()), 201


@workouts_bp.route("/workout-plans/<int:plan_id>/adapt", methods=["POST"])
@login_required
def adapt_plan(plan_id):
    data = json_body()
    errors = {}
    scores = data.get("exerciseScores") or {}
    if not isinstance(scores, dict) or any(
        isinstance(v, bool) or not isinstance(v, (int, float)) for v in scores.values()
    ):
        errors["exerciseScores"] = "Objeto nombre -> puntuación"
    overall = data.get("overallPerformance")
    if overall is None or isinstance(overall, bool) or not isinstance(overall, (int, float)):
        errors["overallPerformance"] = "Obligatorio (0-100)"
    if errors:
        return validation_error("Datos de rendimiento inválidos", errors)

    try:
        plan = workout_generator.adapt_plan_to_proficiency(
            plan_id, current_user, {"exerciseScores": scores, "overallPerformance": overall}
        )
    except PlanNotFound:
        return jsonify(error="PlanNotFound"), 404
    return jsonify(plan.to_dict())


@workouts_bp.route("/workout-plans/<int:plan_id>/progression", methods=["POST"])
@login_required
def progression_plan(plan_id):
    try:
        plan = workout_generator.generate_progression_plan(plan_id, current_user)
    except PlanNotFound:
        return jsonify(error="PlanNotFound"), 404
    return jsonify(plan.to_dict()), 201


@workouts_bp.route("/exercises/recommended", methods=["GET"])
@login_required
def recommended_exercises():
    muscles = [m for m in (request.args.get("muscles") or "").split(",") if m.strip()]
    difficulty = int_arg("difficulty", current_user.fitness_level or 1, 1, 5)
    return jsonify(workout_generator.get_recommended_exercises(muscles, difficulty))


# -----------------------------------------------------------------------------#
# Sesiones
# -----------------------------------------------------------------------------#
@workouts_bp.route("/workout-sessions", methods=["GET"])
@login_required
def list_sessions():
    limit = int_arg("limit", 20, 1, 100)
    sessions = (
        WorkoutSession.query.filter_by(user_id=current_user.id)
        .order_by(WorkoutSession.completed_at.desc())
        .limit(limit)
        .all()
    )
    return jsonify([s.to_dict() for s in sessions])


@workouts_bp.route("/workout-sessions", methods=["POST"])
@login_required
def create_session():
    data = json_body()
    errors = {}

    name = data.get("name")
    if not isinstance(name, str) or not name.strip():
        errors["name"] = "Obligatorio"
    duration = _opt_int(data, "duration", errors)
    calories = _opt_int(data, "caloriesBurned", errors)
    intensity = data.get("intensity")
    if intensity is not None and intensity not in INTENSITIES:
        errors["intensity"] = "low | medium | high"

    plan_id = data.get("workoutPlanId")
    if plan_id is not None and (not isinstance(plan_id, int) or not _plan_or_404(plan_id)):
        errors["workoutPlanId"] = "Plan inexistente"

    if errors:
        return validation_error("Sesión inválida", errors)

    session = record_workout_session(current_user, {
        "name": name.strip()[:200],
        "type": data.get("type"),
        "duration": duration,
        "caloriesBurned": calories,
        "intensity": intensity,
        "workoutPlanId": plan_id,
    })
    new_achievements = gamification.check_achievements(current_user)
    current_app.logger.info("[sessions] user=%s sesión=%s logros=%s", current_user.id, session.id, len(new_achievements))

    body = session.to_dict()
    body["newAchievements"] = [a.to_dict() for a in new_achievements]
    return jsonify(body), 201
