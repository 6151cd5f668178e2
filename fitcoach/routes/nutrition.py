# fitcoach/routes/nutrition.py
from flask import Blueprint, jsonify
from flask_login import current_user, login_required

from fitcoach import ai
from fitcoach.utils.http import json_body, validation_error

nutrition_bp = Blueprint("nutrition", __name__, url_prefix="/api/nutrition")


def _opt_weight(data, key, errors):
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not 20 <= value <= 400:
        errors[key] = "Peso en kg (20-400)"
        return None
    return float(value)


@nutrition_bp.route("/advice", methods=["POST"])
@login_required
def advice():
    data = json_body()
    errors = {}
    goals = data.get("goals")
    if goals is None:
        goals = current_user.goals_list()
    elif not isinstance(goals, list):
        errors["goals"] = "Lista de objetivos"
        goals = []
    current_weight = _opt_weight(data, "currentWeight", errors)
    target_weight = _opt_weight(data, "targetWeight", errors)
    if errors:
        return validation_error("Datos de nutrición inválidos", errors)

    return jsonify(ai.provide_nutrition_advice(
        [str(g) for g in goals] or ["forma física general"],
        current_weight,
        target_weight,
    ))
