# fitcoach/routes/onboarding.py
from flask import Blueprint, jsonify
from flask_login import current_user, login_required

from fitcoach.models.user import UserQuestionnaire
from fitcoach.services import questionnaire
from fitcoach.services.errors import OnboardingAlreadyCompleted, ValidationFailed
from fitcoach.utils.http import json_body, validation_error

onboarding_bp = Blueprint("onboarding", __name__, url_prefix="/api")


@onboarding_bp.route("/onboarding/questionnaire", methods=["GET"])
@login_required
def get_questionnaire():
    return jsonify(questionnaire.get_questionnaire())


@onboarding_bp.route("/onboarding/status", methods=["GET"])
@login_required
def status():
    done = questionnaire.get_onboarding(current_user)
    return jsonify(
        completed=done is not None,
        completedAt=done.completed_at.isoformat() if done else None,
    )


@onboarding_bp.route("/onboarding/complete", methods=["POST"])
@login_required
def complete():
    responses = json_body().get("responses")
    if not isinstance(responses, list):
        return validation_error("Respuestas obligatorias", {"responses": "Debe ser una lista"})
    try:
        saved, analysis, plan = questionnaire.complete_onboarding(current_user, responses)
    except OnboardingAlreadyCompleted:
        return jsonify(error="OnboardingAlreadyCompleted", message="El cuestionario ya se completó."), 409
    except ValidationFailed as e:
        return validation_error(e.message, e.fields)

    return jsonify(
        questionnaire=saved.to_dict(),
        profile=analysis,
        user=current_user.to_dict(),
        workoutPlan=plan.to_dict(),
    ), 201


@onboarding_bp.route("/user/questionnaires", methods=["GET"])
@login_required
def list_questionnaires():
    rows = (
        UserQuestionnaire.query.filter_by(user_id=current_user.id)
        .order_by(UserQuestionnaire.completed_at.desc())
        .all()
    )
    return jsonify([q.to_dict() for q in rows])
