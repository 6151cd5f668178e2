# fitcoach/routes/movement.py
import json

from flask import Blueprint, current_app, jsonify
from flask_login import current_user, login_required

from fitcoach import db
from fitcoach.models.analysis import MovementAnalysis
from fitcoach.services import movement_analysis
from fitcoach.utils.http import int_arg, json_body, validation_error

movement_bp = Blueprint("movement", __name__, url_prefix="/api/movement-analysis")


@movement_bp.route("", methods=["POST"])
@login_required
def analyze():
    """
    Body: {exerciseName, videoData, sessionId?, keypoints?}
    Respuesta: resultado del análisis + id, userId, exerciseName, timestamp, status.
    """
    data = json_body()
    errors = {}

    exercise_name = data.get("exerciseName")
    if not isinstance(exercise_name, str) or not exercise_name.strip():
        errors["exerciseName"] = "Obligatorio"
    video_data = data.get("videoData")
    if not isinstance(video_data, str) or not video_data:
        errors["videoData"] = "Obligatorio"
    keypoints = data.get("keypoints")
    if keypoints is not None and not isinstance(keypoints, list):
        errors["keypoints"] = "Debe ser una lista de frames"
    session_id = data.get("sessionId")
    if session_id is not None and not isinstance(session_id, (str, int)):
        errors["sessionId"] = "Identificador inválido"

    if errors:
        return validation_error("Faltan datos para el análisis", errors)

    exercise_name = exercise_name.strip()
    result = movement_analysis.analyze_movement(exercise_name, video_data, keypoints)

    record = MovementAnalysis(
        user_id=current_user.id,
        session_id=str(session_id) if session_id is not None else None,
        exercise_name=exercise_name[:200],
        video_url=video_data,
        analysis_result=json.dumps(result, ensure_ascii=False),
        confidence_score=result["formScore"] / 100,
    )
    db.session.add(record)
    db.session.commit()
    current_app.logger.info(
        "[analysis] user=%s ejercicio=%s score=%s", current_user.id, exercise_name, result["formScore"]
    )
    return jsonify(record.to_dict()), 201


@movement_bp.route("", methods=["GET"])
@login_required
def history():
    limit = int_arg("limit", 20, 1, 100)
    rows = (
        MovementAnalysis.query.filter_by(user_id=current_user.id)
        .order_by(MovementAnalysis.created_at.desc(), MovementAnalysis.id.desc())
        .limit(limit)
        .all()
    )
    return jsonify([r.to_dict() for r in rows])
