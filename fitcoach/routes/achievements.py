# fitcoach/routes/achievements.py
from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required

from fitcoach.models.achievement import Achievement
from fitcoach.services import gamification

achievements_bp = Blueprint("achievements", __name__, url_prefix="/api/achievements")


@achievements_bp.route("", methods=["GET"])
@login_required
def list_achievements():
    rows = (
        Achievement.query.filter_by(user_id=current_user.id)
        .order_by(Achievement.earned_at.desc())
        .all()
    )
    return jsonify([a.to_dict() for a in rows])


@achievements_bp.route("/check", methods=["POST"])
@login_required
def check():
    created = gamification.check_achievements(current_user)
    return jsonify(newAchievements=[a.to_dict() for a in created])


@achievements_bp.route("/level", methods=["GET"])
@login_required
def level():
    return jsonify(gamification.calculate_user_level(current_user))


@achievements_bp.route("/leaderboard", methods=["GET"])
@login_required
def leaderboard():
    timeframe = request.args.get("timeframe", "week")
    if timeframe not in gamification.TIMEFRAMES:
        timeframe = "week"
    return jsonify(gamification.get_leaderboard(current_user, timeframe))


@achievements_bp.route("/motivation", methods=["GET"])
@login_required
def motivation():
    return jsonify(message=gamification.get_motivational_message(current_user))
