# fitcoach/routes/dashboard.py
from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required

from fitcoach.services.dashboard import get_advanced_analytics, get_dashboard_data

dashboard_bp = Blueprint("dashboard", __name__, url_prefix="/api/dashboard")


@dashboard_bp.route("/stats")
@login_required
def stats():
    return jsonify(get_dashboard_data(current_user))


@dashboard_bp.route("/analytics")
@login_required
def analytics():
    time_range = request.args.get("timeRange", "30d")
    return jsonify(get_advanced_analytics(current_user, time_range))
