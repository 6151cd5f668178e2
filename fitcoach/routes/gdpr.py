# fitcoach/routes/gdpr.py
from flask import Blueprint, jsonify
from flask_login import current_user, login_required, logout_user

from fitcoach.services import gdpr

gdpr_bp = Blueprint("gdpr", __name__, url_prefix="/api/gdpr")


@gdpr_bp.route("/export", methods=["POST"])
@login_required
def export_data():
    return jsonify(gdpr.export_user_data(current_user))


@gdpr_bp.route("/delete-account", methods=["DELETE"])
@login_required
def delete_account():
    user = current_user._get_current_object()
    logout_user()
    gdpr.delete_account(user)
    return jsonify(ok=True, message="Cuenta y datos eliminados.")
