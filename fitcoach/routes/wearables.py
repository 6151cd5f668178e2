# fitcoach/routes/wearables.py
from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required

from fitcoach.services import wearables
from fitcoach.services.errors import IntegrationNotFound, UnknownProvider, ValidationFailed
from fitcoach.utils.http import int_arg, json_body, validation_error

wearables_bp = Blueprint("wearables", __name__, url_prefix="/api")


# ---------- Integraciones ----------
@wearables_bp.route("/wearables/providers", methods=["GET"])
@login_required
def providers():
    return jsonify(wearables.get_available_providers())


@wearables_bp.route("/wearables/integrations", methods=["GET"])
@login_required
def integrations():
    return jsonify([i.to_dict() for i in wearables.get_integrations(current_user)])


@wearables_bp.route("/wearables/connect", methods=["POST"])
@login_required
def connect():
    data = json_body()
    provider = data.get("provider")
    if not isinstance(provider, str) or not provider:
        return validation_error("Proveedor obligatorio", {"provider": "Obligatorio"})
    try:
        integration = wearables.connect_provider(current_user, provider, data.get("authCode"))
    except UnknownProvider:
        return validation_error("Proveedor no soportado", {"provider": f"Desconocido: {provider}"})
    return jsonify(integration.to_dict()), 201


@wearables_bp.route("/wearables/sync", methods=["POST"])
@login_required
def sync():
    return jsonify(wearables.sync_health_data(current_user))


@wearables_bp.route("/wearables/<provider>", methods=["DELETE"])
@login_required
def disconnect(provider):
    try:
        wearables.disconnect_provider(current_user, provider)
    except IntegrationNotFound:
        return jsonify(error="IntegrationNotFound"), 404
    return jsonify(ok=True)


# ---------- Datos de salud ----------
@wearables_bp.route("/health-data", methods=["GET"])
@login_required
def health_data():
    rows = wearables.get_health_data(
        current_user,
        data_type=request.args.get("type") or request.args.get("dataType"),
        limit=int_arg("limit", 100, 1, 500),
    )
    return jsonify([r.to_dict() for r in rows])


@wearables_bp.route("/health-data", methods=["POST"])
@login_required
def add_health_data():
    try:
        point = wearables.add_health_data_point(current_user, json_body())
    except ValidationFailed as e:
        return validation_error(e.message, e.fields)
    return jsonify(point.to_dict()), 201


@wearables_bp.route("/health-data/summary", methods=["GET"])
@login_required
def health_summary():
    timeframe = request.args.get("timeframe", "week")
    if timeframe not in wearables.SUMMARY_TIMEFRAMES:
        timeframe = "week"
    return jsonify(wearables.get_health_data_summary(current_user, timeframe))
