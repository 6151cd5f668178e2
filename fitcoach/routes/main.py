# fitcoach/routes/main.py
from flask import Blueprint, current_app, jsonify, request
from flask_login import current_user

from fitcoach.utils.dates import utcnow
from fitcoach.utils.http import json_body

main = Blueprint("main", __name__)


@main.route("/api/health")
def health():
    return jsonify(status="ok", timestamp=utcnow().isoformat())


@main.route("/api/errors/log", methods=["POST"])
def log_client_error():
    """Errores del cliente (error boundary): solo se registran en el log."""
    data = json_body()
    user_id = current_user.get_id() if current_user.is_authenticated else None
    current_app.logger.error(
        "[client] %s | url=%s user=%s ua=%s",
        str(data.get("message") or "sin mensaje")[:500],
        str(data.get("url") or "")[:300],
        user_id,
        request.headers.get("User-Agent", "")[:200],
    )
    if data.get("stack"):
        current_app.logger.debug("[client] stack: %s", str(data["stack"])[:4000])
    return jsonify(logged=True), 202
