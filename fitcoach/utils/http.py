# fitcoach/utils/http.py
"""Helpers compartidos por los blueprints JSON."""
from flask import jsonify, request


def json_body() -> dict:
    """Cuerpo JSON como dict ({} si no hay o no es un objeto)."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def validation_error(message, fields=None):
    return jsonify(error="ValidationError", message=message, fields=fields or {}), 400


def int_arg(name, default, minimum=1, maximum=100):
    """Query param entero acotado; el valor por defecto si no es válido."""
    try:
        value = int(request.args.get(name, default))
    except (TypeError, ValueError):
        return default
    return max(minimum, min(maximum, value))
