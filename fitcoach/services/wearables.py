# fitcoach/services/wearables.py
"""
Integraciones con wearables y datos de salud.

El intercambio OAuth con los proveedores está simulado: se generan tokens
opacos (cifrados en BD) y la sincronización crea un punto por tipo de dato.
"""
import logging
import random
import secrets
from collections import OrderedDict
from datetime import datetime, timedelta

from fitcoach import db
from fitcoach.models.wearable import HealthData, WearableIntegration
from fitcoach.services.errors import IntegrationNotFound, UnknownProvider, ValidationFailed
from fitcoach.utils.dates import utcnow

logger = logging.getLogger(__name__)

TOKEN_LIFETIME = timedelta(days=30)

PROVIDERS = [
    {
        "id": "fitbit",
        "name": "Fitbit",
        "description": "Conecta tu Fitbit para sincronizar salud y actividad",
        "supportedData": ["steps", "heart_rate", "sleep", "calories_burned", "active_minutes"],
    },
    {
        "id": "garmin",
        "name": "Garmin",
        "description": "Sincroniza datos de tu reloj o pulsera Garmin",
        "supportedData": ["steps", "heart_rate", "sleep", "calories_burned", "active_minutes", "distance"],
    },
    {
        "id": "apple_health",
        "name": "Apple Health",
        "description": "Datos del iPhone y del Apple Watch vía Apple Health",
        "supportedData": ["steps", "heart_rate", "sleep", "calories_burned", "workouts"],
    },
    {
        "id": "google_fit",
        "name": "Google Fit",
        "description": "Datos de Google Fit y dispositivos Android compatibles",
        "supportedData": ["steps", "heart_rate", "calories_burned", "active_minutes", "workouts"],
    },
]
PROVIDER_IDS = {p["id"] for p in PROVIDERS}

# tipo -> (unidad, generador de valor simulado)
SYNC_DATA_TYPES = OrderedDict([
    ("heart_rate", ("bpm", lambda r: round(60 + r.random() * 40, 1))),
    ("steps", ("steps", lambda r: r.randint(5000, 15000))),
    ("sleep", ("hours", lambda r: round(6 + r.random() * 3, 2))),
    ("calories_burned", ("calories", lambda r: r.randint(1800, 2600))),
    ("active_minutes", ("minutes", lambda r: r.randint(0, 120))),
])

SUMMARY_TIMEFRAMES = ("day", "week", "month")


def get_available_providers():
    return [dict(p) for p in PROVIDERS]


def get_integrations(user):
    return WearableIntegration.query.filter_by(user_id=user.id).order_by(WearableIntegration.created_at).all()


def _check_provider(provider):
    if provider not in PROVIDER_IDS:
        raise UnknownProvider(provider)


def connect_provider(user, provider, auth_code=None, rng=None):
    """Alta (o reactivación) de la integración + sincronización inicial."""
    _check_provider(provider)
    integration = WearableIntegration.query.filter_by(user_id=user.id, provider=provider).first()
    if integration is None:
        integration = WearableIntegration(user_id=user.id, provider=provider)
        db.session.add(integration)

    # Intercambio simulado del código de autorización
    integration.set_tokens(secrets.token_urlsafe(32), secrets.token_urlsafe(32))
    integration.expires_at = utcnow() + TOKEN_LIFETIME
    integration.is_active = True
    db.session.commit()
    logger.info("[wearables] user=%s conectado a %s", user.id, provider)

    sync_health_data(user, rng=rng)
    return integration


def _sync_provider(user, provider, now, rng):
    points = []
    for data_type, (unit, gen) in SYNC_DATA_TYPES.items():
        point = HealthData(
            user_id=user.id,
            data_type=data_type,
            value=float(gen(rng)),
            unit=unit,
            source=provider,
            recorded_at=now,
        )
        db.session.add(point)
        points.append(point)
    return points


def sync_health_data(user, rng=None):
    rng = rng or random.Random()
    now = utcnow()
    new_points = []
    for integration in get_integrations(user):
        if not integration.is_active:
            continue
        new_points.extend(_sync_provider(user, integration.provider, now, rng))
        integration.last_sync = now
    db.session.commit()
    logger.info("[wearables] user=%s sincronizados=%s", user.id, len(new_points))
    return {"synced": len(new_points), "newDataPoints": [p.to_dict() for p in new_points]}


def disconnect_provider(user, provider):
    integration = WearableIntegration.query.filter_by(user_id=user.id, provider=provider).first()
    if integration is None:
        raise IntegrationNotFound(provider)
    db.session.delete(integration)
    db.session.commit()
    logger.info("[wearables] user=%s desconectado de %s", user.id, provider)


# ---- datos de salud ----
def _timeframe_start(timeframe, now):
    if timeframe == "day":
        return now.replace(hour=0, minute=0, second=0, microsecond=0)
    if timeframe == "month":
        return now - timedelta(days=30)
    return now - timedelta(days=7)


def get_health_data_summary(user, timeframe="week"):
    """Por tipo: media, último, nº puntos, mín, máx y unidad."""
    start = _timeframe_start(timeframe, utcnow())
    points = (
        HealthData.query.filter(HealthData.user_id == user.id, HealthData.recorded_at >= start)
        .order_by(HealthData.recorded_at, HealthData.id)
        .all()
    )
    by_type = OrderedDict()
    for p in points:
        by_type.setdefault(p.data_type, []).append(p)

    summary = {}
    for data_type, rows in by_type.items():
        values = [r.value for r in rows]
        summary[data_type] = {
            "average": round(sum(values) / len(values), 2),
            "latest": values[-1],
            "count": len(values),
            "min": min(values),
            "max": max(values),
            "unit": rows[0].unit or "units",
        }
    return summary


def get_health_data(user, data_type=None, limit=100):
    q = HealthData.query.filter_by(user_id=user.id)
    if data_type:
        q = q.filter_by(data_type=data_type)
    return q.order_by(HealthData.recorded_at.desc()).limit(limit).all()


def _parse_datetime(value):
    if value in (None, ""):
        return utcnow()
    try:
        dt = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        raise ValidationFailed("Fecha inválida", {"recordedAt": "Formato ISO 8601 esperado"})
    if dt.tzinfo is not None:
        dt = (dt - dt.utcoffset()).replace(tzinfo=None)
    return dt


def add_health_data_point(user, data):
    errors = {}
    data_type = str(data.get("dataType") or "").strip()
    unit = str(data.get("unit") or "").strip()
    if not data_type:
        errors["dataType"] = "Obligatorio"
    if not unit:
        errors["unit"] = "Obligatorio"
    try:
        value = float(data.get("value"))
    except (TypeError, ValueError):
        errors["value"] = "Debe ser numérico"
        value = None
    if errors:
        raise ValidationFailed("Datos de salud inválidos", errors)

    point = HealthData(
        user_id=user.id,
        data_type=data_type,
        value=value,
        unit=unit,
        source=str(data.get("source") or "manual").strip(),
        recorded_at=_parse_datetime(data.get("recordedAt")),
    )
    db.session.add(point)
    db.session.commit()
    return point
