# fitcoach/services/gdpr.py
"""Exportación y borrado de los datos de un usuario (RGPD)."""
import logging

from fitcoach import db
from fitcoach.utils.dates import utcnow

logger = logging.getLogger(__name__)


def export_user_data(user) -> dict:
    """Todo lo que guardamos del usuario, sin tokens ni hash de contraseña."""
    return {
        "exportedAt": utcnow().isoformat(),
        "user": user.to_dict(),
        "stats": user.stats.to_dict() if user.stats else None,
        "questionnaires": [q.to_dict() for q in user.questionnaires],
        "workoutPlans": [p.to_dict() for p in user.workout_plans],
        "workoutSessions": [s.to_dict() for s in user.sessions],
        "achievements": [a.to_dict() for a in user.achievements],
        "movementAnalyses": [a.to_dict() for a in user.analyses],
        "wearableIntegrations": [i.to_dict() for i in user.integrations],
        "healthData": [h.to_dict() for h in user.health_data],
    }


def delete_account(user) -> None:
    """Borrado físico; las relaciones caen en cascada."""
    user_id = user.id
    db.session.delete(user)
    db.session.commit()
    logger.info("[gdpr] cuenta eliminada user=%s", user_id)
