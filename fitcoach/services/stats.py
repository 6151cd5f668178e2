# fitcoach/services/stats.py
"""
Registro de sesiones y actualización de UserStats.

Racha:
  - último entreno ayer (o ninguno) -> +1
  - último entreno hoy              -> sin cambios
  - en otro caso                    -> 1
Progreso semanal: +1 si es la misma semana ISO del último entreno, si no 1.
"""
import logging
from datetime import timedelta

from fitcoach import db
from fitcoach.models.user import UserStats
from fitcoach.models.workout import WorkoutSession
from fitcoach.utils.dates import utcnow, same_iso_week

logger = logging.getLogger(__name__)


def apply_session(stats, duration, calories, now=None):
    """Actualiza los contadores de `stats` para una sesión completada en `now`."""
    now = now or utcnow()
    last = stats.last_workout_date
    today = now.date()

    stats.total_workouts = (stats.total_workouts or 0) + 1
    stats.total_calories_burned = (stats.total_calories_burned or 0) + int(calories or 0)

    if last is None or last.date() == today - timedelta(days=1):
        stats.current_streak = (stats.current_streak or 0) + 1
    elif last.date() == today:
        stats.current_streak = stats.current_streak or 1
    else:
        stats.current_streak = 1
    stats.longest_streak = max(stats.longest_streak or 0, stats.current_streak)

    if last is not None and same_iso_week(last.date(), today):
        stats.weekly_progress = (stats.weekly_progress or 0) + 1
    else:
        stats.weekly_progress = 1

    stats.last_workout_date = now
    return stats


def record_workout_session(user, data, now=None):
    """
    Inserta la sesión y actualiza las estadísticas en la misma transacción.
    `data` ya validado: name, type, duration, caloriesBurned, intensity, workoutPlanId.
    """
    now = now or utcnow()
    session = WorkoutSession(
        user_id=user.id,
        plan_id=data.get("workoutPlanId"),
        name=data["name"],
        type=data.get("type"),
        duration=data.get("duration"),
        calories_burned=data.get("caloriesBurned"),
        intensity=data.get("intensity"),
        completed_at=now,
    )
    db.session.add(session)

    stats = user.stats
    if stats is None:
        stats = UserStats(user_id=user.id)
        user.stats = stats
    apply_session(stats, session.duration, session.calories_burned, now=now)

    db.session.commit()
    logger.info(
        "[stats] user=%s sesión=%s racha=%s semana=%s",
        user.id, session.id, stats.current_streak, stats.weekly_progress,
    )
    return session
