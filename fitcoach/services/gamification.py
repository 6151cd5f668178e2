# fitcoach/services/gamification.py
"""
Logros, nivel/XP, ranking y mensajes de motivación.

Las reglas de logro son predicados sobre (stats, sesiones recientes,
análisis recientes). Se evalúan en orden, sin salida anticipada, y se
inserta cada logro nuevo que se cumpla. Nunca se retira un logro.
"""
import logging
import random
from collections import namedtuple
from datetime import timedelta

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError

from fitcoach import db
from fitcoach.models.achievement import Achievement
from fitcoach.models.analysis import MovementAnalysis
from fitcoach.models.user import User, UserStats
from fitcoach.models.workout import WorkoutSession
from fitcoach.utils.dates import utcnow

logger = logging.getLogger(__name__)

SESSION_WINDOW = 100
ANALYSIS_WINDOW = 50
DEFAULT_POINTS = 100

XP_PER_WORKOUT = 10
XP_PER_ACHIEVEMENT = 50
XP_PER_STREAK_DAY = 5
XP_STREAK_CAP = 200
CALORIES_PER_XP = 100
XP_PER_LEVEL = 1000

LEVEL_TITLES = [
    "Fitness Newbie", "Workout Warrior", "Strength Seeker", "Endurance Expert",
    "Fitness Fanatic", "Training Titan", "Exercise Elite", "Gym Guardian",
    "Fitness Master", "Legendary Lifter",
]

# Datos con los que se evalúan las reglas
Activity = namedtuple("Activity", "stats sessions form_scores now")

AchievementRule = namedtuple("AchievementRule", "type title description condition")


# ----------------------------------------------------------------------------#
# Predicados
# ----------------------------------------------------------------------------#
def _stat(activity, name):
    return getattr(activity.stats, name, 0) or 0


def _weekend_warrior(activity) -> bool:
    week_ago = activity.now - timedelta(days=7)
    days = {
        s.completed_at.weekday()
        for s in activity.sessions
        if s.completed_at and s.completed_at > week_ago and s.completed_at.weekday() >= 5
    }
    return len(days) >= 2


def _form_master(activity) -> bool:
    # form_scores va de más reciente a más antiguo
    scores = activity.form_scores
    if len(scores) < 2:
        return False
    recent = scores[:5]
    older = scores[-5:]
    return sum(recent) / len(recent) - sum(older) / len(older) >= 20


RULES = [
    AchievementRule("streak", "7-Day Streak", "¡7 días seguidos entrenando!",
                    lambda a: _stat(a, "current_streak") >= 7),
    AchievementRule("streak", "30-Day Streak", "¡Increíble! 30 días de constancia.",
                    lambda a: _stat(a, "current_streak") >= 30),
    AchievementRule("perfectionist", "Perfectionist", "Técnica del 95% o más en un análisis.",
                    lambda a: any(s >= 95 for s in a.form_scores)),
    AchievementRule("explorer", "Exercise Explorer", "Has probado 10 ejercicios distintos.",
                    lambda a: len({s.name for s in a.sessions}) >= 10),
    AchievementRule("milestone", "Century Club", "¡100 entrenamientos completados!",
                    lambda a: _stat(a, "total_workouts") >= 100),
    AchievementRule("milestone", "Calorie Crusher", "Más de 10.000 kcal quemadas en total.",
                    lambda a: _stat(a, "total_calories_burned") >= 10000),
    AchievementRule("consistency", "Weekend Warrior", "Entrenaste sábado y domingo.",
                    _weekend_warrior),
    AchievementRule("improvement", "Form Master", "Has mejorado tu técnica 20 puntos o más.",
                    _form_master),
]


def _load_activity(user) -> Activity:
    sessions = (
        WorkoutSession.query.filter_by(user_id=user.id)
        .order_by(WorkoutSession.completed_at.desc())
        .limit(SESSION_WINDOW)
        .all()
    )
    analyses = (
        MovementAnalysis.query.filter_by(user_id=user.id)
        .order_by(MovementAnalysis.created_at.desc(), MovementAnalysis.id.desc())
        .limit(ANALYSIS_WINDOW)
        .all()
    )
    scores = [a.form_score for a in analyses if a.form_score is not None]
    return Activity(user.stats, sessions, scores, utcnow())


def evaluate_rules(activity, already_earned=()):
    """Reglas cumplidas y no concedidas aún (en orden de declaración)."""
    earned = set(already_earned)
    return [
        r for r in RULES
        if (r.type, r.title) not in earned and r.condition(activity)
    ]


def check_achievements(user):
    """
    Inserta los logros nuevos y los devuelve.
    Cada inserción va en un savepoint: si otra petición concurrente ya lo
    insertó, la restricción única salta y ese logro se omite.
    """
    existing = {
        (a.type, a.title)
        for a in Achievement.query.filter_by(user_id=user.id).all()
    }
    pending = evaluate_rules(_load_activity(user), existing)

    created = []
    for rule in pending:
        ach = Achievement(
            user_id=user.id,
            type=rule.type,
            title=rule.title,
            description=rule.description,
            points=DEFAULT_POINTS,
        )
        try:
            with db.session.begin_nested():
                db.session.add(ach)
        except IntegrityError:
            logger.info("[achievements] duplicado concurrente omitido: %s/%s", rule.type, rule.title)
            continue
        created.append(ach)

    db.session.commit()
    if created:
        logger.info("[achievements] user=%s nuevos=%s", user.id, [a.title for a in created])
    return created


# ----------------------------------------------------------------------------#
# Nivel / XP
# ----------------------------------------------------------------------------#
def compute_xp(workouts: int, achievements: int, streak: int, calories: int) -> int:
    xp = XP_PER_WORKOUT * (workouts or 0)
    xp += XP_PER_ACHIEVEMENT * (achievements or 0)
    xp += min(XP_PER_STREAK_DAY * (streak or 0), XP_STREAK_CAP)
    xp += (calories or 0) // CALORIES_PER_XP
    return xp


def level_for_xp(xp: int) -> dict:
    level = xp // XP_PER_LEVEL + 1
    title = LEVEL_TITLES[min((level - 1) // 5, len(LEVEL_TITLES) - 1)]
    return {
        "level": level,
        "xp": xp,
        "xpToNextLevel": XP_PER_LEVEL - xp % XP_PER_LEVEL,
        "title": title,
    }


def calculate_user_level(user) -> dict:
    stats = user.stats
    count = Achievement.query.filter_by(user_id=user.id).count()
    xp = compute_xp(
        getattr(stats, "total_workouts", 0),
        count,
        getattr(stats, "current_streak", 0),
        getattr(stats, "total_calories_burned", 0),
    )
    return level_for_xp(xp)


# ----------------------------------------------------------------------------#
# Ranking
# ----------------------------------------------------------------------------#
TIMEFRAMES = {"week": 7, "month": 30, "all": None}
LEADERBOARD_SIZE = 10


def _display_name(user) -> str:
    name = f"{user.first_name or ''} {user.last_name or ''}".strip()
    return name or user.email.split("@", 1)[0]


def get_leaderboard(current_user, timeframe: str = "week"):
    """Usuarios con entrenos en el periodo, ordenados por XP. Siempre incluye al usuario actual."""
    days = TIMEFRAMES.get(timeframe, 7)
    q = db.session.query(WorkoutSession.user_id, func.count(WorkoutSession.id))
    if days:
        q = q.filter(WorkoutSession.completed_at >= utcnow() - timedelta(days=days))
    workouts_by_user = dict(q.group_by(WorkoutSession.user_id).all())
    workouts_by_user.setdefault(current_user.id, 0)

    users = User.query.filter(User.id.in_(list(workouts_by_user))).all()
    rows = []
    for u in users:
        lvl = calculate_user_level(u)
        rows.append({
            "userId": u.id,
            "name": _display_name(u),
            "level": lvl["level"],
            "xp": lvl["xp"],
            "workouts": workouts_by_user.get(u.id, 0),
            "isCurrentUser": u.id == current_user.id,
        })

    rows.sort(key=lambda r: (-r["xp"], -r["workouts"], r["userId"]))
    for pos, row in enumerate(rows, start=1):
        row["position"] = pos

    top = rows[:LEADERBOARD_SIZE]
    if not any(r["isCurrentUser"] for r in top):
        top.extend(r for r in rows if r["isCurrentUser"])
    return top


# ----------------------------------------------------------------------------#
# Motivación
# ----------------------------------------------------------------------------#
DEFAULT_MESSAGES = [
    "¡Cada entreno cuenta! Tú puedes 💪",
    "Progreso, no perfección. ¡Sigue avanzando! 🚀",
    "Tu yo del futuro te agradecerá el esfuerzo de hoy ⭐",
    "El único entreno del que te arrepientes es el que no haces 🏃",
]


def get_motivational_message(user, rng=random) -> str:
    stats = user.stats or UserStats()
    messages = []

    streak = stats.current_streak or 0
    if streak >= 7:
        messages.append(f"¡Impresionante! Llevas una racha de {streak} días 🔥")
    elif streak >= 3:
        messages.append(f"¡Buen ritmo! {streak} días seguidos 💪")

    progress = stats.weekly_progress or 0
    goal = stats.weekly_goal or 0
    if goal > 0 and progress >= goal:
        messages.append("¡Objetivo semanal superado! Toca celebrarlo 🎉")
    elif goal > 0 and progress == goal - 1:
        messages.append("¡Casi! Un entreno más para cumplir tu objetivo semanal 🎯")

    latest = (
        Achievement.query.filter_by(user_id=user.id)
        .order_by(Achievement.earned_at.desc())
        .first()
    )
    if latest and latest.earned_at and utcnow() - latest.earned_at < timedelta(hours=24):
        messages.append(f"¡Enhorabuena por conseguir \"{latest.title}\"! 🏆")

    if not messages:
        messages.append(rng.choice(DEFAULT_MESSAGES))
    return rng.choice(messages)
