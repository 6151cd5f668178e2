# fitcoach/services/dashboard.py
"""Datos del panel principal y analítica avanzada."""
from collections import OrderedDict, defaultdict
from datetime import timedelta

from fitcoach.models.achievement import Achievement
from fitcoach.models.analysis import MovementAnalysis
from fitcoach.models.user import UserStats
from fitcoach.models.wearable import HealthData
from fitcoach.models.workout import WorkoutSession
from fitcoach.utils.dates import utcnow

TIME_RANGES = {"7d": 7, "30d": 30, "90d": 90, "1y": 365}
DEFAULT_RANGE_DAYS = 30
PALETTE = ["#8884d8", "#82ca9d", "#ffc658", "#ff7300", "#00ff00"]
COMPARISON_WEEKS = 8


def range_days(time_range) -> int:
    return TIME_RANGES.get(time_range or "", DEFAULT_RANGE_DAYS)


def get_dashboard_data(user) -> dict:
    stats = user.stats or UserStats()
    sessions = (
        WorkoutSession.query.filter_by(user_id=user.id)
        .order_by(WorkoutSession.completed_at.desc())
        .limit(5).all()
    )
    achievements = (
        Achievement.query.filter_by(user_id=user.id)
        .order_by(Achievement.earned_at.desc())
        .limit(3).all()
    )
    health = (
        HealthData.query.filter_by(user_id=user.id)
        .order_by(HealthData.recorded_at.desc())
        .limit(10).all()
    )
    return {
        "stats": stats.to_dict(),
        "recentSessions": [s.to_dict() for s in sessions],
        "recentAchievements": [a.to_dict() for a in achievements],
        "recentHealthData": [h.to_dict() for h in health],
    }


# ---- analítica ----
def _scored(analyses):
    for a in analyses:
        score = a.form_score
        if score is not None:
            yield a, score


def _avg(values):
    return round(sum(values) / len(values), 1) if values else 0


def _form_score_trend(analyses):
    by_day = OrderedDict()
    for a, score in _scored(sorted(analyses, key=lambda x: x.created_at)):
        by_day.setdefault(a.created_at.date(), []).append(score)
    return [
        {"date": day.isoformat(), "score": _avg(scores), "workouts": len(scores)}
        for day, scores in by_day.items()
    ]


def _exercise_distribution(analyses):
    counts = defaultdict(int)
    for a in analyses:
        counts[a.exercise_name] += 1
    ordered = sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))
    return [
        {"name": name, "value": count, "color": PALETTE[i % len(PALETTE)]}
        for i, (name, count) in enumerate(ordered)
    ]


def _weekly_comparison(analyses, now):
    """Media de técnica por semana (8 semanas, la última es la actual) frente a la anterior."""
    week_start = (now - timedelta(days=now.weekday())).date()
    weeks = [week_start - timedelta(weeks=i) for i in range(COMPARISON_WEEKS, -1, -1)]
    buckets = defaultdict(list)
    for a, score in _scored(analyses):
        d = a.created_at.date()
        buckets[d - timedelta(days=d.weekday())].append(score)

    out = []
    for i in range(1, len(weeks)):
        this_week = _avg(buckets.get(weeks[i], []))
        last_week = _avg(buckets.get(weeks[i - 1], []))
        improvement = round((this_week - last_week) / last_week * 100) if last_week else 0
        out.append({
            "week": weeks[i].isoformat(),
            "thisWeek": this_week,
            "lastWeek": last_week,
            "improvement": improvement,
        })
    return out


def get_advanced_analytics(user, time_range=None) -> dict:
    now = utcnow()
    since = now - timedelta(days=range_days(time_range))
    oldest_week = now - timedelta(weeks=COMPARISON_WEEKS + 1, days=now.weekday())

    analyses = (
        MovementAnalysis.query.filter(
            MovementAnalysis.user_id == user.id,
            MovementAnalysis.created_at >= min(since, oldest_week),
        ).all()
    )
    in_range = [a for a in analyses if a.created_at >= since]
    stats = user.stats or UserStats()

    return {
        "currentStreak": stats.current_streak or 0,
        "totalWorkouts": stats.total_workouts or 0,
        "totalCaloriesBurned": stats.total_calories_burned or 0,
        "weeklyProgress": stats.weekly_progress or 0,
        "weeklyGoal": stats.weekly_goal or 4,
        "averageFormScore": _avg([s for _, s in _scored(in_range)]),
        "formScoreTrend": _form_score_trend(in_range),
        "exerciseDistribution": _exercise_distribution(in_range),
        "weeklyComparison": _weekly_comparison(analyses, now),
    }
