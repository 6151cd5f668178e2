# tests/test_stats_gamification.py

import json
from datetime import datetime, timedelta
from types import SimpleNamespace

import pytest

from fitcoach import db
from fitcoach.models.achievement import Achievement
from fitcoach.models.analysis import MovementAnalysis
from fitcoach.models.user import UserStats
from fitcoach.services import gamification
from fitcoach.services.stats import apply_session, record_workout_session

# 2026-10-12 es lunes
MONDAY = datetime(2026, 10, 12, 9, 0)


# ---------- rachas y progreso semanal ----------
def test_primera_sesion():
    stats = UserStats()
    apply_session(stats, 30, 250, now=MONDAY)
    assert stats.current_streak == 1
    assert stats.longest_streak == 1
    assert stats.weekly_progress == 1
    assert stats.total_workouts == 1
    assert stats.total_calories_burned == 250
    assert stats.last_workout_date == MONDAY


def test_racha_dias_consecutivos_y_mismo_dia():
    stats = UserStats()
    apply_session(stats, 30, 100, now=MONDAY)
    apply_session(stats, 30, 100, now=MONDAY + timedelta(days=1))
    assert stats.current_streak == 2
    # segunda sesión el mismo día: la racha no cambia
    apply_session(stats, 20, None, now=MONDAY + timedelta(days=1, hours=8))
    assert stats.current_streak == 2
    assert stats.weekly_progress == 3
    assert stats.total_calories_burned == 200


def test_racha_se_rompe_pero_se_guarda_la_maxima():
    stats = UserStats()
    for i in range(3):
        apply_session(stats, 30, 0, now=MONDAY + timedelta(days=i))
    apply_session(stats, 30, 0, now=MONDAY + timedelta(days=5))
    assert stats.current_streak == 1
    assert stats.longest_streak == 3


def test_progreso_semanal_reinicia_en_semana_nueva():
    stats = UserStats()
    apply_session(stats, 30, 0, now=MONDAY)
    apply_session(stats, 30, 0, now=MONDAY + timedelta(days=6))  # domingo
    assert stats.weekly_progress == 2
    apply_session(stats, 30, 0, now=MONDAY + timedelta(days=7))  # lunes siguiente
    assert stats.weekly_progress == 1
    assert stats.current_streak == 2


def test_record_workout_session_persiste(user):
    session = record_workout_session(user, {"name": "Pierna", "duration": 40, "caloriesBurned": 320})
    assert session.id is not None
    assert user.stats.total_workouts == 1
    assert user.stats.total_calories_burned == 320


# ---------- XP y nivel ----------
def test_compute_xp():
    # 10*10 + 2*50 + min(50*5, 200) + 1234 // 100
    assert gamification.compute_xp(10, 2, 50, 1234) == 100 + 100 + 200 + 12
    assert gamification.compute_xp(0, 0, 0, 0) == 0


@pytest.mark.parametrize("xp, level, to_next, title", [
    (0, 1, 1000, "Fitness Newbie"),
    (2500, 3, 500, "Fitness Newbie"),
    (5000, 6, 1000, "Workout Warrior"),
    (10 ** 6, 1001, 1000, "Legendary Lifter"),
])
def test_level_for_xp(xp, level, to_next, title):
    out = gamification.level_for_xp(xp)
    assert (out["level"], out["xpToNextLevel"], out["title"]) == (level, to_next, title)


# ---------- reglas de logro ----------
def _activity(stats=None, sessions=(), scores=(), now=MONDAY + timedelta(days=7)):
    return gamification.Activity(SimpleNamespace(**(stats or {})), list(sessions), list(scores), now)


def _titles(rules):
    return [r.title for r in rules]


def test_reglas_de_racha_y_hitos():
    act = _activity({"current_streak": 30, "total_workouts": 100, "total_calories_burned": 10000})
    assert _titles(gamification.evaluate_rules(act)) == [
        "7-Day Streak", "30-Day Streak", "Century Club", "Calorie Crusher",
    ]


def test_reglas_ya_concedidas_no_se_repiten():
    act = _activity({"current_streak": 8})
    assert gamification.evaluate_rules(act, {("streak", "7-Day Streak")}) == []


def test_weekend_warrior_y_explorer():
    sessions = [
        SimpleNamespace(name="Sesión %d" % i, completed_at=MONDAY + timedelta(days=5, hours=i))
        for i in range(8)
    ]
    sessions += [
        SimpleNamespace(name="Domingo A", completed_at=MONDAY + timedelta(days=6)),
        SimpleNamespace(name="Domingo B", completed_at=MONDAY + timedelta(days=6, hours=1)),
    ]
    titles = _titles(gamification.evaluate_rules(_activity(sessions=sessions)))
    assert "Weekend Warrior" in titles
    assert "Exercise Explorer" in titles


def test_form_master_y_perfectionist():
    # más reciente primero
    scores = [90, 92, 95, 90, 91, 60, 62, 58, 61, 60]
    titles = _titles(gamification.evaluate_rules(_activity(scores=scores)))
    assert titles == ["Perfectionist", "Form Master"]
    assert gamification.evaluate_rules(_activity(scores=[99])) == [gamification.RULES[2]]


def test_check_achievements_idempotente(user):
    user.stats.current_streak = 7
    db.session.commit()

    first = gamification.check_achievements(user)
    second = gamification.check_achievements(user)

    assert [a.title for a in first] == ["7-Day Streak"]
    assert second == []
    assert Achievement.query.filter_by(user_id=user.id).count() == 1


def test_check_achievements_omite_duplicado_en_bd(user, monkeypatch):
    # otra petición ya insertó el logro después de leer los existentes
    user.stats.current_streak = 7
    user.stats.total_calories_burned = 10000
    db.session.add(Achievement(user_id=user.id, type="streak", title="7-Day Streak"))
    db.session.commit()

    evaluate = gamification.evaluate_rules
    monkeypatch.setattr(gamification, "evaluate_rules", lambda activity, already_earned=(): evaluate(activity))

    created = gamification.check_achievements(user)

    assert [a.title for a in created] == ["Calorie Crusher"]
    titles = sorted(a.title for a in Achievement.query.filter_by(user_id=user.id))
    assert titles == ["7-Day Streak", "Calorie Crusher"]


def test_check_achievements_usa_analisis(user):
    db.session.add(MovementAnalysis(
        user_id=user.id, exercise_name="Sentadilla",
        analysis_result=json.dumps({"formScore": 97}),
    ))
    db.session.commit()
    assert [a.title for a in gamification.check_achievements(user)] == ["Perfectionist"]


def test_calculate_user_level(user):
    user.stats.total_workouts = 5
    user.stats.current_streak = 2
    user.stats.total_calories_burned = 999
    db.session.add(Achievement(user_id=user.id, type="streak", title="7-Day Streak"))
    db.session.commit()
    out = gamification.calculate_user_level(user)
    assert out["xp"] == 50 + 50 + 10 + 9
    assert out["level"] == 1


# ---------- motivación ----------
class FirstChoice:
    def choice(self, seq):
        return seq[0]


def test_mensaje_motivacional_con_racha(user):
    user.stats.current_streak = 9
    db.session.commit()
    msg = gamification.get_motivational_message(user, rng=FirstChoice())
    assert "9 días" in msg


def test_mensaje_motivacional_por_defecto(user):
    msg = gamification.get_motivational_message(user, rng=FirstChoice())
    assert msg == gamification.DEFAULT_MESSAGES[0]


def test_xp_monotono():
    base = gamification.compute_xp(5, 1, 10, 500)
    assert gamification.compute_xp(6, 1, 10, 500) > base
    assert gamification.compute_xp(5, 2, 10, 500) > base
    assert gamification.compute_xp(5, 1, 11, 500) > base
    assert gamification.compute_xp(5, 1, 10, 600) > base
    # la racha deja de sumar a partir de 40 días
    assert gamification.compute_xp(5, 1, 40, 500) == gamification.compute_xp(5, 1, 400, 500)
