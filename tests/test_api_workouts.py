# tests/test_api_workouts.py

import pytest

from fitcoach.models.workout import Exercise, WorkoutPlan, WorkoutSession
from fitcoach.services.workout_generator import adapt_exercise, get_recommended_exercises, parse_reps


# ---------- adaptación (unitario) ----------
@pytest.mark.parametrize("score, expected", [
    (90, (3, 4, 12)),
    (85, (3, 4, 12)),
    (75, (2, 3, 10)),
    (60, (1, 2, 8)),
    (50, (1, 2, 8)),
])
def test_adapt_exercise_bandas(score, expected):
    ex = adapt_exercise(Exercise(name="Sentadillas", difficulty=2, sets=3, reps=10), score)
    assert (ex.difficulty, ex.sets, ex.reps) == expected


def test_adapt_exercise_limites():
    hard = adapt_exercise(Exercise(name="X", difficulty=5, sets=6, reps=18), 99)
    assert (hard.difficulty, hard.sets, hard.reps) == (5, 6, 20)
    easy = adapt_exercise(Exercise(name="Y", difficulty=1, sets=1, reps=5), 10)
    assert (easy.difficulty, easy.sets, easy.reps) == (1, 1, 5)
    timed = adapt_exercise(Exercise(name="Plancha", difficulty=2, duration=1), 95)
    assert (timed.sets, timed.reps) == (None, None)


def test_parse_reps():
    assert parse_reps("8-12") == 8
    assert parse_reps(15) == 15
    assert parse_reps("AMRAP") is None
    assert parse_reps(None) is None


def test_recomendados_filtra_por_dificultad():
    names = [e["name"] for e in get_recommended_exercises(["chest", "legs", "chest"], 2)]
    assert names == ["Flexiones", "Press de banca", "Aperturas", "Sentadillas", "Zancadas"]
    assert get_recommended_exercises(["desconocido"], 3) == []


# ---------- API ----------
def _generate(client, **prefs):
    resp = client.post("/api/workout-plans/generate", json={"preferences": prefs})
    assert resp.status_code == 201
    return resp.get_json()


def test_generar_plan_en_modo_desarrollo(auth_client):
    plan = _generate(auth_client, goals=["fuerza"], timeAvailable=25)
    assert plan["name"] == "Plan de fuerza"
    assert plan["difficulty"] == 1
    assert plan["isActive"] is True
    assert [(e["name"], e["sets"], e["reps"]) for e in plan["exercises"]] == [
        ("Flexiones", 3, 8), ("Sentadillas", 3, 10),
    ]
    assert auth_client.get("/api/workout-plans").get_json()[0]["id"] == plan["id"]


def test_crear_plan_manual_y_borrar(auth_client):
    resp = auth_client.post("/api/workout-plans", json={
        "name": "Mi rutina",
        "difficulty": "intermediate",
        "exercises": [
            {"name": "Remo", "sets": 4, "reps": "10", "day": 2, "order": 1},
            {"name": "Press", "sets": 3, "reps": 8, "day": 1, "order": 2, "weight": 40},
        ],
    })
    assert resp.status_code == 201
    plan = resp.get_json()
    assert plan["difficulty"] == 2
    # ordenados por (día, orden)
    assert [e["name"] for e in plan["exercises"]] == ["Press", "Remo"]

    assert auth_client.delete(f"/api/workout-plans/{plan['id']}").status_code == 200
    assert Exercise.query.count() == 0
    assert auth_client.get(f"/api/workout-plans/{plan['id']}").status_code == 404


def test_crear_plan_invalido(auth_client):
    resp = auth_client.post("/api/workout-plans", json={
        "exercises": [{"name": "", "type": "yoga", "sets": "tres"}],
    })
    assert resp.status_code == 400
    body = resp.get_json()
    assert body["error"] == "ValidationError"
    assert set(body["fields"]) == {"name", "exercises[0].name", "exercises[0].type", "exercises[0].sets"}


def test_adaptar_plan(auth_client):
    plan = _generate(auth_client)
    resp = auth_client.post(f"/api/workout-plans/{plan['id']}/adapt", json={
        "exerciseScores": {"Sentadillas": 50},
        "overallPerformance": 90,
    })
    assert resp.status_code == 200
    exercises = {e["name"]: e for e in resp.get_json()["exercises"]}
    assert (exercises["Flexiones"]["sets"], exercises["Flexiones"]["reps"]) == (4, 9)
    assert (exercises["Sentadillas"]["sets"], exercises["Sentadillas"]["reps"]) == (2, 8)


def test_adaptar_plan_sin_rendimiento_global(auth_client):
    plan = _generate(auth_client)
    resp = auth_client.post(f"/api/workout-plans/{plan['id']}/adapt", json={"exerciseScores": {}})
    assert resp.status_code == 400
    assert "overallPerformance" in resp.get_json()["fields"]


def test_adaptar_plan_ajeno_o_inexistente(auth_client):
    resp = auth_client.post("/api/workout-plans/999/adapt", json={"overallPerformance": 70})
    assert resp.status_code == 404
    assert resp.get_json()["error"] == "PlanNotFound"


def test_plan_de_progresion(auth_client):
    plan = _generate(auth_client)
    resp = auth_client.post(f"/api/workout-plans/{plan['id']}/progression")
    assert resp.status_code == 201
    prog = resp.get_json()
    assert prog["name"] == f"{plan['name']} - Progresión"
    assert prog["isActive"] is False
    assert prog["difficulty"] == plan["difficulty"] + 1
    assert [e["sets"] for e in prog["exercises"]] == [4, 4]
    assert WorkoutPlan.query.count() == 2


def test_registrar_sesion_actualiza_estadisticas(auth_client):
    resp = auth_client.post("/api/workout-sessions", json={
        "name": "Full body", "duration": 45, "caloriesBurned": 400, "intensity": "high",
    })
    assert resp.status_code == 201
    body = resp.get_json()
    assert body["newAchievements"] == []

    stats = auth_client.get("/api/dashboard/stats").get_json()["stats"]
    assert stats["totalWorkouts"] == 1
    assert stats["currentStreak"] == 1
    assert stats["totalCaloriesBurned"] == 400
    assert len(auth_client.get("/api/workout-sessions").get_json()) == 1


def test_sesion_invalida(auth_client):
    resp = auth_client.post("/api/workout-sessions", json={"duration": -5, "intensity": "brutal", "workoutPlanId": 77})
    assert resp.status_code == 400
    assert set(resp.get_json()["fields"]) == {"name", "duration", "intensity", "workoutPlanId"}
    assert WorkoutSession.query.count() == 0


def test_borrar_plan_conserva_sesiones(auth_client):
    plan = _generate(auth_client)
    auth_client.post("/api/workout-sessions", json={"name": "Con plan", "workoutPlanId": plan["id"]})
    auth_client.delete(f"/api/workout-plans/{plan['id']}")
    session = WorkoutSession.query.one()
    assert session.plan_id is None


def test_recomendados_api(auth_client):
    resp = auth_client.get("/api/exercises/recommended?muscles=core&difficulty=1")
    assert [e["name"] for e in resp.get_json()] == ["Plancha", "Crunch bicicleta", "Giros rusos"]


def test_analitica(auth_client):
    data = auth_client.get("/api/dashboard/analytics?timeRange=7d").get_json()
    assert data["averageFormScore"] == 0
    assert data["formScoreTrend"] == []
    assert len(data["weeklyComparison"]) == 8


def test_requiere_login(client):
    resp = client.get("/api/workout-plans")
    assert resp.status_code == 401
    assert resp.get_json() == {"message": "Authentication required"}
