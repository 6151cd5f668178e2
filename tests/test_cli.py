# tests/test_cli.py

import csv
import json

from fitcoach.models.analysis import BiomechanicalRule, ExerciseTemplate
from fitcoach.models.wearable import HealthData


def test_seed_templates_idempotente(app):
    runner = app.test_cli_runner()

    first = runner.invoke(args=["seed", "templates"])
    assert first.exit_code == 0
    assert "Nuevas: 5, Actualizadas: 0" in first.output
    rules = BiomechanicalRule.query.count()

    second = runner.invoke(args=["seed", "templates"])
    assert "Nuevas: 0, Actualizadas: 5" in second.output
    assert ExerciseTemplate.query.count() == 5
    assert BiomechanicalRule.query.count() == rules

    squat = ExerciseTemplate.query.filter_by(name="squat").one()
    assert len(squat.reference_frames()) == 30
    assert "Rodillas hacia dentro" in squat.mistakes()


def test_seed_desde_json(app, tmp_path):
    path = tmp_path / "plantillas.json"
    path.write_text(json.dumps([{
        "name": "Peso Muerto",
        "category": "back",
        "rules": [{
            "rule_name": "espalda", "rule_type": "angle", "body_parts": [1, 7, 9],
            "min_value": 150, "max_value": 180, "severity": "critical",
            "correction_feedback": "Mantén la espalda neutra",
        }],
    }]), encoding="utf-8")

    result = app.test_cli_runner().invoke(args=["seed", "templates", "--from-json", str(path)])
    assert result.exit_code == 0
    tpl = ExerciseTemplate.query.one()
    assert tpl.name == "pesomuerto"
    assert tpl.rules[0].indices() == [1, 7, 9]


def test_seed_json_inexistente(app, tmp_path):
    result = app.test_cli_runner().invoke(args=["seed", "templates", "--from-json", str(tmp_path / "no.json")])
    assert "No se encontró" in result.output
    assert ExerciseTemplate.query.count() == 0


def test_export_health_data(app, user, tmp_path):
    from fitcoach import db
    from fitcoach.services.wearables import add_health_data_point

    add_health_data_point(user, {"dataType": "steps", "value": 8000, "unit": "steps", "recordedAt": "2026-10-02T10:00:00"})
    add_health_data_point(user, {"dataType": "weight", "value": 71.2, "unit": "kg", "recordedAt": "2026-10-01T07:30:00"})
    db.session.commit()

    dest = tmp_path / "salud.csv"
    result = app.test_cli_runner().invoke(args=["export", "health-data", "--user", "Ana@fitcoach.io", "--to", str(dest)])
    assert result.exit_code == 0
    assert "Exportados 2 registros" in result.output

    with open(dest, encoding="utf-8") as fh:
        rows = list(csv.DictReader(fh))
    assert [r["data_type"] for r in rows] == ["weight", "steps"]
    assert rows[0]["recorded_at"] == "2026-10-01T07:30:00"


def test_export_usuario_inexistente(app):
    result = app.test_cli_runner().invoke(args=["export", "health-data", "--user", "nadie@fitcoach.io"])
    assert "No existe el usuario" in result.output
    assert HealthData.query.count() == 0
