# fitcoach/cli/seed.py
import json

import click
from flask.cli import AppGroup

from fitcoach import db
from fitcoach.models.analysis import BiomechanicalRule, ExerciseTemplate
from fitcoach.services.reference_comparison import exercise_key
from fitcoach.utils.pose import simulate_keypoints

seed_group = AppGroup("seed", help="Comandos de seed (datos iniciales)")

# ---- Plantillas por defecto ----
# Índices de landmarks: 1/2 hombros, 3/4 codos, 5/6 muñecas, 7/8 caderas, 9/10 rodillas, 11/12 tobillos
DEFAULT_TEMPLATES = [
    {
        "name": "squat", "display_name": "Sentadilla", "category": "legs", "difficulty": 2,
        "target_muscles": "quadriceps,glutes",
        "common_mistakes": ["Rodillas hacia dentro", "Talones despegados", "Espalda redondeada"],
        "rules": [
            {"rule_name": "knee_angle_left", "rule_type": "angle", "body_parts": [7, 9, 11],
             "min_value": 70, "max_value": 180, "severity": "medium",
             "correction_feedback": "Mantén las rodillas alineadas con los pies al bajar."},
            {"rule_name": "hip_width", "rule_type": "distance", "body_parts": [7, 8],
             "min_value": 0.02, "max_value": 0.2, "severity": "low",
             "correction_feedback": "Mantén la cadera nivelada durante todo el recorrido."},
        ],
    },
    {
        "name": "pushup", "display_name": "Flexión", "category": "chest", "difficulty": 2,
        "target_muscles": "chest,shoulders,triceps",
        "common_mistakes": ["Cadera hundida", "Codos muy abiertos"],
        "rules": [
            {"rule_name": "elbow_angle_left", "rule_type": "angle", "body_parts": [1, 3, 5],
             "min_value": 60, "max_value": 180, "severity": "medium",
             "correction_feedback": "Evita abrir los codos más de 45 grados."},
            {"rule_name": "body_line", "rule_type": "angle", "body_parts": [1, 7, 11],
             "min_value": 160, "max_value": 180, "severity": "high",
             "correction_feedback": "Mantén el cuerpo recto y evita hundir la cadera."},
        ],
    },
    {
        "name": "lunge", "display_name": "Zancada", "category": "legs", "difficulty": 2,
        "target_muscles": "quadriceps,glutes,hamstrings",
        "common_mistakes": ["Rodilla delantera pasa la punta del pie"],
        "rules": [
            {"rule_name": "front_knee", "rule_type": "angle", "body_parts": [7, 9, 11],
             "min_value": 80, "max_value": 180, "severity": "high",
             "correction_feedback": "Evita que la rodilla delantera supere la punta del pie."},
        ],
    },
    {
        "name": "plank", "display_name": "Plancha", "category": "core", "difficulty": 1,
        "target_muscles": "core,shoulders",
        "common_mistakes": ["Cadera alta", "Cadera hundida"],
        "rules": [
            {"rule_name": "body_line", "rule_type": "angle", "body_parts": [1, 7, 11],
             "min_value": 165, "max_value": 180, "severity": "high",
             "correction_feedback": "Mantén hombros, cadera y tobillos en línea."},
        ],
    },
    {
        "name": "burpee", "display_name": "Burpee", "category": "cardio", "difficulty": 4,
        "target_muscles": "full_body",
        "common_mistakes": ["Aterrizaje rígido"],
        "rules": [
            {"rule_name": "stance_width", "rule_type": "distance", "body_parts": [11, 12],
             "min_value": 0.03, "max_value": 0.3, "severity": "low",
             "correction_feedback": "Concéntrate en aterrizar con los pies a la anchura de la cadera."},
        ],
    },
]

RULE_FIELDS = ("rule_type", "min_value", "max_value", "severity", "correction_feedback")


def _upsert_templates(items):
    created, updated, rules = 0, 0, 0
    for t in items:
        key = exercise_key(t.get("name"))
        if not key:
            continue
        tpl = ExerciseTemplate.query.filter_by(name=key).first()
        if tpl:
            updated += 1
        else:
            tpl = ExerciseTemplate(name=key)
            db.session.add(tpl)
            created += 1

        tpl.display_name = t.get("display_name") or t.get("name")
        tpl.category = t.get("category")
        tpl.difficulty = int(t.get("difficulty") or 1)
        tpl.target_muscles = t.get("target_muscles")
        tpl.common_mistakes = json.dumps(t.get("common_mistakes") or [], ensure_ascii=False)
        frames = t.get("reference_keypoints") or simulate_keypoints(f"reference:{key}")
        tpl.reference_keypoints = json.dumps(frames)

        existing = {r.rule_name: r for r in tpl.rules}
        for r in t.get("rules") or []:
            rule = existing.get(r["rule_name"])
            if rule is None:
                rule = BiomechanicalRule(rule_name=r["rule_name"])
                tpl.rules.append(rule)
            for field in RULE_FIELDS:
                setattr(rule, field, r.get(field))
            rule.body_parts = json.dumps(r.get("body_parts") or [])
            rule.is_active = bool(r.get("is_active", True))
            rules += 1

    db.session.commit()
    return created, updated, rules


@seed_group.command("templates")
@click.option("--from-json", "json_path", default=None,
              help="Ruta a un JSON con plantillas (misma forma que el set por defecto).")
def seed_templates(json_path):
    """
    Carga/actualiza plantillas de ejercicio y reglas biomecánicas.
    - Sin opciones: set por defecto (sentadilla, flexión, zancada, plancha, burpee).
    - Con --from-json: lista de plantillas (idempotente por nombre).
    """
    if json_path:
        try:
            with open(json_path, "r", encoding="utf-8") as fh:
                items = json.load(fh)
        except FileNotFoundError:
            click.secho(f"No se encontró el JSON: {json_path}", fg="red")
            return
        click.secho(f"Leídas {len(items)} plantillas desde {json_path}", fg="cyan")
    else:
        items = DEFAULT_TEMPLATES

    created, updated, rules = _upsert_templates(items)
    click.secho(f"Hecho. Nuevas: {created}, Actualizadas: {updated}, Reglas: {rules}", fg="green")
