# fitcoach/services/rules_engine.py
"""
Chequeo biomecánico con umbrales guardados en BD (BiomechanicalRule).

Tipos de regla:
  - angle:    3 índices de landmark (vértice en el del medio), grados
  - distance: 2 índices, distancia normalizada

Una regla "salta" cuando el valor medio queda fuera de [min, max].
Puntuación = 100 - suma de penalizaciones por severidad (mínimo 0).
"""
import logging

from fitcoach.services.errors import ReferenceNotFound
from fitcoach.services.reference_comparison import find_template
from fitcoach.utils.pose import mean_joint_angle, mean_point_distance

logger = logging.getLogger(__name__)

SEVERITY_PENALTY = {"low": 5, "medium": 10, "high": 20, "critical": 30}
CRITICAL_SEVERITIES = ("high", "critical")


def _measure(rule, frames):
    idx = rule.indices()
    if rule.rule_type == "angle":
        return mean_joint_angle(frames, idx)
    if rule.rule_type == "distance":
        return mean_point_distance(frames, idx)
    logger.warning("[rules] tipo de regla desconocido: %s (%s)", rule.rule_type, rule.rule_name)
    return None


def evaluate_rules(rules, frames) -> dict:
    fired = []
    critical = []
    suggestions = []
    penalty = 0

    for rule in rules:
        value = _measure(rule, frames)
        if value is None:
            continue
        too_low = rule.min_value is not None and value < rule.min_value
        too_high = rule.max_value is not None and value > rule.max_value
        if not (too_low or too_high):
            continue

        fired.append({
            "rule": rule.rule_name,
            "value": round(value, 3),
            "min": rule.min_value,
            "max": rule.max_value,
            "severity": rule.severity,
        })
        penalty += SEVERITY_PENALTY.get(rule.severity, SEVERITY_PENALTY["medium"])
        if rule.severity in CRITICAL_SEVERITIES:
            critical.append(rule.correction_feedback)
        else:
            suggestions.append(rule.correction_feedback)

    return {
        "biomechanicalScore": max(0, 100 - penalty),
        "triggersFired": [f["rule"] for f in fired],
        "violations": fired,
        "criticalErrors": critical,
        "suggestions": suggestions,
    }


def check_exercise(exercise_name, frames) -> dict:
    """Reglas activas de la plantilla del ejercicio; ReferenceNotFound si no hay."""
    tpl = find_template(exercise_name)
    rules = [r for r in (tpl.rules if tpl else []) if r.is_active]
    if not rules:
        raise ReferenceNotFound(f"Sin reglas biomecánicas para '{exercise_name}'")
    return evaluate_rules(rules, frames)
