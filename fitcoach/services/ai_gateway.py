# fitcoach/services/ai_gateway.py
"""
Pasarela hacia el proveedor de chat-completions (OpenAI).

Tres tareas con plantilla de prompt fija:
  - analyze_movement_form
  - generate_workout_plan
  - provide_nutrition_advice

Política: nunca se propaga un error remoto. Cualquier fallo (red, cuota,
JSON mal formado, falta de API key) devuelve un objeto de respaldo fijo.
En modo desarrollo (AI_DEV_MODE) no se llama al proveedor.
Sin reintentos ni backoff.
"""
from __future__ import annotations

import json
import logging
import math
from typing import Any, Dict, List, Optional

from openai import OpenAI

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-3.5-turbo"

# ----------------------------------------------------------------------------#
# Respaldos fijos
# ----------------------------------------------------------------------------#
DEV_FALLBACK_ANALYSIS = {
    "formScore": 78,
    "feedback": (
        "Buena forma general con margen de mejora. Concéntrate en mantener "
        "una alineación correcta durante todo el movimiento."
    ),
    "corrections": [
        "Mantén el core activado durante todo el movimiento",
        "Mantén la columna en posición neutra",
        "Controla el tempo, evita hacer el ejercicio con prisa",
    ],
    "strengths": [
        "Buen rango de movimiento",
        "Patrón de movimiento consistente",
        "Respiración adecuada",
    ],
}

NUTRITION_FALLBACK = {
    "recommendations": [
        "Prioriza alimentos frescos y poco procesados",
        "Mantén un reparto equilibrado de proteína, hidratos y grasas saludables",
        "Bebe entre 8 y 10 vasos de agua al día",
    ],
    "mealSuggestions": [
        "Desayuno: yogur griego con frutos rojos y nueces",
        "Comida: pollo a la plancha con quinoa y verduras",
        "Cena: salmón con boniato y brócoli",
        "Snack: manzana con crema de almendras",
    ],
    "tips": [
        "Prepara comidas el fin de semana para ahorrar tiempo",
        "Incluye proteína en cada comida para mantener la saciedad",
        "Añade verduras de colores para cubrir vitaminas",
    ],
}


def _extract_json_object(text: str) -> Dict[str, Any]:
    """Primer objeto JSON de la respuesta del modelo (directo o primer bloque {...})."""
    if not text:
        raise ValueError("Respuesta vacía del modelo")

    try:
        parsed = json.loads(text)
        if isinstance(parsed, dict):
            return parsed
    except ValueError:
        pass

    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end == -1 or end <= start:
        raise ValueError("No hay objeto JSON en la respuesta del modelo")

    parsed = json.loads(text[start:end + 1])
    if not isinstance(parsed, dict):
        raise ValueError("El JSON de la respuesta no es un objeto")
    return parsed


def _clamp_score(value: Any) -> int:
    """formScore en [1, 100]; 50 si falta, no es numérico o no es finito."""
    try:
        score = float(value) if value not in (None, "", 0) else 50
    except (TypeError, ValueError):
        score = 50
    if not math.isfinite(score):
        score = 50
    return int(max(1, min(100, round(score))))


def _str_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [str(v) for v in value if v not in (None, "")]


def _as_list(value: Any) -> List[str]:
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value if v]
    if isinstance(value, str) and value.strip():
        return [s.strip() for s in value.split(",") if s.strip()]
    return []


def _level_number(value: Any) -> int:
    if isinstance(value, (int, float)):
        return int(value)
    labels = {"beginner": 1, "principiante": 1, "intermediate": 2, "intermedio": 2,
              "advanced": 4, "avanzado": 4, "experto": 4}
    if isinstance(value, str):
        if value.strip().isdigit():
            return int(value.strip())
        return labels.get(value.strip().lower(), 2)
    return 1


def fallback_movement_analysis(exercise_name: str) -> Dict[str, Any]:
    return {
        "formScore": 78,
        "feedback": (
            f"¡Buena técnica en {exercise_name or 'el ejercicio'}! Mantén una "
            "alineación correcta durante todo el movimiento."
        ),
        "corrections": [
            "Mantén el core activado durante todo el movimiento",
            "Controla la velocidad del movimiento",
            "Cuida el patrón de respiración",
        ],
        "strengths": [
            "Buen rango de movimiento",
            "Patrón de movimiento consistente",
            "Posición inicial correcta",
        ],
    }


def fallback_workout_plan(preferences: Dict[str, Any]) -> Dict[str, Any]:
    goals = _as_list(preferences.get("goals"))
    minutes = preferences.get("timeAvailable") or 30
    level = _level_number(preferences.get("fitnessLevel"))
    if level >= 4:
        difficulty = "advanced"
    elif level >= 2:
        difficulty = "intermediate"
    else:
        difficulty = "beginner"

    return {
        "name": f"Plan de {goals[0] if goals else 'fuerza'}",
        "description": f"Entrenamiento personalizado de {minutes} minutos",
        "difficulty": difficulty,
        "duration": minutes,
        "exercises": [
            {
                "name": "Flexiones",
                "sets": 3,
                "reps": "8-12",
                "instructions": "Cuerpo recto, baja el pecho hasta casi tocar el suelo",
                "targetMuscles": ["chest", "shoulders", "triceps"],
                "day": 1,
                "order": 1,
            },
            {
                "name": "Sentadillas",
                "sets": 3,
                "reps": "10-15",
                "instructions": "Lleva la cadera atrás y abajo, pecho arriba",
                "targetMuscles": ["quadriceps", "glutes"],
                "day": 1,
                "order": 2,
            },
        ],
    }


class AIGateway:
    """Extensión Flask: `ai.init_app(app)` y luego `ai.analyze_movement_form(...)`."""

    def __init__(self, app=None, client=None):
        self.api_key: Optional[str] = None
        self.model: str = DEFAULT_MODEL
        self.dev_mode: bool = False
        self._client = client
        if app is not None:
            self.init_app(app)

    def init_app(self, app) -> None:
        self.api_key = app.config.get("OPENAI_API_KEY")
        self.model = app.config.get("OPENAI_MODEL") or DEFAULT_MODEL
        self.dev_mode = bool(app.config.get("AI_DEV_MODE"))
        app.extensions["ai_gateway"] = self

    # ---- cliente perezoso ----
    @property
    def client(self):
        if self._client is None:
            if not self.api_key:
                raise RuntimeError("OPENAI_API_KEY no configurada")
            self._client = OpenAI(api_key=self.api_key)
        return self._client

    def use_client(self, client) -> None:
        """Sustituye el cliente (tests)."""
        self._client = client

    def _complete_json(self, system: str, prompt: str, **kwargs) -> Dict[str, Any]:
        response = self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": system},
                {"role": "user", "content": prompt},
            ],
            response_format={"type": "json_object"},
            **kwargs,
        )
        content = response.choices[0].message.content or ""
        return _extract_json_object(content)

    # ------------------------------------------------------------------------#
    # Análisis de técnica
    # ------------------------------------------------------------------------#
    def analyze_movement_form(self, exercise_name: str, keypoints: list) -> Dict[str, Any]:
        if self.dev_mode:
            logger.debug("[ai] modo desarrollo: análisis de respaldo")
            result = json.loads(json.dumps(DEV_FALLBACK_ANALYSIS))
            result["feedback"] = f"{result['feedback']} (Ejercicio: {exercise_name or 'desconocido'})"
            return result

        prompt = f"""Analiza la técnica del ejercicio "{exercise_name}" a partir de estos keypoints de pose:

Keypoints: {json.dumps(keypoints)}

Incluye:
1. Puntuación de técnica (1-100)
2. Valoración general
3. Correcciones concretas
4. Puntos fuertes observados

Responde con JSON exactamente en este formato:
{{
  "formScore": number,
  "feedback": "string",
  "corrections": ["string"],
  "strengths": ["string"]
}}"""
        try:
            data = self._complete_json(
                "Eres un entrenador experto en biomecánica. Da siempre feedback "
                "constructivo y accionable.",
                prompt,
                temperature=0.3,
            )
        except Exception as exc:
            logger.warning("[ai] análisis de técnica falló, uso respaldo: %s", exc)
            return fallback_movement_analysis(exercise_name)

        return {
            "formScore": _clamp_score(data.get("formScore")),
            "feedback": str(data.get("feedback") or "Análisis completado"),
            "corrections": _str_list(data.get("corrections")),
            "strengths": _str_list(data.get("strengths")),
        }

    # ------------------------------------------------------------------------#
    # Plan de entrenamiento
    # ------------------------------------------------------------------------#
    def generate_workout_plan(self, preferences: Dict[str, Any]) -> Dict[str, Any]:
        preferences = preferences or {}
        if self.dev_mode:
            logger.debug("[ai] modo desarrollo: plan de respaldo")
            return fallback_workout_plan(preferences)

        goals = ", ".join(_as_list(preferences.get("goals"))) or "forma física general"
        equipment = ", ".join(_as_list(preferences.get("equipment"))) or "peso corporal"
        prompt = f"""Genera un plan de entrenamiento personalizado con estas preferencias:
- Nivel: {preferences.get('fitnessLevel') or 'intermedio'}
- Objetivos: {goals}
- Tiempo disponible: {preferences.get('timeAvailable') or 30} minutos
- Material: {equipment}

Incluye ejercicios, series, repeticiones y descansos.

Responde con JSON exactamente en este formato:
{{
  "name": "string",
  "description": "string",
  "difficulty": "beginner|intermediate|advanced",
  "duration": number,
  "exercises": [
    {{
      "name": "string",
      "sets": number,
      "reps": "string",
      "instructions": "string",
      "targetMuscles": ["string"],
      "day": number,
      "order": number
    }}
  ]
}}"""
        try:
            data = self._complete_json(
                "Eres un entrenador personal que diseña planes seguros, eficaces y personalizados.",
                prompt,
                max_tokens=1500,
                temperature=0.7,
            )
        except Exception as exc:
            logger.warning("[ai] generación de plan falló, uso respaldo: %s", exc)
            return fallback_workout_plan(preferences)

        if not isinstance(data.get("exercises"), list) or not data.get("name"):
            logger.warning("[ai] plan sin forma esperada, uso respaldo")
            return fallback_workout_plan(preferences)
        return data

    # ------------------------------------------------------------------------#
    # Nutrición
    # ------------------------------------------------------------------------#
    def provide_nutrition_advice(
        self,
        goals: List[str],
        current_weight: Optional[float] = None,
        target_weight: Optional[float] = None,
    ) -> Dict[str, List[str]]:
        if self.dev_mode:
            return json.loads(json.dumps(NUTRITION_FALLBACK))

        lines = [f"Da consejos de nutrición para alguien con estos objetivos: {', '.join(goals or [])}"]
        if current_weight:
            lines.append(f"Peso actual: {current_weight} kg")
        if target_weight:
            lines.append(f"Peso objetivo: {target_weight} kg")
        lines.append(
            'Responde con JSON: {"recommendations": ["string"], '
            '"mealSuggestions": ["string"], "tips": ["string"]}'
        )
        try:
            data = self._complete_json(
                "Eres un nutricionista titulado. Propón siempre enfoques equilibrados y sostenibles.",
                "\n".join(lines),
                temperature=0.6,
            )
        except Exception as exc:
            logger.warning("[ai] consejo nutricional falló, uso respaldo: %s", exc)
            return json.loads(json.dumps(NUTRITION_FALLBACK))

        return {
            "recommendations": _str_list(data.get("recommendations")),
            "mealSuggestions": _str_list(data.get("mealSuggestions")),
            "tips": _str_list(data.get("tips")),
        }
