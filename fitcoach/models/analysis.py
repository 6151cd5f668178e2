# fitcoach/models/analysis.py
import json

from fitcoach import db
from fitcoach.utils.dates import utcnow, isoformat_or_none


def _loads(text, default):
    try:
        return json.loads(text) if text else default
    except ValueError:
        return default


# ---------- ANÁLISIS DE TÉCNICA ----------
class MovementAnalysis(db.Model):
    __tablename__ = "movement_analysis"

    id      = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    session_id       = db.Column(db.String(120))
    exercise_name    = db.Column(db.String(200), nullable=False)
    video_url        = db.Column(db.Text)                # referencia/base64 del vídeo recibido
    analysis_result  = db.Column(db.Text, nullable=False)  # JSON serializado
    confidence_score = db.Column(db.Float)
    created_at       = db.Column(db.DateTime, nullable=False, default=utcnow, index=True)
    updated_at       = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    user = db.relationship("User", back_populates="analyses")

    def result(self) -> dict:
        return _loads(self.analysis_result, {})

    @property
    def form_score(self):
        score = self.result().get("formScore")
        return score if isinstance(score, (int, float)) else None

    def to_dict(self) -> dict:
        data = dict(self.result())
        data.update({
            "id": self.id,
            "userId": self.user_id,
            "sessionId": self.session_id,
            "exerciseName": self.exercise_name,
            "confidenceScore": self.confidence_score,
            "timestamp": isoformat_or_none(self.created_at),
            "status": "completed",
        })
        return data

    def __repr__(self):
        return f"<MovementAnalysis {self.id} {self.exercise_name!r} score={self.form_score}>"


# ---------- PLANTILLAS DE REFERENCIA ----------
class ExerciseTemplate(db.Model):
    __tablename__ = "exercise_templates"

    id   = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), unique=True, nullable=False)  # clave normalizada: "squat"

    display_name        = db.Column(db.String(120))
    category            = db.Column(db.String(50))
    reference_keypoints = db.Column(db.Text)   # JSON: lista de frames
    difficulty          = db.Column(db.Integer, nullable=False, default=1)
    target_muscles      = db.Column(db.Text)
    common_mistakes     = db.Column(db.Text)   # JSON: lista de textos
    created_at          = db.Column(db.DateTime, nullable=False, default=utcnow)

    rules = db.relationship("BiomechanicalRule", back_populates="template", cascade="all, delete-orphan")

    def reference_frames(self) -> list:
        return _loads(self.reference_keypoints, [])

    def mistakes(self) -> list:
        return _loads(self.common_mistakes, [])

    def __repr__(self):
        return f"<ExerciseTemplate {self.name}>"


class BiomechanicalRule(db.Model):
    __tablename__ = "biomechanical_rules"

    id          = db.Column(db.Integer, primary_key=True)
    template_id = db.Column(db.Integer, db.ForeignKey("exercise_templates.id", ondelete="CASCADE"), nullable=False, index=True)

    rule_name           = db.Column(db.String(120), nullable=False)
    rule_type           = db.Column(db.String(20), nullable=False)   # angle | distance
    body_parts          = db.Column(db.Text, nullable=False)         # JSON: índices de keypoints
    min_value           = db.Column(db.Float)
    max_value           = db.Column(db.Float)
    severity            = db.Column(db.String(20), nullable=False, default="medium")  # low | medium | high | critical
    correction_feedback = db.Column(db.Text, nullable=False)
    is_active           = db.Column(db.Boolean, nullable=False, default=True)

    __table_args__ = (
        db.UniqueConstraint("template_id", "rule_name", name="uq_biomechanical_rules_template_name"),
    )

    template = db.relationship("ExerciseTemplate", back_populates="rules")

    def indices(self) -> list:
        parts = _loads(self.body_parts, [])
        return [int(p) for p in parts if isinstance(p, (int, float))]

    def __repr__(self):
        return f"<BiomechanicalRule {self.rule_name} {self.rule_type} [{self.min_value},{self.max_value}]>"
