# fitcoach/models/workout.py
from sqlalchemy import CheckConstraint

from fitcoach import db
from fitcoach.utils.dates import utcnow, isoformat_or_none

DIFFICULTY_LEVELS = {"beginner": 1, "intermediate": 2, "advanced": 3}


def _split(text):
    return [t.strip() for t in (text or "").split(",") if t.strip()]


# ---------- PLAN ----------
class WorkoutPlan(db.Model):
    __tablename__ = "workout_plans"

    id      = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    name        = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text)
    difficulty  = db.Column(db.Integer, nullable=False, default=1)   # 1-5
    is_active   = db.Column(db.Boolean, nullable=False, default=True)
    created_at  = db.Column(db.DateTime, nullable=False, default=utcnow)

    __table_args__ = (
        CheckConstraint("difficulty BETWEEN 1 AND 5", name="ck_workout_plans_difficulty"),
    )

    user = db.relationship("User", back_populates="workout_plans")
    exercises = db.relationship(
        "Exercise",
        back_populates="plan",
        cascade="all, delete-orphan",
        order_by="[Exercise.day, Exercise.order]",
    )
    # al borrar el plan, las sesiones quedan sin plan (plan_id = NULL)
    sessions = db.relationship("WorkoutSession", back_populates="plan")

    def to_dict(self, with_exercises: bool = True) -> dict:
        data = {
            "id": self.id,
            "userId": self.user_id,
            "name": self.name,
            "description": self.description,
            "difficulty": self.difficulty,
            "isActive": self.is_active,
            "createdAt": isoformat_or_none(self.created_at),
        }
        if with_exercises:
            data["exercises"] = [e.to_dict() for e in self.exercises]
        return data

    def __repr__(self):
        return f"<WorkoutPlan {self.id} {self.name!r} d={self.difficulty}>"


# ---------- EJERCICIO ----------
class Exercise(db.Model):
    __tablename__ = "exercises"

    id      = db.Column(db.Integer, primary_key=True)
    plan_id = db.Column(db.Integer, db.ForeignKey("workout_plans.id", ondelete="CASCADE"), nullable=False, index=True)

    name           = db.Column(db.String(200), nullable=False)
    description    = db.Column(db.Text)
    type           = db.Column(db.String(20), nullable=False, default="strength")  # strength | cardio | flexibility
    difficulty     = db.Column(db.Integer, nullable=False, default=1)              # 1-5
    target_muscles = db.Column(db.Text)                                            # "chest,triceps"
    day            = db.Column(db.Integer, nullable=False, default=1)
    order          = db.Column(db.Integer, nullable=False, default=1)
    duration       = db.Column(db.Integer)   # minutos
    sets           = db.Column(db.Integer)
    reps           = db.Column(db.Integer)
    weight         = db.Column(db.Float)     # kg

    plan = db.relationship("WorkoutPlan", back_populates="exercises")

    def muscles(self):
        return _split(self.target_muscles)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "workoutPlanId": self.plan_id,
            "name": self.name,
            "description": self.description,
            "type": self.type,
            "difficulty": self.difficulty,
            "targetMuscles": self.muscles(),
            "day": self.day,
            "order": self.order,
            "duration": self.duration,
            "sets": self.sets,
            "reps": self.reps,
            "weight": self.weight,
        }

    def __repr__(self):
        return f"<Exercise {self.id} {self.name!r} {self.sets}x{self.reps}>"


# ---------- SESIÓN REALIZADA ----------
class WorkoutSession(db.Model):
    __tablename__ = "workout_sessions"

    id      = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    plan_id = db.Column(db.Integer, db.ForeignKey("workout_plans.id", ondelete="SET NULL"), nullable=True)

    name            = db.Column(db.String(200), nullable=False)
    type            = db.Column(db.String(20))
    duration        = db.Column(db.Integer)   # minutos
    calories_burned = db.Column(db.Integer)
    intensity       = db.Column(db.String(20))  # low | medium | high
    completed_at    = db.Column(db.DateTime, nullable=False, default=utcnow, index=True)

    user = db.relationship("User", back_populates="sessions")
    plan = db.relationship("WorkoutPlan", back_populates="sessions")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "workoutPlanId": self.plan_id,
            "name": self.name,
            "type": self.type,
            "duration": self.duration,
            "caloriesBurned": self.calories_burned,
            "intensity": self.intensity,
            "completedAt": isoformat_or_none(self.completed_at),
        }

    def __repr__(self):
        return f"<WorkoutSession {self.id} {self.name!r} {self.duration}min>"
