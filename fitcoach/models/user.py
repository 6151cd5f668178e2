# fitcoach/models/user.py

import json

from flask import current_app, jsonify
from flask_login import UserMixin
from sqlalchemy import CheckConstraint

from fitcoach import db, login_manager
from fitcoach.utils.dates import utcnow, isoformat_or_none

DEV_USER_EMAIL = "dev@example.com"


# ======================
# Modelos
# ======================

class User(UserMixin, db.Model):
    __tablename__ = "users"

    id       = db.Column(db.Integer, primary_key=True)
    email    = db.Column(db.String(150), unique=True, nullable=False)
    password = db.Column(db.String(255), nullable=True)  # None = usuario sin login local (dev)

    first_name        = db.Column(db.String(80))
    last_name         = db.Column(db.String(80))
    profile_image_url = db.Column(db.String(500))

    fitness_level = db.Column(db.Integer, nullable=False, default=1)  # 1-5
    goals         = db.Column(db.Text)                                # "fuerza,cardio"

    # Suscripción (solo columnas; la pasarela de pago queda fuera)
    stripe_customer_id     = db.Column(db.String(120))
    stripe_subscription_id = db.Column(db.String(120))
    subscription_status    = db.Column(db.String(20), nullable=False, default="inactive")

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        CheckConstraint("fitness_level BETWEEN 1 AND 5", name="ck_users_fitness_level"),
    )

    # Relaciones
    stats = db.relationship("UserStats", uselist=False, back_populates="user", cascade="all, delete-orphan")
    questionnaires = db.relationship("UserQuestionnaire", back_populates="user", cascade="all, delete-orphan")
    workout_plans = db.relationship("WorkoutPlan", back_populates="user", cascade="all, delete-orphan")
    sessions = db.relationship("WorkoutSession", back_populates="user", cascade="all, delete-orphan")
    achievements = db.relationship("Achievement", back_populates="user", cascade="all, delete-orphan")
    analyses = db.relationship("MovementAnalysis", back_populates="user", cascade="all, delete-orphan")
    integrations = db.relationship("WearableIntegration", back_populates="user", cascade="all, delete-orphan")
    health_data = db.relationship("HealthData", back_populates="user", cascade="all, delete-orphan")

    # ---- helpers ----
    def goals_list(self):
        return [g.strip() for g in (self.goals or "").split(",") if g.strip()]

    def set_goals(self, goals):
        if isinstance(goals, str):
            goals = goals.split(",")
        self.goals = ",".join(str(g).strip() for g in (goals or []) if str(g).strip()) or None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "email": self.email,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "profileImageUrl": self.profile_image_url,
            "fitnessLevel": self.fitness_level,
            "goals": self.goals_list(),
            "subscriptionStatus": self.subscription_status,
            "createdAt": isoformat_or_none(self.created_at),
            "updatedAt": isoformat_or_none(self.updated_at),
        }

    def __repr__(self) -> str:
        return f"<User {self.id} {self.email}>"


class UserStats(db.Model):
    __tablename__ = "user_stats"

    id      = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True)

    current_streak       = db.Column(db.Integer, nullable=False, default=0)
    longest_streak       = db.Column(db.Integer, nullable=False, default=0)
    total_workouts       = db.Column(db.Integer, nullable=False, default=0)
    total_calories_burned = db.Column(db.Integer, nullable=False, default=0)
    weekly_goal          = db.Column(db.Integer, nullable=False, default=4)
    weekly_progress      = db.Column(db.Integer, nullable=False, default=0)
    last_workout_date    = db.Column(db.DateTime)
    updated_at           = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    user = db.relationship("User", back_populates="stats")

    def to_dict(self) -> dict:
        return {
            "currentStreak": self.current_streak or 0,
            "longestStreak": self.longest_streak or 0,
            "totalWorkouts": self.total_workouts or 0,
            "totalCaloriesBurned": self.total_calories_burned or 0,
            "weeklyGoal": self.weekly_goal or 4,
            "weeklyProgress": self.weekly_progress or 0,
            "lastWorkoutDate": isoformat_or_none(self.last_workout_date),
        }

    def __repr__(self) -> str:
        return f"<UserStats user={self.user_id} streak={self.current_streak}>"


class UserQuestionnaire(db.Model):
    __tablename__ = "user_questionnaires"

    id      = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    questionnaire_type = db.Column(db.String(50), nullable=False)  # fitness_onboarding
    responses          = db.Column(db.Text, nullable=False)        # JSON serializado
    completed_at       = db.Column(db.DateTime, nullable=False, default=utcnow)

    user = db.relationship("User", back_populates="questionnaires")

    def responses_dict(self) -> dict:
        try:
            return json.loads(self.responses or "{}")
        except ValueError:
            return {}

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "questionnaireType": self.questionnaire_type,
            "responses": self.responses_dict(),
            "completedAt": isoformat_or_none(self.completed_at),
        }


# ======================
# Alta / upsert
# ======================

_PROFILE_FIELDS = ("first_name", "last_name", "profile_image_url", "password")


def upsert_user(email: str, **fields) -> User:
    """
    Crea el usuario (y su fila de UserStats en la misma transacción) o
    actualiza los campos de perfil si ya existe. No hace commit.
    """
    email = (email or "").strip().lower()
    user = User.query.filter_by(email=email).first()
    if user is None:
        user = User(email=email)
        user.stats = UserStats()
        db.session.add(user)
    elif user.stats is None:
        user.stats = UserStats()

    for key in _PROFILE_FIELDS:
        if fields.get(key) is not None:
            setattr(user, key, fields[key])
    return user


# ======================
# Flask-Login
# ======================

@login_manager.user_loader
def load_user(user_id):
    return db.session.get(User, int(user_id))


@login_manager.request_loader
def load_dev_user(request):
    """Modo desarrollo: autentica siempre al usuario de pruebas."""
    if not current_app.config.get("DEV_AUTO_LOGIN"):
        return None
    user = User.query.filter_by(email=DEV_USER_EMAIL).first()
    if user is None:
        user = upsert_user(DEV_USER_EMAIL, first_name="Dev", last_name="User")
        db.session.commit()
    return user


@login_manager.unauthorized_handler
def unauthorized():
    return jsonify(message="Authentication required"), 401
