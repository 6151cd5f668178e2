# fitcoach/models/achievement.py
from fitcoach import db
from fitcoach.utils.dates import utcnow, isoformat_or_none


class Achievement(db.Model):
    __tablename__ = "achievements"

    id      = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    type        = db.Column(db.String(50), nullable=False)   # streak | form_score | variety | milestone | ...
    title       = db.Column(db.String(120), nullable=False)
    description = db.Column(db.Text)
    points      = db.Column(db.Integer, nullable=False, default=100)
    earned_at   = db.Column(db.DateTime, nullable=False, default=utcnow)

    # Un logro se concede una sola vez por usuario
    __table_args__ = (
        db.UniqueConstraint("user_id", "type", "title", name="uq_achievements_user_type_title"),
    )

    user = db.relationship("User", back_populates="achievements")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "type": self.type,
            "title": self.title,
            "description": self.description,
            "points": self.points,
            "earnedAt": isoformat_or_none(self.earned_at),
        }

    def __repr__(self):
        return f"<Achievement {self.user_id} {self.type}/{self.title}>"
