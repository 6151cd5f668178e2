# fitcoach/models/wearable.py
from fitcoach import db, tokens
from fitcoach.utils.dates import utcnow, isoformat_or_none


class WearableIntegration(db.Model):
    __tablename__ = "wearable_integrations"

    id      = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    provider      = db.Column(db.String(30), nullable=False)  # fitbit | garmin | apple_health | google_fit
    access_token  = db.Column(db.Text)   # cifrado (Fernet)
    refresh_token = db.Column(db.Text)   # cifrado (Fernet)
    expires_at    = db.Column(db.DateTime)
    last_sync     = db.Column(db.DateTime)
    is_active     = db.Column(db.Boolean, nullable=False, default=True)
    created_at    = db.Column(db.DateTime, nullable=False, default=utcnow)

    __table_args__ = (
        db.UniqueConstraint("user_id", "provider", name="uq_wearable_integrations_user_provider"),
    )

    user = db.relationship("User", back_populates="integrations")

    # ---- tokens: nunca en claro en BD ----
    def set_tokens(self, access_token, refresh_token=None):
        self.access_token = tokens.encrypt(access_token) if access_token else None
        self.refresh_token = tokens.encrypt(refresh_token) if refresh_token else None

    def get_access_token(self):
        return tokens.decrypt(self.access_token) if self.access_token else None

    def to_dict(self) -> dict:
        # Los tokens no salen nunca por la API
        return {
            "id": self.id,
            "userId": self.user_id,
            "provider": self.provider,
            "expiresAt": isoformat_or_none(self.expires_at),
            "lastSync": isoformat_or_none(self.last_sync),
            "isActive": self.is_active,
            "createdAt": isoformat_or_none(self.created_at),
        }

    def __repr__(self):
        return f"<WearableIntegration {self.user_id} {self.provider} active={self.is_active}>"


class HealthData(db.Model):
    __tablename__ = "health_data"

    id      = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    data_type   = db.Column(db.String(40), nullable=False)  # steps | heart_rate | sleep | calories | weight ...
    value       = db.Column(db.Float, nullable=False)
    unit        = db.Column(db.String(20), nullable=False)
    source      = db.Column(db.String(30), nullable=False, default="manual")
    recorded_at = db.Column(db.DateTime, nullable=False, default=utcnow, index=True)
    created_at  = db.Column(db.DateTime, nullable=False, default=utcnow)

    user = db.relationship("User", back_populates="health_data")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "dataType": self.data_type,
            "value": self.value,
            "unit": self.unit,
            "source": self.source,
            "recordedAt": isoformat_or_none(self.recorded_at),
        }

    def __repr__(self):
        return f"<HealthData {self.user_id} {self.data_type}={self.value}{self.unit}>"
