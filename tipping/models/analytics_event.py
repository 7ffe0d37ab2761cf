from datetime import datetime, timezone

from tipping import db

ALLOWED_EVENTS = (
    "landing_view",
    "login_view",
    "register_success",
    "login_success",
    "pick_saved",
)


class AnalyticsEvent(db.Model):
    """Product analytics beacon recorded by the client"""

    __tablename__ = "analytics_events"

    id = db.Column(db.Integer, primary_key=True)
    event_name = db.Column(db.String(50), nullable=False, index=True)
    participant_id = db.Column(
        db.Integer, db.ForeignKey("participants.id"), nullable=True
    )

    # "metadata" is reserved on declarative models
    event_metadata = db.Column("metadata", db.JSON, nullable=True)

    user_agent = db.Column(db.String(500))
    ip = db.Column(db.String(64))

    created_at = db.Column(
        db.DateTime, default=lambda: datetime.now(timezone.utc), index=True
    )

    def __repr__(self):
        return f"<AnalyticsEvent {self.event_name}>"

    def to_dict(self):
        return {
            "id": self.id,
            "event_name": self.event_name,
            "participant_id": self.participant_id,
            "metadata": self.event_metadata or {},
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
