from datetime import datetime, timezone

from tipping import db

CATEGORIES = (
    "accountant",
    "broker",
    "financial_services",
    "solicitor",
    "valuer",
    "other",
)


class Participant(db.Model):
    """A competing team"""

    __tablename__ = "participants"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    business_name = db.Column(db.String(255))
    team_name = db.Column(db.String(120), nullable=False, index=True)
    category = db.Column(db.String(50))

    league_id = db.Column(db.Integer, db.ForeignKey("leagues.id"), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), unique=True)

    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    # Relationships
    picks = db.relationship(
        "Pick", backref="participant", lazy="dynamic", cascade="all, delete-orphan"
    )
    contacts = db.relationship(
        "ParticipantContact",
        backref="participant",
        lazy="dynamic",
        cascade="all, delete-orphan",
    )
    paper_bets = db.relationship(
        "PaperBet", backref="participant", lazy="dynamic", cascade="all, delete-orphan"
    )

    __table_args__ = (
        db.CheckConstraint(
            "category IS NULL OR category IN ("
            + ", ".join(f"'{c}'" for c in CATEGORIES)
            + ")",
            name="participant_category_valid",
        ),
    )

    def __repr__(self):
        return f"<Participant {self.team_name}>"

    @property
    def is_admin_team(self):
        """Admin test teams are kept off public leaderboards"""
        return "(admin)" in (self.team_name or "").lower()

    @property
    def primary_email(self):
        contact = self.contacts.filter_by(is_primary=True).first()
        return contact.email if contact else None

    @property
    def competition_id(self):
        return self.league.competition_id if self.league else None

    def get_pick_for_fixture(self, fixture_id):
        return self.picks.filter_by(fixture_id=fixture_id).first()

    def to_dict(self, include_email=False):
        data = {
            "id": self.id,
            "team_name": self.team_name,
            "business_name": self.business_name,
            "category": self.category,
            "league_id": self.league_id,
        }
        if include_email:
            data["primary_email"] = self.primary_email
        return data


class ParticipantContact(db.Model):
    __tablename__ = "participant_contacts"

    id = db.Column(db.Integer, primary_key=True)
    participant_id = db.Column(
        db.Integer, db.ForeignKey("participants.id"), nullable=False, index=True
    )
    email = db.Column(db.String(255), nullable=False)
    is_primary = db.Column(db.Boolean, default=False, nullable=False)
    receives_updates = db.Column(db.Boolean, default=True, nullable=False)

    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        db.UniqueConstraint("participant_id", "email", name="unique_participant_email"),
    )

    def __repr__(self):
        return f"<ParticipantContact {self.email}>"

    def to_dict(self):
        return {
            "participant_id": self.participant_id,
            "email": self.email,
            "is_primary": self.is_primary,
            "receives_updates": self.receives_updates,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
