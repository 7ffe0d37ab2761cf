from datetime import datetime, timezone

from tipping import db


class Pick(db.Model):
    __tablename__ = "picks"

    id = db.Column(db.Integer, primary_key=True)

    # Pick identification
    participant_id = db.Column(
        db.Integer, db.ForeignKey("participants.id"), nullable=False
    )
    fixture_id = db.Column(db.Integer, db.ForeignKey("fixtures.id"), nullable=False)
    league_id = db.Column(db.Integer, db.ForeignKey("leagues.id"), nullable=False)

    # Pick details: a team code or DRAW, plus the encoded margin band
    picked_team = db.Column(db.String(10), nullable=False)
    margin = db.Column(db.Integer, nullable=False, default=0)

    # Row version for conditional writes
    version = db.Column(db.Integer, nullable=False)

    # Timestamps
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Constraints and indexes
    __table_args__ = (
        db.UniqueConstraint("participant_id", "fixture_id", name="unique_participant_fixture_pick"),
        db.CheckConstraint(
            "(picked_team = 'DRAW' AND margin = 0) OR "
            "(picked_team != 'DRAW' AND margin IN (1, 13))",
            name="pick_margin_band_valid",
        ),
        db.Index("idx_pick_participant", "participant_id"),
        db.Index("idx_pick_fixture", "fixture_id"),
    )

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self):
        return f"<Pick participant_id={self.participant_id} fixture_id={self.fixture_id} team={self.picked_team}>"

    @property
    def result(self):
        return self.fixture.result if self.fixture else None

    @property
    def score(self):
        """Points for this pick against the fixture's result (0 while unscored)"""
        from tipping.utils.scoring import calculate_pick_score

        return calculate_pick_score(self, self.result)

    def to_dict(self, include_score=False):
        """Convert pick to dictionary for API responses"""
        data = {
            "id": self.id,
            "participant_id": self.participant_id,
            "fixture_id": self.fixture_id,
            "picked_team": self.picked_team,
            "margin": self.margin,
            "version": self.version,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

        if include_score:
            from tipping.utils.scoring import score_result

            breakdown = score_result(self, self.result)
            data["winner_points"] = breakdown.winner_points
            data["margin_points"] = breakdown.margin_points
            data["total_points"] = breakdown.total_points

        return data


class PickEvent(db.Model):
    """Append-only history of every accepted pick write"""

    __tablename__ = "pick_events"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    participant_id = db.Column(
        db.Integer, db.ForeignKey("participants.id"), nullable=False, index=True
    )
    fixture_id = db.Column(db.Integer, db.ForeignKey("fixtures.id"), nullable=False)
    picked_team = db.Column(db.String(10), nullable=False)
    margin = db.Column(db.Integer, nullable=False, default=0)
    action = db.Column(db.String(20), nullable=False, default="save")

    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        db.CheckConstraint("margin >= 0", name="pick_event_margin_nonnegative"),
    )

    @staticmethod
    def log(user, pick, action="save"):
        event = PickEvent(
            user_id=user.id,
            participant_id=pick.participant_id,
            fixture_id=pick.fixture_id,
            picked_team=pick.picked_team,
            margin=pick.margin,
            action=action,
        )
        db.session.add(event)
        return event

    def to_dict(self):
        return {
            "id": self.id,
            "participant_id": self.participant_id,
            "fixture_id": self.fixture_id,
            "picked_team": self.picked_team,
            "margin": self.margin,
            "action": self.action,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
