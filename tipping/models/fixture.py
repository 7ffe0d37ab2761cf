from datetime import datetime, timezone

from tipping import db


class Fixture(db.Model):
    __tablename__ = "fixtures"

    id = db.Column(db.Integer, primary_key=True)

    # Fixture identification
    round_id = db.Column(db.Integer, db.ForeignKey("rounds.id"), nullable=False)
    match_number = db.Column(db.Integer, nullable=False)

    # Teams
    home_team_code = db.Column(db.String(10), nullable=False)
    away_team_code = db.Column(db.String(10), nullable=False)

    # Kickoff, stored as UTC; null means not yet scheduled
    kickoff_at = db.Column(db.DateTime(timezone=True))

    # Timestamps
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    # Relationships
    picks = db.relationship(
        "Pick", backref="fixture", lazy="dynamic", cascade="all, delete-orphan"
    )
    result = db.relationship(
        "Result", backref="fixture", uselist=False, cascade="all, delete-orphan"
    )
    odds = db.relationship(
        "MatchOdds", backref="fixture", uselist=False, cascade="all, delete-orphan"
    )
    paper_bets = db.relationship(
        "PaperBet", backref="fixture", lazy="dynamic", cascade="all, delete-orphan"
    )
    pick_events = db.relationship(
        "PickEvent", backref="fixture", lazy="dynamic", cascade="all, delete-orphan"
    )

    # Indexes
    __table_args__ = (
        db.Index("idx_fixture_round", "round_id"),
        db.Index("idx_fixture_kickoff", "kickoff_at"),
        db.CheckConstraint("home_team_code != away_team_code", name="different_teams"),
        db.CheckConstraint("match_number > 0", name="match_number_positive"),
    )

    def __repr__(self):
        return f"<Fixture {self.home_team_code} v {self.away_team_code} #{self.match_number}>"

    @property
    def competition_id(self):
        return self.round.competition_id if self.round else None

    @property
    def has_result(self):
        return self.result is not None

    def has_started(self, now=None):
        """Check if kickoff has passed"""
        if not self.kickoff_at:
            return False
        now_utc = now or datetime.now(timezone.utc)
        kickoff = self.kickoff_at

        # If kickoff is timezone-naive, assume it's in UTC
        if kickoff.tzinfo is None:
            kickoff = kickoff.replace(tzinfo=timezone.utc)

        return now_utc >= kickoff

    def is_locked(self, now=None):
        """Picks are frozen once kickoff passes or a result is recorded"""
        return self.has_result or self.has_started(now)

    def is_valid_pick_team(self, team_code):
        from tipping.utils.scoring import DRAW

        return team_code in (self.home_team_code, self.away_team_code, DRAW)

    def get_picks_count(self):
        """Get count of picks for each side"""
        from tipping.utils.scoring import DRAW

        home_picks = self.picks.filter_by(picked_team=self.home_team_code).count()
        away_picks = self.picks.filter_by(picked_team=self.away_team_code).count()
        draw_picks = self.picks.filter_by(picked_team=DRAW).count()

        return {
            "home_team": home_picks,
            "away_team": away_picks,
            "draw": draw_picks,
            "total": home_picks + away_picks + draw_picks,
        }

    def to_dict(self, include_picks_count=False):
        """Convert fixture to dictionary for API responses"""
        from tipping.utils.timezone_utils import as_utc, convert_to_app_timezone

        kickoff = as_utc(self.kickoff_at)
        local_kickoff = convert_to_app_timezone(self.kickoff_at)
        data = {
            "id": self.id,
            "round_id": self.round_id,
            "match_number": self.match_number,
            "home_team_code": self.home_team_code,
            "away_team_code": self.away_team_code,
            "kickoff_at": kickoff.isoformat() if kickoff else None,
            "kickoff_local": local_kickoff.isoformat() if local_kickoff else None,
            "is_locked": self.is_locked(),
            "result": self.result.to_dict() if self.result else None,
        }

        if include_picks_count:
            data["picks_count"] = self.get_picks_count()

        return data
