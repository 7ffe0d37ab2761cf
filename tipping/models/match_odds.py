from datetime import datetime, timezone

from tipping import db

ODDS_FIELDS = (
    "draw_odds",
    "home_1_12_odds",
    "home_13_plus_odds",
    "away_1_12_odds",
    "away_13_plus_odds",
)


class MatchOdds(db.Model):
    """Winning-margin odds for the five outcomes of a fixture"""

    __tablename__ = "match_odds"

    fixture_id = db.Column(db.Integer, db.ForeignKey("fixtures.id"), primary_key=True)
    draw_odds = db.Column(db.Float, nullable=False)
    home_1_12_odds = db.Column(db.Float, nullable=False)
    home_13_plus_odds = db.Column(db.Float, nullable=False)
    away_1_12_odds = db.Column(db.Float, nullable=False)
    away_13_plus_odds = db.Column(db.Float, nullable=False)

    odds_as_at = db.Column(
        db.DateTime, nullable=False, default=lambda: datetime.now(timezone.utc)
    )
    updated_at = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = tuple(
        db.CheckConstraint(f"{field} >= 1.01", name=f"match_odds_{field}_min")
        for field in ODDS_FIELDS
    )

    def __repr__(self):
        return f"<MatchOdds fixture_id={self.fixture_id}>"

    def as_outcome_map(self):
        """Odds keyed by paper-bet outcome bucket"""
        return {
            "draw": self.draw_odds,
            "home_1_12": self.home_1_12_odds,
            "home_13_plus": self.home_13_plus_odds,
            "away_1_12": self.away_1_12_odds,
            "away_13_plus": self.away_13_plus_odds,
        }

    def is_complete(self, min_odds=1.01):
        """True when every outcome carries usable odds"""
        for value in self.as_outcome_map().values():
            if value is None or value < min_odds:
                return False
        return True

    def to_dict(self):
        data = {"fixture_id": self.fixture_id}
        for field in ODDS_FIELDS:
            data[field] = getattr(self, field)
        data["odds_as_at"] = self.odds_as_at.isoformat() if self.odds_as_at else None
        return data
