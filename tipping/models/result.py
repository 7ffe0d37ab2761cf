from datetime import datetime, timezone

from tipping import db


class Result(db.Model):
    """Official outcome of a fixture"""

    __tablename__ = "results"

    id = db.Column(db.Integer, primary_key=True)
    fixture_id = db.Column(
        db.Integer, db.ForeignKey("fixtures.id"), nullable=False, unique=True
    )
    winning_team = db.Column(db.String(10), nullable=False)
    # "1-12" or "13+"; null for a draw
    margin_band = db.Column(db.String(10))

    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        db.CheckConstraint(
            "(winning_team = 'DRAW' AND margin_band IS NULL) OR "
            "(winning_team != 'DRAW' AND margin_band IN ('1-12', '13+'))",
            name="result_winner_margin_valid",
        ),
    )

    def __repr__(self):
        return f"<Result fixture_id={self.fixture_id} {self.winning_team} {self.margin_band}>"

    @property
    def is_draw(self):
        from tipping.utils.scoring import DRAW

        return self.winning_team == DRAW

    def to_dict(self):
        return {
            "fixture_id": self.fixture_id,
            "winning_team": self.winning_team,
            "margin_band": self.margin_band,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
