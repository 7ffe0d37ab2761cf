from datetime import datetime, timezone

from tipping import db


class Round(db.Model):
    __tablename__ = "rounds"

    id = db.Column(db.Integer, primary_key=True)
    competition_id = db.Column(
        db.Integer, db.ForeignKey("competitions.id"), nullable=False, index=True
    )
    season = db.Column(db.Integer, nullable=False)
    round_number = db.Column(db.Integer, nullable=False)

    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    fixtures = db.relationship(
        "Fixture", backref="round", lazy="dynamic", cascade="all, delete-orphan"
    )

    __table_args__ = (
        db.UniqueConstraint(
            "competition_id", "season", "round_number", name="unique_round_number"
        ),
        db.CheckConstraint("round_number > 0", name="round_number_positive"),
    )

    def __repr__(self):
        return f"<Round {self.season} R{self.round_number}>"

    def get_fixtures(self):
        from .fixture import Fixture

        return self.fixtures.order_by(Fixture.match_number).all()

    def to_dict(self, include_fixtures=False):
        data = {
            "id": self.id,
            "competition_id": self.competition_id,
            "season": self.season,
            "round_number": self.round_number,
        }
        if include_fixtures:
            data["fixtures"] = [fixture.to_dict() for fixture in self.get_fixtures()]
        return data
