from datetime import datetime, timezone

from tipping import db


class Competition(db.Model):
    __tablename__ = "competitions"

    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(50), unique=True, nullable=False, index=True)
    name = db.Column(db.String(120), nullable=False)
    sport = db.Column(db.String(50))
    season = db.Column(db.Integer)

    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    # Relationships
    leagues = db.relationship("League", backref="competition", lazy="dynamic")
    rounds = db.relationship("Round", backref="competition", lazy="dynamic")

    def __repr__(self):
        return f"<Competition {self.code}>"

    @staticmethod
    def get_by_code(code):
        return Competition.query.filter_by(code=code).first()

    def to_dict(self, include_counts=False):
        data = {
            "id": self.id,
            "code": self.code,
            "name": self.name,
            "sport": self.sport,
            "season": self.season,
        }

        if include_counts:
            from .fixture import Fixture
            from .round import Round

            data["leagues_count"] = self.leagues.count()
            data["rounds_count"] = self.rounds.count()
            data["fixtures_count"] = (
                Fixture.query.join(Round).filter(Round.competition_id == self.id).count()
            )

        return data


class League(db.Model):
    """A group of participants playing one competition"""

    __tablename__ = "leagues"

    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(50), unique=True, nullable=False, index=True)
    name = db.Column(db.String(120), nullable=False)
    competition_id = db.Column(
        db.Integer, db.ForeignKey("competitions.id"), nullable=False, index=True
    )

    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    participants = db.relationship("Participant", backref="league", lazy="dynamic")

    def __repr__(self):
        return f"<League {self.code}>"

    @staticmethod
    def get_by_code(code):
        return League.query.filter_by(code=code).first()

    def to_dict(self, include_counts=False):
        data = {
            "id": self.id,
            "code": self.code,
            "name": self.name,
            "competition_id": self.competition_id,
        }
        if include_counts:
            data["participants_count"] = self.participants.count()
        return data
