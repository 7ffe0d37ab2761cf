from datetime import datetime, timezone

from tipping import db
from tipping.utils.paper_bets import OUTCOMES


class PaperBet(db.Model):
    """Simulated stake on the outcome implied by a participant's pick"""

    __tablename__ = "paper_bets"

    id = db.Column(db.Integer, primary_key=True)
    participant_id = db.Column(
        db.Integer, db.ForeignKey("participants.id"), nullable=False, index=True
    )
    fixture_id = db.Column(
        db.Integer, db.ForeignKey("fixtures.id"), nullable=False, index=True
    )
    league_id = db.Column(
        db.Integer, db.ForeignKey("leagues.id"), nullable=False, index=True
    )
    outcome = db.Column(db.String(20), nullable=False)
    stake = db.Column(db.Float, nullable=False, default=10)
    odds = db.Column(db.Float, nullable=False)

    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        db.UniqueConstraint(
            "participant_id", "fixture_id", name="unique_participant_fixture_bet"
        ),
        db.CheckConstraint(
            "outcome IN (" + ", ".join(f"'{o}'" for o in OUTCOMES) + ")",
            name="paper_bet_outcome_valid",
        ),
        db.CheckConstraint("stake > 0", name="paper_bet_stake_positive"),
        db.CheckConstraint("odds >= 1.01", name="paper_bet_odds_min"),
    )

    def __repr__(self):
        return f"<PaperBet participant_id={self.participant_id} fixture_id={self.fixture_id} {self.outcome}@{self.odds}>"

    def settle(self):
        """Settle against the fixture's result (pending if there is none)"""
        from tipping.utils.paper_bets import result_outcome, settle_bet

        settled_outcome = None
        result = self.fixture.result
        if result is not None:
            settled_outcome = result_outcome(
                result.winning_team,
                result.margin_band,
                self.fixture.home_team_code,
                self.fixture.away_team_code,
            )
        return settle_bet(
            self.outcome,
            self.odds,
            settled_outcome,
            stake=self.stake,
            is_settled=result is not None,
        )

    def to_dict(self, include_settlement=False):
        data = {
            "id": self.id,
            "participant_id": self.participant_id,
            "fixture_id": self.fixture_id,
            "outcome": self.outcome,
            "stake": self.stake,
            "odds": self.odds,
        }
        if include_settlement:
            data["settlement"] = self.settle()._asdict()
        return data
