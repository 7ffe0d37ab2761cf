from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest
from sqlalchemy import text

from tipping import create_app, db
from tipping.models import (
    Competition,
    Fixture,
    League,
    Participant,
    Pick,
    Round,
    Team,
    User,
)
from tipping.services import account_service, admin_service
from tipping.services.auth_service import issue_token

ADMIN_EMAIL = "admin@example.com"


@pytest.fixture
def app():
    app = create_app("testing")
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def foreign_keys(app):
    """Enforce foreign keys on the in-memory SQLite database, as PostgreSQL does"""
    with app.app_context():
        db.session.execute(text("PRAGMA foreign_keys=ON"))
        db.session.commit()


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def world(app):
    """
    One competition with a league, a round of three fixtures (two open, one
    already kicked off) and two registered participants, plus a second
    competition whose fixture nobody in ALPHA may pick.
    """
    now = datetime.now(timezone.utc)
    with app.app_context():
        comp = Competition(code="SR26", name="Super Rugby 2026", sport="rugby", season=2026)
        other = Competition(code="NPC26", name="NPC 2026", sport="rugby", season=2026)
        db.session.add_all([comp, other])
        db.session.flush()

        league = League(code="ALPHA", name="Alpha League", competition_id=comp.id)
        other_league = League(code="BETA", name="Beta League", competition_id=other.id)
        db.session.add_all([league, other_league])

        for order, (code, name) in enumerate(
            [("BLU", "Blues"), ("CHI", "Chiefs"), ("CRU", "Crusaders"), ("HUR", "Hurricanes")]
        ):
            db.session.add(Team(code=code, name=name, sort_order=order))

        round_one = Round(competition_id=comp.id, season=2026, round_number=1)
        other_round = Round(competition_id=other.id, season=2026, round_number=1)
        db.session.add_all([round_one, other_round])
        db.session.flush()

        open_fixture = Fixture(
            round_id=round_one.id,
            match_number=1,
            home_team_code="BLU",
            away_team_code="CHI",
            kickoff_at=now + timedelta(days=2),
        )
        second_fixture = Fixture(
            round_id=round_one.id,
            match_number=2,
            home_team_code="CRU",
            away_team_code="HUR",
            kickoff_at=now + timedelta(days=3),
        )
        started_fixture = Fixture(
            round_id=round_one.id,
            match_number=3,
            home_team_code="CHI",
            away_team_code="CRU",
            kickoff_at=now - timedelta(hours=1),
        )
        foreign_fixture = Fixture(
            round_id=other_round.id,
            match_number=1,
            home_team_code="BLU",
            away_team_code="HUR",
            kickoff_at=now + timedelta(days=2),
        )
        db.session.add_all([open_fixture, second_fixture, started_fixture, foreign_fixture])

        admin = User(email=ADMIN_EMAIL)
        admin.set_password("adminpass")
        db.session.add(admin)
        db.session.commit()

        acme, acme_user = account_service.register_participant(
            "Acme Ltd",
            "Acme Tippers",
            "broker",
            ["one@acme.test", "two@acme.test"],
            "secret1",
            "ALPHA",
        )
        bolt, bolt_user = account_service.register_participant(
            "Bolt Co", "Bolt Punters", "accountant", ["bolt@bolt.test"], "secret2", "ALPHA"
        )

        return SimpleNamespace(
            competition_id=comp.id,
            other_competition_id=other.id,
            league_id=league.id,
            round_id=round_one.id,
            open_fixture_id=open_fixture.id,
            second_fixture_id=second_fixture.id,
            started_fixture_id=started_fixture.id,
            foreign_fixture_id=foreign_fixture.id,
            acme_id=acme.id,
            bolt_id=bolt.id,
            acme_headers=bearer(issue_token(acme_user)),
            bolt_headers=bearer(issue_token(bolt_user)),
            admin_headers=bearer(issue_token(admin)),
        )


@pytest.fixture
def make_pick(app):
    """Insert a pick directly, bypassing the kickoff lock"""

    def _make_pick(participant_id, fixture_id, picked_team, margin=0):
        with app.app_context():
            fixture = db.session.get(Fixture, fixture_id)
            participant = db.session.get(Participant, participant_id)
            pick = Pick(
                participant_id=participant_id,
                fixture_id=fixture.id,
                league_id=participant.league_id,
                picked_team=picked_team,
                margin=margin,
            )
            db.session.add(pick)
            db.session.commit()
            return pick.id

    return _make_pick


@pytest.fixture
def set_result(app):
    def _set_result(fixture_id, winning_team, margin_band=None):
        with app.app_context():
            admin_service.set_result(fixture_id, winning_team, margin_band)

    return _set_result


FULL_ODDS = {
    "draw_odds": 26.0,
    "home_1_12_odds": 2.5,
    "home_13_plus_odds": 4.0,
    "away_1_12_odds": 3.0,
    "away_13_plus_odds": 6.5,
}


@pytest.fixture
def set_odds(app):
    def _set_odds(fixture_id, **overrides):
        values = dict(FULL_ODDS, **overrides)
        with app.app_context():
            admin_service.set_odds(fixture_id, **values)

    return _set_odds
