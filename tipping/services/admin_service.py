"""
Administrative writes: competition structure, rounds, fixtures, results, odds

Routes validate payload shape with WTForms; the rules that depend on stored
state (duplicates, locks, team membership) are enforced here.
"""

import logging
from datetime import datetime, timezone

from tipping import db
from tipping.errors import NotFoundError, ValidationError
from tipping.models import Competition, Fixture, League, MatchOdds, Result, Round
from tipping.models.match_odds import ODDS_FIELDS
from tipping.utils.cache_utils import invalidate_leaderboards
from tipping.utils.scoring import DRAW, MARGIN_BANDS

logger = logging.getLogger(__name__)


def _get(model, object_id, label):
    obj = db.session.get(model, object_id) if object_id is not None else None
    if obj is None:
        raise NotFoundError(f"{label} not found")
    return obj


# Structure


def create_competition(code, name, sport=None, season=None):
    code = code.strip()
    if Competition.get_by_code(code):
        raise ValidationError(f"Competition code '{code}' already exists")
    competition = Competition(code=code, name=name.strip(), sport=sport, season=season)
    db.session.add(competition)
    db.session.commit()
    logger.info(f"Competition created: {code}")
    return competition


def create_league(code, name, competition_id):
    code = code.strip()
    competition = _get(Competition, competition_id, "Competition")
    if League.get_by_code(code):
        raise ValidationError(f"League code '{code}' already exists")
    league = League(code=code, name=name.strip(), competition_id=competition.id)
    db.session.add(league)
    db.session.commit()
    logger.info(f"League created: {code} in {competition.code}")
    return league


def structure():
    """Competitions and leagues with their counts"""
    competitions = Competition.query.order_by(Competition.season, Competition.code).all()
    leagues = League.query.order_by(League.code).all()
    codes = {c.id: c.code for c in competitions}

    league_rows = []
    for league in leagues:
        row = league.to_dict(include_counts=True)
        row["competition_code"] = codes.get(league.competition_id)
        league_rows.append(row)

    return {
        "competitions": [c.to_dict(include_counts=True) for c in competitions],
        "leagues": league_rows,
    }


# Rounds


def create_round(competition_id, season, round_number):
    competition = _get(Competition, competition_id, "Competition")
    existing = Round.query.filter_by(
        competition_id=competition.id, season=season, round_number=round_number
    ).first()
    if existing:
        raise ValidationError(
            f"Round {round_number} of {season} already exists for {competition.code}"
        )
    round_obj = Round(
        competition_id=competition.id, season=season, round_number=round_number
    )
    db.session.add(round_obj)
    db.session.commit()
    logger.info(f"Round created: {competition.code} {season} R{round_number}")
    return round_obj


def list_rounds(competition_id=None, season=None):
    query = Round.query
    if competition_id is not None:
        query = query.filter(Round.competition_id == competition_id)
    if season is not None:
        query = query.filter(Round.season == season)
    return query.order_by(Round.season, Round.round_number).all()


def delete_round(round_id):
    round_obj = _get(Round, round_id, "Round")
    if round_obj.fixtures.count():
        raise ValidationError("Round still has fixtures")
    db.session.delete(round_obj)
    db.session.commit()
    logger.info(f"Round deleted: {round_id}")


# Fixtures


def _check_teams(home_team_code, away_team_code):
    home = (home_team_code or "").strip().upper()
    away = (away_team_code or "").strip().upper()
    if not home or not away:
        raise ValidationError("Home and away team codes are required")
    if home == away:
        raise ValidationError("Home and away teams must be different")
    if DRAW in (home, away):
        raise ValidationError(f"{DRAW} is not a team code")
    return home, away


def create_fixture(round_id, match_number, home_team_code, away_team_code, kickoff_at=None):
    round_obj = _get(Round, round_id, "Round")
    home, away = _check_teams(home_team_code, away_team_code)
    fixture = Fixture(
        round_id=round_obj.id,
        match_number=match_number,
        home_team_code=home,
        away_team_code=away,
        kickoff_at=kickoff_at,
    )
    db.session.add(fixture)
    db.session.commit()
    logger.info(f"Fixture created: {home} v {away} in round {round_obj.id}")
    invalidate_leaderboards(f"fixture {fixture.id} created")
    return fixture


def update_fixture(fixture_id, **changes):
    """Change fixture details; fixtures with a result are frozen"""
    fixture = _get(Fixture, fixture_id, "Fixture")
    if fixture.has_result:
        raise ValidationError("Fixture has a result and can no longer be changed")

    home, away = _check_teams(
        changes.get("home_team_code") or fixture.home_team_code,
        changes.get("away_team_code") or fixture.away_team_code,
    )
    teams_changed = (home, away) != (fixture.home_team_code, fixture.away_team_code)
    if teams_changed and fixture.picks.count():
        raise ValidationError("Fixture has picks; its teams can no longer be changed")
    fixture.home_team_code = home
    fixture.away_team_code = away
    if changes.get("match_number") is not None:
        fixture.match_number = changes["match_number"]
    if changes.get("round_id") is not None:
        fixture.round_id = _get(Round, changes["round_id"], "Round").id
    if "kickoff_at" in changes:
        fixture.kickoff_at = changes["kickoff_at"]

    db.session.commit()
    logger.info(f"Fixture updated: {fixture.id}")
    invalidate_leaderboards(f"fixture {fixture.id} updated")
    return fixture


def delete_fixture(fixture_id):
    fixture = _get(Fixture, fixture_id, "Fixture")
    if fixture.has_result:
        raise ValidationError("Fixture has a result and cannot be deleted")
    db.session.delete(fixture)
    db.session.commit()
    logger.info(f"Fixture deleted: {fixture_id}")
    invalidate_leaderboards(f"fixture {fixture_id} deleted")


# Results


def set_result(fixture_id, winning_team, margin_band=None):
    """Create or replace the result of a fixture"""
    fixture = _get(Fixture, fixture_id, "Fixture")
    winning_team = (winning_team or "").strip().upper()
    if not fixture.is_valid_pick_team(winning_team):
        raise ValidationError(
            f"Winning team must be {fixture.home_team_code}, {fixture.away_team_code} or {DRAW}"
        )

    if winning_team == DRAW:
        margin_band = None
    elif margin_band not in MARGIN_BANDS:
        raise ValidationError(f"Margin band must be one of: {', '.join(MARGIN_BANDS)}")

    result = fixture.result
    if result is None:
        result = Result(fixture_id=fixture.id)
        db.session.add(result)
    result.winning_team = winning_team
    result.margin_band = margin_band

    db.session.commit()
    logger.info(f"Result set for fixture {fixture.id}: {winning_team} {margin_band or ''}")
    invalidate_leaderboards(f"result for fixture {fixture.id}")
    return result


def clear_result(fixture_id):
    fixture = _get(Fixture, fixture_id, "Fixture")
    if fixture.result is None:
        raise NotFoundError("Result not found")
    db.session.delete(fixture.result)
    db.session.commit()
    logger.info(f"Result cleared for fixture {fixture.id}")
    invalidate_leaderboards(f"result cleared for fixture {fixture.id}")


# Odds


def set_odds(fixture_id, min_odds=1.01, **values):
    """Upsert all five outcome prices; the as-at stamp moves on every write"""
    fixture = _get(Fixture, fixture_id, "Fixture")

    for field in ODDS_FIELDS:
        value = values.get(field)
        if value is None:
            raise ValidationError(f"{field} is required")
        if value < min_odds:
            raise ValidationError(f"{field} must be at least {min_odds}")

    odds = fixture.odds
    if odds is None:
        odds = MatchOdds(fixture_id=fixture.id)
        db.session.add(odds)
    for field in ODDS_FIELDS:
        setattr(odds, field, float(values[field]))
    odds.odds_as_at = datetime.now(timezone.utc)

    db.session.commit()
    logger.info(f"Odds set for fixture {fixture.id}")
    invalidate_leaderboards(f"odds for fixture {fixture.id}")
    return odds


def list_odds(round_id=None):
    query = MatchOdds.query.join(Fixture, Fixture.id == MatchOdds.fixture_id)
    if round_id is not None:
        query = query.filter(Fixture.round_id == round_id)
    return query.order_by(Fixture.round_id, Fixture.match_number).all()
