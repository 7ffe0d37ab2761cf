#!/usr/bin/env python3
"""
Tipping Management CLI

Command-line administration for the tipping competition: competition
structure, fixtures, results, odds, paper bets and leaderboards.
"""

import logging

import click
from flask.cli import with_appcontext
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from tipping import create_app, db
from tipping.errors import TippingError
from tipping.models import (
    Competition,
    Fixture,
    League,
    PaperBet,
    Participant,
    Pick,
    Result,
    Round,
    Team,
)
from tipping.services import admin_service, leaderboard_service, paper_bet_service
from tipping.utils.timezone_utils import format_kickoff, parse_timestamp

logger = logging.getLogger(__name__)


def _fail(message, error=None):
    db.session.rollback()
    click.echo(f"❌ {message}")
    if error is not None:
        logger.error(f"{message}: {error}")


@click.group()
def cli():
    """Tipping Management CLI"""
    pass


# Database Commands
@cli.group()
def db_cmd():
    """Database commands"""
    pass


@db_cmd.command("init")
@with_appcontext
def init_db():
    """Initialize database tables"""
    try:
        db.create_all()
        click.echo("✅ Database tables created successfully!")
    except SQLAlchemyError as e:
        _fail("Error initializing database", e)


# Competition Commands
@cli.group()
def competition():
    """Competition management commands"""
    pass


@competition.command("create")
@click.argument("code")
@click.argument("name")
@click.option("--sport", default="rugby", help="Sport name")
@click.option("--season", type=int, help="Season year")
@with_appcontext
def create_competition(code, name, sport, season):
    """Create a competition"""
    try:
        comp = admin_service.create_competition(code, name, sport=sport, season=season)
        click.echo(f"✅ Created competition {comp.code} (id {comp.id})")
    except TippingError as e:
        _fail(e.message)
    except SQLAlchemyError as e:
        _fail("Database error creating competition", e)


@cli.group()
def league():
    """League management commands"""
    pass


@league.command("create")
@click.argument("code")
@click.argument("name")
@click.argument("competition_code")
@with_appcontext
def create_league(code, name, competition_code):
    """Create a league for a competition"""
    comp = Competition.get_by_code(competition_code)
    if comp is None:
        _fail(f"Competition {competition_code} not found!")
        return
    try:
        created = admin_service.create_league(code, name, comp.id)
        click.echo(f"✅ Created league {created.code} in {comp.code}")
    except TippingError as e:
        _fail(e.message)
    except SQLAlchemyError as e:
        _fail("Database error creating league", e)


@cli.group()
def team():
    """Team management commands"""
    pass


@team.command("add")
@click.argument("code")
@click.argument("name")
@click.option("--sort-order", type=int, default=0, help="Display order")
@click.option("--logo", "logo_path", help="Logo path")
@with_appcontext
def add_team(code, name, sort_order, logo_path):
    """Add a team"""
    try:
        db.session.add(
            Team(code=code.upper(), name=name, sort_order=sort_order, logo_path=logo_path)
        )
        db.session.commit()
        click.echo(f"✅ Added team {code.upper()}")
    except IntegrityError as e:
        _fail(f"Team {code.upper()} already exists!", e)
    except SQLAlchemyError as e:
        _fail("Database error adding team", e)


# Round and Fixture Commands
@cli.group("round")
def round_group():
    """Round management commands"""
    pass


@round_group.command("create")
@click.argument("competition_code")
@click.argument("season", type=int)
@click.argument("round_number", type=int)
@with_appcontext
def create_round(competition_code, season, round_number):
    """Create a round"""
    comp = Competition.get_by_code(competition_code)
    if comp is None:
        _fail(f"Competition {competition_code} not found!")
        return
    try:
        round_obj = admin_service.create_round(comp.id, season, round_number)
        click.echo(f"✅ Created round {season} R{round_number} (id {round_obj.id})")
    except TippingError as e:
        _fail(e.message)
    except SQLAlchemyError as e:
        _fail("Database error creating round", e)


@cli.group()
def fixture():
    """Fixture management commands"""
    pass


@fixture.command("add")
@click.argument("round_id", type=int)
@click.argument("match_number", type=int)
@click.argument("home")
@click.argument("away")
@click.option("--kickoff", help="Kickoff, ISO-8601; local time if no offset")
@with_appcontext
def add_fixture(round_id, match_number, home, away, kickoff):
    """Add a fixture to a round"""
    try:
        kickoff_at = parse_timestamp(kickoff)
    except ValueError:
        _fail(f"Invalid kickoff: {kickoff}")
        return
    try:
        created = admin_service.create_fixture(
            round_id, match_number, home, away, kickoff_at=kickoff_at
        )
        click.echo(
            f"✅ Added {created.home_team_code} v {created.away_team_code} "
            f"(id {created.id}, kickoff {format_kickoff(created.kickoff_at)})"
        )
    except TippingError as e:
        _fail(e.message)
    except SQLAlchemyError as e:
        _fail("Database error adding fixture", e)


@cli.group()
def result():
    """Result commands"""
    pass


@result.command("set")
@click.argument("fixture_id", type=int)
@click.argument("winning_team")
@click.option("--margin", "margin_band", type=click.Choice(["1-12", "13+"]))
@with_appcontext
def set_result(fixture_id, winning_team, margin_band):
    """Record a fixture result"""
    try:
        saved = admin_service.set_result(fixture_id, winning_team, margin_band)
        click.echo(f"✅ Result: {saved.winning_team} {saved.margin_band or ''}".rstrip())
    except TippingError as e:
        _fail(e.message)
    except SQLAlchemyError as e:
        _fail("Database error saving result", e)


@cli.group()
def odds():
    """Odds commands"""
    pass


@odds.command("set")
@click.argument("fixture_id", type=int)
@click.option("--draw", "draw_odds", type=float, required=True)
@click.option("--home-1-12", "home_1_12_odds", type=float, required=True)
@click.option("--home-13-plus", "home_13_plus_odds", type=float, required=True)
@click.option("--away-1-12", "away_1_12_odds", type=float, required=True)
@click.option("--away-13-plus", "away_13_plus_odds", type=float, required=True)
@with_appcontext
def set_odds(fixture_id, **values):
    """Record odds for all five outcomes"""
    try:
        admin_service.set_odds(fixture_id, **values)
        click.echo(f"✅ Odds saved for fixture {fixture_id}")
    except TippingError as e:
        _fail(e.message)
    except SQLAlchemyError as e:
        _fail("Database error saving odds", e)


# Paper Bet Commands
@cli.group()
def paperbets():
    """Paper bet commands"""
    pass


@paperbets.command("sync")
@click.option("--participant", "participant_id", type=int, help="Only this participant")
@click.option("--round", "round_id", type=int, help="Only this round")
@with_appcontext
def sync_paper_bets(participant_id, round_id):
    """Create or refresh paper bets from picks"""
    try:
        if participant_id is not None:
            participant = db.session.get(Participant, participant_id)
            if participant is None:
                _fail(f"Participant {participant_id} not found!")
                return
            report = paper_bet_service.sync_paper_bets(participant, round_id=round_id)
            click.echo(
                f"✅ {report.upserted}/{report.processed} picks synced, "
                f"skipped fixtures: {report.skipped_fixture_ids or 'none'}"
            )
        else:
            totals = paper_bet_service.backfill_paper_bets(round_id=round_id)
            click.echo(
                f"✅ {totals['participants']} participants, {totals['upserted']} bets, "
                f"{totals['skipped']} skipped"
            )
    except SQLAlchemyError as e:
        _fail("Database error syncing paper bets", e)


# Leaderboard Commands
@cli.group()
def leaderboard():
    """Leaderboard commands"""
    pass


@leaderboard.command("show")
@click.option("--round", "round_id", type=int, help="Round leaderboard")
@click.option("--league", "league_code", help="Restrict to one league")
@click.option("--category", help="Restrict to one category")
@click.option("--limit", type=int, default=20, show_default=True)
@with_appcontext
def show_leaderboard(round_id, league_code, category, limit):
    """Print a leaderboard"""
    league_id = None
    if league_code:
        found = League.get_by_code(league_code)
        if found is None:
            _fail(f"League {league_code} not found!")
            return
        league_id = found.id

    rows = leaderboard_service.build_leaderboard(
        round_id=round_id, league_id=league_id, category=category
    )
    if not rows:
        click.echo("No participants found.")
        return

    for row in rows[:limit]:
        click.echo(f"  {row['rank']:>3}. {row['team_name']:<30} {row['total_points']:>5}")


@cli.command()
@with_appcontext
def status():
    """Show application status"""
    click.echo("🏉 Tipping Application Status")
    click.echo("=" * 40)

    try:
        db.session.execute(text("SELECT 1"))
        click.echo("✅ Database: Connected")
    except SQLAlchemyError as e:
        click.echo(f"❌ Database: Error - {str(e)}")
        return

    click.echo(f"🏆 Competitions: {Competition.query.count()}")
    click.echo(f"👥 Participants: {Participant.query.count()}")
    click.echo(f"📅 Rounds: {Round.query.count()}")
    click.echo(f"🏉 Fixtures: {Result.query.count()}/{Fixture.query.count()} with results")
    click.echo(f"✍️  Picks: {Pick.query.count()}")
    click.echo(f"💵 Paper bets: {PaperBet.query.count()}")


if __name__ == "__main__":
    app = create_app()
    with app.app_context():
        cli()
