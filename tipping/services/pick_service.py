"""
Pick submission, admin overrides and round completion status
"""

import logging
from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm.exc import StaleDataError

from tipping import db
from tipping.errors import (
    AuthorizationError,
    ConflictError,
    FixtureLockedError,
    NotFoundError,
    ValidationError,
)
from tipping.models import (
    Fixture,
    League,
    Participant,
    ParticipantContact,
    Pick,
    PickEvent,
    Round,
)
from tipping.services import paper_bet_service
from tipping.utils.cache_utils import invalidate_leaderboards
from tipping.utils.scoring import DRAW, ENCODED_MARGINS, score_result
from tipping.utils.timezone_utils import as_utc

logger = logging.getLogger(__name__)


def get_fixture(fixture_id):
    fixture = db.session.get(Fixture, fixture_id)
    if fixture is None:
        raise NotFoundError("Fixture not found")
    return fixture


def normalise_margin(picked_team, margin):
    """DRAW picks carry margin 0; team picks must encode a band (1 or 13)"""
    if picked_team == DRAW:
        return 0
    if isinstance(margin, bool) or margin not in ENCODED_MARGINS:
        raise ValidationError("Margin must be 1 (1-12) or 13 (13+) for a team pick")
    return margin


def save_pick(
    participant,
    fixture,
    picked_team,
    margin,
    expected_version=None,
    actor=None,
    override=False,
    now=None,
):
    """
    Create or update a participant's pick for a fixture.

    Args:
        participant: Participant making the pick
        fixture: Fixture being picked
        picked_team: home code, away code or DRAW
        margin: 1 or 13 for a team pick, ignored for DRAW
        expected_version: version the caller last saw; 0 means "no pick yet"
        actor: User recorded on the audit trail
        override: admin override, skips the kickoff lock
        now: current time, for tests

    Raises:
        ValidationError, AuthorizationError, FixtureLockedError, ConflictError
    """
    picked_team = (picked_team or "").strip().upper()
    if not fixture.is_valid_pick_team(picked_team):
        raise ValidationError(
            f"Picked team must be {fixture.home_team_code}, {fixture.away_team_code} or {DRAW}"
        )
    margin = normalise_margin(picked_team, margin)

    if fixture.competition_id != participant.competition_id:
        raise AuthorizationError("Fixture is not part of your league's competition")

    if not override and fixture.is_locked(now):
        raise FixtureLockedError("Fixture is locked")

    pick = Pick.query.filter_by(
        participant_id=participant.id, fixture_id=fixture.id
    ).first()

    if expected_version is not None:
        current_version = pick.version if pick else 0
        if current_version != expected_version:
            raise ConflictError(
                "Pick was changed by another request",
                payload={"current_version": current_version},
            )

    created = pick is None
    if created:
        pick = Pick(
            participant_id=participant.id,
            fixture_id=fixture.id,
            league_id=participant.league_id,
        )
        db.session.add(pick)

    pick.picked_team = picked_team
    pick.margin = margin
    pick.updated_at = datetime.now(timezone.utc)

    try:
        db.session.flush()
        if actor is not None:
            PickEvent.log(actor, pick, action="override" if override else "save")
        if override:
            paper_bet_service.sync_pick_bet(pick)
        db.session.commit()
    except StaleDataError:
        db.session.rollback()
        raise ConflictError("Pick was changed by another request")
    except IntegrityError:
        # Concurrent first write for the same participant and fixture
        db.session.rollback()
        raise ConflictError("Pick was changed by another request")

    logger.info(
        f"Pick {'created' if created else 'updated'}: participant {participant.id} "
        f"fixture {fixture.id} {picked_team}/{margin}"
        + (" (override)" if override else "")
    )
    invalidate_leaderboards(f"pick on fixture {fixture.id}")
    return pick


def save_picks(participant, items, actor=None, now=None):
    """
    Save several picks in one request.

    Each item is a dict with fixture_id, picked_team, margin and optionally
    expected_version. Returns (saved, errors); one bad item does not stop
    the rest.
    """
    saved = []
    errors = []
    for item in items:
        try:
            fixture = get_fixture(item.get("fixture_id"))
            saved.append(
                save_pick(
                    participant,
                    fixture,
                    item.get("picked_team"),
                    item.get("margin"),
                    expected_version=item.get("expected_version"),
                    actor=actor,
                    now=now,
                )
            )
        except (ValidationError, AuthorizationError, NotFoundError, ConflictError) as e:
            errors.append(
                {"fixture_id": item.get("fixture_id"), "error": e.message, "status": e.status_code}
            )
    return saved, errors


def delete_pick(participant, fixture, actor=None):
    """Admin removal of a pick; its paper bet goes with it"""
    pick = Pick.query.filter_by(
        participant_id=participant.id, fixture_id=fixture.id
    ).first()
    if pick is None:
        raise NotFoundError("Pick not found")

    if actor is not None:
        PickEvent.log(actor, pick, action="delete")
    paper_bet_service.delete_pick_bet(participant.id, fixture.id)
    db.session.delete(pick)
    db.session.commit()

    logger.info(f"Pick deleted: participant {participant.id} fixture {fixture.id}")
    invalidate_leaderboards(f"pick deleted on fixture {fixture.id}")


def participant_picks(participant, round_id=None):
    query = Pick.query.filter(Pick.participant_id == participant.id).join(Fixture)
    if round_id is not None:
        query = query.filter(Fixture.round_id == round_id)
    return query.order_by(Fixture.round_id, Fixture.match_number).all()


def round_pick_status(round_obj, now=None):
    """
    How far each participant is through the open fixtures of a round.

    A fixture is open while it has no kickoff or kickoff is still ahead.
    """
    now = now or datetime.now(timezone.utc)
    fixtures = round_obj.get_fixtures()
    open_ids = {
        f.id for f in fixtures if f.kickoff_at is None or as_utc(f.kickoff_at) > now
    }
    fixture_ids = [f.id for f in fixtures]

    participants = (
        Participant.query.join(League, League.id == Participant.league_id)
        .filter(League.competition_id == round_obj.competition_id)
        .order_by(Participant.team_name)
        .all()
    )

    picked = {}
    if fixture_ids:
        for participant_id, fixture_id in db.session.query(
            Pick.participant_id, Pick.fixture_id
        ).filter(Pick.fixture_id.in_(fixture_ids)):
            picked.setdefault(participant_id, set()).add(fixture_id)

    rows = []
    for participant in participants:
        mine = picked.get(participant.id, set())
        picks_open = len(mine & open_ids)
        missing_open = len(open_ids) - picks_open
        rows.append(
            {
                "participant_id": participant.id,
                "team_name": participant.team_name,
                "business_name": participant.business_name,
                "category": participant.category,
                "picks_total": len(mine),
                "picks_open": picks_open,
                "missing_open": missing_open,
                "is_complete_open": bool(open_ids) and missing_open == 0,
                "emails": [
                    c.email
                    for c in participant.contacts.order_by(ParticipantContact.email)
                ],
            }
        )

    complete = sum(1 for r in rows if r["is_complete_open"])
    return {
        "round": round_obj.to_dict(),
        "totals": {
            "total_games": len(fixtures),
            "open_games": len(open_ids),
            "participant_count": len(rows),
            "complete_open_count": complete,
            "incomplete_open_count": len(rows) - complete,
        },
        "rows": rows,
    }


def round_picks_view(round_obj, league_id=None):
    """Every participant's picks for a round, with points where scored"""
    fixtures = round_obj.get_fixtures()
    fixture_ids = [f.id for f in fixtures]

    query = Participant.query.join(League, League.id == Participant.league_id).filter(
        League.competition_id == round_obj.competition_id
    )
    if league_id is not None:
        query = query.filter(Participant.league_id == league_id)
    participants = query.order_by(Participant.team_name).all()

    picks_by_participant = {}
    if fixture_ids:
        for pick in Pick.query.filter(Pick.fixture_id.in_(fixture_ids)).all():
            picks_by_participant.setdefault(pick.participant_id, {})[pick.fixture_id] = pick

    rows = []
    for participant in participants:
        picks = picks_by_participant.get(participant.id, {})
        entries = {}
        total = 0
        for fixture_id, pick in picks.items():
            score = score_result(pick, pick.result)
            total += score.total_points
            entries[str(fixture_id)] = {
                "picked_team": pick.picked_team,
                "margin": pick.margin,
                "total_points": score.total_points,
            }
        rows.append(
            {
                "participant_id": participant.id,
                "team_name": participant.team_name,
                "picks": entries,
                "round_points": total,
            }
        )

    return {
        "round": round_obj.to_dict(),
        "fixtures": [f.to_dict() for f in fixtures],
        "rows": rows,
    }


def get_round(round_id):
    round_obj = db.session.get(Round, round_id)
    if round_obj is None:
        raise NotFoundError("Round not found")
    return round_obj
