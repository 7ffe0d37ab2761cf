"""
Leaderboards

Every total here is summed from calculate_pick_score(), so the tables always
agree with the per-pick breakdown a participant sees.
"""

import logging

from tipping import db
from tipping.models import Fixture, Participant, Pick, Result, Round
from tipping.utils.scoring import calculate_pick_score, score_result

logger = logging.getLogger(__name__)


def _scored_picks(round_id=None, league_id=None, category=None, competition_id=None):
    """(pick, result, participant) for every pick whose fixture has a result"""
    query = (
        db.session.query(Pick, Result, Participant)
        .join(Result, Result.fixture_id == Pick.fixture_id)
        .join(Participant, Participant.id == Pick.participant_id)
        .join(Fixture, Fixture.id == Pick.fixture_id)
    )
    if round_id is not None:
        query = query.filter(Fixture.round_id == round_id)
    if league_id is not None:
        query = query.filter(Participant.league_id == league_id)
    if category is not None:
        query = query.filter(Participant.category == category)
    if competition_id is not None:
        query = query.join(Round, Round.id == Fixture.round_id).filter(
            Round.competition_id == competition_id
        )
    return query.all()


def _eligible_participants(league_id=None, category=None):
    query = Participant.query
    if league_id is not None:
        query = query.filter(Participant.league_id == league_id)
    if category is not None:
        query = query.filter(Participant.category == category)
    return [p for p in query.all() if not p.is_admin_team]


def rank_rows(rows, key="total_points"):
    """
    Sort rows by points (desc) then team name and assign competition ranks.

    Equal totals share a rank and the next rank skips: 1, 1, 3.
    """
    rows.sort(key=lambda r: (-r[key], (r["team_name"] or "").lower()))
    previous = None
    rank = 0
    for position, row in enumerate(rows, start=1):
        if row[key] != previous:
            rank = position
            previous = row[key]
        row["rank"] = rank
    return rows


def build_leaderboard(round_id=None, league_id=None, category=None, competition_id=None):
    """
    Points table for the given scope.

    Participants with no scored picks still appear with zero points. Admin
    test teams are left out.
    """
    rows = {}
    for participant in _eligible_participants(league_id, category):
        rows[participant.id] = {
            "participant_id": participant.id,
            "team_name": participant.team_name,
            "business_name": participant.business_name,
            "category": participant.category,
            "league_id": participant.league_id,
            "total_points": 0,
            "picks_scored": 0,
        }

    for pick, result, participant in _scored_picks(
        round_id, league_id, category, competition_id
    ):
        row = rows.get(participant.id)
        if row is None:
            continue
        row["total_points"] += calculate_pick_score(pick, result)
        row["picks_scored"] += 1

    return rank_rows(list(rows.values()))


def overall_leaderboard(league_id=None):
    return build_leaderboard(league_id=league_id)


def round_leaderboard(round_id, league_id=None):
    return build_leaderboard(round_id=round_id, league_id=league_id)


def category_leaderboard(category, league_id=None):
    return build_leaderboard(league_id=league_id, category=category)


def category_summary(league_id=None):
    """One leaderboard per participant category"""
    categories = sorted(
        {p.category for p in _eligible_participants(league_id) if p.category}
    )
    return {
        category: category_leaderboard(category, league_id=league_id)
        for category in categories
    }


def pick_scores(participant, round_id=None):
    """Per-pick breakdown for one participant"""
    query = Pick.query.filter(Pick.participant_id == participant.id).join(Fixture)
    if round_id is not None:
        query = query.filter(Fixture.round_id == round_id)

    breakdown = []
    for pick in query.order_by(Fixture.round_id, Fixture.match_number).all():
        score = score_result(pick, pick.result)
        breakdown.append(
            {
                "fixture_id": pick.fixture_id,
                "round_id": pick.fixture.round_id,
                "picked_team": pick.picked_team,
                "margin": pick.margin,
                "winning_team": pick.result.winning_team if pick.result else None,
                "margin_band": pick.result.margin_band if pick.result else None,
                "winner_points": score.winner_points,
                "margin_points": score.margin_points,
                "total_points": score.total_points,
            }
        )
    return breakdown
