"""
Paper bet synchronisation and reporting

Bets are derived from picks: each conforming pick on a fixture with a
complete odds row becomes one PaperBet at the default stake. Re-running a
sync updates bets in place, so it is safe to repeat.
"""

import logging
from collections import namedtuple

from flask import current_app

from tipping import db
from tipping.models import Fixture, MatchOdds, PaperBet, Participant, Pick, Result
from tipping.utils.paper_bets import (
    DEFAULT_STAKE,
    odds_for_outcome,
    pick_outcome,
    result_outcome,
    settle_bet,
)

logger = logging.getLogger(__name__)

SyncReport = namedtuple("SyncReport", ["processed", "upserted", "skipped_fixture_ids"])


def _stake():
    return float(current_app.config.get("PAPER_BET_STAKE") or DEFAULT_STAKE)


def _min_odds():
    return float(current_app.config.get("MIN_ODDS") or 1.01)


def _bet_terms(pick, fixture, min_odds):
    """(outcome, price) for a pick, or None when no bet can be placed"""
    outcome = pick_outcome(
        pick.picked_team, pick.margin, fixture.home_team_code, fixture.away_team_code
    )
    if outcome is None:
        return None

    odds = fixture.odds
    if odds is None or not odds.is_complete(min_odds):
        return None

    return outcome, odds_for_outcome(odds, outcome)


def _upsert_bet(participant, fixture, outcome, price, stake):
    bet = PaperBet.query.filter_by(
        participant_id=participant.id, fixture_id=fixture.id
    ).first()
    if bet is None:
        bet = PaperBet(participant_id=participant.id, fixture_id=fixture.id)
        db.session.add(bet)
    bet.league_id = participant.league_id
    bet.outcome = outcome
    bet.odds = price
    bet.stake = stake
    return bet


def sync_paper_bets(participant, round_id=None, commit=True):
    """
    Create or refresh paper bets from a participant's picks.

    Args:
        participant: Participant whose picks are synced
        round_id: restrict the sync to one round
        commit: commit the session when done

    Returns:
        SyncReport
    """
    query = Pick.query.filter(Pick.participant_id == participant.id).join(Fixture)
    if round_id is not None:
        query = query.filter(Fixture.round_id == round_id)

    stake = _stake()
    min_odds = _min_odds()
    processed = 0
    upserted = 0
    skipped = []

    for pick in query.order_by(Fixture.id).all():
        processed += 1
        terms = _bet_terms(pick, pick.fixture, min_odds)
        if terms is None:
            skipped.append(pick.fixture_id)
            continue
        outcome, price = terms
        _upsert_bet(participant, pick.fixture, outcome, price, stake)
        upserted += 1

    if commit:
        db.session.commit()

    logger.info(
        f"Paper bets synced for participant {participant.id}: "
        f"{processed} picks, {upserted} bets, {len(skipped)} skipped"
    )
    return SyncReport(processed, upserted, skipped)


def sync_pick_bet(pick):
    """Refresh the single bet behind a pick; drops it if the pick no longer qualifies"""
    terms = _bet_terms(pick, pick.fixture, _min_odds())
    if terms is None:
        PaperBet.query.filter_by(
            participant_id=pick.participant_id, fixture_id=pick.fixture_id
        ).delete()
        return None
    outcome, price = terms
    return _upsert_bet(pick.participant, pick.fixture, outcome, price, _stake())


def delete_pick_bet(participant_id, fixture_id):
    return PaperBet.query.filter_by(
        participant_id=participant_id, fixture_id=fixture_id
    ).delete()


def backfill_paper_bets(round_id=None):
    """Run the sync for every participant; one commit at the end"""
    totals = {"participants": 0, "processed": 0, "upserted": 0, "skipped": 0}

    for participant in Participant.query.order_by(Participant.id).all():
        report = sync_paper_bets(participant, round_id=round_id, commit=False)
        totals["participants"] += 1
        totals["processed"] += report.processed
        totals["upserted"] += report.upserted
        totals["skipped"] += len(report.skipped_fixture_ids)

    db.session.commit()
    logger.info(f"Paper bet backfill complete: {totals}")
    return totals


def participant_bets(participant, round_id=None):
    """A participant's bets with their settlement"""
    query = PaperBet.query.filter(PaperBet.participant_id == participant.id).join(Fixture)
    if round_id is not None:
        query = query.filter(Fixture.round_id == round_id)
    return [bet.to_dict(include_settlement=True) for bet in query.order_by(Fixture.id)]


def paper_leaderboard(round_id=None, league_id=None):
    """
    Profit table over settled bets.

    Ordered by profit, then roi, then number of bets (all descending), then
    team name.
    """
    query = (
        db.session.query(PaperBet, Participant)
        .join(Participant, PaperBet.participant_id == Participant.id)
        .join(Fixture, PaperBet.fixture_id == Fixture.id)
        .join(Result, Result.fixture_id == Fixture.id)
    )
    if round_id is not None:
        query = query.filter(Fixture.round_id == round_id)
    if league_id is not None:
        query = query.filter(PaperBet.league_id == league_id)

    rows = {}
    for bet, participant in query.all():
        if participant.is_admin_team:
            continue
        settlement = bet.settle()
        row = rows.setdefault(
            participant.id,
            {
                "participant_id": participant.id,
                "team_name": participant.team_name,
                "bets_count": 0,
                "wins_count": 0,
                "total_staked": 0.0,
                "total_return": 0.0,
            },
        )
        row["bets_count"] += 1
        row["wins_count"] += 1 if settlement.won else 0
        row["total_staked"] += settlement.stake
        row["total_return"] += settlement.return_amount

    table = []
    for row in rows.values():
        row["total_staked"] = round(row["total_staked"], 2)
        row["total_return"] = round(row["total_return"], 2)
        row["profit"] = round(row["total_return"] - row["total_staked"], 2)
        row["roi"] = (
            round(row["profit"] / row["total_staked"], 4) if row["total_staked"] else 0.0
        )
        table.append(row)

    table.sort(
        key=lambda r: (-r["profit"], -r["roi"], -r["bets_count"], r["team_name"] or "")
    )
    return table


def paper_punter_summary(round_id):
    """
    Round summary of what every pick would have returned at the posted odds.

    Only fixtures with both odds and a result count. A pick that maps to no
    outcome is a losing stake.
    """
    fixtures = (
        Fixture.query.filter(Fixture.round_id == round_id)
        .join(MatchOdds, MatchOdds.fixture_id == Fixture.id)
        .join(Result, Result.fixture_id == Fixture.id)
        .all()
    )
    if not fixtures:
        return []

    stake = _stake()
    by_fixture = {fixture.id: fixture for fixture in fixtures}
    picks = Pick.query.filter(Pick.fixture_id.in_(by_fixture.keys())).all()

    rows = {}
    for pick in picks:
        fixture = by_fixture[pick.fixture_id]
        participant = pick.participant
        row = rows.setdefault(
            participant.id,
            {
                "participant_id": participant.id,
                "team_name": participant.team_name or "Unknown",
                "staked": 0.0,
                "return": 0.0,
                "biggest_hit": 0.0,
                "prophet_score": 0.0,
            },
        )

        outcome = pick_outcome(
            pick.picked_team, pick.margin, fixture.home_team_code, fixture.away_team_code
        )
        settled_outcome = result_outcome(
            fixture.result.winning_team,
            fixture.result.margin_band,
            fixture.home_team_code,
            fixture.away_team_code,
        )
        price = odds_for_outcome(fixture.odds, outcome) if outcome else None
        settlement = settle_bet(
            outcome, price or 0.0, settled_outcome, stake=stake, is_settled=True
        )

        row["staked"] += stake
        row["return"] += settlement.return_amount
        if settlement.won:
            row["biggest_hit"] = max(row["biggest_hit"], round(stake * (price - 1), 2))
            row["prophet_score"] += price - 1

    summary = []
    for row in rows.values():
        row["staked"] = round(row["staked"], 2)
        row["return"] = round(row["return"], 2)
        row["profit"] = round(row["return"] - row["staked"], 2)
        row["roi"] = round(row["profit"] / row["staked"], 4) if row["staked"] else 0.0
        row["prophet_score"] = round(row["prophet_score"], 4)
        summary.append(row)

    summary.sort(key=lambda r: (-r["profit"], -r["prophet_score"]))
    return summary
