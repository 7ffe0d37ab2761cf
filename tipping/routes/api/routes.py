import logging

from flask import jsonify, request
from flask_login import current_user

from tipping import db, get_real_ip, limiter
from tipping.errors import NotFoundError, ValidationError
from tipping.forms.base import bind_json
from tipping.forms.picks import PickForm
from tipping.models import Fixture, PickEvent, Round, Team
from tipping.models.participant import CATEGORIES
from tipping.routes.api import bp
from tipping.services import (
    analytics_service,
    leaderboard_service,
    paper_bet_service,
    pick_service,
)
from tipping.services.auth_service import current_participant, login_required_json
from tipping.utils.cache_utils import cached_payload

logger = logging.getLogger(__name__)


def _participant_competition_id():
    participant = current_participant()
    return participant.competition_id


@bp.route("/teams")
def teams():
    return jsonify([team.to_dict() for team in Team.get_all()])


@bp.route("/rounds")
@login_required_json
def rounds():
    """Rounds of the caller's competition"""
    competition_id = _participant_competition_id()
    query = Round.query.filter_by(competition_id=competition_id)
    season = request.args.get("season", type=int)
    if season is not None:
        query = query.filter_by(season=season)
    return jsonify(
        [r.to_dict() for r in query.order_by(Round.season, Round.round_number).all()]
    )


@bp.route("/rounds/<int:round_id>/fixtures")
@login_required_json
def round_fixtures(round_id):
    round_obj = pick_service.get_round(round_id)
    if round_obj.competition_id != _participant_competition_id():
        raise NotFoundError("Round not found")
    return jsonify([f.to_dict(include_picks_count=False) for f in round_obj.get_fixtures()])


@bp.route("/picks", methods=["GET"])
@login_required_json
def get_picks():
    """The caller's picks, with points for scored fixtures"""
    participant = current_participant()
    round_id = request.args.get("round_id", type=int)
    picks = pick_service.participant_picks(participant, round_id=round_id)
    return jsonify([pick.to_dict(include_score=True) for pick in picks])


@bp.route("/picks", methods=["POST"])
@login_required_json
def save_pick():
    """
    Save one pick, or several with {"picks": [...]}.

    A batch reports per-item failures instead of failing the whole request.
    """
    participant = current_participant()
    payload = request.get_json(silent=True) or {}

    if isinstance(payload.get("picks"), list):
        items = []
        for raw in payload["picks"]:
            if not isinstance(raw, dict):
                raise ValidationError("Each pick must be an object")
            form = bind_json(PickForm, raw)
            items.append(
                {
                    "fixture_id": form.fixture_id.data,
                    "picked_team": form.picked_team.data,
                    "margin": form.margin.data,
                    "expected_version": form.expected_version.data,
                }
            )
        saved, errors = pick_service.save_picks(participant, items, actor=current_user)
        return jsonify({"saved": [pick.to_dict() for pick in saved], "errors": errors})

    form = bind_json(PickForm, payload)
    fixture = pick_service.get_fixture(form.fixture_id.data)
    pick = pick_service.save_pick(
        participant,
        fixture,
        form.picked_team.data,
        form.margin.data,
        expected_version=form.expected_version.data,
        actor=current_user,
    )
    return jsonify(pick.to_dict())


@bp.route("/pick-events")
@login_required_json
def pick_events():
    participant = current_participant()
    limit = min(request.args.get("limit", 100, type=int), 500)
    events = (
        PickEvent.query.filter_by(participant_id=participant.id)
        .order_by(PickEvent.created_at.desc(), PickEvent.id.desc())
        .limit(limit)
        .all()
    )
    return jsonify([event.to_dict() for event in events])


@bp.route("/pick-scores")
@login_required_json
def pick_scores():
    participant = current_participant()
    round_id = request.args.get("round_id", type=int)
    return jsonify(leaderboard_service.pick_scores(participant, round_id=round_id))


@bp.route("/paper-bets")
@login_required_json
def paper_bets():
    participant = current_participant()
    round_id = request.args.get("round_id", type=int)
    return jsonify(paper_bet_service.participant_bets(participant, round_id=round_id))


@bp.route("/paper-bets/sync", methods=["POST"])
@login_required_json
def sync_own_paper_bets():
    participant = current_participant()
    round_id = request.args.get("round_id", type=int)
    report = paper_bet_service.sync_paper_bets(participant, round_id=round_id)
    return jsonify(report._asdict())


@cached_payload(timeout=300, key_prefix="leaderboard")
def _leaderboard_payload(scope, league_id, value=None):
    if scope == "round":
        return leaderboard_service.round_leaderboard(value, league_id=league_id)
    if scope == "category":
        return leaderboard_service.category_leaderboard(value, league_id=league_id)
    return leaderboard_service.overall_leaderboard(league_id=league_id)


@bp.route("/leaderboard")
@login_required_json
def leaderboard_overall():
    league_id = current_participant().league_id
    return jsonify(_leaderboard_payload("overall", league_id))


@bp.route("/leaderboard/round/<int:round_id>")
@login_required_json
def leaderboard_round(round_id):
    pick_service.get_round(round_id)
    league_id = current_participant().league_id
    return jsonify(_leaderboard_payload("round", league_id, round_id))


@bp.route("/leaderboard/category/<category>")
@login_required_json
def leaderboard_category(category):
    if category not in CATEGORIES:
        raise NotFoundError("Unknown category")
    league_id = current_participant().league_id
    return jsonify(_leaderboard_payload("category", league_id, category))


@bp.route("/paper-punter")
@login_required_json
def paper_punter():
    round_id = request.args.get("round_id", type=int)
    if round_id is None:
        raise ValidationError("round_id is required")
    pick_service.get_round(round_id)
    return jsonify({"data": paper_bet_service.paper_punter_summary(round_id)})


@bp.route("/analytics", methods=["POST"])
@limiter.limit("60 per minute")
def analytics():
    payload = request.get_json(silent=True) or {}
    participant = current_user.participant if current_user.is_authenticated else None

    analytics_service.record_event(
        payload.get("event_name"),
        participant=participant,
        metadata=payload.get("metadata"),
        user_agent=request.headers.get("User-Agent"),
        ip=get_real_ip(),
    )
    return jsonify({"success": True}), 201


@bp.route("/fixtures/<int:fixture_id>")
@login_required_json
def fixture_detail(fixture_id):
    fixture = db.session.get(Fixture, fixture_id)
    if fixture is None or fixture.competition_id != _participant_competition_id():
        raise NotFoundError("Fixture not found")
    data = fixture.to_dict(include_picks_count=fixture.is_locked())
    data["odds"] = fixture.odds.to_dict() if fixture.odds else None
    return jsonify(data)
