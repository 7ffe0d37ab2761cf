import logging

from flask import current_app, jsonify, request
from flask_login import current_user

from tipping import db
from tipping.errors import NotFoundError, ValidationError
from tipping.forms.admin import (
    CompetitionForm,
    FixtureForm,
    FixtureUpdateForm,
    LeagueForm,
    OddsForm,
    ResultForm,
    RoundForm,
)
from tipping.forms.auth import ResetPasswordForm
from tipping.forms.base import bind_json
from tipping.forms.picks import OverridePickForm
from tipping.models import Fixture, Participant
from tipping.routes.admin import bp
from tipping.services import (
    account_service,
    admin_service,
    analytics_service,
    contact_service,
    paper_bet_service,
    pick_service,
)
from tipping.services.auth_service import admin_required

logger = logging.getLogger(__name__)


def _flag(name, default):
    """Boolean query parameter: 1/true/yes are true, 0/false/no are false"""
    value = request.args.get(name)
    if value is None or value == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _body_round_id(payload):
    """Optional integer round_id from a JSON body"""
    value = payload.get("round_id")
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError("round_id must be an integer")


def _required_round_id():
    round_id = request.args.get("round_id", type=int)
    if round_id is None:
        raise ValidationError("round_id is required")
    return round_id


# Structure


@bp.route("/structure", methods=["GET"])
@admin_required
def structure():
    return jsonify(admin_service.structure())


@bp.route("/structure", methods=["POST"])
@admin_required
def create_structure():
    """Create a competition ({"type": "competition"}) or a league ({"type": "league"})"""
    payload = request.get_json(silent=True) or {}
    kind = payload.get("type")

    if kind == "competition":
        form = bind_json(CompetitionForm, payload)
        competition = admin_service.create_competition(
            form.code.data, form.name.data, form.sport.data, form.season.data
        )
        return jsonify(competition.to_dict(include_counts=True)), 201

    if kind == "league":
        form = bind_json(LeagueForm, payload)
        league = admin_service.create_league(
            form.code.data, form.name.data, form.competition_id.data
        )
        return jsonify(league.to_dict(include_counts=True)), 201

    raise ValidationError("type must be 'competition' or 'league'")


# Rounds


@bp.route("/rounds", methods=["GET"])
@admin_required
def list_rounds():
    rounds = admin_service.list_rounds(
        competition_id=request.args.get("competition_id", type=int),
        season=request.args.get("season", type=int),
    )
    return jsonify([r.to_dict() for r in rounds])


@bp.route("/rounds", methods=["POST"])
@admin_required
def create_round():
    form = bind_json(RoundForm)
    round_obj = admin_service.create_round(
        form.competition_id.data, form.season.data, form.round_number.data
    )
    return jsonify(round_obj.to_dict()), 201


@bp.route("/rounds/<int:round_id>", methods=["DELETE"])
@admin_required
def delete_round(round_id):
    admin_service.delete_round(round_id)
    return jsonify({"success": True})


# Fixtures


@bp.route("/fixtures", methods=["GET"])
@admin_required
def list_fixtures():
    round_obj = pick_service.get_round(_required_round_id())
    return jsonify([f.to_dict(include_picks_count=True) for f in round_obj.get_fixtures()])


@bp.route("/fixtures", methods=["POST"])
@admin_required
def create_fixture():
    form = bind_json(FixtureForm)
    fixture = admin_service.create_fixture(
        form.round_id.data,
        form.match_number.data,
        form.home_team_code.data,
        form.away_team_code.data,
        kickoff_at=form.kickoff,
    )
    return jsonify(fixture.to_dict()), 201


@bp.route("/fixtures/<int:fixture_id>", methods=["PUT", "PATCH"])
@admin_required
def update_fixture(fixture_id):
    payload = request.get_json(silent=True) or {}
    form = bind_json(FixtureUpdateForm, payload)

    changes = {
        "round_id": form.round_id.data,
        "match_number": form.match_number.data,
        "home_team_code": form.home_team_code.data,
        "away_team_code": form.away_team_code.data,
    }
    if "kickoff_at" in payload:
        changes["kickoff_at"] = form.kickoff

    fixture = admin_service.update_fixture(fixture_id, **changes)
    return jsonify(fixture.to_dict())


@bp.route("/fixtures/<int:fixture_id>", methods=["DELETE"])
@admin_required
def delete_fixture(fixture_id):
    admin_service.delete_fixture(fixture_id)
    return jsonify({"success": True})


# Results


@bp.route("/results", methods=["GET"])
@admin_required
def list_results():
    round_obj = pick_service.get_round(_required_round_id())
    return jsonify(
        [f.result.to_dict() for f in round_obj.get_fixtures() if f.result is not None]
    )


@bp.route("/results", methods=["POST"])
@admin_required
def set_result():
    form = bind_json(ResultForm)
    result = admin_service.set_result(
        form.fixture_id.data, form.winning_team.data, form.margin_band.data or None
    )
    return jsonify(result.to_dict())


@bp.route("/results/<int:fixture_id>", methods=["DELETE"])
@admin_required
def clear_result(fixture_id):
    admin_service.clear_result(fixture_id)
    return jsonify({"success": True})


# Odds


@bp.route("/odds", methods=["GET"])
@admin_required
def list_odds():
    odds = admin_service.list_odds(round_id=request.args.get("round_id", type=int))
    return jsonify([o.to_dict() for o in odds])


@bp.route("/odds", methods=["POST"])
@admin_required
def set_odds():
    form = bind_json(OddsForm)
    odds = admin_service.set_odds(
        form.fixture_id.data,
        min_odds=current_app.config.get("MIN_ODDS", 1.01),
        **form.odds_values(),
    )
    return jsonify(odds.to_dict())


# Participants and contacts


@bp.route("/participants")
@admin_required
def participants():
    return jsonify(account_service.participants_with_contacts())


@bp.route("/emails")
@admin_required
def emails():
    rows = contact_service.email_list(
        only_updates=_flag("only_updates", True),
        include_primary=_flag("include_primary", True),
        include_additional=_flag("include_additional", True),
        category=request.args.get("category") or None,
    )
    return jsonify({"rows": rows, "emails": contact_service.unique_emails(rows)})


@bp.route("/reset-password", methods=["POST"])
@admin_required
def reset_password():
    form = bind_json(ResetPasswordForm)
    account_service.reset_participant_password(
        form.participant_id.data, form.new_password.data
    )
    logger.info(
        f"Admin {current_user.id} reset password for participant {form.participant_id.data}"
    )
    return jsonify({"success": True})


@bp.route("/analytics-summary")
@admin_required
def analytics_summary():
    return jsonify(analytics_service.summary())


# Picks


@bp.route("/picks-view")
@admin_required
def picks_view():
    round_obj = pick_service.get_round(_required_round_id())
    return jsonify(
        pick_service.round_picks_view(
            round_obj, league_id=request.args.get("league_id", type=int)
        )
    )


@bp.route("/round-pick-status")
@admin_required
def round_pick_status():
    round_obj = pick_service.get_round(_required_round_id())
    return jsonify(pick_service.round_pick_status(round_obj))


@bp.route("/override-pick", methods=["POST"])
@admin_required
def override_pick():
    """Set a pick on behalf of a participant, ignoring the kickoff lock"""
    form = bind_json(OverridePickForm)
    participant = db.session.get(Participant, form.participant_id.data)
    if participant is None:
        raise NotFoundError("Participant not found")
    fixture = pick_service.get_fixture(form.fixture_id.data)

    pick = pick_service.save_pick(
        participant,
        fixture,
        form.picked_team.data,
        form.margin.data,
        expected_version=form.expected_version.data,
        actor=current_user,
        override=True,
    )
    return jsonify(pick.to_dict(include_score=True))


@bp.route("/override-pick", methods=["DELETE"])
@admin_required
def delete_override_pick():
    participant_id = request.args.get("participant_id", type=int)
    fixture_id = request.args.get("fixture_id", type=int)
    if participant_id is None or fixture_id is None:
        raise ValidationError("participant_id and fixture_id are required")

    participant = db.session.get(Participant, participant_id)
    if participant is None:
        raise NotFoundError("Participant not found")
    fixture = db.session.get(Fixture, fixture_id)
    if fixture is None:
        raise NotFoundError("Fixture not found")

    pick_service.delete_pick(participant, fixture, actor=current_user)
    return jsonify({"success": True})


# Paper bets


@bp.route("/sync-paper-bets", methods=["POST"])
@admin_required
def sync_paper_bets():
    payload = request.get_json(silent=True) or {}
    try:
        participant_id = int(payload["participant_id"])
    except (KeyError, TypeError, ValueError):
        raise ValidationError("participant_id is required")
    participant = db.session.get(Participant, participant_id)
    if participant is None:
        raise NotFoundError("Participant not found")

    report = paper_bet_service.sync_paper_bets(
        participant, round_id=_body_round_id(payload)
    )
    return jsonify(report._asdict())


@bp.route("/backfill-paper-bets", methods=["POST"])
@admin_required
def backfill_paper_bets():
    payload = request.get_json(silent=True) or {}
    totals = paper_bet_service.backfill_paper_bets(round_id=_body_round_id(payload))
    return jsonify(totals)


@bp.route("/paperbets-leaderboard")
@admin_required
def paperbets_leaderboard():
    return jsonify(
        paper_bet_service.paper_leaderboard(
            round_id=request.args.get("round_id", type=int),
            league_id=request.args.get("league_id", type=int),
        )
    )
