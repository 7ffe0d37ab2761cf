from tipping import db
from tipping.models import Fixture, PaperBet, Pick, PickEvent
from tipping.services import account_service


def test_admin_endpoints_reject_participants(client, world):
    response = client.get("/api/admin/participants", headers=world.acme_headers)
    assert response.status_code == 403
    assert response.get_json() == {"error": "Admin access required"}

    response = client.get("/api/admin/participants")
    assert response.status_code == 401


def test_participants_listing_includes_primary_email(client, world):
    rows = client.get("/api/admin/participants", headers=world.admin_headers).get_json()
    by_team = {row["team_name"]: row for row in rows}
    assert by_team["Acme Tippers"]["primary_email"] == "one@acme.test"
    assert by_team["Bolt Punters"]["primary_email"] == "bolt@bolt.test"


def test_duplicate_round_is_rejected(client, world):
    payload = {"competition_id": world.competition_id, "season": 2026, "round_number": 2}
    first = client.post("/api/admin/rounds", json=payload, headers=world.admin_headers)
    assert first.status_code == 201

    again = client.post("/api/admin/rounds", json=payload, headers=world.admin_headers)
    assert again.status_code == 400
    assert "already exists" in again.get_json()["error"]


def test_fixture_teams_must_differ(client, world):
    response = client.post(
        "/api/admin/fixtures",
        json={
            "round_id": world.round_id,
            "match_number": 4,
            "home_team_code": "BLU",
            "away_team_code": "BLU",
        },
        headers=world.admin_headers,
    )
    assert response.status_code == 400


def test_fixture_kickoff_without_offset_is_local_time(client, world):
    response = client.post(
        "/api/admin/fixtures",
        json={
            "round_id": world.round_id,
            "match_number": 4,
            "home_team_code": "HUR",
            "away_team_code": "BLU",
            "kickoff_at": "2026-03-01T19:35:00",
        },
        headers=world.admin_headers,
    )
    assert response.status_code == 201
    # Pacific/Auckland is UTC+13 in March
    assert response.get_json()["kickoff_at"] == "2026-03-01T06:35:00+00:00"


def test_bad_kickoff_is_rejected(client, world):
    response = client.post(
        "/api/admin/fixtures",
        json={
            "round_id": world.round_id,
            "match_number": 4,
            "home_team_code": "HUR",
            "away_team_code": "BLU",
            "kickoff_at": "next tuesday",
        },
        headers=world.admin_headers,
    )
    assert response.status_code == 400


def test_fixture_with_result_cannot_change_or_be_deleted(client, world, set_result):
    set_result(world.open_fixture_id, "DRAW")

    response = client.patch(
        f"/api/admin/fixtures/{world.open_fixture_id}",
        json={"match_number": 9},
        headers=world.admin_headers,
    )
    assert response.status_code == 400

    response = client.delete(
        f"/api/admin/fixtures/{world.open_fixture_id}", headers=world.admin_headers
    )
    assert response.status_code == 400


def test_fixture_update_and_delete(client, world):
    response = client.patch(
        f"/api/admin/fixtures/{world.second_fixture_id}",
        json={"home_team_code": "BLU"},
        headers=world.admin_headers,
    )
    assert response.status_code == 200
    assert response.get_json()["home_team_code"] == "BLU"

    response = client.delete(
        f"/api/admin/fixtures/{world.second_fixture_id}", headers=world.admin_headers
    )
    assert response.status_code == 200


def test_deleting_a_picked_fixture_removes_its_picks_and_history(
    app, client, world, foreign_keys
):
    response = client.post(
        "/api/picks",
        json={"fixture_id": world.open_fixture_id, "picked_team": "BLU", "margin": 1},
        headers=world.acme_headers,
    )
    assert response.status_code == 200
    with app.app_context():
        assert PickEvent.query.filter_by(fixture_id=world.open_fixture_id).count() == 1

    response = client.delete(
        f"/api/admin/fixtures/{world.open_fixture_id}", headers=world.admin_headers
    )
    assert response.status_code == 200

    with app.app_context():
        assert db.session.get(Fixture, world.open_fixture_id) is None
        assert Pick.query.filter_by(fixture_id=world.open_fixture_id).count() == 0
        assert PickEvent.query.filter_by(fixture_id=world.open_fixture_id).count() == 0


def test_fixture_teams_are_frozen_once_picked(app, client, world):
    response = client.post(
        "/api/picks",
        json={"fixture_id": world.second_fixture_id, "picked_team": "CRU", "margin": 1},
        headers=world.acme_headers,
    )
    assert response.status_code == 200

    response = client.patch(
        f"/api/admin/fixtures/{world.second_fixture_id}",
        json={"home_team_code": "BLU"},
        headers=world.admin_headers,
    )
    assert response.status_code == 400
    assert "teams can no longer be changed" in response.get_json()["error"]

    response = client.patch(
        f"/api/admin/fixtures/{world.second_fixture_id}",
        json={"match_number": 7},
        headers=world.admin_headers,
    )
    assert response.status_code == 200

    with app.app_context():
        fixture = db.session.get(Fixture, world.second_fixture_id)
        assert (fixture.home_team_code, fixture.away_team_code) == ("CRU", "HUR")
        assert fixture.match_number == 7


def test_result_validation(client, world):
    def post(payload):
        payload = dict(payload, fixture_id=world.open_fixture_id)
        return client.post("/api/admin/results", json=payload, headers=world.admin_headers)

    assert post({"winning_team": "HUR", "margin_band": "1-12"}).status_code == 400
    assert post({"winning_team": "BLU"}).status_code == 400
    assert post({"winning_team": "BLU", "margin_band": "1–12"}).status_code == 400

    response = post({"winning_team": "DRAW", "margin_band": "13+"})
    assert response.status_code == 200
    assert response.get_json()["margin_band"] is None

    response = post({"winning_team": "CHI", "margin_band": "13+"})
    assert response.status_code == 200
    assert response.get_json()["winning_team"] == "CHI"


def test_odds_must_be_complete_and_at_least_min(client, world):
    payload = {
        "fixture_id": world.open_fixture_id,
        "draw_odds": 26,
        "home_1_12_odds": 2.5,
        "home_13_plus_odds": 4.0,
        "away_1_12_odds": 1.0,
        "away_13_plus_odds": 6.5,
    }
    response = client.post("/api/admin/odds", json=payload, headers=world.admin_headers)
    assert response.status_code == 400

    del payload["away_1_12_odds"]
    response = client.post("/api/admin/odds", json=payload, headers=world.admin_headers)
    assert response.status_code == 400


def test_odds_upsert_restamps(client, world):
    payload = {
        "fixture_id": world.open_fixture_id,
        "draw_odds": 26,
        "home_1_12_odds": 2.5,
        "home_13_plus_odds": 4.0,
        "away_1_12_odds": 3.0,
        "away_13_plus_odds": 6.5,
    }
    first = client.post("/api/admin/odds", json=payload, headers=world.admin_headers)
    assert first.status_code == 200

    payload["draw_odds"] = 21
    second = client.post("/api/admin/odds", json=payload, headers=world.admin_headers)
    assert second.get_json()["draw_odds"] == 21
    assert second.get_json()["odds_as_at"] >= first.get_json()["odds_as_at"]

    listed = client.get(
        f"/api/admin/odds?round_id={world.round_id}", headers=world.admin_headers
    ).get_json()
    assert len(listed) == 1


def test_email_list_filters(app, client, world):
    def emails(query=""):
        response = client.get(f"/api/admin/emails{query}", headers=world.admin_headers)
        return [(row["team_name"], row["email"]) for row in response.get_json()["rows"]]

    assert emails() == [
        ("Acme Tippers", "one@acme.test"),
        ("Acme Tippers", "two@acme.test"),
        ("Bolt Punters", "bolt@bolt.test"),
    ]
    assert emails("?include_primary=false") == [("Acme Tippers", "two@acme.test")]
    assert emails("?include_additional=0") == [
        ("Acme Tippers", "one@acme.test"),
        ("Bolt Punters", "bolt@bolt.test"),
    ]
    assert emails("?include_primary=0&include_additional=0") == []
    assert emails("?category=accountant") == [("Bolt Punters", "bolt@bolt.test")]


def test_round_pick_status(client, world, make_pick):
    make_pick(world.acme_id, world.open_fixture_id, "BLU", 1)
    make_pick(world.acme_id, world.second_fixture_id, "DRAW")
    make_pick(world.bolt_id, world.started_fixture_id, "CRU", 13)

    data = client.get(
        f"/api/admin/round-pick-status?round_id={world.round_id}",
        headers=world.admin_headers,
    ).get_json()

    assert data["totals"] == {
        "total_games": 3,
        "open_games": 2,
        "participant_count": 2,
        "complete_open_count": 1,
        "incomplete_open_count": 1,
    }
    rows = {row["team_name"]: row for row in data["rows"]}
    assert rows["Acme Tippers"]["is_complete_open"] is True
    assert rows["Acme Tippers"]["emails"] == ["one@acme.test", "two@acme.test"]
    assert rows["Bolt Punters"]["picks_total"] == 1
    assert rows["Bolt Punters"]["missing_open"] == 2


def test_round_pick_status_requires_round(client, world):
    response = client.get("/api/admin/round-pick-status", headers=world.admin_headers)
    assert response.status_code == 400


def test_override_pick_ignores_lock_and_syncs_bet(app, client, world, set_odds):
    set_odds(world.started_fixture_id)

    response = client.post(
        "/api/admin/override-pick",
        json={
            "participant_id": world.acme_id,
            "fixture_id": world.started_fixture_id,
            "picked_team": "CRU",
            "margin": 13,
        },
        headers=world.admin_headers,
    )
    assert response.status_code == 200

    with app.app_context():
        bet = PaperBet.query.filter_by(participant_id=world.acme_id).one()
        assert bet.outcome == "away_13_plus"
        assert bet.odds == 6.5

    response = client.delete(
        f"/api/admin/override-pick?participant_id={world.acme_id}"
        f"&fixture_id={world.started_fixture_id}",
        headers=world.admin_headers,
    )
    assert response.status_code == 200

    with app.app_context():
        assert Pick.query.count() == 0
        assert db.session.query(PaperBet).count() == 0


def test_picks_view_scores_each_pick(client, world, make_pick, set_result):
    make_pick(world.acme_id, world.started_fixture_id, "CHI", 1)
    set_result(world.started_fixture_id, "CHI", "1-12")

    data = client.get(
        f"/api/admin/picks-view?round_id={world.round_id}", headers=world.admin_headers
    ).get_json()
    rows = {row["team_name"]: row for row in data["rows"]}
    assert rows["Acme Tippers"]["round_points"] == 8
    assert rows["Acme Tippers"]["picks"][str(world.started_fixture_id)]["picked_team"] == "CHI"
    assert rows["Bolt Punters"]["picks"] == {}


def test_picks_view_only_lists_the_round_competition(app, client, world):
    with app.app_context():
        account_service.register_participant(
            "Delta Ltd", "Delta Force", "solicitor", ["d@delta.test"], "secret5", "BETA"
        )

    data = client.get(
        f"/api/admin/picks-view?round_id={world.round_id}", headers=world.admin_headers
    ).get_json()
    assert sorted(row["team_name"] for row in data["rows"]) == [
        "Acme Tippers",
        "Bolt Punters",
    ]


def test_structure_create_and_list(client, world):
    response = client.post(
        "/api/admin/structure",
        json={"type": "league", "code": "GAMMA", "name": "Gamma", "competition_id": world.competition_id},
        headers=world.admin_headers,
    )
    assert response.status_code == 201

    data = client.get("/api/admin/structure", headers=world.admin_headers).get_json()
    competitions = {c["code"]: c for c in data["competitions"]}
    assert competitions["SR26"]["leagues_count"] == 2
    assert competitions["SR26"]["fixtures_count"] == 3
    leagues = {league["code"]: league for league in data["leagues"]}
    assert leagues["ALPHA"]["participants_count"] == 2
    assert leagues["GAMMA"]["competition_code"] == "SR26"

    response = client.post(
        "/api/admin/structure", json={"type": "team"}, headers=world.admin_headers
    )
    assert response.status_code == 400


def test_reset_password(client, world):
    response = client.post(
        "/api/admin/reset-password",
        json={"participant_id": world.bolt_id, "new_password": "fresh-pass"},
        headers=world.admin_headers,
    )
    assert response.status_code == 200

    login = client.post(
        "/auth/login", json={"identifier": str(world.bolt_id), "password": "fresh-pass"}
    )
    assert login.status_code == 200
