from tipping import db
from tipping.models import PickEvent


def post_pick(client, headers, fixture_id, picked_team, margin=None, **extra):
    payload = {"fixture_id": fixture_id, "picked_team": picked_team, "margin": margin}
    payload.update(extra)
    return client.post("/api/picks", json=payload, headers=headers)


def test_picks_require_authentication(client, world):
    response = client.get("/api/picks")
    assert response.status_code == 401
    assert response.get_json() == {"error": "Authentication required"}


def test_team_pick_is_saved_with_version(client, world):
    response = post_pick(client, world.acme_headers, world.open_fixture_id, "BLU", 13)
    assert response.status_code == 200
    data = response.get_json()
    assert data["picked_team"] == "BLU"
    assert data["margin"] == 13
    assert data["version"] == 1


def test_draw_pick_is_stored_with_zero_margin(client, world):
    response = post_pick(client, world.acme_headers, world.open_fixture_id, "DRAW", 13)
    assert response.status_code == 200
    assert response.get_json()["margin"] == 0


def test_team_pick_needs_a_band(client, world):
    response = post_pick(client, world.acme_headers, world.open_fixture_id, "BLU", None)
    assert response.status_code == 400

    response = post_pick(client, world.acme_headers, world.open_fixture_id, "BLU", 7)
    assert response.status_code == 400


def test_team_must_be_playing(client, world):
    response = post_pick(client, world.acme_headers, world.open_fixture_id, "HUR", 1)
    assert response.status_code == 400


def test_fixture_from_another_competition_is_forbidden(client, world):
    response = post_pick(client, world.acme_headers, world.foreign_fixture_id, "BLU", 1)
    assert response.status_code == 403


def test_started_fixture_is_locked(client, world):
    response = post_pick(client, world.acme_headers, world.started_fixture_id, "CHI", 1)
    assert response.status_code == 403
    assert response.get_json() == {"error": "Fixture is locked"}


def test_fixture_with_result_is_locked(client, world, set_result):
    set_result(world.open_fixture_id, "BLU", "1-12")
    response = post_pick(client, world.acme_headers, world.open_fixture_id, "BLU", 1)
    assert response.status_code == 403


def test_unknown_fixture_is_404(client, world):
    response = post_pick(client, world.acme_headers, 9999, "BLU", 1)
    assert response.status_code == 404


def test_update_in_place_bumps_version(client, world):
    post_pick(client, world.acme_headers, world.open_fixture_id, "BLU", 1)
    response = post_pick(
        client, world.acme_headers, world.open_fixture_id, "CHI", 13, expected_version=1
    )
    assert response.status_code == 200
    assert response.get_json()["version"] == 2

    picks = client.get("/api/picks", headers=world.acme_headers).get_json()
    assert len(picks) == 1
    assert picks[0]["picked_team"] == "CHI"


def test_stale_expected_version_is_a_conflict(client, world):
    post_pick(client, world.acme_headers, world.open_fixture_id, "BLU", 1)
    post_pick(client, world.acme_headers, world.open_fixture_id, "CHI", 1)

    response = post_pick(
        client, world.acme_headers, world.open_fixture_id, "DRAW", expected_version=1
    )
    assert response.status_code == 409
    assert response.get_json()["current_version"] == 2


def test_expected_version_zero_means_first_write(client, world):
    response = post_pick(
        client, world.acme_headers, world.open_fixture_id, "BLU", 1, expected_version=0
    )
    assert response.status_code == 200

    response = post_pick(
        client, world.acme_headers, world.open_fixture_id, "BLU", 13, expected_version=0
    )
    assert response.status_code == 409


def test_every_save_is_logged(app, client, world):
    post_pick(client, world.acme_headers, world.open_fixture_id, "BLU", 1)
    post_pick(client, world.acme_headers, world.open_fixture_id, "DRAW")

    events = client.get("/api/pick-events", headers=world.acme_headers).get_json()
    assert [e["picked_team"] for e in events] == ["DRAW", "BLU"]

    with app.app_context():
        assert db.session.query(PickEvent).count() == 2


def test_rejected_pick_is_not_logged(app, client, world):
    post_pick(client, world.acme_headers, world.started_fixture_id, "CHI", 1)
    with app.app_context():
        assert db.session.query(PickEvent).count() == 0


def test_batch_reports_failures_per_item(client, world):
    response = client.post(
        "/api/picks",
        json={
            "picks": [
                {"fixture_id": world.open_fixture_id, "picked_team": "BLU", "margin": 1},
                {"fixture_id": world.started_fixture_id, "picked_team": "CHI", "margin": 1},
            ]
        },
        headers=world.acme_headers,
    )
    assert response.status_code == 200
    data = response.get_json()
    assert len(data["saved"]) == 1
    assert data["errors"] == [
        {"fixture_id": world.started_fixture_id, "error": "Fixture is locked", "status": 403}
    ]


def test_picks_show_points_once_scored(client, world, make_pick, set_result):
    make_pick(world.acme_id, world.started_fixture_id, "CHI", 13)
    set_result(world.started_fixture_id, "CHI", "13+")

    picks = client.get("/api/picks", headers=world.acme_headers).get_json()
    assert picks[0]["total_points"] == 8
    assert picks[0]["winner_points"] == 5
    assert picks[0]["margin_points"] == 3


def test_round_fixtures_are_scoped_to_competition(client, world):
    response = client.get(
        f"/api/rounds/{world.round_id}/fixtures", headers=world.acme_headers
    )
    fixtures = response.get_json()
    assert [f["match_number"] for f in fixtures] == [1, 2, 3]
    assert [f["is_locked"] for f in fixtures] == [False, False, True]

    rounds = client.get("/api/rounds", headers=world.acme_headers).get_json()
    assert [r["id"] for r in rounds] == [world.round_id]
