from datetime import datetime, timedelta, timezone

from tipping import db
from tipping.models import AnalyticsEvent
from tipping.services import analytics_service


def test_anonymous_event_is_recorded(app, client, world):
    response = client.post(
        "/api/analytics",
        json={"event_name": "landing_view", "metadata": {"path": "/"}},
        headers={"User-Agent": "pytest-agent"},
    )
    assert response.status_code == 201

    with app.app_context():
        event = AnalyticsEvent.query.one()
        assert event.participant_id is None
        assert event.event_metadata == {"path": "/"}
        assert event.user_agent == "pytest-agent"


def test_event_is_linked_to_participant(app, client, world):
    client.post(
        "/api/analytics", json={"event_name": "pick_saved"}, headers=world.acme_headers
    )
    with app.app_context():
        assert AnalyticsEvent.query.one().participant_id == world.acme_id


def test_unknown_event_or_bad_metadata_is_rejected(client, world):
    response = client.post("/api/analytics", json={"event_name": "rage_click"})
    assert response.status_code == 400

    response = client.post(
        "/api/analytics", json={"event_name": "landing_view", "metadata": ["x"]}
    )
    assert response.status_code == 400


def test_summary_counts_the_trailing_week(app, client, world):
    with app.app_context():
        analytics_service.record_event("landing_view")
        analytics_service.record_event("landing_view")
        old = analytics_service.record_event("login_success")
        old.created_at = datetime.now(timezone.utc) - timedelta(days=10)
        db.session.commit()

    response = client.get("/api/admin/analytics-summary", headers=world.admin_headers)
    body = response.get_json()

    assert body["landing_view"] == 2
    assert body["login_success"] == 0
    assert body["total_participants"] == 2
