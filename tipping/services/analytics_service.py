"""
Product analytics events
"""

import logging
from datetime import datetime, timedelta, timezone

from tipping import db
from tipping.errors import ValidationError
from tipping.models import AnalyticsEvent, Participant
from tipping.models.analytics_event import ALLOWED_EVENTS

logger = logging.getLogger(__name__)

SUMMARY_EVENTS = ("landing_view", "login_success", "register_success", "pick_saved")


def record_event(event_name, participant=None, metadata=None, user_agent=None, ip=None):
    if event_name not in ALLOWED_EVENTS:
        raise ValidationError(f"Unknown event: {event_name}")
    if metadata is not None and not isinstance(metadata, dict):
        raise ValidationError("metadata must be an object")

    event = AnalyticsEvent(
        event_name=event_name,
        participant_id=participant.id if participant else None,
        event_metadata=metadata or {},
        user_agent=(user_agent or "")[:500] or None,
        ip=ip,
    )
    db.session.add(event)
    db.session.commit()
    logger.debug(f"Analytics event recorded: {event_name}")
    return event


def summary(days=7, now=None):
    """Event counts for the trailing window plus the participant total"""
    since = (now or datetime.now(timezone.utc)) - timedelta(days=days)

    counts = dict.fromkeys(SUMMARY_EVENTS, 0)
    rows = (
        db.session.query(AnalyticsEvent.event_name, db.func.count(AnalyticsEvent.id))
        .filter(AnalyticsEvent.created_at >= since)
        .filter(AnalyticsEvent.event_name.in_(SUMMARY_EVENTS))
        .group_by(AnalyticsEvent.event_name)
    )
    for event_name, count in rows:
        counts[event_name] = count

    counts["total_participants"] = Participant.query.count()
    return counts
