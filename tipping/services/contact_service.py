"""
Participant contact email lists for admin mail-outs
"""

from tipping.models import Participant, ParticipantContact


def email_list(
    only_updates=True, include_primary=True, include_additional=True, category=None
):
    """
    Contact rows matching the filters.

    Sorted by team name, primary contact first, then email. Excluding both
    primary and additional contacts leaves nothing to return.
    """
    if not include_primary and not include_additional:
        return []

    query = ParticipantContact.query.join(
        Participant, Participant.id == ParticipantContact.participant_id
    )
    if only_updates:
        query = query.filter(ParticipantContact.receives_updates.is_(True))
    if not include_primary:
        query = query.filter(ParticipantContact.is_primary.is_(False))
    if not include_additional:
        query = query.filter(ParticipantContact.is_primary.is_(True))
    if category:
        query = query.filter(Participant.category == category)

    rows = []
    for contact in query.all():
        participant = contact.participant
        rows.append(
            {
                "participant_id": participant.id,
                "team_name": participant.team_name,
                "business_name": participant.business_name,
                "category": participant.category,
                "email": contact.email,
                "is_primary": contact.is_primary,
                "receives_updates": contact.receives_updates,
                "created_at": contact.created_at.isoformat() if contact.created_at else None,
            }
        )

    rows.sort(
        key=lambda r: ((r["team_name"] or "").lower(), not r["is_primary"], r["email"].lower())
    )
    return rows


def unique_emails(rows):
    """Distinct addresses in list order, for pasting into a mail client"""
    seen = []
    for row in rows:
        email = row["email"].lower()
        if email not in seen:
            seen.append(email)
    return seen
