"""
Participant registration and account maintenance
"""

import logging

from flask import current_app

from tipping import db
from tipping.errors import AuthenticationError, NotFoundError, ValidationError
from tipping.models import League, Participant, ParticipantContact, User
from tipping.models.participant import CATEGORIES

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


def dedupe_emails(emails):
    """Trim, drop blanks and keep the first occurrence of each address"""
    unique = []
    seen = set()
    for email in emails or []:
        email = (email or "").strip()
        if not email or email.lower() in seen:
            continue
        seen.add(email.lower())
        unique.append(email)
    return unique


def register_participant(
    business_name, team_name, category, emails, password, league_code, name=None
):
    """
    Create a participant, its login and its contacts.

    The first email becomes the primary contact. The login itself uses a
    synthetic address derived from the participant id so contacts can change
    without touching credentials.

    Raises:
        AuthenticationError: unknown league code
        ValidationError: bad category, short password or no usable email
    """
    league = League.get_by_code((league_code or "").strip())
    if league is None:
        raise AuthenticationError("Invalid league code")

    if category not in CATEGORIES:
        raise ValidationError(f"Category must be one of: {', '.join(CATEGORIES)}")
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
        )

    emails = dedupe_emails(emails)
    if not emails:
        raise ValidationError("At least one valid email is required")

    business_name = business_name.strip()
    team_name = team_name.strip()
    participant = Participant(
        name=name or f"{business_name} - {team_name}",
        business_name=business_name,
        team_name=team_name,
        category=category,
        league_id=league.id,
    )
    db.session.add(participant)
    db.session.flush()

    domain = current_app.config.get("AUTH_EMAIL_DOMAIN", "teams.tipping.local")
    user = User(email=f"{participant.id}@{domain}")
    user.set_password(password)
    db.session.add(user)
    db.session.flush()
    participant.user_id = user.id

    for position, email in enumerate(emails):
        db.session.add(
            ParticipantContact(
                participant_id=participant.id,
                email=email,
                is_primary=position == 0,
                receives_updates=True,
            )
        )

    db.session.commit()
    logger.info(
        f"Registered participant {participant.id} '{team_name}' in league {league.code}"
    )
    return participant, user


def reset_participant_password(participant_id, new_password):
    """Admin reset; creates the login if the participant never had one"""
    participant = db.session.get(Participant, participant_id)
    if participant is None:
        raise NotFoundError("Participant not found")
    if not new_password or len(new_password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
        )

    user = participant.user
    if user is None:
        domain = current_app.config.get("AUTH_EMAIL_DOMAIN", "teams.tipping.local")
        user = User(email=f"{participant.id}@{domain}")
        db.session.add(user)
        db.session.flush()
        participant.user_id = user.id

    user.set_password(new_password)
    db.session.commit()
    logger.info(f"Password reset for participant {participant.id}")
    return user


def participants_with_contacts():
    """Admin listing of every participant and their primary email"""
    return [
        participant.to_dict(include_email=True)
        for participant in Participant.query.order_by(Participant.team_name).all()
    ]
