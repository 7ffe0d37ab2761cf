"""
Authentication: bearer tokens, Flask-Login loaders and route guards
"""

import logging
from functools import wraps

from flask import request
from flask_jwt_extended import create_access_token, decode_token
from flask_jwt_extended.exceptions import JWTExtendedException
from flask_login import current_user
from jwt.exceptions import ExpiredSignatureError, PyJWTError

from tipping import db, login_manager
from tipping.errors import AuthenticationError, AuthorizationError, NotFoundError
from tipping.models import Participant, ParticipantContact, User

logger = logging.getLogger(__name__)


def issue_token(user):
    """Signed bearer token carrying the user id"""
    return create_access_token(identity=str(user.id))


def verify_token(token):
    """Return the active user a token belongs to, or None"""
    if not token:
        return None
    try:
        claims = decode_token(token)
    except ExpiredSignatureError:
        logger.info("Rejected expired bearer token")
        return None
    except (PyJWTError, JWTExtendedException):
        logger.warning("Rejected invalid bearer token")
        return None

    try:
        user_id = int(claims["sub"])
    except (KeyError, TypeError, ValueError):
        return None

    user = db.session.get(User, user_id)
    if user is None or not user.is_active:
        return None
    return user


@login_manager.user_loader
def load_user(user_id):
    return db.session.get(User, int(user_id))


@login_manager.request_loader
def load_user_from_request(req):
    header = req.headers.get("Authorization", "")
    if header.startswith("Bearer "):
        return verify_token(header[len("Bearer "):].strip())
    return None


@login_manager.unauthorized_handler
def unauthorized():
    raise AuthenticationError("Authentication required")


def authenticate(identifier, password):
    """
    Resolve login credentials.

    The identifier is either an email address (account or participant
    contact) or a participant id.
    """
    identifier = (identifier or "").strip()
    user = None

    if identifier.isdigit():
        participant = db.session.get(Participant, int(identifier))
        user = participant.user if participant else None
    elif identifier:
        user = User.query.filter(db.func.lower(User.email) == identifier.lower()).first()
        if user is None:
            contact = ParticipantContact.query.filter(
                db.func.lower(ParticipantContact.email) == identifier.lower()
            ).first()
            if contact is not None and contact.participant.user is not None:
                user = contact.participant.user

    if user is None or not user.check_password(password):
        raise AuthenticationError("Invalid credentials")
    if not user.is_active:
        raise AuthenticationError("Account is deactivated")

    return user


def change_password(user, current_password, new_password):
    if user.has_password and not user.check_password(current_password or ""):
        raise AuthenticationError("Current password is incorrect")
    user.set_password(new_password)
    db.session.commit()
    logger.info(f"Password changed for user {user.id}")


def login_required_json(f):
    """Require an authenticated user; renders 401 as JSON"""

    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not current_user.is_authenticated:
            raise AuthenticationError("Authentication required")
        return f(*args, **kwargs)

    return decorated_function


def admin_required(f):
    """Require a user on the configured admin allowlist"""

    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not current_user.is_authenticated:
            raise AuthenticationError("Authentication required")
        if not current_user.is_admin:
            logger.warning(
                f"Non-admin user {current_user.id} denied {request.method} {request.path}"
            )
            raise AuthorizationError("Admin access required")
        return f(*args, **kwargs)

    return decorated_function


def current_participant():
    """The participant owned by the logged-in user"""
    participant = current_user.participant if current_user.is_authenticated else None
    if participant is None:
        raise NotFoundError("No participant linked to this account")
    return participant
