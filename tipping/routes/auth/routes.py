import logging

from flask import jsonify
from flask_login import current_user, login_user, logout_user

from tipping import limiter
from tipping.forms.auth import ChangePasswordForm, LoginForm, RegistrationForm
from tipping.forms.base import bind_json
from tipping.routes.auth import bp
from tipping.services import account_service, analytics_service, auth_service
from tipping.services.auth_service import login_required_json

logger = logging.getLogger(__name__)


@bp.route("/login", methods=["POST"])
@limiter.limit("10 per minute")
def login():
    form = bind_json(LoginForm)
    user = auth_service.authenticate(form.identifier.data, form.password.data)

    login_user(user)
    user.update_last_login()
    analytics_service.record_event("login_success", participant=user.participant)

    logger.info(f"User {user.id} logged in")
    return jsonify(
        {
            "token": auth_service.issue_token(user),
            "user": user.to_dict(),
            "participant": user.participant.to_dict(include_email=True)
            if user.participant
            else None,
        }
    )


@bp.route("/register", methods=["POST"])
@limiter.limit("5 per hour")
def register():
    form = bind_json(RegistrationForm)
    participant, user = account_service.register_participant(
        business_name=form.business_name.data,
        team_name=form.team_name.data,
        category=form.category.data,
        emails=[entry.data for entry in form.emails.entries],
        password=form.password.data,
        league_code=form.league_code.data,
    )
    analytics_service.record_event("register_success", participant=participant)

    return (
        jsonify(
            {
                "participant_id": participant.id,
                "auth_email": user.email,
                "token": auth_service.issue_token(user),
            }
        ),
        201,
    )


@bp.route("/logout", methods=["POST"])
@login_required_json
def logout():
    logout_user()
    return jsonify({"success": True})


@bp.route("/me")
@login_required_json
def me():
    participant = current_user.participant
    return jsonify(
        {
            "user": current_user.to_dict(),
            "participant": participant.to_dict(include_email=True) if participant else None,
        }
    )


@bp.route("/change-password", methods=["POST"])
@login_required_json
@limiter.limit("10 per hour")
def change_password():
    form = bind_json(ChangePasswordForm)
    auth_service.change_password(
        current_user, form.current_password.data, form.new_password.data
    )
    return jsonify({"success": True})
