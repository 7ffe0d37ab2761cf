from flask_wtf import FlaskForm
from wtforms import FieldList, IntegerField, PasswordField, StringField
from wtforms.validators import AnyOf, DataRequired, Email, Length, Optional

from tipping.models.participant import CATEGORIES
from tipping.services.account_service import MIN_PASSWORD_LENGTH


def sanitize_input(text):
    """Trim surrounding whitespace from free text"""
    if not text:
        return text
    return text.strip()


class LoginForm(FlaskForm):
    # Email address or participant id
    identifier = StringField("Email or Team ID", validators=[DataRequired(), Length(max=255)])
    password = PasswordField("Password", validators=[DataRequired()])


class RegistrationForm(FlaskForm):
    business_name = StringField(
        "Business Name",
        filters=[sanitize_input],
        validators=[DataRequired(), Length(max=255)],
    )
    team_name = StringField(
        "Team Name",
        filters=[sanitize_input],
        validators=[DataRequired(), Length(max=120)],
    )
    category = StringField(
        "Category",
        validators=[DataRequired(), AnyOf(CATEGORIES, message="Unknown category")],
    )
    emails = FieldList(
        StringField("Email", filters=[sanitize_input], validators=[Optional(), Email()]),
        min_entries=0,
    )
    password = PasswordField(
        "Password",
        validators=[
            DataRequired(),
            Length(
                min=MIN_PASSWORD_LENGTH,
                message=f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
            ),
        ],
    )
    league_code = StringField("League Code", validators=[DataRequired(), Length(max=50)])


class ChangePasswordForm(FlaskForm):
    current_password = PasswordField("Current Password", validators=[Optional()])
    new_password = PasswordField(
        "New Password",
        validators=[
            DataRequired(),
            Length(
                min=MIN_PASSWORD_LENGTH,
                message=f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
            ),
        ],
    )


class ResetPasswordForm(FlaskForm):
    participant_id = IntegerField("Participant", validators=[DataRequired()])
    new_password = PasswordField(
        "New Password",
        validators=[DataRequired(), Length(min=MIN_PASSWORD_LENGTH)],
    )
