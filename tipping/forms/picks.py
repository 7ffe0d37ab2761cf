from flask_wtf import FlaskForm
from wtforms import IntegerField, StringField
from wtforms.validators import AnyOf, DataRequired, Length, NumberRange, Optional

from tipping.utils.scoring import ENCODED_MARGINS


class PickForm(FlaskForm):
    fixture_id = IntegerField("Fixture", validators=[DataRequired()])
    picked_team = StringField("Picked Team", validators=[DataRequired(), Length(max=10)])
    margin = IntegerField(
        "Margin",
        validators=[Optional(), AnyOf([0] + list(ENCODED_MARGINS), message="Margin must be 1 or 13")],
    )
    expected_version = IntegerField("Expected Version", validators=[Optional(), NumberRange(min=0)])


class OverridePickForm(PickForm):
    participant_id = IntegerField("Participant", validators=[DataRequired()])
