from flask_wtf import FlaskForm
from wtforms import FloatField, IntegerField, StringField
from wtforms import ValidationError as FieldValidationError
from wtforms.validators import AnyOf, DataRequired, Length, NumberRange, Optional

from tipping.models.match_odds import ODDS_FIELDS
from tipping.utils.scoring import MARGIN_BANDS
from tipping.utils.timezone_utils import parse_timestamp


class CompetitionForm(FlaskForm):
    code = StringField("Code", validators=[DataRequired(), Length(max=50)])
    name = StringField("Name", validators=[DataRequired(), Length(max=120)])
    sport = StringField("Sport", validators=[Optional(), Length(max=50)])
    season = IntegerField("Season", validators=[Optional(), NumberRange(min=1900, max=3000)])


class LeagueForm(FlaskForm):
    code = StringField("Code", validators=[DataRequired(), Length(max=50)])
    name = StringField("Name", validators=[DataRequired(), Length(max=120)])
    competition_id = IntegerField("Competition", validators=[DataRequired()])


class RoundForm(FlaskForm):
    competition_id = IntegerField("Competition", validators=[DataRequired()])
    season = IntegerField("Season", validators=[DataRequired(), NumberRange(min=1900, max=3000)])
    round_number = IntegerField("Round", validators=[DataRequired(), NumberRange(min=1)])


class FixtureForm(FlaskForm):
    round_id = IntegerField("Round", validators=[DataRequired()])
    match_number = IntegerField("Match Number", validators=[DataRequired(), NumberRange(min=1)])
    home_team_code = StringField("Home Team", validators=[DataRequired(), Length(max=10)])
    away_team_code = StringField("Away Team", validators=[DataRequired(), Length(max=10)])
    kickoff_at = StringField("Kickoff", validators=[Optional()])

    # Parsed UTC kickoff, set during validation
    kickoff = None

    def validate_kickoff_at(self, field):
        try:
            self.kickoff = parse_timestamp(field.data)
        except ValueError:
            raise FieldValidationError("Kickoff must be an ISO-8601 timestamp")


class FixtureUpdateForm(FixtureForm):
    """Partial update: every field optional"""

    round_id = IntegerField("Round", validators=[Optional()])
    match_number = IntegerField("Match Number", validators=[Optional(), NumberRange(min=1)])
    home_team_code = StringField("Home Team", validators=[Optional(), Length(max=10)])
    away_team_code = StringField("Away Team", validators=[Optional(), Length(max=10)])


class ResultForm(FlaskForm):
    fixture_id = IntegerField("Fixture", validators=[DataRequired()])
    winning_team = StringField("Winning Team", validators=[DataRequired(), Length(max=10)])
    margin_band = StringField(
        "Margin Band",
        validators=[Optional(), AnyOf(MARGIN_BANDS, message="Margin band must be 1-12 or 13+")],
    )


class OddsForm(FlaskForm):
    fixture_id = IntegerField("Fixture", validators=[DataRequired()])
    draw_odds = FloatField("Draw", validators=[DataRequired()])
    home_1_12_odds = FloatField("Home 1-12", validators=[DataRequired()])
    home_13_plus_odds = FloatField("Home 13+", validators=[DataRequired()])
    away_1_12_odds = FloatField("Away 1-12", validators=[DataRequired()])
    away_13_plus_odds = FloatField("Away 13+", validators=[DataRequired()])

    def odds_values(self):
        return {field: getattr(self, field).data for field in ODDS_FIELDS}
