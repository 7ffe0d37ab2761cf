from tipping import db  # noqa: F401 - imported for model imports

from .analytics_event import AnalyticsEvent
from .competition import Competition, League
from .fixture import Fixture
from .match_odds import MatchOdds
from .paper_bet import PaperBet
from .participant import Participant, ParticipantContact
from .pick import Pick, PickEvent
from .result import Result
from .round import Round
from .team import Team
from .user import User

__all__ = [
    "User",
    "Competition",
    "League",
    "Team",
    "Participant",
    "ParticipantContact",
    "Round",
    "Fixture",
    "Pick",
    "PickEvent",
    "Result",
    "MatchOdds",
    "PaperBet",
    "AnalyticsEvent",
]
