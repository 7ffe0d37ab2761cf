"""
Paper bet settlement

A paper bet is a simulated stake on the outcome bucket a pick implies. The
functions here are pure; persistence and synchronisation live in
tipping.services.paper_bet_service.
"""

from collections import namedtuple

from tipping.utils.scoring import DRAW, MARGIN_BAND_LARGE, MARGIN_BAND_SMALL

OUTCOME_DRAW = "draw"
OUTCOME_HOME_1_12 = "home_1_12"
OUTCOME_HOME_13_PLUS = "home_13_plus"
OUTCOME_AWAY_1_12 = "away_1_12"
OUTCOME_AWAY_13_PLUS = "away_13_plus"

OUTCOMES = (
    OUTCOME_HOME_1_12,
    OUTCOME_HOME_13_PLUS,
    OUTCOME_DRAW,
    OUTCOME_AWAY_1_12,
    OUTCOME_AWAY_13_PLUS,
)

DEFAULT_STAKE = 10.0

Settlement = namedtuple(
    "Settlement",
    ["outcome", "settled", "won", "stake", "odds", "return_amount", "profit", "roi"],
)


def pick_outcome(picked_team, margin, home_team_code, away_team_code):
    """
    Map a pick to its outcome bucket.

    Returns None when the pick does not line up with one of the five
    buckets (unknown team, or a team pick without a 1/13 margin).
    """
    if picked_team == DRAW:
        return OUTCOME_DRAW
    if isinstance(margin, bool):
        return None
    if home_team_code and picked_team == home_team_code:
        if margin == 1:
            return OUTCOME_HOME_1_12
        if margin == 13:
            return OUTCOME_HOME_13_PLUS
    if away_team_code and picked_team == away_team_code:
        if margin == 1:
            return OUTCOME_AWAY_1_12
        if margin == 13:
            return OUTCOME_AWAY_13_PLUS
    return None


def result_outcome(winning_team, margin_band, home_team_code, away_team_code):
    """Map a result to the outcome bucket that pays out"""
    if winning_team == DRAW:
        return OUTCOME_DRAW
    if home_team_code and winning_team == home_team_code:
        if margin_band == MARGIN_BAND_SMALL:
            return OUTCOME_HOME_1_12
        if margin_band == MARGIN_BAND_LARGE:
            return OUTCOME_HOME_13_PLUS
    if away_team_code and winning_team == away_team_code:
        if margin_band == MARGIN_BAND_SMALL:
            return OUTCOME_AWAY_1_12
        if margin_band == MARGIN_BAND_LARGE:
            return OUTCOME_AWAY_13_PLUS
    return None


def odds_for_outcome(odds, outcome):
    """Look up the price of an outcome in a MatchOdds row (or outcome->odds dict)"""
    if hasattr(odds, "as_outcome_map"):
        odds = odds.as_outcome_map()
    return odds.get(outcome)


def settle_bet(outcome, odds, settled_outcome, stake=DEFAULT_STAKE, is_settled=None):
    """
    Settle a single bet.

    A bet wins when its outcome equals the settled outcome. Winning returns
    stake * odds; losing returns nothing. profit = return - stake and
    roi = profit / stake. A bet on a fixture without a result is pending and
    carries no return, profit or roi.

    Args:
        outcome: bucket the bet was placed on
        odds: decimal odds recorded for that bucket
        settled_outcome: bucket implied by the result, None if not derivable
        stake: amount staked
        is_settled: whether a result exists; defaults to settled_outcome is not None
    """
    if is_settled is None:
        is_settled = settled_outcome is not None

    if not is_settled:
        return Settlement(outcome, False, False, stake, odds, 0.0, 0.0, 0.0)

    won = settled_outcome is not None and outcome == settled_outcome
    return_amount = round(stake * odds, 2) if won else 0.0
    profit = round(return_amount - stake, 2)
    roi = round(profit / stake, 4) if stake else 0.0

    return Settlement(outcome, True, won, stake, odds, return_amount, profit, roi)
