"""
Scoring engine for the tipping competition

This module is the only place pick points are calculated. Leaderboards,
per-pick breakdowns and the points shown next to a participant's picks all
call into it.

Rules:
    - no result yet: 0
    - result is a draw: a DRAW pick scores 24, anything else 0
    - team win: wrong team (a DRAW pick included) scores 0, the right team
      scores 5, plus 3 when the picked margin band matches the actual one
"""

from collections import namedtuple

DRAW = "DRAW"

MARGIN_BAND_SMALL = "1-12"
MARGIN_BAND_LARGE = "13+"
MARGIN_BANDS = (MARGIN_BAND_SMALL, MARGIN_BAND_LARGE)

# Picks store the band as an integer: 1 for "1-12", 13 for "13+", 0 for a draw
ENCODED_MARGINS = {1: MARGIN_BAND_SMALL, 13: MARGIN_BAND_LARGE}

DRAW_POINTS = 24
WINNER_POINTS = 5
MARGIN_BONUS_POINTS = 3

PickScore = namedtuple("PickScore", ["winner_points", "margin_points", "total_points"])

NO_SCORE = PickScore(0, 0, 0)


def get_margin_band(margin):
    """Band for an encoded pick margin, or None if it encodes no band"""
    if isinstance(margin, bool):
        return None
    return ENCODED_MARGINS.get(margin)


def encode_margin_band(margin_band):
    """Inverse of get_margin_band"""
    for encoded, band in ENCODED_MARGINS.items():
        if band == margin_band:
            return encoded
    return None


def score_pick(picked_team, margin, winning_team, margin_band):
    """
    Score one pick against one result.

    Args:
        picked_team: team code or DRAW
        margin: encoded margin (1, 13, or 0/None for a draw pick)
        winning_team: team code, DRAW, or None when the fixture is unscored
        margin_band: "1-12", "13+" or None

    Returns:
        PickScore
    """
    if not winning_team:
        return NO_SCORE

    if winning_team == DRAW:
        if picked_team == DRAW:
            return PickScore(DRAW_POINTS, 0, DRAW_POINTS)
        return NO_SCORE

    if picked_team != winning_team:
        return NO_SCORE

    margin_points = 0
    if margin_band is not None and get_margin_band(margin) == margin_band:
        margin_points = MARGIN_BONUS_POINTS

    return PickScore(WINNER_POINTS, margin_points, WINNER_POINTS + margin_points)


def score_result(pick, result):
    """PickScore for model objects; a missing result scores nothing"""
    if pick is None or result is None:
        return NO_SCORE
    return score_pick(pick.picked_team, pick.margin, result.winning_team, result.margin_band)


def calculate_pick_score(pick, result):
    """
    Calculate the point total for a single pick.

    Args:
        pick: Pick (or anything with picked_team and margin)
        result: Result (or anything with winning_team and margin_band), may be None
    """
    return score_result(pick, result).total_points
