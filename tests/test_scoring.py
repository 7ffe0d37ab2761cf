from types import SimpleNamespace

import pytest

from tipping.utils.scoring import (
    DRAW,
    NO_SCORE,
    calculate_pick_score,
    encode_margin_band,
    get_margin_band,
    score_pick,
)


def test_unscored_fixture_is_worth_nothing():
    assert score_pick("BLU", 1, None, None) == NO_SCORE


def test_draw_result_pays_only_draw_picks():
    assert score_pick(DRAW, 0, DRAW, None).total_points == 24
    assert score_pick("BLU", 1, DRAW, None).total_points == 0
    assert score_pick("BLU", 13, DRAW, None).total_points == 0


def test_draw_pick_against_a_team_win_scores_zero():
    assert score_pick(DRAW, 0, "BLU", "1-12").total_points == 0


def test_wrong_team_scores_zero_even_with_matching_band():
    assert score_pick("CHI", 1, "BLU", "1-12").total_points == 0


def test_right_team_wrong_band_scores_winner_points_only():
    score = score_pick("BLU", 13, "BLU", "1-12")
    assert score.winner_points == 5
    assert score.margin_points == 0
    assert score.total_points == 5


@pytest.mark.parametrize("margin,band", [(1, "1-12"), (13, "13+")])
def test_right_team_and_band_scores_eight(margin, band):
    score = score_pick("BLU", margin, "BLU", band)
    assert (score.winner_points, score.margin_points, score.total_points) == (5, 3, 8)


def test_unknown_margin_never_earns_the_bonus():
    assert score_pick("BLU", 7, "BLU", "1-12").total_points == 5
    assert score_pick("BLU", True, "BLU", "1-12").total_points == 5


def test_margin_band_encoding_is_exact():
    assert get_margin_band(1) == "1-12"
    assert get_margin_band(13) == "13+"
    assert get_margin_band(12) is None
    assert get_margin_band(0) is None
    assert encode_margin_band("13+") == 13
    assert encode_margin_band("bogus") is None


def test_calculate_pick_score_reads_model_attributes():
    pick = SimpleNamespace(picked_team="HUR", margin=13)
    result = SimpleNamespace(winning_team="HUR", margin_band="13+")
    assert calculate_pick_score(pick, result) == 8
    assert calculate_pick_score(pick, None) == 0
