from manage import cli
from tipping.models import MatchOdds, PaperBet, Result


def invoke(app, *args):
    return app.test_cli_runner().invoke(cli, list(args))


def test_status(app, world):
    result = invoke(app, "status")
    assert "Database: Connected" in result.output
    assert "Participants: 2" in result.output


def test_round_and_fixture_commands(app, world):
    result = invoke(app, "round", "create", "SR26", "2026", "2")
    assert "Created round 2026 R2" in result.output

    result = invoke(app, "round", "create", "SR26", "2026", "2")
    assert "already exists" in result.output

    result = invoke(
        app, "fixture", "add", str(world.round_id), "4", "HUR", "BLU",
        "--kickoff", "2026-03-07T19:05:00+13:00",
    )
    assert "Added HUR v BLU" in result.output

    result = invoke(app, "fixture", "add", str(world.round_id), "5", "HUR", "HUR")
    assert "must be different" in result.output


def test_result_odds_and_paperbets_commands(app, world, make_pick):
    make_pick(world.acme_id, world.started_fixture_id, "CHI", 13)

    result = invoke(
        app, "odds", "set", str(world.started_fixture_id),
        "--draw", "26", "--home-1-12", "2.5", "--home-13-plus", "4",
        "--away-1-12", "3", "--away-13-plus", "6.5",
    )
    assert "Odds saved" in result.output

    result = invoke(app, "paperbets", "sync")
    assert "1 bets" in result.output

    result = invoke(app, "result", "set", str(world.started_fixture_id), "CHI", "--margin", "13+")
    assert "Result: CHI 13+" in result.output

    result = invoke(app, "leaderboard", "show")
    assert "Acme Tippers" in result.output.splitlines()[0]
    assert "8" in result.output.splitlines()[0]

    with app.app_context():
        assert MatchOdds.query.count() == 1
        assert PaperBet.query.one().outcome == "home_13_plus"
        assert Result.query.count() == 1


def test_leaderboard_unknown_league(app, world):
    result = invoke(app, "leaderboard", "show", "--league", "NOPE")
    assert "League NOPE not found" in result.output
