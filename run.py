from tipping import create_app, db
from tipping.models import Competition, Fixture, League, Participant, Pick, Result, Round

app = create_app()


@app.shell_context_processor
def make_shell_context():
    return {
        "db": db,
        "Competition": Competition,
        "League": League,
        "Participant": Participant,
        "Round": Round,
        "Fixture": Fixture,
        "Pick": Pick,
        "Result": Result,
    }


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=5000, debug=app.config.get("DEBUG", False))
