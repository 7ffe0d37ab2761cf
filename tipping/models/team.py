from datetime import datetime, timezone

from tipping import db


class Team(db.Model):
    __tablename__ = "teams"

    id = db.Column(db.Integer, primary_key=True)

    # Team identification
    code = db.Column(db.String(10), unique=True, nullable=False, index=True)
    name = db.Column(db.String(100), nullable=False)

    # Display
    sort_order = db.Column(db.Integer, default=0, nullable=False)
    logo_path = db.Column(db.String(500))

    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        db.CheckConstraint("code != 'DRAW'", name="team_code_not_draw"),
    )

    def __repr__(self):
        return f"<Team {self.code}>"

    @staticmethod
    def get_all():
        """Get all teams in display order"""
        return Team.query.order_by(Team.sort_order, Team.name).all()

    def to_dict(self):
        return {
            "code": self.code,
            "name": self.name,
            "sort_order": self.sort_order,
            "logo_path": self.logo_path,
        }
