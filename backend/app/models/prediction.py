from sqlalchemy import Column, Integer, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from app.core.database import Base
from app.models.match import Match
from app.models.user import User

class Prediction(Base):
    __tablename__ = "predictions"
    __table_args__ = (UniqueConstraint("user_id", "match_id", name="uq_prediction_user_match"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    match_id = Column(Integer, ForeignKey("matches.id"), nullable=False, index=True)
    home_goals = Column(Integer, nullable=False)
    away_goals = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)

    # Written only by the scoring engine once the match is finished
    points = Column(Integer, nullable=True)
    scored_at = Column(DateTime(timezone=True), nullable=True)

    match = relationship(Match, backref="predictions")
    user = relationship(User, backref="predictions")

    @property
    def is_scored(self) -> bool:
        return self.points is not None
