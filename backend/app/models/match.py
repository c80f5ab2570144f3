import enum

from sqlalchemy import Column, Integer, String, DateTime, Enum
from sqlalchemy.sql import func
from app.core.database import Base

class MatchStatus(str, enum.Enum):
    SCHEDULED = "scheduled"
    LIVE = "live"
    FINISHED = "finished"

class Match(Base):
    __tablename__ = "matches"

    id = Column(Integer, primary_key=True, index=True)
    external_id = Column(String, unique=True, index=True, nullable=False)
    home_team = Column(String, nullable=False)
    away_team = Column(String, nullable=False)
    competition = Column(String, nullable=False)
    kickoff = Column(DateTime(timezone=True), nullable=False, index=True)
    status = Column(
        Enum(MatchStatus, values_callable=lambda e: [m.value for m in e], name="match_status"),
        nullable=False,
        default=MatchStatus.SCHEDULED,
    )
    # Final result, only set once status is FINISHED
    home_goals = Column(Integer, nullable=True)
    away_goals = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    @property
    def has_result(self) -> bool:
        return self.home_goals is not None and self.away_goals is not None
