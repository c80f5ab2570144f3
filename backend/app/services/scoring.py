"""
Scoring engine for match predictions.

Points per prediction once a match is finished:
    exact score                         -> POINTS_EXACT_SCORE (3)
    correct outcome (home/draw/away)    -> POINTS_CORRECT_OUTCOME (1)
    anything else                       -> 0

Standings are never stored; see app.services.leaderboard.
"""
import enum
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from app.core.clock import Clock, utcnow
from app.core.config import settings
from app.core.errors import IncompleteMatch
from app.models.match import Match
from app.models.prediction import Prediction

logger = logging.getLogger(__name__)


class Outcome(str, enum.Enum):
    HOME_WIN = "home_win"
    DRAW = "draw"
    AWAY_WIN = "away_win"


def outcome_of(home_goals: int, away_goals: int) -> Outcome:
    if home_goals > away_goals:
        return Outcome.HOME_WIN
    if away_goals > home_goals:
        return Outcome.AWAY_WIN
    return Outcome.DRAW


def calculate_points(
    predicted_home: int,
    predicted_away: int,
    actual_home: int,
    actual_away: int,
    exact_points: Optional[int] = None,
    outcome_points: Optional[int] = None,
) -> int:
    """Points for a single prediction against a final score."""
    if exact_points is None:
        exact_points = settings.POINTS_EXACT_SCORE
    if outcome_points is None:
        outcome_points = settings.POINTS_CORRECT_OUTCOME

    if predicted_home == actual_home and predicted_away == actual_away:
        return exact_points
    if outcome_of(predicted_home, predicted_away) == outcome_of(actual_home, actual_away):
        return outcome_points
    return 0


class ScoringEngine:
    """
    Writes points onto every prediction of a finished match.

    The engine only flushes; committing is left to the caller so that the
    result and all points land in the same transaction.
    """

    def __init__(self, db: Session, clock: Clock = utcnow):
        self.db = db
        self.clock = clock

    def score_match(self, match: Match) -> List[Prediction]:
        """
        Score all predictions for ``match``.

        Returns the predictions scored by this call; an already-scored match
        returns an empty list and leaves existing points untouched.

        Raises:
            IncompleteMatch: the match has no final result yet
        """
        if not match.has_result:
            raise IncompleteMatch(f"Match {match.id} has no final result to score against")

        pending = (
            self.db.query(Prediction)
            .filter(Prediction.match_id == match.id, Prediction.points.is_(None))
            .order_by(Prediction.id)
            .all()
        )
        if not pending:
            logger.info("Match %s already scored, nothing to do", match.id)
            return []

        scored_at = self.clock()
        for prediction in pending:
            prediction.points = calculate_points(
                prediction.home_goals,
                prediction.away_goals,
                match.home_goals,
                match.away_goals,
            )
            prediction.scored_at = scored_at

        self.db.flush()
        logger.info(
            "Scored %d predictions for match %s (%s-%s)",
            len(pending), match.id, match.home_goals, match.away_goals,
        )
        return pending
