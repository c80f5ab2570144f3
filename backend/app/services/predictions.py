"""
Prediction store.

Predictions are write-once: one per (user, match), accepted only before
kickoff, never edited afterwards. Uniqueness is enforced by the
``uq_prediction_user_match`` constraint, so concurrent double submits resolve
to exactly one stored row and one DuplicatePrediction.
"""
import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from app.core.clock import Clock, ensure_utc, utcnow
from app.core.config import settings
from app.core.errors import DuplicatePrediction, InvalidPrediction, MatchLocked, NotFound
from app.models.match import Match, MatchStatus
from app.models.prediction import Prediction
from app.models.user import User

logger = logging.getLogger(__name__)


def validate_goals(value, field: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidPrediction(f"{field} must be an integer", field=field)
    if value < 0:
        raise InvalidPrediction(f"{field} must not be negative", field=field)
    if value > settings.MAX_GOALS:
        raise InvalidPrediction(f"{field} must be at most {settings.MAX_GOALS}", field=field)
    return value


class PredictionStore:
    def __init__(self, db: Session, clock: Clock = utcnow):
        self.db = db
        self.clock = clock

    def submit(self, user_id: int, match_id: int, home_goals: int, away_goals: int) -> Prediction:
        """
        Store a new prediction.

        Raises:
            NotFound: unknown match or user
            MatchLocked: kickoff is at or before now, or the match has started
            InvalidPrediction: a goal value is negative, too large or not an integer
            DuplicatePrediction: the user already predicted this match
        """
        match = self.db.query(Match).filter(Match.id == match_id).first()
        if match is None:
            raise NotFound(f"Match {match_id} not found")
        if self.db.query(User.id).filter(User.id == user_id).first() is None:
            raise NotFound(f"User {user_id} not found")

        now = self.clock()
        # A match can be started early by the result feed
        if match.status != MatchStatus.SCHEDULED or ensure_utc(match.kickoff) <= now:
            logger.warning("Rejected prediction by user %s: match %s locked", user_id, match_id)
            raise MatchLocked(f"Predictions for match {match_id} closed at kickoff")

        validate_goals(home_goals, "homeGoals")
        validate_goals(away_goals, "awayGoals")

        prediction = Prediction(
            user_id=user_id,
            match_id=match_id,
            home_goals=home_goals,
            away_goals=away_goals,
            created_at=now,
        )
        self.db.add(prediction)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.warning("Rejected duplicate prediction by user %s for match %s", user_id, match_id)
            raise DuplicatePrediction(f"User {user_id} already has a prediction for match {match_id}")

        self.db.refresh(prediction)
        logger.info(
            "User %s predicted %s-%s for match %s",
            user_id, home_goals, away_goals, match_id,
        )
        return prediction

    def get_for_user(self, user_id: int, match_id: int) -> Prediction:
        prediction = (
            self.db.query(Prediction)
            .filter(Prediction.user_id == user_id, Prediction.match_id == match_id)
            .first()
        )
        if prediction is None:
            raise NotFound(f"No prediction by user {user_id} for match {match_id}")
        return prediction

    def get_all_for_match(self, match_id: int) -> List[Prediction]:
        return (
            self.db.query(Prediction)
            .filter(Prediction.match_id == match_id)
            .order_by(Prediction.id)
            .all()
        )

    def list_for_user(self, user_id: int, limit: Optional[int] = None) -> List[Prediction]:
        query = (
            self.db.query(Prediction)
            .options(joinedload(Prediction.match))
            .filter(Prediction.user_id == user_id)
            .order_by(Prediction.created_at.desc(), Prediction.id.desc())
        )
        if limit is not None:
            query = query.limit(limit)
        return query.all()
