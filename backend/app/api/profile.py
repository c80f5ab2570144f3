import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from datetime import datetime
from app.api.auth import get_current_user
from app.api.base import CamelModel, format_score
from app.core.config import settings
from app.core.database import get_db
from app.models.user import User
from app.services.leaderboard import LeaderboardAggregator
from app.services.predictions import PredictionStore

logger = logging.getLogger(__name__)

router = APIRouter()

class ProfileStats(CamelModel):
    total_points: int
    correct_predictions: int
    total_predictions: int
    current_rank: int

class RecentPrediction(CamelModel):
    match_id: int
    home_team: str
    away_team: str
    prediction: str
    result: Optional[str] = None
    points: Optional[int] = None

class ProfileResponse(CamelModel):
    id: int
    username: str
    email: str
    join_date: Optional[datetime] = None
    stats: ProfileStats
    recent_predictions: List[RecentPrediction] = []

class ProfileUpdate(CamelModel):
    username: Optional[str] = None
    email: Optional[str] = None

def _build_profile(db: Session, user: User) -> ProfileResponse:
    standing = LeaderboardAggregator(db).standing_for(user.id, user.username)
    recent = PredictionStore(db).list_for_user(user.id, limit=settings.RECENT_PREDICTIONS_LIMIT)
    return ProfileResponse(
        id=user.id,
        username=user.username,
        email=user.email,
        join_date=user.created_at,
        stats=ProfileStats(
            total_points=standing.total_points,
            correct_predictions=standing.correct_predictions,
            total_predictions=standing.total_predictions,
            current_rank=standing.rank,
        ),
        recent_predictions=[
            RecentPrediction(
                match_id=p.match_id,
                home_team=p.match.home_team,
                away_team=p.match.away_team,
                prediction=format_score(p.home_goals, p.away_goals),
                result=format_score(p.match.home_goals, p.match.away_goals),
                points=p.points,
            )
            for p in recent
        ],
    )

@router.get("", response_model=ProfileResponse)
async def get_profile(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Profile with leaderboard stats and the most recent predictions"""
    return _build_profile(db, current_user)

@router.put("", response_model=ProfileResponse)
async def update_profile(
    payload: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    if payload.username is not None:
        username = payload.username.strip()
        if not username:
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="Username must not be empty")
        current_user.username = username
    if payload.email is not None:
        current_user.email = payload.email.strip().lower()

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Username or email already registered"
        )
    db.refresh(current_user)
    logger.info("Updated profile for user %s", current_user.id)
    return _build_profile(db, current_user)
