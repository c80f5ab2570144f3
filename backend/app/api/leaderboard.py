from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.api.base import CamelModel
from app.core.database import get_db
from app.services.leaderboard import LeaderboardAggregator

router = APIRouter()

class LeaderboardEntryResponse(CamelModel):
    rank: int
    user_id: int
    username: str
    total_points: int
    correct_predictions: int
    total_predictions: int
    success_rate: float

@router.get("", response_model=List[LeaderboardEntryResponse])
async def get_leaderboard(db: Session = Depends(get_db)):
    """Ranked standings, recomputed from stored predictions on every call"""
    return LeaderboardAggregator(db).compute_standings()
