from typing import List, Optional, Union

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from pydantic import StrictFloat, StrictInt
from datetime import datetime
from app.api.base import CamelModel
from app.core.clock import Clock, get_clock
from app.core.database import get_db
from app.services.predictions import PredictionStore

router = APIRouter()

class PredictionCreate(CamelModel):
    user_id: StrictInt
    match_id: StrictInt
    # Floats are accepted here so the store can reject them with a field name
    home_goals: Union[StrictInt, StrictFloat]
    away_goals: Union[StrictInt, StrictFloat]

class PredictionResponse(CamelModel):
    id: int
    user_id: int
    match_id: int
    home_goals: int
    away_goals: int
    created_at: datetime
    points: Optional[int] = None
    scored_at: Optional[datetime] = None

@router.post("", response_model=PredictionResponse, status_code=status.HTTP_201_CREATED)
async def submit_prediction(
    request: PredictionCreate,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock)
):
    """
    Submit a score prediction.

    Predictions are write-once and close at kickoff.
    """
    return PredictionStore(db, clock=clock).submit(
        request.user_id,
        request.match_id,
        request.home_goals,
        request.away_goals,
    )

users_router = APIRouter()

@users_router.get("/{user_id}/predictions", response_model=List[PredictionResponse])
async def get_user_predictions(
    user_id: int,
    db: Session = Depends(get_db)
):
    """All predictions by a user, newest first"""
    return PredictionStore(db).list_for_user(user_id)
