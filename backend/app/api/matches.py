import logging
from typing import List, Optional, Union

from fastapi import APIRouter, Depends, Header, HTTPException, status
from sqlalchemy.orm import Session
from pydantic import StrictFloat, StrictInt
from datetime import datetime
from app.api.base import CamelModel
from app.api.predictions import PredictionResponse
from app.core.clock import Clock, get_clock
from app.core.config import settings
from app.core.database import get_db
from app.models.match import MatchStatus
from app.services.match_registry import Fixture, MatchRegistry
from app.services.predictions import PredictionStore

logger = logging.getLogger(__name__)

router = APIRouter()

class MatchCreate(CamelModel):
    external_id: str
    home_team: str
    away_team: str
    competition: str
    kickoff: datetime

class MatchImportRequest(CamelModel):
    matches: List[MatchCreate]

class ResultRequest(CamelModel):
    home_goals: Union[StrictInt, StrictFloat]
    away_goals: Union[StrictInt, StrictFloat]

class MatchResponse(CamelModel):
    id: int
    external_id: str
    home_team: str
    away_team: str
    competition: str
    kickoff: datetime
    status: MatchStatus

class MatchDetailResponse(MatchResponse):
    home_goals: Optional[int] = None
    away_goals: Optional[int] = None
    created_at: Optional[datetime] = None

class MatchImportResponse(CamelModel):
    imported: int
    skipped: int
    matches: List[MatchDetailResponse]

def require_feed_key(x_feed_key: Optional[str] = Header(None)):
    """Guard for result-feed endpoints; open when RESULT_FEED_KEY is unset."""
    if settings.RESULT_FEED_KEY and x_feed_key != settings.RESULT_FEED_KEY:
        logger.warning("Rejected result feed call with bad key")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid feed key",
        )

@router.post("/import", response_model=MatchImportResponse, dependencies=[Depends(require_feed_key)])
async def import_matches(
    request: MatchImportRequest,
    db: Session = Depends(get_db)
):
    """Import fixtures; already-known external ids are skipped"""
    fixtures = [
        Fixture(
            external_id=m.external_id,
            home_team=m.home_team,
            away_team=m.away_team,
            competition=m.competition,
            kickoff=m.kickoff,
        )
        for m in request.matches
    ]
    created, skipped = MatchRegistry(db).import_fixtures(fixtures)
    return MatchImportResponse(
        imported=len(created),
        skipped=skipped,
        matches=[MatchDetailResponse.model_validate(m) for m in created],
    )

@router.get("", response_model=List[MatchDetailResponse])
async def get_matches(
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db)
):
    """Get list of matches, with results where finished"""
    return MatchRegistry(db).list_matches(skip=skip, limit=limit)

@router.get("/upcoming", response_model=List[MatchResponse])
async def get_upcoming_matches(db: Session = Depends(get_db)):
    """Scheduled matches, soonest kickoff first"""
    return MatchRegistry(db).get_upcoming()

@router.get("/{match_id}", response_model=MatchDetailResponse)
async def get_match(
    match_id: int,
    db: Session = Depends(get_db)
):
    return MatchRegistry(db).get_by_id(match_id)

@router.post("/{match_id}/start", response_model=MatchDetailResponse, dependencies=[Depends(require_feed_key)])
async def start_match(
    match_id: int,
    db: Session = Depends(get_db)
):
    """Mark a scheduled match as live"""
    return MatchRegistry(db).start_match(match_id)

@router.put("/{match_id}/result", response_model=MatchDetailResponse, dependencies=[Depends(require_feed_key)])
async def record_result(
    match_id: int,
    request: ResultRequest,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock)
):
    """
    Record the final score of a live match.

    Every prediction on the match is scored in the same transaction.
    """
    return MatchRegistry(db, clock=clock).record_result(match_id, request.home_goals, request.away_goals)

@router.get("/{match_id}/predictions", response_model=List[PredictionResponse])
async def get_match_predictions(
    match_id: int,
    db: Session = Depends(get_db)
):
    MatchRegistry(db).get_by_id(match_id)
    return PredictionStore(db).get_all_for_match(match_id)

@router.get("/{match_id}/predictions/{user_id}", response_model=PredictionResponse)
async def get_user_prediction(
    match_id: int,
    user_id: int,
    db: Session = Depends(get_db)
):
    return PredictionStore(db).get_for_user(user_id, match_id)
