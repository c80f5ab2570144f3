"""Match fixtures and their lifecycle: scheduled -> live -> finished."""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Tuple

from sqlalchemy.orm import Session

from app.core.clock import Clock, ensure_utc, utcnow
from app.core.config import settings
from app.core.errors import InvalidResult, InvalidState, NotFound
from app.models.match import Match, MatchStatus
from app.services.scoring import ScoringEngine

logger = logging.getLogger(__name__)


@dataclass
class Fixture:
    external_id: str
    home_team: str
    away_team: str
    competition: str
    kickoff: datetime


def _check_goals(value, field: str) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidResult(f"{field} must be an integer", field=field)
    if value < 0:
        raise InvalidResult(f"{field} must not be negative", field=field)
    if value > settings.MAX_GOALS:
        raise InvalidResult(f"{field} must be at most {settings.MAX_GOALS}", field=field)


class MatchRegistry:
    def __init__(self, db: Session, clock: Clock = utcnow):
        self.db = db
        self.clock = clock

    def get_upcoming(self) -> List[Match]:
        return (
            self.db.query(Match)
            .filter(Match.status == MatchStatus.SCHEDULED)
            .order_by(Match.kickoff, Match.id)
            .all()
        )

    def list_matches(self, skip: int = 0, limit: int = 100) -> List[Match]:
        return (
            self.db.query(Match)
            .order_by(Match.kickoff, Match.id)
            .offset(skip)
            .limit(limit)
            .all()
        )

    def get_by_id(self, match_id: int) -> Match:
        match = self.db.query(Match).filter(Match.id == match_id).first()
        if match is None:
            raise NotFound(f"Match {match_id} not found")
        return match

    def import_fixtures(self, fixtures: Iterable[Fixture]) -> Tuple[List[Match], int]:
        """
        Create scheduled matches from fixtures.

        Fixtures whose external id is already known are skipped, so the same
        file can be imported repeatedly. Returns (created matches, skipped count).
        """
        created: List[Match] = []
        skipped = 0
        seen = set()
        try:
            for fixture in fixtures:
                existing = self.db.query(Match).filter(Match.external_id == fixture.external_id).first()
                if existing is not None or fixture.external_id in seen:
                    skipped += 1
                    continue
                match = Match(
                    external_id=fixture.external_id,
                    home_team=fixture.home_team,
                    away_team=fixture.away_team,
                    competition=fixture.competition,
                    kickoff=ensure_utc(fixture.kickoff),
                    status=MatchStatus.SCHEDULED,
                )
                self.db.add(match)
                created.append(match)
                seen.add(fixture.external_id)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        for match in created:
            self.db.refresh(match)
        logger.info("Imported %d fixtures, skipped %d", len(created), skipped)
        return created, skipped

    def _lock(self, match_id: int) -> Match:
        # Row lock on backends that support it; serializes status transitions
        match = self.db.query(Match).filter(Match.id == match_id).with_for_update().first()
        if match is None:
            raise NotFound(f"Match {match_id} not found")
        return match

    def start_match(self, match_id: int) -> Match:
        try:
            match = self._lock(match_id)
            if match.status == MatchStatus.SCHEDULED:
                match.status = MatchStatus.LIVE
            elif match.status == MatchStatus.LIVE:
                raise InvalidState(f"Match {match_id} is already live")
            elif match.status == MatchStatus.FINISHED:
                raise InvalidState(f"Match {match_id} is already finished")
            else:
                raise InvalidState(f"Match {match_id} has unknown status {match.status!r}")
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(match)
        logger.info("Match %s is live", match_id)
        return match

    def record_result(self, match_id: int, home_goals: int, away_goals: int) -> Match:
        """
        Finish a live match and score every prediction on it.

        Status, result and points are committed together; if scoring fails
        nothing is written.
        """
        _check_goals(home_goals, "homeGoals")
        _check_goals(away_goals, "awayGoals")

        try:
            match = self._lock(match_id)
            if match.status == MatchStatus.SCHEDULED:
                raise InvalidState(f"Match {match_id} has not kicked off yet")
            elif match.status == MatchStatus.FINISHED:
                raise InvalidState(f"Match {match_id} already has a result")
            elif match.status != MatchStatus.LIVE:
                raise InvalidState(f"Match {match_id} has unknown status {match.status!r}")

            match.status = MatchStatus.FINISHED
            match.home_goals = home_goals
            match.away_goals = away_goals
            self.db.flush()

            scored = ScoringEngine(self.db, clock=self.clock).score_match(match)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(match)
        logger.info(
            "Recorded result %s-%s for match %s, %d predictions scored",
            home_goals, away_goals, match_id, len(scored),
        )
        return match
