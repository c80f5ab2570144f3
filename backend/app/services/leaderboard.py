"""
Leaderboard standings.

Standings are a pure aggregation over stored predictions, recomputed on every
read. Pending (unscored) predictions count towards ``total_predictions`` but
add no points.
"""
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy.orm import Session

from app.models.prediction import Prediction
from app.models.user import User


@dataclass
class LeaderboardEntry:
    user_id: int
    username: str
    total_points: int = 0
    correct_predictions: int = 0
    total_predictions: int = 0
    rank: int = 0

    @property
    def success_rate(self) -> float:
        if self.total_predictions == 0:
            return 0.0
        return self.correct_predictions / self.total_predictions * 100


# (user_id, username, points or None when pending)
PredictionRow = Tuple[int, str, Optional[int]]


def rank_standings(rows: Iterable[PredictionRow]) -> List[LeaderboardEntry]:
    """
    Aggregate prediction rows into ranked entries.

    Sorted by points descending, then user id ascending. Equal points share a
    rank and the next distinct total takes its 1-based position, so 9, 9, 6
    ranks as 1, 1, 3.
    """
    entries: Dict[int, LeaderboardEntry] = {}
    for user_id, username, points in rows:
        entry = entries.get(user_id)
        if entry is None:
            entry = entries[user_id] = LeaderboardEntry(user_id=user_id, username=username)
        entry.total_predictions += 1
        if points is not None:
            entry.total_points += points
            if points > 0:
                entry.correct_predictions += 1

    standings = sorted(entries.values(), key=lambda e: (-e.total_points, e.user_id))

    previous_points = None
    for position, entry in enumerate(standings, start=1):
        if entry.total_points != previous_points:
            entry.rank = position
            previous_points = entry.total_points
        else:
            entry.rank = standings[position - 2].rank
    return standings


class LeaderboardAggregator:
    def __init__(self, db: Session):
        self.db = db

    def _rows(self) -> List[PredictionRow]:
        # One statement, so a match is seen either fully scored or fully pending
        return (
            self.db.query(Prediction.user_id, User.username, Prediction.points)
            .join(User, User.id == Prediction.user_id)
            .all()
        )

    def compute_standings(self) -> List[LeaderboardEntry]:
        return rank_standings(self._rows())

    def standing_for(self, user_id: int, username: str = "") -> LeaderboardEntry:
        for entry in self.compute_standings():
            if entry.user_id == user_id:
                return entry
        return LeaderboardEntry(user_id=user_id, username=username)
