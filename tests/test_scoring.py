from datetime import timedelta

import pytest

from app.core.errors import IncompleteMatch
from app.models.match import MatchStatus
from app.services.match_registry import MatchRegistry
from app.services.predictions import PredictionStore
from app.services.scoring import Outcome, ScoringEngine, calculate_points, outcome_of


def test_outcome_of():
    assert outcome_of(2, 1) == Outcome.HOME_WIN
    assert outcome_of(1, 2) == Outcome.AWAY_WIN
    assert outcome_of(1, 1) == Outcome.DRAW
    assert outcome_of(0, 0) == Outcome.DRAW


@pytest.mark.parametrize(
    "predicted, expected",
    [
        ((2, 1), 3),  # exact score
        ((3, 1), 1),  # home win, wrong score
        ((1, 0), 1),
        ((1, 2), 0),  # away win predicted
        ((1, 1), 0),  # draw predicted
    ],
)
def test_calculate_points_against_two_one(predicted, expected):
    assert calculate_points(predicted[0], predicted[1], 2, 1) == expected


def test_calculate_points_draws():
    assert calculate_points(0, 0, 0, 0) == 3
    assert calculate_points(2, 2, 1, 1) == 1
    assert calculate_points(1, 0, 1, 1) == 0


def test_calculate_points_custom_values():
    assert calculate_points(2, 1, 2, 1, exact_points=5, outcome_points=2) == 5
    assert calculate_points(3, 1, 2, 1, exact_points=5, outcome_points=2) == 2


def test_score_match_without_result_raises(db, make_user, make_match, clock):
    user = make_user("Alice")
    match = make_match()
    PredictionStore(db, clock=clock).submit(user.id, match.id, 2, 1)

    with pytest.raises(IncompleteMatch):
        ScoringEngine(db, clock=clock).score_match(match)

    prediction = PredictionStore(db).get_for_user(user.id, match.id)
    assert prediction.points is None
    assert prediction.scored_at is None


def test_score_match_is_idempotent(db, make_user, make_match, clock):
    store = PredictionStore(db, clock=clock)
    alice, bob = make_user("Alice"), make_user("Bob")
    match = make_match()
    store.submit(alice.id, match.id, 2, 1)
    store.submit(bob.id, match.id, 0, 3)

    clock.advance(days=2)
    registry = MatchRegistry(db, clock=clock)
    registry.start_match(match.id)
    registry.record_result(match.id, 2, 1)

    first = {p.user_id: p.points for p in store.get_all_for_match(match.id)}
    assert first == {alice.id: 3, bob.id: 0}

    rescored = ScoringEngine(db, clock=clock).score_match(registry.get_by_id(match.id))
    db.commit()

    assert rescored == []
    second = {p.user_id: p.points for p in store.get_all_for_match(match.id)}
    assert second == first


def test_scoring_one_prediction_does_not_affect_another(db, make_user, make_match, clock):
    store = PredictionStore(db, clock=clock)
    users = [make_user(name) for name in ("Alice", "Bob", "Carol", "Dave")]
    match = make_match()
    for user, (h, a) in zip(users, [(2, 1), (3, 1), (1, 2), (1, 1)]):
        store.submit(user.id, match.id, h, a)

    clock.advance(days=2)
    registry = MatchRegistry(db, clock=clock)
    registry.start_match(match.id)
    finished = registry.record_result(match.id, 2, 1)

    assert finished.status == MatchStatus.FINISHED
    points = [store.get_for_user(u.id, match.id).points for u in users]
    assert points == [3, 1, 0, 0]
    for prediction in store.get_all_for_match(match.id):
        assert prediction.scored_at is not None


def test_match_without_predictions_scores_nothing(db, make_match, clock):
    match = make_match(kickoff=clock() - timedelta(hours=1), status=MatchStatus.LIVE)
    registry = MatchRegistry(db, clock=clock)
    finished = registry.record_result(match.id, 0, 0)
    assert finished.home_goals == 0
    assert ScoringEngine(db, clock=clock).score_match(finished) == []
