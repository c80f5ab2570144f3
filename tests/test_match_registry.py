from datetime import timedelta

import pytest

import app.services.scoring as scoring
from app.core.errors import InvalidResult, InvalidState, NotFound
from app.models.match import MatchStatus
from app.services.match_registry import Fixture, MatchRegistry
from app.services.predictions import PredictionStore


def _fixture(external_id, kickoff, home="Arsenal", away="Chelsea"):
    return Fixture(
        external_id=external_id,
        home_team=home,
        away_team=away,
        competition="Premier League",
        kickoff=kickoff,
    )


def test_import_fixtures_skips_known_ids(db, clock):
    now = clock()
    registry = MatchRegistry(db)
    created, skipped = registry.import_fixtures([
        _fixture("a", now + timedelta(days=1)),
        _fixture("b", now + timedelta(days=2)),
        _fixture("a", now + timedelta(days=3)),
    ])
    assert [m.external_id for m in created] == ["a", "b"]
    assert skipped == 1
    assert all(m.status == MatchStatus.SCHEDULED for m in created)

    created, skipped = registry.import_fixtures([_fixture("b", now), _fixture("c", now)])
    assert [m.external_id for m in created] == ["c"]
    assert skipped == 1
    assert len(registry.list_matches()) == 3


def test_get_upcoming_orders_by_kickoff_and_excludes_started(db, make_match, clock):
    now = clock()
    late = make_match(kickoff=now + timedelta(days=3))
    soon = make_match(kickoff=now + timedelta(hours=2))
    make_match(kickoff=now - timedelta(hours=1), status=MatchStatus.LIVE)
    make_match(kickoff=now - timedelta(days=1), status=MatchStatus.FINISHED)

    upcoming = MatchRegistry(db).get_upcoming()
    assert [m.id for m in upcoming] == [soon.id, late.id]


def test_get_by_id(db, make_match):
    match = make_match(home_team="Leeds United")
    registry = MatchRegistry(db)
    assert registry.get_by_id(match.id).home_team == "Leeds United"
    with pytest.raises(NotFound):
        registry.get_by_id(404)


def test_start_match_transitions(db, make_match):
    registry = MatchRegistry(db)
    match = make_match()

    assert registry.start_match(match.id).status == MatchStatus.LIVE
    with pytest.raises(InvalidState):
        registry.start_match(match.id)
    with pytest.raises(NotFound):
        registry.start_match(404)


def test_record_result_requires_live_match(db, make_match):
    registry = MatchRegistry(db)
    match = make_match()

    with pytest.raises(InvalidState):
        registry.record_result(match.id, 1, 0)

    registry.start_match(match.id)
    finished = registry.record_result(match.id, 1, 0)
    assert finished.status == MatchStatus.FINISHED
    assert (finished.home_goals, finished.away_goals) == (1, 0)

    with pytest.raises(InvalidState):
        registry.record_result(match.id, 2, 0)
    assert registry.get_by_id(match.id).home_goals == 1


def test_record_result_unknown_match(db):
    with pytest.raises(NotFound):
        MatchRegistry(db).record_result(404, 1, 0)


@pytest.mark.parametrize("home, away", [(-1, 0), (0, 2.5), (10**20, 0), (0, 100)])
def test_record_result_rejects_bad_scores(db, make_match, home, away):
    match = make_match(status=MatchStatus.LIVE)
    with pytest.raises(InvalidResult):
        MatchRegistry(db).record_result(match.id, home, away)
    assert MatchRegistry(db).get_by_id(match.id).status == MatchStatus.LIVE


def test_record_result_scores_predictions(db, make_user, make_match, clock):
    store = PredictionStore(db, clock=clock)
    alice, bob = make_user("Alice"), make_user("Bob")
    match = make_match()
    store.submit(alice.id, match.id, 2, 1)
    store.submit(bob.id, match.id, 3, 1)

    clock.advance(days=2)
    registry = MatchRegistry(db, clock=clock)
    registry.start_match(match.id)
    registry.record_result(match.id, 2, 1)

    assert store.get_for_user(alice.id, match.id).points == 3
    assert store.get_for_user(bob.id, match.id).points == 1


def test_failed_scoring_rolls_back_result(db, make_user, make_match, clock, monkeypatch):
    store = PredictionStore(db, clock=clock)
    users = [make_user(name) for name in ("Alice", "Bob", "Carol")]
    match = make_match()
    for user in users:
        store.submit(user.id, match.id, 1, 0)

    clock.advance(days=2)
    registry = MatchRegistry(db, clock=clock)
    registry.start_match(match.id)

    calls = {"n": 0}
    real_calculate_points = scoring.calculate_points

    def flaky_calculate_points(*args, **kwargs):
        calls["n"] += 1
        if calls["n"] == 2:
            raise RuntimeError("scoring blew up")
        return real_calculate_points(*args, **kwargs)

    monkeypatch.setattr(scoring, "calculate_points", flaky_calculate_points)

    with pytest.raises(RuntimeError):
        registry.record_result(match.id, 1, 0)

    reloaded = registry.get_by_id(match.id)
    assert reloaded.status == MatchStatus.LIVE
    assert reloaded.home_goals is None
    assert all(p.points is None for p in store.get_all_for_match(match.id))

    monkeypatch.setattr(scoring, "calculate_points", real_calculate_points)
    registry.record_result(match.id, 1, 0)
    assert [p.points for p in store.get_all_for_match(match.id)] == [3, 3, 3]
