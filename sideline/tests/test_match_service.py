"""
Tests for match service: ordering, events, per-match player stats and upsert.
"""
from __future__ import annotations

from pathlib import Path

import pytest

import sys
sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent))

from sideline.persistence.db import get_connection, init_db, set_db_path
from sideline.persistence.repositories import ChatRepository
from sideline.services.match_service import MatchService
from sideline.services.player_service import PlayerService
from sideline.services.team_service import TeamService


@pytest.fixture
def db_conn(tmp_path):
    db_path = tmp_path / "matches_test.db"
    set_db_path(db_path)
    init_db(db_path=db_path)
    conn = get_connection()
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture
def match_service():
    return MatchService()


@pytest.fixture
def team_and_player(db_conn):
    TeamService().create_team(db_conn, "FC Lions")
    TeamService().create_team(db_conn, "Rivals")
    player_id = PlayerService().create_player(db_conn, "fc-lions", "Ana", position="ST")
    return "fc-lions", player_id


def _match(service, conn, team_id, date, **extra):
    return service.create_match(conn, {"team_id": team_id, "opponent_name": "Opp", "date": date, **extra})


def test_create_match_defaults(db_conn, match_service, team_and_player):
    team_id, _ = team_and_player
    match_id = _match(match_service, db_conn, team_id, "2024-03-01", possession=55.5)
    match = match_service.get_match(db_conn, match_id)
    assert match.status == "scheduled"
    assert match.team_score == 0
    assert match.possession == 55.5
    assert match.shots is None


def test_list_matches_most_recent_first(db_conn, match_service, team_and_player):
    team_id, _ = team_and_player
    _match(match_service, db_conn, team_id, "2024-01-10")
    _match(match_service, db_conn, team_id, "2024-03-10")
    _match(match_service, db_conn, "rivals", "2024-02-10")
    assert [m.date for m in match_service.list_matches(db_conn)] == ["2024-03-10", "2024-02-10", "2024-01-10"]
    assert [m.date for m in match_service.list_team_matches(db_conn, team_id)] == ["2024-03-10", "2024-01-10"]


def test_create_match_for_unknown_team_returns_none(db_conn, match_service):
    assert _match(match_service, db_conn, "ghost", "2024-01-01") is None


def test_update_match(db_conn, match_service, team_and_player):
    team_id, _ = team_and_player
    match_id = _match(match_service, db_conn, team_id, "2024-03-01")
    assert match_service.update_match(db_conn, match_id, {"team_score": 2, "status": "completed"})
    match = match_service.get_match(db_conn, match_id)
    assert (match.team_score, match.status) == (2, "completed")
    assert match_service.update_match(db_conn, match_id, {"team_id": "rivals"}) is False


def test_events_roundtrip(db_conn, match_service, team_and_player):
    team_id, player_id = team_and_player
    match_id = _match(match_service, db_conn, team_id, "2024-03-01")
    goal = match_service.create_match_event(
        db_conn, {"match_id": match_id, "player_id": player_id, "event_type": "goal", "minute": 12}
    )
    match_service.create_match_event(
        db_conn, {"match_id": match_id, "player_id": player_id, "event_type": "yellow_card"}
    )
    events = match_service.list_match_events(db_conn, match_id)
    assert [e.event_type for e in events] == ["goal", "yellow_card"]
    assert events[0].minute == 12
    assert match_service.delete_match_event(db_conn, goal)
    assert match_service.delete_match_event(db_conn, goal) is False


def test_upsert_player_stats_inserts_then_updates_in_place(db_conn, match_service, team_and_player):
    team_id, player_id = team_and_player
    match_id = _match(match_service, db_conn, team_id, "2024-03-01")
    first = match_service.upsert_player_stats(db_conn, match_id, player_id, {"goals": 1, "assists": 2})
    second = match_service.upsert_player_stats(db_conn, match_id, player_id, {"goals": 3, "assists": None})
    assert first is not None
    assert second == first
    records = match_service.player_stats_for_match(db_conn, match_id)
    assert len(records) == 1
    assert records[0].goals == 3
    assert records[0].assists == 0
    assert records[0].minutes_played == 0


def test_upsert_player_stats_missing_ids(db_conn, match_service, team_and_player):
    team_id, player_id = team_and_player
    match_id = _match(match_service, db_conn, team_id, "2024-03-01")
    assert match_service.upsert_player_stats(db_conn, "", player_id, {"goals": 1}) is None
    assert match_service.upsert_player_stats(db_conn, match_id, "", {"goals": 1}) is None
    assert match_service.upsert_player_stats(db_conn, "no-such-match", player_id, {"goals": 1}) is None


def test_create_player_stats_twice_for_same_match_fails(db_conn, match_service, team_and_player):
    team_id, player_id = team_and_player
    match_id = _match(match_service, db_conn, team_id, "2024-03-01")
    data = {"match_id": match_id, "player_id": player_id, "goals": 1}
    assert match_service.create_player_stats(db_conn, data) is not None
    assert match_service.create_player_stats(db_conn, data) is None


def test_update_player_stats(db_conn, match_service, team_and_player):
    team_id, player_id = team_and_player
    match_id = _match(match_service, db_conn, team_id, "2024-03-01")
    stats_id = match_service.create_player_stats(db_conn, {"match_id": match_id, "player_id": player_id})
    assert match_service.update_player_stats(db_conn, stats_id, {"tackles": 4})
    assert match_service.player_stats_for_player(db_conn, player_id)[0].tackles == 4
    assert match_service.update_player_stats(db_conn, stats_id, {}) is False


def test_player_stats_for_player_newest_first(db_conn, match_service, team_and_player):
    team_id, player_id = team_and_player
    older = _match(match_service, db_conn, team_id, "2024-03-01")
    newer = _match(match_service, db_conn, team_id, "2024-03-08")
    match_service.upsert_player_stats(db_conn, older, player_id, {"goals": 1})
    match_service.upsert_player_stats(db_conn, newer, player_id, {"goals": 2})
    assert [r.match_id for r in match_service.player_stats_for_player(db_conn, player_id)] == [newer, older]


def test_delete_match_cascades(db_conn, match_service, team_and_player):
    team_id, player_id = team_and_player
    match_id = _match(match_service, db_conn, team_id, "2024-03-01")
    match_service.create_match_event(
        db_conn, {"match_id": match_id, "player_id": player_id, "event_type": "assist"}
    )
    match_service.upsert_player_stats(db_conn, match_id, player_id, {"goals": 1})
    ChatRepository().create(db_conn, match_id, "what a game", author="fan")
    assert match_service.delete_match(db_conn, match_id)
    assert match_service.get_match(db_conn, match_id) is None
    assert match_service.list_match_events(db_conn, match_id) == []
    assert match_service.player_stats_for_match(db_conn, match_id) == []
    assert ChatRepository().list_by_match(db_conn, match_id) == []
    assert match_service.delete_match(db_conn, match_id) is False
