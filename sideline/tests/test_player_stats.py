"""
Tests for per-player stat aggregation and the player service.
"""
from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import pytest

import sys
sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent))

from sideline.models import PlayerStats, PlayerStatsRecord
from sideline.persistence.db import get_connection, init_db, set_db_path
from sideline.services.match_service import MatchService
from sideline.services.player_service import PlayerService, aggregate_player_stats
from sideline.services.team_service import TeamService

NOW = datetime(2024, 5, 1, tzinfo=timezone.utc)


def _rec(**stats) -> PlayerStatsRecord:
    return PlayerStatsRecord(
        id="s", player_id="p1", match_id="m", created_at=NOW, updated_at=NOW, **stats
    )


# ---------- Pure aggregation ----------


def test_aggregate_no_records_is_all_zero():
    stats = aggregate_player_stats([])
    assert stats == PlayerStats()
    assert stats.performance_data == [0, 0, 0, 0, 0]


def test_aggregate_sums_and_means():
    records = [
        _rec(goals=2, assists=1, saves=4, pass_completion=80.0, minutes_played=90),
        _rec(goals=0, assists=2, saves=2, pass_completion=70.0, minutes_played=45),
        _rec(goals=1, assists=0, saves=0, pass_completion=90.0, minutes_played=90),
    ]
    stats = aggregate_player_stats(records)
    assert stats.goals == 3
    assert stats.assists == 3
    assert stats.minutes_played == 225
    assert stats.pass_completion == pytest.approx(80.0)
    # saves / (saves + goals)
    assert stats.save_percentage == pytest.approx(6 / 9 * 100)


def test_aggregate_save_percentage_zero_without_saves():
    stats = aggregate_player_stats([_rec(goals=2, saves=0)])
    assert stats.save_percentage == 0


def test_performance_data_is_last_five_oldest_first():
    # newest first: goals 1..7
    records = [_rec(goals=g) for g in range(1, 8)]
    assert aggregate_player_stats(records).performance_data == [5, 4, 3, 2, 1]


def test_performance_data_left_padded():
    records = [_rec(goals=2), _rec(goals=0), _rec(goals=1)]
    assert aggregate_player_stats(records).performance_data == [0, 0, 1, 0, 2]


def test_player_stats_to_dict_is_camel_case():
    d = PlayerStats(goals=1, shots_on_target=2).to_dict()
    assert d["goals"] == 1
    assert d["shotsOnTarget"] == 2
    assert d["performanceData"] == [0, 0, 0, 0, 0]


# ---------- Service ----------


@pytest.fixture
def db_conn(tmp_path):
    db_path = tmp_path / "players_test.db"
    set_db_path(db_path)
    init_db(db_path=db_path)
    conn = get_connection()
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture
def player_service():
    return PlayerService()


@pytest.fixture
def squad(db_conn, player_service):
    """One team, two players, one match with stats for the striker only."""
    TeamService().create_team(db_conn, "FC Lions")
    striker = player_service.create_player(db_conn, "fc-lions", "Ana", position="ST", jersey_num="9")
    keeper = player_service.create_player(db_conn, "fc-lions", "Bo")
    match_service = MatchService()
    match_id = match_service.create_match(
        db_conn, {"team_id": "fc-lions", "opponent_name": "Rivals", "date": "2024-04-01"}
    )
    match_service.upsert_player_stats(db_conn, match_id, striker, {"goals": 2, "shots": 5})
    return striker, keeper, match_id


def test_create_player_on_unknown_team_returns_none(db_conn, player_service):
    assert player_service.create_player(db_conn, "ghost-team", "Nobody") is None


def test_list_players_with_stats_defaults(db_conn, player_service, squad):
    striker, keeper, _ = squad
    players = {p.id: p for p in player_service.list_players_with_stats(db_conn, "fc-lions")}
    assert players[striker].stats.goals == 2
    assert players[striker].jersey_num == "9"
    assert players[keeper].position == "Unknown"
    assert players[keeper].jersey_num == ""
    assert players[keeper].image_url == ""
    assert players[keeper].stats.goals == 0


def test_get_player_stats_none_without_records(db_conn, player_service, squad):
    striker, keeper, _ = squad
    assert player_service.get_player_stats(db_conn, keeper) is None
    assert player_service.get_player_stats(db_conn, striker).shots == 5


def test_aggregated_stats_includes_every_requested_id(db_conn, player_service, squad):
    striker, _, _ = squad
    result = player_service.aggregated_stats_for_players(db_conn, [striker, "ghost"])
    assert set(result) == {striker, "ghost"}
    assert result[striker].goals == 2
    assert result["ghost"] == PlayerStats()


def test_aggregated_stats_empty_input(db_conn, player_service):
    assert player_service.aggregated_stats_for_players(db_conn, []) == {}


def test_update_player(db_conn, player_service, squad):
    _, keeper, _ = squad
    assert player_service.update_player(db_conn, keeper, {"position": "GK"})
    assert player_service.get_player(db_conn, keeper).position == "GK"
    assert player_service.update_player(db_conn, keeper, {"unknown": 1}) is False


def test_delete_player_removes_stats(db_conn, player_service, squad):
    striker, _, match_id = squad
    assert player_service.delete_player(db_conn, striker)
    assert player_service.get_player(db_conn, striker) is None
    assert MatchService().player_stats_for_match(db_conn, match_id) == []
    assert player_service.delete_player(db_conn, striker) is False
