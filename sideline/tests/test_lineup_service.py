"""
Tests for lineup geometry (pure) and the persisted lineup service.
"""
from __future__ import annotations

import sqlite3
from pathlib import Path
from types import SimpleNamespace

import pytest

import sys
sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent))

from sideline.models import LineupPlayer
from sideline.persistence.db import get_connection, init_db, set_db_path
from sideline.services.errors import DuplicateLineupPlayerError, LineupFullError, PlayerNotInTeamError
from sideline.services.lineup_service import (
    MAX_LINEUP_PLAYERS,
    LineupService,
    clamp,
    default_field_position,
    formation,
    initial_positions,
)
from sideline.services.player_service import PlayerService
from sideline.services.team_service import TeamService


# ---------- Geometry ----------


def test_goalkeeper_always_centred():
    assert default_field_position("GK", 2, 3) == ("goalkeeper", 50.0, 85.0)


def test_line_spread_across_field():
    assert default_field_position("CB", 0, 4).x == 10
    assert default_field_position("LB", 3, 4).x == 90
    assert default_field_position("ST", 1, 2) == ("forward", 90, 25.0)


def test_lone_player_centred_and_unknown_is_midfield():
    assert default_field_position("cm", 0, 1) == ("midfielder", 50.0, 50.0)
    pos = default_field_position("XYZ", 1, 3)
    assert pos.line == "midfielder"
    assert pos.x == 50
    assert default_field_position(None, 0, 1).y == 50.0


def test_formation_counts_lines():
    positions = ["GK", "CB", "CB", "LB", "RB", "CM", "CM", "XX", "LW", "ST", "RW"]
    assert formation(positions) == "4-3-3"
    assert formation([]) == "0-0-0"


def test_initial_positions_spread_within_each_line():
    players = [
        SimpleNamespace(id="a", position="GK"),
        SimpleNamespace(id="b", position="CB"),
        SimpleNamespace(id="c", position="ST"),
        SimpleNamespace(id="d", position="CB"),
    ]
    placed = {p.player_id: (p.position_x, p.position_y) for p in initial_positions(players)}
    assert placed == {
        "a": (50.0, 85.0),
        "b": (10, 70.0),
        "c": (50.0, 25.0),
        "d": (90, 70.0),
    }


def test_clamp():
    assert clamp(-3) == 5
    assert clamp(120) == 95
    assert clamp(42.5) == 42.5


# ---------- Service ----------


@pytest.fixture
def db_conn(tmp_path):
    db_path = tmp_path / "lineup_test.db"
    set_db_path(db_path)
    init_db(db_path=db_path)
    conn = get_connection()
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture
def lineup_service():
    return LineupService()


@pytest.fixture
def roster(db_conn):
    """Twelve players on fc-lions, one on rivals."""
    TeamService().create_team(db_conn, "FC Lions")
    TeamService().create_team(db_conn, "Rivals")
    players = PlayerService()
    ids = [players.create_player(db_conn, "fc-lions", f"Player {i}", position="CM") for i in range(12)]
    outsider = players.create_player(db_conn, "rivals", "Outsider")
    return ids, outsider


def test_add_clamps_coordinates(db_conn, lineup_service, roster):
    ids, _ = roster
    assert lineup_service.add_player_to_lineup(db_conn, "fc-lions", ids[0], -10, 200)
    assert lineup_service.load_lineup(db_conn, "fc-lions") == [LineupPlayer(ids[0], 5, 95)]


def test_add_rejects_twelfth_player(db_conn, lineup_service, roster):
    ids, _ = roster
    for pid in ids[:MAX_LINEUP_PLAYERS]:
        assert lineup_service.add_player_to_lineup(db_conn, "fc-lions", pid, 50, 50)
    with pytest.raises(LineupFullError):
        lineup_service.add_player_to_lineup(db_conn, "fc-lions", ids[11], 50, 50)
    assert len(lineup_service.load_lineup(db_conn, "fc-lions")) == MAX_LINEUP_PLAYERS


def test_add_rejects_player_from_other_team(db_conn, lineup_service, roster):
    _, outsider = roster
    with pytest.raises(PlayerNotInTeamError):
        lineup_service.add_player_to_lineup(db_conn, "fc-lions", outsider, 50, 50)
    with pytest.raises(PlayerNotInTeamError):
        lineup_service.add_player_to_lineup(db_conn, "fc-lions", "ghost", 50, 50)


def test_add_same_player_twice_is_false(db_conn, lineup_service, roster):
    ids, _ = roster
    assert lineup_service.add_player_to_lineup(db_conn, "fc-lions", ids[0], 50, 50)
    assert lineup_service.add_player_to_lineup(db_conn, "fc-lions", ids[0], 60, 60) is False


def test_save_lineup_replaces_in_order(db_conn, lineup_service, roster):
    ids, _ = roster
    lineup_service.add_player_to_lineup(db_conn, "fc-lions", ids[5], 50, 50)
    new = [LineupPlayer(ids[2], 20, 30), LineupPlayer(ids[0], 40, 99), LineupPlayer(ids[1], 60, 70)]
    assert lineup_service.save_lineup(db_conn, "fc-lions", new)
    loaded = lineup_service.load_lineup(db_conn, "fc-lions")
    assert [p.player_id for p in loaded] == [ids[2], ids[0], ids[1]]
    assert loaded[1].position_y == 95


def test_save_empty_lineup_clears(db_conn, lineup_service, roster):
    ids, _ = roster
    lineup_service.add_player_to_lineup(db_conn, "fc-lions", ids[0], 50, 50)
    assert lineup_service.save_lineup(db_conn, "fc-lions", [])
    assert lineup_service.load_lineup(db_conn, "fc-lions") == []


def test_save_lineup_rejects_too_many_or_outsiders(db_conn, lineup_service, roster):
    ids, outsider = roster
    with pytest.raises(LineupFullError):
        lineup_service.save_lineup(db_conn, "fc-lions", [LineupPlayer(pid, 50, 50) for pid in ids])
    with pytest.raises(PlayerNotInTeamError):
        lineup_service.save_lineup(db_conn, "fc-lions", [LineupPlayer(outsider, 50, 50)])


def test_save_lineup_rejects_repeated_player(db_conn, lineup_service, roster):
    ids, _ = roster
    lineup_service.add_player_to_lineup(db_conn, "fc-lions", ids[5], 50, 50)
    dup = [LineupPlayer(ids[0], 50, 50), LineupPlayer(ids[1], 40, 40), LineupPlayer(ids[0], 60, 60)]
    with pytest.raises(DuplicateLineupPlayerError, match=ids[0]):
        lineup_service.save_lineup(db_conn, "fc-lions", dup)
    assert [p.player_id for p in lineup_service.load_lineup(db_conn, "fc-lions")] == [ids[5]]


def test_save_lineup_is_all_or_nothing(db_conn, lineup_service, roster, monkeypatch):
    """A failing insert rolls back the delete; the previous lineup survives."""
    ids, _ = roster
    lineup_service.add_player_to_lineup(db_conn, "fc-lions", ids[5], 50, 50)
    repo = lineup_service._lineup_repo
    real_add = repo.add
    calls = []

    def flaky_add(*args, **kwargs):
        calls.append(args)
        if len(calls) == 2:
            raise sqlite3.OperationalError("disk I/O error")
        return real_add(*args, **kwargs)

    monkeypatch.setattr(repo, "add", flaky_add)
    new = [LineupPlayer(ids[0], 50, 50), LineupPlayer(ids[1], 60, 60)]
    assert lineup_service.save_lineup(db_conn, "fc-lions", new) is False
    assert [p.player_id for p in lineup_service.load_lineup(db_conn, "fc-lions")] == [ids[5]]


def test_add_locks_before_counting(db_conn, lineup_service, roster):
    ids, _ = roster
    statements = []
    db_conn.set_trace_callback(statements.append)
    try:
        assert lineup_service.add_player_to_lineup(db_conn, "fc-lions", ids[0], 50, 50)
    finally:
        db_conn.set_trace_callback(None)
    begin = next(i for i, s in enumerate(statements) if s.startswith("BEGIN IMMEDIATE"))
    count = next(i for i, s in enumerate(statements) if "COUNT(*) FROM lineups" in s)
    insert = next(i for i, s in enumerate(statements) if s.startswith("INSERT INTO lineups"))
    assert begin < count < insert
    assert not db_conn.in_transaction


def test_add_waits_for_other_writer(db_conn, lineup_service, roster, tmp_path):
    """While another connection holds the write lock nothing is added."""
    ids, _ = roster
    other = sqlite3.connect(str(tmp_path / "lineup_test.db"), timeout=0)
    other.isolation_level = None
    other.execute("BEGIN IMMEDIATE")
    try:
        db_conn.execute("PRAGMA busy_timeout = 0")
        assert lineup_service.add_player_to_lineup(db_conn, "fc-lions", ids[0], 50, 50) is False
    finally:
        other.execute("ROLLBACK")
        other.close()
    assert lineup_service.load_lineup(db_conn, "fc-lions") == []


def test_update_position(db_conn, lineup_service, roster):
    ids, _ = roster
    lineup_service.add_player_to_lineup(db_conn, "fc-lions", ids[0], 50, 50)
    assert lineup_service.update_player_position(db_conn, "fc-lions", ids[0], 0, 30)
    assert lineup_service.load_lineup(db_conn, "fc-lions")[0] == LineupPlayer(ids[0], 5, 30)
    assert lineup_service.update_player_position(db_conn, "fc-lions", ids[1], 10, 10) is False


def test_remove_player(db_conn, lineup_service, roster):
    ids, _ = roster
    lineup_service.add_player_to_lineup(db_conn, "fc-lions", ids[0], 50, 50)
    assert lineup_service.remove_player_from_lineup(db_conn, "fc-lions", ids[0])
    assert lineup_service.remove_player_from_lineup(db_conn, "fc-lions", ids[0]) is False
    assert lineup_service.load_lineup(db_conn, "fc-lions") == []
