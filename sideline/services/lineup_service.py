"""
Lineup service: the starting eleven and where each player stands on the pitch.

Coordinates are percentages of the field: x across (0 left, 100 right),
y down (0 attacking end, 100 own goal line).
"""
from __future__ import annotations

import logging
import sqlite3
from collections import Counter
from typing import Iterable, NamedTuple, Protocol

from sideline.models import LineupPlayer
from sideline.persistence.repositories import LineupRepository, PlayerRepository
from sideline.services.errors import (
    DuplicateLineupPlayerError,
    LineupFullError,
    PlayerNotInTeamError,
    returns_on_storage_error,
)

logger = logging.getLogger(__name__)

MAX_LINEUP_PLAYERS = 11
FIELD_MIN = 5.0
FIELD_MAX = 95.0

GOALKEEPER = "goalkeeper"
DEFENDER = "defender"
MIDFIELDER = "midfielder"
FORWARD = "forward"

_LINE_Y = {GOALKEEPER: 85.0, DEFENDER: 70.0, MIDFIELDER: 50.0, FORWARD: 25.0}

_POSITION_LINE = {
    "GK": GOALKEEPER,
    "CB": DEFENDER,
    "LB": DEFENDER,
    "RB": DEFENDER,
    "LWB": DEFENDER,
    "RWB": DEFENDER,
    "DEF": DEFENDER,
    "CDM": MIDFIELDER,
    "CM": MIDFIELDER,
    "CAM": MIDFIELDER,
    "LM": MIDFIELDER,
    "RM": MIDFIELDER,
    "MID": MIDFIELDER,
    "LW": FORWARD,
    "RW": FORWARD,
    "ST": FORWARD,
    "CF": FORWARD,
    "STR": FORWARD,
}


class FieldPosition(NamedTuple):
    line: str
    x: float
    y: float


class _Positioned(Protocol):
    id: str
    position: str | None


def clamp(value: float) -> float:
    return max(FIELD_MIN, min(FIELD_MAX, value))


def line_for(position: str | None) -> str:
    """Unknown or missing positions play in midfield."""
    return _POSITION_LINE.get((position or "").upper(), MIDFIELDER)


def default_field_position(position: str | None, index: int, total: int) -> FieldPosition:
    """
    Default spot for the index-th of total players sharing a line.
    Goalkeepers and lone players are centred; others spread across 10..90.
    """
    line = line_for(position)
    if line == GOALKEEPER or total <= 1:
        x = 50.0
    else:
        x = 10 + index * 80 / (total - 1)
    return FieldPosition(line, x, _LINE_Y[line])


def initial_positions(players: Iterable[_Positioned]) -> list[LineupPlayer]:
    """Default coordinates for each player, spread within its line. Keeps input order."""
    players = list(players)
    per_line = Counter(line_for(p.position) for p in players)
    seen: Counter[str] = Counter()
    placed = []
    for p in players:
        line = line_for(p.position)
        spot = default_field_position(p.position, seen[line], per_line[line])
        seen[line] += 1
        placed.append(LineupPlayer(player_id=p.id, position_x=spot.x, position_y=spot.y))
    return placed


def formation(positions: Iterable[str | None]) -> str:
    """'4-4-2' style count of defenders, midfielders and forwards. Keepers are not counted."""
    lines = Counter(line_for(p) for p in positions)
    return f"{lines[DEFENDER]}-{lines[MIDFIELDER]}-{lines[FORWARD]}"


class LineupService:
    """Persisted lineups, one per team, at most MAX_LINEUP_PLAYERS players."""

    def __init__(self) -> None:
        self._lineup_repo = LineupRepository()
        self._player_repo = PlayerRepository()

    def _check_player(self, conn: sqlite3.Connection, team_id: str, player_id: str) -> None:
        player = self._player_repo.get(conn, player_id)
        if player is None or player.team_id != team_id:
            raise PlayerNotInTeamError(f"Player {player_id} is not on team {team_id}")

    @returns_on_storage_error([])
    def load_lineup(self, conn: sqlite3.Connection, team_id: str) -> list[LineupPlayer]:
        lineup = self._lineup_repo.list_by_team(conn, team_id)
        logger.debug("Loaded lineup for %s: %d players", team_id, len(lineup))
        return lineup

    @returns_on_storage_error(False)
    def save_lineup(self, conn: sqlite3.Connection, team_id: str, players: list[LineupPlayer]) -> bool:
        """Replace the team's lineup with players, in order. An empty list clears it."""
        if len(players) > MAX_LINEUP_PLAYERS:
            raise LineupFullError(f"A lineup holds at most {MAX_LINEUP_PLAYERS} players, got {len(players)}")
        repeated = sorted(pid for pid, n in Counter(p.player_id for p in players).items() if n > 1)
        if repeated:
            raise DuplicateLineupPlayerError(f"Players listed more than once: {', '.join(repeated)}")
        for p in players:
            self._check_player(conn, team_id, p.player_id)
        with conn:
            self._lineup_repo.delete_by_team(conn, team_id, commit=False)
            for p in players:
                self._lineup_repo.add(
                    conn, team_id, p.player_id, clamp(p.position_x), clamp(p.position_y), commit=False
                )
        logger.info("Saved lineup for %s: %d players", team_id, len(players))
        return True

    @returns_on_storage_error(False)
    def add_player_to_lineup(
        self, conn: sqlite3.Connection, team_id: str, player_id: str, x: float, y: float
    ) -> bool:
        """False when the player is already in the lineup."""
        self._check_player(conn, team_id, player_id)
        with conn:
            # Take the write lock before counting.
            if not conn.in_transaction:
                conn.execute("BEGIN IMMEDIATE")
            if self._lineup_repo.contains(conn, team_id, player_id):
                logger.debug("add_player_to_lineup: %s already in lineup for %s", player_id, team_id)
                return False
            if self._lineup_repo.count_by_team(conn, team_id) >= MAX_LINEUP_PLAYERS:
                raise LineupFullError(f"Lineup for {team_id} already has {MAX_LINEUP_PLAYERS} players")
            self._lineup_repo.add(conn, team_id, player_id, clamp(x), clamp(y), commit=False)
        logger.info("Added %s to lineup for %s", player_id, team_id)
        return True

    @returns_on_storage_error(False)
    def update_player_position(
        self, conn: sqlite3.Connection, team_id: str, player_id: str, x: float, y: float
    ) -> bool:
        moved = self._lineup_repo.update_position(conn, team_id, player_id, clamp(x), clamp(y)) > 0
        if not moved:
            logger.warning("update_player_position: %s not in lineup for %s", player_id, team_id)
        return moved

    @returns_on_storage_error(False)
    def remove_player_from_lineup(self, conn: sqlite3.Connection, team_id: str, player_id: str) -> bool:
        removed = self._lineup_repo.remove(conn, team_id, player_id) > 0
        if removed:
            logger.info("Removed %s from lineup for %s", player_id, team_id)
        return removed
