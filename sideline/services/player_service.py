"""
Player service: roster CRUD and per-player stat aggregation.
"""
from __future__ import annotations

import logging
import sqlite3
from collections import defaultdict
from typing import Any

from sideline.models import Player, PlayerRecord, PlayerStats, PlayerStatsRecord
from sideline.persistence.repositories import PlayerRepository, PlayerStatsRepository
from sideline.services.errors import returns_on_storage_error

logger = logging.getLogger(__name__)

PERFORMANCE_WINDOW = 5

# Stats summed across matches. pass_completion and save_percentage are derived.
_SUMMED = (
    "goals",
    "assists",
    "shots",
    "shots_on_target",
    "chances_created",
    "dribbles_attempted",
    "dribbles_successful",
    "offsides",
    "tackles",
    "interceptions",
    "clearances",
    "saves",
    "clean_sheets",
    "minutes_played",
    "yellow_cards",
    "red_cards",
)


def aggregate_player_stats(records: list[PlayerStatsRecord]) -> PlayerStats:
    """
    Roll per-match records (newest first) into one PlayerStats.
    pass_completion is the mean across matches; save_percentage is
    saves / (saves + goals) * 100 when saves > 0.
    """
    if not records:
        return PlayerStats()
    totals = {name: sum(getattr(r, name) or 0 for r in records) for name in _SUMMED}
    pass_completion = sum(r.pass_completion or 0 for r in records) / len(records)
    saves, goals = totals["saves"], totals["goals"]
    save_percentage = saves / (saves + goals) * 100 if saves > 0 else 0.0
    recent_goals = [r.goals or 0 for r in records[:PERFORMANCE_WINDOW]]
    recent_goals.reverse()
    performance_data = [0] * (PERFORMANCE_WINDOW - len(recent_goals)) + recent_goals
    return PlayerStats(
        **totals,
        save_percentage=save_percentage,
        pass_completion=pass_completion,
        performance_data=performance_data,
    )


def to_player_view(record: PlayerRecord, stats: PlayerStats) -> Player:
    return Player(
        id=record.id,
        name=record.name,
        team_id=record.team_id,
        position=record.position or "Unknown",
        jersey_num=record.jersey_num or "",
        stats=stats,
        image_url=record.image_url or "",
    )


class PlayerService:
    """Roster CRUD plus aggregated stats for the coach and fan dashboards."""

    def __init__(self) -> None:
        self._player_repo = PlayerRepository()
        self._stats_repo = PlayerStatsRepository()

    @returns_on_storage_error([])
    def list_players(self, conn: sqlite3.Connection) -> list[PlayerRecord]:
        return self._player_repo.list_all(conn)

    @returns_on_storage_error([])
    def list_players_for_team(self, conn: sqlite3.Connection, team_id: str) -> list[PlayerRecord]:
        return self._player_repo.list_by_team(conn, team_id)

    @returns_on_storage_error([])
    def list_players_with_stats(self, conn: sqlite3.Connection, team_id: str) -> list[Player]:
        players = self._player_repo.list_by_team(conn, team_id)
        if not players:
            return []
        records = self._stats_repo.list_by_players(conn, [p.id for p in players])
        by_player: dict[str, list[PlayerStatsRecord]] = defaultdict(list)
        for r in records:
            by_player[r.player_id].append(r)
        return [to_player_view(p, aggregate_player_stats(by_player[p.id])) for p in players]

    @returns_on_storage_error(None)
    def get_player(self, conn: sqlite3.Connection, player_id: str) -> PlayerRecord | None:
        return self._player_repo.get(conn, player_id)

    @returns_on_storage_error(None)
    def get_player_stats(self, conn: sqlite3.Connection, player_id: str) -> PlayerStats | None:
        """None when the player has no recorded matches."""
        records = self._stats_repo.list_by_player(conn, player_id)
        if not records:
            return None
        return aggregate_player_stats(records)

    @returns_on_storage_error({})
    def aggregated_stats_for_players(
        self, conn: sqlite3.Connection, player_ids: list[str]
    ) -> dict[str, PlayerStats]:
        """Every requested id is present; players without records get zeros."""
        if not player_ids:
            logger.debug("aggregated_stats_for_players: no player ids")
            return {}
        records = self._stats_repo.list_by_players(conn, player_ids)
        by_player: dict[str, list[PlayerStatsRecord]] = defaultdict(list)
        for r in records:
            by_player[r.player_id].append(r)
        return {pid: aggregate_player_stats(by_player[pid]) for pid in player_ids}

    @returns_on_storage_error([])
    def player_stats_by_match(self, conn: sqlite3.Connection, player_id: str) -> list[PlayerStatsRecord]:
        """Per-match records, newest first."""
        return self._stats_repo.list_by_player(conn, player_id)

    @returns_on_storage_error(None)
    def create_player(
        self,
        conn: sqlite3.Connection,
        team_id: str,
        name: str,
        position: str | None = None,
        jersey_num: str | None = None,
        image_url: str | None = None,
    ) -> str | None:
        """Returns the new player id, or None (e.g. unknown team)."""
        player = self._player_repo.create(conn, team_id, name, position, jersey_num, image_url)
        logger.info("Created player %s on team %s", player.id, team_id)
        return player.id

    @returns_on_storage_error(False)
    def update_player(self, conn: sqlite3.Connection, player_id: str, updates: dict[str, Any]) -> bool:
        updated = self._player_repo.update(conn, player_id, updates) > 0
        if updated:
            logger.info("Updated player %s", player_id)
        return updated

    @returns_on_storage_error(False)
    def delete_player(self, conn: sqlite3.Connection, player_id: str) -> bool:
        """Also drops the player's lineup slot, stats and events."""
        deleted = self._player_repo.delete(conn, player_id) > 0
        if deleted:
            logger.info("Deleted player %s", player_id)
        return deleted
