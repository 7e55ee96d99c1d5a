"""
Match service: fixtures, match events and per-match player stats.
"""
from __future__ import annotations

import logging
import sqlite3
from typing import Any

from sideline.models import MATCH_STAT_FIELDS, PLAYER_STAT_FIELDS, Match, MatchEvent, PlayerStatsRecord
from sideline.persistence.repositories import (
    MatchEventRepository,
    MatchRepository,
    PlayerStatsRepository,
)
from sideline.services.errors import returns_on_storage_error

logger = logging.getLogger(__name__)


def _zero_filled(data: dict[str, Any]) -> dict[str, Any]:
    """Every stat field, with missing or None values as 0."""
    return {name: data.get(name) or 0 for name in PLAYER_STAT_FIELDS}


class MatchService:
    """Matches and the records hanging off them."""

    def __init__(self) -> None:
        self._match_repo = MatchRepository()
        self._event_repo = MatchEventRepository()
        self._stats_repo = PlayerStatsRepository()

    # ---------- Matches ----------

    @returns_on_storage_error([])
    def list_matches(self, conn: sqlite3.Connection) -> list[Match]:
        return self._match_repo.list_all(conn)

    @returns_on_storage_error([])
    def list_team_matches(self, conn: sqlite3.Connection, team_id: str) -> list[Match]:
        return self._match_repo.list_by_team(conn, team_id)

    @returns_on_storage_error(None)
    def get_match(self, conn: sqlite3.Connection, match_id: str) -> Match | None:
        return self._match_repo.get(conn, match_id)

    @returns_on_storage_error(None)
    def create_match(self, conn: sqlite3.Connection, data: dict[str, Any]) -> str | None:
        """data: team_id, opponent_name, date, and optionally scores, status and team stats."""
        match = self._match_repo.create(
            conn,
            team_id=data["team_id"],
            opponent_name=data["opponent_name"],
            date=data["date"],
            team_score=data.get("team_score") or 0,
            opponent_score=data.get("opponent_score") or 0,
            status=data.get("status") or "scheduled",
            stats={k: data[k] for k in MATCH_STAT_FIELDS if k in data},
        )
        logger.info("Created match %s: %s vs %s on %s", match.id, match.team_id, match.opponent_name, match.date)
        return match.id

    @returns_on_storage_error(False)
    def update_match(self, conn: sqlite3.Connection, match_id: str, data: dict[str, Any]) -> bool:
        updated = self._match_repo.update(conn, match_id, data) > 0
        if updated:
            logger.info("Updated match %s: %s", match_id, sorted(data))
        return updated

    @returns_on_storage_error(False)
    def delete_match(self, conn: sqlite3.Connection, match_id: str) -> bool:
        deleted = self._match_repo.delete(conn, match_id) > 0
        if deleted:
            logger.info("Deleted match %s", match_id)
        return deleted

    # ---------- Events ----------

    @returns_on_storage_error([])
    def list_match_events(self, conn: sqlite3.Connection, match_id: str) -> list[MatchEvent]:
        return self._event_repo.list_by_match(conn, match_id)

    @returns_on_storage_error(None)
    def get_match_event(self, conn: sqlite3.Connection, event_id: str) -> MatchEvent | None:
        return self._event_repo.get(conn, event_id)

    @returns_on_storage_error(None)
    def create_match_event(self, conn: sqlite3.Connection, data: dict[str, Any]) -> str | None:
        event = self._event_repo.create(
            conn,
            match_id=data["match_id"],
            player_id=data["player_id"],
            event_type=data["event_type"],
            minute=data.get("minute"),
        )
        logger.info("Recorded %s for player %s in match %s", event.event_type, event.player_id, event.match_id)
        return event.id

    @returns_on_storage_error(False)
    def delete_match_event(self, conn: sqlite3.Connection, event_id: str) -> bool:
        return self._event_repo.delete(conn, event_id) > 0

    # ---------- Player stats ----------

    @returns_on_storage_error([])
    def player_stats_for_match(self, conn: sqlite3.Connection, match_id: str) -> list[PlayerStatsRecord]:
        return self._stats_repo.list_by_match(conn, match_id)

    @returns_on_storage_error([])
    def player_stats_for_player(self, conn: sqlite3.Connection, player_id: str) -> list[PlayerStatsRecord]:
        """Newest first."""
        return self._stats_repo.list_by_player(conn, player_id)

    @returns_on_storage_error(None)
    def create_player_stats(self, conn: sqlite3.Connection, data: dict[str, Any]) -> str | None:
        record = self._stats_repo.create(conn, data["player_id"], data["match_id"], _zero_filled(data))
        logger.info("Created stats %s for player %s in match %s", record.id, record.player_id, record.match_id)
        return record.id

    @returns_on_storage_error(False)
    def update_player_stats(self, conn: sqlite3.Connection, stats_id: str, data: dict[str, Any]) -> bool:
        return self._stats_repo.update(conn, stats_id, data) > 0

    @returns_on_storage_error(None)
    def upsert_player_stats(
        self, conn: sqlite3.Connection, match_id: str, player_id: str, data: dict[str, Any]
    ) -> str | None:
        """
        Write one player's full stat line for a match.
        Existing (match, player) rows are updated in place and keep their id.
        """
        if not match_id or not player_id:
            logger.error("upsert_player_stats: match_id and player_id are required (got %r, %r)", match_id, player_id)
            return None
        stats = _zero_filled(data)
        existing = self._stats_repo.get_for_player_and_match(conn, player_id, match_id)
        if existing is not None:
            self._stats_repo.update(conn, existing.id, stats)
            logger.info("Updated stats %s for player %s in match %s", existing.id, player_id, match_id)
            return existing.id
        record = self._stats_repo.create(conn, player_id, match_id, stats)
        logger.info("Created stats %s for player %s in match %s", record.id, player_id, match_id)
        return record.id
