"""
Team service: creation with slug ids, coach lookup, updates.
"""
from __future__ import annotations

import logging
import re
import sqlite3
from typing import Any

from sideline.models import Team
from sideline.persistence.repositories import TeamRepository
from sideline.services.errors import InvalidTeamNameError, returns_on_storage_error

logger = logging.getLogger(__name__)

_NON_SLUG = re.compile(r"[^a-z0-9]+")


def slugify(value: str) -> str:
    """'  FC Lions 2024! ' -> 'fc-lions-2024'."""
    return _NON_SLUG.sub("-", value.lower().strip()).strip("-")


class TeamService:
    """Team CRUD. The team id is the slug of its name at creation."""

    def __init__(self) -> None:
        self._team_repo = TeamRepository()

    @returns_on_storage_error(None)
    def create_team(
        self,
        conn: sqlite3.Connection,
        name: str,
        coach_id: str | None = None,
        coach_name: str | None = None,
        logo_url: str | None = None,
    ) -> Team | None:
        """Returns None when the slug is taken or the coach does not exist."""
        team_id = slugify(name)
        if not team_id:
            raise InvalidTeamNameError(f"Team name {name!r} has no letters or digits")
        team = self._team_repo.create(
            conn, team_id, name.strip(),
            coach_id=coach_id, coach_name=coach_name, logo_url=logo_url,
        )
        logger.info("Created team %s (coach=%s)", team.id, coach_id)
        return team

    @returns_on_storage_error(None)
    def get_team(self, conn: sqlite3.Connection, team_id: str) -> Team | None:
        return self._team_repo.get(conn, team_id)

    @returns_on_storage_error(None)
    def get_team_by_coach(self, conn: sqlite3.Connection, coach_id: str) -> Team | None:
        return self._team_repo.get_by_coach(conn, coach_id)

    def get_current_team(self, conn: sqlite3.Connection, coach_id: str) -> Team | None:
        """The coach dashboard's team. None until the coach has set one up."""
        team = self.get_team_by_coach(conn, coach_id)
        if team is None:
            logger.debug("No team for coach %s", coach_id)
        return team

    @returns_on_storage_error([])
    def list_teams(self, conn: sqlite3.Connection) -> list[Team]:
        return self._team_repo.list_all(conn)

    @returns_on_storage_error(False)
    def update_team(self, conn: sqlite3.Connection, team_id: str, updates: dict[str, Any]) -> bool:
        """Only name, coach_id, coach_name and logo_url are writable; other keys are ignored."""
        writable = {k: v for k, v in updates.items() if k in TeamRepository.UPDATABLE}
        if not writable:
            logger.warning("update_team %s: no writable fields in %s", team_id, sorted(updates))
            return False
        updated = self._team_repo.update(conn, team_id, writable) > 0
        if updated:
            logger.info("Updated team %s: %s", team_id, sorted(writable))
        return updated
