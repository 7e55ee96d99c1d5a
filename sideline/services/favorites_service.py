"""Fan favourites: which teams a user follows."""
from __future__ import annotations

import logging
import sqlite3

from sideline.persistence.repositories import FavoriteRepository
from sideline.services.errors import returns_on_storage_error

logger = logging.getLogger(__name__)


class FavoritesService:
    def __init__(self) -> None:
        self._favorite_repo = FavoriteRepository()

    @returns_on_storage_error([])
    def list_favorites(self, conn: sqlite3.Connection, user_id: str) -> list[str]:
        """Team ids, in the order they were favourited."""
        return self._favorite_repo.list_team_ids(conn, user_id)

    @returns_on_storage_error(False)
    def add_favorite(self, conn: sqlite3.Connection, user_id: str, team_id: str) -> bool:
        """Idempotent."""
        self._favorite_repo.upsert(conn, user_id, team_id)
        logger.info("User %s favourited %s", user_id, team_id)
        return True

    @returns_on_storage_error(False)
    def remove_favorite(self, conn: sqlite3.Connection, user_id: str, team_id: str) -> bool:
        self._favorite_repo.delete(conn, user_id, team_id)
        logger.info("User %s unfavourited %s", user_id, team_id)
        return True

    @returns_on_storage_error(False)
    def is_favorite(self, conn: sqlite3.Connection, user_id: str, team_id: str) -> bool:
        return self._favorite_repo.exists(conn, user_id, team_id)

    @returns_on_storage_error(None)
    def toggle_favorite(self, conn: sqlite3.Connection, user_id: str, team_id: str) -> bool | None:
        """Flip the favourite and return the new state."""
        if self._favorite_repo.exists(conn, user_id, team_id):
            self._favorite_repo.delete(conn, user_id, team_id)
            logger.info("User %s unfavourited %s", user_id, team_id)
            return False
        self._favorite_repo.upsert(conn, user_id, team_id)
        logger.info("User %s favourited %s", user_id, team_id)
        return True
