"""Public profile (display name, bio, avatar) for each user."""
from __future__ import annotations

import logging
import sqlite3

from sideline.models import UserProfile
from sideline.persistence.repositories import ProfileRepository
from sideline.services.errors import returns_on_storage_error

logger = logging.getLogger(__name__)


class ProfileService:
    def __init__(self) -> None:
        self._profile_repo = ProfileRepository()

    @returns_on_storage_error(None)
    def get_profile(self, conn: sqlite3.Connection, user_id: str) -> UserProfile | None:
        return self._profile_repo.get(conn, user_id)

    @returns_on_storage_error(False)
    def upsert_profile(
        self,
        conn: sqlite3.Connection,
        user_id: str,
        display_name: str | None = None,
        bio: str | None = None,
        avatar_url: str | None = None,
    ) -> bool:
        self._profile_repo.upsert(conn, user_id, display_name, bio, avatar_url)
        logger.info("Saved profile for %s", user_id)
        return True

    @returns_on_storage_error(False)
    def ensure_profile(self, conn: sqlite3.Connection, user_id: str) -> bool:
        """Create an empty profile if the user has none."""
        if self._profile_repo.get(conn, user_id) is None:
            self._profile_repo.create(conn, user_id)
            logger.info("Created empty profile for %s", user_id)
        return True
