"""Admin dashboard reads, chat moderation, and deletes that span several tables."""
from __future__ import annotations

import logging
import sqlite3

from sideline.models import ChatMessage, User
from sideline.persistence.repositories import (
    ChatRepository,
    FavoriteRepository,
    ProfileRepository,
    TeamRepository,
    UserRepository,
)
from sideline.services.errors import returns_on_storage_error

logger = logging.getLogger(__name__)


class AdminService:
    def __init__(self) -> None:
        self._chat_repo = ChatRepository()
        self._favorite_repo = FavoriteRepository()
        self._team_repo = TeamRepository()
        self._profile_repo = ProfileRepository()
        self._user_repo = UserRepository()

    @returns_on_storage_error([])
    def list_users(self, conn: sqlite3.Connection) -> list[User]:
        """All accounts, newest first."""
        return self._user_repo.list_all(conn)

    @returns_on_storage_error([])
    def list_all_chats(self, conn: sqlite3.Connection) -> list[ChatMessage]:
        """Chat messages across every match, newest first."""
        return self._chat_repo.list_all(conn)

    @returns_on_storage_error(False)
    def delete_chat(self, conn: sqlite3.Connection, message_id: str) -> bool:
        """Remove any message regardless of author. False when it does not exist."""
        deleted = self._chat_repo.delete_any(conn, message_id) > 0
        if deleted:
            logger.info("Moderated chat message %s", message_id)
        return deleted

    @returns_on_storage_error(False)
    def delete_user_completely(self, conn: sqlite3.Connection, user_id: str) -> bool:
        """
        Remove a user and everything tied to them in one transaction:
        chat messages, favourites, coach assignments, profile, account.
        Teams they coached are kept with no coach. False when the user does not exist.
        """
        with conn:
            chats = self._chat_repo.delete_by_user(conn, user_id, commit=False)
            favourites = self._favorite_repo.delete_by_user(conn, user_id, commit=False)
            teams = self._team_repo.clear_coach(conn, user_id, commit=False)
            self._profile_repo.delete(conn, user_id, commit=False)
            deleted = self._user_repo.delete(conn, user_id, commit=False) > 0
        if deleted:
            logger.info(
                "Deleted user %s (%d chats, %d favourites, %d teams uncoached)",
                user_id, chats, favourites, teams,
            )
        else:
            logger.warning("delete_user_completely: no user %s", user_id)
        return deleted
