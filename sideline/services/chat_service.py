"""Match chat: messages fans post against a match."""
from __future__ import annotations

import logging
import sqlite3

from sideline.models import ChatMessage
from sideline.persistence.repositories import ChatRepository
from sideline.services.errors import EmptyMessageError, NotMessageOwnerError, returns_on_storage_error

logger = logging.getLogger(__name__)


class ChatService:
    def __init__(self) -> None:
        self._chat_repo = ChatRepository()

    @returns_on_storage_error([])
    def list_chat_for_match(self, conn: sqlite3.Connection, match_id: str) -> list[ChatMessage]:
        """Oldest first."""
        return self._chat_repo.list_by_match(conn, match_id)

    @returns_on_storage_error(None)
    def send_chat_message(
        self,
        conn: sqlite3.Connection,
        match_id: str,
        author: str | None,
        message: str,
        user_id: str | None = None,
    ) -> ChatMessage | None:
        text = message.strip()
        if not text:
            raise EmptyMessageError("Chat message is empty")
        sent = self._chat_repo.create(conn, match_id, text, author=author, user_id=user_id)
        logger.info("Chat %s posted to match %s by %s", sent.id, match_id, user_id or author)
        return sent

    @returns_on_storage_error(False)
    def delete_chat_message(self, conn: sqlite3.Connection, message_id: str, user_id: str) -> bool:
        """False when the message does not exist."""
        existing = self._chat_repo.get(conn, message_id)
        if existing is None:
            return False
        if existing.user_id != user_id:
            raise NotMessageOwnerError(f"User {user_id} did not post message {message_id}")
        deleted = self._chat_repo.delete(conn, message_id, user_id) > 0
        if deleted:
            logger.info("Chat %s deleted by %s", message_id, user_id)
        return deleted
