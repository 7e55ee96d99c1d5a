"""
Role service: user accounts and the Fan / Coach / Admin role attached to each.
"""
from __future__ import annotations

import logging
import sqlite3

from sideline.models import User, UserRoleName
from sideline.persistence.repositories import ProfileRepository, UserRepository
from sideline.services.errors import InvalidRoleError, returns_on_storage_error

logger = logging.getLogger(__name__)

VALID_ROLES = tuple(r.value for r in UserRoleName)


def validate_role(role: str) -> str:
    if role not in VALID_ROLES:
        raise InvalidRoleError(f"Role must be one of {', '.join(VALID_ROLES)}, got {role!r}")
    return role


def display_name_from_email(email: str) -> str:
    return email.split("@", 1)[0]


class RoleService:
    def __init__(self) -> None:
        self._user_repo = UserRepository()
        self._profile_repo = ProfileRepository()

    @returns_on_storage_error(None)
    def get_user_role(self, conn: sqlite3.Connection, user_id: str) -> User | None:
        user = self._user_repo.get(conn, user_id)
        if user is None:
            logger.debug("get_user_role: no user %s", user_id)
        return user

    @returns_on_storage_error(None)
    def get_user_by_email(self, conn: sqlite3.Connection, email: str) -> User | None:
        return self._user_repo.get_by_email(conn, email)

    @returns_on_storage_error(False)
    def update_user_role(self, conn: sqlite3.Connection, user_id: str, role: str) -> bool:
        validate_role(role)
        updated = self._user_repo.update_role(conn, user_id, role) > 0
        if updated:
            logger.info("User %s is now %s", user_id, role)
        return updated

    def _has_role(self, conn: sqlite3.Connection, user_id: str, role: UserRoleName) -> bool:
        user = self.get_user_role(conn, user_id)
        return user is not None and user.role == role.value

    def is_coach(self, conn: sqlite3.Connection, user_id: str) -> bool:
        return self._has_role(conn, user_id, UserRoleName.COACH)

    def is_fan(self, conn: sqlite3.Connection, user_id: str) -> bool:
        return self._has_role(conn, user_id, UserRoleName.FAN)

    def is_admin(self, conn: sqlite3.Connection, user_id: str) -> bool:
        return self._has_role(conn, user_id, UserRoleName.ADMIN)

    @returns_on_storage_error(False)
    def create_user_profile(
        self,
        conn: sqlite3.Connection,
        user_id: str,
        email: str,
        role: str = UserRoleName.FAN.value,
        password_hash: str | None = None,
    ) -> bool:
        """
        Create the user row and its profile together.
        The profile's display name starts as the local part of the email.
        False when the id or email is already taken.
        """
        validate_role(role)
        with conn:
            self._user_repo.create(
                conn, email, role, id=user_id, password_hash=password_hash, commit=False
            )
            self._profile_repo.create(
                conn, user_id, display_name=display_name_from_email(email), commit=False
            )
        logger.info("Created %s account %s (%s)", role, user_id, email)
        return True
