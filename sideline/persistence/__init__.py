"""
Persistence layer for team-management data.
No business logic; only read/write interfaces.
"""
from .db import get_connection, init_db, set_db_path, get_db_path
from .repositories import (
    UserRepository,
    ProfileRepository,
    TeamRepository,
    PlayerRepository,
    MatchRepository,
    MatchEventRepository,
    PlayerStatsRepository,
    LineupRepository,
    FavoriteRepository,
    ChatRepository,
)

__all__ = [
    "get_connection",
    "init_db",
    "set_db_path",
    "get_db_path",
    "UserRepository",
    "ProfileRepository",
    "TeamRepository",
    "PlayerRepository",
    "MatchRepository",
    "MatchEventRepository",
    "PlayerStatsRepository",
    "LineupRepository",
    "FavoriteRepository",
    "ChatRepository",
]
