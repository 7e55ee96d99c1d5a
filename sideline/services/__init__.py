"""
Service layer: domain rules over the repositories.
Each service method takes the connection first; storage failures come back
as the method's safe default, rule violations raise.
"""
from .admin_service import AdminService
from .chat_service import ChatService
from .errors import (
    DuplicateLineupPlayerError,
    EmptyMessageError,
    InvalidRoleError,
    InvalidTeamNameError,
    LineupFullError,
    NotMessageOwnerError,
    PlayerNotInTeamError,
)
from .favorites_service import FavoritesService
from .lineup_service import LineupService
from .match_service import MatchService
from .player_service import PlayerService
from .profile_service import ProfileService
from .role_service import RoleService
from .team_service import TeamService

__all__ = [
    "AdminService",
    "ChatService",
    "FavoritesService",
    "LineupService",
    "MatchService",
    "PlayerService",
    "ProfileService",
    "RoleService",
    "TeamService",
    "DuplicateLineupPlayerError",
    "EmptyMessageError",
    "InvalidRoleError",
    "InvalidTeamNameError",
    "LineupFullError",
    "NotMessageOwnerError",
    "PlayerNotInTeamError",
]
