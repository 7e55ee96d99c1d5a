"""
Data models for the team-management backend.
Domain objects only; no persistence or API logic.

Rows are stored snake_case; to_dict() renders the camelCase view model
returned to clients.
"""
from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import datetime
from enum import Enum
from typing import Any


def camel(name: str) -> str:
    """snake_case -> camelCase."""
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


# ---------- Enums ----------
class UserRoleName(str, Enum):
    FAN = "Fan"
    COACH = "Coach"
    ADMIN = "Admin"


class MatchStatus(str, Enum):
    SCHEDULED = "scheduled"
    COMPLETED = "completed"


class EventType(str, Enum):
    GOAL = "goal"
    ASSIST = "assist"
    YELLOW_CARD = "yellow_card"
    RED_CARD = "red_card"


# Per-match stat columns on player_stats, in table order.
PLAYER_STAT_FIELDS: tuple[str, ...] = (
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
    "save_percentage",
    "pass_completion",
    "minutes_played",
    "yellow_cards",
    "red_cards",
    "passes_successful",
    "passes_attempted",
    "goals_conceded",
)

# Optional team-level stat columns on matches.
MATCH_STAT_FIELDS: tuple[str, ...] = (
    "possession",
    "shots",
    "shots_on_target",
    "corners",
    "fouls",
    "offsides",
    "passes",
    "pass_accuracy",
    "tackles",
    "saves",
)


# ---------- User ----------
@dataclass
class User:
    """
    An authenticated account and its role.
    password_hash is never rendered.
    """
    id: str
    email: str
    role: str  # UserRoleName value
    created_at: datetime
    google_id: str | None = None
    password_hash: str | None = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "id": self.id,
            "email": self.email,
            "role": self.role,
            "createdAt": self.created_at.isoformat(),
        }
        if self.google_id is not None:
            d["googleId"] = self.google_id
        return d


@dataclass
class UserProfile:
    id: str
    display_name: str | None = None
    bio: str | None = None
    avatar_url: str | None = None
    updated_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "displayName": self.display_name,
            "bio": self.bio,
            "avatarUrl": self.avatar_url,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }


# ---------- Team ----------
@dataclass
class Team:
    """A club. id is the slug of the name at creation time."""
    id: str
    name: str
    created_at: datetime
    coach_id: str | None = None
    coach_name: str | None = None
    logo_url: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "coachId": self.coach_id,
            "coachName": self.coach_name,
            "logoUrl": self.logo_url,
            "createdAt": self.created_at.isoformat(),
        }


# ---------- Player ----------
@dataclass
class PlayerRecord:
    """Row in players. position is a short code such as GK, CB, CM, ST."""
    id: str
    team_id: str
    name: str
    created_at: datetime
    position: str | None = None
    jersey_num: str | None = None
    image_url: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "teamId": self.team_id,
            "name": self.name,
            "position": self.position,
            "jerseyNum": self.jersey_num,
            "imageUrl": self.image_url,
            "createdAt": self.created_at.isoformat(),
        }


@dataclass
class PlayerStats:
    """
    Aggregate of a player's per-match stats.
    Counting stats are sums; pass_completion is a mean; save_percentage is
    saves / (saves + goals); performance_data is goals over the last five
    records, oldest first.
    """
    goals: int = 0
    assists: int = 0
    shots: int = 0
    shots_on_target: int = 0
    chances_created: int = 0
    dribbles_attempted: int = 0
    dribbles_successful: int = 0
    offsides: int = 0
    tackles: int = 0
    interceptions: int = 0
    clearances: int = 0
    saves: int = 0
    clean_sheets: int = 0
    save_percentage: float = 0.0
    pass_completion: float = 0.0
    minutes_played: int = 0
    yellow_cards: int = 0
    red_cards: int = 0
    performance_data: list[int] = field(default_factory=lambda: [0, 0, 0, 0, 0])

    def to_dict(self) -> dict[str, Any]:
        return {camel(f.name): getattr(self, f.name) for f in fields(self)}


@dataclass
class Player:
    """Roster view model: player row plus aggregated stats."""
    id: str
    name: str
    team_id: str
    position: str
    jersey_num: str
    stats: PlayerStats
    image_url: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "teamId": self.team_id,
            "position": self.position,
            "jerseyNum": self.jersey_num,
            "stats": self.stats.to_dict(),
            "imageUrl": self.image_url,
        }


# ---------- Match ----------
@dataclass
class Match:
    """
    A fixture from the owning team's point of view.
    Team-level stats are optional and only filled in once recorded.
    """
    id: str
    team_id: str
    opponent_name: str
    team_score: int
    opponent_score: int
    date: str
    status: str  # MatchStatus value
    created_at: datetime
    possession: float | None = None
    shots: int | None = None
    shots_on_target: int | None = None
    corners: int | None = None
    fouls: int | None = None
    offsides: int | None = None
    passes: int | None = None
    pass_accuracy: float | None = None
    tackles: int | None = None
    saves: int | None = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "id": self.id,
            "teamId": self.team_id,
            "opponentName": self.opponent_name,
            "teamScore": self.team_score,
            "opponentScore": self.opponent_score,
            "date": self.date,
            "status": self.status,
        }
        for name in MATCH_STAT_FIELDS:
            d[camel(name)] = getattr(self, name)
        return d


@dataclass
class MatchEvent:
    id: str
    match_id: str
    player_id: str
    event_type: str  # EventType value
    created_at: datetime
    minute: int | None = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "id": self.id,
            "matchId": self.match_id,
            "playerId": self.player_id,
            "eventType": self.event_type,
            "createdAt": self.created_at.isoformat(),
        }
        if self.minute is not None:
            d["minute"] = self.minute
        return d


@dataclass
class PlayerStatsRecord:
    """One player's stats for one match (row in player_stats)."""
    id: str
    player_id: str
    match_id: str
    created_at: datetime
    updated_at: datetime
    goals: int = 0
    assists: int = 0
    shots: int = 0
    shots_on_target: int = 0
    chances_created: int = 0
    dribbles_attempted: int = 0
    dribbles_successful: int = 0
    offsides: int = 0
    tackles: int = 0
    interceptions: int = 0
    clearances: int = 0
    saves: int = 0
    clean_sheets: int = 0
    save_percentage: float = 0.0
    pass_completion: float = 0.0
    minutes_played: int = 0
    yellow_cards: int = 0
    red_cards: int = 0
    passes_successful: int = 0
    passes_attempted: int = 0
    goals_conceded: int = 0

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "id": self.id,
            "playerId": self.player_id,
            "matchId": self.match_id,
        }
        for name in PLAYER_STAT_FIELDS:
            d[camel(name)] = getattr(self, name)
        d["createdAt"] = self.created_at.isoformat()
        d["updatedAt"] = self.updated_at.isoformat()
        return d


# ---------- Lineup ----------
@dataclass
class LineupPlayer:
    """A player placed on the pitch. Coordinates are percentages of field width/height."""
    player_id: str
    position_x: float
    position_y: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "playerId": self.player_id,
            "positionX": self.position_x,
            "positionY": self.position_y,
        }


# ---------- Chat ----------
@dataclass
class ChatMessage:
    id: str
    match_id: str
    message: str
    inserted_at: datetime
    user_id: str | None = None
    author: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "matchId": self.match_id,
            "userId": self.user_id,
            "author": self.author,
            "message": self.message,
            "insertedAt": self.inserted_at.isoformat(),
        }
