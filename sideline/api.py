"""
REST API for the Sideline team-management backend.
Thin wrappers around the service layer: coach dashboard (team, roster,
lineup, match stats), fan dashboard (teams, matches, favourites, chat),
accounts and roles.
"""
from __future__ import annotations

import datetime as dt
import logging
import uuid
from contextlib import asynccontextmanager, contextmanager
from typing import Any, AsyncGenerator, Callable, Generator

from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel, Field, field_validator

from sideline.auth import create_access_token, decode_token, hash_password, verify_password
from sideline.config import configure_logging, load_config
from sideline.models import EventType, LineupPlayer, MatchStatus, User, UserRoleName
from sideline.persistence import get_connection, get_db_path, init_db
from sideline.services import (
    AdminService,
    ChatService,
    DuplicateLineupPlayerError,
    EmptyMessageError,
    FavoritesService,
    InvalidRoleError,
    InvalidTeamNameError,
    LineupFullError,
    LineupService,
    MatchService,
    NotMessageOwnerError,
    PlayerNotInTeamError,
    PlayerService,
    ProfileService,
    RoleService,
    TeamService,
)
from sideline.services.lineup_service import default_field_position, formation, initial_positions
from sideline.services.player_service import to_player_view
from sideline.services.role_service import display_name_from_email
from sideline.stats import get_player_key_stats, get_position_specific_stats, team_report

logger = logging.getLogger(__name__)

config = load_config()

team_service = TeamService()
player_service = PlayerService()
match_service = MatchService()
lineup_service = LineupService()
favorites_service = FavoritesService()
role_service = RoleService()
profile_service = ProfileService()
chat_service = ChatService()
admin_service = AdminService()


@contextmanager
def db_conn() -> Generator:
    """Yield a DB connection, ensure close on exit."""
    conn = get_connection()
    try:
        yield conn
    finally:
        conn.close()


# ---------- Lifespan ----------
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    configure_logging(config.log_level)
    init_db(db_path=get_db_path())
    logger.info("Sideline API ready (db=%s)", get_db_path())
    yield


# ---------- FastAPI app ----------
app = FastAPI(
    title="Sideline API",
    description="Backend for coach and fan dashboards: teams, rosters, lineups, matches and chat",
    version="0.1.0",
    lifespan=lifespan,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=list(config.cors_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

security = HTTPBearer(auto_error=False)


# ---------- Request models ----------


class SignupRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=254, pattern=r"^[^@\s]+@[^@\s]+$")
    password: str = Field(..., min_length=6)
    role: UserRoleName = UserRoleName.FAN


class LoginRequest(BaseModel):
    email: str
    password: str


class RoleRequest(BaseModel):
    role: str


class ProfileRequest(BaseModel):
    display_name: str | None = Field(None, max_length=100)
    bio: str | None = Field(None, max_length=1000)
    avatar_url: str | None = None


class CreateTeamRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    coach_name: str | None = Field(None, max_length=200)
    logo_url: str | None = None


def _reject_null(value: Any) -> Any:
    if value is None:
        raise ValueError("may be omitted but not null")
    return value


class UpdateTeamRequest(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=200)
    coach_name: str | None = Field(None, max_length=200)
    logo_url: str | None = None

    @field_validator("name")
    @classmethod
    def required_columns_not_null(cls, v: Any) -> Any:
        return _reject_null(v)


class CreatePlayerRequest(BaseModel):
    team_id: str
    name: str = Field(..., min_length=1, max_length=200)
    position: str | None = Field(None, max_length=10, description="Short code, e.g. GK, CB, CM, ST")
    jersey_num: str | None = Field(None, max_length=3)
    image_url: str | None = None


class UpdatePlayerRequest(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=200)
    position: str | None = Field(None, max_length=10)
    jersey_num: str | None = Field(None, max_length=3)
    image_url: str | None = None

    @field_validator("name")
    @classmethod
    def required_columns_not_null(cls, v: Any) -> Any:
        return _reject_null(v)


class MatchTeamStats(BaseModel):
    possession: float | None = Field(None, ge=0, le=100)
    shots: int | None = Field(None, ge=0)
    shots_on_target: int | None = Field(None, ge=0)
    corners: int | None = Field(None, ge=0)
    fouls: int | None = Field(None, ge=0)
    offsides: int | None = Field(None, ge=0)
    passes: int | None = Field(None, ge=0)
    pass_accuracy: float | None = Field(None, ge=0, le=100)
    tackles: int | None = Field(None, ge=0)
    saves: int | None = Field(None, ge=0)


class CreateMatchRequest(MatchTeamStats):
    team_id: str
    opponent_name: str = Field(..., min_length=1, max_length=200)
    date: dt.date
    team_score: int = Field(0, ge=0)
    opponent_score: int = Field(0, ge=0)
    status: MatchStatus = MatchStatus.SCHEDULED


class UpdateMatchRequest(MatchTeamStats):
    opponent_name: str | None = Field(None, min_length=1, max_length=200)
    date: dt.date | None = None
    team_score: int | None = Field(None, ge=0)
    opponent_score: int | None = Field(None, ge=0)
    status: MatchStatus | None = None

    @field_validator("opponent_name", "date", "team_score", "opponent_score", "status")
    @classmethod
    def required_columns_not_null(cls, v: Any) -> Any:
        return _reject_null(v)


class CreateEventRequest(BaseModel):
    player_id: str
    event_type: EventType
    minute: int | None = Field(None, ge=0, le=130)


class PlayerStatsRequest(BaseModel):
    """One player's line for one match. Missing fields are stored as 0."""
    goals: int | None = Field(None, ge=0)
    assists: int | None = Field(None, ge=0)
    shots: int | None = Field(None, ge=0)
    shots_on_target: int | None = Field(None, ge=0)
    chances_created: int | None = Field(None, ge=0)
    dribbles_attempted: int | None = Field(None, ge=0)
    dribbles_successful: int | None = Field(None, ge=0)
    offsides: int | None = Field(None, ge=0)
    tackles: int | None = Field(None, ge=0)
    interceptions: int | None = Field(None, ge=0)
    clearances: int | None = Field(None, ge=0)
    saves: int | None = Field(None, ge=0)
    clean_sheets: int | None = Field(None, ge=0)
    save_percentage: float | None = Field(None, ge=0, le=100)
    pass_completion: float | None = Field(None, ge=0, le=100)
    minutes_played: int | None = Field(None, ge=0)
    yellow_cards: int | None = Field(None, ge=0)
    red_cards: int | None = Field(None, ge=0)
    passes_successful: int | None = Field(None, ge=0)
    passes_attempted: int | None = Field(None, ge=0)
    goals_conceded: int | None = Field(None, ge=0)


class LineupSlot(BaseModel):
    player_id: str
    position_x: float
    position_y: float


class SaveLineupRequest(BaseModel):
    players: list[LineupSlot] = Field(default_factory=list)


class PositionRequest(BaseModel):
    x: float
    y: float


class AddToLineupRequest(BaseModel):
    x: float | None = Field(None, description="Defaults to the player's position line")
    y: float | None = None


class ChatRequest(BaseModel):
    message: str = Field(..., max_length=2000)


# ---------- Auth dependencies ----------


def _get_current_user_id(credentials: HTTPAuthorizationCredentials | None = Depends(security)) -> str | None:
    """User id from the bearer token, or None if no/invalid token."""
    if credentials is None:
        return None
    return decode_token(credentials.credentials)


def require_user(user_id: str | None = Depends(_get_current_user_id)) -> User:
    if user_id is None:
        raise HTTPException(status_code=401, detail="Login required")
    with db_conn() as conn:
        user = role_service.get_user_role(conn, user_id)
    if user is None:
        raise HTTPException(status_code=401, detail="Unknown user")
    return user


def require_role(*roles: UserRoleName) -> Callable[..., User]:
    allowed = {r.value for r in roles}

    def dependency(user: User = Depends(require_user)) -> User:
        if user.role not in allowed:
            raise HTTPException(status_code=403, detail=f"Requires role: {' or '.join(sorted(allowed))}")
        return user

    return dependency


require_coach = require_role(UserRoleName.COACH, UserRoleName.ADMIN)
require_admin = require_role(UserRoleName.ADMIN)


def _ensure_team_coach(conn: Any, user: User, team_id: str) -> None:
    """404 for an unknown team, 403 unless user coaches it. Admins may change any team."""
    team = team_service.get_team(conn, team_id)
    if team is None:
        raise HTTPException(status_code=404, detail="Team not found")
    if user.role != UserRoleName.ADMIN.value and team.coach_id != user.id:
        raise HTTPException(status_code=403, detail="Only this team's coach can change it")


def require_team_coach(team_id: str, user: User = Depends(require_coach)) -> User:
    with db_conn() as conn:
        _ensure_team_coach(conn, user, team_id)
    return user


def require_player_coach(player_id: str, user: User = Depends(require_coach)) -> User:
    with db_conn() as conn:
        player = player_service.get_player(conn, player_id)
        if player is None:
            raise HTTPException(status_code=404, detail="Player not found")
        _ensure_team_coach(conn, user, player.team_id)
    return user


def require_match_coach(match_id: str, user: User = Depends(require_coach)) -> User:
    with db_conn() as conn:
        match = match_service.get_match(conn, match_id)
        if match is None:
            raise HTTPException(status_code=404, detail="Match not found")
        _ensure_team_coach(conn, user, match.team_id)
    return user


# ---------- Health ----------


@app.get("/health")
def health() -> dict[str, Any]:
    return {"status": "ok"}


# ---------- Accounts ----------


@app.post("/signup")
def signup(req: SignupRequest) -> dict[str, Any]:
    """Create an account and its profile. Admin accounts are only made by an admin."""
    if req.role == UserRoleName.ADMIN:
        raise HTTPException(status_code=403, detail="Admin accounts cannot be self-registered")
    email = req.email.strip().lower()
    with db_conn() as conn:
        if role_service.get_user_by_email(conn, email) is not None:
            raise HTTPException(status_code=400, detail="Email already registered")
        user_id = str(uuid.uuid4())
        created = role_service.create_user_profile(
            conn, user_id, email, role=req.role.value, password_hash=hash_password(req.password)
        )
        if not created:
            raise HTTPException(status_code=500, detail="Could not create account")
        user = role_service.get_user_role(conn, user_id)
    return {"user": user.to_dict(), "token": create_access_token(user_id)}


@app.post("/login")
def login(req: LoginRequest) -> dict[str, Any]:
    with db_conn() as conn:
        user = role_service.get_user_by_email(conn, req.email.strip().lower())
    if user is None or not verify_password(req.password, user.password_hash):
        logger.warning("Failed login for %s", req.email)
        raise HTTPException(status_code=401, detail="Invalid email or password")
    return {"user": user.to_dict(), "token": create_access_token(user.id)}


@app.get("/me")
def me(user: User = Depends(require_user)) -> dict[str, Any]:
    return user.to_dict()


@app.put("/me/role")
def set_my_role(req: RoleRequest, user: User = Depends(require_user)) -> dict[str, Any]:
    """Pick Fan or Coach after signup. Only admins may grant Admin."""
    if req.role == UserRoleName.ADMIN.value and user.role != UserRoleName.ADMIN.value:
        raise HTTPException(status_code=403, detail="Only an admin can grant the Admin role")
    with db_conn() as conn:
        try:
            updated = role_service.update_user_role(conn, user.id, req.role)
        except InvalidRoleError as e:
            raise HTTPException(status_code=400, detail=str(e))
        if not updated:
            raise HTTPException(status_code=500, detail="Could not update role")
        return role_service.get_user_role(conn, user.id).to_dict()


@app.get("/me/profile")
def get_my_profile(user: User = Depends(require_user)) -> dict[str, Any]:
    with db_conn() as conn:
        profile_service.ensure_profile(conn, user.id)
        profile = profile_service.get_profile(conn, user.id)
    if profile is None:
        raise HTTPException(status_code=404, detail="Profile not found")
    return profile.to_dict()


@app.put("/me/profile")
def put_my_profile(req: ProfileRequest, user: User = Depends(require_user)) -> dict[str, Any]:
    with db_conn() as conn:
        if not profile_service.upsert_profile(conn, user.id, req.display_name, req.bio, req.avatar_url):
            raise HTTPException(status_code=500, detail="Could not save profile")
        return profile_service.get_profile(conn, user.id).to_dict()


# ---------- Teams ----------


@app.get("/teams")
def list_teams() -> dict[str, Any]:
    with db_conn() as conn:
        return {"teams": [t.to_dict() for t in team_service.list_teams(conn)]}


@app.post("/teams")
def create_team(req: CreateTeamRequest, user: User = Depends(require_coach)) -> dict[str, Any]:
    """The calling coach becomes the team's coach. The id is derived from the name."""
    with db_conn() as conn:
        try:
            team = team_service.create_team(
                conn, req.name, coach_id=user.id, coach_name=req.coach_name, logo_url=req.logo_url
            )
        except InvalidTeamNameError as e:
            raise HTTPException(status_code=400, detail=str(e))
    if team is None:
        raise HTTPException(status_code=400, detail="Team name already taken")
    return team.to_dict()


@app.get("/me/team")
def get_my_team(user: User = Depends(require_coach)) -> dict[str, Any]:
    with db_conn() as conn:
        team = team_service.get_current_team(conn, user.id)
    if team is None:
        raise HTTPException(status_code=404, detail="No team set up yet")
    return {"id": team.id, "name": team.name, "coachId": team.coach_id}


@app.get("/teams/{team_id}")
def get_team(team_id: str) -> dict[str, Any]:
    with db_conn() as conn:
        team = team_service.get_team(conn, team_id)
    if team is None:
        raise HTTPException(status_code=404, detail="Team not found")
    return team.to_dict()


@app.patch("/teams/{team_id}")
def update_team(team_id: str, req: UpdateTeamRequest, user: User = Depends(require_team_coach)) -> dict[str, Any]:
    with db_conn() as conn:
        if not team_service.update_team(conn, team_id, req.model_dump(exclude_unset=True)):
            raise HTTPException(status_code=400, detail="Nothing to update")
        return team_service.get_team(conn, team_id).to_dict()


@app.get("/teams/{team_id}/stats")
def get_team_stats(
    team_id: str,
    start: dt.date | None = Query(None, description="Inclusive, YYYY-MM-DD"),
    end: dt.date | None = Query(None, description="Inclusive, YYYY-MM-DD"),
) -> dict[str, Any]:
    """Season rollup (None when no matches in range) plus squad totals."""
    with db_conn() as conn:
        if team_service.get_team(conn, team_id) is None:
            raise HTTPException(status_code=404, detail="Team not found")
        matches = match_service.list_team_matches(conn, team_id)
        players = player_service.list_players_with_stats(conn, team_id)
    return {"teamId": team_id, **team_report(matches, players, start, end)}


# ---------- Players ----------


@app.get("/teams/{team_id}/players")
def list_team_players(team_id: str) -> dict[str, Any]:
    with db_conn() as conn:
        players = player_service.list_players_with_stats(conn, team_id)
    return {"players": [p.to_dict() for p in players]}


@app.post("/players")
def create_player(req: CreatePlayerRequest, user: User = Depends(require_coach)) -> dict[str, Any]:
    with db_conn() as conn:
        _ensure_team_coach(conn, user, req.team_id)
        player_id = player_service.create_player(
            conn, req.team_id, req.name.strip(), req.position, req.jersey_num, req.image_url
        )
        if player_id is None:
            raise HTTPException(status_code=500, detail="Could not create player")
        return player_service.get_player(conn, player_id).to_dict()


@app.get("/players/{player_id}")
def get_player(player_id: str) -> dict[str, Any]:
    with db_conn() as conn:
        player = player_service.get_player(conn, player_id)
    if player is None:
        raise HTTPException(status_code=404, detail="Player not found")
    return player.to_dict()


@app.patch("/players/{player_id}")
def update_player(player_id: str, req: UpdatePlayerRequest, user: User = Depends(require_player_coach)) -> dict[str, Any]:
    with db_conn() as conn:
        if not player_service.update_player(conn, player_id, req.model_dump(exclude_unset=True)):
            raise HTTPException(status_code=400, detail="Nothing to update")
        return player_service.get_player(conn, player_id).to_dict()


@app.delete("/players/{player_id}")
def delete_player(player_id: str, user: User = Depends(require_player_coach)) -> dict[str, Any]:
    with db_conn() as conn:
        if not player_service.delete_player(conn, player_id):
            raise HTTPException(status_code=404, detail="Player not found")
    return {"deleted": player_id}


@app.get("/players/{player_id}/stats")
def get_player_stats(player_id: str) -> dict[str, Any]:
    """Aggregated stats; null when the player has no recorded matches."""
    with db_conn() as conn:
        if player_service.get_player(conn, player_id) is None:
            raise HTTPException(status_code=404, detail="Player not found")
        stats = player_service.get_player_stats(conn, player_id)
    return {"playerId": player_id, "stats": stats.to_dict() if stats is not None else None}


@app.get("/players/{player_id}/key-stats")
def get_player_key_stats_endpoint(player_id: str) -> dict[str, Any]:
    """Headline and position-specific stats for the player card."""
    with db_conn() as conn:
        record = player_service.get_player(conn, player_id)
        if record is None:
            raise HTTPException(status_code=404, detail="Player not found")
        stats = player_service.aggregated_stats_for_players(conn, [player_id])
    view = to_player_view(record, stats[player_id])
    return {
        "playerId": player_id,
        "position": view.position,
        **get_player_key_stats(view),
        **get_position_specific_stats(view),
    }


@app.get("/players/{player_id}/stats/matches")
def get_player_match_stats(player_id: str) -> dict[str, Any]:
    with db_conn() as conn:
        records = player_service.player_stats_by_match(conn, player_id)
    return {"playerId": player_id, "matches": [r.to_dict() for r in records]}


# ---------- Matches ----------


@app.get("/matches")
def list_matches(team_id: str | None = Query(None, description="Only this team's matches")) -> dict[str, Any]:
    """Most recent first."""
    with db_conn() as conn:
        if team_id:
            matches = match_service.list_team_matches(conn, team_id)
        else:
            matches = match_service.list_matches(conn)
    return {"matches": [m.to_dict() for m in matches]}


@app.post("/matches")
def create_match(req: CreateMatchRequest, user: User = Depends(require_coach)) -> dict[str, Any]:
    with db_conn() as conn:
        _ensure_team_coach(conn, user, req.team_id)
        data = req.model_dump(mode="json", exclude_none=True)
        match_id = match_service.create_match(conn, data)
        if match_id is None:
            raise HTTPException(status_code=500, detail="Could not create match")
        return match_service.get_match(conn, match_id).to_dict()


@app.get("/matches/{match_id}")
def get_match(match_id: str) -> dict[str, Any]:
    with db_conn() as conn:
        match = match_service.get_match(conn, match_id)
    if match is None:
        raise HTTPException(status_code=404, detail="Match not found")
    return match.to_dict()


@app.patch("/matches/{match_id}")
def update_match(match_id: str, req: UpdateMatchRequest, user: User = Depends(require_match_coach)) -> dict[str, Any]:
    with db_conn() as conn:
        if not match_service.update_match(conn, match_id, req.model_dump(mode="json", exclude_unset=True)):
            raise HTTPException(status_code=400, detail="Nothing to update")
        return match_service.get_match(conn, match_id).to_dict()


@app.delete("/matches/{match_id}")
def delete_match(match_id: str, user: User = Depends(require_match_coach)) -> dict[str, Any]:
    with db_conn() as conn:
        if not match_service.delete_match(conn, match_id):
            raise HTTPException(status_code=404, detail="Match not found")
    return {"deleted": match_id}


@app.get("/matches/{match_id}/events")
def list_match_events(match_id: str) -> dict[str, Any]:
    with db_conn() as conn:
        events = match_service.list_match_events(conn, match_id)
    return {"events": [e.to_dict() for e in events]}


@app.post("/matches/{match_id}/events")
def create_match_event(match_id: str, req: CreateEventRequest, user: User = Depends(require_match_coach)) -> dict[str, Any]:
    with db_conn() as conn:
        if player_service.get_player(conn, req.player_id) is None:
            raise HTTPException(status_code=404, detail="Player not found")
        event_id = match_service.create_match_event(
            conn, {"match_id": match_id, **req.model_dump(mode="json")}
        )
        if event_id is None:
            raise HTTPException(status_code=500, detail="Could not record event")
        return match_service.get_match_event(conn, event_id).to_dict()


@app.delete("/events/{event_id}")
def delete_match_event(event_id: str, user: User = Depends(require_coach)) -> dict[str, Any]:
    with db_conn() as conn:
        event = match_service.get_match_event(conn, event_id)
        match = match_service.get_match(conn, event.match_id) if event is not None else None
        if match is None:
            raise HTTPException(status_code=404, detail="Event not found")
        _ensure_team_coach(conn, user, match.team_id)
        if not match_service.delete_match_event(conn, event_id):
            raise HTTPException(status_code=404, detail="Event not found")
    return {"deleted": event_id}


@app.get("/matches/{match_id}/player-stats")
def list_match_player_stats(match_id: str) -> dict[str, Any]:
    with db_conn() as conn:
        records = match_service.player_stats_for_match(conn, match_id)
    return {"playerStats": [r.to_dict() for r in records]}


@app.put("/matches/{match_id}/player-stats/{player_id}")
def put_match_player_stats(
    match_id: str, player_id: str, req: PlayerStatsRequest, user: User = Depends(require_match_coach)
) -> dict[str, Any]:
    """Write the player's full line for this match, replacing any earlier one."""
    with db_conn() as conn:
        if player_service.get_player(conn, player_id) is None:
            raise HTTPException(status_code=404, detail="Player not found")
        stats_id = match_service.upsert_player_stats(conn, match_id, player_id, req.model_dump())
        if stats_id is None:
            raise HTTPException(status_code=500, detail="Could not save player stats")
        records = match_service.player_stats_for_match(conn, match_id)
    saved = next(r for r in records if r.id == stats_id)
    return saved.to_dict()


# ---------- Lineups ----------


def _lineup_response(conn: Any, team_id: str) -> dict[str, Any]:
    lineup = lineup_service.load_lineup(conn, team_id)
    positions = {p.id: p.position for p in player_service.list_players_for_team(conn, team_id)}
    return {
        "teamId": team_id,
        "players": [p.to_dict() for p in lineup],
        "formation": formation(positions.get(p.player_id) for p in lineup),
    }


@app.get("/teams/{team_id}/lineup")
def get_lineup(team_id: str) -> dict[str, Any]:
    with db_conn() as conn:
        return _lineup_response(conn, team_id)


@app.put("/teams/{team_id}/lineup")
def save_lineup(team_id: str, req: SaveLineupRequest, user: User = Depends(require_team_coach)) -> dict[str, Any]:
    players = [LineupPlayer(s.player_id, s.position_x, s.position_y) for s in req.players]
    with db_conn() as conn:
        try:
            saved = lineup_service.save_lineup(conn, team_id, players)
        except (DuplicateLineupPlayerError, LineupFullError, PlayerNotInTeamError) as e:
            raise HTTPException(status_code=400, detail=str(e))
        if not saved:
            raise HTTPException(status_code=500, detail="Could not save lineup")
        return _lineup_response(conn, team_id)


@app.get("/teams/{team_id}/lineup/defaults")
def get_lineup_defaults(team_id: str) -> dict[str, Any]:
    """Default pitch coordinates for the current lineup, spread along each line."""
    with db_conn() as conn:
        lineup = lineup_service.load_lineup(conn, team_id)
        roster = {p.id: p for p in player_service.list_players_for_team(conn, team_id)}
    in_lineup = [roster[p.player_id] for p in lineup if p.player_id in roster]
    return {"teamId": team_id, "players": [p.to_dict() for p in initial_positions(in_lineup)]}


@app.post("/teams/{team_id}/lineup/{player_id}")
def add_to_lineup(
    team_id: str, player_id: str, req: AddToLineupRequest | None = None, user: User = Depends(require_team_coach)
) -> dict[str, Any]:
    with db_conn() as conn:
        x = req.x if req is not None else None
        y = req.y if req is not None else None
        if x is None or y is None:
            player = player_service.get_player(conn, player_id)
            spot = default_field_position(player.position if player else None, 0, 1)
            x = spot.x if x is None else x
            y = spot.y if y is None else y
        try:
            added = lineup_service.add_player_to_lineup(conn, team_id, player_id, x, y)
        except (DuplicateLineupPlayerError, LineupFullError, PlayerNotInTeamError) as e:
            raise HTTPException(status_code=400, detail=str(e))
        if not added:
            raise HTTPException(status_code=400, detail="Player already in lineup")
        return _lineup_response(conn, team_id)


@app.patch("/teams/{team_id}/lineup/{player_id}")
def move_in_lineup(
    team_id: str, player_id: str, req: PositionRequest, user: User = Depends(require_team_coach)
) -> dict[str, Any]:
    with db_conn() as conn:
        if not lineup_service.update_player_position(conn, team_id, player_id, req.x, req.y):
            raise HTTPException(status_code=404, detail="Player not in lineup")
        return _lineup_response(conn, team_id)


@app.delete("/teams/{team_id}/lineup/{player_id}")
def remove_from_lineup(team_id: str, player_id: str, user: User = Depends(require_team_coach)) -> dict[str, Any]:
    with db_conn() as conn:
        if not lineup_service.remove_player_from_lineup(conn, team_id, player_id):
            raise HTTPException(status_code=404, detail="Player not in lineup")
        return _lineup_response(conn, team_id)


# ---------- Favourites ----------


@app.get("/me/favorites")
def list_my_favorites(user: User = Depends(require_user)) -> dict[str, Any]:
    with db_conn() as conn:
        return {"teamIds": favorites_service.list_favorites(conn, user.id)}


@app.put("/me/favorites/{team_id}")
def add_my_favorite(team_id: str, user: User = Depends(require_user)) -> dict[str, Any]:
    with db_conn() as conn:
        if team_service.get_team(conn, team_id) is None:
            raise HTTPException(status_code=404, detail="Team not found")
        if not favorites_service.add_favorite(conn, user.id, team_id):
            raise HTTPException(status_code=500, detail="Could not save favourite")
    return {"teamId": team_id, "favorite": True}


@app.delete("/me/favorites/{team_id}")
def remove_my_favorite(team_id: str, user: User = Depends(require_user)) -> dict[str, Any]:
    with db_conn() as conn:
        if not favorites_service.remove_favorite(conn, user.id, team_id):
            raise HTTPException(status_code=500, detail="Could not remove favourite")
    return {"teamId": team_id, "favorite": False}


@app.post("/me/favorites/{team_id}/toggle")
def toggle_my_favorite(team_id: str, user: User = Depends(require_user)) -> dict[str, Any]:
    with db_conn() as conn:
        if team_service.get_team(conn, team_id) is None:
            raise HTTPException(status_code=404, detail="Team not found")
        state = favorites_service.toggle_favorite(conn, user.id, team_id)
    if state is None:
        raise HTTPException(status_code=500, detail="Could not update favourite")
    return {"teamId": team_id, "favorite": state}


# ---------- Chat ----------


@app.get("/matches/{match_id}/chat")
def list_chat(match_id: str) -> dict[str, Any]:
    with db_conn() as conn:
        return {"messages": [m.to_dict() for m in chat_service.list_chat_for_match(conn, match_id)]}


@app.post("/matches/{match_id}/chat")
def send_chat(match_id: str, req: ChatRequest, user: User = Depends(require_user)) -> dict[str, Any]:
    """Author shown is the profile display name, falling back to the email's local part."""
    with db_conn() as conn:
        if match_service.get_match(conn, match_id) is None:
            raise HTTPException(status_code=404, detail="Match not found")
        profile = profile_service.get_profile(conn, user.id)
        author = (profile.display_name if profile else None) or display_name_from_email(user.email)
        try:
            sent = chat_service.send_chat_message(conn, match_id, author, req.message, user_id=user.id)
        except EmptyMessageError as e:
            raise HTTPException(status_code=400, detail=str(e))
    if sent is None:
        raise HTTPException(status_code=500, detail="Could not send message")
    return sent.to_dict()


@app.delete("/chat/{message_id}")
def delete_chat(message_id: str, user: User = Depends(require_user)) -> dict[str, Any]:
    with db_conn() as conn:
        try:
            deleted = chat_service.delete_chat_message(conn, message_id, user.id)
        except NotMessageOwnerError as e:
            raise HTTPException(status_code=403, detail=str(e))
    if not deleted:
        raise HTTPException(status_code=404, detail="Message not found")
    return {"deleted": message_id}


# ---------- Admin ----------


@app.delete("/admin/users/{user_id}")
def admin_delete_user(user_id: str, admin: User = Depends(require_admin)) -> dict[str, Any]:
    if user_id == admin.id:
        raise HTTPException(status_code=400, detail="Admins cannot delete their own account")
    with db_conn() as conn:
        if not admin_service.delete_user_completely(conn, user_id):
            raise HTTPException(status_code=404, detail="User not found")
    logger.info("Admin %s deleted user %s", admin.id, user_id)
    return {"deleted": user_id}


@app.put("/admin/users/{user_id}/role")
def admin_set_role(user_id: str, req: RoleRequest, admin: User = Depends(require_admin)) -> dict[str, Any]:
    with db_conn() as conn:
        try:
            updated = role_service.update_user_role(conn, user_id, req.role)
        except InvalidRoleError as e:
            raise HTTPException(status_code=400, detail=str(e))
        if not updated:
            raise HTTPException(status_code=404, detail="User not found")
        return role_service.get_user_role(conn, user_id).to_dict()


@app.get("/admin/users")
def admin_list_users(admin: User = Depends(require_admin)) -> dict[str, Any]:
    """Newest accounts first."""
    with db_conn() as conn:
        users = admin_service.list_users(conn)
    return {"total": len(users), "users": [u.to_dict() for u in users]}


@app.get("/admin/chats")
def admin_list_chats(admin: User = Depends(require_admin)) -> dict[str, Any]:
    """Every match's chat, newest first."""
    with db_conn() as conn:
        messages = admin_service.list_all_chats(conn)
    return {"total": len(messages), "messages": [m.to_dict() for m in messages]}


@app.delete("/admin/chats/{message_id}")
def admin_delete_chat(message_id: str, admin: User = Depends(require_admin)) -> dict[str, Any]:
    with db_conn() as conn:
        if not admin_service.delete_chat(conn, message_id):
            raise HTTPException(status_code=404, detail="Message not found")
    logger.info("Admin %s removed chat message %s", admin.id, message_id)
    return {"deleted": message_id}
