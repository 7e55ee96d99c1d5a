"""
Repository interfaces for team-management data.
No business logic; only read/write operations.

Write methods commit by default; pass commit=False to compose several writes
into one transaction owned by the caller.
"""
from __future__ import annotations

import sqlite3
import uuid
from datetime import datetime, timezone
from typing import Any, Iterable

from sideline.models import (
    MATCH_STAT_FIELDS,
    PLAYER_STAT_FIELDS,
    ChatMessage,
    LineupPlayer,
    Match,
    MatchEvent,
    PlayerRecord,
    PlayerStatsRecord,
    Team,
    User,
    UserProfile,
)


def _parse_datetime(s: str | None) -> datetime:
    if s is None:
        raise ValueError("expected datetime string")
    return datetime.fromisoformat(s.replace("Z", "+00:00"))


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _update_row(
    conn: sqlite3.Connection,
    table: str,
    allowed: Iterable[str],
    updates: dict[str, Any],
    where: str,
    where_args: tuple,
    commit: bool = True,
) -> int:
    """UPDATE only the allowed columns present in updates. Returns rowcount (0 when nothing to set)."""
    cols = [c for c in allowed if c in updates]
    if not cols:
        return 0
    assignments = ", ".join(f"{c} = ?" for c in cols)
    args = tuple(updates[c] for c in cols) + where_args
    cur = conn.execute(f"UPDATE {table} SET {assignments} WHERE {where}", args)
    if commit:
        conn.commit()
    return cur.rowcount


# ---------- UserRepository ----------


class UserRepository:
    """CRUD for users (auth identity + role)."""

    _COLS = "id, email, role, google_id, password_hash, created_at"

    @staticmethod
    def _from_row(r: sqlite3.Row) -> User:
        return User(
            id=r["id"],
            email=r["email"],
            role=r["role"],
            created_at=_parse_datetime(r["created_at"]),
            google_id=r["google_id"],
            password_hash=r["password_hash"],
        )

    def create(
        self,
        conn: sqlite3.Connection,
        email: str,
        role: str,
        id: str | None = None,
        google_id: str | None = None,
        password_hash: str | None = None,
        commit: bool = True,
    ) -> User:
        uid = id or str(uuid.uuid4())
        now = _now()
        conn.execute(
            "INSERT INTO users (id, email, role, google_id, password_hash, created_at) VALUES (?, ?, ?, ?, ?, ?)",
            (uid, email, role, google_id, password_hash, now),
        )
        if commit:
            conn.commit()
        return User(
            id=uid, email=email, role=role, created_at=_parse_datetime(now),
            google_id=google_id, password_hash=password_hash,
        )

    def get(self, conn: sqlite3.Connection, user_id: str) -> User | None:
        row = conn.execute(f"SELECT {self._COLS} FROM users WHERE id = ?", (user_id,)).fetchone()
        return self._from_row(row) if row is not None else None

    def get_by_email(self, conn: sqlite3.Connection, email: str) -> User | None:
        row = conn.execute(f"SELECT {self._COLS} FROM users WHERE email = ?", (email,)).fetchone()
        return self._from_row(row) if row is not None else None

    def list_all(self, conn: sqlite3.Connection) -> list[User]:
        """Newest first."""
        rows = conn.execute(f"SELECT {self._COLS} FROM users ORDER BY created_at DESC, rowid DESC").fetchall()
        return [self._from_row(r) for r in rows]

    def update_role(self, conn: sqlite3.Connection, user_id: str, role: str) -> int:
        cur = conn.execute("UPDATE users SET role = ? WHERE id = ?", (role, user_id))
        conn.commit()
        return cur.rowcount

    def delete(self, conn: sqlite3.Connection, user_id: str, commit: bool = True) -> int:
        cur = conn.execute("DELETE FROM users WHERE id = ?", (user_id,))
        if commit:
            conn.commit()
        return cur.rowcount


# ---------- ProfileRepository ----------


class ProfileRepository:
    """CRUD for user_profiles. One profile per user, same id."""

    @staticmethod
    def _from_row(r: sqlite3.Row) -> UserProfile:
        return UserProfile(
            id=r["id"],
            display_name=r["display_name"],
            bio=r["bio"],
            avatar_url=r["avatar_url"],
            updated_at=_parse_datetime(r["updated_at"]) if r["updated_at"] else None,
        )

    def create(
        self,
        conn: sqlite3.Connection,
        user_id: str,
        display_name: str | None = None,
        commit: bool = True,
    ) -> UserProfile:
        now = _now()
        conn.execute(
            "INSERT INTO user_profiles (id, display_name, updated_at) VALUES (?, ?, ?)",
            (user_id, display_name, now),
        )
        if commit:
            conn.commit()
        return UserProfile(id=user_id, display_name=display_name, updated_at=_parse_datetime(now))

    def get(self, conn: sqlite3.Connection, user_id: str) -> UserProfile | None:
        row = conn.execute(
            "SELECT id, display_name, bio, avatar_url, updated_at FROM user_profiles WHERE id = ?",
            (user_id,),
        ).fetchone()
        return self._from_row(row) if row is not None else None

    def upsert(
        self,
        conn: sqlite3.Connection,
        user_id: str,
        display_name: str | None,
        bio: str | None,
        avatar_url: str | None,
    ) -> None:
        conn.execute(
            """INSERT INTO user_profiles (id, display_name, bio, avatar_url, updated_at)
               VALUES (?, ?, ?, ?, ?)
               ON CONFLICT(id) DO UPDATE SET
                   display_name = excluded.display_name,
                   bio = excluded.bio,
                   avatar_url = excluded.avatar_url,
                   updated_at = excluded.updated_at""",
            (user_id, display_name, bio, avatar_url, _now()),
        )
        conn.commit()

    def delete(self, conn: sqlite3.Connection, user_id: str, commit: bool = True) -> int:
        cur = conn.execute("DELETE FROM user_profiles WHERE id = ?", (user_id,))
        if commit:
            conn.commit()
        return cur.rowcount


# ---------- TeamRepository ----------


class TeamRepository:
    """CRUD for teams."""

    UPDATABLE = ("name", "coach_id", "coach_name", "logo_url")
    _COLS = "id, name, coach_id, coach_name, logo_url, created_at"

    @staticmethod
    def _from_row(r: sqlite3.Row) -> Team:
        return Team(
            id=r["id"],
            name=r["name"],
            created_at=_parse_datetime(r["created_at"]),
            coach_id=r["coach_id"],
            coach_name=r["coach_name"],
            logo_url=r["logo_url"],
        )

    def create(
        self,
        conn: sqlite3.Connection,
        id: str,
        name: str,
        coach_id: str | None = None,
        coach_name: str | None = None,
        logo_url: str | None = None,
    ) -> Team:
        now = _now()
        conn.execute(
            "INSERT INTO teams (id, name, coach_id, coach_name, logo_url, created_at) VALUES (?, ?, ?, ?, ?, ?)",
            (id, name, coach_id, coach_name, logo_url, now),
        )
        conn.commit()
        return Team(
            id=id, name=name, created_at=_parse_datetime(now),
            coach_id=coach_id, coach_name=coach_name, logo_url=logo_url,
        )

    def get(self, conn: sqlite3.Connection, team_id: str) -> Team | None:
        row = conn.execute(f"SELECT {self._COLS} FROM teams WHERE id = ?", (team_id,)).fetchone()
        return self._from_row(row) if row is not None else None

    def get_by_coach(self, conn: sqlite3.Connection, coach_id: str) -> Team | None:
        """First team coached by coach_id (a coach runs one team)."""
        row = conn.execute(
            f"SELECT {self._COLS} FROM teams WHERE coach_id = ? ORDER BY created_at LIMIT 1",
            (coach_id,),
        ).fetchone()
        return self._from_row(row) if row is not None else None

    def list_all(self, conn: sqlite3.Connection) -> list[Team]:
        rows = conn.execute(f"SELECT {self._COLS} FROM teams ORDER BY name").fetchall()
        return [self._from_row(r) for r in rows]

    def update(self, conn: sqlite3.Connection, team_id: str, updates: dict[str, Any]) -> int:
        return _update_row(conn, "teams", self.UPDATABLE, updates, "id = ?", (team_id,))

    def clear_coach(self, conn: sqlite3.Connection, coach_id: str, commit: bool = True) -> int:
        cur = conn.execute("UPDATE teams SET coach_id = NULL WHERE coach_id = ?", (coach_id,))
        if commit:
            conn.commit()
        return cur.rowcount


# ---------- PlayerRepository ----------


class PlayerRepository:
    """CRUD for players."""

    UPDATABLE = ("team_id", "name", "position", "jersey_num", "image_url")
    _COLS = "id, team_id, name, position, jersey_num, image_url, created_at"

    @staticmethod
    def _from_row(r: sqlite3.Row) -> PlayerRecord:
        return PlayerRecord(
            id=r["id"],
            team_id=r["team_id"],
            name=r["name"],
            created_at=_parse_datetime(r["created_at"]),
            position=r["position"],
            jersey_num=r["jersey_num"],
            image_url=r["image_url"],
        )

    def create(
        self,
        conn: sqlite3.Connection,
        team_id: str,
        name: str,
        position: str | None = None,
        jersey_num: str | None = None,
        image_url: str | None = None,
        id: str | None = None,
    ) -> PlayerRecord:
        pid = id or str(uuid.uuid4())
        now = _now()
        conn.execute(
            "INSERT INTO players (id, team_id, name, position, jersey_num, image_url, created_at) VALUES (?, ?, ?, ?, ?, ?, ?)",
            (pid, team_id, name, position, jersey_num, image_url, now),
        )
        conn.commit()
        return PlayerRecord(
            id=pid, team_id=team_id, name=name, created_at=_parse_datetime(now),
            position=position, jersey_num=jersey_num, image_url=image_url,
        )

    def get(self, conn: sqlite3.Connection, player_id: str) -> PlayerRecord | None:
        row = conn.execute(f"SELECT {self._COLS} FROM players WHERE id = ?", (player_id,)).fetchone()
        return self._from_row(row) if row is not None else None

    def list_all(self, conn: sqlite3.Connection) -> list[PlayerRecord]:
        rows = conn.execute(f"SELECT {self._COLS} FROM players ORDER BY created_at, rowid").fetchall()
        return [self._from_row(r) for r in rows]

    def list_by_team(self, conn: sqlite3.Connection, team_id: str) -> list[PlayerRecord]:
        rows = conn.execute(
            f"SELECT {self._COLS} FROM players WHERE team_id = ? ORDER BY created_at, rowid",
            (team_id,),
        ).fetchall()
        return [self._from_row(r) for r in rows]

    def update(self, conn: sqlite3.Connection, player_id: str, updates: dict[str, Any]) -> int:
        return _update_row(conn, "players", self.UPDATABLE, updates, "id = ?", (player_id,))

    def delete(self, conn: sqlite3.Connection, player_id: str) -> int:
        """Delete player; lineup slot, stats and events go with it (ON DELETE CASCADE)."""
        cur = conn.execute("DELETE FROM players WHERE id = ?", (player_id,))
        conn.commit()
        return cur.rowcount


# ---------- MatchRepository ----------


class MatchRepository:
    """CRUD for matches."""

    UPDATABLE = ("opponent_name", "team_score", "opponent_score", "date", "status") + MATCH_STAT_FIELDS
    _COLS = "id, team_id, opponent_name, team_score, opponent_score, date, status, created_at, " + ", ".join(MATCH_STAT_FIELDS)

    @staticmethod
    def _from_row(r: sqlite3.Row) -> Match:
        return Match(
            id=r["id"],
            team_id=r["team_id"],
            opponent_name=r["opponent_name"],
            team_score=r["team_score"],
            opponent_score=r["opponent_score"],
            date=r["date"],
            status=r["status"],
            created_at=_parse_datetime(r["created_at"]),
            **{name: r[name] for name in MATCH_STAT_FIELDS},
        )

    def create(
        self,
        conn: sqlite3.Connection,
        team_id: str,
        opponent_name: str,
        date: str,
        team_score: int = 0,
        opponent_score: int = 0,
        status: str = "scheduled",
        stats: dict[str, Any] | None = None,
        id: str | None = None,
    ) -> Match:
        mid = id or str(uuid.uuid4())
        now = _now()
        stats = stats or {}
        stat_values = tuple(stats.get(name) for name in MATCH_STAT_FIELDS)
        placeholders = ", ".join("?" for _ in range(8 + len(MATCH_STAT_FIELDS)))
        conn.execute(
            f"INSERT INTO matches ({self._COLS}) VALUES ({placeholders})",
            (mid, team_id, opponent_name, team_score, opponent_score, date, status, now) + stat_values,
        )
        conn.commit()
        return Match(
            id=mid, team_id=team_id, opponent_name=opponent_name,
            team_score=team_score, opponent_score=opponent_score,
            date=date, status=status, created_at=_parse_datetime(now),
            **dict(zip(MATCH_STAT_FIELDS, stat_values)),
        )

    def get(self, conn: sqlite3.Connection, match_id: str) -> Match | None:
        row = conn.execute(f"SELECT {self._COLS} FROM matches WHERE id = ?", (match_id,)).fetchone()
        return self._from_row(row) if row is not None else None

    def list_all(self, conn: sqlite3.Connection) -> list[Match]:
        """Most recent first."""
        rows = conn.execute(
            f"SELECT {self._COLS} FROM matches ORDER BY date DESC, created_at DESC"
        ).fetchall()
        return [self._from_row(r) for r in rows]

    def list_by_team(self, conn: sqlite3.Connection, team_id: str) -> list[Match]:
        """Most recent first."""
        rows = conn.execute(
            f"SELECT {self._COLS} FROM matches WHERE team_id = ? ORDER BY date DESC, created_at DESC",
            (team_id,),
        ).fetchall()
        return [self._from_row(r) for r in rows]

    def update(self, conn: sqlite3.Connection, match_id: str, updates: dict[str, Any]) -> int:
        return _update_row(conn, "matches", self.UPDATABLE, updates, "id = ?", (match_id,))

    def delete(self, conn: sqlite3.Connection, match_id: str) -> int:
        """Delete match; events, stats and chat go with it (ON DELETE CASCADE)."""
        cur = conn.execute("DELETE FROM matches WHERE id = ?", (match_id,))
        conn.commit()
        return cur.rowcount


# ---------- MatchEventRepository ----------


class MatchEventRepository:
    """CRUD for match_events (goals, assists, cards)."""

    _COLS = "id, match_id, player_id, event_type, minute, created_at"

    @staticmethod
    def _from_row(r: sqlite3.Row) -> MatchEvent:
        return MatchEvent(
            id=r["id"],
            match_id=r["match_id"],
            player_id=r["player_id"],
            event_type=r["event_type"],
            created_at=_parse_datetime(r["created_at"]),
            minute=r["minute"],
        )

    def create(
        self,
        conn: sqlite3.Connection,
        match_id: str,
        player_id: str,
        event_type: str,
        minute: int | None = None,
        id: str | None = None,
    ) -> MatchEvent:
        eid = id or str(uuid.uuid4())
        now = _now()
        conn.execute(
            f"INSERT INTO match_events ({self._COLS}) VALUES (?, ?, ?, ?, ?, ?)",
            (eid, match_id, player_id, event_type, minute, now),
        )
        conn.commit()
        return MatchEvent(
            id=eid, match_id=match_id, player_id=player_id, event_type=event_type,
            created_at=_parse_datetime(now), minute=minute,
        )

    def get(self, conn: sqlite3.Connection, event_id: str) -> MatchEvent | None:
        row = conn.execute(f"SELECT {self._COLS} FROM match_events WHERE id = ?", (event_id,)).fetchone()
        return self._from_row(row) if row is not None else None

    def list_by_match(self, conn: sqlite3.Connection, match_id: str) -> list[MatchEvent]:
        rows = conn.execute(
            f"SELECT {self._COLS} FROM match_events WHERE match_id = ? ORDER BY created_at, rowid",
            (match_id,),
        ).fetchall()
        return [self._from_row(r) for r in rows]

    def delete(self, conn: sqlite3.Connection, event_id: str) -> int:
        cur = conn.execute("DELETE FROM match_events WHERE id = ?", (event_id,))
        conn.commit()
        return cur.rowcount


# ---------- PlayerStatsRepository ----------


class PlayerStatsRepository:
    """CRUD for player_stats. One row per (player, match)."""

    _COLS = "id, player_id, match_id, created_at, updated_at, " + ", ".join(PLAYER_STAT_FIELDS)

    @staticmethod
    def _from_row(r: sqlite3.Row) -> PlayerStatsRecord:
        return PlayerStatsRecord(
            id=r["id"],
            player_id=r["player_id"],
            match_id=r["match_id"],
            created_at=_parse_datetime(r["created_at"]),
            updated_at=_parse_datetime(r["updated_at"]),
            **{name: r[name] for name in PLAYER_STAT_FIELDS},
        )

    def create(
        self,
        conn: sqlite3.Connection,
        player_id: str,
        match_id: str,
        stats: dict[str, Any],
        id: str | None = None,
    ) -> PlayerStatsRecord:
        sid = id or str(uuid.uuid4())
        now = _now()
        values = tuple(stats.get(name) or 0 for name in PLAYER_STAT_FIELDS)
        placeholders = ", ".join("?" for _ in range(5 + len(PLAYER_STAT_FIELDS)))
        conn.execute(
            f"INSERT INTO player_stats ({self._COLS}) VALUES ({placeholders})",
            (sid, player_id, match_id, now, now) + values,
        )
        conn.commit()
        return PlayerStatsRecord(
            id=sid, player_id=player_id, match_id=match_id,
            created_at=_parse_datetime(now), updated_at=_parse_datetime(now),
            **dict(zip(PLAYER_STAT_FIELDS, values)),
        )

    def get(self, conn: sqlite3.Connection, stats_id: str) -> PlayerStatsRecord | None:
        row = conn.execute(f"SELECT {self._COLS} FROM player_stats WHERE id = ?", (stats_id,)).fetchone()
        return self._from_row(row) if row is not None else None

    def get_for_player_and_match(
        self, conn: sqlite3.Connection, player_id: str, match_id: str
    ) -> PlayerStatsRecord | None:
        row = conn.execute(
            f"SELECT {self._COLS} FROM player_stats WHERE player_id = ? AND match_id = ?",
            (player_id, match_id),
        ).fetchone()
        return self._from_row(row) if row is not None else None

    def list_by_match(self, conn: sqlite3.Connection, match_id: str) -> list[PlayerStatsRecord]:
        rows = conn.execute(
            f"SELECT {self._COLS} FROM player_stats WHERE match_id = ? ORDER BY created_at, rowid",
            (match_id,),
        ).fetchall()
        return [self._from_row(r) for r in rows]

    def list_by_player(self, conn: sqlite3.Connection, player_id: str) -> list[PlayerStatsRecord]:
        """Newest first."""
        rows = conn.execute(
            f"SELECT {self._COLS} FROM player_stats WHERE player_id = ? ORDER BY created_at DESC, rowid DESC",
            (player_id,),
        ).fetchall()
        return [self._from_row(r) for r in rows]

    def list_by_players(self, conn: sqlite3.Connection, player_ids: list[str]) -> list[PlayerStatsRecord]:
        """Newest first, across all given players."""
        if not player_ids:
            return []
        marks = ", ".join("?" for _ in player_ids)
        rows = conn.execute(
            f"SELECT {self._COLS} FROM player_stats WHERE player_id IN ({marks}) ORDER BY created_at DESC, rowid DESC",
            tuple(player_ids),
        ).fetchall()
        return [self._from_row(r) for r in rows]

    def update(self, conn: sqlite3.Connection, stats_id: str, stats: dict[str, Any]) -> int:
        if not any(name in stats for name in PLAYER_STAT_FIELDS):
            return 0
        return _update_row(
            conn, "player_stats", PLAYER_STAT_FIELDS + ("updated_at",),
            {**stats, "updated_at": _now()}, "id = ?", (stats_id,),
        )


# ---------- LineupRepository ----------


class LineupRepository:
    """CRUD for lineups. seq keeps insertion order stable."""

    @staticmethod
    def _from_row(r: sqlite3.Row) -> LineupPlayer:
        return LineupPlayer(
            player_id=r["player_id"],
            position_x=r["position_x"],
            position_y=r["position_y"],
        )

    def list_by_team(self, conn: sqlite3.Connection, team_id: str) -> list[LineupPlayer]:
        rows = conn.execute(
            "SELECT player_id, position_x, position_y FROM lineups WHERE team_id = ? ORDER BY seq",
            (team_id,),
        ).fetchall()
        return [self._from_row(r) for r in rows]

    def count_by_team(self, conn: sqlite3.Connection, team_id: str) -> int:
        row = conn.execute("SELECT COUNT(*) FROM lineups WHERE team_id = ?", (team_id,)).fetchone()
        return row[0]

    def contains(self, conn: sqlite3.Connection, team_id: str, player_id: str) -> bool:
        row = conn.execute(
            "SELECT 1 FROM lineups WHERE team_id = ? AND player_id = ?", (team_id, player_id)
        ).fetchone()
        return row is not None

    def add(
        self,
        conn: sqlite3.Connection,
        team_id: str,
        player_id: str,
        position_x: float,
        position_y: float,
        commit: bool = True,
    ) -> LineupPlayer:
        now = _now()
        row = conn.execute("SELECT COALESCE(MAX(seq), 0) FROM lineups WHERE team_id = ?", (team_id,)).fetchone()
        conn.execute(
            """INSERT INTO lineups (id, team_id, player_id, position_x, position_y, seq, created_at, updated_at)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
            (str(uuid.uuid4()), team_id, player_id, position_x, position_y, row[0] + 1, now, now),
        )
        if commit:
            conn.commit()
        return LineupPlayer(player_id=player_id, position_x=position_x, position_y=position_y)

    def update_position(
        self,
        conn: sqlite3.Connection,
        team_id: str,
        player_id: str,
        position_x: float,
        position_y: float,
    ) -> int:
        cur = conn.execute(
            "UPDATE lineups SET position_x = ?, position_y = ?, updated_at = ? WHERE team_id = ? AND player_id = ?",
            (position_x, position_y, _now(), team_id, player_id),
        )
        conn.commit()
        return cur.rowcount

    def remove(self, conn: sqlite3.Connection, team_id: str, player_id: str) -> int:
        cur = conn.execute(
            "DELETE FROM lineups WHERE team_id = ? AND player_id = ?", (team_id, player_id)
        )
        conn.commit()
        return cur.rowcount

    def delete_by_team(self, conn: sqlite3.Connection, team_id: str, commit: bool = True) -> int:
        cur = conn.execute("DELETE FROM lineups WHERE team_id = ?", (team_id,))
        if commit:
            conn.commit()
        return cur.rowcount


# ---------- FavoriteRepository ----------


class FavoriteRepository:
    """CRUD for favourites (user_id, team_id)."""

    def list_team_ids(self, conn: sqlite3.Connection, user_id: str) -> list[str]:
        rows = conn.execute(
            "SELECT team_id FROM favourites WHERE user_id = ? ORDER BY created_at, rowid",
            (user_id,),
        ).fetchall()
        return [r["team_id"] for r in rows]

    def exists(self, conn: sqlite3.Connection, user_id: str, team_id: str) -> bool:
        row = conn.execute(
            "SELECT 1 FROM favourites WHERE user_id = ? AND team_id = ?", (user_id, team_id)
        ).fetchone()
        return row is not None

    def upsert(self, conn: sqlite3.Connection, user_id: str, team_id: str) -> None:
        conn.execute(
            "INSERT INTO favourites (user_id, team_id, created_at) VALUES (?, ?, ?) ON CONFLICT(user_id, team_id) DO NOTHING",
            (user_id, team_id, _now()),
        )
        conn.commit()

    def delete(self, conn: sqlite3.Connection, user_id: str, team_id: str) -> int:
        cur = conn.execute(
            "DELETE FROM favourites WHERE user_id = ? AND team_id = ?", (user_id, team_id)
        )
        conn.commit()
        return cur.rowcount

    def delete_by_user(self, conn: sqlite3.Connection, user_id: str, commit: bool = True) -> int:
        cur = conn.execute("DELETE FROM favourites WHERE user_id = ?", (user_id,))
        if commit:
            conn.commit()
        return cur.rowcount


# ---------- ChatRepository ----------


class ChatRepository:
    """CRUD for chats (match chat messages)."""

    _COLS = "id, match_id, user_id, author, message, inserted_at"

    @staticmethod
    def _from_row(r: sqlite3.Row) -> ChatMessage:
        return ChatMessage(
            id=r["id"],
            match_id=r["match_id"],
            message=r["message"],
            inserted_at=_parse_datetime(r["inserted_at"]),
            user_id=r["user_id"],
            author=r["author"],
        )

    def create(
        self,
        conn: sqlite3.Connection,
        match_id: str,
        message: str,
        author: str | None = None,
        user_id: str | None = None,
    ) -> ChatMessage:
        cid = str(uuid.uuid4())
        now = _now()
        conn.execute(
            f"INSERT INTO chats ({self._COLS}) VALUES (?, ?, ?, ?, ?, ?)",
            (cid, match_id, user_id, author, message, now),
        )
        conn.commit()
        return ChatMessage(
            id=cid, match_id=match_id, message=message, inserted_at=_parse_datetime(now),
            user_id=user_id, author=author,
        )

    def get(self, conn: sqlite3.Connection, message_id: str) -> ChatMessage | None:
        row = conn.execute(f"SELECT {self._COLS} FROM chats WHERE id = ?", (message_id,)).fetchone()
        return self._from_row(row) if row is not None else None

    def list_by_match(self, conn: sqlite3.Connection, match_id: str) -> list[ChatMessage]:
        """Oldest first."""
        rows = conn.execute(
            f"SELECT {self._COLS} FROM chats WHERE match_id = ? ORDER BY inserted_at, rowid",
            (match_id,),
        ).fetchall()
        return [self._from_row(r) for r in rows]

    def list_all(self, conn: sqlite3.Connection) -> list[ChatMessage]:
        """Every match's chat, newest first."""
        rows = conn.execute(
            f"SELECT {self._COLS} FROM chats ORDER BY inserted_at DESC, rowid DESC"
        ).fetchall()
        return [self._from_row(r) for r in rows]

    def delete(self, conn: sqlite3.Connection, message_id: str, user_id: str) -> int:
        cur = conn.execute("DELETE FROM chats WHERE id = ? AND user_id = ?", (message_id, user_id))
        conn.commit()
        return cur.rowcount

    def delete_any(self, conn: sqlite3.Connection, message_id: str) -> int:
        """Delete regardless of author (moderation)."""
        cur = conn.execute("DELETE FROM chats WHERE id = ?", (message_id,))
        conn.commit()
        return cur.rowcount

    def delete_by_user(self, conn: sqlite3.Connection, user_id: str, commit: bool = True) -> int:
        cur = conn.execute("DELETE FROM chats WHERE user_id = ?", (user_id,))
        if commit:
            conn.commit()
        return cur.rowcount
