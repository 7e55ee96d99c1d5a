"""
SQLite schema for team-management entities.
Migration-friendly: each table created with IF NOT EXISTS.
"""
from __future__ import annotations


def users_schema() -> str:
    """Auth identity and role. role: Fan | Coach | Admin."""
    return """
    CREATE TABLE IF NOT EXISTS users (
        id TEXT PRIMARY KEY,
        email TEXT NOT NULL,
        role TEXT NOT NULL DEFAULT 'Fan',
        google_id TEXT,
        password_hash TEXT,
        created_at TEXT NOT NULL
    );
    CREATE UNIQUE INDEX IF NOT EXISTS ix_users_email ON users(email);
    """


def user_profiles_schema() -> str:
    return """
    CREATE TABLE IF NOT EXISTS user_profiles (
        id TEXT PRIMARY KEY,
        display_name TEXT,
        bio TEXT,
        avatar_url TEXT,
        updated_at TEXT,
        FOREIGN KEY (id) REFERENCES users(id) ON DELETE CASCADE
    );
    """


def teams_schema() -> str:
    """Team id is the slug of its name. coach_id is cleared when the coach is deleted."""
    return """
    CREATE TABLE IF NOT EXISTS teams (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        coach_id TEXT,
        coach_name TEXT,
        logo_url TEXT,
        created_at TEXT NOT NULL,
        FOREIGN KEY (coach_id) REFERENCES users(id) ON DELETE SET NULL
    );
    CREATE INDEX IF NOT EXISTS ix_teams_coach ON teams(coach_id);
    """


def players_schema() -> str:
    return """
    CREATE TABLE IF NOT EXISTS players (
        id TEXT PRIMARY KEY,
        team_id TEXT NOT NULL,
        name TEXT NOT NULL,
        position TEXT,
        jersey_num TEXT,
        image_url TEXT,
        created_at TEXT NOT NULL,
        FOREIGN KEY (team_id) REFERENCES teams(id) ON DELETE CASCADE
    );
    CREATE INDEX IF NOT EXISTS ix_players_team ON players(team_id);
    """


def matches_schema() -> str:
    """One row per fixture from the team's point of view. Team-level stats are optional."""
    return """
    CREATE TABLE IF NOT EXISTS matches (
        id TEXT PRIMARY KEY,
        team_id TEXT NOT NULL,
        opponent_name TEXT NOT NULL,
        team_score INTEGER NOT NULL DEFAULT 0,
        opponent_score INTEGER NOT NULL DEFAULT 0,
        date TEXT NOT NULL,
        status TEXT NOT NULL DEFAULT 'scheduled',
        possession REAL,
        shots INTEGER,
        shots_on_target INTEGER,
        corners INTEGER,
        fouls INTEGER,
        offsides INTEGER,
        passes INTEGER,
        pass_accuracy REAL,
        tackles INTEGER,
        saves INTEGER,
        created_at TEXT NOT NULL,
        FOREIGN KEY (team_id) REFERENCES teams(id) ON DELETE CASCADE
    );
    CREATE INDEX IF NOT EXISTS ix_matches_team ON matches(team_id);
    CREATE INDEX IF NOT EXISTS ix_matches_date ON matches(date);
    """


def match_events_schema() -> str:
    """event_type: goal | assist | yellow_card | red_card."""
    return """
    CREATE TABLE IF NOT EXISTS match_events (
        id TEXT PRIMARY KEY,
        match_id TEXT NOT NULL,
        player_id TEXT NOT NULL,
        event_type TEXT NOT NULL,
        minute INTEGER,
        created_at TEXT NOT NULL,
        FOREIGN KEY (match_id) REFERENCES matches(id) ON DELETE CASCADE,
        FOREIGN KEY (player_id) REFERENCES players(id) ON DELETE CASCADE
    );
    CREATE INDEX IF NOT EXISTS ix_match_events_match ON match_events(match_id);
    """


def player_stats_schema() -> str:
    """One stats row per (player, match)."""
    return """
    CREATE TABLE IF NOT EXISTS player_stats (
        id TEXT PRIMARY KEY,
        player_id TEXT NOT NULL,
        match_id TEXT NOT NULL,
        goals INTEGER NOT NULL DEFAULT 0,
        assists INTEGER NOT NULL DEFAULT 0,
        shots INTEGER NOT NULL DEFAULT 0,
        shots_on_target INTEGER NOT NULL DEFAULT 0,
        chances_created INTEGER NOT NULL DEFAULT 0,
        dribbles_attempted INTEGER NOT NULL DEFAULT 0,
        dribbles_successful INTEGER NOT NULL DEFAULT 0,
        offsides INTEGER NOT NULL DEFAULT 0,
        tackles INTEGER NOT NULL DEFAULT 0,
        interceptions INTEGER NOT NULL DEFAULT 0,
        clearances INTEGER NOT NULL DEFAULT 0,
        saves INTEGER NOT NULL DEFAULT 0,
        clean_sheets INTEGER NOT NULL DEFAULT 0,
        save_percentage REAL NOT NULL DEFAULT 0,
        pass_completion REAL NOT NULL DEFAULT 0,
        minutes_played INTEGER NOT NULL DEFAULT 0,
        yellow_cards INTEGER NOT NULL DEFAULT 0,
        red_cards INTEGER NOT NULL DEFAULT 0,
        passes_successful INTEGER NOT NULL DEFAULT 0,
        passes_attempted INTEGER NOT NULL DEFAULT 0,
        goals_conceded INTEGER NOT NULL DEFAULT 0,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        FOREIGN KEY (player_id) REFERENCES players(id) ON DELETE CASCADE,
        FOREIGN KEY (match_id) REFERENCES matches(id) ON DELETE CASCADE
    );
    CREATE UNIQUE INDEX IF NOT EXISTS ix_player_stats_player_match ON player_stats(player_id, match_id);
    CREATE INDEX IF NOT EXISTS ix_player_stats_match ON player_stats(match_id);
    """


def lineups_schema() -> str:
    """Starting lineup: one row per player on the pitch. position_x/position_y are percentages of the field."""
    return """
    CREATE TABLE IF NOT EXISTS lineups (
        id TEXT PRIMARY KEY,
        team_id TEXT NOT NULL,
        player_id TEXT NOT NULL,
        position_x REAL NOT NULL,
        position_y REAL NOT NULL,
        seq INTEGER NOT NULL,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        FOREIGN KEY (team_id) REFERENCES teams(id) ON DELETE CASCADE,
        FOREIGN KEY (player_id) REFERENCES players(id) ON DELETE CASCADE
    );
    CREATE UNIQUE INDEX IF NOT EXISTS ix_lineups_team_player ON lineups(team_id, player_id);
    """


def favourites_schema() -> str:
    return """
    CREATE TABLE IF NOT EXISTS favourites (
        user_id TEXT NOT NULL,
        team_id TEXT NOT NULL,
        created_at TEXT NOT NULL,
        PRIMARY KEY (user_id, team_id),
        FOREIGN KEY (user_id) REFERENCES users(id) ON DELETE CASCADE,
        FOREIGN KEY (team_id) REFERENCES teams(id) ON DELETE CASCADE
    );
    """


def chats_schema() -> str:
    """Match chat. user_id is NULL for anonymous authors."""
    return """
    CREATE TABLE IF NOT EXISTS chats (
        id TEXT PRIMARY KEY,
        match_id TEXT NOT NULL,
        user_id TEXT,
        author TEXT,
        message TEXT NOT NULL,
        inserted_at TEXT NOT NULL,
        FOREIGN KEY (match_id) REFERENCES matches(id) ON DELETE CASCADE
    );
    CREATE INDEX IF NOT EXISTS ix_chats_match ON chats(match_id);
    """


def all_schema_sql() -> str:
    """Combine all schema DDL for a single execution. Referenced tables come first."""
    return "\n".join([
        users_schema(),
        user_profiles_schema(),
        teams_schema(),
        players_schema(),
        matches_schema(),
        match_events_schema(),
        player_stats_schema(),
        lineups_schema(),
        favourites_schema(),
        chats_schema(),
    ])
