#!/usr/bin/env python3
"""
Demo data: coach -> team -> squad -> two matches with stats and events -> lineup -> report.
Run from project root: python3 scripts/seed_demo.py
"""
from __future__ import annotations

import json
import sys
from pathlib import Path

# Ensure project root on path
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from sideline.auth import hash_password
from sideline.config import configure_logging
from sideline.persistence import get_connection, init_db
from sideline.persistence.db import set_db_path
from sideline.services import LineupService, MatchService, PlayerService, RoleService, TeamService
from sideline.services.lineup_service import formation, initial_positions
from sideline.stats import team_report

SQUAD = [
    ("Dani Ortega", "GK", "1"),
    ("Kofi Mensah", "CB", "4"),
    ("Lena Berg", "CB", "5"),
    ("Tom Reyes", "LB", "3"),
    ("Ivo Petrov", "RB", "2"),
    ("Sara Kim", "CDM", "6"),
    ("Noah Fischer", "CM", "8"),
    ("Maya Costa", "CAM", "10"),
    ("Eli Novak", "LW", "11"),
    ("Jonas Weber", "ST", "9"),
    ("Ravi Shah", "RW", "7"),
]

MATCHES = [
    {
        "opponent_name": "Harbour Town",
        "date": "2024-03-02",
        "team_score": 2,
        "opponent_score": 1,
        "status": "completed",
        "possession": 58,
        "shots": 14,
        "shots_on_target": 6,
        "corners": 7,
        "fouls": 9,
        "passes": 512,
        "pass_accuracy": 84.5,
        "tackles": 18,
        "saves": 3,
    },
    {
        "opponent_name": "Riverside",
        "date": "2024-03-09",
        "team_score": 1,
        "opponent_score": 1,
        "status": "completed",
        "possession": 47,
        "shots": 9,
        "shots_on_target": 3,
        "fouls": 12,
        "tackles": 22,
        "saves": 5,
    },
]


def main() -> None:
    configure_logging("WARNING")
    db_path = PROJECT_ROOT / "data" / "seed_demo.db"
    if db_path.exists():
        db_path.unlink()
    set_db_path(db_path)
    init_db(db_path=db_path)

    roles = RoleService()
    teams = TeamService()
    players = PlayerService()
    matches = MatchService()
    lineups = LineupService()

    conn = get_connection()
    try:
        # 1. Coach account
        coach_id = "demo-coach"
        roles.create_user_profile(conn, coach_id, "coach@sideline.test", role="Coach", password_hash=hash_password("demo1234"))
        print(f"Created coach: {coach_id} (coach@sideline.test / demo1234)")

        # 2. Team and squad
        team = teams.create_team(conn, "Sideline FC", coach_id=coach_id, coach_name="Demo Coach")
        ids = {}
        for name, position, jersey in SQUAD:
            ids[position] = players.create_player(conn, team.id, name, position=position, jersey_num=jersey)
        print(f"Created team: {team.name} (id={team.id}) with {len(ids)} players")

        # 3. Matches with player stats and events
        for i, data in enumerate(MATCHES):
            match_id = matches.create_match(conn, {"team_id": team.id, **data})
            matches.upsert_player_stats(conn, match_id, ids["ST"], {
                "goals": 1, "shots": 4 - i, "shots_on_target": 2, "minutes_played": 90, "pass_completion": 71.0,
            })
            matches.upsert_player_stats(conn, match_id, ids["GK"], {
                "saves": data["saves"], "minutes_played": 90, "goals_conceded": data["opponent_score"],
            })
            matches.upsert_player_stats(conn, match_id, ids["CB"], {
                "tackles": 5, "interceptions": 3, "clearances": 6, "yellow_cards": i, "pass_completion": 88.0,
            })
            matches.create_match_event(conn, {"match_id": match_id, "player_id": ids["ST"], "event_type": "goal", "minute": 23 + i * 40})
            print(f"Recorded match vs {data['opponent_name']}: {data['team_score']}-{data['opponent_score']}")

        # 4. Lineup at default positions
        squad = players.list_players_for_team(conn, team.id)
        lineups.save_lineup(conn, team.id, initial_positions(squad))
        print(f"Saved lineup: {formation(p.position for p in squad)}")

        # 5. Report
        report = team_report(
            matches.list_team_matches(conn, team.id),
            players.list_players_with_stats(conn, team.id),
        )
        print(json.dumps(report, indent=2))
    finally:
        conn.close()


if __name__ == "__main__":
    main()
