"""
Team and player statistics for the dashboards.
Read-only: consumes Match rows and aggregated Player views, returns plain
structures ready for JSON. No persistence.
Used by GET /teams/{id}/stats and GET /players/{id}/key-stats.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, fields
from datetime import date
from typing import Any, Iterable

from sideline.models import Match, Player, PlayerStats, camel

FORM_LENGTH = 5

POSITION_GROUPS = {
    "GK": ("GK",),
    "DEF": ("CB", "RB", "LB", "RWB", "LWB"),
    "MID": ("CDM", "CM", "CAM", "LM", "RM"),
    "STR": ("ST", "CF", "LW", "RW"),
}

# Match columns averaged per game (2 dp). Possession is averaged separately (int).
_AVERAGED = (
    "shots",
    "shots_on_target",
    "fouls",
    "corners",
    "offsides",
    "passes",
    "pass_accuracy",
    "tackles",
    "saves",
)


@dataclass
class TeamStats:
    total_matches: int
    wins: int
    draws: int
    losses: int
    win_percentage: int
    goals_for: int
    goals_against: int
    goal_difference: int
    total_shots: int
    total_shots_on_target: int
    total_fouls: int
    total_passes: int
    total_tackles: int
    avg_goals_for: float
    avg_goals_against: float
    avg_shots: float
    avg_shots_on_target: float
    avg_possession: int
    avg_fouls: float
    avg_corners: float
    avg_offsides: float
    avg_passes: float
    avg_pass_accuracy: float
    avg_tackles: float
    avg_saves: float
    form: list[str]

    def to_dict(self) -> dict[str, Any]:
        return {camel(f.name): getattr(self, f.name) for f in fields(self)}


def round_half_up(value: float) -> int:
    """2.5 -> 3, not banker's rounding."""
    return math.floor(value + 0.5)


def match_result(m: Match) -> str:
    """'W', 'D' or 'L' from the team's side."""
    if m.team_score > m.opponent_score:
        return "W"
    if m.team_score < m.opponent_score:
        return "L"
    return "D"


def _total(matches: list[Match], name: str) -> float:
    return sum(getattr(m, name) or 0 for m in matches)


def calculate_team_stats(matches: list[Match]) -> TeamStats | None:
    """
    Season rollup over matches, most recent first. None when there are no matches.
    Missing team stats count as 0. form is the results of the first five matches.
    """
    if not matches:
        return None
    n = len(matches)
    results = [match_result(m) for m in matches]
    wins = results.count("W")
    draws = results.count("D")
    goals_for = sum(m.team_score for m in matches)
    goals_against = sum(m.opponent_score for m in matches)
    averages = {f"avg_{name}": round(_total(matches, name) / n, 2) for name in _AVERAGED}
    return TeamStats(
        total_matches=n,
        wins=wins,
        draws=draws,
        losses=n - wins - draws,
        win_percentage=round_half_up(wins / n * 100),
        goals_for=goals_for,
        goals_against=goals_against,
        goal_difference=goals_for - goals_against,
        total_shots=int(_total(matches, "shots")),
        total_shots_on_target=int(_total(matches, "shots_on_target")),
        total_fouls=int(_total(matches, "fouls")),
        total_passes=int(_total(matches, "passes")),
        total_tackles=int(_total(matches, "tackles")),
        avg_goals_for=round(goals_for / n, 2),
        avg_goals_against=round(goals_against / n, 2),
        avg_possession=round_half_up(_total(matches, "possession") / n),
        form=results[:FORM_LENGTH],
        **averages,
    )


def _match_day(m: Match) -> date:
    return date.fromisoformat(m.date[:10])


def filter_matches_by_date(
    matches: Iterable[Match], start: date | None = None, end: date | None = None
) -> list[Match]:
    """Matches with start <= date <= end. Either bound may be None (open)."""
    kept = []
    for m in matches:
        day = _match_day(m)
        if start is not None and day < start:
            continue
        if end is not None and day > end:
            continue
        kept.append(m)
    return kept


def team_report(
    matches: list[Match],
    players: list[Player],
    start: date | None = None,
    end: date | None = None,
) -> dict[str, Any]:
    """Team rollup for the date window plus squad-wide defensive and discipline totals."""
    in_window = filter_matches_by_date(matches, start, end)
    team = calculate_team_stats(in_window)
    return {
        "teamStats": team.to_dict() if team is not None else None,
        "squad": {
            "players": len(players),
            "interceptions": sum(p.stats.interceptions for p in players),
            "clearances": sum(p.stats.clearances for p in players),
            "yellowCards": sum(p.stats.yellow_cards for p in players),
            "redCards": sum(p.stats.red_cards for p in players),
        },
    }


# ---------- Per-player display stats ----------


def _pct(value: float) -> str:
    return f"{round(value, 1):g}%"


def _ratio_pct(part: int, whole: int) -> int:
    return round_half_up(part / whole * 100) if whole > 0 else 0


def position_group(position: str | None) -> str | None:
    code = (position or "").upper()
    for group, codes in POSITION_GROUPS.items():
        if code in codes:
            return group
    return None


def _stat(label: str, value: Any) -> dict[str, Any]:
    return {"label": label, "value": value}


def get_player_key_stats(player: Player) -> dict[str, Any]:
    """Three headline stats for the player's position and the stat to chart."""
    s: PlayerStats = player.stats
    group = position_group(player.position)
    if group == "GK":
        key = [
            _stat("Saves", s.saves),
            _stat("Save %", _pct(s.save_percentage)),
            _stat("Clean Sheets", s.clean_sheets),
        ]
        chart = {"label": "Saves", "dataKey": "saves"}
    elif group == "DEF":
        key = [
            _stat("Tackles", s.tackles),
            _stat("Interceptions", s.interceptions),
            _stat("Pass %", _pct(s.pass_completion)),
        ]
        chart = {"label": "Tackles", "dataKey": "tackles"}
    elif group == "MID":
        key = [
            _stat("Goals", s.goals),
            _stat("Assists", s.assists),
            _stat("Pass %", _pct(s.pass_completion)),
        ]
        chart = {"label": "Assists", "dataKey": "assists"}
    elif group == "STR":
        key = [
            _stat("Goals", s.goals),
            _stat("Shots", s.shots),
            _stat("Shot Accuracy", f"{_ratio_pct(s.shots_on_target, s.shots)}%"),
        ]
        chart = {"label": "Goals", "dataKey": "goals"}
    else:
        key = [
            _stat("Goals", s.goals),
            _stat("Assists", s.assists),
            _stat("Minutes", s.minutes_played),
        ]
        chart = {"label": "Goals", "dataKey": "goals"}
    return {"keyStats": key, "chartStat": chart}


def get_position_specific_stats(player: Player) -> dict[str, Any]:
    """General stats for everyone plus a position block (empty for unknown positions)."""
    s: PlayerStats = player.stats
    general = [
        _stat("Goals", s.goals),
        _stat("Assists", s.assists),
        _stat("Yellow Cards", s.yellow_cards),
        _stat("Red Cards", s.red_cards),
        _stat("Minutes Played", s.minutes_played),
    ]
    dribble_success = f"{_ratio_pct(s.dribbles_successful, s.dribbles_attempted)}%"
    group = position_group(player.position)
    if group == "GK":
        specific = [
            _stat("Saves", s.saves),
            _stat("Clean Sheets", s.clean_sheets),
            _stat("Save Percentage", _pct(s.save_percentage)),
            _stat("Clearances", s.clearances),
        ]
    elif group == "DEF":
        specific = [
            _stat("Tackles", s.tackles),
            _stat("Interceptions", s.interceptions),
            _stat("Clearances", s.clearances),
            _stat("Pass Completion", _pct(s.pass_completion)),
        ]
    elif group == "MID":
        specific = [
            _stat("Assists", s.assists),
            _stat("Pass Completion", _pct(s.pass_completion)),
            _stat("Dribbles Attempted", s.dribbles_attempted),
            _stat("Dribbles Successful", s.dribbles_successful),
            _stat("Dribble Success Rate", dribble_success),
            _stat("Tackles", s.tackles),
            _stat("Offsides", s.offsides),
        ]
    elif group == "STR":
        specific = [
            _stat("Shots", s.shots),
            _stat("Shots On Target", s.shots_on_target),
            _stat("Shot Accuracy", f"{_ratio_pct(s.shots_on_target, s.shots)}%"),
            _stat("Dribbles Attempted", s.dribbles_attempted),
            _stat("Dribbles Successful", s.dribbles_successful),
            _stat("Dribble Success Rate", dribble_success),
            _stat("Offsides", s.offsides),
        ]
    else:
        specific = []
    return {"generalStats": general, "positionStats": specific}
