from __future__ import annotations

import random

from .config import DEFENSE_PERKS, OFFENSE_PERKS, POS_RATING_RANGES, ROSTER_TEMPLATE
from .league import League
from .models import Coach, CoachingStaff, Player, SeasonState, Team
from .names import NameGenerator
from .ratings import calculate_overall
from .schedule import build_season_schedule

DEFAULT_TEAMS: tuple[tuple[str, str, float], ...] = (
    ("Harbor Kings", "HBK", 0.10),
    ("Prairie Storm", "PRS", 0.04),
    ("Iron Rangers", "IRR", 0.00),
    ("Desert Fire", "DSF", -0.02),
    ("Pacific Tide", "PCT", 0.06),
    ("Granite Bears", "GRB", -0.05),
    ("Capital Foxes", "CPF", 0.02),
    ("Steel River", "STR", -0.08),
)

DEFAULT_START_YEAR = 2025

# (weight, low, high) bands of a pro talent pyramid: few stars, many depth players.
QUALITY_TIERS: list[tuple[float, float, float]] = [
    (0.08, 0.85, 1.00),
    (0.22, 0.65, 0.85),
    (0.42, 0.40, 0.65),
    (0.28, 0.15, 0.40),
]


def _sample_quality(rng: random.Random, tier_plan: list[tuple[float, float, float]]) -> float:
    roll = rng.random()
    cumulative = 0.0
    for weight, low, high in tier_plan:
        cumulative += weight
        if roll <= cumulative:
            return rng.uniform(low, high)
    return rng.uniform(tier_plan[-1][1], tier_plan[-1][2])


def make_player(position: str, rng: random.Random, name: str, quality: float, age: int) -> Player:
    ratings: dict[str, int] = {}
    for key, (low, high) in POS_RATING_RANGES[position].items():
        base = low + (high - low) * quality
        ratings[key] = max(low, min(high, round(base + rng.uniform(-6, 6))))
    overall = calculate_overall(position, ratings)
    headroom = max(0, 27 - age) * rng.randint(1, 3)
    potential = min(99, overall + headroom + rng.randint(0, 4))
    return Player(
        name=name,
        position=position,
        age=age,
        overall=overall,
        potential=potential,
        ratings=ratings,
        years_with_team=rng.randint(1, 4),
        boom_factor=round(rng.uniform(0, 10), 1),
        bust_factor=round(rng.uniform(0, 10), 1),
    )


def _make_roster(team_name: str, strength_bias: float, name_gen: NameGenerator, seed: int) -> list[Player]:
    rng = random.Random(f"{seed}:{team_name}")
    roster: list[Player] = []
    for position, count in ROSTER_TEMPLATE.items():
        for _idx in range(count):
            quality = max(0.0, min(1.0, _sample_quality(rng, QUALITY_TIERS) + strength_bias))
            roster.append(make_player(position, rng, name_gen.next_name(), quality, rng.randint(21, 34)))
    return roster


def _make_staff(rng: random.Random, name_gen: NameGenerator) -> CoachingStaff:
    return CoachingStaff(
        head_coach=Coach(name=name_gen.next_name(), role="HC", development=rng.randint(35, 85)),
        off_coordinator=Coach(
            name=name_gen.next_name(),
            role="OC",
            development=rng.randint(35, 85),
            perk=rng.choice([None, *OFFENSE_PERKS]),
        ),
        def_coordinator=Coach(
            name=name_gen.next_name(),
            role="DC",
            development=rng.randint(35, 85),
            perk=rng.choice([None, *DEFENSE_PERKS]),
        ),
    )


def build_default_teams(count: int = len(DEFAULT_TEAMS), seed: int = 7) -> list[Team]:
    if not 2 <= count <= len(DEFAULT_TEAMS):
        raise ValueError(f"Team count must be between 2 and {len(DEFAULT_TEAMS)}.")
    name_gen = NameGenerator(seed)
    rng = random.Random(seed)
    teams: list[Team] = []
    for team_id, (name, abbr, bias) in enumerate(DEFAULT_TEAMS[:count]):
        teams.append(
            Team(
                team_id=team_id,
                name=name,
                abbr=abbr,
                roster=_make_roster(name, bias, name_gen, seed),
                staff=_make_staff(rng, name_gen),
            )
        )
    return teams


def build_default_league(
    count: int = len(DEFAULT_TEAMS),
    seed: int = 7,
    year: int = DEFAULT_START_YEAR,
    games_per_matchup: int = 2,
) -> League:
    teams = build_default_teams(count=count, seed=seed)
    return League(
        teams=teams,
        schedule=build_season_schedule(teams, games_per_matchup=games_per_matchup),
        season=SeasonState(year=year),
    )


def format_standings(league: League) -> str:
    lines = ["Pos Team             Abbr  W  L  T   PF   PA  Diff"]
    for idx, team in enumerate(league.standings(), start=1):
        rec = team.record
        lines.append(
            f"{idx:>3} {team.name:<16} {team.abbr:<4} {rec.wins:>2} {rec.losses:>2} {rec.ties:>2}"
            f" {rec.points_for:>4} {rec.points_against:>4} {rec.point_diff:>5}"
        )
    return "\n".join(lines)


def format_leaders(league: League, stat: str, limit: int = 10) -> str:
    rows = [
        (player.stats.season.get(stat, 0), player, team)
        for team in league.teams
        for player in team.roster
        if player.stats.season.get(stat, 0) > 0
    ]
    rows.sort(key=lambda row: row[0], reverse=True)
    lines = [f"{stat} leaders", "Team Player                 Pos  Age  Value"]
    for value, player, team in rows[:limit]:
        lines.append(f"{team.abbr:<4} {player.name:<22} {player.position:<3} {player.age:>4} {value:>6.0f}")
    return "\n".join(lines)
