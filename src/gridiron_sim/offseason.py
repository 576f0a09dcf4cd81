from __future__ import annotations

import copy
import logging
import random
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any

from .collaborators import Collaborators
from .config import (
    BALANCE_BOTTOM_TIER,
    BALANCE_TOP_TIER,
    FORCED_RETIREMENT_AGE,
    MAX_RETIRED_IN_MEMORY,
    MAX_STATS_HISTORY_SEASONS,
    RETIREMENT_AGE_START,
    RETIREMENT_CHANCE_PER_YEAR,
    VETERAN_FATIGUE_AGE,
    VETERAN_FATIGUE_ATTRIBUTES,
    VETERAN_FATIGUE_CHANCE,
    VETERAN_FATIGUE_FLOOR,
    YOUTH_BOOST_AGE,
    YOUTH_BOOST_ATTRIBUTES,
    YOUTH_BOOST_CHANCE,
)
from .development import refresh_overall
from .models import Player, Team
from .stats import merge_totals

if TYPE_CHECKING:
    from .league import League

_log = logging.getLogger("gridiron_sim.offseason")

# (award name, stat key, eligible positions)
AWARD_CATEGORIES: tuple[tuple[str, str, frozenset[str]], ...] = (
    ("Passing Leader", "passYd", frozenset({"QB"})),
    ("Rushing Leader", "rushYd", frozenset({"RB", "QB", "WR"})),
    ("Receiving Leader", "recYd", frozenset({"WR", "TE", "RB"})),
    ("Sack Leader", "sacks", frozenset({"DL", "LB"})),
    ("Interception Leader", "interceptions", frozenset({"CB", "S", "LB"})),
)

RECORD_KEYS: dict[str, frozenset[str]] = {
    "passYd": frozenset({"QB"}),
    "passTD": frozenset({"QB"}),
    "rushYd": frozenset({"RB", "QB", "WR"}),
    "rushTD": frozenset({"RB", "QB", "WR"}),
    "recYd": frozenset({"WR", "TE", "RB"}),
    "recTD": frozenset({"WR", "TE", "RB"}),
    "sacks": frozenset({"DL", "LB"}),
    "interceptions": frozenset({"CB", "S", "LB"}),
}

# Career line quoted in a retirement announcement, by position.
CAREER_HIGHLIGHTS: dict[str, tuple[str, str]] = {
    "QB": ("passYd", "passing yards"),
    "RB": ("rushYd", "rushing yards"),
    "WR": ("recYd", "receiving yards"),
    "TE": ("recYd", "receiving yards"),
    "DL": ("sacks", "sacks"),
    "LB": ("tackles", "tackles"),
    "CB": ("interceptions", "interceptions"),
    "S": ("interceptions", "interceptions"),
    "K": ("fgMade", "field goals"),
    "P": ("puntYards", "punting yards"),
}


@dataclass(slots=True)
class RetirementReport:
    retired: list[Player] = field(default_factory=list)
    announcements: list[str] = field(default_factory=list)


@dataclass(slots=True)
class RolloverReport:
    year: int
    retired: list[str] = field(default_factory=list)
    announcements: list[str] = field(default_factory=list)
    failures: list[str] = field(default_factory=list)


def accumulate_career_stats(league: League) -> None:
    year = league.season.year
    for team in league.teams:
        for player in team.roster:
            season = player.stats.season
            if not season:
                continue
            merge_totals(player.stats.career, season)
            player.stats.history.append(
                {
                    "year": year,
                    "team": team.abbr,
                    "overall": player.overall,
                    "ovr_delta": player.ovr_delta,
                    "stats": copy.deepcopy(season),
                }
            )


def _career_highlight(player: Player) -> str:
    key, label = CAREER_HIGHLIGHTS.get(player.position, ("passYd", "passing yards"))
    value = player.stats.career.get(key, 0)
    if value <= 0:
        # Fall back to the biggest yardage line for converted players.
        options = [(player.stats.career.get(k, 0), lbl) for k, lbl in (
            ("passYd", "passing yards"), ("rushYd", "rushing yards"), ("recYd", "receiving yards")
        )]
        value, label = max(options)
    if value <= 0:
        return ""
    return f"{int(value):,} {label}"


def retirement_announcement(player: Player, team: Team, age: int) -> str:
    seasons = max(1, len(player.stats.history))
    text = f"{player.name} ({player.position}, {team.abbr}) retires at {age} after {seasons} seasons"
    highlight = _career_highlight(player)
    if highlight:
        text += f" with {highlight}"
    return text + "."


def _should_retire(player: Player, rng: random.Random) -> bool:
    if player.age >= FORCED_RETIREMENT_AGE:
        return True
    if player.age < RETIREMENT_AGE_START:
        return False
    chance = (player.age - RETIREMENT_AGE_START + 1) * RETIREMENT_CHANCE_PER_YEAR
    return rng.random() < chance


def process_retirements(league: League, year: int, rng: random.Random | None = None) -> RetirementReport:
    rng = rng or random.Random()
    report = RetirementReport()
    for team in league.teams:
        staying: list[Player] = []
        for player in team.roster:
            if not _should_retire(player, rng):
                staying.append(player)
                continue
            report.retired.append(player)
            report.announcements.append(retirement_announcement(player, team, player.age))
            league.retired_players.append(
                {
                    "player_id": player.player_id,
                    "name": player.name,
                    "position": player.position,
                    "team": team.abbr,
                    "year": year,
                    "age": player.age,
                    "career": dict(player.stats.career),
                }
            )
        team.roster = staying
    return report


def _leader(league: League, key: str, positions: frozenset[str]) -> tuple[Player, Team] | None:
    best: tuple[Player, Team] | None = None
    for team in league.teams:
        for player in team.roster:
            if player.position not in positions:
                continue
            if player.stats.season.get(key, 0) <= 0:
                continue
            if best is None or player.stats.season.get(key, 0) > best[0].stats.season.get(key, 0):
                best = (player, team)
    return best


def calculate_all_awards(league: League, year: int) -> dict[str, dict[str, Any]]:
    awards: dict[str, dict[str, Any]] = {}
    for award, key, positions in AWARD_CATEGORIES:
        found = _leader(league, key, positions)
        if found is None:
            continue
        player, team = found
        awards[award] = {
            "player_id": player.player_id,
            "name": player.name,
            "team": team.abbr,
            "stat": key,
            "value": player.stats.season.get(key, 0),
        }
    league.awards[year] = awards
    return awards


def update_all_records(league: League, year: int) -> None:
    for key, positions in RECORD_KEYS.items():
        found = _leader(league, key, positions)
        if found is None:
            continue
        player, team = found
        value = player.stats.season.get(key, 0)
        current = league.records.get(key)
        if current is None or value > current["value"]:
            league.records[key] = {"value": value, "name": player.name, "team": team.abbr, "year": year}


def update_team_legacy(league: League) -> None:
    season = league.season
    playoff_teams = set(season.playoff_teams)
    if season.playoff_winner is not None:
        playoff_teams.add(season.playoff_winner)
    for index, team in enumerate(league.teams):
        legacy = team.legacy
        legacy.playoff_streak = legacy.playoff_streak + 1 if index in playoff_teams else 0
        if index == season.playoff_winner:
            legacy.championships.append(season.year)
        rec = team.record
        score = round(rec.wins * 10 + rec.point_diff * 0.1, 1)
        if legacy.best_season is None or score > legacy.best_season["score"]:
            legacy.best_season = {
                "year": season.year,
                "wins": rec.wins,
                "losses": rec.losses,
                "point_diff": rec.point_diff,
                "score": score,
            }


def _advance_ages(league: League) -> None:
    for team in league.teams:
        for player in team.roster:
            player.age += 1
            player.years_with_team += 1


def run_season_rollover(league: League, collaborators: Collaborators | None = None) -> RolloverReport:
    """Offseason bookkeeping run once per season boundary.

    Every step is isolated: a failing hook is logged and recorded in
    ``failures`` and the remaining steps still run.
    """
    collaborators = collaborators or Collaborators()
    year = league.season.year
    report = RolloverReport(year=year)

    try:
        accumulate_career_stats(league)
    except Exception:
        _log.exception(f"Career stat accumulation failed for {year}")
        report.failures.append("career_stats")

    for team in league.teams:
        try:
            collaborators.process_cap_rollover(team)
        except Exception:
            _log.exception(f"Cap rollover failed for {team.name}")
            report.failures.append(f"cap_rollover:{team.abbr}")

    try:
        collaborators.calculate_all_awards(league, year)
    except Exception:
        _log.exception(f"Award calculation failed for {year}")
        report.failures.append("awards")

    try:
        collaborators.update_all_records(league, year)
    except Exception:
        _log.exception(f"Record update failed for {year}")
        report.failures.append("records")

    try:
        update_team_legacy(league)
    except Exception:
        _log.exception(f"Team legacy update failed for {year}")
        report.failures.append("legacy")

    try:
        retirements = collaborators.process_retirements(league, year)
        report.retired = [player.player_id for player in retirements.retired]
        report.announcements = list(retirements.announcements)
        for text in retirements.announcements:
            collaborators.add_news_item(league, "Retirement", text, "retirement")
    except Exception:
        _log.exception(f"Retirement processing failed for {year}")
        report.failures.append("retirements")

    _advance_ages(league)
    _log.info(f"Season {year} rollover complete: {len(report.retired)} retirements, {len(report.failures)} failures")
    return report


def apply_competitive_balance(
    league: League,
    rng: random.Random,
    collaborators: Collaborators | None = None,
) -> dict[str, list[str]]:
    """Tire veterans on last season's top teams and grow youngsters on the bottom ones.

    Tiers come from the record of the season just finished, so this runs
    before records are reset for the new season.
    """
    collaborators = collaborators or Collaborators()
    ranked = sorted(league.teams, key=lambda t: t.record.wins, reverse=True)
    changed: dict[str, list[str]] = {"fatigued": [], "boosted": []}
    for rank, team in enumerate(ranked):
        tier = rank / len(ranked)
        if tier <= BALANCE_TOP_TIER:
            for player in team.roster:
                if player.age < VETERAN_FATIGUE_AGE or rng.random() >= VETERAN_FATIGUE_CHANCE:
                    continue
                key = rng.choice(VETERAN_FATIGUE_ATTRIBUTES)
                if player.ratings.get(key, 0) <= VETERAN_FATIGUE_FLOOR:
                    continue
                before = dict(player.ratings)
                player.ratings[key] = max(VETERAN_FATIGUE_FLOOR, player.ratings[key] - 1)
                refresh_overall(player, before, collaborators, fallback_delta=0)
                changed["fatigued"].append(player.player_id)
            if team.cap_rollover > 0:
                team.cap_rollover = max(0.0, team.cap_rollover - rng.randint(1, 3))
        elif tier >= BALANCE_BOTTOM_TIER:
            for player in team.roster:
                if player.age > YOUTH_BOOST_AGE or rng.random() >= YOUTH_BOOST_CHANCE:
                    continue
                key = rng.choice(YOUTH_BOOST_ATTRIBUTES)
                if not player.ratings.get(key):
                    continue
                before = dict(player.ratings)
                player.ratings[key] = min(99, player.ratings[key] + rng.randint(1, 2))
                refresh_overall(player, before, collaborators, fallback_delta=0)
                player.potential = max(player.potential, player.overall)
                changed["boosted"].append(player.player_id)
    return changed


def prune_active_memory(league: League) -> None:
    """Drop archived box scores and cap the history kept on the live league."""
    for weeks in league.past_results.values():
        for index, results in weeks.items():
            weeks[index] = [replace(result, box_score={}) if result.box_score else result for result in results]
    if len(league.retired_players) > MAX_RETIRED_IN_MEMORY:
        league.retired_players = league.retired_players[-MAX_RETIRED_IN_MEMORY:]
    for team in league.teams:
        for player in team.roster:
            if len(player.stats.history) > MAX_STATS_HISTORY_SEASONS:
                player.stats.history = player.stats.history[-MAX_STATS_HISTORY_SEASONS:]
