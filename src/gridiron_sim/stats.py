from __future__ import annotations

import copy
from typing import Any

from .models import Team

# Rates recomputed from their components instead of summed.
DERIVED_FIELDS = {
    "completionPct",
    "yardsPerCarry",
    "yardsPerReception",
    "avgPuntYards",
    "avgKickYards",
    "successPct",
}


def _is_derived(key: str) -> bool:
    return key in DERIVED_FIELDS or "Rating" in key or "Grade" in key


def _is_longest(key: str) -> bool:
    return key.startswith("longest")


def _ratio(numerator: float, denominator: float, scale: float = 1.0) -> float:
    if denominator <= 0:
        return 0.0
    return round(numerator / denominator * scale, 1)


def refresh_derived(bucket: dict[str, float]) -> None:
    if bucket.get("passAtt"):
        bucket["completionPct"] = _ratio(bucket.get("passComp", 0), bucket["passAtt"], 100.0)
    if bucket.get("rushAtt"):
        bucket["yardsPerCarry"] = _ratio(bucket.get("rushYd", 0), bucket["rushAtt"])
    if bucket.get("receptions"):
        bucket["yardsPerReception"] = _ratio(bucket.get("recYd", 0), bucket["receptions"])
    if bucket.get("punts"):
        bucket["avgPuntYards"] = _ratio(bucket.get("puntYards", 0), bucket["punts"])
    if bucket.get("fgAttempts"):
        bucket["successPct"] = _ratio(bucket.get("fgMade", 0), bucket["fgAttempts"], 100.0)


def merge_totals(target: dict[str, float], source: dict[str, Any]) -> None:
    """Fold one stat line into a running total."""
    for key, value in source.items():
        if not isinstance(value, (int, float)) or isinstance(value, bool):
            continue
        if _is_derived(key):
            continue
        if _is_longest(key):
            target[key] = max(target.get(key, 0), value)
        else:
            target[key] = target.get(key, 0) + value
    refresh_derived(target)


def additive_fields(line: dict[str, Any]) -> dict[str, float]:
    return {
        key: value
        for key, value in line.items()
        if isinstance(value, (int, float)) and not _is_derived(key) and not _is_longest(key)
    }


def capture_snapshot(team: Team) -> dict[str, dict[str, Any]]:
    """Copy every player's game line into a box-score side keyed by player id."""
    side: dict[str, dict[str, Any]] = {}
    for player in team.roster:
        if not player.stats.game:
            continue
        side[player.player_id] = {
            "name": player.name,
            "pos": player.position,
            "stats": copy.deepcopy(player.stats.game),
        }
    return side


def accumulate_season_stats(team: Team) -> None:
    for player in team.roster:
        if player.stats.game:
            merge_totals(player.stats.season, player.stats.game)
    if team.stats.game:
        merge_totals(team.stats.season, team.stats.game)
