from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass, field
from typing import Any

from .collaborators import Collaborators
from .config import (
    BASE_SCORE_MAX,
    BASE_SCORE_MIN,
    DEFAULT_DEFENSE_STRENGTH,
    DEFENSE_PERKS,
    EMPTY_ROSTER_STRENGTH,
    HOME_ADVANTAGE,
    MAX_OFFENSIVE_LINE,
    MAX_TIGHT_ENDS,
    MAX_WIDE_RECEIVERS,
    OFFENSE_PERKS,
    RB_USAGE_SHARES,
    RECEIVER_TARGET_SHARE,
    SCORE_VARIANCE,
    WEEKS_PER_SEASON_YEAR,
)
from .models import POSITIONS, Player, Team
from .ratings import can_play, effective_rating
from .stats import capture_snapshot

_log = logging.getLogger("gridiron_sim.engine")


@dataclass(slots=True)
class GameOutcome:
    home_score: int
    away_score: int
    box_score: dict[str, dict[str, Any]]
    home_team_stats: dict[str, float] = field(default_factory=dict)
    away_team_stats: dict[str, float] = field(default_factory=dict)


def _rand(rng: random.Random, low: float, high: float) -> float:
    # Stepped draw over [low, high] in unit increments, so fractional bounds keep their offset.
    return math.floor(rng.random() * (high - low + 1)) + low


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _avg(values: list[float], fallback: float) -> float:
    if not values:
        return fallback
    return sum(values) / len(values)


def _position_groups(team: Team) -> dict[str, list[Player]]:
    groups: dict[str, list[Player]] = {pos: [] for pos in POSITIONS}
    for player in team.roster:
        if not can_play(player):
            continue
        groups.setdefault(player.position, []).append(player)
    for players in groups.values():
        players.sort(key=effective_rating, reverse=True)
    return groups


def _team_strength(team: Team, rng: random.Random, collaborators: Collaborators) -> float:
    active = [p for p in team.roster if can_play(p)]
    if not active:
        return EMPTY_ROSTER_STRENGTH
    total = 0.0
    for player in active:
        tenure_years = player.weeks_with_team / WEEKS_PER_SEASON_YEAR
        total += collaborators.effective_performance(float(effective_rating(player)), tenure_years, rng)
    return total / len(active)


def _defense_strength(groups: dict[str, list[Player]]) -> float:
    ratings = [effective_rating(p) for pos in ("DL", "LB", "CB", "S") for p in groups.get(pos, [])]
    return _avg([float(r) for r in ratings], DEFAULT_DEFENSE_STRENGTH)


def _team_modifiers(team: Team) -> dict[str, float]:
    mods: dict[str, float] = {}
    oc = team.staff.off_coordinator
    dc = team.staff.def_coordinator
    if oc is not None and oc.perk:
        mods.update(OFFENSE_PERKS.get(oc.perk, {}))
    if dc is not None and dc.perk:
        mods.update(DEFENSE_PERKS.get(dc.perk, {}))
    return mods


def _qb_stats(qb: Player, score: int, defense: float, rng: random.Random, mods: dict[str, float]) -> dict[str, float]:
    power = qb.rating("throwPower")
    accuracy = qb.rating("throwAccuracy")
    awareness = qb.rating("awareness")

    attempts = _clamp(score * 2 + _rand(rng, 15, 35), 20, 50) * mods.get("pass_volume", 1.0)
    attempts = round(attempts)
    base_pct = (accuracy + awareness) / 2 * mods.get("pass_accuracy", 1.0)
    comp_pct = _clamp(base_pct + ((100 - defense) - 50) * 0.3, 45, 85)
    completions = round(attempts * comp_pct / 100)
    yards = round(completions * (5 + power / 20 + score / 5) + _rand(rng, -50, 100))
    touchdowns = _clamp(round(score / 7 + (awareness + accuracy) / 200 * 2 + _rand(rng, -1, 2)), 0, 6)
    int_rate = max(0.0, (100 - accuracy) / 100 + defense / 200)
    interceptions = _clamp(round(attempts * int_rate * 0.03 + _rand(rng, -0.5, 1.5)), 0, 5)
    sacks = _clamp(round((100 - awareness) / 25 + _rand(rng, -1, 2)), 0, 8)
    longest = max(10, round(yards / max(1, completions) * rng.uniform(1.2, 2.5)))
    return {
        "passAtt": attempts,
        "passComp": completions,
        "passYd": max(0, yards),
        "passTD": touchdowns,
        "interceptions": interceptions,
        "sacks": sacks,
        "dropbacks": attempts + sacks,
        "longestPass": longest,
        "completionPct": round(completions / max(1, attempts) * 100, 1),
    }


def _rb_stats(rb: Player, score: float, defense: float, rng: random.Random, mods: dict[str, float]) -> dict[str, float]:
    speed = rb.rating("speed")
    trucking = rb.rating("trucking")
    juking = rb.rating("juking")
    catching = rb.rating("catching", 50)
    awareness = rb.rating("awareness")

    carries = _clamp(round(score * 1.5 + _rand(rng, 8, 18)), 5, 30)
    carries = round(carries * mods.get("run_volume", 1.0))
    ypc = _clamp(3.5 + (speed + trucking + juking) / 100 + (100 - defense) / 50 + _rand(rng, -0.5, 0.5), 2.0, 8.0)
    rush_yd = max(0, round(carries * ypc + _rand(rng, -10, 20)))
    rush_td = _clamp(round(score / 7 * 0.6 + _rand(rng, -0.5, 1.5)), 0, 4)
    fumbles = _clamp(round((100 - awareness) / 150 + _rand(rng, -0.3, 0.5)), 0, 2)

    targets = _clamp(round(catching / 20 + _rand(rng, 0, 3)), 0, 8)
    receptions = _clamp(round(targets * catching / 100 + _rand(rng, -1, 1)), 0, targets)
    rec_yd = max(0, round(receptions * (5 + speed / 20) + _rand(rng, -5, 15)))
    rec_td = 1 if receptions > 0 and _rand(rng, 1, 100) < 15 else 0
    return {
        "rushAtt": carries,
        "rushYd": rush_yd,
        "rushTD": rush_td,
        "longestRun": max(5, round(rush_yd / max(1, carries) * rng.uniform(1.5, 3.5))),
        "yardsPerCarry": round(rush_yd / max(1, carries), 1),
        "fumbles": fumbles,
        "targets": targets,
        "receptions": receptions,
        "recYd": rec_yd,
        "recTD": rec_td,
        "drops": max(0, targets - receptions),
        "yardsAfterCatch": max(0, round(rec_yd * 0.4 + _rand(rng, -5, 10))),
        "longestCatch": max(5, round(rec_yd / receptions * rng.uniform(1.2, 2.5))) if receptions else 0,
    }


def _distribute_targets(receivers: list[Player], total_targets: int) -> list[tuple[Player, int]]:
    weights = [p.overall * 0.5 + p.rating("awareness", 50) * 0.3 + p.rating("speed", 50) * 0.2 for p in receivers]
    total_weight = sum(weights) or 1.0
    return [(p, round(total_targets * w / total_weight)) for p, w in zip(receivers, weights)]


def _receiver_stats(receiver: Player, targets: int, score: int, defense: float, rng: random.Random) -> dict[str, float]:
    catching = receiver.rating("catching")
    traffic = receiver.rating("catchInTraffic")
    speed = receiver.rating("speed")

    reception_pct = _clamp((catching + traffic) / 2 + (100 - defense) / 100 * 20, 40, 90)
    receptions = _clamp(round(targets * reception_pct / 100 + _rand(rng, -1, 1)), 0, targets)
    rec_yd = round(receptions * (8 + speed / 15) + _rand(rng, -20, 50)) if receptions else 0
    rec_td = _clamp(round(receptions / 5 * (score / 14) + _rand(rng, -0.5, 1.5)), 0, 3) if receptions else 0
    drop_rate = max(0.0, (100 - catching) / 200)
    drops = _clamp(round(targets * drop_rate + _rand(rng, -0.5, 1.5)), 0, targets - receptions)
    return {
        "targets": targets,
        "receptions": receptions,
        "recYd": max(0, rec_yd),
        "recTD": rec_td,
        "drops": drops,
        "yardsAfterCatch": max(0, round(max(0, rec_yd) * (0.3 + speed / 200) + _rand(rng, -10, 20))) if receptions else 0,
        "longestCatch": max(10, round(max(0, rec_yd) / receptions * rng.uniform(1.5, 3.5))) if receptions else 0,
        "routesRun": round(targets * 4 + _rand(rng, 10, 20)),
    }


def _ol_stats(lineman: Player, defense: float, rng: random.Random) -> dict[str, float]:
    pass_block = lineman.rating("passBlock")
    run_block = lineman.rating("runBlock")
    awareness = lineman.rating("awareness")
    sack_chance = (100 - pass_block) / 200 + defense / 300
    return {
        "sacksAllowed": _clamp(round(sack_chance * 2 + _rand(rng, -0.5, 1.5)), 0, 3),
        "tacklesForLossAllowed": _clamp(round((100 - run_block) / 100 + _rand(rng, -0.3, 0.5)), 0, 2),
        "protectionGrade": _clamp(round((pass_block + run_block + awareness) / 3 + _rand(rng, -5, 5)), 0, 100),
    }


def _db_stats(db: Player, rng: random.Random, mods: dict[str, float]) -> dict[str, float]:
    coverage = db.rating("coverage")
    speed = db.rating("speed")
    awareness = db.rating("awareness")

    base_tackles = 6 if db.position == "S" else 4
    int_chance = (coverage + awareness) / 200 * mods.get("int_chance", 1.0)
    targets_allowed = round(5 + (100 - coverage) / 10 + _rand(rng, -1, 2))
    completions_allowed = round(targets_allowed * max(0.4, (100 - coverage) / 100))
    return {
        "coverageRating": _clamp(round((coverage + speed + awareness) / 3 + _rand(rng, -5, 5)), 0, 100),
        "tackles": _clamp(round(base_tackles + (100 - coverage) / 30 + _rand(rng, -1, 3)), 0, 15),
        "interceptions": _clamp(round(int_chance * 2 + _rand(rng, -0.5, 1.5)), 0, 3),
        "passesDefended": _clamp(round(coverage / 30 + _rand(rng, -0.5, 1.5)), 0, 5),
        "targetsAllowed": targets_allowed,
        "completionsAllowed": completions_allowed,
        "yardsAllowed": round(completions_allowed * (10 + (100 - speed) / 10)),
        "tdsAllowed": 1 if _rand(rng, 0, 100) < (100 - coverage) else 0,
    }


def _front_seven_stats(defender: Player, rng: random.Random, mods: dict[str, float]) -> dict[str, float]:
    power = defender.rating("passRushPower")
    rush_speed = defender.rating("passRushSpeed")
    run_stop = defender.rating("runStop")
    awareness = defender.rating("awareness")

    sack_chance = (power + rush_speed) / 200 * mods.get("sack_chance", 1.0)
    base_tackles = 8 if defender.position == "LB" else 5
    snaps = round(20 + (power + rush_speed) / 5)
    return {
        "pressureRating": _clamp(round((power + rush_speed + awareness) / 3 + _rand(rng, -5, 5)), 0, 100),
        "sacks": _clamp(round(sack_chance * 3 + _rand(rng, -0.5, 1.5)), 0, 4),
        "tackles": _clamp(round(base_tackles + run_stop / 20 + _rand(rng, -1, 3)), 0, 15),
        "tacklesForLoss": _clamp(round(run_stop / 50 + _rand(rng, -0.5, 1.5)), 0, 3),
        "forcedFumbles": _clamp(round(power / 100 + _rand(rng, -0.3, 0.5)), 0, 2),
        "passRushSnaps": snaps,
        "pressures": round(snaps * (power + rush_speed) / 300),
    }


def _kicker_stats(kicker: Player, score: int, rng: random.Random) -> dict[str, float]:
    power = kicker.rating("kickPower")
    accuracy = kicker.rating("kickAccuracy")
    attempts = _clamp(round(score / 7 + _rand(rng, -1, 2)), 0, 5)
    made = _clamp(round(attempts * accuracy / 100 + _rand(rng, -0.5, 0.5)), 0, attempts)
    xp_attempts = max(0, round(score / 7))
    xp_made = _clamp(round(xp_attempts * accuracy / 100 + _rand(rng, -0.3, 0.3)), 0, xp_attempts)
    return {
        "fgAttempts": attempts,
        "fgMade": made,
        "fgMissed": attempts - made,
        "longestFG": _clamp(round(30 + power / 2 + _rand(rng, -5, 10)), 20, 65),
        "xpAttempts": xp_attempts,
        "xpMade": xp_made,
        "xpMissed": xp_attempts - xp_made,
        "successPct": round(made / attempts * 100, 1) if attempts else 0,
        "avgKickYards": round(60 + power / 3 + _rand(rng, -5, 5)),
    }


def _punter_stats(punter: Player, score: int, rng: random.Random) -> dict[str, float]:
    power = punter.rating("kickPower")
    punts = _clamp(round((28 - score) / 4 + _rand(rng, -1, 2)), 0, 8)
    average = round(40 + power / 3 + _rand(rng, -5, 5))
    return {
        "punts": punts,
        "puntYards": punts * average,
        "avgPuntYards": float(average) if punts else 0.0,
        "longestPunt": _clamp(round(average * rng.uniform(1.2, 1.8)), 30, 70) if punts else 0,
    }


def _generate_team_stats(
    team: Team,
    groups: dict[str, list[Player]],
    score: int,
    opp_score: int,
    opp_defense: float,
    rng: random.Random,
    mods: dict[str, float],
) -> None:
    for player in team.roster:
        player.stats.game = {}

    pass_attempts = 30
    qbs = groups.get("QB", [])
    if qbs:
        line = _qb_stats(qbs[0], score, opp_defense, rng, mods)
        if score > opp_score:
            line["wins"] = 1
        elif score < opp_score:
            line["losses"] = 1
        qbs[0].stats.game.update(line)
        pass_attempts = int(line["passAtt"]) or 30

    for share, rb in zip(RB_USAGE_SHARES, groups.get("RB", [])):
        line = _rb_stats(rb, score * share, opp_defense, rng, mods)
        if share < RB_USAGE_SHARES[0]:
            line = {key: round(value * share) if key != "yardsPerCarry" else value for key, value in line.items()}
        rb.stats.game.update(line)

    receivers = groups.get("WR", [])[:MAX_WIDE_RECEIVERS] + groups.get("TE", [])[:MAX_TIGHT_ENDS]
    if receivers:
        pool = round(pass_attempts * RECEIVER_TARGET_SHARE)
        for receiver, targets in _distribute_targets(receivers, pool):
            receiver.stats.game.update(_receiver_stats(receiver, targets, score, opp_defense, rng))

    for lineman in groups.get("OL", [])[:MAX_OFFENSIVE_LINE]:
        lineman.stats.game.update(_ol_stats(lineman, opp_defense, rng))

    for db in groups.get("CB", []) + groups.get("S", []):
        db.stats.game.update(_db_stats(db, rng, mods))

    for defender in groups.get("DL", []) + groups.get("LB", []):
        defender.stats.game.update(_front_seven_stats(defender, rng, mods))

    kickers = groups.get("K", [])
    if kickers:
        kickers[0].stats.game.update(_kicker_stats(kickers[0], score, rng))
    punters = groups.get("P", [])
    if punters:
        punters[0].stats.game.update(_punter_stats(punters[0], score, rng))


def _situational_stats(score: int, strength: float, opp_strength: float, rng: random.Random) -> dict[str, float]:
    attempts = 12 + _rand(rng, -2, 4)
    conversion_rate = _clamp(0.35 + (strength - opp_strength) / 200, 0.1, 0.8)
    trips = round(score / 6 + _rand(rng, 0, 2))
    return {
        "thirdDownAttempts": attempts,
        "thirdDownConversions": round(attempts * conversion_rate),
        "redZoneTrips": trips,
        "redZoneTDs": min(trips, max(0, round(trips * (0.5 + (strength - opp_strength) / 200)))),
    }


def simulate_game(
    home: Team,
    away: Team,
    rng: random.Random | None = None,
    collaborators: Collaborators | None = None,
) -> GameOutcome | None:
    """Simulate one game and write each roster's ``stats.game`` lines.

    Returns ``None`` when either side has no roster to field. Season totals are
    left untouched; the week simulator folds game lines in after capturing the
    box score.
    """
    if home is None or away is None or not home.roster or not away.roster:
        _log.warning("Invalid roster data; game cannot be simulated.")
        return None

    rng = rng or random.Random()
    collaborators = collaborators or Collaborators()

    home_groups = _position_groups(home)
    away_groups = _position_groups(away)

    home_strength = _team_strength(home, rng, collaborators)
    away_strength = _team_strength(away, rng, collaborators)
    # Defense faced by each offense.
    home_faces = _defense_strength(away_groups)
    away_faces = _defense_strength(home_groups)

    diff = (home_strength - away_strength) + HOME_ADVANTAGE
    shift = round(diff / 5)
    home_score = rng.randint(BASE_SCORE_MIN, BASE_SCORE_MAX) + shift
    away_score = rng.randint(BASE_SCORE_MIN, BASE_SCORE_MAX) - shift
    home_score = max(0, home_score + rng.randint(0, SCORE_VARIANCE))
    away_score = max(0, away_score + rng.randint(0, SCORE_VARIANCE))

    _generate_team_stats(home, home_groups, home_score, away_score, home_faces, rng, _team_modifiers(home))
    _generate_team_stats(away, away_groups, away_score, home_score, away_faces, rng, _team_modifiers(away))

    home.stats.game = _situational_stats(home_score, home_strength, away_strength, rng)
    away.stats.game = _situational_stats(away_score, away_strength, home_strength, rng)

    box_score = {"home": capture_snapshot(home), "away": capture_snapshot(away)}
    return GameOutcome(
        home_score=int(home_score),
        away_score=int(away_score),
        box_score=box_score,
        home_team_stats=dict(home.stats.game),
        away_team_stats=dict(away.stats.game),
    )

