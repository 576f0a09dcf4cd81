from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .collaborators import Collaborators
from .config import (
    AGE_CURVES,
    BASE_XP,
    BREAKOUT_BASE_CHANCE,
    DECLINE_BASE_CHANCE,
    DECLINE_PAST_CLIFF_BONUS,
    DECLINE_PER_YEAR_OVER_PEAK,
    DEFAULT_COACH_DEVELOPMENT,
    EVENT_LABELS,
    FOCUS_BONUS,
    FOCUS_PENALTY,
    LEAP_CHANCE,
    MENTAL_ATTRIBUTES,
    MENTAL_FLOOR,
    PERFORMANCE_BONUS_CAP,
    PHYSICAL_ATTRIBUTES,
    PHYSICAL_FLOOR,
    POSITION_TRAINING_WEIGHTS,
    SECOND_WIND_CHANCE,
    STAGNATION_BASE_CHANCE,
    TRAINING_FOCUS,
    TRAINING_INTENSITY,
)
from .models import DEFENSE_POSITIONS, OFFENSE_POSITIONS, DevelopmentStatus, Player, Team

if TYPE_CHECKING:
    from .league import League

_log = logging.getLogger("gridiron_sim.development")


@dataclass(slots=True)
class TrainingSettings:
    intensity: str = "NORMAL"
    focus: str = "BALANCED"

    def __post_init__(self) -> None:
        self.intensity = self.intensity.upper()
        self.focus = self.focus.upper()
        if self.intensity not in TRAINING_INTENSITY:
            raise ValueError(f"Unknown training intensity '{self.intensity}'")
        if self.focus not in TRAINING_FOCUS:
            raise ValueError(f"Unknown training focus '{self.focus}'")


@dataclass(slots=True)
class DevelopmentReport:
    xp_awarded: dict[str, int] = field(default_factory=dict)
    events: list[tuple[str, DevelopmentStatus]] = field(default_factory=list)
    regressed: list[str] = field(default_factory=list)
    injured: list[str] = field(default_factory=list)


def coaching_bonus(team: Team) -> int:
    devs = [
        coach.development if coach is not None else DEFAULT_COACH_DEVELOPMENT
        for coach in team.staff.members()
    ]
    return round((sum(devs) / len(devs) - 50) * 0.5)


def age_factor(position: str, age: int) -> float:
    peak_start, peak_end, cliff, growth = AGE_CURVES.get(position, AGE_CURVES["WR"])
    if age < 22:
        return growth
    if age < peak_start:
        return 1 + (growth - 1) * 0.6
    if age <= peak_end:
        return 1.0
    if age <= cliff:
        return 1 - (age - peak_end) / (cliff - peak_end) * 0.5
    return max(0.1, 0.5 - (age - cliff) * 0.15)


def potential_factor(player: Player) -> float:
    gap = player.potential - player.overall
    if gap > 15:
        return 1.4
    if gap > 10:
        return 1.2
    if gap > 5:
        return 1.1
    if gap <= 0:
        return 0.3
    return 1.0


def focus_modifier(position: str, focus: str) -> float:
    if focus == "OFFENSE":
        group = OFFENSE_POSITIONS
    elif focus == "DEFENSE":
        group = DEFENSE_POSITIONS
    else:
        return 1.0
    return FOCUS_BONUS if position in group else FOCUS_PENALTY


def performance_bonus(player: Player) -> int:
    game = player.stats.game
    if not game:
        return 0
    bonus = 0
    pos = player.position
    if pos == "QB":
        if game.get("passTD", 0) >= 2:
            bonus += 10
        if game.get("passTD", 0) >= 4:
            bonus += 15
        if game.get("passYd", 0) >= 300:
            bonus += 10
        if game.get("interceptions", 0) == 0 and game.get("passAtt", 0) > 15:
            bonus += 5
    elif pos == "RB":
        carries = game.get("rushAtt", 0)
        if game.get("rushYd", 0) >= 100:
            bonus += 15
        if game.get("rushTD", 0) >= 1:
            bonus += 10
        if carries > 10 and game.get("rushYd", 0) / carries >= 5:
            bonus += 5
    elif pos in ("WR", "TE"):
        if game.get("recYd", 0) >= 100:
            bonus += 15
        if game.get("recTD", 0) >= 1:
            bonus += 10
        if game.get("receptions", 0) >= 7:
            bonus += 5
    elif pos in ("DL", "LB"):
        if game.get("sacks", 0) >= 1:
            bonus += 15
        if game.get("tackles", 0) >= 8:
            bonus += 10
        if game.get("tacklesForLoss", 0) >= 2:
            bonus += 5
    elif pos in ("CB", "S"):
        if game.get("interceptions", 0) >= 1:
            bonus += 20
        if game.get("passesDefended", 0) >= 2:
            bonus += 10
    return min(bonus, PERFORMANCE_BONUS_CAP)


def weekly_xp(player: Player, team_bonus: int, settings: TrainingSettings, played: bool) -> int:
    perf = performance_bonus(player) if played else 0
    raw = (
        (BASE_XP + team_bonus + perf)
        * TRAINING_INTENSITY[settings.intensity]["xp"]
        * focus_modifier(player.position, settings.focus)
        * age_factor(player.position, player.age)
        * potential_factor(player)
    )
    return round(max(0.0, raw))


def refresh_overall(
    player: Player,
    before: dict[str, int],
    collaborators: Collaborators,
    fallback_delta: int,
) -> None:
    # Apply the rating-driven change as a delta so XP growth already banked in overall survives.
    if collaborators.recalc_overall is not None:
        delta = collaborators.recalc_overall(player.position, player.ratings) - collaborators.recalc_overall(
            player.position, before
        )
    else:
        delta = fallback_delta
    player.overall = max(0, min(99, player.overall + delta))


def apply_regression(player: Player, rng: random.Random, collaborators: Collaborators) -> bool:
    _peak_start, peak_end, cliff, _growth = AGE_CURVES.get(player.position, AGE_CURVES["WR"])
    if player.age <= peak_end:
        return False

    before = dict(player.ratings)
    past_cliff = player.age > cliff
    if past_cliff:
        chance = 0.30 + (player.age - cliff) * 0.15
    else:
        chance = 0.05 + (player.age - peak_end) * 0.06

    physical = [key for key in PHYSICAL_ATTRIBUTES if key in player.ratings]
    changed = False
    if physical and rng.random() < chance:
        key = rng.choice(physical)
        loss = rng.randint(1, 3) if past_cliff else 1
        player.ratings[key] = max(PHYSICAL_FLOOR, player.ratings[key] - loss)
        changed = True
        if past_cliff and rng.random() < 0.20:
            key = rng.choice(physical)
            player.ratings[key] = max(PHYSICAL_FLOOR, player.ratings[key] - rng.randint(1, 2))

    if past_cliff:
        mental = [key for key in MENTAL_ATTRIBUTES if key in player.ratings]
        if mental and rng.random() < 0.10 + (player.age - cliff) * 0.08:
            key = rng.choice(mental)
            player.ratings[key] = max(MENTAL_FLOOR, player.ratings[key] - 1)
            changed = True

    if changed:
        refresh_overall(player, before, collaborators, fallback_delta=-1)
    return changed


def _pick_training_attribute(player: Player, rng: random.Random) -> str:
    primary, secondary, tertiary = POSITION_TRAINING_WEIGHTS.get(
        player.position, (("awareness",), ("awareness",), ("awareness",))
    )
    roll = rng.random()
    if roll < 0.70:
        return rng.choice(primary)
    if roll < 0.90:
        return rng.choice(secondary)
    return rng.choice(tertiary)


def _boost(player: Player, key: str, amount: int) -> None:
    player.ratings[key] = min(99, player.ratings.get(key, 50) + amount)


def _announce(
    league: League,
    team: Team,
    player: Player,
    status: DevelopmentStatus,
    story: str,
    collaborators: Collaborators,
) -> None:
    label = EVENT_LABELS[status.value]
    headline = f"{label}: {player.name} ({team.abbr})"
    try:
        collaborators.add_news_item(league, headline, story, "development")
    except Exception:
        _log.exception(f"News sink rejected development item for {player.name}")
    player.season_news.append(f"Week {league.season.week}: {label} - {story}")


def _roll_events(
    league: League,
    team: Team,
    player: Player,
    rng: random.Random,
    collaborators: Collaborators,
) -> DevelopmentStatus | None:
    status = player.development_status
    if status.decay_chance and rng.random() < status.decay_chance:
        player.development_status = status = DevelopmentStatus.NORMAL

    peak_start, peak_end, cliff, _growth = AGE_CURVES.get(player.position, AGE_CURVES["WR"])
    age = player.age
    gap = player.potential - player.overall
    hc = team.staff.head_coach
    hc_dev = hc.development if hc is not None else DEFAULT_COACH_DEVELOPMENT

    if age <= 26 and gap > 0 and status is not DevelopmentStatus.BREAKOUT:
        chance = BREAKOUT_BASE_CHANCE
        if gap > 10:
            chance += 0.015
        elif gap > 5:
            chance += 0.008
        if player.stats.game:
            chance += 0.01
        if player.boom_factor > 5:
            chance += player.boom_factor / 60
        if hc_dev > 70:
            chance += 0.01
        if rng.random() < chance:
            before = dict(player.ratings)
            collaborators.add_xp(player, rng.randint(2, 4) * 1000)
            key = _pick_training_attribute(player, rng)
            _boost(player, key, rng.randint(3, 7))
            refresh_overall(player, before, collaborators, fallback_delta=rng.randint(2, 4))
            player.potential = max(player.potential, player.overall)
            player.development_status = DevelopmentStatus.BREAKOUT
            _announce(league, team, player, DevelopmentStatus.BREAKOUT,
                      f"{player.name} is taking a big step forward, now rated {player.overall}.", collaborators)
            return DevelopmentStatus.BREAKOUT

    if (
        peak_start <= age <= peak_end
        and gap > 0
        and status not in (DevelopmentStatus.BREAKOUT, DevelopmentStatus.LEAP)
        and rng.random() < LEAP_CHANCE
    ):
        before = dict(player.ratings)
        _boost(player, _pick_training_attribute(player, rng), rng.randint(2, 4))
        _boost(player, "awareness", rng.randint(1, 3))
        _boost(player, "intelligence", rng.randint(1, 2))
        collaborators.add_xp(player, rng.randint(1, 2) * 500)
        refresh_overall(player, before, collaborators, fallback_delta=1)
        player.potential = max(player.potential, player.overall)
        player.development_status = DevelopmentStatus.LEAP
        _announce(league, team, player, DevelopmentStatus.LEAP,
                  f"{player.name} has found another gear at {age}.", collaborators)
        return DevelopmentStatus.LEAP

    if (
        30 <= age <= cliff
        and player.overall >= 70
        and status not in (DevelopmentStatus.SECOND_WIND, DevelopmentStatus.DECLINING)
        and rng.random() < SECOND_WIND_CHANCE
    ):
        before = dict(player.ratings)
        _boost(player, "awareness", rng.randint(3, 6))
        _boost(player, "intelligence", rng.randint(2, 4))
        refresh_overall(player, before, collaborators, fallback_delta=1)
        player.potential = max(player.potential, player.overall)
        player.development_status = DevelopmentStatus.SECOND_WIND
        _announce(league, team, player, DevelopmentStatus.SECOND_WIND,
                  f"At {age}, {player.name} is defying the aging curve.", collaborators)
        return DevelopmentStatus.SECOND_WIND

    if (
        age <= 27
        and player.potential > player.overall + 8
        and status not in (DevelopmentStatus.STAGNATED, DevelopmentStatus.BREAKOUT)
    ):
        chance = STAGNATION_BASE_CHANCE
        if player.bust_factor > 5:
            chance += player.bust_factor / 80
        if hc_dev < 40:
            chance += 0.005
        if rng.random() < chance:
            player.potential = max(player.overall, player.potential - rng.randint(2, 5))
            player.development_status = DevelopmentStatus.STAGNATED
            _announce(league, team, player, DevelopmentStatus.STAGNATED,
                      f"{player.name}'s ceiling now looks like {player.potential}.", collaborators)
            return DevelopmentStatus.STAGNATED

    if age >= peak_end + 1 and status is not DevelopmentStatus.DECLINING:
        chance = DECLINE_BASE_CHANCE + (age - peak_end) * DECLINE_PER_YEAR_OVER_PEAK
        if age > cliff:
            chance += DECLINE_PAST_CLIFF_BONUS
        if rng.random() < chance:
            player.development_status = DevelopmentStatus.DECLINING
            _announce(league, team, player, DevelopmentStatus.DECLINING,
                      f"Scouts note {player.name} has lost a step at {age}.", collaborators)
            return DevelopmentStatus.DECLINING

    return None


def _training_injury(
    player: Player,
    settings: TrainingSettings,
    rng: random.Random,
    collaborators: Collaborators,
) -> bool:
    if settings.intensity != "HEAVY":
        return False
    if collaborators.generate_injury is None or collaborators.apply_injury is None:
        return False
    if rng.random() >= TRAINING_INTENSITY["HEAVY"]["injury_chance"]:
        return False
    injury = collaborators.generate_injury(player, rng)
    if injury is None:
        return False
    collaborators.apply_injury(player, injury)
    return True


def run_weekly_development(
    league: League,
    collaborators: Collaborators | None = None,
    rng: random.Random | None = None,
    played_team_ids: set[int] | None = None,
) -> DevelopmentReport:
    """Award weekly training XP, roll regression and career events for every player."""
    collaborators = collaborators or Collaborators()
    rng = rng or random.Random()
    settings = league.training
    report = DevelopmentReport()

    for team in league.teams:
        team_bonus = coaching_bonus(team)
        played = played_team_ids is None or team.team_id in played_team_ids
        for player in list(team.roster):
            amount = weekly_xp(player, team_bonus, settings, played)
            if amount > 0:
                collaborators.add_xp(player, amount)
                report.xp_awarded[player.player_id] = amount
            if apply_regression(player, rng, collaborators):
                report.regressed.append(player.player_id)
            try:
                if _training_injury(player, settings, rng, collaborators):
                    report.injured.append(player.player_id)
            except Exception:
                _log.exception(f"Training injury hook failed for {player.name}")
            event = _roll_events(league, team, player, rng, collaborators)
            if event is not None:
                report.events.append((player.player_id, event))
    return report
