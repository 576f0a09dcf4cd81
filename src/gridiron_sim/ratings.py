from __future__ import annotations

import random

from .config import (
    MAX_INJURY_IMPACT,
    MIN_EFFECTIVE_RATING,
    OVR_WEIGHTS,
    XP_PER_OVERALL_POINT,
)
from .models import Player


def can_play(player: Player) -> bool:
    return not any(injury.weeks_out > 0 for injury in player.injuries)


def effective_rating(player: Player) -> int:
    """Overall rating after the combined impact of active injuries.

    Impacts are summed and capped at 85%, and the result never drops below 40.
    """
    active = [injury for injury in player.injuries if injury.weeks_out > 0]
    if not active:
        return int(player.overall)
    impact = min(sum(max(0.0, injury.impact) for injury in active), MAX_INJURY_IMPACT)
    return max(MIN_EFFECTIVE_RATING, round(player.overall * (1.0 - impact)))


def calculate_overall(position: str, ratings: dict[str, int]) -> int:
    weights = OVR_WEIGHTS.get(position)
    if not weights:
        return 50
    total = 0.0
    weight_sum = 0.0
    for key, weight in weights.items():
        total += float(ratings.get(key, 50)) * weight
        weight_sum += weight
    if weight_sum <= 0:
        return 50
    return max(0, min(99, round(total / weight_sum)))


def game_performance(rating: float, tenure_years: float, rng: random.Random) -> float:
    # Longer tenure narrows the game-to-game swing, up to a 25% reduction.
    variance_reduction = min(max(0.0, tenure_years) * 0.05, 0.25)
    return rating + rng.random() * 20.0 * (1.0 - variance_reduction) - 10.0


def add_xp(player: Player, amount: int) -> None:
    if amount <= 0:
        return
    player.xp += int(amount)
    while player.xp >= XP_PER_OVERALL_POINT:
        player.xp -= XP_PER_OVERALL_POINT
        if player.overall < player.potential:
            player.overall = min(99, player.overall + 1)
