from __future__ import annotations

from typing import Iterable

from .errors import ScheduleError
from .models import Pairing, Schedule, Team, Week


def _single_round_weeks(team_ids: list[int]) -> list[Week]:
    """Build one full round-robin split into weeks."""
    if len(team_ids) < 2:
        return []

    # Circle method: each team plays at most once per week.
    rotating: list[int | None] = list(team_ids)
    if len(rotating) % 2 == 1:
        rotating.append(None)

    rounds = len(rotating) - 1
    half = len(rotating) // 2
    weeks: list[Week] = []

    for round_idx in range(rounds):
        games: list[Pairing] = []
        byes: list[int] = []
        for idx in range(half):
            home = rotating[idx]
            away = rotating[-(idx + 1)]
            if home is None or away is None:
                byes.append(away if home is None else home)
                continue
            # Alternate site orientation by round to avoid long home or away streaks.
            if round_idx % 2 == 1:
                home, away = away, home
            games.append(Pairing(home=home, away=away))
        if byes:
            games.append(Pairing(bye=tuple(byes)))
        weeks.append(Week(games=games))

        rotating = [rotating[0], rotating[-1], *rotating[1:-1]]

    return weeks


def build_season_schedule(teams: Iterable[Team], games_per_matchup: int = 2) -> Schedule:
    """Round-robin weeks whose pairings hold positions in ``teams``, not ``team_id`` values."""
    teams = list(teams)
    team_ids = [team.team_id for team in teams]
    if len(set(team_ids)) != len(team_ids):
        raise ScheduleError("Duplicate team ids cannot be scheduled.")
    if len(teams) < 2 or games_per_matchup < 1:
        return Schedule()

    base_weeks = _single_round_weeks(list(range(len(teams))))
    weeks: list[Week] = []
    for matchup_index in range(games_per_matchup):
        flip = matchup_index % 2 == 1
        for week in base_weeks:
            games = [
                Pairing(home=p.away, away=p.home) if flip and not p.is_bye else p
                for p in week.games
            ]
            weeks.append(Week(games=games))
    return Schedule(weeks=weeks)

